"""
Configuration loading.

Settings are read once at startup from an optional YAML file and the process
environment (environment wins), validated, and frozen. Secrets are only ever
taken from the environment.
"""

import logging
import os
from dataclasses import dataclass
from typing import Mapping, Optional, Tuple

import yaml

from .errors import ConfigError
from .models import FieldMapping

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = "sync_config.yaml"
DEFAULT_INCIDENT_API_BASE_URL = "https://api.incident.io"
DEFAULT_LOG_FILE = "incident-jira-sync.log"

IMPACTED_COMPONENTS = "impacted_components"
RESPONSIBLE_COMPONENTS = "responsible_components"

# mapping key -> (env var for the incident.io field name, env var for the Jira field id, default name)
FIELD_MAPPING_ENV = {
    IMPACTED_COMPONENTS: ("IMPACTED_COMPONENT_FIELD_NAME", "IMPACTED_COMPONENT_JIRA_FIELD_ID", "Impacted component"),
    RESPONSIBLE_COMPONENTS: ("RESPONSIBLE_COMPONENT_FIELD_NAME", "RESPONSIBLE_COMPONENT_JIRA_FIELD_ID", "Responsible components"),
}

_TRUE_VALUES = ("1", "true", "yes", "on")


@dataclass(frozen=True)
class Settings:
    jira_base_url: str
    jira_username: str
    jira_api_token: str
    incident_api_token: str
    jira_workspace_id: str
    field_mappings: Tuple[FieldMapping, ...]
    incident_api_base_url: str = DEFAULT_INCIDENT_API_BASE_URL
    webhook_secret: str = ""
    host: str = "0.0.0.0"
    port: int = 5000
    request_timeout: float = 10.0
    verify_tls: bool = True
    log_level: str = "INFO"
    log_file: str = DEFAULT_LOG_FILE
    validate_jira_fields: bool = True


###############################################################################
# YAML FILE
###############################################################################
def load_config_file(config_file):
    """Load the optional YAML configuration file. A missing file yields an empty config."""
    if not config_file or not os.path.exists(config_file):
        return {}
    logger.info(f"Loading configuration from {config_file} ...")
    try:
        with open(config_file, "r") as file:
            config = yaml.safe_load(file) or {}
    except yaml.YAMLError as e:
        raise ConfigError([f"YAML parsing error in '{config_file}': {e}"])
    except OSError as e:
        raise ConfigError([f"Error reading configuration file '{config_file}': {e}"])
    if not isinstance(config, dict):
        raise ConfigError([f"Configuration file '{config_file}' must contain a mapping"])
    return config


###############################################################################
# HELPERS
###############################################################################
def _pick(environ, env_key, config, config_key, default=""):
    value = environ.get(env_key) if env_key else None
    if value:
        return value
    value = config.get(config_key) if config_key else None
    if value is not None and value != "":
        return value
    return default


def _as_bool(value):
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in _TRUE_VALUES


def _load_field_mappings(environ, config, problems):
    configured = config.get("field_mappings") or {}
    if not isinstance(configured, dict):
        problems.append("field_mappings must be a mapping of mapping key to settings")
        configured = {}
    mappings = []
    for key, (name_env, id_env, default_name) in FIELD_MAPPING_ENV.items():
        section = configured.get(key) or {}
        if not isinstance(section, dict):
            problems.append(f"field_mappings.{key} must be a mapping")
            section = {}
        name = str(_pick(environ, name_env, section, "incident_field_name", default_name)).strip()
        field_id = str(_pick(environ, id_env, section, "jira_field_id")).strip()
        if not field_id:
            problems.append(f"{id_env} is required")
        if not name:
            problems.append(f"{name_env} must not be empty")
        mappings.append(FieldMapping(key=key, incident_field_name=name, jira_field_id=field_id))
    return tuple(mappings)


###############################################################################
# SETTINGS
###############################################################################
def load_settings(environ: Optional[Mapping[str, str]] = None, config_file: Optional[str] = None) -> Settings:
    """
    Build the immutable Settings from the environment and an optional YAML file.

    Raises ConfigError listing every missing or invalid value.
    """
    environ = os.environ if environ is None else environ
    if config_file is None:
        config_file = environ.get("SYNC_CONFIG_FILE", DEFAULT_CONFIG_FILE)
    config = load_config_file(config_file)
    problems = []

    required = {
        "jira_base_url": _pick(environ, "JIRA_BASE_URL", config, "jira_base_url"),
        "jira_username": environ.get("JIRA_USERNAME", ""),
        "jira_api_token": environ.get("JIRA_API_TOKEN", ""),
        "incident_api_token": environ.get("INCIDENT_API_TOKEN", ""),
        "jira_workspace_id": _pick(environ, "JIRA_WORKSPACE_ID", config, "jira_workspace_id"),
    }
    for name, value in required.items():
        if not str(value).strip():
            problems.append(f"{name.upper()} is required")

    field_mappings = _load_field_mappings(environ, config, problems)

    port = _pick(environ, "PORT", config, "port", 5000)
    try:
        port = int(port)
    except (TypeError, ValueError):
        problems.append(f"PORT must be an integer, got {port!r}")
        port = 0

    request_timeout = _pick(environ, "REQUEST_TIMEOUT", config, "request_timeout", 10.0)
    try:
        request_timeout = float(request_timeout)
        if request_timeout <= 0:
            raise ValueError(request_timeout)
    except (TypeError, ValueError):
        problems.append(f"REQUEST_TIMEOUT must be a positive number, got {request_timeout!r}")
        request_timeout = 0.0

    if "INSECURE_SKIP_TLS_VERIFY" in environ:
        verify_tls = not _as_bool(environ["INSECURE_SKIP_TLS_VERIFY"])
    else:
        verify_tls = _as_bool(config.get("verify_tls", True))

    if problems:
        raise ConfigError(problems)

    return Settings(
        jira_base_url=str(required["jira_base_url"]).strip().rstrip("/"),
        jira_username=required["jira_username"].strip(),
        jira_api_token=required["jira_api_token"].strip(),
        incident_api_token=required["incident_api_token"].strip(),
        jira_workspace_id=str(required["jira_workspace_id"]).strip(),
        field_mappings=field_mappings,
        incident_api_base_url=str(
            _pick(environ, "INCIDENT_API_BASE_URL", config, "incident_api_base_url", DEFAULT_INCIDENT_API_BASE_URL)
        ).strip().rstrip("/"),
        webhook_secret=environ.get("WEBHOOK_SECRET", ""),
        host=str(_pick(environ, "HOST", config, "host", "0.0.0.0")),
        port=port,
        request_timeout=request_timeout,
        verify_tls=verify_tls,
        log_level=str(_pick(environ, "LOG_LEVEL", config, "log_level", "INFO")).upper(),
        log_file=str(environ.get("LOG_FILE", config.get("log_file", DEFAULT_LOG_FILE)) or ""),
        validate_jira_fields=_as_bool(config.get("validate_jira_fields", True)),
    )
