"""
Command-line entry point: load configuration, check Jira, serve the webhook listener.
"""

import argparse
import logging
import sys

import requests
import uvicorn
from jira import JIRA, JIRAError

from .config import load_settings
from .errors import ConfigError
from .log import setup_logging
from .webhook import create_app

logger = logging.getLogger(__name__)


def validate_jira_fields(settings, jira_client=None):
    """
    Check that every configured Jira field id exists.

    Returns the list of problems found; an empty list means all fields exist.
    """
    try:
        if jira_client is None:
            logger.info("Connecting to Jira...")
            jira_client = JIRA(
                server=settings.jira_base_url,
                basic_auth=(settings.jira_username, settings.jira_api_token),
                options={"verify": settings.verify_tls},
                timeout=settings.request_timeout,
            )
        field_ids = {f["id"] for f in jira_client.fields()}
    except JIRAError as e:
        return [f"Error validating Jira fields (status {e.status_code}): {e.text}"]
    except requests.RequestException as e:
        return [f"Error connecting to Jira: {e}"]

    problems = []
    for field_mapping in settings.field_mappings:
        if field_mapping.jira_field_id not in field_ids:
            problems.append(f"Jira custom field '{field_mapping.jira_field_id}' ({field_mapping.key}) not found.")
    if not problems:
        logger.info("Jira custom fields validated successfully.")
    return problems


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Sync incident.io component fields to Jira.")
    parser.add_argument("--config", default=None, help="YAML config file (default: $SYNC_CONFIG_FILE or sync_config.yaml)")
    parser.add_argument("--host", default=None, help="Listen address (overrides HOST)")
    parser.add_argument("--port", type=int, default=None, help="Listen port (overrides PORT)")
    parser.add_argument("--skip-jira-check", action="store_true", help="Do not verify Jira field ids at startup")
    return parser.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)
    setup_logging(log_file=None)
    try:
        settings = load_settings(config_file=args.config)
    except ConfigError as e:
        for problem in e.problems:
            logger.error(f"Configuration error: {problem}")
        sys.exit(1)
    setup_logging(settings.log_level, settings.log_file)

    if settings.validate_jira_fields and not args.skip_jira_check:
        problems = validate_jira_fields(settings)
        if problems:
            for problem in problems:
                logger.error(problem)
            sys.exit(1)

    host = args.host or settings.host
    port = args.port or settings.port
    logger.info(f"Starting incident.io to Jira webhook listener on {host}:{port}...")
    uvicorn.run(create_app(settings), host=host, port=port, log_config=None)


if __name__ == "__main__":
    main()
