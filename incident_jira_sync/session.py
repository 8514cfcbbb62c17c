"""Shared HTTP session for the incident.io and Jira REST APIs."""

import logging

import requests
import urllib3

logger = logging.getLogger(__name__)


def create_session(settings):
    """
    Build the requests.Session shared by every outbound call.

    Certificates are verified unless INSECURE_SKIP_TLS_VERIFY is set.
    """
    session = requests.Session()
    session.headers.update({"Accept": "application/json"})
    session.verify = settings.verify_tls
    if not settings.verify_tls:
        logger.warning("TLS certificate verification is DISABLED (INSECURE_SKIP_TLS_VERIFY).")
        urllib3.disable_warnings(urllib3.exceptions.InsecureRequestWarning)
    return session


def path_segment(value):
    """
    Quote `value` as a single URL path segment.

    Returns None for values that cannot address a resource ('', '.', '..').
    """
    if not isinstance(value, str) or value in ("", ".", ".."):
        return None
    return requests.utils.quote(value, safe="")
