"""
incident.io catalog lookups.

Resolves a catalog entry to its "object key" attribute (e.g. 'PIN-3'), the
human-readable key of the matching Jira Assets object.
"""

import logging

import requests

from .models import CatalogLookup
from .session import path_segment

logger = logging.getLogger(__name__)

OBJECT_KEY_ATTRIBUTE = "object key"


def _as_dict(value):
    return value if isinstance(value, dict) else {}


def find_object_key(catalog_response):
    """
    Return the literal value of the entry's "object key" attribute, or None.

    The attribute id is looked up by name (case-insensitive) in the catalog
    type schema, then read from the entry's attribute values.
    """
    catalog_type = _as_dict(catalog_response.get("catalog_type"))
    attributes = _as_dict(catalog_type.get("schema")).get("attributes")
    if not isinstance(attributes, list):
        return None
    attribute_id = None
    for attribute in attributes:
        if isinstance(attribute, dict) and str(attribute.get("name", "")).lower() == OBJECT_KEY_ATTRIBUTE:
            attribute_id = attribute.get("id")
            break
    if not attribute_id or not isinstance(attribute_id, str):
        return None
    attribute_values = _as_dict(_as_dict(catalog_response.get("catalog_entry")).get("attribute_values"))
    literal = _as_dict(_as_dict(attribute_values.get(attribute_id)).get("value")).get("literal")
    if isinstance(literal, str) and literal:
        return literal
    return None


class CatalogResolver:
    """Fetches catalog entries from the incident.io API. One request per lookup, no caching."""

    def __init__(self, settings, session: requests.Session):
        self.base_url = settings.incident_api_base_url
        self.timeout = settings.request_timeout
        self.session = session
        self.headers = {
            "Authorization": f"Bearer {settings.incident_api_token}",
            "Content-Type": "application/json",
        }

    def resolve(self, catalog_entry_id: str) -> CatalogLookup:
        """Look up the object key of a catalog entry. Failures are returned, not raised."""
        segment = path_segment(catalog_entry_id)
        if segment is None:
            return CatalogLookup(catalog_entry_id, error=f"invalid catalog entry id {catalog_entry_id!r}")
        url = f"{self.base_url}/v2/catalog_entries/{segment}"
        try:
            response = self.session.get(url, headers=self.headers, timeout=self.timeout)
        except requests.RequestException as e:
            logger.error(f"Failed to fetch catalog entry {catalog_entry_id}: {e}")
            return CatalogLookup(catalog_entry_id, error=f"request failed: {e}")

        if not 200 <= response.status_code < 300:
            logger.error(f"Catalog API request for {catalog_entry_id} failed with status {response.status_code}: {response.text}")
            return CatalogLookup(catalog_entry_id, error=f"catalog API returned status {response.status_code}")

        try:
            catalog_response = response.json()
        except ValueError as e:
            logger.error(f"Failed to decode catalog response for {catalog_entry_id}: {e}")
            return CatalogLookup(catalog_entry_id, error=f"invalid JSON in catalog response: {e}")
        if not isinstance(catalog_response, dict):
            return CatalogLookup(catalog_entry_id, error="unexpected catalog response shape")

        object_key = find_object_key(catalog_response)
        if object_key is None:
            logger.warning(f"No object key found for catalog entry {catalog_entry_id}")
            return CatalogLookup(catalog_entry_id, error=f"no object key found for catalog entry {catalog_entry_id}")

        logger.info(f"Found object key '{object_key}' for catalog entry {catalog_entry_id}")
        return CatalogLookup(catalog_entry_id, object_key=object_key)
