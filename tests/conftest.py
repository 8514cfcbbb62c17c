import os
import sys
from unittest.mock import Mock

import pytest

# Add project root to sys.path so tests run without installing the package.
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from incident_jira_sync.config import Settings
from incident_jira_sync.models import FieldMapping

WORKSPACE_ID = "ws-1234"
IMPACTED_FIELD_ID = "customfield_10100"
RESPONSIBLE_FIELD_ID = "customfield_10200"


@pytest.fixture
def settings():
    return Settings(
        jira_base_url="https://example.atlassian.net",
        jira_username="bot@example.com",
        jira_api_token="jira-token",
        incident_api_token="incident-token",
        jira_workspace_id=WORKSPACE_ID,
        field_mappings=(
            FieldMapping("impacted_components", "Impacted component", IMPACTED_FIELD_ID),
            FieldMapping("responsible_components", "Responsible components", RESPONSIBLE_FIELD_ID),
        ),
        incident_api_base_url="https://api.incident.io",
        log_file="",
    )


def make_response(status_code=200, json_body=None, text=""):
    response = Mock()
    response.status_code = status_code
    response.text = text
    if json_body is None:
        response.json.side_effect = ValueError("no json")
    else:
        response.json.return_value = json_body
    return response


def catalog_body(object_key, attribute_name="Object Key", attribute_id="attr_01"):
    """A catalog entry response whose object key attribute holds `object_key`."""
    return {
        "catalog_entry": {
            "id": "entry",
            "name": "Payments API",
            "attribute_values": {
                attribute_id: {"value": {"literal": object_key}},
                "attr_other": {"value": {"literal": "ignored"}},
            },
        },
        "catalog_type": {
            "schema": {
                "attributes": [
                    {"id": "attr_other", "name": "Owner"},
                    {"id": attribute_id, "name": attribute_name},
                ]
            }
        },
    }


def field_entry(name, catalog_ids):
    return {
        "custom_field": {"id": f"cf_{name}", "name": name, "description": "", "field_type": "multi_select"},
        "values": [
            {"value_catalog_entry": {"id": catalog_id, "name": f"Component {catalog_id}", "external_id": ""}}
            for catalog_id in catalog_ids
        ],
    }


def make_payload(event_type="incident.custom_field_updated", issue_name="PIN-7", entries=None, key="incident"):
    incident = {
        "id": "01INC",
        "name": "Checkout is down",
        "external_issue_reference": {
            "provider": "jira",
            "issue_name": issue_name,
            "issue_permalink": f"https://example.atlassian.net/browse/{issue_name}",
        },
        "custom_field_entries": entries or [],
    }
    return {"event_type": event_type, key: incident}
