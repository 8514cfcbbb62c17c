"""
Jira custom field writes.

A field is replaced wholesale with the given Assets object references. Jira
rejects multiple values on single-select object fields, so a failed
multi-value write is retried once with only the first value.
"""

import json
import logging
from typing import Sequence

import requests
from requests.auth import HTTPBasicAuth

from .models import TargetFieldValue, UpdateResult
from .session import path_segment

logger = logging.getLogger(__name__)

# 200 OK / 204 No Content
ACCEPTED_STATUS_CODES = (200, 204)


def build_update_payload(field_id, values):
    """Request body setting `field_id` to the full list of values."""
    return {"fields": {field_id: [value.to_payload() for value in values]}}


def _response_body(response):
    try:
        return response.json()
    except ValueError:
        return response.text


class JiraFieldUpdater:
    def __init__(self, settings, session: requests.Session):
        self.base_url = settings.jira_base_url
        self.timeout = settings.request_timeout
        self.session = session
        self.auth = HTTPBasicAuth(settings.jira_username, settings.jira_api_token)

    def put_field(self, issue_key: str, field_id: str, values: Sequence[TargetFieldValue]) -> UpdateResult:
        """Issue a single PUT setting the field. Never raises for HTTP or transport errors."""
        payload = build_update_payload(field_id, values)
        segment = path_segment(issue_key)
        if segment is None:
            logger.error(f"Refusing to update invalid Jira issue key {issue_key!r}")
            return UpdateResult(ok=False, status_code=0, body=f"invalid issue key {issue_key!r}", values=list(values))
        url = f"{self.base_url}/rest/api/3/issue/{segment}"
        logger.info(f"Updating Jira {issue_key} with payload: {json.dumps(payload)}")
        try:
            response = self.session.put(
                url,
                json=payload,
                auth=self.auth,
                headers={"Content-Type": "application/json"},
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.error(f"Failed to update Jira field {field_id} on {issue_key}: {e}")
            return UpdateResult(ok=False, status_code=0, body=str(e), values=list(values))

        if response.status_code not in ACCEPTED_STATUS_CODES:
            body = _response_body(response)
            logger.error(f"Jira API error updating {field_id} on {issue_key} (status: {response.status_code}): {body}")
            return UpdateResult(ok=False, status_code=response.status_code, body=body, values=list(values))

        logger.info(f"Successfully updated {field_id} in {issue_key} (status: {response.status_code})")
        return UpdateResult(ok=True, status_code=response.status_code, values=list(values))

    def update(self, issue_key: str, field_id: str, values: Sequence[TargetFieldValue]) -> UpdateResult:
        """
        Replace the field with `values`, falling back to the first value alone.

        The fallback is only attempted when more than one value was sent; its
        result is final. `attempts` on the result counts the PUTs issued.
        """
        values = list(values)
        if not values:
            raise ValueError(f"No values to write to {field_id} on {issue_key}")

        result = self.put_field(issue_key, field_id, values)
        if result.ok or len(values) == 1:
            return result

        logger.warning(f"Multiple values failed for {field_id} on {issue_key}, trying with single value: {values[0].to_payload()}")
        retry = self.put_field(issue_key, field_id, values[:1])
        return UpdateResult(ok=retry.ok, status_code=retry.status_code, body=retry.body, values=retry.values, attempts=2)
