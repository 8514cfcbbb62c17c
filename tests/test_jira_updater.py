from unittest.mock import Mock

import pytest
import requests

from conftest import IMPACTED_FIELD_ID, make_response
from incident_jira_sync.jira_updater import JiraFieldUpdater, build_update_payload
from incident_jira_sync.references import format_component_value


def _updater(settings, *responses):
    session = Mock()
    session.put.side_effect = list(responses)
    return JiraFieldUpdater(settings, session), session


def _payload_values(call):
    return call.kwargs["json"]["fields"][IMPACTED_FIELD_ID]


def test_build_update_payload_replaces_whole_field():
    values = [format_component_value("ws", "3"), format_component_value("ws", "4")]
    assert build_update_payload("customfield_1", values) == {
        "fields": {"customfield_1": [{"id": "ws:3", "objectId": "3"}, {"id": "ws:4", "objectId": "4"}]}
    }


@pytest.mark.parametrize("status_code", [200, 204])
def test_accepted_status_codes(settings, status_code):
    updater, session = _updater(settings, make_response(status_code))
    result = updater.update("PIN-7", IMPACTED_FIELD_ID, [format_component_value("ws", "3")])
    assert result.ok
    assert result.attempts == 1
    args, kwargs = session.put.call_args
    assert args[0] == "https://example.atlassian.net/rest/api/3/issue/PIN-7"
    assert kwargs["auth"].username == "bot@example.com"
    assert kwargs["auth"].password == "jira-token"


def test_falls_back_to_first_value(settings):
    values = [format_component_value("ws", "3"), format_component_value("ws", "4")]
    updater, session = _updater(
        settings,
        make_response(400, {"errors": {IMPACTED_FIELD_ID: "single value only"}}),
        make_response(204),
    )
    result = updater.update("PIN-7", IMPACTED_FIELD_ID, values)

    assert result.ok
    assert result.attempts == 2
    assert result.values == values[:1]
    assert session.put.call_count == 2
    first, second = session.put.call_args_list
    assert _payload_values(first) == [{"id": "ws:3", "objectId": "3"}, {"id": "ws:4", "objectId": "4"}]
    assert _payload_values(second) == [{"id": "ws:3", "objectId": "3"}]


def test_fallback_failure_is_final(settings):
    values = [format_component_value("ws", "3"), format_component_value("ws", "4")]
    updater, session = _updater(settings, make_response(400, {"e": 1}), make_response(403, {"e": 2}))
    result = updater.update("PIN-7", IMPACTED_FIELD_ID, values)
    assert not result.ok
    assert result.status_code == 403
    assert result.body == {"e": 2}
    assert session.put.call_count == 2


def test_single_value_failure_is_not_retried(settings):
    updater, session = _updater(settings, make_response(400, None, text="Bad Request"))
    result = updater.update("PIN-7", IMPACTED_FIELD_ID, [format_component_value("ws", "3")])
    assert not result.ok
    assert result.status_code == 400
    assert result.body == "Bad Request"
    assert result.attempts == 1
    assert session.put.call_count == 1


def test_transport_error_is_a_failure(settings):
    updater, session = _updater(settings, requests.Timeout("timed out"))
    result = updater.update("PIN-7", IMPACTED_FIELD_ID, [format_component_value("ws", "3")])
    assert not result.ok
    assert result.status_code == 0
    assert "timed out" in result.body


def test_empty_values_rejected(settings):
    updater, session = _updater(settings)
    with pytest.raises(ValueError):
        updater.update("PIN-7", IMPACTED_FIELD_ID, [])
    session.put.assert_not_called()


def test_issue_key_is_quoted_as_one_path_segment(settings):
    updater, session = _updater(settings, make_response(204))
    updater.update("PIN-7/../../../rest/api/3/user", IMPACTED_FIELD_ID, [format_component_value("ws", "3")])
    assert session.put.call_args[0][0] == (
        "https://example.atlassian.net/rest/api/3/issue/PIN-7%2F..%2F..%2F..%2Frest%2Fapi%2F3%2Fuser"
    )


def test_dot_segment_issue_key_is_not_written(settings):
    updater, session = _updater(settings)
    result = updater.update("..", IMPACTED_FIELD_ID, [format_component_value("ws", "3")])
    assert not result.ok
    session.put.assert_not_called()
