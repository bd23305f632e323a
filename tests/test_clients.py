"""Tests for the Jira and Tempo clients with a mocked requests session."""

from datetime import date
from unittest.mock import MagicMock

import pytest
import requests

from jirareport.errors import ApiError, DecodeError, ResponseError, TransportError
from jirareport.jira_client import JiraClient
from jirareport.tempo_client import TempoClient

from conftest import make_issue, make_worklog


def _response(status_code=200, payload=None, text=""):
    response = MagicMock()
    response.status_code = status_code
    response.text = text
    response.content = b"" if payload is None else b"{}"
    response.json.return_value = payload
    return response


@pytest.fixture
def session():
    return MagicMock(spec=requests.Session)


class TestJiraClient:
    """Tests for jirareport/jira_client.py."""

    def test_uses_basic_auth(self, session):
        JiraClient("https://acme.atlassian.net/", "dev@acme.test", "token", session=session)
        assert session.auth == ("dev@acme.test", "token")

    def test_fetch_issue(self, session):
        session.request.return_value = _response(
            payload={"id": "10001", "key": "KEY-1", "fields": {"status": {"name": "In Progress"}}}
        )
        client = JiraClient("https://acme.atlassian.net", "u", "t", session=session)

        issue = client.fetch_issue("KEY-1")

        assert issue.status_name == "In Progress"
        method, url = session.request.call_args[0]
        assert method == "GET"
        assert url == "https://acme.atlassian.net/rest/api/3/issue/KEY-1"

    def test_transition_issue_accepts_204(self, session):
        session.request.return_value = _response(status_code=204)
        client = JiraClient("https://acme.atlassian.net", "u", "t", session=session)

        assert client.transition_issue("KEY-1", "31") is None
        assert session.request.call_args[1]["json"] == {"transition": {"id": "31"}}

    def test_error_status_raises_response_error(self, session):
        session.request.return_value = _response(status_code=400, text="bad transition")
        client = JiraClient("https://acme.atlassian.net", "u", "t", session=session)

        with pytest.raises(ResponseError) as excinfo:
            client.transition_issue("KEY-1", "99")
        assert excinfo.value.status_code == 400
        assert not excinfo.value.is_server_error

    def test_connection_failure_raises_transport_error(self, session):
        session.request.side_effect = requests.ConnectionError("refused")
        client = JiraClient("https://acme.atlassian.net", "u", "t", session=session)

        with pytest.raises(TransportError):
            client.fetch_current_user()

    def test_bad_payload_raises_decode_error(self, session):
        session.request.return_value = _response(payload={"displayName": "no account id"})
        client = JiraClient("https://acme.atlassian.net", "u", "t", session=session)

        with pytest.raises(DecodeError):
            client.fetch_current_user()

    def test_search_returns_issues(self, session):
        session.request.return_value = _response(
            payload={"issues": [{"id": "1", "key": "KEY-1"}, {"id": "2", "key": "KEY-2"}]}
        )
        client = JiraClient("https://acme.atlassian.net", "u", "t", session=session)

        issues = client.fetch_in_progress_tasks("dev@acme.test")

        assert [i.key for i in issues] == ["KEY-1", "KEY-2"]
        assert "In Progress" in session.request.call_args[1]["json"]["jql"]

    def test_browse_url(self):
        client = JiraClient("https://acme.atlassian.net/", "u", "t", session=MagicMock())
        assert client.browse_url("KEY-1") == "https://acme.atlassian.net/browse/KEY-1"


class TestTempoClient:
    """Tests for jirareport/tempo_client.py."""

    def test_bearer_header(self, session):
        session.request.return_value = _response(payload={"results": []})
        TempoClient("tempo-token", session=session).fetch_worklogs("acc-1", "2024-01-01", "2024-01-15")

        headers = session.request.call_args[1]["headers"]
        assert headers["Authorization"] == "Bearer tempo-token"

    def test_recent_window(self, session):
        session.request.return_value = _response(
            payload={"results": [{"tempoWorklogId": 1, "issue": {"key": "KEY-1"}, "timeSpentSeconds": 60}]}
        )
        client = TempoClient("t", session=session)

        worklogs = client.fetch_recent_worklogs("acc-1", today=date(2024, 1, 15))

        body = session.request.call_args[1]["json"]
        assert body["from"] == "2024-01-05"
        assert body["to"] == "2024-01-15"
        assert body["authorIds"] == ["acc-1"]
        assert worklogs[0].issue.key == "KEY-1"

    def test_create_worklog(self, session):
        session.request.return_value = _response(
            status_code=201,
            payload={"tempoWorklogId": 42, "timeSpentSeconds": 9000, "startDate": "2024-01-15"},
        )
        client = TempoClient("t", session=session)

        created = client.create_worklog(10001, 9000, "2024-01-15", "pairing", "acc-1")

        assert created.tempo_worklog_id == 42
        assert session.request.call_args[1]["json"]["issueId"] == 10001
        assert session.request.call_args[1]["json"]["authorAccountId"] == "acc-1"

    def test_invalid_request_never_sent(self, session):
        client = TempoClient("t", session=session)

        with pytest.raises(ApiError):
            client.create_worklog(10001, 0, "2024-01-15", "", "acc-1")
        session.request.assert_not_called()

    def test_server_error(self, session):
        session.request.return_value = _response(status_code=503, text="down")
        with pytest.raises(ResponseError) as excinfo:
            TempoClient("t", session=session).fetch_worklogs("acc-1", "2024-01-01", "2024-01-02")
        assert excinfo.value.is_server_error

    def test_enrich_fills_keys_from_jira(self, session):
        session.request.return_value = _response(
            payload={
                "results": [
                    {"tempoWorklogId": 1, "issue": {"self": "https://api.tempo.io/4/issues/10001", "id": 10001},
                     "timeSpentSeconds": 3600, "startDate": "2024-01-15"},
                    {"tempoWorklogId": 2, "issue": {"self": "https://api.tempo.io/4/issues/10001", "id": 10001},
                     "timeSpentSeconds": 1800, "startDate": "2024-01-14"},
                    {"tempoWorklogId": 3, "issue": {"self": "https://api.tempo.io/4/issues/10002", "id": 10002},
                     "timeSpentSeconds": 900, "startDate": "2024-01-14"},
                ]
            }
        )
        client = TempoClient("t", session=session)
        jira = MagicMock(spec=JiraClient)
        jira.fetch_issue.side_effect = lambda key: {
            "10001": make_issue("KEY-1", summary="Fix the thing"),
            "10002": make_issue("KEY-2", issue_id="10002", summary="Write the docs"),
        }[key]

        raw = client.fetch_worklogs("acc-1", "2024-01-05", "2024-01-15")
        enriched = client.enrich_worklogs(raw, jira)

        assert [log.issue.key for log in enriched] == ["KEY-1", "KEY-1", "KEY-2"]
        assert enriched[2].issue.summary == "Write the docs"
        assert enriched[0].issue.id == 10001
        assert [c.args for c in jira.fetch_issue.call_args_list] == [("10001",), ("10002",)]
        # Input is left as Tempo returned it
        assert raw[0].issue.key == ""

    def test_enrich_skips_worklogs_without_issue_id(self):
        jira = MagicMock(spec=JiraClient)
        log = make_worklog("KEY-9", issue_id=0)

        assert TempoClient("t").enrich_worklogs([log], jira) == [log]
        jira.fetch_issue.assert_not_called()

    def test_enrich_propagates_jira_errors(self):
        jira = MagicMock(spec=JiraClient)
        jira.fetch_issue.side_effect = TransportError("offline", "jira")

        with pytest.raises(TransportError):
            TempoClient("t").enrich_worklogs([make_worklog()], jira)
