"""Unit tests for GitHub adapter (mocked API)."""

from unittest.mock import Mock, patch

import pytest
import requests

from retrigger.adapters.base import GitPlatformError
from retrigger.adapters.github import GitHubAdapter
from retrigger.models import MergeableState, PullRequest, RunStatus, WorkflowRun


@pytest.fixture
def adapter() -> GitHubAdapter:
    return GitHubAdapter(token="test-token", api_url="https://api.github.com")


def _response(status_code: int, data=None, text: str = "") -> Mock:
    resp = Mock()
    resp.status_code = status_code
    resp.json.return_value = data
    resp.text = text
    resp.reason = ""
    return resp


def test_graphql_url_defaults_to_api_url(adapter: GitHubAdapter) -> None:
    assert adapter._graphql_url == "https://api.github.com/graphql"
    assert adapter._session.headers["Authorization"] == "token test-token"


def test_query_open_pull_requests(adapter: GitHubAdapter) -> None:
    """query_open_pull_requests parses GraphQL nodes into PullRequest snapshots."""
    data = {
        "data": {
            "repository": {
                "pullRequests": {
                    "nodes": [
                        {"number": 10, "mergeable": "MERGEABLE", "headRef": {"name": "feat-a"}},
                        {"number": 11, "mergeable": "CONFLICTING", "headRef": {"name": "feat-b"}},
                        {"number": 12, "mergeable": "UNKNOWN", "headRef": None},
                    ]
                }
            }
        }
    }

    with patch.object(adapter._session, "request", return_value=_response(200, data)) as req:
        prs = adapter.query_open_pull_requests("owner/repo", "main")

    assert prs == [
        PullRequest(number=10, mergeable_state=MergeableState.MERGEABLE, head_branch="feat-a"),
        PullRequest(number=11, mergeable_state=MergeableState.CONFLICTING, head_branch="feat-b"),
        PullRequest(number=12, mergeable_state=MergeableState.UNKNOWN, head_branch=""),
    ]
    call_args = req.call_args
    assert call_args[0] == ("POST", "https://api.github.com/graphql")
    body = call_args[1]["json"]
    assert body["variables"] == {"owner": "owner", "repo": "repo", "branch": "main"}
    assert "states: OPEN" in body["query"]


def test_query_pull_request(adapter: GitHubAdapter) -> None:
    data = {"data": {"repository": {"pullRequest": {"number": 42, "mergeable": "MERGEABLE", "headRef": {"name": "x"}}}}}

    with patch.object(adapter._session, "request", return_value=_response(200, data)) as req:
        pr = adapter.query_pull_request("owner/repo", 42)

    assert pr.number == 42
    assert pr.mergeable_state is MergeableState.MERGEABLE
    assert req.call_args[1]["json"]["variables"]["number"] == 42


def test_query_pull_request_not_found(adapter: GitHubAdapter) -> None:
    data = {"data": {"repository": {"pullRequest": None}}}
    with patch.object(adapter._session, "request", return_value=_response(200, data)):
        with pytest.raises(GitPlatformError, match="Not found"):
            adapter.query_pull_request("owner/repo", 999)


def test_graphql_errors_raise(adapter: GitHubAdapter) -> None:
    data = {"errors": [{"message": "Could not resolve to a Repository"}]}
    with patch.object(adapter._session, "request", return_value=_response(200, data)):
        with pytest.raises(GitPlatformError, match="Could not resolve"):
            adapter.query_pull_request("owner/repo", 1)


def test_invalid_repo_raises(adapter: GitHubAdapter) -> None:
    with pytest.raises(GitPlatformError, match="owner/name"):
        adapter.query_open_pull_requests("just-a-name", "main")


def test_list_workflow_runs(adapter: GitHubAdapter) -> None:
    """list_workflow_runs filters by event and branch and parses associated PRs."""
    data = {
        "total_count": 2,
        "workflow_runs": [
            {"id": 555, "name": "CI", "status": "completed", "pull_requests": [{"number": 42}]},
            {"id": 556, "name": "Lint", "status": "in_progress", "pull_requests": []},
        ],
    }

    with patch.object(adapter._session, "request", return_value=_response(200, data)) as req:
        runs = adapter.list_workflow_runs("owner/repo", "pull_request", "fix-42")

    assert runs == [
        WorkflowRun(id=555, name="CI", status=RunStatus.COMPLETED, pull_request_numbers=frozenset({42})),
        WorkflowRun(id=556, name="Lint", status=RunStatus.IN_PROGRESS, pull_request_numbers=frozenset()),
    ]
    call_args = req.call_args
    assert call_args[0][0] == "GET"
    assert call_args[0][1].endswith("/repos/owner/repo/actions/runs")
    assert call_args[1]["params"]["event"] == "pull_request"
    assert call_args[1]["params"]["branch"] == "fix-42"


def test_rerun_workflow_run(adapter: GitHubAdapter) -> None:
    with patch.object(adapter._session, "request", return_value=_response(201)) as req:
        assert adapter.rerun_workflow_run("owner/repo", 555) == 201
    assert req.call_args[0] == ("POST", "https://api.github.com/repos/owner/repo/actions/runs/555/rerun")


def test_cancel_workflow_run(adapter: GitHubAdapter) -> None:
    with patch.object(adapter._session, "request", return_value=_response(202)) as req:
        assert adapter.cancel_workflow_run("owner/repo", 8) == 202
    assert req.call_args[0][1].endswith("/actions/runs/8/cancel")


def test_rerun_api_error_raises(adapter: GitHubAdapter) -> None:
    """HTTP errors surface as GitPlatformError with the API message."""
    resp = _response(403, {"message": "Resource not accessible by integration"}, text="Forbidden")
    with patch.object(adapter._session, "request", return_value=resp):
        with pytest.raises(GitPlatformError) as exc_info:
            adapter.rerun_workflow_run("owner/repo", 1)
    assert "403" in str(exc_info.value)
    assert "not accessible" in str(exc_info.value)


def test_transport_error_raises(adapter: GitHubAdapter) -> None:
    with patch.object(adapter._session, "request", side_effect=requests.Timeout("read timed out")):
        with pytest.raises(GitPlatformError, match="timed out"):
            adapter.rerun_workflow_run("owner/repo", 1)


def test_create_workflow_dispatch(adapter: GitHubAdapter) -> None:
    with patch.object(adapter._session, "request", return_value=_response(204)) as req:
        status = adapter.create_workflow_dispatch("owner/repo", "ci.yaml", "refs/pull/3/merge", {"a": "b"})

    assert status == 204
    assert req.call_args[0][1].endswith("/repos/owner/repo/actions/workflows/ci.yaml/dispatches")
    assert req.call_args[1]["json"] == {"ref": "refs/pull/3/merge", "inputs": {"a": "b"}}
