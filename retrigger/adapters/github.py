"""GitHub API adapter.

Pull request queries go through GraphQL (it exposes the computed
``mergeable`` state); workflow runs go through the REST Actions API.
"""

from typing import Any, Dict, List

import requests

from retrigger.adapters.base import GitPlatformAdapter, GitPlatformError
from retrigger.models import MergeableState, PullRequest, RunStatus, WorkflowRun

_PR_FIELDS = """
    number mergeable
    headRef { name }
"""

OPEN_PULL_REQUESTS_QUERY = f"""
query ($owner: String!, $repo: String!, $branch: String!) {{
  repository(owner: $owner, name: $repo) {{
    pullRequests(last: 100, baseRefName: $branch, states: OPEN) {{
      nodes {{ {_PR_FIELDS} }}
    }}
  }}
}}
"""

PULL_REQUEST_QUERY = f"""
query ($owner: String!, $repo: String!, $number: Int!) {{
  repository(owner: $owner, name: $repo) {{
    pullRequest(number: $number) {{ {_PR_FIELDS} }}
  }}
}}
"""


def _split_repo(repo: str) -> tuple[str, str]:
    owner, sep, name = repo.partition("/")
    if not sep or not owner or not name:
        raise GitPlatformError(f"Invalid repository (expected owner/name): {repo!r}")
    return owner, name


def pull_request_from_graphql(data: Dict[str, Any]) -> PullRequest:
    head = data.get("headRef") or {}
    return PullRequest(
        number=data["number"],
        mergeable_state=MergeableState.parse(data.get("mergeable")),
        head_branch=head.get("name", ""),
    )


def pull_request_from_rest(data: Dict[str, Any]) -> PullRequest:
    """Webhook/REST pull request: mergeable is true, false or null."""
    head = data.get("head") or {}
    return PullRequest(
        number=data["number"],
        mergeable_state=MergeableState.parse(data.get("mergeable")),
        head_branch=head.get("ref", ""),
    )


def _workflow_run_from_api(data: Dict[str, Any]) -> WorkflowRun:
    numbers = frozenset(
        int(pr["number"]) for pr in (data.get("pull_requests") or []) if isinstance(pr, dict) and "number" in pr
    )
    return WorkflowRun(
        id=data["id"],
        name=data.get("name") or "",
        status=RunStatus.parse(data.get("status")),
        pull_request_numbers=numbers,
    )


class GitHubAdapter(GitPlatformAdapter):
    """GitHub API implementation.

    Called from worker threads (asyncio.to_thread); the requests session
    is shared, so callers bound concurrency to the connection pool size
    (10 by default, see BatchOrchestrator max_concurrency).
    """

    def __init__(
        self,
        token: str,
        api_url: str = "https://api.github.com",
        graphql_url: str | None = None,
        timeout: float = 30,
    ) -> None:
        self._api_url = api_url.rstrip("/")
        self._graphql_url = graphql_url or f"{self._api_url}/graphql"
        self._timeout = timeout
        self._session = requests.Session()
        self._session.headers["Authorization"] = f"token {token}"
        self._session.headers["Accept"] = "application/vnd.github.v3+json"

    def _request(
        self,
        method: str,
        path: str,
        params: Dict[str, Any] | None = None,
        json: Dict[str, Any] | None = None,
    ) -> requests.Response:
        url = f"{self._api_url}{path}" if path.startswith("/") else f"{self._api_url}/{path}"
        try:
            resp = self._session.request(method, url, params=params, json=json, timeout=self._timeout)
        except requests.RequestException as e:
            raise GitPlatformError(f"{method} {path}: {e}") from e
        if resp.status_code >= 400:
            msg = resp.text or resp.reason or str(resp.status_code)
            try:
                msg = resp.json().get("message", msg)
            except (ValueError, AttributeError):
                pass
            raise GitPlatformError(f"{resp.status_code}: {msg}")
        return resp

    def _graphql(self, query: str, variables: Dict[str, Any]) -> Dict[str, Any]:
        try:
            resp = self._session.request(
                "POST",
                self._graphql_url,
                json={"query": query, "variables": variables},
                timeout=self._timeout,
            )
        except requests.RequestException as e:
            raise GitPlatformError(f"GraphQL: {e}") from e
        if resp.status_code >= 400:
            raise GitPlatformError(f"{resp.status_code}: {resp.text or resp.reason}")
        body = resp.json() or {}
        errors = body.get("errors")
        if errors:
            messages = [err.get("message", str(err)) for err in errors if isinstance(err, dict)]
            raise GitPlatformError("GraphQL: " + "; ".join(messages or [str(errors)]))
        return body.get("data") or {}

    def query_open_pull_requests(self, repo: str, base_branch: str) -> List[PullRequest]:
        owner, name = _split_repo(repo)
        data = self._graphql(OPEN_PULL_REQUESTS_QUERY, {"owner": owner, "repo": name, "branch": base_branch})
        nodes = ((data.get("repository") or {}).get("pullRequests") or {}).get("nodes") or []
        return [pull_request_from_graphql(n) for n in nodes if n]

    def query_pull_request(self, repo: str, number: int) -> PullRequest:
        owner, name = _split_repo(repo)
        data = self._graphql(PULL_REQUEST_QUERY, {"owner": owner, "repo": name, "number": number})
        node = (data.get("repository") or {}).get("pullRequest")
        if not node:
            raise GitPlatformError(f"Not found: PR #{number}")
        return pull_request_from_graphql(node)

    def list_workflow_runs(self, repo: str, event: str, branch: str) -> List[WorkflowRun]:
        resp = self._request(
            "GET",
            f"/repos/{repo}/actions/runs",
            params={"event": event, "branch": branch, "per_page": 100},
        )
        data = resp.json() or {}
        return [_workflow_run_from_api(d) for d in data.get("workflow_runs") or []]

    def rerun_workflow_run(self, repo: str, run_id: int) -> int:
        return self._request("POST", f"/repos/{repo}/actions/runs/{run_id}/rerun").status_code

    def cancel_workflow_run(self, repo: str, run_id: int) -> int:
        return self._request("POST", f"/repos/{repo}/actions/runs/{run_id}/cancel").status_code

    def create_workflow_dispatch(
        self,
        repo: str,
        workflow: str,
        ref: str,
        inputs: Dict[str, str] | None = None,
    ) -> int:
        payload: Dict[str, Any] = {"ref": ref}
        if inputs:
            payload["inputs"] = inputs
        resp = self._request("POST", f"/repos/{repo}/actions/workflows/{workflow}/dispatches", json=payload)
        return resp.status_code
