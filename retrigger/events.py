"""Initiating events and the batch of pull requests each one selects.

push: every open pull request targeting the pushed branch.
pull_request: the single pull request embedded in the payload.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Literal, Union

from pydantic import BaseModel

from retrigger.adapters.base import GitPlatformAdapter
from retrigger.adapters.github import pull_request_from_rest
from retrigger.errors import UnsupportedEventError
from retrigger.models import PullRequest

LOG = logging.getLogger("retrigger.events")

_HEADS_PREFIX = "refs/heads/"


class PushInvocation(BaseModel):
    """Push to a branch (push webhook / workflow run)."""

    event: Literal["push"] = "push"
    branch: str


class PullRequestInvocation(BaseModel):
    """Pull request event carrying one pull request."""

    event: Literal["pull_request"] = "pull_request"
    pull_request: PullRequest


Invocation = Union[PushInvocation, PullRequestInvocation]


def branch_from_ref(ref: str) -> str:
    """refs/heads/main -> main; other refs are returned unchanged."""
    return ref[len(_HEADS_PREFIX) :] if ref.startswith(_HEADS_PREFIX) else ref


def read_event_payload(event_path: str | Path | None) -> Dict[str, Any]:
    """Load the JSON event payload; empty dict when no path is given."""
    if not event_path:
        return {}
    return json.loads(Path(event_path).read_text(encoding="utf-8")) or {}


def load_invocation(event_name: str, payload: Dict[str, Any], ref: str = "") -> Invocation:
    """Build the invocation for event_name from its payload.

    Raises UnsupportedEventError for any other event or a payload that
    does not carry what the event needs.
    """
    if event_name == "push":
        branch = branch_from_ref(ref or payload.get("ref") or "")
        if not branch:
            raise UnsupportedEventError("push (no ref)")
        return PushInvocation(branch=branch)
    if event_name == "pull_request":
        pull = payload.get("pull_request")
        if not isinstance(pull, dict) or "number" not in pull:
            raise UnsupportedEventError(f"{event_name} (no pull_request in payload)")
        return PullRequestInvocation(pull_request=pull_request_from_rest(pull))
    raise UnsupportedEventError(event_name)


def select_pull_requests(invocation: Invocation, adapter: GitPlatformAdapter, repo: str) -> List[PullRequest]:
    """Seed the batch for this invocation."""
    if isinstance(invocation, PushInvocation):
        LOG.debug("Listing incoming PRs for %s", invocation.branch)
        prs = adapter.query_open_pull_requests(repo, invocation.branch)
        LOG.debug("Fetched open PRs: %s", [pr.number for pr in prs])
        return prs
    return [invocation.pull_request]
