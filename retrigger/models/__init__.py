"""Data models for pull requests, workflow runs and batch outcomes (Pydantic)."""

from retrigger.models.outcome import (
    BatchResult,
    DispatchReceipt,
    Failure,
    ItemOutcome,
    Receipt,
    RerunReceipt,
    Success,
)
from retrigger.models.pull_request import MergeableState, PullRequest
from retrigger.models.workflow_run import RunStatus, WorkflowRun

__all__ = [
    "BatchResult",
    "DispatchReceipt",
    "Failure",
    "ItemOutcome",
    "MergeableState",
    "PullRequest",
    "Receipt",
    "RerunReceipt",
    "RunStatus",
    "Success",
    "WorkflowRun",
]
