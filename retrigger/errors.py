"""Errors raised by the orchestration core.

Each level carries its own context record: the run id for a rerun, the
pull request number (and receipts) for a unit, the complete BatchResult
for the batch.
"""

from typing import Sequence

from retrigger.models import BatchResult, Receipt


class RetriggerError(Exception):
    """Base class for retrigger errors."""

    pass


class RunError(RetriggerError):
    """Re-running (or cancelling) one workflow run failed."""

    def __init__(self, run_id: int, message: str, step: str = "re-run") -> None:
        super().__init__(f"failed to {step} workflow run {run_id}: {message}")
        self.run_id = run_id
        self.step = step


class PullRequestError(RetriggerError):
    """Processing one pull request failed."""

    def __init__(
        self,
        pull_request_number: int,
        message: str,
        receipts: Sequence[Receipt] = (),
    ) -> None:
        super().__init__(f"PR #{pull_request_number}: {message}")
        self.pull_request_number = pull_request_number
        self.receipts = tuple(receipts)


class BatchError(RetriggerError):
    """One or more pull requests failed; result still holds every outcome."""

    def __init__(self, result: BatchResult) -> None:
        messages = [f.message for f in result.failures]
        super().__init__(", ".join(messages) or "batch failed")
        self.result = result


class UnsupportedEventError(RetriggerError):
    """The initiating event is neither push nor pull_request."""

    def __init__(self, event_name: str) -> None:
        super().__init__(f"Unsupported event: {event_name or '<empty>'}")
        self.event_name = event_name
