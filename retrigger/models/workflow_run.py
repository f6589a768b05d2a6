"""Workflow run (one execution of a named CI workflow)."""

from enum import Enum

from pydantic import BaseModel, ConfigDict


class RunStatus(str, Enum):
    """Run status as reported by GitHub Actions."""

    QUEUED = "queued"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    WAITING = "waiting"
    REQUESTED = "requested"
    PENDING = "pending"
    UNKNOWN = "unknown"

    @classmethod
    def parse(cls, value: str | None) -> "RunStatus":
        try:
            return cls((value or "").lower())
        except ValueError:
            return cls.UNKNOWN

    @property
    def is_terminal(self) -> bool:
        return self is RunStatus.COMPLETED


class WorkflowRun(BaseModel):
    """Read-only view of a run; this package never creates runs directly."""

    model_config = ConfigDict(frozen=True)

    id: int
    name: str
    status: RunStatus = RunStatus.UNKNOWN
    pull_request_numbers: frozenset[int] = frozenset()
