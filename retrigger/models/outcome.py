"""Per-pull-request outcomes and the batch result they fold into."""

from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field

from retrigger.models.pull_request import PullRequest
from retrigger.models.workflow_run import RunStatus


class RerunReceipt(BaseModel):
    """Provider acknowledgement of one rerun request (or the failure)."""

    model_config = ConfigDict(frozen=True)

    run_id: int
    run_status: RunStatus = RunStatus.UNKNOWN
    status_code: int | None = None
    error: str | None = None

    @property
    def accepted(self) -> bool:
        return self.error is None and self.status_code is not None and 200 <= self.status_code < 300


class DispatchReceipt(BaseModel):
    """Provider acknowledgement of a workflow_dispatch for one pull request."""

    model_config = ConfigDict(frozen=True)

    pull_request_number: int
    workflow: str
    ref: str
    status_code: int

    @property
    def accepted(self) -> bool:
        return 200 <= self.status_code < 300


Receipt = Union[RerunReceipt, DispatchReceipt]


class Success(BaseModel):
    """Unit finished; receipts is empty when the pull request was skipped."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["success"] = "success"
    pull_request: PullRequest
    receipts: tuple[Receipt, ...] = ()

    @property
    def pull_request_number(self) -> int:
        return self.pull_request.number


class Failure(BaseModel):
    """Unit failed.

    pull_request holds the last known snapshot and receipts whatever was
    acknowledged before the failure.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    kind: Literal["failure"] = "failure"
    pull_request_number: int
    message: str
    pull_request: PullRequest | None = None
    receipts: tuple[Receipt, ...] = ()
    cause: BaseException | None = Field(default=None, exclude=True)


ItemOutcome = Annotated[Union[Success, Failure], Field(discriminator="kind")]


class BatchResult(BaseModel):
    """Outcomes of one invocation, in the order the pull requests were given."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    outcomes: tuple[ItemOutcome, ...] = ()

    @property
    def has_failures(self) -> bool:
        return any(isinstance(o, Failure) for o in self.outcomes)

    @property
    def successes(self) -> list[Success]:
        return [o for o in self.outcomes if isinstance(o, Success)]

    @property
    def failures(self) -> list[Failure]:
        return [o for o in self.outcomes if isinstance(o, Failure)]

    def __len__(self) -> int:
        return len(self.outcomes)

    def summary(self) -> dict[str, Any]:
        """JSON-friendly view (causes are dropped, messages kept)."""
        return {
            "has_failures": self.has_failures,
            "outcomes": [o.model_dump(mode="json") for o in self.outcomes],
        }
