"""Pull request snapshot and mergeable state."""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict


class MergeableState(str, Enum):
    """Provider-computed readiness of a pull request to merge."""

    UNKNOWN = "UNKNOWN"
    MERGEABLE = "MERGEABLE"
    CONFLICTING = "CONFLICTING"

    @classmethod
    def parse(cls, value: Any) -> "MergeableState":
        """Accept GraphQL strings and the REST boolean (null means not computed yet)."""
        if value is True:
            return cls.MERGEABLE
        if value is False:
            return cls.CONFLICTING
        if isinstance(value, str):
            try:
                return cls(value.upper())
            except ValueError:
                return cls.UNKNOWN
        return cls.UNKNOWN


class PullRequest(BaseModel):
    """Immutable snapshot of a pull request; re-fetching yields a new one."""

    model_config = ConfigDict(frozen=True)

    number: int
    mergeable_state: MergeableState = MergeableState.UNKNOWN
    head_branch: str = ""

    @property
    def merge_ref(self) -> str:
        """Ref of the provider-computed merge commit."""
        return f"refs/pull/{self.number}/merge"
