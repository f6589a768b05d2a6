"""Abstract base for Git platform adapters."""

from abc import ABC, abstractmethod
from typing import Dict, List

from retrigger.models import PullRequest, WorkflowRun


class GitPlatformError(Exception):
    """Raised when a Git platform API call fails."""

    pass


class GitPlatformAdapter(ABC):
    """Interface the orchestrator needs from a CI/repository provider.

    Methods are blocking; the orchestrator runs them in worker threads.
    """

    @abstractmethod
    def query_open_pull_requests(self, repo: str, base_branch: str) -> List[PullRequest]:
        """Open pull requests whose base is base_branch."""
        ...

    @abstractmethod
    def query_pull_request(self, repo: str, number: int) -> PullRequest:
        """Fresh snapshot of one pull request."""
        ...

    @abstractmethod
    def list_workflow_runs(self, repo: str, event: str, branch: str) -> List[WorkflowRun]:
        """Workflow runs triggered by event on branch."""
        ...

    @abstractmethod
    def rerun_workflow_run(self, repo: str, run_id: int) -> int:
        """Request a re-run; return the HTTP status code."""
        ...

    def cancel_workflow_run(self, repo: str, run_id: int) -> int:
        """Request cancellation; return the HTTP status code. Override if needed."""
        raise NotImplementedError("cancel_workflow_run")

    def create_workflow_dispatch(
        self,
        repo: str,
        workflow: str,
        ref: str,
        inputs: Dict[str, str] | None = None,
    ) -> int:
        """Dispatch workflow on ref; return the HTTP status code. Override if needed."""
        raise NotImplementedError("create_workflow_dispatch")
