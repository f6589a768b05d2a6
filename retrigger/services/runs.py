"""Find the workflow runs of a pull request and re-run or dispatch them."""

import asyncio
import logging
from typing import Dict, List, Sequence

from retrigger.adapters.base import GitPlatformAdapter
from retrigger.errors import RunError
from retrigger.models import DispatchReceipt, PullRequest, RerunReceipt, WorkflowRun

LOG = logging.getLogger("retrigger.services.runs")

PULL_REQUEST_EVENT = "pull_request"


class RunMatcher:
    """Lists runs of one workflow that belong to one pull request."""

    def __init__(self, adapter: GitPlatformAdapter, repo: str) -> None:
        self._adapter = adapter
        self._repo = repo

    async def find_matching_runs(self, pr: PullRequest, workflow_name: str) -> List[WorkflowRun]:
        # The runs API filters by branch only; a branch name can be reused by
        # an older pull request, hence the number check.
        runs = await asyncio.to_thread(
            self._adapter.list_workflow_runs,
            self._repo,
            PULL_REQUEST_EVENT,
            pr.head_branch,
        )
        matched = [run for run in runs if run.name == workflow_name and pr.number in run.pull_request_numbers]
        LOG.debug(
            "PR #%s: %s of %s runs on %s match workflow %r",
            pr.number,
            len(matched),
            len(runs),
            pr.head_branch,
            workflow_name,
        )
        return matched


class RerunTrigger:
    """Requests re-runs; does not wait for the re-run to finish."""

    def __init__(self, adapter: GitPlatformAdapter, repo: str, cancel_in_progress: bool = False) -> None:
        self._adapter = adapter
        self._repo = repo
        self._cancel_in_progress = cancel_in_progress

    async def _request_rerun(self, run: WorkflowRun) -> int:
        if self._cancel_in_progress and not run.status.is_terminal:
            LOG.info("Cancelling workflow run %s in status %s", run.id, run.status.value)
            try:
                await asyncio.to_thread(self._adapter.cancel_workflow_run, self._repo, run.id)
            except Exception as e:
                raise RunError(run.id, str(e), step="cancel") from e
        try:
            return await asyncio.to_thread(self._adapter.rerun_workflow_run, self._repo, run.id)
        except Exception as e:
            raise RunError(run.id, str(e)) from e

    async def rerun(self, run: WorkflowRun) -> RerunReceipt:
        """Re-run one run; a provider failure is recorded on the receipt."""
        LOG.info("Re-running workflow run %s (%s) in status %s", run.id, run.name, run.status.value)
        try:
            status_code = await self._request_rerun(run)
        except RunError as e:
            LOG.warning("%s", e)
            return RerunReceipt(run_id=run.id, run_status=run.status, error=str(e))
        return RerunReceipt(run_id=run.id, run_status=run.status, status_code=status_code)

    async def rerun_all(self, runs: Sequence[WorkflowRun]) -> List[RerunReceipt]:
        """Re-run every run concurrently; receipts keep the order of runs."""
        return list(await asyncio.gather(*(self.rerun(run) for run in runs)))


class WorkflowDispatcher:
    """Dispatches a workflow against the merge ref of a pull request."""

    def __init__(
        self,
        adapter: GitPlatformAdapter,
        repo: str,
        workflow: str,
        inputs: Dict[str, str] | None = None,
    ) -> None:
        self._adapter = adapter
        self._repo = repo
        self._workflow = workflow
        self._inputs = dict(inputs or {})

    async def dispatch(self, pr: PullRequest) -> DispatchReceipt:
        ref = pr.merge_ref
        LOG.info("Dispatching workflow %s on %s for PR #%s", self._workflow, ref, pr.number)
        status_code = await asyncio.to_thread(
            self._adapter.create_workflow_dispatch,
            self._repo,
            self._workflow,
            ref,
            self._inputs,
        )
        return DispatchReceipt(
            pull_request_number=pr.number,
            workflow=self._workflow,
            ref=ref,
            status_code=status_code,
        )
