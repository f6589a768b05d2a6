"""Fan a batch of pull requests out to resolve -> match -> rerun and fold the results.

Every pull request is one unit: its steps run in sequence, units run
concurrently, and a failing unit becomes a Failure outcome instead of
cancelling its siblings. The batch waits for every unit to settle.
"""

import asyncio
import logging
from typing import List, Literal, Sequence

from retrigger.errors import BatchError, PullRequestError
from retrigger.models import (
    BatchResult,
    Failure,
    ItemOutcome,
    MergeableState,
    PullRequest,
    Receipt,
    RerunReceipt,
    Success,
)
from retrigger.services.resolver import MergeabilityResolver
from retrigger.services.runs import RerunTrigger, RunMatcher, WorkflowDispatcher

LOG = logging.getLogger("retrigger.services.orchestrator")


class BatchOrchestrator:
    """Processes one batch of pull requests per call."""

    def __init__(
        self,
        resolver: MergeabilityResolver,
        matcher: RunMatcher,
        trigger: RerunTrigger,
        workflow_name: str = "CI",
        dispatcher: WorkflowDispatcher | None = None,
        action: Literal["rerun", "dispatch"] = "rerun",
        unknown_mergeable: Literal["proceed", "skip"] = "proceed",
        max_concurrency: int = 10,
    ) -> None:
        if action == "dispatch" and dispatcher is None:
            raise ValueError("dispatch action requires a WorkflowDispatcher")
        if max_concurrency < 1:
            raise ValueError("max_concurrency must be at least 1")
        self._resolver = resolver
        self._matcher = matcher
        self._trigger = trigger
        self._dispatcher = dispatcher
        self._workflow_name = workflow_name
        self._action = action
        self._unknown_mergeable = unknown_mergeable
        self._max_concurrency = max_concurrency

    async def process(self, prs: Sequence[PullRequest], workflow_name: str | None = None) -> BatchResult:
        """Run every unit to completion; raise BatchError if any failed.

        The BatchError embeds the full result, successes included.
        """
        name = workflow_name or self._workflow_name
        # Units share one HTTP session; the semaphore bounds its pool usage
        semaphore = asyncio.Semaphore(self._max_concurrency)
        outcomes = await asyncio.gather(*(self._run_unit(pr, name, semaphore) for pr in prs))
        result = BatchResult(outcomes=tuple(outcomes))
        if result.has_failures:
            LOG.debug("Errors during batch: %s", ", ".join(f.message for f in result.failures))
            raise BatchError(result)
        return result

    async def _run_unit(self, pr: PullRequest, workflow_name: str, semaphore: asyncio.Semaphore) -> ItemOutcome:
        snapshot = pr
        try:
            async with semaphore:
                snapshot = await self._resolver.resolve(pr)
                receipts = await self._act(snapshot, workflow_name)
        except PullRequestError as e:
            return Failure(
                pull_request_number=pr.number,
                message=str(e),
                pull_request=snapshot,
                receipts=e.receipts,
                cause=e,
            )
        except Exception as e:
            return Failure(
                pull_request_number=pr.number,
                message=f"PR #{pr.number}: failed to trigger runs: {e}",
                pull_request=snapshot,
                cause=e,
            )
        return Success(pull_request=snapshot, receipts=tuple(receipts))

    async def _act(self, pr: PullRequest, workflow_name: str) -> List[Receipt]:
        state = pr.mergeable_state
        if state is MergeableState.UNKNOWN:
            LOG.debug("PR #%s: mergeability still unknown, policy %s", pr.number, self._unknown_mergeable)
            if self._unknown_mergeable == "skip":
                return []
            state = MergeableState.MERGEABLE

        if state is not MergeableState.MERGEABLE:
            LOG.debug("Skipping non-mergeable PR #%s (%s)", pr.number, state.value)
            return []

        if self._action == "dispatch":
            return [await self._dispatcher.dispatch(pr)]
        return list(await self._rerun(pr, workflow_name))

    async def _rerun(self, pr: PullRequest, workflow_name: str) -> List[RerunReceipt]:
        runs = await self._matcher.find_matching_runs(pr, workflow_name)
        if not runs:
            LOG.info("PR #%s: no %r runs to re-run", pr.number, workflow_name)
            return []
        receipts = await self._trigger.rerun_all(runs)
        failed = [r for r in receipts if not r.accepted]
        if failed:
            ids = ", ".join(str(r.run_id) for r in failed)
            raise PullRequestError(pr.number, f"failed to re-run workflow run(s) {ids}", receipts)
        return receipts
