"""Resolve pull requests whose mergeable state is still being computed.

GitHub computes mergeability in the background after a push to the base
branch, so a freshly listed pull request often reports UNKNOWN. The
resolver re-fetches it with a linear backoff plus jitter until the state
settles or the retry budget runs out.
"""

import asyncio
import logging
import random
from typing import Awaitable, Callable

from retrigger.adapters.base import GitPlatformAdapter
from retrigger.config import ResolverConfig
from retrigger.models import MergeableState, PullRequest

LOG = logging.getLogger("retrigger.services.resolver")

Sleep = Callable[[float], Awaitable[None]]


class MergeabilityResolver:
    """Polls a pull request until its mergeable state is known."""

    def __init__(
        self,
        adapter: GitPlatformAdapter,
        repo: str,
        config: ResolverConfig | None = None,
        sleep: Sleep = asyncio.sleep,
        rand: Callable[[], float] = random.random,
    ) -> None:
        self._adapter = adapter
        self._repo = repo
        self._config = config or ResolverConfig()
        self._sleep = sleep
        self._rand = rand

    def delay_for(self, attempt: int) -> float:
        """Seconds to wait before re-fetch number attempt (1-based)."""
        cfg = self._config
        steps = min(attempt - 1, cfg.max_step)
        return steps * cfg.step_seconds + self._rand() * cfg.jitter_seconds

    async def resolve(self, pr: PullRequest) -> PullRequest:
        """Return a snapshot whose state is known, or the last UNKNOWN one.

        Makes at most max_retries + 1 fetches. Provider errors propagate.
        """
        attempt = 0
        while pr.mergeable_state is MergeableState.UNKNOWN and attempt <= self._config.max_retries:
            attempt += 1
            delay = self.delay_for(attempt)
            LOG.debug("Re-fetching PR #%s in %.0f ms", pr.number, delay * 1000)
            await self._sleep(delay)
            pr = await asyncio.to_thread(self._adapter.query_pull_request, self._repo, pr.number)

        if pr.mergeable_state is MergeableState.UNKNOWN and attempt:
            LOG.warning("PR #%s: mergeability still unknown after %s fetches", pr.number, attempt)
        LOG.debug("Resolved mergeable state: PR #%s %s", pr.number, pr.mergeable_state.value)
        return pr
