"""Orchestration core: resolver, run matching and re-running, batch fan-out."""

from retrigger.services.orchestrator import BatchOrchestrator
from retrigger.services.resolver import MergeabilityResolver
from retrigger.services.runs import RerunTrigger, RunMatcher, WorkflowDispatcher

__all__ = [
    "BatchOrchestrator",
    "MergeabilityResolver",
    "RerunTrigger",
    "RunMatcher",
    "WorkflowDispatcher",
]
