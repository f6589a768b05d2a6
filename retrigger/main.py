"""
retrigger entry point.

Reads the initiating event (push or pull_request), selects the pull
requests it concerns, resolves their mergeability and re-runs (or
dispatches) their CI workflow. Meant to run as a step of a GitHub Actions
workflow; every GITHUB_* variable the runner exports is picked up.
Usage: retrigger [--config config.yaml] | python -m retrigger
"""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

from retrigger.adapters.base import GitPlatformAdapter
from retrigger.adapters.github import GitHubAdapter
from retrigger.config import AppConfig, load_config
from retrigger.errors import BatchError, UnsupportedEventError
from retrigger.events import load_invocation, read_event_payload, select_pull_requests
from retrigger.logging import RetriggerLogging
from retrigger.models import BatchResult
from retrigger.services import (
    BatchOrchestrator,
    MergeabilityResolver,
    RerunTrigger,
    RunMatcher,
    WorkflowDispatcher,
)

LOG_NAME = "retrigger.main"


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse CLI arguments; flags override config values."""
    parser = argparse.ArgumentParser(
        prog="retrigger",
        description="Re-run or dispatch CI for the mergeable pull requests of a push or pull_request event",
    )
    parser.add_argument(
        "--config",
        "-c",
        type=Path,
        default=Path("config.yaml"),
        help="Path to YAML config file",
    )
    parser.add_argument(
        "--check",
        action="store_true",
        help="Only load and validate config, then exit",
    )
    parser.add_argument("--event-name", help="push or pull_request (default: GITHUB_EVENT_NAME)")
    parser.add_argument("--event-path", help="JSON event payload (default: GITHUB_EVENT_PATH)")
    parser.add_argument("--ref", help="Pushed ref, e.g. refs/heads/main (default: GITHUB_REF)")
    parser.add_argument("--workflow-name", help="Workflow run name to re-run")
    parser.add_argument("--action", choices=["rerun", "dispatch"], help="rerun matched runs or dispatch")
    return parser.parse_args(argv)


def apply_overrides(config: AppConfig, args: argparse.Namespace) -> AppConfig:
    """Return config with CLI flags applied."""
    github = config.github.model_copy(
        update={
            k: v
            for k, v in {
                "event_name": args.event_name,
                "event_path": args.event_path,
                "ref": args.ref,
            }.items()
            if v
        }
    )
    workflow = config.workflow.model_copy(
        update={k: v for k, v in {"name": args.workflow_name, "action": args.action}.items() if v}
    )
    return config.model_copy(update={"github": github, "workflow": workflow})


def build_orchestrator(config: AppConfig, adapter: GitPlatformAdapter) -> BatchOrchestrator:
    """Wire resolver, matcher, trigger and dispatcher from config."""
    repo = config.github.repository
    wf = config.workflow
    dispatcher = WorkflowDispatcher(adapter, repo, wf.file, wf.inputs) if wf.action == "dispatch" else None
    return BatchOrchestrator(
        resolver=MergeabilityResolver(adapter, repo, config.resolver),
        matcher=RunMatcher(adapter, repo),
        trigger=RerunTrigger(adapter, repo, cancel_in_progress=wf.cancel_in_progress),
        workflow_name=wf.name,
        dispatcher=dispatcher,
        action=wf.action,
        unknown_mergeable=wf.unknown_mergeable,
        max_concurrency=wf.max_concurrency,
    )


def run(config: AppConfig, adapter: GitPlatformAdapter | None = None) -> BatchResult:
    """Process one invocation. Raises BatchError or UnsupportedEventError."""
    log = logging.getLogger(LOG_NAME)
    gh = config.github
    if adapter is None:
        token = config.github_token_resolved
        if not token:
            raise ValueError("GitHub token is not set (GITHUB_TOKEN or GITHUB_TOKEN_FILE)")
        adapter = GitHubAdapter(token=token, api_url=gh.api_url, graphql_url=gh.graphql_url, timeout=gh.timeout)

    invocation = load_invocation(gh.event_name, read_event_payload(gh.event_path), gh.ref)
    prs = select_pull_requests(invocation, adapter, gh.repository)
    log.info(
        "retrigger started | repo=%s | event=%s | prs=%s | action=%s",
        gh.repository,
        invocation.event,
        [pr.number for pr in prs],
        config.workflow.action,
    )
    orchestrator = build_orchestrator(config, adapter)
    return asyncio.run(orchestrator.process(prs))


def main(argv: list[str] | None = None) -> int:
    """Entry point for retrigger."""
    args = parse_args(argv)
    config = apply_overrides(load_config(args.config), args)
    RetriggerLogging(config.logging).setup()
    log = logging.getLogger(LOG_NAME)

    if not config.github.repository:
        log.error("Repository is not set (github.repository or GITHUB_REPOSITORY)")
        return 1

    if args.check:
        print("Config OK:", config.github.repository, config.workflow.name, config.workflow.action)
        return 0

    try:
        result = run(config)
    except BatchError as e:
        log.error("%s", e)
        print(json.dumps(e.result.summary(), indent=2))
        return 1
    except UnsupportedEventError as e:
        log.error("%s", e)
        return 1
    except KeyboardInterrupt:
        return 1
    except Exception as e:
        logging.getLogger(LOG_NAME).exception("Fatal error: %s", e)
        return 1

    print(json.dumps(result.summary(), indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
