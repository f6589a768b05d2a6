"""Configuration loading from YAML and environment.

Most GitHub settings line up with the variables GitHub Actions exports
(GITHUB_TOKEN, GITHUB_REPOSITORY, GITHUB_EVENT_NAME, GITHUB_EVENT_PATH,
GITHUB_REF), so inside a workflow the config file is optional. The token
can also come from a file (GITHUB_TOKEN_FILE, e.g. Docker secrets).
"""

import os
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


def _read_secret(env_key: str, file_env_key: str) -> str | None:
    """Read secret from env var or from file path in env (e.g. Docker
    secrets)."""
    value = _current_env.get(env_key)
    if value:
        return value.strip()
    file_path = _current_env.get(file_env_key)
    if file_path:
        return Path(file_path).read_text().strip()
    return None


# Injected by load_config so secrets and ${VAR} substitution read one snapshot
_current_env: dict[str, str] = {}


class GitHubConfig(BaseSettings):
    """GitHub API settings and invocation context."""

    model_config = SettingsConfigDict(env_prefix="GITHUB_", extra="ignore")

    token: str | None = Field(default=None, description="PAT or workflow token; use env or secret file")
    api_url: str = Field(default="https://api.github.com", description="REST API base URL")
    graphql_url: str = Field(default="https://api.github.com/graphql", description="GraphQL endpoint")
    repository: str = Field(default="", description="Target repo e.g. owner/repo")
    event_name: str = Field(default="", description="Initiating event: push or pull_request")
    event_path: str = Field(default="", description="Path to the JSON event payload")
    ref: str = Field(default="", description="Ref that triggered the event, e.g. refs/heads/main")
    timeout: float = Field(default=30.0, gt=0, description="Per-request HTTP timeout in seconds")


class WorkflowConfig(BaseSettings):
    """Which workflow to act on and how."""

    model_config = SettingsConfigDict(env_prefix="WORKFLOW_", extra="ignore")

    name: str = Field(default="CI", description="Workflow run name matched when re-running")
    file: str = Field(default="ci.yaml", description="Workflow file (or id) used for dispatch")
    action: Literal["rerun", "dispatch"] = Field(default="rerun", description="rerun matched runs or dispatch")
    inputs: dict[str, str] = Field(default_factory=dict, description="Inputs for workflow_dispatch")
    # UNKNOWN after polling: proceed as if mergeable, or skip the pull request
    unknown_mergeable: Literal["proceed", "skip"] = Field(default="proceed")
    cancel_in_progress: bool = Field(default=False, description="Cancel non-terminal runs before re-running")
    max_concurrency: int = Field(default=10, ge=1, description="Pull requests processed at the same time")


class ResolverConfig(BaseSettings):
    """Mergeability polling (backoff) settings."""

    model_config = SettingsConfigDict(env_prefix="RESOLVER_", extra="ignore")

    max_retries: int = Field(default=10, ge=0, description="Re-fetches after the first one")
    step_seconds: float = Field(default=1.0, ge=0, description="Linear backoff step")
    max_step: int = Field(default=4, ge=0, description="Cap on the number of steps in one delay")
    jitter_seconds: float = Field(default=1.0, ge=0, description="Upper bound of random jitter")


class LoggingConfig(BaseSettings):
    """Logging settings."""

    model_config = SettingsConfigDict(env_prefix="LOGGING_", extra="ignore")

    level: str = Field(default="INFO", description="Log level")
    format: str = Field(
        default="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        description="Log format",
    )
    annotations: bool = Field(default=False, description="Emit GitHub Actions workflow commands")


class AppConfig(BaseSettings):
    """Root application config from YAML + env."""

    model_config = SettingsConfigDict(extra="ignore")

    github: GitHubConfig = Field(default_factory=GitHubConfig)
    workflow: WorkflowConfig = Field(default_factory=WorkflowConfig)
    resolver: ResolverConfig = Field(default_factory=ResolverConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @property
    def github_token_resolved(self) -> str | None:
        """Resolve GitHub token from config, env or Docker secret file."""
        t = self.github.token
        if t and not t.startswith("${"):
            return t
        return _read_secret("GITHUB_TOKEN", "GITHUB_TOKEN_FILE")


def _substitute_env(value: Any) -> Any:
    """Replace ${VAR} and $VAR in strings with os.environ."""
    if isinstance(value, str):
        if value.startswith("${") and value.endswith("}"):
            key = value[2:-1].strip()
            return _current_env.get(key, value)
        if value.startswith("$") and not value.startswith("${"):
            key = value[1:].strip()
            return _current_env.get(key, value)
        return value
    if isinstance(value, dict):
        return {k: _substitute_env(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_substitute_env(v) for v in value]
    return value


def load_config(config_path: Path | None = None) -> AppConfig:
    """Load config from YAML file and environment.

    Missing file means defaults plus environment. Secrets: GITHUB_TOKEN
    or GITHUB_TOKEN_FILE.
    """
    global _current_env

    _current_env = dict(os.environ)

    path = config_path or Path("config.yaml")
    if not path.is_file():
        return AppConfig()

    raw = yaml.safe_load(path.read_text()) or {}
    raw = _substitute_env(raw)

    return AppConfig(
        github=GitHubConfig(**(raw.get("github") or {})),
        workflow=WorkflowConfig(**(raw.get("workflow") or {})),
        resolver=ResolverConfig(**(raw.get("resolver") or {})),
        logging=LoggingConfig(**(raw.get("logging") or {})),
    )
