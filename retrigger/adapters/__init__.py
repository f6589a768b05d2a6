"""Git platform adapters (base and implementations)."""

from retrigger.adapters.base import GitPlatformAdapter, GitPlatformError
from retrigger.adapters.github import GitHubAdapter

__all__ = ["GitPlatformAdapter", "GitPlatformError", "GitHubAdapter"]
