"""Git platform adapters."""

from glissue.adapters.base import GitPlatformAdapter, GitPlatformError
from glissue.adapters.gitlab import GitLabAdapter

__all__ = ["GitPlatformAdapter", "GitPlatformError", "GitLabAdapter"]
