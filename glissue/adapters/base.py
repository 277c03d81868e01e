"""Abstract base for Git platform adapters."""

from abc import ABC, abstractmethod
from typing import Iterator, List

from glissue.models import Issue, IssueLabel, IssueMilestone, Project


class GitPlatformError(Exception):
    """Raised when a Git platform API call fails."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class GitPlatformAdapter(ABC):
    """Interface of the hosting-service calls needed to file an issue."""

    @abstractmethod
    def search_projects(self, search: str) -> Iterator[Project]:
        """Yield projects whose name matches search (fuzzy, server side)."""
        ...

    @abstractmethod
    def list_labels(self, project_id: int) -> List[IssueLabel]:
        """List all labels of a project."""
        ...

    @abstractmethod
    def list_milestones(self, project_id: int, state: str = "active") -> List[IssueMilestone]:
        """List milestones of a project in the given state."""
        ...

    @abstractmethod
    def list_tree(self, project_id: int, path: str, ref: str) -> List[dict]:
        """List repository tree entries (name, path, type) under path at ref."""
        ...

    @abstractmethod
    def get_file_content(self, project_id: int, file_path: str, ref: str) -> bytes:
        """Return the decoded content of a repository file at ref."""
        ...

    @abstractmethod
    def create_issue(self, project_id: int, title: str, description: str) -> Issue:
        """Create an issue."""
        ...

    @abstractmethod
    def update_issue(
        self,
        project_id: int,
        issue_iid: int,
        add_labels: List[str],
        milestone_id: int | None = None,
    ) -> Issue:
        """Add labels and optionally set the milestone of an issue."""
        ...
