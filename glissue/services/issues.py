"""Project lookup, label/milestone listing, issue creation and update."""

import logging
from pathlib import PurePosixPath
from typing import List, Sequence

from glissue.adapters.base import GitPlatformAdapter, GitPlatformError
from glissue.models import EditedIssue, Issue, IssueLabel, IssueMilestone, Project

log = logging.getLogger("glissue.issues")


class ProjectNotFoundError(Exception):
    """Raised when no project matches the origin's path exactly."""

    pass


def find_project(adapter: GitPlatformAdapter, project_path: str) -> Project:
    """Find the project whose "/" + path_with_namespace equals project_path.

    The API only offers fuzzy search by name, so search by the last path
    segment and filter for the exact path.

    Raises:
        ProjectNotFoundError: If no search result matches exactly.
        GitPlatformError: If the search call fails.
    """
    name = PurePosixPath(project_path).name
    for project in adapter.search_projects(name):
        if "/" + project.path_with_namespace == project_path:
            return project
    raise ProjectNotFoundError(f"could not find project {project_path!r}")


def list_labels(adapter: GitPlatformAdapter, project: Project) -> List[IssueLabel]:
    """List project labels; API failure is logged and gives []."""
    try:
        return adapter.list_labels(project.id)
    except GitPlatformError as e:
        log.warning("Labels unavailable for %s: %s", project.path_with_namespace, e)
        return []


def list_milestones(adapter: GitPlatformAdapter, project: Project) -> List[IssueMilestone]:
    """List active milestones; API failure is logged and gives []."""
    try:
        return adapter.list_milestones(project.id, state="active")
    except GitPlatformError as e:
        log.warning("Milestones unavailable for %s: %s", project.path_with_namespace, e)
        return []


def create_issue(adapter: GitPlatformAdapter, project: Project, edited: EditedIssue) -> Issue:
    """Create the issue, then remove its draft.

    If creation fails the draft stays on disk for another attempt.
    """
    try:
        issue = adapter.create_issue(project.id, title=edited.title, description=edited.description)
    except GitPlatformError:
        if edited.draft_path is not None:
            log.warning("Issue draft kept at %s", edited.draft_path)
        raise
    if edited.draft_path is not None:
        try:
            edited.draft_path.unlink(missing_ok=True)
        except OSError as e:
            log.warning("Could not remove draft %s: %s", edited.draft_path, e)
    return issue


def set_issue_labels_milestones(
    adapter: GitPlatformAdapter,
    project: Project,
    issue: Issue,
    labels: Sequence[IssueLabel],
    milestone: IssueMilestone | None,
) -> Issue:
    """Add labels and set the milestone with a single update call.

    An empty label list adds nothing; milestone None leaves the milestone
    untouched. No rollback if this fails after the issue was created.
    """
    add_labels = [label.name for label in labels]
    milestone_id = milestone.id if milestone is not None else None
    return adapter.update_issue(project.id, issue.iid, add_labels=add_labels, milestone_id=milestone_id)
