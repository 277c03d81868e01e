"""Tests for project lookup, label/milestone fetchers and issue create/update."""

from pathlib import Path
from unittest.mock import MagicMock

import pytest

from glissue.adapters.base import GitPlatformAdapter, GitPlatformError
from glissue.models import EditedIssue, Issue, IssueLabel, IssueMilestone, Project
from glissue.services.issues import (
    ProjectNotFoundError,
    create_issue,
    find_project,
    list_labels,
    list_milestones,
    set_issue_labels_milestones,
)


@pytest.fixture
def adapter() -> MagicMock:
    return MagicMock(spec=GitPlatformAdapter)


@pytest.fixture
def project() -> Project:
    return Project(id=42, path_with_namespace="group/tool", default_branch="main")


@pytest.fixture
def issue() -> Issue:
    return Issue(id=1001, iid=7, title="Title", web_url="https://gitlab.com/group/tool/-/issues/7")


class TestFindProject:
    def test_exact_path_match_among_candidates(self, adapter: MagicMock) -> None:
        adapter.search_projects.return_value = iter(
            [
                Project(id=1, path_with_namespace="other/tool"),
                Project(id=2, path_with_namespace="group/tool-extra"),
                Project(id=3, path_with_namespace="group/tool"),
            ]
        )
        assert find_project(adapter, "/group/tool").id == 3
        adapter.search_projects.assert_called_once_with("tool")

    def test_nested_group_searches_last_segment(self, adapter: MagicMock) -> None:
        adapter.search_projects.return_value = iter([Project(id=5, path_with_namespace="a/b/c/tool")])
        assert find_project(adapter, "/a/b/c/tool").id == 5
        adapter.search_projects.assert_called_once_with("tool")

    def test_no_exact_match_raises(self, adapter: MagicMock) -> None:
        adapter.search_projects.return_value = iter([Project(id=1, path_with_namespace="other/tool")])
        with pytest.raises(ProjectNotFoundError, match="/group/tool"):
            find_project(adapter, "/group/tool")

    def test_search_failure_propagates(self, adapter: MagicMock) -> None:
        adapter.search_projects.side_effect = GitPlatformError("401: Unauthorized", status_code=401)
        with pytest.raises(GitPlatformError):
            find_project(adapter, "/group/tool")


class TestFetchers:
    """Labels and milestones degrade to [] on API failure."""

    def test_list_labels(self, adapter: MagicMock, project: Project) -> None:
        labels = [IssueLabel(id=1, name="bug")]
        adapter.list_labels.return_value = labels
        assert list_labels(adapter, project) == labels
        adapter.list_labels.assert_called_once_with(42)

    def test_list_labels_failure_gives_empty(self, adapter: MagicMock, project: Project, caplog) -> None:
        caplog.set_level("WARNING")
        adapter.list_labels.side_effect = GitPlatformError("403: Forbidden", status_code=403)
        assert list_labels(adapter, project) == []
        assert "Labels unavailable" in caplog.text

    def test_list_milestones_active(self, adapter: MagicMock, project: Project) -> None:
        adapter.list_milestones.return_value = []
        assert list_milestones(adapter, project) == []
        adapter.list_milestones.assert_called_once_with(42, state="active")

    def test_list_milestones_failure_gives_empty(self, adapter: MagicMock, project: Project) -> None:
        adapter.list_milestones.side_effect = GitPlatformError("500: boom", status_code=500)
        assert list_milestones(adapter, project) == []


class TestCreateIssue:
    def test_creates_and_removes_draft(self, adapter: MagicMock, project: Project, issue: Issue, tmp_path: Path) -> None:
        draft = tmp_path / "draft.md"
        draft.write_text("Title\n\nBody")
        adapter.create_issue.return_value = issue

        result = create_issue(adapter, project, EditedIssue(title="Title", description="\nBody", draft_path=draft))

        assert result is issue
        adapter.create_issue.assert_called_once_with(42, title="Title", description="\nBody")
        assert not draft.exists()

    def test_failure_keeps_draft(self, adapter: MagicMock, project: Project, tmp_path: Path) -> None:
        draft = tmp_path / "draft.md"
        draft.write_text("Title\n")
        adapter.create_issue.side_effect = GitPlatformError("400: bad request", status_code=400)

        with pytest.raises(GitPlatformError):
            create_issue(adapter, project, EditedIssue(title="Title", draft_path=draft))

        assert draft.read_text() == "Title\n"


class TestSetIssueLabelsMilestones:
    def test_nothing_selected_sends_empty_labels_and_no_milestone(
        self, adapter: MagicMock, project: Project, issue: Issue
    ) -> None:
        set_issue_labels_milestones(adapter, project, issue, [], None)
        adapter.update_issue.assert_called_once_with(42, 7, add_labels=[], milestone_id=None)

    def test_labels_and_milestone(self, adapter: MagicMock, project: Project, issue: Issue) -> None:
        labels = [IssueLabel(id=1, name="bug"), IssueLabel(id=2, name="ui", description="Frontend")]
        milestone = IssueMilestone(id=9, name="v1.0")
        adapter.update_issue.return_value = issue

        assert set_issue_labels_milestones(adapter, project, issue, labels, milestone) is issue
        adapter.update_issue.assert_called_once_with(42, 7, add_labels=["bug", "ui"], milestone_id=9)

    def test_failure_propagates(self, adapter: MagicMock, project: Project, issue: Issue) -> None:
        adapter.update_issue.side_effect = GitPlatformError("403: Forbidden", status_code=403)
        with pytest.raises(GitPlatformError):
            set_issue_labels_milestones(adapter, project, issue, [IssueLabel(id=1, name="bug")], None)
