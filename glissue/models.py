"""Data models for templates, labels, milestones, projects and issues."""

from pathlib import Path
from typing import List

from pydantic import BaseModel, ConfigDict, Field

BLANK_TEMPLATE_NAME = "BLANK"
LOCAL_TEMPLATE_SUFFIX = " [local]"


class IssueTemplate(BaseModel):
    """Markdown skeleton used to seed a new issue.

    Three provenances: the blank template, a local file (name suffixed
    with " [local]") and a file stored in the project repository.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    content: bytes = b""

    @classmethod
    def blank(cls) -> "IssueTemplate":
        return cls(name=BLANK_TEMPLATE_NAME, content=b"")


class IssueLabel(BaseModel):
    """Project label."""

    model_config = ConfigDict(frozen=True)

    id: int
    name: str
    description: str = ""


class IssueMilestone(BaseModel):
    """Active project milestone (name is GitLab's milestone title)."""

    model_config = ConfigDict(frozen=True)

    id: int
    name: str


class Project(BaseModel):
    """GitLab project the issue is filed against."""

    model_config = ConfigDict(frozen=True)

    id: int
    path_with_namespace: str
    default_branch: str | None = None
    web_url: str = ""
    http_url_to_repo: str = ""


class Issue(BaseModel):
    """GitLab issue (id is global, iid is per project)."""

    id: int
    iid: int
    title: str
    description: str = ""
    web_url: str = ""
    labels: List[str] = Field(default_factory=list)
    milestone_id: int | None = None


class EditedIssue(BaseModel):
    """Title and description parsed from the edited draft.

    draft_path points at the draft file, which is removed only after the
    issue has been created from it.
    """

    title: str
    description: str = ""
    draft_path: Path | None = None
