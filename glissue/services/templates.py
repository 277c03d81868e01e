"""Issue templates: blank, local (~/.config/gitlab/issue_templates) and
remote (.gitlab/issue_templates in the project repository).

Order of the merged list: BLANK, then local templates in filename order,
then remote templates in tree order. Any failure aborts the whole listing.
"""

import logging
from pathlib import Path, PurePosixPath
from typing import List

from glissue.adapters.base import GitPlatformAdapter, GitPlatformError
from glissue.config import DEFAULT_REMOTE_TEMPLATES_PATH, DEFAULT_TEMPLATES_DIR
from glissue.models import LOCAL_TEMPLATE_SUFFIX, IssueTemplate, Project

TEMPLATE_EXTENSION = ".md"

log = logging.getLogger("glissue.templates")


class TemplateError(Exception):
    """Raised when issue templates cannot be listed or read."""

    pass


def list_local_templates(directory: Path | None = None) -> List[IssueTemplate]:
    """Read *.md files of the local template directory, creating it if
    absent."""
    directory = (directory or DEFAULT_TEMPLATES_DIR).expanduser()
    try:
        directory.mkdir(parents=True, exist_ok=True)
        entries = sorted(directory.iterdir(), key=lambda p: p.name)
    except OSError as e:
        raise TemplateError(f"could not use template dir {directory}: {e}") from e
    templates: List[IssueTemplate] = []
    for entry in entries:
        if not entry.name.endswith(TEMPLATE_EXTENSION):
            continue
        try:
            content = entry.read_bytes()
        except OSError as e:
            raise TemplateError(f"could not read file {entry.name}: {e}") from e
        name = entry.name.removesuffix(TEMPLATE_EXTENSION) + LOCAL_TEMPLATE_SUFFIX
        templates.append(IssueTemplate(name=name, content=content))
    return templates


def list_remote_templates(
    adapter: GitPlatformAdapter,
    project: Project,
    path: str = DEFAULT_REMOTE_TEMPLATES_PATH,
) -> List[IssueTemplate]:
    """Fetch *.md templates from the project's default branch.

    An empty repository (no default branch) has no remote templates. Any
    tree, file or decode failure, a missing directory included, raises
    TemplateError.
    """
    ref = project.default_branch
    if not ref:
        log.debug("Project %s has no default branch; no remote templates", project.path_with_namespace)
        return []
    try:
        nodes = adapter.list_tree(project.id, path=path, ref=ref)
    except GitPlatformError as e:
        raise TemplateError(f"error fetching files from {path}: {e}") from e
    templates: List[IssueTemplate] = []
    for node in nodes:
        node_path = node.get("path") or ""
        if node.get("type", "blob") != "blob" or not node_path.endswith(TEMPLATE_EXTENSION):
            continue
        try:
            content = adapter.get_file_content(project.id, node_path, ref=ref)
        except GitPlatformError as e:
            raise TemplateError(f"error fetching file {node_path} from {path}: {e}") from e
        name = PurePosixPath(node_path).name.removesuffix(TEMPLATE_EXTENSION)
        templates.append(IssueTemplate(name=name, content=content))
    return templates


def list_issue_templates(
    adapter: GitPlatformAdapter,
    project: Project,
    local_dir: Path | None = None,
    remote_path: str = DEFAULT_REMOTE_TEMPLATES_PATH,
) -> List[IssueTemplate]:
    """Return [BLANK] + local templates + remote templates.

    Raises:
        TemplateError: On any I/O, API or decode failure.
    """
    templates = [IssueTemplate.blank()]
    templates.extend(list_local_templates(local_dir))
    templates.extend(list_remote_templates(adapter, project, path=remote_path))
    return templates
