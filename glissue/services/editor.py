"""Editor session: write a draft, open it in the user's editor, parse the
result.

The draft is "\\n\\n" + template content. After editing, the first line is
the issue title and the rest is the description. The draft file is left
on disk whenever something fails so the text can be recovered; it is
removed only after the issue has been created (see services.issues).
"""

import logging
import os
import re
import subprocess
import tempfile
from pathlib import Path
from typing import List, Tuple

from glissue.models import EditedIssue, IssueTemplate, Project
from glissue.services.git import GitRepository, GitRunnerError

DEFAULT_EDITOR = "vi"
DRAFT_PREFIX = b"\n\n"

_SLUG_RE = re.compile(r"[^A-Za-z0-9]+")

log = logging.getLogger("glissue.editor")


class EditorError(Exception):
    """Raised when the editor cannot be resolved, spawned, or exits non-zero."""

    pass


class IssueContentError(Exception):
    """Raised when the edited draft cannot become an issue."""

    pass


def _slug(text: str) -> str:
    return _SLUG_RE.sub("-", text).strip("-").lower() or "issue"


class IssueDraft:
    """Temporary file holding the issue text while it is being edited."""

    def __init__(self, path: Path, initial: bytes) -> None:
        self.path = path
        self.initial = initial

    @classmethod
    def create(
        cls,
        project: Project,
        template: IssueTemplate,
        directory: Path | None = None,
    ) -> "IssueDraft":
        """Create a uniquely named draft prefilled with the template and
        synced to disk."""
        prefix = f"glissue-{_slug(project.path_with_namespace)}-{_slug(template.name)}-"
        initial = DRAFT_PREFIX + template.content
        try:
            fd, name = tempfile.mkstemp(prefix=prefix, suffix=".md", dir=directory)
            with os.fdopen(fd, "wb") as f:
                f.write(initial)
                f.flush()
                os.fsync(f.fileno())
        except OSError as e:
            raise EditorError(f"could not create issue draft: {e}") from e
        return cls(Path(name), initial)

    def read(self) -> bytes:
        try:
            return self.path.read_bytes()
        except OSError as e:
            raise IssueContentError(f"could not read draft {self.path}: {e}") from e

    def remove(self) -> None:
        self.path.unlink(missing_ok=True)


def get_editor(repo: GitRepository) -> str:
    """Resolve the editor: $GIT_EDITOR, git core.editor (global), $VISUAL,
    $EDITOR, then vi."""
    editor = os.environ.get("GIT_EDITOR")
    if editor:
        return editor
    try:
        editor = repo.global_config("core.editor")
    except GitRunnerError as e:
        raise EditorError(f"could not get git config: {e}") from e
    if editor:
        return editor
    for var in ("VISUAL", "EDITOR"):
        editor = os.environ.get(var)
        if editor:
            return editor
    return DEFAULT_EDITOR


def split_editor_command(editor: str) -> List[str]:
    """Split an editor string on spaces.

    Shell quoting is not supported: "code --wait" works, a path with
    spaces does not.
    """
    command = [part for part in editor.split(" ") if part]
    if not command:
        raise EditorError(f"empty editor command {editor!r}")
    return command


def run_editor(command: List[str], path: Path) -> None:
    """Run the editor on path in the foreground and wait for it to exit."""
    cmd = command + [str(path)]
    log.debug("Running editor: %s", cmd)
    try:
        result = subprocess.run(cmd, check=False)
    except OSError as e:
        raise EditorError(f"error running editor {command[0]!r}: {e}") from e
    if result.returncode != 0:
        raise EditorError(f"editor {command[0]!r} exited with code {result.returncode}")


def parse_issue_content(content: bytes, original: bytes) -> Tuple[str, str]:
    """Split edited content into (title, description) at the first newline.

    Raises:
        IssueContentError: If content is unchanged, is not UTF-8, or the
            title is empty.
    """
    if content == original:
        raise IssueContentError("content of issue has not been changed")
    try:
        text = content.decode("utf-8")
    except UnicodeDecodeError as e:
        raise IssueContentError(f"issue draft is not valid UTF-8: {e}") from e
    title, _, description = text.partition("\n")
    title = title.rstrip("\r")
    if not title:
        raise IssueContentError("empty issue title")
    return title, description


def run_editor_session(
    repo: GitRepository,
    project: Project,
    template: IssueTemplate,
    draft_dir: Path | None = None,
) -> EditedIssue:
    """Prefill a draft from template, let the user edit it, parse the result.

    On failure after the draft exists, the draft is kept and its path
    logged.
    """
    draft = IssueDraft.create(project, template, directory=draft_dir)
    try:
        command = split_editor_command(get_editor(repo))
        run_editor(command, draft.path)
        title, description = parse_issue_content(draft.read(), draft.initial)
    except (EditorError, IssueContentError):
        log.warning("Issue draft kept at %s", draft.path)
        raise
    return EditedIssue(title=title, description=description, draft_path=draft.path)
