"""Locate the enclosing repository and resolve its origin remote."""

import logging
import re
from dataclasses import dataclass
from pathlib import Path
from urllib.parse import urlsplit

from glissue.services.git._run import GitRunnerError, _run_git

# git's scp-like shorthand for ssh: [user@]host:path (no scheme, no "//")
_SCP_LIKE_RE = re.compile(r"^(?:(?P<user>[^@/]+)@)?(?P<host>[^:/]+):(?P<path>[^/].*)$")

# `git config --get` exits with 1 when the key is not set
_CONFIG_KEY_MISSING = 1


class RepositoryNotFoundError(Exception):
    """Raised when no git repository encloses the given path."""

    pass


class RemoteNotFoundError(Exception):
    """Raised when the repository has no such remote."""

    pass


class OriginURLError(Exception):
    """Raised when the origin URL cannot be parsed into host and path."""

    pass


@dataclass(frozen=True)
class OriginRemote:
    """Origin URL and what is derived from it."""

    url: str
    host: str
    project_path: str

    @property
    def api_url(self) -> str:
        """GitLab API base; https is forced whatever the remote scheme."""
        return f"https://{self.host}/api/v4"


def parse_origin_url(url: str) -> OriginRemote:
    """Parse a remote URL into host and project path (leading "/", no
    ".git").

    Accepts scheme URLs (https://, ssh://, git://) and the scp-like
    form user@host:group/project.git.

    Raises:
        OriginURLError: If no host or no path can be found.
    """
    raw = url.strip()
    if "://" not in raw:
        m = _SCP_LIKE_RE.match(raw)
        if not m:
            raise OriginURLError(f"could not parse origin URL {url!r}")
        host = m.group("host")
        path = "/" + m.group("path")
    else:
        try:
            parts = urlsplit(raw)
            # Accessing .port validates it
            port = parts.port
        except ValueError as e:
            raise OriginURLError(f"could not parse origin URL {url!r}: {e}") from e
        if not parts.hostname:
            raise OriginURLError(f"origin URL {url!r} has no host")
        host = parts.hostname if port is None else f"{parts.hostname}:{port}"
        path = parts.path
    project_path = path.removesuffix(".git")
    if project_path.strip("/") == "":
        raise OriginURLError(f"origin URL {url!r} has no project path")
    return OriginRemote(url=url, host=host, project_path=project_path)


class GitRepository:
    """Handle on a local repository (its root directory)."""

    def __init__(self, root: Path, log: logging.Logger | None = None) -> None:
        self.root = root
        self._log = log or logging.getLogger("glissue.git")

    def __repr__(self) -> str:
        return f"GitRepository({str(self.root)!r})"

    def remote_urls(self, name: str = "origin") -> list[str]:
        """Return the configured URLs of a remote.

        Raises:
            RemoteNotFoundError: If the remote has no URL configured.
        """
        try:
            out = _run_git(["config", "--get-all", f"remote.{name}.url"], cwd=self.root, log=self._log)
        except GitRunnerError as e:
            if e.returncode == _CONFIG_KEY_MISSING:
                raise RemoteNotFoundError(f"remote {name!r} not found") from e
            raise
        urls = [line.strip() for line in out.splitlines() if line.strip()]
        if not urls:
            raise RemoteNotFoundError(f"remote {name!r} not found")
        return urls

    def origin_remote(self) -> OriginRemote:
        """Resolve the first URL of the "origin" remote."""
        return parse_origin_url(self.remote_urls("origin")[0])

    def global_config(self, key: str) -> str | None:
        """Return a value from the user's global git config, or None if
        unset."""
        try:
            out = _run_git(["config", "--global", "--get", key], cwd=self.root, log=self._log)
        except GitRunnerError as e:
            if e.returncode == _CONFIG_KEY_MISSING:
                return None
            raise
        return out.rstrip("\n")


def _is_repository_root(path: Path) -> bool:
    """True if path holds a .git directory (or a .git file, for worktrees)."""
    return (path / ".git").exists()


def find_repo(path: Path, log: logging.Logger | None = None) -> GitRepository:
    """Walk up from path until a repository root is found.

    Raises:
        RepositoryNotFoundError: If the filesystem root is reached first.
    """
    start = Path(path).resolve()
    root = _find_root(start)
    if root is None:
        raise RepositoryNotFoundError(f"no git repository in {str(start)!r} or any parent")
    return GitRepository(root, log=log)


def _find_root(path: Path) -> Path | None:
    if _is_repository_root(path):
        return path
    if path.parent == path:
        return None
    return _find_root(path.parent)
