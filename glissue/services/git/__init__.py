"""Git operations: locate repository, resolve origin, read config."""

from glissue.services.git._run import GitRunnerError
from glissue.services.git.repository import (
    GitRepository,
    OriginRemote,
    OriginURLError,
    RemoteNotFoundError,
    RepositoryNotFoundError,
    find_repo,
    parse_origin_url,
)

__all__ = [
    "GitRepository",
    "GitRunnerError",
    "OriginRemote",
    "OriginURLError",
    "RemoteNotFoundError",
    "RepositoryNotFoundError",
    "find_repo",
    "parse_origin_url",
]
