"""Configuration loading from YAML and environment.

The GitLab token is taken from the environment (GITLAB_TOKEN) or from a
file named by GITLAB_TOKEN_FILE. Never put real tokens in config files
committed to a repo.
"""

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_CONFIG_PATH = Path("~/.config/gitlab/issue.yaml")
DEFAULT_TEMPLATES_DIR = Path("~/.config/gitlab/issue_templates")
DEFAULT_REMOTE_TEMPLATES_PATH = ".gitlab/issue_templates"


class ConfigError(Exception):
    """Raised when the config file cannot be read or is invalid."""

    pass


def _read_secret(env_key: str, file_env_key: str) -> str | None:
    """Read secret from env var or from file path in env (e.g. Docker
    secrets)."""
    value = _current_env.get(env_key)
    if value:
        return value.strip()
    file_path = _current_env.get(file_env_key)
    if file_path:
        return Path(file_path).read_text().strip()
    return None


# Injected by load_config so token resolution can read env/file
_current_env: dict[str, str] = {}


class GitLabConfig(BaseSettings):
    """GitLab API settings."""

    model_config = SettingsConfigDict(env_prefix="GITLAB_", extra="ignore")

    token: str | None = Field(default=None, description="Personal access token; use env or secret file")
    api_url: str | None = Field(
        default=None,
        description="API base URL; derived from the origin remote when unset",
    )
    timeout: int = Field(default=30, ge=1, description="HTTP timeout in seconds")
    per_page: int = Field(default=100, ge=1, le=100, description="Page size for list calls")


class TemplatesConfig(BaseSettings):
    """Where issue templates are looked up."""

    model_config = SettingsConfigDict(env_prefix="TEMPLATES_", extra="ignore")

    local_dir: Path = Field(default=DEFAULT_TEMPLATES_DIR, description="Directory of local *.md templates")
    remote_path: str = Field(
        default=DEFAULT_REMOTE_TEMPLATES_PATH,
        description="Path of templates inside the project repository",
    )

    @property
    def local_dir_resolved(self) -> Path:
        return self.local_dir.expanduser()


class LoggingConfig(BaseSettings):
    """Logging settings."""

    model_config = SettingsConfigDict(env_prefix="LOGGING_", extra="ignore")

    level: str = Field(default="INFO", description="Log level")
    format: str = Field(
        default="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        description="Log format",
    )


class AppConfig(BaseSettings):
    """Root application config from YAML + env."""

    model_config = SettingsConfigDict(extra="ignore")

    gitlab: GitLabConfig = Field(default_factory=GitLabConfig)
    templates: TemplatesConfig = Field(default_factory=TemplatesConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @property
    def gitlab_token_resolved(self) -> str | None:
        """Resolve GitLab token from config, env or secret file."""
        t = self.gitlab.token
        if t and not t.startswith("${"):
            return t
        return _read_secret("GITLAB_TOKEN", "GITLAB_TOKEN_FILE")


def _substitute_env(value: Any) -> Any:
    """Replace ${VAR} and $VAR in strings with os.environ."""
    if isinstance(value, str):
        if value.startswith("${") and value.endswith("}"):
            key = value[2:-1].strip()
            return _current_env.get(key, value)
        if value.startswith("$") and not value.startswith("${"):
            key = value[1:].strip()
            return _current_env.get(key, value)
        return value
    if isinstance(value, dict):
        return {k: _substitute_env(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_substitute_env(v) for v in value]
    return value


def default_config_path() -> Path:
    """Return $GLISSUE_CONFIG or ~/.config/gitlab/issue.yaml."""
    env_path = os.environ.get("GLISSUE_CONFIG")
    if env_path:
        return Path(env_path).expanduser()
    return DEFAULT_CONFIG_PATH.expanduser()


def load_config(config_path: Path | None = None) -> AppConfig:
    """Load config from YAML file and environment.

    A missing file yields defaults (plus env). Secrets: GITLAB_TOKEN or
    GITLAB_TOKEN_FILE.

    Raises:
        ConfigError: If the file is not valid YAML or fails validation.
    """
    global _current_env

    _current_env = dict(os.environ)

    path = config_path or default_config_path()
    if not path.is_file():
        return AppConfig()

    try:
        raw = yaml.safe_load(path.read_text()) or {}
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(f"could not read config {path}: {e}") from e
    if not isinstance(raw, dict):
        raise ConfigError(f"config {path} must be a mapping")
    raw = _substitute_env(raw)

    try:
        return AppConfig(
            gitlab=GitLabConfig(**(raw.get("gitlab") or {})),
            templates=TemplatesConfig(**(raw.get("templates") or {})),
            logging=LoggingConfig(**(raw.get("logging") or {})),
        )
    except ValueError as e:
        raise ConfigError(f"invalid config {path}: {e}") from e
