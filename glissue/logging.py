"""Progress and error output for a glissue run.

Everything goes to stderr through the root logger, so the editor and the
selector keep the terminal. What shows at each level:

- ERROR: the reason a run stopped (and where the draft was kept)
- WARNING: labels or milestones that could not be fetched
- INFO: origin, project, templates, created issue URL, labels/milestone set
- DEBUG: every GitLab request and git invocation, plus urllib3 connection noise

Level and format come from the ``logging`` section of issue.yaml or from
LOGGING_LEVEL / LOGGING_FORMAT.
"""

import logging

from glissue.config import LoggingConfig

LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
}

DEFAULT_LEVEL = "INFO"
DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# HTTP client loggers; at INFO they would interleave connection chatter with
# the progress lines.
HTTP_LOGGERS = ("urllib3", "requests")


def _resolve_level(level: str) -> int:
    """Unknown names fall back to INFO."""
    return LEVELS.get(level.upper().strip(), logging.INFO)


class GlissueLogging:
    """Root logger setup from LoggingConfig."""

    def __init__(self, config: LoggingConfig) -> None:
        self._level = _resolve_level(config.level)
        self._format = config.format or DEFAULT_FORMAT

    def setup(self) -> None:
        """Replace any earlier handlers, then quiet the HTTP client loggers
        unless running at DEBUG."""
        logging.basicConfig(
            level=self._level,
            format=self._format,
            force=True,
        )
        http_level = logging.DEBUG if self._level == logging.DEBUG else logging.WARNING
        for name in HTTP_LOGGERS:
            logging.getLogger(name).setLevel(http_level)
