"""Internal helpers: run git commands, GitRunnerError."""

import logging
import subprocess
from pathlib import Path


class GitRunnerError(Exception):
    """Raised when a git command fails."""

    def __init__(self, message: str, returncode: int | None = None) -> None:
        super().__init__(message)
        self.returncode = returncode


def _run_git(args: list[str], cwd: Path, log: logging.Logger | None = None) -> str:
    """Run git command and return its stdout; raise GitRunnerError on non-zero
    exit."""
    cmd = ["git"] + args
    try:
        result = subprocess.run(cmd, cwd=cwd, check=True, capture_output=True, text=True, timeout=60)
    except subprocess.CalledProcessError as e:
        err = (e.stderr or e.stdout or "").strip()
        if log:
            log.debug("Git %s failed (%s): %s", args, e.returncode, err)
        raise GitRunnerError(f"git {' '.join(args)}: {err or f'exit code {e.returncode}'}", e.returncode) from e
    except FileNotFoundError as e:
        raise GitRunnerError("git not found") from e
    return result.stdout
