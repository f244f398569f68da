"""Utilities for the ppa-publisher package.

Implements:
- `run_cmd`, `run_cmd_bytes`: Run an external tool and return its stdout.
- `require_tools`: Check that the external tools are available.
"""

from __future__ import annotations

import logging
import shutil
import subprocess
from os import PathLike
from typing import TYPE_CHECKING, Any, TypeAlias

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

logger = logging.getLogger("ppa_publisher")

StrPath: TypeAlias = str | PathLike[str]


class CommandError(Exception):
    """External command exited with a non-zero code.

    Attributes:
        cmd: The command that failed.
        returncode: The exit code.
        stderr: The standard error of the command.
    """

    def __init__(self, args: Sequence[str], returncode: int, stderr: str) -> None:
        """Initialize the error with the failing command."""
        self.cmd = list(args)
        self.returncode = returncode
        self.stderr = stderr
        super().__init__(
            f"{' '.join(self.cmd)} exited with code {returncode}\n{stderr}"
        )


class ToolNotFoundError(Exception):
    """Required tool is not on PATH."""


def _run(
    args: Sequence[StrPath],
    cwd: StrPath | None,
    env: Mapping[str, str] | None,
    text: bool,
) -> subprocess.CompletedProcess[Any]:
    cmd_args = [str(arg) for arg in args]
    logger.debug("Running %s (cwd=%s)", cmd_args, cwd or ".")
    result = subprocess.run(  # noqa: S603
        cmd_args,
        cwd=cwd,
        env=dict(env) if env is not None else None,
        capture_output=True,
        text=text,
        check=False,
    )
    if result.returncode != 0:
        stderr = result.stderr
        if isinstance(stderr, bytes):
            stderr = stderr.decode("utf-8", errors="replace")
        raise CommandError(cmd_args, result.returncode, stderr or "")
    return result


def run_cmd(
    args: Sequence[StrPath],
    cwd: StrPath | None = None,
    env: Mapping[str, str] | None = None,
) -> str:
    """Run a command and return its standard output.

    Args:
        args: The command and its arguments.
        cwd: The working directory. Defaults to the current one.
        env: The environment. Defaults to the current one.

    Returns:
        The standard output of the command.

    Raises:
        CommandError: If the command exits with a non-zero code.
    """
    return _run(args, cwd, env, text=True).stdout


def run_cmd_bytes(
    args: Sequence[StrPath],
    cwd: StrPath | None = None,
    env: Mapping[str, str] | None = None,
) -> bytes:
    """Like `run_cmd`, for tools writing binary output."""
    return _run(args, cwd, env, text=False).stdout


def require_tools(*names: str) -> None:
    """Fail if any of the tools can't be found on PATH."""
    missing = [name for name in names if shutil.which(name) is None]
    if missing:
        raise ToolNotFoundError(f"Required tools not found: {', '.join(missing)}")


__all__ = [
    "CommandError",
    "StrPath",
    "ToolNotFoundError",
    "require_tools",
    "run_cmd",
    "run_cmd_bytes",
]
