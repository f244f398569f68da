"""Register and run the PPA publishing task.

Implements:
- `TaskRegistry`: Named tasks, run on demand.
- `add_debian_tasks`: Register `pkg-debian-update` once.
- `update`: Build the package and update the PPA checkout.
"""

from __future__ import annotations

import functools
import logging
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Any

from ppa_publisher import git
from ppa_publisher.apt.build_deb import create_debian_package
from ppa_publisher.apt.build_repo import release_new_package
from ppa_publisher.utils import require_tools

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator

    from ppa_publisher.config import DebianConf

logger = logging.getLogger("ppa_publisher")

DEBIAN_UPDATE_TASK = "pkg-debian-update"
REQUIRED_TOOLS = (
    "git",
    "dpkg-deb",
    "dpkg-scanpackages",
    "gzip",
    "apt-ftparchive",
    "gpg",
)


class PlatformError(Exception):
    """Task is not supported on this platform."""


@dataclass(frozen=True)
class Task:
    """A named unit of work."""

    name: str
    function: Callable[[], Any]
    description: str = ""


class TaskRegistry:
    """Named tasks, each registered at most once."""

    def __init__(self) -> None:
        """Initialize an empty registry."""
        self._tasks: dict[str, Task] = {}

    def __contains__(self, name: object) -> bool:
        return name in self._tasks

    def __iter__(self) -> Iterator[Task]:
        return iter(self._tasks.values())

    def __len__(self) -> int:
        return len(self._tasks)

    def add_task(self, task: Task) -> None:
        """Register `task`.

        Raises:
            ValueError: If a task with the same name is registered.
        """
        if task.name in self._tasks:
            raise ValueError(f"Task {task.name} is already registered.")
        self._tasks[task.name] = task

    def run(self, name: str) -> Any:
        """Run the task `name` and return its result.

        Raises:
            KeyError: If no task `name` is registered.
        """
        try:
            task = self._tasks[name]
        except KeyError:
            raise KeyError(f"Unknown task: {name}") from None
        logger.info("Running task %s", name)
        return task.function()


REGISTRY = TaskRegistry()


def ensure_linux() -> None:
    """Fail unless running on Linux."""
    if not sys.platform.startswith("linux"):
        raise PlatformError(
            f"Platform must be linux for this task, not {sys.platform}."
        )


def add_debian_tasks(conf: DebianConf, registry: TaskRegistry = REGISTRY) -> None:
    """Add the task to create the new package and update the PPA.

    Calling this again for the same registry does nothing.

    Raises:
        PlatformError: If not running on Linux.
    """
    ensure_linux()

    if DEBIAN_UPDATE_TASK in registry:
        return

    registry.add_task(
        Task(
            DEBIAN_UPDATE_TASK,
            functools.partial(update, conf),
            description="Update the Debian package.",
        )
    )


def update(conf: DebianConf) -> Path:
    """Build the package and update the index of the PPA repository.

    Returns:
        The path of the PPA checkout.
    """
    require_tools(*REQUIRED_TOOLS, conf.compiler[0])

    workdir = Path(conf.workdir)
    workdir.mkdir(parents=True, exist_ok=True)
    repo = git.clone_or_pull(git.repo_url(conf.debian_repo, conf.github_url), workdir)

    create_debian_package(repo, conf)
    # signing_email is validated on construction
    release_new_package(repo, str(conf.signing_email), key=conf.key)

    logger.warning("Updated %s locally, commit and push it to publish.", repo)
    return repo


__all__ = [
    "DEBIAN_UPDATE_TASK",
    "REGISTRY",
    "PlatformError",
    "Task",
    "TaskRegistry",
    "add_debian_tasks",
    "ensure_linux",
    "update",
]
