"""Build a Debian package and update the index of a PPA repository."""

from __future__ import annotations

from ppa_publisher import git
from ppa_publisher.config import ConfigError, DebianConf, load_conf
from ppa_publisher.gpg import GPG2, TempGPG, create_priv_key, sign_release
from ppa_publisher.tasks import (
    DEBIAN_UPDATE_TASK,
    REGISTRY,
    PlatformError,
    Task,
    TaskRegistry,
    add_debian_tasks,
    update,
)
from ppa_publisher.temp import StagingDirectory, TemporaryDirectory
from ppa_publisher.utils import CommandError, ToolNotFoundError, run_cmd

__all__ = [
    "DEBIAN_UPDATE_TASK",
    "GPG2",
    "REGISTRY",
    "CommandError",
    "ConfigError",
    "DebianConf",
    "PlatformError",
    "StagingDirectory",
    "Task",
    "TaskRegistry",
    "TempGPG",
    "TemporaryDirectory",
    "ToolNotFoundError",
    "add_debian_tasks",
    "create_priv_key",
    "git",
    "load_conf",
    "run_cmd",
    "sign_release",
    "update",
]
