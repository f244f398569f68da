"""Expands the `tempfile` module.

Implements:
- `TemporaryDirectory`: A temporary directory yielding a `Path`.
- `StagingDirectory`: A named directory tree removed on every exit path.
"""

from __future__ import annotations

import logging
import os
import shutil
import tempfile
from pathlib import Path
from typing import TYPE_CHECKING, Any

from typing_extensions import override

if TYPE_CHECKING:
    from ppa_publisher.utils import StrPath

logger = logging.getLogger("ppa_publisher")


def _keep_dirs() -> bool:
    return bool(os.getenv("TMPDIR_DEBUG"))


class TemporaryDirectory(tempfile.TemporaryDirectory):
    """A temporary directory context manager.

    With `TMPDIR_DEBUG` set, the directory won't be removed.

    Attributes:
        path (Path): The path of the temporary directory.
    """

    def __init__(
        self,
        prefix: str | None = None,
        dir: StrPath | None = None,  # noqa: A002
    ) -> None:
        """Initialize the class.

        Args:
            prefix: The prefix of the temporary directory.
            dir: The directory to create the temporary directory in.
        """
        self.debug = _keep_dirs()
        super().__init__(prefix=prefix, dir=dir)
        self.path = Path(self.name)

        if self.debug:
            logger.warning(
                "Temporary directory created and won't be removed: %s", self.name
            )

    @override
    def __enter__(self) -> Path:  # type: ignore[override]
        """Changed from `str` to `Path`.

        Returns:
            The path of the temporary directory.
        """
        return self.path

    @classmethod
    def _cleanup(  # type: ignore[override]
        cls, name: str, warn_message: str, **kwargs: Any
    ) -> None:
        if _keep_dirs():
            logger.warning("Temporary directory %s not removed.", name)
        else:
            super()._cleanup(name, warn_message, **kwargs)  # type: ignore[misc]

    @override
    def cleanup(self) -> None:
        """Remove the temporary directory or warn if `TMPDIR_DEBUG` is set."""
        if self.debug:
            logger.warning("Temporary directory %s not removed.", self.name)
        else:
            super().cleanup()


class StagingDirectory:
    """Create `parent/name` and remove it when the context exits.

    Unlike `TemporaryDirectory` the name is fixed, as tools like `dpkg-deb`
    derive their output name from it. The directory is removed on success
    and on failure. With `TMPDIR_DEBUG` set, it is kept.

    Attributes:
        path (Path): The path of the staging directory.
    """

    def __init__(self, parent: StrPath, name: str) -> None:
        """Initialize the class.

        Args:
            parent: The existing directory to create the staging directory in.
            name: The name of the staging directory.

        Raises:
            FileExistsError: If the staging directory already exists.
        """
        self.path = Path(parent) / name
        if self.path.exists():
            raise FileExistsError(f"Staging directory {self.path} already exists.")

    def __enter__(self) -> Path:
        """Create the staging directory."""
        self.path.mkdir()
        return self.path

    def __exit__(self, *args: object) -> None:
        """Remove the staging directory."""
        self.cleanup()

    def cleanup(self) -> None:
        """Remove the staging directory or warn if `TMPDIR_DEBUG` is set."""
        if not self.path.exists():
            return
        if _keep_dirs():
            logger.warning("Staging directory %s not removed.", self.path)
            return
        logger.debug("Removing staging directory %s", self.path)
        shutil.rmtree(self.path)


__all__ = ["StagingDirectory", "TemporaryDirectory"]
