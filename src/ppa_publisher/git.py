"""Git utilities for the PPA repository.

Implements:
- `repo_url`: Resolve a repository slug to a clone URL.
- `clone_or_pull`: Clone a repository or update an existing checkout.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

from ppa_publisher.utils import run_cmd

if TYPE_CHECKING:
    from ppa_publisher.utils import StrPath

logger = logging.getLogger("ppa_publisher")


def repo_url(slug: str, base: str = "https://github.com") -> str:
    """Return the clone URL for `owner/repo` on `base`."""
    return f"{base.rstrip('/')}/{slug}.git"


def _checkout_name(url: str) -> str:
    name = url.rstrip("/").rsplit("/", maxsplit=1)[-1]
    return name.removesuffix(".git")


def clone_or_pull(url: str, dest: StrPath) -> Path:
    """Clone `url` into `dest` or pull if the checkout already exists.

    Args:
        url: The repository URL.
        dest: The parent directory of the checkout.

    Returns:
        The path of the checkout.

    Raises:
        ValueError: If `dest` is not a directory.
        CommandError: If git fails.
    """
    dest = Path(dest)
    if not dest.is_dir():
        raise ValueError(f"Destination {dest} is not a directory.")

    name = _checkout_name(url)
    checkout = dest / name

    if (checkout / ".git").is_dir():
        logger.debug("Pulling %s in %s", url, checkout)
        run_cmd(["git", "pull"], cwd=checkout)
    else:
        logger.debug("Cloning %s into %s", url, checkout)
        run_cmd(["git", "clone", url, name], cwd=dest)

    return checkout


__all__ = ["clone_or_pull", "repo_url"]
