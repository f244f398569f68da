"""CLI interface for the ppa_publisher.apt package."""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import TYPE_CHECKING

from ppa_publisher.apt.build_repo import release_new_package
from ppa_publisher.config import ConfigError, load_conf
from ppa_publisher.gpg import KeyCreationError, create_priv_key
from ppa_publisher.tasks import (
    DEBIAN_UPDATE_TASK,
    REGISTRY,
    PlatformError,
    add_debian_tasks,
    ensure_linux,
)
from ppa_publisher.utils import CommandError, ToolNotFoundError

if TYPE_CHECKING:
    from collections.abc import Sequence

logger = logging.getLogger("ppa_publisher")

ERRORS = (
    CommandError,
    ConfigError,
    FileExistsError,
    KeyCreationError,
    PlatformError,
    ToolNotFoundError,
)


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(level=logging.DEBUG if verbose else logging.INFO)


def _add_verbose(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Log every command"
    )


def parse_debian_update_args(
    argv: Sequence[str] | None = None,
) -> argparse.Namespace:
    """Parse CLI arguments."""
    parser = argparse.ArgumentParser(
        description="Build the Debian package and update the PPA repository."
    )
    parser.add_argument("config", type=Path, help="YAML configuration file")
    parser.add_argument(
        "-w", "--workdir", type=Path, help="Directory to clone the PPA repository in"
    )
    parser.add_argument(
        "-k", "--key", type=Path, help="Private key for signing the repository"
    )
    parser.add_argument(
        "-m",
        "--signing-email",
        type=str,
        help="Key to sign with (settable by PPA_SIGNING_EMAIL)",
    )
    parser.add_argument("--version", type=str, help="Version of the package")
    _add_verbose(parser)
    return parser.parse_args(argv)


def debian_update_cli(argv: Sequence[str] | None = None) -> int:
    """Build the package and update the PPA from CLI arguments."""
    args = parse_debian_update_args(argv)
    _setup_logging(args.verbose)
    try:
        ensure_linux()
        conf = load_conf(
            args.config,
            workdir=args.workdir,
            key=args.key,
            signing_email=args.signing_email,
            version=args.version,
        )
        add_debian_tasks(conf, REGISTRY)
        REGISTRY.run(DEBIAN_UPDATE_TASK)
    except ERRORS as err:
        logger.error("%s", err)  # noqa: TRY400
        return 1
    return 0


def release_cli(argv: Sequence[str] | None = None) -> int:
    """Update the index and signatures of an existing PPA checkout."""
    parser = argparse.ArgumentParser(
        description="Update the index and signature files of a PPA repository."
    )
    parser.add_argument("repo", type=Path, help="Directory of the repository")
    parser.add_argument(
        "-m", "--signing-email", type=str, required=True, help="Key to sign with"
    )
    parser.add_argument(
        "-k", "--key", type=Path, help="Private key for signing the repository"
    )
    parser.add_argument(
        "-p", "--pub-file", type=Path, help="Export the public key to this file"
    )
    _add_verbose(parser)
    args = parser.parse_args(argv)
    _setup_logging(args.verbose)

    try:
        ensure_linux()
        release_new_package(args.repo, args.signing_email, args.key, args.pub_file)
    except ERRORS as err:
        logger.error("%s", err)  # noqa: TRY400
        return 1
    return 0


def create_key_cli(argv: Sequence[str] | None = None) -> int:
    """Create a private key for signing the PPA."""
    parser = argparse.ArgumentParser(description="Create a signing key for a PPA.")
    parser.add_argument("priv_file", type=Path, help="Target private key file")
    parser.add_argument("-n", "--name", type=str, required=True, help="Real name")
    parser.add_argument("-m", "--email", type=str, required=True, help="Key email")
    _add_verbose(parser)
    args = parser.parse_args(argv)
    _setup_logging(args.verbose)

    try:
        create_priv_key(args.priv_file, args.name, args.email)
    except ERRORS as err:
        logger.error("%s", err)  # noqa: TRY400
        return 1
    return 0


__all__ = [
    "create_key_cli",
    "debian_update_cli",
    "parse_debian_update_args",
    "release_cli",
]
