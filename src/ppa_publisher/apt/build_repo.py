"""Update the index and signature files of a flat apt repository."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

from ppa_publisher.gpg import TempGPG, sign_release
from ppa_publisher.utils import run_cmd

if TYPE_CHECKING:
    from ppa_publisher.utils import StrPath

logger = logging.getLogger("ppa_publisher")


def update_packages_file(repo: StrPath) -> Path:
    """Scan `repo` for packages and write `Packages` and `Packages.gz`."""
    repo = Path(repo)
    output = run_cmd(["dpkg-scanpackages", "--multiversion", "."], cwd=repo)
    packages_file = repo / "Packages"
    packages_file.write_text(output, "utf-8")
    # -k keeps Packages next to Packages.gz
    run_cmd(["gzip", "-k", "-f", "Packages"], cwd=repo)
    return packages_file


def update_release_file(repo: StrPath) -> Path:
    """Generate the Release index for `repo`."""
    repo = Path(repo)
    output = run_cmd(["apt-ftparchive", "release", "."], cwd=repo)
    release_file = repo / "Release"
    release_file.write_text(output, "utf-8")
    return release_file


def release_new_package(
    repo: StrPath,
    signing_email: str,
    key: StrPath | None = None,
    pub_file: StrPath | None = None,
) -> None:
    """Scan `repo` for packages, update the release files and sign them.

    Args:
        repo: The repository root.
        signing_email: The key to sign with.
        key: A private key file. If set, signing happens in a temporary
            keyring holding only this key.
        pub_file: Where to export the public key to. Not exported if None.
    """
    repo = Path(repo)
    logger.info("Updating the index of %s", repo)
    update_packages_file(repo)
    update_release_file(repo)

    if key is None:
        sign_release(repo, signing_email)
        if pub_file is not None:
            Path(pub_file).write_text(
                run_cmd(["gpg", "--armor", "--export", signing_email]), "utf-8"
            )
        return

    with TempGPG() as gpg:
        logger.debug("Signing with %s in a temporary keyring", key)
        gpg.import_priv_key(key)
        sign_release(repo, signing_email, gnupghome=gpg.home)
        if pub_file is not None:
            gpg.export_key(pub_file, secret=False, armor=True, keyid=signing_email)


__all__ = ["release_new_package", "update_packages_file", "update_release_file"]
