"""Key generation and signing functions.

Implements:
- `create_priv_key`: Create a PGP key for signing the PPA.
- `sign_release`: Sign the Release file and create the InRelease file.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import TYPE_CHECKING

import gnupg

from ppa_publisher.temp import TemporaryDirectory
from ppa_publisher.utils import run_cmd, run_cmd_bytes

if TYPE_CHECKING:
    from ppa_publisher.utils import StrPath

logger = logging.getLogger("ppa_publisher")


class KeyCreationError(Exception):
    """Key creation failed."""


class GPG2(gnupg.GPG):
    """GPG class with additional methods.

    Attributes:
        home (Path): The GPG home directory, exported as GNUPGHOME.
        gpg_binary (str): The gpg executable for the additional methods.
    """

    def __init__(self, homedir: StrPath, binary: str = "gpg") -> None:
        """Initialize the class for the home directory `homedir`."""
        self.home = Path(homedir)
        self.gpg_binary = binary
        super().__init__(binary=binary, homedir=str(homedir))

    def _environ(self) -> dict[str, str]:
        environ = os.environ.copy()
        environ["GNUPGHOME"] = str(self.home)
        return environ

    def import_priv_key(self, path: StrPath) -> None:
        """Import a GPG key from a file into the specified GPG context."""
        run_cmd(
            [
                self.gpg_binary,
                "--batch",
                "--import",
                Path(path).expanduser().resolve(),
            ],
            env=self._environ(),
        )

    def export_key(
        self,
        output: StrPath,
        secret: bool = False,
        armor: bool = True,
        keyid: str | None = None,
    ) -> None:
        """Export a key (all keys if `keyid` is None) to a file."""
        export_flag = "--export-secret-keys" if secret else "--export"
        cmd_args = [self.gpg_binary, "--batch", export_flag]
        if armor:
            cmd_args.append("--armor")
        if keyid:
            cmd_args.append(keyid)
        stdout = run_cmd_bytes(cmd_args, env=self._environ())
        Path(output).write_bytes(stdout)


class TempGPG:
    """Create a temporary GPG home directory.

    Attributes:
        dir (Path, optional): The directory to create the temporary directory.
    """

    def __init__(
        self,
        dir: StrPath | None = None,  # noqa: A002
    ) -> None:
        """Initialize the TempGPG class.

        Args:
            dir (Path, optional): The directory to create the temporary directory.
                Defaults to None.
        """
        self._tmp: TemporaryDirectory | None = None
        self.dir = Path(dir) if dir else None

    def __enter__(self) -> GPG2:
        """Create the temporary GPG home directory.

        Returns:
            GPG2: The GPG object.
        """
        self._tmp = TemporaryDirectory(prefix="tmp_TempGPG_", dir=self.dir)
        pgp_tmp = self._tmp.path / "gnupg"
        pgp_tmp.mkdir(mode=0o700)

        return GPG2(homedir=pgp_tmp)

    def __exit__(self, *args: object) -> None:
        """Cleanup the temporary directory."""
        if not self._tmp:
            return

        self._tmp.cleanup()


def create_priv_key(
    priv_file: StrPath, name: str, email: str, tmp: StrPath | None = None
) -> None:
    """Create a PGP key.

    Args:
        priv_file (Path): The path to the private key file.
        name: The real name of the key owner.
        email: The email of the key, used as `signing_email` afterwards.
        tmp (Path, optional): The temporary directory path. Defaults to None.

    Raises:
        FileExistsError: If the private key file already exists.
        KeyCreationError: If the key creation failed.
    """
    priv_file = Path(priv_file)
    if priv_file.exists():
        raise FileExistsError(f"{priv_file} already exists.")

    with TempGPG(tmp) as gpg:
        input_data = gpg.gen_key_input(
            Key_Type="RSA",
            Key_Length=4096,
            Name_Real=name,
            Name_Email=email,
            Expire_Date=0,
            no_protection=True,
        )
        key = gpg.gen_key(input_data)

        if key is None:
            raise KeyCreationError("GPG returned None.")

        gpg.export_key(output=priv_file, secret=True, armor=False)

        if not priv_file.exists():
            raise KeyCreationError(f"No file at {priv_file}")
        if not priv_file.stat().st_size:
            priv_file.unlink()
            raise KeyCreationError(f"File at {priv_file} is empty.")

    logger.warning("Created key file at %s", priv_file)


def sign_release(
    repo: StrPath, signing_email: str, gnupghome: StrPath | None = None
) -> tuple[Path, Path]:
    """Write `Release.gpg` and `InRelease` for the Release file in `repo`.

    Args:
        repo: The repository root holding the Release file.
        signing_email: The key to sign with.
        gnupghome: The GPG home directory. Defaults to the user's.

    Returns:
        The paths of the detached and the clear-signed signature.

    Raises:
        FileNotFoundError: If there is no Release file.
        CommandError: If gpg fails.
    """
    repo = Path(repo)
    release = repo / "Release"
    if not release.is_file():
        raise FileNotFoundError(f"No Release file in {repo}")

    env = None
    if gnupghome is not None:
        env = os.environ.copy()
        env["GNUPGHOME"] = str(gnupghome)

    # -abs: --armor --detach-sign --sign
    detached = run_cmd(
        ["gpg", "--default-key", signing_email, "-abs", "-o", "-", "Release"],
        cwd=repo,
        env=env,
    )
    release_gpg = repo / "Release.gpg"
    release_gpg.write_text(detached, "utf-8")

    # --clearsign: make a clear text signature
    clearsigned = run_cmd(
        ["gpg", "--default-key", signing_email, "--clearsign", "-o", "-", "Release"],
        cwd=repo,
        env=env,
    )
    inrelease = repo / "InRelease"
    inrelease.write_text(clearsigned, "utf-8")

    logger.debug("Signed %s with %s", release, signing_email)
    return release_gpg, inrelease


__all__ = [
    "GPG2",
    "KeyCreationError",
    "TempGPG",
    "create_priv_key",
    "sign_release",
]
