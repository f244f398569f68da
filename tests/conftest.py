"""Fixtures standing in for the external packaging tools."""

from __future__ import annotations

import gzip
import hashlib
import subprocess
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import gnupg
import pytest

from ppa_publisher.config import DebianConf

CONTROL = """\
Package: mytool
Version: 1.2.3
Architecture: amd64
Maintainer: Jane Doe <jane@example.com>
Description: A tool.
"""


@dataclass
class Call:
    args: list[str]
    cwd: Path | None
    env: dict[str, str] | None


@dataclass
class FakeTools:
    """Replaces `subprocess.run` and emulates the tools on the filesystem."""

    calls: list[Call] = field(default_factory=list)
    fail: dict[str, str] = field(default_factory=dict)
    packed: dict[str, dict[str, str]] = field(default_factory=dict)

    @property
    def programs(self) -> list[str]:
        return [call.args[0] for call in self.calls]

    def __call__(self, args: list[str], **kwargs: Any) -> subprocess.CompletedProcess:
        cwd = Path(kwargs["cwd"]) if kwargs.get("cwd") is not None else None
        self.calls.append(Call(list(args), cwd, kwargs.get("env")))

        returncode, stdout, stderr = 0, "", ""
        for needle, message in self.fail.items():
            if needle in args:
                returncode, stderr = 1, message
                break
        else:
            handler = getattr(self, "_" + args[0].replace("-", "_"), None)
            stdout = (handler(args, cwd) if handler else "") or ""

        if not kwargs.get("text"):
            return subprocess.CompletedProcess(
                args, returncode, stdout.encode(), stderr.encode()
            )
        return subprocess.CompletedProcess(args, returncode, stdout, stderr)

    def _dart(self, args: list[str], cwd: Path | None) -> None:
        output = Path(args[args.index("--output") + 1])
        output.write_text(f"compiled {args[3]}", "utf-8")

    def _dpkg_deb(self, args: list[str], cwd: Path) -> None:
        staging = cwd / args[2]
        self.packed[args[2]] = {
            str(path.relative_to(staging)): path.read_text("utf-8")
            for path in sorted(staging.rglob("*"))
            if path.is_file()
        }
        (cwd / f"{args[2]}.deb").write_bytes(b"!<arch>\n")

    def _dpkg_scanpackages(self, args: list[str], cwd: Path) -> str:
        return "".join(
            f"Package: {deb.stem}\nFilename: ./{deb.name}\n\n"
            for deb in sorted(cwd.glob("*.deb"))
        )

    def _gzip(self, args: list[str], cwd: Path) -> None:
        source = cwd / args[-1]
        (cwd / f"{args[-1]}.gz").write_bytes(gzip.compress(source.read_bytes()))

    def _apt_ftparchive(self, args: list[str], cwd: Path) -> str:
        digest = hashlib.sha256((cwd / "Packages").read_bytes()).hexdigest()
        return f"Origin: test\nSHA256:\n {digest} Packages\n"

    def _gpg(self, args: list[str], cwd: Path) -> str:
        if "--import" in args:
            return ""
        if "--export-secret-keys" in args:
            return "SECRET KEY"
        if "--export" in args:
            return "PUBLIC KEY"
        release = (cwd / "Release").read_text("utf-8")
        mode = "clearsign" if "--clearsign" in args else "detached"
        return f"{mode}:{args[2]}\n{release}"

    def _git(self, args: list[str], cwd: Path) -> None:
        if args[1] == "clone":
            (cwd / args[3] / ".git").mkdir(parents=True)


@pytest.fixture(autouse=True)
def _no_tmpdir_debug(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("TMPDIR_DEBUG", raising=False)


@pytest.fixture
def tools(monkeypatch: pytest.MonkeyPatch) -> FakeTools:
    fake = FakeTools()
    monkeypatch.setattr(subprocess, "run", fake)
    return fake


@pytest.fixture
def conf(tmp_path: Path) -> DebianConf:
    return DebianConf(
        debian_repo="owner/ppa",
        control_data=CONTROL,
        standalone_name="mytool",
        version="1.2.3",
        executables={"mytool": "bin/mytool.dart"},
        signing_email="jane@example.com",
        environment_constants={"VERSION": "1.2.3"},
        project_dir=tmp_path / "project",
        workdir=tmp_path / "work",
    )


@pytest.fixture
def no_gnupg_init(monkeypatch: pytest.MonkeyPatch) -> None:
    """Let `GPG2` be created without looking up a gpg binary."""
    monkeypatch.setattr(gnupg.GPG, "__init__", lambda self, **kwargs: None)
