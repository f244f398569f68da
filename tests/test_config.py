"""Test for the configuration."""

from __future__ import annotations

import dataclasses
from pathlib import Path
from typing import Any

import pytest
from conftest import CONTROL

from ppa_publisher.config import ConfigError, DebianConf, load_conf

REQUIRED: dict[str, Any] = {
    "debian_repo": "owner/ppa",
    "control_data": CONTROL,
    "standalone_name": "mytool",
    "version": "1.2.3",
    "executables": {"mytool": "bin/mytool.dart"},
    "signing_email": "jane@example.com",
}

CONFIG_YAML = """\
debianRepo: owner/ppa
signing-email: jane@example.com
standalone_name: mytool
version: 1.2.3
controlData: |
  Package: mytool
  Version: {{ version }}
executables:
  mytool: bin/mytool.dart
  mytool-server: bin/server.dart
environmentConstants:
  RELEASE: true
  BUILD: 42
workdir: work
"""


def test_package_name() -> None:
    """Test the package name joins name and version."""
    assert DebianConf(**REQUIRED).package_name == "mytool_1.2.3"


@pytest.mark.parametrize(
    ("key", "value", "message"),
    [
        ("debian_repo", "", "debian_repo must be set"),
        ("debian_repo", "no-slash", "owner/repo"),
        ("signing_email", None, "signing_email must be set"),
        ("control_data", "", "control_data must be set"),
        ("executables", {}, "at least one entry"),
        ("executables", {"my tool": "a.dart"}, "Invalid executable name"),
        ("version", "not a version", "Invalid version"),
        ("standalone_name", "my tool", "must not contain"),
    ],
)
def test_invalid_conf(key: str, value: object, message: str) -> None:
    """Test misconfiguration fails on construction."""
    with pytest.raises(ConfigError, match=message):
        DebianConf(**{**REQUIRED, key: value})


def test_signing_email_from_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Test the signing email defaults to PPA_SIGNING_EMAIL."""
    monkeypatch.setenv("PPA_SIGNING_EMAIL", "env@example.com")
    kwargs = {k: v for k, v in REQUIRED.items() if k != "signing_email"}
    assert DebianConf(**kwargs).signing_email == "env@example.com"


def test_conf_is_frozen() -> None:
    """Test the configuration can't change after construction."""
    executables = {"mytool": "bin/mytool.dart"}
    conf = DebianConf(**{**REQUIRED, "executables": executables})
    executables["other"] = "other.dart"

    with pytest.raises(dataclasses.FrozenInstanceError):
        conf.signing_email = "other@example.com"  # type: ignore[misc]
    with pytest.raises(TypeError):
        conf.executables["other"] = "other.dart"  # type: ignore[index]
    assert list(conf.executables) == ["mytool"]


def test_load_conf(tmp_path: Path) -> None:
    """Test loading YAML with camelCase and kebab-case keys."""
    config = tmp_path / "ppa.yaml"
    config.write_text(CONFIG_YAML, "utf-8")

    conf = load_conf(config)

    assert conf.debian_repo == "owner/ppa"
    assert conf.signing_email == "jane@example.com"
    assert conf.control_data == "Package: mytool\nVersion: {{ version }}\n"
    assert list(conf.executables) == ["mytool", "mytool-server"]
    assert dict(conf.environment_constants) == {"RELEASE": "true", "BUILD": "42"}
    assert conf.project_dir == tmp_path.resolve()
    assert conf.workdir == tmp_path.resolve() / "work"


def test_load_conf_overrides(tmp_path: Path) -> None:
    """Test non-None overrides replace the file's values."""
    config = tmp_path / "ppa.yaml"
    config.write_text(CONFIG_YAML, "utf-8")

    conf = load_conf(config, version="2.0.0", key=None, compiler=("dart2native",))

    assert conf.package_name == "mytool_2.0.0"
    assert conf.key is None
    assert conf.compiler == ("dart2native",)


@pytest.mark.parametrize(
    ("content", "message"),
    [
        ("debianRepo: owner/ppa\nunknownKey: 1\n", "Unknown keys"),
        ("- a\n- b\n", "must contain a mapping"),
        ("debianRepo: owner/ppa\n", "Incomplete configuration"),
        ("debianRepo: [owner\n", "Unable to parse"),
    ],
)
def test_load_conf_errors(tmp_path: Path, content: str, message: str) -> None:
    """Test invalid files raise ConfigError."""
    config = tmp_path / "ppa.yaml"
    config.write_text(content, "utf-8")
    with pytest.raises(ConfigError, match=message):
        load_conf(config)


def test_render_control_validates_template() -> None:
    """Test a broken template only fails when rendering is enabled."""
    control = "Description: a {# comment\n"
    assert DebianConf(**{**REQUIRED, "control_data": control}).control_data == control
    with pytest.raises(ConfigError, match="Invalid control_data template"):
        DebianConf(**{**REQUIRED, "control_data": control, "render_control": True})


@pytest.mark.parametrize(
    ("old", "new", "message"),
    [
        ("version: 1.2.3", "version: 1.10", "version in .* is read as the number 1.1"),
        ("BUILD: 42", "RATIO: 0.50", "environment_constants.RATIO"),
    ],
)
def test_load_conf_rejects_floats(
    tmp_path: Path, old: str, new: str, message: str
) -> None:
    """Test unquoted decimals fail instead of losing digits."""
    config = tmp_path / "ppa.yaml"
    config.write_text(CONFIG_YAML.replace(old, new), "utf-8")
    with pytest.raises(ConfigError, match=message):
        load_conf(config)


@pytest.mark.parametrize(("raw", "expected"), [('"1.10"', "t_1.10"), ("2", "t_2")])
def test_load_conf_version_text(tmp_path: Path, raw: str, expected: str) -> None:
    """Test quoted and integer versions keep their text."""
    config = tmp_path / "ppa.yaml"
    content = CONFIG_YAML.replace("version: 1.2.3", f"version: {raw}")
    config.write_text(content.replace("standalone_name: mytool", "standalone_name: t"))
    assert load_conf(config).package_name == expected


def test_load_conf_missing_file(tmp_path: Path) -> None:
    """Test a missing file raises ConfigError."""
    with pytest.raises(ConfigError, match="Unable to read"):
        load_conf(tmp_path / "missing.yaml")
