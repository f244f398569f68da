"""Configuration for publishing a Debian package to a PPA.

Implements:
- `DebianConf`: The frozen configuration, validated on construction.
- `load_conf`: Read a `DebianConf` from a YAML file.
"""

from __future__ import annotations

import dataclasses
import logging
import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

from jinja2 import Template, TemplateSyntaxError
from packaging.version import InvalidVersion, Version
from ruamel.yaml import YAML, YAMLError

if TYPE_CHECKING:
    from collections.abc import Mapping

    from ppa_publisher.utils import StrPath

logger = logging.getLogger("ppa_publisher")

SLUG_PATTERN = re.compile(r"^[\w.-]+/[\w.-]+$")
DEFAULT_COMPILER = ("dart", "compile", "exe")


class ConfigError(Exception):
    """Configuration is missing or invalid."""


def _constant_str(value: object) -> str:
    if isinstance(value, bool):
        return str(value).lower()
    return str(value)


@dataclass(frozen=True)
class DebianConf:
    """Configuration for building the package and updating the PPA.

    Attributes:
        debian_repo: GitHub slug (`owner/repo`) of the PPA repository.
        control_data: Content of the `DEBIAN/control` file.
        standalone_name: Base name of the package.
        version: Version of the package.
        executables: Executable name to source file, compiled in order.
        signing_email: Key used for signing (settable by PPA_SIGNING_EMAIL).
        environment_constants: Defines passed to the compiler, in order.
        compiler: The compiler command, source and flags are appended.
        project_dir: Base directory for relative source paths.
        workdir: Directory the PPA repository is cloned into.
        key: Private key file to sign with in a temporary keyring.
        github_url: Base URL the repository slug is resolved against.
        render_control: Render `control_data` as a Jinja2 template with
            `package`, `name` and `version`. Written verbatim otherwise.
    """

    debian_repo: str
    control_data: str
    standalone_name: str
    version: str
    executables: Mapping[str, StrPath]
    signing_email: str | None = field(
        default_factory=lambda: os.getenv("PPA_SIGNING_EMAIL")
    )
    environment_constants: Mapping[str, str] = field(default_factory=dict)
    compiler: tuple[str, ...] = DEFAULT_COMPILER
    project_dir: StrPath = Path()
    workdir: StrPath = Path()
    key: StrPath | None = None
    github_url: str = "https://github.com"
    render_control: bool = False

    def __post_init__(self) -> None:
        """Validate the fields and freeze the mappings.

        Raises:
            ConfigError: If a field is missing or invalid.
        """
        if not self.debian_repo:
            raise ConfigError("debian_repo must be set to deploy to PPA repository.")
        if not SLUG_PATTERN.match(self.debian_repo):
            raise ConfigError(
                f"debian_repo must look like 'owner/repo', got {self.debian_repo!r}."
            )
        if not self.signing_email:
            raise ConfigError(
                "signing_email must be set to deploy to PPA repository."
            )
        if not self.control_data:
            raise ConfigError(
                "control_data must be set to generate Control file for the package."
            )
        if not self.standalone_name:
            raise ConfigError("standalone_name must be set.")
        if not self.version:
            raise ConfigError("version must be set.")
        if not self.executables:
            raise ConfigError("executables must contain at least one entry.")
        if not self.compiler:
            raise ConfigError("compiler must not be empty.")

        try:
            Version(self.version)
        except InvalidVersion as err:
            raise ConfigError(f"Invalid version {self.version!r}.") from err

        if re.search(r"[/\s]", self.package_name):
            raise ConfigError(
                f"Package name {self.package_name!r} must not contain"
                " path separators or whitespace."
            )
        for name in self.executables:
            if not name or re.search(r"[/\s]", name):
                raise ConfigError(f"Invalid executable name {name!r}.")
        if self.render_control:
            try:
                Template(self.control_data)
            except TemplateSyntaxError as err:
                raise ConfigError(f"Invalid control_data template: {err}") from err

        # frozen dataclass, bypass __setattr__
        object.__setattr__(
            self, "executables", MappingProxyType(dict(self.executables))
        )
        object.__setattr__(
            self,
            "environment_constants",
            MappingProxyType(
                {
                    str(k): _constant_str(v)
                    for k, v in self.environment_constants.items()
                }
            ),
        )
        object.__setattr__(self, "compiler", tuple(self.compiler))

    @property
    def package_name(self) -> str:
        """Name of the package directory and `.deb` file."""
        return f"{self.standalone_name}_{self.version}"


_FIELD_NAMES = {f.name for f in dataclasses.fields(DebianConf)}
_PATH_FIELDS = ("project_dir", "workdir", "key")


def _normalize_key(key: str) -> str:
    """Convert `camelCase` and `kebab-case` keys to `snake_case`."""
    key = re.sub(r"(?<=[a-z0-9])([A-Z])", r"_\1", key)
    return key.replace("-", "_").lower()


def _reject_floats(path: Path, name: str, value: object) -> None:
    """Fail on YAML floats, they drop digits such as the 0 of `1.10`."""
    if isinstance(value, float):
        raise ConfigError(
            f"{name} in {path} is read as the number {value!r}, quote it."
        )


def load_conf(path: StrPath, **overrides: Any) -> DebianConf:
    """Load the configuration from a YAML file.

    Relative paths in the file are resolved against the file's directory.
    `project_dir` defaults to that directory.

    Args:
        path: The YAML file.
        **overrides: Fields replacing the file's values, `None` is ignored.

    Returns:
        The validated configuration.

    Raises:
        ConfigError: If the file can't be parsed or holds unknown keys.
    """
    path = Path(path)
    yaml = YAML(typ="safe")
    try:
        raw = yaml.load(path.read_text("utf-8"))
    except OSError as err:
        raise ConfigError(f"Unable to read {path}: {err}") from err
    except YAMLError as err:
        raise ConfigError(f"Unable to parse {path}: {err}") from err

    if raw is None:
        raw = {}
    if not isinstance(raw, dict):
        raise ConfigError(f"{path} must contain a mapping.")

    data = {_normalize_key(str(k)): v for k, v in raw.items()}
    unknown = sorted(set(data) - _FIELD_NAMES)
    if unknown:
        raise ConfigError(f"Unknown keys in {path}: {', '.join(unknown)}")

    base = path.resolve().parent
    for name in _PATH_FIELDS:
        if data.get(name) is not None:
            data[name] = base / Path(data[name]).expanduser()
    data.setdefault("project_dir", base)

    if data.get("compiler") is not None:
        compiler = data["compiler"]
        data["compiler"] = (
            tuple(compiler.split()) if isinstance(compiler, str) else tuple(compiler)
        )
    _reject_floats(path, "version", data.get("version"))
    for name, value in (data.get("environment_constants") or {}).items():
        _reject_floats(path, f"environment_constants.{name}", value)
    if data.get("version") is not None:
        data["version"] = str(data["version"])

    data.update({k: v for k, v in overrides.items() if v is not None})

    try:
        conf = DebianConf(**data)
    except TypeError as err:
        # missing required fields
        raise ConfigError(f"Incomplete configuration in {path}: {err}") from err

    logger.debug("Loaded configuration for %s from %s", conf.package_name, path)
    return conf


__all__ = ["DEFAULT_COMPILER", "ConfigError", "DebianConf", "load_conf"]
