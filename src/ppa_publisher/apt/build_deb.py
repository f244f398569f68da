"""Assemble a binary Debian package from compiled executables."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

from jinja2 import Template

from ppa_publisher.temp import StagingDirectory
from ppa_publisher.utils import run_cmd

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

    from ppa_publisher.config import DebianConf
    from ppa_publisher.utils import StrPath

logger = logging.getLogger("ppa_publisher")

BIN_DIR = Path("usr", "local", "bin")


def create_package_directory(repo: StrPath, package_name: str) -> Path:
    """Create `repo/package_name` and the subfolders for the package.

    Returns:
        The path of the package directory.
    """
    debian_dir = Path(repo) / package_name
    (debian_dir / "DEBIAN").mkdir(parents=True, exist_ok=True)
    (debian_dir / BIN_DIR).mkdir(parents=True, exist_ok=True)
    return debian_dir


def render_control(control_data: str, **context: str) -> str:
    """Render the control data as a Jinja2 template."""
    template = Template(control_data, keep_trailing_newline=True)
    return template.render(**context)


def generate_control_file(
    debian_dir: StrPath,
    control_data: str,
    render: bool = False,
    **context: str,
) -> Path:
    """Write the control file for the package.

    The control data is written byte for byte unless `render` is set,
    then it is rendered with `context` first.
    """
    control_file = Path(debian_dir) / "DEBIAN" / "control"
    if render:
        control_data = render_control(control_data, **context)
    control_file.write_bytes(control_data.encode("utf-8"))
    logger.debug("Wrote control file %s", control_file)
    return control_file


def compile_executable(
    compiler: Sequence[str],
    source: StrPath,
    output: StrPath,
    constants: Mapping[str, str] | None = None,
) -> None:
    """Compile `source` into the executable `output`.

    Each constant is passed as a `-D<key>=<value>` flag, in mapping order.
    """
    cmd_args: list[StrPath] = [*compiler, source]
    for key, value in (constants or {}).items():
        cmd_args.append(f"-D{key}={value}")
    cmd_args.extend(["--output", output])
    run_cmd(cmd_args)


def generate_executable_files(
    debian_dir: StrPath,
    executables: Mapping[str, StrPath],
    constants: Mapping[str, str],
    compiler: Sequence[str],
    project_dir: StrPath = Path(),
) -> list[Path]:
    """Compile every executable into `usr/local/bin` of the package.

    Compilation stops at the first failing executable.

    Args:
        debian_dir: The package directory.
        executables: Executable name to source path.
        constants: Defines passed to the compiler.
        compiler: The compiler command.
        project_dir: Base directory for relative source paths.

    Returns:
        The paths of the compiled executables.
    """
    bin_dir = Path(debian_dir) / BIN_DIR
    outputs: list[Path] = []
    for name, source in executables.items():
        output = bin_dir / name
        logger.debug("Compiling %s to %s", source, output)
        compile_executable(compiler, Path(project_dir) / source, output, constants)
        outputs.append(output)
    return outputs


def build_package(repo: StrPath, package_name: str) -> Path:
    """Pack `repo/package_name` into `repo/package_name.deb`."""
    run_cmd(["dpkg-deb", "--build", package_name], cwd=repo)
    deb = Path(repo) / f"{package_name}.deb"
    logger.info("Built %s", deb)
    return deb


def create_debian_package(repo: StrPath, conf: DebianConf) -> Path:
    """Create the Debian package in `repo` from the configured executables.

    The staging directory `repo/<package name>` is removed afterwards,
    whether the build succeeded or not.

    Args:
        repo: The checked-out PPA repository.
        conf: The configuration.

    Returns:
        The path of the `.deb` file.
    """
    package_name = conf.package_name
    with StagingDirectory(repo, package_name):
        debian_dir = create_package_directory(repo, package_name)
        generate_control_file(
            debian_dir,
            conf.control_data,
            render=conf.render_control,
            package=package_name,
            name=conf.standalone_name,
            version=conf.version,
        )
        generate_executable_files(
            debian_dir,
            conf.executables,
            conf.environment_constants,
            conf.compiler,
            conf.project_dir,
        )
        return build_package(repo, package_name)


__all__ = [
    "build_package",
    "compile_executable",
    "create_debian_package",
    "create_package_directory",
    "generate_control_file",
    "generate_executable_files",
    "render_control",
]
