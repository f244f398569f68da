"""Build Debian packages and update flat apt repositories."""

from __future__ import annotations

from ppa_publisher.apt.build_deb import build_package, create_debian_package
from ppa_publisher.apt.build_repo import (
    release_new_package,
    update_packages_file,
    update_release_file,
)

__all__ = [
    "build_package",
    "create_debian_package",
    "release_new_package",
    "update_packages_file",
    "update_release_file",
]
