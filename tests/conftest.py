"""
Shared test fixtures and configuration.
"""

import textwrap
from pathlib import Path

import pytest

from deskforge.adapters.mock import MockInstaller, StaticDetector
from deskforge.core.context import OperationContext
from deskforge.core.models.package import Package
from deskforge.core.services.install.service import PackageService


def make_package(name: str, *deps: str, method: str = "apt", source: str | None = None) -> Package:
    """A valid package whose source defaults to its name."""
    return Package(
        name=name,
        method=method,
        source=source if source is not None else name,
        dependencies=deps,
    )


# The webapp stack used across graph, orchestration and CLI tests.
WEBAPP_PACKAGES = [
    make_package("webapp", "nginx", "postgresql", "redis"),
    make_package("nginx", "openssl"),
    make_package("postgresql", "openssl"),
    make_package("redis", "libc6"),
    make_package("openssl", "libc6"),
    make_package("libc6"),
]

WEBAPP_MANIFEST = textwrap.dedent("""\
    default_method: apt
    packages:
      - name: webapp
        group: apps
        method: apt
        source: webapp
        dependencies: [nginx, postgresql, redis]
      - name: nginx
        group: services
        method: apt
        source: nginx
        dependencies: [openssl]
      - name: postgresql
        group: services
        method: apt
        source: postgresql
        dependencies: [openssl]
      - name: redis
        group: services
        method: apt
        source: redis-server
        dependencies: [libc6]
      - name: openssl
        method: apt
        source: openssl
        dependencies: [libc6]
      - name: libc6
        method: apt
        source: libc6
""")


@pytest.fixture
def ctx() -> OperationContext:
    """A fresh context with no deadline."""
    return OperationContext()


@pytest.fixture
def installer() -> MockInstaller:
    return MockInstaller()


@pytest.fixture
def detector() -> StaticDetector:
    return StaticDetector()


@pytest.fixture
def service(installer: MockInstaller, detector: StaticDetector) -> PackageService:
    return PackageService(installer, detector)


@pytest.fixture
def manifest_file(tmp_path: Path) -> Path:
    """Write the webapp manifest to a temporary packages.yml."""
    path = tmp_path / "packages.yml"
    path.write_text(WEBAPP_MANIFEST)
    return path
