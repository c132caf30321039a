"""
Configuration loader — reads packages.yml into domain models.

This is the primary entry point for loading the package manifest.
It reads YAML, validates against Pydantic schemas, and returns
typed domain objects.
"""

from __future__ import annotations

import logging
from pathlib import Path

import yaml
from pydantic import BaseModel, Field, ValidationError

from deskforge.core.models.package import InstallMethod, Package

logger = logging.getLogger(__name__)

# Default config filename
MANIFEST_FILE = "packages.yml"


class ConfigError(Exception):
    """Raised when the manifest is invalid or missing."""


class MethodCommands(BaseModel):
    """Command templates for one install method."""

    install: str = ""
    remove: str = ""
    list: str = ""
    check: str = ""


class Manifest(BaseModel):
    """Declared packages plus optional per-method command templates."""

    packages: list[Package] = Field(default_factory=list)
    methods: dict[str, MethodCommands] = Field(default_factory=dict)
    default_method: InstallMethod = InstallMethod.APT

    def get(self, name: str) -> Package | None:
        """Look up a declared package by name (last declaration wins)."""
        found = None
        for pkg in self.packages:
            if pkg.name == name:
                found = pkg
        return found

    def names(self) -> list[str]:
        return [p.name for p in self.packages]

    def groups(self) -> dict[str, list[str]]:
        """Group name to member package names, in declaration order."""
        found: dict[str, list[str]] = {}
        for pkg in self.packages:
            if pkg.group and pkg.name not in found.setdefault(pkg.group, []):
                found[pkg.group].append(pkg.name)
        return found

    def group(self, name: str) -> list[str]:
        """Member names of one group.

        Raises:
            ConfigError: If no package declares the group.
        """
        groups = self.groups()
        if name not in groups:
            available = ", ".join(sorted(groups)) or "none"
            raise ConfigError(f"Unknown group: {name} (available: {available})")
        return groups[name]


def find_manifest_file(start_dir: Path | None = None) -> Path | None:
    """Search for packages.yml starting from the given directory, walking up.

    Args:
        start_dir: Directory to start searching from (default: cwd).

    Returns:
        Path to packages.yml, or None if not found.
    """
    current = (start_dir or Path.cwd()).resolve()

    for _ in range(20):  # safety limit
        candidate = current / MANIFEST_FILE
        if candidate.is_file():
            return candidate
        parent = current.parent
        if parent == current:
            break  # filesystem root
        current = parent

    return None


def parse_manifest(data: object, source: str = "<manifest>") -> Manifest:
    """Validate already-parsed YAML data.

    Accepts either a mapping with a ``packages:`` key or a bare list of
    package mappings.
    """
    if data is None:
        data = {}
    if isinstance(data, list):
        data = {"packages": data}
    if not isinstance(data, dict):
        raise ConfigError(f"Expected a YAML mapping or list in {source}, got {type(data).__name__}")

    try:
        return Manifest.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid manifest {source}: {e}") from e


def load_manifest(path: Path | None = None) -> Manifest:
    """Load and validate the package manifest.

    Args:
        path: Explicit path to packages.yml. If None, searches upward.

    Returns:
        Validated Manifest model.

    Raises:
        ConfigError: If the file is missing or invalid.
    """
    if path is None:
        path = find_manifest_file()

    if path is None:
        raise ConfigError(
            f"No {MANIFEST_FILE} found. "
            "Create one in this directory, or specify --config."
        )

    if not path.is_file():
        raise ConfigError(f"Config file not found: {path}")

    logger.debug("Loading manifest from %s", path)

    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot read {path}: {e}") from e

    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    manifest = parse_manifest(data, source=str(path))
    logger.info("Loaded %d packages from %s", len(manifest.packages), path)
    return manifest
