"""
Tests for the manifest loader — discovery, parsing, validation errors.
"""

import textwrap
from pathlib import Path

import pytest

from deskforge.core.config.loader import (
    ConfigError,
    Manifest,
    find_manifest_file,
    load_manifest,
    parse_manifest,
)
from deskforge.core.models.package import InstallMethod


class TestFindManifest:
    def test_in_start_dir(self, manifest_file: Path):
        assert find_manifest_file(manifest_file.parent) == manifest_file.resolve()

    def test_walks_up(self, manifest_file: Path):
        nested = manifest_file.parent / "a" / "b"
        nested.mkdir(parents=True)
        assert find_manifest_file(nested) == manifest_file.resolve()

    def test_not_found(self, tmp_path: Path):
        found = find_manifest_file(tmp_path)
        assert found is None or tmp_path.resolve() not in found.parents


class TestParseManifest:
    def test_mapping(self):
        m = parse_manifest({
            "default_method": "dnf",
            "packages": [{"name": "git", "method": "dnf", "source": "git"}],
            "methods": {"dnf": {"install": "sudo dnf install -y {source}"}},
        })
        assert m.default_method is InstallMethod.DNF
        assert m.names() == ["git"]
        assert m.methods["dnf"].install == "sudo dnf install -y {source}"
        assert m.methods["dnf"].check == ""

    def test_bare_list(self):
        m = parse_manifest([{"name": "git", "method": "apt", "source": "git"}])
        assert m.names() == ["git"]
        assert m.default_method is InstallMethod.APT

    def test_empty_document(self):
        assert parse_manifest(None) == Manifest()

    def test_scalar_rejected(self):
        with pytest.raises(ConfigError, match="Expected a YAML mapping or list"):
            parse_manifest("just a string")

    def test_schema_error(self):
        with pytest.raises(ConfigError, match="Invalid manifest"):
            parse_manifest({"packages": "not-a-list"})

    def test_unknown_default_method(self):
        with pytest.raises(ConfigError):
            parse_manifest({"default_method": "homebrew"})

    def test_invalid_packages_still_load(self):
        m = parse_manifest({"packages": [{"name": "half-declared"}]})
        assert not m.packages[0].is_valid()

    def test_get_last_wins(self):
        m = parse_manifest([
            {"name": "git", "method": "apt", "source": "git"},
            {"name": "git", "method": "snap", "source": "git"},
        ])
        assert m.get("git").method == "snap"
        assert m.get("nope") is None


class TestLoadManifest:
    def test_load(self, manifest_file: Path):
        m = load_manifest(manifest_file)
        assert len(m.packages) == 6
        assert m.get("webapp").dependencies == ("nginx", "postgresql", "redis")
        assert m.get("redis").source == "redis-server"

    def test_auto_discovery(self, manifest_file: Path, monkeypatch):
        monkeypatch.chdir(manifest_file.parent)
        assert len(load_manifest().packages) == 6

    def test_missing_file(self, tmp_path: Path):
        with pytest.raises(ConfigError, match="Config file not found"):
            load_manifest(tmp_path / "nope.yml")

    def test_invalid_yaml(self, tmp_path: Path):
        path = tmp_path / "packages.yml"
        path.write_text("packages: [unclosed\n")
        with pytest.raises(ConfigError, match="Invalid YAML"):
            load_manifest(path)

    def test_methods_section(self, tmp_path: Path):
        path = tmp_path / "packages.yml"
        path.write_text(textwrap.dedent("""\
            methods:
              flatpak:
                install: "flatpak install -y flathub {source}"
                remove: "flatpak uninstall -y {source}"
                check: "flatpak info {source}"
            packages:
              - name: gimp
                method: flatpak
                source: org.gimp.GIMP
        """))
        m = load_manifest(path)
        assert list(m.methods) == ["flatpak"]
        assert m.get("gimp").install_method is InstallMethod.FLATPAK


class TestGroups:
    def test_groups_in_declaration_order(self, manifest_file: Path):
        m = load_manifest(manifest_file)
        assert m.groups() == {
            "apps": ["webapp"],
            "services": ["nginx", "postgresql", "redis"],
        }
        assert m.group("services") == ["nginx", "postgresql", "redis"]

    def test_ungrouped_packages_excluded(self):
        m = parse_manifest([
            {"name": "git", "method": "apt", "source": "git", "group": "dev"},
            {"name": "curl", "method": "apt", "source": "curl"},
            {"name": "git", "method": "snap", "source": "git", "group": "dev"},
        ])
        assert m.groups() == {"dev": ["git"]}

    def test_unknown_group(self, manifest_file: Path):
        m = load_manifest(manifest_file)
        with pytest.raises(ConfigError, match=r"Unknown group: media \(available: apps, services\)"):
            m.group("media")

    def test_unknown_group_without_groups(self):
        with pytest.raises(ConfigError, match=r"available: none"):
            Manifest().group("dev")
