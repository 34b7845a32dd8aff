"""Tests for the package version metadata."""

import pytest
from packaging.version import Version

import virtual_mentor
from virtual_mentor import _version as version_module


def test_version_is_semver_patch():
    version = Version(virtual_mentor.__version__)

    assert len(version.release) == 3, (
        "virtual_mentor.__version__ must contain exactly three release components"
    )


def test_version_falls_back_to_changelog(monkeypatch):
    def _missing(_name):
        raise version_module.metadata.PackageNotFoundError(_name)

    monkeypatch.setattr(version_module.metadata, "version", _missing)

    assert version_module._load_version() == "0.1.0"


def test_invalid_installed_version_is_rejected(monkeypatch):
    monkeypatch.setattr(version_module.metadata, "version", lambda _name: "not-a-version")

    with pytest.raises(RuntimeError):
        version_module._load_version()

    monkeypatch.setattr(version_module.metadata, "version", lambda _name: "1.2")
    with pytest.raises(RuntimeError, match="MAJOR.MINOR.PATCH"):
        version_module._load_version()


def test_version_info_matches_release():
    assert version_module.version_info == Version(virtual_mentor.__version__).release
    assert len(version_module.version_info) == 3


def test_changelog_version_reads_first_release_heading(tmp_path):
    changelog = tmp_path / "CHANGELOG.md"
    changelog.write_text("# Changelog\n\n## Unreleased\n\n## v2.3.4\n\n## v2.3.3\n", encoding="utf-8")

    assert version_module.changelog_version(changelog) == "2.3.4"
    assert version_module.changelog_version(tmp_path / "missing.md") is None


def test_missing_metadata_and_changelog_is_an_error(monkeypatch):
    def _missing(_name):
        raise version_module.metadata.PackageNotFoundError(_name)

    monkeypatch.setattr(version_module.metadata, "version", _missing)
    monkeypatch.setattr(version_module, "_changelog_paths", lambda: iter(()))

    with pytest.raises(RuntimeError, match="Cannot determine"):
        version_module._load_version()
