"""Shared fixtures and test doubles for the catalog, installer and metadata protocols."""

import json
from pathlib import Path

import pytest

from versioning.parser import parse_version_spec


class FakeCatalog:
    """In-memory catalog that counts how often it is consulted."""

    def __init__(self, latest="8.8.8", versions=None):
        self.latest = latest
        self.all_versions = list(versions) if versions is not None else [latest]
        self.latest_calls = 0
        self.versions_calls = 0

    def latest_version(self):
        self.latest_calls += 1
        return self.latest

    def versions(self):
        self.versions_calls += 1
        return list(self.all_versions)

    @property
    def calls(self):
        return self.latest_calls + self.versions_calls


class RecordingInstaller:
    """Installer that writes a minimal module and records every call."""

    def __init__(self, full_name="branan-eight_hundred", fail_with=None):
        self.full_name = full_name
        self.fail_with = fail_with
        self.calls = []

    def install(self, title, version, destination):
        destination = Path(destination)
        self.calls.append((title, version, destination, destination.exists()))
        if self.fail_with is not None:
            raise self.fail_with
        destination.mkdir(parents=True, exist_ok=True)
        write_metadata(destination, self.full_name, version)


def write_metadata(module_path, full_name, version):
    """Write a metadata.json the way a Forge release ships it."""
    module_path = Path(module_path)
    module_path.mkdir(parents=True, exist_ok=True)
    payload = {"name": full_name, "author": full_name.split("-")[0]}
    if version is not None:
        payload["version"] = version
    (module_path / "metadata.json").write_text(json.dumps(payload), encoding="utf-8")


@pytest.fixture(autouse=True)
def _clear_spec_cache():
    """Parsing is memoized process-wide; start every test from a clean cache."""
    parse_version_spec.cache_clear()
    yield
    parse_version_spec.cache_clear()


@pytest.fixture
def catalog():
    return FakeCatalog()


@pytest.fixture
def installer():
    return RecordingInstaller()


@pytest.fixture
def moduledir(tmp_path):
    path = tmp_path / "modules"
    path.mkdir()
    return path
