"""Forge registry package.

This package provides Puppet Forge support:
- interfaces.py: catalog, installer and metadata protocols used by the sync core
- client.py: module catalog lookups via the v3 API
- release.py: release download, checksum verification and extraction

HTTP helpers are re-exported here as patch points; the submodules call them
through this package so tests can patch a single location.
"""

# Patch points exposed for tests (e.g., monkeypatch in tests)
from common.http_client import get_json, download_to  # noqa: F401

__all__ = [
    "get_json",
    "download_to",
]
