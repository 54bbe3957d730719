"""Capability interfaces the sync core depends on.

The resolver and the module record only ever talk to these protocols, so the
Forge-backed implementations can be swapped for test doubles.
"""
from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, List, Optional, Protocol, Union

if TYPE_CHECKING:
    from module.metadata_file import ModuleMetadata


class VersionCatalog(Protocol):
    """Published versions of a single module."""

    def latest_version(self) -> str:
        """Newest published version."""

    def versions(self) -> List[str]:
        """Every published version, in no particular order."""


class ReleaseInstaller(Protocol):
    """Fetches a module release and unpacks it at a destination."""

    def install(self, title: str, version: str, destination: Union[str, Path]) -> None:
        """Install ``title`` at ``version`` into ``destination``; raises on failure."""


class MetadataStore(Protocol):
    """Read access to the metadata of an installed module."""

    def read(self) -> Optional["ModuleMetadata"]:
        """Parsed metadata, or None when absent or unparseable."""
