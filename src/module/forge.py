"""A Forge module checkout and the logic that converges it to a target version."""
from __future__ import annotations

import logging
import os
import shutil
from pathlib import Path
from typing import Any, Dict, Optional, Union

from constants import Constants
from common.logging_utils import extra_context, is_debug_enabled
from exceptions import UnresolvableVersionError
from registry.forge.client import ForgeCatalog
from registry.forge.interfaces import MetadataStore, ReleaseInstaller, VersionCatalog
from registry.forge.release import ForgeReleaseInstaller
from versioning.models import LATEST, Requested, ResolutionResult
from versioning.resolver import ForgeVersionResolver
from .identity import is_forge_title, parse_title, same_identity
from .metadata_file import MetadataFile
from .status import STATUS_ACTIONS, ModuleStatus, SyncAction, evaluate_status

logger = logging.getLogger(__name__)


class ForgeModule:
    """One module directory under a moduledir, synced from the Forge.

    Build one instance per sync. The target version is resolved on first use
    and kept for the rest of the instance's life, so every decision taken
    during a sync sees the same catalog answer.

    Args:
        title: ``owner/name`` or ``owner-name``.
        dirname: Directory that holds modules; the module lives at
            ``dirname/name``.
        requested: Constraint expression, ``LATEST``, or None to keep the
            installed version (falling back to LATEST when nothing is
            installed).
        catalog: Version catalog; defaults to the Forge.
        installer: Release installer; defaults to the Forge.
        metadata: Metadata store for the installed copy; defaults to
            ``metadata.json`` inside the module path.

    Raises:
        InvalidIdentityError: ``title`` is not owner/name.
    """

    def __init__(
        self,
        title: str,
        dirname: Union[str, Path],
        requested: Optional[Requested] = None,
        *,
        catalog: Optional[VersionCatalog] = None,
        installer: Optional[ReleaseInstaller] = None,
        metadata: Optional[MetadataStore] = None,
    ):
        self.owner, self.name = parse_title(title)
        self.title = title
        self.dirname = Path(dirname)
        self.path = self.dirname / self.name
        self.metadata = metadata if metadata is not None else MetadataFile(self.path / Constants.METADATA_FILE)
        self.catalog = catalog if catalog is not None else ForgeCatalog(title)
        self.installer = installer if installer is not None else ForgeReleaseInstaller()
        self.resolver = ForgeVersionResolver(self.catalog)

        if requested is None:
            requested = self.installed_version or LATEST
        self.requested = requested
        self._resolution: Optional[ResolutionResult] = None

    @classmethod
    def implements(cls, title: str) -> bool:
        """Whether ``title`` names a Forge module."""
        return is_forge_title(title)

    @property
    def current_version(self) -> Optional[str]:
        """Version recorded in the installed metadata, if any."""
        metadata = self.metadata.read()
        return metadata.version if metadata else None

    @property
    def installed_version(self) -> Optional[str]:
        """Installed version of this module; None when the metadata names another one."""
        metadata = self.metadata.read()
        if metadata is None or not same_identity(self.title, metadata.full_module_name):
            return None
        return metadata.version

    @property
    def resolution(self) -> ResolutionResult:
        if self._resolution is None:
            self._resolution = self.resolver.resolve(self.requested, self.installed_version)
        return self._resolution

    @property
    def expected_version(self) -> Optional[str]:
        """The target version, or None when nothing satisfies the request."""
        return self.resolution.resolved_version

    def exists(self) -> bool:
        return self.path.exists()

    def status(self) -> ModuleStatus:
        """Evaluate the module's status against the disk as it is now.

        The catalog is consulted only when the directory holds this module.
        """
        directory_exists = self.exists()
        metadata = self.metadata.read() if directory_exists else None
        ours = metadata is not None and same_identity(self.title, metadata.full_module_name)
        target = self.expected_version if ours else None
        status = evaluate_status(directory_exists, metadata, self.title, target)
        if is_debug_enabled(logger):
            logger.debug(
                "Module status",
                extra=extra_context(
                    event="decision",
                    component="module",
                    action="status",
                    outcome=status.value,
                    target=str(self.path),
                    expected=target,
                    actual=metadata.version if metadata else None,
                )
            )
        return status

    def insync(self) -> bool:
        return self.status() is ModuleStatus.INSYNC

    def sync(self) -> SyncAction:
        """Converge the module directory to the target version."""
        action = STATUS_ACTIONS[self.status()]
        if action is SyncAction.INSTALL:
            self.install()
        elif action is SyncAction.UPGRADE:
            self.upgrade()
        elif action is SyncAction.REINSTALL:
            self.reinstall()
        else:
            logger.info("%s is in sync at %s", self.title, self.current_version)
        return action

    def install(self) -> None:
        """Install the target version at ``path``.

        Raises:
            UnresolvableVersionError: no version satisfies the request.
        """
        version = self.expected_version
        if version is None:
            raise UnresolvableVersionError(self.title, str(self.requested), self.resolution.error or "")
        parent = self.path.parent
        if not parent.exists():
            parent.mkdir(parents=True, exist_ok=True)
        logger.info("Installing %s %s into %s", self.title, version, self.path)
        self.installer.install(self.title, version, self.path)

    def upgrade(self) -> None:
        """Same as install: the installer overwrites in place."""
        self.install()

    def uninstall(self) -> None:
        """Remove ``path`` and everything below it; a missing path is fine."""
        logger.info("Removing %s", self.path)
        try:
            if self.path.is_dir() and not self.path.is_symlink():
                shutil.rmtree(self.path)
            else:
                os.remove(self.path)
        except FileNotFoundError:
            pass

    def reinstall(self) -> None:
        self.uninstall()
        self.install()

    def properties(self) -> Dict[str, Any]:
        return {
            "expected": self.expected_version,
            "actual": self.current_version,
            "type": "forge",
        }
