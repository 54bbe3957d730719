"""Sync status of a local module relative to its target version."""

from enum import Enum
from typing import Optional

from .identity import same_identity
from .metadata_file import ModuleMetadata


class ModuleStatus(Enum):
    """Where a module directory stands; checked in declaration order."""
    ABSENT = "absent"
    MISMATCHED = "mismatched"
    OUTDATED = "outdated"
    INSYNC = "insync"


class SyncAction(Enum):
    """What sync() did."""
    NOOP = "noop"
    INSTALL = "install"
    UPGRADE = "upgrade"
    REINSTALL = "reinstall"


STATUS_ACTIONS = {
    ModuleStatus.ABSENT: SyncAction.INSTALL,
    ModuleStatus.OUTDATED: SyncAction.UPGRADE,
    ModuleStatus.MISMATCHED: SyncAction.REINSTALL,
    ModuleStatus.INSYNC: SyncAction.NOOP,
}


def evaluate_status(
    directory_exists: bool,
    metadata: Optional[ModuleMetadata],
    title: str,
    target_version: Optional[str],
) -> ModuleStatus:
    """Compute the status; the first matching rule wins.

    - ABSENT: the directory is missing.
    - MISMATCHED: no usable metadata, or it names a different module.
    - OUTDATED: a target version is known and the installed one differs.
    - INSYNC: everything else, including when no target could be resolved.
    """
    if not directory_exists:
        return ModuleStatus.ABSENT
    if metadata is None or not same_identity(title, metadata.full_module_name):
        return ModuleStatus.MISMATCHED
    if target_version is not None and target_version != metadata.version:
        return ModuleStatus.OUTDATED
    return ModuleStatus.INSYNC
