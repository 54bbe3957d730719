"""Forge release installer: download, verify and unpack one module release."""
from __future__ import annotations

import hashlib
import logging
import os
import shutil
import tarfile
import tempfile
from pathlib import Path, PurePosixPath
from typing import Any, Dict, List, Optional, Tuple, Union

import requests

from constants import Constants
from common.logging_utils import extra_context, is_debug_enabled, safe_url, Timer
from exceptions import ChecksumMismatchError, ReleaseInstallError
from module.identity import slug

import registry.forge as forge_pkg

logger = logging.getLogger(__name__)


def release_slug(title: str, version: str) -> str:
    """``owner-name-version`` as used by the release endpoint."""
    return f"{slug(title)}-{version}"


def _fetch_release(release: str, base_url: str) -> Dict[str, Any]:
    url = f"{base_url}/v3/releases/{release}"
    status_code, _, data = forge_pkg.get_json(url)
    if status_code == 404:
        raise ReleaseInstallError(f"Release {release} not found on the Forge")
    if status_code != 200 or not isinstance(data, dict):
        raise ReleaseInstallError(
            f"Could not fetch release {release} (HTTP {status_code or 'unreachable'})"
        )
    if not data.get("file_uri"):
        raise ReleaseInstallError(f"Release {release} has no downloadable file")
    return data


def _expected_digest(release_data: Dict[str, Any]) -> Optional[Tuple[str, str]]:
    """Prefer SHA-256, fall back to MD5; None when the Forge publishes neither."""
    if release_data.get("file_sha256"):
        return "sha256", str(release_data["file_sha256"]).lower()
    if release_data.get("file_md5"):
        return "md5", str(release_data["file_md5"]).lower()
    return None


def verify_checksum(path: Path, algorithm: str, expected: str) -> None:
    """Raise ChecksumMismatchError unless ``path`` hashes to ``expected``."""
    digest = hashlib.new(algorithm)
    with open(path, "rb") as fh:
        for chunk in iter(lambda: fh.read(Constants.DOWNLOAD_CHUNK_SIZE), b""):
            digest.update(chunk)
    actual = digest.hexdigest()
    if actual != expected:
        raise ChecksumMismatchError(path.name, algorithm, expected, actual)


def _is_unsafe_member(member: tarfile.TarInfo) -> bool:
    name = PurePosixPath(member.name)
    if name.is_absolute() or ".." in name.parts:
        return True
    if member.issym() or member.islnk():
        target = PurePosixPath(member.linkname)
        if target.is_absolute():
            return True
        base = name.parent if member.issym() else PurePosixPath()
        depth = 0
        for part in (base / target).parts:
            depth += -1 if part == ".." else (0 if part == "." else 1)
            if depth < 0:
                return True
    return member.isdev()


def safe_members(archive: tarfile.TarFile) -> List[tarfile.TarInfo]:
    """All members, or ReleaseInstallError if any would land outside the target."""
    members = archive.getmembers()
    for member in members:
        if _is_unsafe_member(member):
            raise ReleaseInstallError(f"Refusing to extract unsafe archive member '{member.name}'")
    return members


def unpack(archive_path: Path, into: Path) -> Path:
    """Extract a release tarball and return its single top-level directory."""
    try:
        with tarfile.open(archive_path, "r:gz") as archive:
            members = safe_members(archive)
            if hasattr(tarfile, "data_filter"):
                archive.extractall(into, members=members, filter="data")
            else:
                archive.extractall(into, members=members)
    except tarfile.TarError as exc:
        raise ReleaseInstallError(f"Could not unpack {archive_path.name}: {exc}") from exc

    roots = [entry for entry in into.iterdir() if entry.is_dir()]
    if len(roots) != 1:
        raise ReleaseInstallError(
            f"Expected one top-level directory in {archive_path.name}, found {len(roots)}"
        )
    return roots[0]


class ForgeReleaseInstaller:
    """Installs releases from the Forge v3 API."""

    def __init__(self, base_url: Optional[str] = None):
        self.base_url = base_url

    def install(self, title: str, version: str, destination: Union[str, Path]) -> None:
        """Download ``title`` at ``version`` and place its contents at ``destination``.

        Whatever is at ``destination`` is replaced.

        Raises:
            ReleaseInstallError: release lookup, download or extraction failed.
            ChecksumMismatchError: the archive does not match the published digest.
        """
        base_url = (self.base_url or Constants.FORGE_API_URL).rstrip("/")
        destination = Path(destination)
        release = release_slug(title, version)
        release_data = _fetch_release(release, base_url)
        file_url = f"{base_url}{release_data['file_uri']}"

        with tempfile.TemporaryDirectory(prefix="forgesync-") as workdir, Timer() as t:
            archive_path = Path(workdir) / f"{release}.tar.gz"
            try:
                with open(archive_path, "wb") as fh:
                    forge_pkg.download_to(file_url, fh)
            except requests.RequestException as exc:
                raise ReleaseInstallError(f"Download of {release} failed: {exc}") from exc

            digest = _expected_digest(release_data)
            if digest is not None:
                verify_checksum(archive_path, *digest)
            else:
                logger.warning("Forge publishes no checksum for %s; skipping verification", release)

            unpack_dir = Path(workdir) / "unpacked"
            unpack_dir.mkdir()
            extracted = unpack(archive_path, unpack_dir)

            if destination.exists() or destination.is_symlink():
                if destination.is_dir() and not destination.is_symlink():
                    shutil.rmtree(destination)
                else:
                    os.remove(destination)
            destination.parent.mkdir(parents=True, exist_ok=True)
            shutil.move(str(extracted), str(destination))

        logger.info("Installed %s %s into %s", title, version, destination)
        if is_debug_enabled(logger):
            logger.debug(
                "Release installed",
                extra=extra_context(
                    event="install",
                    component="release",
                    action="install",
                    outcome="success",
                    duration_ms=t.duration_ms(),
                    target=safe_url(file_url),
                    package_manager="forge",
                )
            )
