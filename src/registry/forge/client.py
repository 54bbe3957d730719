"""Forge registry client: module catalog lookups via the v3 API."""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from constants import Constants
from common.logging_utils import extra_context, is_debug_enabled, safe_url
from exceptions import CatalogError, ModuleNotFoundOnForgeError
from module.identity import slug

import registry.forge as forge_pkg

logger = logging.getLogger(__name__)


def module_url(module_slug: str, base_url: Optional[str] = None) -> str:
    """URL of the v3 module document for ``owner-name``."""
    base = (base_url or Constants.FORGE_API_URL).rstrip("/")
    return f"{base}/v3/modules/{module_slug}"


def _fetch_module(module_slug: str, base_url: Optional[str]) -> Dict[str, Any]:
    """GET the module document.

    Raises:
        ModuleNotFoundOnForgeError: 404 from the Forge.
        CatalogError: any other failure.
    """
    url = module_url(module_slug, base_url)
    status_code, _, data = forge_pkg.get_json(url)
    if status_code == 404:
        raise ModuleNotFoundOnForgeError(module_slug)
    if status_code == 0:
        raise CatalogError(f"Could not reach the Forge at {safe_url(url)}")
    if status_code != 200:
        raise CatalogError(f"Forge returned HTTP {status_code} for {module_slug}")
    if not isinstance(data, dict):
        raise CatalogError(f"Forge returned an unreadable document for {module_slug}")
    if is_debug_enabled(logger):
        logger.debug(
            "Fetched module document",
            extra=extra_context(
                event="parse",
                component="client",
                action="fetch_module",
                outcome="success",
                target=safe_url(url),
                package_manager="forge",
            )
        )
    return data


class ForgeCatalog:
    """Version catalog for one module, backed by ``/v3/modules/<slug>``.

    The module document is fetched on first use and reused for the life of
    the object, which is one sync.
    """

    def __init__(self, title: str, base_url: Optional[str] = None):
        self.title = title
        self.slug = slug(title)
        self.base_url = base_url
        self._document: Optional[Dict[str, Any]] = None

    def _module(self) -> Dict[str, Any]:
        if self._document is None:
            self._document = _fetch_module(self.slug, self.base_url)
        return self._document

    def latest_version(self) -> str:
        """Version of ``current_release``."""
        current = self._module().get("current_release") or {}
        version = current.get("version") if isinstance(current, dict) else None
        if not version:
            raise CatalogError(f"Forge reports no current release for {self.slug}")
        return version

    def versions(self) -> List[str]:
        """Versions of every listed release, in the order the Forge sent them."""
        releases = self._module().get("releases") or []
        return [
            release["version"]
            for release in releases
            if isinstance(release, dict) and release.get("version")
        ]
