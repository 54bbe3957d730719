"""Pick one concrete target version for a requested constraint."""

import logging
from typing import Iterable, Optional, Tuple

from common.logging_utils import extra_context, is_debug_enabled
from registry.forge.interfaces import VersionCatalog
from .compare import as_version, in_range
from .models import (
    ExactSpec,
    ForgeVersion,
    LatestSpec,
    NoSpec,
    RangeSpec,
    Requested,
    ResolutionMode,
    ResolutionResult,
)
from .parser import parse_version_spec

logger = logging.getLogger(__name__)


class ForgeVersionResolver:
    """Resolve constraints against a Forge version catalog.

    Range resolution order:

    1. the installed version, when it satisfies the range;
    2. the catalog's latest version, when it satisfies the range;
    3. the highest in-range entry of the full catalog.

    An installed in-range version is kept even when a newer in-range
    release exists.
    """

    def __init__(self, catalog: VersionCatalog):
        self.catalog = catalog

    def resolve(self, requested: Requested, installed_version: Optional[str] = None) -> ResolutionResult:
        """Resolve ``requested`` to a single version string.

        Args:
            requested: Constraint expression or the LATEST sentinel.
            installed_version: Version currently on disk, if any.

        Returns:
            ResolutionResult whose ``resolved_version`` is None when nothing
            satisfies the request.

        Raises:
            MalformedVersionError: the installed version or a catalog entry
                considered for a range is not x.y.z.
            CatalogError: propagated from the catalog unchanged.
        """
        spec = parse_version_spec(requested)
        raw = requested if isinstance(requested, str) else repr(requested)

        if isinstance(spec, ExactSpec):
            return self._result(raw, spec.version, ResolutionMode.EXACT, 0, step="exact")

        if isinstance(spec, LatestSpec):
            latest = self.catalog.latest_version()
            return self._result(raw, latest, ResolutionMode.LATEST, 1, step="latest")

        if isinstance(spec, NoSpec):
            return self._result(
                raw, None, ResolutionMode.NONE, 0,
                step="unparseable",
                error=f"Unsupported version constraint '{spec.raw}'",
            )

        return self._resolve_range(raw, spec, installed_version)

    def _resolve_range(self, raw: str, spec: RangeSpec, installed_version: Optional[str]) -> ResolutionResult:
        if installed_version and in_range(spec, installed_version):
            return self._result(raw, installed_version, ResolutionMode.RANGE, 0, step="installed")

        latest = self.catalog.latest_version()
        if in_range(spec, latest):
            return self._result(raw, latest, ResolutionMode.RANGE, 1, step="catalog_latest")

        best, count = self._pick_highest(spec, self.catalog.versions())
        if best is None:
            return self._result(
                raw, None, ResolutionMode.RANGE, count,
                step="catalog_scan",
                error=f"No versions match spec '{spec}'",
            )
        return self._result(raw, best, ResolutionMode.RANGE, count, step="catalog_scan")

    @staticmethod
    def _pick_highest(spec: RangeSpec, candidates: Iterable[str]) -> Tuple[Optional[str], int]:
        """Highest in-range candidate by version order; catalog order is ignored."""
        best: Optional[str] = None
        best_version: Optional[ForgeVersion] = None
        count = 0
        for candidate in candidates:
            count += 1
            version = as_version(candidate)
            if best_version is not None and version <= best_version:
                continue
            if in_range(spec, version):
                best, best_version = candidate, version
        return best, count

    @staticmethod
    def _result(
        raw: str,
        version: Optional[str],
        mode: ResolutionMode,
        count: int,
        *,
        step: str,
        error: Optional[str] = None,
    ) -> ResolutionResult:
        if is_debug_enabled(logger):
            logger.debug(
                "Resolved version",
                extra=extra_context(
                    event="decision",
                    component="resolver",
                    action="resolve",
                    outcome="match" if version is not None else "no_match",
                    step=step,
                    requested=raw,
                    resolved=version,
                    candidate_count=count,
                )
            )
        return ResolutionResult(
            requested_spec=raw,
            resolved_version=version,
            resolution_mode=mode,
            candidate_count=count,
            error=error,
        )
