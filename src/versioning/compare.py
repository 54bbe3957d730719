"""Version comparison and range membership."""

from typing import Union

import semantic_version

from .models import ForgeVersion, RangeSpec, VersionSpec

VersionLike = Union[str, ForgeVersion]


def as_version(value: VersionLike) -> ForgeVersion:
    """Coerce a string to ForgeVersion; raises MalformedVersionError when invalid."""
    if isinstance(value, ForgeVersion):
        return value
    return ForgeVersion.parse(value)


def compare(a: VersionLike, b: VersionLike) -> int:
    """Return -1, 0 or 1 as ``a`` sorts before, equal to, or after ``b``."""
    left, right = as_version(a), as_version(b)
    if left < right:
        return -1
    if left > right:
        return 1
    return 0


def to_simple_spec(spec: RangeSpec) -> semantic_version.SimpleSpec:
    """Express a RangeSpec as a ``semantic_version.SimpleSpec``."""
    return semantic_version.SimpleSpec(",".join(spec.clauses()))


def in_range(spec: VersionSpec, candidate: VersionLike) -> bool:
    """Check ``candidate`` against every bound ``spec`` carries.

    Only RangeSpec has bounds; any other spec matches everything. A malformed
    candidate raises MalformedVersionError rather than returning False.
    """
    version = as_version(candidate)
    if not isinstance(spec, RangeSpec):
        return True
    semver = semantic_version.Version(major=version.major, minor=version.minor, patch=version.revision)
    return to_simple_spec(spec).match(semver)
