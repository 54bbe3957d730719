"""Constraint parsing: turn a requested version into a VersionSpec."""

import re
from functools import lru_cache

from .models import (
    ExactSpec,
    ForgeVersion,
    LatestRequest,
    LatestSpec,
    NoSpec,
    RangeSpec,
    Requested,
    VersionSpec,
)

_V = r"(\d+\.\d+\.\d+)"
_EXACT = re.compile(rf"^\s*{_V}\s*$")
_SINGLE_BOUND = re.compile(rf"^\s*(>=?|<=?)\s*{_V}\s*$")
_DOUBLE_BOUND = re.compile(rf"^\s*(>=?)\s*{_V}\s+(<=?)\s*{_V}\s*$")
_MINOR_WILDCARD = re.compile(r"^\s*(\d+)\.(\d+)\.x\s*$")
_MAJOR_WILDCARD = re.compile(r"^\s*(\d+)\.x\s*$")


def _single_bound(op: str, version: str) -> RangeSpec:
    bound = ForgeVersion.parse(version)
    inclusive = op.endswith("=")
    if op.startswith(">"):
        return RangeSpec(lower=bound, upper=None, inc_lower=inclusive)
    return RangeSpec(lower=None, upper=bound, inc_upper=inclusive)


@lru_cache(maxsize=256)
def parse_version_spec(requested: Requested) -> VersionSpec:
    """Parse a constraint expression.

    Accepted forms (whitespace around tokens is ignored):

    - ``1.2.3`` exact version
    - ``>= 1.2.3``, ``> 1.2.3``, ``<= 1.2.3``, ``< 1.2.3`` single bound
    - ``>= 1.0.0 < 2.0.0`` lower then upper bound
    - ``1.2.x`` and ``1.x`` wildcards
    - the ``LATEST`` sentinel

    Anything else yields ``NoSpec``; this never raises.
    """
    if isinstance(requested, LatestRequest):
        return LatestSpec()
    if not isinstance(requested, str):
        return NoSpec(repr(requested))

    match = _EXACT.match(requested)
    if match:
        return ExactSpec(match.group(1))

    match = _SINGLE_BOUND.match(requested)
    if match:
        return _single_bound(match.group(1), match.group(2))

    match = _DOUBLE_BOUND.match(requested)
    if match:
        return RangeSpec(
            lower=ForgeVersion.parse(match.group(2)),
            upper=ForgeVersion.parse(match.group(4)),
            inc_lower=match.group(1) == ">=",
            inc_upper=match.group(3) == "<=",
        )

    match = _MINOR_WILDCARD.match(requested)
    if match:
        major, minor = int(match.group(1)), int(match.group(2))
        return RangeSpec(
            lower=ForgeVersion(major, minor, 0),
            upper=ForgeVersion(major, minor + 1, 0),
            inc_lower=True,
            inc_upper=False,
        )

    match = _MAJOR_WILDCARD.match(requested)
    if match:
        major = int(match.group(1))
        return RangeSpec(
            lower=ForgeVersion(major, 0, 0),
            upper=ForgeVersion(major + 1, 0, 0),
            inc_lower=True,
            inc_upper=False,
        )

    return NoSpec(requested)
