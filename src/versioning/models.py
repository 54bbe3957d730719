"""Data models for versioning and version resolution."""

import re
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Union

from exceptions import MalformedVersionError

VERSION_PATTERN = re.compile(r"^\s*(\d+)\.(\d+)\.(\d+)\s*$")


@dataclass(frozen=True, order=True)
class ForgeVersion:
    """A major.minor.revision version; ordering compares the fields in turn."""
    major: int
    minor: int
    revision: int

    @classmethod
    def parse(cls, version_string: str) -> "ForgeVersion":
        """Parse ``x.y.z`` (surrounding whitespace allowed).

        Raises:
            MalformedVersionError: for anything else.
        """
        if not isinstance(version_string, str):
            raise MalformedVersionError(repr(version_string))
        match = VERSION_PATTERN.match(version_string)
        if not match:
            raise MalformedVersionError(version_string)
        return cls(int(match.group(1)), int(match.group(2)), int(match.group(3)))

    def __str__(self) -> str:
        return f"{self.major}.{self.minor}.{self.revision}"


class ResolutionMode(Enum):
    """Resolution strategy derived from the requested constraint."""
    EXACT = "exact"
    RANGE = "range"
    LATEST = "latest"
    NONE = "none"


class LatestRequest:
    """Sentinel requesting the catalog's newest version.

    Distinct from any string so that ``"latest"`` typed by a user is not
    mistaken for it.
    """

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return ":latest"

    def __reduce__(self):
        return (LatestRequest, ())


LATEST = LatestRequest()

# What a caller may ask for: a constraint expression or the LATEST sentinel.
Requested = Union[str, LatestRequest]


@dataclass(frozen=True)
class ExactSpec:
    """A single pinned version."""
    version: str

    @property
    def mode(self) -> ResolutionMode:
        return ResolutionMode.EXACT


@dataclass(frozen=True)
class LatestSpec:
    """Resolve to whatever the catalog reports as newest."""

    @property
    def mode(self) -> ResolutionMode:
        return ResolutionMode.LATEST


@dataclass(frozen=True)
class RangeSpec:
    """A bounded range; at least one of ``lower``/``upper`` is set."""
    lower: Optional[ForgeVersion]
    upper: Optional[ForgeVersion]
    inc_lower: bool = False
    inc_upper: bool = False

    def __post_init__(self):
        if self.lower is None and self.upper is None:
            raise ValueError("RangeSpec requires at least one bound")

    @property
    def mode(self) -> ResolutionMode:
        return ResolutionMode.RANGE

    def clauses(self) -> List[str]:
        """One comparison per bound, e.g. ``[">=1.0.0", "<2.0.0"]``."""
        parts = []
        if self.lower is not None:
            parts.append(f"{'>=' if self.inc_lower else '>'}{self.lower}")
        if self.upper is not None:
            parts.append(f"{'<=' if self.inc_upper else '<'}{self.upper}")
        return parts

    def __str__(self) -> str:
        return " ".join(self.clauses())


@dataclass(frozen=True)
class NoSpec:
    """The constraint could not be understood; nothing can be resolved from it."""
    raw: str

    @property
    def mode(self) -> ResolutionMode:
        return ResolutionMode.NONE


VersionSpec = Union[ExactSpec, LatestSpec, RangeSpec, NoSpec]


@dataclass
class ResolutionResult:
    """Resolution outcome to feed the sync layer and logging.

    ``resolved_version`` is None when no version satisfies the request.
    """
    requested_spec: str
    resolved_version: Optional[str]
    resolution_mode: ResolutionMode
    candidate_count: int
    error: Optional[str]

    @property
    def matched(self) -> bool:
        return self.resolved_version is not None
