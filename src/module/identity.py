"""Forge module titles: ``owner/name`` or ``owner-name``."""

import re
from typing import Tuple

from exceptions import InvalidIdentityError

_TITLE = re.compile(r"\A(\w+)[-/](\w+)\Z")


def is_forge_title(title: str) -> bool:
    """True when ``title`` has the owner/name shape."""
    return isinstance(title, str) and bool(_TITLE.match(title))


def parse_title(title: str) -> Tuple[str, str]:
    """Split a title into (owner, name).

    Raises:
        InvalidIdentityError: when the title is not two word tokens joined by
            ``/`` or ``-``.
    """
    match = _TITLE.match(title) if isinstance(title, str) else None
    if not match:
        raise InvalidIdentityError(str(title))
    return match.group(1), match.group(2)


def normalize_full_name(full_name: str) -> str:
    """Canonical form for comparing identities; ``/`` and ``-`` are equivalent."""
    return full_name.replace("/", "-")


def same_identity(title: str, full_name: str) -> bool:
    return normalize_full_name(title) == normalize_full_name(full_name)


def slug(title: str) -> str:
    """``owner-name`` form used by the Forge API."""
    owner, name = parse_title(title)
    return f"{owner}-{name}"
