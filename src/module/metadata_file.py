"""Reader for the ``metadata.json`` shipped inside every Forge module."""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional, Union

from common.logging_utils import extra_context, is_debug_enabled

logger = logging.getLogger(__name__)


@dataclass
class ModuleMetadata:
    """The parts of metadata.json the sync layer cares about."""
    full_module_name: str
    version: Optional[str] = None
    author: Optional[str] = None
    raw: Dict[str, Any] = field(default_factory=dict, repr=False)


def parse_metadata(data: Any) -> Optional[ModuleMetadata]:
    """Build ModuleMetadata from decoded JSON; None unless it names the module."""
    if not isinstance(data, dict):
        return None
    name = data.get("name")
    if not isinstance(name, str) or not name.strip():
        return None
    version = data.get("version")
    author = data.get("author")
    return ModuleMetadata(
        full_module_name=name.strip(),
        version=version if isinstance(version, str) else None,
        author=author if isinstance(author, str) else None,
        raw=data,
    )


class MetadataFile:
    """A metadata.json on disk. Every ``read()`` goes back to the file."""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)

    def exists(self) -> bool:
        return self.path.is_file()

    def read(self) -> Optional[ModuleMetadata]:
        if not self.exists():
            return None
        try:
            with open(self.path, encoding="utf-8") as fh:
                data = json.load(fh)
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
            if is_debug_enabled(logger):
                logger.debug(
                    "Unreadable module metadata",
                    extra=extra_context(
                        event="parse",
                        component="metadata",
                        action="read",
                        outcome="error",
                        target=str(self.path),
                        error=str(exc),
                    )
                )
            return None
        return parse_metadata(data)
