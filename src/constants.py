"""Constants used in the project."""

import logging
import os
from enum import Enum
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)


class ExitCodes(Enum):
    """Exit codes for the program.

    Args:
        Enum (int): Exit codes for the program.
    """

    SUCCESS = 0
    FILE_ERROR = 1
    CONNECTION_ERROR = 2
    UNRESOLVED_VERSION = 3
    INVALID_INPUT = 4


class Constants:  # pylint: disable=too-few-public-methods
    """General constants used in the project.
    Data holder for configuration constants; not intended to provide behavior.
    """

    FORGE_API_URL = "https://forgeapi.puppet.com"
    METADATA_FILE = "metadata.json"
    LOG_FORMAT = "[%(levelname)s] %(message)s"
    USER_AGENT = "forgesync/0.1.0"
    REQUEST_TIMEOUT = 30  # Timeout in seconds for all HTTP requests
    HTTP_RETRY_MAX = 3
    HTTP_RETRY_BASE_DELAY_SEC = 0.3
    DOWNLOAD_CHUNK_SIZE = 65536

    ENV_CONFIG = "FORGESYNC_CONFIG"
    ENV_FORGE_URL = "FORGESYNC_FORGE_URL"
    ENV_LOG_LEVEL = "FORGESYNC_LOG_LEVEL"
    ENV_LOG_FILE = "FORGESYNC_LOG_FILE"
    DEFAULT_CONFIG_PATHS = [
        "forgesync.yml",
        "forgesync.yaml",
        os.path.join("~", ".config", "forgesync", "forgesync.yml"),
    ]


def _positive_int(value: Any) -> int:
    number = int(value)
    if number < 1:
        raise ValueError(f"{value!r} must be at least 1")
    return number


# YAML key path -> (Constants attribute, coercion)
_CONFIG_KEYS = {
    ("forge", "base_url"): ("FORGE_API_URL", str),
    ("http", "request_timeout"): ("REQUEST_TIMEOUT", _positive_int),
    ("http", "retry_max"): ("HTTP_RETRY_MAX", _positive_int),
    ("http", "retry_base_delay_sec"): ("HTTP_RETRY_BASE_DELAY_SEC", float),
    ("http", "download_chunk_size"): ("DOWNLOAD_CHUNK_SIZE", _positive_int),
}


def _find_config_file(explicit: Optional[str] = None) -> Optional[str]:
    """Return the first existing config path in priority order."""
    candidates = []
    if explicit:
        candidates.append(explicit)
    env_path = os.environ.get(Constants.ENV_CONFIG)
    if env_path:
        candidates.append(env_path)
    candidates.extend(Constants.DEFAULT_CONFIG_PATHS)
    for candidate in candidates:
        path = os.path.expanduser(candidate)
        if os.path.isfile(path):
            return path
    return None


def _load_yaml_config(path: str) -> Dict[str, Any]:
    """Read a YAML mapping from disk; anything unusable yields an empty dict."""
    import yaml  # pylint: disable=import-outside-toplevel

    try:
        with open(path, encoding="utf-8") as fh:
            data = yaml.safe_load(fh) or {}
    except (OSError, yaml.YAMLError) as exc:
        logger.warning("Ignoring unreadable config file %s: %s", path, exc)
        return {}
    if not isinstance(data, dict):
        logger.warning("Ignoring config file %s: top level must be a mapping", path)
        return {}
    return data


def apply_config(data: Dict[str, Any]) -> None:
    """Copy recognised config values onto Constants."""
    for (section, key), (attr, coerce) in _CONFIG_KEYS.items():
        block = data.get(section)
        if not isinstance(block, dict) or key not in block:
            continue
        try:
            setattr(Constants, attr, coerce(block[key]))
        except (TypeError, ValueError):
            logger.warning("Ignoring invalid config value %s.%s=%r", section, key, block[key])


def load_config(explicit: Optional[str] = None) -> Optional[str]:
    """Load YAML config then environment overrides.

    Precedence (lowest to highest): built-in defaults, YAML file, environment.
    CLI flags are applied afterwards by the entry point.

    Returns:
        The config file path that was applied, or None.
    """
    path = _find_config_file(explicit)
    if path:
        apply_config(_load_yaml_config(path))
    env_url = os.environ.get(Constants.ENV_FORGE_URL)
    if env_url and env_url.strip():
        Constants.FORGE_API_URL = env_url.strip()
    return path
