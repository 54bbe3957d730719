"""Shared HTTP helpers used by the Forge catalog client and release installer.

Encapsulates common request/timeout/retry handling so the registry modules
avoid duplicating try/except blocks. Nothing here caches responses; every call
goes to the network.
"""
from __future__ import annotations

import json
import logging
import time
from typing import Any, BinaryIO, Dict, Optional, Tuple

import requests

from constants import Constants
from common.logging_utils import extra_context, is_debug_enabled, safe_url, Timer

logger = logging.getLogger(__name__)


def _default_headers(headers: Optional[Dict[str, str]]) -> Dict[str, str]:
    merged = {"User-Agent": Constants.USER_AGENT}
    if headers:
        merged.update(headers)
    return merged


def _backoff(attempt: int) -> None:
    """Sleep before the next attempt; no sleep after the final one."""
    if attempt + 1 < Constants.HTTP_RETRY_MAX:
        time.sleep(Constants.HTTP_RETRY_BASE_DELAY_SEC * (2 ** attempt))


def robust_get(
    url: str,
    *,
    headers: Optional[Dict[str, str]] = None,
    **kwargs: Any
) -> Tuple[int, Dict[str, str], str]:
    """Perform GET request with timeout and retries, with DEBUG traces.

    Timeouts, connection errors and 5xx responses are retried up to
    ``Constants.HTTP_RETRY_MAX`` attempts.

    Returns:
        Tuple of (status_code, headers_dict, body_text). A status of 0 means
        every attempt failed at the transport level; the text then carries
        the last error.
    """
    safe_target = safe_url(url)
    last_exception = None
    last_response: Optional[Tuple[int, Dict[str, str], str]] = None

    for attempt in range(Constants.HTTP_RETRY_MAX):
        with Timer() as t:
            try:
                if is_debug_enabled(logger):
                    logger.debug(
                        "HTTP request",
                        extra=extra_context(
                            event="http_request",
                            component="http_client",
                            action="GET",
                            target=safe_target,
                            attempt=attempt + 1
                        )
                    )

                response = requests.get(
                    url,
                    timeout=Constants.REQUEST_TIMEOUT,
                    headers=_default_headers(headers),
                    **kwargs
                )
            except requests.Timeout:
                last_exception = "timeout"
                if is_debug_enabled(logger):
                    logger.debug(
                        "HTTP timeout",
                        extra=extra_context(
                            event="http_exception",
                            component="http_client",
                            action="GET",
                            outcome="timeout",
                            attempt=attempt + 1,
                            target=safe_target
                        )
                    )
                _backoff(attempt)
                continue
            except requests.RequestException as exc:  # includes ConnectionError
                last_exception = str(exc)
                if is_debug_enabled(logger):
                    logger.debug(
                        "HTTP request exception",
                        extra=extra_context(
                            event="http_exception",
                            component="http_client",
                            action="GET",
                            outcome="request_exception",
                            attempt=attempt + 1,
                            target=safe_target
                        )
                    )
                _backoff(attempt)
                continue

        if is_debug_enabled(logger):
            logger.debug(
                "HTTP response",
                extra=extra_context(
                    event="http_response",
                    component="http_client",
                    action="GET",
                    outcome="success" if response.status_code < 500 else "server_error",
                    status_code=response.status_code,
                    duration_ms=t.duration_ms(),
                    target=safe_target
                )
            )
        last_response = (response.status_code, dict(response.headers), response.text)
        if response.status_code < 500:
            return last_response
        _backoff(attempt)

    if last_response is not None:
        return last_response
    logger.warning(
        "GET %s failed after %s attempts: %s",
        safe_target,
        Constants.HTTP_RETRY_MAX,
        last_exception,
    )
    return 0, {}, f"Request failed after {Constants.HTTP_RETRY_MAX} attempts: {last_exception}"


def get_json(
    url: str,
    *,
    headers: Optional[Dict[str, str]] = None,
    **kwargs: Any
) -> Tuple[int, Dict[str, str], Optional[Any]]:
    """Perform GET request and parse JSON response with DEBUG traces.

    Args:
        url: Target URL
        headers: Optional request headers
        **kwargs: Additional requests.get parameters

    Returns:
        Tuple of (status_code, headers_dict, parsed_json_or_none)
    """
    merged = {"Accept": "application/json"}
    if headers:
        merged.update(headers)
    status_code, response_headers, text = robust_get(url, headers=merged, **kwargs)

    if status_code == 200 and text:
        try:
            parsed = json.loads(text)
        except json.JSONDecodeError:
            if is_debug_enabled(logger):
                logger.debug(
                    "JSON decode error",
                    extra=extra_context(
                        event="parse",
                        component="http_client",
                        action="get_json",
                        outcome="json_decode_error",
                        status_code=status_code,
                        target=safe_url(url)
                    )
                )
            return status_code, response_headers, None
        return status_code, response_headers, parsed

    return status_code, response_headers, None


def download_to(url: str, fh: BinaryIO, *, chunk_size: Optional[int] = None) -> int:
    """Stream the body of ``url`` into an open binary file.

    Raises:
        requests.RequestException: transport failure or non-2xx status.

    Returns:
        Number of bytes written.
    """
    size = chunk_size or Constants.DOWNLOAD_CHUNK_SIZE
    written = 0
    with Timer() as t:
        with requests.get(
            url,
            stream=True,
            timeout=Constants.REQUEST_TIMEOUT,
            headers=_default_headers(None),
        ) as response:
            response.raise_for_status()
            for chunk in response.iter_content(chunk_size=size):
                if chunk:
                    fh.write(chunk)
                    written += len(chunk)
    if is_debug_enabled(logger):
        logger.debug(
            "Download complete",
            extra=extra_context(
                event="download",
                component="http_client",
                action="GET",
                outcome="success",
                bytes=written,
                duration_ms=t.duration_ms(),
                target=safe_url(url)
            )
        )
    return written
