"""Locator validation for sources and rendition targets.

Pure functions, no I/O beyond the filesystem checks of unit-test mode. Every
locator is validated before any network attempt, so a bad URL never reaches
the HTTP client.

Source locators:
  - normal mode: must be an HTTPS URL with a host
  - unit-test mode: a path relative to the input root that resolves to an
    existing regular file strictly inside that root

Target locators:
  - a single URL string, a list of URLs, or a {"urls": [...]} multipart object
  - every URL must be HTTPS; for multipart, one bad element fails the whole
    rendition before any part is uploaded

Pre-signed URLs carry credentials in their query string, so anything that
ends up in a message or log line goes through redact_url() first.
"""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import Any
from urllib.parse import urlsplit, urlunsplit

from asset_compute_shared.asset_models import MultipartTarget
from asset_compute_shared.errors import (
    InvalidLocalFileError,
    InvalidUrlError,
    MissingUrlError,
)


def redact_url(url: str) -> str:
    """Drop userinfo, query string and fragment from a URL."""
    parts = urlsplit(url)
    netloc = parts.netloc.rsplit("@", 1)[-1]
    if netloc == parts.netloc and not parts.query and not parts.fragment:
        return url
    return urlunsplit((parts.scheme, netloc, parts.path, "", ""))


def redact_params(value: Any) -> Any:
    """Recursively redact every URL-looking string in a params structure."""
    if isinstance(value, Mapping):
        return {key: redact_params(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [redact_params(item) for item in value]
    if isinstance(value, str) and "://" in value:
        return redact_url(value)
    return value


def is_https_url(url: str) -> bool:
    parts = urlsplit(url)
    return parts.scheme.lower() == "https" and bool(parts.netloc)


def validate_source_locator(
    locator: str | None,
    *,
    unit_test_mode: bool = False,
    input_root: Path | None = None,
) -> str | Path:
    """Return the validated remote URL, or the local path in unit-test mode."""
    if not locator:
        raise MissingUrlError(locator)

    if unit_test_mode:
        if input_root is None:
            raise InvalidLocalFileError(locator)
        return _resolve_local_file(locator, Path(input_root))

    if not is_https_url(locator):
        raise InvalidUrlError(redact_url(locator))
    return locator


def _resolve_local_file(locator: str, root: Path) -> Path:
    candidate = root / locator
    resolved_root = root.resolve()
    resolved = candidate.resolve()
    if resolved == resolved_root or not resolved.is_relative_to(resolved_root):
        raise InvalidLocalFileError(locator)
    if not resolved.is_file():
        raise InvalidLocalFileError(locator)
    return candidate


def validate_target_locator(target: Any) -> str | list[str]:
    """Return a single target URL, or the list of part URLs for multipart."""
    if isinstance(target, MultipartTarget):
        urls: Any = target.urls
    elif isinstance(target, Mapping):
        urls = target.get("urls")
    elif isinstance(target, (list, tuple)):
        urls = list(target)
    else:
        return _validate_target_url(target)

    if not urls:
        raise MissingUrlError()
    return [_validate_target_url(url) for url in urls]


def _validate_target_url(url: Any) -> str:
    if not isinstance(url, str) or not url.strip():
        raise MissingUrlError(url)
    parts = urlsplit(url)
    if not parts.scheme or not parts.netloc:
        raise MissingUrlError(url)
    if parts.scheme.lower() != "https":
        raise InvalidUrlError(redact_url(url))
    return url
