"""Rendition persistence — PUT a finished rendition file to its target(s).

Single target: one PUT of the whole file.

Multipart target: the file is split into at most N contiguous parts, one per
target URL, and each part is PUT in order. The first failing part stops the
upload and is reported by part number. Parts already stored are left in
place; the upload is best-effort, not transactional.

Targets are validated before any request is made, so an invalid URL anywhere
in a multipart list means zero PUTs. The local file is never deleted here;
the work directory owns it.
"""

from __future__ import annotations

import logging
import math
from pathlib import Path

import httpx
from asset_compute_shared.asset_models import (
    ExecutionFlags,
    MultipartTarget,
    Rendition,
)
from asset_compute_shared.errors import UploadFailedError
from asset_compute_shared.settings import WorkerSettings

from asset_compute_storage.http import open_client
from asset_compute_storage.retry import RetryPolicy
from asset_compute_storage.urls import redact_url, validate_target_locator

logger = logging.getLogger(__name__)


def split_parts(
    size: int,
    part_count: int,
    *,
    min_part_size: int | None = None,
    max_part_size: int | None = None,
) -> list[tuple[int, int]]:
    """Split `size` bytes into at most `part_count` (offset, length) ranges.

    Parts are equal-sized except the last. An empty file is a single empty
    part. Raises ValueError when the file cannot fit under max_part_size.
    """
    if part_count < 1:
        raise ValueError("part_count must be at least 1")
    if size == 0:
        return [(0, 0)]

    part_size = math.ceil(size / part_count)
    if min_part_size:
        part_size = max(part_size, min_part_size)
    if max_part_size and part_size > max_part_size:
        raise ValueError(
            f"{size} bytes do not fit in {part_count} parts of at most {max_part_size} bytes"
        )
    return [(offset, min(part_size, size - offset)) for offset in range(0, size, part_size)]


class RenditionUploader:
    """Persists rendition files to their destination URLs."""

    def __init__(self, client: httpx.AsyncClient, retry: RetryPolicy) -> None:
        self.client = client
        self.retry = retry

    @classmethod
    def from_settings(
        cls,
        client: httpx.AsyncClient,
        settings: WorkerSettings,
        flags: ExecutionFlags | None = None,
    ) -> RenditionUploader:
        return cls(client, RetryPolicy.from_settings(settings, flags))

    async def upload(self, rendition: Rendition) -> None:
        targets = validate_target_locator(rendition.target)
        path = Path(rendition.path)
        headers = {"Content-Type": rendition.mimetype} if rendition.mimetype else {}

        if isinstance(targets, str):
            content = _read_rendition(path, targets)
            logger.info(
                f"Uploading rendition '{rendition.name}' ({len(content)} bytes) "
                f"to '{redact_url(targets)}'"
            )
            await self._put(targets, content, headers)
            return

        target = rendition.target if isinstance(rendition.target, MultipartTarget) else None
        await self._put_multipart(rendition, path, targets, headers, target)

    async def _put_multipart(
        self,
        rendition: Rendition,
        path: Path,
        urls: list[str],
        headers: dict[str, str],
        target: MultipartTarget | None,
    ) -> None:
        if not path.is_file():
            raise _local_failure(path, urls[0], f"rendition file {path.name} was not created")
        size = path.stat().st_size
        try:
            parts = split_parts(
                size,
                len(urls),
                min_part_size=target.min_part_size if target else None,
                max_part_size=target.max_part_size if target else None,
            )
        except ValueError as e:
            raise _local_failure(path, urls[0], str(e)) from e

        logger.info(
            f"Uploading rendition '{rendition.name}' ({size} bytes) in {len(parts)} parts"
        )
        for number, (url, (offset, length)) in enumerate(zip(urls, parts), start=1):
            content = _read_rendition(path, url, offset, length)
            await self._put(url, content, headers, part=(number, len(parts)))

    async def _put(
        self,
        url: str,
        content: bytes,
        headers: dict[str, str],
        part: tuple[int, int] | None = None,
    ) -> None:
        async def _attempt() -> httpx.Response:
            response = await self.client.put(url, content=content, headers=headers)
            response.raise_for_status()
            return response

        await self.retry.call("PUT", url, _attempt, error=UploadFailedError, part=part)


def _local_failure(path: Path, url: str, detail: str) -> UploadFailedError:
    """A failure on the local side of an upload; another attempt will not help."""
    error = UploadFailedError("PUT", redact_url(url), detail=detail)
    error.retryable = False
    return error


def _read_rendition(path: Path, url: str, offset: int = 0, length: int = -1) -> bytes:
    try:
        with path.open("rb") as fh:
            fh.seek(offset)
            return fh.read(length)
    except FileNotFoundError as e:
        raise _local_failure(path, url, f"rendition file {path.name} was not created") from e
    except OSError as e:
        raise _local_failure(path, url, f"cannot read rendition file {path.name}: {e}") from e


async def put_rendition(
    rendition: Rendition,
    *,
    settings: WorkerSettings | None = None,
    client: httpx.AsyncClient | None = None,
) -> None:
    """Upload one rendition without a worker around it."""
    settings = settings or WorkerSettings()
    async with open_client(settings, client) as http:
        await RenditionUploader.from_settings(http, settings).upload(rendition)
