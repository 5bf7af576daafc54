"""Source acquisition — turn a source descriptor into a local file.

Three paths, decided by configuration:

  - download: stream an HTTPS GET into the work directory under RetryPolicy
  - download disabled: validate, then return a Source whose file is not
    created (the worker reads the asset some other way, e.g. by URL)
  - unit-test mode: resolve the locator against the local input root, no
    network and no retry
"""

from __future__ import annotations

import logging
from pathlib import Path, PurePosixPath
from typing import Any
from urllib.parse import urlsplit

import httpx
from asset_compute_shared.asset_models import (
    ExecutionFlags,
    Source,
    SourceDescriptor,
    local_file_name,
)
from asset_compute_shared.errors import DownloadFailedError
from asset_compute_shared.settings import WorkerSettings

from asset_compute_storage.http import open_client
from asset_compute_storage.retry import RetryPolicy
from asset_compute_storage.urls import redact_url, validate_source_locator

logger = logging.getLogger(__name__)


def source_file_name(descriptor: SourceDescriptor) -> str:
    """Local name for a downloaded source: the descriptor's name, else source<ext>."""
    name = local_file_name(descriptor.name)
    if name:
        return name
    suffix = PurePosixPath(urlsplit(descriptor.url or "").path).suffix
    return f"source{suffix}"


class SourceFetcher:
    """Materializes the source asset of an invocation."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        retry: RetryPolicy,
        *,
        unit_test_mode: bool = False,
        input_root: Path | None = None,
    ) -> None:
        self.client = client
        self.retry = retry
        self.unit_test_mode = unit_test_mode
        self.input_root = input_root

    @classmethod
    def from_settings(
        cls,
        client: httpx.AsyncClient,
        settings: WorkerSettings,
        flags: ExecutionFlags | None = None,
    ) -> SourceFetcher:
        unit_test_mode = settings.unit_test_mode or bool(flags and flags.unit_test_mode)
        return cls(
            client,
            RetryPolicy.from_settings(settings, flags),
            unit_test_mode=unit_test_mode,
            input_root=settings.input_root,
        )

    async def fetch(
        self,
        descriptor: SourceDescriptor | dict[str, Any] | str,
        directory: Path | str,
        *,
        disable_download: bool = False,
    ) -> Source:
        if not isinstance(descriptor, SourceDescriptor):
            descriptor = SourceDescriptor.model_validate(descriptor)
        directory = Path(directory)
        directory.mkdir(parents=True, exist_ok=True)

        locator = validate_source_locator(
            descriptor.url,
            unit_test_mode=self.unit_test_mode,
            input_root=self.input_root or directory,
        )

        if disable_download:
            name = Path(locator).name if isinstance(locator, Path) else source_file_name(descriptor)
            logger.info(f"Source download disabled, skipping '{name}'")
            return Source(
                url=str(descriptor.url),
                name=name,
                path=directory / name,
                directory=directory,
            )

        if isinstance(locator, Path):
            logger.info(f"Unit test mode: using local source '{locator}'")
            return Source(
                url=str(descriptor.url),
                name=str(descriptor.url),
                path=locator,
                directory=directory,
            )

        name = source_file_name(descriptor)
        path = directory / name
        await self._download(locator, path)
        return Source(url=locator, name=name, path=path, directory=directory)

    async def _download(self, url: str, path: Path) -> None:
        async def _attempt() -> None:
            async with self.client.stream("GET", url) as response:
                response.raise_for_status()
                with path.open("wb") as fh:
                    async for chunk in response.aiter_bytes():
                        fh.write(chunk)

        logger.info(f"Downloading source '{redact_url(url)}' to {path}")
        try:
            await self.retry.call("GET", url, _attempt, error=DownloadFailedError)
        except OSError as e:
            error = DownloadFailedError(
                "GET", redact_url(url), detail=f"cannot write {path.name}: {e}"
            )
            error.retryable = False
            raise error from e
        logger.info(f"Downloaded {path.stat().st_size} bytes to {path}")


async def get_source(
    descriptor: SourceDescriptor | dict[str, Any] | str,
    directory: Path | str,
    *,
    settings: WorkerSettings | None = None,
    client: httpx.AsyncClient | None = None,
    disable_download: bool = False,
) -> Source:
    """Fetch one source without a worker around it."""
    settings = settings or WorkerSettings()
    async with open_client(settings, client) as http:
        fetcher = SourceFetcher.from_settings(http, settings)
        return await fetcher.fetch(descriptor, directory, disable_download=disable_download)
