"""HTTP client lifecycle for storage transfers."""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import httpx
from asset_compute_shared.settings import WorkerSettings


def create_client(settings: WorkerSettings) -> httpx.AsyncClient:
    """Build the client used for source downloads and rendition uploads."""
    return httpx.AsyncClient(timeout=settings.http_timeout, follow_redirects=True)


@asynccontextmanager
async def open_client(
    settings: WorkerSettings, client: httpx.AsyncClient | None = None
) -> AsyncIterator[httpx.AsyncClient]:
    """Yield `client` untouched, or a fresh client that is closed afterward."""
    if client is not None:
        yield client
        return
    owned = create_client(settings)
    try:
        yield owned
    finally:
        await owned.aclose()
