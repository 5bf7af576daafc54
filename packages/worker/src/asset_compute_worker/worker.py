"""Direct-mode orchestration: fetch source → callback → upload → cleanup.

Each invocation walks a small state machine:

    INIT → SOURCE_FETCHED → CALLBACK_INVOKED → RENDITIONS_UPLOADED → CLEANED_UP

Any failure moves to ERROR_CLEANUP, which still releases every work
directory before the error leaves compute(). Errors that are not already an
AssetComputeError are wrapped in one, so every failure carries the redacted
invocation params. The two worker shapes share everything except _process():

  Worker       — per rendition: allocate dir, callback, upload, then the next
  BatchWorker  — one shared output dir, one callback call, then all uploads;
                 duplicate rendition names are made unique within that dir

Renditions are processed sequentially. The first failure aborts the rest;
renditions already uploaded stay uploaded.
"""

from __future__ import annotations

import inspect
import logging
from abc import ABC, abstractmethod
from enum import Enum
from typing import Any

import httpx
from asset_compute_shared.asset_models import (
    ComputeResult,
    InvocationParams,
    Rendition,
    Source,
    unique_rendition_names,
)
from asset_compute_shared.errors import AssetComputeError, CallbackFailedError
from asset_compute_shared.settings import WorkerSettings
from asset_compute_storage.fetch import SourceFetcher
from asset_compute_storage.http import open_client
from asset_compute_storage.upload import RenditionUploader
from asset_compute_storage.urls import redact_params
from asset_compute_storage.workdir import WorkDirectoryManager

from asset_compute_worker.dispatch import (
    BatchCallback,
    PerRendition,
    RenditionCallback,
    Route,
    WholeBatch,
    WorkerKind,
)

logger = logging.getLogger(__name__)


class WorkerState(str, Enum):
    INIT = "init"
    SOURCE_FETCHED = "source-fetched"
    CALLBACK_INVOKED = "callback-invoked"
    RENDITIONS_UPLOADED = "renditions-uploaded"
    ERROR_CLEANUP = "error-cleanup"
    CLEANED_UP = "cleaned-up"


class BaseWorker(ABC):
    """Drives one direct-mode invocation. Subclasses decide how the callback is called."""

    route: Route

    def __init__(
        self,
        params: InvocationParams,
        *,
        settings: WorkerSettings | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.params = params
        self.settings = settings or WorkerSettings()
        self.client = client
        self.history: list[WorkerState] = [WorkerState.INIT]

    @property
    def state(self) -> WorkerState:
        return self.history[-1]

    def _transition(self, state: WorkerState) -> None:
        logger.debug(f"Worker state {self.state.value} -> {state.value}")
        self.history.append(state)

    def diagnostic_params(self) -> dict[str, Any]:
        """The invocation params with every URL redacted."""
        return redact_params(self.params.model_dump(mode="json"))

    async def compute(self) -> ComputeResult:
        workdir = WorkDirectoryManager(self.settings.work_root)
        flags = self.params.flags
        try:
            async with open_client(self.settings, self.client) as client:
                fetcher = SourceFetcher.from_settings(client, self.settings, flags)
                uploader = RenditionUploader.from_settings(client, self.settings, flags)

                source = await fetcher.fetch(
                    self.params.source,
                    workdir.allocate("in"),
                    disable_download=flags.disable_source_download,
                )
                self._transition(WorkerState.SOURCE_FETCHED)

                renditions = await self._process(source, workdir, uploader)
                self._transition(WorkerState.RENDITIONS_UPLOADED)
        except AssetComputeError as e:
            self._transition(WorkerState.ERROR_CLEANUP)
            e.with_params(self.diagnostic_params())
            raise
        except Exception as e:
            self._transition(WorkerState.ERROR_CLEANUP)
            raise AssetComputeError(
                f"Worker failed: {type(e).__name__}: {e}", params=self.diagnostic_params()
            ) from e
        except BaseException:
            # cancellation and interpreter exit pass through untouched
            self._transition(WorkerState.ERROR_CLEANUP)
            raise
        finally:
            workdir.release_all()
            self._transition(WorkerState.CLEANED_UP)

        return ComputeResult(
            success=True,
            message=f"Generated {len(renditions)} renditions from '{source.name}'",
            route=self.route.value,
            source_name=source.name,
            renditions=[rendition.name for rendition in renditions],
        )

    @abstractmethod
    async def _process(
        self,
        source: Source,
        workdir: WorkDirectoryManager,
        uploader: RenditionUploader,
    ) -> list[Rendition]:
        """Invoke the callback and upload; return the uploaded renditions."""

    async def _invoke(self, callback: Any, *args: Any) -> None:
        """Call sync or async user code, wrapping its failures as CallbackFailedError."""
        try:
            result = callback(*args)
            if inspect.isawaitable(result):
                await result
        except AssetComputeError:
            raise
        except Exception as e:
            raise CallbackFailedError(f"Worker callback failed: {e}") from e
        self._transition(WorkerState.CALLBACK_INVOKED)


class Worker(BaseWorker):
    """Calls callback(source, rendition) once per rendition."""

    route = Route.DIRECT_SINGLE

    def __init__(self, params: InvocationParams, callback: RenditionCallback, **kwargs: Any) -> None:
        super().__init__(params, **kwargs)
        self.callback = callback

    async def _process(
        self,
        source: Source,
        workdir: WorkDirectoryManager,
        uploader: RenditionUploader,
    ) -> list[Rendition]:
        uploaded: list[Rendition] = []
        for index, descriptor in enumerate(self.params.renditions):
            rendition = Rendition.from_descriptor(index, descriptor, workdir.allocate("out"))
            logger.info(f"Generating rendition '{rendition.name}'")
            await self._invoke(self.callback, source, rendition)
            await uploader.upload(rendition)
            uploaded.append(rendition)
        return uploaded


class BatchWorker(BaseWorker):
    """Calls callback(source, renditions, out_directory) once for all renditions."""

    route = Route.DIRECT_BATCH

    def __init__(self, params: InvocationParams, callback: BatchCallback, **kwargs: Any) -> None:
        super().__init__(params, **kwargs)
        self.callback = callback

    async def _process(
        self,
        source: Source,
        workdir: WorkDirectoryManager,
        uploader: RenditionUploader,
    ) -> list[Rendition]:
        out_directory = workdir.allocate("out")
        names = unique_rendition_names(self.params.renditions)
        renditions = [
            Rendition.from_descriptor(index, descriptor, out_directory, name)
            for index, (descriptor, name) in enumerate(zip(self.params.renditions, names))
        ]
        logger.info(f"Generating {len(renditions)} renditions in one batch")
        await self._invoke(self.callback, source, renditions, out_directory)
        for rendition in renditions:
            await uploader.upload(rendition)
        return renditions


def create_worker(
    kind: WorkerKind,
    params: InvocationParams,
    *,
    settings: WorkerSettings | None = None,
    client: httpx.AsyncClient | None = None,
) -> BaseWorker:
    """Build the direct-mode worker matching the registered callback shape."""
    if isinstance(kind, WholeBatch):
        return BatchWorker(params, kind.callback, settings=settings, client=client)
    if isinstance(kind, PerRendition):
        return Worker(params, kind.callback, settings=settings, client=client)
    raise TypeError(f"Unknown worker kind: {kind!r}")
