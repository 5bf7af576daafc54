"""Worker registration API.

    main = worker(convert)            # convert(source, rendition)
    main = batch_worker(convert_all)  # convert_all(source, renditions, out_directory)

    result = await main(params)

Registration validates the callback immediately (InvalidCallbackError, before
any I/O) and fixes its shape. The returned `main` handles one invocation:
it normalizes the params against the settings and options, selects a route,
and either hands the invocation to the pipeline factory or runs the direct
Worker/BatchWorker.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass
from typing import Any

import httpx
from asset_compute_shared.asset_models import ComputeResult, InvocationParams
from asset_compute_shared.errors import AssetComputeError, UnsupportedPipelineModeError
from asset_compute_shared.settings import WorkerSettings
from asset_compute_storage.urls import redact_params

from asset_compute_worker.dispatch import (
    BatchCallback,
    PerRendition,
    RenditionCallback,
    Route,
    WholeBatch,
    WorkerKind,
    select_route,
)
from asset_compute_worker.pipeline import PipelineFactory, PipelineOptions
from asset_compute_worker.worker import create_worker

logger = logging.getLogger(__name__)

Main = Callable[..., Awaitable[ComputeResult]]


@dataclass(frozen=True)
class WorkerOptions:
    """Per-registration options.

    Supplying a pipeline factory declares that this worker can run as a
    pipeline stage.
    """

    disable_source_download: bool = False
    pipeline: PipelineFactory | None = None

    @property
    def supports_pipeline(self) -> bool:
        return self.pipeline is not None


def normalize_params(
    raw: InvocationParams | Mapping[str, Any],
    settings: WorkerSettings,
    options: WorkerOptions,
) -> InvocationParams:
    """Validate raw params and fold settings and options into the execution flags."""
    params = raw if isinstance(raw, InvocationParams) else InvocationParams.model_validate(raw)
    flags = params.flags
    params = params.with_flags(
        disable_source_download=flags.disable_source_download or options.disable_source_download,
        disable_retries=flags.disable_retries or settings.disable_retries,
        unit_test_mode=flags.unit_test_mode or settings.unit_test_mode,
    )
    if params.transformer_catalog_ref is None and settings.transformer_catalog_ref:
        params = params.model_copy(
            update={"transformer_catalog_ref": settings.transformer_catalog_ref}
        )
    return params


def worker(
    rendition_callback: RenditionCallback,
    options: WorkerOptions | None = None,
    *,
    settings: WorkerSettings | None = None,
) -> RegisteredWorker:
    """Register a callback invoked once per rendition: callback(source, rendition)."""
    return _register(PerRendition(rendition_callback), options, settings)


def batch_worker(
    renditions_callback: BatchCallback,
    options: WorkerOptions | None = None,
    *,
    settings: WorkerSettings | None = None,
) -> RegisteredWorker:
    """Register a callback invoked once per invocation: callback(source, renditions, out_directory)."""
    return _register(WholeBatch(renditions_callback), options, settings)


@dataclass(frozen=True)
class RegisteredWorker:
    """The `main` returned by worker()/batch_worker(): one call per invocation."""

    kind: WorkerKind
    options: WorkerOptions
    settings: WorkerSettings

    async def __call__(
        self,
        raw_params: InvocationParams | Mapping[str, Any],
        *,
        client: httpx.AsyncClient | None = None,
    ) -> ComputeResult:
        started = time.monotonic()
        params = normalize_params(raw_params, self.settings, self.options)
        try:
            route = select_route(
                params, self.kind, supports_pipeline=self.options.supports_pipeline
            )
            if route is Route.PIPELINE:
                logger.info("Using pipeline for all renditions of this invocation")
                result = await self._run_pipeline(params)
            else:
                logger.info(f"Using worker callback ({route.value})")
                direct = create_worker(self.kind, params, settings=self.settings, client=client)
                result = await direct.compute()
        except AssetComputeError as e:
            e.with_params(redact_params(params.model_dump(mode="json")))
            logger.error(f"Invocation failed ({e.reason}): {e.message}")
            raise

        logger.info(
            f"Invocation finished in {time.monotonic() - started:.2f}s: {result.message}"
        )
        return result

    async def _run_pipeline(self, params: InvocationParams) -> ComputeResult:
        factory = self.options.pipeline
        if factory is None:
            raise UnsupportedPipelineModeError(
                "This worker does not support running as part of pipelines"
            )
        pipeline_options = PipelineOptions(
            is_batch_worker=isinstance(self.kind, WholeBatch),
            transformer_catalog_ref=params.transformer_catalog_ref,
            disable_source_download=params.flags.disable_source_download,
            settings=self.settings,
        )
        result = await factory(self.kind, pipeline_options).compute(params)
        if not result.route:
            result = result.model_copy(update={"route": Route.PIPELINE.value})
        return result


def _register(
    kind: WorkerKind,
    options: WorkerOptions | None,
    settings: WorkerSettings | None,
) -> RegisteredWorker:
    return RegisteredWorker(
        kind=kind,
        options=options or WorkerOptions(),
        settings=settings or WorkerSettings.from_env(),
    )
