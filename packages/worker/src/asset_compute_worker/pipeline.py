"""Pipeline collaborator contract.

The pipeline wraps the worker callback as one stage among transformers from
a catalog. Its stage execution lives outside this package; the core only
decides whether to hand an invocation over and with which options.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Protocol

from asset_compute_shared.asset_models import ComputeResult, InvocationParams
from asset_compute_shared.settings import WorkerSettings

from asset_compute_worker.dispatch import WorkerKind


@dataclass(frozen=True)
class PipelineOptions:
    """Options handed to the pipeline factory."""

    is_batch_worker: bool = False
    transformer_catalog_ref: str | None = None
    disable_source_download: bool = False
    settings: WorkerSettings = field(default_factory=WorkerSettings)


class PipelineRunner(Protocol):
    async def compute(self, params: InvocationParams) -> ComputeResult: ...


PipelineFactory = Callable[[WorkerKind, PipelineOptions], PipelineRunner]
