"""Route selection for one invocation.

The callback shape is fixed at registration as a tagged WorkerKind:

  PerRendition(callback)  — callback(source, rendition), once per rendition
  WholeBatch(callback)    — callback(source, renditions, out_directory), once

Per invocation, select_route() picks one of three routes:

  PIPELINE       — at least one rendition asks for the pipeline; then ALL
                   renditions go through it (never a mixed invocation)
  DIRECT_SINGLE  — PerRendition worker, no pipeline renditions
  DIRECT_BATCH   — WholeBatch worker, no pipeline renditions
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any

from asset_compute_shared.asset_models import InvocationParams, Rendition, Source
from asset_compute_shared.errors import (
    InvalidCallbackError,
    UnsupportedPipelineModeError,
)

RenditionCallback = Callable[[Source, Rendition], Awaitable[Any] | Any]
BatchCallback = Callable[[Source, list[Rendition], Path], Awaitable[Any] | Any]


@dataclass(frozen=True)
class PerRendition:
    callback: RenditionCallback

    def __post_init__(self) -> None:
        if not callable(self.callback):
            raise InvalidCallbackError("rendition_callback must be callable")


@dataclass(frozen=True)
class WholeBatch:
    callback: BatchCallback

    def __post_init__(self) -> None:
        if not callable(self.callback):
            raise InvalidCallbackError("renditions_callback must be callable")


WorkerKind = PerRendition | WholeBatch


class Route(str, Enum):
    PIPELINE = "pipeline"
    DIRECT_SINGLE = "direct-single"
    DIRECT_BATCH = "direct-batch"


def has_pipeline_rendition(params: InvocationParams) -> bool:
    """True if at least one rendition requires the pipeline."""
    return any(rendition.pipeline is True for rendition in params.renditions)


def select_route(
    params: InvocationParams, kind: WorkerKind, *, supports_pipeline: bool
) -> Route:
    if has_pipeline_rendition(params):
        if not supports_pipeline:
            raise UnsupportedPipelineModeError(
                "This worker does not support running as part of pipelines"
            )
        return Route.PIPELINE
    if isinstance(kind, WholeBatch):
        return Route.DIRECT_BATCH
    return Route.DIRECT_SINGLE
