"""Asset Compute worker core: registration, dispatch, and direct-mode orchestration.

Usage:
    from asset_compute_worker import worker

    def convert(source, rendition):
        ...  # read source.path, write rendition.path

    main = worker(convert)
"""

from asset_compute_shared.asset_models import ComputeResult, Rendition, Source

from asset_compute_worker.api import WorkerOptions, batch_worker, worker
from asset_compute_worker.dispatch import Route
from asset_compute_worker.pipeline import PipelineOptions, PipelineRunner

__all__ = [
    "ComputeResult",
    "PipelineOptions",
    "PipelineRunner",
    "Rendition",
    "Route",
    "Source",
    "WorkerOptions",
    "batch_worker",
    "worker",
]
