"""Temporal activity wrapper for registered workers.

A registered `main` becomes one activity. The activity receives the raw
invocation params as JSON, runs the invocation, and returns ComputeResult.

AssetComputeError is translated into ApplicationError so Temporal sees the
error kind and the (redacted) params, and knows not to retry validation
failures.
"""

from __future__ import annotations

from typing import Any

from asset_compute_shared.asset_models import ComputeResult
from asset_compute_shared.errors import AssetComputeError
from temporalio import activity
from temporalio.exceptions import ApplicationError

from asset_compute_worker.api import Main


def as_activity(main: Main, name: str) -> Any:
    """Wrap a registered worker `main` as a Temporal activity called `name`."""

    @activity.defn(name=name)
    async def compute_renditions(params: dict[str, Any]) -> ComputeResult:
        renditions = params.get("renditions") or []
        activity.logger.info(f"Asset Compute: '{name}' invoked with {len(renditions)} renditions")
        try:
            return await main(params)
        except AssetComputeError as e:
            raise ApplicationError(
                e.message,
                e.params,
                type=e.reason,
                non_retryable=not e.retryable,
            ) from e

    return compute_renditions
