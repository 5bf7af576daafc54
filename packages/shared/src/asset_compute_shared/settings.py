"""Worker settings — the explicit configuration value threaded through the core.

The storage and worker layers never read the process environment themselves.
A WorkerSettings instance is built once at the outer boundary (the activity
wrapper or the runner) and passed down through constructors, so test and
production code run the same control flow and differ only in configuration.

Environment variables recognized by from_env():

  ASSET_COMPUTE_UNIT_TEST_MODE       resolve sources from the local input root
  ASSET_COMPUTE_DISABLE_RETRIES      attempt every transfer exactly once
  ASSET_COMPUTE_TRANSFORMER_CATALOG  opaque reference forwarded to pipelines
  ASSET_COMPUTE_INPUT_ROOT           input root for unit-test mode sources
  ASSET_COMPUTE_WORK_ROOT            parent of per-invocation work directories
  ASSET_COMPUTE_MAX_ATTEMPTS         retry budget per transfer
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from pathlib import Path

from pydantic import BaseModel

_TRUTHY = {"1", "true", "yes", "on"}


def _env_flag(env: Mapping[str, str], name: str) -> bool:
    return env.get(name, "").strip().lower() in _TRUTHY


class WorkerSettings(BaseModel):
    """Construction-time configuration for one worker registration."""

    unit_test_mode: bool = False
    disable_retries: bool = False
    transformer_catalog_ref: str | None = None
    input_root: Path | None = None
    work_root: Path | None = None
    max_attempts: int = 3
    retry_min_wait: float = 1.0
    retry_max_wait: float = 30.0
    http_timeout: float = 30.0

    @classmethod
    def from_env(cls, env: Mapping[str, str] | None = None) -> WorkerSettings:
        """Build settings from ASSET_COMPUTE_* environment variables."""
        env = os.environ if env is None else env
        input_root = env.get("ASSET_COMPUTE_INPUT_ROOT")
        work_root = env.get("ASSET_COMPUTE_WORK_ROOT")
        max_attempts = env.get("ASSET_COMPUTE_MAX_ATTEMPTS")
        return cls(
            unit_test_mode=_env_flag(env, "ASSET_COMPUTE_UNIT_TEST_MODE"),
            disable_retries=_env_flag(env, "ASSET_COMPUTE_DISABLE_RETRIES"),
            transformer_catalog_ref=env.get("ASSET_COMPUTE_TRANSFORMER_CATALOG") or None,
            input_root=Path(input_root) if input_root else None,
            work_root=Path(work_root) if work_root else None,
            max_attempts=int(max_attempts) if max_attempts else 3,
        )
