"""Worker runner entrypoint.

Usage:
  python -m asset_compute_workers.runner <component>
  COMPONENT=my_worker.main:main python -m asset_compute_workers.runner

<component> is a built-in name from the registry or a module:attribute
reference to a registered worker. CLI argument takes precedence over the
COMPONENT env var.

Starts a Temporal worker polling the component's task queue until
interrupted (SIGINT/SIGTERM).
"""

import asyncio
import logging
import os
import sys

from asset_compute_shared.temporal_client import connect
from temporalio.worker import Worker

from asset_compute_workers.registry import COMPONENTS, resolve_component

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


async def run_worker(component_name: str) -> None:
    """Start a Temporal worker for the specified component."""
    try:
        config = resolve_component(component_name)
    except (ImportError, ValueError) as e:
        logger.error(f"Cannot load component '{component_name}': {e}")
        sys.exit(1)

    client = await connect()

    logger.info(
        f"Starting worker for '{component_name}' on queue '{config.task_queue}' "
        f"(activities={len(config.activities)})"
    )

    worker = Worker(
        client,
        task_queue=config.task_queue,
        activities=config.activities,
    )

    await worker.run()


def main() -> None:
    """CLI entrypoint — parse the component name and start the worker."""
    component_name = sys.argv[1] if len(sys.argv) >= 2 else os.environ.get("COMPONENT", "")

    if not component_name:
        print("Usage: python -m asset_compute_workers.runner <component>")
        print("  or: COMPONENT=<component> python -m asset_compute_workers.runner")
        print(f"Built-in components: {', '.join(sorted(COMPONENTS.keys()))}")
        sys.exit(1)

    asyncio.run(run_worker(component_name))


if __name__ == "__main__":
    main()
