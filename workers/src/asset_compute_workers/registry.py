"""Component registry: maps component names to their task queue and activities.

The runner looks a component up here by its CLI argument. Two forms are
accepted:

- a built-in name from COMPONENTS (e.g. "passthrough")
- a "package.module:attribute" reference to a `main` returned by
  worker() or batch_worker(); it runs on ASSET_COMPUTE_QUEUE and the
  activity is named after the module

Every service runs the same image; only the component argument differs.
"""

from __future__ import annotations

import importlib
from dataclasses import dataclass, field
from typing import Any

from asset_compute_shared.task_queues import ASSET_COMPUTE_QUEUE, PASSTHROUGH_QUEUE
from asset_compute_worker.activities import as_activity

from asset_compute_workers import passthrough


@dataclass
class ComponentConfig:
    """Configuration for a single component's worker."""

    task_queue: str
    activities: list[Any] = field(default_factory=list)


COMPONENTS: dict[str, ComponentConfig] = {
    "passthrough": ComponentConfig(
        task_queue=PASSTHROUGH_QUEUE,
        activities=[as_activity(passthrough.main, "passthrough")],
    ),
}


def resolve_component(name: str) -> ComponentConfig:
    """Return the built-in component `name`, or load a module:attribute reference."""
    if name in COMPONENTS:
        return COMPONENTS[name]

    module_name, sep, attribute = name.partition(":")
    if not sep or not module_name or not attribute:
        available = ", ".join(sorted(COMPONENTS.keys()))
        raise ValueError(
            f"Unknown component '{name}'. Available: {available}, or 'package.module:main'"
        )

    module = importlib.import_module(module_name)
    main = getattr(module, attribute, None)
    if not callable(main):
        raise ValueError(f"'{name}' does not name a registered worker")
    return ComponentConfig(
        task_queue=ASSET_COMPUTE_QUEUE,
        activities=[as_activity(main, module_name)],
    )
