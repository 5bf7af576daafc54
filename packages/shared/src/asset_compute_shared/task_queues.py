"""Task queue name constants.

Each worker component polls its own Temporal task queue. The runner and the
registry both reference these constants.
"""

# Default queue for workers registered by module reference
ASSET_COMPUTE_QUEUE = "asset-compute-queue"

# Built-in reference worker
PASSTHROUGH_QUEUE = "passthrough-queue"
