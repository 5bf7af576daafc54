"""Temporal client connection factory.

Two connection modes, selected from the environment:

1. **Local dev**: `TEMPORAL_ADDRESS` (default `localhost:7233`), no auth.
2. **Temporal Cloud**: `TEMPORAL_API_KEY` plus `TEMPORAL_REGIONAL_ENDPOINT`,
   API key authentication over TLS.

`TEMPORAL_NAMESPACE` applies to both (default `default`). The client uses the
pydantic data converter so ComputeResult and the descriptor models cross the
activity boundary as validated models instead of plain dicts.
"""

from __future__ import annotations

import os
from collections.abc import Mapping

from temporalio.client import Client
from temporalio.contrib.pydantic import pydantic_data_converter


async def connect(env: Mapping[str, str] | None = None) -> Client:
    """Create a connected Temporal client for the current environment."""
    env = os.environ if env is None else env
    namespace = env.get("TEMPORAL_NAMESPACE", "default")
    api_key = env.get("TEMPORAL_API_KEY")

    if api_key:
        address = env.get("TEMPORAL_REGIONAL_ENDPOINT")
        if not address:
            raise ValueError(
                "TEMPORAL_API_KEY is set but TEMPORAL_REGIONAL_ENDPOINT is missing. "
                "Set it to the regional endpoint from the Temporal Cloud 'Connect' dialog."
            )
        return await Client.connect(
            address,
            namespace=namespace,
            api_key=api_key,
            tls=True,
            data_converter=pydantic_data_converter,
        )

    address = env.get("TEMPORAL_ADDRESS", "localhost:7233")
    return await Client.connect(
        address, namespace=namespace, data_converter=pydantic_data_converter
    )
