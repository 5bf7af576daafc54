"""Pydantic base models shared across components.

These serve as the contract types that flow out of a worker invocation and
across the Temporal activity boundary.
"""

from pydantic import BaseModel


class PlatformResult(BaseModel):
    """Standard result envelope returned by worker invocations.

    Every invocation returns this (or a subclass) so callers have a consistent
    interface for inspecting what happened.
    """

    success: bool
    message: str
    data: dict[str, str | int | float | bool | None] | None = None
