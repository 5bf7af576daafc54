"""Asset Compute boundary models — the contract between the hosting layer and the worker core.

Two groups of types live here:

  - Descriptors (SourceDescriptor, RenditionDescriptor, InvocationParams) are
    pydantic models. They arrive as JSON through the Temporal activity boundary
    and are validated once on entry.
  - Runtime objects (Source, Rendition) are plain dataclasses created by the
    worker during an invocation. They carry local paths and are what the
    caller's callback receives.

Design choices:
  - A rendition target is kept in its raw shape (string, list of URLs, or a
    {"urls": [...]} multipart object). Validation happens in the storage layer
    right before upload so a bad target fails that rendition, not parsing.
  - RenditionDescriptor allows extra fields. Worker-specific instructions
    (width, quality, ...) pass through untouched to the callback.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, model_validator

from asset_compute_shared.models import PlatformResult

# ============================================================================
# Descriptors — validated input
# ============================================================================


class SourceDescriptor(BaseModel):
    """Where the source asset lives. A bare string is accepted as the URL."""

    model_config = ConfigDict(extra="allow")

    url: str | None = None
    name: str | None = None
    mimetype: str | None = None
    size: int | None = None

    @model_validator(mode="before")
    @classmethod
    def _coerce_string(cls, value: Any) -> Any:
        if isinstance(value, str):
            return {"url": value}
        return value


class MultipartTarget(BaseModel):
    """A multipart upload target: one URL per part."""

    model_config = ConfigDict(extra="allow")

    urls: list[str] = []
    min_part_size: int | None = None
    max_part_size: int | None = None


class RenditionDescriptor(BaseModel):
    """One requested rendition and its destination."""

    model_config = ConfigDict(extra="allow")

    name: str | None = None
    fmt: str | None = None
    mimetype: str | None = None
    target: str | list[str] | MultipartTarget | None = None
    pipeline: bool = False


class ExecutionFlags(BaseModel):
    """Execution-mode switches, normalized from settings and registration options."""

    model_config = ConfigDict(frozen=True)

    disable_source_download: bool = False
    disable_retries: bool = False
    unit_test_mode: bool = False


class InvocationParams(BaseModel):
    """Everything one invocation needs. Immutable once received."""

    model_config = ConfigDict(frozen=True, extra="allow")

    source: SourceDescriptor
    renditions: list[RenditionDescriptor] = []
    flags: ExecutionFlags = ExecutionFlags()
    transformer_catalog_ref: str | None = None

    def with_flags(self, **updates: bool) -> InvocationParams:
        """Return a copy with normalized execution flags."""
        flags = self.flags.model_copy(update=updates)
        return self.model_copy(update={"flags": flags})


# ============================================================================
# Runtime objects — what the callback sees
# ============================================================================


@dataclass
class Source:
    """The source asset as materialized for this invocation."""

    url: str
    name: str
    path: Path
    directory: Path

    @property
    def exists(self) -> bool:
        return self.path.is_file()


@dataclass
class Rendition:
    """One rendition the callback must write to `path`."""

    index: int
    name: str
    path: Path
    directory: Path
    target: str | list[str] | MultipartTarget | None = None
    pipeline: bool = False
    mimetype: str | None = None
    instructions: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_descriptor(
        cls,
        index: int,
        descriptor: RenditionDescriptor,
        directory: Path,
        name: str | None = None,
    ) -> Rendition:
        name = name or rendition_name(index, descriptor)
        return cls(
            index=index,
            name=name,
            path=directory / name,
            directory=directory,
            target=descriptor.target,
            pipeline=descriptor.pipeline,
            mimetype=descriptor.mimetype,
            instructions=descriptor.model_dump(exclude={"target"}),
        )


def local_file_name(name: str | None) -> str | None:
    """The final path component of `name`, or None if it cannot name a file."""
    if not name:
        return None
    base = Path(name).name
    if base in ("", ".", ".."):
        return None
    return base


def rendition_name(index: int, descriptor: RenditionDescriptor) -> str:
    """Local file name for a rendition: explicit name, else rendition<index>[.<fmt>]."""
    name = local_file_name(descriptor.name)
    if name:
        return name
    if descriptor.fmt:
        return f"rendition{index}.{descriptor.fmt}"
    return f"rendition{index}"


def unique_rendition_names(descriptors: list[RenditionDescriptor]) -> list[str]:
    """Rendition file names for renditions sharing one directory.

    A name already taken by an earlier rendition is prefixed with the
    rendition index until it is free.
    """
    names: list[str] = []
    taken: set[str] = set()
    for index, descriptor in enumerate(descriptors):
        name = rendition_name(index, descriptor)
        while name in taken:
            name = f"{index}-{name}"
        taken.add(name)
        names.append(name)
    return names


# ============================================================================
# Result
# ============================================================================


class ComputeResult(PlatformResult):
    """Returned by a worker invocation, on both direct and pipeline routes."""

    route: str = ""
    source_name: str = ""
    renditions: list[str] = []
