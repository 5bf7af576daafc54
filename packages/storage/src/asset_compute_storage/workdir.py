"""Per-invocation work directories.

One WorkDirectoryManager per invocation. It creates a private base directory
on first use and allocates fresh, never pre-existing subdirectories under it:
one for the source, and one per rendition (or one shared directory for a
batch worker). Subdirectories are siblings, so source and rendition areas
are always disjoint.

Usage:
    with WorkDirectoryManager(settings.work_root) as workdir:
        source_dir = workdir.allocate("in")
        out_dir = workdir.allocate("out")
        ...
    # everything removed here, on success or failure

release_all() is idempotent. Removal errors are logged and swallowed so a
cleanup problem never replaces the invocation's real result or error.
"""

from __future__ import annotations

import logging
import shutil
import tempfile
from pathlib import Path
from types import TracebackType

logger = logging.getLogger(__name__)


class WorkDirectoryManager:
    """Allocates and releases the temporary directories of one invocation."""

    def __init__(self, root: Path | str | None = None, *, prefix: str = "asset-compute-") -> None:
        self.root = Path(root) if root is not None else None
        self.prefix = prefix
        self.released = False
        self._base: Path | None = None
        self._allocated: list[Path] = []

    @property
    def base(self) -> Path:
        if self._base is None:
            if self.root is not None:
                self.root.mkdir(parents=True, exist_ok=True)
            self._base = Path(tempfile.mkdtemp(prefix=self.prefix, dir=self.root))
        return self._base

    @property
    def allocated(self) -> tuple[Path, ...]:
        return tuple(self._allocated)

    def allocate(self, kind: str) -> Path:
        """Create a new empty directory for `kind` ("in", "out", ...)."""
        if self.released:
            raise RuntimeError("Work directories were already released")
        path = Path(tempfile.mkdtemp(prefix=f"{kind}-", dir=self.base))
        self._allocated.append(path)
        logger.debug(f"Allocated {kind} directory {path}")
        return path

    def release_all(self) -> None:
        """Remove every allocated directory and the base. Safe to call twice."""
        if self.released:
            return
        self.released = True
        for path in reversed(self._allocated):
            _remove(path)
        if self._base is not None:
            _remove(self._base)

    def __enter__(self) -> WorkDirectoryManager:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.release_all()


def _remove(path: Path) -> None:
    try:
        shutil.rmtree(path)
    except FileNotFoundError:
        pass
    except OSError as e:
        logger.warning(f"Failed to remove work directory {path}: {e}")
