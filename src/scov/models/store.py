"""Versioned holder for the currently published set of classified files."""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Mapping
    from pathlib import Path

    from scov.models.source_file import SourceFile

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CoverageSnapshot:
    """An immutable, complete set of classified files."""

    files: Mapping[str, SourceFile] = field(default_factory=lambda: MappingProxyType({}))
    source: Path | None = None
    """Result-set file the snapshot was built from."""

    version: int = 0
    loaded_at: float = 0.0

    def get(self, file_name: str) -> SourceFile | None:
        return self.files.get(file_name)

    def __len__(self) -> int:
        return len(self.files)


class CoverageStore:
    """Single owner of the current :class:`CoverageSnapshot`.

    Readers call :meth:`get` and always receive a complete snapshot.
    Writers build the next set of files up front and publish it with
    :meth:`replace`, which swaps the reference under a lock.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._snapshot = CoverageSnapshot()

    def get(self) -> CoverageSnapshot:
        """Return the current snapshot."""
        return self._snapshot

    def get_file(self, file_name: str) -> SourceFile | None:
        """Return the classified model for *file_name* from the current snapshot."""
        return self._snapshot.get(file_name)

    @property
    def version(self) -> int:
        return self._snapshot.version

    def replace(
        self, files: Mapping[str, SourceFile], source: Path | None = None
    ) -> CoverageSnapshot:
        """Publish *files* as the new snapshot and return it."""
        with self._lock:
            snapshot = CoverageSnapshot(
                files=MappingProxyType(dict(files)),
                source=source,
                version=self._snapshot.version + 1,
                loaded_at=time.time(),
            )
            self._snapshot = snapshot
        logger.info("Published coverage snapshot v%d (%d files)", snapshot.version, len(snapshot))
        return snapshot

    def clear(self) -> CoverageSnapshot:
        """Invalidate the current snapshot by publishing an empty one."""
        with self._lock:
            snapshot = CoverageSnapshot(version=self._snapshot.version + 1, loaded_at=time.time())
            self._snapshot = snapshot
        logger.info("Cleared coverage snapshot (v%d)", snapshot.version)
        return snapshot
