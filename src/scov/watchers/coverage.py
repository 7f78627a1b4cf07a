"""CoverageWatcher: keeps a CoverageStore in sync with the result-set file.

Each refresh rebuilds the classified files from scratch and publishes them
in one step, so readers of the store never see a half-built set.
"""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from typing import TYPE_CHECKING

from scov.adapters.simplecov import SimpleCovAdapter
from scov.errors import CoverageLoadError

if TYPE_CHECKING:
    from collections.abc import Callable
    from pathlib import Path

    from scov.config import ScovConfig
    from scov.models.store import CoverageSnapshot, CoverageStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class _Fingerprint:
    path: Path
    mtime_ns: int
    size: int


class CoverageWatcher:
    """Reloads coverage into *store* whenever the result set changes."""

    def __init__(self, config: ScovConfig, store: CoverageStore) -> None:
        self._config = config
        self._store = store
        self._adapter = SimpleCovAdapter(config.coverage_path)
        self._refresh_lock = threading.Lock()
        self._fingerprint: _Fingerprint | None = None

    @property
    def store(self) -> CoverageStore:
        return self._store

    def _current_fingerprint(self, path: Path) -> _Fingerprint | None:
        try:
            stat = path.stat()
        except OSError:
            return None
        return _Fingerprint(path=path, mtime_ns=stat.st_mtime_ns, size=stat.st_size)

    def invalidate(self) -> None:
        """Drop the published files and force the next refresh to reload."""
        with self._refresh_lock:
            self._fingerprint = None
            self._store.clear()

    def refresh(self, *, force: bool = False) -> bool:
        """Reload the result set if it changed since the last refresh.

        Returns True when a new snapshot was published.  A missing result
        set clears the store.

        Raises:
            CoverageLoadError: If the result set exists but cannot be loaded.
                The previously published snapshot is left in place.
        """
        with self._refresh_lock:
            path = self._adapter.find()
            if path is None:
                if self._fingerprint is None and not self._store.get().files:
                    return False
                self._fingerprint = None
                self._store.clear()
                return True

            fingerprint = self._current_fingerprint(path)
            if not force and fingerprint is not None and fingerprint == self._fingerprint:
                logger.debug("Result set %s unchanged, skipping refresh", path)
                return False

            try:
                files = self._adapter.load(path)
            except CoverageLoadError as exc:
                logger.error(
                    "Coverage refresh failed, keeping snapshot v%d: %s", self._store.version, exc
                )
                raise

            self._store.replace(files, source=path)
            self._fingerprint = fingerprint
            return True

    def watch(
        self,
        *,
        interval: float | None = None,
        max_cycles: int | None = None,
        on_refresh: Callable[[CoverageSnapshot], None] | None = None,
    ) -> None:
        """Poll for result-set changes until interrupted or *max_cycles* is reached.

        Load failures are logged and the loop keeps going with the last good
        snapshot.
        """
        delay = interval if interval is not None else self._config.watch.interval
        cycles = 0
        while max_cycles is None or cycles < max_cycles:
            cycles += 1
            try:
                published = self.refresh()
            except CoverageLoadError:
                published = False
            if published and on_refresh is not None:
                on_refresh(self._store.get())
            if max_cycles is None or cycles < max_cycles:
                time.sleep(delay)
