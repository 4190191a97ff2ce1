# live_score/state.py
from __future__ import annotations

import threading
from typing import Callable, Optional

from live_score.models import Snapshot

# Process-wide published state (sufficient for single-instance deploys).
# Snapshots are immutable; writers swap the reference under a lock, readers
# just take whatever reference is current and never see a half-built value.


class SnapshotStore:
    def __init__(self, source_url: str = "", snapshot: Optional[Snapshot] = None):
        self._lock = threading.Lock()
        self._snapshot = snapshot if snapshot is not None else Snapshot.initial()
        self._source_url = source_url.strip()

    @property
    def snapshot(self) -> Snapshot:
        return self._snapshot

    @property
    def source_url(self) -> str:
        return self._source_url

    def set_source_url(self, url: str) -> None:
        with self._lock:
            self._source_url = url.strip()

    def update(self, fn: Callable[[Snapshot], Snapshot]) -> Snapshot:
        """Copy-on-write: `fn` receives the current snapshot and returns its replacement."""
        with self._lock:
            self._snapshot = fn(self._snapshot)
            return self._snapshot

    def record_error(self, message: str) -> Snapshot:
        """Only `error` changes; every other field keeps its last good value."""
        return self.update(lambda s: s.model_copy(update={"error": message}))
