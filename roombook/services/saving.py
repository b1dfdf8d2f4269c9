"""Guard that keeps a second write for the same entity from starting while
the first is still outstanding."""

from __future__ import annotations

import threading
from collections.abc import Hashable, Iterator
from contextlib import contextmanager

from roombook.domain.errors import BusyError


class SavingTracker:
    def __init__(self) -> None:
        self._saving: set[Hashable] = set()
        self._lock = threading.Lock()

    @contextmanager
    def saving(self, key: Hashable) -> Iterator[None]:
        with self._lock:
            if key in self._saving:
                raise BusyError(f"{key} is already being saved")
            self._saving.add(key)
        try:
            yield
        finally:
            with self._lock:
                self._saving.discard(key)
