"""Lock-guarded ledger of request completion times with sliding window counting."""

import threading


class RequestLedger:
    """Ordered record of request completion timestamps.

    Timestamps are seconds on whatever clock the owner uses (the stats tracker
    feeds ``time.monotonic``). ``record`` and ``count_and_prune`` share one
    lock, so an append never interleaves with a prune-and-count pass.

    Pruning only happens inside ``count_and_prune``. A process whose window is
    never queried keeps every timestamp it has recorded.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._timestamps: list[float] = []

    def record(self, now: float) -> None:
        """Append a completion timestamp."""
        with self._lock:
            self._timestamps.append(now)

    def count_and_prune(self, now: float, window_seconds: float) -> int:
        """Return how many entries fall in ``(now - window, ...]``.

        Entries at or before ``now - 2 * window`` are dropped first. A zero or
        negative window counts only entries newer than ``now``.
        """
        window = max(0.0, window_seconds)
        max_age = now - 2 * window
        cutoff = now - window
        with self._lock:
            self._timestamps = [ts for ts in self._timestamps if ts > max_age]
            return sum(1 for ts in self._timestamps if ts > cutoff)

    def timestamps(self) -> list[float]:
        """Return a copy of the retained timestamps, oldest first."""
        with self._lock:
            return list(self._timestamps)

    def __len__(self) -> int:
        with self._lock:
            return len(self._timestamps)
