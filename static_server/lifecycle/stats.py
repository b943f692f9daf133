"""Process-wide request statistics owned by the server composition root."""

import time
from typing import Callable, NamedTuple, Optional

import psutil

from static_server.domain.metrics_format import (
    format_ram_usage,
    format_threads,
    format_uptime,
)
from static_server.domain.request_ledger import RequestLedger

DEFAULT_WINDOW_SECONDS = 60.0


class ProcessMetrics:
    """psutil-backed metrics for the current process."""

    def __init__(self, process: Optional[psutil.Process] = None) -> None:
        self._process = process or psutil.Process()

    def memory_bytes(self) -> int:
        return self._process.memory_info().rss

    def threads_in_use(self) -> int:
        return self._process.num_threads()

    def available_cpus(self) -> int:
        return psutil.cpu_count(logical=True) or 1


class ServerClock:
    """Start instant captured once; uptime is measured against it."""

    def __init__(self, now: Callable[[], float] = time.monotonic) -> None:
        self._now = now
        self.started_at = now()

    def now(self) -> float:
        return self._now()

    def uptime_seconds(self) -> float:
        return max(0.0, self._now() - self.started_at)


class StatsSnapshot(NamedTuple):
    ram_usage: str
    threads: str
    uptime: str
    requests: int


class StatsTracker:
    """Request ledger, start time and metrics source behind ``/stats``.

    One instance is built at startup and shared by every worker thread.
    """

    def __init__(
        self,
        window_seconds: float = DEFAULT_WINDOW_SECONDS,
        metrics: Optional[ProcessMetrics] = None,
        clock: Optional[ServerClock] = None,
    ) -> None:
        self._window_seconds = float(window_seconds)
        self._metrics = metrics if metrics is not None else ProcessMetrics()
        self._clock = clock if clock is not None else ServerClock()
        self._ledger = RequestLedger()

    @property
    def window_seconds(self) -> float:
        return self._window_seconds

    @property
    def ledger(self) -> RequestLedger:
        return self._ledger

    def record_request(self) -> None:
        """Note that a request finished just now."""
        self._ledger.record(self._clock.now())

    def requests_in_window(self, window_seconds: Optional[float] = None) -> int:
        window = self._window_seconds if window_seconds is None else window_seconds
        return self._ledger.count_and_prune(self._clock.now(), window)

    def snapshot(self, window_seconds: Optional[float] = None) -> StatsSnapshot:
        return StatsSnapshot(
            ram_usage=format_ram_usage(self._metrics.memory_bytes()),
            threads=format_threads(
                self._metrics.threads_in_use(), self._metrics.available_cpus()
            ),
            uptime=format_uptime(self._clock.uptime_seconds()),
            requests=self.requests_in_window(window_seconds),
        )
