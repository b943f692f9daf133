"""Server lifecycle: draining flag and in-flight connection tracking."""

import threading

from static_server.domain.correlation_id import get_logger

LIFECYCLE_LOGGER = get_logger("lifecycle")


class ServerLifecycle:
    """Tracks open client connections and the shutdown state."""

    def __init__(self) -> None:
        self._draining = threading.Event()
        self._idle = threading.Condition()
        self._active_connections = 0

    def is_draining(self) -> bool:
        return self._draining.is_set()

    def begin_draining(self) -> None:
        """Stop accepting work; in-flight connections may still finish."""
        if self._draining.is_set():
            return
        self._draining.set()
        LIFECYCLE_LOGGER.info(
            "Beginning graceful shutdown", extra={"event": "draining"}
        )

    def connection_opened(self) -> None:
        with self._idle:
            self._active_connections += 1

    def connection_closed(self) -> None:
        with self._idle:
            self._active_connections = max(0, self._active_connections - 1)
            if self._active_connections == 0:
                self._idle.notify_all()

    def active_connections(self) -> int:
        with self._idle:
            return self._active_connections

    def wait_for_idle(self, timeout: float) -> bool:
        """Block until every connection has closed or ``timeout`` elapses."""
        with self._idle:
            idle = self._idle.wait_for(
                lambda: self._active_connections == 0, timeout=max(0.0, timeout)
            )
            remaining = self._active_connections
        if not idle:
            LIFECYCLE_LOGGER.warning(
                "Shutdown timeout exceeded",
                extra={"event": "shutdown_timeout", "remaining_workers": remaining},
            )
        return idle
