"""Shared fixtures for unit tests."""

import logging

import pytest

from static_server.domain.correlation_id import ROOT_LOGGER_NAME


@pytest.fixture(autouse=True)
def enable_log_propagation():
    """Ensure logs propagate to root so caplog can catch them."""
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    old_propagate = logger.propagate
    logger.propagate = True
    yield
    logger.propagate = old_propagate


class FakeClock:
    """Manually advanced clock returning seconds."""

    def __init__(self, start: float = 0.0) -> None:
        self.current = start

    def __call__(self) -> float:
        return self.current

    def advance(self, seconds: float) -> None:
        self.current += seconds


class FakeMetrics:
    """Fixed process metrics standing in for psutil."""

    def __init__(
        self, memory: int = 10_485_760, threads: int = 4, cpus: int = 8
    ) -> None:
        self.memory = memory
        self.threads = threads
        self.cpus = cpus

    def memory_bytes(self) -> int:
        return self.memory

    def threads_in_use(self) -> int:
        return self.threads

    def available_cpus(self) -> int:
        return self.cpus


@pytest.fixture(name="fake_clock")
def fake_clock_fixture() -> FakeClock:
    return FakeClock(1_000.0)


@pytest.fixture(name="fake_metrics")
def fake_metrics_fixture() -> FakeMetrics:
    return FakeMetrics()
