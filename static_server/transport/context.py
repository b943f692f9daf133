"""Context object shared across worker threads."""

from dataclasses import dataclass
from typing import Optional

from static_server.bootstrap.config import ServerConfig
from static_server.lifecycle.state import ServerLifecycle
from static_server.lifecycle.stats import StatsTracker


@dataclass
class WorkerContext:
    """Dependencies handed to every connection worker."""

    directory: str
    stats: Optional[StatsTracker] = None
    lifecycle: Optional[ServerLifecycle] = None
    config: Optional[ServerConfig] = None
