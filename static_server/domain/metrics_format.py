"""Formatting helpers for the values reported by the stats endpoint."""

SECONDS_PER_MINUTE = 60
SECONDS_PER_HOUR = 60 * SECONDS_PER_MINUTE
SECONDS_PER_DAY = 24 * SECONDS_PER_HOUR
BYTES_PER_MIB = 1024 * 1024


def bytes_to_mib(size_bytes: int) -> int:
    """Convert bytes to whole MiB, truncating."""
    return size_bytes // BYTES_PER_MIB


def format_ram_usage(size_bytes: int) -> str:
    return f"{bytes_to_mib(size_bytes)} MiB"


def format_threads(threads_in_use: int, available_cpus: int) -> str:
    return f"{threads_in_use}/{available_cpus}"


def split_uptime(elapsed_seconds: float) -> tuple[int, int, int, int]:
    """Break an elapsed duration into whole days, hours, minutes and seconds."""
    total = max(0, int(elapsed_seconds))
    days, remainder = divmod(total, SECONDS_PER_DAY)
    hours, remainder = divmod(remainder, SECONDS_PER_HOUR)
    minutes, seconds = divmod(remainder, SECONDS_PER_MINUTE)
    return days, hours, minutes, seconds


def format_uptime(elapsed_seconds: float) -> str:
    """Render uptime as ``"D days H hours M minutes S seconds"``."""
    days, hours, minutes, seconds = split_uptime(elapsed_seconds)
    return f"{days} days {hours} hours {minutes} minutes {seconds} seconds"
