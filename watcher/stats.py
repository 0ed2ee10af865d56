"""
Stats Normalizer - Turns raw Docker stats counters into CPU and memory percentages
"""

import logging
import math
from dataclasses import dataclass
from typing import Any, Dict

logger = logging.getLogger('watcher.stats')

BYTES_PER_MB = 1024 * 1024


@dataclass(frozen=True)
class RawStatsSnapshot:
    """Cumulative counters from one `docker stats --no-stream` style reading"""
    cpu_total_usage: int
    precpu_total_usage: int
    system_cpu_usage: int
    presystem_cpu_usage: int
    online_cpus: int
    memory_usage: int
    memory_limit: int

    @classmethod
    def from_docker(cls, stats: Dict[str, Any]) -> 'RawStatsSnapshot':
        """
        Build a snapshot from the engine's stats document

        Args:
            stats: Dict returned by the stats endpoint with stream=False

        Returns:
            RawStatsSnapshot with missing counters read as 0
        """
        cpu_stats = stats.get('cpu_stats') or {}
        precpu_stats = stats.get('precpu_stats') or {}
        memory_stats = stats.get('memory_stats') or {}

        cpu_usage = cpu_stats.get('cpu_usage') or {}
        precpu_usage = precpu_stats.get('cpu_usage') or {}

        online_cpus = cpu_stats.get('online_cpus')
        if not online_cpus:
            online_cpus = len(cpu_usage.get('percpu_usage') or []) or 1

        return cls(
            cpu_total_usage=cpu_usage.get('total_usage', 0),
            precpu_total_usage=precpu_usage.get('total_usage', 0),
            system_cpu_usage=cpu_stats.get('system_cpu_usage', 0),
            presystem_cpu_usage=precpu_stats.get('system_cpu_usage', 0),
            online_cpus=online_cpus,
            memory_usage=memory_stats.get('usage', 0),
            memory_limit=memory_stats.get('limit', 0),
        )


@dataclass(frozen=True)
class NormalizedMetrics:
    """CPU and memory usage of one container in one sampling cycle"""
    cpu_percent: float
    memory_usage_bytes: int
    memory_percent: float

    @property
    def memory_usage_mb(self) -> str:
        return format_megabytes(self.memory_usage_bytes)


def cpu_percent(raw: RawStatsSnapshot) -> float:
    """
    CPU usage as a percentage of one core, scaled by the online core count

    A zero (or negative) system delta means the engine has no previous
    window yet; that reading is reported as 0.0.
    """
    cpu_delta = raw.cpu_total_usage - raw.precpu_total_usage
    system_delta = raw.system_cpu_usage - raw.presystem_cpu_usage

    if system_delta <= 0:
        logger.debug('System CPU delta is %d, reporting CPU as 0%%', system_delta)
        return 0.0
    if cpu_delta < 0:
        logger.debug('CPU counter went backwards (%d), reporting CPU as 0%%', cpu_delta)
        return 0.0

    value = (cpu_delta / system_delta) * raw.online_cpus * 100.0
    return value if math.isfinite(value) else 0.0


def memory_percent(raw: RawStatsSnapshot) -> float:
    """Memory usage against the container limit; no limit reads as 0.0"""
    if raw.memory_limit <= 0:
        return 0.0
    return (raw.memory_usage / raw.memory_limit) * 100.0


def normalize(raw: RawStatsSnapshot) -> NormalizedMetrics:
    """
    Derive percentages from a raw snapshot

    Args:
        raw: Counters for a single container

    Returns:
        NormalizedMetrics computed only from this snapshot
    """
    return NormalizedMetrics(
        cpu_percent=cpu_percent(raw),
        memory_usage_bytes=raw.memory_usage,
        memory_percent=memory_percent(raw),
    )


def format_megabytes(num_bytes: int) -> str:
    """Render a byte count as megabytes with 2 decimals"""
    return f"{num_bytes / BYTES_PER_MB:.2f}"
