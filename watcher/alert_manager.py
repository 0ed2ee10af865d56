"""
Alert Manager - Evaluates container metrics against thresholds and builds alerts
"""

from datetime import datetime, timezone
from typing import List, Optional
from dataclasses import dataclass, field
from enum import Enum, IntEnum

from .stats import NormalizedMetrics, format_megabytes


class MetricKind(str, Enum):
    """Metrics that can trigger an alert"""
    CPU = "cpu"
    MEMORY = "memory"


class AlertColor(IntEnum):
    """Embed colors used by the webhook payload"""
    STARTUP = 0x00FF00
    WARNING = 0xFFA500
    ERROR = 0xFF0000


@dataclass(frozen=True)
class Thresholds:
    """Alert thresholds, fixed at startup"""
    cpu_percent: float
    memory_percent: float


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class AlertEvent:
    """A single notification handed to the dispatcher"""
    message: str
    color: AlertColor
    timestamp: datetime = field(default_factory=_utcnow)


@dataclass(frozen=True)
class Breach:
    """A metric above its threshold for one container"""
    container_name: str
    metric: MetricKind
    value: float
    threshold: float
    memory_usage_bytes: Optional[int] = None

    def to_event(self) -> AlertEvent:
        """Build the warning alert for this breach"""
        if self.metric == MetricKind.CPU:
            message = (
                f"⚠️ Container **{self.container_name}** CPU usage is "
                f"{self.value:.2f}% (threshold: {self.threshold}%)"
            )
        else:
            usage = ""
            if self.memory_usage_bytes is not None:
                usage = f" ({format_megabytes(self.memory_usage_bytes)} MB)"
            message = (
                f"⚠️ Container **{self.container_name}** memory usage is "
                f"{self.value:.2f}%{usage} (threshold: {self.threshold}%)"
            )
        return AlertEvent(message=message, color=AlertColor.WARNING)


def evaluate_thresholds(container_name: str, metrics: NormalizedMetrics,
                        thresholds: Thresholds) -> List[Breach]:
    """
    Check one container's metrics against the thresholds

    Comparisons are strict: a value equal to its threshold does not breach,
    and a threshold of 0 triggers on any positive usage.

    Args:
        container_name: Container name
        metrics: Normalized metrics for this cycle
        thresholds: Active thresholds

    Returns:
        List of breaches, CPU first
    """
    breaches = []

    if metrics.cpu_percent > thresholds.cpu_percent:
        breaches.append(Breach(
            container_name=container_name,
            metric=MetricKind.CPU,
            value=metrics.cpu_percent,
            threshold=thresholds.cpu_percent,
        ))

    if metrics.memory_percent > thresholds.memory_percent:
        breaches.append(Breach(
            container_name=container_name,
            metric=MetricKind.MEMORY,
            value=metrics.memory_percent,
            threshold=thresholds.memory_percent,
            memory_usage_bytes=metrics.memory_usage_bytes,
        ))

    return breaches


# Operational notices

def startup_event(thresholds: Thresholds, interval_seconds: float) -> AlertEvent:
    return AlertEvent(
        message=(
            f"✅ Docker Watcher started. Thresholds: CPU {thresholds.cpu_percent}%, "
            f"memory {thresholds.memory_percent}%. Sampling every {interval_seconds}s."
        ),
        color=AlertColor.STARTUP,
    )


def listing_failed_event(error: Exception) -> AlertEvent:
    return AlertEvent(
        message=f"❌ Failed to list running containers: {error}",
        color=AlertColor.ERROR,
    )


def container_failed_event(container: str, error: Exception) -> AlertEvent:
    return AlertEvent(
        message=f"❌ Failed to collect stats for container **{container}**: {error}",
        color=AlertColor.ERROR,
    )


def fatal_event(error: BaseException) -> AlertEvent:
    return AlertEvent(
        message=f"🚨 Docker Watcher stopped on a fatal error: {error}",
        color=AlertColor.ERROR,
    )
