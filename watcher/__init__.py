"""
Docker Watcher

Polls the Docker engine for running containers and sends webhook alerts when
a container stays above its resource thresholds:
- High CPU usage (percentage of the host's cores)
- High memory usage (percentage of the container's memory limit)
"""

__version__ = '2.0.0'

from .config_loader import get_config, reload_config, ConfigLoader
from .stats import RawStatsSnapshot, NormalizedMetrics, normalize, format_megabytes
from .cooldown import AlertCooldown
from .alert_manager import AlertEvent, AlertColor, MetricKind, Thresholds
from .webhook_sender import WebhookSender, WebhookSink
from .runtime import DockerRuntime, ContainerSummary, ContainerRuntimeError
from .monitor import ContainerMonitor, Ticker

__all__ = [
    'get_config',
    'reload_config',
    'ConfigLoader',
    'RawStatsSnapshot',
    'NormalizedMetrics',
    'normalize',
    'format_megabytes',
    'AlertCooldown',
    'AlertEvent',
    'AlertColor',
    'MetricKind',
    'Thresholds',
    'WebhookSender',
    'WebhookSink',
    'DockerRuntime',
    'ContainerSummary',
    'ContainerRuntimeError',
    'ContainerMonitor',
    'Ticker',
]
