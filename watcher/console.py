"""
Console Reporter - Prints the startup banner and per-container readings
"""

from typing import Dict, Optional

import psutil
from rich.console import Console
from rich.markup import escape

from .alert_manager import Thresholds
from .stats import NormalizedMetrics


def get_host_summary() -> Dict:
    """Host CPU and RAM figures shown in the banner"""
    ram = psutil.virtual_memory()
    return {
        'cpu_count': psutil.cpu_count(logical=True) or 0,
        'ram_total_gb': round(ram.total / (1024 ** 3), 2),
        'ram_percent': round(ram.percent, 1),
    }


class ConsoleReporter:
    """Writes human-readable monitor output to the terminal"""

    def __init__(self, console: Optional[Console] = None):
        self.console = console or Console(highlight=False)

    def banner(self, thresholds: Thresholds, interval_seconds: float,
               webhook_count: int, host: Optional[Dict] = None):
        """Print the startup banner with the active thresholds"""
        host = host if host is not None else get_host_summary()
        self.console.rule("[bold blue]Docker Watcher")
        self.console.print(
            f"🎯 CPU threshold: [bold]{thresholds.cpu_percent}%[/bold]   "
            f"💾 Memory threshold: [bold]{thresholds.memory_percent}%[/bold]"
        )
        self.console.print(
            f"⏱️  Interval: {interval_seconds}s   🔔 Webhooks: {webhook_count}"
        )
        self.console.print(
            f"🖥️  Host: {host['cpu_count']} CPUs, {host['ram_total_gb']} GB RAM "
            f"({host['ram_percent']}% used)"
        )

    def container_line(self, name: str, metrics: NormalizedMetrics,
                       thresholds: Thresholds):
        """Print one container's reading, red where a threshold is exceeded"""
        cpu_style = 'red' if metrics.cpu_percent > thresholds.cpu_percent else 'green'
        mem_style = 'red' if metrics.memory_percent > thresholds.memory_percent else 'green'
        self.console.print(
            f"  📦 [bold]{escape(name)}[/bold]: "
            f"CPU=[{cpu_style}]{metrics.cpu_percent:.2f}%[/{cpu_style}] "
            f"MEM=[{mem_style}]{metrics.memory_usage_mb} MB "
            f"({metrics.memory_percent:.2f}%)[/{mem_style}]"
        )

    def error_line(self, message: str):
        self.console.print(f"  ❌ [red]{escape(message)}[/red]")

    def waiting(self, interval_seconds: float):
        self.console.print(f"[dim]⏳ Waiting {interval_seconds}s before next check...[/dim]")
