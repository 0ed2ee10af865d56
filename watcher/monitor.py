"""
Container Monitor - Sampling loop tying the runtime, thresholds, cooldown and webhooks together
"""

import logging
import time
from dataclasses import dataclass, field
from typing import Callable, Iterable, List, Optional

from .alert_manager import (
    AlertEvent,
    Thresholds,
    container_failed_event,
    evaluate_thresholds,
    listing_failed_event,
    startup_event,
)
from .console import ConsoleReporter
from .cooldown import AlertCooldown
from .runtime import ContainerRuntimeError, ContainerSummary, DockerRuntime
from .stats import RawStatsSnapshot, normalize
from .webhook_sender import DispatchReport, WebhookSender

logger = logging.getLogger('watcher.monitor')


@dataclass
class CycleReport:
    """What happened during one sampling cycle"""
    containers_seen: int = 0
    containers_processed: int = 0
    failed_containers: List[str] = field(default_factory=list)
    alerts_sent: int = 0
    listing_failed: bool = False


class Ticker:
    """Yields one tick per cycle, sleeping the interval between ticks"""

    def __init__(self, interval_seconds: float,
                 sleep: Callable[[float], None] = time.sleep,
                 max_ticks: Optional[int] = None):
        self.interval_seconds = interval_seconds
        self.sleep = sleep
        self.max_ticks = max_ticks

    def __iter__(self):
        tick = 0
        while self.max_ticks is None or tick < self.max_ticks:
            if tick:
                self.sleep(self.interval_seconds)
            yield tick
            tick += 1


class ContainerMonitor:
    """Polls running containers and alerts on threshold breaches"""

    def __init__(self, runtime: DockerRuntime, sender: WebhookSender,
                 thresholds: Thresholds,
                 cooldown: Optional[AlertCooldown] = None,
                 reporter: Optional[ConsoleReporter] = None,
                 interval_seconds: float = 3):
        """
        Initialize monitor

        Args:
            runtime: Source of containers and stats
            sender: Webhook dispatcher, also used for operational notices
            thresholds: CPU and memory thresholds
            cooldown: Cooldown state owned by this monitor
            reporter: Console output
            interval_seconds: Pause between two cycles
        """
        self.runtime = runtime
        self.sender = sender
        self.thresholds = thresholds
        self.cooldown = cooldown if cooldown is not None else AlertCooldown()
        self.reporter = reporter or ConsoleReporter()
        self.interval_seconds = interval_seconds

    def notify(self, event: AlertEvent) -> DispatchReport:
        return self.sender.send_event(event)

    def start(self):
        """Print the banner and send the startup notice"""
        self.reporter.banner(self.thresholds, self.interval_seconds,
                             len(self.sender.sinks))
        logger.info("Monitoring started (CPU > %s%%, memory > %s%%)",
                    self.thresholds.cpu_percent, self.thresholds.memory_percent)
        self.notify(startup_event(self.thresholds, self.interval_seconds))

    def check_container(self, name: str, raw: RawStatsSnapshot) -> int:
        """
        Normalize, report and alert for one container

        Args:
            name: Container display name
            raw: Stats snapshot for this cycle

        Returns:
            Number of alerts dispatched
        """
        metrics = normalize(raw)
        self.reporter.container_line(name, metrics, self.thresholds)

        sent = 0
        for breach in evaluate_thresholds(name, metrics, self.thresholds):
            if not self.cooldown.can_send_alert(name, breach.metric.value):
                logger.debug("Alert for %s/%s suppressed by cooldown",
                             name, breach.metric.value)
                continue
            logger.warning("%s %s at %.2f%% (threshold %s%%)",
                           name, breach.metric.value, breach.value, breach.threshold)
            self.notify(breach.to_event())
            sent += 1
        return sent

    def _collect(self, container: ContainerSummary):
        raw = self.runtime.get_stats(container.id)
        info = self.runtime.inspect(container.id)
        return info.get('name') or container.name, raw

    def run_cycle(self) -> CycleReport:
        """
        Run a single pass over all running containers

        Runtime errors are contained here: a failed listing counts as zero
        containers and a failed container is skipped. Anything else
        propagates to the caller.
        """
        report = CycleReport()

        try:
            containers = self.runtime.list_running_containers()
        except ContainerRuntimeError as e:
            logger.error("Error listing containers: %s", e)
            self.reporter.error_line(str(e))
            self.notify(listing_failed_event(e))
            containers = []
            report.listing_failed = True

        report.containers_seen = len(containers)
        logger.debug("Checking %d container(s)", len(containers))

        for container in containers:
            try:
                name, raw = self._collect(container)
            except ContainerRuntimeError as e:
                logger.error("Error collecting stats for %s: %s", container.name, e)
                self.reporter.error_line(f"{container.name}: {e}")
                self.notify(container_failed_event(container.name, e))
                report.failed_containers.append(container.name)
                continue

            report.alerts_sent += self.check_container(name, raw)
            report.containers_processed += 1

        pruned = self.cooldown.prune()
        if pruned:
            logger.debug("Pruned %d cooldown entries", pruned)

        self.reporter.waiting(self.interval_seconds)
        return report

    def run_forever(self, ticker: Optional[Iterable] = None):
        """
        Run cycles until the ticker is exhausted (never, by default)

        Args:
            ticker: Iterable driving the cycles; a Ticker on the configured
                interval if None
        """
        if ticker is None:
            ticker = Ticker(self.interval_seconds)
        for _ in ticker:
            self.run_cycle()
