"""
Alert Cooldown - Suppresses repeated alerts for the same container and metric
"""

from datetime import datetime, timedelta, timezone
from typing import Callable, Dict, Optional, Tuple


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AlertCooldown:
    """Tracks when the last alert was sent for each (container, metric) pair"""

    def __init__(self, cooldown_seconds: float = 300,
                 prune_after_cooldowns: int = 0,
                 clock: Callable[[], datetime] = _utcnow):
        """
        Initialize cooldown tracker

        Args:
            cooldown_seconds: Minimum time between two alerts for the same pair
            prune_after_cooldowns: Drop entries older than this many cooldown
                periods when prune() runs (0 keeps everything)
            clock: Returns the current time (timezone-aware UTC by default)
        """
        self.cooldown = timedelta(seconds=cooldown_seconds)
        self.prune_after_cooldowns = prune_after_cooldowns
        self.clock = clock
        self.last_sent: Dict[Tuple[str, str], datetime] = {}

    def can_send_alert(self, container_name: str, metric: str) -> bool:
        """
        Check the cooldown and record the attempt when it passes

        The timestamp is stored as soon as the alert is permitted, whether or
        not delivery later succeeds.

        Args:
            container_name: Container name (not ID)
            metric: Metric kind, e.g. 'cpu' or 'memory'

        Returns:
            True if an alert may be sent now
        """
        key = (container_name, str(metric))
        now = self.clock()
        last = self.last_sent.get(key)

        if last is not None and now - last <= self.cooldown:
            return False

        self.last_sent[key] = now
        return True

    def last_alert(self, container_name: str, metric: str) -> Optional[datetime]:
        """Get the time of the last permitted alert for a pair"""
        return self.last_sent.get((container_name, str(metric)))

    def prune(self, now: Optional[datetime] = None) -> int:
        """
        Remove entries well past their cooldown window

        Returns:
            Number of removed entries
        """
        if self.prune_after_cooldowns <= 0:
            return 0

        now = now or self.clock()
        max_age = self.cooldown * self.prune_after_cooldowns
        stale = [key for key, sent in self.last_sent.items() if now - sent > max_age]
        for key in stale:
            del self.last_sent[key]
        return len(stale)

    def __len__(self) -> int:
        return len(self.last_sent)
