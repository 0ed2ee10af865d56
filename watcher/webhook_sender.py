"""
Webhook Sender - Broadcasts alerts to every configured webhook
"""

import logging
from concurrent.futures import ThreadPoolExecutor, wait
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, List, Optional, Sequence

import requests

from .alert_manager import AlertColor, AlertEvent

logger = logging.getLogger('watcher.webhook')

EMBED_TITLE = 'Docker Watcher'


@dataclass(frozen=True)
class WebhookSink:
    """A named webhook destination"""
    name: str
    url: str


@dataclass
class DispatchReport:
    """Outcome of one broadcast"""
    delivered: List[str] = field(default_factory=list)
    failed: Dict[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.failed


class WebhookDeliveryError(Exception):
    """Raised by a single sink delivery; never escapes send_alert()"""
    pass


def build_payload(message: str, color: int,
                  timestamp: Optional[datetime] = None) -> Dict:
    """
    Build the embed payload posted to every sink

    Args:
        message: Alert text, used as the embed description
        color: Integer severity color
        timestamp: Event time (defaults to now, UTC)

    Returns:
        JSON-serializable dict
    """
    timestamp = timestamp or datetime.now(timezone.utc)
    return {
        'embeds': [{
            'title': EMBED_TITLE,
            'description': message,
            'color': int(color),
            'timestamp': timestamp.isoformat(),
        }]
    }


class WebhookSender:
    """Sends alerts to all sinks in parallel"""

    def __init__(self, sinks: Sequence[WebhookSink],
                 session: Optional[requests.Session] = None,
                 timeout: float = 10.0):
        """
        Initialize webhook sender

        Args:
            sinks: Webhook destinations, fixed for the lifetime of the sender
            session: requests session to reuse (created if None)
            timeout: Per-request timeout in seconds
        """
        self.sinks = tuple(sinks)
        self.session = session or requests.Session()
        self.timeout = timeout

    def _post(self, sink: WebhookSink, payload: Dict) -> None:
        try:
            resp = self.session.post(sink.url, json=payload, timeout=self.timeout)
            resp.raise_for_status()
        except requests.exceptions.ConnectionError as e:
            raise WebhookDeliveryError(f"webhook unreachable: {e}") from e
        except requests.exceptions.RequestException as e:
            raise WebhookDeliveryError(str(e)) from e

    def send_alert(self, message: str, color: int = AlertColor.WARNING,
                   timestamp: Optional[datetime] = None) -> DispatchReport:
        """
        Deliver one alert to every sink and wait for all of them

        A failing sink is logged and recorded in the report; it does not
        stop delivery to the others and is not retried.

        Args:
            message: Alert text
            color: Severity color
            timestamp: Event time (defaults to now, UTC)

        Returns:
            DispatchReport listing delivered and failed sinks
        """
        report = DispatchReport()
        if not self.sinks:
            return report

        payload = build_payload(message, color, timestamp)

        with ThreadPoolExecutor(max_workers=len(self.sinks),
                                thread_name_prefix='webhook') as executor:
            futures = {
                executor.submit(self._post, sink, payload): sink
                for sink in self.sinks
            }
            wait(futures)

        for future, sink in futures.items():
            try:
                future.result()
            except Exception as e:
                logger.error("Failed to send alert to webhook %s: %s", sink.name, e)
                report.failed[sink.name] = str(e)
            else:
                report.delivered.append(sink.name)

        if report.delivered:
            logger.info("Alert sent to %d/%d webhook(s)",
                        len(report.delivered), len(self.sinks))
        return report

    def send_event(self, event: AlertEvent) -> DispatchReport:
        """Deliver an AlertEvent"""
        return self.send_alert(event.message, event.color, event.timestamp)

    def close(self):
        self.session.close()
