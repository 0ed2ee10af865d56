#!/usr/bin/env python3
"""
Docker Watcher entry point

Loads config/alerts.yml (or $WATCHER_CONFIG), then polls the running
containers forever and posts webhook alerts on threshold breaches.
"""

import logging
import sys

import yaml

from watcher.alert_manager import fatal_event
from watcher.config_loader import get_config
from watcher.cooldown import AlertCooldown
from watcher.logging_setup import setup_logging
from watcher.monitor import ContainerMonitor
from watcher.runtime import DockerRuntime
from watcher.webhook_sender import WebhookSender

logger = logging.getLogger('watcher.app')


def build_monitor(config, runtime=None, sender=None) -> ContainerMonitor:
    """Wire a monitor from a loaded ConfigLoader"""
    if sender is None:
        sender = WebhookSender(config.get_webhooks(), timeout=config.http_timeout)
    if runtime is None:
        runtime = DockerRuntime()
    return ContainerMonitor(
        runtime=runtime,
        sender=sender,
        thresholds=config.get_thresholds(),
        cooldown=AlertCooldown(
            cooldown_seconds=config.cooldown_seconds,
            prune_after_cooldowns=config.prune_after_cooldowns,
        ),
        interval_seconds=config.interval_seconds,
    )


def main(config_path: str = None, runtime=None, ticker=None) -> int:
    """
    Run the watcher

    Returns:
        Process exit status (1 on a fatal error)
    """
    setup_logging()

    try:
        config = get_config(config_path)
    except (FileNotFoundError, ValueError, yaml.YAMLError) as e:
        logger.error("Configuration error: %s", e)
        return 1

    sender = WebhookSender(config.get_webhooks(), timeout=config.http_timeout)

    monitor = None
    try:
        monitor = build_monitor(config, runtime=runtime, sender=sender)
        monitor.start()
        monitor.run_forever(ticker)
    except KeyboardInterrupt:
        logger.info("Interrupted, shutting down")
        return 0
    except Exception as e:
        logger.exception("Fatal error, stopping watcher")
        try:
            sender.send_event(fatal_event(e))
        except Exception:
            logger.exception("Could not send fatal notice")
        return 1
    finally:
        sender.close()
        if monitor is not None:
            monitor.runtime.close()

    return 0


if __name__ == '__main__':
    sys.exit(main())
