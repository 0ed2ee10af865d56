"""Tests for threshold evaluation and alert construction."""

from watcher.alert_manager import (
    AlertColor,
    MetricKind,
    Thresholds,
    container_failed_event,
    evaluate_thresholds,
    fatal_event,
    listing_failed_event,
    startup_event,
)
from watcher.stats import NormalizedMetrics

MB = 1024 * 1024


def metrics(cpu=10.0, mem=10.0, usage=50 * MB):
    return NormalizedMetrics(cpu_percent=cpu, memory_usage_bytes=usage, memory_percent=mem)


class TestEvaluateThresholds:
    def test_no_breach(self):
        assert evaluate_thresholds("web", metrics(), Thresholds(70, 80)) == []

    def test_cpu_breach(self):
        breaches = evaluate_thresholds("web-1", metrics(cpu=85.0), Thresholds(70, 80))
        assert len(breaches) == 1
        assert breaches[0].metric == MetricKind.CPU
        assert breaches[0].value == 85.0
        assert breaches[0].threshold == 70

    def test_both_breached_cpu_first(self):
        breaches = evaluate_thresholds("web", metrics(cpu=90, mem=95), Thresholds(70, 80))
        assert [b.metric for b in breaches] == [MetricKind.CPU, MetricKind.MEMORY]

    def test_equal_is_not_a_breach(self):
        assert evaluate_thresholds("web", metrics(cpu=70, mem=80), Thresholds(70, 80)) == []

    def test_zero_threshold_always_triggers(self):
        breaches = evaluate_thresholds("web", metrics(cpu=0.01, mem=0.01), Thresholds(0, 0))
        assert len(breaches) == 2


class TestAlertEvents:
    def test_cpu_breach_event(self):
        breach = evaluate_thresholds("web-1", metrics(cpu=85.0), Thresholds(70, 80))[0]
        event = breach.to_event()
        assert event.color == AlertColor.WARNING
        assert "web-1" in event.message
        assert "85.00%" in event.message
        assert "70" in event.message

    def test_memory_breach_event_includes_megabytes(self):
        breach = evaluate_thresholds(
            "db", metrics(mem=90.0, usage=90 * MB), Thresholds(70, 80)
        )[0]
        event = breach.to_event()
        assert "90.00 MB" in event.message
        assert "90.00%" in event.message

    def test_operational_colors(self):
        assert startup_event(Thresholds(70, 80), 3).color == AlertColor.STARTUP
        assert listing_failed_event(RuntimeError("x")).color == AlertColor.ERROR
        assert container_failed_event("web", RuntimeError("x")).color == AlertColor.ERROR
        assert fatal_event(RuntimeError("boom")).color == AlertColor.ERROR

    def test_color_values(self):
        assert AlertColor.STARTUP == 0x00FF00
        assert AlertColor.WARNING == 0xFFA500
        assert AlertColor.ERROR == 0xFF0000

