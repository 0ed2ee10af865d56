"""Tests for ConfigLoader."""

import pytest

import watcher.config_loader as cl
from watcher.alert_manager import Thresholds
from watcher.config_loader import ConfigLoader
from watcher.webhook_sender import WebhookSink

BASIC = """
thresholds:
  cpu_percent: 75
  memory_percent: 85
alerts:
  cooldown_seconds: 120
sampling:
  interval_seconds: 5
webhooks:
  - name: ops
    url: https://discord.example.com/api/webhooks/1
  - name: team
    url: https://hooks.example.com/team
"""


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for var in list(cl.ENV_OVERRIDES) + ["WATCHER_CONFIG", "HOOK_URL"]:
        monkeypatch.delenv(var, raising=False)


def write(tmp_path, text):
    path = tmp_path / "alerts.yml"
    path.write_text(text)
    return str(path)


def load(tmp_path, text):
    loader = ConfigLoader(write(tmp_path, text))
    loader.load()
    return loader


class TestLoad:
    def test_basic(self, tmp_path):
        config = load(tmp_path, BASIC)
        assert config.get_thresholds() == Thresholds(75.0, 85.0)
        assert config.cooldown_seconds == 120
        assert config.interval_seconds == 5
        assert config.get_webhooks() == [
            WebhookSink("ops", "https://discord.example.com/api/webhooks/1"),
            WebhookSink("team", "https://hooks.example.com/team"),
        ]

    def test_defaults(self, tmp_path):
        config = load(tmp_path, "")
        assert config.get_thresholds() == Thresholds(70.0, 80.0)
        assert config.cooldown_seconds == 300
        assert config.interval_seconds == 3
        assert config.http_timeout == 10
        assert config.prune_after_cooldowns == 0
        assert config.get_webhooks() == []

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            ConfigLoader(str(tmp_path / "nope.yml")).load()

    def test_env_config_path(self, tmp_path, monkeypatch):
        path = write(tmp_path, BASIC)
        monkeypatch.setenv("WATCHER_CONFIG", path)
        assert ConfigLoader().config_path == path

    def test_get_dotted(self, tmp_path):
        config = load(tmp_path, BASIC)
        assert config.get("thresholds.cpu_percent") == 75
        assert config.get("thresholds.nope", "x") == "x"

    def test_zero_thresholds_allowed(self, tmp_path):
        config = load(tmp_path, "thresholds: {cpu_percent: 0, memory_percent: 0}\n")
        assert config.get_thresholds() == Thresholds(0.0, 0.0)


class TestEnvironment:
    def test_expansion(self, tmp_path, monkeypatch):
        monkeypatch.setenv("HOOK_URL", "https://hooks.example.com/secret")
        config = load(tmp_path, 'webhooks:\n  - name: ops\n    url: "${HOOK_URL}"\n')
        assert config.get_webhooks()[0].url == "https://hooks.example.com/secret"

    def test_unset_variable_rejected(self, tmp_path):
        with pytest.raises(ValueError, match="HOOK_URL"):
            load(tmp_path, 'webhooks:\n  - name: ops\n    url: "${HOOK_URL}"\n')

    def test_overrides(self, tmp_path, monkeypatch):
        monkeypatch.setenv("WATCHER_CPU_THRESHOLD", "50")
        monkeypatch.setenv("WATCHER_INTERVAL_SECONDS", "1.5")
        config = load(tmp_path, BASIC)
        assert config.get_thresholds().cpu_percent == 50.0
        assert config.interval_seconds == 1.5

    @pytest.mark.parametrize("value", ["nan", "inf", "-inf"])
    def test_non_finite_override(self, tmp_path, monkeypatch, value):
        monkeypatch.setenv("WATCHER_CPU_THRESHOLD", value)
        with pytest.raises(ValueError, match="finite"):
            load(tmp_path, BASIC)

    def test_bad_override(self, tmp_path, monkeypatch):
        monkeypatch.setenv("WATCHER_COOLDOWN_SECONDS", "soon")
        with pytest.raises(ValueError, match="WATCHER_COOLDOWN_SECONDS"):
            load(tmp_path, BASIC)


class TestValidation:
    @pytest.mark.parametrize("text,match", [
        ("thresholds: {cpu_percent: -1}\n", "cpu_percent"),
        ("thresholds: {memory_percent: 120}\n", "memory_percent"),
        ("thresholds: {cpu_percent: high}\n", "cpu_percent"),
        ("alerts: {cooldown_seconds: -5}\n", "cooldown_seconds"),
        ("sampling: {interval_seconds: 0}\n", "interval_seconds"),
        ("webhooks: {name: ops}\n", "list"),
        ("webhooks:\n  - url: https://a.example.com\n", "name"),
        ("webhooks:\n  - name: ops\n", "url"),
        ("webhooks:\n  - name: ops\n    url: not-a-url\n", "Invalid webhook url"),
        ("webhooks:\n  - name: ops\n    url: ftp://a.example.com/x\n", "Invalid webhook url"),
        ("webhooks:\n  - {name: a, url: 'https://x.example.com'}\n"
         "  - {name: a, url: 'https://y.example.com'}\n", "Duplicate"),
        ("thresholds: 5\n", "mapping"),
        ("- a\n- b\n", "mapping"),
        ("thresholds: {cpu_percent: .nan}\n", "finite"),
        ("thresholds: {memory_percent: .nan}\n", "finite"),
        ("sampling: {interval_seconds: .nan}\n", "finite"),
        ("sampling: {interval_seconds: .inf}\n", "finite"),
        ("alerts: {cooldown_seconds: .inf}\n", "finite"),
    ])
    def test_rejected(self, tmp_path, text, match):
        with pytest.raises(ValueError, match=match):
            load(tmp_path, text)


class TestSingleton:
    def test_get_and_reload(self, tmp_path, monkeypatch):
        path = write(tmp_path, BASIC)
        monkeypatch.setattr(cl, "_config_instance", None)
        first = cl.get_config(path)
        assert cl.get_config() is first
        second = cl.reload_config(path)
        assert second is not first
        monkeypatch.setattr(cl, "_config_instance", None)
