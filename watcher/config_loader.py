"""
Configuration loader and validator for Docker Watcher
"""

import yaml
import math
import os
import re
from typing import Dict, Any, List, Optional
from urllib.parse import urlparse

from .alert_manager import Thresholds
from .webhook_sender import WebhookSink

ENV_PATTERN = re.compile(r'\$\{([^}]+)\}')

# Environment variables that override single config values
ENV_OVERRIDES = {
    'WATCHER_CPU_THRESHOLD': ('thresholds', 'cpu_percent', float),
    'WATCHER_MEMORY_THRESHOLD': ('thresholds', 'memory_percent', float),
    'WATCHER_COOLDOWN_SECONDS': ('alerts', 'cooldown_seconds', float),
    'WATCHER_INTERVAL_SECONDS': ('sampling', 'interval_seconds', float),
}

DEFAULTS = {
    'thresholds': {'cpu_percent': 70.0, 'memory_percent': 80.0},
    'alerts': {'cooldown_seconds': 300, 'prune_after_cooldowns': 0},
    'sampling': {'interval_seconds': 3},
    'http': {'timeout_seconds': 10},
    'webhooks': [],
}


def default_config_path() -> str:
    return os.environ.get('WATCHER_CONFIG') or os.path.join(
        os.path.dirname(os.path.dirname(os.path.abspath(__file__))),
        'config',
        'alerts.yml'
    )


class ConfigLoader:
    """Loads and validates watcher configuration from a YAML file"""

    def __init__(self, config_path: str = None):
        """
        Initialize config loader

        Args:
            config_path: Path to alerts.yml. If None, uses WATCHER_CONFIG or
                config/alerts.yml next to the package.
        """
        self.config_path = config_path or default_config_path()
        self.config = None

    def load(self) -> Dict[str, Any]:
        """
        Load configuration from YAML file

        Returns:
            Dict containing configuration

        Raises:
            FileNotFoundError: If config file doesn't exist
            yaml.YAMLError: If YAML is invalid
            ValueError: If configuration validation fails
        """
        if not os.path.exists(self.config_path):
            raise FileNotFoundError(
                f"Configuration file not found: {self.config_path}\n"
                f"Please copy config/alerts.yml.example to config/alerts.yml "
                f"and configure your webhooks."
            )

        with open(self.config_path, 'r') as f:
            raw = yaml.safe_load(f)

        if raw is None:
            raw = {}
        if not isinstance(raw, dict):
            raise ValueError("Configuration must be a mapping")

        config = self._apply_defaults(raw)
        config = self._expand_env_vars(config)
        self._apply_env_overrides(config)
        self.config = config

        self._validate()

        return self.config

    def _apply_defaults(self, raw: Dict[str, Any]) -> Dict[str, Any]:
        config = {}
        for section, default in DEFAULTS.items():
            value = raw.get(section)
            if isinstance(default, dict):
                merged = dict(default)
                if value is not None:
                    if not isinstance(value, dict):
                        raise ValueError(f"Section '{section}' must be a mapping")
                    merged.update(value)
                config[section] = merged
            else:
                config[section] = value if value is not None else list(default)
        return config

    def _expand_env_vars(self, config: Any) -> Any:
        """
        Recursively expand environment variables in config
        Supports ${VAR_NAME} syntax

        Args:
            config: Configuration dict or value

        Returns:
            Config with expanded environment variables
        """
        if isinstance(config, dict):
            return {key: self._expand_env_vars(value) for key, value in config.items()}
        elif isinstance(config, list):
            return [self._expand_env_vars(item) for item in config]
        elif isinstance(config, str):
            def replace_env(match):
                var_name = match.group(1)
                return os.environ.get(var_name, match.group(0))

            return ENV_PATTERN.sub(replace_env, config)
        else:
            return config

    def _apply_env_overrides(self, config: Dict[str, Any]):
        for var_name, (section, key, cast) in ENV_OVERRIDES.items():
            value = os.environ.get(var_name)
            if value is None or value == '':
                continue
            try:
                config[section][key] = cast(value)
            except ValueError:
                raise ValueError(f"{var_name} must be a number, got '{value}'")

    def _validate(self):
        """
        Validate configuration structure and values

        Raises:
            ValueError: If configuration is invalid
        """
        for key_path in ('thresholds.cpu_percent', 'thresholds.memory_percent',
                         'alerts.cooldown_seconds', 'alerts.prune_after_cooldowns',
                         'sampling.interval_seconds', 'http.timeout_seconds'):
            value = self.get(key_path)
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise ValueError(f"{key_path} must be a number")
            if not math.isfinite(value):
                raise ValueError(f"{key_path} must be a finite number, got {value}")

        thresholds = self.config['thresholds']
        if thresholds['cpu_percent'] < 0:
            raise ValueError("cpu_percent must be at least 0")
        if thresholds['memory_percent'] < 0 or thresholds['memory_percent'] > 100:
            raise ValueError("memory_percent must be between 0 and 100")

        alerts = self.config['alerts']
        if alerts['cooldown_seconds'] < 0:
            raise ValueError("cooldown_seconds must be at least 0")
        if alerts['prune_after_cooldowns'] < 0:
            raise ValueError("prune_after_cooldowns must be at least 0")

        if self.config['sampling']['interval_seconds'] <= 0:
            raise ValueError("interval_seconds must be greater than 0")
        if self.config['http']['timeout_seconds'] <= 0:
            raise ValueError("timeout_seconds must be greater than 0")

        webhooks = self.config['webhooks']
        if not isinstance(webhooks, list):
            raise ValueError("webhooks must be a list")

        seen = set()
        for i, hook in enumerate(webhooks):
            if not isinstance(hook, dict):
                raise ValueError(f"webhooks[{i}] must be a mapping with name and url")
            name = hook.get('name')
            url = hook.get('url')
            if not name or not isinstance(name, str):
                raise ValueError(f"webhooks[{i}] is missing a name")
            if name in seen:
                raise ValueError(f"Duplicate webhook name: {name}")
            seen.add(name)
            if not url or not isinstance(url, str):
                raise ValueError(f"Webhook '{name}' is missing a url")
            unresolved = ENV_PATTERN.search(url)
            if unresolved:
                raise ValueError(
                    f"Webhook '{name}' references unset environment variable "
                    f"{unresolved.group(1)}"
                )
            parsed = urlparse(url)
            if parsed.scheme not in ('http', 'https') or not parsed.netloc:
                raise ValueError(f"Invalid webhook url for '{name}': {url}")

    def get(self, key_path: str, default: Any = None) -> Any:
        """
        Get configuration value by dot-separated key path

        Args:
            key_path: Dot-separated path (e.g., 'thresholds.cpu_percent')
            default: Default value if key not found

        Returns:
            Configuration value
        """
        if not self.config:
            return default

        keys = key_path.split('.')
        value = self.config

        for key in keys:
            if isinstance(value, dict) and key in value:
                value = value[key]
            else:
                return default

        return value

    def get_thresholds(self) -> Thresholds:
        return Thresholds(
            cpu_percent=float(self.get('thresholds.cpu_percent')),
            memory_percent=float(self.get('thresholds.memory_percent')),
        )

    def get_webhooks(self) -> List[WebhookSink]:
        """Webhook sinks in configuration order"""
        return [
            WebhookSink(name=hook['name'], url=hook['url'])
            for hook in self.get('webhooks', [])
        ]

    @property
    def cooldown_seconds(self) -> float:
        return self.get('alerts.cooldown_seconds')

    @property
    def prune_after_cooldowns(self) -> int:
        return int(self.get('alerts.prune_after_cooldowns', 0))

    @property
    def interval_seconds(self) -> float:
        return self.get('sampling.interval_seconds')

    @property
    def http_timeout(self) -> float:
        return self.get('http.timeout_seconds')


# Singleton instance
_config_instance: Optional[ConfigLoader] = None


def get_config(config_path: str = None) -> ConfigLoader:
    """
    Get singleton config instance

    Returns:
        ConfigLoader instance
    """
    global _config_instance
    if _config_instance is None:
        _config_instance = ConfigLoader(config_path)
        _config_instance.load()
    return _config_instance


def reload_config(config_path: str = None) -> ConfigLoader:
    """Reload configuration from file"""
    global _config_instance
    _config_instance = None
    return get_config(config_path)
