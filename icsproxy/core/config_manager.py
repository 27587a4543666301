"""Configuration management for the icsproxy server.

Sources, lowest precedence first: the optional YAML/JSON config file, a
``.env`` file in the working directory, then the process environment.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any

from icsproxy.core.config_loader import ProxyConfig, load_config_file

logger = logging.getLogger(__name__)

_QUOTES = "\"'"


def parse_env_file(path: Path) -> dict[str, str]:
    """Read ``KEY=VALUE`` pairs from a .env file.

    Blank lines, ``#`` comments and lines without ``=`` are ignored and
    surrounding quotes are removed from values. A missing or unreadable
    file yields an empty dict.
    """
    try:
        content = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return {}
    except OSError:
        logger.debug("Ignoring unreadable .env file %s", path, exc_info=True)
        return {}

    pairs: dict[str, str] = {}
    for line in map(str.strip, content.splitlines()):
        if line.startswith("#"):
            continue
        name, sep, value = line.partition("=")
        name = name.strip()
        if sep and name:
            pairs[name] = value.strip().strip(_QUOTES)
    return pairs


# Environment variable -> config key. Earlier names win over later (legacy) ones.
ENV_VARIABLES: dict[str, tuple[str, ...]] = {
    "source_url": ("ICSPROXY_SOURCE_URL", "SOURCE_ICS_URL"),
    "target_tz": ("ICSPROXY_TARGET_TZ", "TARGET_TZ"),
    "override_existing": ("ICSPROXY_OVERRIDE",),
    "server_bind": ("ICSPROXY_WEB_HOST",),
    "server_port": ("ICSPROXY_WEB_PORT", "PORT"),
    "cache_max_age": ("ICSPROXY_CACHE_MAX_AGE",),
    "request_timeout": ("ICSPROXY_REQUEST_TIMEOUT",),
    "log_level": ("ICSPROXY_LOG_LEVEL",),
    "debug_logging": ("ICSPROXY_DEBUG",),
}


class ConfigManager:
    """Builds a ProxyConfig from the config file, .env defaults and the environment."""

    def __init__(self, env_file_path: Path | None = None):
        self.env_file_path = env_file_path or Path.cwd() / ".env"

    def load_env_file(self) -> list[str]:
        """Export .env entries into os.environ without replacing variables already set.

        Returns:
            Names of the variables exported
        """
        defaults = parse_env_file(self.env_file_path)
        if not defaults:
            logger.debug("No .env defaults at %s", self.env_file_path)
            return []

        exported = [name for name in defaults if name not in os.environ]
        for name in exported:
            os.environ[name] = defaults[name]

        if exported:
            logger.debug("Exported .env defaults: %s", ", ".join(exported))
        return exported

    def build_config_from_env(self) -> dict[str, Any]:
        """Collect raw string values for every config key with a non-empty variable.

        Coercion to the field types happens in ProxyConfig.from_dict().
        """
        cfg: dict[str, Any] = {}
        for key, names in ENV_VARIABLES.items():
            value = next((os.environ[name] for name in names if os.environ.get(name)), None)
            if value is not None:
                cfg[key] = value
        return cfg

    def load_full_config(self, config_path: str | Path | None = None) -> ProxyConfig:
        """Merge the config file with the environment; environment values win."""
        self.load_env_file()
        merged = {**load_config_file(config_path), **self.build_config_from_env()}
        return ProxyConfig.from_dict(merged)


def get_config_value(config: Any, key: str, default: Any = None) -> Any:
    """Read ``key`` from either a mapping or a ProxyConfig."""
    if isinstance(config, dict):
        return config.get(key, default)
    return getattr(config, key, default)
