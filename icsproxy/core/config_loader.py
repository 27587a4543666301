"""icsproxy.core.config_loader

Typed configuration for the proxy.

- `ProxyConfig` dataclass with conservative coercion in `from_dict()`.
- `load_config()` reads a YAML (PyYAML) or JSON file; a missing file means
  defaults.
"""

from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any

import yaml

from icsproxy.core.timezone_utils import DEFAULT_TARGET_TIMEZONE, is_likely_iana

logger = logging.getLogger(__name__)

_TRUE_STRINGS = ("1", "true", "yes", "on")
_FALSE_STRINGS = ("0", "false", "no", "off")


@dataclass
class ProxyConfig:
    """Typed configuration for icsproxy.

    Fields:
        source_url: default upstream ICS URL (None: every request must pass ?url=)
        target_tz: default IANA timezone for rewritten values
        override_existing: convert values that already carry a TZID by default
        server_bind: host to bind the HTTP server to
        server_port: port for the HTTP server
        cache_max_age: Cache-Control max-age of served calendars, in seconds
        request_timeout: upstream read timeout in seconds
        log_level: logging level name
        debug_logging: enable DEBUG for icsproxy modules
    """

    source_url: str | None = None
    target_tz: str = DEFAULT_TARGET_TIMEZONE
    override_existing: bool = True
    server_bind: str = "0.0.0.0"  # nosec: B104 - container default; override via config/env
    server_port: int = 3000
    cache_max_age: int = 600
    request_timeout: int = 30
    log_level: str = "INFO"
    debug_logging: bool = False

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> ProxyConfig:
        """Create ProxyConfig from a plain mapping, applying defaults and validation.

        Numeric-like values are coerced to int, booleans accept the usual
        string spellings, and an implausible target timezone falls back to the
        default. Every coercion logs a warning.
        """
        if data is None:
            data = {}

        def _coerce_int(key: str, default: int) -> int:
            raw = data.get(key, default)
            try:
                return int(raw)
            except (TypeError, ValueError):
                logger.warning("Config %s=%r is not an int; using default %d", key, raw, default)
                return default

        def _coerce_bool(key: str, default: bool) -> bool:
            raw = data.get(key, default)
            if isinstance(raw, bool):
                return raw
            text = str(raw).strip().lower()
            if text in _TRUE_STRINGS:
                return True
            if text in _FALSE_STRINGS:
                return False
            logger.warning("Config %s=%r is not a boolean; using default %s", key, raw, default)
            return default

        source_url = data.get("source_url")
        source_url = str(source_url) if source_url else None

        target_tz = str(data.get("target_tz") or DEFAULT_TARGET_TIMEZONE)
        if not is_likely_iana(target_tz):
            logger.warning(
                "Config target_tz=%r is not an IANA name; using %s",
                target_tz,
                DEFAULT_TARGET_TIMEZONE,
            )
            target_tz = DEFAULT_TARGET_TIMEZONE

        server_port = _coerce_int("server_port", 3000)
        if not 0 < server_port < 65536:
            logger.warning("server_port %d out of range; using 3000", server_port)
            server_port = 3000

        cache_max_age = _coerce_int("cache_max_age", 600)
        if cache_max_age < 0:
            logger.warning("cache_max_age %d below zero; coercing to 0", cache_max_age)
            cache_max_age = 0

        server_bind = data.get("server_bind") or "0.0.0.0"  # nosec: B104 - fallback literal

        log_level = data.get("log_level", "INFO")
        log_level = str(log_level).upper() if log_level is not None else "INFO"

        return cls(
            source_url=source_url,
            target_tz=target_tz,
            override_existing=_coerce_bool("override_existing", True),
            server_bind=str(server_bind),
            server_port=server_port,
            cache_max_age=cache_max_age,
            request_timeout=_coerce_int("request_timeout", 30),
            log_level=log_level,
            debug_logging=_coerce_bool("debug_logging", False),
        )

    def to_dict(self) -> dict[str, Any]:
        """Return the configuration as a plain mapping."""
        return asdict(self)


def _load_yaml_or_json(path: Path) -> Any:
    """Load a mapping from a YAML or JSON file (chosen by suffix)."""
    text = path.read_text(encoding="utf-8")
    if path.suffix.lower() == ".json":
        return json.loads(text)
    loaded = yaml.safe_load(text)
    # safe_load returns None for empty files
    return {} if loaded is None else loaded


def load_config_file(path: str | Path | None) -> dict[str, Any]:
    """Read the raw mapping from a config file.

    Returns an empty mapping when ``path`` is None or the file does not exist.

    Raises:
        ValueError: The file does not hold a mapping at top level
    """
    if path is None:
        return {}
    p = Path(path)
    logger.debug("Reading proxy config %s", p)
    if not p.exists():
        logger.info("No config file at %s, using built-in defaults", p)
        return {}

    raw = _load_yaml_or_json(p)
    if not isinstance(raw, dict):
        logger.warning("Config file %s holds %s, not a mapping", p, type(raw).__name__)
        raise ValueError(f"Config file {p} must contain a mapping at top level")  # noqa: TRY004
    logger.info("Proxy config read from %s", p)
    return raw


def load_config(path: str | Path | None = None) -> ProxyConfig:
    """Load configuration from a YAML/JSON file and return a ProxyConfig."""
    cfg = ProxyConfig.from_dict(load_config_file(path))
    logger.debug("Effective proxy config: %s", cfg)
    return cfg
