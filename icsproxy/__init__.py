"""icsproxy - ICS calendar feed proxy that rewrites event times into one timezone.

Imports are kept light so the package can be inspected without pulling in the
server runtime (aiohttp, httpx).
"""

__version__ = "1.0.0"

from typing import Any, Optional


def _init_logging(level_name: Optional[str]) -> None:
    """Initialize root logging to stream to console.

    Callers may adjust the level later (e.g. from config). The ICSPROXY_DEBUG
    environment variable (truthy values: "1", "true", "yes", "on") forces DEBUG
    verbosity.
    """
    import logging
    import os
    import sys

    from colorlog import ColoredFormatter

    debug_env = os.environ.get("ICSPROXY_DEBUG", "")
    if debug_env.strip().lower() in ("1", "true", "yes", "on"):
        level_name = "DEBUG"

    root = logging.getLogger()
    # Only configure a handler if none is present to avoid duplicate output.
    if not root.handlers:
        handler = logging.StreamHandler(stream=sys.stderr)
        # HH:MM:SS  LEVEL   [request-id] logger.name: message; only the level is colorized
        fmt = (
            "%(asctime)s %(log_color)s%(levelname)-7s%(reset)s "
            "[%(request_id)s] %(name)s: %(message)s"
        )
        log_colors = {
            "DEBUG": "cyan",
            "INFO": "green",
            "WARNING": "yellow",
            "ERROR": "red",
            "CRITICAL": "bold_red",
        }
        handler.setFormatter(ColoredFormatter(fmt, datefmt="%H:%M:%S", log_colors=log_colors))

        from icsproxy.core.logging_config import CorrelationIdFilter

        handler.addFilter(CorrelationIdFilter())
        root.addHandler(handler)

    level = logging.INFO
    if isinstance(level_name, str):
        level = getattr(logging, level_name.upper(), logging.INFO)
    root.setLevel(level)
    logging.getLogger(__name__).debug(
        "Logging initialized at level %s", logging.getLevelName(level)
    )


def build_config(args: Optional[object] = None) -> Any:
    """Build the effective ProxyConfig from .env, config file, environment and CLI.

    Precedence, lowest first: defaults, config file, environment (including
    .env), command line arguments.
    """
    import logging

    from icsproxy.core.config_loader import ProxyConfig
    from icsproxy.core.config_manager import ConfigManager

    logger = logging.getLogger(__name__)

    config_path = getattr(args, "config", None) if args is not None else None
    config = ConfigManager().load_full_config(config_path)

    if args is None:
        return config

    overrides: dict[str, Any] = {}
    for arg_name, key in (
        ("port", "server_port"),
        ("host", "server_bind"),
        ("tz", "target_tz"),
        ("url", "source_url"),
    ):
        value = getattr(args, arg_name, None)
        if value is not None:
            overrides[key] = value
            logger.debug("Applied command line override %s=%r", key, value)

    if not overrides:
        return config
    return ProxyConfig.from_dict({**config.to_dict(), **overrides})


def run_server(args: Optional[object] = None) -> None:
    """Start the icsproxy HTTP server and block until shutdown.

    Args:
        args: Optional command line arguments namespace (--port, --host, --config,
            --tz, --url)
    """
    import logging
    import os

    _init_logging(os.environ.get("ICSPROXY_LOG_LEVEL"))
    logger = logging.getLogger(__name__)

    from icsproxy.api.server import start_server

    config = build_config(args)
    logger.debug("Resolved configuration: %s", config.to_dict())
    logger.info("Starting icsproxy %s", __version__)
    start_server(config)


def run_transform(args: object) -> str:
    """Transform a local ICS file with the configured target timezone.

    Returns:
        The transformed document
    """
    import os
    from pathlib import Path

    from icsproxy.calendar.datetime_rewriter import TransformOptions
    from icsproxy.calendar.pipeline import transform_ics

    _init_logging(os.environ.get("ICSPROXY_LOG_LEVEL", "WARNING"))

    config = build_config(args)
    source = Path(getattr(args, "transform"))
    raw = source.read_text(encoding="utf-8")
    return transform_ics(
        raw,
        TransformOptions(target_tz=config.target_tz, override_existing=config.override_existing),
    )
