"""
Logging setup for the API process and the CLI.

Handlers and formatters come from the packaged `config/logging.yaml`; the level comes
from `app.log_level` (`WEATHERWISE_LOG_LEVEL`) unless the caller passes one explicitly,
as the CLI does for `--verbose`.
"""

from __future__ import annotations

import copy
import logging.config

from weatherwise.config.settings import get_logging_config, get_settings

# Third-party loggers that stay at WARNING even when the app runs at DEBUG.
QUIET_LOGGERS = ("httpx", "httpcore")


def configure_logging(level: str | None = None) -> None:
    """Apply the YAML logging config with the effective level."""
    effective = (level or get_settings().app.log_level).upper()
    # The loaded config is cached; never mutate the shared copy.
    config = copy.deepcopy(get_logging_config())

    config.setdefault("root", {})["level"] = effective
    for handler in config.get("handlers", {}).values():
        handler["level"] = effective
    loggers = config.setdefault("loggers", {})
    loggers.setdefault("weatherwise", {})["level"] = effective
    for name in QUIET_LOGGERS:
        loggers.setdefault(name, {}).setdefault("level", "WARNING")

    logging.config.dictConfig(config)
