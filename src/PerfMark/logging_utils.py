# ============================================================================
# PerfMark - Logging Utilities
#
# Purpose: Configure package logging from the [logging] config section
# Inputs: LoggingConfig, optional level override
# Outputs: Configured logger instances
# Dependencies: logging (stdlib)
# Usage: setup_logging(config.logging); logger = get_logger(__name__)
#
# Changelog:
#   2026-03-02: Initial logging setup
#   2026-03-14: Read level and format from LoggingConfig; reject unknown levels
# ============================================================================

import logging
from typing import TYPE_CHECKING, Optional

from PerfMark.errors import ConfigurationError

if TYPE_CHECKING:
    from PerfMark.config import LoggingConfig


_LOGGING_CONFIGURED = False

DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def resolve_level(name: str) -> int:
    """Map a level name such as "debug" or "WARNING" to its numeric value."""
    level = logging.getLevelName(name.strip().upper())
    if not isinstance(level, int):
        raise ConfigurationError(f"Unknown logging level '{name}'")
    return level


def setup_logging(config: Optional["LoggingConfig"] = None, level: Optional[str] = None) -> None:
    """
    Configure root logging once per process.

    Args:
        config: The [logging] section; defaults to INFO with DEFAULT_FORMAT
        level: Overrides config.level (e.g. from --log_level)

    Raises:
        ConfigurationError: If the level name is not a logging level
    """
    global _LOGGING_CONFIGURED

    if _LOGGING_CONFIGURED:
        return

    level_name = level or (config.level if config is not None else "INFO")
    format_string = config.format if config is not None else DEFAULT_FORMAT

    logging.basicConfig(
        level=resolve_level(level_name),
        format=format_string,
        datefmt=DATE_FORMAT,
    )

    _LOGGING_CONFIGURED = True


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
