"""
Configuration for the prowjob CLI.

Environment Variables:
    PROWJOB_LOG_LEVEL: Logging level (default: WARNING)

Command-line options override environment variables.
"""

import logging
import os

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
DEFAULT_LOG_LEVEL = "WARNING"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

logger = logging.getLogger(__name__)


def get_log_level(cli_arg: str | None = None) -> str:
    """
    Get the log level from the CLI option or environment or use default.

    Args:
        cli_arg: Value of --log-level, if given

    Returns:
        Upper-case logging level name
    """
    if cli_arg:
        return cli_arg.upper()

    level = os.environ.get("PROWJOB_LOG_LEVEL", DEFAULT_LOG_LEVEL).upper()
    if level not in LOG_LEVELS:
        logger.warning(
            f"Invalid PROWJOB_LOG_LEVEL={level}, using default {DEFAULT_LOG_LEVEL}"
        )
        return DEFAULT_LOG_LEVEL
    return level


def configure_logging(level: str) -> None:
    """Configure root logging for a CLI invocation."""
    logging.basicConfig(level=getattr(logging, level), format=LOG_FORMAT)
