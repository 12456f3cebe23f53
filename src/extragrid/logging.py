"""Logging configuration using loguru.

Library modules only emit records through ``logger``; applications (and the
CLI) call ``setup_logging`` once to choose the sink and level.
"""

import sys

from loguru import logger


def format_record(_record: dict) -> str:
    """Human-readable format for development."""
    return (
        "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
        "<level>{level: <8}</level> | "
        "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
        "<level>{message}</level>\n"
        "{exception}"
    )


def setup_logging(json_logs: bool = False, log_level: str = "INFO") -> None:
    """Configure loguru for the application.

    Logs go to stderr so they never mix with documents written to stdout.

    Args:
        json_logs: If True, output logs as JSON (structured logging)
        log_level: Minimum log level to output
    """
    # Remove default handler
    logger.remove()

    if json_logs:
        logger.add(
            sys.stderr,
            format="{message}",
            level=log_level,
            serialize=True,
        )
    else:
        logger.add(
            sys.stderr,
            format=format_record,
            level=log_level,
            colorize=True,
        )


__all__ = [
    "logger",
    "setup_logging",
]
