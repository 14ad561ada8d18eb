"""Utility functions for cronloop CLI."""

import logging
from datetime import datetime


def setup_logging(debug: bool = False) -> None:
    """Set up logging for CLI commands.

    Args:
        debug: Enable debug logging.
    """
    level = logging.DEBUG if debug else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def format_datetime(dt: datetime | None) -> str:
    """Format datetime for display."""
    if dt is None:
        return "-"
    return dt.strftime("%Y-%m-%d %H:%M:%S %Z").strip()
