"""Logging utilities for Rapport reading traces.

Provides color-coded output to distinguish belief updates, skipped events,
rankings and verdicts when an agent reads verbosely.
"""

import os
from enum import Enum


class Color(Enum):
    """ANSI color codes for terminal output."""

    # Colors for operation types
    BLUE = "\033[94m"      # Belief updates and world-model snapshots
    YELLOW = "\033[93m"    # Skipped or unresolved events
    RED = "\033[91m"       # Errors and undecided verdicts
    GREEN = "\033[92m"     # Chosen interpretation
    CYAN = "\033[96m"      # Headers and probability lines

    # Formatting
    BOLD = "\033[1m"
    RESET = "\033[0m"


def colored(text: str, color: Color, bold: bool = False) -> str:
    """Wrap text in ANSI color codes if colors are enabled.

    Args:
        text: Text to colorize
        color: Color to apply
        bold: Whether to make text bold

    Returns:
        Colorized text if RAPPORT_NO_COLOR is not set, otherwise plain text
    """
    if os.getenv("RAPPORT_NO_COLOR"):
        return text

    prefix = color.value
    if bold:
        prefix = Color.BOLD.value + prefix

    return f"{prefix}{text}{Color.RESET.value}"


def log_deterministic(message: str) -> None:
    """Log a belief update (blue)."""
    print(colored(message, Color.BLUE))


def log_skipped(message: str) -> None:
    """Log an event that did not touch beliefs (yellow)."""
    print(colored(message, Color.YELLOW))


def log_error(message: str) -> None:
    """Log an error or undecided verdict (red)."""
    print(colored(message, Color.RED))


def log_success(message: str) -> None:
    """Log a verdict (green)."""
    print(colored(message, Color.GREEN))


def log_info(message: str) -> None:
    """Log headers and metadata (cyan)."""
    print(colored(message, Color.CYAN))


def format_columns(first: str, second: str, third: str) -> str:
    """Lay out one trace line as three fixed-width columns."""
    return f"{first:<24} {second:<24} {third}"


def indent_continuation(text: str, width: int = 50) -> str:
    """Indent every line after the first so it lines up under the third column."""
    lines = text.splitlines()
    if len(lines) <= 1:
        return text
    pad = " " * width
    return "\n".join([lines[0]] + [pad + line for line in lines[1:]])


# Markers for operation types (color-blind accessible)
LOG_TAG_DETERMINISTIC = "[•]"  # Belief update
LOG_TAG_SKIPPED = "[~]"        # Unresolved event
LOG_TAG_ERROR = "[!]"          # Error/undecided
LOG_TAG_SUCCESS = "[✓]"        # Verdict
LOG_TAG_INFO = "[i]"           # Information

TRACE_RULE = "-" * 64
