"""
Logging configuration for the Atari DOS Disk Image Utility.

The package logs through a single ``atr_image_util`` logger.  Library code
asks for a child logger with :func:`get_logger`; the command-line entry point
calls :func:`setup_logging` once with the level chosen by ``-v``/``-q``.
"""

import logging
import os
import sys
from typing import TextIO

# Log levels for the application
QUIET = logging.WARNING
NORMAL = logging.INFO
VERBOSE = logging.DEBUG

logger = logging.getLogger('atr_image_util')
logger.addHandler(logging.NullHandler())


class ColorFormatter(logging.Formatter):
    """
    Formatter that colors the whole line by level on a terminal.

    Plain text is used when the stream is not a tty.
    """

    COLORS = {
        'DEBUG': '\033[36m',     # Cyan
        'INFO': '\033[32m',      # Green
        'WARNING': '\033[33m',   # Yellow
        'ERROR': '\033[31m',     # Red
        'CRITICAL': '\033[35m',  # Magenta
    }
    RESET = '\033[0m'

    def __init__(self, fmt: str | None = None, stream: TextIO | None = None,
                 use_colors: bool = True):
        super().__init__(fmt)
        self.use_colors = use_colors and _is_color_terminal(stream or sys.stderr)

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        color = self.COLORS.get(record.levelname)
        if self.use_colors and color:
            return f"{color}{message}{self.RESET}"
        return message


def _is_color_terminal(stream: TextIO) -> bool:
    if os.environ.get('NO_COLOR'):
        return False
    isatty = getattr(stream, 'isatty', None)
    return bool(isatty and isatty())


def level_from_flags(verbose: bool = False, quiet: bool = False) -> int:
    """Map the CLI's -v/-q flags to a logging level (quiet wins)."""
    if quiet:
        return QUIET
    if verbose:
        return VERBOSE
    return NORMAL


def setup_logging(
    level: int = NORMAL,
    stream: TextIO | None = None,
    use_colors: bool = True,
    format_string: str | None = None
) -> None:
    """
    Configure logging for the application.

    Args:
        level: Logging level (QUIET, NORMAL, or VERBOSE)
        stream: Output stream (defaults to stderr)
        use_colors: Whether to use colored output
        format_string: Custom format string (optional)
    """
    if stream is None:
        stream = sys.stderr

    if format_string is None:
        if level <= logging.DEBUG:
            format_string = '%(levelname)s: %(name)s: %(message)s'
        else:
            format_string = '%(message)s'

    logger.handlers.clear()

    handler = logging.StreamHandler(stream)
    handler.setFormatter(ColorFormatter(format_string, stream, use_colors))

    logger.addHandler(handler)
    logger.setLevel(level)
    logger.propagate = False


def get_logger(name: str | None = None) -> logging.Logger:
    """
    Get a logger for a specific module.

    Args:
        name: Module name, with or without the package prefix

    Returns:
        Logger instance
    """
    if name is None:
        return logger
    if name.startswith(logger.name + '.'):
        name = name[len(logger.name) + 1:]
    return logger.getChild(name)
