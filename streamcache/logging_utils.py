"""
Unified logging utilities for streamcache.

Entrypoints call configure_logging() once at startup; library modules only
ever do ``logger = logging.getLogger(__name__)``.
"""
import logging
import os
import sys
from pathlib import Path
from typing import Optional

# Track whether logging has been configured
_logging_configured = False
_HANDLER_TAG = "_sc_handler"
_CONSOLE_FMT = '%(asctime)s.%(msecs)03d %(levelname)s [%(name)s] %(message)s'
_FILE_FMT = '%(asctime)s.%(msecs)03d | %(levelname)-5s | %(name)s | %(funcName)s:%(lineno)d | %(message)s'
_DATEFMT = '%Y-%m-%d %H:%M:%S'

_LEVEL_COLORS = {
    'ERROR': '\033[1;31m',
    'CRITICAL': '\033[1;31m',
    'WARNING': '\033[1;33m',
    'INFO': '\033[1;32m',
    'DEBUG': '\033[1;36m',
}
_RESET = '\033[0m'


class ColorLevelFormatter(logging.Formatter):
    """Formatter that wraps the level name in an ANSI color."""

    def format(self, record: logging.LogRecord) -> str:
        color = _LEVEL_COLORS.get(record.levelname)
        if not color:
            return super().format(record)
        original = record.levelname
        record.levelname = f"{color}{original}{_RESET}"
        try:
            return super().format(record)
        finally:
            record.levelname = original


def configure_logging(
    level: str = 'INFO',
    log_file: Optional[str] = None,
    file_level: str = 'DEBUG',
    force: bool = False,
    console: bool = True,
    color: Optional[bool] = None,
) -> None:
    """
    Configure logging for the entire application.

    Subsequent calls are ignored unless force=True.

    Args:
        level: Console log level (DEBUG, INFO, WARNING, ERROR)
        log_file: Optional path to log file
        file_level: Log level for file output (default DEBUG)
        force: If True, reconfigure even if already configured
        console: Whether to add a console handler
        color: Color level names on the console; None means only when
            stdout is a terminal

    Environment variable overrides:
        LOG_LEVEL: Override the level parameter
        LOG_FILE: Override the log_file parameter
    """
    global _logging_configured

    if _logging_configured and not force:
        return

    level = os.getenv('LOG_LEVEL', level).upper()
    if log_file is None:
        log_file = os.getenv('LOG_FILE')

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)  # Capture all, filter at handler level

    # Remove handlers we previously installed (tagged)
    for handler in root.handlers[:]:
        if getattr(handler, _HANDLER_TAG, False):
            root.removeHandler(handler)
            handler.close()

    if console:
        stream = sys.stdout
        if color is None:
            color = hasattr(stream, 'isatty') and stream.isatty()
        formatter_cls = ColorLevelFormatter if color else logging.Formatter
        console_handler = logging.StreamHandler(stream)
        console_handler.setLevel(getattr(logging, level, logging.INFO))
        console_handler.setFormatter(formatter_cls(_CONSOLE_FMT, datefmt=_DATEFMT))
        setattr(console_handler, _HANDLER_TAG, True)
        root.addHandler(console_handler)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(log_file, encoding='utf-8')
        file_handler.setLevel(getattr(logging, file_level.upper(), logging.DEBUG))
        file_handler.setFormatter(logging.Formatter(_FILE_FMT, datefmt=_DATEFMT))
        setattr(file_handler, _HANDLER_TAG, True)
        root.addHandler(file_handler)

    # Quiet noisy third-party loggers
    for noisy in ['urllib3', 'requests']:
        logging.getLogger(noisy).setLevel(logging.WARNING)

    _logging_configured = True

    logging.getLogger(__name__).debug(
        f"Logging configured: level={level}, file={log_file or 'none'}"
    )


def add_logging_args(parser) -> None:
    """
    Add standard logging arguments to an argparse parser.

    Usage:
        parser = argparse.ArgumentParser()
        add_logging_args(parser)
        args = parser.parse_args()
        configure_logging(level=resolve_log_level(args), log_file=args.log_file)
    """
    group = parser.add_argument_group('logging')
    group.add_argument(
        '--log-level',
        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
        default=None,
        help='Set logging level (default: INFO, or logging.level from config)'
    )
    group.add_argument(
        '--debug',
        action='store_true',
        help='Enable debug logging (shortcut for --log-level DEBUG)'
    )
    group.add_argument(
        '--quiet',
        action='store_true',
        help='Suppress most output (shortcut for --log-level WARNING)'
    )
    group.add_argument(
        '--log-file',
        type=str,
        metavar='PATH',
        help='Write logs to file'
    )


def resolve_log_level(args, default: str = 'INFO') -> str:
    """
    Resolve log level from parsed arguments.

    Priority: --debug > --quiet > --log-level > default
    """
    if getattr(args, 'debug', False):
        return 'DEBUG'
    if getattr(args, 'quiet', False):
        return 'WARNING'
    return getattr(args, 'log_level', None) or default


def format_count(n: int, singular: str, plural: Optional[str] = None) -> str:
    """
    Format a count with proper singular/plural form.

    Returns:
        Formatted string like "1 entry" or "5 entries"
    """
    if plural is None:
        plural = singular + 's'
    return f"{n:,} {singular if n == 1 else plural}"


def format_bytes(n: int) -> str:
    """Render a byte count as B, KB, MB or GB (1024-based)."""
    size = float(max(0, n))
    for unit in ('B', 'KB', 'MB'):
        if size < 1024:
            return f"{int(size)} {unit}" if unit == 'B' else f"{size:.1f} {unit}"
        size /= 1024
    return f"{size:.1f} GB"
