"""
Centralized logging configuration for the firewall CLI.

TTY mode (operator at a terminal): colored symbols and the bare message
Non-TTY mode (cron, pipes, log files): timestamp, level and module path
"""

import logging
import os
import sys
from datetime import datetime
from typing import Optional


class TTYAwareFormatter(logging.Formatter):
    """Formatter that adapts output based on TTY detection.

    TTY mode:
        ✓ FW-EGRESS hooked at the head of OUTPUT
        ⚠ Could not resolve example.invalid: domain does not exist
        ✗ Command failed: iptables -N FW-EGRESS: Permission denied

    Non-TTY mode:
        2026-10-17 03:30:01.042 INFO > firewall/iptables.py:180: FW-EGRESS hooked at the head of OUTPUT
    """

    GREY = "\033[90m"
    CYAN = "\033[96m"
    YELLOW = "\033[93m"
    RED = "\033[91m"
    GREEN = "\033[92m"
    RESET = "\033[0m"

    SYMBOLS = {
        "DEBUG": "•",
        "INFO": "›",
        "WARNING": "⚠",
        "ERROR": "✗",
        "CRITICAL": "✗",
    }

    COLORS = {
        "DEBUG": GREY,
        "INFO": CYAN,
        "WARNING": YELLOW,
        "ERROR": RED,
        "CRITICAL": RED,
    }

    # Messages already carrying one of these get no extra symbol
    LEADING_SYMBOLS = ("✓", "⚠", "✗", "•", "›")

    def __init__(self, is_tty: bool):
        self.is_tty = is_tty
        if is_tty:
            super().__init__("%(message)s")
        else:
            super().__init__("%(asctime)s %(levelname)s > %(custom_pathname)s:%(lineno)d: %(message)s")

    def formatTime(self, record: logging.LogRecord, datefmt: Optional[str] = None) -> str:
        """Format time with milliseconds (non-TTY mode)."""
        if not self.is_tty:
            ct = datetime.fromtimestamp(record.created)
            return ct.strftime("%Y-%m-%d %H:%M:%S") + f".{int(record.msecs):03d}"
        return super().formatTime(record, datefmt)

    def format(self, record: logging.LogRecord) -> str:
        if not self.is_tty:
            if record.name != "__main__":
                record.custom_pathname = record.name.replace(".", "/") + ".py"
            else:
                record.custom_pathname = os.path.relpath(record.pathname)
            return super().format(record)

        message = super().format(record)
        color = self.COLORS.get(record.levelname, "")
        if message.lstrip().startswith(self.LEADING_SYMBOLS):
            return f"{color}{message}{self.RESET}" if record.levelno >= logging.WARNING else message
        symbol = self.SYMBOLS.get(record.levelname, "›")
        return f"{color}{symbol}{self.RESET} {message}"


def setup_logging(verbose: bool = False, level: Optional[str] = None, log_file: Optional[str] = None) -> None:
    """
    Setup logging with TTY-aware formatting.

    Args:
        verbose: Shortcut for DEBUG level
        level: Log level name, defaults to the LOG_LEVEL env var or INFO
        log_file: Optional file path to write logs to (in addition to stderr)
    """
    if verbose:
        level = "DEBUG"
    level = (level or os.getenv("LOG_LEVEL", "INFO")).upper()
    level_const = getattr(logging, level, logging.INFO)

    handlers: list[logging.Handler] = []

    console = logging.StreamHandler()
    console.setFormatter(TTYAwareFormatter(sys.stderr.isatty()))
    handlers.append(console)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(TTYAwareFormatter(is_tty=False))
        handlers.append(file_handler)

    logging.root.setLevel(level_const)
    logging.root.handlers = handlers
