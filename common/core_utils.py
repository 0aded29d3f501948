#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Core utility functions for the project.

This module provides helper functions for:
- Logging setup, including the NOTICE severity used for state changes.
- Operator-facing output on standard error (stage banners, plain text).
"""

import logging
import sys
import time
from pathlib import Path
from typing import List, Optional, TextIO

from setup.config_models import SYMBOLS_DEFAULT

module_logger = logging.getLogger(__name__)

# Between INFO and WARNING: something on the host was changed.
NOTICE = 25
logging.addLevelName(NOTICE, "NOTICE")

CONSOLE_LOG_FORMAT = "%(levelname)s: %(message)s"
DETAILED_LOG_FORMAT = "%(asctime)s - %(levelname)s - %(symbol)s %(name)s - %(module)s.%(funcName)s:%(lineno)d - %(message)s"


class SymbolFormatter(logging.Formatter):
    """
    A custom formatter that adds symbols to log messages based on the log level.
    """

    def __init__(
        self, fmt=None, datefmt=None, style="%", validate=True, symbols=None
    ):
        super().__init__(fmt, datefmt, style, validate)
        self.symbols = symbols or SYMBOLS_DEFAULT

    def format(self, record):
        if record.levelno == logging.DEBUG:
            record.symbol = self.symbols.get("debug", "🐛")
        elif record.levelno == logging.INFO:
            record.symbol = self.symbols.get("info", "ℹ️")
        elif record.levelno == NOTICE:
            record.symbol = self.symbols.get("notice", "📣")
        elif record.levelno == logging.WARNING:
            record.symbol = self.symbols.get("warning", "⚠️")
        elif record.levelno == logging.ERROR:
            record.symbol = self.symbols.get("error", "❌")
        elif record.levelno == logging.CRITICAL:
            record.symbol = self.symbols.get("critical", "🔥")
        else:
            record.symbol = ""

        return super().format(record)


def setup_logging(
    log_level: int = logging.INFO,
    log_file: Optional[str] = None,
    log_to_console: bool = True,
    log_format_str: Optional[str] = None,
    log_prefix: Optional[str] = None,
    symbols: Optional[dict] = None,
) -> None:
    """
    Configures the root logger.

    Console records go to standard error as ``LEVEL: message`` so that the
    operator can triage by severity. When a log file is given it always
    receives DEBUG records in the detailed format.

    Parameters:
    log_level: int
        Console logging level. Defaults to logging.INFO.
    log_file: Optional[str]
        Path of an additional log file. Parent directories are created.
    log_to_console: bool
        Whether to log to standard error.
    log_format_str: Optional[str]
        Custom console format string. May contain ``{log_prefix}``.
    log_prefix: Optional[str]
        String prepended to every console record.
    symbols: Optional[dict]
        Level symbols for the detailed format.

    Returns:
    None
    """
    handlers: List[logging.Handler] = []
    actual_prefix = (
        (log_prefix.strip() + " ")
        if log_prefix and log_prefix.strip()
        else ""
    )

    if log_format_str:
        if "{log_prefix}" in log_format_str:
            console_format = log_format_str.format(log_prefix=actual_prefix)
        else:
            console_format = actual_prefix + log_format_str
    else:
        console_format = actual_prefix + CONSOLE_LOG_FORMAT

    if log_to_console:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(log_level)
        console_handler.setFormatter(
            SymbolFormatter(fmt=console_format, symbols=symbols)
        )
        handlers.append(console_handler)

    if log_file:
        try:
            log_file_path = Path(log_file)
            log_file_path.parent.mkdir(parents=True, exist_ok=True)
            file_handler = logging.FileHandler(log_file_path, mode="a")
            file_handler.setLevel(logging.DEBUG)
            file_handler.setFormatter(
                SymbolFormatter(
                    fmt=DETAILED_LOG_FORMAT,
                    datefmt="%Y-%m-%d %H:%M:%S",
                    symbols=symbols,
                )
            )
            handlers.append(file_handler)
        except OSError as e:
            print(
                f"WARNING: Could not create file handler for log file {log_file}: {e}",
                file=sys.stderr,
            )

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG if log_file else log_level)

    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)

    for handler in handlers:
        root_logger.addHandler(handler)

    module_logger.debug(
        f"Logging configured. Level: {logging.getLevelName(log_level)}. Format: '{console_format}'"
    )


def echo_err(*lines: str, stream: Optional[TextIO] = None) -> None:
    """Write plain lines to standard error, bypassing the log formatter."""
    out = stream if stream is not None else sys.stderr
    if not lines:
        lines = ("",)
    for line in lines:
        print(line, file=out)
    out.flush()


def print_stage_header(
    title: str, delay: float = 0.0, stream: Optional[TextIO] = None
) -> None:
    """
    Print a stage banner and pause for the operator.

    ###
    ### Checking if the required packages/ports have been installed.
    ###
    """
    echo_err("", "###", f"### {title}", "###", stream=stream)
    if delay > 0:
        time.sleep(delay)


def print_item_header(
    name: str, delay: float = 0.0, stream: Optional[TextIO] = None
) -> None:
    """Announce the manifest entry about to be processed."""
    echo_err("", f"# {name}", stream=stream)
    if delay > 0:
        time.sleep(delay)
