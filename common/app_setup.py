"""
Reusable logging and print setup for all parts of the project.

Functions:
    setup_logging      - Configure and return a logger.
    set_print_logger   - Set the logger for print_and_log and print_error.
    print_and_log      - Print (rich markup) and log an info message.
    print_error        - Print and log an error message.
"""

import logging
import os
from typing import Optional

from rich.console import Console
from rich.markup import escape

# Module-level variable to hold the logger for print_and_log and print_error
_print_logger = None

# soft_wrap keeps long paths on one line when output is not a terminal
console = Console(soft_wrap=True, highlight=False)
err_console = Console(stderr=True, soft_wrap=True, highlight=False)

LOG_FORMAT = '%(asctime)s %(levelname)s %(process)d %(message)s'


def setup_logging(app_name: str = "nimsforestpm", loglevel: int | str = logging.INFO, logfile: Optional[str] = None) -> logging.Logger:
    """
    Set up logging for the application.
    Logs to a file in ~/.<app_name>/log.txt or to a custom logfile.
    Returns the configured logger.
    """
    logger = logging.getLogger()
    logger.setLevel(loglevel)
    if logfile is None:
        log_dir = os.path.expanduser(f"~/.{app_name}")
        os.makedirs(log_dir, exist_ok=True)
        logfile = os.path.join(log_dir, "log.txt")
    else:
        log_dir = os.path.dirname(os.path.abspath(logfile))
        os.makedirs(log_dir, exist_ok=True)
    handler = logging.FileHandler(logfile)

    # Remove any existing handlers
    for h in logger.handlers[:]:
        logger.removeHandler(h)
        h.close()

    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(handler)
    set_print_logger(logger)
    logger.debug(f"Logger initialized for {app_name}, writing to {logfile}")
    return logger


def set_print_logger(logger: logging.Logger | None):
    """
    Set the logger to be used by print_and_log and print_error.
    Call this after setting up logging in your app.
    """
    global _print_logger
    _print_logger = logger


def print_and_log(message: str, markup: bool = True, **kwargs):
    """
    Print to console with rich markup and log as info.
    Pass markup=False for text that may contain square brackets (paths, tool output).
    """
    console.print(message if markup else escape(message), **kwargs)
    if _print_logger is not None:
        _print_logger.info(message)


def print_error(message: str, **kwargs):
    """
    Print and log an error message (stderr and error level), using the logger set by set_print_logger.
    """
    err_console.print(f"[bold red]{escape(message)}[/bold red]", **kwargs)
    if _print_logger is not None:
        _print_logger.error(message)
