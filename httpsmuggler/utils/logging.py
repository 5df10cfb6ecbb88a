"""
Logging utilities for the HTTP request smuggling scanner.

This module provides logging configuration and helpers for dumping the raw
bytes that go over the wire.
"""

import logging
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

from httpsmuggler.models import ProbeResponse

LOGGER_NAME = 'httpsmuggler'
MAX_DUMP_BYTES = 1024


def setup_logging(
    level: int = logging.INFO,
    log_file: Optional[str] = None,
    verbose: bool = False,
) -> logging.Logger:
    """Set up logging for the application.

    Args:
        level: Logging level (e.g., logging.INFO, logging.DEBUG)
        log_file: Optional file path to write logs to
        verbose: Whether to enable verbose logging

    Returns:
        Configured logger
    """
    logger = logging.getLogger(LOGGER_NAME)
    console_level = logging.DEBUG if verbose else level
    logger.setLevel(logging.DEBUG if log_file else console_level)

    # Reconfiguring (tests, repeated CLI invocations) must not stack handlers
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)
        handler.close()

    console = Console(stderr=True)
    console_handler = RichHandler(
        console=console,
        show_path=verbose,
        show_time=True,
        markup=False,
        rich_tracebacks=True,
    )
    console_handler.setLevel(console_level)
    console_handler.setFormatter(logging.Formatter('%(message)s', datefmt='%H:%M:%S'))
    logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file, encoding='utf-8')
        file_handler.setFormatter(logging.Formatter(
            '%(asctime)s - %(name)s - %(filename)s:%(lineno)d - %(levelname)s - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        ))
        file_handler.setLevel(logging.DEBUG)
        logger.addHandler(file_handler)

    return logger


def get_logger() -> logging.Logger:
    """Get the application logger."""
    return logging.getLogger(LOGGER_NAME)


def _dump(data: bytes) -> str:
    text = data[:MAX_DUMP_BYTES].decode('utf-8', errors='replace')
    if len(data) > MAX_DUMP_BYTES:
        text += f"... ({len(data)} bytes)"
    return text


def log_probe(logger: logging.Logger, host: str, port: int, payload: bytes) -> None:
    """Log a raw probe payload at DEBUG level.

    Args:
        logger: Logger to use
        host: Target host
        port: Target port
        payload: Raw bytes about to be written
    """
    if not logger.isEnabledFor(logging.DEBUG):
        return
    logger.debug(f"Sending {len(payload)} raw bytes to {host}:{port}")
    logger.debug(_dump(payload))


def log_probe_response(logger: logging.Logger, response: ProbeResponse) -> None:
    """Log the raw bytes a probe received, with its status and elapsed time."""
    if not logger.isEnabledFor(logging.DEBUG):
        return
    status = response.status_code if response.status_code is not None else "no status line"
    logger.debug(f"Received {len(response.raw)} bytes ({status}) in {response.elapsed:.6f}s")
    if response.raw:
        logger.debug(_dump(response.raw))
