"""Performance monitoring utilities for pyqt-synoptic.

Provides decorators and context managers for timing flushes and replays
and logging performance metrics.
"""

import time
import functools
import logging
from contextlib import contextmanager
from typing import Optional, Callable
from pathlib import Path

from pyqt_synoptic.protocols import SynopticConfig, get_synoptic_config

perf_logger = logging.getLogger(get_synoptic_config().performance_logger_name)

_handlers_configured = False


def configure_performance_logging(config: Optional[SynopticConfig] = None) -> Optional[Path]:
    """Attach file + console handlers to the performance logger.

    Only does something when ``performance_log_dir`` is configured, and only once.

    Returns:
        Path of the performance log file, or None when not configured
    """
    global _handlers_configured
    config = config or get_synoptic_config()
    if not config.performance_log_dir:
        return None

    perf_log_file = Path(config.performance_log_dir) / config.performance_log_filename
    if _handlers_configured:
        return perf_log_file

    perf_log_file.parent.mkdir(parents=True, exist_ok=True)
    perf_logger.setLevel(logging.DEBUG)

    file_handler = logging.FileHandler(perf_log_file)
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    ))
    perf_logger.addHandler(file_handler)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(logging.DEBUG)
    console_handler.setFormatter(logging.Formatter(
        '⏱️  %(message)s'
    ))
    perf_logger.addHandler(console_handler)

    _handlers_configured = True
    return perf_log_file


@contextmanager
def timer(operation_name: str, threshold_ms: float = 0.0, log_args: bool = False, **kwargs):
    """Context manager for timing operations.

    Args:
        operation_name: Name of the operation being timed
        threshold_ms: Only log if operation takes longer than this (in milliseconds)
        log_args: Whether to log kwargs in the message
        **kwargs: Additional context to include in log message

    Example:
        with timer("Flush", threshold_ms=4.0, log_args=True, records=len(batch)):
            dispatch_all(batch)
    """
    start = time.perf_counter()
    try:
        yield
    finally:
        elapsed_ms = (time.perf_counter() - start) * 1000

        if elapsed_ms >= threshold_ms:
            msg = f"{operation_name}: {elapsed_ms:.2f}ms"
            if log_args and kwargs:
                args_str = ", ".join(f"{k}={v}" for k, v in kwargs.items())
                msg += f" ({args_str})"

            perf_logger.debug(msg)


def timed(operation_name: Optional[str] = None, threshold_ms: float = 0.0):
    """Decorator for timing function calls.

    Args:
        operation_name: Name for the operation (defaults to function name)
        threshold_ms: Only log if operation takes longer than this (in milliseconds)

    Example:
        @timed("Diagram load", threshold_ms=10.0)
        def load_diagram(name):
            ...
    """
    def decorator(func: Callable) -> Callable:
        nonlocal operation_name
        if operation_name is None:
            operation_name = f"{func.__module__}.{func.__qualname__}"

        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            start = time.perf_counter()
            try:
                return func(*args, **kwargs)
            finally:
                elapsed_ms = (time.perf_counter() - start) * 1000

                if elapsed_ms >= threshold_ms:
                    perf_logger.debug(f"{operation_name}: {elapsed_ms:.2f}ms")

        return wrapper
    return decorator
