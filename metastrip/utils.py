# -----------------------------------------------------------------------------
# Copyright (C) 2025 Jeff Luster, mailto:jeff.luster96@gmail.com
# License: GNU AFFERO GPL 3.0, https://www.gnu.org/licenses/agpl-3.0.html
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU Affero General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
# Full license text can be found in the file "COPYING.txt".
# Full copyright text can be found in the file "main.py".
# -----------------------------------------------------------------------------

#!/usr/bin/env python3
"""
Utility functions for logging and per-file timeouts.
"""

import logging
import queue
import threading
from typing import Any, Callable, Optional

from .errors import AnalysisTimeout

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def setup_logging(verbose: bool = False, quiet: bool = False, log_file: Optional[str] = None) -> logging.Logger:
    """Configure the package logger.

    Console output is suppressed in quiet mode; the log file, when given, is
    always written.
    """
    log_level = logging.DEBUG if verbose else logging.INFO

    logger = logging.getLogger("metastrip")
    logger.setLevel(log_level)

    # Clear any existing handlers
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(LOG_FORMAT)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(log_level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    if not quiet:
        console_handler = logging.StreamHandler()
        console_handler.setLevel(log_level)
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)

    if not logger.handlers:
        logger.addHandler(logging.NullHandler())

    return logger


def run_with_timeout(func: Callable, timeout_seconds: Optional[int], *args, **kwargs) -> Any:
    """Run a function with timeout using threading approach.

    Returns the function's result, re-raises its exception, or raises
    AnalysisTimeout. The worker thread is a daemon and is abandoned on timeout,
    so only read-only work may be run this way.
    """
    if not timeout_seconds:
        return func(*args, **kwargs)

    result_queue = queue.Queue()
    exception_queue = queue.Queue()

    def worker():
        try:
            result_queue.put(func(*args, **kwargs))
        except Exception as e:
            exception_queue.put(e)

    # Start the worker thread
    thread = threading.Thread(target=worker)
    thread.daemon = True
    thread.start()

    # Wait for completion or timeout
    thread.join(timeout=timeout_seconds)

    if thread.is_alive():
        raise AnalysisTimeout(f"Operation timed out after {timeout_seconds} seconds")
    if not exception_queue.empty():
        raise exception_queue.get()
    return result_queue.get()
