"""Background execution of commands.

A command runs on a daemon thread and its single message is handed to
`post`, which must be thread-safe (the app uses a queue). Tests swap in
`run_inline` to keep everything on one thread.
"""

from __future__ import annotations

import threading
from typing import Any, Callable

from ..messages import StatusMessage
from .logging import logger


def _deliver(command: Callable[[], Any], post: Callable[[Any], None]) -> None:
    try:
        message = command()
    except Exception as exc:  # commands should not raise
        logger.exception("Background command crashed")
        message = StatusMessage(f"Error: {exc}", is_error=True)
    if message is not None:
        post(message)


def run_async(command: Callable[[], Any], post: Callable[[Any], None]) -> threading.Thread:
    thread = threading.Thread(target=_deliver, args=(command, post), daemon=True)
    thread.start()
    return thread


def run_inline(command: Callable[[], Any], post: Callable[[Any], None]) -> None:
    _deliver(command, post)
