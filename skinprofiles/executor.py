"""
Worker pool for non-blocking profile resolution.

Work submitted here always runs on a pool thread, never inline.
There is no cancellation: a submitted apply runs to completion.
"""

import threading
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Callable, Optional, TypeVar

from .env import get_settings

T = TypeVar("T")

_executor: Optional[ThreadPoolExecutor] = None
_executor_lock = threading.Lock()


def get_executor() -> ThreadPoolExecutor:
    """Get or create the shared profile fetcher pool."""
    global _executor

    with _executor_lock:
        if _executor is None:
            _executor = ThreadPoolExecutor(
                max_workers=max(1, get_settings().workers),
                thread_name_prefix="skinprofiles-fetcher",
            )
        return _executor


def submit(fn: Callable[[], T], executor: Optional[ThreadPoolExecutor] = None) -> "Future[T]":
    """Schedule ``fn`` on ``executor`` (default: the shared pool)."""
    return (executor or get_executor()).submit(fn)


def shutdown_executor(wait: bool = True):
    """Shut down the shared pool; the next submit creates a fresh one."""
    global _executor

    with _executor_lock:
        executor, _executor = _executor, None
    if executor is not None:
        executor.shutdown(wait=wait)
