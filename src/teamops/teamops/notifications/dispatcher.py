from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Optional

logger = logging.getLogger(__name__)


class NotificationDispatcher:
    """Runs best-effort side effects after the primary write has committed.

    Failures are logged and swallowed; they never reach the caller.
    """

    def __init__(self, *, background: bool = True, max_workers: int = 2):
        self._executor: Optional[ThreadPoolExecutor] = (
            ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="notify") if background else None
        )

    def submit(self, label: str, fn: Callable, *args, **kwargs) -> None:
        if self._executor is None:
            self._run(label, fn, *args, **kwargs)
        else:
            self._executor.submit(self._run, label, fn, *args, **kwargs)

    @staticmethod
    def _run(label: str, fn: Callable, *args, **kwargs) -> None:
        try:
            fn(*args, **kwargs)
        except Exception:
            logger.exception("notification %s failed", label)

    def shutdown(self) -> None:
        if self._executor is not None:
            self._executor.shutdown(wait=True)
