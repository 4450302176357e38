# File: /interface_engine/core/cancellation.py | Version: 1.0 | Title: Cancellation tokens for data-store calls
from __future__ import annotations

import time
from typing import Optional

from interface_engine.core.config import settings


class QueryCancelledError(RuntimeError):
    pass


class CancelToken:
    """
    Passed explicitly through every data-store call. A caller that navigates
    away (or a request that times out) cancels the token; calls check it
    before dispatch and drop their result if it was cancelled meanwhile.
    """

    def __init__(self, timeout: Optional[float] = None):
        self._deadline = time.monotonic() + timeout if timeout else None
        self._reason: Optional[str] = None

    @classmethod
    def from_settings(cls) -> "CancelToken":
        return cls(timeout=settings.QUERY_TIMEOUT_SECONDS or None)

    def cancel(self, reason: str = "cancelled") -> None:
        if self._reason is None:
            self._reason = reason

    @property
    def cancelled(self) -> bool:
        if self._reason is not None:
            return True
        if self._deadline is not None and time.monotonic() >= self._deadline:
            self._reason = "deadline exceeded"
            return True
        return False

    @property
    def reason(self) -> Optional[str]:
        return self._reason

    def check(self) -> None:
        if self.cancelled:
            raise QueryCancelledError(self._reason or "cancelled")
