from __future__ import annotations

import threading
import time
from typing import Optional


class Pacer:
    """Enforces a minimum gap between request sends.

    mark() is called right before a request goes out; wait() then blocks
    until ``spacing`` seconds have passed since that mark. Time spent in the
    handler counts towards the gap. A cancellation event cuts the wait short."""

    def __init__(self, spacing: float, cancel: Optional[threading.Event] = None) -> None:
        self._spacing = max(0.0, spacing)
        self._cancel = cancel
        self._sent_at: Optional[float] = None

    def mark(self) -> float:
        self._sent_at = time.monotonic()
        return self._sent_at

    def remaining(self) -> float:
        if self._sent_at is None:
            return 0.0
        return max(0.0, self._spacing - (time.monotonic() - self._sent_at))

    def wait(self) -> None:
        """Block until the spacing since the last mark() has elapsed."""
        remaining = self.remaining()
        if remaining > 0:
            sleep(remaining, self._cancel)


def sleep(seconds: float, cancel: Optional[threading.Event] = None) -> bool:
    """Sleep for ``seconds``; return True if woken early by ``cancel``."""
    if seconds <= 0:
        return bool(cancel and cancel.is_set())
    if cancel is None:
        time.sleep(seconds)
        return False
    return cancel.wait(seconds)
