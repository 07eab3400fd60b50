from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .errors import ModuleCancelled, TransportError, UnacceptableStatusError
from .module import BackoffProvider, ModuleSettings, StatusPredicate, _accept_any
from .response import Response


@dataclass(frozen=True)
class RetryPolicy:
    """Pure retry and spacing decisions for one module.

    Delay for attempt n is min_backoff * 2^(n-1) with exponential backoff,
    min_backoff otherwise. A custom provider replaces that rule for retries.
    The number of attempts is not decided here; the runner owns the budget."""

    min_backoff: float = 2.0
    exponential: bool = True
    provider: Optional[BackoffProvider] = None
    acceptable: StatusPredicate = _accept_any

    def __post_init__(self) -> None:
        if self.min_backoff < 0:
            raise ValueError(f"min_backoff must be >= 0, got {self.min_backoff}")

    @classmethod
    def from_settings(cls, settings: ModuleSettings) -> "RetryPolicy":
        return cls(
            min_backoff=settings.min_backoff,
            exponential=settings.exponential_backoff,
            provider=settings.retry_backoff_provider,
            acceptable=settings.is_acceptable_status_code or _accept_any,
        )

    def should_accept(self, status_code: int) -> bool:
        return bool(self.acceptable(status_code))

    def should_retry(self, failure: BaseException) -> bool:
        if isinstance(failure, ModuleCancelled):
            return False
        return isinstance(failure, (TransportError, UnacceptableStatusError))

    def next_delay(self, attempt: int, last_response: Optional[Response] = None) -> float:
        """Seconds to wait after the given 1-based attempt failed."""
        if self.provider is not None:
            return float(self.provider(attempt, last_response))
        return self._rule(attempt)

    def spacing(self) -> float:
        """Minimum gap between consecutive successful request sends."""
        return self._rule(1)

    def _rule(self, attempt: int) -> float:
        if self.exponential:
            return self.min_backoff * (2 ** max(attempt - 1, 0))
        return self.min_backoff
