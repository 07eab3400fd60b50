from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple


@dataclass(frozen=True)
class Request:
    url: str
    headers: Dict[str, List[str]] = field(default_factory=dict)
    method: str = "GET"

    def flat_headers(self) -> Dict[str, str]:
        """Collapse multi-value headers into the comma-joined form sent on the wire."""
        return {name: ", ".join(values) for name, values in self.headers.items()}


@dataclass(frozen=True)
class RawResponse:
    """What a transport hands back: nothing beyond status, reason, headers and text."""

    status_code: int
    reason: str
    headers: List[Tuple[str, str]]
    text: str


@dataclass(frozen=True)
class ModuleResult:
    module: str
    success: bool
    handled: int
    attempts: int
    duration_ms: int
    error_type: Optional[str] = None
    error: Optional[str] = None


@dataclass(frozen=True)
class FetchRecord:
    module: str
    url: str
    attempt: int
    status_code: Optional[int]
    latency_ms: int
    error_type: Optional[str]

    @property
    def success(self) -> bool:
        return self.error_type is None


@dataclass(frozen=True)
class MetricsSnapshot:
    window_secs: int
    total_requests: int
    success_count: int
    timeout_count: int
    conn_error_count: int
    rejected_status_count: int
    avg_latency_ms: float
    timestamp: float
