from __future__ import annotations

import time
from collections import deque
from dataclasses import asdict
from threading import Lock
from typing import Deque, Dict, List

from .models import FetchRecord, MetricsSnapshot


class MetricsCollector:
    """Thread-safe collector of fetch attempts.

    Records one FetchRecord per attempt and produces aggregated
    MetricsSnapshot objects over a sliding time window."""

    def __init__(self, maxlen: int = 10000) -> None:
        self._lock = Lock()
        self._events: Deque[tuple[float, FetchRecord]] = deque(maxlen=maxlen)

    def record_fetch(self, record: FetchRecord) -> None:
        with self._lock:
            self._events.append((time.time(), record))

    def snapshot(self, window_secs: int) -> MetricsSnapshot:
        """Aggregate the attempts recorded within the last window_secs seconds."""
        now = time.time()
        cutoff = now - window_secs
        with self._lock:
            events: List[FetchRecord] = [e for ts, e in self._events if ts >= cutoff]
        total = len(events)
        avg_latency_ms = (sum(e.latency_ms for e in events) / total) if total else 0.0

        return MetricsSnapshot(
            window_secs=window_secs,
            total_requests=total,
            success_count=sum(1 for e in events if e.success),
            timeout_count=sum(1 for e in events if e.error_type == "TransportTimeout"),
            conn_error_count=sum(1 for e in events if e.error_type == "TransportError"),
            rejected_status_count=sum(1 for e in events if e.error_type == "UnacceptableStatusError"),
            avg_latency_ms=avg_latency_ms,
            timestamp=now,
        )

    def export_json(self) -> List[Dict]:
        with self._lock:
            return [{"timestamp": ts, **asdict(e)} for ts, e in self._events]
