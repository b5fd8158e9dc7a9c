"""Search timing and in-memory trace storage."""

from __future__ import annotations

import time
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone


@dataclass(slots=True)
class SearchTrace:
    trace_id: str
    timestamp_utc: str
    query: str
    total_results: int
    is_monetary: bool
    is_boolean: bool
    latency_ms: float


class TraceStore:
    """In-memory trace storage for API-level observability."""

    def __init__(self, max_records: int = 1000) -> None:
        self._records: dict[str, SearchTrace] = {}
        self.max_records = max_records

    def create_record(
        self,
        *,
        query: str,
        total_results: int,
        is_monetary: bool,
        is_boolean: bool,
        latency_ms: float,
    ) -> SearchTrace:
        record = SearchTrace(
            trace_id=str(uuid.uuid4()),
            timestamp_utc=datetime.now(timezone.utc).isoformat(),
            query=query,
            total_results=total_results,
            is_monetary=is_monetary,
            is_boolean=is_boolean,
            latency_ms=latency_ms,
        )
        self._records[record.trace_id] = record
        while len(self._records) > self.max_records:
            del self._records[next(iter(self._records))]
        return record

    def get(self, trace_id: str) -> SearchTrace:
        record = self._records.get(trace_id)
        if record is None:
            raise KeyError(f"Trace not found: {trace_id}")
        return record

    def list_recent(self, limit: int = 20) -> list[SearchTrace]:
        return list(self._records.values())[-limit:]

    def summary(self) -> dict[str, float | int]:
        """Aggregate request counts and latency for dashboard display."""
        records = list(self._records.values())
        total = len(records)
        if total == 0:
            return {
                "total_requests": 0,
                "monetary_requests": 0,
                "boolean_requests": 0,
                "avg_latency_ms": 0.0,
                "p95_latency_ms": 0.0,
                "avg_results": 0.0,
            }

        latencies = sorted(record.latency_ms for record in records)
        p95_index = max(0, int((len(latencies) * 0.95) - 1))
        return {
            "total_requests": total,
            "monetary_requests": sum(1 for record in records if record.is_monetary),
            "boolean_requests": sum(1 for record in records if record.is_boolean),
            "avg_latency_ms": sum(latencies) / total,
            "p95_latency_ms": latencies[p95_index],
            "avg_results": sum(record.total_results for record in records) / total,
        }


class Timer:
    """Context timer used around search passes."""

    def __init__(self) -> None:
        self._start = 0.0
        self.elapsed_ms = 0.0

    def __enter__(self) -> "Timer":
        self._start = time.perf_counter()
        return self

    def __exit__(self, exc_type: object, exc: object, tb: object) -> None:
        self.elapsed_ms = (time.perf_counter() - self._start) * 1000.0
