"""Per-run aggregation of request results.

One TestSession is created per run and passed explicitly to the runner and
reporter. It is only appended to between awaits of a single task, so no
locking is needed.
"""

from __future__ import annotations

from datetime import datetime, timezone

from .models import RequestResult, SessionSummary


class TestSession:
    """Success and error buckets for one run, plus its start time."""

    __slots__ = ("start_time", "success", "errors")
    __test__ = False  # not a pytest test class

    def __init__(self, start_time: datetime | None = None) -> None:
        self.start_time = start_time or datetime.now(timezone.utc)
        self.success: list[RequestResult] = []
        self.errors: list[RequestResult] = []

    def record(self, result: RequestResult) -> None:
        if result.success:
            self.success.append(result)
        else:
            self.errors.append(result)

    @property
    def total(self) -> int:
        return len(self.success) + len(self.errors)

    def summarize(self, end_time: datetime | None = None) -> SessionSummary:
        """Duration, success rate and average response time. Rates are 0 for an empty run."""
        end = end_time or datetime.now(timezone.utc)
        total = self.total
        # Error results without a response time still count toward the average's denominator
        total_time = sum(r.response_time_ms or 0 for r in self.success) + sum(
            r.response_time_ms or 0 for r in self.errors
        )
        return SessionSummary(
            start_time=self.start_time,
            end_time=end,
            duration_ms=int((end - self.start_time).total_seconds() * 1000),
            total_routes=total,
            successful_requests=len(self.success),
            failed_requests=len(self.errors),
            success_rate_pct=100.0 * len(self.success) / total if total else 0.0,
            avg_response_time_ms=total_time / total if total else 0.0,
        )
