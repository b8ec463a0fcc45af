"""Data models for routeprobe.

Route is the common currency between loaders, runner and reporter.
UrlSpec is a tagged variant: a Postman URL is either a raw string or a
structured object, and resolution dispatches on the variant type.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Union


@dataclass(slots=True)
class Route:
    """A single resolved HTTP request, ready for execution."""

    method: str
    url: str
    headers: dict[str, str] = field(default_factory=dict)
    body: str | None = None
    name: str | None = None

    @property
    def display_name(self) -> str:
        return self.name or f"{self.method} {self.url}"

    def prepared_headers(self, extra: dict[str, str] | None = None) -> dict[str, str]:
        """Route headers overridden/extended by extra (e.g. auth).

        Header names compare case-insensitively, so an extra header replaces a
        route header of any casing. Content-Type defaults to application/json
        when a body is sent without one.
        """
        h = dict(self.headers)
        if extra:
            replaced = {k.lower() for k in extra}
            h = {k: v for k, v in h.items() if k.lower() not in replaced}
            h.update(extra)
        if self.body and "content-type" not in {k.lower() for k in h}:
            h["Content-Type"] = "application/json"
        return h


@dataclass(slots=True, frozen=True)
class QueryParam:
    key: str
    value: str = ""


@dataclass(slots=True, frozen=True)
class RawUrl:
    """URL given as a single string (possibly containing {{placeholders}})."""

    raw: str


@dataclass(slots=True, frozen=True)
class StructuredUrl:
    """URL given as Postman parts: host segments, optional port, path segments, query."""

    host: tuple[str, ...]
    protocol: str | None = None
    port: str | None = None
    path: tuple[str, ...] = ()
    query: tuple[QueryParam, ...] = ()


UrlSpec = Union[RawUrl, StructuredUrl]


class RequestResult:
    """Outcome of executing one route. Created once, never mutated."""

    __slots__ = (
        "route", "status_code", "status_message", "response_time_ms",
        "headers", "data", "error", "timestamp",
    )

    def __init__(
        self,
        route: Route,
        response_time_ms: int,
        timestamp: datetime,
        status_code: int | None = None,
        status_message: str | None = None,
        headers: dict[str, str] | None = None,
        data: str | None = None,
        error: str | None = None,
    ) -> None:
        self.route = route
        self.response_time_ms = response_time_ms
        self.timestamp = timestamp
        self.status_code = status_code
        self.status_message = status_message
        self.headers = headers
        self.data = data
        self.error = error

    @property
    def success(self) -> bool:
        return self.status_code is not None and 200 <= self.status_code < 400

    def __repr__(self) -> str:
        return (
            f"RequestResult(route={self.route.display_name!r}, status={self.status_code}, "
            f"time_ms={self.response_time_ms}, success={self.success})"
        )


@dataclass(slots=True)
class SessionSummary:
    """Aggregated view of one run, computed after all routes complete."""

    start_time: datetime
    end_time: datetime
    duration_ms: int
    total_routes: int
    successful_requests: int
    failed_requests: int
    success_rate_pct: float
    avg_response_time_ms: float


@dataclass(slots=True)
class RunConfig:
    """Runtime configuration from YAML and CLI flags."""

    timeout_seconds: float = 30.0
    follow_redirects: bool = False
    verify_tls: bool = True
    http2: bool = False
    report_dir: str = "."
    html_report: bool = False
