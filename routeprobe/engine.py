"""Single-request execution and HTTP client factory.

execute_route never raises: transport failures are captured in the
RequestResult so a run always continues to the next route.
"""

from __future__ import annotations

import time
from datetime import datetime, timezone

import httpx

from .logging_config import get_logger
from .models import RequestResult, Route, RunConfig

logger = get_logger("engine")

# Nanoseconds to milliseconds conversion
NS_TO_MS = 1_000_000


async def execute_route(
    client: httpx.AsyncClient,
    route: Route,
    extra_headers: dict[str, str] | None = None,
) -> RequestResult:
    """Execute one route and return its result with wall-clock latency.

    Args:
        client: Shared async HTTP client
        route: Route with URL, method, headers, body
        extra_headers: Headers merged over the route's own (e.g. Authorization)

    Returns:
        RequestResult with status code and response data, or with error set
        and no status code when the request failed at the transport level.
    """
    headers = route.prepared_headers(extra_headers)
    body_bytes = route.body.encode("utf-8") if route.body is not None else None
    start_ns = time.perf_counter_ns()
    try:
        r = await client.request(
            route.method,
            route.url,
            headers=headers,
            content=body_bytes,
        )
        elapsed_ms = (time.perf_counter_ns() - start_ns) // NS_TO_MS
        timestamp = datetime.now(timezone.utc)
        return RequestResult(
            route=route,
            status_code=r.status_code,
            status_message=r.reason_phrase,
            response_time_ms=elapsed_ms,
            headers=dict(r.headers),
            data=r.text,
            timestamp=timestamp,
        )
    except Exception as e:  # noqa: BLE001
        elapsed_ms = (time.perf_counter_ns() - start_ns) // NS_TO_MS
        timestamp = datetime.now(timezone.utc)
        logger.debug("Request %s %s failed: %r", route.method, route.url, e)
        return RequestResult(
            route=route,
            response_time_ms=elapsed_ms,
            error=str(e) or type(e).__name__,
            timestamp=timestamp,
        )


def create_client(config: RunConfig | None = None, transport: httpx.AsyncBaseTransport | None = None) -> httpx.AsyncClient:
    """Create the single async HTTP client used for a run.

    Args:
        config: Timeout, redirect, TLS and HTTP/2 settings (defaults if omitted)
        transport: Custom transport (e.g. httpx.MockTransport in tests)

    Returns:
        Configured AsyncClient ready for use as async context manager
    """
    config = config or RunConfig()
    return httpx.AsyncClient(
        http2=config.http2,
        timeout=config.timeout_seconds,
        follow_redirects=config.follow_redirects,
        verify=config.verify_tls,
        transport=transport,
    )
