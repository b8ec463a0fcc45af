"""Sequential route runner: load, execute one request at a time, report."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from pathlib import Path

import httpx
from rich.console import Console

from .auth import DEFAULT_AUTH_CONFIG_FILE, AuthConfig
from .engine import create_client, execute_route
from .logging_config import get_logger
from .models import RequestResult, Route, RunConfig, SessionSummary
from .report import print_console_report, report_base_for, write_html_report, write_json_report
from .routes import load_input
from .session import TestSession

logger = get_logger("runner")


@dataclass(slots=True)
class RunOutcome:
    """What a completed run produced."""

    session: TestSession
    summary: SessionSummary
    report_path: Path | None
    html_report_path: Path | None = None


async def run_routes(
    routes: list[Route],
    session: TestSession,
    client: httpx.AsyncClient,
    auth: AuthConfig | None = None,
    console: Console | None = None,
) -> list[RequestResult]:
    """Execute routes strictly in order, one in flight at a time.

    Every result is recorded into session; the per-route results are also
    returned. Transport errors never stop the run.
    """
    console = console or Console()
    extra_headers = auth.auth_headers() if auth is not None else {}
    total = len(routes)
    results: list[RequestResult] = []
    for index, route in enumerate(routes, 1):
        console.print(f"\nTesting route {index}/{total}: {route.method} {route.url}", markup=False, highlight=False)
        result = await execute_route(client, route, extra_headers)
        session.record(result)
        results.append(result)
        if result.error:
            console.print(f"  Error: {result.error}", markup=False, highlight=False)
        else:
            console.print(f"  Status: {result.status_code} ({result.status_message})", markup=False, highlight=False)
            console.print(f"  Response time: {result.response_time_ms}ms", markup=False, highlight=False)
    return results


async def run(
    input_path: str | Path,
    config: RunConfig | None = None,
    token: str | None = None,
    base_url: str | None = None,
    variables: dict[str, str] | None = None,
    auth_config_path: str | Path = DEFAULT_AUTH_CONFIG_FILE,
    console: Console | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> RunOutcome:
    """Load routes, run them sequentially, print the console report and write report files.

    Raises CollectionError when the input cannot be loaded; everything after
    loading is recovered per route or logged.
    """
    config = config or RunConfig()
    console = console or Console()
    routes = await asyncio.to_thread(load_input, input_path, base_url, variables)
    auth = AuthConfig(token=token, config_path=auth_config_path)

    session = TestSession()
    console.print(f"Starting route tests at {session.start_time.strftime('%Y-%m-%d %H:%M:%S UTC')}")
    console.print(f"Total routes to test: {len(routes)}")
    console.print("Authentication is configured" if auth.is_configured() else "No authentication configured")
    if not routes:
        logger.warning("No routes found in %s", input_path)

    async with create_client(config, transport=transport) as client:
        await run_routes(routes, session, client, auth=auth, console=console)

    summary = session.summarize()
    logger.info(
        "Run finished: total=%d, success=%d, failed=%d",
        summary.total_routes, summary.successful_requests, summary.failed_requests,
    )
    print_console_report(session, summary, console)

    # JSON and HTML reports share one file name stem
    base = await asyncio.to_thread(report_base_for, config.report_dir, summary.end_time)
    report_path = await asyncio.to_thread(write_json_report, session, summary, config.report_dir, base)
    if report_path is not None:
        console.print(f"\n[green]Detailed report saved to[/green] {report_path}")
    html_path = None
    if config.html_report:
        html_path = await asyncio.to_thread(write_html_report, session, summary, config.report_dir, base)
        if html_path is not None:
            console.print(f"[dim]HTML report:[/dim] {html_path}")
    return RunOutcome(session=session, summary=summary, report_path=report_path, html_report_path=html_path)
