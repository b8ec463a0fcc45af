"""Console report, timestamped JSON report artifact and optional HTML report."""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import orjson
from jinja2 import Environment, PackageLoader, select_autoescape
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from . import __version__ as routeprobe_version
from .exceptions import RouteProbeError
from .logging_config import get_logger
from .models import RequestResult, SessionSummary
from .session import TestSession

logger = get_logger("report")

# Sortable UTC timestamp in report file names
REPORT_TIMESTAMP_FMT = "%Y%m%d_%H%M%S"
REPORT_PREFIX = "report_"
REPORT_SUFFIXES = (".json", ".html")
DISPLAY_DATETIME_FMT = "%Y-%m-%d %H:%M:%S UTC"


def _fmt_dt(dt: datetime) -> str:
    return dt.astimezone(timezone.utc).strftime(DISPLAY_DATETIME_FMT)


def _status_text(result: RequestResult) -> str:
    if result.status_message:
        return f"{result.status_code} ({result.status_message})"
    return str(result.status_code)


def build_summary_table(summary: SessionSummary) -> Table:
    """Two-column grid with the run summary."""
    table = Table.grid(padding=(0, 2))
    table.add_column(style="cyan")
    table.add_column(style="green")
    table.add_row("Start time", _fmt_dt(summary.start_time))
    table.add_row("End time", _fmt_dt(summary.end_time))
    table.add_row("Duration", f"{summary.duration_ms}ms")
    table.add_row("Total routes tested", str(summary.total_routes))
    table.add_row("Successful requests", str(summary.successful_requests))
    table.add_row("Failed requests", str(summary.failed_requests))
    table.add_row("Success rate", f"{summary.success_rate_pct:.2f}%")
    table.add_row("Average response time", f"{summary.avg_response_time_ms:.2f}ms")
    return table


def print_console_report(session: TestSession, summary: SessionSummary, console: Console) -> None:
    """Summary panel, then the itemized success list, then the itemized failure list."""
    console.print()
    console.print(Panel(build_summary_table(summary), title="[bold]TEST REPORT[/bold]", border_style="blue"))

    if session.success:
        console.rule("[green]SUCCESSFUL REQUESTS[/green]", align="left")
        for index, result in enumerate(session.success, 1):
            console.print(f"{index}. {result.route.method} {result.route.url}", markup=False, highlight=False)
            console.print(f"   Status: {_status_text(result)}", markup=False, highlight=False)
            console.print(f"   Response time: {result.response_time_ms}ms", markup=False, highlight=False)

    if session.errors:
        console.rule("[red]FAILED REQUESTS[/red]", align="left")
        for index, result in enumerate(session.errors, 1):
            console.print(f"{index}. {result.route.method} {result.route.url}", markup=False, highlight=False)
            if result.error:
                console.print(f"   Error: {result.error}", markup=False, highlight=False)
            else:
                console.print(f"   Status: {_status_text(result)}", markup=False, highlight=False)
            console.print(f"   Response time: {result.response_time_ms}ms", markup=False, highlight=False)


def _result_record(result: RequestResult) -> dict[str, Any]:
    return {
        "name": result.route.display_name,
        "method": result.route.method,
        "url": result.route.url,
        "statusCode": result.status_code,
        "statusMessage": result.status_message,
        "error": result.error,
        "responseTime": result.response_time_ms,
        "timestamp": result.timestamp,
    }


def build_report_payload(session: TestSession, summary: SessionSummary) -> dict[str, Any]:
    """Structured report document; datetimes are serialized as RFC 3339 by orjson."""
    return {
        "generatedAt": datetime.now(timezone.utc),
        "tool": f"routeprobe {routeprobe_version}",
        "summary": {
            "startTime": summary.start_time,
            "endTime": summary.end_time,
            "durationMs": summary.duration_ms,
            "totalRoutes": summary.total_routes,
            "successfulRequests": summary.successful_requests,
            "failedRequests": summary.failed_requests,
            "successRate": round(summary.success_rate_pct, 4),
            "averageResponseTime": round(summary.avg_response_time_ms, 4),
        },
        "success": [_result_record(r) for r in session.success],
        "error": [_result_record(r) for r in session.errors],
    }


def report_base_for(report_dir: str | Path, now: datetime | None = None) -> Path:
    """report_<UTC timestamp> inside report_dir, without suffix.

    When a report of any kind already uses that name, a _1, _2, ... counter is
    appended. Existing report files are never overwritten.
    """
    ts = (now or datetime.now(timezone.utc)).strftime(REPORT_TIMESTAMP_FMT)
    base = Path(report_dir) / f"{REPORT_PREFIX}{ts}"
    candidate = base
    counter = 0
    while any(_with_suffix(candidate, s).exists() for s in REPORT_SUFFIXES):
        counter += 1
        candidate = base.with_name(f"{base.name}_{counter}")
    return candidate


def _with_suffix(base: Path, suffix: str) -> Path:
    return base.with_name(base.name + suffix)


def write_json_report(
    session: TestSession,
    summary: SessionSummary,
    report_dir: str | Path = ".",
    base: Path | None = None,
) -> Path | None:
    """Write the JSON report artifact. Returns its path, or None if it could not be written."""
    out = _with_suffix(base or report_base_for(report_dir), ".json")
    payload = build_report_payload(session, summary)
    try:
        out.parent.mkdir(parents=True, exist_ok=True)
        out.write_bytes(orjson.dumps(payload, option=orjson.OPT_INDENT_2))
    except OSError as e:
        logger.error("Error saving report to %s: %s", out, e)
        return None
    logger.debug("JSON report written to %s", out)
    return out


def load_report(path: str | Path) -> dict[str, Any]:
    """Load a report written by write_json_report."""
    try:
        return orjson.loads(Path(path).read_bytes())
    except (orjson.JSONDecodeError, OSError) as e:
        raise RouteProbeError(f"Cannot load report: {e}", context={"path": str(path)}, original_error=e) from e


def write_html_report(
    session: TestSession,
    summary: SessionSummary,
    report_dir: str | Path = ".",
    base: Path | None = None,
) -> Path | None:
    """Render the single-file HTML report. Returns its path, or None if it could not be written."""
    out = _with_suffix(base or report_base_for(report_dir), ".html")
    env = Environment(
        loader=PackageLoader("routeprobe", "templates"),
        autoescape=select_autoescape(["html", "xml"]),
    )
    template = env.get_template("report.html")
    html = template.render(
        summary=summary,
        start_datetime_str=_fmt_dt(summary.start_time),
        end_datetime_str=_fmt_dt(summary.end_time),
        success_rows=[_html_row(r) for r in session.success],
        error_rows=[_html_row(r) for r in session.errors],
        version=routeprobe_version,
    )
    try:
        out.parent.mkdir(parents=True, exist_ok=True)
        out.write_text(html, encoding="utf-8")
    except OSError as e:
        logger.error("Error saving HTML report to %s: %s", out, e)
        return None
    return out


def _html_row(result: RequestResult) -> dict[str, Any]:
    return {
        "name": result.route.display_name,
        "method": result.route.method,
        "url": result.route.url,
        "outcome": result.error if result.error else _status_text(result),
        "response_time_ms": result.response_time_ms,
        "timestamp": _fmt_dt(result.timestamp),
    }
