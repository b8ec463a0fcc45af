"""CLI entry point for routeprobe."""

from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path

from . import __version__
from .auth import DEFAULT_AUTH_CONFIG_FILE
from .config import load_config, validate_run_config
from .exceptions import RouteProbeError
from .logging_config import get_logger
from .models import RunConfig
from .routes import DEFAULT_ROUTES_FILE
from .runner import run

logger = get_logger("cli")


def _parse_env_args(env_list: list[str] | None) -> dict[str, str]:
    if not env_list:
        return {}
    out: dict[str, str] = {}
    for s in env_list:
        if "=" in s:
            k, _, v = s.partition("=")
            out[k.strip()] = v.strip()
    return out


def _build_config(args: argparse.Namespace) -> RunConfig:
    """Config from -f YAML (or defaults) with CLI flags applied on top."""
    config = load_config(args.config) if args.config else RunConfig()
    if args.timeout is not None:
        config.timeout_seconds = args.timeout
    if args.output_dir is not None:
        config.report_dir = args.output_dir
    if args.html:
        config.html_report = True
    validate_run_config(config)
    return config


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="routeprobe",
        description="Run HTTP routes from a route list or Postman collection one at a time "
        "and report the outcome of each.",
    )
    parser.add_argument(
        "input",
        nargs="?",
        default=DEFAULT_ROUTES_FILE,
        help=f"Route list (YAML/JSON) or Postman collection JSON (default: {DEFAULT_ROUTES_FILE})",
    )
    parser.add_argument("token", nargs="?", default=None, help="Bearer token (overrides AUTH_TOKEN and auth config file)")
    parser.add_argument("base_url", nargs="?", default=None, help="Value for the {{base_url}} variable")
    parser.add_argument("-f", "--config", default=None, help="Path to YAML run config")
    parser.add_argument(
        "-o",
        "--output-dir",
        default=None,
        dest="output_dir",
        help="Directory for report files (default: report_dir from config, else current directory)",
    )
    parser.add_argument("--html", action="store_true", help="Also write an HTML report")
    parser.add_argument("--timeout", type=float, default=None, metavar="SEC", help="Per-request timeout in seconds")
    parser.add_argument(
        "--auth-config",
        default=DEFAULT_AUTH_CONFIG_FILE,
        dest="auth_config",
        help=f"JSON file with a \"token\" field (default: {DEFAULT_AUTH_CONFIG_FILE})",
    )
    parser.add_argument(
        "-e",
        "--env",
        action="append",
        metavar="KEY=VALUE",
        help="Collection variable override (can be repeated)",
    )
    parser.add_argument(
        "-v",
        "--version",
        action="version",
        version=f"routeprobe {__version__}",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    def handle_error(e: BaseException) -> int:
        if isinstance(e, RouteProbeError):
            print(f"Error: {e.message}", file=sys.stderr)
            return 1
        logger.exception("Unexpected error")
        print("Error: An unexpected error occurred. Check logs for details.", file=sys.stderr)
        return 1

    try:
        config = _build_config(args)
        asyncio.run(
            run(
                input_path=Path(args.input),
                config=config,
                token=args.token,
                base_url=args.base_url,
                variables=_parse_env_args(args.env) or None,
                auth_config_path=args.auth_config,
            )
        )
    except KeyboardInterrupt:
        print("\nInterrupted.", file=sys.stderr)
        return 130
    except Exception as e:
        return handle_error(e)
    return 0


if __name__ == "__main__":
    sys.exit(main())
