"""Route list loader and input-format detection.

Input is either a plain list of routes (YAML or JSON) or a Postman collection.
Both end up as the same ordered list of Route objects.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import orjson
import yaml

from .exceptions import CollectionError
from .logging_config import get_logger
from .models import Route
from .postman import convert_collection, substitute

logger = get_logger("routes")

DEFAULT_ROUTES_FILE = "routes.yaml"
BASE_URL_VARIABLE = "base_url"


def load_input(
    path: str | Path,
    base_url: str | None = None,
    variables: dict[str, str] | None = None,
) -> list[Route]:
    """Load routes from a route list or Postman collection file.

    base_url, when given, is injected as the {{base_url}} variable and wins
    over the same key in variables. Raises CollectionError on any input problem.
    """
    p = Path(path)
    if not p.exists():
        raise CollectionError(f"Input file not found: {path}", context={"path": str(path)})
    document = _read_document(p)

    overrides = dict(variables or {})
    if base_url:
        overrides[BASE_URL_VARIABLE] = base_url

    if _is_postman_collection(document):
        routes = convert_collection(document, overrides or None)
        logger.info("Loaded %d routes from Postman collection %s", len(routes), p.name)
    else:
        routes = parse_routes(document, overrides)
        logger.info("Loaded %d routes from %s", len(routes), p.name)
    return routes


def parse_routes(document: Any, variables: dict[str, str] | None = None) -> list[Route]:
    """Validate a route list document and build Route objects.

    Accepts a list of route mappings or a mapping with a "routes" list.
    """
    if isinstance(document, dict) and "routes" in document:
        document = document["routes"]
    if not isinstance(document, list):
        raise CollectionError(
            "Route file must contain a list of routes",
            context={"actual_type": type(document).__name__},
        )
    env = variables or {}
    return [_parse_route(entry, index, env) for index, entry in enumerate(document)]


def _parse_route(entry: Any, index: int, env: dict[str, str]) -> Route:
    if not isinstance(entry, dict):
        raise CollectionError("Route must be an object", context={"index": index})
    url = entry.get("url")
    if not isinstance(url, str) or not url.strip():
        raise CollectionError("Route is missing a url", context={"index": index})

    headers = entry.get("headers") or {}
    if not isinstance(headers, dict):
        raise CollectionError("Route headers must be an object", context={"index": index})

    body = entry.get("body")
    if body is not None and not isinstance(body, str):
        body = orjson.dumps(body).decode("utf-8")

    name = entry.get("name")
    return Route(
        method=str(entry.get("method") or "GET").strip().upper(),
        url=substitute(url.strip(), env),
        headers={str(k): substitute(str(v), env) for k, v in headers.items() if v is not None},
        body=substitute(body, env),
        name=str(name) if name else None,
    )


def _read_document(p: Path) -> Any:
    try:
        data = p.read_bytes()
    except OSError as e:
        logger.exception("Failed to read input file")
        raise CollectionError(f"Cannot read input file: {e}", original_error=e) from e

    if p.suffix.lower() == ".json":
        try:
            return orjson.loads(data)
        except orjson.JSONDecodeError as e:
            raise CollectionError(f"Invalid JSON in input file: {e}", original_error=e) from e
    try:
        return yaml.safe_load(data)
    except yaml.YAMLError as e:
        raise CollectionError(f"Invalid YAML in input file: {e}", original_error=e) from e


def _is_postman_collection(document: Any) -> bool:
    return isinstance(document, dict) and ("item" in document or "info" in document)
