"""Postman Collection (v2.0/v2.1) to Route conversion with {{variable}} resolution."""

from __future__ import annotations

import re
from typing import Any
from urllib.parse import quote

from .exceptions import CollectionError
from .logging_config import get_logger
from .models import QueryParam, RawUrl, Route, StructuredUrl, UrlSpec

logger = get_logger("postman")

# Postman variable syntax: {{variableName}}
VAR_PATTERN = re.compile(r"\{\{([^{}]+)\}\}")
# Scheme used when a structured URL has no protocol
DEFAULT_PROTOCOL = "http"
# Characters left unescaped by JavaScript's encodeURIComponent
_URI_COMPONENT_SAFE = "-_.!~*'()"


def convert_collection(
    document: Any,
    overrides: dict[str, str] | None = None,
) -> list[Route]:
    """Convert a parsed collection document into a flat, ordered list of routes.

    Folders are transparent: only request items produce routes, in depth-first,
    left-to-right order. Any unresolvable URL aborts the whole conversion.
    """
    if not isinstance(document, dict) or not isinstance(document.get("item"), list):
        raise CollectionError('Invalid Postman collection format: missing or invalid "item" array')

    declared = document.get("variable")
    if not isinstance(declared, list):
        declared = []
    if overrides:
        declared = apply_variable_overrides(declared, overrides)
    variables = build_variable_table(declared)

    routes = _walk_items(document["item"], variables)
    logger.debug("Converted collection: %d routes, %d variables", len(routes), len(variables))
    return routes


def apply_variable_overrides(
    declared: list[Any],
    overrides: dict[str, str],
) -> list[Any]:
    """Return a new variable list where overrides replace matching keys or are appended."""
    remaining = dict(overrides)
    out: list[Any] = []
    for entry in declared:
        if isinstance(entry, dict) and entry.get("key") in remaining:
            entry = {**entry, "value": remaining.pop(entry["key"])}
        out.append(entry)
    out.extend({"key": k, "value": v} for k, v in remaining.items())
    return out


def build_variable_table(declared: list[Any]) -> dict[str, str]:
    """Build key -> value table from a Postman variable list. Entries without key or value are skipped."""
    table: dict[str, str] = {}
    for entry in declared:
        if not isinstance(entry, dict):
            continue
        key = entry.get("key")
        value = entry.get("value")
        if not key or value is None:
            continue
        table[str(key)] = str(value)
    return table


def substitute(value: Any, variables: dict[str, str]) -> Any:
    """Replace every {{key}} with its declared value. Unknown placeholders and non-strings pass through."""
    if not isinstance(value, str) or not variables:
        return value

    def repl(match: re.Match[str]) -> str:
        return variables.get(match.group(1), match.group(0))

    return VAR_PATTERN.sub(repl, value)


def _walk_items(items: list[Any], variables: dict[str, str]) -> list[Route]:
    routes: list[Route] = []
    for item in items:
        if not isinstance(item, dict):
            continue
        if isinstance(item.get("item"), list):
            routes.extend(_walk_items(item["item"], variables))
            continue
        request = item.get("request")
        if not isinstance(request, dict):
            continue
        routes.append(_build_route(item, request, variables))
    return routes


def _build_route(item: dict[str, Any], request: dict[str, Any], variables: dict[str, str]) -> Route:
    try:
        url = resolve_url(parse_url_spec(request.get("url")), variables)
    except CollectionError as e:
        e.with_context(item=item.get("name") or "<unnamed>")
        raise
    method = str(request.get("method") or "GET").strip().upper()
    return Route(
        method=method,
        url=url,
        headers=_parse_headers(request.get("header"), variables),
        body=_parse_body(request.get("body"), variables),
        name=item.get("name") or f"{method} {url}",
    )


def parse_url_spec(url_field: Any) -> UrlSpec:
    """Classify a Postman url field as RawUrl or StructuredUrl. Raises CollectionError otherwise."""
    if isinstance(url_field, str):
        return RawUrl(url_field)
    if isinstance(url_field, dict):
        raw = url_field.get("raw")
        if isinstance(raw, str) and raw:
            return RawUrl(raw)
        host = _segments(url_field.get("host"), ".")
        if host:
            port = url_field.get("port")
            return StructuredUrl(
                host=host,
                protocol=url_field.get("protocol") or None,
                port=str(port) if port not in (None, "") else None,
                path=_segments(url_field.get("path"), "/"),
                query=_query_params(url_field.get("query")),
            )
    raise CollectionError("Invalid URL format in Postman collection")


def resolve_url(spec: UrlSpec, variables: dict[str, str]) -> str:
    """Turn a UrlSpec into an absolute URL string, substituting variables in every component."""
    if isinstance(spec, RawUrl):
        return substitute(spec.raw, variables)
    if isinstance(spec, StructuredUrl):
        protocol = substitute(spec.protocol or DEFAULT_PROTOCOL, variables)
        host = ".".join(substitute(h, variables) for h in spec.host)
        port = f":{substitute(spec.port, variables)}" if spec.port else ""
        path = "/" + "/".join(substitute(p, variables) for p in spec.path) if spec.path else ""
        query = ""
        if spec.query:
            query = "?" + "&".join(
                f"{_encode_component(substitute(q.key, variables))}="
                f"{_encode_component(substitute(q.value, variables))}"
                for q in spec.query
            )
        return f"{protocol}://{host}{port}{path}{query}"
    raise CollectionError("Invalid URL format in Postman collection")


def _encode_component(text: str) -> str:
    return quote(text, safe=_URI_COMPONENT_SAFE)


def _segments(value: Any, sep: str) -> tuple[str, ...]:
    """Host/path as list of segments; a plain string is split on sep."""
    if isinstance(value, str):
        return tuple(s for s in value.strip(sep).split(sep) if s)
    if isinstance(value, list):
        out = []
        for seg in value:
            if isinstance(seg, dict):
                # Postman path variable object: {"type": "string", "value": "..."}
                seg = seg.get("value")
            if isinstance(seg, str):
                out.append(seg)
        return tuple(out)
    return ()


def _query_params(query: Any) -> tuple[QueryParam, ...]:
    if not isinstance(query, list):
        return ()
    params = []
    for q in query:
        if not isinstance(q, dict) or q.get("disabled") or q.get("key") is None:
            continue
        value = q.get("value")
        params.append(QueryParam(key=str(q["key"]), value="" if value is None else str(value)))
    return tuple(params)


def _parse_headers(headers: Any, variables: dict[str, str]) -> dict[str, str]:
    result: dict[str, str] = {}
    if not isinstance(headers, list):
        return result
    for h in headers:
        if not isinstance(h, dict) or h.get("disabled"):
            continue
        key = h.get("key")
        value = h.get("value")
        if not key or value in (None, ""):
            continue
        result[str(key).strip()] = substitute(str(value), variables)
    return result


def _parse_body(body: Any, variables: dict[str, str]) -> str | None:
    if not isinstance(body, dict) or body.get("mode") != "raw":
        # formdata, urlencoded, file, graphql are not sent
        return None
    raw = body.get("raw")
    if raw is None:
        return None
    return substitute(str(raw), variables)
