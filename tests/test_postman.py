"""Unit tests for Postman collection conversion."""

from __future__ import annotations

import pytest

from routeprobe.exceptions import CollectionError
from routeprobe.models import QueryParam, RawUrl, StructuredUrl
from routeprobe.postman import (
    apply_variable_overrides,
    build_variable_table,
    convert_collection,
    parse_url_spec,
    resolve_url,
    substitute,
    _parse_body,
    _parse_headers,
)


def test_substitute_replaces_every_occurrence() -> None:
    assert substitute("{{a}}/{{a}}/{{b}}", {"a": "x", "b": "y"}) == "x/x/y"


def test_substitute_unknown_placeholder_left_verbatim() -> None:
    assert substitute("https://{{host}}/{{missing}}", {"host": "h"}) == "https://h/{{missing}}"


def test_substitute_without_placeholders_is_identity() -> None:
    text = "https://example.com/path?x=1"
    assert substitute(text, {"x": "2"}) == text
    assert substitute(substitute(text, {"x": "2"}), {"x": "2"}) == text


def test_substitute_non_string_passthrough() -> None:
    assert substitute(None, {"a": "b"}) is None
    assert substitute(8080, {"a": "b"}) == 8080


def test_build_variable_table_skips_incomplete_entries() -> None:
    declared = [
        {"key": "base", "value": "http://h"},
        {"key": "port", "value": 8080},
        {"value": "orphan"},
        {"key": "novalue"},
        "not-a-dict",
    ]
    assert build_variable_table(declared) == {"base": "http://h", "port": "8080"}


def test_apply_variable_overrides_replaces_and_appends() -> None:
    declared = [{"key": "base_url", "value": "http://old"}, {"key": "id", "value": "1"}]
    out = apply_variable_overrides(declared, {"base_url": "http://new", "token": "t"})
    assert build_variable_table(out) == {"base_url": "http://new", "id": "1", "token": "t"}
    # Input list untouched
    assert declared[0]["value"] == "http://old"


def test_single_request_scenario() -> None:
    doc = {
        "item": [{"name": "A", "request": {"method": "GET", "url": "{{base}}/x"}}],
        "variable": [{"key": "base", "value": "http://h"}],
    }
    routes = convert_collection(doc)
    assert len(routes) == 1
    r = routes[0]
    assert (r.method, r.url, r.name, r.headers, r.body) == ("GET", "http://h/x", "A", {}, None)


def test_nested_folders_preserve_order() -> None:
    doc = {
        "item": [
            {"name": "first", "request": {"method": "GET", "url": "http://h/1"}},
            {"name": "outer", "item": [
                {"name": "inner", "item": [{"request": {"method": "POST", "url": "http://h/y"}}]},
            ]},
            {"name": "last", "request": {"method": "GET", "url": "http://h/3"}},
        ]
    }
    routes = convert_collection(doc)
    assert [r.url for r in routes] == ["http://h/1", "http://h/y", "http://h/3"]
    assert routes[1].method == "POST"
    assert routes[1].name == "POST http://h/y"


def test_route_count_matches_request_items() -> None:
    doc = {
        "item": [
            {"name": "folder", "item": []},
            {"name": "no request here"},
            {"name": "a", "request": {"url": "http://h/a"}},
            {"name": "f", "item": [{"name": "b", "request": {"url": "http://h/b"}}, {"name": "empty"}]},
        ]
    }
    assert len(convert_collection(doc)) == 2


def test_method_defaults_to_get() -> None:
    routes = convert_collection({"item": [{"request": {"url": "http://h/"}}]})
    assert routes[0].method == "GET"
    assert routes[0].name == "GET http://h/"


@pytest.mark.parametrize("doc", [{}, {"item": "nope"}, [], None, {"item": {"a": 1}}])
def test_missing_item_array_raises(doc) -> None:
    with pytest.raises(CollectionError, match='missing or invalid "item" array'):
        convert_collection(doc)


def test_invalid_url_aborts_conversion() -> None:
    doc = {
        "item": [
            {"name": "ok", "request": {"url": "http://h/ok"}},
            {"name": "broken", "request": {"url": {"path": ["x"]}}},
        ]
    }
    with pytest.raises(CollectionError, match="Invalid URL format") as exc:
        convert_collection(doc)
    assert exc.value.context["item"] == "broken"


def test_parse_url_spec_variants() -> None:
    assert parse_url_spec("http://h") == RawUrl("http://h")
    assert parse_url_spec({"raw": "{{b}}/x", "host": ["ignored"]}) == RawUrl("{{b}}/x")
    spec = parse_url_spec({"host": ["api", "local"], "port": 8080, "path": ["a"], "query": [{"key": "k", "value": "v"}]})
    assert spec == StructuredUrl(
        host=("api", "local"), port="8080", path=("a",), query=(QueryParam("k", "v"),),
    )
    with pytest.raises(CollectionError):
        parse_url_spec(42)


def test_structured_url_reconstruction() -> None:
    spec = StructuredUrl(
        host=("{{sub}}", "example", "com"),
        protocol="https",
        port="8443",
        path=("v1", "{{res}}"),
        query=(QueryParam("q", "a b&c"), QueryParam("lang", "{{lang}}")),
    )
    url = resolve_url(spec, {"sub": "api", "res": "users", "lang": "é"})
    assert url == "https://api.example.com:8443/v1/users?q=a%20b%26c&lang=%C3%A9"


def test_structured_url_defaults() -> None:
    spec = parse_url_spec({"host": ["localhost"], "query": []})
    assert resolve_url(spec, {}) == "http://localhost"


def test_structured_url_string_host_and_path() -> None:
    spec = parse_url_spec({"protocol": "https", "host": "api.example.com", "path": "/a/b"})
    assert resolve_url(spec, {}) == "https://api.example.com/a/b"


def test_structured_url_disabled_query_skipped() -> None:
    spec = parse_url_spec({
        "host": ["h"],
        "query": [{"key": "a", "value": "1"}, {"key": "b", "value": "2", "disabled": True}],
    })
    assert resolve_url(spec, {}) == "http://h?a=1"


def test_empty_raw_falls_back_to_parts() -> None:
    spec = parse_url_spec({"raw": "", "host": ["h"], "path": ["p"]})
    assert resolve_url(spec, {}) == "http://h/p"


def test_parse_headers_drops_incomplete_and_keeps_last_duplicate() -> None:
    headers = [
        {"key": "X-A", "value": "1"},
        {"key": "X-A", "value": "2"},
        {"key": "X-Empty", "value": ""},
        {"value": "no key"},
        {"key": "X-Off", "value": "v", "disabled": True},
        {"key": "Authorization", "value": "Bearer {{token}}"},
    ]
    assert _parse_headers(headers, {"token": "secret"}) == {"X-A": "2", "Authorization": "Bearer secret"}


def test_parse_headers_not_a_list() -> None:
    assert _parse_headers(None, {}) == {}


def test_parse_body_raw_with_vars() -> None:
    body = {"mode": "raw", "raw": "{\"user\": \"{{name}}\"}"}
    assert _parse_body(body, {"name": "alice"}) == "{\"user\": \"alice\"}"


def test_parse_body_non_raw() -> None:
    assert _parse_body({"mode": "urlencoded", "urlencoded": []}, {}) is None
    assert _parse_body(None, {}) is None

