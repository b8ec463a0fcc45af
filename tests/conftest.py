"""Pytest fixtures for routeprobe tests."""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path

import pytest

from routeprobe.models import RequestResult, Route


@pytest.fixture
def sample_postman_collection_path(tmp_path: Path) -> Path:
    """Postman collection with a variable, a nested folder and a structured URL."""
    content = """{
  "info": { "name": "Test", "schema": "https://schema.getpostman.com/json/collection/v2.1.0/collection.json" },
  "variable": [{ "key": "base_url", "value": "http://api.local" }],
  "item": [
    { "name": "List posts", "request": { "method": "GET", "url": "{{base_url}}/posts" } },
    {
      "name": "Users",
      "item": [
        {
          "name": "Create user",
          "request": {
            "method": "POST",
            "url": { "raw": "{{base_url}}/users" },
            "header": [{ "key": "Content-Type", "value": "application/json" }],
            "body": { "mode": "raw", "raw": "{\\"name\\": \\"alice\\"}" }
          }
        }
      ]
    },
    {
      "name": "Search",
      "request": {
        "method": "GET",
        "url": { "host": ["api", "local"], "path": ["search"], "query": [{ "key": "q", "value": "a b" }] }
      }
    }
  ]
}
"""
    p = tmp_path / "collection.json"
    p.write_text(content, encoding="utf-8")
    return p


@pytest.fixture
def sample_routes_path(tmp_path: Path) -> Path:
    """Plain route list in YAML."""
    content = """
- method: GET
  url: "{{base_url}}/health"
  name: Health
- method: post
  url: https://api.example.com/items
  headers:
    X-Trace: abc
  body:
    title: Test
"""
    p = tmp_path / "routes.yaml"
    p.write_text(content, encoding="utf-8")
    return p


def make_result(
    status_code: int | None = 200,
    response_time_ms: int = 10,
    error: str | None = None,
    method: str = "GET",
    url: str = "https://example.com/",
) -> RequestResult:
    return RequestResult(
        route=Route(method=method, url=url),
        status_code=status_code,
        status_message="OK" if status_code == 200 else None,
        response_time_ms=response_time_ms,
        error=error,
        timestamp=datetime(2026, 1, 1, tzinfo=timezone.utc),
    )


@pytest.fixture
def result_factory():
    """Factory for RequestResult objects with sensible defaults."""
    return make_result
