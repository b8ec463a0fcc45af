"""Bearer token resolution: CLI argument, then environment, then JSON config file."""

from __future__ import annotations

import os
from collections.abc import Mapping
from pathlib import Path

import orjson

from .logging_config import get_logger

logger = get_logger("auth")

AUTH_TOKEN_ENV = "AUTH_TOKEN"
DEFAULT_AUTH_CONFIG_FILE = "auth.config.json"


class AuthConfig:
    """Resolves a single bearer token once, at construction.

    Precedence: explicit token > AUTH_TOKEN environment variable > "token" field
    of the config file. None of them set means requests go out unauthenticated.
    """

    def __init__(
        self,
        token: str | None = None,
        env: Mapping[str, str] | None = None,
        config_path: str | Path = DEFAULT_AUTH_CONFIG_FILE,
    ) -> None:
        self.token: str | None = None
        self.source: str | None = None
        self._resolve(token, os.environ if env is None else env, Path(config_path))

    def _resolve(self, token: str | None, env: Mapping[str, str], config_path: Path) -> None:
        if token:
            self.token, self.source = token, "argument"
            logger.info("Authentication token taken from command line")
            return
        env_token = env.get(AUTH_TOKEN_ENV)
        if env_token:
            self.token, self.source = env_token, "environment"
            logger.info("Authentication token loaded from environment variable %s", AUTH_TOKEN_ENV)
            return
        file_token = _read_token_file(config_path)
        if file_token:
            self.token, self.source = file_token, "config_file"
            logger.info("Authentication token loaded from %s", config_path)
            return
        logger.info("No authentication token found")

    def is_configured(self) -> bool:
        return bool(self.token)

    def auth_headers(self) -> dict[str, str]:
        """Headers to merge into every outgoing request (empty when unconfigured)."""
        if self.token:
            return {"Authorization": f"Bearer {self.token}"}
        return {}


def _read_token_file(path: Path) -> str | None:
    if not path.exists():
        return None
    try:
        data = orjson.loads(path.read_bytes())
    except (orjson.JSONDecodeError, OSError) as e:
        logger.warning("Error reading %s: %s", path, e)
        return None
    if not isinstance(data, dict):
        logger.warning("Ignoring %s: expected a JSON object", path)
        return None
    token = data.get("token")
    if not isinstance(token, str) or not token:
        logger.warning("Ignoring %s: no usable \"token\" field", path)
        return None
    return token
