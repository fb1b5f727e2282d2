# weblate_config.py
from __future__ import annotations

import os
import pathlib
from dataclasses import dataclass
from typing import Optional

from dotenv import find_dotenv, load_dotenv

DEFAULT_SERVER_NAME = "weblate-mcp-server"
DEFAULT_SERVER_VERSION = "1.0.0"
DEFAULT_TIMEOUT = 10.0  # seconds


def init_env() -> bool:
    """Load Weblate settings from the nearest .env, else one beside this module.

    Returns True when a file supplied at least one variable.
    """
    try:
        dotenv_path = find_dotenv(usecwd=True)
    except OSError:
        dotenv_path = ""
    if dotenv_path and load_dotenv(dotenv_path):
        return True
    # stdio clients may start the server from an unrelated working directory
    module_env = pathlib.Path(__file__).resolve().parent / ".env"
    return module_env.exists() and load_dotenv(module_env)


@dataclass(frozen=True)
class WeblateSettings:
    api_url: str = ""
    api_token: str = ""
    timeout: float = DEFAULT_TIMEOUT
    server_name: str = DEFAULT_SERVER_NAME
    server_version: str = DEFAULT_SERVER_VERSION
    transport: str = "stdio"
    host: str = "127.0.0.1"
    port: int = 8000
    log_level: str = "INFO"
    log_file: Optional[str] = None
    debug: bool = False

    @property
    def has_credentials(self) -> bool:
        return bool(self.api_url and self.api_token)

    def require_credentials(self) -> None:
        if not self.has_credentials:
            raise RuntimeError("WEBLATE_API_URL and WEBLATE_API_TOKEN must be configured")


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name)
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_bool(name: str, default: bool = False) -> bool:
    raw = os.environ.get(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def load_settings() -> WeblateSettings:
    """Read settings from the environment (after .env loading)."""
    transport = os.environ.get("MCP_TRANSPORT", "stdio").strip().lower()
    if transport not in ("stdio", "http"):
        transport = "stdio"
    return WeblateSettings(
        api_url=os.environ.get("WEBLATE_API_URL", "").strip(),
        api_token=os.environ.get("WEBLATE_API_TOKEN", "").strip(),
        timeout=_env_float("WEBLATE_TIMEOUT", DEFAULT_TIMEOUT),
        server_name=os.environ.get("MCP_SERVER_NAME") or DEFAULT_SERVER_NAME,
        server_version=os.environ.get("MCP_SERVER_VERSION") or DEFAULT_SERVER_VERSION,
        transport=transport,
        host=os.environ.get("MCP_HOST") or "127.0.0.1",
        port=_env_int("MCP_PORT", 8000),
        log_level=(os.environ.get("LOG_LEVEL") or "INFO").upper(),
        log_file=os.environ.get("LOG_FILE") or None,
        debug=_env_bool("DEBUG"),
    )
