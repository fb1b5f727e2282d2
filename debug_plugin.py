# debug_plugin.py
from __future__ import annotations

import json
import logging
from typing import Any, Callable, Dict

from fastmcp import FastMCP

from projects_plugin import list_projects
from weblate_client import WeblateClient
from weblate_config import WeblateSettings

log = logging.getLogger("weblate_mcp.debug")

TOKEN_PREFIX_LEN = 10


def describe_configuration(settings: WeblateSettings) -> Dict[str, Any]:
    token = settings.api_token
    return {
        "api_url": settings.api_url or None,
        "token_configured": bool(token),
        "token_length": len(token),
        "token_prefix": (token[:TOKEN_PREFIX_LEN] + "...") if token else None,
        "timeout": settings.timeout,
        "transport": settings.transport,
        "debug_mode": settings.debug,
    }


def check_connection(get_client: Callable[[], WeblateClient]) -> Dict[str, Any]:
    try:
        projects = list_projects(get_client())
    except RuntimeError as e:
        log.warning("API connection test failed: %s", e)
        return {"status": "error", "message": str(e)}
    return {"status": "success", "message": f"API connection working - found {len(projects)} projects"}


def register(server: FastMCP, get_client: Callable[[], WeblateClient], settings: WeblateSettings) -> None:
    """Attach configuration and connectivity checks to the given server."""

    @server.tool(name="debug_configuration", description="Show the Weblate connection settings (token masked)")
    def debug_configuration_tool() -> str:
        return json.dumps(describe_configuration(settings), indent=2)

    @server.tool(name="test_api_connection", description="Check that the Weblate API is reachable with the configured token")
    def test_api_connection_tool() -> str:
        return json.dumps(check_connection(get_client), indent=2)
