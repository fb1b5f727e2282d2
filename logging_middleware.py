# logging_middleware.py
from __future__ import annotations

import json
import logging
import sys
from typing import Any, Callable, Dict, Optional

from fastmcp.server.middleware import Middleware, MiddlewareContext

LOGGER_NAME = "weblate_mcp"

log = logging.getLogger(f"{LOGGER_NAME}.middleware")

_FORMAT = "[%(asctime)s] %(levelname)s %(name)s %(message)s"
_DATEFMT = "%Y-%m-%d %H:%M:%S"

MASK = "***MASKED***"


# ---------------------------------------------------------------------
# Logging to STDERR (safe for stdio) + optional file
# ---------------------------------------------------------------------
def configure_logging(level: str = "INFO", log_file: Optional[str] = None) -> logging.Logger:
    """Attach stderr (and file) handlers to the package logger once."""
    root = logging.getLogger(LOGGER_NAME)
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    if not root.handlers:
        fmt = logging.Formatter(_FORMAT, _DATEFMT)
        eh = logging.StreamHandler(sys.stderr)  # stdout carries the MCP stream
        eh.setFormatter(fmt)
        root.addHandler(eh)
        if log_file:
            fh = logging.FileHandler(log_file, encoding="utf-8")
            fh.setFormatter(fmt)
            root.addHandler(fh)
    root.propagate = False
    return root


def safe_json(obj: Any, limit: int = 2000) -> str:
    try:
        text = json.dumps(obj, default=str, ensure_ascii=False)
    except (TypeError, ValueError):
        return f"<non-serializable:{type(obj).__name__}>"
    if len(text) > limit:
        return text[:limit] + f"...<{len(text) - limit} more chars>"
    return text


def unwrap_result(obj: Any) -> Any:
    """Best-effort plain view of a tool/handler result for logging."""
    for attr in ("structured_content", "content", "data", "result"):
        inner = getattr(obj, attr, None)
        if inner is not None:
            obj = inner
            break
    if hasattr(obj, "model_dump"):
        return obj.model_dump()
    if isinstance(obj, list):
        return [p.model_dump() if hasattr(p, "model_dump") else p for p in obj]
    return obj


def redact(obj: Any, sensitive: frozenset) -> Any:
    if isinstance(obj, dict):
        out: Dict[str, Any] = {}
        for k, v in obj.items():
            out[k] = MASK if str(k).lower() in sensitive else redact(v, sensitive)
        return out
    if isinstance(obj, list):
        return [redact(x, sensitive) for x in obj]
    return obj


class RedactingLoggingMiddleware(Middleware):
    """Log every MCP message and its result with credentials masked.

    Only the logs are redacted; clients still receive full responses.
    """

    SENSITIVE_KEYS = frozenset({
        "password", "api_key", "token", "api_token", "secret", "authorization",
        "bearer", "access_token", "refresh_token",
    })

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.log = logger or log

    def _redact(self, obj: Any) -> Any:
        return redact(obj, self.SENSITIVE_KEYS)

    def _safely(self, what: str, fn: Callable[[], None]) -> None:
        # a broken log line must never fail the request
        try:
            fn()
        except Exception as e:
            self.log.debug("%s log failed: %s", what, e)

    async def on_message(self, context: MiddlewareContext, call_next):
        def inbound():
            payload = context.message.model_dump() if hasattr(context.message, "model_dump") else {}
            self.log.info("▶ %s from %s :: %s", context.method, context.source, safe_json(self._redact(payload)))

        self._safely("inbound", inbound)

        result = await call_next(context)

        def outbound():
            view = unwrap_result(result)
            if isinstance(view, (dict, list)):
                view = self._redact(view)
            self.log.info("◀ %s :: %s", context.method, safe_json(view))

        self._safely("outbound", outbound)
        return result

    async def on_call_tool(self, context: MiddlewareContext, call_next):
        tool_name = getattr(getattr(context, "message", None), "name", "<unknown>")
        self.log.info("⚙ calling tool: %s", tool_name)
        return await call_next(context)
