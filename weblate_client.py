# weblate_client.py
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional

import requests

from weblate_config import DEFAULT_TIMEOUT, WeblateSettings

log = logging.getLogger("weblate_mcp.client")

USER_AGENT = "weblate-mcp/1.0"
DEFAULT_MAX_PAGES = 50


class WeblateError(RuntimeError):
    """A failed call against the Weblate API."""

    def __init__(self, message: str, status_code: Optional[int] = None, payload: Any = None):
        super().__init__(message)
        self.status_code = status_code
        self.payload = payload


@dataclass
class Page:
    results: List[Dict[str, Any]] = field(default_factory=list)
    count: int = 0
    next: Optional[str] = None
    previous: Optional[str] = None


def normalize_api_url(url: str) -> str:
    base = url.strip().rstrip("/")
    if not base.endswith("/api"):
        base += "/api"
    return base


def _safe_error_message(e: requests.HTTPError) -> str:
    resp = e.response
    if resp is not None and resp.headers.get("Content-Type", "").startswith("application/json"):
        try:
            body = resp.json()
        except ValueError:
            return str(e)
        if isinstance(body, dict):
            for key in ("detail", "message", "error"):
                if body.get(key):
                    return str(body[key])
            return str(body)
    return str(e)


def _error_payload(resp: Optional[requests.Response]) -> Any:
    if resp is None:
        return None
    try:
        return resp.json()
    except ValueError:
        return resp.text[:400]


def to_page(payload: Any) -> Page:
    """Accept either a bare JSON array or a paginated envelope."""
    if isinstance(payload, list):
        return Page(results=payload, count=len(payload))
    if isinstance(payload, dict):
        results = payload.get("results") or []
        return Page(
            results=results,
            count=payload.get("count") or len(results),
            next=payload.get("next") or None,
            previous=payload.get("previous") or None,
        )
    return Page()


class WeblateClient:
    """Thin synchronous wrapper around the Weblate REST API."""

    def __init__(
        self,
        api_url: str,
        api_token: str,
        timeout: float = DEFAULT_TIMEOUT,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = normalize_api_url(api_url)
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({
            "Authorization": f"Token {api_token}",
            "Content-Type": "application/json",
            "Accept": "application/json",
            "User-Agent": USER_AGENT,
        })

    @classmethod
    def from_settings(cls, settings: WeblateSettings, session: Optional[requests.Session] = None) -> "WeblateClient":
        settings.require_credentials()
        return cls(settings.api_url, settings.api_token, timeout=settings.timeout, session=session)

    def url_for(self, path: str) -> str:
        if path.startswith(("http://", "https://")):
            return path
        return f"{self.base_url}/{path.lstrip('/')}"

    def _request(self, method: str, path: str, *, params: Optional[dict] = None, json: Any = None) -> Any:
        url = self.url_for(path)
        log.debug("%s %s params=%s", method, url, params)
        try:
            r = self.session.request(method, url, params=params, json=json, timeout=self.timeout)
            r.raise_for_status()
        except requests.HTTPError as e:
            status = e.response.status_code if e.response is not None else None
            payload = _error_payload(e.response)
            log.error("Weblate API error: %s %s :: %s", status, url, payload)
            raise WeblateError(f"HTTP {status}: {_safe_error_message(e)}", status_code=status, payload=payload) from e
        except requests.RequestException as e:
            log.error("Network error calling %s: %s", url, e)
            raise WeblateError(f"Network error: {e}") from e

        if not r.content:
            return None
        try:
            return r.json()
        except ValueError as e:
            raise WeblateError(f"Invalid JSON from {url}: {r.text[:200]}", status_code=r.status_code) from e

    def get(self, path: str, params: Optional[dict] = None) -> Any:
        return self._request("GET", path, params=params)

    def patch(self, path: str, data: dict) -> Any:
        return self._request("PATCH", path, json=data)

    def get_page(self, path: str, params: Optional[dict] = None) -> Page:
        return to_page(self.get(path, params=params))

    def iter_results(
        self,
        path: str,
        params: Optional[dict] = None,
        limit: Optional[int] = None,
        max_pages: int = DEFAULT_MAX_PAGES,
    ) -> Iterator[Dict[str, Any]]:
        """Yield items across pages, following `next` links.

        Query params only go with the first request; `next` already
        carries them.
        """
        seen = 0
        pages = 0
        url: Optional[str] = path
        while url and (limit is None or seen < limit):
            if pages >= max_pages:
                log.warning("Stopped paging %s after %d pages", path, pages)
                return
            page = self.get_page(url, params=params if pages == 0 else None)
            pages += 1
            for item in page.results:
                if limit is not None and seen >= limit:
                    return
                yield item
                seen += 1
            url = page.next

    def list_results(self, path: str, params: Optional[dict] = None, limit: Optional[int] = None) -> List[Dict[str, Any]]:
        return list(self.iter_results(path, params=params, limit=limit))
