"""Common test configuration"""

import json
from typing import Any, Dict
from urllib.parse import parse_qs, urlsplit

import pytest
import responses

from weblate_client import WeblateClient

API_URL = "https://weblate.test"
API_TOKEN = "wlu_0123456789abcdef"


def api(path: str) -> str:
    return f"{API_URL}/api{path}"


def query(call) -> Dict[str, Any]:
    """Query params of a recorded call; repeated keys come back as lists."""
    parsed = parse_qs(urlsplit(call.request.url).query)
    return {k: v[0] if len(v) == 1 else v for k, v in parsed.items()}


def body(call) -> Any:
    return json.loads(call.request.body)


@pytest.fixture()
def mocked_responses():
    """Mock requests responses"""
    with responses.RequestsMock() as rsps:
        yield rsps


@pytest.fixture()
def client() -> WeblateClient:
    return WeblateClient(API_URL, API_TOKEN, timeout=5)


def unit(
    unit_id: int,
    context: str,
    source: Any,
    target: Any = "",
    project: str = "app",
    component: str = "web",
    language: str = "de",
    state: int = 0,
    **extra: Any,
) -> Dict[str, Any]:
    """A unit payload shaped like Weblate's /units/ responses."""
    data = {
        "id": unit_id,
        "context": context,
        "source": source if isinstance(source, list) else [source],
        "target": target if isinstance(target, list) else [target],
        "state": state,
        "language_code": language,
        "translation": f"{API_URL}/api/translations/{project}/{component}/{language}/",
        "web_url": f"{API_URL}/translate/{project}/{component}/{language}/?checksum={unit_id:x}",
        "note": "",
        "location": "",
    }
    data.update(extra)
    return data
