# units.py
from __future__ import annotations

import logging
from typing import Any, Dict, List, Literal, Optional, Tuple

from weblate_client import WeblateClient

log = logging.getLogger("weblate_mcp.units")

SearchIn = Literal["source", "target", "both"]

Unit = Dict[str, Any]

MAX_FILTERED_RESULTS = 200


# -----------------------------------------------------------------------------
# Unit helpers
# -----------------------------------------------------------------------------

def as_forms(value: Any) -> List[str]:
    """Weblate stores source/target as a list of plural forms."""
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    return [str(v) for v in value]


def unit_component_language(unit: Unit) -> Tuple[Optional[str], Optional[str]]:
    """Extract (component, language) from a unit's translation or web URL."""
    translation_url = unit.get("translation") or ""
    if "/translations/" in translation_url:
        parts = translation_url.split("/translations/", 1)[1].strip("/").split("/")
        if len(parts) >= 3:
            return parts[1], parts[2]

    # https://host/translate/<project>/<component>/<language>/?checksum=...
    web_url = unit.get("web_url") or ""
    if "/translate/" in web_url:
        parts = web_url.split("/translate/", 1)[1].split("?", 1)[0].strip("/").split("/")
        if len(parts) >= 3:
            return parts[1], parts[2]

    return None, unit.get("language_code")


def quote_term(value: str) -> str:
    """Double-quote a search value, escaping embedded quotes and backslashes."""
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def dedupe_units(units: List[Unit]) -> List[Unit]:
    seen = set()
    out = []
    for u in units:
        if u.get("id") in seen:
            continue
        seen.add(u.get("id"))
        out.append(u)
    return out


# -----------------------------------------------------------------------------
# Searches
# -----------------------------------------------------------------------------

def search_units(
    client: WeblateClient,
    project: str,
    component: Optional[str] = None,
    language: Optional[str] = None,
    query: Optional[str] = None,
    source: Optional[str] = None,
    target: Optional[str] = None,
    limit: Optional[int] = None,
) -> List[Unit]:
    """
    Run a Weblate unit search.

    With both component and language the translation's own units endpoint
    is used; otherwise the global /units/ endpoint scoped by query terms.
    """
    terms: List[str] = []
    if query:
        terms.append(query)
    if source:
        terms.append(f"source:{quote_term(source)}")
    if target:
        terms.append(f"target:{quote_term(target)}")

    if component and language:
        path = f"/translations/{project}/{component}/{language}/units/"
    else:
        path = "/units/"
        scope = [f"project:{project}"]
        if component:
            scope.append(f"component:{component}")
        if language:
            scope.append(f"language:{language}")
        terms = scope + terms

    params: Dict[str, Any] = {}
    if terms:
        params["q"] = " ".join(terms)
    if limit:
        params["page_size"] = limit
    return client.list_results(path, params=params or None, limit=limit)


def get_translation_by_key(
    client: WeblateClient, project: str, component: str, language: str, key: str
) -> Optional[Unit]:
    results = search_units(client, project, component, language, query=f"context:{quote_term(key)}")
    exact = [u for u in results if u.get("context") == key]
    if exact:
        return exact[0]
    return results[0] if results else None


def search_string_in_project(
    client: WeblateClient, project: str, value: str, search_in: SearchIn = "both"
) -> List[Unit]:
    results: List[Unit] = []
    if search_in in ("source", "both"):
        results.extend(search_units(client, project, source=value))
    if search_in in ("target", "both"):
        results.extend(search_units(client, project, target=value))
    return dedupe_units(results)


def find_best_translation_match(
    client: WeblateClient, project: str, value: str, context: Optional[str] = None
) -> List[Unit]:
    """Source matches first, then source-or-target; optionally narrowed by context words."""
    results = search_string_in_project(client, project, value, "source")
    if not results:
        results = search_string_in_project(client, project, value, "both")

    if context and len(results) > 1:
        words = context.lower().split()

        def haystack(u: Unit) -> str:
            return " ".join([u.get("context") or "", "".join(as_forms(u.get("source"))), u.get("note") or ""]).lower()

        results = [u for u in results if any(w in haystack(u) for w in words)]
    return results


def find_translations_for_key(
    client: WeblateClient, project: str, key: str, component: Optional[str] = None
) -> List[Unit]:
    return search_units(client, project, component, query=f"context:{quote_term(key)}")


def search_translations_by_key(
    client: WeblateClient,
    project: str,
    key_pattern: str,
    component: Optional[str] = None,
    language: Optional[str] = None,
    exact_match: bool = False,
) -> List[Unit]:
    query = f"context:{quote_term(key_pattern)}" if exact_match else f"context:{key_pattern}"
    return search_units(client, project, component, language, query=query)


def list_translation_keys(
    client: WeblateClient, project: str, component: Optional[str] = None, language: Optional[str] = None
) -> List[str]:
    units = search_units(client, project, component, language)
    return sorted({u["context"] for u in units if (u.get("context") or "").strip()})


def search_translation_keys(
    client: WeblateClient, project: str, key_pattern: str, component: Optional[str] = None
) -> List[str]:
    needle = key_pattern.lower()
    return [k for k in list_translation_keys(client, project, component) if needle in k.lower()]


def search_units_with_query(
    client: WeblateClient, project: str, component: str, language: str, query: str, limit: int = 50
) -> List[Unit]:
    limit = max(1, min(int(limit), MAX_FILTERED_RESULTS))
    return search_units(client, project, component, language, query=query, limit=limit)
