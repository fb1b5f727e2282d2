# translations_plugin.py
from __future__ import annotations

import logging
from typing import Callable, Dict, List, Optional

from fastmcp import FastMCP
from fastmcp.exceptions import ToolError

import units as svc
from translation_writer import BulkWriteResult, TranslationItem, bulk_write_translations, write_translation
from units import SearchIn, Unit, as_forms, unit_component_language
from weblate_client import WeblateClient

log = logging.getLogger("weblate_mcp.translations")

MAX_LISTED_UNITS = 10
MAX_LISTED_KEYS = 50
MAX_FILTERED_UNITS = 50

_STATE_LABELS = {
    0: "❌ Untranslated",
    10: "🔄 Needs Editing",
    20: "✅ Translated",
    30: "✅ Approved",
    100: "🔒 Read-only",
}


# -----------------------------------------------------------------------------
# Formatting
# -----------------------------------------------------------------------------

def unit_status(unit: Unit) -> str:
    state = unit.get("state")
    if isinstance(state, int) and state in _STATE_LABELS:
        return _STATE_LABELS[state]
    if unit.get("approved"):
        return "✅ Approved"
    if unit.get("translated"):
        return "📝 Translated"
    return "❌ Untranslated"


def format_unit(unit: Unit) -> str:
    source = "".join(as_forms(unit.get("source"))) or "(empty)"
    target = "".join(as_forms(unit.get("target"))) or "(empty)"
    return (
        f"**Key:** {unit.get('context') or '(no context)'}\n"
        f"**Source:** {source}\n"
        f"**Target:** {target}\n"
        f"**Status:** {unit_status(unit)}\n"
        f"**Context:** {unit.get('context') or '(none)'}\n"
        f"**Note:** {unit.get('note') or '(none)'}\n"
        f"**ID:** {unit.get('id')}"
    )


def format_unit_list(header: str, units: List[Unit], max_items: int = MAX_LISTED_UNITS, noun: str = "results") -> str:
    body = "\n\n".join(format_unit(u) for u in units[:max_items])
    footer = f"\n\n*Showing first {max_items} of {len(units)} {noun}*" if len(units) > max_items else ""
    return f"{header}\n\n{body}{footer}"


def format_grouped_units(units: List[Unit]) -> str:
    groups: Dict[str, List[Unit]] = {}
    for u in units:
        component, language = unit_component_language(u)
        groups.setdefault(f"{component or 'unknown'} ({language or 'unknown'})", []).append(u)
    return "\n\n".join(
        f"**{label}:**\n" + "\n".join(format_unit(u) for u in members)
        for label, members in groups.items()
    )


def format_key_list(header: str, keys: List[str], noun: str = "keys") -> str:
    listed = "\n".join(f"- {k}" for k in keys[:MAX_LISTED_KEYS])
    footer = f"\n\n*Showing first {MAX_LISTED_KEYS} of {len(keys)} {noun}*" if len(keys) > MAX_LISTED_KEYS else ""
    return f"{header}\n\n{listed}{footer}"


def format_filtered_unit(unit: Unit) -> str:
    source = "".join(as_forms(unit.get("source"))) or "(empty)"
    target = "".join(as_forms(unit.get("target"))) or "(empty)"
    state = unit.get("state")
    status = _STATE_LABELS.get(state, "❓ Unknown") if isinstance(state, int) else "❓ Unknown"
    return (
        f"**Key:** {unit.get('context') or '(no context)'}\n"
        f"**Source:** {source}\n"
        f"**Target:** {target}\n"
        f"**Status:** {status}\n"
        f"**Location:** {unit.get('location') or '(none)'}\n"
        f"**Note:** {unit.get('note') or '(none)'}\n"
        f"**ID:** {unit.get('id')}"
    )


def format_bulk_result(project: str, language: str, result: BulkWriteResult) -> str:
    lines = [
        f"Bulk update in {project} ({language}): {len(result.succeeded)} succeeded, "
        f"{len(result.failed)} failed out of {result.total}"
    ]
    if result.failed:
        lines.append("")
        lines.append("**Failures:**")
        lines.extend(f"- {key}: {message}" for key, message in result.failed)
    return "\n".join(lines)


# -----------------------------------------------------------------------------
# Tools
# -----------------------------------------------------------------------------

def register(server: FastMCP, get_client: Callable[[], WeblateClient]) -> None:
    """Attach unit search and write tools to the given server."""

    @server.tool(
        name="search_string_in_project",
        description="Search for translations containing specific text in a project",
    )
    def search_string_in_project(project_slug: str, value: str, search_in: SearchIn = "both") -> str:
        """
        Args:
          project_slug: The slug of the project to search in
          value: The text to search for
          search_in: Where to search: "source", "target" or "both"
        """
        try:
            results = svc.search_string_in_project(get_client(), project_slug, value, search_in)
        except RuntimeError as e:
            log.error('Failed to search for "%s" in %s: %s', value, project_slug, e)
            raise ToolError(f'Error searching for "{value}" in project "{project_slug}": {e}')
        if not results:
            return f'No translations found containing "{value}" in project "{project_slug}"'
        return format_unit_list(
            f'Found {len(results)} translations containing "{value}" in project "{project_slug}":', results
        )

    @server.tool(
        name="get_translation_for_key",
        description="Get translation value for a specific key in a project",
    )
    def get_translation_for_key(project_slug: str, component_slug: str, language_code: str, key: str) -> str:
        """
        Args:
          project_slug: The slug of the project
          component_slug: The slug of the component
          language_code: The language code (e.g., en, es, fr)
          key: The translation key to look up
        """
        try:
            unit = svc.get_translation_by_key(get_client(), project_slug, component_slug, language_code, key)
        except RuntimeError as e:
            log.error("Failed to get translation for key %s: %s", key, e)
            raise ToolError(f'Error getting translation for key "{key}": {e}')
        if unit is None:
            return f'Translation not found for key "{key}" in {project_slug}/{component_slug}/{language_code}'
        return format_unit(unit)

    @server.tool(
        name="write_translation",
        description=(
            "Update or write a translation value for a specific key. For plural strings pass all "
            "forms concatenated, each starting with %d (e.g. \"%d day%d days\")."
        ),
    )
    def write_translation_tool(
        project_slug: str,
        component_slug: str,
        language_code: str,
        key: str,
        value: str,
        mark_as_approved: bool = False,
    ) -> str:
        """
        Args:
          project_slug: The slug of the project
          component_slug: The slug of the component
          language_code: The language code (e.g., en, es, fr)
          key: The translation key to update
          value: The new translation value
          mark_as_approved: Whether to mark as approved (default: false)
        """
        try:
            unit = write_translation(
                get_client(), project_slug, component_slug, language_code, key, value, mark_as_approved
            )
        except RuntimeError as e:
            log.error("Failed to write translation for key %s: %s", key, e)
            raise ToolError(f'Error writing translation for key "{key}": {e}')
        return f'Successfully updated translation for key "{key}"\n\n{format_unit(unit)}'

    @server.tool(
        name="bulk_write_translations",
        description="Write many translations for one language at once; reports a success/failure tally",
    )
    def bulk_write_translations_tool(
        project_slug: str,
        language_code: str,
        translations: List[TranslationItem],
        mark_as_approved: bool = False,
    ) -> str:
        """
        Args:
          project_slug: The slug of the project
          language_code: The language code shared by all items
          translations: Items with key, value and optional component
          mark_as_approved: Whether to mark every written string as approved
        """
        try:
            client = get_client()
        except RuntimeError as e:
            log.error("Failed to start bulk write in %s: %s", project_slug, e)
            raise ToolError(f"Error writing translations: {e}")
        result = bulk_write_translations(client, project_slug, language_code, translations, mark_as_approved)
        return format_bulk_result(project_slug, language_code, result)

    @server.tool(
        name="find_translations_for_key",
        description="Find all translations for a specific key across all components and languages in a project",
    )
    def find_translations_for_key(project_slug: str, key: str) -> str:
        """
        Args:
          project_slug: The slug of the project
          key: The exact translation key to find
        """
        try:
            results = svc.find_translations_for_key(get_client(), project_slug, key)
        except RuntimeError as e:
            log.error('Failed to find translations for key "%s" in %s: %s', key, project_slug, e)
            raise ToolError(f'Error finding translations for key "{key}" in project "{project_slug}": {e}')
        if not results:
            return f'No translations found for key "{key}" in project "{project_slug}"'
        return (
            f'Found {len(results)} translations for key "{key}" in project "{project_slug}":\n\n'
            + format_grouped_units(results)
        )

    @server.tool(
        name="find_best_translation_match",
        description="Find the translations that best match a text, optionally narrowed by context words",
    )
    def find_best_translation_match(project_slug: str, value: str, context: Optional[str] = None) -> str:
        """
        Args:
          project_slug: The slug of the project
          value: The text to match
          context: Optional words describing where the string is used
        """
        try:
            results = svc.find_best_translation_match(get_client(), project_slug, value, context)
        except RuntimeError as e:
            log.error('Failed to find best match for "%s": %s', value, e)
            raise ToolError(f'Error finding translation match for "{value}": {e}')
        if not results:
            return f'No matching translations found for "{value}" in project "{project_slug}"'
        return format_unit_list(f'Found {len(results)} matches for "{value}" in project "{project_slug}":', results)

    @server.tool(
        name="search_translations_by_key",
        description="Search for translations by key pattern across components in a project",
    )
    def search_translations_by_key(
        project_slug: str,
        key_pattern: str,
        component_slug: Optional[str] = None,
        language_code: Optional[str] = None,
        exact_match: bool = False,
    ) -> str:
        """
        Args:
          project_slug: The slug of the project to search in
          key_pattern: The key pattern to search for (supports partial matching)
          component_slug: Optional: limit search to specific component
          language_code: Optional: limit search to specific language
          exact_match: Whether to match the key exactly (default: false)
        """
        try:
            results = svc.search_translations_by_key(
                get_client(), project_slug, key_pattern, component_slug, language_code, exact_match
            )
        except RuntimeError as e:
            log.error('Failed to search by key pattern "%s" in %s: %s', key_pattern, project_slug, e)
            raise ToolError(f'Error searching for key pattern "{key_pattern}" in project "{project_slug}": {e}')
        if not results:
            return f'No translations found for key pattern "{key_pattern}" in project "{project_slug}"'
        return format_unit_list(
            f'Found {len(results)} translations for key pattern "{key_pattern}" in project "{project_slug}":',
            results,
        )

    @server.tool(
        name="list_translation_keys",
        description="List all translation keys in a project (optionally filtered by component)",
    )
    def list_translation_keys(
        project_slug: str, component_slug: Optional[str] = None, language_code: Optional[str] = None
    ) -> str:
        """
        Args:
          project_slug: The slug of the project
          component_slug: Optional: filter by specific component
          language_code: Optional: filter by specific language
        """
        try:
            keys = svc.list_translation_keys(get_client(), project_slug, component_slug, language_code)
        except RuntimeError as e:
            log.error("Failed to list translation keys in %s: %s", project_slug, e)
            raise ToolError(f'Error listing translation keys in project "{project_slug}": {e}')
        if not keys:
            return f'No translation keys found in project "{project_slug}"'
        return format_key_list(f'Found {len(keys)} translation keys in project "{project_slug}":', keys)

    @server.tool(
        name="search_translation_keys",
        description="Search for translation keys by pattern in a project",
    )
    def search_translation_keys(project_slug: str, key_pattern: str, component_slug: Optional[str] = None) -> str:
        """
        Args:
          project_slug: The slug of the project
          key_pattern: The pattern to search for in key names (case-insensitive)
          component_slug: Optional: limit search to specific component
        """
        try:
            keys = svc.search_translation_keys(get_client(), project_slug, key_pattern, component_slug)
        except RuntimeError as e:
            log.error('Failed to search keys by pattern "%s" in %s: %s', key_pattern, project_slug, e)
            raise ToolError(f'Error searching translation keys by pattern "{key_pattern}" in project "{project_slug}": {e}')
        if not keys:
            return f'No translation keys found matching pattern "{key_pattern}" in project "{project_slug}"'
        return format_key_list(
            f'Found {len(keys)} translation keys matching pattern "{key_pattern}" in project "{project_slug}":',
            keys,
            noun="matching keys",
        )

    @server.tool(
        name="search_units_with_filters",
        description=(
            "Search translation units using Weblate's filtering syntax, e.g. \"state:<translated\" "
            "(untranslated), \"state:>=translated\", \"source:hello\", \"has:suggestion\"."
        ),
    )
    def search_units_with_filters(
        project_slug: str, component_slug: str, language_code: str, search_query: str, limit: int = 50
    ) -> str:
        """
        Args:
          project_slug: The slug of the project
          component_slug: The slug of the component
          language_code: The language code (e.g., sk, cs, fr)
          search_query: Weblate search query using its filter syntax
          limit: Maximum number of results to return (default 50, max 200)
        """
        try:
            results = svc.search_units_with_query(
                get_client(), project_slug, component_slug, language_code, search_query, limit
            )
        except RuntimeError as e:
            log.error("Failed to search units with filters: %s", e)
            raise ToolError(f"Error searching units: {e}")
        where = f"{project_slug}/{component_slug}/{language_code}"
        if not results:
            return f'No units found matching query "{search_query}" in {where}'
        body = "\n\n".join(format_filtered_unit(u) for u in results[:MAX_FILTERED_UNITS])
        footer = (
            f"\n\n*Showing first {MAX_FILTERED_UNITS} of {len(results)} units*"
            if len(results) > MAX_FILTERED_UNITS else ""
        )
        return f'Found {len(results)} units in {where} matching query "{search_query}":\n\n{body}{footer}'
