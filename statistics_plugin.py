# statistics_plugin.py
from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional

from fastmcp import FastMCP
from fastmcp.exceptions import ToolError

from projects_plugin import list_components, list_languages
from weblate_client import WeblateClient

log = logging.getLogger("weblate_mcp.statistics")

Stats = Dict[str, Any]

PROGRESS_WIDTH = 20


# -----------------------------------------------------------------------------
# API calls
# -----------------------------------------------------------------------------

def get_project_statistics(client: WeblateClient, project: str) -> Stats:
    return client.get(f"/projects/{project}/statistics/") or {}


def get_component_statistics(client: WeblateClient, project: str, component: str) -> Stats:
    return client.get(f"/components/{project}/{component}/statistics/") or {}


def get_translation_statistics(client: WeblateClient, project: str, component: str, language: str) -> Stats:
    return client.get(f"/translations/{project}/{component}/{language}/statistics/") or {}


def get_language_statistics(client: WeblateClient, language: str) -> Stats:
    return client.get(f"/languages/{language}/statistics/") or {}


def get_user_statistics(client: WeblateClient, username: str) -> Stats:
    return client.get(f"/users/{username}/statistics/") or {}


def get_project_dashboard(client: WeblateClient, project: str) -> Dict[str, Any]:
    """Project statistics plus one entry per component.

    A component whose statistics cannot be fetched carries an ``error``
    instead of ``statistics``; it does not fail the whole dashboard.
    """
    project_stats = get_project_statistics(client, project)
    entries: List[Dict[str, Any]] = []
    for comp in list_components(client, project):
        entry: Dict[str, Any] = {"component": comp.get("name"), "slug": comp.get("slug"), "statistics": None}
        try:
            entry["statistics"] = get_component_statistics(client, project, comp.get("slug"))
        except RuntimeError as e:
            log.warning("Failed to get stats for component %s: %s", comp.get("slug"), e)
            entry["error"] = str(e)
        entries.append(entry)
    return {"project": project_stats, "components": entries}


def get_component_language_progress(client: WeblateClient, project: str, component: str) -> List[Dict[str, Any]]:
    progress: List[Dict[str, Any]] = []
    for lang in list_languages(client, project):
        entry: Dict[str, Any] = {"language": lang.get("name"), "code": lang.get("code"), "statistics": None}
        try:
            entry["statistics"] = get_translation_statistics(client, project, component, lang.get("code"))
        except RuntimeError as e:
            log.warning("Failed to get translation stats for %s in %s: %s", lang.get("code"), component, e)
            entry["error"] = str(e)
        progress.append(entry)
    return progress


# -----------------------------------------------------------------------------
# Formatting
# -----------------------------------------------------------------------------

def progress_bar(percent: Any, width: int = PROGRESS_WIDTH) -> str:
    try:
        value = float(percent or 0)
    except (TypeError, ValueError):
        value = 0.0
    filled = max(0, min(width, int(value / 100 * width)))
    return "[" + "█" * filled + "░" * (width - filled) + "]"


def pct(value: Any) -> str:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return "N/A"
    return f"{value:.1f}%"


def stat(stats: Optional[Stats], key: str, default: Any = "N/A") -> Any:
    if not stats or stats.get(key) is None:
        return default
    return stats[key]


def format_date(value: Optional[str]) -> str:
    if not value:
        return "N/A"
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00")).strftime("%Y-%m-%d")
    except ValueError:
        return value


def format_project_statistics(project: str, stats: Stats) -> str:
    return (
        f"## 📊 Project Statistics: {stats.get('name') or project}\n\n"
        "**Overall Progress:**\n"
        f"- 🎯 Translation Progress: {pct(stats.get('translated_percent'))}\n"
        f"- ✅ Approved: {pct(stats.get('approved_percent'))}\n"
        f"- 🔍 Needs Review: {pct(stats.get('readonly_percent'))}\n"
        f"- ❌ Untranslated: {pct(stats.get('nottranslated_percent'))}\n\n"
        "**String Counts:**\n"
        f"- 📝 Total Strings: {stat(stats, 'total')}\n"
        f"- ✅ Translated: {stat(stats, 'translated')}\n"
        f"- 🎯 Approved: {stat(stats, 'approved')}\n"
        f"- ❌ Untranslated: {stat(stats, 'nottranslated')}\n"
        f"- 🔍 Read-only: {stat(stats, 'readonly')}\n\n"
        "**Project Details:**\n"
        f"- 🌐 URL: {stats.get('web_url') or 'N/A'}\n"
        f"- 🔗 Repository: {stats.get('repository_url') or 'N/A'}"
    )


def format_component_statistics(project: str, component: str, stats: Stats) -> str:
    source = stats.get("source_language") or {}
    return (
        f"## 📊 Component Statistics: {stats.get('name') or component}\n\n"
        f"**Project:** {project}\n"
        f"**Component:** {component}\n\n"
        "**Translation Progress:**\n"
        f"- 🎯 Translated: {pct(stats.get('translated_percent'))}\n"
        f"- ✅ Approved: {pct(stats.get('approved_percent'))}\n"
        f"- 🔍 Needs Review: {pct(stats.get('readonly_percent'))}\n"
        f"- ❌ Untranslated: {pct(stats.get('nottranslated_percent'))}\n\n"
        "**String Counts:**\n"
        f"- 📝 Total: {stat(stats, 'total')}\n"
        f"- ✅ Translated: {stat(stats, 'translated')}\n"
        f"- 🎯 Approved: {stat(stats, 'approved')}\n"
        f"- ❌ Untranslated: {stat(stats, 'nottranslated')}\n\n"
        "**Component Details:**\n"
        f"- 🌐 URL: {stats.get('web_url') or 'N/A'}\n"
        f"- 📁 Source Language: {source.get('name') or 'N/A'} ({source.get('code') or 'N/A'})"
    )


def format_translation_statistics(project: str, component: str, language: str, stats: Stats) -> str:
    return (
        "## 📊 Translation Statistics\n\n"
        f"**Translation:** {project}/{component}/{language}\n\n"
        "**Progress:**\n"
        f"- 🎯 Translated: {pct(stats.get('translated_percent'))}\n"
        f"- ✅ Approved: {pct(stats.get('approved_percent'))}\n"
        f"- 🔍 Needs Review: {pct(stats.get('readonly_percent'))}\n"
        f"- ❌ Untranslated: {pct(stats.get('nottranslated_percent'))}\n\n"
        "**String Details:**\n"
        f"- 📝 Total Strings: {stat(stats, 'total')}\n"
        f"- ✅ Translated: {stat(stats, 'translated')}\n"
        f"- 🎯 Approved: {stat(stats, 'approved')}\n"
        f"- ❌ Untranslated: {stat(stats, 'nottranslated')}\n"
        f"- 🔍 Readonly: {stat(stats, 'readonly')}\n\n"
        "**Quality Metrics:**\n"
        f"- ⚠️ Failing Checks: {stat(stats, 'failing_percent', 0)}%\n"
        f"- 💡 Suggestions: {stat(stats, 'suggestions')}\n"
        f"- 💬 Comments: {stat(stats, 'comments')}"
    )


def format_project_dashboard(project: str, dashboard: Dict[str, Any]) -> str:
    out = [format_project_statistics(project, dashboard.get("project") or {}), "\n\n## 📋 Component Breakdown\n\n"]
    for i, comp in enumerate(dashboard.get("components") or [], start=1):
        head = f"**{i}. {comp.get('component')}** ({comp.get('slug')})\n"
        stats = comp.get("statistics")
        if stats is not None:
            out.append(
                head
                + f"- 🎯 Progress: {pct(stats.get('translated_percent'))}\n"
                + f"- ✅ Approved: {pct(stats.get('approved_percent'))}\n"
                + f"- 📝 Total Strings: {stat(stats, 'total')}\n\n"
            )
        else:
            out.append(head + f"- ❌ Error: {comp.get('error') or 'Unable to load statistics'}\n\n")
    return "".join(out)


def format_component_language_progress(project: str, component: str, progress: List[Dict[str, Any]]) -> str:
    out = [f"## 🌐 Language Progress: {project}/{component}\n\n"]
    for i, lang in enumerate(progress, start=1):
        head = f"**{i}. {lang.get('language')}** ({lang.get('code')})\n"
        stats = lang.get("statistics")
        if stats is not None:
            out.append(
                head
                + f"{progress_bar(stats.get('translated_percent'))} {pct(stats.get('translated_percent'))}\n"
                + f"- ✅ Approved: {pct(stats.get('approved_percent'))}\n"
                + f"- 📝 Total: {stat(stats, 'total')} | Translated: {stat(stats, 'translated')}\n\n"
            )
        else:
            out.append(head + f"- ❌ Error: {lang.get('error') or 'Unable to load statistics'}\n\n")
    return "".join(out)


def format_language_statistics(language: str, stats: Stats) -> str:
    return (
        f"## 🌐 Language Statistics: {stats.get('name') or language}\n\n"
        "**Language Details:**\n"
        f"- 📛 Name: {stat(stats, 'name')}\n"
        f"- 🔤 Code: {stat(stats, 'code')}\n"
        f"- 📍 Direction: {stat(stats, 'direction', 'ltr')}\n\n"
        "**Overall Progress:**\n"
        f"- 🎯 Translated: {pct(stats.get('translated_percent'))}\n"
        f"- ✅ Approved: {pct(stats.get('approved_percent'))}\n"
        f"- ❌ Untranslated: {pct(stats.get('nottranslated_percent'))}\n\n"
        "**String Counts:**\n"
        f"- 📝 Total: {stat(stats, 'total')}\n"
        f"- ✅ Translated: {stat(stats, 'translated')}\n"
        f"- 🎯 Approved: {stat(stats, 'approved')}\n"
        f"- ❌ Untranslated: {stat(stats, 'nottranslated')}"
    )


def format_user_statistics(username: str, stats: Stats) -> str:
    return (
        f"## 👤 User Statistics: {stats.get('full_name') or username}\n\n"
        "**User Details:**\n"
        f"- 👤 Username: {stat(stats, 'username')}\n"
        f"- 📧 Email: {stat(stats, 'email')}\n"
        f"- 📅 Joined: {format_date(stats.get('date_joined'))}\n\n"
        "**Contribution Stats:**\n"
        f"- ✏️ Translations: {stat(stats, 'translated')}\n"
        f"- ✅ Approved: {stat(stats, 'approved')}\n"
        f"- 💡 Suggestions: {stat(stats, 'suggestions')}\n"
        f"- 💬 Comments: {stat(stats, 'comments')}\n\n"
        "**Activity:**\n"
        f"- 📈 Total Changes: {stat(stats, 'total_changes')}\n"
        f"- 🗓️ Last Activity: {format_date(stats.get('last_login'))}"
    )


# -----------------------------------------------------------------------------
# Tools
# -----------------------------------------------------------------------------

def register(server: FastMCP, get_client: Callable[[], WeblateClient]) -> None:
    """Attach statistics and dashboard tools to the given server."""

    @server.tool(
        name="get_project_statistics",
        description="Get comprehensive statistics for a project including completion rates and string counts",
    )
    def get_project_statistics_tool(project_slug: str) -> str:
        try:
            stats = get_project_statistics(get_client(), project_slug)
        except RuntimeError as e:
            log.error("Failed to get project statistics for %s: %s", project_slug, e)
            raise ToolError(f"Error getting project statistics: {e}")
        return format_project_statistics(project_slug, stats)

    @server.tool(name="get_component_statistics", description="Get detailed statistics for a specific component")
    def get_component_statistics_tool(project_slug: str, component_slug: str) -> str:
        try:
            stats = get_component_statistics(get_client(), project_slug, component_slug)
        except RuntimeError as e:
            log.error("Failed to get component statistics for %s/%s: %s", project_slug, component_slug, e)
            raise ToolError(f"Error getting component statistics: {e}")
        return format_component_statistics(project_slug, component_slug, stats)

    @server.tool(
        name="get_project_dashboard",
        description="Get a comprehensive dashboard overview for a project with all component statistics",
    )
    def get_project_dashboard_tool(project_slug: str) -> str:
        try:
            dashboard = get_project_dashboard(get_client(), project_slug)
        except RuntimeError as e:
            log.error("Failed to get project dashboard for %s: %s", project_slug, e)
            raise ToolError(f"Error getting project dashboard: {e}")
        return format_project_dashboard(project_slug, dashboard)

    @server.tool(
        name="get_translation_statistics",
        description="Get statistics for a specific translation (project/component/language combination)",
    )
    def get_translation_statistics_tool(project_slug: str, component_slug: str, language_code: str) -> str:
        """
        Args:
          project_slug: The slug of the project
          component_slug: The slug of the component
          language_code: The language code (e.g., en, es, fr)
        """
        try:
            stats = get_translation_statistics(get_client(), project_slug, component_slug, language_code)
        except RuntimeError as e:
            log.error(
                "Failed to get translation statistics for %s/%s/%s: %s",
                project_slug, component_slug, language_code, e,
            )
            raise ToolError(f"Error getting translation statistics: {e}")
        return format_translation_statistics(project_slug, component_slug, language_code, stats)

    @server.tool(
        name="get_component_language_progress",
        description="Get translation progress for all languages in a component",
    )
    def get_component_language_progress_tool(project_slug: str, component_slug: str) -> str:
        try:
            progress = get_component_language_progress(get_client(), project_slug, component_slug)
        except RuntimeError as e:
            log.error("Failed to get language progress for %s/%s: %s", project_slug, component_slug, e)
            raise ToolError(f"Error getting component language progress: {e}")
        if not progress:
            return f'No languages found in project "{project_slug}".'
        return format_component_language_progress(project_slug, component_slug, progress)

    @server.tool(name="get_language_statistics", description="Get statistics for a specific language across all projects")
    def get_language_statistics_tool(language_code: str) -> str:
        try:
            stats = get_language_statistics(get_client(), language_code)
        except RuntimeError as e:
            log.error("Failed to get language statistics for %s: %s", language_code, e)
            raise ToolError(f"Error getting language statistics: {e}")
        return format_language_statistics(language_code, stats)

    @server.tool(name="get_user_statistics", description="Get contribution statistics for a specific user")
    def get_user_statistics_tool(username: str) -> str:
        try:
            stats = get_user_statistics(get_client(), username)
        except RuntimeError as e:
            log.error("Failed to get user statistics for %s: %s", username, e)
            raise ToolError(f"Error getting user statistics: {e}")
        return format_user_statistics(username, stats)
