# projects_plugin.py
from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List

from fastmcp import FastMCP
from fastmcp.exceptions import ToolError

from weblate_client import WeblateClient

log = logging.getLogger("weblate_mcp.projects")


# -----------------------------------------------------------------------------
# API calls
# -----------------------------------------------------------------------------

def list_projects(client: WeblateClient) -> List[Dict[str, Any]]:
    return client.list_results("/projects/")


def get_project(client: WeblateClient, project: str) -> Dict[str, Any]:
    return client.get(f"/projects/{project}/")


def list_components(client: WeblateClient, project: str) -> List[Dict[str, Any]]:
    return client.list_results(f"/projects/{project}/components/")


def list_languages(client: WeblateClient, project: str) -> List[Dict[str, Any]]:
    # not paginated; the endpoint returns a bare array of per-language stats
    return client.list_results(f"/projects/{project}/languages/")


# -----------------------------------------------------------------------------
# Formatting
# -----------------------------------------------------------------------------

def format_projects(projects: List[Dict[str, Any]]) -> str:
    entries = "\n\n".join(
        f"- **{p.get('name')}** ({p.get('slug')})\n  URL: {p.get('web_url') or p.get('web') or 'N/A'}"
        for p in projects
    )
    return f"Found {len(projects)} projects:\n\n{entries}"


def format_components(project: str, components: List[Dict[str, Any]]) -> str:
    def entry(c: Dict[str, Any]) -> str:
        lang = c.get("source_language") or {}
        return (
            f"- **{c.get('name')}** ({c.get('slug')})\n"
            f"  Source Language: {lang.get('name', 'N/A')} ({lang.get('code', 'N/A')})"
        )

    return f'Components in project "{project}":\n\n' + "\n\n".join(entry(c) for c in components)


def format_languages(project: str, languages: List[Dict[str, Any]]) -> str:
    def entry(lang: Dict[str, Any]) -> str:
        line = f"- **{lang.get('name')}** ({lang.get('code')})"
        pct = lang.get("translated_percent")
        if isinstance(pct, (int, float)):
            line += f" - {pct:.1f}% translated"
        return line

    return f'Languages in project "{project}":\n\n' + "\n".join(entry(lang) for lang in languages)


# -----------------------------------------------------------------------------
# Tools
# -----------------------------------------------------------------------------

def register(server: FastMCP, get_client: Callable[[], WeblateClient]) -> None:
    """Attach project, component and language tools to the given server."""

    @server.tool(name="list_projects", description="List all available Weblate projects")
    def list_projects_tool() -> str:
        try:
            projects = list_projects(get_client())
        except RuntimeError as e:
            log.error("Failed to list projects: %s", e)
            raise ToolError(f"Error listing projects: {e}")
        if not projects:
            return "No projects found."
        return format_projects(projects)

    @server.tool(name="list_components", description="List components in a specific project")
    def list_components_tool(project_slug: str) -> str:
        """
        Args:
          project_slug: The slug of the project
        """
        try:
            components = list_components(get_client(), project_slug)
        except RuntimeError as e:
            log.error("Failed to list components for %s: %s", project_slug, e)
            raise ToolError(f'Error listing components for project "{project_slug}": {e}')
        if not components:
            return f'No components found in project "{project_slug}".'
        return format_components(project_slug, components)

    @server.tool(name="list_languages", description="List languages available in a specific project")
    def list_languages_tool(project_slug: str) -> str:
        """
        Args:
          project_slug: The slug of the project
        """
        try:
            languages = list_languages(get_client(), project_slug)
        except RuntimeError as e:
            log.error("Failed to list languages for %s: %s", project_slug, e)
            raise ToolError(f'Error listing languages for project "{project_slug}": {e}')
        if not languages:
            return f'No languages found in project "{project_slug}".'
        return format_languages(project_slug, languages)
