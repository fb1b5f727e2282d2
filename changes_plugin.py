# changes_plugin.py
from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional

from fastmcp import FastMCP
from fastmcp.exceptions import ToolError

from weblate_client import Page, WeblateClient

log = logging.getLogger("weblate_mcp.changes")

MAX_SCOPED_CHANGES = 20

ACTIONS: Dict[int, str] = {
    0: "Resource updated",
    1: "Translation completed",
    2: "Translation changed",
    3: "Comment added",
    4: "Suggestion added",
    5: "Translation added",
    6: "Automatically translated",
    7: "Suggestion accepted",
    8: "Translation reverted",
    9: "Translation uploaded",
    13: "Source string added",
    14: "Component locked",
    15: "Component unlocked",
    17: "Changes committed",
    18: "Changes pushed",
    19: "Repository reset",
    20: "Repository merged",
    21: "Repository rebased",
    22: "Repository merge failed",
    23: "Repository rebase failed",
    24: "Parsing failed",
    25: "Translation removed",
    26: "Suggestion removed",
    27: "Translation replaced",
    28: "Repository push failed",
    29: "Suggestion removed during clean-up",
    30: "Source string changed",
    31: "String added",
    32: "Bulk status changed",
    33: "Visibility changed",
    34: "User added",
    35: "User removed",
    36: "Translation approved",
    37: "Marked for edit",
    38: "Component removed",
    39: "Project removed",
    41: "Project renamed",
    42: "Component renamed",
    43: "Moved component",
    45: "Contributor joined",
    46: "Announcement posted",
    47: "Alert triggered",
    48: "Language added",
    49: "Language requested",
    50: "Project created",
    51: "Component created",
    52: "User invited",
}


def action_description(action: Optional[int]) -> str:
    code = action or 0
    return ACTIONS.get(code, f"Unknown action ({code})")


# -----------------------------------------------------------------------------
# API calls
# -----------------------------------------------------------------------------

def list_recent_changes(
    client: WeblateClient,
    limit: int = 50,
    user: Optional[str] = None,
    timestamp_after: Optional[str] = None,
    timestamp_before: Optional[str] = None,
) -> Page:
    params: Dict[str, Any] = {"page_size": limit}
    if user:
        params["user"] = user
    if timestamp_after:
        params["timestamp_after"] = timestamp_after
    if timestamp_before:
        params["timestamp_before"] = timestamp_before
    return client.get_page("/changes/", params=params)


def get_project_changes(client: WeblateClient, project: str) -> Page:
    return client.get_page(f"/projects/{project}/changes/")


def get_component_changes(client: WeblateClient, project: str, component: str) -> Page:
    return client.get_page(f"/components/{project}/{component}/changes/")


def get_changes_by_action(client: WeblateClient, action_codes: List[int], limit: int = 50) -> Page:
    # requests encodes a list as repeated ?action=1&action=2
    return client.get_page("/changes/", params={"page_size": limit, "action": list(action_codes)})


def get_changes_by_user(client: WeblateClient, user: str, limit: int = 50) -> Page:
    return list_recent_changes(client, limit=limit, user=user)


# -----------------------------------------------------------------------------
# Formatting
# -----------------------------------------------------------------------------

def format_timestamp(value: Optional[str]) -> str:
    if not value:
        return "Unknown"
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return value
    return parsed.strftime("%Y-%m-%d %H:%M:%S %Z").strip()


def format_change(change: Dict[str, Any]) -> str:
    return (
        f"**{action_description(change.get('action'))}**\n"
        f"**User:** {change.get('user') or 'Unknown user'}\n"
        f"**Time:** {format_timestamp(change.get('timestamp'))}\n"
        f"**Target:** {change.get('target') or 'N/A'}"
    )


def format_changes(changes: List[Dict[str, Any]]) -> str:
    return "\n\n---\n\n".join(format_change(c) for c in changes)


# -----------------------------------------------------------------------------
# Tools
# -----------------------------------------------------------------------------

def register(server: FastMCP, get_client: Callable[[], WeblateClient]) -> None:
    """Attach change-history tools to the given server."""

    @server.tool(name="list_recent_changes", description="List recent changes across all projects in Weblate")
    def list_recent_changes_tool(
        limit: int = 20,
        user: Optional[str] = None,
        timestamp_after: Optional[str] = None,
        timestamp_before: Optional[str] = None,
    ) -> str:
        """
        Args:
          limit: Number of changes to return (default 20)
          user: Filter by specific user
          timestamp_after: Show changes after this timestamp (ISO format)
          timestamp_before: Show changes before this timestamp (ISO format)
        """
        try:
            page = list_recent_changes(get_client(), limit, user, timestamp_after, timestamp_before)
        except RuntimeError as e:
            log.error("Failed to list recent changes: %s", e)
            raise ToolError(f"Error listing recent changes: {e}")
        if not page.results:
            return "No recent changes found."
        shown = page.results[:limit]
        return f"Found {page.count} recent changes (showing {len(shown)}):\n\n{format_changes(shown)}"

    @server.tool(name="get_project_changes", description="Get recent changes for a specific project")
    def get_project_changes_tool(project_slug: str) -> str:
        try:
            page = get_project_changes(get_client(), project_slug)
        except RuntimeError as e:
            log.error("Failed to get changes for project %s: %s", project_slug, e)
            raise ToolError(f'Error getting changes for project "{project_slug}": {e}')
        if not page.results:
            return f'No changes found for project "{project_slug}".'
        return (
            f'Recent changes in project "{project_slug}" ({page.count} total):\n\n'
            + format_changes(page.results[:MAX_SCOPED_CHANGES])
        )

    @server.tool(name="get_component_changes", description="Get recent changes for a specific component")
    def get_component_changes_tool(project_slug: str, component_slug: str) -> str:
        try:
            page = get_component_changes(get_client(), project_slug, component_slug)
        except RuntimeError as e:
            log.error("Failed to get changes for %s/%s: %s", project_slug, component_slug, e)
            raise ToolError(f'Error getting changes for component "{component_slug}": {e}')
        if not page.results:
            return f'No changes found for component "{component_slug}" in project "{project_slug}".'
        return (
            f'Recent changes in component "{component_slug}" ({page.count} total):\n\n'
            + format_changes(page.results[:MAX_SCOPED_CHANGES])
        )

    @server.tool(name="get_changes_by_user", description="Get recent changes by a specific user")
    def get_changes_by_user_tool(user: str, limit: int = 20) -> str:
        try:
            page = get_changes_by_user(get_client(), user, limit)
        except RuntimeError as e:
            log.error("Failed to get changes by user %s: %s", user, e)
            raise ToolError(f'Error getting changes by user "{user}": {e}')
        if not page.results:
            return f'No changes found for user "{user}".'
        return f'Recent changes by user "{user}" ({page.count} total):\n\n' + format_changes(page.results[:limit])

    @server.tool(
        name="get_changes_by_action",
        description="Get recent changes of the given Weblate action codes (e.g. 2 = translation changed)",
    )
    def get_changes_by_action_tool(action_codes: List[int], limit: int = 20) -> str:
        try:
            page = get_changes_by_action(get_client(), action_codes, limit)
        except RuntimeError as e:
            log.error("Failed to get changes by action %s: %s", action_codes, e)
            raise ToolError(f"Error getting changes by action: {e}")
        if not page.results:
            return "No changes found for the given actions."
        names = ", ".join(action_description(a) for a in action_codes)
        return f"Recent changes for {names} ({page.count} total):\n\n" + format_changes(page.results[:limit])
