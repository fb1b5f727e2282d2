# weblate_server.py
from __future__ import annotations

import logging
import threading
from typing import Callable, Optional

from fastmcp import FastMCP

import changes_plugin
import debug_plugin
import projects_plugin
import statistics_plugin
import translations_plugin
from logging_middleware import RedactingLoggingMiddleware, configure_logging
from weblate_client import WeblateClient
from weblate_config import WeblateSettings, init_env, load_settings

log = logging.getLogger("weblate_mcp.server")

INSTRUCTIONS = """\
Tools for a Weblate translation server.

Projects: list_projects, list_components, list_languages.
Translations: search_string_in_project, get_translation_for_key, write_translation,
bulk_write_translations, find_translations_for_key, find_best_translation_match,
search_translations_by_key, list_translation_keys, search_translation_keys,
search_units_with_filters.
Changes: list_recent_changes, get_project_changes, get_component_changes,
get_changes_by_user, get_changes_by_action.
Statistics: get_project_statistics, get_component_statistics, get_project_dashboard,
get_translation_statistics, get_component_language_progress, get_language_statistics,
get_user_statistics.
Diagnostics: debug_configuration, test_api_connection.

Keys are Weblate unit contexts. For plural strings pass the whole text as
`value`; it is split into the target language's plural forms on write.
"""


# -----------------------------------------------------------------------------
# Server Initialization
# -----------------------------------------------------------------------------

def lazy_client(
    settings: WeblateSettings,
    client_factory: Optional[Callable[[WeblateSettings], WeblateClient]] = None,
) -> Callable[[], WeblateClient]:
    """Return a getter that builds the client on first use and reuses it after."""
    factory = client_factory or WeblateClient.from_settings
    lock = threading.Lock()
    holder: dict = {}

    def get_client() -> WeblateClient:
        with lock:
            if "client" not in holder:
                holder["client"] = factory(settings)
                log.info("Weblate client ready for %s", settings.api_url or "<unset>")
            return holder["client"]

    return get_client


def create_server(
    settings: Optional[WeblateSettings] = None,
    client_factory: Optional[Callable[[WeblateSettings], WeblateClient]] = None,
) -> FastMCP:
    settings = settings or load_settings()
    server = FastMCP(settings.server_name, instructions=INSTRUCTIONS, version=settings.server_version)
    server.add_middleware(RedactingLoggingMiddleware())

    get_client = lazy_client(settings, client_factory)
    projects_plugin.register(server, get_client)
    translations_plugin.register(server, get_client)
    changes_plugin.register(server, get_client)
    statistics_plugin.register(server, get_client)
    debug_plugin.register(server, get_client, settings)
    return server


# -----------------------------------------------------------------------------
# Entrypoint
# -----------------------------------------------------------------------------

def main() -> None:
    init_env()
    settings = load_settings()
    configure_logging(settings.log_level, settings.log_file)
    if not settings.has_credentials:
        log.warning("WEBLATE_API_URL / WEBLATE_API_TOKEN not set; tools will fail until configured")

    server = create_server(settings)
    log.info("Starting %s %s (%s)", settings.server_name, settings.server_version, settings.transport)
    if settings.transport == "http":
        server.run(transport="http", host=settings.host, port=settings.port)
    else:
        server.run()  # stdio transport


if __name__ == "__main__":
    main()
