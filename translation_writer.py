# translation_writer.py
from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

from plurals import segment_plural_forms
from units import Unit, as_forms, quote_term, search_units, unit_component_language
from weblate_client import WeblateClient, WeblateError

log = logging.getLogger("weblate_mcp.writer")

# Weblate unit state codes
STATE_EMPTY = 0
STATE_NEEDS_EDITING = 10
STATE_TRANSLATED = 20
STATE_APPROVED = 30
STATE_READONLY = 100

BULK_BATCH_SIZE = 5


@dataclass
class TranslationItem:
    key: str
    value: str
    component: Optional[str] = None


@dataclass
class BulkWriteResult:
    succeeded: List[str] = field(default_factory=list)
    failed: List[Tuple[str, str]] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.succeeded) + len(self.failed)


def find_unit_for_write(
    client: WeblateClient, project: str, component: Optional[str], language: str, key: str
) -> Unit:
    units = search_units(client, project, component, language, query=f"context:{quote_term(key)}")
    if not units:
        raise WeblateError(f'Translation not found for key "{key}" in project {project}')

    candidates = [u for u in units if u.get("language_code", language) == language]
    if not candidates:
        raise WeblateError(f'Translation not found for key "{key}" in language {language} in project {project}')

    if component:
        # units whose URL does not reveal a component are given the benefit of the doubt
        candidates = [u for u in candidates if unit_component_language(u)[0] in (component, None)]
        if not candidates:
            raise WeblateError(f'Translation not found for key "{key}" in component {component} of project {project}')

    exact = [u for u in candidates if u.get("context") == key]
    return (exact or candidates)[0]


def write_translation(
    client: WeblateClient,
    project: str,
    component: Optional[str],
    language: str,
    key: str,
    value: str,
    mark_as_approved: bool = False,
) -> Unit:
    """
    Store `value` as the translation of `key` in `language`.

    Plural units get `value` split into one string per plural form of the
    target language before the PATCH.
    """
    unit = find_unit_for_write(client, project, component, language, key)
    target = segment_plural_forms(value, as_forms(unit.get("source")), language)
    state = STATE_APPROVED if mark_as_approved else STATE_TRANSLATED

    log.info("Writing unit %s (%s/%s) with %d form(s), state=%d", unit.get("id"), key, language, len(target), state)
    updated = client.patch(f"/units/{unit['id']}/", {"target": target, "state": state})
    if not updated:
        return {**unit, "target": target, "state": state}
    return updated


def bulk_write_translations(
    client: WeblateClient,
    project: str,
    language: str,
    items: Sequence[TranslationItem],
    mark_as_approved: bool = False,
    batch_size: int = BULK_BATCH_SIZE,
) -> BulkWriteResult:
    """Write many translations, `batch_size` at a time.

    Each batch finishes completely before the next starts. A failing item is
    recorded and does not stop the others.
    """
    result = BulkWriteResult()
    batch_size = max(1, batch_size)
    with ThreadPoolExecutor(max_workers=batch_size) as pool:
        for start in range(0, len(items), batch_size):
            batch = items[start:start + batch_size]
            futures = [
                (item, pool.submit(
                    write_translation, client, project, item.component, language,
                    item.key, item.value, mark_as_approved,
                ))
                for item in batch
            ]
            for item, future in futures:
                try:
                    future.result()
                except Exception as e:
                    log.warning("Bulk write failed for key %s: %s", item.key, e)
                    result.failed.append((item.key, str(e)))
                else:
                    result.succeeded.append(item.key)
    log.info("Bulk write to %s/%s: %d ok, %d failed", project, language, len(result.succeeded), len(result.failed))
    return result
