import responses
from conftest import api, query, unit

import units


def test_as_forms():
    assert units.as_forms(None) == []
    assert units.as_forms("x") == ["x"]
    assert units.as_forms(["a", "b"]) == ["a", "b"]


def test_quote_term_escapes_quotes():
    assert units.quote_term("plain") == '"plain"'
    assert units.quote_term('say "hi"') == '"say \\"hi\\""'
    assert units.quote_term("back\\slash") == '"back\\\\slash"'


def test_unit_component_language_from_translation_url():
    assert units.unit_component_language(unit(1, "k", "s", component="ui", language="fr")) == ("ui", "fr")


def test_unit_component_language_from_web_url():
    u = {"web_url": "https://weblate.test/translate/app/mobile/cs/?checksum=ab", "language_code": "cs"}
    assert units.unit_component_language(u) == ("mobile", "cs")


def test_unit_component_language_unknown():
    assert units.unit_component_language({"language_code": "it"}) == (None, "it")


def test_search_units_uses_translation_endpoint(client, mocked_responses):
    mocked_responses.add(
        responses.GET, api("/translations/app/web/de/units/"),
        json={"count": 1, "results": [unit(1, "greeting", "Hello")]},
    )
    found = units.search_units(client, "app", "web", "de", query='context:"greeting"')
    assert [u["id"] for u in found] == [1]
    assert query(mocked_responses.calls[0]) == {"q": 'context:"greeting"'}


def test_search_units_scopes_global_query(client, mocked_responses):
    mocked_responses.add(responses.GET, api("/units/"), json={"count": 0, "results": []})
    units.search_units(client, "app", language="de", source="Save", limit=10)
    assert query(mocked_responses.calls[0]) == {"q": 'project:app language:de source:"Save"', "page_size": "10"}


def test_search_units_escapes_quoted_values(client, mocked_responses):
    mocked_responses.add(responses.GET, api("/units/"), json={"count": 0, "results": []})
    units.search_units(client, "app", source='Click "OK"')
    assert query(mocked_responses.calls[0])["q"] == 'project:app source:"Click \\"OK\\""'


def test_get_translation_by_key_prefers_exact_context(client, mocked_responses):
    mocked_responses.add(responses.GET, api("/translations/app/web/de/units/"), json={"count": 2, "results": [
        unit(1, "title.main", "Main"),
        unit(2, "title", "Title"),
    ]})
    assert units.get_translation_by_key(client, "app", "web", "de", "title")["id"] == 2


def test_get_translation_by_key_missing(client, mocked_responses):
    mocked_responses.add(responses.GET, api("/translations/app/web/de/units/"), json={"count": 0, "results": []})
    assert units.get_translation_by_key(client, "app", "web", "de", "nope") is None


def test_search_string_in_project_dedupes(client, mocked_responses):
    mocked_responses.add(responses.GET, api("/units/"), json={"count": 1, "results": [unit(5, "save", "Save", "Speichern")]})
    found = units.search_string_in_project(client, "app", "Save", "both")
    assert [u["id"] for u in found] == [5]
    queries = [query(c)["q"] for c in mocked_responses.calls]
    assert queries == ['project:app source:"Save"', 'project:app target:"Save"']


def test_find_best_match_narrows_by_context(client, mocked_responses):
    mocked_responses.add(responses.GET, api("/units/"), json={"count": 2, "results": [
        unit(1, "menu.open", "Open", note="File menu"),
        unit(2, "status.open", "Open", note="Ticket state"),
    ]})
    found = units.find_best_translation_match(client, "app", "Open", context="menu")
    assert [u["id"] for u in found] == [1]


def test_find_best_match_falls_back_to_targets(client, mocked_responses):
    mocked_responses.add(responses.GET, api("/units/"), json={"count": 0, "results": []})
    assert units.find_best_translation_match(client, "app", "Nothing") == []
    # source, then source again and target for the fallback
    assert len(mocked_responses.calls) == 3


def test_list_translation_keys_sorted_unique(client, mocked_responses):
    mocked_responses.add(responses.GET, api("/units/"), json={"count": 4, "results": [
        unit(1, "b.key", "B"), unit(2, "a.key", "A"), unit(3, "b.key", "B", language="fr"), unit(4, "", "x"),
    ]})
    assert units.list_translation_keys(client, "app") == ["a.key", "b.key"]


def test_search_translation_keys_is_case_insensitive(client, mocked_responses):
    mocked_responses.add(responses.GET, api("/units/"), json={"count": 2, "results": [
        unit(1, "Button.Save", "Save"), unit(2, "title", "T"),
    ]})
    assert units.search_translation_keys(client, "app", "button") == ["Button.Save"]


def test_search_translations_by_key_exact_quotes_pattern(client, mocked_responses):
    mocked_responses.add(responses.GET, api("/units/"), json={"count": 0, "results": []})
    units.search_translations_by_key(client, "app", "menu.file", exact_match=True)
    units.search_translations_by_key(client, "app", "menu")
    assert query(mocked_responses.calls[0])["q"] == 'project:app context:"menu.file"'
    assert query(mocked_responses.calls[1])["q"] == "project:app context:menu"


def test_search_units_with_query_clamps_limit(client, mocked_responses):
    mocked_responses.add(responses.GET, api("/translations/app/web/sk/units/"), json={"count": 0, "results": []})
    units.search_units_with_query(client, "app", "web", "sk", "state:<translated", limit=1000)
    assert query(mocked_responses.calls[0]) == {"q": "state:<translated", "page_size": str(units.MAX_FILTERED_RESULTS)}
