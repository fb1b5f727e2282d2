import pytest

from plurals import (
    PLURAL_RULES,
    get_plural_rule,
    normalize_forms,
    rule_form_count,
    segment_plural_forms,
    split_after_placeholder_words,
    split_on_placeholders,
    split_uniformly,
)


# -----------------------------------------------------------------------------
# Rule table
# -----------------------------------------------------------------------------

@pytest.mark.parametrize("code,count", [
    ("en", 2), ("de", 2), ("fr", 2), ("cs", 3), ("sk", 3), ("pl", 3),
    ("hr", 3), ("sr", 3), ("sl", 4), ("ar", 6),
])
def test_rule_form_count_known_languages(code, count):
    assert rule_form_count(code) == count


def test_rule_form_count_unknown_language_defaults_to_two():
    assert rule_form_count("xx-unknown") == 2
    assert get_plural_rule("xx-unknown") is get_plural_rule("en")


def test_rule_table_is_read_only():
    with pytest.raises(TypeError):
        PLURAL_RULES["xx"] = get_plural_rule("en")


@pytest.mark.parametrize("n,form", [(1, 0), (2, 1), (4, 1), (5, 2), (12, 2), (22, 1), (25, 2)])
def test_slavic_selector(n, form):
    assert get_plural_rule("pl").selector(n) == form


def test_french_treats_zero_as_singular():
    rule = get_plural_rule("fr")
    assert rule.selector(0) == 0
    assert rule.selector(1) == 0
    assert rule.selector(2) == 1


# -----------------------------------------------------------------------------
# Strategies
# -----------------------------------------------------------------------------

def test_split_on_placeholders_declines_single_part():
    assert split_on_placeholders("no placeholder", 2) is None
    assert split_on_placeholders("%d only", 2) is None


def test_split_on_placeholders_merges_overflow():
    assert split_on_placeholders("%d a%d b%d c", 2) == ["%d a", "%d b%d c"]


def test_split_on_placeholders_keeps_short_result():
    assert split_on_placeholders("%d a%d b", 3) == ["%d a", "%d b"]


def test_split_after_placeholder_words_exact_count():
    assert split_after_placeholder_words("%dx tail", 2) == ["%dx", " tail"]


def test_split_after_placeholder_words_declines_other_counts():
    assert split_after_placeholder_words("plain text", 2) is None
    assert split_after_placeholder_words("%dx tail", 3) is None


def test_split_uniformly_last_slice_takes_remainder():
    assert split_uniformly("abcdefg", 3) == ["ab", "cd", "efg"]


def test_normalize_pads_and_truncates():
    assert normalize_forms(["a"], 3) == ["a", "", ""]
    assert normalize_forms(["a", "b", "c"], 2) == ["a", "b"]


def test_normalize_prefers_non_blank_parts():
    assert normalize_forms(["a", " ", "b"], 2) == ["a", "b"]


def test_normalize_is_idempotent():
    once = normalize_forms(["x", "", "y", " "], 3)
    assert normalize_forms(once, 3) == once


# -----------------------------------------------------------------------------
# segment_plural_forms
# -----------------------------------------------------------------------------

@pytest.mark.parametrize("forms", [[], ["%d item"]])
def test_non_plural_units_pass_through(forms):
    assert segment_plural_forms("anything %d at all", forms, "ar") == ["anything %d at all"]


@pytest.mark.parametrize("code,forms,expected", [
    ("en", ["a", "b"], 2),
    ("pl", ["a", "b"], 3),
    ("ar", ["a", "b", "c"], 6),
    ("en", ["a", "b", "c", "d"], 4),
])
def test_output_length_matches_target(code, forms, expected):
    for value in ("", "x", "%d one%d two", "%d a%d b%d c%d d%d e%d f%d g", "%dword rest"):
        assert len(segment_plural_forms(value, forms, code)) == expected


def test_english_two_forms():
    assert segment_plural_forms("%d day%d days", ["%d day", "%d days"], "en") == ["%d day", "%d days"]


def test_overflow_collapses_into_last_form():
    out = segment_plural_forms("%d a%d b%d c", ["%d x", "%d y"], "en")
    assert out == ["%d a", "%d b%d c"]


def test_uniform_split_without_placeholders():
    value = "abcdefghijklmnop"
    out = segment_plural_forms(value, ["one", "two", "three"], "ar")
    assert len(out) == 6
    assert "".join(out) == value


def test_secondary_split_on_attached_word():
    assert segment_plural_forms("%dx tail", ["a", "b"], "en") == ["%dx", " tail"]


def test_polish_three_forms():
    out = segment_plural_forms("%d przedmiot%d przedmioty%d przedmiotów", ["%d item", "%d items"], "pl")
    assert out == ["%d przedmiot", "%d przedmioty", "%d przedmiotów"]


def test_missing_forms_are_padded():
    assert segment_plural_forms("%d a%d b", ["x", "y"], "pl") == ["%d a", "%d b", ""]


def test_empty_value_never_raises():
    assert segment_plural_forms("", ["x", "y"], "sl") == ["", "", "", ""]


# -----------------------------------------------------------------------------
# Prefixes, spaced words and merge/blank precedence
# -----------------------------------------------------------------------------

def test_prefix_stays_with_first_form():
    out = segment_plural_forms("Showing %d item%d items", ["Showing %d item", "Showing %d items"], "en")
    assert out == ["Showing %d item", "%d items"]


def test_split_on_placeholders_keeps_prefix():
    assert split_on_placeholders("Total: %d a%d b", 2) == ["Total: %d a", "%d b"]
    assert split_on_placeholders("Total: %d", 2) is None


def test_single_prefixed_placeholder_falls_back_to_uniform():
    out = segment_plural_forms("Total: %d", ["Total: %d", "Totals: %d"], "en")
    assert out == ["Tota", "l: %d"]
    assert out[0] != "Total: "


def test_secondary_split_after_spaced_word():
    assert split_after_placeholder_words("%d days left", 2) == ["%d days", " left"]
    assert segment_plural_forms("%d days left", ["%d day", "%d days"], "en") == ["%d days", " left"]


def test_prefixed_under_segmentation_is_padded():
    out = segment_plural_forms("Showing %d item%d items", ["%d item", "%d items"], "pl")
    assert out == ["Showing %d item", "%d items", ""]


def test_merge_keeps_whitespace_only_placeholder_parts():
    # every primary part carries its %d, so nothing is blank after the merge
    out = segment_plural_forms("%d a%d  %d b%d c", ["x", "y"], "pl")
    assert out == ["%d a", "%d  ", "%d b%d c"]


def test_blank_uniform_slices_keep_their_slots():
    # too few non-blank slices to fill every form: nothing is dropped
    assert segment_plural_forms("ab    cd", ["x", "y"], "sl") == ["ab", "  ", "  ", "cd"]
