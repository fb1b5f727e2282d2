# plurals.py
from __future__ import annotations

import re
from dataclasses import dataclass
from types import MappingProxyType
from typing import Callable, List, Mapping, Optional, Sequence

# -----------------------------------------------------------------------------
# Plural rules
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class PluralRule:
    form_count: int
    selector: Callable[[int], int]  # n -> form index; not evaluated when segmenting
    formula: str


def _slavic(n: int) -> int:
    if n == 1:
        return 0
    if 2 <= n % 10 <= 4 and not 12 <= n % 100 <= 14:
        return 1
    return 2


def _slovenian(n: int) -> int:
    if n % 100 == 1:
        return 0
    if n % 100 == 2:
        return 1
    if n % 100 in (3, 4):
        return 2
    return 3


def _arabic(n: int) -> int:
    if n == 0:
        return 0
    if n == 1:
        return 1
    if n == 2:
        return 2
    if 3 <= n % 100 <= 10:
        return 3
    if 11 <= n % 100 <= 99:
        return 4
    return 5


_NOT_ONE = PluralRule(2, lambda n: 0 if n == 1 else 1, "n != 1")
_GREATER_ONE = PluralRule(2, lambda n: 1 if n > 1 else 0, "n > 1")
_SLAVIC = PluralRule(3, _slavic, "one / few / many")
_SLOVENIAN = PluralRule(4, _slovenian, "n%100==1 / n%100==2 / n%100==3,4 / other")
_ARABIC = PluralRule(6, _arabic, "zero / one / two / few / many / other")

DEFAULT_RULE = _NOT_ONE

PLURAL_RULES: Mapping[str, PluralRule] = MappingProxyType({
    "en": _NOT_ONE,
    "de": _NOT_ONE,
    "es": _NOT_ONE,
    "it": _NOT_ONE,
    "pt": _NOT_ONE,
    "nl": _NOT_ONE,
    "da": _NOT_ONE,
    "sv": _NOT_ONE,
    "no": _NOT_ONE,
    "fr": _GREATER_ONE,
    "cs": _SLAVIC,
    "sk": _SLAVIC,
    "pl": _SLAVIC,
    "hr": _SLAVIC,
    "sr": _SLAVIC,
    "sl": _SLOVENIAN,
    "ar": _ARABIC,
})


def get_plural_rule(language_code: str) -> PluralRule:
    return PLURAL_RULES.get(language_code, DEFAULT_RULE)


def rule_form_count(language_code: str) -> int:
    """Number of plural forms for a language code (2 when unknown)."""
    return get_plural_rule(language_code).form_count


# -----------------------------------------------------------------------------
# Segmentation
# -----------------------------------------------------------------------------

PLACEHOLDER = "%d"

# %d followed by one word (optionally after spaces): a run of characters that
# are neither space nor the start of another placeholder
_PLACEHOLDER_WORD = re.compile(r"%d\s*(?:(?!%d)\S)+")

Strategy = Callable[[str, int], Optional[List[str]]]


def split_on_placeholders(value: str, target: int) -> Optional[List[str]]:
    """Split before every %d but the first; merge overflow into the last part.

    Text ahead of the first %d stays in the first part. Declines (returns
    None) when fewer than two parts come out.
    """
    starts = [m.start() for m in re.finditer(re.escape(PLACEHOLDER), value)]
    bounds = [0] + starts[1:] + [len(value)]
    parts = [value[a:b] for a, b in zip(bounds, bounds[1:])]
    if parts and not parts[0]:
        parts = parts[1:]
    if len(parts) <= 1:
        return None
    if len(parts) > target:
        return parts[: target - 1] + ["".join(parts[target - 1:])]
    return parts


def split_after_placeholder_words(value: str, target: int) -> Optional[List[str]]:
    """Cut right after each `%d word` token; accepted only on an exact count."""
    cuts = [m.end() for m in _PLACEHOLDER_WORD.finditer(value) if m.end() < len(value)]
    parts = []
    start = 0
    for end in cuts:
        parts.append(value[start:end])
        start = end
    parts.append(value[start:])
    parts = [p for p in parts if p]
    if len(parts) != target:
        return None
    return parts


def split_uniformly(value: str, target: int) -> List[str]:
    size = len(value) // target
    parts = [value[i * size:(i + 1) * size] for i in range(target - 1)]
    parts.append(value[(target - 1) * size:])
    return parts


SEGMENTATION_STRATEGIES: Sequence[Strategy] = (
    split_on_placeholders,
    split_after_placeholder_words,
    split_uniformly,
)


def normalize_forms(parts: Sequence[str], target: int) -> List[str]:
    """Force `parts` to exactly `target` entries.

    Blank parts are dropped when enough non-blank ones remain to fill every
    slot; otherwise the list is truncated and padded with "".
    """
    non_blank = [p for p in parts if p.strip()]
    if len(non_blank) >= target:
        return non_blank[:target]
    out = list(parts[:target])
    out.extend([""] * (target - len(out)))
    return out


def target_form_count(source_forms: Sequence[str], language_code: str) -> int:
    return max(rule_form_count(language_code), len(source_forms))


def segment_plural_forms(value: str, source_forms: Sequence[str], language_code: str) -> List[str]:
    """
    Rebuild the per-form target list from a flattened translation.

    Units with fewer than two source forms are not plural and get [value]
    back untouched. Otherwise the result always holds exactly
    max(rule_form_count(language_code), len(source_forms)) strings; this
    function never raises.
    """
    if len(source_forms) <= 1:
        return [value]

    target = target_form_count(source_forms, language_code)
    for strategy in SEGMENTATION_STRATEGIES:
        parts = strategy(value, target)
        if parts is not None:
            break
    # the last strategy never declines, so parts is always set here
    return normalize_forms(parts, target)
