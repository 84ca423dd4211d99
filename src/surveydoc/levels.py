"""
Level Text Resolver: which text variant of a condition to show.

Each condition carries two independently authored variants:

    level 3:  phrase / doc                (always expected)
    level 2:  phraseLevel2 / docLevel2    (may be blank on purpose)

Level 2 never borrows from level 3, with one exception: records written
before level 2 authoring existed have no level 2 key at all, and those
show their level 3 content. A level 2 value of "" is an authored blank
and is shown as "".

Callers that need a result depending only on their arguments pass
`legacy_fallback` explicitly. Left as None, it comes from the
SURVEYDOC_LEVEL2_LEGACY_FALLBACK setting, which is an application-level
override read once per process (environment or .env).

Costings are level 3 content only.
"""

from enum import Enum
from typing import Any, List, Mapping, Optional, Union

from surveydoc.config import get_settings
from surveydoc.model import Condition, Costing, Inspection


class InvalidLevelError(ValueError):
    """Raised when a level outside {"2", "3"} is requested."""
    pass


class SurveyLevel(Enum):
    LEVEL_2 = "2"
    LEVEL_3 = "3"


ConditionLike = Union[Condition, Mapping[str, Any]]


def parse_level(level: Union[SurveyLevel, str]) -> SurveyLevel:
    """
    Raises:
        InvalidLevelError: for anything but "2", "3" or a SurveyLevel
    """
    if isinstance(level, SurveyLevel):
        return level
    if isinstance(level, str):
        try:
            return SurveyLevel(level.strip())
        except ValueError:
            pass
    raise InvalidLevelError(f"Invalid survey level: {level!r} (expected '2' or '3')")


def _variants(condition: ConditionLike, level3_attr: str, level2_attr: str, level3_key: str, level2_key: str):
    """Return (level3 value, level2 value, level2 present)."""
    if isinstance(condition, Mapping):
        level2 = condition.get(level2_key)
        return condition.get(level3_key), level2, level2 is not None
    level2 = getattr(condition, level2_attr)
    return getattr(condition, level3_attr), level2, level2 is not None


def _use_fallback(legacy_fallback: Optional[bool]) -> bool:
    if legacy_fallback is None:
        return get_settings().level2_legacy_fallback
    return legacy_fallback


def resolve_display_text(
    condition: ConditionLike,
    level: Union[SurveyLevel, str],
    legacy_fallback: Optional[bool] = None,
) -> str:
    """
    Text to show for `condition` at `level`.

    Args:
        condition: Condition or wire-shape mapping
        level: "2" or "3"
        legacy_fallback: show level 3 text for records with no level 2
            key; None defers to the application setting
    """
    parsed = parse_level(level)
    phrase, phrase_level2, present = _variants(condition, "phrase", "phrase_level2", "phrase", "phraseLevel2")
    if parsed is SurveyLevel.LEVEL_3:
        return phrase or ""
    if present:
        return phrase_level2
    return (phrase or "") if _use_fallback(legacy_fallback) else ""


def resolve_display_doc(
    condition: ConditionLike,
    level: Union[SurveyLevel, str],
    legacy_fallback: Optional[bool] = None,
) -> Optional[Mapping[str, Any]]:
    """Same selection rule as resolve_display_text, over structured content."""
    parsed = parse_level(level)
    doc, doc_level2, present = _variants(condition, "doc", "doc_level2", "doc", "docLevel2")
    if parsed is SurveyLevel.LEVEL_3:
        return doc
    if present:
        return doc_level2
    return doc if _use_fallback(legacy_fallback) else None


def costings_enabled(level: Union[SurveyLevel, str]) -> bool:
    return parse_level(level) is SurveyLevel.LEVEL_3


def visible_costings(inspection: Inspection, level: Union[SurveyLevel, str]) -> List[Costing]:
    """Costings to display or accept for entry. Empty at level 2."""
    if not costings_enabled(level):
        return []
    return list(inspection.costings)


def is_missing_level2_content(condition: ConditionLike) -> bool:
    """True when the level 2 text is blank or was never written."""
    _, phrase_level2, present = _variants(condition, "phrase", "phrase_level2", "phrase", "phraseLevel2")
    return not present or not phrase_level2.strip()


def conditions_missing_level2(inspection: Inspection) -> List[Condition]:
    return [c for c in inspection.conditions if is_missing_level2_content(c)]
