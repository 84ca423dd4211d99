"""
Tests for level 2 / level 3 text selection.

Level 2 text is authored independently. An authored blank stays blank;
only records written before level 2 existed fall back to level 3 text.
"""

import pytest

from surveydoc.config import get_settings
from surveydoc.model import Condition, Costing, Inspection
from surveydoc.levels import (
    InvalidLevelError,
    SurveyLevel,
    conditions_missing_level2,
    costings_enabled,
    is_missing_level2_content,
    parse_level,
    resolve_display_doc,
    resolve_display_text,
    visible_costings,
)


@pytest.fixture
def fresh_settings(monkeypatch):
    """Settings re-read from the environment for one test."""
    get_settings.cache_clear()
    yield monkeypatch
    get_settings.cache_clear()


class TestParseLevel:

    @pytest.mark.parametrize("raw,expected", [
        ("2", SurveyLevel.LEVEL_2),
        ("3", SurveyLevel.LEVEL_3),
        (" 3 ", SurveyLevel.LEVEL_3),
        (SurveyLevel.LEVEL_2, SurveyLevel.LEVEL_2),
    ])
    def test_valid(self, raw, expected):
        assert parse_level(raw) is expected

    @pytest.mark.parametrize("raw", ["1", "4", "", None, 2, "level 2"])
    def test_invalid(self, raw):
        with pytest.raises(InvalidLevelError):
            parse_level(raw)

    def test_invalid_level_is_value_error(self):
        with pytest.raises(ValueError):
            resolve_display_text(Condition(id="p1", phrase="A"), "1")


class TestResolveDisplayText:
    """Which phrase variant is shown."""

    def test_level3_uses_phrase(self):
        condition = Condition(id="p1", phrase="A", phrase_level2="B")
        assert resolve_display_text(condition, "3") == "A"

    def test_level2_uses_level2_text(self):
        condition = Condition(id="p1", phrase="A", phrase_level2="B")
        assert resolve_display_text(condition, "2") == "B"

    def test_authored_blank_stays_blank(self):
        """Level 2 never borrows level 3 text when level 2 was left blank."""
        condition = Condition(id="p1", phrase="A", phrase_level2="")
        assert resolve_display_text(condition, "2") == ""

    def test_legacy_record_falls_back(self):
        condition = Condition(id="p1", phrase="A")
        assert resolve_display_text(condition, "2", legacy_fallback=True) == "A"

    def test_legacy_fallback_can_be_disabled(self):
        condition = Condition(id="p1", phrase="A")
        assert resolve_display_text(condition, "2", legacy_fallback=False) == ""

    def test_mapping_form(self):
        assert resolve_display_text({"phrase": "A", "phraseLevel2": ""}, "2") == ""
        assert resolve_display_text({"phrase": "A", "phraseLevel2": "B"}, "2") == "B"
        assert resolve_display_text({"phrase": "A"}, "2", legacy_fallback=True) == "A"
        assert resolve_display_text({"phraseLevel2": "B"}, "3") == ""

    def test_accepts_survey_level(self):
        condition = Condition(id="p1", phrase="A", phrase_level2="B")
        assert resolve_display_text(condition, SurveyLevel.LEVEL_2) == "B"

    def test_fallback_setting_from_environment(self, fresh_settings):
        fresh_settings.setenv("SURVEYDOC_LEVEL2_LEGACY_FALLBACK", "false")
        assert resolve_display_text(Condition(id="p1", phrase="A"), "2") == ""

    def test_fallback_enabled_by_default(self, fresh_settings):
        fresh_settings.delenv("SURVEYDOC_LEVEL2_LEGACY_FALLBACK", raising=False)
        assert resolve_display_text(Condition(id="p1", phrase="A"), "2") == "A"

    def test_explicit_argument_beats_setting(self, fresh_settings):
        """An explicit choice makes the result independent of process settings."""
        fresh_settings.setenv("SURVEYDOC_LEVEL2_LEGACY_FALLBACK", "false")
        condition = Condition(id="p1", phrase="A")
        assert resolve_display_text(condition, "2", legacy_fallback=True) == "A"
        assert resolve_display_doc(Condition(id="p1", doc={"a": 1}), "2", legacy_fallback=True) == {"a": 1}


class TestResolveDisplayDoc:

    def test_doc_variants(self):
        level3 = {"type": "doc", "content": ["A"]}
        level2 = {"type": "doc", "content": ["B"]}
        condition = Condition(id="p1", doc=level3, doc_level2=level2)
        assert resolve_display_doc(condition, "3") == level3
        assert resolve_display_doc(condition, "2") == level2

    def test_legacy_doc(self):
        level3 = {"type": "doc"}
        condition = Condition(id="p1", doc=level3)
        assert resolve_display_doc(condition, "2", legacy_fallback=True) == level3
        assert resolve_display_doc(condition, "2", legacy_fallback=False) is None

    def test_mapping_form(self):
        assert resolve_display_doc({"doc": {"a": 1}, "docLevel2": {"b": 2}}, "2") == {"b": 2}


class TestCostings:
    """Costings are level 3 content only."""

    def test_enabled_only_at_level3(self):
        assert costings_enabled("3")
        assert not costings_enabled("2")

    def test_visible_costings(self):
        inspection = Inspection(id="c1", inspection_id="i1", costings=[Costing(cost=450, description="Refix")])
        assert visible_costings(inspection, "2") == []
        assert visible_costings(inspection, "3") == [Costing(cost=450, description="Refix")]

    def test_data_kept_at_level2(self):
        """Suppression is display-only; the stored costings are untouched."""
        inspection = Inspection(id="c1", inspection_id="i1", costings=[Costing(cost=1)])
        visible_costings(inspection, "2")
        assert len(inspection.costings) == 1


class TestMissingLevel2:

    def test_missing_checks(self):
        assert is_missing_level2_content(Condition(id="p1", phrase="A"))
        assert is_missing_level2_content(Condition(id="p1", phrase="A", phrase_level2=""))
        assert is_missing_level2_content(Condition(id="p1", phrase="A", phrase_level2="   "))
        assert not is_missing_level2_content(Condition(id="p1", phrase="A", phrase_level2="B"))
        assert is_missing_level2_content({"phrase": "A"})

    def test_conditions_missing_level2(self):
        inspection = Inspection(id="c1", inspection_id="i1", conditions=[
            Condition(id="p1", phrase="A", phrase_level2="B"),
            Condition(id="p2", phrase="C", phrase_level2=""),
            Condition(id="p3", phrase="D"),
        ])
        assert [c.id for c in conditions_missing_level2(inspection)] == ["p2", "p3"]
