"""
Tests for serialization and deserialization of survey documents.

These tests ensure lossless JSON/YAML round-trip using the explicit
serialization functions in `surveydoc.serialization`, and that optional
keys whose absence carries meaning stay absent.
"""

from datetime import datetime, timezone

from surveydoc.examples import build_example_survey
from surveydoc.model import Condition, ElementSection, RagStatus, SurveyStatus
from surveydoc.serialization import (
    condition_from_dict,
    condition_to_dict,
    element_section_from_dict,
    element_section_to_dict,
    inspection_from_dict,
    rag_status_from_value,
    survey_from_dict,
    survey_from_json,
    survey_from_yaml,
    survey_to_dict,
    survey_to_json,
    survey_to_yaml,
)
from surveydoc.status import FormStatus, FormStatusMeta


def test_dict_round_trip():
    survey = build_example_survey()
    assert survey_from_dict(survey_to_dict(survey)) == survey


def test_json_round_trip():
    survey = build_example_survey()
    restored = survey_from_json(survey_to_json(survey))
    assert restored == survey
    assert survey_to_dict(restored) == survey_to_dict(survey)


def test_yaml_round_trip():
    survey = build_example_survey(level="2")
    restored = survey_from_yaml(survey_to_yaml(survey))
    assert restored == survey
    assert restored.level == "2"


def test_wire_keys_are_camel_case():
    d = survey_to_dict(build_example_survey())
    element = d["sections"][0]["elementSections"][0]
    assert element["isPartOfSurvey"] is True
    inspection = element["components"][0]
    assert inspection["inspectionId"] == "insp-roof-1"
    assert inspection["ragStatus"] == "Amber"


def test_absent_level2_stays_absent():
    """A legacy condition must not gain a level 2 key on the way through."""
    condition = condition_from_dict({"id": "p1", "name": "Old", "phrase": "A"})
    assert condition.phrase_level2 is None
    d = condition_to_dict(condition)
    assert "phraseLevel2" not in d
    assert "docLevel2" not in d
    assert "associatedComponentIds" not in d


def test_blank_level2_preserved():
    condition = Condition(id="p1", phrase="A", phrase_level2="")
    d = condition_to_dict(condition)
    assert d["phraseLevel2"] == ""
    assert condition_from_dict(d).phrase_level2 == ""


def test_legacy_condition_survives_survey_round_trip():
    d = survey_to_dict(build_example_survey())
    d["sections"][0]["elementSections"][0]["components"][0]["conditions"] = [
        {"id": "phrase-old", "name": "Old", "phrase": "Legacy text"},
    ]
    restored = survey_to_dict(survey_from_json(survey_to_json(survey_from_dict(d))))
    condition = restored["sections"][0]["elementSections"][0]["components"][0]["conditions"][0]
    assert "phraseLevel2" not in condition


def test_unknown_rag_status_read_as_not_inspected():
    assert rag_status_from_value("Purple") is RagStatus.NOT_INSPECTED
    assert rag_status_from_value(None) is RagStatus.NOT_INSPECTED
    assert inspection_from_dict({"id": "c", "inspectionId": "i", "ragStatus": "Green"}).rag_status is RagStatus.GREEN


def test_missing_status_defaults_to_draft():
    assert survey_from_dict({"id": "s1"}).status is SurveyStatus.DRAFT


def test_local_def_link_round_trip():
    survey = build_example_survey()
    roof = survey.sections[0].element_sections[0]
    local = [c for c in roof.components if c.local_def_id][0]
    d = survey_to_dict(survey)
    wire = [c for c in d["sections"][0]["elementSections"][0]["components"] if "localDefId" in c]
    assert wire[0]["localDefId"] == local.local_def_id
    assert "localDefId" not in d["sections"][0]["elementSections"][0]["components"][0]


def test_element_meta_round_trip():
    stamp = datetime(2024, 1, 15, tzinfo=timezone.utc)
    element = ElementSection(
        id="el1",
        meta=FormStatusMeta(status=FormStatus.COMPLETE, is_valid=True, has_data=True, last_validated=stamp),
    )
    d = element_section_to_dict(element)
    assert d["_meta"]["status"] == "complete"
    assert d["_meta"]["lastValidated"] == stamp.isoformat()
    assert element_section_from_dict(d) == element


def test_element_without_meta_has_no_meta_key():
    assert "_meta" not in element_section_to_dict(ElementSection(id="el1"))
