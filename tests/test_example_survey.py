"""
Test the example survey used by the demo.

Validates that the example builder creates the expected sections,
inspections and local definitions.
"""

from surveydoc.examples import CHIMNEY, EXTERNAL, ROOF, build_example_survey
from surveydoc.identifiers import IdKind, id_kind
from surveydoc.tree import get_all_survey_images, get_element_components, get_element_section


def test_example_survey_structure():
    survey = build_example_survey()

    assert survey.level == "3"
    assert [s.id for s in survey.sections] == [EXTERNAL]

    roof = get_element_section(survey, EXTERNAL, ROOF)
    assert roof.is_part_of_survey
    assert roof.description

    components = get_element_components(survey, EXTERNAL, ROOF)
    assert len(components) == 2

    catalog, local = components
    assert catalog.inspection_id == "insp-roof-1"
    assert id_kind(catalog.id) is IdKind.CATALOG
    assert catalog.costings[0].cost == 450

    assert id_kind(local.id) is IdKind.LOCAL_INSTANCE
    assert local.name == "Lead flashing"
    assert len(roof.local_component_defs) == 1
    assert local.local_def_id == roof.local_component_defs[0].id

    # Check chimney is kept but excluded
    chimney = get_element_section(survey, EXTERNAL, CHIMNEY)
    assert chimney.is_part_of_survey is False
    assert len(chimney.components) == 1


def test_example_survey_level():
    assert build_example_survey(level="2").level == "2"


def test_example_survey_images():
    paths = [img.path for img in get_all_survey_images(build_example_survey())]
    assert paths[0] == "report/cover.jpg"
    assert "roof/overview.jpg" in paths
    assert "roof/slates.jpg" in paths
    assert len(paths) == len(set(paths))
