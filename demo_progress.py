"""
Demo: Build the example survey, print its progress and level 2 text, and
export it to YAML.
"""

import logging

from surveydoc.examples import EXAMPLE_CATALOG_COMPONENTS, EXAMPLE_CATALOG_PHRASES, EXTERNAL, ROOF, build_example_survey
from surveydoc.levels import resolve_display_text, visible_costings
from surveydoc.logging_config import setup_logging
from surveydoc.progress import survey_progress
from surveydoc.resolver import build_component_options, build_condition_options
from surveydoc.serialization import survey_to_yaml
from surveydoc.tree import get_element_components, get_element_section

logger = logging.getLogger("surveydoc.demo")


def print_progress(progress):
    """Pretty-print a SurveyProgress."""
    print()
    print("=" * 70)
    print("SURVEY PROGRESS")
    print("=" * 70)
    print()

    for title, result in progress.sections.items():
        print(f"  {title:<22} {result.status.value}")
        for error in result.errors:
            print(f"      - {error}")
    print()
    print(f"  Completed:             {progress.completed_sections}/{progress.total_sections}")
    print(f"  Progress:              {progress.progress_percent}%")
    print(f"  Sections with errors:  {progress.error_sections}")
    print()


def print_roof(survey, level):
    print(f"ROOF AT LEVEL {level}")
    for inspection in get_element_components(survey, EXTERNAL, ROOF):
        print(f"  {inspection.display_name} [{inspection.rag_status.value}]")
        for condition in inspection.conditions:
            print(f"      {condition.name}: {resolve_display_text(condition, level)!r}")
        for costing in visible_costings(inspection, level):
            print(f"      £{costing.cost} {costing.description}")
    print()


def print_options(survey):
    element = get_element_section(survey, EXTERNAL, ROOF)
    print("ROOF COMPONENT OPTIONS")
    for option in build_component_options(EXAMPLE_CATALOG_COMPONENTS, ROOF, element_section=element):
        print(f"  [{option.source.value}] {option.label}")
    print()
    print("CONDITION OPTIONS FOR SLATE")
    for option in build_condition_options(EXAMPLE_CATALOG_PHRASES, element_section=element, component_id="comp-slate"):
        print(f"  [{option.source.value}] {option.label}")
    print()


if __name__ == "__main__":
    setup_logging()

    survey = build_example_survey(level="3")
    print_progress(survey_progress(survey))
    print_options(survey)
    print_roof(survey, "3")
    print_roof(survey, "2")

    with open("example_survey_output.yaml", "w") as f:
        f.write(survey_to_yaml(survey))
    logger.info("Survey exported to example_survey_output.yaml")
