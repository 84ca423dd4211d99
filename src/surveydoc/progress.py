"""
Progress Aggregator: whole-survey progress from per-section statuses.

The survey overview shows four top-level sections. Each gets one status
from the status engine; this module combines them.

    Report Details        compute_status(ReportDetailsSchema, ...)
    Property Description  compute_status(PropertyDescriptionSchema, ...)
    Property Condition    derived from the element sections (see below)
    Checklist             compute_status(ChecklistSchema, ...)

The total is always the number of declared sections, however many the
surveyor has touched.

IMPORTANT: This module only reads the survey. It never modifies it.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Sequence, Union

from surveydoc.model import ElementSection, Survey
from surveydoc.schemas import ChecklistSchema, ElementSectionSchema, PropertyDescriptionSchema, ReportDetailsSchema
from surveydoc.tree import element_form_data
from surveydoc.status import META_KEY, FormStatus, StatusResult, compute_status

logger = logging.getLogger(__name__)

REPORT_DETAILS = "Report Details"
PROPERTY_DESCRIPTION = "Property Description"
PROPERTY_CONDITION = "Property Condition"
CHECKLIST = "Checklist"

FORM_SECTION_TITLES = (REPORT_DETAILS, PROPERTY_DESCRIPTION, PROPERTY_CONDITION, CHECKLIST)

StatusLike = Union[StatusResult, FormStatus, str]


@dataclass
class ElementCompleteness:
    """What has been recorded against one element."""
    has_description: bool = False
    has_images: bool = False
    image_count: int = 0
    has_components: bool = False
    component_count: int = 0


@dataclass
class SurveyProgress:
    completed_sections: int = 0
    total_sections: int = len(FORM_SECTION_TITLES)
    progress_percent: int = 0
    error_sections: int = 0

    # Per-section detail, keyed by title, when built from a survey
    sections: Dict[str, StatusResult] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "completedSections": self.completed_sections,
            "totalSections": self.total_sections,
            "progressPercent": self.progress_percent,
            "errorSections": self.error_sections,
        }


def element_completeness(element: ElementSection) -> ElementCompleteness:
    """Archived images do not count."""
    active_images = [img for img in element.images if not img.is_archived]
    return ElementCompleteness(
        has_description=bool(element.description.strip()),
        has_images=bool(active_images),
        image_count=len(active_images),
        has_components=bool(element.components),
        component_count=len(element.components),
    )


def _element_form_data(element: ElementSection) -> Dict[str, Any]:
    data = element_form_data(element)
    if element.meta is not None:
        data[META_KEY] = element.meta
    return data


def element_status(element: ElementSection) -> StatusResult:
    """Status of one element form; a cached element meta wins."""
    return compute_status(ElementSectionSchema, _element_form_data(element))


def property_condition_status(survey: Survey) -> StatusResult:
    """
    Complete only when there is at least one element in the survey and
    every element in the survey is Complete and has at least one
    inspection. Excluded elements are ignored.
    """
    active = [element for _, element in survey.iter_element_sections() if element.is_part_of_survey]

    errors: List[str] = []
    all_complete = bool(active)
    any_data = False
    for element in active:
        label = element.name or element.id
        status = element_status(element)
        any_data = any_data or status.has_data or bool(element.components)
        if status.status is not FormStatus.COMPLETE:
            all_complete = False
            errors.extend(f"{label}: {err}" for err in status.errors)
        if not element.components:
            all_complete = False
            errors.append(f"{label}: No components inspected")

    if all_complete:
        return StatusResult(status=FormStatus.COMPLETE, has_data=True, is_valid=True, errors=[])
    if any_data:
        return StatusResult(status=FormStatus.IN_PROGRESS, has_data=True, is_valid=False, errors=errors)
    return StatusResult(status=FormStatus.INCOMPLETE, has_data=False, is_valid=False, errors=errors)


def section_statuses(survey: Survey) -> Dict[str, StatusResult]:
    """One status per top-level section, in display order."""
    return {
        REPORT_DETAILS: compute_status(ReportDetailsSchema, survey.report_details),
        PROPERTY_DESCRIPTION: compute_status(PropertyDescriptionSchema, survey.property_description),
        PROPERTY_CONDITION: property_condition_status(survey),
        CHECKLIST: compute_status(ChecklistSchema, survey.checklist),
    }


def _as_form_status(value: StatusLike) -> FormStatus:
    if isinstance(value, StatusResult):
        return value.status
    if isinstance(value, FormStatus):
        return value
    return FormStatus(value)


def aggregate(statuses: Union[Mapping[str, StatusLike], Sequence[StatusLike]]) -> SurveyProgress:
    """
    Combine section statuses into a progress summary.

    Args:
        statuses: mapping of section title to status, or a sequence of
            statuses in FORM_SECTION_TITLES order

    Raises:
        ValueError: if more statuses are given than there are sections
    """
    total = len(FORM_SECTION_TITLES)

    if isinstance(statuses, Mapping):
        unknown = set(statuses) - set(FORM_SECTION_TITLES)
        if unknown:
            logger.warning("Ignoring unknown sections: %s", ", ".join(sorted(unknown)))
        values = [_as_form_status(statuses[title]) for title in FORM_SECTION_TITLES if title in statuses]
    else:
        if len(statuses) > total:
            raise ValueError(f"Expected at most {total} section statuses, got {len(statuses)}")
        values = [_as_form_status(s) for s in statuses]

    completed = sum(1 for s in values if s is FormStatus.COMPLETE)
    errored = sum(1 for s in values if s is FormStatus.ERROR)
    # Half-up rounding
    percent = int(math.floor(100 * completed / total + 0.5)) if total else 0

    return SurveyProgress(
        completed_sections=completed,
        total_sections=total,
        progress_percent=percent,
        error_sections=errored,
    )


def survey_progress(survey: Survey) -> SurveyProgress:
    statuses = section_statuses(survey)
    progress = aggregate(statuses)
    progress.sections = statuses
    return progress
