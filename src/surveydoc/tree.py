"""
Document Tree: lookups and mutators over Survey -> Section -> ElementSection
-> Inspection -> Condition.

Mutators have the shape (survey, path..., patch) -> survey'. They work on
a deep copy and return it, so the caller's value is never modified, and
they are idempotent under repeated application of the same patch.

Mutators never fail on missing ancestors: sections and element sections
are created on first use ("find or create"). Reads report "not found" as
None rather than raising, since a partially filled document is normal.

`find_or_create_section` and `find_or_create_element_section` are the
exception to copy-on-write: they operate on the survey they are handed,
which inside this module is always a private working copy.
"""

from __future__ import annotations

import copy
import logging
from dataclasses import dataclass, fields, replace
from datetime import datetime
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

from surveydoc.model import (
    Condition,
    ElementSection,
    Inspection,
    LocalComponentDef,
    LocalConditionDef,
    Section,
    Survey,
    SurveyImage,
)
from surveydoc.serialization import (
    condition_from_dict,
    costing_from_dict,
    image_from_dict,
    image_to_dict,
    inspection_from_dict,
    local_component_def_from_dict,
    local_condition_def_from_dict,
    rag_status_from_value,
)
from surveydoc.schemas import ElementSectionSchema
from surveydoc.status import update_status

logger = logging.getLogger(__name__)

ComponentPatch = Union[Inspection, Mapping[str, Any]]


@dataclass
class ComponentLocation:
    """Result of a component lookup. All fields are None when not found."""

    component: Optional[Inspection] = None
    element_section: Optional[ElementSection] = None
    section: Optional[Section] = None

    @property
    def found(self) -> bool:
        return self.component is not None


@dataclass(frozen=True)
class ImageRef:
    path: str
    is_archived: bool

    def to_dict(self):
        return {"path": self.path, "isArchived": self.is_archived}


def _working_copy(survey: Survey) -> Survey:
    return copy.deepcopy(survey)


# =========================================================================
# FIND OR CREATE
# =========================================================================

def find_or_create_section(survey: Survey, section_id: str) -> Section:
    """Return the section with `section_id`, appending an empty one if absent."""
    section = survey.get_section(section_id)
    if section is None:
        section = Section(id=section_id)
        survey.sections.append(section)
    return section


def find_or_create_element_section(survey: Survey, section_id: str, element_id: str) -> ElementSection:
    """Same as find_or_create_section, one level deeper."""
    section = find_or_create_section(survey, section_id)
    element_section = section.get_element_section(element_id)
    if element_section is None:
        element_section = ElementSection(id=element_id, is_part_of_survey=True)
        section.element_sections.append(element_section)
    return element_section


# =========================================================================
# READS
# =========================================================================

def get_element_section(survey: Survey, section_id: str, element_id: str) -> Optional[ElementSection]:
    section = survey.get_section(section_id)
    if section is None:
        return None
    return section.get_element_section(element_id)


def get_element_components(survey: Survey, section_id: str, element_id: str) -> List[Inspection]:
    element_section = get_element_section(survey, section_id, element_id)
    if element_section is None:
        return []
    return list(element_section.components)


def find_inspection(survey: Survey, inspection_id: str) -> ComponentLocation:
    """Authoritative lookup of one inspection occurrence."""
    for section, element_section in survey.iter_element_sections():
        for component in element_section.components:
            if component.inspection_id == inspection_id:
                return ComponentLocation(component, element_section, section)
    return ComponentLocation()


def find_component(survey: Survey, component_or_inspection_id: str) -> ComponentLocation:
    """
    Locate a component by inspection id, falling back to component id.

    The component-id path is for compatibility only: a component id can be
    shared by several inspections and the first match wins. Callers that
    need a specific occurrence must pass the inspection id.
    """
    location = find_inspection(survey, component_or_inspection_id)
    if location.found:
        return location
    for section, element_section in survey.iter_element_sections():
        for component in element_section.components:
            if component.id == component_or_inspection_id:
                return ComponentLocation(component, element_section, section)
    return ComponentLocation()


def get_all_survey_images(survey: Survey) -> List[ImageRef]:
    """
    Every image reference in the document, deduplicated by path.

    Order: report cover images, report elevation images, then per element
    its own images followed by its inspections' images. The first
    occurrence of a path wins.
    """
    def report_images(key: str) -> Iterable[SurveyImage]:
        return [image_from_dict(img) for img in survey.report_details.get(key) or []]

    candidates: List[SurveyImage] = []
    candidates.extend(report_images("moneyShot"))
    candidates.extend(report_images("frontElevationImagesUri"))
    for _, element_section in survey.iter_element_sections():
        candidates.extend(element_section.images)
        for component in element_section.components:
            candidates.extend(component.images)

    seen = set()
    images = []
    for img in candidates:
        if img.path in seen:
            continue
        seen.add(img.path)
        images.append(ImageRef(path=img.path, is_archived=img.is_archived))
    return images


# =========================================================================
# COMPONENT MUTATORS
# =========================================================================

def _normalize_condition(condition: Condition) -> Condition:
    # phrase_level2 is carried as-is; None and "" mean different things.
    return replace(
        condition,
        name=condition.name or "",
        phrase=condition.phrase or "",
    )


def normalize_inspection(component: ComponentPatch) -> Inspection:
    """
    Give an inspection a total shape.

    Accepts an Inspection or a wire-shape mapping. Missing optional values
    become safe defaults: rag status N/I, empty lists, empty strings, and
    name_override falls back to name.

    Raises:
        ValueError: if the patch has no inspection id
    """
    if isinstance(component, Mapping):
        inspection = inspection_from_dict(copy.deepcopy(component))
    else:
        inspection = copy.deepcopy(component)

    if not inspection.inspection_id:
        raise ValueError("Component patch is missing inspectionId")

    inspection.name = inspection.name or ""
    inspection.name_override = inspection.name_override or inspection.name
    inspection.use_name_override = bool(inspection.use_name_override)
    inspection.location = inspection.location or ""
    inspection.additional_description = inspection.additional_description or ""
    inspection.rag_status = rag_status_from_value(inspection.rag_status)
    inspection.conditions = [_normalize_condition(condition_from_dict(c)) for c in inspection.conditions or []]
    inspection.costings = [costing_from_dict(c) for c in inspection.costings or []]
    inspection.images = [image_from_dict(img) for img in inspection.images or []]
    return inspection


def add_or_update_component(
    survey: Survey,
    section_id: str,
    element_id: str,
    component: ComponentPatch,
) -> Survey:
    """
    Upsert an inspection keyed by its inspection id.

    The whole record is replaced on update. Missing section and element
    are created.
    """
    inspection = normalize_inspection(component)
    updated = _working_copy(survey)
    element_section = find_or_create_element_section(updated, section_id, element_id)

    for index, existing in enumerate(element_section.components):
        if existing.inspection_id == inspection.inspection_id:
            element_section.components[index] = inspection
            break
    else:
        element_section.components.append(inspection)
        logger.debug("Added inspection %s to %s/%s", inspection.inspection_id, section_id, element_id)
    return updated


def remove_component(survey: Survey, section_name: str, element_id: str, inspection_id: str) -> Survey:
    """
    Delete one inspection. The section is addressed by name.

    Returns the survey unchanged when the section or element is missing.
    """
    section = survey.get_section_by_name(section_name)
    if section is None or section.get_element_section(element_id) is None:
        return survey

    updated = _working_copy(survey)
    element_section = updated.get_section_by_name(section_name).get_element_section(element_id)
    element_section.components = [
        c for c in element_section.components if c.inspection_id != inspection_id
    ]
    return updated


def toggle_element_section(survey: Survey, section_id: str, element_id: str) -> Survey:
    """Flip is_part_of_survey. The element and its data stay in the tree."""
    if get_element_section(survey, section_id, element_id) is None:
        return survey
    updated = _working_copy(survey)
    element_section = get_element_section(updated, section_id, element_id)
    element_section.is_part_of_survey = not element_section.is_part_of_survey
    return updated


def update_element_details(
    survey: Survey,
    section_id: str,
    element_id: str,
    description: Optional[str] = None,
    images: Optional[Iterable[Any]] = None,
) -> Survey:
    """
    Edit the element form. Any cached element status is dropped; see
    stamp_element_status.
    """
    if get_element_section(survey, section_id, element_id) is None:
        return survey
    updated = _working_copy(survey)
    element_section = get_element_section(updated, section_id, element_id)
    if description is not None:
        element_section.description = description
    if images is not None:
        element_section.images = [copy.deepcopy(image_from_dict(img)) for img in images]
    element_section.meta = None
    return updated


def element_form_data(element_section: ElementSection) -> Dict[str, Any]:
    """The element form as the status engine validates it."""
    return {
        "description": element_section.description,
        "images": [image_to_dict(img) for img in element_section.images],
    }


def stamp_element_status(
    survey: Survey,
    section_id: str,
    element_id: str,
    now: Optional[datetime] = None,
) -> Survey:
    """Save-path revalidation of one element form, cached on the element."""
    if get_element_section(survey, section_id, element_id) is None:
        return survey
    updated = _working_copy(survey)
    element_section = get_element_section(updated, section_id, element_id)
    element_section.meta = update_status(ElementSectionSchema, element_form_data(element_section), now=now)
    return updated


# =========================================================================
# LOCAL DEFINITIONS
# =========================================================================

def get_local_component_defs(survey: Survey, section_id: str, element_id: str) -> List[LocalComponentDef]:
    element_section = get_element_section(survey, section_id, element_id)
    return list(element_section.local_component_defs) if element_section else []


def get_local_condition_defs(survey: Survey, section_id: str, element_id: str) -> List[LocalConditionDef]:
    element_section = get_element_section(survey, section_id, element_id)
    return list(element_section.local_condition_defs) if element_section else []


def _upsert_def(defs: list, new_def) -> None:
    for index, existing in enumerate(defs):
        if existing.id == new_def.id:
            merged = {
                f.name: getattr(new_def, f.name)
                for f in fields(new_def)
                if getattr(new_def, f.name) is not None
            }
            defs[index] = replace(existing, **merged)
            return
    defs.append(new_def)


def add_or_update_local_component_def(
    survey: Survey,
    section_id: str,
    element_id: str,
    local_def: Union[LocalComponentDef, Mapping[str, Any]],
) -> Survey:
    local_def = copy.deepcopy(local_component_def_from_dict(local_def))
    updated = _working_copy(survey)
    element_section = find_or_create_element_section(updated, section_id, element_id)
    _upsert_def(element_section.local_component_defs, local_def)
    return updated


def add_or_update_local_condition_def(
    survey: Survey,
    section_id: str,
    element_id: str,
    local_def: Union[LocalConditionDef, Mapping[str, Any]],
) -> Survey:
    local_def = copy.deepcopy(local_condition_def_from_dict(local_def))
    updated = _working_copy(survey)
    element_section = find_or_create_element_section(updated, section_id, element_id)
    _upsert_def(element_section.local_condition_defs, local_def)
    return updated


def remove_local_component_def(survey: Survey, section_id: str, element_id: str, def_id: str) -> Survey:
    if get_element_section(survey, section_id, element_id) is None:
        return survey
    updated = _working_copy(survey)
    element_section = get_element_section(updated, section_id, element_id)
    element_section.local_component_defs = [d for d in element_section.local_component_defs if d.id != def_id]
    return updated


def remove_local_condition_def(survey: Survey, section_id: str, element_id: str, def_id: str) -> Survey:
    if get_element_section(survey, section_id, element_id) is None:
        return survey
    updated = _working_copy(survey)
    element_section = get_element_section(updated, section_id, element_id)
    element_section.local_condition_defs = [d for d in element_section.local_condition_defs if d.id != def_id]
    return updated
