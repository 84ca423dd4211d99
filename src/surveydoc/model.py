"""
Core Survey Document Objects

Defines the data structures of a single building survey document:
    - Survey (root aggregate)
    - Section (top-level grouping, e.g. "External")
    - ElementSection (an element of the building, e.g. "Roof Coverings")
    - Inspection (a component as inspected)
    - Condition (an observation attached to an inspection)
    - LocalComponentDef / LocalConditionDef (survey-scoped templates)

ARCHITECTURAL RULE:
    These objects:
        - Know nothing about storage, rendering or editing surfaces
        - Are plain values; mutation happens in the tree layer on copies
        - Are fully serializable (see serialization.py)
        - Represent structure, not behavior
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


class SurveyStatus(Enum):
    """Lifecycle status of a survey document."""

    DRAFT = "draft"
    READY_FOR_QA = "ready_for_qa"
    ISSUED_TO_CLIENT = "issued_to_client"
    ARCHIVED = "archived"


SURVEY_STATUS_LABELS: Dict[SurveyStatus, str] = {
    SurveyStatus.DRAFT: "Draft",
    SurveyStatus.READY_FOR_QA: "Ready for QA",
    SurveyStatus.ISSUED_TO_CLIENT: "Issued to Client",
    SurveyStatus.ARCHIVED: "Archived",
}


class RagStatus(Enum):
    """Red/Amber/Green severity rating, or Not Inspected."""

    RED = "Red"
    AMBER = "Amber"
    GREEN = "Green"
    NOT_INSPECTED = "N/I"


@dataclass
class SurveyImage:
    """
    Reference to an uploaded image.

    The bytes live with the upload collaborator; the document only
    stores the path and whether the image has been archived.
    """

    path: str
    is_archived: bool = False
    has_metadata: bool = False


@dataclass
class Costing:
    cost: float = 0
    description: str = ""


@dataclass
class Condition:
    """
    An observation recorded against an inspection.

    Properties:
        id:
            Catalog phrase id, local condition def id, or an ad hoc id

        phrase:
            Level 3 text (always expected to be populated)

        phrase_level2:
            Level 2 text, authored independently of `phrase`.
            None means the record predates level 2 authoring.
            "" means the author left level 2 blank on purpose.
            These are different states and must stay different.

        doc / doc_level2:
            Structured editor content for each level (opaque here)

        associated_component_ids:
            Only present on catalog-origin phrases
    """

    id: str
    name: str = ""
    phrase: str = ""
    phrase_level2: Optional[str] = None
    doc: Optional[Dict[str, Any]] = None
    doc_level2: Optional[Dict[str, Any]] = None
    associated_component_ids: Optional[List[str]] = None


@dataclass
class Inspection:
    """
    A component as inspected within an element.

    `id` references the component (catalog id or local instance id) and
    may change if the surveyor swaps the component. `inspection_id`
    identifies this occurrence of inspecting something and never changes.

    `local_def_id` links an instantiated local component back to the
    LocalComponentDef it came from.
    """

    id: str
    inspection_id: str
    name: str = ""
    name_override: str = ""
    use_name_override: bool = False
    location: str = ""
    additional_description: str = ""
    rag_status: RagStatus = RagStatus.NOT_INSPECTED
    conditions: List[Condition] = field(default_factory=list)
    costings: List[Costing] = field(default_factory=list)
    images: List[SurveyImage] = field(default_factory=list)
    local_def_id: Optional[str] = None

    @property
    def display_name(self) -> str:
        if self.use_name_override and self.name_override:
            return self.name_override
        return self.name


@dataclass
class LocalComponentDef:
    """Survey-scoped, element-specific component template."""

    id: str
    name: str
    element_id: str
    materials: List[Dict[str, Any]] = field(default_factory=list)
    associated_phrase_ids: List[str] = field(default_factory=list)
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


@dataclass
class LocalConditionDef:
    """Survey-scoped reusable condition text. No level split."""

    id: str
    name: str
    text: str = ""
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


@dataclass
class ElementSection:
    """
    One element of the building within a section.

    `is_part_of_survey = False` excludes the element from completion
    but keeps it, and everything recorded against it, in the tree.

    `meta` holds a cached FormStatusMeta (see status.py) when the
    element form has been saved with a status stamp.
    """

    id: str
    name: str = ""
    is_part_of_survey: bool = True
    description: str = ""
    components: List[Inspection] = field(default_factory=list)
    images: List[SurveyImage] = field(default_factory=list)
    local_component_defs: List[LocalComponentDef] = field(default_factory=list)
    local_condition_defs: List[LocalConditionDef] = field(default_factory=list)
    meta: Optional[Any] = None

    def get_component(self, inspection_id: str) -> Optional[Inspection]:
        for component in self.components:
            if component.inspection_id == inspection_id:
                return component
        return None

    def get_local_component_def(self, def_id: str) -> Optional[LocalComponentDef]:
        for local_def in self.local_component_defs:
            if local_def.id == def_id:
                return local_def
        return None

    def get_local_condition_def(self, def_id: str) -> Optional[LocalConditionDef]:
        for local_def in self.local_condition_defs:
            if local_def.id == def_id:
                return local_def
        return None


@dataclass
class Section:
    id: str
    name: str = ""
    element_sections: List[ElementSection] = field(default_factory=list)

    def get_element_section(self, element_id: str) -> Optional[ElementSection]:
        """
        Retrieve an element section by ID.

        Returns:
            ElementSection or None if not found
        """
        for element_section in self.element_sections:
            if element_section.id == element_id:
                return element_section
        return None


@dataclass
class Owner:
    id: str = ""
    name: str = ""
    email: str = ""
    signature_path: List[str] = field(default_factory=list)


@dataclass
class Survey:
    """
    Root aggregate for a survey document.

    The survey owns everything below it by value. Nothing outside the
    document holds a reference to a section, element or inspection.

    Properties:
        report_details, property_description, checklist:
            Plain sub-documents edited by their own forms and validated
            by schemas in schemas.py. Each may carry a `_meta` key with a
            cached status (see status.py).

        sections:
            Ordered Section list, created lazily by the tree mutators.

    INVARIANTS:
        - inspection_id values are unique across the document
        - id namespaces (catalog, local def, local instance) never overlap
        - excluded elements stay in the tree
    """

    id: str
    status: SurveyStatus = SurveyStatus.DRAFT
    owner: Owner = field(default_factory=Owner)
    report_details: Dict[str, Any] = field(default_factory=dict)
    property_description: Dict[str, Any] = field(default_factory=dict)
    sections: List[Section] = field(default_factory=list)
    checklist: Dict[str, Any] = field(default_factory=dict)

    @property
    def level(self) -> Optional[str]:
        """Active survey level ("2" or "3"), or None before it is chosen."""
        level = self.report_details.get("level")
        if level in (None, ""):
            return None
        return str(level)

    def get_section(self, section_id: str) -> Optional[Section]:
        """
        Retrieve a section by ID.

        Args:
            section_id: Section identifier

        Returns:
            Section object or None if not found
        """
        for section in self.sections:
            if section.id == section_id:
                return section
        return None

    def get_section_by_name(self, name: str) -> Optional[Section]:
        for section in self.sections:
            if section.name == name:
                return section
        return None

    def iter_element_sections(self):
        for section in self.sections:
            for element_section in section.element_sections:
                yield section, element_section
