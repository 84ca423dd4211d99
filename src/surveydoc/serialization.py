"""
Serialization helpers for survey documents.

Converts between the dataclass model and the plain-data wire shape used by
collaborators (camelCase keys), with JSON/YAML helpers on top.

Optional keys that carry meaning by their absence (`phraseLevel2`,
`docLevel2`, `associatedComponentIds`, `localDefId`, `_meta`) are omitted
on output when unset and left unset on input when absent.
"""
from __future__ import annotations

import json
import logging
from typing import Any, Dict, Mapping

import yaml

from surveydoc.model import (
    Condition,
    Costing,
    ElementSection,
    Inspection,
    LocalComponentDef,
    LocalConditionDef,
    Owner,
    RagStatus,
    Section,
    Survey,
    SurveyImage,
    SurveyStatus,
)
from surveydoc.status import FormStatusMeta

logger = logging.getLogger(__name__)


def _text(value: Any) -> str:
    if value is None:
        return ""
    return str(value)


def rag_status_from_value(value: Any) -> RagStatus:
    if isinstance(value, RagStatus):
        return value
    if value in (None, ""):
        return RagStatus.NOT_INSPECTED
    try:
        return RagStatus(value)
    except ValueError:
        logger.warning("Unknown RAG status %r, using N/I", value)
        return RagStatus.NOT_INSPECTED


def survey_status_from_value(value: Any) -> SurveyStatus:
    if isinstance(value, SurveyStatus):
        return value
    if value in (None, ""):
        return SurveyStatus.DRAFT
    return SurveyStatus(value)


def image_to_dict(img: SurveyImage) -> Dict[str, Any]:
    return {"path": img.path, "isArchived": img.is_archived, "hasMetadata": img.has_metadata}


def image_from_dict(d: Mapping[str, Any] | SurveyImage) -> SurveyImage:
    if isinstance(d, SurveyImage):
        return d
    return SurveyImage(
        path=_text(d.get("path")),
        is_archived=bool(d.get("isArchived", False)),
        has_metadata=bool(d.get("hasMetadata", False)),
    )


def costing_to_dict(c: Costing) -> Dict[str, Any]:
    return {"cost": c.cost, "description": c.description}


def costing_from_dict(d: Mapping[str, Any] | Costing) -> Costing:
    if isinstance(d, Costing):
        return d
    return Costing(cost=d.get("cost") or 0, description=_text(d.get("description")))


def condition_to_dict(c: Condition) -> Dict[str, Any]:
    d: Dict[str, Any] = {"id": c.id, "name": c.name, "phrase": c.phrase, "doc": c.doc}
    if c.phrase_level2 is not None:
        d["phraseLevel2"] = c.phrase_level2
    if c.doc_level2 is not None:
        d["docLevel2"] = c.doc_level2
    if c.associated_component_ids is not None:
        d["associatedComponentIds"] = list(c.associated_component_ids)
    return d


def condition_from_dict(d: Mapping[str, Any] | Condition) -> Condition:
    if isinstance(d, Condition):
        return d
    associated = d.get("associatedComponentIds")
    return Condition(
        id=_text(d.get("id")),
        name=_text(d.get("name")),
        phrase=_text(d.get("phrase")),
        # Absent stays None; "" stays "".
        phrase_level2=d.get("phraseLevel2"),
        doc=d.get("doc"),
        doc_level2=d.get("docLevel2"),
        associated_component_ids=list(associated) if associated is not None else None,
    )


def inspection_to_dict(i: Inspection) -> Dict[str, Any]:
    d = {
        "id": i.id,
        "inspectionId": i.inspection_id,
        "name": i.name,
        "nameOverride": i.name_override,
        "useNameOverride": i.use_name_override,
        "location": i.location,
        "additionalDescription": i.additional_description,
        "ragStatus": i.rag_status.value,
        "conditions": [condition_to_dict(c) for c in i.conditions],
        "costings": [costing_to_dict(c) for c in i.costings],
        "images": [image_to_dict(img) for img in i.images],
    }
    if i.local_def_id is not None:
        d["localDefId"] = i.local_def_id
    return d


def inspection_from_dict(d: Mapping[str, Any]) -> Inspection:
    return Inspection(
        id=_text(d.get("id")),
        inspection_id=_text(d.get("inspectionId")),
        name=_text(d.get("name")),
        name_override=_text(d.get("nameOverride")),
        use_name_override=bool(d.get("useNameOverride", False)),
        location=_text(d.get("location")),
        additional_description=_text(d.get("additionalDescription")),
        rag_status=rag_status_from_value(d.get("ragStatus")),
        conditions=[condition_from_dict(c) for c in d.get("conditions") or []],
        costings=[costing_from_dict(c) for c in d.get("costings") or []],
        images=[image_from_dict(img) for img in d.get("images") or []],
        local_def_id=d.get("localDefId"),
    )


def local_component_def_to_dict(ld: LocalComponentDef) -> Dict[str, Any]:
    return {
        "id": ld.id,
        "name": ld.name,
        "elementId": ld.element_id,
        "materials": list(ld.materials),
        "associatedPhraseIds": list(ld.associated_phrase_ids),
        "createdAt": ld.created_at,
        "updatedAt": ld.updated_at,
    }


def local_component_def_from_dict(d: Mapping[str, Any] | LocalComponentDef) -> LocalComponentDef:
    if isinstance(d, LocalComponentDef):
        return d
    return LocalComponentDef(
        id=_text(d.get("id")),
        name=_text(d.get("name")),
        element_id=_text(d.get("elementId")),
        materials=list(d.get("materials") or []),
        associated_phrase_ids=list(d.get("associatedPhraseIds") or []),
        created_at=d.get("createdAt"),
        updated_at=d.get("updatedAt"),
    )


def local_condition_def_to_dict(ld: LocalConditionDef) -> Dict[str, Any]:
    return {
        "id": ld.id,
        "name": ld.name,
        "text": ld.text,
        "createdAt": ld.created_at,
        "updatedAt": ld.updated_at,
    }


def local_condition_def_from_dict(d: Mapping[str, Any] | LocalConditionDef) -> LocalConditionDef:
    if isinstance(d, LocalConditionDef):
        return d
    return LocalConditionDef(
        id=_text(d.get("id")),
        name=_text(d.get("name")),
        text=_text(d.get("text")),
        created_at=d.get("createdAt"),
        updated_at=d.get("updatedAt"),
    )


def element_section_to_dict(e: ElementSection) -> Dict[str, Any]:
    d = {
        "id": e.id,
        "name": e.name,
        "isPartOfSurvey": e.is_part_of_survey,
        "description": e.description,
        "components": [inspection_to_dict(c) for c in e.components],
        "images": [image_to_dict(img) for img in e.images],
        "localComponentDefs": [local_component_def_to_dict(ld) for ld in e.local_component_defs],
        "localConditionDefs": [local_condition_def_to_dict(ld) for ld in e.local_condition_defs],
    }
    if e.meta is not None:
        d["_meta"] = e.meta.to_dict()
    return d


def element_section_from_dict(d: Mapping[str, Any]) -> ElementSection:
    meta = d.get("_meta")
    return ElementSection(
        id=_text(d.get("id")),
        name=_text(d.get("name")),
        is_part_of_survey=bool(d.get("isPartOfSurvey", True)),
        description=_text(d.get("description")),
        components=[inspection_from_dict(c) for c in d.get("components") or []],
        images=[image_from_dict(img) for img in d.get("images") or []],
        local_component_defs=[local_component_def_from_dict(ld) for ld in d.get("localComponentDefs") or []],
        local_condition_defs=[local_condition_def_from_dict(ld) for ld in d.get("localConditionDefs") or []],
        meta=FormStatusMeta.from_dict(meta) if meta is not None else None,
    )


def section_to_dict(s: Section) -> Dict[str, Any]:
    return {
        "id": s.id,
        "name": s.name,
        "elementSections": [element_section_to_dict(e) for e in s.element_sections],
    }


def section_from_dict(d: Mapping[str, Any]) -> Section:
    return Section(
        id=_text(d.get("id")),
        name=_text(d.get("name")),
        element_sections=[element_section_from_dict(e) for e in d.get("elementSections") or []],
    )


def owner_to_dict(o: Owner) -> Dict[str, Any]:
    return {"id": o.id, "name": o.name, "email": o.email, "signaturePath": list(o.signature_path)}


def owner_from_dict(d: Mapping[str, Any] | None) -> Owner:
    d = d or {}
    return Owner(
        id=_text(d.get("id")),
        name=_text(d.get("name")),
        email=_text(d.get("email")),
        signature_path=list(d.get("signaturePath") or []),
    )


def survey_to_dict(s: Survey) -> Dict[str, Any]:
    return {
        "id": s.id,
        "status": s.status.value,
        "owner": owner_to_dict(s.owner),
        "reportDetails": dict(s.report_details),
        "propertyDescription": dict(s.property_description),
        "sections": [section_to_dict(sec) for sec in s.sections],
        "checklist": dict(s.checklist),
    }


def survey_from_dict(d: Mapping[str, Any]) -> Survey:
    return Survey(
        id=_text(d.get("id")),
        status=survey_status_from_value(d.get("status")),
        owner=owner_from_dict(d.get("owner")),
        report_details=dict(d.get("reportDetails") or {}),
        property_description=dict(d.get("propertyDescription") or {}),
        sections=[section_from_dict(sec) for sec in d.get("sections") or []],
        checklist=dict(d.get("checklist") or {}),
    )


def survey_to_json(s: Survey) -> str:
    return json.dumps(survey_to_dict(s), sort_keys=True, default=str)


def survey_from_json(s: str) -> Survey:
    d = json.loads(s)
    return survey_from_dict(d)


def survey_to_yaml(s: Survey) -> str:
    return yaml.safe_dump(survey_to_dict(s))


def survey_from_yaml(s: str) -> Survey:
    d = yaml.safe_load(s)
    return survey_from_dict(d)
