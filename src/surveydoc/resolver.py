"""
Entity Resolver: pick-list options and local definition instantiation.

Options for a component or condition pick-list are merged from three
sources, in precedence order:

    1. DOCUMENT_ONLY  entries already recorded on the inspection being
                      edited, when they are survey-local or no longer in
                      the catalog (so deleted catalog entries still show)
    2. LOCAL_DEF      survey-scoped definitions on the element
    3. CATALOG        global catalog entries scoped to the element

Duplicates are removed by id; the first source wins. Every Option carries
its source as a tag, and callers branch on that tag.

Instantiation turns a local definition (or a bare name) into a concrete
inspection with a freshly minted local instance id.
"""

from __future__ import annotations

import copy
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

from surveydoc.catalog import CatalogComponent, CatalogPhrase
from surveydoc.identifiers import (
    InvalidIdentifierError,
    mint_ad_hoc_id,
    mint_component_def_id,
    mint_condition_def_id,
    mint_inspection_id,
    mint_instance_id,
    parse_id,
)
from surveydoc.model import (
    Condition,
    ElementSection,
    Inspection,
    LocalComponentDef,
    LocalConditionDef,
    Survey,
)
from surveydoc.serialization import inspection_to_dict
from surveydoc.tree import (
    add_or_update_component,
    add_or_update_local_component_def,
    add_or_update_local_condition_def,
    get_element_section,
)

logger = logging.getLogger(__name__)

DOCUMENT_ONLY_LABEL = "(document only)"


class OptionSource(Enum):
    CATALOG = "catalog"
    LOCAL_DEF = "local_def"
    DOCUMENT_ONLY = "document_only"


@dataclass(frozen=True)
class Option:
    """
    One pick-list entry.

    `value` depends on `source` and on the list:
        components: CatalogComponent | LocalComponentDef | Inspection
        conditions: Condition
    """

    source: OptionSource
    id: str
    name: str
    label: str
    value: Any

    @property
    def is_local(self) -> bool:
        return self.source is not OptionSource.CATALOG


@dataclass
class Instantiation:
    instance_id: str
    inspection_id: str
    local_def: LocalComponentDef
    survey: Survey


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def local_label(name: str) -> str:
    return f"{name or '(unnamed)'} {DOCUMENT_ONLY_LABEL}"


def _is_local_id(raw: str) -> bool:
    try:
        return parse_id(raw).is_local
    except InvalidIdentifierError:
        # Unparseable ids cannot be catalog entries either.
        return True


def merge_options(*sources: Iterable[Option]) -> List[Option]:
    """Concatenate option lists, keeping the first option seen per id."""
    merged = {}
    for options in sources:
        for option in options:
            if option.id not in merged:
                merged[option.id] = option
    return list(merged.values())


def build_component_options(
    catalog_components: Sequence[CatalogComponent],
    element_id: str,
    element_section: Optional[ElementSection] = None,
    current: Optional[Inspection] = None,
) -> List[Option]:
    """Component pick-list for one element."""
    catalog_ids = {c.id for c in catalog_components}

    document_only = []
    if current is not None and current.id:
        if _is_local_id(current.id) or current.id not in catalog_ids:
            document_only.append(Option(
                source=OptionSource.DOCUMENT_ONLY,
                id=current.id,
                name=current.name,
                label=local_label(current.name),
                value=current,
            ))

    local_defs = []
    if element_section is not None:
        local_defs = [
            Option(
                source=OptionSource.LOCAL_DEF,
                id=d.id,
                name=d.name,
                label=local_label(d.name),
                value=d,
            )
            for d in element_section.local_component_defs
        ]

    catalog = [
        Option(source=OptionSource.CATALOG, id=c.id, name=c.name, label=c.name, value=c)
        for c in sorted(catalog_components, key=lambda c: c.order)
        if c.element_id == element_id
    ]

    return merge_options(document_only, local_defs, catalog)


def build_condition_options(
    catalog_phrases: Sequence[CatalogPhrase],
    element_section: Optional[ElementSection] = None,
    current: Optional[Inspection] = None,
    component_id: Optional[str] = None,
) -> List[Option]:
    """
    Condition pick-list for the component chosen on an inspection.

    Catalog phrases are offered when their associated component ids
    include the chosen component. A survey-local component has no catalog
    associations, so every catalog condition phrase is offered for it.
    """
    phrases = [p for p in catalog_phrases if p.is_condition]
    phrase_ids = {p.id for p in phrases}
    chosen = component_id or (current.id if current is not None else None)

    recorded = []
    if current is not None:
        for condition in current.conditions:
            if not condition.id:
                logger.warning("Skipping condition without id on inspection %s", current.inspection_id)
                continue
            if _is_local_id(condition.id) or condition.id not in phrase_ids:
                recorded.append(Option(
                    source=OptionSource.DOCUMENT_ONLY,
                    id=condition.id,
                    name=condition.name,
                    label=local_label(condition.name),
                    value=condition,
                ))
            else:
                recorded.append(Option(
                    source=OptionSource.CATALOG,
                    id=condition.id,
                    name=condition.name,
                    label=condition.name,
                    value=condition,
                ))

    local_defs = []
    if element_section is not None:
        local_defs = [
            Option(
                source=OptionSource.LOCAL_DEF,
                id=d.id,
                name=d.name,
                label=local_label(d.name),
                value=Condition(id=d.id, name=d.name, phrase=d.text),
            )
            for d in element_section.local_condition_defs
        ]

    if chosen is None:
        offered = []
    elif _is_local_id(chosen):
        offered = phrases
    else:
        # Catalog namespace, including ids since deleted from the catalog
        offered = [p for p in phrases if chosen in p.associated_component_ids]

    catalog = [
        Option(source=OptionSource.CATALOG, id=p.id, name=p.name, label=p.name, value=p.to_condition())
        for p in sorted(offered, key=lambda p: p.order)
    ]

    return merge_options(recorded, local_defs, catalog)


# =========================================================================
# LOCAL DEFINITIONS
# =========================================================================

def _find_def_by_name(element_section: Optional[ElementSection], name: str) -> Optional[LocalComponentDef]:
    if element_section is None:
        return None
    wanted = name.strip().casefold()
    for local_def in element_section.local_component_defs:
        if local_def.name.strip().casefold() == wanted:
            return local_def
    return None


def create_local_component_def(
    survey: Survey,
    section_id: str,
    element_id: str,
    name: str,
) -> Tuple[LocalComponentDef, Survey]:
    stamp = _now()
    local_def = LocalComponentDef(
        id=mint_component_def_id(),
        name=name.strip(),
        element_id=element_id,
        created_at=stamp,
        updated_at=stamp,
    )
    return local_def, add_or_update_local_component_def(survey, section_id, element_id, local_def)


def create_local_condition_def(
    survey: Survey,
    section_id: str,
    element_id: str,
    name: str,
    text: str,
) -> Tuple[LocalConditionDef, Survey]:
    stamp = _now()
    local_def = LocalConditionDef(
        id=mint_condition_def_id(),
        name=name.strip(),
        text=text,
        created_at=stamp,
        updated_at=stamp,
    )
    return local_def, add_or_update_local_condition_def(survey, section_id, element_id, local_def)


def make_ad_hoc_condition(name: str, text: str, text_level2: Optional[str] = None) -> Condition:
    """A one-off condition typed straight into an inspection."""
    return Condition(id=mint_ad_hoc_id(), name=name, phrase=text, phrase_level2=text_level2)


def instantiate(
    survey: Survey,
    section_id: str,
    element_id: str,
    local_def_or_name: Union[LocalComponentDef, str],
    seed_fields: Optional[Union[Inspection, Mapping[str, Any]]] = None,
) -> Instantiation:
    """
    Create an inspection from a local component definition.

    Given a bare name, an existing definition with the same name (ignoring
    case) is reused, otherwise a new one is created. `seed_fields` carries
    anything already entered (conditions, costings, location, images, an
    existing inspectionId) so promoting free text to a definition loses
    nothing.

    Raises:
        ValueError: if given a blank name
    """
    element_section = get_element_section(survey, section_id, element_id)
    updated = survey

    if isinstance(local_def_or_name, LocalComponentDef):
        local_def = local_def_or_name
        if element_section is None or element_section.get_local_component_def(local_def.id) is None:
            updated = add_or_update_local_component_def(updated, section_id, element_id, local_def)
    else:
        name = (local_def_or_name or "").strip()
        if not name:
            raise ValueError("Cannot instantiate a local component without a name")
        local_def = _find_def_by_name(element_section, name)
        if local_def is None:
            local_def, updated = create_local_component_def(updated, section_id, element_id, name)
            logger.info("Created local component def %s (%s)", local_def.id, local_def.name)

    if isinstance(seed_fields, Inspection):
        seed = inspection_to_dict(seed_fields)
    else:
        seed = dict(seed_fields or {})

    instance_id = mint_instance_id()
    inspection_id = seed.get("inspectionId") or mint_inspection_id()
    previous_name = seed.get("name")
    if seed.get("nameOverride") == previous_name:
        seed.pop("nameOverride", None)
    seed.update({
        "id": instance_id,
        "inspectionId": inspection_id,
        "name": local_def.name,
        "localDefId": local_def.id,
    })

    updated = add_or_update_component(updated, section_id, element_id, seed)
    return Instantiation(
        instance_id=instance_id,
        inspection_id=inspection_id,
        local_def=local_def,
        survey=updated,
    )


def rename_local_component(
    survey: Survey,
    section_id: str,
    element_id: str,
    def_id: str,
    new_name: str,
) -> Survey:
    """
    Rename a local component definition and the inspections made from it.

    Component ids and inspection ids are left untouched. A custom
    name_override is kept; one that merely mirrored the old name follows
    the rename. No-op when the element or definition is missing.
    """
    element_section = get_element_section(survey, section_id, element_id)
    if element_section is None or element_section.get_local_component_def(def_id) is None:
        return survey

    updated = copy.deepcopy(survey)
    element_section = get_element_section(updated, section_id, element_id)
    local_def = element_section.get_local_component_def(def_id)
    local_def.name = new_name
    local_def.updated_at = _now()

    for component in element_section.components:
        if component.local_def_id != def_id:
            continue
        if component.name_override == component.name:
            component.name_override = new_name
        component.name = new_name
    return updated
