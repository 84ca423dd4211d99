"""
Global catalog records as supplied by the catalog collaborator.

The catalog is shared by every survey. This package only reads it to build
pick-lists; it never writes to it.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

from surveydoc.model import Condition


@dataclass(frozen=True)
class CatalogComponent:
    id: str
    name: str
    element_id: str
    order: int = 0

    @classmethod
    def from_dict(cls, d: Mapping[str, Any]) -> CatalogComponent:
        return cls(
            id=str(d["id"]),
            name=str(d.get("name") or ""),
            element_id=str(d.get("elementId") or ""),
            order=int(d.get("order") or 0),
        )


@dataclass
class CatalogPhrase:
    """
    A catalog phrase. Only phrases of type "condition" are offered as
    conditions; `associated_component_ids` scopes which components they
    are offered for.
    """

    id: str
    name: str
    type: str = "condition"
    phrase: str = ""
    phrase_level2: Optional[str] = None
    doc: Optional[Dict[str, Any]] = None
    doc_level2: Optional[Dict[str, Any]] = None
    associated_component_ids: List[str] = field(default_factory=list)
    order: int = 0

    @property
    def is_condition(self) -> bool:
        return self.type.lower() == "condition"

    @classmethod
    def from_dict(cls, d: Mapping[str, Any]) -> CatalogPhrase:
        return cls(
            id=str(d["id"]),
            name=str(d.get("name") or ""),
            type=str(d.get("type") or "condition"),
            phrase=str(d.get("phrase") or ""),
            phrase_level2=d.get("phraseLevel2"),
            doc=d.get("phraseDoc"),
            doc_level2=d.get("phraseLevel2Doc"),
            associated_component_ids=list(d.get("associatedComponentIds") or []),
            order=int(d.get("order") or 0),
        )

    def to_condition(self) -> Condition:
        """Both level variants are carried; the level resolver picks one."""
        return Condition(
            id=self.id,
            name=self.name,
            phrase=self.phrase,
            phrase_level2=self.phrase_level2,
            doc=self.doc,
            doc_level2=self.doc_level2,
            associated_component_ids=list(self.associated_component_ids),
        )
