"""
Identifier namespaces for components and conditions.

A component or condition id comes from one of several namespaces:

    - CATALOG:              global catalog entries (no prefix)
    - LOCAL_COMPONENT_DEF:  survey-scoped component templates ("localdef_")
    - LOCAL_CONDITION_DEF:  survey-scoped condition templates ("localcond_")
    - LOCAL_INSTANCE:       components instantiated from local defs ("local_")
    - AD_HOC:               one-off conditions typed into an inspection ("adhoc_")

Ids are parsed once at the boundary into a ParsedId and callers branch on
`kind`. Looking an id up in the catalog is not a substitute: a local
instance id is correctly absent from the catalog.

Fresh ids are always minted here, so a minted id cannot land in another
namespace.
"""

from dataclasses import dataclass
from enum import Enum
from uuid import uuid4


class InvalidIdentifierError(ValueError):
    """Raised when an id cannot be parsed."""
    pass


class IdKind(Enum):
    CATALOG = "catalog"
    LOCAL_COMPONENT_DEF = "local_component_def"
    LOCAL_CONDITION_DEF = "local_condition_def"
    LOCAL_INSTANCE = "local_instance"
    AD_HOC = "ad_hoc"


# Checked in order. "local_" is not a prefix of "localdef_" or
# "localcond_", so the order only matters for readability.
ID_PREFIXES = {
    IdKind.LOCAL_COMPONENT_DEF: "localdef_",
    IdKind.LOCAL_CONDITION_DEF: "localcond_",
    IdKind.LOCAL_INSTANCE: "local_",
    IdKind.AD_HOC: "adhoc_",
}


@dataclass(frozen=True)
class ParsedId:
    kind: IdKind
    value: str

    @property
    def is_local(self) -> bool:
        """True for anything that only exists inside one survey."""
        return self.kind is not IdKind.CATALOG

    def __str__(self) -> str:
        return self.value


def parse_id(raw) -> ParsedId:
    """
    Classify a raw id string.

    Args:
        raw: id string, or an already parsed id

    Returns:
        ParsedId

    Raises:
        InvalidIdentifierError: if the id is empty or not a string
    """
    if isinstance(raw, ParsedId):
        return raw
    if not isinstance(raw, str) or not raw.strip():
        raise InvalidIdentifierError(f"Invalid identifier: {raw!r}")
    for kind, prefix in ID_PREFIXES.items():
        if raw.startswith(prefix):
            return ParsedId(kind=kind, value=raw)
    return ParsedId(kind=IdKind.CATALOG, value=raw)


def id_kind(raw) -> IdKind:
    return parse_id(raw).kind


def _mint(kind: IdKind) -> str:
    return f"{ID_PREFIXES[kind]}{uuid4()}"


def mint_component_def_id() -> str:
    return _mint(IdKind.LOCAL_COMPONENT_DEF)


def mint_condition_def_id() -> str:
    return _mint(IdKind.LOCAL_CONDITION_DEF)


def mint_instance_id() -> str:
    return _mint(IdKind.LOCAL_INSTANCE)


def mint_ad_hoc_id() -> str:
    return _mint(IdKind.AD_HOC)


def mint_inspection_id() -> str:
    """Inspection ids are a separate identity, not a component namespace."""
    return str(uuid4())
