"""
Status Engine: completion status for independently validated sub-documents.

Two paths:

    READ (hot path):
        compute_status(schema, data)
        If `data` carries a cached FormStatusMeta under `_meta`, it is
        returned as-is. Otherwise status is derived from the data and
        the schema. Cheap enough to run on every change.

    WRITE (save time):
        update_status(schema, data) / attach_status(schema, data)
        Always revalidates and stamps lastValidated/lastModified.
        Never called implicitly from a read.

Status progression: INCOMPLETE -> IN_PROGRESS -> COMPLETE.
ERROR and WARNING are overlays a caller applies (e.g. after a failed
save); validation never produces them.

Invalid data is never an exception here. Failures come back as
"<field-path>: <message>" strings in `errors`.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Iterable, List, Mapping, Optional, Type

from pydantic import BaseModel, TypeAdapter, ValidationError

logger = logging.getLogger(__name__)

META_KEY = "_meta"


class FormStatus(Enum):
    COMPLETE = "complete"
    INCOMPLETE = "incomplete"
    IN_PROGRESS = "in-progress"
    ERROR = "error"
    WARNING = "warning"
    UNKNOWN = "unknown"


_TIMESTAMP = TypeAdapter(datetime)


def _parse_timestamp(value: Any) -> Optional[datetime]:
    # Accepts the "Z" suffix on every supported Python version
    if value is None or isinstance(value, datetime):
        return value
    return _TIMESTAMP.validate_python(value)


@dataclass
class FormStatusMeta:
    """Cached validation outcome stored alongside a sub-document."""

    status: FormStatus
    is_valid: bool
    has_data: bool
    errors: List[str] = field(default_factory=list)
    last_validated: Optional[datetime] = None
    last_modified: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "status": self.status.value,
            "isValid": self.is_valid,
            "hasData": self.has_data,
            "errors": list(self.errors),
            "lastValidated": self.last_validated.isoformat() if self.last_validated else None,
            "lastModified": self.last_modified.isoformat() if self.last_modified else None,
        }

    @classmethod
    def from_dict(cls, d: Mapping[str, Any] | FormStatusMeta) -> FormStatusMeta:
        if isinstance(d, FormStatusMeta):
            return d
        return cls(
            status=FormStatus(d["status"]),
            is_valid=bool(d.get("isValid", False)),
            has_data=bool(d.get("hasData", False)),
            errors=list(d.get("errors") or []),
            last_validated=_parse_timestamp(d.get("lastValidated")),
            last_modified=_parse_timestamp(d.get("lastModified")),
        )


@dataclass
class StatusResult:
    status: FormStatus
    has_data: bool
    is_valid: bool
    errors: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "status": self.status.value,
            "hasData": self.has_data,
            "isValid": self.is_valid,
            "errors": list(self.errors),
        }


def has_data(value: Any) -> bool:
    """
    Whether a value holds anything a user entered.

    None, blank strings and empty containers are empty. Containers are
    empty when every member is empty. Any other scalar (including 0 and
    False) counts as data. The `_meta` key is ignored.
    """
    if value is None:
        return False
    if isinstance(value, str):
        return bool(value.strip())
    if isinstance(value, Mapping):
        return any(has_data(v) for k, v in value.items() if k != META_KEY)
    if isinstance(value, (list, tuple, set)):
        return any(has_data(v) for v in value)
    return True


def format_errors(exc: ValidationError) -> List[str]:
    errors = []
    for err in exc.errors():
        path = ".".join(str(part) for part in err.get("loc", ()))
        errors.append(f"{path}: {err['msg']}" if path else err["msg"])
    return errors


def _validate(schema: Type[BaseModel], data: Mapping[str, Any]) -> List[str]:
    try:
        schema.model_validate(data)
    except ValidationError as exc:
        return format_errors(exc)
    return []


def _cached_meta(data: Mapping[str, Any]) -> Optional[FormStatusMeta]:
    raw = data.get(META_KEY)
    if raw is None:
        return None
    try:
        return FormStatusMeta.from_dict(raw)
    except (KeyError, TypeError, ValueError) as exc:
        logger.warning("Ignoring unreadable status cache: %s", exc)
        return None


def _evaluate(schema: Type[BaseModel], data: Mapping[str, Any]) -> StatusResult:
    errors = _validate(schema, data)
    is_valid = not errors
    data_present = has_data(data)
    if not data_present:
        status = FormStatus.INCOMPLETE
    elif is_valid:
        status = FormStatus.COMPLETE
    else:
        status = FormStatus.IN_PROGRESS
    return StatusResult(status=status, has_data=data_present, is_valid=is_valid, errors=errors)


def compute_status(schema: Type[BaseModel], data: Optional[Mapping[str, Any]]) -> StatusResult:
    """
    Status of a sub-document for display.

    Args:
        schema: pydantic model describing a complete sub-document
        data: the sub-document, possibly carrying `_meta`

    Returns:
        StatusResult; the cached `_meta` fields verbatim when present
    """
    data = data or {}
    meta = _cached_meta(data)
    if meta is not None:
        logger.debug("Status cache hit for %s: %s", schema.__name__, meta.status.value)
        return StatusResult(
            status=meta.status,
            has_data=meta.has_data,
            is_valid=meta.is_valid,
            errors=list(meta.errors),
        )

    if not has_data(data):
        return StatusResult(status=FormStatus.INCOMPLETE, has_data=False, is_valid=False, errors=[])

    logger.debug("Recomputing status for %s", schema.__name__)
    return _evaluate(schema, data)


def update_status(
    schema: Type[BaseModel],
    data: Optional[Mapping[str, Any]],
    now: Optional[datetime] = None,
) -> FormStatusMeta:
    """Full validation for the save path. Ignores any existing cache."""
    data = data or {}
    result = _evaluate(schema, data)
    stamp = now or datetime.now(timezone.utc)
    return FormStatusMeta(
        status=result.status,
        is_valid=result.is_valid,
        has_data=result.has_data,
        errors=result.errors,
        last_validated=stamp,
        last_modified=stamp,
    )


def attach_status(
    schema: Type[BaseModel],
    data: Optional[Mapping[str, Any]],
    now: Optional[datetime] = None,
) -> Dict[str, Any]:
    """Copy of `data` with a freshly computed `_meta`."""
    stamped = dict(data or {})
    stamped.pop(META_KEY, None)
    stamped[META_KEY] = update_status(schema, stamped, now=now).to_dict()
    return stamped


def overlay_status(
    result: StatusResult,
    flag: FormStatus,
    errors: Iterable[str] = (),
) -> StatusResult:
    """
    Apply an ERROR or WARNING flag reported by a caller.

    Raises:
        ValueError: if `flag` is a progress status rather than a flag
    """
    if flag not in (FormStatus.ERROR, FormStatus.WARNING):
        raise ValueError(f"Only ERROR or WARNING can be overlaid, got {flag.value}")
    return replace(result, status=flag, errors=list(result.errors) + list(errors))
