"""
Field resolution: audit capability, primary key access and translation
between records and raw documents.
"""

from datetime import datetime, timezone
from typing import Any, Iterable, Mapping, Optional, Protocol, Type, TypeVar, runtime_checkable
from pydantic import BaseModel

M = TypeVar("M", bound=BaseModel)

DEFAULT_PK_FIELD = "id"
DEFAULT_PK_TAG = "_id"


@runtime_checkable
class Auditable(Protocol):
    """Capability of records that track identity and audit timestamps."""

    def set_id(self, id: Any) -> None: ...

    def set_created_at(self, t: datetime) -> None: ...

    def set_updated_at(self, t: datetime) -> None: ...

    def set_deleted_at(self, t: Optional[datetime]) -> None: ...


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def resolve_audit(record: Any) -> Optional[Auditable]:
    """Return the record's audit capability, None if it opted out."""
    if isinstance(record, Auditable):
        return record
    return None


def ensure_initialized(record: Optional[M], model: Type[M]) -> M:
    """Return record, or a default-constructed model when it is None."""
    if record is None:
        return model()
    return record


def track_timer(record: Any, is_new: bool, now: Optional[datetime] = None) -> None:
    """Stamp created_at (new records only) and updated_at on auditable records."""
    audit = resolve_audit(record)
    if audit is None:
        return
    now = now or utc_now()
    if is_new:
        audit.set_created_at(now)
    audit.set_updated_at(now)


def get_pk_value(record: Any, field: str = DEFAULT_PK_FIELD) -> Any:
    return getattr(record, field, None)


def set_pk_value(record: Any, value: Any, field: str = DEFAULT_PK_FIELD) -> None:
    """Propagate a store assigned identity back onto the record."""
    audit = resolve_audit(record)
    if audit is not None and field == DEFAULT_PK_FIELD:
        audit.set_id(value)
        return
    if isinstance(record, BaseModel) and field in type(record).model_fields:
        setattr(record, field, value)


def to_document(record: Any, exclude: Iterable[str] = ()) -> dict:
    """
    Translate a record into a raw document.

    Models are dumped by alias with None values left out, so unset audit
    fields and an unassigned _id never reach the store. Mappings are copied.
    """
    if isinstance(record, BaseModel):
        document = record.model_dump(by_alias=True, exclude_none=True)
    elif isinstance(record, Mapping):
        document = dict(record)
    else:
        raise TypeError(f"Cannot convert {type(record).__name__} to a document")
    for key in exclude:
        document.pop(key, None)
    return document


def from_document(model: Type[M], document: Mapping[str, Any], into: Optional[M] = None) -> M:
    """Validate a raw document into model; copy onto `into` in place when given."""
    decoded = model.model_validate(document)
    if into is None:
        return decoded
    for name in type(into).model_fields:
        if name in type(decoded).model_fields:
            setattr(into, name, getattr(decoded, name))
    return into
