from __future__ import annotations

import uuid
from typing import Iterable, Mapping, Optional, Union

from .errors import ValidationError
from .models import BookMetadata, Entry, EntryList, MetaElement, MetaValue, Record, RoleEntry, Scalar

BIBLIOGRAPHIC_FIELDS = (
    "title",
    "language",
    "date",
    "type",
    "format",
    "source",
    "description",
    "relation",
    "coverage",
    "subject",
    "rights",
)
IDENTIFIER_ID = "BookId"
MODIFIED_PROPERTY = "dcterms:modified"


def _text(field: str, value: object) -> str:
    if value is None or isinstance(value, (dict, list, tuple)):
        raise ValidationError(f"{field}: expected a plain value, got {type(value).__name__}", field=field)
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def coerce_entry(field: str, raw: object) -> RoleEntry:
    if isinstance(raw, Mapping):
        if "name" not in raw:
            raise ValidationError(f"{field}: keyed record is missing required 'name'", field=field)
        extras = tuple((str(key), _text(f"{field}.{key}", value)) for key, value in raw.items() if key != "name")
        return Record(Entry(name=_text(field, raw["name"]), extras=extras))
    return Scalar(_text(field, raw))


def coerce_value(field: str, raw: object) -> MetaValue:
    if isinstance(raw, (list, tuple)):
        return EntryList(tuple(coerce_entry(f"{field}-{index}", item) for index, item in enumerate(raw)))
    if isinstance(raw, Mapping):
        return Record(coerce_entry(field, raw).entry)
    return Scalar(_text(field, raw))


def coerce_role_entries(role: str, raw: object) -> tuple[RoleEntry, ...]:
    if not isinstance(raw, (list, tuple)):
        raise ValidationError(f"{role}: role entries must be a list", field=role)
    return tuple(coerce_entry(f"{role}-{index}", item) for index, item in enumerate(raw))


def metadata_from_dict(
    fields: Mapping[str, object],
    roles: Optional[Mapping[str, object]] = None,
    *,
    isbn: Optional[str] = None,
    urnid: Optional[str] = None,
    extra_meta: Optional[Mapping[str, object]] = None,
) -> BookMetadata:
    normalized: dict[str, MetaValue] = {}
    for name, raw in fields.items():
        if name not in BIBLIOGRAPHIC_FIELDS:
            raise ValidationError(f"unknown metadata field: {name!r}", field=name)
        if raw is None:
            continue
        normalized[name] = coerce_value(name, raw)

    role_entries = {str(role): coerce_role_entries(str(role), raw) for role, raw in (roles or {}).items()}
    extras = tuple((str(key), _text(str(key), value)) for key, value in (extra_meta or {}).items())
    return BookMetadata(
        fields=normalized,
        roles=role_entries,
        isbn=str(isbn) if isbn else None,
        urnid=str(urnid) if urnid else None,
        extra_meta=extras,
    )


def entry_parts(entry: Union[Scalar, Record]) -> tuple[str, tuple[tuple[str, str], ...]]:
    if isinstance(entry, Record):
        return entry.entry.name, entry.entry.extras
    return entry.value, ()


def refining_elements(element_id: str, extras: Iterable[tuple[str, str]]) -> list[MetaElement]:
    return [MetaElement("meta", value, refines=f"#{element_id}", property=key) for key, value in extras]


def _field_elements(tag: str, element_id: str, value: Union[Scalar, Record]) -> list[MetaElement]:
    text, extras = entry_parts(value)
    return [MetaElement(tag, text, id=element_id), *refining_elements(element_id, extras)]


def first_text(meta: BookMetadata, field: str) -> Optional[str]:
    value = meta.fields.get(field)
    if value is None:
        return None
    if isinstance(value, EntryList):
        if not value.items:
            return None
        value = value.items[0]
    return entry_parts(value)[0]


def resolve_identifier(meta: BookMetadata, bookname: str) -> str:
    if meta.isbn:
        return meta.isbn
    if meta.urnid:
        return meta.urnid
    # Name-based so repeated runs of the same book keep one identifier.
    seed = f"{bookname}:{first_text(meta, 'title') or ''}"
    return f"urn:uuid:{uuid.uuid5(uuid.NAMESPACE_URL, seed)}"


def bibliographic_elements(meta: BookMetadata, modified: str, identifier: str) -> list[MetaElement]:
    elements: list[MetaElement] = []
    for field in BIBLIOGRAPHIC_FIELDS:
        value = meta.fields.get(field)
        if value is None:
            continue
        tag = f"dc:{field}"
        if isinstance(value, EntryList):
            for index, entry in enumerate(value.items):
                elements.extend(_field_elements(tag, f"{field}-{index}", entry))
        else:
            elements.extend(_field_elements(tag, field, value))

    elements.append(MetaElement("meta", modified, property=MODIFIED_PROPERTY))
    elements.append(MetaElement("dc:identifier", identifier, id=IDENTIFIER_ID))
    return elements


def custom_meta_elements(meta: BookMetadata) -> list[MetaElement]:
    return [MetaElement("meta", value, property=key) for key, value in meta.extra_meta]
