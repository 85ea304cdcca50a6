from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Union


@dataclass(frozen=True)
class Entry:
    name: str
    extras: tuple[tuple[str, str], ...] = ()


@dataclass(frozen=True)
class Scalar:
    value: str


@dataclass(frozen=True)
class Record:
    entry: Entry


@dataclass(frozen=True)
class EntryList:
    items: tuple[Union[Scalar, Record], ...] = ()


MetaValue = Union[Scalar, EntryList, Record]
RoleEntry = Union[Scalar, Record]


@dataclass(frozen=True)
class BookMetadata:
    fields: dict[str, MetaValue] = field(default_factory=dict)
    roles: dict[str, tuple[RoleEntry, ...]] = field(default_factory=dict)
    isbn: Optional[str] = None
    urnid: Optional[str] = None
    extra_meta: tuple[tuple[str, str], ...] = ()


@dataclass(frozen=True)
class ContentItem:
    file: str
    media: str
    id: Optional[str] = None
    chaptype: str = "body"
    properties: frozenset[str] = frozenset()
    title: Optional[str] = None
    level: Optional[int] = None
    notoc: bool = False

    @property
    def is_fragment(self) -> bool:
        return "#" in self.file


@dataclass(frozen=True)
class MetaElement:
    """One child of the package ``<metadata>`` block."""

    tag: str
    text: str
    id: Optional[str] = None
    refines: Optional[str] = None
    property: Optional[str] = None
    scheme: Optional[str] = None


@dataclass(frozen=True)
class ManifestItem:
    id: str
    href: str
    media_type: str
    properties: str = ""


@dataclass(frozen=True)
class SpineRef:
    idref: str
    linear: Optional[str] = None
