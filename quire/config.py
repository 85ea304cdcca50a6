from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping, Optional

from .contents import content_item_from_dict
from .env import read_env
from .errors import ValidationError
from .metadata import metadata_from_dict
from .models import BookMetadata, ContentItem
from .roles import validate_roles

HOOK_PREPACK_ENV = "QUIRE_HOOK_PREPACK"
DEFAULT_HTMLEXT = "xhtml"
DEFAULT_LANGUAGE = "en"
DEFAULT_TOC_LEVEL = 3
DEFAULT_TOC_TITLE = "Table of Contents"
DIRECTIONS = {"ltr", "rtl", "default"}

KNOWN_KEYS = {
    "bookname",
    "htmlext",
    "language",
    "cover",
    "coverimage",
    "toc",
    "toclevel",
    "toctitle",
    "flattoc",
    "flattocindent",
    "direction",
    "cover_linear",
    "hook_prepack",
    "opf_prefix",
    "opf_meta",
    "stylesheet",
    "isbn",
    "urnid",
    "metadata",
    "roles",
    "contents",
}


@dataclass(frozen=True)
class BookConfig:
    bookname: str
    metadata: BookMetadata = field(default_factory=BookMetadata)
    htmlext: str = DEFAULT_HTMLEXT
    language: str = DEFAULT_LANGUAGE
    cover: Optional[str] = None
    coverimage: Optional[str] = None
    toc: bool = False
    toclevel: int = DEFAULT_TOC_LEVEL
    toctitle: str = DEFAULT_TOC_TITLE
    flattoc: bool = False
    flattocindent: bool = True
    direction: Optional[str] = None
    cover_linear: bool = False
    hook_prepack: Optional[str] = None
    opf_prefix: dict[str, str] = field(default_factory=dict)
    stylesheets: tuple[str, ...] = ()
    contents: Optional[tuple[ContentItem, ...]] = None

    @property
    def cover_file(self) -> str:
        return self.cover or f"{self.bookname}.{self.htmlext}"

    @property
    def nav_file(self) -> str:
        return f"{self.bookname}-toc.{self.htmlext}"

    @property
    def opf_file(self) -> str:
        return f"{self.bookname}.opf"


def _flag(key: str, value: object, default: bool) -> bool:
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.strip().lower() in {"yes", "true", "on", "1"}:
        return True
    if isinstance(value, str) and value.strip().lower() in {"no", "false", "off", "0", ""}:
        return False
    raise ValidationError(f"{key} must be a boolean or yes/no", field=key)


def _optional_str(key: str, value: object) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, (dict, list)):
        raise ValidationError(f"{key} must be a string", field=key)
    text = str(value).strip()
    return text or None


def _string_map(key: str, value: object) -> dict[str, str]:
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise ValidationError(f"{key} must be an object", field=key)
    return {str(k): str(v) for k, v in value.items()}


def parse_config(data: Mapping[str, object]) -> BookConfig:
    if not isinstance(data, Mapping):
        raise ValidationError("book config must be an object")
    unknown = sorted(set(data) - KNOWN_KEYS)
    if unknown:
        raise ValidationError(f"unknown config keys: {', '.join(unknown)}", field=unknown[0])

    bookname = _optional_str("bookname", data.get("bookname"))
    if not bookname:
        raise ValidationError("bookname is required", field="bookname")
    htmlext = (_optional_str("htmlext", data.get("htmlext")) or DEFAULT_HTMLEXT).lstrip(".")
    language = _optional_str("language", data.get("language")) or DEFAULT_LANGUAGE

    direction = _optional_str("direction", data.get("direction"))
    if direction is not None and direction not in DIRECTIONS:
        raise ValidationError(f"direction must be one of {sorted(DIRECTIONS)}", field="direction")

    raw_toclevel = data.get("toclevel")
    if raw_toclevel is None:
        toclevel = DEFAULT_TOC_LEVEL
    else:
        try:
            if isinstance(raw_toclevel, bool):
                raise TypeError(raw_toclevel)
            toclevel = int(raw_toclevel)
        except (TypeError, ValueError) as exc:
            raise ValidationError("toclevel must be an integer", field="toclevel") from exc
        if toclevel < 1:
            raise ValidationError("toclevel must be at least 1", field="toclevel")

    stylesheet = data.get("stylesheet") or []
    if isinstance(stylesheet, str):
        stylesheet = [stylesheet]
    if not isinstance(stylesheet, list) or not all(isinstance(s, str) for s in stylesheet):
        raise ValidationError("stylesheet must be a string or a list of strings", field="stylesheet")

    fields = data.get("metadata") or {}
    roles = data.get("roles") or {}
    if not isinstance(fields, Mapping):
        raise ValidationError("metadata must be an object", field="metadata")
    if not isinstance(roles, Mapping):
        raise ValidationError("roles must be an object", field="roles")
    validate_roles(str(role) for role in roles)
    fields = dict(fields)
    fields.setdefault("title", bookname)
    fields.setdefault("language", language)
    metadata = metadata_from_dict(
        fields,
        roles,
        isbn=_optional_str("isbn", data.get("isbn")),
        urnid=_optional_str("urnid", data.get("urnid")),
        extra_meta=_string_map("opf_meta", data.get("opf_meta")),
    )

    contents: Optional[tuple[ContentItem, ...]] = None
    raw_contents = data.get("contents")
    if raw_contents is not None:
        if not isinstance(raw_contents, list) or not all(isinstance(item, Mapping) for item in raw_contents):
            raise ValidationError("contents must be a list of objects", field="contents")
        contents = tuple(content_item_from_dict(item, htmlext) for item in raw_contents)

    return BookConfig(
        bookname=bookname,
        metadata=metadata,
        htmlext=htmlext,
        language=language,
        cover=_optional_str("cover", data.get("cover")),
        coverimage=_optional_str("coverimage", data.get("coverimage")),
        toc=_flag("toc", data.get("toc"), False),
        toclevel=toclevel,
        toctitle=_optional_str("toctitle", data.get("toctitle")) or DEFAULT_TOC_TITLE,
        flattoc=_flag("flattoc", data.get("flattoc"), False),
        flattocindent=_flag("flattocindent", data.get("flattocindent"), True),
        direction=direction,
        cover_linear=_flag("cover_linear", data.get("cover_linear"), False),
        hook_prepack=read_env(HOOK_PREPACK_ENV) or _optional_str("hook_prepack", data.get("hook_prepack")),
        opf_prefix=_string_map("opf_prefix", data.get("opf_prefix")),
        stylesheets=tuple(stylesheet),
        contents=contents,
    )


def load_config(path: Path) -> BookConfig:
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ValidationError(f"{path}: JSON parse failed: {exc}") from exc
    return parse_config(data)
