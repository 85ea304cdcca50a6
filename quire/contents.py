from __future__ import annotations

import dataclasses
import logging
import re
from pathlib import Path, PurePosixPath
from typing import Iterable, Mapping, Optional

from lxml import etree as LXML_ET

from .errors import ValidationError
from .models import ContentItem

FRONT_MATTER = "pre"
XHTML_MEDIA_TYPE = "application/xhtml+xml"
XHTML_NS = "http://www.w3.org/1999/xhtml"
MATHML_NS = "http://www.w3.org/1998/Math/MathML"
SVG_NS = "http://www.w3.org/2000/svg"
SKIPPED_SUFFIXES = {".epub", ".opf"}

logger = logging.getLogger("quire.contents")


def guess_media_type(file_name: str, htmlext: str = "xhtml") -> str:
    suffix = PurePosixPath(file_name.split("#", 1)[0]).suffix.lower()
    if suffix in {f".{htmlext.lower()}", ".xhtml", ".html", ".htm"}:
        return XHTML_MEDIA_TYPE
    return {
        ".css": "text/css",
        ".jpg": "image/jpeg",
        ".jpeg": "image/jpeg",
        ".png": "image/png",
        ".gif": "image/gif",
        ".svg": "image/svg+xml",
        ".webp": "image/webp",
        ".ncx": "application/x-dtbncx+xml",
        ".js": "application/javascript",
        ".ttf": "font/ttf",
        ".otf": "font/otf",
        ".woff": "font/woff",
        ".woff2": "font/woff2",
        ".mp3": "audio/mpeg",
        ".mp4": "video/mp4",
    }.get(suffix, "application/octet-stream")


def is_xhtml(media: str) -> bool:
    return "xhtml+xml" in (media or "")


def content_id(file_name: str) -> str:
    return re.sub(r"[\\/. ]", "-", file_name)


def _parse_document(path: Path) -> Optional[LXML_ET._ElementTree]:
    parser = LXML_ET.XMLParser(resolve_entities=False, no_network=True, recover=False)
    try:
        return LXML_ET.parse(str(path), parser)
    except LXML_ET.XMLSyntaxError as exc:
        logger.warning("cannot inspect %s: %s", path, exc)
        return None


def detect_properties(path: Path) -> frozenset[str]:
    """Manifest properties implied by the markup of one XHTML file."""
    tree = _parse_document(path)
    if tree is None:
        return frozenset()
    properties: set[str] = set()
    if tree.find(f".//{{{MATHML_NS}}}math") is not None:
        properties.add("mathml")
    if tree.find(f".//{{{SVG_NS}}}svg") is not None:
        properties.add("svg")
    if tree.find(f".//{{{XHTML_NS}}}script") is not None or tree.find(".//script") is not None:
        properties.add("scripted")
    return frozenset(properties)


def extract_title(path: Path) -> Optional[str]:
    tree = _parse_document(path)
    if tree is None:
        return None
    for local_name in ("title", "h1", "h2"):
        for node in tree.iter(f"{{{XHTML_NS}}}{local_name}", local_name):
            text = "".join(node.itertext()).strip()
            if text:
                return text
    return None


def content_item_from_dict(data: Mapping[str, object], htmlext: str = "xhtml") -> ContentItem:
    file_name = str(data.get("file") or "").strip()
    if not file_name:
        raise ValidationError("content item is missing 'file'", field="contents")

    properties = data.get("properties") or []
    if isinstance(properties, str):
        properties = properties.split()
    if not isinstance(properties, (list, tuple, set, frozenset)):
        raise ValidationError(f"{file_name}: properties must be a list of strings", field="contents")

    level = data.get("level")
    if level is not None:
        try:
            level = int(level)
        except (TypeError, ValueError) as exc:
            raise ValidationError(f"{file_name}: level must be an integer", field="contents") from exc

    item_id = data.get("id")
    title = data.get("title")
    return ContentItem(
        file=file_name,
        media=str(data.get("media") or guess_media_type(file_name, htmlext)),
        id=str(item_id) if item_id not in {None, ""} else None,
        chaptype=str(data.get("chaptype") or "body"),
        properties=frozenset(str(prop) for prop in properties),
        title=str(title) if title is not None else None,
        level=level,
        notoc=bool(data.get("notoc", False)),
    )


def check_unique_ids(contents: Iterable[ContentItem]) -> None:
    seen: set[str] = set()
    for item in contents:
        if item.id is None or item.is_fragment:
            continue
        if item.id in seen:
            raise ValidationError(f"duplicate content id {item.id!r} ({item.file})", field="contents")
        seen.add(item.id)


def with_detected_properties(contents: Iterable[ContentItem], basedir: Path) -> list[ContentItem]:
    items: list[ContentItem] = []
    for item in contents:
        path = basedir / item.file
        if is_xhtml(item.media) and not item.is_fragment and path.is_file():
            detected = detect_properties(path)
            if not detected <= item.properties:
                item = dataclasses.replace(item, properties=item.properties | detected)
        items.append(item)
    return items


def with_stylesheets(contents: Iterable[ContentItem], stylesheets: Iterable[str], htmlext: str = "xhtml") -> list[ContentItem]:
    """Append an item for each linked stylesheet the content list does not carry."""
    items = list(contents)
    listed = {item.file for item in items}
    for sheet in stylesheets:
        if sheet in listed:
            continue
        items.append(ContentItem(file=sheet, media=guess_media_type(sheet, htmlext), id=content_id(sheet)))
        listed.add(sheet)
    return items


def scan_contents(basedir: Path, htmlext: str = "xhtml", exclude: Iterable[str] = ()) -> list[ContentItem]:
    """Build content items from every file under ``basedir``, in path order."""
    excluded = set(exclude)
    items: list[ContentItem] = []
    for path in sorted(p for p in basedir.rglob("*") if p.is_file()):
        relative = path.relative_to(basedir).as_posix()
        if relative in excluded or path.suffix.lower() in SKIPPED_SUFFIXES:
            continue
        if any(part.startswith(".") for part in PurePosixPath(relative).parts):
            continue
        media = guess_media_type(relative, htmlext)
        item = ContentItem(file=relative, media=media, id=content_id(relative))
        if is_xhtml(media):
            item = dataclasses.replace(
                item,
                properties=detect_properties(path),
                title=extract_title(path),
                level=1,
            )
        items.append(item)
    logger.debug("scanned %d content files under %s", len(items), basedir)
    return items
