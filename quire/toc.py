from __future__ import annotations

from typing import Iterable, Iterator, Sequence

from lxml import etree as LXML_ET

from .models import ContentItem

DEFAULT_TOC_LEVEL = 3
FLAT_INDENT = "　"


def toc_entries(items: Iterable[ContentItem], toclevel: int = DEFAULT_TOC_LEVEL) -> Iterator[ContentItem]:
    for item in items:
        if item.notoc or not item.title or item.level is None:
            continue
        if item.level < 1 or item.level > toclevel:
            continue
        yield item


def _serialize(node: LXML_ET._Element) -> str:
    return LXML_ET.tostring(node, encoding="unicode", pretty_print=True)


def _append_link(parent: LXML_ET._Element, item: ContentItem, text: str) -> LXML_ET._Element:
    li = LXML_ET.SubElement(parent, "li")
    link = LXML_ET.SubElement(li, "a", href=item.file)
    link.text = text
    return li


def hierarchy_toc(items: Sequence[ContentItem], toclevel: int = DEFAULT_TOC_LEVEL) -> str:
    """Nested ``<ol>`` following item levels.

    A jump of more than one level nests under the nearest shallower entry
    instead of inventing empty list items.
    """
    root = LXML_ET.Element("ol", {"class": "toc-h1"})
    stack: list[tuple[int, LXML_ET._Element]] = [(0, root)]
    for item in toc_entries(items, toclevel):
        while stack[-1][0] >= item.level:
            stack.pop()
        parent = stack[-1][1]
        if parent.tag == "li":
            nested = parent.find("ol")
            if nested is None:
                nested = LXML_ET.SubElement(parent, "ol", {"class": f"toc-h{item.level}"})
            parent = nested
        stack.append((item.level, _append_link(parent, item, item.title)))
    return _serialize(root)


def flat_toc(items: Sequence[ContentItem], toclevel: int = DEFAULT_TOC_LEVEL, indent: bool = True) -> str:
    root = LXML_ET.Element("ol", {"class": "toc-h1"})
    for item in toc_entries(items, toclevel):
        prefix = FLAT_INDENT * item.level if indent else ""
        _append_link(root, item, f"{prefix}{item.title}")
    return _serialize(root)
