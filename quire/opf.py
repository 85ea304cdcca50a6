from __future__ import annotations

from typing import Mapping

from .contents import FRONT_MATTER, XHTML_MEDIA_TYPE, is_xhtml
from .context import ProductionContext
from .metadata import bibliographic_elements, custom_meta_elements
from .models import ManifestItem, MetaElement, SpineRef
from .roles import role_elements
from .templates import render_epub_template

NAV_PROPERTY = "nav"
COVER_IMAGE_PROPERTY = "cover-image"


def prefix_attribute(prefixes: Mapping[str, str]) -> str:
    return " ".join(f"{key}: {value}" for key, value in prefixes.items())


def metadata_block(ctx: ProductionContext) -> list[MetaElement]:
    meta = ctx.metadata
    return [
        *bibliographic_elements(meta, ctx.modified, ctx.identifier),
        *role_elements(meta.roles),
        *custom_meta_elements(meta),
    ]


def manifest_items(ctx: ProductionContext) -> list[ManifestItem]:
    config = ctx.config
    items = [
        ManifestItem(config.nav_file, config.nav_file, XHTML_MEDIA_TYPE, NAV_PROPERTY),
        ManifestItem(config.bookname, config.cover_file, XHTML_MEDIA_TYPE),
    ]

    cover = ctx.cover_item
    if cover is not None:
        cover_id = f"cover-{cover.id}" if cover.id else "cover-image"
        items.append(ManifestItem(cover_id, cover.file, cover.media, COVER_IMAGE_PROPERTY))

    for index, item in enumerate(ctx.contents):
        # Fragment entries share their file with a listed item.
        if index == ctx.cover_index or item.id is None or item.is_fragment:
            continue
        items.append(ManifestItem(item.id, item.file, item.media, " ".join(sorted(item.properties))))
    return items


def spine_refs(ctx: ProductionContext) -> list[SpineRef]:
    config = ctx.config
    refs = [SpineRef(config.bookname, linear="yes" if config.cover_linear else "no")]

    toc_placed = False
    for item in ctx.contents:
        if not is_xhtml(item.media) or item.id is None or item.is_fragment:
            continue
        if not toc_placed and item.chaptype != FRONT_MATTER:
            if config.toc:
                refs.append(SpineRef(config.nav_file))
            toc_placed = True
        refs.append(SpineRef(item.id))
    return refs


def build_package_document(ctx: ProductionContext) -> str:
    return render_epub_template(
        "package.opf.j2",
        language=ctx.language,
        prefix=prefix_attribute(ctx.config.opf_prefix),
        metadata=metadata_block(ctx),
        manifest=manifest_items(ctx),
        spine=spine_refs(ctx),
        direction=ctx.config.direction,
    )
