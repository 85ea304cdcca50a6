from __future__ import annotations

from functools import partial
from typing import Callable, Optional, Sequence

from .config import BookConfig
from .context import ProductionContext
from .models import ContentItem
from .templates import render_epub_template
from .toc import flat_toc, hierarchy_toc

TocStrategy = Callable[[Sequence[ContentItem]], str]


def select_toc_strategy(config: BookConfig) -> TocStrategy:
    if config.flattoc:
        return partial(flat_toc, toclevel=config.toclevel, indent=config.flattocindent)
    return partial(hierarchy_toc, toclevel=config.toclevel)


def build_nav_document(ctx: ProductionContext, strategy: Optional[TocStrategy] = None) -> str:
    strategy = strategy or select_toc_strategy(ctx.config)
    return render_epub_template(
        "nav.xhtml.j2",
        title=ctx.config.toctitle,
        language=ctx.language,
        stylesheets=ctx.config.stylesheets,
        toc=strategy(ctx.contents),
    )


def build_cover_page(ctx: ProductionContext) -> str:
    cover = ctx.cover_item
    return render_epub_template(
        "cover.xhtml.j2",
        title=ctx.title,
        language=ctx.language,
        stylesheets=ctx.config.stylesheets,
        image_href=cover.file if cover is not None else None,
    )
