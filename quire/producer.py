from __future__ import annotations

import logging
import shutil
import tempfile
from pathlib import Path
from typing import Iterable, Optional

from .config import BookConfig
from .contents import scan_contents, with_detected_properties, with_stylesheets
from .context import ProductionContext
from .models import ContentItem
from .nav import TocStrategy, build_cover_page, build_nav_document
from .opf import build_package_document
from .packaging import EPUB_MIMETYPE, MIMETYPE_NAME, call_hook, export_zip
from .templates import render_epub_template

OEBPS_DIR = "OEBPS"

logger = logging.getLogger("quire.producer")


def collect_contents(config: BookConfig, basedir: Path, exclude: Iterable[str] = ()) -> list[ContentItem]:
    if config.contents is not None:
        contents = with_detected_properties(config.contents, basedir)
    else:
        generated = {config.cover_file, config.nav_file, config.opf_file, *exclude}
        contents = scan_contents(basedir, config.htmlext, exclude=generated)
    return with_stylesheets(contents, config.stylesheets, config.htmlext)


def _write_text(path: Path, text: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")


def stage(ctx: ProductionContext, basedir: Path, staging_dir: Path, toc_strategy: Optional[TocStrategy] = None) -> None:
    config = ctx.config
    oebps = staging_dir / OEBPS_DIR

    (staging_dir / MIMETYPE_NAME).write_bytes(EPUB_MIMETYPE)
    _write_text(
        staging_dir / "META-INF" / "container.xml",
        render_epub_template("container.xml.j2", opf_path=f"{OEBPS_DIR}/{config.opf_file}"),
    )
    _write_text(oebps / config.opf_file, build_package_document(ctx))
    _write_text(oebps / config.nav_file, build_nav_document(ctx, toc_strategy))

    cover_source = basedir / config.cover_file
    if cover_source.is_file():
        shutil.copyfile(cover_source, oebps / config.cover_file)
    else:
        _write_text(oebps / config.cover_file, build_cover_page(ctx))

    copied: set[str] = set()
    for item in ctx.contents:
        if item.is_fragment or item.file in copied:
            continue
        target = oebps / item.file
        target.parent.mkdir(parents=True, exist_ok=True)
        shutil.copyfile(basedir / item.file, target)
        copied.add(item.file)
    logger.debug("staged %d content files into %s", len(copied), staging_dir)


def produce(
    ctx: ProductionContext,
    basedir: Path,
    epub_file: Path,
    toc_strategy: Optional[TocStrategy] = None,
) -> Path:
    """Stage all documents, run the pre-pack hook, then package ``epub_file``.

    Any failure leaves ``epub_file`` as it was before the call.
    """
    with tempfile.TemporaryDirectory(prefix="quire-") as tmp:
        staging_dir = Path(tmp)
        stage(ctx, basedir, staging_dir, toc_strategy)
        call_hook(ctx.config.hook_prepack, staging_dir)
        return export_zip(staging_dir, epub_file)
