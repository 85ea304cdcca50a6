from __future__ import annotations

import datetime as dt
import logging
from dataclasses import dataclass
from pathlib import PurePosixPath
from typing import Iterable, Optional, Sequence

from .config import BookConfig
from .contents import check_unique_ids
from .metadata import first_text, resolve_identifier
from .models import BookMetadata, ContentItem
from .roles import validate_roles

logger = logging.getLogger("quire.context")


@dataclass(frozen=True)
class ProductionContext:
    """Everything one production run reads; built once, never mutated."""

    config: BookConfig
    contents: tuple[ContentItem, ...]
    modified: str
    identifier: str
    cover_index: Optional[int] = None

    @property
    def metadata(self) -> BookMetadata:
        return self.config.metadata

    @property
    def language(self) -> str:
        return first_text(self.metadata, "language") or self.config.language

    @property
    def title(self) -> str:
        return first_text(self.metadata, "title") or self.config.bookname

    @property
    def cover_item(self) -> Optional[ContentItem]:
        if self.cover_index is None:
            return None
        return self.contents[self.cover_index]


def utc_timestamp(now: Optional[dt.datetime] = None) -> str:
    now = now or dt.datetime.now(dt.timezone.utc)
    return now.astimezone(dt.timezone.utc).replace(microsecond=0).isoformat().replace("+00:00", "Z")


def select_cover_item(contents: Sequence[ContentItem], coverimage: Optional[str]) -> Optional[int]:
    if not coverimage:
        return None
    for index, item in enumerate(contents):
        if item.media.startswith("image") and PurePosixPath(item.file).name == coverimage:
            return index
    logger.warning("cover image %r not found among content items", coverimage)
    return None


def build_context(
    config: BookConfig,
    contents: Iterable[ContentItem],
    modified: Optional[str] = None,
) -> ProductionContext:
    items = tuple(contents)
    validate_roles(config.metadata.roles)
    check_unique_ids(items)
    return ProductionContext(
        config=config,
        contents=items,
        modified=modified or utc_timestamp(),
        identifier=resolve_identifier(config.metadata, config.bookname),
        cover_index=select_cover_item(items, config.coverimage),
    )
