from __future__ import annotations

import logging
import os
from typing import Optional

FILE_SUFFIX = "_FILE"

logger = logging.getLogger("quire.env")


def read_env(name: str, default: Optional[str] = None) -> Optional[str]:
    """Return ``name`` from the environment, else the first line of ``<name>_FILE``.

    The file form lets a hook path or template directory be mounted as a
    secret. An unreadable file is logged and treated as unset.
    """
    value = os.environ.get(name, "").strip()
    if value:
        return value

    source = os.environ.get(name + FILE_SUFFIX, "").strip()
    if not source:
        return default
    try:
        with open(source, encoding="utf-8") as handle:
            value = handle.readline().strip()
    except OSError as exc:
        logger.warning("cannot read %s%s=%s: %s", name, FILE_SUFFIX, source, exc)
        return default
    return value or default
