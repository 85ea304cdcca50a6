from __future__ import annotations

import logging
import os
import shutil
import subprocess
import tempfile
import zipfile
from pathlib import Path
from typing import Optional

from .errors import HookError

MIMETYPE_NAME = "mimetype"
EPUB_MIMETYPE = b"application/epub+zip"

logger = logging.getLogger("quire.packaging")


def call_hook(hook: Optional[str], staging_dir: Path) -> None:
    """Run the pre-pack hook once with the staging directory as its argument."""
    if not hook:
        return
    executable = shutil.which(hook)
    if executable is None:
        raise HookError(f"pre-pack hook is missing or not executable: {hook}")

    logger.info("running pre-pack hook %s %s", executable, staging_dir)
    result = subprocess.run(
        [executable, str(staging_dir)],
        capture_output=True,
        text=True,
        check=False,
    )
    if result.returncode != 0:
        detail = (result.stderr or result.stdout or "").strip()
        raise HookError(
            f"pre-pack hook {hook} exited with status {result.returncode}: {detail}",
            returncode=result.returncode,
        )


def archive_members(staging_dir: Path) -> list[tuple[str, Path]]:
    members: list[tuple[str, Path]] = []
    for root, dirs, files in os.walk(staging_dir):
        dirs.sort()
        for name in sorted(files):
            path = Path(root) / name
            member = path.relative_to(staging_dir).as_posix()
            if member == MIMETYPE_NAME:
                continue
            members.append((member, path))
    return members


def export_zip(staging_dir: Path, epub_file: Path) -> Path:
    """Archive ``staging_dir`` into ``epub_file``, replacing it in one step."""
    epub_file.parent.mkdir(parents=True, exist_ok=True)
    tmp_handle = tempfile.NamedTemporaryFile(
        prefix=f".{epub_file.stem}.",
        suffix=".epub.tmp",
        dir=str(epub_file.parent),
        delete=False,
    )
    tmp_path = Path(tmp_handle.name)
    tmp_handle.close()

    try:
        with zipfile.ZipFile(tmp_path, "w", compression=zipfile.ZIP_DEFLATED) as zf:
            # OCF: mimetype must be the first entry and stored uncompressed.
            zf.writestr(MIMETYPE_NAME, EPUB_MIMETYPE, compress_type=zipfile.ZIP_STORED)
            for member, path in archive_members(staging_dir):
                zf.write(path, member)
        tmp_path.replace(epub_file)
    finally:
        if tmp_path.exists():
            tmp_path.unlink(missing_ok=True)
    logger.info("wrote %s", epub_file)
    return epub_file
