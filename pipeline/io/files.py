from __future__ import annotations

import hashlib
import os
import shutil
from pathlib import Path


def ensure_dir(path: Path) -> None:
    path.mkdir(parents=True, exist_ok=True)


def sha256_of_path(path: Path) -> str:
    h = hashlib.sha256()
    with path.open("rb") as f:
        for chunk in iter(lambda: f.read(8192), b""):
            h.update(chunk)
    return h.hexdigest()


def copy_atomic(src: Path, dst: Path) -> Path:
    """Copy ``src`` to ``dst`` byte-for-byte so readers never see a partial file.

    The bytes land in a sibling temp file first and are renamed into place;
    on any error the temp file is removed and the exception propagates.
    """
    ensure_dir(dst.parent)
    tmp = dst.with_name(f".{dst.name}.tmp.{os.getpid()}")
    try:
        shutil.copyfile(src, tmp)
        tmp.replace(dst)
    except BaseException:
        tmp.unlink(missing_ok=True)
        raise
    return dst
