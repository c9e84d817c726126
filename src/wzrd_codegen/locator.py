"""Rule file discovery."""

from __future__ import annotations

import fnmatch
import logging
import os
from pathlib import Path
from typing import Iterable

from wzrd_codegen.errors import FileSystemError

logger = logging.getLogger(__name__)

RULE_SUFFIX = ".wzrd"
DEFAULT_PATTERN = f"*{RULE_SUFFIX}"
DEFAULT_EXCLUDE_DIRS = (".git", "__pycache__")


def find_rule_files(
    root: Path | str,
    pattern: str = DEFAULT_PATTERN,
    *,
    sort: bool = True,
    exclude_dirs: Iterable[str] = DEFAULT_EXCLUDE_DIRS,
) -> list[Path]:
    """Return regular files under ``root`` whose filename matches ``pattern``.

    Without ``sort`` the order is whatever the filesystem walk yields. Any I/O
    error during traversal raises :class:`FileSystemError`.
    """

    root_path = Path(root)
    if not root_path.exists():
        raise FileSystemError(path=str(root_path), reason="scan root does not exist")
    if not root_path.is_dir():
        raise FileSystemError(path=str(root_path), reason="scan root is not a directory")

    excluded = set(exclude_dirs)

    def _on_error(exc: OSError) -> None:
        raise FileSystemError(
            path=str(exc.filename or root_path),
            reason=exc.strerror or str(exc),
            cause=exc,
        )

    found: list[Path] = []
    for dirpath, dirnames, filenames in os.walk(root_path, onerror=_on_error):
        dirnames[:] = [name for name in dirnames if name not in excluded]
        for filename in filenames:
            if not fnmatch.fnmatchcase(filename, pattern):
                continue
            candidate = Path(dirpath) / filename
            if candidate.is_file():
                found.append(candidate)

    if sort:
        found.sort(key=lambda p: p.relative_to(root_path).as_posix())
    logger.info(f"Found {len(found)} rule files under {root_path}")
    return found
