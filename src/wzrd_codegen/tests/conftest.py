from __future__ import annotations

from pathlib import Path
from typing import Callable

import pytest


@pytest.fixture
def write_rule(tmp_path: Path) -> Callable[..., Path]:
    """Write ``<name>.wzrd`` under ``tmp_path`` (or a subdirectory) and return its path."""

    def _write(name: str, body: str, *, subdir: str | None = None) -> Path:
        base = tmp_path / subdir if subdir else tmp_path
        base.mkdir(parents=True, exist_ok=True)
        path = base / f"{name}.wzrd"
        path.write_text(body, encoding="utf-8")
        return path

    return _write
