"""
Put `src` on sys.path so tests (and the facades they generate) import
`wzrd_codegen` from the working tree without an install.
"""
from __future__ import annotations

import sys
from pathlib import Path

SRC = Path(__file__).parent.resolve() / "src"
if SRC.exists() and str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))
