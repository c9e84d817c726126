"""Identifier derivation helpers."""

from __future__ import annotations

import keyword
import re
from typing import Optional

_GENERIC_SUFFIX = re.compile(r"\[.*\]|<.*>")


def uncapitalize(value: Optional[str]) -> Optional[str]:
    """Lower-case the first code point of ``value`` and leave the rest untouched.

    ``None`` maps to ``None``. When the lower-case form of the first code point
    expands to several code points (``"İ"``), the input is returned unchanged so
    the code-point length is always preserved.
    """

    if not value:
        return value
    first = value[0]
    lowered = first.lower()
    if lowered == first or len(lowered) != 1:
        return value
    return lowered + value[1:]


def strip_generics(type_name: str) -> str:
    """Drop generic parameters: ``list[int]`` -> ``list``, ``List<Foo>`` -> ``List``."""

    return _GENERIC_SUFFIX.sub("", type_name).strip()


def is_valid_identifier(name: Optional[str]) -> bool:
    return bool(name) and name.isidentifier() and not keyword.iskeyword(name)
