"""Header directive parsing for rule files.

A rule file is plain text. Two header lines are recognised, both must start at
column one::

    #returns int
    #inputs a:int,b:int

Everything else is the script body and is not inspected here.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Iterable

from wzrd_codegen.errors import DirectiveParseError, FileSystemError, InvalidRuleNameError
from wzrd_codegen.identifiers import is_valid_identifier, uncapitalize
from wzrd_codegen.models import ANY_TYPE, InputParameter, RuleDescriptor

RETURNS_PREFIX = "#returns "
INPUTS_PREFIX = "#inputs "
DEFAULT_RESOURCE_PREFIX = "wzrd"
# Generated methods take ``self`` and keep their locals underscore-prefixed.
RESERVED_PARAMETER_NAMES = frozenset({"self"})

_OPENERS = {"[": "]", "<": ">", "(": ")"}
_CLOSERS = {v: k for k, v in _OPENERS.items()}


@dataclass(frozen=True)
class InputsParse:
    """Outcome of scanning an ``#inputs`` payload.

    Exactly one of ``params`` (on success) or ``error`` is meaningful.
    ``column`` is 0-based within the scanned text.
    """

    params: tuple[InputParameter, ...] = ()
    error: str | None = None
    column: int | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass(frozen=True)
class Directives:
    return_type: str = ANY_TYPE
    inputs: tuple[InputParameter, ...] = ()


def _split_top_level(text: str) -> InputsParse | list[tuple[int, str]]:
    segments: list[tuple[int, str]] = []
    stack: list[tuple[str, int]] = []
    start = 0
    for idx, char in enumerate(text):
        if char in _OPENERS:
            stack.append((char, idx))
        elif char in _CLOSERS:
            if not stack or stack[-1][0] != _CLOSERS[char]:
                return InputsParse(error=f"unexpected '{char}'", column=idx)
            stack.pop()
        elif char == "," and not stack:
            segments.append((start, text[start:idx]))
            start = idx + 1
    if stack:
        opener, idx = stack[-1]
        return InputsParse(error=f"unclosed '{opener}'", column=idx)
    segments.append((start, text[start:]))
    return segments


def parse_inputs(text: str) -> InputsParse:
    """Parse ``name:type`` pairs separated by top-level commas.

    Commas nested in brackets belong to the type (``m:dict[str, int]``).
    """

    if not text.strip():
        return InputsParse()

    split = _split_top_level(text)
    if isinstance(split, InputsParse):
        return split

    params: list[InputParameter] = []
    seen: set[str] = set()
    for start, raw in split:
        segment = raw.strip()
        column = start + (len(raw) - len(raw.lstrip()))
        if not segment:
            return InputsParse(error="empty parameter segment", column=start)
        name, sep, type_name = segment.partition(":")
        name = name.strip()
        type_name = type_name.strip()
        if not sep:
            return InputsParse(error=f"expected name:type, got {segment!r}", column=column)
        if not name:
            return InputsParse(error="missing parameter name", column=column)
        if not type_name:
            return InputsParse(error=f"missing type for parameter {name!r}", column=column)
        if not is_valid_identifier(name):
            return InputsParse(error=f"invalid parameter name {name!r}", column=column)
        if name in RESERVED_PARAMETER_NAMES or name.startswith("_"):
            return InputsParse(error=f"reserved parameter name {name!r}", column=column)
        if name in seen:
            return InputsParse(error=f"duplicate parameter {name!r}", column=column)
        seen.add(name)
        params.append(InputParameter(name=name, type_name=type_name))
    return InputsParse(params=tuple(params))


def parse_directives(lines: Iterable[str], *, path: Path | str, typed: bool = True) -> Directives:
    """Extract the return type and (in typed mode) the parameter list.

    The first matching line of each directive wins; later duplicates are body.
    """

    return_type: str | None = None
    inputs: tuple[InputParameter, ...] | None = None

    for lineno, line in enumerate(lines, start=1):
        if return_type is None and line.startswith(RETURNS_PREFIX):
            value = line[len(RETURNS_PREFIX):].strip()
            if not value:
                raise DirectiveParseError(
                    path=str(path), line=lineno, reason="#returns requires a type name"
                )
            return_type = value
        elif typed and inputs is None and line.startswith(INPUTS_PREFIX):
            parsed = parse_inputs(line[len(INPUTS_PREFIX):])
            if not parsed.ok:
                column = None
                if parsed.column is not None:
                    column = len(INPUTS_PREFIX) + parsed.column + 1
                raise DirectiveParseError(
                    path=str(path), line=lineno, reason=parsed.error or "", column=column
                )
            inputs = parsed.params
        if return_type is not None and (inputs is not None or not typed):
            break

    return Directives(return_type=return_type or ANY_TYPE, inputs=inputs or ())


def _read_lines(path: Path) -> list[str]:
    try:
        return path.read_text(encoding="utf-8").splitlines()
    except UnicodeDecodeError as exc:
        raise FileSystemError(path=str(path), reason="rule file is not valid UTF-8", cause=exc) from exc
    except OSError as exc:
        raise FileSystemError(path=str(path), reason=exc.strerror or str(exc), cause=exc) from exc


def parse_rule_file(
    path: Path | str,
    *,
    typed: bool = True,
    resource_prefix: str = DEFAULT_RESOURCE_PREFIX,
) -> RuleDescriptor:
    rule_path = Path(path)
    directives = parse_directives(_read_lines(rule_path), path=rule_path, typed=typed)

    rule_name = uncapitalize(rule_path.stem)
    if not is_valid_identifier(rule_name):
        raise InvalidRuleNameError(rule_name=rule_name or "", path=str(rule_path))

    prefix = resource_prefix.strip("/")
    resource_name = f"{prefix}/{rule_path.name}" if prefix else rule_path.name

    return RuleDescriptor(
        rule_name=rule_name,
        source_path=rule_path.resolve(),
        resource_name=resource_name,
        return_type=directives.return_type,
        inputs=directives.inputs,
    )
