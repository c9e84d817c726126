"""Error types shared by the generator and the runtime support module."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from typing import Any


class WzrdErrorCode(Enum):
    FILE_SYSTEM = auto()
    DIRECTIVE_PARSE = auto()
    DUPLICATE_RULE_NAME = auto()
    INVALID_RULE_NAME = auto()
    INVALID_CONFIG = auto()
    UNKNOWN_MODE = auto()
    MISSING_MEMBER = auto()
    NOT_EXECUTABLE = auto()
    CONVERSION = auto()
    INTERNAL = auto()


@dataclass(eq=False)
class WzrdError(Exception):
    """Structured error raised by the generator pipeline and generated facades."""

    code: WzrdErrorCode
    ctx: dict[str, Any] | None = None
    cause: Exception | None = None

    def __post_init__(self) -> None:
        if self.ctx is None:
            self.ctx = {}
        if self.cause is not None:
            self.__cause__ = self.cause
        super().__init__(self.code.name)

    def __str__(self) -> str:
        if not self.ctx:
            return self.code.name
        parts = ", ".join(f"{k}={v!r}" for k, v in self.ctx.items())
        return f"{self.code.name}: {parts}"


class FileSystemError(WzrdError):
    """Traversal or read failure; aborts the run."""

    def __init__(self, *, path: str, reason: str, cause: Exception | None = None):
        super().__init__(
            WzrdErrorCode.FILE_SYSTEM,
            ctx={"path": path, "reason": reason},
            cause=cause,
        )


class DirectiveParseError(WzrdError):
    """Malformed ``#returns`` / ``#inputs`` header line."""

    def __init__(self, *, path: str, line: int, reason: str, column: int | None = None):
        ctx: dict[str, Any] = {"path": path, "line": line, "reason": reason}
        if column is not None:
            ctx["column"] = column
        super().__init__(WzrdErrorCode.DIRECTIVE_PARSE, ctx=ctx)


class DuplicateRuleNameError(WzrdError):
    def __init__(self, *, rule_name: str, paths: list[str]):
        super().__init__(
            WzrdErrorCode.DUPLICATE_RULE_NAME,
            ctx={"rule_name": rule_name, "paths": paths},
        )


class InvalidRuleNameError(WzrdError):
    def __init__(self, *, rule_name: str, path: str, reason: str = "not a valid identifier"):
        super().__init__(
            WzrdErrorCode.INVALID_RULE_NAME,
            ctx={"rule_name": rule_name, "path": path, "reason": reason},
        )
