"""Runtime support imported by generated facades.

The generated code only relies on a small contract:

- ``ScriptContext.eval(source)`` loads a rule body and returns a :class:`Value`
- ``Value.get_member(name)`` / ``Value.execute(*args)`` invoke it
- ``Value.as_(target)`` converts the dynamic result at the method boundary
- ``Value.has_type()`` tells a real result apart from a void one

:class:`PythonScriptContext` is the bundled engine. It runs rule bodies as
Python; the value of a body is its trailing expression, if any.
"""

from __future__ import annotations

import ast
import importlib.resources
import logging
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional

from wzrd_codegen.errors import FileSystemError, WzrdError, WzrdErrorCode

logger = logging.getLogger(__name__)

DEFAULT_LANGUAGE = "python"


@dataclass(frozen=True)
class Source:
    language: str
    name: str
    text: str


def load_resource_source(package: str, resource: str, *, language: str = DEFAULT_LANGUAGE) -> Source:
    """Read a rule body shipped as package data of ``package``."""

    try:
        text = importlib.resources.files(package).joinpath(resource).read_text(encoding="utf-8")
    except (OSError, ModuleNotFoundError, UnicodeDecodeError) as exc:
        raise FileSystemError(
            path=f"{package}:{resource}", reason="cannot read rule resource", cause=exc
        ) from exc
    return Source(language=language, name=resource, text=text)


def load_path_source(path: str | Path, *, language: str = DEFAULT_LANGUAGE) -> Source:
    source_path = Path(path)
    try:
        text = source_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise FileSystemError(
            path=str(source_path), reason="cannot read rule file", cause=exc
        ) from exc
    return Source(language=language, name=str(source_path), text=text)


class Value:
    """Dynamic result of an evaluation or execution inside a script context."""

    __slots__ = ("raw", "namespace")

    def __init__(self, raw: Any, namespace: Optional[Dict[str, Any]] = None):
        self.raw = raw
        self.namespace = namespace

    def __repr__(self) -> str:
        return f"Value({self.raw!r})"

    def is_null(self) -> bool:
        return self.raw is None

    def has_type(self) -> bool:
        """True when the execution produced a value rather than a void outcome."""
        return self.raw is not None

    def can_execute(self) -> bool:
        return callable(self.raw)

    def get_member(self, name: str) -> "Value":
        if self.namespace is not None and name in self.namespace:
            return Value(self.namespace[name])
        if self.raw is not None and hasattr(self.raw, name):
            return Value(getattr(self.raw, name))
        raise WzrdError(WzrdErrorCode.MISSING_MEMBER, ctx={"member": name})

    def execute(self, *args: Any) -> "Value":
        if not callable(self.raw):
            raise WzrdError(
                WzrdErrorCode.NOT_EXECUTABLE,
                ctx={"value_type": type(self.raw).__name__},
            )
        return Value(self.raw(*args))

    def as_(self, target: Any) -> Any:
        """Convert to ``target``.

        ``Any``, ``object`` and non-class targets (typing constructs, unions)
        return the raw value. ``None`` passes through unchanged.
        """

        raw = self.raw
        if target is Any or target is object or not isinstance(target, type):
            return raw
        if raw is None or isinstance(raw, target):
            return raw
        try:
            return target(raw)
        except (TypeError, ValueError) as exc:
            raise WzrdError(
                WzrdErrorCode.CONVERSION,
                ctx={"target": target.__name__, "value_type": type(raw).__name__},
                cause=exc,
            ) from exc


class ScriptContext:
    """Execution context shared by every handle of a facade.

    ``lock`` serializes all access; generated methods hold it for the whole
    lookup/execute/convert sequence.
    """

    lock: threading.RLock

    def eval(self, source: Source) -> Value:  # pragma: no cover - protocol only
        raise NotImplementedError

    def close(self) -> None:  # pragma: no cover - protocol only
        raise NotImplementedError


class PythonScriptContext(ScriptContext):
    def __init__(self) -> None:
        self.lock = threading.RLock()
        self._namespaces: List[Dict[str, Any]] = []
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def eval(self, source: Source) -> Value:
        if source.language != DEFAULT_LANGUAGE:
            raise WzrdError(
                WzrdErrorCode.INVALID_CONFIG,
                ctx={"language": source.language, "reason": "unsupported script language"},
            )
        module = ast.parse(source.text, filename=source.name)
        tail: Optional[ast.Expression] = None
        if module.body and isinstance(module.body[-1], ast.Expr):
            tail = ast.Expression(body=module.body.pop().value)

        with self.lock:
            if self._closed:
                raise WzrdError(WzrdErrorCode.INTERNAL, ctx={"reason": "context closed"})
            namespace: Dict[str, Any] = {"__name__": f"wzrd:{source.name}", "__file__": source.name}
            exec(compile(module, source.name, "exec"), namespace)
            raw = eval(compile(tail, source.name, "eval"), namespace) if tail is not None else None
            self._namespaces.append(namespace)
        logger.debug(f"Loaded rule source {source.name}")
        return Value(raw, namespace)

    def close(self) -> None:
        with self.lock:
            for namespace in self._namespaces:
                namespace.clear()
            self._namespaces.clear()
            self._closed = True
