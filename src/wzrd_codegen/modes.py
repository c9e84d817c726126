"""Generation modes.

Both modes share discovery, parsing and naming; they differ in the method
template they render and in how rule bodies are loaded by default.

- ``typed``: declared parameters, named member lookup, direct typed return.
  Rule bodies load as package resources.
- ``fixed-arity``: a single ``input: int`` parameter and an optional result.
  Rule bodies load from their absolute path.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict

from wzrd_codegen.errors import WzrdError, WzrdErrorCode

SOURCE_LOADERS = ("resource", "path")


@dataclass(frozen=True)
class EmissionStrategy:
    name: str
    method_template: str
    default_source_loader: str
    parses_inputs: bool


_REGISTRY: Dict[str, EmissionStrategy] = {}


def _normalize(name: str) -> str:
    return str(name).strip().lower().replace("_", "-")


def register_strategy(strategy: EmissionStrategy) -> None:
    key = _normalize(strategy.name)
    if not key:
        raise WzrdError(WzrdErrorCode.INVALID_CONFIG, ctx={"reason": "empty_mode_name"})
    if strategy.default_source_loader not in SOURCE_LOADERS:
        raise WzrdError(
            WzrdErrorCode.INVALID_CONFIG,
            ctx={"mode": key, "source_loader": strategy.default_source_loader},
        )
    _REGISTRY[key] = strategy


def get_strategy(name: str) -> EmissionStrategy:
    strategy = _REGISTRY.get(_normalize(name))
    if strategy is None:
        raise WzrdError(
            WzrdErrorCode.UNKNOWN_MODE,
            ctx={"mode": name, "available": sorted(_REGISTRY)},
        )
    return strategy


def list_strategies() -> Dict[str, EmissionStrategy]:
    return dict(_REGISTRY)


TYPED = EmissionStrategy(
    name="typed",
    method_template="method_typed.py.j2",
    default_source_loader="resource",
    parses_inputs=True,
)
FIXED_ARITY = EmissionStrategy(
    name="fixed-arity",
    method_template="method_fixed_arity.py.j2",
    default_source_loader="path",
    parses_inputs=False,
)

register_strategy(TYPED)
register_strategy(FIXED_ARITY)
