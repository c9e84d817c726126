"""Data structures passed between the generator stages."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Sequence

from wzrd_codegen.errors import WzrdError, WzrdErrorCode
from wzrd_codegen.identifiers import strip_generics

ANY_TYPE = "Any"


@dataclass(frozen=True)
class InputParameter:
    name: str
    type_name: str


@dataclass(frozen=True)
class RuleDescriptor:
    """Signature and location of one rule file."""

    rule_name: str
    source_path: Path
    resource_name: str
    return_type: str = ANY_TYPE
    inputs: tuple[InputParameter, ...] = ()

    @property
    def conversion_target(self) -> str:
        return strip_generics(self.return_type) or ANY_TYPE

    @property
    def handle_name(self) -> str:
        return f"_{self.rule_name}_value"


@dataclass(frozen=True)
class GeneratedUnit:
    """Rendered facade module plus the per-rule fragments it was built from."""

    class_name: str
    mode: str
    rule_names: Sequence[str]
    members: Sequence[str]
    initializers: Sequence[str]
    methods: Sequence[str]
    source: str = field(repr=False, default="")

    def __post_init__(self) -> None:
        counts = {
            "rule_names": len(self.rule_names),
            "members": len(self.members),
            "initializers": len(self.initializers),
            "methods": len(self.methods),
        }
        if len(set(counts.values())) != 1:
            raise WzrdError(
                WzrdErrorCode.INTERNAL,
                ctx={"reason": "fragment counts differ", **counts},
            )
