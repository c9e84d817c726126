"""Generate a facade class exposing one method per ``.wzrd`` rule file."""

from .config import GeneratorConfig, load_config
from .directives import parse_directives, parse_inputs, parse_rule_file
from .emitter import emit_unit
from .errors import (
    DirectiveParseError,
    DuplicateRuleNameError,
    FileSystemError,
    InvalidRuleNameError,
    WzrdError,
    WzrdErrorCode,
)
from .identifiers import uncapitalize
from .locator import find_rule_files
from .models import GeneratedUnit, InputParameter, RuleDescriptor
from .modes import get_strategy
from .pipeline import generate, generate_to_file

__all__ = [
    "DirectiveParseError",
    "DuplicateRuleNameError",
    "FileSystemError",
    "GeneratedUnit",
    "GeneratorConfig",
    "InputParameter",
    "InvalidRuleNameError",
    "RuleDescriptor",
    "WzrdError",
    "WzrdErrorCode",
    "emit_unit",
    "find_rule_files",
    "generate",
    "generate_to_file",
    "get_strategy",
    "load_config",
    "parse_directives",
    "parse_inputs",
    "parse_rule_file",
    "uncapitalize",
]
