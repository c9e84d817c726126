"""Render the facade module from rule descriptors."""

from __future__ import annotations

import logging
from typing import Iterable, Optional, Sequence

from jinja2 import Environment, PackageLoader, StrictUndefined

from wzrd_codegen.errors import InvalidRuleNameError, WzrdError, WzrdErrorCode
from wzrd_codegen.identifiers import is_valid_identifier
from wzrd_codegen.models import GeneratedUnit, RuleDescriptor
from wzrd_codegen.modes import SOURCE_LOADERS, EmissionStrategy

logger = logging.getLogger(__name__)

DEFAULT_CLASS_NAME = "WzrdService"
FRAGMENT_SEPARATOR = "\n"
METHOD_SEPARATOR = "\n\n"

# Method names the facade template already defines. Leading underscores are its attributes.
RESERVED_METHOD_NAMES = frozenset({"close"})

_JINJA = Environment(
    loader=PackageLoader("wzrd_codegen", "templates"),
    undefined=StrictUndefined,
    trim_blocks=True,
    lstrip_blocks=True,
    autoescape=False,
)
_JINJA.filters["pyrepr"] = repr


def _render(template_name: str, **values) -> str:
    return _JINJA.get_template(template_name).render(**values)


def _check_settings(
    *,
    class_name: str,
    source_loader: str,
    resource_package: Optional[str],
) -> None:
    if not is_valid_identifier(class_name):
        raise WzrdError(
            WzrdErrorCode.INVALID_CONFIG,
            ctx={"field": "class_name", "value": class_name},
        )
    if source_loader not in SOURCE_LOADERS:
        raise WzrdError(
            WzrdErrorCode.INVALID_CONFIG,
            ctx={"field": "source_loader", "value": source_loader, "allowed": list(SOURCE_LOADERS)},
        )
    if source_loader == "resource" and not resource_package:
        raise WzrdError(
            WzrdErrorCode.INVALID_CONFIG,
            ctx={"field": "resource_package", "reason": "required when loading rules as resources"},
        )


def render_member(rule: RuleDescriptor) -> str:
    return _render("member.py.j2", rule=rule)


def render_initializer(
    rule: RuleDescriptor,
    *,
    source_loader: str,
    resource_package: Optional[str] = None,
) -> str:
    if source_loader == "resource":
        return _render("init_resource.py.j2", rule=rule, resource_package=resource_package)
    return _render("init_path.py.j2", rule=rule)


def render_method(rule: RuleDescriptor, strategy: EmissionStrategy) -> str:
    return _render(strategy.method_template, rule=rule)


def emit_unit(
    descriptors: Sequence[RuleDescriptor],
    *,
    strategy: EmissionStrategy,
    class_name: str = DEFAULT_CLASS_NAME,
    source_loader: Optional[str] = None,
    resource_package: Optional[str] = None,
    imports: Iterable[str] = (),
) -> GeneratedUnit:
    """Build the three fragment lists and substitute them into the facade template.

    Descriptors are emitted in the order given; callers that need reproducible
    output sort them first.
    """

    loader = source_loader or strategy.default_source_loader
    _check_settings(class_name=class_name, source_loader=loader, resource_package=resource_package)

    for rule in descriptors:
        if rule.rule_name in RESERVED_METHOD_NAMES or rule.rule_name.startswith("_"):
            raise InvalidRuleNameError(
                rule_name=rule.rule_name,
                path=str(rule.source_path),
                reason="name is reserved by the facade",
            )

    members = tuple(render_member(rule) for rule in descriptors)
    initializers = tuple(
        render_initializer(rule, source_loader=loader, resource_package=resource_package)
        for rule in descriptors
    )
    methods = tuple(render_method(rule, strategy) for rule in descriptors)

    source = _render(
        "facade.py.j2",
        mode=strategy.name,
        rule_count=len(descriptors),
        class_name=class_name,
        imports=[line.strip() for line in imports if line and line.strip()],
        members=FRAGMENT_SEPARATOR.join(members),
        initializers=FRAGMENT_SEPARATOR.join(initializers),
        methods=METHOD_SEPARATOR.join(methods),
    )

    logger.debug(f"Rendered {class_name} with {len(methods)} methods ({strategy.name} mode)")
    return GeneratedUnit(
        class_name=class_name,
        mode=strategy.name,
        rule_names=tuple(rule.rule_name for rule in descriptors),
        members=members,
        initializers=initializers,
        methods=methods,
        source=source.rstrip("\n") + "\n",
    )
