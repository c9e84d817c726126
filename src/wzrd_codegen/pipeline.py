"""End-to-end generation: locate, parse, check, order, emit, write."""

from __future__ import annotations

import logging
import os
import tempfile
from collections import defaultdict
from pathlib import Path
from typing import Iterable

from wzrd_codegen.config import GeneratorConfig
from wzrd_codegen.directives import parse_rule_file
from wzrd_codegen.emitter import emit_unit
from wzrd_codegen.errors import DuplicateRuleNameError, FileSystemError
from wzrd_codegen.locator import find_rule_files
from wzrd_codegen.models import GeneratedUnit, RuleDescriptor
from wzrd_codegen.modes import get_strategy

logger = logging.getLogger(__name__)


def ensure_unique_names(descriptors: Iterable[RuleDescriptor]) -> None:
    """Reject rule sets where two files derive the same method name."""

    by_name: dict[str, list[str]] = defaultdict(list)
    for rule in descriptors:
        by_name[rule.rule_name].append(str(rule.source_path))
    for name in sorted(by_name):
        paths = by_name[name]
        if len(paths) > 1:
            raise DuplicateRuleNameError(rule_name=name, paths=sorted(paths))


def collect_descriptors(config: GeneratorConfig) -> list[RuleDescriptor]:
    strategy = get_strategy(config.mode)
    logger.info(f"Scanning {config.root} for {config.pattern}")
    paths = find_rule_files(
        config.root,
        config.pattern,
        sort=config.sort_rules,
        exclude_dirs=config.exclude_dirs,
    )

    descriptors: list[RuleDescriptor] = []
    for path in paths:
        rule = parse_rule_file(
            path,
            typed=strategy.parses_inputs,
            resource_prefix=config.resource_prefix,
        )
        logger.debug(f"{rule.rule_name}: {rule.return_type}")
        descriptors.append(rule)

    ensure_unique_names(descriptors)
    if config.sort_rules:
        descriptors.sort(key=lambda rule: rule.rule_name)
    return descriptors


def generate(config: GeneratorConfig) -> GeneratedUnit:
    """Run the whole pipeline in memory; nothing is written."""

    config = config.validated()
    descriptors = collect_descriptors(config)
    return emit_unit(
        descriptors,
        strategy=get_strategy(config.mode),
        class_name=config.class_name,
        source_loader=config.source_loader,
        resource_package=config.resource_package,
        imports=config.imports,
    )


def write_atomic(target: Path, text: str) -> Path:
    """Replace ``target`` with ``text`` in one step; no partial file on failure."""

    target = Path(target)
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(prefix=f".{target.name}.", suffix=".tmp", dir=target.parent)
        try:
            with os.fdopen(fd, "w", encoding="utf-8", newline="\n") as fh:
                fh.write(text)
            os.replace(tmp_name, target)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
    except OSError as exc:
        raise FileSystemError(path=str(target), reason="cannot write output", cause=exc) from exc
    return target


def generate_to_file(config: GeneratorConfig, output: Path | None = None) -> GeneratedUnit:
    target = output or config.output
    if target is None:
        raise FileSystemError(path="", reason="no output path configured")
    unit = generate(config)
    write_atomic(Path(target), unit.source)
    logger.info(f"Wrote {unit.class_name} ({len(unit.methods)} rules) to {target}")
    return unit


def is_up_to_date(unit: GeneratedUnit, target: Path) -> bool:
    target = Path(target)
    if not target.exists():
        return False
    try:
        return target.read_text(encoding="utf-8") == unit.source
    except (OSError, UnicodeDecodeError) as exc:
        raise FileSystemError(path=str(target), reason="cannot read existing output", cause=exc) from exc
