"""Command-line entry point for generating rule facades."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Iterable

from wzrd_codegen.config import GeneratorConfig, load_config
from wzrd_codegen.errors import WzrdError
from wzrd_codegen.modes import SOURCE_LOADERS, list_strategies
from wzrd_codegen.pipeline import generate, is_up_to_date, write_atomic

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_STALE = 1
EXIT_ERROR = 2


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Generate a facade class from .wzrd rule files")
    parser.add_argument("--config", help="Optional YAML config file")
    parser.add_argument("--root", help="Directory scanned for rule files")
    parser.add_argument("--out", help="Output module path (prints to stdout when omitted)")
    parser.add_argument("--mode", choices=sorted(list_strategies()), help="Generation mode")
    parser.add_argument("--class-name", help="Name of the generated class")
    parser.add_argument("--resource-package", help="Package holding rule files as resources")
    parser.add_argument("--resource-prefix", help="Resource directory inside the package")
    parser.add_argument("--source-loader", choices=SOURCE_LOADERS, help="Override how rule bodies load")
    parser.add_argument("--pattern", help="Filename glob for rule files")
    parser.add_argument(
        "--import",
        dest="imports",
        action="append",
        default=None,
        metavar="LINE",
        help="Import line added to the generated module (may be repeated)",
    )
    parser.add_argument(
        "--no-sort",
        action="store_true",
        help="Keep filesystem traversal order instead of sorting rules by name",
    )
    parser.add_argument(
        "--check",
        action="store_true",
        help="Exit 1 when the existing output differs from what would be generated",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Log each discovered rule")
    return parser


def _resolve_config(args: argparse.Namespace) -> GeneratorConfig:
    config = load_config(args.config) if args.config else GeneratorConfig()
    return config.with_overrides(
        root=Path(args.root) if args.root else None,
        output=Path(args.out) if args.out else None,
        mode=args.mode,
        class_name=args.class_name,
        resource_package=args.resource_package,
        resource_prefix=args.resource_prefix,
        source_loader=args.source_loader,
        pattern=args.pattern,
        imports=tuple(args.imports) if args.imports else None,
        sort_rules=False if args.no_sort else None,
    )


def main(argv: Iterable[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        config = _resolve_config(args)
        unit = generate(config)

        if args.check:
            if config.output is None:
                parser.error("--check requires an output path")
            if is_up_to_date(unit, config.output):
                return EXIT_OK
            print(f"stale: {config.output}", file=sys.stderr)
            return EXIT_STALE

        if config.output is None:
            sys.stdout.write(unit.source)
        else:
            write_atomic(config.output, unit.source)
            logger.info(f"Wrote {unit.class_name} ({len(unit.methods)} rules) to {config.output}")
    except WzrdError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return EXIT_ERROR

    return EXIT_OK


def entrypoint() -> None:  # pragma: no cover - console entry
    raise SystemExit(main())
