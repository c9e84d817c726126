"""Generator configuration.

Values come from (lowest to highest precedence) the dataclass defaults, the
``WZRD_ROOT`` environment variable, an optional YAML file and CLI flags.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Mapping, Optional

import yaml

from wzrd_codegen.directives import DEFAULT_RESOURCE_PREFIX
from wzrd_codegen.emitter import DEFAULT_CLASS_NAME
from wzrd_codegen.errors import WzrdError, WzrdErrorCode
from wzrd_codegen.locator import DEFAULT_EXCLUDE_DIRS, DEFAULT_PATTERN
from wzrd_codegen.modes import SOURCE_LOADERS, get_strategy

ROOT_ENV_VAR = "WZRD_ROOT"


@dataclass(frozen=True)
class GeneratorConfig:
    root: Optional[Path] = None
    output: Optional[Path] = None
    mode: str = "typed"
    pattern: str = DEFAULT_PATTERN
    class_name: str = DEFAULT_CLASS_NAME
    imports: tuple[str, ...] = ()
    resource_package: Optional[str] = None
    resource_prefix: str = DEFAULT_RESOURCE_PREFIX
    source_loader: Optional[str] = None
    sort_rules: bool = True
    exclude_dirs: tuple[str, ...] = DEFAULT_EXCLUDE_DIRS

    def __post_init__(self) -> None:
        if self.root is not None:
            object.__setattr__(self, "root", Path(self.root))
        if self.output is not None:
            object.__setattr__(self, "output", Path(self.output))
        object.__setattr__(self, "imports", tuple(self.imports))
        object.__setattr__(self, "exclude_dirs", tuple(self.exclude_dirs))

    def with_overrides(self, **overrides: Any) -> "GeneratorConfig":
        """Return a copy with every non-``None`` override applied."""
        values = {k: v for k, v in overrides.items() if v is not None}
        unknown = set(values) - {f.name for f in fields(self)}
        if unknown:
            raise WzrdError(
                WzrdErrorCode.INVALID_CONFIG,
                ctx={"reason": "unknown settings", "keys": sorted(unknown)},
            )
        return replace(self, **values)

    def validated(self) -> "GeneratorConfig":
        """Fill ``root`` from the environment and check cross-field constraints."""

        config = self
        if config.root is None:
            env_root = os.environ.get(ROOT_ENV_VAR, "").strip()
            if env_root:
                config = replace(config, root=Path(env_root))
        if config.root is None:
            raise WzrdError(
                WzrdErrorCode.INVALID_CONFIG,
                ctx={"field": "root", "reason": f"missing (set it in config, --root or {ROOT_ENV_VAR})"},
            )

        strategy = get_strategy(config.mode)
        loader = config.source_loader or strategy.default_source_loader
        if loader not in SOURCE_LOADERS:
            raise WzrdError(
                WzrdErrorCode.INVALID_CONFIG,
                ctx={"field": "source_loader", "value": loader, "allowed": list(SOURCE_LOADERS)},
            )
        if loader == "resource" and not config.resource_package:
            raise WzrdError(
                WzrdErrorCode.INVALID_CONFIG,
                ctx={"field": "resource_package", "reason": "required when loading rules as resources"},
            )
        if not config.pattern:
            raise WzrdError(WzrdErrorCode.INVALID_CONFIG, ctx={"field": "pattern", "reason": "empty"})
        return config


_PATH_KEYS = {"root", "output"}
_TUPLE_KEYS = {"imports", "exclude_dirs"}


def config_from_mapping(data: Mapping[str, Any], *, base_dir: Optional[Path] = None) -> GeneratorConfig:
    known = {f.name for f in fields(GeneratorConfig)}
    values: dict[str, Any] = {}
    for key, value in data.items():
        name = str(key).replace("-", "_")
        if name not in known:
            raise WzrdError(
                WzrdErrorCode.INVALID_CONFIG,
                ctx={"reason": "unknown setting", "key": key},
            )
        if value is None:
            continue
        if name in _PATH_KEYS:
            path = Path(str(value))
            if base_dir is not None and not path.is_absolute():
                path = base_dir / path
            value = path
        elif name in _TUPLE_KEYS:
            if isinstance(value, str) or not isinstance(value, (list, tuple)):
                raise WzrdError(
                    WzrdErrorCode.INVALID_CONFIG,
                    ctx={"key": key, "reason": "must be a list of strings"},
                )
            value = tuple(str(item) for item in value)
        elif name == "sort_rules":
            if not isinstance(value, bool):
                raise WzrdError(
                    WzrdErrorCode.INVALID_CONFIG,
                    ctx={"key": key, "reason": "must be a boolean"},
                )
        else:
            value = str(value)
        values[name] = value
    return GeneratorConfig(**values)


def load_config(path: Path | str) -> GeneratorConfig:
    """Load a YAML config file; relative paths resolve against its directory."""

    config_path = Path(path)
    try:
        raw = config_path.read_text(encoding="utf-8")
    except OSError as exc:
        raise WzrdError(
            WzrdErrorCode.INVALID_CONFIG,
            ctx={"path": str(config_path), "reason": "cannot read config file"},
            cause=exc,
        ) from exc
    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as exc:
        raise WzrdError(
            WzrdErrorCode.INVALID_CONFIG,
            ctx={"path": str(config_path), "reason": "invalid YAML"},
            cause=exc,
        ) from exc
    if data is None:
        data = {}
    if not isinstance(data, Mapping):
        raise WzrdError(
            WzrdErrorCode.INVALID_CONFIG,
            ctx={"path": str(config_path), "reason": "top-level must be mapping"},
        )
    return config_from_mapping(data, base_dir=config_path.parent)
