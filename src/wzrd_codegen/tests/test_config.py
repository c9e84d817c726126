from __future__ import annotations

from pathlib import Path

import pytest

from wzrd_codegen.config import GeneratorConfig, config_from_mapping, load_config
from wzrd_codegen.errors import WzrdError, WzrdErrorCode


def write_config(tmp_path: Path, text: str) -> Path:
    path = tmp_path / "wzrd.yaml"
    path.write_text(text, encoding="utf-8")
    return path


def test_load_config_resolves_relative_paths(tmp_path: Path) -> None:
    path = write_config(
        tmp_path,
        "root: rules\n"
        "output: gen/service.py\n"
        "mode: fixed-arity\n"
        "class-name: Rules\n"
        "imports:\n"
        "  - from app.models import Category\n"
        "sort_rules: false\n",
    )

    config = load_config(path)

    assert config.root == tmp_path / "rules"
    assert config.output == tmp_path / "gen/service.py"
    assert config.mode == "fixed-arity"
    assert config.class_name == "Rules"
    assert config.imports == ("from app.models import Category",)
    assert config.sort_rules is False


def test_load_config_empty_file_gives_defaults(tmp_path: Path) -> None:
    config = load_config(write_config(tmp_path, ""))

    assert config == GeneratorConfig()


@pytest.mark.parametrize(
    "text,reason",
    [
        ("- a\n- b\n", "top-level must be mapping"),
        ("root: [unclosed\n", "invalid YAML"),
        ("colour: blue\n", "unknown setting"),
        ("imports: from x import y\n", "must be a list of strings"),
        ("sort_rules: 'yes'\n", "must be a boolean"),
    ],
)
def test_load_config_validation(tmp_path: Path, text, reason) -> None:
    with pytest.raises(WzrdError) as exc:
        load_config(write_config(tmp_path, text))

    assert exc.value.code is WzrdErrorCode.INVALID_CONFIG
    assert reason in exc.value.ctx["reason"]


def test_load_config_missing_file(tmp_path: Path) -> None:
    with pytest.raises(WzrdError) as exc:
        load_config(tmp_path / "nope.yaml")

    assert exc.value.code is WzrdErrorCode.INVALID_CONFIG


def test_with_overrides_skips_none() -> None:
    base = GeneratorConfig(root=Path("/a"), mode="typed", resource_package="app")

    updated = base.with_overrides(root=None, mode="fixed-arity")

    assert updated.root == Path("/a")
    assert updated.mode == "fixed-arity"


def test_with_overrides_rejects_unknown_keys() -> None:
    with pytest.raises(WzrdError):
        GeneratorConfig().with_overrides(colour="blue")


def test_validated_uses_environment_root(monkeypatch, tmp_path: Path) -> None:
    monkeypatch.setenv("WZRD_ROOT", str(tmp_path))

    config = GeneratorConfig(mode="fixed-arity").validated()

    assert config.root == tmp_path


def test_validated_requires_root(monkeypatch) -> None:
    monkeypatch.delenv("WZRD_ROOT", raising=False)

    with pytest.raises(WzrdError) as exc:
        GeneratorConfig(mode="fixed-arity").validated()

    assert exc.value.ctx["field"] == "root"


def test_validated_resource_loading_needs_package(tmp_path: Path) -> None:
    with pytest.raises(WzrdError) as exc:
        GeneratorConfig(root=tmp_path, mode="typed").validated()

    assert exc.value.ctx["field"] == "resource_package"


def test_validated_unknown_mode(tmp_path: Path) -> None:
    with pytest.raises(WzrdError) as exc:
        GeneratorConfig(root=tmp_path, mode="async").validated()

    assert exc.value.code is WzrdErrorCode.UNKNOWN_MODE
    assert exc.value.ctx["available"] == ["fixed-arity", "typed"]


def test_config_from_mapping_without_base_dir_keeps_relative_paths() -> None:
    config = config_from_mapping({"root": "rules", "output": None})

    assert config.root == Path("rules")
    assert config.output is None
