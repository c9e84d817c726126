from __future__ import annotations

import os
from pathlib import Path

import pytest

from wzrd_codegen.config import GeneratorConfig
from wzrd_codegen.errors import (
    DirectiveParseError,
    DuplicateRuleNameError,
    FileSystemError,
    WzrdErrorCode,
)
from wzrd_codegen.pipeline import (
    collect_descriptors,
    generate,
    generate_to_file,
    is_up_to_date,
    write_atomic,
)


@pytest.fixture
def rules_root(tmp_path: Path, write_rule) -> Path:
    write_rule("Greet", "#returns str\ndef greet():\n    return 'hello'\n")
    write_rule("Add", "#returns int\n#inputs a:int,b:int\ndef add(a, b):\n    return a + b\n", subdir="math")
    write_rule("Shout", "def shout(text):\n    return text.upper()\n#inputs text:str\n")
    return tmp_path


def typed_config(root: Path, **kwargs) -> GeneratorConfig:
    return GeneratorConfig(root=root, mode="typed", resource_package="app", **kwargs)


def test_method_count_equals_rule_file_count(rules_root: Path) -> None:
    unit = generate(typed_config(rules_root))

    assert len(unit.methods) == 3
    assert unit.rule_names == ("add", "greet", "shout")


def test_descriptors_sorted_by_rule_name(rules_root: Path) -> None:
    descriptors = collect_descriptors(typed_config(rules_root).validated())

    assert [d.rule_name for d in descriptors] == ["add", "greet", "shout"]
    assert descriptors[2].inputs[0].name == "text"


def test_fixed_arity_mode_drops_inputs(rules_root: Path) -> None:
    unit = generate(GeneratorConfig(root=rules_root, mode="fixed-arity"))

    assert all("(self, input: int)" in method for method in unit.methods)
    assert "load_path_source(" in unit.initializers[0]


def test_generation_is_byte_identical_across_runs(rules_root: Path) -> None:
    first = generate(typed_config(rules_root)).source
    second = generate(typed_config(rules_root)).source

    assert first == second


def test_output_independent_of_traversal_order(rules_root: Path, monkeypatch) -> None:
    expected = generate(typed_config(rules_root)).source
    real_walk = os.walk

    def reversed_walk(top, **kwargs):
        for dirpath, dirnames, filenames in real_walk(top, **kwargs):
            yield dirpath, dirnames, list(reversed(filenames))

    monkeypatch.setattr(os, "walk", reversed_walk)

    assert generate(typed_config(rules_root)).source == expected


def test_duplicate_rule_names_rejected(tmp_path: Path, write_rule) -> None:
    first = write_rule("Add", "")
    second = write_rule("add", "", subdir="other")

    with pytest.raises(DuplicateRuleNameError) as exc:
        generate(GeneratorConfig(root=tmp_path, mode="fixed-arity"))

    assert exc.value.code is WzrdErrorCode.DUPLICATE_RULE_NAME
    assert exc.value.ctx["rule_name"] == "add"
    assert exc.value.ctx["paths"] == sorted([str(first.resolve()), str(second.resolve())])


def test_malformed_rule_aborts_without_output(tmp_path: Path, write_rule) -> None:
    write_rule("Good", "#returns int\n", subdir="rules")
    broken = write_rule("Bad", "#inputs a\n", subdir="rules")
    out = tmp_path / "gen" / "service.py"

    with pytest.raises(DirectiveParseError) as exc:
        generate_to_file(typed_config(tmp_path / "rules", output=out))

    assert exc.value.ctx["path"] == str(broken)
    assert not out.exists()


def test_generate_to_file_writes_source(rules_root: Path, tmp_path: Path) -> None:
    out = tmp_path / "gen" / "service.py"

    unit = generate_to_file(typed_config(rules_root), output=out)

    assert out.read_text(encoding="utf-8") == unit.source
    assert is_up_to_date(unit, out)


def test_generate_to_file_requires_output(rules_root: Path) -> None:
    with pytest.raises(FileSystemError):
        generate_to_file(typed_config(rules_root))


def test_is_up_to_date_detects_stale_output(rules_root: Path, tmp_path: Path) -> None:
    out = tmp_path / "service.py"
    unit = generate(typed_config(rules_root))

    assert not is_up_to_date(unit, out)
    out.write_text("stale", encoding="utf-8")
    assert not is_up_to_date(unit, out)


def test_write_atomic_keeps_previous_file_on_failure(tmp_path: Path, monkeypatch) -> None:
    target = tmp_path / "service.py"
    target.write_text("previous", encoding="utf-8")

    def failing_replace(src, dst):
        raise OSError(28, "No space left on device")

    monkeypatch.setattr(os, "replace", failing_replace)

    with pytest.raises(FileSystemError) as exc:
        write_atomic(target, "new contents")

    assert exc.value.ctx["path"] == str(target)
    assert target.read_text(encoding="utf-8") == "previous"
    assert sorted(p.name for p in tmp_path.iterdir()) == ["service.py"]
