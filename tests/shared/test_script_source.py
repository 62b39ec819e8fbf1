"""Tests for reading script files and inline code."""

from __future__ import annotations

from pathlib import Path

import pytest

from cargoscript.shared import ScriptNotFound, ScriptSource


def test_from_path_uses_stem_and_resolved_origin(tmp_path: Path) -> None:
    script = tmp_path / "hello.rs"
    _ = script.write_text("fn main() {}\n", encoding="utf-8")

    source = ScriptSource.from_path(script)

    assert source.logical_name == "hello"
    assert source.origin == script.resolve()
    assert source.discriminator == str(script.resolve())
    assert source.text == "fn main() {}\n"


def test_missing_suffix_is_retried_with_rs(tmp_path: Path) -> None:
    _ = (tmp_path / "tool.rs").write_text("fn main() {}\n", encoding="utf-8")

    assert ScriptSource.from_path(tmp_path / "tool").origin == (tmp_path / "tool.rs").resolve()


def test_missing_script_raises(tmp_path: Path) -> None:
    with pytest.raises(ScriptNotFound) as excinfo:
        _ = ScriptSource.from_path(tmp_path / "absent.rs")

    assert excinfo.value.exit_code == 66


def test_inline_code_is_keyed_by_name() -> None:
    source = ScriptSource.inline("1 + 2", "expr")

    assert source.origin is None
    assert source.discriminator == "expr"
