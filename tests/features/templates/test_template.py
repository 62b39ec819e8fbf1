"""Tests for template validation and rendering."""

from __future__ import annotations

import pytest

from cargoscript.features.templates import (
    PASSTHROUGH_TEMPLATE,
    TemplateMissingPlaceholder,
    TemplateOrigin,
    validate_template,
)


def test_render_substitutes_both_placeholders() -> None:
    template = validate_template("t", "#{prelude}\nfn main() { #{script} }\n")

    assert template.render("use std::io;", "42") == "use std::io;\nfn main() { 42 }\n"


def test_render_handles_script_before_prelude() -> None:
    template = validate_template("t", "A#{script}B#{prelude}C")

    assert not template.prelude_first
    assert template.render("P", "S") == "ASBPC"


def test_substituted_text_is_not_expanded_again() -> None:
    """Placeholder-like text inside the script body stays literal."""

    template = validate_template("t", "#{prelude}|#{script}")

    assert template.render("", "#{prelude} #{script}") == "|#{prelude} #{script}"


@pytest.mark.parametrize(
    ("text", "fragment"),
    [
        ("#{prelude} fn main() {}", "'#{script}' is missing"),
        ("fn main() { #{script} }", "'#{prelude}' is missing"),
        ("#{prelude}#{prelude}#{script}", "appears 2 times"),
        ("#{prelude}#{script}#{script}", "appears 2 times"),
    ],
)
def test_placeholder_count_is_enforced(text: str, fragment: str) -> None:
    with pytest.raises(TemplateMissingPlaceholder, match=fragment):
        _ = validate_template("broken", text)


def test_nested_placeholders_are_rejected() -> None:
    with pytest.raises(TemplateMissingPlaceholder, match="nests placeholders"):
        _ = validate_template("broken", "#{pre#{script}lude}")


def test_rust_braces_are_not_placeholders() -> None:
    """Ordinary ``{}`` and ``#[...]`` in Rust code never count as placeholders."""

    text = '#[derive(Debug)]\nstruct S {}\n#{prelude}\nfn main() { println!("{}", {#{script}}); }\n'

    template = validate_template("t", text)

    assert template.render("", "1") == '#[derive(Debug)]\nstruct S {}\n\nfn main() { println!("{}", {1}); }\n'


def test_passthrough_template_returns_body_verbatim() -> None:
    assert PASSTHROUGH_TEMPLATE.origin is TemplateOrigin.INTERNAL
    assert PASSTHROUGH_TEMPLATE.render("", "fn main() {}\n") == "fn main() {}\n"
