"""Errors raised while loading or validating templates."""

from __future__ import annotations

from cargoscript.shared.errors import Blame, CargoScriptError


class TemplateError(CargoScriptError):
    """Base class for template failures."""

    blame = Blame.TEMPLATE


class TemplateMissingPlaceholder(TemplateError):
    """Template lacks, repeats or nests one of its two placeholders."""


class TemplateNotFound(TemplateError):
    """No user or built-in template carries the requested name."""


__all__ = ["TemplateError", "TemplateMissingPlaceholder", "TemplateNotFound"]
