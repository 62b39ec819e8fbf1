# Path: `src/cargoscript/features/templates/__init__.py`
# Summary: Export template domain and registry symbols.
# Why: Provide a stable import surface for the synthesizer, services and tests.

from .domain.errors import TemplateError, TemplateMissingPlaceholder, TemplateNotFound
from .domain.template import (
    PASSTHROUGH_TEMPLATE,
    PRELUDE_PLACEHOLDER,
    SCRIPT_PLACEHOLDER,
    Template,
    TemplateOrigin,
    validate_template,
)
from .usecases.registry import TemplateInfo, TemplateRegistry

__all__ = [
    "PASSTHROUGH_TEMPLATE",
    "PRELUDE_PLACEHOLDER",
    "SCRIPT_PLACEHOLDER",
    "Template",
    "TemplateError",
    "TemplateInfo",
    "TemplateMissingPlaceholder",
    "TemplateNotFound",
    "TemplateOrigin",
    "TemplateRegistry",
    "validate_template",
]
