"""Template lookup across the user repository and built-in templates."""

from __future__ import annotations

import re
from dataclasses import dataclass
from importlib import resources
from pathlib import Path
from typing import ClassVar, final

from cargoscript.config.settings import RESERVED_TEMPLATE_NAMES, TEMPLATE_SUFFIX
from cargoscript.features.templates.domain.errors import TemplateNotFound
from cargoscript.features.templates.domain.template import (
    Template,
    TemplateOrigin,
    validate_template,
)
from cargoscript.platform.filesystem import ensure_directory
from cargoscript.platform.logging import logger


@dataclass(slots=True, frozen=True)
class TemplateInfo:
    """Listing entry describing one available template."""

    name: str
    origin: TemplateOrigin
    path: Path | None
    overrides_builtin: bool = False


@final
class TemplateRegistry:
    """Resolve template names, user repository first, built-ins second."""

    VALID_NAME: ClassVar[re.Pattern[str]] = re.compile(r"^[A-Za-z0-9_][A-Za-z0-9_.-]*$")
    BUILTIN_PACKAGE: ClassVar[str] = "cargoscript.features.templates"
    BUILTIN_DIRECTORY: ClassVar[str] = "builtin"

    user_dir: Path | None

    def __init__(self, user_dir: Path | None = None) -> None:
        """Initialize the registry.

        Args:
            user_dir: User-writable template repository. ``None`` disables
                user templates entirely.
        """
        self.user_dir = user_dir

    def load(self, name: str) -> Template:
        """Load and validate the template called ``name``.

        Raises:
            TemplateNotFound: If neither repository provides ``name``.
            TemplateMissingPlaceholder: If the template text is invalid.
        """
        if not self.VALID_NAME.match(name):
            raise TemplateNotFound(f"invalid template name '{name}'")

        user_path = self._user_path(name)
        if user_path is not None and user_path.is_file():
            if name in RESERVED_TEMPLATE_NAMES:
                logger.debug("User template %s overrides the built-in template", user_path)
            text = user_path.read_text(encoding="utf-8")
            return validate_template(name, text, origin=TemplateOrigin.USER, path=user_path)

        builtin_text = self._read_builtin(name)
        if builtin_text is not None:
            return validate_template(name, builtin_text, origin=TemplateOrigin.BUILTIN)

        searched = str(self.user_dir) if self.user_dir is not None else "no user repository"
        raise TemplateNotFound(f"template '{name}' not found (searched {searched} and built-ins)")

    def list_templates(self) -> list[TemplateInfo]:
        """Return every loadable template name, user entries first."""

        entries: list[TemplateInfo] = []
        user_names: set[str] = set()
        if self.user_dir is not None and self.user_dir.is_dir():
            for candidate in sorted(self.user_dir.glob(f"*{TEMPLATE_SUFFIX}")):
                name = candidate.name[: -len(TEMPLATE_SUFFIX)]
                if not candidate.is_file() or not self.VALID_NAME.match(name):
                    continue
                user_names.add(name)
                entries.append(
                    TemplateInfo(
                        name=name,
                        origin=TemplateOrigin.USER,
                        path=candidate,
                        overrides_builtin=name in RESERVED_TEMPLATE_NAMES,
                    )
                )

        for name in RESERVED_TEMPLATE_NAMES:
            if name not in user_names:
                entries.append(TemplateInfo(name=name, origin=TemplateOrigin.BUILTIN, path=None))
        return entries

    def ensure_user_dir(self) -> Path:
        """Create the user repository if needed and return it."""

        if self.user_dir is None:
            raise TemplateNotFound("no user template repository is configured")
        return ensure_directory(self.user_dir)

    def _user_path(self, name: str) -> Path | None:
        if self.user_dir is None:
            return None
        return self.user_dir / f"{name}{TEMPLATE_SUFFIX}"

    def _read_builtin(self, name: str) -> str | None:
        if name not in RESERVED_TEMPLATE_NAMES:
            return None
        resource = (
            resources.files(self.BUILTIN_PACKAGE)
            .joinpath(self.BUILTIN_DIRECTORY)
            .joinpath(f"{name}{TEMPLATE_SUFFIX}")
        )
        return resource.read_text(encoding="utf-8")


__all__ = ["TemplateInfo", "TemplateRegistry"]
