"""src/cargoscript/ui/cli/commands/run.py
What: Translate ``run`` arguments into a service request and execute it.
Why: Keep argument plumbing out of the application service.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import final

from rich.console import Console

from cargoscript.application.services.run_service import ScriptRunRequest, ScriptRunService
from cargoscript.ui.cli.args.options import RunArgs


@final
class RunCommand:
    """Run, build or generate the package for one script."""

    def __init__(
        self,
        args: RunArgs,
        *,
        service_factory: Callable[[], ScriptRunService] | None = None,
        console: Console | None = None,
    ) -> None:
        self.args = args
        self._service_factory = service_factory or ScriptRunService
        self._console = console or Console()

    def build_request(self) -> ScriptRunRequest:
        """Map parsed arguments onto a ``ScriptRunRequest``."""

        return ScriptRunRequest(
            script_path=self.args.script_path,
            code=self.args.code,
            mode=self.args.mode,
            args=self.args.script_args,
            template_name=self.args.template_name,
            dependencies=self.args.dependencies,
            unstable_features=self.args.unstable_features,
            features=self.args.features,
            build_mode=self.args.build_mode,
            release=self.args.release,
            force=self.args.force,
            build_only=self.args.build_only,
        )

    def execute(self) -> int:
        """Execute the command and return the process exit status."""

        service = self._service_factory()
        request = self.build_request()

        if self.args.gen_pkg_only:
            target = service.generate_package(request, self.args.pkg_path)
            self._console.print(str(target), markup=False, highlight=False, soft_wrap=True)
            return 0

        result = service.run(request)
        if self.args.build_only and not self.args.quiet:
            self._console.print(str(result.artifact_path), markup=False, highlight=False, soft_wrap=True)
        return result.exit_code
