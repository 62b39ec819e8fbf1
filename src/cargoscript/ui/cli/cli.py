"""Command line interface for cargoscript."""

import sys
from typing import final

from cargoscript.platform.logging import logger
from cargoscript.shared.errors import CargoScriptError
from cargoscript.ui.cli.args import ArgumentParser
from cargoscript.ui.cli.args.options import CacheArgs, CLIArgs, RunArgs
from cargoscript.ui.cli.commands import CacheCommand, RunCommand, TemplatesCommand


@final
class CommandProcessor:
    """Command line interface processor."""

    @staticmethod
    def process_command(args_list: list[str] | None = None) -> None:
        """Process command line arguments.

        Exits with the command's status when it is non-zero.

        Args:
            args_list: List of command line arguments (for testing).
        """
        try:
            args: CLIArgs = ArgumentParser.process_args(args_list)

            if isinstance(args, RunArgs):
                status = RunCommand(args).execute()
            elif isinstance(args, CacheArgs):
                status = CacheCommand(args).execute()
            else:
                status = TemplatesCommand(args).execute()

            if status != 0:
                sys.exit(status)
            return

        except KeyboardInterrupt:
            logger.info("\nOperation cancelled by user")
            sys.exit(130)
        except CargoScriptError as e:
            logger.error("%s", e.message)
            sys.exit(e.exit_code)
        except Exception as e:
            logger.error("An unexpected error occurred: %s", str(e))
            sys.exit(1)


def main() -> int:
    """Main entry point.

    Returns:
        int: Process exit code (0 on success). Failures and non-zero
        script statuses leave through ``sys.exit(...)`` instead.
    """
    CommandProcessor.process_command()
    return 0
