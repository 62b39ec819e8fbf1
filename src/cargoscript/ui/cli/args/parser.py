"""Command line argument parser."""

import argparse
import logging
import sys
from collections.abc import Sequence
from pathlib import Path
from typing import final

from cargoscript.config.config import Config
from cargoscript.features.cache import BuildMode
from cargoscript.features.manifest import parse_dependency_arg
from cargoscript.features.package import InvocationMode
from cargoscript.platform.logging import DEFAULT_LOG_FILE, logger, setup_logger
from cargoscript.ui.cli.args.options import CacheArgs, CLIArgs, RunArgs, TemplatesArgs


@final
class ArgumentParser:
    """Command line argument parser."""

    @staticmethod
    def create_parser() -> argparse.ArgumentParser:
        """Create argument parser.

        Returns:
            argparse.ArgumentParser: Configured argument parser.
        """
        parser = argparse.ArgumentParser(
            prog="cargoscript",
            description="cargoscript - Compile and run single-file Rust scripts with cached builds.",
            formatter_class=argparse.RawDescriptionHelpFormatter,
        )

        subparsers = parser.add_subparsers(dest="command", required=True)

        run_parser = subparsers.add_parser(
            "run",
            help="Build (if needed) and run a script, expression or filter",
        )
        ArgumentParser._configure_run_parser(run_parser)

        templates_parser = subparsers.add_parser(
            "templates",
            help="Inspect user and built-in templates",
        )
        templates_actions = templates_parser.add_subparsers(dest="action", required=True)
        _ = templates_actions.add_parser("list", help="List available templates")
        dump_parser = templates_actions.add_parser("dump", help="Print a template's source")
        _ = dump_parser.add_argument("name", type=str, metavar="NAME", help="Template name")
        dir_parser = templates_actions.add_parser(
            "dir", help="Print the user template directory"
        )
        _ = dir_parser.add_argument(
            "--create",
            action="store_true",
            help="Create the directory when it does not exist",
        )

        cache_parser = subparsers.add_parser(
            "cache",
            help="Maintain the compiled script cache",
        )
        cache_actions = cache_parser.add_subparsers(dest="action", required=True)
        _ = cache_actions.add_parser("clear", help="Remove every cached script")
        _ = cache_actions.add_parser(
            "gc",
            help="Remove cache entries for deleted scripts and superseded packages",
        )

        for sub in (templates_parser, cache_parser):
            ArgumentParser._add_verbosity_flags(sub)

        return parser

    @staticmethod
    def process_args(args_list: Sequence[str] | None = None) -> CLIArgs:
        """Process command line arguments.

        Args:
            args_list: List of command line arguments (for testing).

        Returns:
            CLIArgs: Processed command line arguments.

        Raises:
            SystemExit: If options conflict or the command is unknown.
        """
        parser = ArgumentParser.create_parser()
        parsed_args = parser.parse_args(args_list)

        # Set log level based on verbosity flags
        is_quiet = bool(getattr(parsed_args, "quiet", False))
        is_verbose = bool(getattr(parsed_args, "verbose", False))

        if is_quiet:
            log_level = logging.ERROR
        elif is_verbose:
            log_level = logging.DEBUG
        else:
            log_level = logging.INFO

        configuration = Config.load()
        log_file_path = configuration.log_file or DEFAULT_LOG_FILE
        _ = setup_logger(log_file=log_file_path, console_level=log_level)

        command: str = parsed_args.command

        if command == "run":
            return ArgumentParser._process_run(parser, parsed_args)

        if command == "templates":
            return TemplatesArgs(
                command="templates",
                action=parsed_args.action,
                name=getattr(parsed_args, "name", None),
                create=bool(getattr(parsed_args, "create", False)),
            )

        if command == "cache":
            return CacheArgs(command="cache", action=parsed_args.action)

        logger.error("Unsupported command: %s", command)
        sys.exit(2)

    @staticmethod
    def _add_verbosity_flags(parser: argparse.ArgumentParser) -> None:
        _ = parser.add_argument(
            "--verbose",
            action="store_true",
            help="Show detailed cache and build information",
        )
        _ = parser.add_argument(
            "--quiet",
            action="store_true",
            help="Suppress all output except errors",
        )

    @staticmethod
    def _configure_run_parser(parser: argparse.ArgumentParser) -> None:
        """Options for the ``run`` subcommand.

        Everything after the script (or inline code) is passed to the program.
        """
        kind_group = parser.add_mutually_exclusive_group()
        _ = kind_group.add_argument(
            "-e",
            "--expr",
            action="store_true",
            help="Treat SCRIPT as an expression to evaluate and print",
        )
        _ = kind_group.add_argument(
            "-l",
            "--loop",
            action="store_true",
            help="Treat SCRIPT as a closure applied to every line of stdin",
        )
        _ = parser.add_argument(
            "--count",
            action="store_true",
            help="Pass a running line number to the --loop closure",
        )
        _ = parser.add_argument(
            "-t",
            "--template",
            type=str,
            metavar="NAME",
            help="Template used to wrap an --expr expression",
        )
        _ = parser.add_argument(
            "-d",
            "--dep",
            action="append",
            default=[],
            metavar="NAME[=VERSION]",
            help="Add a dependency (repeatable)",
        )
        _ = parser.add_argument(
            "-u",
            "--unstable-feature",
            action="append",
            default=[],
            metavar="FEATURE",
            help="Enable a nightly language feature (repeatable)",
        )
        _ = parser.add_argument(
            "--features",
            action="append",
            default=[],
            metavar="FEATURES",
            help="Comma-separated cargo features to enable",
        )

        build_group = parser.add_mutually_exclusive_group()
        _ = build_group.add_argument(
            "--test",
            action="store_true",
            help="Build and run the script's tests",
        )
        _ = build_group.add_argument(
            "--bench",
            action="store_true",
            help="Build and run the script's benchmarks",
        )
        _ = parser.add_argument(
            "--debug",
            action="store_true",
            help="Build without optimisations",
        )
        _ = parser.add_argument(
            "--force",
            action="store_true",
            help="Rebuild even when a cached build matches",
        )
        _ = parser.add_argument(
            "--build-only",
            action="store_true",
            help="Build and cache the script without running it",
        )
        _ = parser.add_argument(
            "--gen-pkg-only",
            action="store_true",
            help="Only write the generated package; do not build or run",
        )
        _ = parser.add_argument(
            "--pkg-path",
            type=str,
            metavar="DIR",
            help="Directory receiving the package written by --gen-pkg-only",
        )
        ArgumentParser._add_verbosity_flags(parser)
        _ = parser.add_argument(
            "script",
            type=str,
            metavar="SCRIPT",
            help="Script path, or code with --expr/--loop",
        )
        _ = parser.add_argument(
            "script_args",
            nargs=argparse.REMAINDER,
            metavar="ARGS",
            help="Arguments passed to the compiled program",
        )

    @staticmethod
    def _process_run(parser: argparse.ArgumentParser, parsed_args: argparse.Namespace) -> RunArgs:
        inline = parsed_args.expr or parsed_args.loop

        if parsed_args.count and not parsed_args.loop:
            parser.error("--count requires --loop")
        if parsed_args.template and not parsed_args.expr:
            parser.error("--template requires --expr")
        if parsed_args.pkg_path and not parsed_args.gen_pkg_only:
            parser.error("--pkg-path requires --gen-pkg-only")
        if inline and (parsed_args.test or parsed_args.bench):
            parser.error("--test and --bench only apply to script files")
        if parsed_args.gen_pkg_only:
            build_options = [
                flag
                for flag, enabled in (
                    ("--force", parsed_args.force),
                    ("--debug", parsed_args.debug),
                    ("--test", parsed_args.test),
                    ("--bench", parsed_args.bench),
                    ("--build-only", parsed_args.build_only),
                )
                if enabled
            ]
            if build_options:
                parser.error(f"--gen-pkg-only cannot be used with {', '.join(build_options)}")

        if parsed_args.expr:
            mode = InvocationMode.expression()
        elif parsed_args.loop:
            mode = InvocationMode.filter(count=parsed_args.count)
        else:
            mode = InvocationMode.script()

        if parsed_args.test:
            build_mode = BuildMode.TEST
        elif parsed_args.bench:
            build_mode = BuildMode.BENCH
        else:
            build_mode = BuildMode.RUN

        features = tuple(
            name
            for value in parsed_args.features
            for name in value.replace(",", " ").split()
        )

        return RunArgs(
            command="run",
            script_path=None if inline else Path(parsed_args.script),
            code=parsed_args.script if inline else None,
            mode=mode,
            script_args=tuple(parsed_args.script_args),
            template_name=parsed_args.template,
            dependencies=tuple(parse_dependency_arg(value) for value in parsed_args.dep),
            unstable_features=tuple(parsed_args.unstable_feature),
            features=features,
            build_mode=build_mode,
            release=not parsed_args.debug,
            force=parsed_args.force,
            build_only=parsed_args.build_only,
            gen_pkg_only=parsed_args.gen_pkg_only,
            pkg_path=Path(parsed_args.pkg_path) if parsed_args.pkg_path else None,
            verbose=parsed_args.verbose,
            quiet=parsed_args.quiet,
        )
