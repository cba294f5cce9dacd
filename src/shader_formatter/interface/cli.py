"""CLI entry points for shader-formatter - Thin Controller using Typer."""

import logging
import sys
from dataclasses import dataclass
from pathlib import Path, PurePath

import typer

from shader_formatter.domain.config import RuleSet
from shader_formatter.domain.dialects import DIALECT_TABLES, Dialect, dialect_for_extension
from shader_formatter.domain.entities import Outcome
from shader_formatter.domain.errors import ConfigParseError, LexError
from shader_formatter.domain.protocols import FileSystemProtocol, TelemetryPort
from shader_formatter.interface.reporters import DiagnosticReporter
from shader_formatter.use_cases.format_source import FormatSourceUseCase
from shader_formatter.use_cases.resolve_config import ResolveConfigUseCase

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_CONFIG_ERROR = 2

SHADER_EXTENSIONS: frozenset[str] = frozenset().union(
    *(tables.extensions for tables in DIALECT_TABLES.values())
)

# B008: avoid function call in default; use module-level singletons for Typer parameters
_PATH_ARGUMENT = typer.Argument(..., help="Shader file or directory to process")
_FILE_ARGUMENT = typer.Argument(..., help="Shader file to tokenize")
_DIALECT_OPTION = typer.Option(
    "auto", "--dialect", "-d", help="auto (by file extension), hlsl or glsl"
)


@dataclass(frozen=True)
class CLIDependencies:
    """Explicit dependencies for the CLI. All dependencies injected at composition root."""

    telemetry: TelemetryPort
    filesystem: FileSystemProtocol
    reporter: DiagnosticReporter
    resolve_config: ResolveConfigUseCase
    format_source: FormatSourceUseCase


class CLIAppFactory:
    """Creates the Typer app."""

    @staticmethod
    def select_dialect(path: str, requested: str) -> Dialect:
        """Dialect forced by --dialect, else by extension; unknown extensions are treated as HLSL."""
        if requested != "auto":
            try:
                return Dialect(requested.lower())
            except ValueError:
                raise typer.BadParameter(
                    f"unknown dialect '{requested}' (expected auto, hlsl or glsl)"
                ) from None
        return dialect_for_extension(PurePath(path).suffix) or Dialect.HLSL

    @staticmethod
    def collect_files(deps: CLIDependencies, path: Path) -> list[str]:
        target = deps.filesystem.resolve_path(str(path))
        if deps.filesystem.is_directory(target):
            return deps.filesystem.glob_shader_files(target, SHADER_EXTENSIONS)
        return [target]

    @staticmethod
    def resolve_rules(deps: CLIDependencies, files: list[str]) -> dict[str, RuleSet]:
        """Resolve the rules of every file's directory up front; raises ConfigParseError."""
        by_directory: dict[str, RuleSet] = {}
        for file in files:
            directory = str(PurePath(file).parent)
            if directory not in by_directory:
                resolved = deps.resolve_config.execute(directory)
                if resolved.path is not None:
                    deps.telemetry.debug(f"{directory}: rules from {resolved.path}")
                by_directory[directory] = resolved.rules
        return {file: by_directory[str(PurePath(file).parent)] for file in files}

    @staticmethod
    def run(deps: CLIDependencies, path: Path, dialect: str, write: bool) -> int:
        """Format (or only check) every file under `path`; returns the process exit status."""
        files = CLIAppFactory.collect_files(deps, path)
        if not files:
            deps.telemetry.warning(f"no shader files found under {path}")
            return EXIT_OK
        try:
            rules_by_file = CLIAppFactory.resolve_rules(deps, files)
        except ConfigParseError as exc:
            deps.telemetry.error(str(exc))
            return EXIT_CONFIG_ERROR

        status = EXIT_OK
        outcomes: dict[str, Outcome] = {}
        for file in files:
            selected = CLIAppFactory.select_dialect(file, dialect)
            try:
                text = deps.filesystem.read_text(file)
            except (UnicodeDecodeError, OSError) as exc:
                deps.telemetry.error(f"{file}: cannot read file: {exc}")
                status = EXIT_FAILURE
                continue
            try:
                result = deps.format_source.execute(text, rules_by_file[file], selected)
            except LexError as exc:
                deps.telemetry.error(f"{file}: {exc}")
                status = EXIT_FAILURE
                continue

            outcomes[file] = result.outcome
            deps.reporter.report_file(file, result)
            if write:
                if result.should_write():
                    deps.filesystem.write_text(file, result.text)
                    deps.telemetry.step(f"Formatted {file}")
                if result.outcome is Outcome.MANUAL_FIX_REQUIRED:
                    status = EXIT_FAILURE
            else:
                if result.changed:
                    deps.reporter.report_diff(file, text, result.text)
                if result.outcome is not Outcome.CLEAN:
                    status = EXIT_FAILURE

        deps.reporter.report_summary(outcomes)
        return status

    @staticmethod
    def create_app(deps: CLIDependencies) -> typer.Typer:
        """Create the Typer app with explicitly injected dependencies. No Service Locator."""
        app = typer.Typer(
            name="shader-formatter",
            help="Style-checking formatter for HLSL and GLSL sources.",
            add_completion=False,
        )

        @app.callback()
        def main(
            verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
        ) -> None:
            """Style-checking formatter for HLSL and GLSL sources."""
            logging.basicConfig(level=logging.DEBUG if verbose else logging.WARNING)

        @app.command("format")
        def format_command(
            path: Path = _PATH_ARGUMENT,
            dialect: str = _DIALECT_OPTION,
        ) -> None:
            """Format files in place; files needing a manual fix are left untouched."""
            deps.telemetry.handshake()
            sys.exit(CLIAppFactory.run(deps, path, dialect, write=True))

        @app.command()
        def check(
            path: Path = _PATH_ARGUMENT,
            dialect: str = _DIALECT_OPTION,
        ) -> None:
            """Report what `format` would change without writing anything."""
            deps.telemetry.handshake()
            sys.exit(CLIAppFactory.run(deps, path, dialect, write=False))

        @app.command()
        def tokens(
            file: Path = _FILE_ARGUMENT,
            dialect: str = _DIALECT_OPTION,
        ) -> None:
            """Print the lexed token stream of a file."""
            target = deps.filesystem.resolve_path(str(file))
            selected = CLIAppFactory.select_dialect(target, dialect)
            try:
                lexed = deps.format_source.tokenize(deps.filesystem.read_text(target), selected)
            except (UnicodeDecodeError, OSError, LexError) as exc:
                deps.telemetry.error(f"{target}: {exc}")
                sys.exit(EXIT_FAILURE)
            deps.reporter.report_tokens(target, lexed)
            sys.exit(EXIT_OK)

        return app


def create_app(deps: CLIDependencies) -> typer.Typer:
    """Module-level shortcut used by the composition root."""
    return CLIAppFactory.create_app(deps)
