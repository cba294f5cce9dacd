"""Package entry point - composition root. Wire dependencies and run the CLI app."""

from shader_formatter.infrastructure.di.container import ShaderFormatterContainer
from shader_formatter.interface.cli import CLIDependencies, create_app


def main() -> None:
    """Entry point: wire dependencies at composition root, create app, run."""
    container = ShaderFormatterContainer()

    deps = CLIDependencies(
        telemetry=container.get_telemetry_port(),
        filesystem=container.get_filesystem_gateway(),
        reporter=container.get_reporter(),
        resolve_config=container.get_resolve_config_use_case(),
        format_source=container.get_format_source_use_case(),
    )

    app = create_app(deps)
    app()


if __name__ == "__main__":
    main()
