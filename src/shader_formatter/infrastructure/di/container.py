from typing import TYPE_CHECKING, Any, cast

from shader_formatter.infrastructure.gateways.filesystem_gateway import FileSystemGateway
from shader_formatter.infrastructure.reporters import TerminalDiagnosticReporter
from shader_formatter.interface.telemetry import ProjectTelemetry
from shader_formatter.use_cases.format_source import FormatSourceUseCase
from shader_formatter.use_cases.resolve_config import ResolveConfigUseCase

if TYPE_CHECKING:
    from shader_formatter.domain.protocols import FileSystemProtocol, TelemetryPort
    from shader_formatter.interface.reporters import DiagnosticReporter


class ShaderFormatterContainer:
    """Dependency Injection Container for the shader formatter."""

    def __init__(self) -> None:
        self._singletons: dict[str, Any] = {}
        self._register_defaults()

    def _register_defaults(self) -> None:
        """Register default implementations for protocols."""
        telemetry = ProjectTelemetry("shader-formatter", "cyan", "HLSL/GLSL style formatter")
        self.register_singleton("TelemetryPort", telemetry)
        filesystem = FileSystemGateway()
        self.register_singleton("FileSystemGateway", filesystem)
        self.register_singleton("DiagnosticReporter", TerminalDiagnosticReporter())
        self.register_singleton("ResolveConfigUseCase", ResolveConfigUseCase(filesystem))
        self.register_singleton("FormatSourceUseCase", FormatSourceUseCase())

    def register_singleton(self, key: str, instance: Any) -> None:
        """Register a singleton instance."""
        self._singletons[key] = instance

    def get(self, key: str) -> Any:
        """Retrieve a dependency by key. Prefer explicit get_* methods for type safety."""
        if key in self._singletons:
            return self._singletons[key]
        raise ValueError(f"Dependency '{key}' not registered.")

    def get_telemetry_port(self) -> "TelemetryPort":
        """Return the telemetry/UI port."""
        return cast("TelemetryPort", self.get("TelemetryPort"))

    def get_filesystem_gateway(self) -> "FileSystemProtocol":
        """Return the filesystem gateway."""
        return cast("FileSystemProtocol", self.get("FileSystemGateway"))

    def get_reporter(self) -> "DiagnosticReporter":
        """Return the diagnostic reporter."""
        return cast("DiagnosticReporter", self.get("DiagnosticReporter"))

    def get_resolve_config_use_case(self) -> ResolveConfigUseCase:
        return cast(ResolveConfigUseCase, self.get("ResolveConfigUseCase"))

    def get_format_source_use_case(self) -> FormatSourceUseCase:
        return cast(FormatSourceUseCase, self.get("FormatSourceUseCase"))
