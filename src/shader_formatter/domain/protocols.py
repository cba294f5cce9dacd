from typing import Protocol


class FileSystemProtocol(Protocol):
    """Protocol for filesystem operations - abstracts Path usage."""

    def resolve_path(self, path: str) -> str:
        """Resolve and normalize a path string."""
        ...

    def list_directory(self, path: str) -> list[str]:
        """Names of the entries directly inside a directory ([] if it does not exist)."""
        ...

    def read_text(self, path: str, encoding: str = "utf-8") -> str:
        """Read text content from a file."""
        ...

    def write_text(self, path: str, content: str, encoding: str = "utf-8") -> None:
        """Write text content to a file."""
        ...

    def is_directory(self, path: str) -> bool:
        """Check if path is a directory."""
        ...

    def glob_shader_files(self, path: str, extensions: frozenset[str]) -> list[str]:
        """Get all shader files in path (recursive if directory), sorted."""
        ...


class TelemetryPort(Protocol):
    """Protocol for telemetry/UI updates."""

    def step(self, message: str) -> None: ...
    def error(self, message: str) -> None: ...
    def warning(self, message: str) -> None: ...
    def debug(self, message: str) -> None: ...
    def handshake(self) -> None: ...
