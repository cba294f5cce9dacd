"""Filesystem Gateway - Infrastructure implementation of FileSystemProtocol."""

from pathlib import Path

from shader_formatter.domain.protocols import FileSystemProtocol


class FileSystemGateway(FileSystemProtocol):
    """Infrastructure implementation of FileSystemProtocol using pathlib."""

    def resolve_path(self, path: str) -> str:
        """Resolve and normalize a path string."""
        return str(Path(path).resolve())

    def list_directory(self, path: str) -> list[str]:
        path_obj = Path(path)
        if not path_obj.is_dir():
            return []
        return sorted(entry.name for entry in path_obj.iterdir())

    def read_text(self, path: str, encoding: str = "utf-8") -> str:
        """Read text content from a file, keeping its line endings untranslated."""
        with open(path, encoding=encoding, newline="") as handle:
            return handle.read()

    def write_text(self, path: str, content: str, encoding: str = "utf-8") -> None:
        """Write text content to a file without translating line endings."""
        with open(path, "w", encoding=encoding, newline="") as handle:
            handle.write(content)

    def is_directory(self, path: str) -> bool:
        """Check if path is a directory."""
        return Path(path).is_dir()

    def glob_shader_files(self, path: str, extensions: frozenset[str]) -> list[str]:
        """Get all shader files in path (recursive if directory)."""
        path_obj = Path(path).resolve()
        if path_obj.is_dir():
            return sorted(
                str(p) for p in path_obj.glob("**/*") if p.is_file() and p.suffix.lower() in extensions
            )
        return [str(path_obj)] if path_obj.suffix.lower() in extensions else []
