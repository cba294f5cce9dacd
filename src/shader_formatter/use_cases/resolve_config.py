"""Use Case: Resolve the rule set that applies to a file."""

import logging
from dataclasses import dataclass
from pathlib import PurePath
from typing import Optional

from shader_formatter.domain.config import CONFIG_FILE_NAME, RuleSet, RuleSetParser
from shader_formatter.domain.errors import ConfigParseError
from shader_formatter.domain.protocols import FileSystemProtocol

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResolvedConfig:
    rules: RuleSet
    path: Optional[str] = None


class ResolveConfigUseCase:
    """Find the nearest configuration file, the way `.gitignore` files are looked up."""

    def __init__(self, filesystem: FileSystemProtocol) -> None:
        self.filesystem = filesystem

    def execute(self, start_dir: str, search_root: Optional[str] = None) -> ResolvedConfig:
        """
        Walk from `start_dir` to each ancestor and parse the first configuration file found.

        When `search_root` is given the walk ends after that directory.
        Without any file the default RuleSet applies. A malformed file
        raises ConfigParseError.
        """
        for directory in self._candidates(start_dir, search_root):
            if CONFIG_FILE_NAME not in self.filesystem.list_directory(str(directory)):
                continue
            path = str(directory / CONFIG_FILE_NAME)
            logger.debug("using configuration %s", path)
            try:
                text = self.filesystem.read_text(path)
            except (UnicodeDecodeError, OSError) as exc:
                raise ConfigParseError(f"cannot read configuration: {exc}", path) from exc
            rules = RuleSetParser.parse_text(text, path)
            return ResolvedConfig(rules=rules, path=path)
        logger.debug("no %s above %s, using defaults", CONFIG_FILE_NAME, start_dir)
        return ResolvedConfig(rules=RuleSet())

    @staticmethod
    def _candidates(start_dir: str, search_root: Optional[str]) -> list[PurePath]:
        start = PurePath(start_dir)
        root = PurePath(search_root) if search_root is not None else None
        candidates: list[PurePath] = []
        for directory in (start, *start.parents):
            candidates.append(directory)
            if directory == root:
                break
        return candidates
