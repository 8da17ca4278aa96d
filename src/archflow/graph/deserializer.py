"""FlowDirectory - Locates and reads flow files.

Flow files are read in sorted path order so the model, and every
rendering of it, is the same from one run to the next.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Iterator

from archflow.graph.builder import ModelBuilder
from archflow.graph.parsers import ParseWarning
from archflow.graph.parsers.flow import FlowParser


@dataclass
class FlowSource:
    """One flow file to be parsed.

    Attributes:
        path: Absolute path of the file.
        display_path: Path shown in messages (relative to the flow root).
        content: Full text of the file.
    """

    path: Path
    display_path: str
    content: str


class FlowDirectory:
    """Deserializer for a file or a directory of flow files."""

    def __init__(
        self,
        path: Path | str,
        patterns: list[str] | None = None,
        recursive: bool = True,
        skip_files: list[str] | None = None,
    ) -> None:
        """Initialize flow file deserializer.

        Args:
            path: Path to one flow file or a directory of them.
            patterns: Glob patterns for directory (default: ["*.txt"]).
            recursive: Whether to search sub-directories.
            skip_files: File names to skip (e.g., ["README.txt"]).
        """
        self.path = Path(path)
        self.patterns = patterns or ["*.txt"]
        self.recursive = recursive
        self.skip_files = skip_files or []

    def _should_skip(self, file_path: Path) -> bool:
        return file_path.name in self.skip_files

    def find_files(self) -> list[Path]:
        """List matching files, sorted by path, without duplicates."""
        if self.path.is_file():
            return [] if self._should_skip(self.path) else [self.path]
        if not self.path.is_dir():
            return []

        found: set[Path] = set()
        for pattern in self.patterns:
            file_iter = self.path.rglob(pattern) if self.recursive else self.path.glob(pattern)
            found.update(p for p in file_iter if p.is_file() and not self._should_skip(p))
        return sorted(found)

    def _display_path(self, file_path: Path) -> str:
        if self.path.is_dir():
            return file_path.relative_to(self.path).as_posix()
        return file_path.name

    def iterate_sources(self) -> Iterator[FlowSource]:
        """Yield each flow file with its content.

        Yields:
            FlowSource per file, in sorted path order.
        """
        for file_path in self.find_files():
            yield FlowSource(
                path=file_path,
                display_path=self._display_path(file_path),
                content=file_path.read_text(encoding="utf-8"),
            )

    def deserialize(self, parser: FlowParser, builder: ModelBuilder) -> list[ParseWarning]:
        """Parse every flow file into the builder.

        Args:
            parser: FlowParser bound to the frozen hierarchy.
            builder: ModelBuilder collecting the processes.

        Returns:
            Warnings from all files, in file order.
        """
        warnings: list[ParseWarning] = []
        for source in self.iterate_sources():
            result = parser.parse_text(source.content, source.display_path)
            builder.add_processes(result.items, source.display_path)
            warnings.extend(result.warnings)
        builder.add_warnings(warnings)
        return warnings
