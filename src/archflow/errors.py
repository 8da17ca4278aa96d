"""
archflow.errors - Error types raised while building the architecture model.

Every error aborts the run. The CLI prints the message verbatim and exits
with a non-zero status; nothing is retried or recovered.
"""

from __future__ import annotations

from enum import Enum


class ArchflowError(Exception):
    """Base class for all archflow errors."""


class DefinitionErrorKind(Enum):
    """Reasons an element definition is rejected by the hierarchy."""

    DUPLICATE_KEY = "duplicate-key"
    UNDEFINED_PARENT = "undefined-parent"
    MISSING_PARENT = "missing-parent"
    INVALID_PARENT = "invalid-parent"
    AMBIGUOUS_ROW = "ambiguous-row"
    ROW_MATCHES_NO_KIND = "row-matches-no-kind"
    HIERARCHY_FROZEN = "hierarchy-frozen"
    INVALID_KEY = "invalid-key"


class DefinitionError(ArchflowError):
    """An element could not be registered in the hierarchy.

    Attributes:
        reason: Why the definition was rejected.
        key: The offending element key, if known.
        row: Catalogue row number (header is row 1), if the definition
            came from the catalogue.
    """

    def __init__(
        self,
        reason: DefinitionErrorKind,
        message: str,
        key: str | None = None,
        row: int | None = None,
    ) -> None:
        self.reason = reason
        self.key = key
        self.row = row
        if row is not None:
            message = f"Row #{row}: {message}"
        super().__init__(message)


class UndefinedElementError(ArchflowError, LookupError):
    """A step or lookup named an element key that is not in the hierarchy."""

    def __init__(
        self,
        key: str,
        file_name: str | None = None,
        line: int | None = None,
    ) -> None:
        self.key = key
        self.file_name = file_name
        self.line = line
        message = f"element '{key}' is not defined"
        if file_name is not None and line is not None:
            message = f"{file_name}:{line}: {message}"
        super().__init__(message)


class FlowSyntaxError(ArchflowError):
    """A flow file line matched no grammar rule, or a block was left open.

    Attributes:
        file_name: Name of the flow file.
        line: 1-based line number.
        text: The offending line.
        reason: What is wrong with the line.
    """

    def __init__(
        self,
        file_name: str,
        line: int,
        text: str,
        reason: str = "line cannot be parsed",
    ) -> None:
        self.file_name = file_name
        self.line = line
        self.text = text
        self.reason = reason
        super().__init__(f"{file_name}:{line}: {reason}: '{text}'")

    @property
    def line_index(self) -> int:
        """0-based index of the offending line."""
        return self.line - 1


class DuplicateProcessNameError(ArchflowError):
    """Two processes resolved to the same full name."""

    def __init__(self, name: str, first_path: str, second_path: str) -> None:
        self.name = name
        self.first_path = first_path
        self.second_path = second_path
        super().__init__(
            f"Duplicate process name '{name}' defined in '{first_path}' and '{second_path}'"
        )


class CatalogueError(ArchflowError):
    """The catalogue files are missing or malformed."""


class ConfigError(ArchflowError):
    """The configuration file cannot be read or is not valid TOML."""
