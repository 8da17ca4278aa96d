"""Parsers - Ordered line-rule parsing infrastructure.

Flow files are classified one physical line at a time. Each line is
offered to the registered rules in priority order; the first rule whose
pattern matches claims the line and applies its effect to the parse state.

Exports:
- LineRule: Protocol for rule implementations
- ParseContext: Context passed to rules
- ParseWarning: Non-fatal diagnostic collected during parsing
- ParseResult: Result of parsing one source
- RuleRegistry: Manages rule registration and per-line dispatch
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Generic, Protocol, TypeVar, runtime_checkable

StateT = TypeVar("StateT")
ItemT = TypeVar("ItemT")


@dataclass
class ParseContext:
    """Context passed to rules during parsing.

    Attributes:
        file_path: Path of the file being parsed, as shown in messages.
        config: Configuration dictionary for the parser.
    """

    file_path: str
    config: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class ParseWarning:
    """A non-fatal problem found while parsing.

    Warnings never block completion; commands print them to stderr.
    """

    message: str
    file_path: str | None = None
    line_number: int | None = None

    def __str__(self) -> str:
        if self.file_path and self.line_number:
            return f"{self.file_path}:{self.line_number}: {self.message}"
        if self.file_path:
            return f"{self.file_path}: {self.message}"
        return self.message


@dataclass
class ParseResult(Generic[ItemT]):
    """Items parsed from one source plus the warnings collected on the way."""

    items: list[ItemT] = field(default_factory=list)
    warnings: list[ParseWarning] = field(default_factory=list)

    def __iter__(self):
        return iter(self.items)

    def __len__(self) -> int:
        return len(self.items)


@runtime_checkable
class LineRule(Protocol[StateT]):
    """Protocol for line classification rules.

    Rules are evaluated in priority order (lower = earlier). ``match``
    must be side-effect free so every rule is testable on its own;
    ``apply`` receives the match and mutates the parse state.
    """

    name: str

    @property
    def priority(self) -> int:
        """Priority for this rule (lower = earlier)."""
        ...

    def match(self, line: str, state: StateT) -> re.Match[str] | None:
        """Return a match if this rule claims the line."""
        ...

    def apply(
        self,
        match: re.Match[str],
        line_number: int,
        state: StateT,
        context: ParseContext,
    ) -> None:
        """Apply the effect of a claimed line to the parse state."""
        ...


class RuleRegistry(Generic[StateT]):
    """Registry for managing line rules.

    Rules are registered and then tried in priority order for each line;
    the first rule that matches wins.
    """

    def __init__(self) -> None:
        self.rules: list[LineRule[StateT]] = []
        self._ordered: list[LineRule[StateT]] | None = None

    def register(self, rule: LineRule[StateT]) -> None:
        """Register a rule.

        Args:
            rule: A rule implementing the LineRule protocol.
        """
        self.rules.append(rule)
        self._ordered = None

    def get_ordered(self) -> list[LineRule[StateT]]:
        """Get rules sorted by priority (ascending, stable for equal priorities)."""
        if self._ordered is None:
            self._ordered = sorted(self.rules, key=lambda r: r.priority)
        return self._ordered

    def dispatch(
        self,
        line: str,
        line_number: int,
        state: StateT,
        context: ParseContext,
    ) -> LineRule[StateT] | None:
        """Offer one line to the rules.

        Args:
            line: The line text, without its line terminator.
            line_number: 1-based physical line number.
            state: Mutable parse state handed to the claiming rule.
            context: Parsing context.

        Returns:
            The rule that claimed the line, or None if no rule matched.
        """
        for rule in self.get_ordered():
            match = rule.match(line, state)
            if match is not None:
                rule.apply(match, line_number, state, context)
                return rule
        return None


__all__ = [
    "LineRule",
    "ParseContext",
    "ParseResult",
    "ParseWarning",
    "RuleRegistry",
]
