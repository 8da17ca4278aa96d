"""Relations - Interaction styles and relationships between elements.

This module defines the edges of the architecture model:
- InteractionStyle: Synchronous or asynchronous
- Relationship: A directed, described edge between two elements
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Iterable

if TYPE_CHECKING:
    from archflow.graph.elements import Element


class InteractionStyle(Enum):
    """How the source interacts with the destination."""

    SYNCHRONOUS = "synchronous"
    ASYNCHRONOUS = "asynchronous"


RelationshipKey = tuple[str, str, InteractionStyle]


@dataclass
class Relationship:
    """A directed edge between two elements.

    Direct and implied relationships share this type; they differ only in
    how they were derived. At most one relationship exists per
    (source, destination, style) triple, and its description merges the
    distinct contributions of everything that produced it.

    Attributes:
        source: The using element.
        destination: The used element.
        style: The interaction style.
        description_lines: Distinct description lines in first-seen order.
    """

    source: Element
    destination: Element
    style: InteractionStyle
    description_lines: list[str] = field(default_factory=list)

    @property
    def key(self) -> RelationshipKey:
        """Identity of this relationship: (source key, destination key, style)."""
        return (self.source.key, self.destination.key, self.style)

    @property
    def description(self) -> str:
        """Merged description, one contribution per line."""
        return "\n".join(self.description_lines)

    def merge(self, lines: Iterable[str]) -> None:
        """Append description lines that are not present yet."""
        for line in lines:
            if line not in self.description_lines:
                self.description_lines.append(line)

    def __str__(self) -> str:
        arrow = "->" if self.style == InteractionStyle.SYNCHRONOUS else "-->"
        return f"{self.source.key} {arrow} {self.destination.key}"
