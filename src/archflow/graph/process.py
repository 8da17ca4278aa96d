"""Processes - Named sequences of interaction steps.

- Step: One interaction between two elements (SyncStep or AsyncStep)
- Process: Ordered steps parsed from one section of one flow file
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field

from archflow.graph.elements import Element, SourceLocation
from archflow.graph.relations import InteractionStyle


@dataclass(frozen=True)
class Step(ABC):
    """One interaction between two resolved elements.

    Attributes:
        source: The calling element (FROM).
        destination: The called element (TO).
        description: Free-text description of the interaction.
        location: Where the step was written.
    """

    source: Element
    destination: Element
    description: str
    location: SourceLocation | None = field(default=None, compare=False)

    @property
    @abstractmethod
    def style(self) -> InteractionStyle:
        """Interaction style of this step variant."""


@dataclass(frozen=True)
class SyncStep(Step):
    """A synchronous call: ``FROM -> TO : description``."""

    @property
    def style(self) -> InteractionStyle:
        return InteractionStyle.SYNCHRONOUS

    def __str__(self) -> str:
        return f"SyncStep: {self.source.label} -> {self.destination.label}"


@dataclass(frozen=True)
class AsyncStep(Step):
    """An asynchronous message: ``FROM -->(N) TO : [topic] description``."""

    topic: str = ""

    @property
    def style(self) -> InteractionStyle:
        return InteractionStyle.ASYNCHRONOUS

    def __str__(self) -> str:
        return f"AsyncStep: {self.source.label} -> {self.destination.label} on {self.topic}"


@dataclass
class Process:
    """A named, ordered sequence of steps.

    Attributes:
        title: The running title when the process started.
        section: Section name, or None if the file has no sections.
        source_path: Flow file the process was parsed from.
        steps: Steps in file order.
    """

    title: str
    section: str | None = None
    source_path: str = ""
    steps: list[Step] = field(default_factory=list)

    @property
    def name(self) -> str:
        """Full name: the title, plus ``" - <section>"`` for sectioned files."""
        if self.section is None:
            return self.title
        return f"{self.title} - {self.section}"

    def elements(self) -> list[Element]:
        """Participating elements in order of first appearance."""
        seen: dict[str, Element] = {}
        for step in self.steps:
            seen.setdefault(step.source.key, step.source)
            seen.setdefault(step.destination.key, step.destination)
        return list(seen.values())

    def __len__(self) -> int:
        return len(self.steps)

    def __str__(self) -> str:
        return self.name
