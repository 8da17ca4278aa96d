"""Model Builder - Assembles the architecture model.

This module provides the builder pattern for constructing a complete
architecture model from a frozen element hierarchy and the processes
parsed from every flow file.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Iterator

from archflow.errors import DuplicateProcessNameError
from archflow.graph.aggregator import RelationshipSet, aggregate
from archflow.graph.elements import Element, ElementKind
from archflow.graph.hierarchy import ElementHierarchy
from archflow.graph.parsers import ParseWarning
from archflow.graph.process import Process
from archflow.graph.relations import Relationship


@dataclass
class ArchitectureModel:
    """The complete model handed to renderers.

    Attributes:
        hierarchy: The frozen element hierarchy.
        processes: All processes, in input order.
        direct_relationships: Relationships stated by steps.
        implied_relationships: Relationships implied between ancestors.
        relationships: Union of both, one per (source, destination, style).
        warnings: Non-fatal diagnostics collected while building.
    """

    hierarchy: ElementHierarchy
    processes: list[Process] = field(default_factory=list)
    direct_relationships: RelationshipSet = field(default_factory=RelationshipSet)
    implied_relationships: RelationshipSet = field(default_factory=RelationshipSet)
    relationships: RelationshipSet = field(default_factory=RelationshipSet)
    warnings: list[ParseWarning] = field(default_factory=list)

    @property
    def title(self) -> str:
        return self.hierarchy.title

    @property
    def description(self) -> str:
        return self.hierarchy.description

    def elements_in_use(self) -> list[Element]:
        """Elements referenced by a step, plus all of their ancestors.

        Returns:
            Elements in hierarchy registration order.
        """
        used: set[str] = set()
        for process in self.processes:
            for step in process.steps:
                for endpoint in (step.source, step.destination):
                    used.update(e.key for e in self.hierarchy.ancestors(endpoint))
        return [e for e in self.hierarchy if e.key in used]

    def iter_relationships(self) -> Iterator[Relationship]:
        yield from self.relationships

    def step_count(self, element: Element) -> int:
        """Number of steps in which ``element`` is an endpoint."""
        return sum(
            1
            for process in self.processes
            for step in process.steps
            if element.key in (step.source.key, step.destination.key)
        )

    def process_by_name(self, name: str) -> Process | None:
        for process in self.processes:
            if process.name == name:
                return process
        return None


class ModelBuilder:
    """Builder for constructing an ArchitectureModel.

    Usage:
        builder = ModelBuilder(hierarchy)
        builder.add_processes(result.items, "flows/checkout.txt")
        model = builder.build()
    """

    def __init__(self, hierarchy: ElementHierarchy) -> None:
        """Initialize the builder.

        Args:
            hierarchy: Element hierarchy; frozen if it is not already.
        """
        hierarchy.freeze()
        self.hierarchy = hierarchy
        self._processes: list[Process] = []
        self._sources: dict[str, str] = {}
        self._warnings: list[ParseWarning] = []

    def add_process(self, process: Process, source_path: str | None = None) -> None:
        """Add one process.

        Raises:
            DuplicateProcessNameError: If a process with the same full
                name was already added.
        """
        path = source_path or process.source_path
        first = self._sources.get(process.name)
        if first is not None:
            raise DuplicateProcessNameError(process.name, first, path)
        self._sources[process.name] = path
        self._processes.append(process)

    def add_processes(self, processes: Iterable[Process], source_path: str | None = None) -> None:
        """Add all processes parsed from one file."""
        for process in processes:
            self.add_process(process, source_path)

    def add_warnings(self, warnings: Iterable[ParseWarning]) -> None:
        self._warnings.extend(warnings)

    def build(self) -> ArchitectureModel:
        """Aggregate relationships and return the model."""
        result = aggregate(self.hierarchy, self._processes)
        model = ArchitectureModel(
            hierarchy=self.hierarchy,
            processes=list(self._processes),
            direct_relationships=result.direct,
            implied_relationships=result.implied,
            relationships=result.relationships,
            warnings=list(self._warnings),
        )
        model.warnings.extend(self._deprecation_warnings(model))
        return model

    def _deprecation_warnings(self, model: ArchitectureModel) -> list[ParseWarning]:
        warnings = []
        for element in model.elements_in_use():
            if element.deprecated and element.kind != ElementKind.ACTOR:
                if model.step_count(element):
                    warnings.append(
                        ParseWarning(f"deprecated {element.kind.value} '{element.key}' is still used")
                    )
        return warnings
