"""Aggregator - Direct and implied relationships from process steps.

Direct relationships group every step by (FROM, TO, style) and describe
each group with the distinct names of the processes that produced it.

Implied relationships substitute ancestors for the endpoints of each
direct relationship: "order-api calls stock-db" also means "Shop uses
Warehouse" and "order-api uses Warehouse", and so on up both ancestor
chains. Self-pairs and pairs where one side contains the other are
never implied.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Iterator

from archflow.graph.elements import Element
from archflow.graph.hierarchy import ElementHierarchy
from archflow.graph.process import Process
from archflow.graph.relations import InteractionStyle, Relationship, RelationshipKey


@dataclass
class RelationshipSet:
    """Relationships keyed by (source, destination, style).

    Insertion order is preserved so output is deterministic.
    """

    _index: dict[RelationshipKey, Relationship] = field(default_factory=dict)

    def add(
        self,
        source: Element,
        destination: Element,
        style: InteractionStyle,
        lines: Iterable[str],
    ) -> Relationship:
        """Add a relationship or merge description lines into the existing one."""
        key = (source.key, destination.key, style)
        relationship = self._index.get(key)
        if relationship is None:
            relationship = Relationship(source, destination, style)
            self._index[key] = relationship
        relationship.merge(lines)
        return relationship

    def get(self, key: RelationshipKey) -> Relationship | None:
        return self._index.get(key)

    def has_description(self, source: Element, destination: Element, description: str) -> bool:
        """Check if any relationship source -> destination carries this exact description."""
        for style in InteractionStyle:
            relationship = self._index.get((source.key, destination.key, style))
            if relationship is not None and relationship.description == description:
                return True
        return False

    def __contains__(self, key: object) -> bool:
        return key in self._index

    def __iter__(self) -> Iterator[Relationship]:
        yield from self._index.values()

    def __len__(self) -> int:
        return len(self._index)


def direct_relationships(processes: Iterable[Process]) -> RelationshipSet:
    """Group all steps into direct relationships.

    A sync and an async use of the same pair are two relationships.

    Args:
        processes: Processes from all flow files.

    Returns:
        RelationshipSet whose descriptions are the distinct process names.
    """
    result = RelationshipSet()
    for process in processes:
        for step in process.steps:
            result.add(step.source, step.destination, step.style, [process.name])
    return result


def implied_allowed(hierarchy: ElementHierarchy, source: Element, destination: Element) -> bool:
    """Check if an implied relationship source -> destination may exist.

    Not allowed for self-pairs, or when one element contains the other.
    """
    if source.key == destination.key:
        return False
    return not (
        hierarchy.is_ancestor(source, destination) or hierarchy.is_ancestor(destination, source)
    )


def expand(
    hierarchy: ElementHierarchy,
    relationship: Relationship,
    existing: RelationshipSet,
) -> Iterator[tuple[Element, Element]]:
    """Yield the ancestor pairs a direct relationship implies.

    Walks every ancestor of the source (including itself) against every
    ancestor of the destination (including itself), skipping the direct
    pair, disallowed pairs, and pairs that already carry a relationship
    with the same description.

    Args:
        hierarchy: The element hierarchy.
        relationship: A direct relationship.
        existing: Relationships already known (direct ones).

    Yields:
        (source ancestor, destination ancestor) pairs.
    """
    description = relationship.description
    for source in hierarchy.ancestors(relationship.source):
        for destination in hierarchy.ancestors(relationship.destination):
            if (source.key, destination.key) == (
                relationship.source.key,
                relationship.destination.key,
            ):
                continue
            if not implied_allowed(hierarchy, source, destination):
                continue
            if existing.has_description(source, destination, description):
                continue
            yield source, destination


def implied_relationships(
    hierarchy: ElementHierarchy,
    direct: RelationshipSet,
) -> RelationshipSet:
    """Derive the implied relationships of a set of direct relationships.

    Args:
        hierarchy: The element hierarchy.
        direct: Direct relationships from direct_relationships().

    Returns:
        RelationshipSet of implied relationships, grouped by
        (source, destination, style) with merged descriptions.
    """
    result = RelationshipSet()
    for relationship in direct:
        for source, destination in expand(hierarchy, relationship, direct):
            result.add(source, destination, relationship.style, relationship.description_lines)
    return result


def merge_relationships(*sets: RelationshipSet) -> RelationshipSet:
    """Union several relationship sets, merging descriptions of shared keys."""
    result = RelationshipSet()
    for relationship_set in sets:
        for relationship in relationship_set:
            result.add(
                relationship.source,
                relationship.destination,
                relationship.style,
                relationship.description_lines,
            )
    return result


@dataclass
class AggregationResult:
    """Outcome of one aggregation pass."""

    direct: RelationshipSet
    implied: RelationshipSet
    relationships: RelationshipSet


def aggregate(hierarchy: ElementHierarchy, processes: Iterable[Process]) -> AggregationResult:
    """Compute direct, implied and combined relationships.

    A pure function of its inputs: running it twice on the same processes
    yields the same relationships.
    """
    direct = direct_relationships(processes)
    implied = implied_relationships(hierarchy, direct)
    return AggregationResult(
        direct=direct,
        implied=implied,
        relationships=merge_relationships(direct, implied),
    )
