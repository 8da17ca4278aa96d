"""Graph module - Core architecture model data structures.

Exports:
- ElementKind: Enum of element variants (actor, system, container, component)
- ViewMarker: Enum of views an element may request
- SourceLocation: Portable file location reference
- Element: One node of the hierarchy
- ElementHierarchy: Key-indexed store of all elements
- InteractionStyle: Enum of synchronous / asynchronous
- Relationship: Directed, described edge between elements
- Step, SyncStep, AsyncStep: Interactions inside a process
- Process: Named sequence of steps

Note: ArchitectureModel is in archflow.graph.builder (use graph.factory.build_model() to construct)
"""

from archflow.graph.elements import Element, ElementKind, SourceLocation, ViewMarker
from archflow.graph.hierarchy import ElementHierarchy
from archflow.graph.process import AsyncStep, Process, Step, SyncStep
from archflow.graph.relations import InteractionStyle, Relationship

__all__ = [
    "ElementKind",
    "ViewMarker",
    "SourceLocation",
    "Element",
    "ElementHierarchy",
    "InteractionStyle",
    "Relationship",
    "Step",
    "SyncStep",
    "AsyncStep",
    "Process",
]
