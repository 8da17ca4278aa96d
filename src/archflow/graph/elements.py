"""Elements - Typed nodes of the architecture hierarchy.

This module provides the element data structures:
- ElementKind: Tagged union of the four C4 element variants
- ViewMarker: Diagram types an element may request
- SourceLocation: Portable file location reference
- Element: One node in the hierarchy, linked to its parent by key
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class ElementKind(Enum):
    """Variants of architecture elements.

    The hierarchy is a strict tree of depth <= 3: actors and systems are
    roots, containers live in a system, components live in a container.
    """

    ACTOR = "actor"
    SYSTEM = "system"
    CONTAINER = "container"
    COMPONENT = "component"

    @property
    def parent_kind(self) -> ElementKind | None:
        """Kind required of this variant's parent (None for roots)."""
        return _PARENT_KINDS[self]

    @property
    def is_root(self) -> bool:
        """True if elements of this kind never have a parent."""
        return _PARENT_KINDS[self] is None


_PARENT_KINDS: dict[ElementKind, ElementKind | None] = {
    ElementKind.ACTOR: None,
    ElementKind.SYSTEM: None,
    ElementKind.CONTAINER: ElementKind.SYSTEM,
    ElementKind.COMPONENT: ElementKind.CONTAINER,
}


class ViewMarker(Enum):
    """Diagram types an element can request from the renderer."""

    SYSTEM_CONTEXT = "system_context_view"
    CONTAINER = "container_view"
    COMPONENT = "component_view"

    def supported_by(self, kind: ElementKind) -> bool:
        """Check whether an element of ``kind`` can be the subject of this view."""
        if self is ViewMarker.COMPONENT:
            return kind in (ElementKind.CONTAINER, ElementKind.COMPONENT)
        return kind == ElementKind.SYSTEM


@dataclass(frozen=True)
class SourceLocation:
    """Where something was defined in an input file."""

    path: str
    line: int  # 1-based line number (row number for the catalogue)

    def __str__(self) -> str:
        return f"{self.path}:{self.line}"


@dataclass
class Element:
    """A node in the architecture hierarchy.

    Containment is stored by key: a child holds its parent's key and a
    parent holds the ordered keys of its children. The hierarchy owns all
    elements and resolves keys to objects.

    Attributes:
        key: Globally unique, stable identifier.
        kind: The element variant.
        name: Display name.
        description: Free-form description.
        technology: Optional technology label.
        tags: Optional free-form tags.
        owner: Optional owning team.
        deprecated: Whether the element is deprecated.
        views: View markers requested for this element.
        parent_key: Key of the containing element (None for roots).
        source: Where the element was defined.
    """

    key: str
    kind: ElementKind
    name: str = ""
    description: str = ""
    technology: str | None = None
    tags: tuple[str, ...] = ()
    owner: str | None = None
    deprecated: bool = False
    views: frozenset[ViewMarker] = frozenset()
    parent_key: str | None = None
    source: SourceLocation | None = None

    # Managed by ElementHierarchy
    _children: list[str] = field(default_factory=list, repr=False, compare=False)

    @property
    def label(self) -> str:
        """Display label, falling back to the key."""
        return self.name or self.key

    @property
    def child_keys(self) -> tuple[str, ...]:
        """Keys of the contained elements, in registration order."""
        return tuple(self._children)

    def requests(self, marker: ViewMarker) -> bool:
        """Check if this element requests the given view."""
        return marker in self.views

    def __str__(self) -> str:
        return f"{self.kind.name.title()}-{self.key}"
