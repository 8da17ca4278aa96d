"""Hierarchy - Arena of architecture elements with strict containment.

Elements are registered once, parent before child, and the hierarchy is
frozen before any flow is parsed. After that it is a read-only structure
that parsers and the relationship aggregator share freely.
"""

from __future__ import annotations

import re
from typing import Any, Iterator

from archflow.errors import DefinitionError, DefinitionErrorKind, UndefinedElementError
from archflow.graph.elements import Element, ElementKind, SourceLocation

# Keys double as DSL identifiers: ASCII words joined by single hyphens
KEY_PATTERN = re.compile(r"[A-Za-z0-9_]+(?:-[A-Za-z0-9_]+)*")


class ElementHierarchy:
    """Owns every element, indexed by key.

    Example:
        >>> h = ElementHierarchy()
        >>> _ = h.register(ElementKind.SYSTEM, "shop")
        >>> _ = h.register(ElementKind.CONTAINER, "api", parent_key="shop")
        >>> [e.key for e in h.ancestors("api")]
        ['api', 'shop']
    """

    def __init__(self, title: str = "", description: str = "") -> None:
        self.title = title
        self.description = description
        self._index: dict[str, Element] = {}
        self._frozen = False

    # ─────────────────────────────────────────────────────────────────────
    # Construction
    # ─────────────────────────────────────────────────────────────────────

    def register(
        self,
        kind: ElementKind,
        key: str,
        parent_key: str | None = None,
        row: int | None = None,
        **attributes: Any,
    ) -> Element:
        """Register a new element.

        Args:
            kind: The element variant.
            key: Unique element key.
            parent_key: Key of the containing element; required for
                containers and components, rejected for roots.
            row: Catalogue row number, used in error messages.
            **attributes: Remaining Element fields (name, description, ...).

        Returns:
            The registered Element.

        Raises:
            DefinitionError: If the key is invalid or taken, the parent is missing,
                undefined or of the wrong kind, or the hierarchy is frozen.
        """
        if self._frozen:
            raise DefinitionError(
                DefinitionErrorKind.HIERARCHY_FROZEN,
                f"Cannot register '{key}': the hierarchy is frozen",
                key=key,
                row=row,
            )
        if not KEY_PATTERN.fullmatch(key):
            raise DefinitionError(
                DefinitionErrorKind.INVALID_KEY,
                f"Invalid key '{key}': use letters, digits and _ joined by single hyphens",
                key=key,
                row=row,
            )
        if key in self._index:
            raise DefinitionError(
                DefinitionErrorKind.DUPLICATE_KEY,
                f"Duplicate key '{key}'",
                key=key,
                row=row,
            )

        parent = self._check_parent(kind, key, parent_key, row)

        element = Element(
            key=key,
            kind=kind,
            parent_key=parent.key if parent is not None else None,
            **attributes,
        )
        if element.source is None and row is not None:
            element.source = SourceLocation(path="catalogue", line=row)

        self._index[key] = element
        if parent is not None:
            parent._children.append(key)
        return element

    def _check_parent(
        self,
        kind: ElementKind,
        key: str,
        parent_key: str | None,
        row: int | None,
    ) -> Element | None:
        expected = kind.parent_kind
        if expected is None:
            if parent_key:
                raise DefinitionError(
                    DefinitionErrorKind.INVALID_PARENT,
                    f"{kind.name.title()} '{key}' cannot have a parent ('{parent_key}')",
                    key=key,
                    row=row,
                )
            return None

        if not parent_key:
            raise DefinitionError(
                DefinitionErrorKind.MISSING_PARENT,
                f"{kind.name.title()} '{key}' has no parent {expected.value}",
                key=key,
                row=row,
            )
        parent = self._index.get(parent_key)
        if parent is None:
            raise DefinitionError(
                DefinitionErrorKind.UNDEFINED_PARENT,
                f"Parent '{parent_key}' of '{key}' is not defined",
                key=key,
                row=row,
            )
        if parent.kind != expected:
            raise DefinitionError(
                DefinitionErrorKind.INVALID_PARENT,
                f"Parent '{parent_key}' of {kind.value} '{key}' is a {parent.kind.value}, "
                f"expected a {expected.value}",
                key=key,
                row=row,
            )
        return parent

    def freeze(self) -> None:
        """Make the hierarchy read-only."""
        self._frozen = True

    @property
    def frozen(self) -> bool:
        """True once freeze() was called."""
        return self._frozen

    # ─────────────────────────────────────────────────────────────────────
    # Lookup
    # ─────────────────────────────────────────────────────────────────────

    def resolve(self, key: str) -> Element:
        """Look up an element by key.

        Raises:
            UndefinedElementError: If no element has this key.
        """
        try:
            return self._index[key]
        except KeyError:
            raise UndefinedElementError(key) from None

    def get(self, key: str) -> Element | None:
        """Look up an element by key, returning None if absent."""
        return self._index.get(key)

    def __contains__(self, key: object) -> bool:
        return key in self._index

    def __len__(self) -> int:
        return len(self._index)

    def __iter__(self) -> Iterator[Element]:
        """Iterate all elements in registration order."""
        yield from self._index.values()

    def parent(self, element: Element | str) -> Element | None:
        """Return the containing element, or None for roots."""
        if isinstance(element, str):
            element = self.resolve(element)
        if element.parent_key is None:
            return None
        return self._index[element.parent_key]

    def children(self, element: Element | str) -> Iterator[Element]:
        """Iterate contained elements in registration order."""
        if isinstance(element, str):
            element = self.resolve(element)
        for child_key in element._children:
            yield self._index[child_key]

    def ancestors(self, element: Element | str) -> Iterator[Element]:
        """Walk the ancestor chain: the element itself, its parent, ... up to the root."""
        current: Element | None = self.resolve(element) if isinstance(element, str) else element
        while current is not None:
            yield current
            current = self.parent(current)

    def is_ancestor(self, ancestor: Element, element: Element) -> bool:
        """Check if ``ancestor`` strictly contains ``element``.

        Actors never contain anything and are never contained.
        """
        if ancestor.kind == ElementKind.ACTOR or element.kind == ElementKind.ACTOR:
            return False
        parent = self.parent(element)
        while parent is not None:
            if parent.key == ancestor.key:
                return True
            parent = self.parent(parent)
        return False

    def by_kind(self, kind: ElementKind) -> Iterator[Element]:
        """Iterate elements of one kind in registration order."""
        for element in self._index.values():
            if element.kind == kind:
                yield element

    def roots(self) -> Iterator[Element]:
        """Iterate actors and systems in registration order."""
        for element in self._index.values():
            if element.parent_key is None:
                yield element
