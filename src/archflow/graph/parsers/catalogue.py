"""CatalogueParser - Element catalogue rows to the element hierarchy.

The catalogue is the two-sheet element spreadsheet exported as CSV:

- ``general.csv``: two columns (key, value) without header; ``Title`` is
  required, ``Description`` is optional.
- ``elements.csv``: one element per row. Which of the four key columns
  (actor, system, container, component) are filled decides the kind.

Row numbers count the header as row 1, as a spreadsheet does.
"""

from __future__ import annotations

import csv
from dataclasses import dataclass, field, fields
from io import StringIO
from pathlib import Path

from archflow.errors import CatalogueError, DefinitionError, DefinitionErrorKind
from archflow.graph.elements import Element, ElementKind, SourceLocation, ViewMarker
from archflow.graph.hierarchy import ElementHierarchy

TRUTHY_VALUES = {"x", "y", "yes", "true", "1"}

DEFAULT_COLUMNS: dict[str, str] = {
    "actor": "actor",
    "system": "system",
    "container": "container",
    "component": "component",
    "name": "name",
    "technology": "technology",
    "tags": "tags",
    "owner": "owner",
    "deprecated": "deprecated",
    "description": "description",
    "system_context_view": "system_context_view",
    "container_view": "container_view",
    "component_view": "component_view",
}

KEY_COLUMNS = ("actor", "system", "container", "component")


def is_truthy(value: str) -> bool:
    """Interpret a spreadsheet flag cell."""
    return value.strip().lower() in TRUTHY_VALUES


@dataclass
class CatalogueRow:
    """One row of the elements sheet, with all cells stripped."""

    row: int
    actor: str = ""
    system: str = ""
    container: str = ""
    component: str = ""
    name: str = ""
    technology: str = ""
    tags: str = ""
    owner: str = ""
    deprecated: str = ""
    description: str = ""
    system_context_view: str = ""
    container_view: str = ""
    component_view: str = ""

    def is_blank(self) -> bool:
        return not any(getattr(self, f.name) for f in fields(self) if f.name != "row")

    @property
    def views(self) -> frozenset[ViewMarker]:
        return frozenset(m for m in ViewMarker if is_truthy(getattr(self, m.value)))


@dataclass
class Catalogue:
    """Parsed catalogue content."""

    title: str
    description: str = ""
    rows: list[CatalogueRow] = field(default_factory=list)
    source_path: str = "elements.csv"


def classify_row(row: CatalogueRow) -> ElementKind:
    """Decide which element kind a row defines.

    Args:
        row: The catalogue row.

    Returns:
        Exactly one ElementKind.

    Raises:
        DefinitionError: If the row matches no kind or more than one.
    """
    matches = []
    if row.actor:
        matches.append(ElementKind.ACTOR)
    if row.system and not row.container and not row.component:
        matches.append(ElementKind.SYSTEM)
    if row.container and not row.component:
        matches.append(ElementKind.CONTAINER)
    if row.component:
        matches.append(ElementKind.COMPONENT)

    if not matches:
        raise DefinitionError(
            DefinitionErrorKind.ROW_MATCHES_NO_KIND,
            "did not match any element type",
            row=row.row,
        )
    if len(matches) > 1:
        kinds = ", ".join(k.value for k in matches)
        raise DefinitionError(
            DefinitionErrorKind.AMBIGUOUS_ROW,
            f"matches multiple element types ({kinds})",
            row=row.row,
        )
    return matches[0]


def register_row(
    hierarchy: ElementHierarchy,
    row: CatalogueRow,
    source_path: str = "elements.csv",
) -> Element:
    """Classify a row and register the element it defines."""
    kind = classify_row(row)
    key = getattr(row, kind.value)
    parent_key = {
        ElementKind.CONTAINER: row.system,
        ElementKind.COMPONENT: row.container,
    }.get(kind)

    if kind == ElementKind.COMPONENT and row.system:
        container = hierarchy.get(row.container)
        if container is not None and container.parent_key != row.system:
            raise DefinitionError(
                DefinitionErrorKind.INVALID_PARENT,
                f"Component '{key}' names system '{row.system}' but its container "
                f"'{row.container}' belongs to '{container.parent_key}'",
                key=key,
                row=row.row,
            )

    element = hierarchy.register(
        kind,
        key,
        parent_key=parent_key,
        row=row.row,
        name=row.name or key,
        description=row.description,
        technology=row.technology or None,
        tags=tuple(t.strip() for t in row.tags.split(",") if t.strip()),
        owner=row.owner or None,
        deprecated=is_truthy(row.deprecated),
        views=row.views,
        source=SourceLocation(source_path, row.row),
    )

    return element


class CatalogueParser:
    """Reads the catalogue CSV files.

    Args:
        columns: Mapping of row field name -> column header, merged over
            DEFAULT_COLUMNS. Headers match case-insensitively.
    """

    def __init__(self, columns: dict[str, str] | None = None) -> None:
        self.columns = dict(DEFAULT_COLUMNS)
        if columns:
            self.columns.update(columns)

    def parse_general(self, text: str, file_path: str = "general.csv") -> tuple[str, str]:
        """Parse the general sheet into (title, description)."""
        values: dict[str, str] = {}
        for cells in csv.reader(StringIO(text)):
            if len(cells) >= 2 and cells[0].strip():
                values[cells[0].strip().lower()] = cells[1].strip()

        if not values.get("title"):
            raise CatalogueError(f"{file_path}: missing 'Title' entry")
        return values["title"], values.get("description", "")

    def parse_elements(self, text: str, file_path: str = "elements.csv") -> list[CatalogueRow]:
        """Parse the elements sheet into rows, skipping blank ones."""
        reader = csv.reader(StringIO(text))
        header = next(reader, None)
        if header is None:
            return []

        positions = {cell.strip().lower(): i for i, cell in enumerate(header)}
        field_positions: dict[str, int] = {}
        for field_name, column in self.columns.items():
            position = positions.get(column.strip().lower())
            if position is not None:
                field_positions[field_name] = position

        if not any(k in field_positions for k in KEY_COLUMNS):
            expected = ", ".join(self.columns[k] for k in KEY_COLUMNS)
            raise CatalogueError(f"{file_path}: header has none of the key columns ({expected})")

        rows = []
        for row_number, cells in enumerate(reader, start=2):
            values = {
                name: cells[pos].strip() if pos < len(cells) else ""
                for name, pos in field_positions.items()
            }
            row = CatalogueRow(row=row_number, **values)
            if not row.is_blank():
                rows.append(row)
        return rows

    def parse_directory(
        self,
        directory: Path,
        general_file: str = "general.csv",
        elements_file: str = "elements.csv",
    ) -> Catalogue:
        """Read both catalogue files from a directory.

        Raises:
            CatalogueError: If a file is missing or malformed.
        """
        general_path = directory / general_file
        elements_path = directory / elements_file
        for path in (general_path, elements_path):
            if not path.is_file():
                raise CatalogueError(f"Catalogue file not found: {path}")

        title, description = self.parse_general(
            general_path.read_text(encoding="utf-8-sig"), str(general_path)
        )
        rows = self.parse_elements(
            elements_path.read_text(encoding="utf-8-sig"), str(elements_path)
        )
        return Catalogue(
            title=title,
            description=description,
            rows=rows,
            source_path=str(elements_path),
        )


def build_hierarchy(catalogue: Catalogue) -> ElementHierarchy:
    """Register every catalogue row, in order, and freeze the result.

    Rows must list parents before children.
    """
    hierarchy = ElementHierarchy(title=catalogue.title, description=catalogue.description)
    for row in catalogue.rows:
        register_row(hierarchy, row, catalogue.source_path)
    hierarchy.freeze()
    return hierarchy
