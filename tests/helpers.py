"""Test helpers for black-box model testing.

Factories for hierarchies, flow text and catalogue files, plus string
conversion helpers so tests can assert on observable output.
"""

from __future__ import annotations

import csv
from pathlib import Path
from typing import Iterable

from archflow.graph.aggregator import RelationshipSet
from archflow.graph.elements import ElementKind
from archflow.graph.hierarchy import ElementHierarchy
from archflow.graph.parsers import ParseResult
from archflow.graph.parsers.flow import FlowParser
from archflow.graph.process import Process


# === Hierarchy Factory ===

# (kind, key, parent key)
SHOP_ROWS = [
    ("actor", "customer", None),
    ("system", "shop", None),
    ("container", "web", "shop"),
    ("component", "web-ui", "web"),
    ("component", "cart", "web"),
    ("container", "order-api", "shop"),
    ("component", "orders", "order-api"),
    ("component", "payments", "order-api"),
    ("container", "order-db", "shop"),
    ("system", "warehouse", None),
    ("container", "stock-api", "warehouse"),
    ("component", "stock", "stock-api"),
    ("container", "stock-db", "warehouse"),
    ("system", "bank", None),
]


def make_hierarchy(
    rows: Iterable[tuple[str, str, str | None]] = SHOP_ROWS,
    title: str = "Shop",
    freeze: bool = True,
) -> ElementHierarchy:
    """Build a hierarchy from (kind, key, parent key) tuples.

    Args:
        rows: Element definitions, parents first.
        title: Model title.
        freeze: Freeze the hierarchy after registration.

    Returns:
        The populated ElementHierarchy.
    """
    hierarchy = ElementHierarchy(title=title)
    for kind, key, parent in rows:
        hierarchy.register(ElementKind(kind), key, parent_key=parent, name=key.title())
    if freeze:
        hierarchy.freeze()
    return hierarchy


# === Flow Factory ===


def parse_flow(
    hierarchy: ElementHierarchy,
    text: str,
    file_path: str = "flows/checkout.txt",
    keep_return_steps: bool = False,
) -> ParseResult[Process]:
    """Parse flow text with a fresh FlowParser."""
    parser = FlowParser(hierarchy, keep_return_steps=keep_return_steps)
    return parser.parse_text(text, file_path)


def process_names(processes: Iterable[Process]) -> list[str]:
    return [p.name for p in processes]


def steps_string(process: Process) -> list[str]:
    """Render steps as ``"src -> dst: description"`` strings."""
    return [f"{s.source.key} -> {s.destination.key}: {s.description}" for s in process.steps]


# === Relationship Helpers ===


def relationship_strings(relationships: RelationshipSet) -> list[str]:
    """Render relationships as sorted ``"src -> dst (style): description"`` strings.

    Multi-line descriptions are joined with `` | ``.
    """
    return sorted(
        f"{r.source.key} -> {r.destination.key} ({r.style.value}): "
        + " | ".join(r.description_lines)
        for r in relationships
    )


def relationship_pairs(relationships: RelationshipSet) -> set[tuple[str, str]]:
    return {(r.source.key, r.destination.key) for r in relationships}


# === Catalogue Files ===

ELEMENT_HEADER = [
    "Actor",
    "System",
    "Container",
    "Component",
    "Name",
    "Technology",
    "Tags",
    "Owner",
    "Deprecated",
    "Description",
    "System_Context_View",
    "Container_View",
    "Component_View",
]


def write_catalogue(
    directory: Path,
    rows: list[dict[str, str]],
    title: str = "Shop",
    description: str = "Online shop",
) -> Path:
    """Write general.csv and elements.csv.

    Args:
        directory: Catalogue directory (created if missing).
        rows: Element rows keyed by lowercase column name.
        title: Value of the Title entry.
        description: Value of the Description entry.

    Returns:
        The catalogue directory.
    """
    directory.mkdir(parents=True, exist_ok=True)
    with open(directory / "general.csv", "w", encoding="utf-8", newline="") as f:
        writer = csv.writer(f)
        writer.writerow(["Title", title])
        writer.writerow(["Description", description])
    with open(directory / "elements.csv", "w", encoding="utf-8", newline="") as f:
        writer = csv.writer(f)
        writer.writerow(ELEMENT_HEADER)
        for row in rows:
            writer.writerow([row.get(column.lower(), "") for column in ELEMENT_HEADER])
    return directory


SHOP_CATALOGUE = [
    {"actor": "customer", "name": "Customer"},
    {"system": "shop", "name": "Shop", "system_context_view": "x", "container_view": "x"},
    {"system": "shop", "container": "web", "name": "Web", "technology": "React"},
    {"system": "shop", "container": "order-api", "technology": "Python", "component_view": "x"},
    {"container": "order-api", "component": "orders", "component_view": "yes"},
    {"container": "order-api", "component": "payments"},
    {"system": "shop", "container": "order-db", "tags": "Database"},
    {"system": "warehouse", "name": "Warehouse"},
    {"system": "warehouse", "container": "stock-api", "deprecated": "x"},
    {"system": "bank", "name": "Bank"},
]

CHECKOUT_FLOW = """\
title Checkout
== Browse ==
customer -> web : open shop
web -> order-api : list products
== Pay ==
customer -> web : pay
web -> orders : place order
orders -> payments : charge
payments -> bank : authorize
orders -->(1) stock-api : [order-placed] reserve stock
"""

RESTOCK_FLOW = """\
title Restock
' nightly job
stock-api -> order-db : read open orders
stock-api -> order-db : read cancelled orders
"""


def write_project(root: Path) -> Path:
    """Write a catalogue/ and flows/ directory pair under ``root``."""
    write_catalogue(root / "catalogue", SHOP_CATALOGUE)
    flows = root / "flows"
    flows.mkdir(parents=True, exist_ok=True)
    (flows / "checkout.txt").write_text(CHECKOUT_FLOW, encoding="utf-8")
    (flows / "restock.puml").write_text(RESTOCK_FLOW, encoding="utf-8")
    return root
