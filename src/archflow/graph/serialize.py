"""Model Serialization - Export ArchitectureModel to various formats.

This module provides functions to serialize the model to JSON-compatible
dicts and to a markdown relationship table.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from archflow.graph.builder import ArchitectureModel
    from archflow.graph.elements import Element
    from archflow.graph.process import Process
    from archflow.graph.relations import Relationship


def serialize_element(element: Element) -> dict[str, Any]:
    """Serialize an Element to a JSON-compatible dict."""
    result: dict[str, Any] = {
        "key": element.key,
        "kind": element.kind.value,
        "name": element.label,
        "description": element.description,
    }
    if element.technology:
        result["technology"] = element.technology
    if element.tags:
        result["tags"] = list(element.tags)
    if element.owner:
        result["owner"] = element.owner
    if element.deprecated:
        result["deprecated"] = True
    if element.views:
        result["views"] = sorted(m.value for m in element.views)
    if element.parent_key:
        result["parent"] = element.parent_key
    if element.child_keys:
        result["children"] = list(element.child_keys)
    if element.source:
        result["source"] = {"path": element.source.path, "line": element.source.line}
    return result


def serialize_relationship(relationship: Relationship, kind: str | None = None) -> dict[str, Any]:
    result: dict[str, Any] = {
        "source": relationship.source.key,
        "destination": relationship.destination.key,
        "style": relationship.style.value,
        "description": relationship.description,
    }
    if kind is not None:
        result["kind"] = kind
    return result


def relationship_kind(model: ArchitectureModel, relationship: Relationship) -> str:
    """``direct`` if any step produced this triple, else ``implied``."""
    return "direct" if relationship.key in model.direct_relationships else "implied"


def serialize_process(process: Process) -> dict[str, Any]:
    """Serialize a Process with its steps in order."""
    steps = []
    for step in process.steps:
        entry: dict[str, Any] = {
            "source": step.source.key,
            "destination": step.destination.key,
            "style": step.style.value,
            "description": step.description,
        }
        topic = getattr(step, "topic", None)
        if topic is not None:
            entry["topic"] = topic
        if step.location:
            entry["line"] = step.location.line
        steps.append(entry)

    return {
        "name": process.name,
        "title": process.title,
        "section": process.section,
        "source": process.source_path,
        "steps": steps,
    }


def serialize_model(model: ArchitectureModel) -> dict[str, Any]:
    """Serialize an ArchitectureModel to a JSON-compatible dict.

    Args:
        model: The model to serialize.

    Returns:
        Dict with elements in use, processes, relationships (one entry per
        source, destination and style, with the merged description), and
        metadata.
    """
    elements = model.elements_in_use()
    kind_counts: dict[str, int] = {}
    for element in elements:
        kind_counts[element.kind.value] = kind_counts.get(element.kind.value, 0) + 1

    return {
        "title": model.title,
        "description": model.description,
        "elements": [serialize_element(e) for e in elements],
        "processes": [serialize_process(p) for p in model.processes],
        "relationships": [
            serialize_relationship(r, relationship_kind(model, r)) for r in model.relationships
        ],
        "metadata": {
            "element_count": len(elements),
            "process_count": len(model.processes),
            "relationship_count": len(model.relationships),
            "by_kind": kind_counts,
        },
    }


def _cell(text: str) -> str:
    return text.replace("|", "\\|").replace("\n", "<br>")


def to_markdown(model: ArchitectureModel) -> str:
    """Generate a markdown relationship table from the model.

    Args:
        model: The ArchitectureModel to render.

    Returns:
        Markdown string with one row per relationship.
    """
    lines = [
        f"# {model.title}",
        "",
    ]
    if model.description:
        lines.extend([model.description, ""])

    lines.extend(
        [
            "| Source | Destination | Style | Kind | Processes |",
            "|--------|-------------|-------|------|-----------|",
        ]
    )
    for relationship in model.relationships:
        kind = relationship_kind(model, relationship)
        lines.append(
            f"| {_cell(relationship.source.label)} | {_cell(relationship.destination.label)} "
            f"| {relationship.style.value} | {kind} | {_cell(relationship.description)} |"
        )

    lines.append("")
    return "\n".join(lines)
