"""DSL Generator for Structurizr workspaces.

This module renders an ArchitectureModel and its selected views as a
Structurizr DSL workspace. Uses a Jinja2 template shipped with the package.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from jinja2 import Environment, PackageLoader, select_autoescape

from archflow import __version__

if TYPE_CHECKING:
    from archflow.graph.builder import ArchitectureModel
    from archflow.graph.elements import Element
    from archflow.graph.views import ViewSpec

DEPRECATED_TAG = "Deprecated"


def dsl_string(value: object) -> str:
    """Quote a value as a DSL string literal."""
    text = "" if value is None else str(value)
    text = text.replace("\\", "\\\\").replace('"', '\\"').replace("\n", "\\n")
    return f'"{text}"'


@dataclass
class ElementNode:
    """An element in use, with its tags and the in-use elements it contains."""

    element: Element
    tags: list[str] = field(default_factory=list)
    children: list[ElementNode] = field(default_factory=list)


def element_tags(element: Element) -> list[str]:
    """Tags drawn on an element: technology, catalogue tags, deprecation."""
    tags = []
    if element.technology:
        tags.append(element.technology)
    tags.extend(t for t in element.tags if t not in tags)
    if element.deprecated:
        tags.append(DEPRECATED_TAG)
    return tags


class DslGenerator:
    """Generates a Structurizr DSL workspace from an ArchitectureModel.

    Only elements used by at least one step (and their ancestors) are
    written. Every relationship, direct and implied, is written
    explicitly.

    Args:
        model: The built architecture model.
        views: Views chosen by select_views().
        version: Version string for the header (defaults to archflow version).
    """

    def __init__(
        self,
        model: ArchitectureModel,
        views: list[ViewSpec] | None = None,
        version: str | None = None,
    ) -> None:
        self.model = model
        self.views = list(views or [])
        self.version = version if version is not None else __version__

    def _environment(self) -> Environment:
        env = Environment(
            loader=PackageLoader("archflow.dsl", "templates"),
            autoescape=select_autoescape(["html", "xml"]),
        )
        env.filters["dsl"] = dsl_string
        return env

    def build_tree(self) -> list[ElementNode]:
        """Nest the elements in use under their parents, in catalogue order."""
        nodes: dict[str, ElementNode] = {}
        roots: list[ElementNode] = []
        for element in self.model.elements_in_use():
            node = ElementNode(element, tags=element_tags(element))
            nodes[element.key] = node
            if element.parent_key is None:
                roots.append(node)
            else:
                nodes[element.parent_key].children.append(node)
        return roots

    def generate(self) -> str:
        """Generate the complete workspace.

        Returns:
            Structurizr DSL text.
        """
        template = self._environment().get_template("workspace.dsl.j2")
        content = template.render(
            model=self.model,
            tree=self.build_tree(),
            relationships=list(self.model.relationships),
            views=self.views,
            version=self.version,
        )
        return content.rstrip("\n") + "\n"
