"""Views - Which diagrams to draw for a model.

Static views come from the view flags in the catalogue; one dynamic view
is drawn per process that has enough steps. Elements that are not used
by any step never get a view.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from archflow.graph.builder import ArchitectureModel
from archflow.graph.elements import Element, ElementKind, ViewMarker
from archflow.graph.hierarchy import ElementHierarchy
from archflow.graph.parsers import ParseResult, ParseWarning
from archflow.graph.process import AsyncStep, Process, Step
from archflow.graph.relations import InteractionStyle

WILDCARD_SCOPE = "*"


class ViewKind(Enum):
    LANDSCAPE = "landscape"
    SYSTEM_CONTEXT = "system_context"
    CONTAINER = "container"
    COMPONENT = "component"
    NEIGHBOURS = "neighbours"
    DYNAMIC = "dynamic"


def to_kebab_case(value: str) -> str:
    """Lowercase ``value`` and join its alphanumeric runs with single dashes.

    >>> to_kebab_case("Checkout - Pay by card")
    'checkout-pay-by-card'
    """
    value = re.sub(r"[^0-9a-zA-Z]", "-", value)
    value = re.sub(r"-{2,}", "-", value)
    return value.strip("-").lower()


@dataclass
class DynamicStep:
    """One numbered interaction drawn in a dynamic view."""

    source: Element
    destination: Element
    description: str
    style: InteractionStyle


@dataclass
class ViewSpec:
    """One diagram to render.

    Attributes:
        kind: Diagram type.
        key: Unique view key.
        title: Title shown above the diagram.
        description: Short description of the diagram.
        scope: Element the view is about (None for landscape and ``*`` views).
        focus: For neighbours views, the component whose neighbours are drawn.
        steps: For dynamic views, the steps to draw in order.
    """

    kind: ViewKind
    key: str
    title: str
    description: str = ""
    scope: Element | None = None
    focus: Element | None = None
    steps: list[DynamicStep] = field(default_factory=list)

    @property
    def scope_key(self) -> str:
        return self.scope.key if self.scope is not None else WILDCARD_SCOPE


def dynamic_scope(hierarchy: ElementHierarchy, process: Process) -> Element | None:
    """Narrowest system or container containing every non-actor participant.

    Returns:
        The scope element, or None when the participants share no system.
    """
    common: list[str] | None = None
    for element in process.elements():
        if element.kind == ElementKind.ACTOR:
            continue
        # Strict ancestors, outermost first
        chain = [e.key for e in hierarchy.ancestors(element)][1:][::-1]
        if common is None:
            common = chain
        else:
            shared = 0
            while shared < min(len(common), len(chain)) and common[shared] == chain[shared]:
                shared += 1
            common = common[:shared]

    if not common:
        return None
    return hierarchy.resolve(common[-1])


def project(hierarchy: ElementHierarchy, element: Element, scope: Element | None) -> Element:
    """Element that stands for ``element`` at the level of detail of ``scope``.

    A ``*`` view shows actors and systems, a system view shows the
    containers of that system, and a container view shows its components.
    Anything outside the scope is shown as its outermost ancestor that
    does not contain the scope.
    """
    chain = list(hierarchy.ancestors(element))[::-1]
    if scope is None:
        return chain[0]
    scope_chain = [e.key for e in hierarchy.ancestors(scope)]
    for depth, ancestor in enumerate(chain):
        if ancestor.key == scope.key:
            return chain[min(depth + 1, len(chain) - 1)]
        if ancestor.key not in scope_chain:
            return ancestor
    return chain[-1]


def dynamic_steps(
    hierarchy: ElementHierarchy,
    process: Process,
    scope: Element | None,
) -> list[DynamicStep]:
    """Steps of a process as drawn in its dynamic view.

    Asynchronous steps show their topic on a second line. Steps that fall
    entirely inside one element at the view's level are left out.
    """
    steps = []
    for step in process.steps:
        source = project(hierarchy, step.source, scope)
        destination = project(hierarchy, step.destination, scope)
        if source.key == destination.key:
            continue
        steps.append(
            DynamicStep(
                source=source,
                destination=destination,
                description=step_label(step),
                style=step.style,
            )
        )
    return steps


def step_label(step: Step) -> str:
    if isinstance(step, AsyncStep):
        return f"{step.description}\n[{step.topic}]"
    return step.description


def _flag_warnings(model: ArchitectureModel) -> list[ParseWarning]:
    warnings = []
    for element in model.hierarchy:
        for marker in sorted(element.views, key=lambda m: m.value):
            if not marker.supported_by(element.kind):
                warnings.append(
                    ParseWarning(
                        f"{marker.value} is not supported for {element.kind.value} "
                        f"'{element.key}' and is ignored",
                        element.source.path if element.source else None,
                        element.source.line if element.source else None,
                    )
                )
    return warnings


def select_views(model: ArchitectureModel, config: dict[str, Any] | None = None) -> ParseResult[ViewSpec]:
    """Choose the diagrams to draw.

    Args:
        model: The built architecture model.
        config: Full configuration; only the ``views`` table is read.

    Returns:
        ParseResult with the views in drawing order and any warnings.
    """
    views_config = (config or {}).get("views", {})
    min_steps = views_config.get("min_dynamic_steps", 2)
    neighbour_threshold = views_config.get("neighbour_threshold", 2)

    hierarchy = model.hierarchy
    in_use = model.elements_in_use()
    views: list[ViewSpec] = []
    warnings = _flag_warnings(model)

    if views_config.get("landscape", True):
        views.append(ViewSpec(ViewKind.LANDSCAPE, "landscape", "Overview", "Overview"))

    systems = [e for e in in_use if e.kind == ElementKind.SYSTEM]
    containers = [e for e in in_use if e.kind == ElementKind.CONTAINER]
    components = [e for e in in_use if e.kind == ElementKind.COMPONENT]

    for system in systems:
        if system.requests(ViewMarker.SYSTEM_CONTEXT):
            views.append(
                ViewSpec(
                    ViewKind.SYSTEM_CONTEXT,
                    f"sc-{system.key}",
                    f"Overview of {system.label}",
                    f"Helicopter view of '{system.label}'",
                    scope=system,
                )
            )
    for system in systems:
        if system.requests(ViewMarker.CONTAINER):
            views.append(
                ViewSpec(
                    ViewKind.CONTAINER,
                    f"cont-{system.key}",
                    f"Inside {system.label}",
                    f"What is inside {system.label} and what do they interact with",
                    scope=system,
                )
            )
    for container in containers:
        if container.requests(ViewMarker.COMPONENT):
            views.append(
                ViewSpec(
                    ViewKind.COMPONENT,
                    f"comp1-{container.key}",
                    f"Inside {container.label}",
                    f"What is inside {container.label} and what do they interact with",
                    scope=container,
                )
            )
    for component in components:
        if component.requests(ViewMarker.COMPONENT):
            if model.step_count(component) > neighbour_threshold:
                views.append(
                    ViewSpec(
                        ViewKind.NEIGHBOURS,
                        f"comp2-{component.key}",
                        f"What interacts with {component.label}",
                        f"What interacts with {component.label}",
                        scope=hierarchy.parent(component),
                        focus=component,
                    )
                )

    for process in model.processes:
        if len(process) < min_steps:
            warnings.append(
                ParseWarning(
                    f"process '{process.name}' has {len(process)} step(s); no dynamic view drawn",
                    process.source_path or None,
                )
            )
            continue
        scope = dynamic_scope(hierarchy, process)
        views.append(
            ViewSpec(
                ViewKind.DYNAMIC,
                f"process-{to_kebab_case(process.name)}",
                process.name,
                process.name,
                scope=scope,
                steps=dynamic_steps(hierarchy, process, scope),
            )
        )

    return ParseResult(items=views, warnings=warnings)
