"""
archflow - Architecture models from interaction flows

Turns an element catalogue (actors, systems, containers, components) and a
directory of sequence-style flow files into one C4 architecture model: the
element hierarchy plus a deduplicated relationship graph, including the
relationships implied at every level of the hierarchy.
"""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("archflow")
except PackageNotFoundError:
    __version__ = "0.0.0+unknown"  # Not installed
__author__ = "Anspar"
__license__ = "MIT"

from archflow.errors import (
    ArchflowError,
    DefinitionError,
    DefinitionErrorKind,
    DuplicateProcessNameError,
    FlowSyntaxError,
    UndefinedElementError,
)
from archflow.graph.builder import ArchitectureModel, ModelBuilder
from archflow.graph.hierarchy import ElementHierarchy

__all__ = [
    "__version__",
    "ArchflowError",
    "ArchitectureModel",
    "DefinitionError",
    "DefinitionErrorKind",
    "DuplicateProcessNameError",
    "ElementHierarchy",
    "FlowSyntaxError",
    "ModelBuilder",
    "UndefinedElementError",
]
