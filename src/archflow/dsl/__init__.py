"""DSL Generation module for Structurizr workspaces.

This module renders an architecture model and its views as a
Structurizr DSL workspace.
"""

from archflow.dsl.generator import DslGenerator

__all__ = ["DslGenerator"]
