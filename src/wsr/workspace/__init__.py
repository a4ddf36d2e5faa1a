"""Workspace discovery and expression resolution."""

from wsr.workspace.discovery import discover_modules
from wsr.workspace.index import ModuleIndex
from wsr.workspace.locate import find_context_module, find_workspace_root, walk_ancestors
from wsr.workspace.resolve import resolve_expression
from wsr.workspace.types import ModuleRecord, ResolvedContext, TaskEntry, TaskSource

__all__ = [
    "ModuleIndex",
    "ModuleRecord",
    "ResolvedContext",
    "TaskEntry",
    "TaskSource",
    "discover_modules",
    "find_context_module",
    "find_workspace_root",
    "resolve_expression",
    "walk_ancestors",
]
