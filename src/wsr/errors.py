"""Fail-closed error types for wsr.

Every user-facing failure derives from ``WsrError`` so the CLI can report it
as a single diagnostic line and exit non-zero.
"""

from __future__ import annotations

from pathlib import Path


class WsrError(RuntimeError):
    """Base class for terminal, non-retryable wsr failures."""


class WorkspaceNotFoundError(WsrError):
    """No ancestor of the starting directory exposes any manifest."""

    def __init__(self, start: Path):
        super().__init__("module not found")
        self.start = start


class ModuleOrTaskNotFoundError(WsrError):
    """Token matched no module and no task visible from context or root."""

    def __init__(self, expr: str):
        super().__init__(f'module or task not found for "{expr}"')
        self.expr = expr


class TaskNotFoundError(WsrError):
    """Resolved module defines the task under neither convention."""

    def __init__(self, task: str, module_path: Path):
        super().__init__(f"task not found {task}")
        self.task = task
        self.module_path = module_path


class TaskCollisionError(WsrError):
    """Resolved module defines the task in both package.json and deno.json(c)."""

    def __init__(self, task: str, module_path: Path):
        super().__init__(f'"{task}" is duplicated in both deno.json(c) and package.json')
        self.task = task
        self.module_path = module_path


class ManifestError(WsrError):
    """Manifest file exists but cannot be parsed into the expected shape."""


class ConfigError(WsrError):
    """Repository config file is malformed."""


class RunnerNotFoundError(WsrError):
    """Task runner executable is not on PATH."""

    def __init__(self, runner: str):
        super().__init__(f"runner not found: {runner}")
        self.runner = runner
