"""Workspace domain types."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path

ROOT_SHORT_NAME = "root"


class TaskSource(str, Enum):
    """Which manifest convention defines a task."""

    NPM = "npm"
    DENO = "deno"
    BOTH = "both"


@dataclass(frozen=True)
class TaskEntry:
    """One task name merged across package.json scripts and deno tasks."""

    name: str
    source: TaskSource
    npm_command: str | None = None
    deno_command: str | None = None

    @property
    def is_collision(self) -> bool:
        return self.source is TaskSource.BOTH


@dataclass(frozen=True)
class ModuleRecord:
    """A directory that can host tasks."""

    path: Path
    short_name: str
    package_name: str | None = None
    npm_scripts: dict[str, str] | None = None
    deno_tasks: dict[str, str] | None = None
    is_root: bool = False

    @property
    def is_mixed(self) -> bool:
        return self.npm_scripts is not None and self.deno_tasks is not None

    def tasks(self) -> list[TaskEntry]:
        """Merge both task maps into tagged entries, package.json order first."""
        npm = self.npm_scripts or {}
        deno = self.deno_tasks or {}
        entries: list[TaskEntry] = []
        for name, command in npm.items():
            if name in deno:
                entries.append(TaskEntry(name, TaskSource.BOTH, command, deno[name]))
            else:
                entries.append(TaskEntry(name, TaskSource.NPM, npm_command=command))
        for name, command in deno.items():
            if name not in npm:
                entries.append(TaskEntry(name, TaskSource.DENO, deno_command=command))
        return entries

    def task(self, name: str) -> TaskEntry | None:
        for entry in self.tasks():
            if entry.name == name:
                return entry
        return None

    def has_task(self, name: str) -> bool:
        return self.task(name) is not None


@dataclass(frozen=True)
class ResolvedContext:
    """Outcome of expression resolution.

    ``command`` is None when the caller asked to list the module's tasks.
    """

    module: ModuleRecord
    command: str | None = None

    @property
    def is_listing(self) -> bool:
        return self.command is None
