"""Task inventory rendering for list mode."""

from __future__ import annotations

from collections.abc import Iterable

from wsr.workspace.index import ModuleIndex
from wsr.workspace.types import ModuleRecord, TaskSource

MIXED_PREFIX = "[Mixed] "
NPM_PREFIX = "📦 "
DENO_PREFIX = "🦕 "
COLLISION_PREFIX = "🔥 "


def module_prefix(record: ModuleRecord) -> str:
    if record.is_mixed:
        return MIXED_PREFIX
    if record.npm_scripts is not None:
        return NPM_PREFIX
    if record.deno_tasks is not None:
        return DENO_PREFIX
    return ""


def task_prefix(record: ModuleRecord, name: str, source: TaskSource) -> str:
    entry = record.task(name)
    if entry is not None and entry.is_collision:
        return COLLISION_PREFIX
    if not record.is_mixed:
        return ""
    return NPM_PREFIX if source is TaskSource.NPM else DENO_PREFIX


def module_header(index: ModuleIndex, record: ModuleRecord) -> str:
    """Unique short names render as a label; colliding ones as their root-relative path."""
    relative = index.display_path(record)
    if not index.is_unique_short_name(record):
        return f"{module_prefix(record)}{relative or '.'}"
    label = record.short_name
    if record.package_name and record.package_name != record.short_name:
        label = f"{label} [{record.package_name}]"
    return f"{module_prefix(record)}{label} <root>/{relative}"


def task_lines(record: ModuleRecord) -> list[tuple[str, str, TaskSource]]:
    """(name, command, source) rows: package.json scripts first, then deno tasks."""
    rows = [(name, cmd, TaskSource.NPM) for name, cmd in (record.npm_scripts or {}).items()]
    rows.extend((name, cmd, TaskSource.DENO) for name, cmd in (record.deno_tasks or {}).items())
    return rows


def longest_task_name(records: Iterable[ModuleRecord]) -> int:
    return max((len(name) for r in records for name, _, _ in task_lines(r)), default=0)


def render_module(index: ModuleIndex, record: ModuleRecord, width: int | None = None) -> list[str]:
    if width is None:
        width = longest_task_name([record])
    lines = [module_header(index, record)]
    for name, command, source in task_lines(record):
        lines.append(f"  {task_prefix(record, name, source)}{name.ljust(width)} $ {command.strip()}")
    return lines


def render_listing(index: ModuleIndex, module: ModuleRecord | None = None) -> list[str]:
    """Render one module, or every module in index order with shared padding."""
    if module is not None:
        return render_module(index, module)
    width = longest_task_name(index)
    lines: list[str] = []
    for record in index:
        lines.extend(render_module(index, record, width))
    return lines
