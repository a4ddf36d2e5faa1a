"""Expression resolution: user token -> (module, task)."""

from __future__ import annotations

import logging
from collections.abc import Callable
from pathlib import Path

from wsr.errors import ModuleOrTaskNotFoundError
from wsr.workspace.discovery import build_module_record
from wsr.workspace.index import ModuleIndex
from wsr.workspace.locate import is_module_dir
from wsr.workspace.types import ModuleRecord, ResolvedContext

logger = logging.getLogger(__name__)

Matcher = Callable[[ModuleRecord], bool]


def _is_relative_expr(expr: str) -> bool:
    return expr.startswith(".")


def module_matchers(expr: str, *, cwd: Path, root: Path) -> list[Matcher]:
    """Match rules in precedence order."""
    matchers: list[Matcher] = [
        lambda m: m.package_name == expr,
        lambda m: m.short_name == expr,
    ]
    if _is_relative_expr(expr):
        from_cwd = (cwd / expr).resolve()
        matchers.append(lambda m: m.path == from_cwd)
    from_root = (root / expr).resolve()
    matchers.append(lambda m: m.path == from_root)
    return matchers


def find_module(index: ModuleIndex, expr: str, *, cwd: Path) -> ModuleRecord | None:
    """First module matching ``expr``; earlier rules beat later ones."""
    for matcher in module_matchers(expr, cwd=cwd.resolve(), root=index.root):
        for record in index:
            if matcher(record):
                return record
    return None


def find_module_with_task(
    index: ModuleIndex,
    context: Path | None,
    task: str,
) -> ModuleRecord | None:
    """Look ``task`` up in the context module, then in the root module."""
    for candidate in (index.by_path(context), index.root_module):
        if candidate is not None and candidate.has_task(task):
            return candidate
    return None


def find_nested_module(index: ModuleIndex, expr: str, *, cwd: Path) -> ModuleRecord | None:
    """
    Read an undeclared manifest directory named by ``expr`` into a record.

    Covers packages that sit below a root with no member declaration. The
    directory must lie inside the workspace root unless ``expr`` is
    cwd-relative.
    """
    candidates: list[Path] = []
    if _is_relative_expr(expr):
        candidates.append((cwd / expr).resolve())
    else:
        from_root = (index.root / expr).resolve()
        if from_root != index.root and from_root.is_relative_to(index.root):
            candidates.append(from_root)
    for directory in candidates:
        if directory.is_dir() and is_module_dir(directory):
            logger.debug("module %s read from undeclared directory %s", expr, directory)
            return build_module_record(directory)
    return None


def resolve_expression(
    index: ModuleIndex,
    expr: str,
    cmd: str | None = None,
    *,
    cwd: Path,
    context: Path | None = None,
) -> ResolvedContext:
    """
    Resolve the first CLI token (and optional task) to a module and task.

    Module precedence: package name, short name, path relative to ``cwd``
    (only for tokens starting with ``.``), path relative to the workspace root.
    A token matching no module is treated as a task name run in the context
    module, falling back to the root module. Last, a directory with its own
    manifest that the workspace never declared still resolves as a module.

    Raises:
        ModuleOrTaskNotFoundError: If neither a module nor a visible task matches
    """
    module = find_module(index, expr, cwd=cwd)
    if module is not None:
        return ResolvedContext(module=module, command=cmd)

    module = find_module_with_task(index, context, expr)
    if module is None:
        nested = find_nested_module(index, expr, cwd=cwd.resolve())
        if nested is not None:
            return ResolvedContext(module=nested, command=cmd)
        raise ModuleOrTaskNotFoundError(expr)
    logger.debug("task = %s#%s", module.package_name or "<root>", expr)
    if cmd is not None:
        logger.debug("ignoring extra token %r after task %r", cmd, expr)
    return ResolvedContext(module=module, command=expr)
