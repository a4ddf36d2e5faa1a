"""Context and workspace-root detection.

Both locators are instances of one upward walk: visit the starting directory
and each parent up to the filesystem root, stop on the first directory that
satisfies a predicate, and optionally remember a fallback candidate seen on
the way.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator
from pathlib import Path

from wsr.workspace.manifests import (
    has_deno_config,
    has_package_json,
    has_workspace_evidence_file,
    read_package_json,
)

Predicate = Callable[[Path], bool]


def iter_ancestors(start: Path) -> Iterator[Path]:
    """Yield ``start`` (resolved) and every parent up to the filesystem root."""
    current = start.resolve()
    while True:
        yield current
        parent = current.parent
        if parent == current:
            return
        current = parent


def walk_ancestors(
    start: Path,
    stop: Predicate,
    *,
    fallback: Predicate | None = None,
    max_depth: int | None = None,
) -> Path | None:
    """
    Search upward for the first directory satisfying ``stop``.

    Args:
        start: Starting directory for search
        stop: Early-exit predicate; the first match is returned immediately
        fallback: Candidate predicate; the nearest match is remembered and
            returned if ``stop`` never matches
        max_depth: Number of directories to inspect (None = up to the root)

    Returns:
        Matching directory, the nearest fallback candidate, or None
    """
    candidate: Path | None = None
    for depth, current in enumerate(iter_ancestors(start)):
        if max_depth is not None and depth >= max_depth:
            break
        if stop(current):
            return current
        if candidate is None and fallback is not None and fallback(current):
            candidate = current
    return candidate


def is_module_dir(directory: Path) -> bool:
    """True when the directory holds package.json or deno.json(c)."""
    return has_package_json(directory) or has_deno_config(directory)


def is_workspace_root(directory: Path) -> bool:
    """True for a package.json directory that also shows workspace evidence."""
    if not has_package_json(directory):
        return False
    if has_workspace_evidence_file(directory):
        return True
    manifest = read_package_json(directory)
    return manifest is not None and manifest.declares_workspaces


def find_context_module(start: Path) -> Path | None:
    """Nearest ancestor governed by either manifest convention."""
    return walk_ancestors(start, is_module_dir)


def find_workspace_root(start: Path, *, exact_root: bool = False) -> Path | None:
    """
    Find the workspace root for ``start``.

    Priority order:
      1. Nearest package.json directory with workspace evidence
         (lockfile, pnpm-workspace.yaml or a ``workspaces`` field)
      2. Nearest package.json directory
      3. Nearest deno.json(c) directory

    With ``exact_root`` only ``start`` itself is inspected.
    """
    max_depth = 1 if exact_root else None
    root = walk_ancestors(start, is_workspace_root, fallback=has_package_json, max_depth=max_depth)
    if root is not None:
        return root
    return walk_ancestors(start, has_deno_config, max_depth=max_depth)
