"""Module discovery for a resolved workspace root.

Two independent conventions feed the index:

- package.json workspaces: member globs from pnpm-workspace.yaml or the root
  package.json ``workspaces`` field
- deno.json(c): every occurrence under the root, at any depth

A directory covered by both becomes one mixed record. The root package.json
always contributes one extra record flagged ``is_root``.
"""

from __future__ import annotations

import fnmatch
import logging
import os
from collections.abc import Iterable
from pathlib import Path

from wsr.config import DEFAULT_IGNORE_PATHS
from wsr.errors import ManifestError
from wsr.workspace.index import ModuleIndex
from wsr.workspace.manifests import (
    DENO_CONFIG_NAMES,
    read_deno_config,
    read_package_json,
    read_pnpm_workspace,
)
from wsr.workspace.types import ROOT_SHORT_NAME, ModuleRecord

logger = logging.getLogger(__name__)


def _normalize_pattern(pattern: str) -> str:
    normalized = pattern.strip()
    while normalized.startswith("./"):
        normalized = normalized[2:]
    return normalized.rstrip("/")


def _glob_dirs(root: Path, pattern: str) -> list[Path]:
    normalized = _normalize_pattern(pattern)
    if normalized in ("", "."):
        return [root]
    if Path(normalized).is_absolute():
        raise ManifestError(f"Workspace pattern must be relative to the root: {pattern}")
    return [p.resolve() for p in root.glob(normalized) if p.is_dir()]


def expand_member_globs(root: Path, patterns: Iterable[str]) -> list[Path]:
    """
    Expand workspace member globs relative to ``root``.

    Patterns prefixed with ``!`` remove matches of the remaining pattern.
    Only directories are returned, in deterministic sorted order.
    """
    included: dict[Path, None] = {}
    excluded: set[Path] = set()
    for pattern in patterns:
        if pattern.startswith("!"):
            excluded.update(_glob_dirs(root, pattern[1:]))
            continue
        for directory in _glob_dirs(root, pattern):
            included.setdefault(directory, None)
    return sorted((p for p in included if p not in excluded), key=lambda p: p.as_posix())


def read_member_patterns(root: Path) -> list[str]:
    """Workspace member globs declared at ``root``; empty when none are declared."""
    pnpm_packages = read_pnpm_workspace(root)
    if pnpm_packages is not None:
        return pnpm_packages

    manifest = read_package_json(root)
    if manifest is not None and manifest.workspaces is not None:
        return manifest.workspaces
    return []


def _is_ignored(name: str, relative: str, ignore_paths: Iterable[str]) -> bool:
    return any(
        fnmatch.fnmatch(name, pattern) or fnmatch.fnmatch(relative, pattern)
        for pattern in ignore_paths
    )


def find_deno_module_dirs(
    root: Path,
    ignore_paths: Iterable[str] = DEFAULT_IGNORE_PATHS,
) -> list[Path]:
    """Every directory under ``root`` (inclusive) holding deno.json or deno.jsonc."""
    patterns = tuple(ignore_paths)
    found: list[Path] = []
    for dirpath, dirnames, filenames in os.walk(root):
        current = Path(dirpath)
        rel_dir = current.relative_to(root)
        dirnames[:] = sorted(
            d for d in dirnames if not _is_ignored(d, (rel_dir / d).as_posix(), patterns)
        )
        if any(name in filenames for name in DENO_CONFIG_NAMES):
            found.append(current.resolve())
    return sorted(found, key=lambda p: p.as_posix())


def build_module_record(directory: Path) -> ModuleRecord:
    """Read whichever manifests live in ``directory`` into one record."""
    manifest = read_package_json(directory)
    deno = read_deno_config(directory)
    return ModuleRecord(
        path=directory,
        short_name=directory.name,
        package_name=manifest.name if manifest else None,
        npm_scripts=manifest.scripts if manifest else None,
        deno_tasks=deno.tasks if deno else None,
    )


def build_root_record(root: Path) -> ModuleRecord | None:
    """Synthesized record for the workspace root; None without a root package.json."""
    manifest = read_package_json(root)
    if manifest is None:
        return None
    deno = read_deno_config(root)
    return ModuleRecord(
        path=root,
        short_name=ROOT_SHORT_NAME,
        package_name=manifest.name or ROOT_SHORT_NAME,
        npm_scripts=manifest.scripts,
        deno_tasks=deno.tasks if deno else None,
        is_root=True,
    )


def discover_modules(
    root: Path,
    ignore_paths: Iterable[str] = DEFAULT_IGNORE_PATHS,
) -> ModuleIndex:
    """
    Build the module index for a workspace root.

    Args:
        root: Resolved workspace root
        ignore_paths: fnmatch patterns pruned from the deno.json(c) search

    Returns:
        ModuleIndex sorted by short name, one record per directory
    """
    root = root.resolve()
    records: list[ModuleRecord] = []
    covered: set[Path] = set()

    root_record = build_root_record(root)
    if root_record is not None:
        records.append(root_record)
        covered.add(root)

    for member in expand_member_globs(root, read_member_patterns(root)):
        if member in covered:
            continue
        records.append(build_module_record(member))
        covered.add(member)

    for directory in find_deno_module_dirs(root, ignore_paths):
        if directory in covered:
            continue
        records.append(build_module_record(directory))
        covered.add(directory)

    index = ModuleIndex(root, records)
    for record in index:
        logger.debug(
            "module %s path=%s npm=%d deno=%d%s",
            record.short_name,
            index.display_path(record) or ".",
            len(record.npm_scripts or {}),
            len(record.deno_tasks or {}),
            " (root)" if record.is_root else "",
        )
    return index
