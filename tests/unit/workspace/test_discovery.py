"""Tests for module discovery and index construction."""

from __future__ import annotations

from pathlib import Path

from tests.helpers import write_json, write_text
from wsr.workspace.discovery import (
    discover_modules,
    expand_member_globs,
    find_deno_module_dirs,
)
from wsr.workspace.index import ModuleIndex
from wsr.workspace.types import ModuleRecord, TaskSource


def _names(index: ModuleIndex) -> list[str]:
    return [r.short_name for r in index]


def test_pnpm_members_and_root(pnpm_workspace: Path) -> None:
    index = discover_modules(pnpm_workspace)

    assert _names(index) == ["bar", "foo", "root"]
    root = index.root_module
    assert root is not None
    assert root.is_root
    assert root.path == pnpm_workspace
    assert root.package_name == "example"
    assert list(root.npm_scripts or {}) == ["test", "test:foo", "test:bar"]

    foo = index[1]
    assert foo.package_name == "@pkg/foo"
    assert foo.npm_scripts == {"test": "exit 0"}
    assert foo.deno_tasks is None
    assert not foo.is_root


def test_npm_workspaces_object_form(tmp_path: Path) -> None:
    root = tmp_path / "repo"
    write_json(root / "package.json", {"workspaces": {"packages": ["apps/*"]}})
    write_json(root / "apps" / "web" / "package.json", {"name": "web", "scripts": {"dev": "vite"}})
    write_json(root / "libs" / "util" / "package.json", {"name": "util"})

    index = discover_modules(root)

    assert _names(index) == ["root", "web"]
    assert index.root_module is not None
    assert index.root_module.package_name == "root"


def test_pnpm_yaml_takes_precedence_over_workspaces_field(tmp_path: Path) -> None:
    root = tmp_path / "repo"
    write_json(root / "package.json", {"workspaces": ["libs/*"]})
    write_text(root / "pnpm-workspace.yaml", "packages:\n  - apps/*\n")
    write_json(root / "apps" / "a" / "package.json", {"name": "a"})
    write_json(root / "libs" / "b" / "package.json", {"name": "b"})

    assert _names(discover_modules(root)) == ["a", "root"]


def test_member_without_manifest_is_listed(tmp_path: Path) -> None:
    root = tmp_path / "repo"
    write_json(root / "package.json", {"workspaces": ["packages/*"]})
    (root / "packages" / "empty").mkdir(parents=True)

    index = discover_modules(root)
    empty = index.by_path((root / "packages" / "empty").resolve())
    assert empty is not None
    assert empty.npm_scripts is None
    assert empty.deno_tasks is None
    assert empty.tasks() == []


def test_no_workspace_declaration_yields_root_only(single_package: Path) -> None:
    index = discover_modules(single_package)
    assert _names(index) == ["root"]
    assert index.root_module is not None
    assert index.root_module.package_name == "root"


def test_expand_member_globs_negation_and_files(tmp_path: Path) -> None:
    root = tmp_path.resolve()
    for name in ("a", "b", "test-utils"):
        (root / "packages" / name).mkdir(parents=True)
    write_text(root / "packages" / "README.md", "not a module")

    members = expand_member_globs(root, ["./packages/*/", "!packages/test-*"])
    assert members == [root / "packages" / "a", root / "packages" / "b"]


def test_expand_member_globs_recursive(tmp_path: Path) -> None:
    root = tmp_path.resolve()
    (root / "apps" / "web" / "nested").mkdir(parents=True)
    members = expand_member_globs(root, ["apps/**"])
    assert root / "apps" / "web" in members
    assert root / "apps" / "web" / "nested" in members


def test_deno_search_any_depth_ignoring_node_modules(tmp_path: Path) -> None:
    root = tmp_path.resolve()
    write_json(root / "deno.json", {})
    write_json(root / "a" / "b" / "c" / "deno.jsonc", {})
    write_json(root / "node_modules" / "x" / "deno.json", {})
    write_json(root / ".git" / "deno.json", {})

    assert find_deno_module_dirs(root) == [root, root / "a" / "b" / "c"]
    assert root / "node_modules" / "x" in find_deno_module_dirs(root, ignore_paths=())


def test_deno_modules_outside_member_globs(mixed_workspace: Path) -> None:
    index = discover_modules(mixed_workspace)

    assert _names(index) == ["foo", "root", "tasks"]
    tasks = index[2]
    assert tasks.deno_tasks == {"test": "echo deno"}
    assert tasks.npm_scripts is None
    assert tasks.package_name is None


def test_mixed_member_merges_both_conventions(tmp_path: Path) -> None:
    root = tmp_path / "repo"
    write_json(root / "package.json", {"workspaces": ["packages/*"]})
    write_json(
        root / "packages" / "both" / "package.json",
        {"name": "@pkg/both", "scripts": {"build": "tsc", "test": "vitest"}},
    )
    write_json(root / "packages" / "both" / "deno.json", {"tasks": {"test": "deno test", "fmt": "deno fmt"}})

    index = discover_modules(root)
    paths = [r.path for r in index]
    assert len(paths) == len(set(paths))

    both = index.by_path((root / "packages" / "both").resolve())
    assert both is not None
    assert both.is_mixed
    entries = {e.name: e for e in both.tasks()}
    assert entries["build"].source is TaskSource.NPM
    assert entries["fmt"].source is TaskSource.DENO
    assert entries["test"].source is TaskSource.BOTH
    assert entries["test"].is_collision
    assert entries["test"].npm_command == "vitest"
    assert entries["test"].deno_command == "deno test"


def test_deno_only_directory_absorbs_package_json(tmp_path: Path) -> None:
    root = tmp_path / "repo"
    write_json(root / "package.json", {"name": "r"})
    write_json(root / "tools" / "deno.json", {"tasks": {"gen": "deno run gen.ts"}})
    write_json(root / "tools" / "package.json", {"name": "@r/tools", "scripts": {"lint": "eslint ."}})

    tools = discover_modules(root).by_path((root / "tools").resolve())
    assert tools is not None
    assert tools.package_name == "@r/tools"
    assert tools.npm_scripts == {"lint": "eslint ."}
    assert tools.deno_tasks == {"gen": "deno run gen.ts"}


def test_root_record_present_once_when_root_is_member(tmp_path: Path) -> None:
    root = tmp_path / "repo"
    write_json(root / "package.json", {"name": "r", "workspaces": [".", "packages/*"], "scripts": {"a": "x"}})
    write_json(root / "deno.json", {"tasks": {"b": "y"}})
    write_json(root / "packages" / "p" / "package.json", {"name": "p"})

    index = discover_modules(root)
    at_root = [r for r in index if r.path == root.resolve()]
    assert len(at_root) == 1
    assert at_root[0].is_root
    assert at_root[0].short_name == "root"
    assert at_root[0].deno_tasks == {"b": "y"}


def test_deno_only_root_has_no_root_record(tmp_path: Path) -> None:
    root = tmp_path / "denoroot"
    write_json(root / "deno.json", {"tasks": {"a": "echo a"}})
    write_json(root / "lib" / "deno.json", {"tasks": {"b": "echo b"}})

    index = discover_modules(root)
    assert index.root_module is None
    assert _names(index) == ["denoroot", "lib"]


def test_discovery_is_idempotent(pnpm_workspace: Path) -> None:
    first = discover_modules(pnpm_workspace)
    second = discover_modules(pnpm_workspace)
    assert list(first) == list(second)


def test_duplicate_short_names_sorted_by_path(tmp_path: Path) -> None:
    root = tmp_path / "repo"
    write_json(root / "package.json", {"workspaces": ["apps/*", "libs/*"]})
    write_json(root / "libs" / "core" / "package.json", {"name": "@l/core"})
    write_json(root / "apps" / "core" / "package.json", {"name": "@a/core"})

    index = discover_modules(root)
    cores = [r for r in index if r.short_name == "core"]
    assert [r.package_name for r in cores] == ["@a/core", "@l/core"]
    assert not index.is_unique_short_name(cores[0])
    assert index.is_unique_short_name(index.root_module)  # type: ignore[arg-type]


def test_index_keeps_root_record_over_ordinary(tmp_path: Path) -> None:
    path = tmp_path.resolve()
    ordinary = ModuleRecord(path=path, short_name=path.name)
    root = ModuleRecord(path=path, short_name="root", package_name="root", is_root=True)

    index = ModuleIndex(path, [ordinary, root])
    assert len(index) == 1
    assert index[0].is_root
    assert index.display_path(index[0]) == ""
