"""Pytest configuration and workspace fixtures for wsr tests."""
from __future__ import annotations

from pathlib import Path

import pytest

from tests.helpers import write_json, write_text


@pytest.fixture
def pnpm_workspace(tmp_path: Path) -> Path:
    """pnpm workspace: root scripts plus packages/foo and packages/bar."""
    root = tmp_path / "pnpm-fixture"
    write_json(
        root / "package.json",
        {
            "name": "example",
            "version": "1.0.0",
            "packageManager": "pnpm@8.6.0",
            "scripts": {
                "test": "pnpm test:foo && pnpm test:bar",
                "test:foo": "cd packages/foo && pnpm test",
                "test:bar": "cd packages/bar && pnpm test",
            },
        },
    )
    write_text(root / "pnpm-workspace.yaml", "packages:\n  - 'packages/*'\n")
    write_json(root / "packages" / "foo" / "package.json", {"name": "@pkg/foo", "scripts": {"test": "exit 0"}})
    write_json(root / "packages" / "bar" / "package.json", {"name": "@pkg/bar", "scripts": {"test": "exit 0"}})
    return root.resolve()


@pytest.fixture
def npm_workspace(tmp_path: Path) -> Path:
    """npm workspaces declared in package.json plus a package-lock.json."""
    root = tmp_path / "npm-fixture"
    write_json(
        root / "package.json",
        {
            "name": "example",
            "workspaces": ["packages/*"],
            "scripts": {"test": "npm test -w packages"},
        },
    )
    write_json(root / "package-lock.json", {"lockfileVersion": 3})
    write_json(root / "packages" / "foo" / "package.json", {"name": "@pkg/foo", "scripts": {"test": "exit 0"}})
    write_json(root / "packages" / "bar" / "package.json", {"name": "@pkg/bar", "scripts": {"test": "exit 0"}})
    return root.resolve()


@pytest.fixture
def single_package(tmp_path: Path) -> Path:
    root = tmp_path / "single-fixture"
    write_json(root / "package.json", {"scripts": {"test": "echo 1"}})
    return root.resolve()


@pytest.fixture
def nested_packages(tmp_path: Path) -> Path:
    """Root without member declarations and two packages nested below it."""
    root = tmp_path / "nested-fixture"
    write_json(root / "package.json", {"name": "example"})
    write_json(root / "foo" / "package.json", {"scripts": {"test": "exit 0"}})
    write_json(root / "bar" / "package.json", {"scripts": {"test": "exit 0"}})
    return root.resolve()


@pytest.fixture
def deno_workspace(tmp_path: Path) -> Path:
    """Root with both package.json and deno.json (colliding "dup"), and a deno-only child."""
    root = tmp_path / "deno-fixture"
    write_json(
        root / "package.json",
        {"name": "node-root", "scripts": {"dup": "echo dup", "testx": "echo npm-with-deno"}},
    )
    write_json(root / "deno.json", {"tasks": {"dup": "echo dup", "test": "echo root"}})
    write_json(root / "foo" / "deno.json", {"tasks": {"test": "echo foo"}})
    return root.resolve()


@pytest.fixture
def mixed_workspace(tmp_path: Path) -> Path:
    """npm workspace with an unrelated deno module outside the member globs."""
    root = tmp_path / "mixed-fixture"
    write_json(root / "package.json", {"workspaces": ["packages/*"], "scripts": {"test": "echo 1"}})
    write_json(root / "packages" / "foo" / "package.json", {"name": "@pkg/foo", "scripts": {"test": "exit 0"}})
    write_text(
        root / "tasks" / "deno.jsonc",
        '{\n  // deno tasks\n  "tasks": {\n    "test": "echo deno",\n  },\n}\n',
    )
    return root.resolve()
