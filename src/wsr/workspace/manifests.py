"""Readers for package.json, deno.json(c) and pnpm-workspace.yaml.

Readers are pure apart from file I/O. A missing file yields ``None``; a file
that exists but cannot be parsed raises ``ManifestError``.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from wsr.errors import ManifestError

PACKAGE_JSON = "package.json"
DENO_CONFIG_NAMES: tuple[str, ...] = ("deno.json", "deno.jsonc")
PNPM_WORKSPACE = "pnpm-workspace.yaml"

# Existence-only markers; content is never read.
WORKSPACE_EVIDENCE_FILES: tuple[str, ...] = (
    "yarn.lock",
    "package-lock.json",
    "pnpm-lock.yaml",
    PNPM_WORKSPACE,
)


@dataclass(frozen=True)
class PackageManifest:
    """Normalized view of a package.json."""

    path: Path
    name: str | None
    scripts: dict[str, str] | None
    package_manager: str | None
    workspaces: list[str] | None
    declares_workspaces: bool


@dataclass(frozen=True)
class DenoConfig:
    """Normalized view of a deno.json or deno.jsonc."""

    path: Path
    tasks: dict[str, str] | None


def has_package_json(directory: Path) -> bool:
    return (directory / PACKAGE_JSON).is_file()


def find_deno_config(directory: Path) -> Path | None:
    """Return deno.json, else deno.jsonc, else None."""
    for name in DENO_CONFIG_NAMES:
        candidate = directory / name
        if candidate.is_file():
            return candidate
    return None


def has_deno_config(directory: Path) -> bool:
    return find_deno_config(directory) is not None


def has_workspace_evidence_file(directory: Path) -> bool:
    return any((directory / name).exists() for name in WORKSPACE_EVIDENCE_FILES)


def strip_jsonc(text: str) -> str:
    """Remove comments and trailing commas from JSON-with-comments text.

    String literals are copied through untouched, including any ``//`` or
    ``/*`` sequences they contain.
    """
    out: list[str] = []
    i = 0
    n = len(text)
    while i < n:
        ch = text[i]
        if ch == '"':
            start = i
            i += 1
            while i < n and text[i] != '"':
                i += 2 if text[i] == "\\" else 1
            i += 1
            out.append(text[start:i])
            continue
        if text.startswith("//", i):
            newline = text.find("\n", i)
            i = n if newline == -1 else newline
            continue
        if text.startswith("/*", i):
            end = text.find("*/", i + 2)
            if end == -1:
                raise ValueError("unterminated block comment")
            i = end + 2
            continue
        if ch == ",":
            j = i + 1
            while j < n:
                if text[j].isspace():
                    j += 1
                elif text.startswith("//", j):
                    newline = text.find("\n", j)
                    j = n if newline == -1 else newline
                elif text.startswith("/*", j):
                    end = text.find("*/", j + 2)
                    j = n if end == -1 else end + 2
                else:
                    break
            if j < n and text[j] in "}]":
                i += 1
                continue
        out.append(ch)
        i += 1
    return "".join(out)


def _load_json(path: Path, *, allow_comments: bool) -> dict[str, Any]:
    try:
        text = path.read_text(encoding="utf-8")
        if allow_comments:
            text = strip_jsonc(text)
        data = json.loads(text)
    except (json.JSONDecodeError, ValueError) as e:
        raise ManifestError(f"Malformed JSON in {path}: {e}") from e
    if not isinstance(data, dict):
        raise ManifestError(f"Invalid manifest structure in {path}: top-level value must be an object")
    return data


def _string_map(value: Any, path: Path, field_name: str) -> dict[str, str] | None:
    if value is None:
        return None
    if not isinstance(value, dict):
        raise ManifestError(f"Invalid manifest structure in {path}: {field_name} must be an object")
    result: dict[str, str] = {}
    for key, command in value.items():
        # deno also accepts {"command": "...", "description": "..."} task objects
        if isinstance(command, dict) and isinstance(command.get("command"), str):
            command = command["command"]
        if not isinstance(command, str):
            raise ManifestError(
                f"Invalid manifest structure in {path}: {field_name}.{key} must be a string"
            )
        result[key] = command
    return result


def _glob_list(value: Any, path: Path, field_name: str) -> list[str]:
    if not isinstance(value, list) or not all(isinstance(p, str) for p in value):
        raise ManifestError(f"Invalid manifest structure in {path}: {field_name} must be a list of strings")
    return list(value)


def read_package_json(directory: Path) -> PackageManifest | None:
    """Parse package.json in ``directory``; None when absent."""
    path = directory / PACKAGE_JSON
    if not path.is_file():
        return None
    data = _load_json(path, allow_comments=False)

    name = data.get("name")
    package_manager = data.get("packageManager")

    raw_workspaces = data.get("workspaces")
    workspaces: list[str] | None = None
    if isinstance(raw_workspaces, dict):
        if raw_workspaces.get("packages") is not None:
            workspaces = _glob_list(raw_workspaces["packages"], path, "workspaces.packages")
    elif raw_workspaces is not None:
        workspaces = _glob_list(raw_workspaces, path, "workspaces")

    return PackageManifest(
        path=path,
        name=name if isinstance(name, str) and name else None,
        scripts=_string_map(data.get("scripts"), path, "scripts"),
        package_manager=package_manager if isinstance(package_manager, str) and package_manager else None,
        workspaces=workspaces,
        declares_workspaces=raw_workspaces is not None,
    )


def read_deno_config(directory: Path) -> DenoConfig | None:
    """Parse deno.json (preferred) or deno.jsonc in ``directory``; None when absent."""
    path = find_deno_config(directory)
    if path is None:
        return None
    data = _load_json(path, allow_comments=True)
    return DenoConfig(path=path, tasks=_string_map(data.get("tasks"), path, "tasks"))


def read_pnpm_workspace(directory: Path) -> list[str] | None:
    """Return the ``packages`` globs of pnpm-workspace.yaml; None when absent."""
    path = directory / PNPM_WORKSPACE
    if not path.is_file():
        return None
    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ManifestError(f"Malformed YAML in {path}: {e}") from e
    if data is None:
        return []
    if not isinstance(data, dict):
        raise ManifestError(f"Invalid workspace structure in {path}: top-level value must be a mapping")
    packages = data.get("packages")
    if packages is None:
        return []
    return _glob_list(packages, path, "packages")


def package_manager_name(manifest: PackageManifest | None, default: str) -> str:
    """Client name from ``packageManager`` (``pnpm@8.6.0`` -> ``pnpm``)."""
    if manifest is None or not manifest.package_manager:
        return default
    return manifest.package_manager.split("@")[0] or default
