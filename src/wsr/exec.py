"""Subprocess boundary for task runners."""

from __future__ import annotations

import subprocess
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class ExecResult:
    """Result envelope for a runner process."""

    argv: tuple[str, ...]
    cwd: Path
    returncode: int


def run_command(
    argv: list[str],
    *,
    cwd: Path,
    env: Mapping[str, str] | None = None,
) -> ExecResult:
    """Run a command to completion and return its structured result.

    The child inherits stdin/stdout/stderr, so runner output passes through
    unmodified.
    """
    completed = subprocess.run(
        argv,
        cwd=cwd,
        env=dict(env) if env is not None else None,
        check=False,
    )
    return ExecResult(
        argv=tuple(argv),
        cwd=cwd.resolve(),
        # a missing status counts as success
        returncode=completed.returncode if completed.returncode is not None else 0,
    )
