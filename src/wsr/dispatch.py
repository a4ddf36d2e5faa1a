"""Runner selection and hand-off for a resolved (module, task) pair."""

from __future__ import annotations

import logging
import os
import shlex
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path

from rich.console import Console
from rich.text import Text

from wsr.config import Settings
from wsr.errors import RunnerNotFoundError, TaskCollisionError, TaskNotFoundError
from wsr.exec import run_command
from wsr.workspace.manifests import package_manager_name, read_package_json
from wsr.workspace.types import ModuleRecord, TaskSource

logger = logging.getLogger(__name__)

DENO_RUNNER = "deno"


@dataclass(frozen=True)
class DispatchPlan:
    """Fully decided runner invocation."""

    module: ModuleRecord
    task: str
    source: TaskSource
    argv: tuple[str, ...]
    cwd: Path


def resolve_package_manager(root: Path, settings: Settings) -> str:
    """Client from the root package.json ``packageManager`` field."""
    client = package_manager_name(read_package_json(root), settings.package_manager)
    logger.debug("client = %s", client)
    return client


def plan_dispatch(
    module: ModuleRecord,
    task: str,
    *,
    package_manager: str,
    passthrough: Sequence[str] = (),
) -> DispatchPlan:
    """
    Decide which runner executes ``task`` for ``module``.

    Raises:
        TaskCollisionError: If package.json and deno.json(c) both define the task
        TaskNotFoundError: If neither defines it
    """
    entry = module.task(task)
    if entry is None:
        raise TaskNotFoundError(task, module.path)
    if entry.is_collision:
        raise TaskCollisionError(task, module.path)

    if entry.source is TaskSource.NPM:
        argv = (package_manager, "run", task, *passthrough)
    else:
        argv = (DENO_RUNNER, "task", task, *passthrough)
    return DispatchPlan(module=module, task=task, source=entry.source, argv=argv, cwd=module.path)


def child_environment(settings: Settings, environ: Mapping[str, str] | None = None) -> dict[str, str]:
    env = dict(os.environ if environ is None else environ)
    if settings.color:
        env["FORCE_COLOR"] = "1"
    return env


def dispatch(
    plan: DispatchPlan,
    settings: Settings,
    *,
    console: Console | None = None,
    environ: Mapping[str, str] | None = None,
) -> int:
    """Run the planned command and return its exit status."""
    if console is not None and not settings.quiet:
        console.print(Text(f"$ cd {plan.cwd}", style="dim"))
        console.print(Text(f"$ {shlex.join(plan.argv)}", style="dim"))

    try:
        result = run_command(list(plan.argv), cwd=plan.cwd, env=child_environment(settings, environ))
    except FileNotFoundError as exc:
        raise RunnerNotFoundError(plan.argv[0]) from exc
    logger.debug("exit = %d", result.returncode)
    return result.returncode
