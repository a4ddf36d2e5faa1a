"""wsr CLI - run package.json scripts and deno tasks from anywhere in a monorepo."""

from __future__ import annotations

import logging
import sys
from collections.abc import Sequence
from dataclasses import dataclass, field
from pathlib import Path

import typer

from wsr import __version__
from wsr.config import Settings, resolve_settings
from wsr.dispatch import dispatch, plan_dispatch, resolve_package_manager
from wsr.errors import WorkspaceNotFoundError, WsrError
from wsr.listing import render_listing
from wsr.ui import abbreviate_home, configure_logging, make_consoles, print_error, print_lines
from wsr.workspace import (
    discover_modules,
    find_context_module,
    find_workspace_root,
    resolve_expression,
)

logger = logging.getLogger(__name__)

PASSTHROUGH_SEPARATOR = "--"

cli = typer.Typer(
    name="wsr",
    help="Task runner for npm/pnpm/yarn/deno monorepos",
    add_completion=False,
    rich_markup_mode=None,
    context_settings={"help_option_names": ["-h", "--help"]},
)


@dataclass
class Invocation:
    """Per-process inputs that never pass through click's parser."""

    passthrough: list[str] = field(default_factory=list)


def split_passthrough(argv: Sequence[str]) -> tuple[list[str], list[str]]:
    """Split argv at the first literal ``--``; the tail goes to the runner verbatim."""
    args = list(argv)
    if PASSTHROUGH_SEPARATOR not in args:
        return args, []
    index = args.index(PASSTHROUGH_SEPARATOR)
    return args[:index], args[index + 1:]


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"wsr {__version__}")
        raise typer.Exit()


def _log_locations(root: Path, context: Path | None) -> None:
    logger.debug("root = %s", abbreviate_home(root))
    if context is None or context == root:
        logger.debug("context = .")
        return
    try:
        logger.debug("context = %s", context.relative_to(root).as_posix())
    except ValueError:
        logger.debug("context = %s", abbreviate_home(context))


def run(
    expr: str | None,
    cmd: str | None,
    *,
    cwd: Path,
    settings: Settings,
    exact_root: bool = False,
    passthrough: Sequence[str] = (),
) -> int:
    """Locate, discover, resolve, then list or dispatch. Returns the exit code."""
    context = find_context_module(cwd)
    root = find_workspace_root(cwd, exact_root=exact_root) or context
    if root is None:
        raise WorkspaceNotFoundError(cwd)

    settings = resolve_settings(
        root,
        no_color=not settings.color,
        debug=settings.debug,
        quiet=settings.quiet,
    )
    out, err = make_consoles(settings)
    configure_logging(settings.debug, err)
    _log_locations(root, context)

    index = discover_modules(root, settings.ignore_paths)

    if expr is None:
        print_lines(out, render_listing(index))
        return 0

    resolved = resolve_expression(index, expr, cmd, cwd=cwd, context=context)
    if resolved.is_listing:
        print_lines(out, render_listing(index, resolved.module))
        return 0

    package_manager = resolve_package_manager(root, settings)
    plan = plan_dispatch(
        resolved.module,
        resolved.command,
        package_manager=package_manager,
        passthrough=passthrough,
    )
    return dispatch(plan, settings, console=err)


@cli.command()
def main_command(
    ctx: typer.Context,
    expr: str | None = typer.Argument(None, metavar="[MODULE|TASK]"),
    cmd: str | None = typer.Argument(None, metavar="[TASK]"),
    root: bool = typer.Option(
        False,
        "--root",
        "-r",
        help="Treat the current directory as the workspace root.",
    ),
    no_color: bool = typer.Option(False, "--no-color", help="Disable colored output."),
    debug: bool = typer.Option(False, "--debug", help="Print debug diagnostics to stderr."),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Do not echo the runner command line."),
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
) -> None:
    """
    Run package.json scripts or deno tasks for a module of the workspace.

    \b
    Examples:
      wsr @pkg/foo test      run script in @pkg/foo
      wsr foo test           run script in packages/foo (unique dirname)
      wsr foo                list scripts in packages/foo
      wsr packages/foo test  run script in packages/foo
      wsr ./foo test         run script in a path relative to cwd
      wsr root test          run script of the workspace root
      wsr test               run "test" of the context module, else the root
      wsr foo test -- --watch  pass arguments through to the runner
    """
    _ = version
    invocation = ctx.obj if isinstance(ctx.obj, Invocation) else Invocation()
    settings = resolve_settings(None, no_color=no_color, debug=debug, quiet=quiet)
    _, err = make_consoles(settings)
    configure_logging(settings.debug, err)

    try:
        code = run(
            expr,
            cmd,
            cwd=Path.cwd().resolve(),
            settings=settings,
            exact_root=root,
            passthrough=invocation.passthrough,
        )
    except WsrError as exc:
        print_error(err, str(exc))
        raise typer.Exit(1) from exc

    raise typer.Exit(code)


def main(argv: Sequence[str] | None = None) -> None:
    """Console-script entry point."""
    args, passthrough = split_passthrough(sys.argv[1:] if argv is None else argv)
    cli(args=args, prog_name="wsr", obj=Invocation(passthrough=passthrough))


if __name__ == "__main__":
    main()
