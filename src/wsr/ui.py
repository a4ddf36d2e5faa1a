"""Console construction, logging setup and line output for the CLI."""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping

from rich.console import Console
from rich.logging import RichHandler
from rich.text import Text

from wsr.config import Settings

HOME_PLACEHOLDER = "~"


def make_consoles(settings: Settings) -> tuple[Console, Console]:
    """Return (stdout, stderr) consoles honoring the color setting."""
    no_color = not settings.color
    out = Console(no_color=no_color, highlight=False, soft_wrap=True)
    err = Console(stderr=True, no_color=no_color, highlight=False, soft_wrap=True)
    return out, err


def configure_logging(debug: bool, console: Console | None = None) -> None:
    """Attach a single rich handler to the ``wsr`` logger."""
    logger = logging.getLogger("wsr")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    handler = RichHandler(
        console=console or Console(stderr=True),
        show_time=False,
        show_path=False,
        markup=False,
    )
    handler.setFormatter(logging.Formatter("[wsr:debug] %(message)s"))
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG if debug else logging.WARNING)
    logger.propagate = False


def abbreviate_home(path: object, environ: Mapping[str, str] | None = None) -> str:
    env = os.environ if environ is None else environ
    text = str(path)
    home = env.get("HOME")
    if home and (text == home or text.startswith(home.rstrip("/") + "/")):
        return HOME_PLACEHOLDER + text[len(home.rstrip("/")):]
    return text


def print_error(console: Console, message: str) -> None:
    line = Text("[wsr:err] ", style="bold red")
    line.append(message)
    console.print(line)


def print_lines(console: Console, lines: list[str]) -> None:
    for line in lines:
        console.print(Text(line))
