"""Console helpers shared by the CLI."""

from __future__ import annotations

from typing import NoReturn

import typer
from rich.console import Console
from rich.text import Text

console = Console()
err_console = Console(stderr=True)

#: Column at which status tags are aligned.
STATUS_WIDTH = 50


def print_status(label: str, ok: bool) -> None:
    """Print ``label`` padded to :data:`STATUS_WIDTH` followed by ``[OK]`` or ``[KO]``.

    Args:
        label: Operation being reported, without the trailing colon.
        ok: Whether the operation succeeded.
    """
    line = Text(f"{label}: ".ljust(STATUS_WIDTH), style="bold")
    if ok:
        line.append("[OK]", style="bold green")
    else:
        line.append("[KO]", style="bold red")
    console.print(line, soft_wrap=True)


def exit_error(message: str, code: int = 1) -> NoReturn:
    """Print ``error: <message>`` on stderr and exit.

    Args:
        message: Error text, printed verbatim (no markup).
        code: Process exit code.

    Raises:
        typer.Exit: Always.
    """
    err_console.print(Text("error:", style="bold red"), message, markup=False, highlight=False, soft_wrap=True)
    raise typer.Exit(code=code)


__all__ = [
    "STATUS_WIDTH",
    "console",
    "err_console",
    "exit_error",
    "print_status",
]
