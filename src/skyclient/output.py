"""Console output for skyclient commands.

Data (the ``session show`` table, the ``config show`` document) goes to
stdout so it can be piped. Everything addressed to the operator goes to
stderr: progress, success lines, warnings, errors and next-step hints.

Styling is only used when stdout is a terminal and colour has not been
turned off with ``--no-color``, ``NO_COLOR`` or ``TERM=dumb``. Unstyled
output is written with :func:`print` so that it is byte-for-byte
predictable.

Commands use the module-level helpers (:func:`info`, :func:`error`, ...),
which forward to the :class:`OutputManager` installed by
:func:`~skyclient.app.main_callback`. :func:`configure_logging` sets up the
``skyclient`` logger, which carries the ``--debug`` narration.
"""

from __future__ import annotations

import json
import logging
import os
import sys
from typing import Any, Optional

from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.syntax import Syntax
from rich.table import Table


def _is_tty() -> bool:
    return hasattr(sys.stdout, "isatty") and sys.stdout.isatty()


def _should_disable_color() -> bool:
    """True when ``NO_COLOR`` is set (to anything) or ``TERM=dumb``."""
    return os.environ.get("NO_COLOR") is not None or os.environ.get("TERM") == "dumb"


class OutputManager:
    """Routes command output to stdout or stderr.

    Args:
        no_color: Disable colour and Rich markup.
        quiet: Drop ``info``, ``success`` and ``suggest`` messages.
            Warnings, errors and stdout data are always written.
        styled: Force Rich rendering on or off. ``None`` decides from the
            terminal and the colour settings.
    """

    def __init__(
        self,
        no_color: bool = False,
        quiet: bool = False,
        styled: Optional[bool] = None,
    ) -> None:
        self._no_color = no_color or _should_disable_color()
        self._quiet = quiet
        if styled is None:
            styled = _is_tty() and not self._no_color
        self._styled = styled
        self._stdout = Console(file=sys.stdout, no_color=self._no_color, force_terminal=styled)
        self._stderr = Console(file=sys.stderr, no_color=self._no_color, stderr=True)

    @property
    def styled(self) -> bool:
        return self._styled

    @property
    def is_quiet(self) -> bool:
        return self._quiet

    @property
    def no_color(self) -> bool:
        return self._no_color

    # --- stdout ---

    def print_json(self, data: Any) -> None:
        text = json.dumps(data, indent=2, ensure_ascii=False, default=str)
        if self._styled:
            self._stdout.print(Syntax(text, "json", theme="monokai", word_wrap=True))
        else:
            print(text, flush=True)

    def print_table(
        self,
        headers: list[str],
        rows: list[list[str]],
        title: Optional[str] = None,
    ) -> None:
        """Print rows as a Rich table, or as tab-separated lines when unstyled.

        Args:
            headers: Column headers.
            rows: Cell strings, one list per row.
            title: Table title, shown in styled mode only.
        """
        if not self._styled:
            for line in [headers, *rows]:
                print("\t".join(line), flush=True)
            return
        table = Table(title=title, show_header=True, header_style="bold cyan")
        for header in headers:
            table.add_column(header)
        for row in rows:
            table.add_row(*row)
        self._stdout.print(table)

    # --- stderr ---

    def _diagnostic(self, plain: str, markup: str, optional: bool = True) -> None:
        if optional and self._quiet:
            return
        if self._no_color:
            print(plain, file=sys.stderr, flush=True)
        else:
            self._stderr.print(markup)

    def info(self, message: str) -> None:
        self._diagnostic(message, escape(message))

    def success(self, message: str) -> None:
        self._diagnostic(message, f"[green]{escape(message)}[/green]")

    def suggest(self, message: str) -> None:
        self._diagnostic(f"→ {message}", f"[dim]→ {escape(message)}[/dim]")

    def warning(self, message: str) -> None:
        self._diagnostic(
            f"Warning: {message}", f"[yellow]Warning:[/yellow] {escape(message)}", optional=False
        )

    def error(self, message: str) -> None:
        self._diagnostic(
            f"Error: {message}", f"[bold red]Error:[/bold red] {escape(message)}", optional=False
        )


def configure_logging(debug: bool = False, no_color: bool = False) -> None:
    """Route the ``skyclient`` logger through a Rich handler on stderr.

    Replaces any handler from an earlier call. The level is DEBUG with
    ``--debug`` and WARNING otherwise.
    """
    logger = logging.getLogger("skyclient")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)

    console = Console(file=sys.stderr, stderr=True, no_color=no_color or _should_disable_color())
    handler = RichHandler(
        console=console,
        show_time=False,
        show_path=debug,
        markup=False,
        rich_tracebacks=debug,
    )
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG if debug else logging.WARNING)
    logger.propagate = False


# --- Global instance ---

_output: Optional[OutputManager] = None


def get_output() -> OutputManager:
    """Return the installed manager, creating a default one on first use."""
    global _output
    if _output is None:
        _output = OutputManager()
    return _output


def set_output(output: OutputManager) -> None:
    global _output
    _output = output


def reset_output() -> None:
    """Forget the installed manager (tests call this between cases)."""
    global _output
    _output = None


def print_json(data: Any) -> None:
    get_output().print_json(data)


def print_table(headers: list[str], rows: list[list[str]], title: Optional[str] = None) -> None:
    get_output().print_table(headers, rows, title)


def info(message: str) -> None:
    get_output().info(message)


def success(message: str) -> None:
    get_output().success(message)


def warning(message: str) -> None:
    get_output().warning(message)


def error(message: str) -> None:
    get_output().error(message)


def suggest(message: str) -> None:
    get_output().suggest(message)
