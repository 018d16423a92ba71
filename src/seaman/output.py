"""Terminal output for seaman commands.

Command results (plugin tables, ``plugin info`` documents) go to stdout so
they can be piped; status lines such as "Environment started" or
"[dry-run] Would run: docker compose up -d" go to stderr. The rendering of
results follows the ``--json`` / ``--plain`` flags, falling back to Rich
tables and highlighted JSON when stdout is a terminal. ``NO_COLOR``,
``TERM=dumb`` and ``--no-color`` turn styling off.

:func:`~seaman.app.main_callback` builds one :class:`OutputManager` per
invocation and installs it with :func:`set_output`; commands and plugins
call the module-level helpers (:func:`info`, :func:`success`,
:func:`error`, ...). Internal diagnostics such as skipped plugin files use
the ``logging`` loggers instead, routed to stderr by
:func:`configure_logging`.
"""

from __future__ import annotations

import json
import logging
import os
import sys
from enum import Enum
from typing import Any, Optional

from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.syntax import Syntax
from rich.table import Table


class OutputFormat(str, Enum):
    """How command results are rendered on stdout.

    ``AUTO`` becomes ``RICH`` on an interactive terminal with colour
    enabled and ``PLAIN`` otherwise.
    """

    AUTO = "auto"
    JSON = "json"
    PLAIN = "plain"
    RICH = "rich"


class OutputManager:
    """Renders command results to stdout and status lines to stderr.

    Args:
        format: Result format; ``AUTO`` is resolved on construction.
        no_color: Print status lines without Rich styling.
        quiet: Drop info, success and suggestion lines. Errors are
            always shown.
    """

    def __init__(
        self,
        format: OutputFormat = OutputFormat.AUTO,
        no_color: bool = False,
        quiet: bool = False,
    ) -> None:
        self._no_color = no_color or _should_disable_color()
        self._quiet = quiet
        if format == OutputFormat.AUTO:
            format = OutputFormat.RICH if _is_tty() and not self._no_color else OutputFormat.PLAIN
        self._format = format
        self._stdout = Console(
            file=sys.stdout,
            no_color=self._no_color,
            force_terminal=format == OutputFormat.RICH,
        )
        self._stderr = Console(file=sys.stderr, no_color=self._no_color, stderr=True)

    @property
    def format(self) -> OutputFormat:
        return self._format

    # Results (stdout)

    def format_response(self, data: Any) -> None:
        """Print a document such as the ``plugin info`` mapping."""
        if self._format == OutputFormat.JSON:
            self.print_data(json.dumps(data, indent=2, ensure_ascii=False, default=str))
        elif self._format == OutputFormat.RICH and isinstance(data, (dict, list)):
            rendered = json.dumps(data, indent=2, ensure_ascii=False, default=str)
            self._stdout.print(Syntax(rendered, "json", theme="monokai", word_wrap=True))
        elif isinstance(data, dict):
            # One "key<TAB>value" line per entry; nested values as compact JSON.
            for key, value in data.items():
                if isinstance(value, (dict, list)):
                    value = json.dumps(value, ensure_ascii=False, default=str)
                self.print_data(f"{key}\t{value}")
        elif isinstance(data, list):
            for item in data:
                self.print_data("\t".join(map(str, item.values())) if isinstance(item, dict) else str(item))
        else:
            self.print_data(str(data))

    def print_data(self, text: str) -> None:
        print(text, file=sys.stdout, flush=True)

    def print_table(
        self,
        headers: list[str],
        rows: list[list[str]],
        title: Optional[str] = None,
    ) -> None:
        """Print rows such as ``plugin list`` or ``service list``.

        JSON output is a list of objects keyed by header; plain output is
        tab-separated with the headers on the first line.
        """
        if self._format == OutputFormat.JSON:
            records = [dict(zip(headers, row)) for row in rows]
            self.print_data(json.dumps(records, indent=2, ensure_ascii=False))
            return
        if self._format == OutputFormat.PLAIN:
            for row in [headers, *rows]:
                self.print_data("\t".join(row))
            return
        table = Table(title=title, show_header=True, header_style="bold cyan")
        for header in headers:
            table.add_column(header)
        for row in rows:
            table.add_row(*row)
        self._stdout.print(table)

    # Status lines (stderr)

    def _status(self, message: str, style: str = "", prefix: str = "") -> None:
        # Messages carry paths and "[dry-run]" markers, never Rich markup.
        if self._no_color:
            print(f"{prefix}{message}", file=sys.stderr, flush=True)
            return
        text = escape(message)
        if prefix:
            text = f"[{style}]{escape(prefix)}[/{style}]{text}"
        elif style:
            text = f"[{style}]{text}[/{style}]"
        self._stderr.print(text)

    def info(self, message: str) -> None:
        if not self._quiet:
            self._status(message)

    def success(self, message: str) -> None:
        if not self._quiet:
            self._status(message, style="green")

    def error(self, message: str) -> None:
        self._status(message, style="bold red", prefix="Error: ")

    def suggest(self, message: str) -> None:
        """Print a follow-up command, e.g. ``→ Inspect it: seaman plugin info ...``."""
        if not self._quiet:
            self._status(f"→ {message}", style="dim")


def _is_tty() -> bool:
    return hasattr(sys.stdout, "isatty") and sys.stdout.isatty()


def _should_disable_color() -> bool:
    """``NO_COLOR`` set to any value, or ``TERM=dumb``."""
    return os.environ.get("NO_COLOR") is not None or os.environ.get("TERM") == "dumb"


def configure_logging(verbose: bool = False) -> None:
    """Attach a Rich stderr handler to the ``seaman`` logger.

    With *verbose* the logger emits DEBUG records (skipped plugin files,
    handler invocations, compose command lines); otherwise only warnings
    and errors. Calling this again replaces the previously installed
    handler.
    """
    logger = logging.getLogger("seaman")
    for handler in list(logger.handlers):
        if isinstance(handler, RichHandler):
            logger.removeHandler(handler)
    logger.addHandler(RichHandler(console=Console(stderr=True), show_time=False, show_path=verbose))
    logger.setLevel(logging.DEBUG if verbose else logging.WARNING)


_output: Optional[OutputManager] = None


def get_output() -> OutputManager:
    """Return the installed :class:`OutputManager`, creating a default one lazily."""
    global _output
    if _output is None:
        _output = OutputManager()
    return _output


def set_output(output: OutputManager) -> None:
    global _output
    _output = output


def reset_output() -> None:
    """Forget the installed :class:`OutputManager` (used between tests)."""
    global _output
    _output = None


def format_response(data: Any) -> None:
    get_output().format_response(data)


def print_table(headers: list[str], rows: list[list[str]], title: Optional[str] = None) -> None:
    get_output().print_table(headers, rows, title)


def info(message: str) -> None:
    get_output().info(message)


def success(message: str) -> None:
    get_output().success(message)


def error(message: str) -> None:
    get_output().error(message)


def suggest(message: str) -> None:
    get_output().suggest(message)
