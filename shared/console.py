"""
elfsym Console Interface
=========================

Thin presentation layer over :class:`rich.console.Console` used by the
``elfsym`` commands: a banner, section rules, prefixed status messages and
the diagnostics table.  Everything goes to stdout; logging has its own
stderr console (see :mod:`shared.logger`).

References:
    - Rich library: https://github.com/Textualize/rich
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Iterator, Sequence

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.theme import Theme

_ELFSYM_THEME = Theme(
    {
        "elfsym.banner": "bold bright_cyan",
        "elfsym.rule": "bold bright_magenta",
        "elfsym.ok": "bold green",
        "elfsym.warn": "bold yellow",
        "elfsym.fail": "bold red",
        "elfsym.note": "bold bright_blue",
        "elfsym.dim": "dim white",
        "severity.critical": "bold white on red",
        "severity.high": "bold red",
        "severity.medium": "bold yellow",
        "severity.low": "bold bright_cyan",
        "severity.info": "bold bright_blue",
    }
)

_TAGLINE = "ELF symbol table reader and address symbolizer"


class ElfsymConsole:
    """Styled stdout console shared by the elfsym commands.

    Usage::

        con = ElfsymConsole()
        con.banner(__version__)
        con.section("Symbols")
        con.success("Loaded 1,204 symbols")

    Args:
        quiet: Swallow all output (library and test use).
    """

    def __init__(self, *, quiet: bool = False) -> None:
        self._console = Console(theme=_ELFSYM_THEME, quiet=quiet, highlight=False)

    @property
    def rich(self) -> Console:
        """The wrapped Rich console, for renderables this class does not cover."""
        return self._console

    # ------------------------------------------------------------------ #
    #  Headers
    # ------------------------------------------------------------------ #

    def banner(self, version: str) -> None:
        self._console.print(
            Panel(
                f"[elfsym.banner]elfsym[/elfsym.banner]  {_TAGLINE}\n"
                f"[elfsym.dim]v{version}[/elfsym.dim]",
                border_style="bright_cyan",
                padding=(0, 2),
            )
        )

    def section(self, title: str) -> None:
        """Print a horizontal rule carrying *title*, then a blank line."""
        self._console.rule(f"  {title}  ", style="elfsym.rule")
        self._console.print()

    # ------------------------------------------------------------------ #
    #  Prefixed messages
    # ------------------------------------------------------------------ #

    def _tagged(self, style: str, tag: str, message: str) -> None:
        self._console.print(f"[{style}]{tag}[/{style}] {escape(message)}")

    def success(self, message: str) -> None:
        self._tagged("elfsym.ok", "[✔]", message)

    def warning(self, message: str) -> None:
        self._tagged("elfsym.warn", "[⚠]", message)

    def error(self, message: str) -> None:
        self._tagged("elfsym.fail", "[✘]", message)

    def info(self, message: str) -> None:
        self._tagged("elfsym.note", "[ℹ]", message)

    # ------------------------------------------------------------------ #
    #  Diagnostics
    # ------------------------------------------------------------------ #

    def findings_table(self, findings: Sequence[Any]) -> None:
        """Render diagnostics, one row per finding, coloured by severity.

        Accepts any objects with ``severity``, ``title`` and
        ``description`` attributes (normally :class:`shared.models.Finding`).
        """
        tbl = Table(
            title="Diagnostics",
            border_style="bright_cyan",
            header_style="bold bright_magenta",
            show_lines=True,
            padding=(0, 1),
        )
        tbl.add_column("#", style="dim", width=4, justify="right")
        tbl.add_column("Severity", width=10)
        tbl.add_column("Kind")
        tbl.add_column("Detail", ratio=2)

        for idx, finding in enumerate(findings, start=1):
            severity = getattr(finding.severity, "value", str(finding.severity))
            style = f"severity.{severity.lower()}"
            tbl.add_row(
                str(idx),
                f"[{style}]{severity}[/{style}]",
                escape(finding.title),
                escape(finding.description),
            )

        self._console.print(tbl)

    # ------------------------------------------------------------------ #
    #  Misc
    # ------------------------------------------------------------------ #

    @contextmanager
    def status(self, message: str) -> Iterator[Any]:
        """Show a spinner while the block runs (no-op off a terminal)."""
        with self._console.status(
            f"[elfsym.note]{escape(message)}[/elfsym.note]",
            spinner="dots",
            spinner_style="bright_cyan",
        ) as spinner:
            yield spinner

    def blank(self) -> None:
        self._console.print()

    def divider(self) -> None:
        self._console.rule(style="dim")
