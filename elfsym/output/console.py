"""
elfsym Console Output
======================

Rich-powered terminal display for symbol tables and address resolutions.
Uses the :class:`~shared.console.ElfsymConsole` abstraction for consistent
styling.
"""

from __future__ import annotations

from typing import Sequence

from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from shared.console import ElfsymConsole

from elfsym.core.models import ResolvedAddress, SymbolInfo, SymbolTableResult


_TYPE_COLOURS: dict[str, str] = {
    "FUNC": "bright_green",
    "OBJECT": "bright_cyan",
    "SECTION": "dim",
    "FILE": "dim",
    "TLS": "bright_magenta",
    "GNU_IFUNC": "bright_yellow",
}

_BIND_COLOURS: dict[str, str] = {
    "GLOBAL": "bold",
    "WEAK": "yellow",
    "LOCAL": "dim",
}


class SymbolConsoleOutput:
    """Rich terminal display for :class:`SymbolTableResult` data.

    Usage::

        output = SymbolConsoleOutput()
        output.display(result)
    """

    def __init__(
        self,
        console: ElfsymConsole | None = None,
        address_width: int = 16,
    ) -> None:
        self._console: ElfsymConsole = console or ElfsymConsole()
        self._width = address_width

    def display(self, result: SymbolTableResult, limit: int | None = None) -> None:
        """Display the header panel, the symbol table and any resolutions."""
        self.display_header(result)
        if result.symbols:
            self.display_symbols(result.symbols, limit=limit)
        if result.resolved:
            self.display_resolved(result.resolved)
        self._console.divider()

    def display_header(self, result: SymbolTableResult) -> None:
        lines: list[str] = [
            f"[bold]File:[/bold]      {escape(result.path)}",
            f"[bold]Size:[/bold]      {result.size:,} bytes",
            f"[bold]Class:[/bold]     ELF{result.bits} ({result.endian}-endian)",
            f"[bold]Sections:[/bold]  {result.section_count}",
            f"[bold]Symbols:[/bold]   {len(result.symbols):,}",
        ]
        if result.errors:
            lines.append(
                f"[bold yellow]Errors:[/bold yellow]    {len(result.errors)}"
            )
        panel = Panel(
            "\n".join(lines),
            title="[bold bright_cyan]ELF Symbol Table[/bold bright_cyan]",
            border_style="bright_cyan",
            padding=(0, 2),
        )
        self._console.rich.print(panel)
        self._console.blank()

    def display_symbols(
        self,
        symbols: Sequence[SymbolInfo],
        limit: int | None = None,
    ) -> None:
        """Display a symbol table in ``readelf -s`` column order."""
        self._console.section("Symbols")

        shown = symbols if limit is None else symbols[:limit]
        tbl = Table(
            border_style="bright_cyan",
            header_style="bold bright_magenta",
            padding=(0, 1),
        )
        tbl.add_column("Num", style="dim", justify="right")
        tbl.add_column("Value", justify="right")
        tbl.add_column("Size", justify="right")
        tbl.add_column("Type")
        tbl.add_column("Bind")
        tbl.add_column("Vis")
        tbl.add_column("Ndx", justify="right")
        tbl.add_column("Name", style="bold")

        for idx, sym in enumerate(shown):
            type_colour = _TYPE_COLOURS.get(sym.type, "")
            bind_colour = _BIND_COLOURS.get(sym.bind, "")
            tbl.add_row(
                str(idx),
                f"{sym.value:0{self._width}x}",
                str(sym.size),
                f"[{type_colour}]{sym.type}[/{type_colour}]" if type_colour else sym.type,
                f"[{bind_colour}]{sym.bind}[/{bind_colour}]" if bind_colour else sym.bind,
                sym.visibility,
                sym.section,
                escape(sym.name),
            )

        self._console.rich.print(tbl)
        if limit is not None and len(symbols) > limit:
            self._console.info(
                f"Showing {limit} of {len(symbols):,} symbols."
            )
        self._console.blank()

    def display_resolved(self, resolved: Sequence[ResolvedAddress]) -> None:
        """Display address resolutions as ``name+0xoff``."""
        self._console.section("Resolved Addresses")

        tbl = Table(
            border_style="bright_cyan",
            header_style="bold bright_magenta",
            padding=(0, 1),
        )
        tbl.add_column("Address", justify="right")
        tbl.add_column("Symbol", style="bold")
        tbl.add_column("Offset", justify="right")

        for item in resolved:
            if item.resolved:
                tbl.add_row(
                    f"0x{item.address:0{self._width}x}",
                    escape(item.symbol),
                    f"+0x{item.offset:x}",
                )
            else:
                tbl.add_row(
                    f"0x{item.address:0{self._width}x}",
                    "[dim]??[/dim]",
                    "",
                )

        self._console.rich.print(tbl)
        self._console.blank()
