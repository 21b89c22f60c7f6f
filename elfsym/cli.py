"""
elfsym CLI
===========

Click-based command-line interface.

Usage::

    # List the symbols of an ELF file
    elfsym symbols /path/to/binary

    # Resolve addresses against the file's own symbol table
    elfsym resolve /path/to/binary 0x401136 0x4011a0

    # Resolve against a kernel kallsyms dump instead
    elfsym resolve vmlinux ffffffff81000123 --kallsyms kallsyms.txt

    # Machine-readable output / JSON report
    elfsym symbols /path/to/binary --json
    elfsym symbols /path/to/binary --output report.json

References:
    - Click documentation: https://click.palletsprojects.com/
"""

from __future__ import annotations

import json
import sys
from pathlib import Path

import click

from shared.config import ElfsymConfig
from shared.console import ElfsymConsole
from shared.logger import ElfsymLogger
from shared.models import ScanResult

from elfsym import __version__
from elfsym.analyzers.lookup import KallsymsTable
from elfsym.core.engine import SymbolizerEngine
from elfsym.core.models import SymbolTableResult
from elfsym.output.console import SymbolConsoleOutput
from elfsym.output.report import SymbolReportGenerator


def _parse_address(value: str) -> int:
    try:
        return int(value, 16)
    except ValueError:
        raise click.BadParameter(f"not a hexadecimal address: {value!r}") from None


def _make_engine(
    config_path: str | None,
    verbose: bool,
    stop_on_error: bool,
) -> SymbolizerEngine:
    config = ElfsymConfig.load(config_path)
    if stop_on_error:
        config.symbols.stop_on_error = True
    settings = config.global_settings
    log_level = "DEBUG" if verbose or settings.debug else settings.log_level
    logger = ElfsymLogger(
        "cli",
        log_level=log_level,
        log_file=settings.log_file,
        json_logs=settings.log_json,
    )
    return SymbolizerEngine(config=config, logger=logger)


def _emit(
    scan: ScanResult,
    console: ElfsymConsole,
    *,
    json_output: bool,
    output_path: str | None,
    limit: int | None,
    address_width: int,
) -> None:
    if output_path:
        report_path = SymbolReportGenerator().generate_json(scan, output_path)
        console.success(f"JSON report saved: {report_path}")

    if json_output:
        click.echo(json.dumps(SymbolReportGenerator().build(scan), indent=2, default=str))
        return

    raw = scan.metadata.get("symbol_table")
    if raw:
        table = SymbolTableResult.model_validate(raw)
        SymbolConsoleOutput(console=console, address_width=address_width).display(
            table, limit=limit
        )
        if table.errors:
            console.warning(
                f"{len(table.errors)} symbol table entries could not be read"
            )
    if scan.findings:
        console.section("Diagnostics")
        console.findings_table(scan.findings)
    console.info(scan.summary)


# ---------------------------------------------------------------------------
# CLI group / commands
# ---------------------------------------------------------------------------

@click.group("elfsym")
@click.version_option(__version__, prog_name="elfsym")
def elfsym_cli() -> None:
    """elfsym -- ELF symbol table reader and address symbolizer."""


@elfsym_cli.command("symbols")
@click.argument("path", type=click.Path(exists=True, dir_okay=False))
@click.option("--json", "json_output", is_flag=True, default=False,
              help="Print the report as JSON to stdout.")
@click.option("--output", "-o", "output_path", type=click.Path(), default=None,
              help="Write a JSON report to this path.")
@click.option("--limit", "-n", type=click.IntRange(min=0), default=None,
              help="Show at most N symbols in the table.")
@click.option("--stop-on-error", is_flag=True, default=False,
              help="Stop reading at the first malformed symbol table entry.")
@click.option("--config", "config_path", type=click.Path(exists=True), default=None,
              help="TOML configuration file.")
@click.option("--verbose", "-v", is_flag=True, default=False,
              help="Enable debug logging.")
def symbols_cmd(
    path: str,
    json_output: bool,
    output_path: str | None,
    limit: int | None,
    stop_on_error: bool,
    config_path: str | None,
    verbose: bool,
) -> None:
    """List the symbols of the ELF file at PATH."""
    engine = _make_engine(config_path, verbose, stop_on_error)
    console = ElfsymConsole(quiet=json_output)
    console.banner(__version__)
    with console.status(f"Reading {path}"):
        scan = engine.analyze(path)
    _emit(
        scan,
        console,
        json_output=json_output,
        output_path=output_path,
        limit=limit,
        address_width=engine.config.symbols.address_width,
    )
    if "symbol_table" not in scan.metadata:
        sys.exit(1)


@elfsym_cli.command("resolve")
@click.argument("path", type=click.Path(exists=True, dir_okay=False))
@click.argument("addresses", nargs=-1, required=True)
@click.option("--kallsyms", "kallsyms_path", type=click.Path(exists=True, dir_okay=False),
              default=None, help="Resolve against a /proc/kallsyms dump.")
@click.option("--json", "json_output", is_flag=True, default=False,
              help="Print the report as JSON to stdout.")
@click.option("--stop-on-error", is_flag=True, default=False,
              help="Stop reading at the first malformed symbol table entry.")
@click.option("--config", "config_path", type=click.Path(exists=True), default=None,
              help="TOML configuration file.")
@click.option("--verbose", "-v", is_flag=True, default=False,
              help="Enable debug logging.")
def resolve_cmd(
    path: str,
    addresses: tuple[str, ...],
    kallsyms_path: str | None,
    json_output: bool,
    stop_on_error: bool,
    config_path: str | None,
    verbose: bool,
) -> None:
    """Resolve hexadecimal ADDRESSES to symbol+offset using the ELF file at PATH."""
    values = [_parse_address(a) for a in addresses]
    engine = _make_engine(config_path, verbose, stop_on_error)

    lookup = None
    if kallsyms_path:
        text = Path(kallsyms_path).read_text(encoding="utf-8", errors="replace")
        lookup = KallsymsTable.from_text(text)

    scan = engine.analyze(path, values, lookup=lookup)
    if json_output:
        _emit(scan, ElfsymConsole(quiet=True), json_output=True,
              output_path=None, limit=None,
              address_width=engine.config.symbols.address_width)
    else:
        raw = scan.metadata.get("symbol_table")
        if raw:
            table = SymbolTableResult.model_validate(raw)
            width = engine.config.symbols.address_width
            for item in table.resolved:
                click.echo(item.render(width))
        else:
            ElfsymConsole().error(scan.summary)
    if "symbol_table" not in scan.metadata:
        sys.exit(1)


# ---------------------------------------------------------------------------
# Module entry point
# ---------------------------------------------------------------------------

def main() -> None:
    """Entry point for the ``elfsym`` console script."""
    elfsym_cli()


if __name__ == "__main__":
    main()
