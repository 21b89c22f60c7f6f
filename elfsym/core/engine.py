"""
elfsym Symbolizer Engine
=========================

Orchestrates the symbolization pipeline:

    1. Read the file (bounded by ``symbols.max_file_size``)
    2. Build the section list (:class:`~elfsym.parsers.elf_reader.ElfFile`)
    3. Pull every symbol from the symbol tables, applying the error policy
    4. Build an address lookup table
    5. Resolve the requested addresses

Error policy: the symbol-table iterator reports each malformed entry as an
exception and remains usable.  By default the engine records a diagnostic
for each one and keeps reading; with ``symbols.stop_on_error`` it stops at
the first.
"""

from __future__ import annotations

from pathlib import Path
from typing import Iterable, Optional

from shared.config import ElfsymConfig
from shared.logger import ElfsymLogger
from shared.models import Finding, ScanResult, Severity

from elfsym.analyzers.lookup import SymbolLookup
from elfsym.core.errors import (
    ElfFormatError,
    InvalidEntrySizeError,
    InvalidLinkIndexError,
    LinkNotStringTableError,
    ParseError,
)
from elfsym.core.models import (
    ResolvedAddress,
    Symbol,
    SymbolInfo,
    SymbolTableResult,
)
from elfsym.parsers.elf_reader import ElfFile


# Section-level problems affect every entry of the section.
_SECTION_LEVEL_ERRORS = (
    InvalidEntrySizeError,
    InvalidLinkIndexError,
    LinkNotStringTableError,
)


class LoadedTable:
    """Symbols read from one ELF file, plus the diagnostics met on the way."""

    def __init__(
        self,
        path: str,
        elf: ElfFile,
        symbols: list[Symbol],
        errors: list[ParseError],
    ) -> None:
        self.path = path
        self.elf = elf
        self.symbols = symbols
        self.errors = errors
        self._lookup: Optional[SymbolLookup] = None

    def lookup(self, config: ElfsymConfig) -> SymbolLookup:
        if self._lookup is None:
            self._lookup = SymbolLookup.from_symbols(
                self.symbols,
                types=config.symbols.lookup_types,
                include_undefined=config.symbols.include_undefined,
            )
        return self._lookup


class SymbolizerEngine:
    """Reads ELF symbol tables and resolves addresses against them.

    Usage::

        engine = SymbolizerEngine()
        table = engine.load("/path/to/vmlinux")
        for hit in engine.resolve(table, [0xffffffff81000000]):
            print(hit.render())
    """

    def __init__(
        self,
        config: ElfsymConfig | None = None,
        logger: ElfsymLogger | None = None,
    ) -> None:
        """Initialise the engine.

        Args:
            config: Configuration.  Defaults are used if not provided.
            logger: Logger instance.  A new one is created if not provided.
        """
        self._config: ElfsymConfig = config or ElfsymConfig()
        self._logger: ElfsymLogger = logger or ElfsymLogger("engine")

    @property
    def config(self) -> ElfsymConfig:
        return self._config

    # ------------------------------------------------------------------ #
    #  Loading
    # ------------------------------------------------------------------ #

    def load(self, file_path: str | Path) -> LoadedTable:
        """Read *file_path* and decode all of its symbol tables.

        Raises:
            OSError: The file cannot be read.
            ElfFormatError: The file is not a usable ELF image or exceeds
                the configured size limit.
            ParseError: A symbol table is malformed and
                ``symbols.stop_on_error`` is set.
        """
        path = Path(file_path)
        file_size = path.stat().st_size
        max_size = self._config.symbols.max_file_size
        if file_size > max_size:
            raise ElfFormatError(
                f"File too large: {file_size:,} bytes (max: {max_size:,} bytes)"
            )

        with self._logger.timed(f"load {path}"):
            elf = ElfFile.from_path(path)
            self._logger.debug(
                "ELF%d %s-endian %s, %d sections",
                elf.elf_class.bits,
                elf.endian.label,
                elf.machine,
                len(elf.sections),
            )
            symbols, errors = self.collect(elf.symbols())

        self._logger.info(
            "Loaded %d symbols from %s (%d errors)",
            len(symbols),
            path,
            len(errors),
        )
        return LoadedTable(str(path), elf, symbols, errors)

    def collect(
        self, iterator: Iterable[Symbol]
    ) -> tuple[list[Symbol], list[ParseError]]:
        """Drain a symbol iterator according to the error policy."""
        symbols: list[Symbol] = []
        errors: list[ParseError] = []
        stop_on_error = self._config.symbols.stop_on_error

        it = iter(iterator)
        with self._logger.operation("collect_symbols"):
            while True:
                try:
                    symbols.append(next(it))
                except StopIteration:
                    break
                except ParseError as exc:
                    if stop_on_error:
                        raise
                    self._logger.warning("Skipping symtab entry: %s", exc)
                    errors.append(exc)
        return symbols, errors

    # ------------------------------------------------------------------ #
    #  Resolution
    # ------------------------------------------------------------------ #

    def resolve(
        self,
        table: LoadedTable | SymbolLookup,
        addresses: Iterable[int],
    ) -> list[ResolvedAddress]:
        """Resolve each address to its nearest symbol."""
        lookup = table.lookup(self._config) if isinstance(table, LoadedTable) else table
        results: list[ResolvedAddress] = []
        for address in addresses:
            hit = lookup.search(address)
            if hit is None:
                self._logger.debug("No symbol for 0x%x", address)
                results.append(ResolvedAddress(address=address))
            else:
                name, offset = hit
                results.append(
                    ResolvedAddress(address=address, symbol=name, offset=offset)
                )
        return results

    # ------------------------------------------------------------------ #
    #  Full run
    # ------------------------------------------------------------------ #

    def analyze(
        self,
        file_path: str | Path,
        addresses: Iterable[int] = (),
        lookup: SymbolLookup | None = None,
    ) -> ScanResult:
        """Load *file_path*, resolve *addresses* and report everything.

        Resolution uses *lookup* when given (e.g. a kallsyms table) and the
        file's own symbols otherwise.  Failures to read the file are
        reported as a CRITICAL finding rather than raised.
        """
        scan = ScanResult(tool_name="elfsym", target=str(file_path))

        try:
            table = self.load(file_path)
        except (OSError, ParseError) as exc:
            self._logger.error("Cannot read %s: %s", file_path, exc)
            scan.add_finding(Finding(
                severity=Severity.CRITICAL,
                title="Unreadable input",
                description=str(exc),
            ))
            return scan.finalize(f"Failed: {exc}")

        for error in table.errors:
            scan.add_finding(self._finding_for(error))

        resolved = self.resolve(lookup or table, addresses)
        result = SymbolTableResult(
            path=table.path,
            size=table.elf.size,
            bits=table.elf.elf_class.bits,
            endian=table.elf.endian.label,
            section_count=len(table.elf.sections),
            symbols=[SymbolInfo.from_symbol(sym) for sym in table.symbols],
            resolved=resolved,
            errors=[str(err) for err in table.errors],
        )
        scan.metadata = {"symbol_table": result.model_dump(mode="json")}

        hits = sum(1 for r in resolved if r.resolved)
        return scan.finalize(
            f"Symbols: {len(table.symbols)} | "
            f"Errors: {len(table.errors)} | "
            f"Resolved: {hits}/{len(resolved)}"
        )

    @staticmethod
    def _finding_for(error: ParseError) -> Finding:
        if isinstance(error, _SECTION_LEVEL_ERRORS):
            return Finding(
                severity=Severity.HIGH,
                title=type(error).__name__,
                description=str(error),
                evidence=vars(error),
                recommendation="The symbol table section is unusable; "
                               "symbols from it are missing.",
            )
        return Finding(
            severity=Severity.MEDIUM,
            title=type(error).__name__,
            description=str(error),
            evidence=vars(error),
            recommendation="One symbol table entry was skipped.",
        )
