"""
Address-to-Symbol Lookup
=========================

Resolves an address to the symbol that covers it, reported as
``(name, offset)`` -- the ``func+0x1c`` form used in backtraces.

Two kinds of tables are supported:

* static symbols read from an ELF symbol table
  (:meth:`SymbolLookup.from_symbols`);
* a running kernel's ``kallsyms`` listing, as exposed by
  ``/proc/kallsyms`` (:class:`KallsymsTable`).

The search is a binary search over start addresses: the answer is the
last symbol starting at or below the address.  When symbol sizes are
known, a sized symbol that ends before the address yields to an earlier
symbol that still encloses it (nested or overlapping entries).
"""

from __future__ import annotations

import bisect
import re
from dataclasses import dataclass
from typing import Iterable, Optional

from elfsym.core.models import Symbol
from elfsym.parsers.layouts import SHN_UNDEF

_DEFAULT_TYPES: frozenset[str] = frozenset({"NOTYPE", "OBJECT", "FUNC"})

# "<address> <type> <name>[\t[module]]"
_KALLSYMS_LINE = re.compile(
    r"^\s*(?P<addr>[0-9a-fA-F]+)\s+(?P<type>\S)\s+(?P<name>\S+)"
    r"(?:\s+\[(?P<module>[^\]]+)\])?\s*$"
)


@dataclass(frozen=True, slots=True)
class LookupEntry:
    """One addressable symbol; ``size == 0`` means the size is unknown."""
    address: int
    size: int
    name: str


class SymbolLookup:
    """Sorted table answering nearest-symbol queries.

    Usage::

        lookup = SymbolLookup.from_symbols(elf.symbols())
        hit = lookup.search(0x401136)
        if hit is not None:
            name, offset = hit
    """

    def __init__(self, entries: Iterable[LookupEntry]) -> None:
        self._entries: list[LookupEntry] = sorted(
            entries, key=lambda e: (e.address, -e.size, e.name)
        )
        self._starts: list[int] = [e.address for e in self._entries]

    @classmethod
    def from_symbols(
        cls,
        symbols: Iterable[Symbol],
        *,
        types: Iterable[str] = _DEFAULT_TYPES,
        include_undefined: bool = False,
    ) -> SymbolLookup:
        """Build a table from decoded ELF symbols.

        Unnamed symbols and symbols whose type is not in *types* are left
        out, as are undefined symbols unless *include_undefined* is set.
        """
        wanted = frozenset(types)
        entries = [
            LookupEntry(sym.value, sym.size, str(sym.name))
            for sym in symbols
            if sym.name
            and sym.type in wanted
            and (include_undefined or sym.shndx != SHN_UNDEF)
        ]
        return cls(entries)

    def __len__(self) -> int:
        return len(self._entries)

    def search(self, address: int) -> Optional[tuple[str, int]]:
        """Return ``(name, address - start)`` of the symbol covering
        *address*, or ``None`` when no symbol starts at or below it."""
        idx = bisect.bisect_right(self._starts, address) - 1
        if idx < 0:
            return None

        nearest = self._entries[idx]
        # Prefer an enclosing sized symbol over a preceding one that
        # ended before the address.
        if nearest.size and address >= nearest.address + nearest.size:
            for i in range(idx - 1, -1, -1):
                entry = self._entries[i]
                if entry.size and entry.address + entry.size > address:
                    return entry.name, address - entry.address
        return nearest.name, address - nearest.address


class KallsymsTable(SymbolLookup):
    """Symbol table of a running kernel in ``/proc/kallsyms`` format.

    Sizes are unknown in this format, so every query resolves to the
    nearest preceding symbol.  Lines that do not parse are skipped, and
    all-zero addresses (as shown to unprivileged readers) are dropped.
    """

    @classmethod
    def from_text(cls, text: str) -> KallsymsTable:
        entries: list[LookupEntry] = []
        for line in text.splitlines():
            match = _KALLSYMS_LINE.match(line)
            if match is None:
                continue
            address = int(match.group("addr"), 16)
            if address == 0:
                continue
            name = match.group("name")
            module = match.group("module")
            if module:
                name = f"{name} [{module}]"
            entries.append(LookupEntry(address, 0, name))
        return cls(entries)
