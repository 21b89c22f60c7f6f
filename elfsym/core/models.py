"""
elfsym Data Models
===================

Two families of models live here:

* lightweight slotted dataclasses used on the parsing hot path
  (:class:`Section`, :class:`Symbol`) together with the ELF class and
  byte-order enumerations;
* Pydantic models describing results for reports and the CLI
  (:class:`SymbolInfo`, :class:`ResolvedAddress`, :class:`SymbolTableResult`).

References:
    - System V Application Binary Interface, Edition 4.1, chapter 4
      ("Object Files"), sections "Sections" and "Symbol Table".
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional, Union

from pydantic import BaseModel, Field

if TYPE_CHECKING:
    from elfsym.parsers.strtab import StringRef


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------

class ElfClass(enum.Enum):
    """ELF address-width class (``EI_CLASS``)."""
    ELF32 = 1
    ELF64 = 2

    @property
    def bits(self) -> int:
        return 32 if self is ElfClass.ELF32 else 64


class ElfEndian(enum.Enum):
    """ELF data encoding (``EI_DATA``)."""
    LE = 1
    BE = 2

    @property
    def struct_prefix(self) -> str:
        """Byte-order prefix for :mod:`struct` format strings."""
        return "<" if self is ElfEndian.LE else ">"

    @property
    def label(self) -> str:
        return "little" if self is ElfEndian.LE else "big"


_STB_NAMES: dict[int, str] = {0: "LOCAL", 1: "GLOBAL", 2: "WEAK"}
_STT_NAMES: dict[int, str] = {
    0: "NOTYPE",
    1: "OBJECT",
    2: "FUNC",
    3: "SECTION",
    4: "FILE",
    5: "COMMON",
    6: "TLS",
    10: "GNU_IFUNC",
}
_STV_NAMES: dict[int, str] = {0: "DEFAULT", 1: "INTERNAL", 2: "HIDDEN", 3: "PROTECTED"}


# ---------------------------------------------------------------------------
# Parsing-side records
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class Section:
    """One ELF section as consumed by the symbol-table reader.

    ``content`` is the raw section bytes, borrowed from the ELF image for
    the whole session.  ``entry_size`` comes straight from the file and may
    be anything, including zero.
    """
    kind: int
    link: int
    entry_size: int
    content: Union[bytes, memoryview]
    name: str = ""
    flags: int = 0
    addr: int = 0
    offset: int = 0
    info: int = 0
    addralign: int = 0


@dataclass(frozen=True, slots=True)
class Symbol:
    """A resolved symbol-table entry.

    ``name`` views the linked string table's bytes; it compares equal to
    the plain ``str`` it spells and ``str(symbol.name)`` decodes it.
    ``value`` and ``size`` are widened to the 64-bit range for both ELF
    classes.
    """
    name: StringRef
    value: int
    size: int
    info: int
    other: int
    shndx: int

    @property
    def bind(self) -> str:
        bind = self.info >> 4
        return _STB_NAMES.get(bind, f"UNKNOWN({bind})")

    @property
    def type(self) -> str:
        sym_type = self.info & 0xF
        return _STT_NAMES.get(sym_type, f"UNKNOWN({sym_type})")

    @property
    def visibility(self) -> str:
        return _STV_NAMES[self.other & 0x3]

    def contains(self, address: int) -> bool:
        """Whether *address* falls inside ``[value, value + size)``."""
        return self.value <= address < self.value + self.size


# ---------------------------------------------------------------------------
# Result models
# ---------------------------------------------------------------------------

class SymbolInfo(BaseModel):
    """Serialisable view of a :class:`Symbol`.

    Attributes:
        name: Symbol name (empty for unnamed entries).
        value: Symbol value, usually an address.
        size: Symbol size in bytes.
        type: Symbol type (``FUNC``, ``OBJECT``, ...).
        bind: Symbol binding (``LOCAL``, ``GLOBAL``, ``WEAK``).
        visibility: Symbol visibility.
        section: Section index or special index name (``UND``, ``ABS``, ``COM``).
    """
    name: str = ""
    value: int = 0
    size: int = 0
    type: str = "NOTYPE"
    bind: str = "LOCAL"
    visibility: str = "DEFAULT"
    section: str = ""

    @classmethod
    def from_symbol(cls, symbol: Symbol) -> SymbolInfo:
        if symbol.shndx == 0:
            section = "UND"
        elif symbol.shndx == 0xFFF1:
            section = "ABS"
        elif symbol.shndx == 0xFFF2:
            section = "COM"
        else:
            section = str(symbol.shndx)
        return cls(
            name=str(symbol.name),
            value=symbol.value,
            size=symbol.size,
            type=symbol.type,
            bind=symbol.bind,
            visibility=symbol.visibility,
            section=section,
        )


class ResolvedAddress(BaseModel):
    """Outcome of resolving a single address.

    Attributes:
        address: The queried address.
        symbol: Name of the nearest symbol at or below *address*, if any.
        offset: Distance from the symbol start to *address*.
    """
    address: int
    symbol: Optional[str] = None
    offset: Optional[int] = None

    @property
    def resolved(self) -> bool:
        return self.symbol is not None

    def render(self, width: int = 16) -> str:
        """Format as ``0x...  name+0xoff`` (or ``??`` when unresolved)."""
        addr = f"0x{self.address:0{width}x}"
        if self.symbol is None:
            return f"{addr}  ??"
        return f"{addr}  {self.symbol}+0x{self.offset:x}"


class SymbolTableResult(BaseModel):
    """Everything read from one ELF file.

    Attributes:
        path: Filesystem path of the analysed file.
        size: File size in bytes.
        bits: ELF class address width (32 or 64).
        endian: Byte order (``"little"`` or ``"big"``).
        section_count: Number of sections in the section header table.
        symbols: Symbols decoded successfully, in table order.
        resolved: Address resolutions requested by the caller.
        errors: Messages of the parse errors met while reading.
    """
    path: str = ""
    size: int = 0
    bits: int = 0
    endian: str = "little"
    section_count: int = 0
    symbols: list[SymbolInfo] = Field(default_factory=list)
    resolved: list[ResolvedAddress] = Field(default_factory=list)
    errors: list[str] = Field(default_factory=list)
