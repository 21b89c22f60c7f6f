"""
elfsym -- ELF Symbol Table Reader
==================================

Resolves program-counter addresses and other numeric references into
symbol names by reading an ELF object's symbol table.

Capabilities:
    - Declarative fixed-layout binary record codec (little/big endian)
    - ELF32/ELF64 section header and symbol table decoding
    - Lazy symbol iteration with typed, resumable errors
    - Zero-copy symbol names borrowed from the string table
    - Nearest-symbol address lookup over ELF or kallsyms tables

References:
    - System V Application Binary Interface, Edition 4.1.
    - Linux man page: elf(5).
"""

__version__ = "1.0.0"

from elfsym.core.errors import (
    DecodeError,
    ElfFormatError,
    ElfsymError,
    InvalidEntrySizeError,
    InvalidLinkIndexError,
    LinkNotStringTableError,
    MalformedEntryError,
    ParseError,
    TooShortError,
)
from elfsym.core.models import ElfClass, ElfEndian, Section, Symbol
from elfsym.parsers.strtab import StringRef, read_str_from_offset
from elfsym.parsers.record import Record, fixed_layout, u8, u16, u32, u64
from elfsym.parsers.layouts import Elf32SymtabEntry, Elf64SymtabEntry
from elfsym.parsers.symtab import SymtabIterator
from elfsym.parsers.elf_reader import ElfFile
from elfsym.analyzers.lookup import KallsymsTable, SymbolLookup

__all__ = [
    "DecodeError",
    "Elf32SymtabEntry",
    "Elf64SymtabEntry",
    "ElfClass",
    "ElfEndian",
    "ElfFile",
    "ElfFormatError",
    "ElfsymError",
    "InvalidEntrySizeError",
    "InvalidLinkIndexError",
    "KallsymsTable",
    "LinkNotStringTableError",
    "MalformedEntryError",
    "ParseError",
    "Record",
    "Section",
    "StringRef",
    "Symbol",
    "SymbolLookup",
    "SymtabIterator",
    "TooShortError",
    "fixed_layout",
    "read_str_from_offset",
    "u8",
    "u16",
    "u32",
    "u64",
]
