"""
ELF Record Layouts
===================

On-disk ELF structures declared as fixed-layout records.  Field order and
widths follow the System V ABI exactly; the ELF64 symbol entry moves
``info``/``other``/``shndx`` ahead of the 8-byte ``value``/``size`` so that
the wide fields stay naturally aligned.

References:
    - System V Application Binary Interface, Edition 4.1, chapter 4.
    - Linux man page: elf(5).
"""

from __future__ import annotations

import dataclasses

from elfsym.core.models import ElfClass
from elfsym.parsers.record import Record, fixed_layout, u8, u16, u32, u64


# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

ELF_MAGIC: bytes = b"\x7fELF"

SHT_NULL: int = 0
SHT_PROGBITS: int = 1
SHT_SYMTAB: int = 2
SHT_STRTAB: int = 3
SHT_NOBITS: int = 8
SHT_DYNSYM: int = 11

SHN_UNDEF: int = 0
SHN_ABS: int = 0xFFF1
SHN_COMMON: int = 0xFFF2
SHN_XINDEX: int = 0xFFFF


# ---------------------------------------------------------------------------
# Symbol table entries
# ---------------------------------------------------------------------------

@fixed_layout
@dataclasses.dataclass(frozen=True, slots=True)
class Elf32SymtabEntry(Record):
    """``Elf32_Sym`` -- 16 bytes."""
    name: int = u32()
    value: int = u32()
    size: int = u32()
    info: int = u8()
    other: int = u8()
    shndx: int = u16()


@fixed_layout
@dataclasses.dataclass(frozen=True, slots=True)
class Elf64SymtabEntry(Record):
    """``Elf64_Sym`` -- 24 bytes."""
    name: int = u32()
    info: int = u8()
    other: int = u8()
    shndx: int = u16()
    value: int = u64()
    size: int = u64()


SYMTAB_LAYOUTS: dict[ElfClass, type[Elf32SymtabEntry] | type[Elf64SymtabEntry]] = {
    ElfClass.ELF32: Elf32SymtabEntry,
    ElfClass.ELF64: Elf64SymtabEntry,
}


# ---------------------------------------------------------------------------
# File identification and headers
# ---------------------------------------------------------------------------

@fixed_layout
@dataclasses.dataclass(frozen=True, slots=True)
class ElfIdent(Record):
    """``e_ident`` -- 16 bytes, byte-order independent.

    The magic is read as one big-endian word (``0x7f454c46``).
    """
    magic: int = u32()
    ei_class: int = u8()
    ei_data: int = u8()
    ei_version: int = u8()
    ei_osabi: int = u8()
    ei_abiversion: int = u8()
    pad0: int = u8()
    pad1: int = u16()
    pad2: int = u32()


ELF_MAGIC_WORD: int = int.from_bytes(ELF_MAGIC, "big")


@fixed_layout
@dataclasses.dataclass(frozen=True, slots=True)
class Elf32Header(Record):
    """``Elf32_Ehdr`` without ``e_ident`` -- 36 bytes."""
    e_type: int = u16()
    e_machine: int = u16()
    e_version: int = u32()
    e_entry: int = u32()
    e_phoff: int = u32()
    e_shoff: int = u32()
    e_flags: int = u32()
    e_ehsize: int = u16()
    e_phentsize: int = u16()
    e_phnum: int = u16()
    e_shentsize: int = u16()
    e_shnum: int = u16()
    e_shstrndx: int = u16()


@fixed_layout
@dataclasses.dataclass(frozen=True, slots=True)
class Elf64Header(Record):
    """``Elf64_Ehdr`` without ``e_ident`` -- 48 bytes."""
    e_type: int = u16()
    e_machine: int = u16()
    e_version: int = u32()
    e_entry: int = u64()
    e_phoff: int = u64()
    e_shoff: int = u64()
    e_flags: int = u32()
    e_ehsize: int = u16()
    e_phentsize: int = u16()
    e_phnum: int = u16()
    e_shentsize: int = u16()
    e_shnum: int = u16()
    e_shstrndx: int = u16()


@fixed_layout
@dataclasses.dataclass(frozen=True, slots=True)
class Elf32SectionHeader(Record):
    """``Elf32_Shdr`` -- 40 bytes."""
    sh_name: int = u32()
    sh_type: int = u32()
    sh_flags: int = u32()
    sh_addr: int = u32()
    sh_offset: int = u32()
    sh_size: int = u32()
    sh_link: int = u32()
    sh_info: int = u32()
    sh_addralign: int = u32()
    sh_entsize: int = u32()


@fixed_layout
@dataclasses.dataclass(frozen=True, slots=True)
class Elf64SectionHeader(Record):
    """``Elf64_Shdr`` -- 64 bytes."""
    sh_name: int = u32()
    sh_type: int = u32()
    sh_flags: int = u64()
    sh_addr: int = u64()
    sh_offset: int = u64()
    sh_size: int = u64()
    sh_link: int = u32()
    sh_info: int = u32()
    sh_addralign: int = u64()
    sh_entsize: int = u64()


HEADER_LAYOUTS: dict[ElfClass, type[Elf32Header] | type[Elf64Header]] = {
    ElfClass.ELF32: Elf32Header,
    ElfClass.ELF64: Elf64Header,
}

SECTION_HEADER_LAYOUTS: dict[
    ElfClass, type[Elf32SectionHeader] | type[Elf64SectionHeader]
] = {
    ElfClass.ELF32: Elf32SectionHeader,
    ElfClass.ELF64: Elf64SectionHeader,
}
