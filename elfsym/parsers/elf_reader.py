"""
ELF Section Reader
===================

Turns a complete ELF image into the ordered :class:`~elfsym.core.models.Section`
list consumed by the symbol-table iterator.  Both ELF32 and ELF64 images in
either byte order are supported; every on-disk structure is decoded through
the fixed-layout records in :mod:`elfsym.parsers.layouts`.

The image is held once; section contents are :class:`memoryview` slices of
it, so building the section list copies no section data.

The reader extracts:
    - ELF identification (class, data encoding)
    - File header (entry point, machine, section header table location)
    - Section headers, including extended section numbering
    - Section names from the section-name string table

References:
    - System V Application Binary Interface, Edition 4.1, chapter 4.
    - Linux man page: elf(5).
"""

from __future__ import annotations

import dataclasses
from pathlib import Path
from typing import Union

from elfsym.core.errors import DecodeError, ElfFormatError
from elfsym.core.models import ElfClass, ElfEndian, Section
from elfsym.parsers.layouts import (
    ELF_MAGIC_WORD,
    HEADER_LAYOUTS,
    SECTION_HEADER_LAYOUTS,
    SHN_UNDEF,
    SHN_XINDEX,
    SHT_NOBITS,
    SHT_STRTAB,
    Elf32Header,
    Elf64Header,
    ElfIdent,
)
from elfsym.parsers.strtab import read_str_from_offset
from elfsym.parsers.symtab import SymtabIterator

_EM_NAMES: dict[int, str] = {
    0: "none",
    2: "SPARC",
    3: "x86",
    8: "MIPS",
    20: "PowerPC",
    21: "PowerPC64",
    22: "S390",
    40: "ARM",
    42: "SuperH",
    43: "SPARCv9",
    50: "IA-64",
    62: "x86_64",
    183: "AArch64",
    243: "RISC-V",
    258: "LoongArch",
}


class ElfFile:
    """Section-level view of an in-memory ELF image.

    Usage::

        elf = ElfFile.from_path("/usr/bin/ls")
        for section in elf.sections:
            print(section.name, section.kind)
        for symbol in elf.symbols():
            print(symbol.name, hex(symbol.value))

    Raises:
        ElfFormatError: The identification, file header or section header
            table is missing, unsupported or out of bounds.
    """

    def __init__(self, data: Union[bytes, bytearray, memoryview]) -> None:
        image = memoryview(data)
        if image.format != "B" or image.ndim != 1:
            image = image.cast("B")
        self._image = image
        self.elf_class, self.endian = self._parse_ident()
        self.header: Union[Elf32Header, Elf64Header] = self._parse_header()
        self.sections: list[Section] = self._parse_sections()

    @classmethod
    def from_bytes(cls, data: Union[bytes, bytearray, memoryview]) -> ElfFile:
        return cls(data)

    @classmethod
    def from_path(cls, path: Union[str, Path]) -> ElfFile:
        return cls(Path(path).read_bytes())

    # ------------------------------------------------------------------ #
    #  Public interface
    # ------------------------------------------------------------------ #

    @property
    def machine(self) -> str:
        machine = self.header.e_machine
        return _EM_NAMES.get(machine, f"unknown({machine})")

    @property
    def entry_point(self) -> int:
        return self.header.e_entry

    @property
    def size(self) -> int:
        return self._image.nbytes

    def symbols(self) -> SymtabIterator:
        """Return a fresh iterator over every ``SHT_SYMTAB`` section."""
        return SymtabIterator(self.elf_class, self.endian, self.sections)

    def section_by_name(self, name: str) -> Section | None:
        for section in self.sections:
            if section.name == name:
                return section
        return None

    # ------------------------------------------------------------------ #
    #  Identification and header
    # ------------------------------------------------------------------ #

    def _parse_ident(self) -> tuple[ElfClass, ElfEndian]:
        try:
            ident, _ = ElfIdent.unpack_be(self._image)
        except DecodeError as exc:
            raise ElfFormatError(f"Truncated ELF identification: {exc}") from exc

        if ident.magic != ELF_MAGIC_WORD:
            raise ElfFormatError("Not an ELF file (bad magic)")
        try:
            elf_class = ElfClass(ident.ei_class)
        except ValueError:
            raise ElfFormatError(f"Unsupported ELF class: {ident.ei_class}") from None
        try:
            endian = ElfEndian(ident.ei_data)
        except ValueError:
            raise ElfFormatError(f"Unsupported ELF data encoding: {ident.ei_data}") from None
        return elf_class, endian

    def _parse_header(self) -> Union[Elf32Header, Elf64Header]:
        layout = HEADER_LAYOUTS[self.elf_class]
        try:
            header, _ = layout.unpack(self._image[ElfIdent.SIZE:], self.endian)
        except DecodeError as exc:
            raise ElfFormatError(f"Truncated ELF header: {exc}") from exc
        return header

    # ------------------------------------------------------------------ #
    #  Section headers
    # ------------------------------------------------------------------ #

    def _read_section_header(self, index: int):
        layout = SECTION_HEADER_LAYOUTS[self.elf_class]
        h = self.header
        if h.e_shentsize < layout.SIZE:
            raise ElfFormatError(
                f"Section header entry size {h.e_shentsize} is smaller "
                f"than {layout.SIZE}"
            )
        offset = h.e_shoff + index * h.e_shentsize
        try:
            shdr, _ = layout.unpack(
                self._image[offset:offset + layout.SIZE], self.endian
            )
        except DecodeError as exc:
            raise ElfFormatError(
                f"Section header {index} lies outside the file"
            ) from exc
        return shdr

    def _parse_sections(self) -> list[Section]:
        h = self.header
        if h.e_shoff == 0:
            return []

        count = h.e_shnum
        shstrndx = h.e_shstrndx
        if count == 0 or shstrndx == SHN_XINDEX:
            # Extended numbering: the real values live in section 0.
            first = self._read_section_header(0)
            if count == 0:
                count = first.sh_size
            if shstrndx == SHN_XINDEX:
                shstrndx = first.sh_link

        if h.e_shoff + count * h.e_shentsize > self._image.nbytes:
            raise ElfFormatError(
                f"Section header table ({count} entries at 0x{h.e_shoff:x}) "
                f"exceeds file size {self._image.nbytes}"
            )

        headers = [self._read_section_header(i) for i in range(count)]

        sections: list[Section] = []
        for index, shdr in enumerate(headers):
            if shdr.sh_type == SHT_NOBITS:
                content = self._image[0:0]
            else:
                end = shdr.sh_offset + shdr.sh_size
                if end > self._image.nbytes:
                    raise ElfFormatError(
                        f"Section {index} content [0x{shdr.sh_offset:x}, "
                        f"0x{end:x}) exceeds file size {self._image.nbytes}"
                    )
                content = self._image[shdr.sh_offset:end]
            sections.append(Section(
                kind=shdr.sh_type,
                link=shdr.sh_link,
                entry_size=shdr.sh_entsize,
                content=content,
                flags=shdr.sh_flags,
                addr=shdr.sh_addr,
                offset=shdr.sh_offset,
                info=shdr.sh_info,
                addralign=shdr.sh_addralign,
            ))

        return self._resolve_section_names(headers, sections, shstrndx)

    @staticmethod
    def _resolve_section_names(
        headers: list,
        sections: list[Section],
        shstrndx: int,
    ) -> list[Section]:
        """Attach names from the section-name string table, when present."""
        if shstrndx == SHN_UNDEF or shstrndx >= len(sections):
            return sections
        names = sections[shstrndx]
        if names.kind != SHT_STRTAB:
            return sections
        return [
            dataclasses.replace(
                section,
                name=str(read_str_from_offset(names.content, shdr.sh_name)),
            )
            for shdr, section in zip(headers, sections)
        ]

