"""Shared fixtures and synthetic ELF builders."""

from __future__ import annotations

import dataclasses
from typing import Iterable

import pytest

from shared.config import ElfsymConfig
from shared.logger import ElfsymLogger

from elfsym.core.engine import SymbolizerEngine
from elfsym.core.models import ElfClass, ElfEndian
from elfsym.parsers.layouts import (
    ELF_MAGIC_WORD,
    HEADER_LAYOUTS,
    SECTION_HEADER_LAYOUTS,
    SHT_NULL,
    SHT_STRTAB,
    SHT_SYMTAB,
    SYMTAB_LAYOUTS,
    ElfIdent,
)


@dataclasses.dataclass
class SectionSpec:
    """A section to place into a synthetic image."""
    name: str
    kind: int
    content: bytes = b""
    link: int = 0
    entry_size: int = 0
    addr: int = 0


def make_strtab(names: Iterable[str]) -> tuple[bytes, dict[str, int]]:
    """Build a string table starting with the empty string."""
    table = bytearray(b"\0")
    offsets: dict[str, int] = {"": 0}
    for name in names:
        offsets[name] = len(table)
        table += name.encode() + b"\0"
    return bytes(table), offsets


def sym_entry(
    elf_class: ElfClass,
    endian: ElfEndian,
    *,
    name: int = 0,
    value: int = 0,
    size: int = 0,
    info: int = 0,
    other: int = 0,
    shndx: int = 0,
) -> bytes:
    layout = SYMTAB_LAYOUTS[elf_class]
    entry = layout(
        name=name, value=value, size=size, info=info, other=other, shndx=shndx
    )
    return entry.pack(endian)


def build_elf(
    elf_class: ElfClass,
    endian: ElfEndian,
    specs: Iterable[SectionSpec],
    *,
    machine: int = 62,
    entry: int = 0,
) -> bytes:
    """Assemble an ELF image.

    Section 0 is the null section and ``.shstrtab`` is appended last, so
    the sections in *specs* get indices starting at 1.
    """
    header_layout = HEADER_LAYOUTS[elf_class]
    shdr_layout = SECTION_HEADER_LAYOUTS[elf_class]

    all_specs = [SectionSpec("", SHT_NULL)] + list(specs)
    shstrtab = bytearray(b"\0")
    name_offsets: list[int] = []
    for spec in all_specs:
        if spec.name:
            name_offsets.append(len(shstrtab))
            shstrtab += spec.name.encode() + b"\0"
        else:
            name_offsets.append(0)
    name_offsets.append(len(shstrtab))
    shstrtab += b".shstrtab\0"
    all_specs.append(SectionSpec(".shstrtab", SHT_STRTAB, bytes(shstrtab)))

    data_start = ElfIdent.SIZE + header_layout.SIZE
    body = bytearray()
    offsets: list[int] = []
    for spec in all_specs:
        if spec.kind == SHT_NULL:
            offsets.append(0)
            continue
        offsets.append(data_start + len(body))
        body += spec.content
    while (data_start + len(body)) % 8:
        body += b"\0"
    shoff = data_start + len(body)

    shdrs = b"".join(
        shdr_layout(
            sh_name=name_off,
            sh_type=spec.kind,
            sh_flags=0,
            sh_addr=spec.addr,
            sh_offset=offset,
            sh_size=len(spec.content),
            sh_link=spec.link,
            sh_info=0,
            sh_addralign=0 if spec.kind == SHT_NULL else 1,
            sh_entsize=spec.entry_size,
        ).pack(endian)
        for spec, name_off, offset in zip(all_specs, name_offsets, offsets)
    )

    ident = ElfIdent(
        magic=ELF_MAGIC_WORD,
        ei_class=elf_class.value,
        ei_data=endian.value,
        ei_version=1,
        ei_osabi=0,
        ei_abiversion=0,
        pad0=0,
        pad1=0,
        pad2=0,
    ).pack(ElfEndian.BE)
    header = header_layout(
        e_type=2,
        e_machine=machine,
        e_version=1,
        e_entry=entry,
        e_phoff=0,
        e_shoff=shoff,
        e_flags=0,
        e_ehsize=data_start,
        e_phentsize=0,
        e_phnum=0,
        e_shentsize=shdr_layout.SIZE,
        e_shnum=len(all_specs),
        e_shstrndx=len(all_specs) - 1,
    ).pack(endian)
    return ident + header + bytes(body) + shdrs


# Symbol info bytes: (bind << 4) | type
STT_FUNC_GLOBAL = (1 << 4) | 2
STT_OBJECT_LOCAL = 1
STT_FILE_LOCAL = 4


def sample_image(elf_class: ElfClass, endian: ElfEndian) -> bytes:
    """A small executable-like image with .text, .symtab and .strtab."""
    strtab, off = make_strtab(["main", "helper", "counter", "start.c"])
    entries = b"".join([
        sym_entry(elf_class, endian),
        sym_entry(elf_class, endian, name=off["start.c"], info=STT_FILE_LOCAL,
                  shndx=0xFFF1),
        sym_entry(elf_class, endian, name=off["main"], value=0x1000, size=0x40,
                  info=STT_FUNC_GLOBAL, shndx=1),
        sym_entry(elf_class, endian, name=off["helper"], value=0x1040,
                  size=0x20, info=STT_FUNC_GLOBAL, shndx=1),
        sym_entry(elf_class, endian, name=off["counter"], value=0x2000,
                  size=4, info=STT_OBJECT_LOCAL, shndx=1),
    ])
    entsize = SYMTAB_LAYOUTS[elf_class].SIZE
    return build_elf(
        elf_class,
        endian,
        [
            SectionSpec(".text", 1, b"\x90" * 0x60, addr=0x1000),
            SectionSpec(".symtab", SHT_SYMTAB, entries, link=3, entry_size=entsize),
            SectionSpec(".strtab", SHT_STRTAB, strtab),
        ],
        machine=62 if elf_class is ElfClass.ELF64 else 3,
        entry=0x1000,
    )


@pytest.fixture
def quiet_logger() -> ElfsymLogger:
    return ElfsymLogger("test", log_level="WARNING", console_output=False)


@pytest.fixture
def engine(quiet_logger: ElfsymLogger) -> SymbolizerEngine:
    return SymbolizerEngine(config=ElfsymConfig(), logger=quiet_logger)


@pytest.fixture
def elf64_path(tmp_path):
    path = tmp_path / "sample64.elf"
    path.write_bytes(sample_image(ElfClass.ELF64, ElfEndian.LE))
    return path


@pytest.fixture
def elf32_path(tmp_path):
    path = tmp_path / "sample32.elf"
    path.write_bytes(sample_image(ElfClass.ELF32, ElfEndian.BE))
    return path
