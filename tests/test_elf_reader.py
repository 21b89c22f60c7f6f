"""Tests for the ELF section reader."""

from __future__ import annotations

import pytest

from elfsym.core.errors import ElfFormatError, ParseError
from elfsym.core.models import ElfClass, ElfEndian
from elfsym.parsers.elf_reader import ElfFile
from elfsym.parsers.layouts import SHT_NOBITS, SHT_STRTAB, SHT_SYMTAB

from conftest import SectionSpec, build_elf, sample_image


@pytest.mark.parametrize(
    "elf_class, endian",
    [(ElfClass.ELF32, ElfEndian.BE), (ElfClass.ELF64, ElfEndian.LE),
     (ElfClass.ELF32, ElfEndian.LE), (ElfClass.ELF64, ElfEndian.BE)],
)
def test_reads_sample_image(elf_class, endian):
    elf = ElfFile.from_bytes(sample_image(elf_class, endian))
    assert elf.elf_class is elf_class
    assert elf.endian is endian
    assert elf.entry_point == 0x1000
    assert [s.name for s in elf.sections] == [
        "", ".text", ".symtab", ".strtab", ".shstrtab"
    ]
    assert elf.sections[2].kind == SHT_SYMTAB
    assert elf.sections[2].link == 3
    assert elf.sections[3].kind == SHT_STRTAB
    assert elf.sections[1].addr == 0x1000

    names = [str(s.name) for s in elf.symbols()]
    assert names == ["", "start.c", "main", "helper", "counter"]


def test_machine_name():
    assert ElfFile.from_bytes(sample_image(ElfClass.ELF64, ElfEndian.LE)).machine == "x86_64"
    assert ElfFile.from_bytes(sample_image(ElfClass.ELF32, ElfEndian.BE)).machine == "x86"


def test_symbols_returns_fresh_iterator():
    elf = ElfFile.from_bytes(sample_image(ElfClass.ELF64, ElfEndian.LE))
    assert len(list(elf.symbols())) == len(list(elf.symbols())) == 5


def test_section_by_name():
    elf = ElfFile.from_bytes(sample_image(ElfClass.ELF64, ElfEndian.LE))
    assert elf.section_by_name(".strtab").kind == SHT_STRTAB
    assert elf.section_by_name(".missing") is None


def test_from_path(tmp_path):
    path = tmp_path / "a.out"
    image = sample_image(ElfClass.ELF64, ElfEndian.LE)
    path.write_bytes(image)
    elf = ElfFile.from_path(path)
    assert elf.size == len(image)


def test_nobits_section_has_empty_content():
    image = build_elf(
        ElfClass.ELF64, ElfEndian.LE,
        [SectionSpec(".bss", SHT_NOBITS, b"")],
    )
    elf = ElfFile.from_bytes(image)
    assert elf.sections[1].kind == SHT_NOBITS
    assert len(elf.sections[1].content) == 0


def test_no_section_headers():
    image = bytearray(sample_image(ElfClass.ELF64, ElfEndian.LE))
    # e_shoff lives at offset 0x28 of the ELF64 header.
    image[0x28:0x30] = bytes(8)
    elf = ElfFile.from_bytes(bytes(image))
    assert elf.sections == []
    assert list(elf.symbols()) == []


@pytest.mark.parametrize(
    "data",
    [b"", b"\x7fEL", b"MZ" + bytes(100)],
)
def test_rejects_non_elf(data):
    with pytest.raises(ElfFormatError):
        ElfFile.from_bytes(data)


def test_rejects_unknown_class():
    image = bytearray(sample_image(ElfClass.ELF64, ElfEndian.LE))
    image[4] = 3
    with pytest.raises(ElfFormatError, match="class"):
        ElfFile.from_bytes(bytes(image))


def test_rejects_unknown_data_encoding():
    image = bytearray(sample_image(ElfClass.ELF64, ElfEndian.LE))
    image[5] = 0
    with pytest.raises(ElfFormatError, match="encoding"):
        ElfFile.from_bytes(bytes(image))


def test_rejects_truncated_section_table():
    image = sample_image(ElfClass.ELF32, ElfEndian.BE)
    with pytest.raises(ElfFormatError) as excinfo:
        ElfFile.from_bytes(image[:-10])
    assert isinstance(excinfo.value, ParseError)


def test_section_contents_are_views():
    image = bytearray(sample_image(ElfClass.ELF64, ElfEndian.LE))
    elf = ElfFile.from_bytes(image)
    text = elf.section_by_name(".text")
    assert isinstance(text.content, memoryview)
    assert text.content.obj is image


def test_extended_section_numbering():
    image = bytearray(sample_image(ElfClass.ELF64, ElfEndian.LE))
    shoff = int.from_bytes(image[0x28:0x30], "little")
    count = int.from_bytes(image[0x3C:0x3E], "little")
    shstrndx = int.from_bytes(image[0x3E:0x40], "little")
    # Move the counts into section 0 (sh_size at +32, sh_link at +40).
    image[0x3C:0x3E] = (0).to_bytes(2, "little")
    image[0x3E:0x40] = (0xFFFF).to_bytes(2, "little")
    image[shoff + 32:shoff + 40] = count.to_bytes(8, "little")
    image[shoff + 40:shoff + 44] = shstrndx.to_bytes(4, "little")

    elf = ElfFile.from_bytes(bytes(image))
    assert len(elf.sections) == count
    assert elf.sections[2].name == ".symtab"
    assert len(list(elf.symbols())) == 5
