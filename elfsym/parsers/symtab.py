"""
ELF Symbol-Table Iterator
==========================

Lazily walks every ``SHT_SYMTAB`` section of a section list, decodes each
entry with the layout matching the ELF class and byte order, and resolves
its name through the linked string table.

The iterator behaves like a sequence of results rather than a fail-fast
stream: a call that meets a malformed entry raises the corresponding
:class:`~elfsym.core.errors.ParseError`, and the *same* iterator can be
pulled again to continue with the next entry.  A plain ``for`` loop
therefore stops at the first error, while :meth:`SymtabIterator.iter_results`
yields errors as values and keeps going.

Usage::

    it = SymtabIterator(ElfClass.ELF64, ElfEndian.LE, sections)
    for item in it.iter_results():
        if isinstance(item, ParseError):
            log.warning("skipping: %s", item)
        else:
            print(item.name, hex(item.value))
"""

from __future__ import annotations

from typing import Iterator, Sequence, Union

from elfsym.core.errors import (
    DecodeError,
    InvalidEntrySizeError,
    InvalidLinkIndexError,
    LinkNotStringTableError,
    MalformedEntryError,
    ParseError,
)
from elfsym.core.models import ElfClass, ElfEndian, Section, Symbol
from elfsym.parsers.layouts import SHT_STRTAB, SHT_SYMTAB, SYMTAB_LAYOUTS
from elfsym.parsers.strtab import read_str_from_offset


class SymtabIterator:
    """Forward-only iterator over the symbols of a section list.

    The cursor is ``(section_index, entry_index)``.  It only moves forward
    and cannot be reset; build a new iterator to start over.

    A section with a zero entry size is reported once and then skipped;
    later pulls do not raise the same error again.

    Args:
        elf_class: Selects the 32- or 64-bit entry layout.
        endian: Byte order of every entry field.
        sections: Section list; section contents are borrowed, not copied.
    """

    def __init__(
        self,
        elf_class: ElfClass,
        endian: ElfEndian,
        sections: Sequence[Section],
    ) -> None:
        self._layout = SYMTAB_LAYOUTS[elf_class]
        self._endian = endian
        self._sections = sections
        self._secidx = 0
        self._symidx = 0

    def __iter__(self) -> SymtabIterator:
        return self

    def __next__(self) -> Symbol:
        sections = self._sections
        seccnt = len(sections)
        secidx = self._secidx
        symidx = self._symidx

        # Section scan: land on a symtab section with an undecoded entry.
        while secidx < seccnt:
            sec = sections[secidx]
            if sec.kind == SHT_SYMTAB:
                if sec.entry_size == 0:
                    # No entry of this section can be addressed; the next
                    # pull resumes with the following section.
                    self._secidx = secidx + 1
                    self._symidx = 0
                    raise InvalidEntrySizeError(secidx)
                if symidx < len(sec.content) // sec.entry_size:
                    break
            secidx += 1
            symidx = 0

        if secidx >= seccnt:
            self._secidx = seccnt
            self._symidx = 0
            raise StopIteration

        # The cursor for the next call is fixed before any check below.
        self._secidx = secidx
        self._symidx = symidx + 1

        sec = sections[secidx]
        start = sec.entry_size * symidx
        # Bounded by entry_size: an undersized entry_size must not borrow
        # bytes from the following entry.
        data = memoryview(sec.content)[start:start + sec.entry_size]
        try:
            entry, _ = self._layout.unpack(data, self._endian)
        except DecodeError as exc:
            raise MalformedEntryError(secidx, symidx, str(exc)) from exc

        if sec.link >= seccnt:
            raise InvalidLinkIndexError(secidx, sec.link, seccnt)

        strtab = sections[sec.link]
        if strtab.kind != SHT_STRTAB:
            raise LinkNotStringTableError(secidx, sec.link, strtab.kind)

        name = read_str_from_offset(strtab.content, entry.name)

        return Symbol(
            name=name,
            value=entry.value,
            size=entry.size,
            info=entry.info,
            other=entry.other,
            shndx=entry.shndx,
        )

    def iter_results(self) -> Iterator[Union[Symbol, ParseError]]:
        """Yield every remaining symbol, with parse errors yielded in place
        of the entries that could not be read."""
        while True:
            try:
                yield next(self)
            except StopIteration:
                return
            except ParseError as exc:
                yield exc
