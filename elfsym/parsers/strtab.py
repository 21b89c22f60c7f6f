"""
ELF String Tables
==================

String-table sections hold NUL-terminated strings that other sections
reference by byte offset.  An offset may point into the middle of a string
(``name`` can share storage with ``rename``), so a string table cannot be
pre-split into a mapping; lookups scan from the offset to the next NUL.

:func:`read_str_from_offset` never copies the table: it returns a
:class:`StringRef`, a read-only view over the section bytes that decodes
on demand.
"""

from __future__ import annotations

from typing import Union

Buffer = Union[bytes, bytearray, memoryview]

# Terminator search copies at most this many bytes at a time.
_SCAN_CHUNK = 256


class StringRef:
    """A borrowed, read-only view of one string inside a string table.

    Compares equal to ``str`` (decoded text), ``bytes`` (raw bytes) and
    other :class:`StringRef` objects with the same bytes.
    """

    __slots__ = ("_view",)

    def __init__(self, view: memoryview) -> None:
        self._view = view

    @property
    def raw(self) -> memoryview:
        """The underlying bytes (no terminating NUL)."""
        return self._view

    def __str__(self) -> str:
        return str(self._view, "utf-8", "replace")

    def __bytes__(self) -> bytes:
        return self._view.tobytes()

    def __len__(self) -> int:
        return self._view.nbytes

    def __bool__(self) -> bool:
        return self._view.nbytes > 0

    def __eq__(self, other: object) -> bool:
        if isinstance(other, StringRef):
            return self._view == other._view
        if isinstance(other, str):
            return str(self) == other
        if isinstance(other, (bytes, bytearray)):
            return self._view == other
        return NotImplemented

    def __hash__(self) -> int:
        return hash(str(self))

    def __lt__(self, other: object) -> bool:
        if isinstance(other, (StringRef, str)):
            return str(self) < str(other)
        return NotImplemented

    def __repr__(self) -> str:
        return f"StringRef({str(self)!r})"


def _as_byte_view(buffer: Buffer) -> memoryview:
    view = buffer if isinstance(buffer, memoryview) else memoryview(buffer)
    if view.format != "B" or view.ndim != 1:
        view = view.cast("B")
    return view


def _find_nul(view: memoryview, start: int) -> int:
    pos = start
    end = view.nbytes
    while pos < end:
        window = view[pos:pos + _SCAN_CHUNK].tobytes()
        idx = window.find(0)
        if idx != -1:
            return pos + idx
        pos += len(window)
    return -1


def read_str_from_offset(buffer: Buffer, offset: int) -> StringRef:
    """Return the NUL-terminated string starting at *offset* in *buffer*.

    Total over all inputs: an offset outside the buffer yields an empty
    string, and a string with no terminator runs to the end of the buffer.
    """
    view = _as_byte_view(buffer)
    if offset < 0 or offset >= view.nbytes:
        return StringRef(view[0:0])

    end = _find_nul(view, offset)
    if end == -1:
        return StringRef(view[offset:])
    return StringRef(view[offset:end])
