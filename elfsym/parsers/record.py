"""
Fixed-Layout Binary Records
============================

Declarative codec for binary records made of fixed-width unsigned integer
fields with no padding between them (ELF structures, wire headers,
filesystem superblocks).  A record is declared once as a dataclass::

    @fixed_layout
    @dataclasses.dataclass(frozen=True, slots=True)
    class Foo(Record):
        foo: int = u8()
        bar: int = u16()
        baz: int = u32()

    Foo.SIZE                        # 7
    rec, rest = Foo.unpack_le(buf)  # or unpack_be / unpack(buf, endian)

The byte order is not part of the declaration: it is chosen per call, so
the same layout serves little- and big-endian inputs.  Decoding works on a
:class:`memoryview` of the caller's buffer; the remainder handed back is a
view over the same memory, never a copy.
"""

from __future__ import annotations

import dataclasses
import struct
from typing import Any, ClassVar, TypeVar, Union

from elfsym.core.errors import EncodeError, TooShortError
from elfsym.core.models import ElfEndian

Buffer = Union[bytes, bytearray, memoryview]

_R = TypeVar("_R", bound="Record")

# width in bytes -> struct format code (unsigned)
_WIDTH_CODES: dict[int, str] = {1: "B", 2: "H", 4: "I", 8: "Q"}

_WIDTH_KEY = "width"


def _uint(width: int) -> Any:
    return dataclasses.field(metadata={_WIDTH_KEY: width})


def u8() -> Any:
    """Declare a 1-byte unsigned field."""
    return _uint(1)


def u16() -> Any:
    """Declare a 2-byte unsigned field."""
    return _uint(2)


def u32() -> Any:
    """Declare a 4-byte unsigned field."""
    return _uint(4)


def u64() -> Any:
    """Declare an 8-byte unsigned field."""
    return _uint(8)


class Record:
    """Base class of fixed-layout records.

    Subclasses are dataclasses processed by :func:`fixed_layout`, which
    fills in :attr:`SIZE` and the per-byte-order codecs.
    """

    __slots__ = ()

    SIZE: ClassVar[int] = 0
    _CODECS: ClassVar[dict[ElfEndian, struct.Struct]] = {}

    @classmethod
    def unpack(cls: type[_R], data: Buffer, endian: ElfEndian) -> tuple[_R, memoryview]:
        """Decode one record from the start of *data*.

        Args:
            data: Source buffer; at least :attr:`SIZE` bytes are required.
            endian: Byte order of every multi-byte field.

        Returns:
            ``(record, remainder)`` where *remainder* views the bytes that
            follow the record.

        Raises:
            TooShortError: *data* is shorter than :attr:`SIZE`.
        """
        view = data if isinstance(data, memoryview) else memoryview(data)
        if view.nbytes < cls.SIZE:
            raise TooShortError(cls.__name__, cls.SIZE, view.nbytes)
        values = cls._CODECS[endian].unpack_from(view)
        return cls(*values), view[cls.SIZE:]

    @classmethod
    def unpack_le(cls: type[_R], data: Buffer) -> tuple[_R, memoryview]:
        """Little-endian shorthand for :meth:`unpack`."""
        return cls.unpack(data, ElfEndian.LE)

    @classmethod
    def unpack_be(cls: type[_R], data: Buffer) -> tuple[_R, memoryview]:
        """Big-endian shorthand for :meth:`unpack`."""
        return cls.unpack(data, ElfEndian.BE)

    def pack(self, endian: ElfEndian) -> bytes:
        """Encode the record into exactly :attr:`SIZE` bytes.

        Raises:
            EncodeError: A field value is negative or wider than its field.
        """
        values = dataclasses.astuple(self)  # type: ignore[call-overload]
        try:
            return self._CODECS[endian].pack(*values)
        except struct.error as exc:
            raise EncodeError(f"{type(self).__name__}: {exc}") from exc


def fixed_layout(cls: type[_R]) -> type[_R]:
    """Class decorator turning a :class:`Record` dataclass into a codec.

    Every dataclass field must be declared with :func:`u8`, :func:`u16`,
    :func:`u32` or :func:`u64`.  Fields are laid out in declaration order
    without padding, so ``SIZE`` is the exact sum of their widths.
    """
    if not dataclasses.is_dataclass(cls) or not issubclass(cls, Record):
        raise TypeError(f"{cls.__name__} must be a Record dataclass")

    codes: list[str] = []
    size = 0
    for f in dataclasses.fields(cls):
        width = f.metadata.get(_WIDTH_KEY)
        if width not in _WIDTH_CODES:
            raise TypeError(
                f"{cls.__name__}.{f.name}: field needs u8/u16/u32/u64"
            )
        codes.append(_WIDTH_CODES[width])
        size += width

    fmt = "".join(codes)
    cls.SIZE = size
    cls._CODECS = {
        endian: struct.Struct(endian.struct_prefix + fmt) for endian in ElfEndian
    }
    for codec in cls._CODECS.values():
        if codec.size != size:
            raise TypeError(
                f"{cls.__name__}: codec size {codec.size} != field widths {size}"
            )
    return cls
