"""Tests for the fixed-layout record codec."""

from __future__ import annotations

import dataclasses

import pytest

from elfsym.core.errors import DecodeError, EncodeError, TooShortError
from elfsym.core.models import ElfEndian
from elfsym.parsers.record import Record, fixed_layout, u8, u16, u32, u64


@fixed_layout
@dataclasses.dataclass(frozen=True, slots=True)
class Foo(Record):
    foo: int = u8()
    bar: int = u16()
    baz: int = u32()


@fixed_layout
@dataclasses.dataclass(frozen=True, slots=True)
class Wide(Record):
    a: int = u64()
    b: int = u8()


DATA = bytes(range(10))


def test_size_is_sum_of_field_widths():
    assert Foo.SIZE == 7
    assert Wide.SIZE == 9


def test_unpack_le():
    rec, rest = Foo.unpack_le(DATA)
    assert rec == Foo(foo=0x00, bar=0x0201, baz=0x06050403)
    assert bytes(rest) == b"\x07\x08\x09"


def test_unpack_be():
    rec, rest = Foo.unpack_be(DATA)
    assert rec == Foo(foo=0x00, bar=0x0102, baz=0x03040506)
    assert bytes(rest) == b"\x07\x08\x09"


def test_unpack_with_explicit_endian_matches_shorthands():
    assert Foo.unpack(DATA, ElfEndian.LE)[0] == Foo.unpack_le(DATA)[0]
    assert Foo.unpack(DATA, ElfEndian.BE)[0] == Foo.unpack_be(DATA)[0]


def test_exact_size_leaves_empty_remainder():
    _, rest = Foo.unpack_le(DATA[:7])
    assert rest.nbytes == 0


def test_remainder_is_a_view_not_a_copy():
    buf = bytearray(DATA)
    _, rest = Foo.unpack_le(buf)
    buf[7] = 0xAA
    assert rest[0] == 0xAA


@pytest.mark.parametrize("length", [0, 1, 6])
def test_too_short(length):
    with pytest.raises(TooShortError) as excinfo:
        Foo.unpack_le(DATA[:length])
    assert excinfo.value.needed == 7
    assert excinfo.value.available == length
    assert isinstance(excinfo.value, DecodeError)


def test_accepts_memoryview_input():
    rec, _ = Foo.unpack_be(memoryview(DATA)[3:])
    assert rec == Foo(foo=0x03, bar=0x0405, baz=0x06070809)


@pytest.mark.parametrize("endian", list(ElfEndian))
def test_pack_then_unpack(endian):
    rec = Wide(a=0x8899AABBCCDDEEFF, b=0x7F)
    packed = rec.pack(endian)
    assert len(packed) == Wide.SIZE
    assert Wide.unpack(packed, endian)[0] == rec


def test_pack_byte_order():
    assert Foo(foo=1, bar=0x0203, baz=0x04050607).pack(ElfEndian.BE) == bytes(
        [1, 2, 3, 4, 5, 6, 7]
    )
    assert Foo(foo=1, bar=0x0203, baz=0x04050607).pack(ElfEndian.LE) == bytes(
        [1, 3, 2, 7, 6, 5, 4]
    )


def test_pack_rejects_value_too_wide():
    with pytest.raises(EncodeError):
        Foo(foo=256, bar=0, baz=0).pack(ElfEndian.LE)


def test_fixed_layout_rejects_undeclared_width():
    with pytest.raises(TypeError):
        @fixed_layout
        @dataclasses.dataclass(frozen=True)
        class Bad(Record):
            x: int = 0


def test_fixed_layout_rejects_non_record():
    with pytest.raises(TypeError):
        @fixed_layout
        @dataclasses.dataclass(frozen=True)
        class NotARecord:
            x: int = u8()


@pytest.mark.parametrize("endian", list(ElfEndian))
def test_codecs_have_no_padding(endian):
    # u64 after u8 would be padded under native alignment.
    assert Wide._CODECS[endian].size == Wide.SIZE == 9
    assert Foo._CODECS[endian].size == Foo.SIZE == 7
