"""Tests for string-table lookups."""

from __future__ import annotations

from elfsym.parsers.strtab import StringRef, read_str_from_offset

TABLE = b"\0test\0rename\0"


def test_read_from_start_of_string():
    assert read_str_from_offset(TABLE, 1) == "test"
    assert read_str_from_offset(TABLE, 6) == "rename"


def test_offset_into_middle_of_string():
    assert read_str_from_offset(TABLE, 8) == "name"


def test_offset_zero_is_empty():
    name = read_str_from_offset(TABLE, 0)
    assert name == ""
    assert not name
    assert len(name) == 0


def test_offset_out_of_range_is_empty():
    assert read_str_from_offset(TABLE, len(TABLE)) == ""
    assert read_str_from_offset(TABLE, 10_000) == ""


def test_missing_terminator_runs_to_end():
    assert read_str_from_offset(b"\0abc", 1) == "abc"


def test_long_string_spanning_scan_chunks():
    long_name = "x" * 1000
    table = b"\0" + long_name.encode() + b"\0tail\0"
    assert read_str_from_offset(table, 1) == long_name
    assert read_str_from_offset(table, 1002) == "tail"


def test_string_ref_borrows_table_bytes():
    table = bytearray(TABLE)
    name = read_str_from_offset(table, 1)
    table[1] = ord("b")
    assert name == "best"


def test_string_ref_comparisons():
    a = read_str_from_offset(TABLE, 1)
    b = read_str_from_offset(b"\0\0test\0", 2)
    assert a == b
    assert a == b"test"
    assert a != "tes"
    assert hash(a) == hash("test")
    assert {a: 1}["test"] == 1
    assert read_str_from_offset(TABLE, 6) < a
    assert str(a) == "test"
    assert bytes(a) == b"test"
    assert repr(a) == "StringRef('test')"


def test_invalid_utf8_is_replaced():
    name = read_str_from_offset(b"\0\xffok\0", 1)
    assert str(name) == "�ok"
    assert bytes(name) == b"\xffok"
    assert isinstance(name, StringRef)
