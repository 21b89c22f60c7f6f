"""
elfsym Exceptions
==================

Every malformed-input condition the readers can detect is represented by
a typed exception.  Parsers raise them; the engine decides whether to stop
or to record a diagnostic and carry on.

Hierarchy::

    ElfsymError
     +-- RecordError
     |    +-- DecodeError
     |    |    +-- TooShortError
     |    +-- EncodeError
     +-- ParseError
          +-- InvalidEntrySizeError
          +-- MalformedEntryError
          +-- InvalidLinkIndexError
          +-- LinkNotStringTableError
          +-- ElfFormatError
"""

from __future__ import annotations


class ElfsymError(Exception):
    """Base class of all errors raised by elfsym."""


# ---------------------------------------------------------------------------
# Record codec
# ---------------------------------------------------------------------------

class RecordError(ElfsymError):
    """A fixed-layout record could not be decoded or encoded."""


class DecodeError(RecordError):
    """A fixed-layout record could not be decoded."""


class TooShortError(DecodeError):
    """The input holds fewer bytes than the record layout requires."""

    def __init__(self, layout: str, needed: int, available: int) -> None:
        self.layout = layout
        self.needed = needed
        self.available = available
        super().__init__(
            f"{layout} needs {needed} bytes, only {available} available"
        )


class EncodeError(RecordError):
    """A field value does not fit into its declared width."""


# ---------------------------------------------------------------------------
# Symbol table / ELF structure
# ---------------------------------------------------------------------------

class ParseError(ElfsymError):
    """The ELF structures being read are malformed."""


class InvalidEntrySizeError(ParseError):
    """A symbol-table section declares an entry size of zero."""

    def __init__(self, section_index: int) -> None:
        self.section_index = section_index
        super().__init__(
            f"Symtab section {section_index} entry size is 0 (file broken)"
        )


class MalformedEntryError(ParseError):
    """The bytes of a symbol-table entry are shorter than its layout."""

    def __init__(self, section_index: int, entry_index: int, reason: str) -> None:
        self.section_index = section_index
        self.entry_index = entry_index
        super().__init__(
            f"Failed to parse symtab entry {entry_index} "
            f"in section {section_index}: {reason}"
        )


class InvalidLinkIndexError(ParseError):
    """A symbol-table section links to a section that does not exist."""

    def __init__(self, section_index: int, link: int, section_count: int) -> None:
        self.section_index = section_index
        self.link = link
        self.section_count = section_count
        super().__init__(
            f"Symtab section {section_index} refers to invalid strtab "
            f"section index: {link} (must be less than {section_count})"
        )


class LinkNotStringTableError(ParseError):
    """A symbol-table section links to a section that is not a string table."""

    def __init__(self, section_index: int, link: int, kind: int) -> None:
        self.section_index = section_index
        self.link = link
        self.kind = kind
        super().__init__(
            f"Symtab section {section_index} linked section is not "
            f"SHT_STRTAB: {link} (type {kind})"
        )


class ElfFormatError(ParseError):
    """The ELF identification, file header or section headers are invalid."""
