"""
elfsym Parsers
===============

Fixed-layout record codec, ELF layouts, string tables, the symbol-table
iterator and the ELF section reader.
"""
