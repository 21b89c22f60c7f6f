"""
elfsym Analyzers
=================

Address-to-symbol lookup over ELF and kallsyms tables.
"""
