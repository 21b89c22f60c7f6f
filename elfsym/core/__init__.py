"""
elfsym Core Module
===================

Exceptions, data models and the symbolizer engine.
"""
