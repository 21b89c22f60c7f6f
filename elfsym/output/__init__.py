"""
elfsym Output
==============

Rich console rendering and JSON report generation.
"""
