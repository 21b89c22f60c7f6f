"""
elfsym Shared Module
=====================

Configuration, logging, console and result models used by every elfsym
component.
"""

from shared.config import ElfsymConfig

__all__ = ["ElfsymConfig"]
