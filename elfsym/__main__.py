"""
elfsym Module Entry Point
==========================

Allows running the CLI via: python -m elfsym
"""

from elfsym.cli import main

if __name__ == "__main__":
    main()
