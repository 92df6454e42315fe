"""
NoteScope Module Entry Point
=============================

Allows running the CLI via: python -m notescope
"""

from notescope.cli import main

if __name__ == "__main__":
    main()
