"""
palm_pdb Command-Line Interface
===============================

This package provides command-line tools for palm_pdb:

- **pdbdate**: DateBook/Calendar record inspection tool

Each tool is implemented as a Click-based CLI application with
comprehensive help and error reporting.
"""

__all__ = ["pdbdate"]
