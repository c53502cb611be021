"""
exprcc Command-Line Interface
=============================

- **exprcc**: expression compiler

The tool is a Click-based CLI application; see `exprcc --help`.
"""

__all__ = ["exprcc"]
