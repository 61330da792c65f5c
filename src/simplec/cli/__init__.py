"""
SimpleC Command-Line Interface
==============================

This package provides command-line tools for SimpleC:

- **scc**: Parse a source file and print its tokens or AST

Each tool is implemented as a Click-based CLI application.
"""

__all__ = ["scc"]
