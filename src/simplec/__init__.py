"""
SimpleC - Front End for a Small C-like Teaching Language
========================================================

This package turns SimpleC source text into an abstract syntax tree.

SimpleC programs are made of integer constants and variables (scalars and
multi-dimensional arrays) and functions with block-structured statements:
if/else, while, break, continue and return.

Main Components
---------------
- **frontend**: Lexer, recursive descent parser and AST
    Converts source files (.c) to a CompUnit tree

- **cli**: Command-line tools (scc)
    Prints the token stream or the AST of a source file

Quick Start
-----------
Parse a program:
    >>> from simplec import parse_c
    >>> tree = parse_c("int main() { return 1 + 2 * 3; }")
    >>> print(tree.dump())
    CompUnit
      FuncDef: int main()
        Block
          Return (1 + (2 * 3))

Or use the command-line tool:
    $ scc prog.c
    $ scc --tokens prog.c
"""

__version__ = "1.0.0"

# =============================================================================
# Public API Exports
# =============================================================================

from simplec.errors import SimpleCError, ASTInvariantError, SourceLocation
from simplec.frontend import (
    Frontend,
    FrontendOptions,
    FrontendResult,
    ParseError,
    parse_c,
    parse_source,
)

__all__ = [
    # Version info
    "__version__",
    # Exception hierarchy
    "SimpleCError",
    "ASTInvariantError",
    "ParseError",
    "SourceLocation",
    # Front end
    "Frontend",
    "FrontendOptions",
    "FrontendResult",
    "parse_c",
    "parse_source",
]
