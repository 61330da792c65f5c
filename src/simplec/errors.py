"""
SimpleC Error Hierarchy
=======================

This module defines the root of the exception hierarchy for the SimpleC
toolchain. All exceptions inherit from SimpleCError, allowing callers to
catch every toolchain error with a single except clause if desired.

Exception Hierarchy
-------------------
SimpleCError (base)
├── ASTInvariantError - a node was built in a state the tree forbids
└── ParseError (simplec.frontend.errors) - malformed source input
    └── ... see simplec.frontend.errors

The split between ASTInvariantError and ParseError is deliberate: the first
means the producer of a node is broken, the second means the input is.

Error messages follow this format:
    filename:line:column: error: description
        source_line_text
        ^ (pointer to error location)
    hint: suggestion for fixing (when available)
"""

from dataclasses import dataclass
from typing import Optional


# =============================================================================
# Source Location Tracking
# =============================================================================

@dataclass(frozen=True)
class SourceLocation:
    """
    Represents a location in source code for error reporting.

    Tokens, AST nodes and errors all carry one of these. The frozen design
    ensures locations cannot be accidentally modified once attached.

    Attributes:
        filename: Name of the source file (or "<input>" for string input)
        line: Line number (1-indexed)
        column: Column number (1-indexed)
    """
    filename: str
    line: int
    column: int

    def __str__(self) -> str:
        """Format as 'filename:line:column' for error messages."""
        return f"{self.filename}:{self.line}:{self.column}"


# =============================================================================
# Base Exception Class
# =============================================================================

class SimpleCError(Exception):
    """
    Base exception for all SimpleC errors.

    Carries optional source location, hint and source line so that every
    error can be rendered the same way:

        try:
            parse_source(text, "prog.c")
        except SimpleCError as e:
            print(e)

    Attributes:
        message: The error description
        location: Where in the source the error occurred (optional)
        hint: A suggestion for fixing the error (optional)
        source_line: The actual source text at the error location (optional)
    """

    def __init__(
        self,
        message: str,
        location: Optional[SourceLocation] = None,
        hint: Optional[str] = None,
        source_line: Optional[str] = None,
    ):
        self.message = message
        self.location = location
        self.hint = hint
        self.source_line = source_line
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """
        Format the error message with location, source context, and hint.

        Example output:
            prog.c:3:9: error: unexpected token '+'
                int a + 1;
                      ^
            hint: expected ';'
        """
        parts = []

        if self.location:
            parts.append(f"{self.location}: error: {self.message}")
        else:
            parts.append(f"error: {self.message}")

        if self.source_line is not None and self.location is not None:
            parts.append(f"    {self.source_line}")
            if self.location.column > 0:
                padding = " " * (4 + self.location.column - 1)
                parts.append(f"{padding}^")

        if self.hint:
            parts.append(f"hint: {self.hint}")

        return "\n".join(parts)


class ASTInvariantError(SimpleCError):
    """
    An AST node was constructed in a state the tree model forbids.

    Raised from node constructors, never from the grammar rules directly.
    Seeing one of these means the code building the tree has a bug; it is
    never the result of malformed source text.

    Attributes:
        node_type: Name of the node class whose invariant failed
    """

    def __init__(
        self,
        node_type: str,
        message: str,
        location: Optional[SourceLocation] = None,
    ):
        self.node_type = node_type
        super().__init__(f"invalid {node_type} node: {message}", location=location)
