"""
Front-End Error Hierarchy
=========================

This module defines the exceptions raised while turning SimpleC source text
into an AST. All of them inherit from ParseError, which itself inherits from
SimpleCError for consistent handling across the toolchain.

Exception Hierarchy
-------------------
ParseError (base for malformed input)
├── LexicalError - the tokenizer rejected the input
├── UnexpectedTokenError - expected one token class, found another
├── UnsupportedTypeError - declaring a base type other than 'int'
├── MissingInitializerError - 'const' definition without '= value'
├── UnterminatedConstructError - missing closing ')', ']' or '}'
├── EndOfInputError - input ended while more was required
└── NestingTooDeepError - nesting exceeded the configured depth

None of these terminate the process. The parser raises exactly one of them
at the first problem, consumes no further tokens, and leaves the decision to
stop or retry to the caller.

Error Message Format
--------------------
    prog.c:4:12: error: unexpected token '+'
        a + 1 = 2;
              ^
    hint: expected ';'
"""

from typing import List, Optional

from simplec.errors import SimpleCError, SourceLocation


# =============================================================================
# Base Parse Exception
# =============================================================================

class ParseError(SimpleCError):
    """
    Malformed SimpleC source.

    Raised by the lexer and the parser. Subclasses carry the structured
    detail (expected class, offending name, ...) as attributes so callers
    can react without parsing the message text.
    """
    pass


# =============================================================================
# Lexical Errors
# =============================================================================

class LexicalError(ParseError):
    """
    The tokenizer could not form a token.

    Examples:
        - Invalid character such as '@' or '#'
        - A lone '&' or '|'
        - Unterminated block comment
        - Malformed numeric literal (0x with no digits, 08)
    """
    pass


# =============================================================================
# Grammar Errors
# =============================================================================

def describe_token(token) -> str:
    """Short human-readable spelling of a token for error messages."""
    if token.value is not None:
        return str(token.value)
    return token.type.name


class UnexpectedTokenError(ParseError):
    """
    Unexpected token during parsing.

    Raised when the lookahead token does not belong to the token class the
    current grammar rule requires.

    Attributes:
        expected: Description of the expected token class
        found: The offending token
    """

    def __init__(
        self,
        expected: str,
        found,
        source_line: Optional[str] = None,
    ):
        self.expected = expected
        self.found = found
        super().__init__(
            f"unexpected token '{describe_token(found)}'",
            location=found.location,
            hint=f"expected {expected}",
            source_line=source_line,
        )


class UnsupportedTypeError(ParseError):
    """
    A declaration or parameter names a base type other than 'int'.

    Other type keywords may only mark a function's return type.

    Example:
        char c;         // only 'int' variables can be declared
    """

    def __init__(
        self,
        name: str,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.name = name
        super().__init__(
            f"unsupported variable type '{name}'",
            location=location,
            hint="only 'int' can be declared",
            source_line=source_line,
        )


class MissingInitializerError(ParseError):
    """
    A 'const' definition has no initializer.

    Example:
        const int N;    // needs '= value'
    """

    def __init__(
        self,
        name: str,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.name = name
        super().__init__(
            f"const '{name}' declared without an initializer",
            location=location,
            hint=f"add '= value' after '{name}'",
            source_line=source_line,
        )


class UnterminatedConstructError(ParseError):
    """
    A bracketed construct was not closed.

    Attributes:
        construct: What was being parsed ("block", "argument list", ...)
        delimiter: The closing delimiter that was expected
        found: The token found in its place
        opened_at: Location of the opening delimiter
    """

    def __init__(
        self,
        construct: str,
        delimiter: str,
        found,
        opened_at: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.construct = construct
        self.delimiter = delimiter
        self.found = found
        self.opened_at = opened_at

        hint = None
        if opened_at:
            hint = f"{construct} opened at {opened_at}"

        super().__init__(
            f"expected '{delimiter}' to close {construct}, "
            f"found '{describe_token(found)}'",
            location=found.location,
            hint=hint,
            source_line=source_line,
        )


class EndOfInputError(ParseError):
    """
    The token stream ended while the grammar still required input.

    Attributes:
        expected: Description of what was still required
    """

    def __init__(
        self,
        expected: str,
        location: Optional[SourceLocation] = None,
    ):
        self.expected = expected
        super().__init__(
            f"unexpected end of input, expected {expected}",
            location=location,
        )


class NestingTooDeepError(ParseError):
    """
    Statements or expressions are nested deeper than the parser allows.

    Attributes:
        limit: The configured maximum depth
    """

    def __init__(
        self,
        limit: int,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.limit = limit
        super().__init__(
            f"nesting exceeds maximum depth of {limit}",
            location=location,
            hint="simplify the expression or raise max_depth",
            source_line=source_line,
        )


# =============================================================================
# Error Collection (diagnostic sink)
# =============================================================================

class ErrorCollector:
    """
    Collects reported errors for later display.

    Implements the diagnostic sink the parser notifies before raising, so a
    driver can show every reported problem in one place.

    Example:
        collector = ErrorCollector()
        parser = CParser(lexer, error_sink=collector)
        try:
            parser.parse()
        except ParseError:
            print(collector.format_report())
    """

    def __init__(self):
        self.errors: List[SimpleCError] = []

    def report(self, error: SimpleCError) -> None:
        """Record an error reported at the current position."""
        self.errors.append(error)

    def has_errors(self) -> bool:
        """Return True if any errors have been collected."""
        return len(self.errors) > 0

    def error_count(self) -> int:
        """Return the number of collected errors."""
        return len(self.errors)

    def format_report(self) -> str:
        """Format every collected error followed by a count line."""
        lines = []

        for error in self.errors:
            lines.append(str(error))
            lines.append("")

        error_word = "error" if len(self.errors) == 1 else "errors"
        lines.append(f"{len(self.errors)} {error_word}")

        return "\n".join(lines)

    def clear(self) -> None:
        """Clear all collected errors."""
        self.errors.clear()
