"""
SimpleC Lexer (Tokenizer)
=========================

This module converts SimpleC source text into tokens for the parser.

Token Categories
----------------
- Keywords: const, int, void, char, if, else, while, break, continue, return
- Identifiers: variable and function names
- Numbers: decimal, hexadecimal (0x), octal (0)
- Operators: + - * / % ! = == != < > <= >= && ||
- Delimiters: ( ) [ ] { } ; ,

Number Formats
--------------
| Format      | Prefix  | Example   | Value |
|-------------|---------|-----------|-------|
| Decimal     | (none)  | 123       | 123   |
| Hexadecimal | 0x/0X   | 0x7F      | 127   |
| Octal       | 0       | 0177      | 127   |

Comments
--------
- Single-line: // comment
- Multi-line: /* comment */

Pull Interface
--------------
The parser does not need the whole token list up front. It asks for one
token at a time with ``next_token()`` and checks ``is_done()``; once the
source is exhausted every further call returns the same EOF token.

Example Usage
-------------
>>> from simplec.frontend.lexer import CLexer
>>> for token in CLexer('int main() { return 0; }', "test.c").tokenize():
...     print(token)
Token(INT, 'int', 1:1)
Token(IDENTIFIER, 'main', 1:5)
Token(LPAREN, '(', 1:9)
Token(RPAREN, ')', 1:10)
Token(LBRACE, '{', 1:12)
Token(RETURN, 'return', 1:14)
Token(NUMBER, 0, 1:21)
Token(SEMICOLON, ';', 1:22)
Token(RBRACE, '}', 1:24)
Token(EOF, 1:25)
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Iterable, Iterator, Optional
import logging
import string

from simplec.errors import SourceLocation
from simplec.frontend.errors import LexicalError

logger = logging.getLogger(__name__)


# =============================================================================
# Token Type Enumeration
# =============================================================================

class CTokenType(Enum):
    """
    Token tags for the SimpleC language.

    Keywords are distinguished from identifiers to simplify parsing.
    """

    # === Structural ===
    EOF = auto()

    # === Identifiers and Literals ===
    IDENTIFIER = auto()     # payload: name
    NUMBER = auto()         # payload: integer value

    # === Keywords - Types ===
    CONST = auto()
    INT = auto()
    VOID = auto()
    CHAR = auto()

    # === Keywords - Control Flow ===
    IF = auto()
    ELSE = auto()
    WHILE = auto()
    BREAK = auto()
    CONTINUE = auto()
    RETURN = auto()

    # === Arithmetic Operators ===
    PLUS = auto()           # +
    MINUS = auto()          # -
    STAR = auto()           # *
    SLASH = auto()          # /
    PERCENT = auto()        # %

    # === Comparison Operators ===
    EQ = auto()             # ==
    NE = auto()             # !=
    LT = auto()             # <
    GT = auto()             # >
    LE = auto()             # <=
    GE = auto()             # >=

    # === Logical Operators ===
    AND = auto()            # &&
    OR = auto()             # ||
    NOT = auto()            # !

    # === Assignment ===
    ASSIGN = auto()         # =

    # === Delimiters ===
    LPAREN = auto()         # (
    RPAREN = auto()         # )
    LBRACE = auto()         # {
    RBRACE = auto()         # }
    LBRACKET = auto()       # [
    RBRACKET = auto()       # ]
    SEMICOLON = auto()      # ;
    COMMA = auto()          # ,


# =============================================================================
# Keyword Mapping
# =============================================================================

KEYWORDS: dict[str, CTokenType] = {
    "const": CTokenType.CONST,
    "int": CTokenType.INT,
    "void": CTokenType.VOID,
    "char": CTokenType.CHAR,
    "if": CTokenType.IF,
    "else": CTokenType.ELSE,
    "while": CTokenType.WHILE,
    "break": CTokenType.BREAK,
    "continue": CTokenType.CONTINUE,
    "return": CTokenType.RETURN,
}

TYPE_KEYWORDS = frozenset({CTokenType.INT, CTokenType.VOID, CTokenType.CHAR})

SINGLE_TOKENS: dict[str, CTokenType] = {
    "(": CTokenType.LPAREN,
    ")": CTokenType.RPAREN,
    "{": CTokenType.LBRACE,
    "}": CTokenType.RBRACE,
    "[": CTokenType.LBRACKET,
    "]": CTokenType.RBRACKET,
    ";": CTokenType.SEMICOLON,
    ",": CTokenType.COMMA,
    "+": CTokenType.PLUS,
    "-": CTokenType.MINUS,
    "*": CTokenType.STAR,
    "/": CTokenType.SLASH,
    "%": CTokenType.PERCENT,
}


# =============================================================================
# Token Data Class
# =============================================================================

@dataclass(frozen=True)
class CToken:
    """
    A single token from SimpleC source.

    Attributes:
        type: The CTokenType tag
        value: Name for identifiers, int for numbers, spelling for
               keywords and punctuation, None for EOF
        line: Line number in source (1-indexed)
        column: Column number in source (1-indexed)
        filename: Name of the source file
    """
    type: CTokenType
    value: str | int | None
    line: int
    column: int
    filename: str = "<input>"

    def __repr__(self) -> str:
        """Format token for debugging output."""
        if self.value is not None:
            if isinstance(self.value, int):
                return f"Token({self.type.name}, {self.value}, {self.line}:{self.column})"
            return f"Token({self.type.name}, {self.value!r}, {self.line}:{self.column})"
        return f"Token({self.type.name}, {self.line}:{self.column})"

    @property
    def location(self) -> SourceLocation:
        """Return a SourceLocation for error reporting."""
        return SourceLocation(self.filename, self.line, self.column)

    @property
    def name(self) -> str:
        """Identifier payload; only meaningful for IDENTIFIER tokens."""
        if self.type != CTokenType.IDENTIFIER:
            raise ValueError(f"{self.type.name} token has no name")
        return self.value

    @property
    def number(self) -> int:
        """Integer payload; only meaningful for NUMBER tokens."""
        if self.type != CTokenType.NUMBER:
            raise ValueError(f"{self.type.name} token has no integer value")
        return self.value

    def is_type_keyword(self) -> bool:
        """Return True if this token is a type keyword."""
        return self.type in TYPE_KEYWORDS


# =============================================================================
# Lexer Implementation
# =============================================================================

class CLexer:
    """
    Tokenizes SimpleC source code.

    Usage:
        lexer = CLexer(source_text, filename)
        tokens = list(lexer.tokenize())

    or, one token at a time:
        while not lexer.is_done():
            token = lexer.next_token()

    Attributes:
        source: The source code being tokenized
        filename: Name of the source file (for error reporting)
    """

    IDENT_START = string.ascii_letters + "_"
    IDENT_CHARS = string.ascii_letters + string.digits + "_"

    def __init__(
        self,
        source: str,
        filename: str = "<input>",
        line_number: int = 1,
    ):
        """
        Initialize the lexer with source code.

        Args:
            source: The SimpleC source code to tokenize
            filename: Name of the source file (for error messages)
            line_number: Starting line number
        """
        self.source = source
        self.filename = filename

        self._pos = 0
        self._line = line_number
        self._column = 1
        self._line_start_pos = 0

        # Set once EOF has been handed out; repeated calls return it again
        self._eof: Optional[CToken] = None

    # =========================================================================
    # Public Interface
    # =========================================================================

    def next_token(self) -> CToken:
        """
        Scan and return the next token.

        Returns the EOF token once the source is exhausted, and keeps
        returning it on every later call.

        Raises:
            LexicalError: If the next characters do not form a token
        """
        if self._eof is not None:
            return self._eof

        self._skip_whitespace_and_comments()

        if self._at_end():
            self._eof = self._make_token(CTokenType.EOF, None)
            logger.debug(f"{self.filename}: end of input at {self._line}:{self._column}")
            return self._eof

        return self._scan_token()

    def is_done(self) -> bool:
        """Return True once the EOF token has been produced."""
        return self._eof is not None

    def tokenize(self) -> Iterator[CToken]:
        """
        Generate every token, ending with EOF.

        Raises:
            LexicalError: If invalid input is encountered
        """
        while True:
            token = self.next_token()
            yield token
            if token.type == CTokenType.EOF:
                return

    # =========================================================================
    # Character Access Methods
    # =========================================================================

    def _at_end(self) -> bool:
        """Check if we've reached the end of source."""
        return self._pos >= len(self.source)

    def _peek(self, offset: int = 0) -> str:
        """
        Look at character at current position + offset without advancing.

        Returns empty string if past end of source.
        """
        pos = self._pos + offset
        if pos >= len(self.source):
            return ""
        return self.source[pos]

    def _advance(self) -> str:
        """Consume and return the current character, tracking line/column."""
        if self._at_end():
            return ""
        char = self.source[self._pos]
        self._pos += 1

        if char == "\n":
            self._line += 1
            self._column = 1
            self._line_start_pos = self._pos
        else:
            self._column += 1

        return char

    def _match(self, expected: str) -> bool:
        """Consume next character if it matches expected."""
        if self._peek() == expected:
            self._advance()
            return True
        return False

    # =========================================================================
    # Token Creation
    # =========================================================================

    def _make_token(
        self,
        token_type: CTokenType,
        value: str | int | None,
        start_line: Optional[int] = None,
        start_column: Optional[int] = None,
    ) -> CToken:
        """Create a token at the current or the given position."""
        return CToken(
            type=token_type,
            value=value,
            line=start_line or self._line,
            column=start_column or self._column,
            filename=self.filename,
        )

    def _error(
        self,
        message: str,
        line: Optional[int] = None,
        column: Optional[int] = None,
        hint: Optional[str] = None,
    ) -> LexicalError:
        """Create a lexical error at the current (or given) location."""
        location = SourceLocation(
            self.filename,
            line or self._line,
            column or self._column,
        )
        return LexicalError(
            message,
            location,
            hint=hint,
            source_line=self._get_current_line(),
        )

    def _get_current_line(self) -> str:
        """Get the current line of source text for error reporting."""
        line_end = self.source.find("\n", self._line_start_pos)
        if line_end == -1:
            line_end = len(self.source)
        return self.source[self._line_start_pos:line_end]

    # =========================================================================
    # Whitespace and Comment Handling
    # =========================================================================

    def _skip_whitespace_and_comments(self) -> None:
        """Skip all whitespace and comments."""
        while not self._at_end():
            char = self._peek()

            if char in " \t\n\r\f\v":
                self._advance()
                continue

            if char == "/" and self._peek(1) == "/":
                while not self._at_end() and self._peek() != "\n":
                    self._advance()
                continue

            if char == "/" and self._peek(1) == "*":
                self._skip_multi_line_comment()
                continue

            break

    def _skip_multi_line_comment(self) -> None:
        """
        Skip a multi-line comment (/* ... */).

        Raises:
            LexicalError: If comment is not terminated
        """
        start_line = self._line
        start_col = self._column

        self._advance()
        self._advance()

        while not self._at_end():
            if self._peek() == "*" and self._peek(1) == "/":
                self._advance()
                self._advance()
                return
            self._advance()

        raise LexicalError(
            "unterminated multi-line comment",
            SourceLocation(self.filename, start_line, start_col),
            hint="add closing */ to terminate the comment",
        )

    # =========================================================================
    # Token Scanning
    # =========================================================================

    def _scan_token(self) -> CToken:
        """Scan the next token from source."""
        start_line = self._line
        start_column = self._column

        char = self._peek()

        if char in self.IDENT_START:
            return self._scan_identifier(start_line, start_column)

        if char in string.digits:
            return self._scan_number(start_line, start_column)

        return self._scan_operator(start_line, start_column)

    def _scan_identifier(self, start_line: int, start_column: int) -> CToken:
        """Scan an identifier or keyword."""
        chars = []
        while self._peek() and self._peek() in self.IDENT_CHARS:
            chars.append(self._advance())

        name = "".join(chars)

        if name in KEYWORDS:
            return self._make_token(KEYWORDS[name], name, start_line, start_column)

        return self._make_token(CTokenType.IDENTIFIER, name, start_line, start_column)

    def _scan_number(self, start_line: int, start_column: int) -> CToken:
        """
        Scan a numeric literal.

        Handles:
        - Decimal: 123
        - Hexadecimal: 0x7F or 0X7F
        - Octal: 0177
        """
        if self._peek() == "0" and self._peek(1).lower() == "x":
            self._advance()
            self._advance()
            digits = self._take_while(string.hexdigits)
            if not digits:
                raise self._error(
                    "expected hexadecimal digits after '0x'",
                    start_line,
                    start_column,
                )
            value = int(digits, 16)
        else:
            digits = self._take_while(string.digits)
            if len(digits) > 1 and digits[0] == "0":
                if any(d not in "01234567" for d in digits):
                    raise self._error(
                        f"invalid digit in octal literal '{digits}'",
                        start_line,
                        start_column,
                    )
                value = int(digits, 8)
            else:
                value = int(digits)

        if self._peek() and self._peek() in self.IDENT_CHARS:
            raise self._error(
                f"invalid suffix '{self._peek()}' on integer literal",
                hint="identifiers cannot start with a digit",
            )

        return self._make_token(CTokenType.NUMBER, value, start_line, start_column)

    def _take_while(self, allowed: str) -> str:
        """Consume characters while they belong to allowed."""
        chars = []
        while self._peek() and self._peek() in allowed:
            chars.append(self._advance())
        return "".join(chars)

    def _scan_operator(self, start_line: int, start_column: int) -> CToken:
        """Scan an operator or delimiter."""
        char = self._advance()

        if char == "=":
            if self._match("="):
                return self._make_token(CTokenType.EQ, "==", start_line, start_column)
            return self._make_token(CTokenType.ASSIGN, "=", start_line, start_column)

        if char == "!":
            if self._match("="):
                return self._make_token(CTokenType.NE, "!=", start_line, start_column)
            return self._make_token(CTokenType.NOT, "!", start_line, start_column)

        if char == "<":
            if self._match("="):
                return self._make_token(CTokenType.LE, "<=", start_line, start_column)
            return self._make_token(CTokenType.LT, "<", start_line, start_column)

        if char == ">":
            if self._match("="):
                return self._make_token(CTokenType.GE, ">=", start_line, start_column)
            return self._make_token(CTokenType.GT, ">", start_line, start_column)

        if char == "&":
            if self._match("&"):
                return self._make_token(CTokenType.AND, "&&", start_line, start_column)
            raise self._error(
                "unsupported operator '&'",
                start_line,
                start_column,
                hint="did you mean '&&'?",
            )

        if char == "|":
            if self._match("|"):
                return self._make_token(CTokenType.OR, "||", start_line, start_column)
            raise self._error(
                "unsupported operator '|'",
                start_line,
                start_column,
                hint="did you mean '||'?",
            )

        if char in SINGLE_TOKENS:
            return self._make_token(SINGLE_TOKENS[char], char, start_line, start_column)

        raise self._error(
            f"invalid character '{char}' (0x{ord(char):02X})",
            start_line,
            start_column,
        )


# =============================================================================
# Token Stream Adapter
# =============================================================================

class TokenStream:
    """
    Pull interface over an already-built sequence of tokens.

    Lets the parser run on a token list (for example one assembled by hand
    in a test) exactly as it runs on a live CLexer. An EOF token is
    synthesized if the sequence does not end with one.
    """

    def __init__(self, tokens: Iterable[CToken], filename: str = "<input>"):
        self._tokens = iter(tokens)
        self._filename = filename
        self._last: Optional[CToken] = None
        self._eof: Optional[CToken] = None

    def next_token(self) -> CToken:
        if self._eof is not None:
            return self._eof

        token = next(self._tokens, None)
        if token is None:
            line = self._last.line if self._last else 1
            column = self._last.column + 1 if self._last else 1
            token = CToken(CTokenType.EOF, None, line, column, self._filename)

        if token.type == CTokenType.EOF:
            self._eof = token
        self._last = token
        return token

    def is_done(self) -> bool:
        return self._eof is not None
