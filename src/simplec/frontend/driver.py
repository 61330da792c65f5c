"""
SimpleC Front-End Driver
========================

This module wires the lexer and parser together behind one interface:

    Source → Lex → Parse → AST

Usage
-----
Command line:
    $ scc prog.c

Programmatic:
    >>> from simplec.frontend import parse_c
    >>> tree = parse_c('int main() { return 0; }')

Configuration
-------------
FrontendOptions holds the knobs the driver passes to the parser. Defaults
can be overridden from the environment:

    SIMPLEC_MAX_DEPTH: Nesting limit (integer)
    SIMPLEC_FILENAME: Filename used for source given as a string

Error Handling
--------------
The first parse error is reported to the driver's ErrorCollector and then
re-raised unchanged, so callers see the same structured exception the
parser raised.
"""

from pathlib import Path
from typing import Optional
from dataclasses import dataclass, field
import logging
import os

from simplec.frontend.lexer import CLexer, CToken, CTokenType
from simplec.frontend.parser import CParser, DEFAULT_MAX_DEPTH
from simplec.frontend.ast import CompUnit
from simplec.frontend.errors import ErrorCollector, ParseError

logger = logging.getLogger(__name__)


@dataclass
class FrontendOptions:
    """
    Front-end configuration options.

    Attributes:
        max_depth: Maximum nesting of statements and expressions
        filename: Name reported for source that did not come from a file
        collect_tokens: Keep the token list on the result
    """
    max_depth: int = DEFAULT_MAX_DEPTH
    filename: str = "<input>"
    collect_tokens: bool = False

    @classmethod
    def from_env(cls) -> "FrontendOptions":
        """
        Create FrontendOptions from environment variables.

        Environment variables (all optional):
            SIMPLEC_MAX_DEPTH: Nesting limit (positive integer)
            SIMPLEC_FILENAME: Default filename for string sources

        Returns:
            FrontendOptions with values from environment variables
        """
        options = cls()

        if max_depth := os.environ.get("SIMPLEC_MAX_DEPTH"):
            try:
                value = int(max_depth)
            except ValueError:
                value = 0
            if value > 0:
                options.max_depth = value
            else:
                logger.warning(f"ignoring invalid SIMPLEC_MAX_DEPTH={max_depth!r}")

        if filename := os.environ.get("SIMPLEC_FILENAME"):
            options.filename = filename

        return options


@dataclass
class FrontendResult:
    """
    Result of running the front end.

    Attributes:
        filename: Source filename
        ast: Root of the syntax tree (if parsing succeeded)
        token_count: Number of tokens the parser consumed, EOF excluded
        tokens: Those tokens plus EOF, when FrontendOptions.collect_tokens is set
    """
    filename: str = ""
    ast: Optional[CompUnit] = None
    token_count: int = 0
    tokens: list[CToken] = field(default_factory=list)


class TokenRecorder:
    """
    Token source that keeps a copy of every token handed to the parser.

    Wraps a live CLexer, so lexing stays lazy: a lexical error past the
    point where parsing stops is never reached.
    """

    def __init__(self, lexer: CLexer):
        self._lexer = lexer
        self.tokens: list[CToken] = []

    def next_token(self) -> CToken:
        if self._lexer.is_done():
            return self._lexer.next_token()
        token = self._lexer.next_token()
        self.tokens.append(token)
        return token

    def is_done(self) -> bool:
        return self._lexer.is_done()

    @property
    def consumed(self) -> int:
        """Tokens pulled so far, EOF excluded."""
        return sum(1 for token in self.tokens if token.type != CTokenType.EOF)


class Frontend:
    """
    SimpleC front end.

    Example:
        frontend = Frontend()
        result = frontend.parse_file("prog.c")
        print(result.ast.dump())

    Attributes:
        options: Front-end configuration options
    """

    def __init__(self, options: Optional[FrontendOptions] = None):
        """
        Initialize the front end.

        Args:
            options: Configuration (uses defaults if None)
        """
        self.options = options or FrontendOptions()
        self._errors = ErrorCollector()

    @property
    def errors(self) -> ErrorCollector:
        """Collector holding the errors of the most recent run."""
        return self._errors

    def parse_source(self, source: str, filename: Optional[str] = None) -> FrontendResult:
        """
        Parse SimpleC source code.

        Args:
            source: SimpleC source code string
            filename: Source filename for error messages
                      (defaults to options.filename)

        Returns:
            FrontendResult holding the AST

        Raises:
            ParseError: If the source is malformed
        """
        filename = filename or self.options.filename
        self._errors.clear()
        result = FrontendResult(filename=filename)

        logger.debug(f"{filename}: parsing {len(source)} characters")

        recorder = TokenRecorder(CLexer(source, filename))
        parser = CParser(
            recorder,
            filename,
            source.splitlines(),
            max_depth=self.options.max_depth,
            error_sink=self._errors,
        )

        try:
            result.ast = parser.parse()
        except ParseError as e:
            logger.debug(f"{filename}: parse failed: {e.message}")
            raise

        result.token_count = recorder.consumed
        if self.options.collect_tokens:
            result.tokens = recorder.tokens

        logger.debug(
            f"{filename}: {result.token_count} tokens, "
            f"{len(result.ast.items)} top-level items"
        )
        return result

    def parse_file(self, filepath: str) -> FrontendResult:
        """
        Parse a SimpleC source file.

        Args:
            filepath: Path to the source file

        Returns:
            FrontendResult holding the AST

        Raises:
            ParseError: If the source is malformed
            FileNotFoundError: If source file not found
        """
        path = Path(filepath)
        if not path.exists():
            raise FileNotFoundError(f"Source file not found: {filepath}")

        source = path.read_text(encoding='utf-8')
        return self.parse_source(source, str(filepath))


# =============================================================================
# Convenience Functions
# =============================================================================

def parse_c(source: str, filename: str = "<input>") -> CompUnit:
    """
    Parse SimpleC source code to an AST.

    This is the primary high-level interface for the front end.

    Args:
        source: SimpleC source code
        filename: Source filename for error messages

    Returns:
        The root CompUnit

    Raises:
        ParseError: If the source is malformed

    Example:
        >>> tree = parse_c('const int N = 4; int a[N];')
        >>> len(tree.items)
        2
    """
    frontend = Frontend(FrontendOptions(filename=filename))
    return frontend.parse_source(source).ast
