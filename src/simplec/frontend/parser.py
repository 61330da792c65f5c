"""
SimpleC Recursive Descent Parser
================================

This module implements a recursive descent parser for SimpleC. It pulls
tokens one at a time from a lexer, keeping a single token of lookahead, and
builds the AST defined in simplec.frontend.ast.

Grammar (EBNF)
--------------
program      ::= (var_decl | func_def)*
func_def     ::= ('int' | 'void' | 'char') IDENTIFIER '(' params? ')' block
params       ::= param (',' param)*
param        ::= 'int' IDENTIFIER ('[' ']' ('[' add_expr ']')*)?
var_decl     ::= 'const'? 'int' var_def (',' var_def)* ';'
var_def      ::= IDENTIFIER ('[' add_expr ']')* ('=' init_val)?
init_val     ::= '{' (init_val (',' init_val)*)? '}' | add_expr

block        ::= '{' (var_decl | statement)* '}'
statement    ::= ';'
               | block
               | 'while' '(' or_expr ')' statement
               | 'if' '(' or_expr ')' statement ('else' statement)?
               | 'break' ';' | 'continue' ';'
               | 'return' add_expr? ';'
               | lval '=' add_expr ';'
               | add_expr ';'

Expression Precedence (lowest to highest)
-----------------------------------------
1. logical_or       ||
2. logical_and      &&
3. equality         == !=
4. relational       < > <= >=
5. additive         + -
6. multiplicative   * / %
7. unary/primary    + - !  NUMBER  IDENTIFIER  call  index  '(' add_expr ')'

All binary tiers are left-associative. Only 'if' and 'while' conditions
start at logical_or; every other expression position (statements, return
values, call arguments, indices, dimensions, initializers, parentheses)
starts at the additive tier.

Disambiguation
--------------
- A top-level 'int' is followed by an identifier in both a declaration and
  a function definition. Both are consumed, then a '(' commits to a
  function and anything else to a declaration; nothing is re-read.
- A statement that does not start with a keyword is parsed as an additive
  expression first. Only if the result is an LVal and the next token is
  '=' does it become an assignment.

Errors
------
Every rule either returns a finished subtree or raises a ParseError
subclass. After raising, the parser consumes nothing more and no partial
tree escapes.

Example Usage
-------------
>>> from simplec.frontend.parser import parse_source
>>> tree = parse_source("int main() { return 1 - 2 - 3; }")
>>> print(tree.dump())
CompUnit
  FuncDef: int main()
    Block
      Return ((1 - 2) - 3)
"""

from contextlib import contextmanager
from typing import Callable, Iterator, Optional, Protocol
import logging

from simplec.errors import SourceLocation
from simplec.frontend.lexer import CLexer, CToken, CTokenType
from simplec.frontend.types import BaseType, ControlKind, Operator, VarKind
from simplec.frontend.ast import (
    ASTNode,
    Assign,
    Binary,
    Block,
    CompUnit,
    Control,
    Empty,
    Expression,
    FuncCall,
    FuncDef,
    Id,
    If,
    InitVal,
    LVal,
    Num,
    Stmt,
    Unary,
    VarDecl,
    VarDef,
    While,
)
from simplec.frontend.errors import (
    EndOfInputError,
    LexicalError,
    MissingInitializerError,
    NestingTooDeepError,
    ParseError,
    UnexpectedTokenError,
    UnsupportedTypeError,
    UnterminatedConstructError,
)

logger = logging.getLogger(__name__)

DEFAULT_MAX_DEPTH = 100


class TokenSource(Protocol):
    """What the parser needs from a lexer."""

    def next_token(self) -> CToken: ...

    def is_done(self) -> bool: ...


class ErrorSink(Protocol):
    """Receives each error at the position where parsing stopped."""

    def report(self, error: ParseError) -> None: ...


# =============================================================================
# Operator Tables
# =============================================================================

RETURN_TYPES = {
    CTokenType.INT: BaseType.INT,
    CTokenType.VOID: BaseType.VOID,
    CTokenType.CHAR: BaseType.CHAR,
}

CONTROL_KINDS = {
    CTokenType.BREAK: ControlKind.BREAK,
    CTokenType.CONTINUE: ControlKind.CONTINUE,
    CTokenType.RETURN: ControlKind.RETURN,
}

CLOSING_DELIMITERS = {
    CTokenType.RPAREN: ")",
    CTokenType.RBRACKET: "]",
    CTokenType.RBRACE: "}",
}

UNARY_OPS = {
    CTokenType.PLUS: Operator.ADD,
    CTokenType.MINUS: Operator.SUB,
    CTokenType.NOT: Operator.NOT,
}

LOGICAL_OR_OPS = {CTokenType.OR: Operator.OR}
LOGICAL_AND_OPS = {CTokenType.AND: Operator.AND}
EQUALITY_OPS = {CTokenType.EQ: Operator.EQ, CTokenType.NE: Operator.NE}
RELATIONAL_OPS = {
    CTokenType.LT: Operator.LT,
    CTokenType.GT: Operator.GT,
    CTokenType.LE: Operator.LE,
    CTokenType.GE: Operator.GE,
}
ADDITIVE_OPS = {CTokenType.PLUS: Operator.ADD, CTokenType.MINUS: Operator.SUB}
MULTIPLICATIVE_OPS = {
    CTokenType.STAR: Operator.MUL,
    CTokenType.SLASH: Operator.DIV,
    CTokenType.PERCENT: Operator.MOD,
}


class CParser:
    """
    Recursive descent parser for SimpleC.

    Holds exactly one lookahead token. Each grammar rule is a method that
    consumes tokens and returns a freshly built subtree.

    Attributes:
        lexer: Token source with next_token()/is_done()
        filename: Source filename for the root node's location
        max_depth: Maximum nesting of statements and expressions
        error_sink: Optional sink notified before an error is raised
    """

    def __init__(
        self,
        lexer: TokenSource,
        filename: str = "<input>",
        source_lines: Optional[list[str]] = None,
        max_depth: int = DEFAULT_MAX_DEPTH,
        error_sink: Optional[ErrorSink] = None,
    ):
        """
        Initialize the parser.

        Args:
            lexer: A CLexer, TokenStream, or anything with the same pull API
            filename: Source filename for locations
            source_lines: Original source lines for error context
            max_depth: Nesting limit guarding against runaway recursion
            error_sink: Receives each error before it is raised
        """
        self.lexer = lexer
        self.filename = filename
        self.source_lines = source_lines or []
        self.max_depth = max_depth
        self.error_sink = error_sink

        self._token: Optional[CToken] = None
        self._depth = 0

    def parse(self) -> CompUnit:
        """
        Parse the whole token stream.

        Returns:
            CompUnit holding every top-level declaration and function

        Raises:
            ParseError: At the first malformed construct
        """
        self._token = None
        self._depth = 0
        self._advance()

        items = []
        while not self._at_end():
            items.append(self._parse_top_level())

        logger.debug(f"{self.filename}: parsed {len(items)} top-level items")
        return CompUnit(items, location=SourceLocation(self.filename, 1, 1))

    # =========================================================================
    # Token Access Methods
    # =========================================================================

    def _at_end(self) -> bool:
        """True once the lookahead is the EOF token."""
        return self._check(CTokenType.EOF)

    def _advance(self) -> CToken:
        """Consume the lookahead and pull the next token; return the consumed one."""
        previous = self._token
        try:
            self._token = self.lexer.next_token()
        except LexicalError as e:
            self._fail(e)
            raise
        return previous

    def _check(self, *types: CTokenType) -> bool:
        """Check if the lookahead is one of the given types."""
        return self._token.type in types

    def _match(self, *types: CTokenType) -> Optional[CToken]:
        """Consume the lookahead if it matches; return it or None."""
        if self._check(*types):
            return self._advance()
        return None

    def _expect(self, token_type: CTokenType, expected: str) -> CToken:
        """
        Consume a token of the given type.

        Raises:
            EndOfInputError: If the input has ended
            UnexpectedTokenError: If a different token is found
        """
        if self._check(token_type):
            return self._advance()
        raise self._unexpected(expected)

    def _expect_closing(
        self,
        token_type: CTokenType,
        construct: str,
        opened_at: SourceLocation,
    ) -> CToken:
        """
        Consume the closing delimiter of a bracketed construct.

        Raises:
            UnterminatedConstructError: If anything else (EOF included) is found
        """
        if self._check(token_type):
            return self._advance()
        raise self._fail(UnterminatedConstructError(
            construct,
            CLOSING_DELIMITERS[token_type],
            self._token,
            opened_at,
            self._get_source_line(self._token.line),
        ))

    def _unexpected(self, expected: str) -> ParseError:
        """Build (and report) the error for an unwanted lookahead."""
        if self._check(CTokenType.EOF):
            return self._fail(EndOfInputError(expected, self._token.location))
        return self._fail(UnexpectedTokenError(
            expected,
            self._token,
            self._get_source_line(self._token.line),
        ))

    def _fail(self, error: ParseError) -> ParseError:
        """Notify the error sink, then hand the error back for raising."""
        logger.debug(f"parse error: {error.message}")
        if self.error_sink is not None:
            self.error_sink.report(error)
        return error

    def _get_source_line(self, line: int) -> Optional[str]:
        """Get source line for error reporting."""
        if 0 < line <= len(self.source_lines):
            return self.source_lines[line - 1]
        return None

    @contextmanager
    def _nested(self) -> Iterator[None]:
        """Count one level of nesting for the duration of a rule."""
        self._depth += 1
        try:
            if self._depth > self.max_depth:
                raise self._fail(NestingTooDeepError(
                    self.max_depth,
                    self._token.location,
                    self._get_source_line(self._token.line),
                ))
            yield
        finally:
            self._depth -= 1

    # =========================================================================
    # Top-Level Parsing
    # =========================================================================

    def _parse_top_level(self) -> ASTNode:
        """
        Parse one top-level item.

        'const' means a declaration; 'void' or 'char' means a function.
        'int' needs the identifier and one more token before it can decide.
        """
        token = self._token

        if self._check(CTokenType.CONST):
            return self._parse_var_decl()

        if self._check(CTokenType.VOID, CTokenType.CHAR):
            return self._parse_function_def()

        if self._check(CTokenType.INT):
            self._advance()
            name_token = self._expect(CTokenType.IDENTIFIER, "identifier after 'int'")

            if self._check(CTokenType.LPAREN):
                logger.debug(f"'int {name_token.name}' is a function definition")
                return self._parse_function_rest(BaseType.INT, name_token, token.location)

            logger.debug(f"'int {name_token.name}' is a variable declaration")
            first = self._parse_var_def_rest(False, name_token)
            return self._parse_var_decl_rest(False, first, token.location)

        raise self._unexpected("declaration or function definition")

    # =========================================================================
    # Function Definitions
    # =========================================================================

    def _parse_function_def(self) -> FuncDef:
        """Parse a function definition starting at its return type."""
        type_token = self._advance()
        name_token = self._expect(CTokenType.IDENTIFIER, "function name")
        return self._parse_function_rest(
            RETURN_TYPES[type_token.type], name_token, type_token.location
        )

    def _parse_function_rest(
        self,
        return_type: BaseType,
        name_token: CToken,
        location: SourceLocation,
    ) -> FuncDef:
        """Parse '(' params? ')' block after the function name."""
        open_paren = self._expect(CTokenType.LPAREN, "'('")

        params = []
        if not self._check(CTokenType.RPAREN):
            while True:
                params.append(self._parse_param())
                if not self._match(CTokenType.COMMA):
                    break

        self._expect_closing(CTokenType.RPAREN, "parameter list", open_paren.location)
        body = self._parse_block()

        return FuncDef(return_type, name_token.name, params, body, location=location)

    def _parse_param(self) -> Id:
        """
        Parse one parameter: 'int' IDENTIFIER ('[' ']' ('[' add_expr ']')*)?

        The first dimension of an array parameter is always Num(0).
        """
        type_token = self._token
        if not self._check(CTokenType.INT):
            if type_token.is_type_keyword():
                raise self._fail(UnsupportedTypeError(
                    type_token.value,
                    type_token.location,
                    self._get_source_line(type_token.line),
                ))
            raise self._unexpected("parameter type 'int'")
        self._advance()

        name_token = self._expect(CTokenType.IDENTIFIER, "parameter name")

        if self._check(CTokenType.LBRACKET):
            open_bracket = self._advance()
            self._expect(CTokenType.RBRACKET, "']' (leave the first parameter dimension empty)")
            dims = [Num(0, location=open_bracket.location)]
            dims.extend(self._parse_dimensions("array parameter dimension"))
            return Id(name_token.name, VarKind.ARRAY, False, dims, location=name_token.location)

        return Id(name_token.name, location=name_token.location)

    # =========================================================================
    # Declarations
    # =========================================================================

    def _parse_var_decl(self) -> VarDecl:
        """Parse 'const'? 'int' var_def (',' var_def)* ';'."""
        location = self._token.location
        is_const = self._match(CTokenType.CONST) is not None

        type_token = self._token
        if not self._check(CTokenType.INT):
            if type_token.is_type_keyword():
                raise self._fail(UnsupportedTypeError(
                    type_token.value,
                    type_token.location,
                    self._get_source_line(type_token.line),
                ))
            raise self._unexpected("'int'")
        self._advance()

        name_token = self._expect(CTokenType.IDENTIFIER, "variable name")
        first = self._parse_var_def_rest(is_const, name_token)
        return self._parse_var_decl_rest(is_const, first, location)

    def _parse_var_decl_rest(
        self,
        is_const: bool,
        first: VarDef,
        location: SourceLocation,
    ) -> VarDecl:
        """Parse the (',' var_def)* ';' tail shared by every declaration."""
        defs = [first]
        while self._match(CTokenType.COMMA):
            name_token = self._expect(CTokenType.IDENTIFIER, "variable name")
            defs.append(self._parse_var_def_rest(is_const, name_token))

        self._expect(CTokenType.SEMICOLON, "';'")
        return VarDecl(is_const, defs, location=location)

    def _parse_var_def_rest(self, is_const: bool, name_token: CToken) -> VarDef:
        """Parse ('[' add_expr ']')* ('=' init_val)? after the name."""
        dims = self._parse_dimensions("array dimension")
        kind = VarKind.ARRAY if dims else VarKind.SCALAR
        target = Id(name_token.name, kind, is_const, dims, location=name_token.location)

        init = None
        if self._match(CTokenType.ASSIGN):
            init = self._parse_init_val()
        elif is_const:
            raise self._fail(MissingInitializerError(
                name_token.name,
                self._token.location,
                self._get_source_line(self._token.line),
            ))

        return VarDef(is_const, target, init, location=name_token.location)

    def _parse_dimensions(self, construct: str) -> list[Expression]:
        """Parse zero or more '[' add_expr ']' groups."""
        dims = []
        while self._check(CTokenType.LBRACKET):
            open_bracket = self._advance()
            dims.append(self._parse_additive())
            self._expect_closing(CTokenType.RBRACKET, construct, open_bracket.location)
        return dims

    def _parse_init_val(self) -> InitVal:
        """Parse a scalar initializer or a (possibly nested) brace list."""
        location = self._token.location
        with self._nested():
            if self._check(CTokenType.LBRACE):
                open_brace = self._advance()
                values = []
                if not self._check(CTokenType.RBRACE):
                    while True:
                        values.append(self._parse_init_val())
                        if not self._match(CTokenType.COMMA):
                            break
                self._expect_closing(CTokenType.RBRACE, "initializer list", open_brace.location)
                return InitVal(VarKind.ARRAY, values, location=location)

            expr = self._parse_additive()
            return InitVal(VarKind.SCALAR, (expr,), location=location)

    # =========================================================================
    # Statement Parsing
    # =========================================================================

    def _parse_block(self) -> Block:
        """Parse '{' (var_decl | statement)* '}'."""
        open_brace = self._expect(CTokenType.LBRACE, "'{'")

        items = []
        with self._nested():
            while not self._check(CTokenType.RBRACE, CTokenType.EOF):
                if self._check(CTokenType.CONST) or self._token.is_type_keyword():
                    items.append(self._parse_var_decl())
                else:
                    items.append(self._parse_statement())
            self._expect_closing(CTokenType.RBRACE, "block", open_brace.location)

        return Block(items, location=open_brace.location)

    def _parse_statement(self) -> Stmt:
        """Parse any statement and wrap it in Stmt."""
        token = self._token

        with self._nested():
            if self._check(CTokenType.SEMICOLON):
                self._advance()
                node = Empty(location=token.location)
            elif self._check(CTokenType.LBRACE):
                node = self._parse_block()
            elif self._check(CTokenType.WHILE):
                node = self._parse_while_statement()
            elif self._check(CTokenType.IF):
                node = self._parse_if_statement()
            elif self._check(CTokenType.BREAK, CTokenType.CONTINUE, CTokenType.RETURN):
                node = self._parse_control_statement()
            else:
                node = self._parse_expression_statement()

        return Stmt(node, location=token.location)

    def _parse_if_statement(self) -> If:
        """Parse 'if' '(' or_expr ')' statement ('else' statement)?."""
        location = self._advance().location
        open_paren = self._expect(CTokenType.LPAREN, "'(' after 'if'")
        cond = self._parse_logical_or()
        self._expect_closing(CTokenType.RPAREN, "if condition", open_paren.location)

        then = self._parse_statement()

        orelse = None
        if self._match(CTokenType.ELSE):
            orelse = self._parse_statement()

        return If(cond, then, orelse, location=location)

    def _parse_while_statement(self) -> While:
        """Parse 'while' '(' or_expr ')' statement."""
        location = self._advance().location
        open_paren = self._expect(CTokenType.LPAREN, "'(' after 'while'")
        cond = self._parse_logical_or()
        self._expect_closing(CTokenType.RPAREN, "while condition", open_paren.location)

        body = self._parse_statement()
        return While(cond, body, location=location)

    def _parse_control_statement(self) -> Control:
        """
        Parse break, continue or return.

        A return is bare exactly when the next token is ';'.
        """
        keyword = self._advance()
        kind = CONTROL_KINDS[keyword.type]

        expr = None
        if kind == ControlKind.RETURN and not self._check(CTokenType.SEMICOLON):
            expr = self._parse_additive()

        self._expect(CTokenType.SEMICOLON, "';'")
        return Control(kind, expr, location=keyword.location)

    def _parse_expression_statement(self) -> ASTNode:
        """
        Parse an assignment or an expression evaluated for effect.

        The expression is parsed first; it becomes an assignment only if it
        came back as a bare LVal and '=' follows.
        """
        expr = self._parse_additive()

        if isinstance(expr, LVal) and self._check(CTokenType.ASSIGN):
            self._advance()
            value = self._parse_additive()
            self._expect(CTokenType.SEMICOLON, "';'")
            return Assign(expr, value, location=expr.location)

        self._expect(CTokenType.SEMICOLON, "';'")
        return expr

    # =========================================================================
    # Expression Parsing (Operator Precedence)
    # =========================================================================

    def _parse_logical_or(self) -> Expression:
        """Parse logical OR expression (||)."""
        return self._parse_binary(self._parse_logical_and, LOGICAL_OR_OPS)

    def _parse_logical_and(self) -> Expression:
        """Parse logical AND expression (&&)."""
        return self._parse_binary(self._parse_equality, LOGICAL_AND_OPS)

    def _parse_equality(self) -> Expression:
        """Parse equality expression (== !=)."""
        return self._parse_binary(self._parse_relational, EQUALITY_OPS)

    def _parse_relational(self) -> Expression:
        """Parse relational expression (< > <= >=)."""
        return self._parse_binary(self._parse_additive, RELATIONAL_OPS)

    def _parse_additive(self) -> Expression:
        """Parse additive expression (+ -)."""
        return self._parse_binary(self._parse_multiplicative, ADDITIVE_OPS)

    def _parse_multiplicative(self) -> Expression:
        """Parse multiplicative expression (* / %)."""
        return self._parse_binary(self._parse_unary, MULTIPLICATIVE_OPS)

    def _parse_binary(
        self,
        operand_parser: Callable[[], Expression],
        operators: dict[CTokenType, Operator],
    ) -> Expression:
        """
        Generic left-associative binary expression parser.

        Raises NestingTooDeepError once the folded tree is taller than
        max_depth.

        Args:
            operand_parser: Parser for the next-higher tier
            operators: Map of token types to operators of this tier
        """
        expr = operand_parser()

        while self._token.type in operators:
            op_token = self._advance()
            right = operand_parser()
            expr = Binary(
                operators[op_token.type],
                expr,
                right,
                location=expr.location,
            )
            # A folded chain is as tall as it is long
            if expr.height > self.max_depth:
                raise self._fail(NestingTooDeepError(
                    self.max_depth,
                    op_token.location,
                    self._get_source_line(op_token.line),
                ))

        return expr

    def _parse_unary(self) -> Expression:
        """Parse unary operators and primary expressions."""
        token = self._token

        with self._nested():
            if token.type in UNARY_OPS:
                self._advance()
                operand = self._parse_unary()
                return Unary(UNARY_OPS[token.type], operand, location=token.location)

            if token.type == CTokenType.LPAREN:
                self._advance()
                expr = self._parse_additive()
                self._expect_closing(CTokenType.RPAREN, "parenthesized expression", token.location)
                return expr

            if token.type == CTokenType.NUMBER:
                self._advance()
                return Num(token.number, location=token.location)

            if token.type == CTokenType.IDENTIFIER:
                self._advance()
                return self._parse_identifier_expression(token)

            raise self._unexpected("expression")

    def _parse_identifier_expression(self, name_token: CToken) -> Expression:
        """Parse a call, an indexed LVal, or a scalar LVal after a name."""
        name = name_token.name
        location = name_token.location

        if self._check(CTokenType.LPAREN):
            open_paren = self._advance()
            args = []
            if not self._check(CTokenType.RPAREN):
                while True:
                    args.append(self._parse_additive())
                    if not self._match(CTokenType.COMMA):
                        break
            self._expect_closing(CTokenType.RPAREN, "argument list", open_paren.location)
            return FuncCall(name, args, location=location)

        if self._check(CTokenType.LBRACKET):
            indices = self._parse_dimensions("array index")
            return LVal(name, VarKind.ARRAY, indices, location=location)

        return LVal(name, location=location)


# =============================================================================
# Convenience Functions
# =============================================================================

def parse_source(
    source: str,
    filename: str = "<input>",
    max_depth: int = DEFAULT_MAX_DEPTH,
    error_sink: Optional[ErrorSink] = None,
) -> CompUnit:
    """
    Parse SimpleC source code into an AST.

    Args:
        source: The SimpleC source code
        filename: Source filename for error messages
        max_depth: Nesting limit
        error_sink: Optional sink notified of the error before it is raised

    Returns:
        The root CompUnit of the AST

    Raises:
        ParseError: If the source is malformed
    """
    lexer = CLexer(source, filename)
    parser = CParser(
        lexer,
        filename,
        source.splitlines(),
        max_depth=max_depth,
        error_sink=error_sink,
    )
    return parser.parse()
