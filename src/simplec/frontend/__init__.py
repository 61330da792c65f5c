"""
SimpleC Front End
=================

Lexer, parser and AST for SimpleC.

Pipeline
--------
    Source → Lexer → Parser → AST

The parser pulls tokens from the lexer one at a time with a single token
of lookahead and returns a CompUnit. Any malformed input raises a
ParseError subclass; nothing is printed and the process is never exited.

Usage
-----
>>> from simplec.frontend import parse_source
>>> tree = parse_source("const int N = 2; int a[N] = {1, 2};")
>>> [type(item).__name__ for item in tree.items]
['VarDecl', 'VarDecl']

Language Subset
---------------
Supported features:
- Data types: int (plus void/char as function return types)
- Operators: + - * / % == != < > <= >= && || !
- Control flow: if/else, while, break, continue, return
- Declarations: const and plain int, multi-dimensional arrays, nested
  brace initializers
- Functions: definitions, calls, scalar and array parameters

Not supported:
- Other variable types, pointers, strings
- for, do-while, switch
- Semantic analysis and code generation
"""

from simplec.frontend.driver import Frontend, FrontendOptions, FrontendResult, parse_c
from simplec.frontend.errors import (
    ParseError,
    LexicalError,
    UnexpectedTokenError,
    UnsupportedTypeError,
    MissingInitializerError,
    UnterminatedConstructError,
    EndOfInputError,
    NestingTooDeepError,
    ErrorCollector,
)
from simplec.frontend.lexer import CLexer, CTokenType, CToken, TokenStream
from simplec.frontend.parser import CParser, parse_source
from simplec.frontend.types import BaseType, VarKind, ControlKind, Operator
from simplec.frontend.ast import (
    ASTNode,
    CompUnit,
    FuncDef,
    FuncCall,
    VarDecl,
    VarDef,
    Id,
    InitVal,
    Block,
    Stmt,
    Empty,
    Assign,
    Control,
    If,
    While,
    Binary,
    Unary,
    Num,
    LVal,
    ASTVisitor,
    ASTPrinter,
)

__all__ = [
    # Driver
    "Frontend",
    "FrontendOptions",
    "FrontendResult",
    "parse_c",
    "parse_source",
    # Lexer and parser
    "CLexer",
    "CTokenType",
    "CToken",
    "TokenStream",
    "CParser",
    # Errors
    "ParseError",
    "LexicalError",
    "UnexpectedTokenError",
    "UnsupportedTypeError",
    "MissingInitializerError",
    "UnterminatedConstructError",
    "EndOfInputError",
    "NestingTooDeepError",
    "ErrorCollector",
    # Tags
    "BaseType",
    "VarKind",
    "ControlKind",
    "Operator",
    # AST
    "ASTNode",
    "CompUnit",
    "FuncDef",
    "FuncCall",
    "VarDecl",
    "VarDef",
    "Id",
    "InitVal",
    "Block",
    "Stmt",
    "Empty",
    "Assign",
    "Control",
    "If",
    "While",
    "Binary",
    "Unary",
    "Num",
    "LVal",
    "ASTVisitor",
    "ASTPrinter",
]
