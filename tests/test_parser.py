"""
SimpleC Parser Test Suite
=========================

Tests for the recursive descent parser: top-level disambiguation,
declarations, statements, operator precedence and error reporting.

Test Organization
-----------------
- TestTopLevel: declarations vs. function definitions
- TestDeclarations: var_decl, var_def, init_val
- TestParameters: scalar and array parameters
- TestStatements: every statement form
- TestExpressions: precedence and associativity
- TestParseErrors: structured errors and the error sink
- TestNestingLimit: recursion guard
"""

import pytest
from simplec.errors import SourceLocation
from simplec.frontend.lexer import CLexer, CToken, CTokenType, TokenStream
from simplec.frontend.parser import CParser, parse_source
from simplec.frontend.types import BaseType, ControlKind, Operator, VarKind
from simplec.frontend.ast import (
    Assign,
    Binary,
    Block,
    CompUnit,
    Control,
    Empty,
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
    ErrorCollector,
    LexicalError,
    MissingInitializerError,
    NestingTooDeepError,
    ParseError,
    UnexpectedTokenError,
    UnsupportedTypeError,
    UnterminatedConstructError,
)


# =============================================================================
# Helper Functions
# =============================================================================

def body_of(source: str) -> tuple:
    """Parse 'int f() { source }' and return the body's items."""
    tree = parse_source(f"int f() {{ {source} }}")
    return tree.items[0].body.items


def statement(source: str):
    """Parse a single statement and return the node wrapped by Stmt."""
    items = body_of(source)
    assert len(items) == 1
    assert isinstance(items[0], Stmt)
    return items[0].node


def expression(source: str):
    """Parse 'return source;' and return the expression."""
    node = statement(f"return {source};")
    assert isinstance(node, Control)
    return node.expr


def condition(source: str):
    """Parse 'if (source) ;' and return the condition."""
    node = statement(f"if ({source}) ;")
    assert isinstance(node, If)
    return node.cond


# =============================================================================
# Top-Level Tests
# =============================================================================

class TestTopLevel:
    """Tests for program-level parsing."""

    def test_empty_program(self):
        """Empty program should parse to empty CompUnit."""
        tree = parse_source("")
        assert isinstance(tree, CompUnit)
        assert tree.items == ()

    def test_int_function(self):
        tree = parse_source("int main() { return 0; }")
        func = tree.items[0]
        assert isinstance(func, FuncDef)
        assert func.return_type == BaseType.INT
        assert func.name == "main"
        assert func.params == ()

    def test_void_function(self):
        func = parse_source("void run() { }").items[0]
        assert func.return_type == BaseType.VOID
        assert func.body == Block()

    def test_char_return_type(self):
        func = parse_source("char get() { return 1; }").items[0]
        assert isinstance(func, FuncDef)
        assert func.return_type == BaseType.CHAR

    def test_int_variable(self):
        tree = parse_source("int x;")
        assert tree.items == (
            VarDecl(False, (VarDef(False, Id("x")),)),
        )

    def test_int_disambiguation_shares_prefix(self):
        """'int a, b;' and 'int a(...)' both start with 'int a'."""
        tree = parse_source("int a, b; int c() { }")
        decl, func = tree.items
        assert isinstance(decl, VarDecl)
        assert [d.target.name for d in decl.defs] == ["a", "b"]
        assert isinstance(func, FuncDef)
        assert func.name == "c"

    def test_mixed_program(self):
        source = """
        const int N = 10;
        int buf[N];
        int sum(int a[], int n) {
            int i = 0, s = 0;
            while (i < n) { s = s + a[i]; i = i + 1; }
            return s;
        }
        void main() { sum(buf, N); }
        """
        tree = parse_source(source)
        assert [type(item).__name__ for item in tree.items] == [
            "VarDecl", "VarDecl", "FuncDef", "FuncDef",
        ]

    def test_locations(self):
        tree = parse_source("int x;\nint main() { }", "prog.c")
        assert tree.location == SourceLocation("prog.c", 1, 1)
        assert tree.items[1].location == SourceLocation("prog.c", 2, 1)

    def test_stray_token_at_top_level(self):
        with pytest.raises(UnexpectedTokenError) as exc_info:
            parse_source("x = 1;")
        assert exc_info.value.expected == "declaration or function definition"
        assert exc_info.value.found.value == "x"

    def test_parser_runs_on_token_stream(self):
        """The parser only needs next_token()/is_done()."""
        tokens = [
            CToken(CTokenType.INT, "int", 1, 1),
            CToken(CTokenType.IDENTIFIER, "x", 1, 5),
            CToken(CTokenType.SEMICOLON, ";", 1, 6),
        ]
        tree = CParser(TokenStream(tokens)).parse()
        assert tree == CompUnit((VarDecl(False, (VarDef(False, Id("x")),)),))


# =============================================================================
# Declaration Tests
# =============================================================================

class TestDeclarations:
    """Tests for var_decl, var_def and init_val."""

    def test_const_scalar(self):
        decl = parse_source("const int N = 10;").items[0]
        assert decl == VarDecl(True, (
            VarDef(True, Id("N", is_const=True), InitVal(VarKind.SCALAR, (Num(10),))),
        ))

    def test_multiple_definitions(self):
        decl = parse_source("int a = 1, b, c = a + 1;").items[0]
        assert len(decl.defs) == 3
        assert decl.defs[1].init is None
        assert decl.defs[2].init.values[0] == Binary(Operator.ADD, LVal("a"), Num(1))

    def test_array_dimensions(self):
        target = parse_source("int m[2][N + 1];").items[0].defs[0].target
        assert target.kind == VarKind.ARRAY
        assert target.dims == (Num(2), Binary(Operator.ADD, LVal("N"), Num(1)))

    def test_nested_initializer(self):
        init = parse_source("int a[2][2] = {{1, 2}, {3}};").items[0].defs[0].init
        scalar = lambda v: InitVal(VarKind.SCALAR, (Num(v),))
        assert init == InitVal(VarKind.ARRAY, (
            InitVal(VarKind.ARRAY, (scalar(1), scalar(2))),
            InitVal(VarKind.ARRAY, (scalar(3),)),
        ))

    def test_empty_braces_mean_zero_fill(self):
        init = parse_source("int a[4] = {};").items[0].defs[0].init
        assert init == InitVal(VarKind.ARRAY, ())

    def test_local_declarations(self):
        items = body_of("const int K = 2; int v[K]; v[0] = K;")
        assert isinstance(items[0], VarDecl)
        assert items[0].is_const
        assert isinstance(items[1], VarDecl)
        assert isinstance(items[2], Stmt)

    def test_const_without_initializer(self):
        """Missing initializer is its own error, not a generic unexpected token."""
        with pytest.raises(MissingInitializerError) as exc_info:
            parse_source("const int x;")
        assert exc_info.value.name == "x"
        assert not isinstance(exc_info.value, UnexpectedTokenError)

    def test_unsupported_const_type(self):
        with pytest.raises(UnsupportedTypeError) as exc_info:
            parse_source("const void v = 1;")
        assert exc_info.value.name == "void"

    def test_top_level_char_starts_function(self):
        """'char c;' is read as a function named c missing its '('."""
        with pytest.raises(UnexpectedTokenError) as exc_info:
            parse_source("char c;")
        assert exc_info.value.expected == "'('"

    def test_unsupported_local_type(self):
        with pytest.raises(UnsupportedTypeError) as exc_info:
            body_of("char c;")
        assert exc_info.value.name == "char"

    def test_const_needs_int(self):
        with pytest.raises(UnexpectedTokenError) as exc_info:
            parse_source("const x = 1;")
        assert exc_info.value.expected == "'int'"

    def test_missing_semicolon(self):
        with pytest.raises(UnexpectedTokenError) as exc_info:
            parse_source("int a int b;")
        assert exc_info.value.expected == "';'"


# =============================================================================
# Parameter Tests
# =============================================================================

class TestParameters:
    """Tests for function parameters and dimension erasure."""

    def test_scalar_parameters(self):
        func = parse_source("int add(int a, int b) { return a + b; }").items[0]
        assert func.params == (Id("a"), Id("b"))

    def test_array_parameter_first_dim_erased(self):
        func = parse_source("int f(int a[][3]) { }").items[0]
        assert func.params[0] == Id("a", VarKind.ARRAY, False, (Num(0), Num(3)))

    def test_one_dimensional_array_parameter(self):
        param = parse_source("int f(int a[]) { }").items[0].params[0]
        assert param.kind == VarKind.ARRAY
        assert param.dims == (Num(0),)

    def test_size_in_first_dimension_rejected(self):
        with pytest.raises(UnexpectedTokenError) as exc_info:
            parse_source("int f(int a[3]) { }")
        assert exc_info.value.found.value == 3

    def test_non_int_parameter(self):
        with pytest.raises(UnsupportedTypeError) as exc_info:
            parse_source("int f(char c) { }")
        assert exc_info.value.name == "char"

    def test_void_parameter_list(self):
        with pytest.raises(UnsupportedTypeError):
            parse_source("int f(void) { }")

    def test_missing_parameter_type(self):
        with pytest.raises(UnexpectedTokenError):
            parse_source("int f(x) { }")


# =============================================================================
# Statement Tests
# =============================================================================

class TestStatements:
    """Tests for statement parsing."""

    def test_empty_statement(self):
        assert statement(";") == Empty()

    def test_nested_block(self):
        node = statement("{ ; }")
        assert node == Block((Stmt(Empty()),))

    def test_assignment(self):
        assert statement("a = 1;") == Assign(LVal("a"), Num(1))

    def test_array_assignment(self):
        node = statement("a[i][j + 1] = f(2);")
        assert node == Assign(
            LVal("a", VarKind.ARRAY, (LVal("i"), Binary(Operator.ADD, LVal("j"), Num(1)))),
            FuncCall("f", (Num(2),)),
        )

    def test_expression_statement(self):
        assert statement("a;") == LVal("a")
        assert statement("f(1, 2);") == FuncCall("f", (Num(1), Num(2)))
        assert statement("a + 1;") == Binary(Operator.ADD, LVal("a"), Num(1))

    def test_assignment_to_non_lvalue_rejected(self):
        with pytest.raises(UnexpectedTokenError) as exc_info:
            body_of("a + 1 = 2;")
        assert exc_info.value.expected == "';'"
        assert exc_info.value.found.type == CTokenType.ASSIGN

    def test_assignment_to_call_rejected(self):
        with pytest.raises(UnexpectedTokenError):
            body_of("f() = 2;")

    def test_return_forms(self):
        assert statement("return;") == Control(ControlKind.RETURN)
        assert statement("return 5;") == Control(ControlKind.RETURN, Num(5))

    def test_break_and_continue(self):
        assert statement("break;") == Control(ControlKind.BREAK)
        assert statement("continue;") == Control(ControlKind.CONTINUE)

    def test_break_requires_semicolon(self):
        with pytest.raises(UnexpectedTokenError) as exc_info:
            body_of("break 1;")
        assert exc_info.value.expected == "';'"

    def test_if_else(self):
        node = statement("if (1) a = 1; else a = 2;")
        assert node == If(
            Num(1),
            Stmt(Assign(LVal("a"), Num(1))),
            Stmt(Assign(LVal("a"), Num(2))),
        )

    def test_if_without_else(self):
        node = statement("if (1) a = 1;")
        assert node.orelse is None

    def test_dangling_else_binds_to_nearest_if(self):
        node = statement("if (a) if (b) x = 1; else x = 2;")
        assert node.orelse is None
        inner = node.then.node
        assert isinstance(inner, If)
        assert inner.orelse is not None

    def test_while(self):
        node = statement("while (i < 10) { i = i + 1; }")
        assert isinstance(node, While)
        assert node.cond == Binary(Operator.LT, LVal("i"), Num(10))
        assert isinstance(node.body.node, Block)

    def test_every_statement_is_wrapped(self):
        items = body_of("; {} a = 1; a; return; while (1) break; if (1) ;")
        assert all(isinstance(item, Stmt) for item in items)
        assert len(items) == 7


# =============================================================================
# Expression Tests
# =============================================================================

class TestExpressions:
    """Tests for precedence and associativity."""

    def test_left_associative_subtraction(self):
        expr = expression("1 - 2 - 3")
        assert expr == Binary(
            Operator.SUB,
            Binary(Operator.SUB, Num(1), Num(2)),
            Num(3),
        )

    def test_multiplication_binds_tighter(self):
        assert expression("1 + 2 * 3") == Binary(
            Operator.ADD, Num(1), Binary(Operator.MUL, Num(2), Num(3))
        )

    def test_parentheses_override_precedence(self):
        assert expression("(1 + 2) * 3") == Binary(
            Operator.MUL, Binary(Operator.ADD, Num(1), Num(2)), Num(3)
        )

    def test_multiplicative_operators(self):
        expr = expression("a * b / c % d")
        assert expr.op == Operator.MOD
        assert expr.left.op == Operator.DIV
        assert expr.left.left.op == Operator.MUL

    def test_unary_is_right_recursive(self):
        assert expression("- -x") == Unary(Operator.SUB, Unary(Operator.SUB, LVal("x")))
        assert expression("+!x") == Unary(Operator.ADD, Unary(Operator.NOT, LVal("x")))

    def test_unary_binds_tighter_than_binary(self):
        assert expression("-a * b") == Binary(
            Operator.MUL, Unary(Operator.SUB, LVal("a")), LVal("b")
        )

    def test_call_with_no_arguments(self):
        assert expression("f()") == FuncCall("f")

    def test_call_arguments(self):
        assert expression("f(a, b[1], g(2))") == FuncCall("f", (
            LVal("a"),
            LVal("b", VarKind.ARRAY, (Num(1),)),
            FuncCall("g", (Num(2),)),
        ))

    @pytest.mark.parametrize("source,op", [
        ("a < b", Operator.LT),
        ("a > b", Operator.GT),
        ("a <= b", Operator.LE),
        ("a >= b", Operator.GE),
        ("a == b", Operator.EQ),
        ("a != b", Operator.NE),
        ("a && b", Operator.AND),
        ("a || b", Operator.OR),
    ])
    def test_condition_operators(self, source, op):
        assert condition(source) == Binary(op, LVal("a"), LVal("b"))

    def test_logical_precedence(self):
        """|| < && < == < relational < additive."""
        cond = condition("a || b && c == d < e + 1")
        assert cond.op == Operator.OR
        right = cond.right
        assert right.op == Operator.AND
        assert right.right.op == Operator.EQ
        assert right.right.right.op == Operator.LT
        assert right.right.right.right.op == Operator.ADD

    def test_relational_is_left_associative(self):
        assert condition("a < b < c") == Binary(
            Operator.LT, Binary(Operator.LT, LVal("a"), LVal("b")), LVal("c")
        )

    def test_while_condition_uses_logical_chain(self):
        node = statement("while (a && !b) ;")
        assert node.cond == Binary(Operator.AND, LVal("a"), Unary(Operator.NOT, LVal("b")))

    def test_comparison_outside_condition_rejected(self):
        """Return values, arguments and assignments stop at the additive tier."""
        with pytest.raises(UnexpectedTokenError):
            body_of("return a < b;")
        with pytest.raises(UnexpectedTokenError):
            body_of("x = a && b;")

    def test_parenthesized_comparison_rejected(self):
        with pytest.raises(UnterminatedConstructError):
            body_of("return (a == b);")

    def test_hex_and_octal_literals(self):
        assert expression("0x10 + 010") == Binary(Operator.ADD, Num(16), Num(8))


# =============================================================================
# Error Tests
# =============================================================================

class TestParseErrors:
    """Tests for structured parse errors."""

    def test_unclosed_block(self):
        with pytest.raises(UnterminatedConstructError) as exc_info:
            parse_source("int main() {\n  return 0;\n")
        error = exc_info.value
        assert error.construct == "block"
        assert error.delimiter == "}"
        assert error.found.type == CTokenType.EOF
        assert error.opened_at == SourceLocation("<input>", 1, 12)

    def test_unclosed_parenthesis(self):
        with pytest.raises(UnterminatedConstructError) as exc_info:
            body_of("return (1 + 2;")
        assert exc_info.value.delimiter == ")"
        assert exc_info.value.found.type == CTokenType.SEMICOLON

    def test_unclosed_index(self):
        with pytest.raises(UnterminatedConstructError) as exc_info:
            body_of("a[1 = 2;")
        assert exc_info.value.delimiter == "]"

    def test_unclosed_initializer(self):
        with pytest.raises(UnterminatedConstructError) as exc_info:
            parse_source("int a[2] = {1, 2;")
        assert exc_info.value.construct == "initializer list"

    def test_end_of_input(self):
        with pytest.raises(EndOfInputError) as exc_info:
            parse_source("int")
        assert "identifier" in exc_info.value.expected

    def test_end_of_input_in_expression(self):
        with pytest.raises(EndOfInputError):
            parse_source("int x = 1 +")

    def test_missing_expression(self):
        with pytest.raises(UnexpectedTokenError) as exc_info:
            body_of("return * 2;")
        assert exc_info.value.expected == "expression"

    def test_missing_block(self):
        with pytest.raises(UnexpectedTokenError) as exc_info:
            parse_source("int main() return 0;")
        assert exc_info.value.expected == "'{'"

    def test_lexical_error_propagates(self):
        with pytest.raises(LexicalError):
            parse_source("int x = 1 @ 2;")

    def test_all_errors_are_parse_errors(self):
        for source in ["int", "const int x;", "char c() { char d; }", "int x = (1;", "}"]:
            with pytest.raises(ParseError):
                parse_source(source)

    def test_error_message_format(self):
        with pytest.raises(UnexpectedTokenError) as exc_info:
            parse_source("int main() {\n  a + 1 = 2;\n}", "prog.c")
        text = str(exc_info.value)
        lines = text.splitlines()
        assert lines[0] == "prog.c:2:9: error: unexpected token '='"
        assert lines[1] == "      a + 1 = 2;"
        assert lines[2] == "            ^"
        assert lines[3] == "hint: expected ';'"

    def test_error_sink_notified_once(self):
        collector = ErrorCollector()
        with pytest.raises(MissingInitializerError) as exc_info:
            parse_source("const int N;", error_sink=collector)
        assert collector.errors == [exc_info.value]

    def test_error_sink_receives_lexical_errors(self):
        collector = ErrorCollector()
        with pytest.raises(LexicalError):
            parse_source("int $;", error_sink=collector)
        assert collector.error_count() == 1

    def test_error_sink_quiet_on_success(self):
        collector = ErrorCollector()
        parse_source("int main() { return 0; }", error_sink=collector)
        assert not collector.has_errors()

    def test_parse_stops_consuming_after_error(self):
        lexer = CLexer("int x = ; int y;")
        with pytest.raises(UnexpectedTokenError):
            CParser(lexer).parse()
        # The lookahead was the offending ';'; the second declaration is untouched
        assert lexer.next_token().type == CTokenType.INT


# =============================================================================
# Nesting Limit Tests
# =============================================================================

class TestNestingLimit:
    """Tests for the recursion guard."""

    def test_deep_parentheses_rejected(self):
        source = "int x = " + "(" * 150 + "1" + ")" * 150 + ";"
        with pytest.raises(NestingTooDeepError) as exc_info:
            parse_source(source)
        assert exc_info.value.limit == 100

    def test_moderate_nesting_accepted(self):
        source = "int x = " + "(" * 40 + "1" + ")" * 40 + ";"
        tree = parse_source(source)
        assert tree.items[0].defs[0].init.values[0] == Num(1)

    def test_deep_blocks_rejected(self):
        source = "int main() " + "{" * 80 + "}" * 80
        with pytest.raises(NestingTooDeepError):
            parse_source(source)

    def test_custom_limit(self):
        source = "int main() { if (1) if (1) if (1) ; }"
        parse_source(source, max_depth=10)
        with pytest.raises(NestingTooDeepError) as exc_info:
            parse_source(source, max_depth=4)
        assert exc_info.value.limit == 4

    def test_long_unary_chain_rejected(self):
        source = "int x = " + "-" * 200 + "1;"
        with pytest.raises(NestingTooDeepError):
            parse_source(source)

    def test_long_binary_chain_rejected(self):
        source = "int x = " + " + ".join(["1"] * 3000) + ";"
        with pytest.raises(NestingTooDeepError) as exc_info:
            parse_source(source)
        assert exc_info.value.limit == 100

    def test_chain_at_limit_accepted(self):
        source = "int x = " + " * ".join(["2"] * 100) + ";"
        tree = parse_source(source)
        expr = tree.items[0].defs[0].init.values[0]
        assert expr.height == 100
        with pytest.raises(NestingTooDeepError):
            parse_source("int x = " + " * ".join(["2"] * 101) + ";")

    def test_long_chain_tree_is_usable(self):
        source = "int f() { return " + " - ".join(["x"] * 90) + "; }"
        tree = parse_source(source)
        assert tree == parse_source(source)
        assert "(((x - x) - x) - x)" in tree.dump()
        assert repr(tree).startswith("CompUnit(")

    def test_chain_height_includes_nested_operands(self):
        nested = "-" * 60 + "1"
        with pytest.raises(NestingTooDeepError):
            parse_source("int x = " + nested + " + " + " + ".join(["1"] * 60) + ";")

    def test_depth_counter_unwinds_after_error(self):
        parser = CParser(CLexer("int x = ((((1))));"), max_depth=3)
        with pytest.raises(NestingTooDeepError):
            parser.parse()
        assert parser._depth == 0
