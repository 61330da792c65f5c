"""
SimpleC Abstract Syntax Tree (AST) Definitions
==============================================

This module defines the node types produced by the SimpleC parser.

Node Hierarchy
--------------
ASTNode (base)
├── CompUnit - root: top-level declarations and function definitions
├── Declarations
│   ├── FuncDef - function definition
│   ├── VarDecl - 'const'? 'int' followed by one or more VarDef
│   ├── VarDef - one declared name with optional initializer
│   ├── Id - the declared name with its kind and dimensions
│   └── InitVal - scalar or (nested) brace initializer
├── Statements
│   ├── Stmt - wrapper around every statement
│   ├── Block - { ... }
│   ├── If - if/else
│   ├── While - while loop
│   ├── Control - break / continue / return
│   ├── Assign - LVal = expr
│   └── Empty - a bare ';'
└── Expressions
    ├── Binary - left op right
    ├── Unary - op operand
    ├── Num - integer literal
    ├── LVal - scalar or indexed variable reference
    └── FuncCall - name(args)

Design Notes
------------
- Nodes are frozen dataclasses; child sequences are stored as tuples.
- Every child belongs to exactly one parent. Nothing is shared, so the
  tree never contains a cycle.
- Constructors check the structural invariants of their node and raise
  ASTInvariantError when one is broken.
- The location field is keyword-only and ignored by ``==``, so two trees
  parsed from differently formatted text compare equal.
- ``dump()`` renders a subtree for debugging. The rendering is not a
  serialization format and cannot be parsed back.
"""

from dataclasses import dataclass, field, fields
from functools import cached_property
from typing import Iterator, Optional, Union

from simplec.errors import ASTInvariantError, SourceLocation
from simplec.frontend.types import (
    BaseType,
    BINARY_OPERATORS,
    ControlKind,
    Operator,
    UNARY_OPERATORS,
    VarKind,
)


# =============================================================================
# AST Node Base Class
# =============================================================================

@dataclass(frozen=True)
class ASTNode:
    """
    Base class for all AST nodes.

    Attributes:
        location: Source location where this node starts (optional)
    """
    location: Optional[SourceLocation] = field(
        default=None, compare=False, repr=False, kw_only=True
    )

    def children(self) -> Iterator["ASTNode"]:
        """Yield the direct child nodes, in field order."""
        for f in fields(self):
            if f.name == "location":
                continue
            value = getattr(self, f.name)
            if isinstance(value, ASTNode):
                yield value
            elif isinstance(value, tuple):
                for item in value:
                    if isinstance(item, ASTNode):
                        yield item

    @cached_property
    def height(self) -> int:
        """Levels in this subtree; a leaf is 1. Computed once, bottom-up."""
        return 1 + max((child.height for child in self.children()), default=0)

    def walk(self) -> Iterator["ASTNode"]:
        """Yield this node and all descendants in pre-order."""
        stack = [self]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(list(node.children())))

    def dump(self) -> str:
        """Render this subtree for debugging (not re-parseable)."""
        return ASTPrinter().print(self)

    def _invariant(self, condition: bool, message: str) -> None:
        if not condition:
            raise ASTInvariantError(type(self).__name__, message, self.location)

    def _freeze(self, name: str) -> None:
        # Store any incoming sequence as a tuple so the node stays immutable
        object.__setattr__(self, name, tuple(getattr(self, name)))


# =============================================================================
# Expression Nodes
# =============================================================================

@dataclass(frozen=True)
class Num(ASTNode):
    """
    Integer literal.

    Attributes:
        value: The integer value
    """
    value: int

    def __post_init__(self):
        self._invariant(
            isinstance(self.value, int) and not isinstance(self.value, bool),
            f"value must be an int, got {self.value!r}",
        )


@dataclass(frozen=True)
class LVal(ASTNode):
    """
    Variable reference that may appear on the left of '='.

    Attributes:
        name: Variable name
        kind: SCALAR for 'a', ARRAY for 'a[i][j]'
        indices: Index expressions, non-empty exactly when kind is ARRAY
    """
    name: str
    kind: VarKind = VarKind.SCALAR
    indices: tuple["Expression", ...] = ()

    def __post_init__(self):
        self._freeze("indices")
        self._invariant(
            (self.kind == VarKind.ARRAY) == bool(self.indices),
            "indices must be non-empty exactly when kind is ARRAY",
        )


@dataclass(frozen=True)
class FuncCall(ASTNode):
    """
    Function call expression.

    Attributes:
        name: Name of the called function
        args: Argument expressions, in order
    """
    name: str
    args: tuple["Expression", ...] = ()

    def __post_init__(self):
        self._freeze("args")


@dataclass(frozen=True)
class Binary(ASTNode):
    """
    Binary operation (left op right).

    Attributes:
        op: The operator
        left: Left operand
        right: Right operand
    """
    op: Operator
    left: "Expression"
    right: "Expression"

    def __post_init__(self):
        self._invariant(self.op in BINARY_OPERATORS, f"'{self.op}' is not a binary operator")
        self._invariant(
            isinstance(self.left, ASTNode) and isinstance(self.right, ASTNode),
            "both operands are required",
        )


@dataclass(frozen=True)
class Unary(ASTNode):
    """
    Prefix unary operation (op operand).

    Attributes:
        op: One of ADD, SUB, NOT
        operand: The operand expression
    """
    op: Operator
    operand: "Expression"

    def __post_init__(self):
        self._invariant(self.op in UNARY_OPERATORS, f"'{self.op}' is not a unary operator")
        self._invariant(isinstance(self.operand, ASTNode), "operand is required")


Expression = Union[Binary, Unary, Num, LVal, FuncCall]
EXPRESSION_TYPES = (Binary, Unary, Num, LVal, FuncCall)


# =============================================================================
# Declaration Nodes
# =============================================================================

@dataclass(frozen=True)
class Id(ASTNode):
    """
    A declared name: variable, constant or function parameter.

    For an array parameter written ``int a[][3]`` the first dimension is
    recorded as Num(0); the size of that dimension is not known at the
    parameter boundary.

    Attributes:
        name: The identifier
        kind: SCALAR or ARRAY
        is_const: True when declared with 'const'
        dims: Dimension expressions, non-empty exactly when kind is ARRAY
    """
    name: str
    kind: VarKind = VarKind.SCALAR
    is_const: bool = False
    dims: tuple["Expression", ...] = ()

    def __post_init__(self):
        self._freeze("dims")
        self._invariant(
            (self.kind == VarKind.ARRAY) == bool(self.dims),
            "dims must be non-empty exactly when kind is ARRAY",
        )


@dataclass(frozen=True)
class InitVal(ASTNode):
    """
    Initializer of a variable definition.

    A scalar initializer holds a single expression. A brace initializer
    holds nested InitVal nodes; ``{}`` holds none and means zero-filled.

    Attributes:
        kind: SCALAR for '= expr', ARRAY for '= { ... }'
        values: The expression (SCALAR) or nested initializers (ARRAY)
    """
    kind: VarKind
    values: tuple[Union["InitVal", "Expression"], ...] = ()

    def __post_init__(self):
        self._freeze("values")
        if self.kind == VarKind.SCALAR:
            self._invariant(
                len(self.values) == 1 and isinstance(self.values[0], EXPRESSION_TYPES),
                "a scalar initializer holds exactly one expression",
            )
        else:
            self._invariant(
                all(isinstance(v, InitVal) for v in self.values),
                "a brace initializer holds only nested initializers",
            )


@dataclass(frozen=True)
class VarDef(ASTNode):
    """
    One name in a declaration, with its optional initializer.

    Attributes:
        is_const: Shared with the enclosing VarDecl
        target: The declared Id
        init: Initializer, required when is_const
    """
    is_const: bool
    target: Id
    init: Optional[InitVal] = None

    def __post_init__(self):
        self._invariant(isinstance(self.target, Id), "target must be an Id")
        self._invariant(
            self.target.is_const == self.is_const,
            "target const-ness must match the definition",
        )
        self._invariant(
            not self.is_const or self.init is not None,
            f"const '{self.target.name}' requires an initializer",
        )


@dataclass(frozen=True)
class VarDecl(ASTNode):
    """
    Declaration statement: 'const'? 'int' var_def (',' var_def)* ';'.

    Attributes:
        is_const: True for 'const int ...'
        defs: The definitions, in source order
    """
    is_const: bool
    defs: tuple[VarDef, ...]

    def __post_init__(self):
        self._freeze("defs")
        self._invariant(bool(self.defs), "a declaration defines at least one name")
        self._invariant(
            all(d.is_const == self.is_const for d in self.defs),
            "every definition must share the declaration's const-ness",
        )


# =============================================================================
# Statement Nodes
# =============================================================================

@dataclass(frozen=True)
class Empty(ASTNode):
    """A bare ';'."""


@dataclass(frozen=True)
class Assign(ASTNode):
    """
    Assignment statement (LVal = expr).

    Attributes:
        left: The assignment target
        right: The assigned value
    """
    left: LVal
    right: "Expression"

    def __post_init__(self):
        self._invariant(isinstance(self.left, LVal), "left side must be an LVal")
        self._invariant(isinstance(self.right, ASTNode), "right side is required")


@dataclass(frozen=True)
class Control(ASTNode):
    """
    break, continue or return.

    Attributes:
        kind: Which control transfer
        expr: Returned value; only ever set for RETURN
    """
    kind: ControlKind
    expr: Optional["Expression"] = None

    def __post_init__(self):
        self._invariant(
            self.expr is None or self.kind == ControlKind.RETURN,
            f"'{self.kind}' cannot carry an expression",
        )


@dataclass(frozen=True)
class Stmt(ASTNode):
    """
    Wrapper around a single statement.

    Wraps Empty, Block, If, While, Control, Assign, or an expression
    evaluated for its effect.

    Attributes:
        node: The wrapped statement or expression
    """
    node: ASTNode

    def __post_init__(self):
        self._invariant(isinstance(self.node, ASTNode), "wrapped node is required")


@dataclass(frozen=True)
class Block(ASTNode):
    """
    Braced sequence of declarations and statements.

    Attributes:
        items: VarDecl and Stmt nodes in source order (may be empty)
    """
    items: tuple[Union[VarDecl, Stmt], ...] = ()

    def __post_init__(self):
        self._freeze("items")
        self._invariant(
            all(isinstance(item, (VarDecl, Stmt)) for item in self.items),
            "block items must be declarations or statements",
        )


@dataclass(frozen=True)
class If(ASTNode):
    """
    if statement with optional else branch.

    Attributes:
        cond: Condition (full logical expression)
        then: Statement run when cond is non-zero
        orelse: Statement run otherwise, or None
    """
    cond: "Expression"
    then: Stmt
    orelse: Optional[Stmt] = None

    def __post_init__(self):
        self._invariant(
            isinstance(self.cond, ASTNode) and isinstance(self.then, ASTNode),
            "condition and then-branch are required",
        )


@dataclass(frozen=True)
class While(ASTNode):
    """
    while loop.

    Attributes:
        cond: Loop condition (full logical expression)
        body: Loop body statement
    """
    cond: "Expression"
    body: Stmt

    def __post_init__(self):
        self._invariant(
            isinstance(self.cond, ASTNode) and isinstance(self.body, ASTNode),
            "condition and body are required",
        )


@dataclass(frozen=True)
class FuncDef(ASTNode):
    """
    Function definition.

    Attributes:
        return_type: INT, VOID or CHAR
        name: Function name
        params: Parameters, each an Id (arrays have dims[0] == Num(0))
        body: The function body
    """
    return_type: BaseType
    name: str
    params: tuple[Id, ...]
    body: Block

    def __post_init__(self):
        self._freeze("params")
        self._invariant(all(isinstance(p, Id) for p in self.params), "parameters must be Id nodes")
        self._invariant(isinstance(self.body, Block), "body must be a Block")


# =============================================================================
# Program Root Node
# =============================================================================

@dataclass(frozen=True)
class CompUnit(ASTNode):
    """
    Root of the tree: one translation unit.

    Attributes:
        items: Top-level VarDecl and FuncDef nodes in source order
    """
    items: tuple[Union[VarDecl, FuncDef], ...] = ()

    def __post_init__(self):
        self._freeze("items")
        self._invariant(
            all(isinstance(item, (VarDecl, FuncDef)) for item in self.items),
            "top-level items must be declarations or function definitions",
        )


# =============================================================================
# AST Visitor Pattern
# =============================================================================

class ASTVisitor:
    """
    Base class for AST visitors.

    Subclasses override visit_<ClassName> for the node types they care
    about; everything else falls through to generic_visit, which visits the
    children.

    Usage:
        class CallCounter(ASTVisitor):
            def __init__(self):
                self.calls = 0

            def visit_FuncCall(self, node):
                self.calls += 1
                self.generic_visit(node)
    """

    def visit(self, node: ASTNode):
        """Dispatch to visit_<ClassName> or generic_visit."""
        method_name = f"visit_{node.__class__.__name__}"
        visitor = getattr(self, method_name, self.generic_visit)
        return visitor(node)

    def generic_visit(self, node: ASTNode) -> None:
        """Visit every child of node."""
        for child in node.children():
            self.visit(child)


# =============================================================================
# AST Pretty Printer
# =============================================================================

class ASTPrinter(ASTVisitor):
    """
    Debug renderer for AST subtrees.

    Statements go on their own indented lines; expressions are rendered
    inline and fully parenthesized, e.g. ``((1 - 2) - 3)``.

    Usage:
        print(ASTPrinter().print(tree))
    """

    def __init__(self):
        self.output: list[str] = []
        self.indent_level = 0

    def print(self, node: ASTNode) -> str:
        """Render node and return the text."""
        self.output = []
        self.indent_level = 0
        self.visit(node)
        return "\n".join(self.output)

    def _emit(self, text: str) -> None:
        indent = "  " * self.indent_level
        self.output.append(f"{indent}{text}")

    def _visit_indented(self, *nodes: Optional[ASTNode]) -> None:
        self.indent_level += 1
        for node in nodes:
            if node is not None:
                self.visit(node)
        self.indent_level -= 1

    # --- structure ---------------------------------------------------------

    def visit_CompUnit(self, node: CompUnit):
        self._emit("CompUnit")
        self._visit_indented(*node.items)

    def visit_FuncDef(self, node: FuncDef):
        params = ", ".join(self._id_str(p) for p in node.params)
        self._emit(f"FuncDef: {node.return_type} {node.name}({params})")
        self._visit_indented(node.body)

    def visit_VarDecl(self, node: VarDecl):
        self._emit("VarDecl (const)" if node.is_const else "VarDecl")
        self._visit_indented(*node.defs)

    def visit_VarDef(self, node: VarDef):
        init = f" = {self._init_str(node.init)}" if node.init is not None else ""
        self._emit(f"VarDef: {self._id_str(node.target)}{init}")

    def visit_Id(self, node: Id):
        self._emit(f"Id: {self._id_str(node)}")

    def visit_InitVal(self, node: InitVal):
        self._emit(f"InitVal: {self._init_str(node)}")

    def visit_Block(self, node: Block):
        self._emit("Block")
        self._visit_indented(*node.items)

    # --- statements --------------------------------------------------------

    def visit_Stmt(self, node: Stmt):
        if isinstance(node.node, EXPRESSION_TYPES):
            self._emit(f"Expr: {self._expr_str(node.node)}")
        else:
            self.visit(node.node)

    def visit_Empty(self, node: Empty):
        self._emit("Empty")

    def visit_Assign(self, node: Assign):
        self._emit(f"Assign: {self._expr_str(node.left)} = {self._expr_str(node.right)}")

    def visit_Control(self, node: Control):
        if node.expr is not None:
            self._emit(f"Return {self._expr_str(node.expr)}")
        else:
            self._emit(node.kind.name.capitalize())

    def visit_If(self, node: If):
        self._emit(f"If ({self._expr_str(node.cond)})")
        self.indent_level += 1
        self._emit("Then:")
        self._visit_indented(node.then)
        if node.orelse is not None:
            self._emit("Else:")
            self._visit_indented(node.orelse)
        self.indent_level -= 1

    def visit_While(self, node: While):
        self._emit(f"While ({self._expr_str(node.cond)})")
        self._visit_indented(node.body)

    # --- expressions visited on their own ----------------------------------

    def visit_Num(self, node: Num):
        self._emit(self._expr_str(node))

    visit_LVal = visit_Num
    visit_FuncCall = visit_Num
    visit_Binary = visit_Num
    visit_Unary = visit_Num

    # --- inline helpers ----------------------------------------------------

    def _expr_str(self, expr: ASTNode) -> str:
        """Convert an expression to its inline representation."""
        if isinstance(expr, Num):
            return str(expr.value)
        if isinstance(expr, LVal):
            return expr.name + "".join(f"[{self._expr_str(i)}]" for i in expr.indices)
        if isinstance(expr, FuncCall):
            args = ", ".join(self._expr_str(a) for a in expr.args)
            return f"{expr.name}({args})"
        if isinstance(expr, Binary):
            return f"({self._expr_str(expr.left)} {expr.op} {self._expr_str(expr.right)})"
        if isinstance(expr, Unary):
            return f"({expr.op}{self._expr_str(expr.operand)})"
        return f"<{type(expr).__name__}>"

    def _id_str(self, node: Id) -> str:
        prefix = "const " if node.is_const else ""
        dims = "".join(f"[{self._expr_str(d)}]" for d in node.dims)
        return f"{prefix}{node.name}{dims}"

    def _init_str(self, node: InitVal) -> str:
        if node.kind == VarKind.SCALAR:
            return self._expr_str(node.values[0])
        return "{" + ", ".join(self._init_str(v) for v in node.values) + "}"
