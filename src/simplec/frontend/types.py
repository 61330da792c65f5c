"""
SimpleC Type and Operator Tags
==============================

Small closed enumerations shared by the lexer, parser and AST.

Base Types
----------
Only 'int' can be declared. 'void' and 'char' exist so a function can say
what it returns; they are never the type of a variable or parameter.

Operators
---------
| Tier            | Operators          |
|-----------------|--------------------|
| logical-or      | ||                 |
| logical-and     | &&                 |
| equality        | == !=              |
| relational      | < > <= >=          |
| additive        | + -                |
| multiplicative  | * / %              |
| unary           | + - !              |
"""

from enum import Enum, auto


# =============================================================================
# Base Type Enumeration
# =============================================================================

class BaseType(Enum):
    """Return-type markers for function definitions."""
    VOID = auto()
    CHAR = auto()
    INT = auto()

    def __str__(self) -> str:
        """Return the C type name."""
        return self.name.lower()


class VarKind(Enum):
    """Whether a name refers to a single value or an array."""
    SCALAR = auto()
    ARRAY = auto()

    def __str__(self) -> str:
        return self.name.lower()


class ControlKind(Enum):
    """Flavours of control-transfer statement."""
    BREAK = auto()
    CONTINUE = auto()
    RETURN = auto()

    def __str__(self) -> str:
        return self.name.lower()


# =============================================================================
# Operators
# =============================================================================

class Operator(Enum):
    """
    Arithmetic, relational and logical operators.

    The value of each member is its source spelling, so rendering an
    operator is just ``op.value``. ADD, SUB and NOT double as the unary
    operators.
    """
    # Arithmetic
    ADD = "+"
    SUB = "-"
    MUL = "*"
    DIV = "/"
    MOD = "%"

    # Equality
    EQ = "=="
    NE = "!="

    # Relational
    LT = "<"
    GT = ">"
    LE = "<="
    GE = ">="

    # Logical
    AND = "&&"
    OR = "||"
    NOT = "!"

    def __str__(self) -> str:
        return self.value


UNARY_OPERATORS = frozenset({Operator.ADD, Operator.SUB, Operator.NOT})
BINARY_OPERATORS = frozenset(set(Operator) - {Operator.NOT})
