"""Statement-level syntax of fixed-form FORTRAN 77 source, as produced by a parser.

These types describe what a single source line says, before any semantic
analysis: symbols are not yet resolved, so a name followed by parentheses may
be either an array element or a function reference.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Any, Optional, Union


@dataclass(frozen=True)
class SourceLoc:
    """A position in a source file."""

    file: str
    line: int

    def __str__(self) -> str:
        return f"{self.file}:{self.line}"


class UnaryOp(enum.Enum):
    NEGATE = "-"
    PLUS = "+"
    NOT = ".NOT."


class BinaryOp(enum.Enum):
    ADD = "+"
    SUB = "-"
    MUL = "*"
    DIV = "/"
    POW = "**"
    CONCAT = "//"
    EQ = ".EQ."
    NE = ".NE."
    LT = ".LT."
    LE = ".LE."
    GT = ".GT."
    GE = ".GE."
    AND = ".AND."
    OR = ".OR."
    EQV = ".EQV."
    NEQV = ".NEQV."


@dataclass(frozen=True)
class Constant:
    """A literal value: INTEGER, REAL, DOUBLE PRECISION, CHARACTER or LOGICAL.

    ``kind`` is derived from the value; a float is REAL unless ``double`` is set.
    """

    value: Union[int, float, str, bool]
    double: bool = False
    kind: str = field(init=False)

    def __post_init__(self) -> None:
        value = self.value
        if isinstance(value, bool):
            kind = "logical"
        elif isinstance(value, int):
            kind = "integer"
        elif isinstance(value, float):
            kind = "double" if self.double else "real"
        elif isinstance(value, str):
            kind = "character"
        else:
            raise TypeError(f"unsupported constant value: {value!r}")
        if self.double and kind != "double":
            raise ValueError("only floating-point constants can be DOUBLE PRECISION")
        object.__setattr__(self, "kind", kind)


@dataclass(frozen=True)
class LenSpec:
    """A CHARACTER length: ``"*"``, an integer, or an integer constant expression."""

    value: Any

    def __post_init__(self) -> None:
        value = self.value
        if isinstance(value, bool):
            raise TypeError("a length cannot be a logical value")
        if isinstance(value, str) and value != "*":
            raise ValueError(f"invalid length specification: {value!r}")
        if isinstance(value, (float, Constant)):
            raise TypeError(f"invalid length specification: {value!r}")


_TYPE_KINDS = frozenset(
    {"integer", "real", "double", "complex", "logical", "character"}
)


@dataclass(frozen=True)
class TypeSpec:
    """A type name in a declaration or FUNCTION statement."""

    kind: str
    length: Optional[LenSpec] = None

    def __post_init__(self) -> None:
        if self.kind not in _TYPE_KINDS:
            raise ValueError(f"unknown type: {self.kind!r}")
        if self.length is not None and self.kind != "character":
            raise ValueError("only CHARACTER types take a length")


@dataclass(frozen=True)
class DimSpec:
    """Dimension declarator ``[lower:] upper``; ``upper`` of None means ``*``."""

    lower: Any = None
    upper: Any = None


@dataclass(frozen=True)
class DeclaredName:
    """A name in a type statement, with its array dimensions if any."""

    name: str
    dims: tuple = ()


# Expressions


@dataclass(frozen=True)
class SymbolExpr:
    name: str


@dataclass(frozen=True)
class UnaryExpr:
    op: UnaryOp
    operand: Any


@dataclass(frozen=True)
class BinaryExpr:
    op: BinaryOp
    left: Any
    right: Any


@dataclass(frozen=True)
class ArrayElementOrFunction:
    """``NAME(args)``: array element or function reference, not yet resolved."""

    name: str
    args: tuple = ()


@dataclass(frozen=True)
class SubstringExpr:
    name: str
    start: Any = None
    end: Any = None


@dataclass(frozen=True)
class SubstringArrayElementExpr:
    name: str
    indices: tuple = ()
    start: Any = None
    end: Any = None


@dataclass(frozen=True)
class ConstantExpr:
    value: Constant


# Data names: targets of assignment, DATA and READ lists


@dataclass(frozen=True)
class DataVariable:
    name: str


@dataclass(frozen=True)
class DataArrayElement:
    name: str
    indices: tuple = ()


@dataclass(frozen=True)
class DataSubstring:
    name: str
    start: Any = None
    end: Any = None


@dataclass(frozen=True)
class DataSubstringArrayElement:
    name: str
    indices: tuple = ()
    start: Any = None
    end: Any = None


@dataclass(frozen=True)
class DataImpliedDo:
    """``(items, var = start, stop [, step])``."""

    items: tuple
    var: str
    start: Any
    stop: Any
    step: Any = None


@dataclass(frozen=True)
class DataExpression:
    """An arbitrary expression in an I/O list."""

    expr: Any


@dataclass(frozen=True)
class SpecifierAsterisk:
    """The ``*`` value of a UNIT= or FMT= specifier."""


@dataclass(frozen=True)
class DataList:
    """One ``nlist / clist /`` pair of a DATA statement.

    ``clist`` holds ``(repeat, constant)`` pairs; ``repeat`` is None when absent.
    """

    nlist: tuple
    clist: tuple


# Number of operands each statement kind carries.
_STMT_ARITY = {
    "comment": 1,  # text
    "blank": 0,
    "program": 1,  # name
    "function": 3,  # TypeSpec or None, name, dargs
    "subroutine": 2,  # name, dargs
    "entry": 2,  # name, dargs
    "parameter": 1,  # [(name, expr)]
    "data": 1,  # [DataList]
    "implicit_none": 0,
    "save": 1,  # [name]; empty means save everything
    "equivalence": 1,  # [[data name]]
    "external": 1,  # [name]
    "type": 2,  # TypeSpec, [DeclaredName]
    "type_character": 2,  # LenSpec or None, [(DeclaredName, LenSpec or None)]
    "assignment": 2,  # data name, expr
    "continue": 0,
    "stop": 0,
    "read": 2,  # specifiers, [data name]
    "write": 2,
    "print": 2,
    "open": 1,  # specifiers
    "close": 1,
    "inquire": 1,
    "backspace": 1,
    "endfile": 1,
    "rewind": 1,
    "call": 2,  # name, [expr]
    "return": 1,  # alternate return label or None
    "do": 5,  # label, var, start, stop, step
    "do_while": 2,  # label, condition
    "end_do": 0,
    "logical_if": 2,  # condition, Stmt
    "block_if": 1,  # condition
    "else_if": 1,  # condition
    "else": 0,
    "end_if": 0,
    "include": 2,  # file name, [(SourceLoc, Stmt)]
    "end": 0,
}


class Stmt:
    """One source statement: a kind name and the operands that kind carries."""

    __slots__ = ("kind", "args")
    __hash__ = None  # type: ignore[assignment]

    def __init__(self, kind: str, *args: Any) -> None:
        expected = _STMT_ARITY.get(kind)
        if expected is None:
            raise ValueError(f"unknown statement kind: {kind!r}")
        if len(args) != expected:
            raise ValueError(
                f"statement {kind!r} takes {expected} operand(s), got {len(args)}"
            )
        self.kind = kind
        self.args = args

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Stmt):
            return NotImplemented
        return self.kind == other.kind and self.args == other.args

    def __repr__(self) -> str:
        operands = "".join(f", {a!r}" for a in self.args)
        return f"Stmt({self.kind!r}{operands})"

    def is_blank(self) -> bool:
        """True for lines with no effect: comments and blank lines."""
        return self.kind in ("comment", "blank")