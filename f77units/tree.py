"""Resolved expression and executable-statement trees for one program unit."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

from . import syntax


class Visitor:
    """Receives callbacks while a statement or expression tree is walked.

    Every callback does nothing by default; subclasses override what they need.
    """

    def statement(self, statement: "Statement") -> None:
        """Called for every statement, before its parts."""

    def symbol(self, name: str) -> None:
        """Called for every real symbol reference."""

    def call(self, name: str, args: Sequence["Expression"], is_function: bool) -> None:
        """Called after the arguments of a function reference or CALL."""


class Expression:
    """Base of all expressions. Leaf expressions with no symbols visit nothing."""

    def walk(self, visitor: Visitor) -> None:
        """Report every symbol and call in this expression to ``visitor``."""


def _walk_optional(expr: Optional[Expression], visitor: Visitor) -> None:
    if expr is not None:
        expr.walk(visitor)


@dataclass
class Unary(Expression):
    op: syntax.UnaryOp
    operand: Expression

    def walk(self, visitor: Visitor) -> None:
        self.operand.walk(visitor)


@dataclass
class Binary(Expression):
    op: syntax.BinaryOp
    left: Expression
    right: Expression

    def walk(self, visitor: Visitor) -> None:
        self.left.walk(visitor)
        self.right.walk(visitor)


@dataclass
class Symbol(Expression):
    name: str

    def walk(self, visitor: Visitor) -> None:
        visitor.symbol(self.name)


@dataclass
class ArrayElement(Expression):
    name: str
    indices: List[Expression] = field(default_factory=list)

    def walk(self, visitor: Visitor) -> None:
        visitor.symbol(self.name)
        for index in self.indices:
            index.walk(visitor)


@dataclass
class Function(Expression):
    name: str
    args: List[Expression] = field(default_factory=list)

    def walk(self, visitor: Visitor) -> None:
        visitor.symbol(self.name)
        for arg in self.args:
            arg.walk(visitor)
        visitor.call(self.name, self.args, True)


@dataclass
class Substring(Expression):
    name: str
    start: Optional[Expression] = None
    end: Optional[Expression] = None

    def walk(self, visitor: Visitor) -> None:
        visitor.symbol(self.name)
        _walk_optional(self.start, visitor)
        _walk_optional(self.end, visitor)


@dataclass
class SubstringArrayElement(Expression):
    name: str
    indices: List[Expression] = field(default_factory=list)
    start: Optional[Expression] = None
    end: Optional[Expression] = None

    def walk(self, visitor: Visitor) -> None:
        visitor.symbol(self.name)
        for index in self.indices:
            index.walk(visitor)
        _walk_optional(self.start, visitor)
        _walk_optional(self.end, visitor)


@dataclass
class Constant(Expression):
    value: syntax.Constant


@dataclass
class ImpliedDo(Expression):
    """Implied-DO list; ``do_var`` is local to it and is not reported as a symbol."""

    data: List[Expression]
    do_var: str
    start: Expression
    stop: Expression
    step: Optional[Expression] = None

    def walk(self, visitor: Visitor) -> None:
        for item in self.data:
            item.walk(visitor)
        self.start.walk(visitor)
        self.stop.walk(visitor)
        _walk_optional(self.step, visitor)


@dataclass
class ImpliedDoVar(Expression):
    """Reference to an implied-DO variable; not a real symbol."""

    name: str


@dataclass
class Specifier:
    """UNIT= or FMT= value; ``expression`` of None stands for ``*``."""

    expression: Optional[Expression] = None

    def _walk(self, visitor: Visitor) -> None:
        _walk_optional(self.expression, visitor)


Body = List[Tuple[syntax.SourceLoc, "Statement"]]


def _walk_body(body: Body, visitor: Visitor) -> None:
    for _loc, statement in body:
        statement.walk(visitor)


class Statement:
    """Base of all executable statements."""

    def walk(self, visitor: Visitor) -> None:
        """Report this statement, then everything inside it, to ``visitor``."""
        visitor.statement(self)
        self._walk_parts(visitor)

    def _walk_parts(self, visitor: Visitor) -> None:
        pass


@dataclass
class Assignment(Statement):
    target: Expression
    value: Expression

    def _walk_parts(self, visitor: Visitor) -> None:
        self.target.walk(visitor)
        self.value.walk(visitor)


@dataclass
class If(Statement):
    """IF / ELSE IF / ELSE chain.

    ``conditions`` holds None for the ELSE branch. While the chain is being
    built ``bodies`` may be one shorter than ``conditions``.
    """

    conditions: List[Optional[Expression]] = field(default_factory=list)
    bodies: List[Body] = field(default_factory=list)

    def _walk_parts(self, visitor: Visitor) -> None:
        for condition, body in zip(self.conditions, self.bodies):
            _walk_optional(condition, visitor)
            _walk_body(body, visitor)


@dataclass
class Do(Statement):
    var: str
    start: Expression
    stop: Expression
    step: Optional[Expression] = None
    body: Body = field(default_factory=list)

    def _walk_parts(self, visitor: Visitor) -> None:
        visitor.symbol(self.var)
        self.start.walk(visitor)
        self.stop.walk(visitor)
        _walk_optional(self.step, visitor)
        _walk_body(self.body, visitor)


@dataclass
class DoWhile(Statement):
    condition: Expression
    body: Body = field(default_factory=list)

    def _walk_parts(self, visitor: Visitor) -> None:
        self.condition.walk(visitor)
        _walk_body(self.body, visitor)


@dataclass
class Stop(Statement):
    pass


@dataclass
class _Transfer(Statement):
    unit: Specifier
    fmt: Optional[Specifier] = None
    other: Dict[str, Expression] = field(default_factory=dict)
    iolist: List[Expression] = field(default_factory=list)

    def _walk_parts(self, visitor: Visitor) -> None:
        self.unit._walk(visitor)
        if self.fmt is not None:
            self.fmt._walk(visitor)
        for expr in self.other.values():
            expr.walk(visitor)
        for expr in self.iolist:
            expr.walk(visitor)


@dataclass
class Read(_Transfer):
    pass


@dataclass
class Write(_Transfer):
    pass


@dataclass
class Print(Statement):
    fmt: Specifier
    iolist: List[Expression] = field(default_factory=list)

    def _walk_parts(self, visitor: Visitor) -> None:
        self.fmt._walk(visitor)
        for expr in self.iolist:
            expr.walk(visitor)


@dataclass
class _FileControl(Statement):
    specifiers: Dict[str, Expression] = field(default_factory=dict)

    def _walk_parts(self, visitor: Visitor) -> None:
        for expr in self.specifiers.values():
            expr.walk(visitor)


@dataclass
class Open(_FileControl):
    pass


@dataclass
class Close(_FileControl):
    pass


@dataclass
class Inquire(_FileControl):
    pass


@dataclass
class Backspace(_FileControl):
    pass


@dataclass
class Endfile(_FileControl):
    pass


@dataclass
class Rewind(_FileControl):
    pass


@dataclass
class Call(Statement):
    name: str
    args: List[Expression] = field(default_factory=list)

    def _walk_parts(self, visitor: Visitor) -> None:
        visitor.symbol(self.name)
        for arg in self.args:
            arg.walk(visitor)
        visitor.call(self.name, self.args, False)


@dataclass
class Return(Statement):
    pass