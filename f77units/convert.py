"""Conversion of parsed syntax into resolved expression trees.

Resolution depends on the symbol table. A name with parentheses becomes an
array element if the name is declared as an array, and a function reference
otherwise. References to EQUIVALENCE aliases are replaced by the aliased
element. Implied-DO variables shadow ordinary symbols.
"""

from __future__ import annotations

import copy
from typing import Any, List, Optional

from . import syntax, tree
from .symbols import DataType, Dimension, LenSpecification, SymbolTable
from .units import ParseError

_TYPE_MAP = {
    "integer": DataType.INTEGER,
    "real": DataType.REAL,
    "double": DataType.DOUBLE,
    "logical": DataType.LOGICAL,
    "character": DataType.CHARACTER,
}


def _optional(symbols: SymbolTable, expr: Any) -> Optional[tree.Expression]:
    return None if expr is None else convert_expression(symbols, expr)


def _all(symbols: SymbolTable, exprs: Any) -> List[tree.Expression]:
    return [convert_expression(symbols, e) for e in exprs]


def _alias_of(symbols: SymbolTable, name: str) -> Optional[tree.Expression]:
    sym = symbols.get(name)
    if sym is None or sym.alias is None:
        return None
    return copy.deepcopy(sym.alias)


def convert_expression(symbols: SymbolTable, expr: Any) -> tree.Expression:
    """Resolve a syntax expression against ``symbols``."""
    if isinstance(expr, syntax.UnaryExpr):
        return tree.Unary(expr.op, convert_expression(symbols, expr.operand))

    if isinstance(expr, syntax.BinaryExpr):
        left = convert_expression(symbols, expr.left)
        right = convert_expression(symbols, expr.right)
        if (
            expr.op is syntax.BinaryOp.CONCAT
            and isinstance(left, tree.Constant)
            and isinstance(right, tree.Constant)
            and left.value.kind == "character"
            and right.value.kind == "character"
        ):
            # Literals split over continuation lines are joined back together.
            return tree.Constant(syntax.Constant(left.value.value + right.value.value))
        return tree.Binary(expr.op, left, right)

    if isinstance(expr, syntax.SymbolExpr):
        if expr.name in symbols.implied_do_vars:
            return tree.ImpliedDoVar(expr.name)
        alias = _alias_of(symbols, expr.name)
        if alias is not None:
            return alias
        return tree.Symbol(expr.name)

    if isinstance(expr, syntax.ArrayElementOrFunction):
        args = _all(symbols, expr.args)
        if symbols.is_array(expr.name):
            return tree.ArrayElement(expr.name, args)
        sym = symbols.get(expr.name)
        if sym is not None and sym.statement_function is not None:
            # Statement functions receive their captured variables as extra arguments.
            args.extend(tree.Symbol(c) for c in sym.statement_function)
        return tree.Function(expr.name, args)

    if isinstance(expr, syntax.SubstringExpr):
        return tree.Substring(
            expr.name, _optional(symbols, expr.start), _optional(symbols, expr.end)
        )

    if isinstance(expr, syntax.SubstringArrayElementExpr):
        return tree.SubstringArrayElement(
            expr.name,
            _all(symbols, expr.indices),
            _optional(symbols, expr.start),
            _optional(symbols, expr.end),
        )

    if isinstance(expr, syntax.ConstantExpr):
        return tree.Constant(expr.value)

    raise TypeError(f"not a syntax expression: {expr!r}")


def convert_dataname(symbols: SymbolTable, name: Any) -> tree.Expression:
    """Resolve an assignment, DATA or I/O list item against ``symbols``."""
    if isinstance(name, syntax.DataVariable):
        alias = _alias_of(symbols, name.name)
        if alias is not None:
            return alias
        return tree.Symbol(name.name)

    if isinstance(name, syntax.DataArrayElement):
        return tree.ArrayElement(name.name, _all(symbols, name.indices))

    if isinstance(name, syntax.DataSubstring):
        return tree.Substring(
            name.name, _optional(symbols, name.start), _optional(symbols, name.end)
        )

    if isinstance(name, syntax.DataSubstringArrayElement):
        return tree.SubstringArrayElement(
            name.name,
            _all(symbols, name.indices),
            _optional(symbols, name.start),
            _optional(symbols, name.end),
        )

    if isinstance(name, syntax.DataImpliedDo):
        symbols.implied_do_vars.append(name.var)
        try:
            data = [convert_dataname(symbols, item) for item in name.items]
            start = convert_expression(symbols, name.start)
            stop = convert_expression(symbols, name.stop)
            step = _optional(symbols, name.step)
        finally:
            symbols.implied_do_vars.pop()
        return tree.ImpliedDo(data, name.var, start, stop, step)

    if isinstance(name, syntax.DataExpression):
        return convert_expression(symbols, name.expr)

    raise TypeError(f"not a data name: {name!r}")


def convert_len(
    symbols: SymbolTable, spec: Optional[syntax.LenSpec]
) -> LenSpecification:
    """Resolve an optional CHARACTER length; None means unspecified."""
    if spec is None:
        return LenSpecification(None)
    value = spec.value
    if value == "*" or isinstance(value, int):
        return LenSpecification(value)
    return LenSpecification(convert_expression(symbols, value))


def convert_type(spec: syntax.TypeSpec) -> DataType:
    """Map a declared type to a DataType; COMPLEX is not supported."""
    try:
        return _TYPE_MAP[spec.kind]
    except KeyError:
        raise ParseError(f"type {spec.kind.upper()} is not supported") from None


def convert_dimension(symbols: SymbolTable, dim: syntax.DimSpec) -> Dimension:
    """Resolve both bounds of a dimension declarator."""
    return Dimension(
        lower=_optional(symbols, dim.lower), upper=_optional(symbols, dim.upper)
    )