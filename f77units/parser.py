"""Builds a program unit from the statements of one source file.

Statements must follow the FORTRAN 77 ordering rules (section 3.5): IMPLICIT,
then other specifications, then statement functions and DATA, then executable
statements, then END. Along the way the symbol table records how each symbol
is declared and used.
"""

from __future__ import annotations

import enum
import logging
from typing import Any, Collection, Iterable, List, Mapping, Optional, Sequence, Tuple

from . import syntax, tree
from .convert import (
    convert_dataname,
    convert_dimension,
    convert_expression,
    convert_len,
    convert_type,
)
from .symbols import DataType, SymbolError, SymbolTable
from .units import (
    DataStatement,
    Entry,
    ParseError,
    ProgramUnit,
    ProgramUnitType,
    StatementFunction,
)

logger = logging.getLogger(__name__)

SourceLine = Tuple[syntax.SourceLoc, syntax.Stmt]


class _State(enum.Enum):
    IMPLICIT = enum.auto()
    OTHER_SPEC = enum.auto()
    STATEMENT_FUNCTION = enum.auto()
    EXECUTABLE = enum.auto()
    END = enum.auto()


_SPEC_STATES = (_State.IMPLICIT, _State.OTHER_SPEC)

_BASIC_KINDS = frozenset(
    {
        "assignment",
        "continue",
        "stop",
        "read",
        "write",
        "print",
        "open",
        "close",
        "inquire",
        "backspace",
        "endfile",
        "rewind",
        "call",
        "return",
    }
)

_TRANSFER_CLASSES = {"read": tree.Read, "write": tree.Write}

_FILE_CONTROL_CLASSES = {
    "open": tree.Open,
    "close": tree.Close,
    "inquire": tree.Inquire,
    "backspace": tree.Backspace,
    "endfile": tree.Endfile,
    "rewind": tree.Rewind,
}


class _DoVarVisitor(tree.Visitor):
    """Marks every symbol outside the active DO-variables as used outside a DO."""

    def __init__(self, do_vars: Sequence[str], symbols: SymbolTable) -> None:
        self._do_vars = do_vars
        self._symbols = symbols

    def symbol(self, name: str) -> None:
        if name not in self._do_vars:
            self._symbols.set_used_outside_do(name)


class _UsedVisitor(tree.Visitor):
    def __init__(self, entry_name: str, symbols: SymbolTable) -> None:
        self._entry_name = entry_name
        self._symbols = symbols

    def symbol(self, name: str) -> None:
        self._symbols.set_used(name, self._entry_name)

    def call(self, name: str, args: Sequence[tree.Expression], is_function: bool) -> None:
        self._symbols.set_called(name)
        for arg in args:
            if isinstance(arg, tree.Symbol):
                self._symbols.set_used_as_arg(arg.name)


class _CaptureVisitor(tree.Visitor):
    """Collects the symbols a statement function refers to, in order of use."""

    def __init__(self, symbols: SymbolTable) -> None:
        self._symbols = symbols
        self.found: List[str] = []

    def symbol(self, name: str) -> None:
        if name not in self.found:
            self.found.append(name)

    def call(self, name: str, args: Sequence[tree.Expression], is_function: bool) -> None:
        # Mark calls now: capture decisions depend on it before usage analysis runs.
        self._symbols.set_called(name)


class _DataNlistVisitor(tree.Visitor):
    def __init__(self, symbols: SymbolTable) -> None:
        self._symbols = symbols

    def symbol(self, name: str) -> None:
        sym = self._symbols.get(name)
        if sym is None:
            logger.error("symbol %s used in DATA and not defined", name)
            return
        if not sym.save and sym.parameter is None:
            logger.warning(
                "symbol %s used in DATA and not SAVE; "
                "undefined behaviour if procedure called twice",
                name,
            )
            self._symbols.set_save(name)


class Parser:
    """Parses the statements of one program unit into a ProgramUnit."""

    def __init__(self, intrinsics: Collection[str] = ()) -> None:
        self._intrinsics = frozenset(intrinsics)
        self._reset()

    def _reset(self) -> None:
        self._entry: Optional[Entry] = None
        self._entries: List[Entry] = []
        self._statement_functions: List[StatementFunction] = []
        self._state = _State.IMPLICIT
        self._symbols = SymbolTable(self._intrinsics)
        # Top of stack is the scope statements are added to; IF/DO push a new one.
        self._statements: List[tree.Body] = [[]]
        self._depth = 0
        self._do_vars: List[str] = []
        self._datas: List[DataStatement] = []
        self._save_all = False

    # Public interface

    def parse(self, source: Iterable[SourceLine]) -> ProgramUnit:
        """Parse ``(SourceLoc, Stmt)`` pairs; INCLUDE statements are expanded."""
        self._reset()
        lines = iter(self._expand_includes(source))

        unit_type: Optional[ProgramUnitType] = None
        for loc, stmt in lines:
            if stmt.is_blank():
                continue
            unit_type = self._parse_header(loc, stmt)
            break

        for loc, stmt in lines:
            self._parse_statement(loc, stmt)
            if self._state is _State.END:
                break

        if self._state is not _State.END:
            raise ParseError("missing END")

        for loc, stmt in lines:
            # Comments are not strictly allowed after END, but occur in practice.
            if not stmt.is_blank():
                raise ParseError(f"non-blank line after END: {loc}: {stmt!r}")

        symbols = self._symbols
        for entry in self._entries:
            visitor = _UsedVisitor(entry.name, symbols)
            for _loc, statement in entry.body:
                statement.walk(visitor)

        if self._save_all:
            for _name, sym in symbols.items():
                if sym.darg or sym.called or sym.external or sym.parameter is not None:
                    continue
                if sym.do_var and not sym.outside_do:
                    continue
                sym.save = True

        nlist_visitor = _DataNlistVisitor(symbols)
        for data in self._datas:
            for item in data.nlist:
                item.walk(nlist_visitor)

        assert unit_type is not None
        unit = ProgramUnit(
            ty=unit_type,
            symbols=symbols,
            entries=self._entries,
            statement_functions=self._statement_functions,
            datas=self._datas,
        )

        for entry in unit.entries:
            for darg in entry.dargs:
                if darg not in symbols:
                    raise ParseError(f"dummy argument {darg} must have explicit type")

        for name, sym in symbols.items():
            try:
                sym.validate()
            except SymbolError as err:
                raise ParseError(f"invalid use of symbol {name}: {err}") from err

        return unit

    # Helpers

    @staticmethod
    def _expand_includes(source: Iterable[SourceLine]) -> List[SourceLine]:
        expanded: List[SourceLine] = []
        for loc, stmt in source:
            if stmt.kind == "include":
                expanded.extend(stmt.args[1])
            else:
                expanded.append((loc, stmt))
        return expanded

    def _entry_name(self, loc: syntax.SourceLoc) -> str:
        if self._entry is None:
            raise ParseError(f"{loc} executable statement outside any entry")
        return self._entry.name

    def _scope(self, loc: syntax.SourceLoc) -> tree.Body:
        if not self._statements:
            raise ParseError(f"{loc} statement after RETURN must follow an ENTRY")
        return self._statements[-1]

    def _mark_outside_do(self, exprs: Iterable[Optional[tree.Expression]]) -> None:
        visitor = _DoVarVisitor(self._do_vars, self._symbols)
        for expr in exprs:
            if expr is not None:
                expr.walk(visitor)

    def _require_spec_state(self, loc: syntax.SourceLoc) -> None:
        if self._state not in _SPEC_STATES:
            raise ParseError(f"{loc} specification statements invalid here")
        self._state = _State.OTHER_SPEC

    def _close_entry(self, loc: syntax.SourceLoc) -> None:
        if self._entry is None:
            raise ParseError(f"{loc} RETURN outside any entry")
        entry, self._entry = self._entry, None
        entry.body = self._statements.pop()
        self._entries.append(entry)

    def _pop_block(self, loc: syntax.SourceLoc, what: str) -> Tuple[tree.Body, Any]:
        if len(self._statements) < 2 or not self._statements[-2]:
            raise ParseError(f"{loc} {what}")
        body = self._statements.pop()
        return body, self._statements[-1][-1][1]

    # Header

    def _parse_header(self, loc: syntax.SourceLoc, stmt: syntax.Stmt) -> ProgramUnitType:
        symbols = self._symbols
        if stmt.kind == "program":
            (name,) = stmt.args
            self._entry = Entry(loc, name)
            return ProgramUnitType.PROGRAM

        if stmt.kind == "function":
            type_spec, name, dargs = stmt.args
            dargs = list(dargs)
            for darg in dargs:
                symbols.set_darg(darg)
            if type_spec is None:
                raise ParseError(
                    "FUNCTION must have explicit type; implicit not supported"
                )
            ret_type = convert_type(type_spec)
            if type_spec.kind == "character":
                # The caller supplies the result buffer as an extra final argument.
                length = type_spec.length or syntax.LenSpec(1)
                dargs.append(name)
                symbols.set_darg(name)
                symbols.set_assigned(name, name)
                symbols.set_type(name, ret_type, [])
                symbols.set_character_len(name, convert_len(symbols, length))
            else:
                symbols.set_function(name, ret_type)
            symbols.set_loc(name, loc)
            self._entry = Entry(loc, name, dargs)
            return ProgramUnitType.FUNCTION

        if stmt.kind == "subroutine":
            name, dargs = stmt.args
            if "*" in dargs:
                raise ParseError("alternate returns are not supported")
            for darg in dargs:
                symbols.set_darg(darg)
            self._entry = Entry(loc, name, list(dargs))
            return ProgramUnitType.SUBROUTINE

        raise ParseError("expected PROGRAM/FUNCTION/SUBROUTINE at start of file")

    # Statements after the header

    def _parse_statement(self, loc: syntax.SourceLoc, stmt: syntax.Stmt) -> None:
        kind = stmt.kind
        args = stmt.args
        symbols = self._symbols

        if stmt.is_blank():
            return

        if kind in ("program", "function", "subroutine"):
            raise ParseError(f"{loc} PROGRAM/FUNCTION/SUBROUTINE only valid at start")

        if kind == "entry":
            name, dargs = args
            # Entering the middle of a procedure is not supported.
            if self._entry is not None:
                raise ParseError(f"{loc} ENTRY must be after an unconditional RETURN")
            for darg in dargs:
                symbols.set_darg(darg)
            self._entry = Entry(loc, name, list(dargs))
            self._statements.append([])
            return

        if kind == "parameter":
            if self._state not in _SPEC_STATES:
                raise ParseError(f"{loc} PARAMETER invalid here")
            for name, expr in args[0]:
                symbols.set_parameter(name, convert_expression(symbols, expr))
            return

        if kind == "data":
            if self._state in _SPEC_STATES:
                self._state = _State.STATEMENT_FUNCTION
            for data_list in args[0]:
                nlist = [convert_dataname(symbols, n) for n in data_list.nlist]
                clist = [
                    (
                        None if rep is None else convert_expression(symbols, rep),
                        convert_expression(symbols, value),
                    )
                    for rep, value in data_list.clist
                ]
                self._datas.append(DataStatement(loc, nlist, clist))
            return

        if kind == "implicit_none":
            if self._state is not _State.IMPLICIT:
                raise ParseError(f"{loc} IMPLICIT invalid here")
            self._state = _State.OTHER_SPEC
            return

        if kind == "save":
            if self._state in _SPEC_STATES:
                self._state = _State.OTHER_SPEC
            elif self._state is not _State.STATEMENT_FUNCTION:
                # SAVE after DATA breaks the standard but occurs in practice.
                raise ParseError(f"{loc} specification statements invalid here")
            names = args[0]
            if not names:
                self._save_all = True
            for name in names:
                symbols.set_save(name)
            return

        if kind == "equivalence":
            self._require_spec_state(loc)
            self._parse_equivalence(loc, args[0])
            return

        if kind == "external":
            self._require_spec_state(loc)
            for name in args[0]:
                symbols.set_external(name)
            return

        if kind == "type":
            self._require_spec_state(loc)
            type_spec, names = args
            for declared in names:
                self._declare(loc, declared, convert_type(type_spec))
            return

        if kind == "type_character":
            self._require_spec_state(loc)
            default_len, names = args
            for declared, own_len in names:
                self._declare(loc, declared, DataType.CHARACTER)
                length = own_len or default_len or syntax.LenSpec(1)
                symbols.set_character_len(declared.name, convert_len(symbols, length))
            return

        if (
            kind == "assignment"
            and isinstance(args[0], syntax.DataArrayElement)
            and self._state
            in (_State.IMPLICIT, _State.OTHER_SPEC, _State.STATEMENT_FUNCTION)
            and not symbols.is_array(args[0].name)
        ):
            self._parse_statement_function(loc, args[0], args[1])
            return

        if kind in _BASIC_KINDS:
            self._state = _State.EXECUTABLE
            statement = self._parse_basic(loc, stmt)
            if statement is not None:
                self._scope(loc).append((loc, statement))
            return

        if kind == "do":
            self._state = _State.EXECUTABLE
            label, var, start, stop, step = args
            if label is not None:
                raise ParseError(f"{loc} DO label not supported")
            e1 = convert_expression(symbols, start)
            e2 = convert_expression(symbols, stop)
            e3 = None if step is None else convert_expression(symbols, step)
            self._mark_outside_do([e1, e2, e3])
            symbols.set_do_var(var)
            if var in self._do_vars:
                raise ParseError(f"{loc} can't use same DO-variable in nested loops")
            self._do_vars.append(var)
            self._scope(loc).append((loc, tree.Do(var, e1, e2, e3)))
            self._statements.append([])
            self._depth += 1
            return

        if kind == "do_while":
            self._state = _State.EXECUTABLE
            label, condition = args
            if label is not None:
                raise ParseError(f"{loc} DO WHILE label not supported")
            cond = convert_expression(symbols, condition)
            self._mark_outside_do([cond])
            self._scope(loc).append((loc, tree.DoWhile(cond)))
            self._statements.append([])
            self._depth += 1
            return

        if kind == "end_do":
            self._state = _State.EXECUTABLE
            body, last = self._pop_block(loc, "END DO without matching DO")
            if isinstance(last, tree.Do):
                last.body = body
                self._do_vars.pop()
            elif isinstance(last, tree.DoWhile):
                last.body = body
            else:
                raise ParseError(f"{loc} END DO without matching DO")
            self._depth -= 1
            return

        if kind == "logical_if":
            self._state = _State.EXECUTABLE
            condition, inner = args
            cond = convert_expression(symbols, condition)
            self._mark_outside_do([cond])
            # A RETURN in the body is an early return, not the end of the entry.
            self._depth += 1
            statement = self._parse_basic(loc, inner)
            if statement is None:
                raise ParseError(f"{loc} failed to parse logical IF body")
            self._scope(loc).append((loc, tree.If([cond], [[(loc, statement)]])))
            self._depth -= 1
            return

        if kind == "block_if":
            self._state = _State.EXECUTABLE
            cond = convert_expression(symbols, args[0])
            self._mark_outside_do([cond])
            self._scope(loc).append((loc, tree.If([cond], [])))
            self._statements.append([])
            self._depth += 1
            return

        if kind == "else_if":
            self._state = _State.EXECUTABLE
            cond = convert_expression(symbols, args[0])
            self._mark_outside_do([cond])
            body, last = self._pop_block(loc, "ELSE IF without matching IF")
            if not isinstance(last, tree.If):
                raise ParseError(f"{loc} ELSE IF without matching IF")
            last.conditions.append(cond)
            last.bodies.append(body)
            self._statements.append([])
            return

        if kind == "else":
            self._state = _State.EXECUTABLE
            body, last = self._pop_block(loc, "ELSE without matching IF")
            if not isinstance(last, tree.If):
                raise ParseError(f"{loc} ELSE without matching IF")
            last.conditions.append(None)
            last.bodies.append(body)
            self._statements.append([])
            return

        if kind == "end_if":
            self._state = _State.EXECUTABLE
            body, last = self._pop_block(loc, "END IF without matching IF")
            if not isinstance(last, tree.If):
                raise ParseError(f"{loc} END IF without matching IF")
            last.bodies.append(body)
            self._depth -= 1
            return

        if kind == "include":
            raise ParseError(f"{loc} unexpected INCLUDE")

        if kind == "end":
            self._state = _State.END
            if self._depth != 0:
                raise ParseError(f"{loc} END while inside IF/DO")
            if self._entry is not None:
                # Implicit RETURN
                self._close_entry(loc)
            return

        raise ParseError(f"{loc} unrecognised statement: {kind}")

    def _declare(
        self, loc: syntax.SourceLoc, declared: syntax.DeclaredName, ty: DataType
    ) -> None:
        symbols = self._symbols
        dims = [convert_dimension(symbols, d) for d in declared.dims]
        self._mark_outside_do(
            bound for dim in dims for bound in (dim.lower, dim.upper)
        )
        symbols.set_type(declared.name, ty, dims)
        symbols.set_loc(declared.name, loc)

    def _parse_equivalence(self, loc: syntax.SourceLoc, nlist: Sequence[Any]) -> None:
        symbols = self._symbols
        if len(nlist) != 1 or len(nlist[0]) != 2:
            raise ParseError(f"{loc} EQUIVALENCE only supported between 2 variables")
        first, second = nlist[0]

        def declared(name: str):
            sym = symbols.get(name)
            if sym is None:
                raise ParseError(f"{loc} EQUIVALENCE of undeclared symbol {name}")
            return sym

        if isinstance(first, syntax.DataVariable) and isinstance(
            second, syntax.DataArrayElement
        ):
            # A scalar equivalenced with an array element is an alias for that element.
            sym1 = declared(first.name)
            sym2 = declared(second.name)
            if sym1.dims or sym1.base_type != sym2.base_type:
                raise ParseError(
                    f"{loc} EQUIVALENCE with array element only supported "
                    "with scalar of same type"
                )
            symbols.set_alias(first.name, convert_dataname(symbols, second))
            return

        if isinstance(first, syntax.DataVariable) and isinstance(
            second, syntax.DataVariable
        ):
            s1, s2 = first.name, second.name
            # The DOUBLE PRECISION object is primary, for its alignment.
            if declared(s2).base_type == DataType.DOUBLE:
                s1, s2 = s2, s1
            declared(s1)
            if len(declared(s2).dims) != 1:
                raise ParseError(
                    f"{loc} EQUIVALENCE only supported with a 1-dimensional array"
                )
            symbols.set_equivalence(s2, s1)
            return

        raise ParseError(
            f"{loc} EQUIVALENCE only supported between variables and array elements"
        )

    def _parse_statement_function(
        self,
        loc: syntax.SourceLoc,
        target: syntax.DataArrayElement,
        body_syntax: Any,
    ) -> None:
        symbols = self._symbols
        # Type statements may still follow a statement function in practice.
        self._state = _State.OTHER_SPEC

        dargs: List[str] = []
        for index in target.indices:
            if not isinstance(index, syntax.SymbolExpr):
                raise ParseError(f"{loc} non-symbol in statement function dargs")
            dargs.append(index.name)

        body = convert_expression(symbols, body_syntax)
        self._mark_outside_do([body])

        visitor = _CaptureVisitor(symbols)
        body.walk(visitor)

        captured = []
        for name in visitor.found:
            if name in dargs:
                continue
            sym = symbols.get(name)
            if sym is not None and (
                (sym.called and not sym.darg) or sym.parameter is not None
            ):
                continue
            captured.append(name)

        symbols.set_statement_function(target.name, captured)
        self._statement_functions.append(
            StatementFunction(loc, target.name, dargs, captured, body)
        )

    # Executable statements allowed as the body of a logical IF

    def _parse_basic(
        self, loc: syntax.SourceLoc, stmt: syntax.Stmt
    ) -> Optional[tree.Statement]:
        kind = stmt.kind
        args = stmt.args
        symbols = self._symbols

        if kind == "assignment":
            return self._parse_assignment(loc, args[0], args[1])

        if kind == "continue":
            return None

        if kind == "stop":
            return tree.Stop()

        if kind in ("read", "write", "print"):
            return self._parse_transfer(loc, kind, args[0], args[1])

        if kind in _FILE_CONTROL_CLASSES:
            return self._parse_file_control(loc, kind, args[0])

        if kind == "call":
            name, call_args = args
            symbols.set_called(name)
            converted = [convert_expression(symbols, e) for e in call_args]
            self._mark_outside_do(converted)
            return tree.Call(name, converted)

        if kind == "return":
            if args[0] is not None:
                raise ParseError(f"{loc} alternate returns are not supported")
            if self._depth == 0:
                # RETURN outside any block ends the entry; another ENTRY may follow.
                self._close_entry(loc)
                return None
            return tree.Return()

        raise ParseError(f"{loc} unrecognised basic statement")

    def _parse_assignment(
        self, loc: syntax.SourceLoc, target: Any, value: Any
    ) -> tree.Statement:
        symbols = self._symbols
        if isinstance(target, syntax.DataImpliedDo):
            raise ParseError(f"{loc} implied-DO invalid in assignment")
        if isinstance(target, syntax.DataExpression):
            raise ParseError(f"{loc} expression invalid in assignment")
        name = target.name

        symbols.set_assigned(name, self._entry_name(loc))
        if name in self._do_vars:
            raise ParseError(f"{loc} assigning to active DO-variable")

        # CHARACTER functions write into an extra final argument, so the
        # assignment becomes a call with the target appended.
        if (
            isinstance(value, syntax.ArrayElementOrFunction)
            and not symbols.is_array(value.name)
            and symbols.is_character(value.name)
            and not symbols.is_intrinsic(value.name)
        ):
            symbols.set_called(value.name)
            out = convert_dataname(symbols, target)
            call_args = [convert_expression(symbols, e) for e in value.args]
            call_args.append(out)
            self._mark_outside_do(call_args)
            return tree.Call(value.name, call_args)

        lhs = convert_dataname(symbols, target)
        rhs = convert_expression(symbols, value)
        self._mark_outside_do([lhs, rhs])
        return tree.Assignment(lhs, rhs)

    def _require_variable(
        self, loc: syntax.SourceLoc, expr: tree.Expression, message: str
    ) -> None:
        if not isinstance(expr, (tree.Symbol, tree.ArrayElement)):
            raise ParseError(f"{loc} {message}")
        self._symbols.set_assigned(expr.name, self._entry_name(loc))

    def _parse_transfer(
        self,
        loc: syntax.SourceLoc,
        kind: str,
        specs: Mapping[str, Any],
        iolist_syntax: Sequence[Any],
    ) -> tree.Statement:
        symbols = self._symbols

        unit: Optional[tree.Specifier] = None
        unit_value = specs.get("UNIT")
        if unit_value is None:
            if kind != "print":
                raise ParseError(f"{loc} READ/WRITE statement must specify UNIT")
        elif isinstance(unit_value, syntax.SpecifierAsterisk):
            unit = tree.Specifier(None)
        else:
            expr = convert_expression(symbols, unit_value)
            # Writing to an internal file modifies the variable.
            if (
                kind == "write"
                and isinstance(expr, (tree.Symbol, tree.ArrayElement))
                and symbols.is_character(expr.name)
            ):
                symbols.set_assigned(expr.name, self._entry_name(loc))
            unit = tree.Specifier(expr)

        fmt: Optional[tree.Specifier] = None
        fmt_value = specs.get("FMT")
        if isinstance(fmt_value, syntax.SpecifierAsterisk):
            fmt = tree.Specifier(None)
        elif fmt_value is not None:
            fmt = tree.Specifier(convert_expression(symbols, fmt_value))

        other = {}
        for key, value in specs.items():
            if key in ("UNIT", "FMT"):
                continue
            if isinstance(value, syntax.SpecifierAsterisk):
                raise ParseError(f"{loc} asterisk specifier only allowed in UNIT=*")
            expr = convert_expression(symbols, value)
            if key == "IOSTAT":
                self._require_variable(
                    loc, expr, "IOSTAT must be an integer variable or array element"
                )
            other[key] = expr

        if kind == "read":
            for item in iolist_syntax:
                self._set_dataname_assigned(loc, item)

        iolist = [convert_dataname(symbols, item) for item in iolist_syntax]
        self._mark_outside_do(list(other.values()) + iolist)

        if kind == "print":
            if fmt is None:
                raise ParseError(f"{loc} PRINT statement must specify a format")
            return tree.Print(fmt, iolist)
        assert unit is not None
        return _TRANSFER_CLASSES[kind](unit, fmt, other, iolist)

    def _parse_file_control(
        self, loc: syntax.SourceLoc, kind: str, specs: Mapping[str, Any]
    ) -> tree.Statement:
        symbols = self._symbols
        converted = {}

        unit_value = specs.get("UNIT")
        if unit_value is None:
            if kind != "inquire":
                raise ParseError(f"{loc} IO statement must specify UNIT")
        elif isinstance(unit_value, syntax.SpecifierAsterisk):
            raise ParseError(f"{loc} UNIT=* only allowed in READ, WRITE")
        else:
            converted["UNIT"] = convert_expression(symbols, unit_value)

        for key, value in specs.items():
            if key == "UNIT":
                continue
            if isinstance(value, syntax.SpecifierAsterisk):
                raise ParseError(f"{loc} asterisk specifier only allowed in UNIT=*")
            expr = convert_expression(symbols, value)
            # IOSTAT is always an output; INQUIRE outputs everything but FILE/UNIT.
            if key == "IOSTAT" or (kind == "inquire" and key != "FILE"):
                self._require_variable(
                    loc, expr, f"{key} must be a variable or array element"
                )
            converted[key] = expr

        self._mark_outside_do(converted.values())
        return _FILE_CONTROL_CLASSES[kind](converted)

    def _set_dataname_assigned(self, loc: syntax.SourceLoc, name: Any) -> None:
        if isinstance(name, syntax.DataImpliedDo):
            for item in name.items:
                self._set_dataname_assigned(loc, item)
        elif isinstance(name, syntax.DataExpression):
            return
        else:
            self._symbols.set_assigned(name.name, self._entry_name(loc))


def parse_program_unit(
    source: Iterable[SourceLine], intrinsics: Collection[str] = ()
) -> ProgramUnit:
    """Parse one program unit from ``(SourceLoc, Stmt)`` pairs."""
    return Parser(intrinsics).parse(source)