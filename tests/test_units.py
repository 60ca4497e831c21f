import pytest

from f77units import syntax, tree
from f77units.symbols import SymbolTable
from f77units.units import (
    DataStatement,
    Entry,
    ParseError,
    ProgramUnit,
    ProgramUnitType,
    StatementFunction,
)

LOC = syntax.SourceLoc("unit.f", 1)


def make_unit():
    main = Entry(LOC, "MAIN", ["A"], [(LOC, tree.Return())])
    other = Entry(syntax.SourceLoc("unit.f", 9), "OTHER", ["B"])
    return ProgramUnit(ProgramUnitType.SUBROUTINE, SymbolTable(), [main, other])


def test_entry_lookup():
    unit = make_unit()
    assert unit.entry("OTHER").dargs == ["B"]
    assert unit.entry("MAIN").body == [(LOC, tree.Return())]


def test_entry_missing_raises_key_error():
    with pytest.raises(KeyError):
        make_unit().entry("MISSING")


def test_defaults_are_independent():
    first = ProgramUnit(ProgramUnitType.PROGRAM, SymbolTable())
    second = ProgramUnit(ProgramUnitType.PROGRAM, SymbolTable())
    first.datas.append(DataStatement(LOC))
    assert second.datas == []
    assert first.datas[0].nlist == [] and first.datas[0].clist == []


def test_entry_default_body_empty():
    entry = Entry(LOC, "E")
    assert entry.dargs == [] and entry.body == []


def test_parse_error_is_value_error():
    err = ParseError("missing END")
    assert issubclass(ParseError, ValueError)
    assert str(err) == "missing END"


def test_program_unit_type_from_value():
    assert ProgramUnitType("function") is ProgramUnitType.FUNCTION


def test_statement_function_fields():
    body = tree.Binary(syntax.BinaryOp.ADD, tree.Symbol("X"), tree.Symbol("Y"))
    sf = StatementFunction(LOC, "HYPOT", ["X"], ["Y"], body)
    assert sf.captured == ["Y"]
    assert sf.body == body
    assert str(sf.loc) == "unit.f:1"