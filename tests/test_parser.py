import pytest

from f77units import syntax, tree
from f77units.parser import Parser, parse_program_unit
from f77units.symbols import DataType, LenSpecification
from f77units.units import ParseError, ProgramUnitType

S = syntax.Stmt


def numbered(*stmts):
    return [(syntax.SourceLoc("t.f", n), s) for n, s in enumerate(stmts, start=1)]


def parse(*stmts, intrinsics=()):
    return Parser(intrinsics).parse(numbered(*stmts))


def const(value):
    return syntax.ConstantExpr(syntax.Constant(value))


def tconst(value):
    return tree.Constant(syntax.Constant(value))


def sym(name):
    return syntax.SymbolExpr(name)


def decl(kind, *names):
    return S("type", syntax.TypeSpec(kind), [syntax.DeclaredName(n) for n in names])


def assign(name, value):
    return S("assignment", syntax.DataVariable(name), value)


def bodies(unit, name):
    return [stmt for _loc, stmt in unit.entry(name).body]


def test_simple_subroutine():
    unit = parse(
        S("subroutine", "FOO", ["A"]),
        decl("integer", "A"),
        assign("A", const(1)),
        S("end"),
    )
    assert unit.ty is ProgramUnitType.SUBROUTINE
    assert [e.name for e in unit.entries] == ["FOO"]
    assert bodies(unit, "FOO") == [tree.Assignment(tree.Symbol("A"), tconst(1))]
    a = unit.symbols.get("A")
    assert a.darg
    assert a.assigned == {"FOO"}
    assert a.base_type is DataType.INTEGER


def test_parse_program_unit_with_comments_and_program():
    unit = parse_program_unit(
        numbered(S("comment", "hi"), S("program", "MAIN"), S("stop"), S("end"))
    )
    assert unit.ty is ProgramUnitType.PROGRAM
    assert bodies(unit, "MAIN") == [tree.Stop()]


def test_missing_end():
    with pytest.raises(ParseError, match="missing END"):
        parse(S("subroutine", "S", []), S("stop"))


def test_header_required():
    with pytest.raises(ParseError, match="expected PROGRAM"):
        parse(S("stop"), S("end"))


def test_header_only_at_start():
    with pytest.raises(ParseError, match="only valid at start"):
        parse(S("subroutine", "S", []), S("program", "P"), S("end"))


def test_function_needs_type():
    with pytest.raises(ParseError, match="explicit type"):
        parse(S("function", None, "F", []), S("end"))


def test_character_function_result_is_darg():
    unit = parse(
        S("function", syntax.TypeSpec("character", syntax.LenSpec(8)), "NAME", ["X"]),
        decl("integer", "X"),
        assign("NAME", const("hi")),
        S("end"),
    )
    assert unit.ty is ProgramUnitType.FUNCTION
    assert unit.entry("NAME").dargs == ["X", "NAME"]
    name = unit.symbols.get("NAME")
    assert name.darg
    assert name.character_len == LenSpecification(8)
    assert name.assigned == {"NAME"}


def test_alternate_return_rejected():
    with pytest.raises(ParseError, match="alternate returns"):
        parse(S("subroutine", "S", ["*"]), S("end"))


def test_block_if_chain():
    unit = parse(
        S("subroutine", "S", ["L", "M", "A"]),
        decl("logical", "L", "M"),
        decl("integer", "A"),
        S("block_if", sym("L")),
        assign("A", const(1)),
        S("else_if", sym("M")),
        assign("A", const(2)),
        S("else"),
        assign("A", const(3)),
        S("end_if"),
        S("end"),
    )
    (stmt,) = bodies(unit, "S")
    assert stmt.conditions == [tree.Symbol("L"), tree.Symbol("M"), None]
    assert len(stmt.bodies) == 3
    assert [b[0][1].value for b in stmt.bodies] == [tconst(1), tconst(2), tconst(3)]


def test_end_inside_if():
    with pytest.raises(ParseError, match="inside IF/DO"):
        parse(
            S("subroutine", "S", ["L"]),
            decl("logical", "L"),
            S("block_if", sym("L")),
            S("end"),
        )


def test_end_if_without_if():
    with pytest.raises(ParseError, match="END IF without matching IF"):
        parse(S("subroutine", "S", []), S("end_if"), S("end"))


def test_do_loop_tracks_do_vars():
    unit = parse(
        S("subroutine", "S", []),
        decl("integer", "I", "N"),
        S("do", None, "I", const(1), const(10), None),
        assign("N", sym("I")),
        S("end_do"),
        S("end"),
    )
    (loop,) = bodies(unit, "S")
    assert loop.var == "I"
    assert loop.body[0][1] == tree.Assignment(tree.Symbol("N"), tree.Symbol("I"))
    i = unit.symbols.get("I")
    assert i.do_var and not i.outside_do
    assert unit.symbols.get("N").outside_do


def test_do_var_used_after_loop():
    unit = parse(
        S("subroutine", "S", []),
        decl("integer", "I", "N"),
        S("do", None, "I", const(1), const(10), None),
        S("end_do"),
        assign("N", sym("I")),
        S("end"),
    )
    assert unit.symbols.get("I").outside_do


def test_nested_same_do_var():
    with pytest.raises(ParseError, match="nested loops"):
        parse(
            S("subroutine", "S", []),
            decl("integer", "I"),
            S("do", None, "I", const(1), const(2), None),
            S("do", None, "I", const(1), const(2), None),
            S("end_do"),
            S("end_do"),
            S("end"),
        )


def test_assign_active_do_var():
    with pytest.raises(ParseError, match="active DO-variable"):
        parse(
            S("subroutine", "S", []),
            decl("integer", "I"),
            S("do", None, "I", const(1), const(2), None),
            assign("I", const(2)),
            S("end_do"),
            S("end"),
        )


def test_do_label_rejected():
    with pytest.raises(ParseError, match="DO label"):
        parse(
            S("subroutine", "S", []),
            decl("integer", "I"),
            S("do", 10, "I", const(1), const(2), None),
            S("end"),
        )


def test_entries_after_return():
    unit = parse(
        S("subroutine", "A", ["X"]),
        decl("integer", "X", "Y"),
        assign("X", const(1)),
        S("return", None),
        S("entry", "B", ["Y"]),
        assign("Y", const(2)),
        S("end"),
    )
    assert [e.name for e in unit.entries] == ["A", "B"]
    assert unit.entry("B").dargs == ["Y"]
    assert unit.symbols.get("X").assigned == {"A"}
    assert unit.symbols.get("Y").assigned == {"B"}
    assert unit.symbols.get("Y").used == {"B"}


def test_entry_requires_return():
    with pytest.raises(ParseError, match="ENTRY must be after"):
        parse(S("subroutine", "A", []), S("entry", "B", []), S("end"))


def test_logical_if_return():
    unit = parse(
        S("subroutine", "S", ["L"]),
        decl("logical", "L"),
        S("logical_if", sym("L"), S("return", None)),
        S("end"),
    )
    (stmt,) = bodies(unit, "S")
    assert stmt.conditions == [tree.Symbol("L")]
    assert [s for _loc, s in stmt.bodies[0]] == [tree.Return()]


def test_logical_if_continue_fails():
    with pytest.raises(ParseError, match="logical IF body"):
        parse(
            S("subroutine", "S", ["L"]),
            decl("logical", "L"),
            S("logical_if", sym("L"), S("continue")),
            S("end"),
        )


def test_statement_function_captures():
    target = syntax.DataArrayElement("F", (sym("X"),))
    body = syntax.BinaryExpr(syntax.BinaryOp.ADD, sym("X"), sym("Y"))
    unit = parse(
        S("subroutine", "S", []),
        decl("real", "X", "Y", "Z"),
        S("assignment", target, body),
        assign("Z", syntax.ArrayElementOrFunction("F", (const(1.0),))),
        S("end"),
    )
    (sf,) = unit.statement_functions
    assert sf.name == "F"
    assert sf.dargs == ["X"]
    assert sf.captured == ["Y"]
    assert unit.symbols.get("F").statement_function == ["Y"]
    assert bodies(unit, "S") == [
        tree.Assignment(
            tree.Symbol("Z"), tree.Function("F", [tconst(1.0), tree.Symbol("Y")])
        )
    ]
    assert unit.symbols.get("F").called


def test_save_all_skips_dargs():
    unit = parse(
        S("subroutine", "S", ["A"]),
        decl("integer", "A", "B"),
        S("save", []),
        assign("B", sym("A")),
        S("end"),
    )
    assert unit.symbols.get("B").save
    assert not unit.symbols.get("A").save


def test_data_implies_save():
    data = syntax.DataList((syntax.DataVariable("N"),), ((None, const(5)),))
    unit = parse(
        S("subroutine", "S", []),
        decl("integer", "N"),
        S("data", [data]),
        assign("N", syntax.BinaryExpr(syntax.BinaryOp.ADD, sym("N"), const(1))),
        S("end"),
    )
    assert unit.symbols.get("N").save
    (stmt,) = unit.datas
    assert stmt.nlist == [tree.Symbol("N")]
    assert stmt.clist == [(None, tconst(5))]


def test_equivalence_alias():
    ptr = syntax.DeclaredName("PTR", (syntax.DimSpec(None, const(2)),))
    unit = parse(
        S("subroutine", "S", []),
        S("type", syntax.TypeSpec("integer"), [ptr, syntax.DeclaredName("BEGIN")]),
        S(
            "equivalence",
            [[syntax.DataVariable("BEGIN"), syntax.DataArrayElement("PTR", (const(1),))]],
        ),
        assign("BEGIN", const(5)),
        S("end"),
    )
    expected = tree.ArrayElement("PTR", [tconst(1)])
    assert unit.symbols.get("BEGIN").alias == expected
    assert bodies(unit, "S") == [tree.Assignment(expected, tconst(5))]


def test_equivalence_needs_pair():
    with pytest.raises(ParseError, match="2 variables"):
        parse(
            S("subroutine", "S", []),
            decl("integer", "A"),
            S("equivalence", [[syntax.DataVariable("A")]]),
            S("end"),
        )


def test_write_internal_file_marks_assigned():
    specs = {"UNIT": sym("BUF"), "FMT": syntax.SpecifierAsterisk()}
    unit = parse(
        S("subroutine", "S", []),
        S("type_character", syntax.LenSpec(10), [(syntax.DeclaredName("BUF"), None)]),
        S("write", specs, [syntax.DataExpression(const(1))]),
        S("end"),
    )
    assert unit.symbols.get("BUF").assigned == {"S"}
    (stmt,) = bodies(unit, "S")
    assert stmt.unit == tree.Specifier(tree.Symbol("BUF"))
    assert stmt.fmt == tree.Specifier(None)
    assert stmt.iolist == [tconst(1)]


def test_read_requires_unit():
    with pytest.raises(ParseError, match="must specify UNIT"):
        parse(
            S("subroutine", "S", []),
            S("read", {"FMT": syntax.SpecifierAsterisk()}, []),
            S("end"),
        )


def test_iostat_must_be_variable():
    specs = {"UNIT": const(5), "IOSTAT": const(1)}
    with pytest.raises(ParseError, match="IOSTAT"):
        parse(S("subroutine", "S", []), S("close", specs), S("end"))


def test_character_function_assignment_becomes_call():
    unit = parse(
        S("subroutine", "S", []),
        S(
            "type_character",
            syntax.LenSpec(8),
            [(syntax.DeclaredName("OUT"), None), (syntax.DeclaredName("CF"), None)],
        ),
        assign("OUT", syntax.ArrayElementOrFunction("CF", (const(1),))),
        S("end"),
    )
    assert bodies(unit, "S") == [tree.Call("CF", [tconst(1), tree.Symbol("OUT")])]
    assert unit.symbols.get("CF").called


def test_assign_to_parameter_invalid():
    with pytest.raises(ParseError, match="invalid use of symbol N"):
        parse(
            S("subroutine", "S", []),
            decl("integer", "N"),
            S("parameter", [("N", const(1))]),
            assign("N", const(2)),
            S("end"),
        )


def test_include_expanded():
    loc = syntax.SourceLoc("x.inc", 1)
    unit = parse(
        S("subroutine", "S", ["A"]),
        S("include", "x.inc", [(loc, decl("integer", "A"))]),
        S("end"),
    )
    assert unit.symbols.get("A").loc == loc


def test_statement_after_end():
    with pytest.raises(ParseError, match="after END"):
        parse(S("subroutine", "S", []), S("end"), S("continue"))


def test_comment_after_end_allowed():
    unit = parse(S("subroutine", "S", []), S("end"), S("comment", "x"), S("blank"))
    assert [e.name for e in unit.entries] == ["S"]


def test_parameter_after_executable_invalid():
    with pytest.raises(ParseError, match="PARAMETER invalid here"):
        parse(
            S("subroutine", "S", []),
            S("stop"),
            S("parameter", [("N", const(1))]),
            S("end"),
        )