# f77units

`f77units` takes the statements of one FORTRAN 77 program unit and builds an
abstract syntax tree from them. A program unit is a PROGRAM, FUNCTION or
SUBROUTINE, and it can have ENTRY points. While the tree is built, a symbol
table is filled in that records how each name is declared and used.

## What it does not do

- It does not read Fortran source text. The input must already be parsed into
  `(SourceLoc, Stmt)` pairs, using the node types in `f77units.syntax`.
- It does not generate code and does not run programs. The result is a
  `ProgramUnit` that later stages can analyse.
- It has no command-line interface.

## Installation

```
pip install .
```

To run the tests:

```
pip install .[test]
pytest
```

## Example

```python
from f77units.parser import parse_program_unit
from f77units.syntax import (
    BinaryExpr, BinaryOp, DataVariable, DeclaredName, SourceLoc, Stmt,
    SymbolExpr, TypeSpec,
)

statements = [
    Stmt("subroutine", "ADD", ["A", "B", "C"]),
    Stmt("implicit_none"),
    Stmt("type", TypeSpec("integer"),
         [DeclaredName("A"), DeclaredName("B"), DeclaredName("C")]),
    Stmt("assignment", DataVariable("C"),
         BinaryExpr(BinaryOp.ADD, SymbolExpr("A"), SymbolExpr("B"))),
    Stmt("end"),
]
source = [(SourceLoc("add.f", n), s) for n, s in enumerate(statements, 1)]

unit = parse_program_unit(source, intrinsics={"ABS", "MAX", "MIN"})

print(unit.ty)                      # ProgramUnitType.SUBROUTINE
entry = unit.entry("ADD")           # KeyError if there is no such entry
print(entry.dargs, entry.body)      # ['A', 'B', 'C'] [(SourceLoc, Assignment(...))]
for name, info in unit.symbols.items():
    print(name, info.base_type, info.assigned, info.used)
```

`Parser(intrinsics).parse(source)` does the same job as `parse_program_unit`.
The `intrinsics` names matter in two places. An assignment from a CHARACTER
function reference is turned into a call only when that function is not
intrinsic. Declaring an intrinsic name as FUNCTION or EXTERNAL is logged as an
error.

## Modules

- `f77units.syntax`: the input nodes.
  - `SourceLoc` is printed as `file:line`.
  - `UnaryOp` and `BinaryOp` are operators. `Constant` is a literal; its
    `kind` comes from its value.
  - `TypeSpec`, `LenSpec`, `DimSpec` and `DeclaredName` describe declarations.
  - Expressions: `SymbolExpr`, `UnaryExpr`, `BinaryExpr`,
    `ArrayElementOrFunction`, `SubstringExpr`, `SubstringArrayElementExpr`
    and `ConstantExpr`.
  - Data names: `DataVariable`, `DataArrayElement`, `DataSubstring`,
    `DataSubstringArrayElement`, `DataImpliedDo` and `DataExpression`.
  - `SpecifierAsterisk` is a `*` in UNIT= or FMT=. `DataList` is one DATA
    list.
  - `Stmt(kind, *operands)` is one statement. It checks that `kind` is known
    and has the right number of operands, and raises `ValueError` otherwise.
    `is_blank()` is true for comments and blank lines.
- `f77units.tree`: the resolved tree.
  - Expressions: `Unary`, `Binary`, `Symbol`, `ArrayElement`, `Function`,
    `Substring`, `SubstringArrayElement`, `Constant`, `ImpliedDo` and
    `ImpliedDoVar`.
  - Executable statements: `Assignment`, `If`, `Do`, `DoWhile`, `Stop`,
    `Read`, `Write`, `Print`, `Open`, `Close`, `Inquire`, `Backspace`,
    `Endfile`, `Rewind`, `Call` and `Return`.
  - `Expression.walk(visitor)` and `Statement.walk(visitor)` report to a
    `Visitor` subclass through `statement`, `symbol` and `call`. Implied-DO
    variables are not reported as symbols.
- `f77units.symbols`: the symbol table.
  - `SymbolTable` keeps symbols in the order they were first referenced.
  - Each symbol is a `SymbolInfo`, holding its type, length, dimensions,
    EXTERNAL/SAVE/PARAMETER status, per-entry assignment and use, DO-variable
    use, statement-function captures, and EQUIVALENCE alias or partner.
  - `SymbolInfo.validate()` raises `SymbolError` when these facts contradict
    each other. Examples are assigning to a PARAMETER, or SAVE of a dummy
    argument.
  - Also here: `DataType`, `ProcedureType`, `ProcedureArgType`,
    `LenSpecification` and `Dimension`.
- `f77units.convert`: `convert_expression`, `convert_dataname`,
  `convert_len`, `convert_type` and `convert_dimension` resolve syntax nodes
  against a symbol table.
  - `NAME(args)` becomes an `ArrayElement` when `NAME` is declared as an
    array, and a `Function` otherwise.
  - Adjacent CHARACTER literals joined with `//` are merged into one literal.
- `f77units.units`: the result types, `ProgramUnit`, `ProgramUnitType`,
  `Entry`, `StatementFunction` and `DataStatement`. Also `ParseError`, a
  `ValueError`.
- `f77units.parser`: `Parser` and `parse_program_unit`.

## Statement kinds

These are the `Stmt` kinds and their operands:

| kind | operands |
| --- | --- |
| `comment` | text |
| `blank` | – |
| `program` | name |
| `function` | `TypeSpec` or None, name, dummy arguments |
| `subroutine`, `entry` | name, dummy arguments |
| `parameter` | list of (name, expression) |
| `data` | list of `DataList` |
| `implicit_none` | – |
| `save` | names; an empty list saves everything |
| `equivalence` | list of lists of data names |
| `external` | names |
| `type` | `TypeSpec`, list of `DeclaredName` |
| `type_character` | default `LenSpec` or None, list of (`DeclaredName`, `LenSpec` or None) |
| `assignment` | data name, expression |
| `continue`, `stop` | – |
| `read`, `write`, `print` | specifier mapping, list of data names |
| `open`, `close`, `inquire`, `backspace`, `endfile`, `rewind` | specifier mapping |
| `call` | name, argument expressions |
| `return` | alternate-return label or None |
| `do` | label, variable, start, stop, step |
| `do_while` | label, condition |
| `logical_if` | condition, `Stmt` |
| `block_if`, `else_if` | condition |
| `end_do`, `else`, `end_if`, `end` | – |
| `include` | file name, list of (`SourceLoc`, `Stmt`) |

Specifier mappings are keyed by upper-case names such as `UNIT`, `FMT` and
`IOSTAT`. Each value is an expression or a `SpecifierAsterisk`. INCLUDE
statements are replaced by the lines they carry before parsing starts.

## Statement order

The parser checks the statement order of FORTRAN 77:

1. IMPLICIT.
2. Other specification statements.
3. Statement functions and DATA.
4. Executable statements.
5. END.

Two exceptions are allowed: SAVE after DATA, and type declarations after a
statement function. After END, only comments and blank lines may follow. Any
other violation raises `ParseError`.

## Rules applied while parsing

- An assignment to `NAME(args)` is taken as a statement function when three
  things hold: it appears before the executable statements, `NAME` is not
  declared as an array, and every argument is a plain name. Variables that the
  body uses, other than its own arguments, called procedures and PARAMETERs,
  are captured. Captured variables are passed as extra arguments on each call.
- A FUNCTION returning CHARACTER gets an extra trailing dummy argument, named
  after the function, which receives the result. An assignment `X = F(...)`
  from such a function becomes `Call("F", [..., X])`.
- A RETURN outside any IF or DO ends the current entry, and an ENTRY may
  follow it. Inside a block it becomes a `Return` statement.
- `EQUIVALENCE (S, A(i))` makes every later reference to the scalar `S` refer
  to the element `A(i)`. `S` and `A` must have the same type.
- `EQUIVALENCE (X, Y)` records the second name as sharing storage with the
  first. If one of them is DOUBLE PRECISION, that one is taken as the first.
- A SAVE with no names saves every symbol that can be saved.
- Any variable named in DATA becomes SAVE. A warning is logged through the
  `logging` module.
- A WRITE to a CHARACTER variable, READ targets, IOSTAT=, and INQUIRE outputs
  are all recorded as assignments.

## Not supported

Each of these raises `ParseError`:

- COMPLEX
- Alternate returns
- Labelled DO and DO WHILE loops
- Reusing a DO variable in a nested loop, or assigning to an active one
- An ENTRY that is not preceded by an unconditional RETURN
- EQUIVALENCE of anything other than two names, or a name and an array
  element
- FUNCTION without an explicit type
- Dummy arguments without a type declaration