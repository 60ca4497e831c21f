"""Program units: a PROGRAM, FUNCTION or SUBROUTINE with its ENTRY points."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from . import syntax, tree
from .symbols import SymbolTable


class ParseError(ValueError):
    """The source is malformed or uses a construct that is not supported."""


class ProgramUnitType(enum.Enum):
    PROGRAM = "program"
    FUNCTION = "function"
    SUBROUTINE = "subroutine"


@dataclass
class Entry:
    """An ENTRY, or the implicit one at the start of a procedure."""

    loc: syntax.SourceLoc
    name: str
    dargs: List[str] = field(default_factory=list)
    body: tree.Body = field(default_factory=list)


@dataclass
class StatementFunction:
    loc: syntax.SourceLoc
    name: str
    dargs: List[str]
    captured: List[str]
    body: tree.Expression


@dataclass
class DataStatement:
    """One DATA ``nlist / clist /`` pair; ``clist`` holds (repeat, value) pairs."""

    loc: syntax.SourceLoc
    nlist: List[tree.Expression] = field(default_factory=list)
    clist: List[Tuple[Optional[tree.Expression], tree.Expression]] = field(
        default_factory=list
    )


@dataclass
class ProgramUnit:
    """A parsed program unit with its symbol table."""

    ty: ProgramUnitType
    symbols: SymbolTable
    entries: List[Entry] = field(default_factory=list)
    statement_functions: List[StatementFunction] = field(default_factory=list)
    datas: List[DataStatement] = field(default_factory=list)

    def entry(self, name: str) -> Entry:
        """Return the entry called ``name``; raise KeyError if there is none."""
        for candidate in self.entries:
            if candidate.name == name:
                return candidate
        raise KeyError(name)