"""Symbol table for one program unit.

Symbols are added wherever they are first referenced, and more facts about
each are recorded as parsing goes on. Declaration order is preserved.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass, field
from typing import (
    Collection,
    Dict,
    Iterator,
    ItemsView,
    List,
    Optional,
    Sequence,
    Set,
    Union,
)

from . import syntax, tree

logger = logging.getLogger(__name__)


class DataType(enum.Enum):
    """Type of a value, or return type of a procedure."""

    INTEGER = "integer"
    REAL = "real"
    DOUBLE = "double"
    LOGICAL = "logical"
    CHARACTER = "character"
    # EXTERNAL with no return type, dummy argument with no type yet, or generic intrinsic
    UNKNOWN = "unknown"
    # SUBROUTINE return type
    VOID = "void"


@dataclass(frozen=True)
class ProcedureArgType:
    """Type of one argument of a procedure passed as an argument."""

    base_type: Union[DataType, "ProcedureType"]
    is_array: bool = False
    mutated: bool = False


@dataclass(frozen=True)
class ProcedureType:
    """Full type of a procedure, once it is known how the procedure is used."""

    requires_ctx: bool = False
    returns_result: bool = False
    ret_args: tuple = ()


@dataclass(frozen=True)
class LenSpecification:
    """Length of a CHARACTER entity.

    ``value`` is None when unspecified, ``"*"`` when taken from elsewhere,
    an ``int``, or an integer constant expression.
    """

    value: Union[None, str, int, tree.Expression] = None

    def __post_init__(self) -> None:
        value = self.value
        if isinstance(value, bool):
            raise TypeError("a length cannot be a logical value")
        if isinstance(value, str) and value != "*":
            raise ValueError(f"invalid length specification: {value!r}")
        if value is not None and not isinstance(value, (str, int, tree.Expression)):
            raise TypeError(f"invalid length specification: {value!r}")

    @property
    def is_unspecified(self) -> bool:
        return self.value is None

    @property
    def is_asterisk(self) -> bool:
        return self.value == "*"


@dataclass
class Dimension:
    """Dimension declarator ``[lower:] upper``.

    ``lower`` of None means the default of 1; ``upper`` of None means ``*``.
    """

    lower: Optional[tree.Expression] = None
    upper: Optional[tree.Expression] = None


class SymbolError(ValueError):
    """A symbol is used in a way that is invalid or not supported."""


def _unknown_loc() -> syntax.SourceLoc:
    return syntax.SourceLoc("(unknown)", 0)


@dataclass
class SymbolInfo:
    """Everything known about how one symbol is declared and used."""

    loc: syntax.SourceLoc = field(default_factory=_unknown_loc)
    base_type: Union[DataType, ProcedureType] = DataType.UNKNOWN
    character_len: Optional[LenSpecification] = None
    dims: List[Dimension] = field(default_factory=list)
    external: bool = False
    darg: bool = False
    called: bool = False
    used_as_arg: bool = False
    # ENTRY names in which this is the target of an assignment
    assigned: Set[str] = field(default_factory=set)
    # ENTRY names in which this is read or written
    used: Set[str] = field(default_factory=set)
    do_var: bool = False
    outside_do: bool = False
    # Captured variables, if this is a statement function
    statement_function: Optional[List[str]] = None
    parameter: Optional[tree.Expression] = None
    save: bool = False
    # EQUIVALENCE makes this an alias for an array element
    alias: Optional[tree.Expression] = None
    # EQUIVALENCE makes this share storage with another object
    equivalence: Optional[str] = None

    def validate(self) -> None:
        """Raise SymbolError if the recorded uses contradict each other."""
        if self.assigned:
            if self.external:
                raise SymbolError("cannot assign to EXTERNAL")
            if self.statement_function is not None:
                raise SymbolError("cannot assign to statement function")
            if self.called:
                raise SymbolError("cannot both call and assign to one symbol")
            if self.parameter is not None:
                raise SymbolError("cannot assign to PARAMETER")

        if self.called and self.dims:
            raise SymbolError("cannot call functions that return arrays")

        if self.save:
            if self.darg:
                raise SymbolError("cannot SAVE dummy arguments")
            if self.called:
                raise SymbolError("cannot SAVE procedures")
            if self.parameter is not None:
                raise SymbolError("cannot SAVE constants")
            if self.do_var and not self.outside_do:
                raise SymbolError("SAVE of DO-vars not supported")


class SymbolTable:
    """Symbols of one program unit, in declaration order."""

    def __init__(self, intrinsics: Collection[str] = ()) -> None:
        self._symbols: Dict[str, SymbolInfo] = {}
        self._intrinsics = frozenset(intrinsics)
        # Implied-DO variables currently in scope; they shadow regular symbols.
        self.implied_do_vars: List[str] = []

    def entry(self, name: str) -> SymbolInfo:
        """Return the symbol, adding a default one if it is not yet known."""
        sym = self._symbols.get(name)
        if sym is None:
            sym = self._symbols[name] = SymbolInfo()
        return sym

    def get(self, name: str) -> Optional[SymbolInfo]:
        return self._symbols.get(name)

    def __contains__(self, name: object) -> bool:
        return name in self._symbols

    def __iter__(self) -> Iterator[str]:
        return iter(self._symbols)

    def __len__(self) -> int:
        return len(self._symbols)

    def items(self) -> ItemsView[str, SymbolInfo]:
        return self._symbols.items()

    def is_array(self, name: str) -> bool:
        """True if the symbol is defined and has array dimensions."""
        sym = self._symbols.get(name)
        return sym is not None and bool(sym.dims)

    def is_character(self, name: str) -> bool:
        """True if the symbol is defined with CHARACTER type."""
        sym = self._symbols.get(name)
        return sym is not None and sym.base_type == DataType.CHARACTER

    def is_intrinsic(self, name: str) -> bool:
        return name in self._intrinsics

    def set_function(self, name: str, ty: Union[DataType, ProcedureType]) -> None:
        if self.is_intrinsic(name):
            logger.error("intrinsic name as FUNCTION is not supported")
        self.entry(name).base_type = ty

    def set_loc(self, name: str, loc: syntax.SourceLoc) -> None:
        self.entry(name).loc = loc

    def set_darg(self, name: str) -> None:
        self.entry(name).darg = True

    def set_parameter(self, name: str, expr: tree.Expression) -> None:
        self.entry(name).parameter = expr

    def set_external(self, name: str) -> None:
        if self.is_intrinsic(name):
            logger.error("intrinsic name as EXTERNAL is not supported")
        sym = self.entry(name)
        if sym.external:
            logger.error("must only specify EXTERNAL once: %s", name)
        sym.external = True

    def set_type(
        self,
        name: str,
        ty: Union[DataType, ProcedureType],
        dims: Sequence[Dimension] = (),
    ) -> None:
        sym = self.entry(name)
        if sym.base_type != DataType.UNKNOWN:
            logger.error("must only specify symbol's type once: %s", name)
        sym.base_type = ty
        sym.dims = list(dims)

    def set_character_len(self, name: str, length: LenSpecification) -> None:
        self.entry(name).character_len = length

    def set_statement_function(self, name: str, captured: Sequence[str]) -> None:
        sym = self.entry(name)
        if sym.statement_function is not None:
            logger.error("must only declare statement function once: %s", name)
        sym.statement_function = list(captured)

    def set_assigned(self, name: str, entry: str) -> None:
        self.entry(name).assigned.add(entry)

    def set_used(self, name: str, entry: str) -> None:
        self.entry(name).used.add(entry)

    def set_called(self, name: str) -> None:
        self.entry(name).called = True

    def set_used_as_arg(self, name: str) -> None:
        self.entry(name).used_as_arg = True

    def set_do_var(self, name: str) -> None:
        self.entry(name).do_var = True

    def set_used_outside_do(self, name: str) -> None:
        self.entry(name).outside_do = True

    def set_save(self, name: str) -> None:
        self.entry(name).save = True

    def set_alias(self, name: str, expr: tree.Expression) -> None:
        self.entry(name).alias = expr

    def set_equivalence(self, name: str, equiv: str) -> None:
        self.entry(name).equivalence = equiv