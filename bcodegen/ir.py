"""Intermediate representation produced by the B compiler front end.

A compiled program is a list of functions, each holding a flat list of
three-address style instructions that operate on numbered auto variables,
external symbols, literals and offsets into a shared data section.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Optional, Union


class CodegenError(Exception):
    """Raised when a program uses a feature a code generator does not support."""

    def __init__(self, loc: Optional["Loc"], message: str) -> None:
        self.loc = loc
        self.message = message
        prefix = f"{loc}: " if loc is not None else ""
        super().__init__(f"{prefix}TODO: {message}")


@dataclass(frozen=True)
class Loc:
    """A position in a source file."""

    input_path: str
    line_number: int
    line_offset: int

    def __str__(self) -> str:
        return f"{self.input_path}:{self.line_number}:{self.line_offset}"


class Binop(enum.Enum):
    """Binary operators, valued by their source symbol."""

    PLUS = "+"
    MINUS = "-"
    MULT = "*"
    MOD = "%"
    DIV = "/"
    LESS = "<"
    GREATER = ">"
    EQUAL = "=="
    NOT_EQUAL = "!="
    GREATER_EQUAL = ">="
    LESS_EQUAL = "<="
    BIT_OR = "|"
    BIT_AND = "&"
    BIT_SHL = "<<"
    BIT_SHR = ">>"

    def precedence(self) -> int:
        """Return the binding strength; higher binds tighter."""
        for level, row in enumerate(_PRECEDENCE):
            if self in row:
                return level
        raise AssertionError(f"binop {self!r} missing from precedence table")

    @staticmethod
    def from_symbol(symbol: str) -> Optional["Binop"]:
        """Return the operator spelled by ``symbol``, or None if it is not one."""
        try:
            return Binop(symbol)
        except ValueError:
            return None

    @staticmethod
    def from_assign_symbol(symbol: str) -> Optional["Binop"]:
        """Return the operator bound to an assignment symbol.

        Plain ``=`` yields None; a compound assignment such as ``+=`` yields
        its operator. Anything that is not an assignment raises ValueError.
        """
        try:
            return _ASSIGN_SYMBOLS[symbol]
        except KeyError:
            raise ValueError(f"not an assignment operator: {symbol!r}") from None


# The higher the index of the row the higher the precedence.
_PRECEDENCE: tuple[frozenset[Binop], ...] = (
    frozenset({Binop.BIT_OR}),
    frozenset({Binop.BIT_AND}),
    frozenset({Binop.BIT_SHL, Binop.BIT_SHR}),
    frozenset({Binop.EQUAL, Binop.NOT_EQUAL}),
    frozenset({Binop.LESS, Binop.GREATER, Binop.GREATER_EQUAL, Binop.LESS_EQUAL}),
    frozenset({Binop.PLUS, Binop.MINUS}),
    frozenset({Binop.MULT, Binop.MOD, Binop.DIV}),
)

MAX_PRECEDENCE = len(_PRECEDENCE)

_ASSIGN_SYMBOLS: dict[str, Optional[Binop]] = {
    "=": None,
    "<<=": Binop.BIT_SHL,
    ">>=": Binop.BIT_SHR,
    "%=": Binop.MOD,
    "|=": Binop.BIT_OR,
    "&=": Binop.BIT_AND,
    "+=": Binop.PLUS,
    "-=": Binop.MINUS,
    "*=": Binop.MULT,
    "/=": Binop.DIV,
}


# --- Operands -------------------------------------------------------------


@dataclass(frozen=True)
class AutoVar:
    """The value of auto variable number ``index``."""

    index: int


@dataclass(frozen=True)
class Deref:
    """The memory word pointed to by auto variable ``index``."""

    index: int


@dataclass(frozen=True)
class RefAutoVar:
    """The address of auto variable ``index``."""

    index: int


@dataclass(frozen=True)
class RefExternal:
    """The address of the external symbol ``name``."""

    name: str


@dataclass(frozen=True)
class External:
    """The value of the external symbol ``name``."""

    name: str


@dataclass(frozen=True)
class Literal:
    """An unsigned 64-bit integer constant."""

    value: int


@dataclass(frozen=True)
class DataOffset:
    """The address of byte ``offset`` in the data section."""

    offset: int


Arg = Union[AutoVar, Deref, RefAutoVar, RefExternal, External, Literal, DataOffset]


# --- Operations -----------------------------------------------------------


@dataclass(frozen=True)
class UnaryNot:
    result: int
    arg: Arg


@dataclass(frozen=True)
class Negate:
    result: int
    arg: Arg


@dataclass(frozen=True)
class BinopOp:
    binop: Binop
    index: int
    lhs: Arg
    rhs: Arg


@dataclass(frozen=True)
class AutoAssign:
    index: int
    arg: Arg


@dataclass(frozen=True)
class ExternalAssign:
    name: str
    arg: Arg


@dataclass(frozen=True)
class Store:
    index: int
    arg: Arg


@dataclass(frozen=True)
class Funcall:
    result: int
    name: str
    args: tuple[Arg, ...] = ()


@dataclass(frozen=True)
class Jmp:
    addr: int


@dataclass(frozen=True)
class JmpIfNot:
    addr: int
    arg: Arg


@dataclass(frozen=True)
class Return:
    arg: Optional[Arg] = None


Op = Union[
    UnaryNot, Negate, BinopOp, AutoAssign, ExternalAssign, Store, Funcall, Jmp, JmpIfNot, Return
]


@dataclass(frozen=True)
class Instruction:
    """An operation together with the source location it came from."""

    opcode: Op
    loc: Loc


@dataclass
class Function:
    """A compiled function body."""

    name: str
    name_loc: Loc
    body: list[Instruction] = field(default_factory=list)
    params_count: int = 0
    auto_vars_count: int = 0


@dataclass
class Program:
    """Everything the code generators need to emit a whole program."""

    funcs: list[Function] = field(default_factory=list)
    data: bytearray = field(default_factory=bytearray)
    extrns: list[str] = field(default_factory=list)
    globals: list[str] = field(default_factory=list)

    def add_extrn(self, name: str) -> None:
        """Record an external symbol unless it is already recorded."""
        if name not in self.extrns:
            self.extrns.append(name)

    def add_global(self, name: str) -> None:
        """Record a global variable unless it is already recorded."""
        if name not in self.globals:
            self.globals.append(name)

    def add_string(self, text: Union[str, bytes]) -> int:
        """Append a NUL-terminated string to the data section; return its offset."""
        raw = text.encode("utf-8") if isinstance(text, str) else bytes(text)
        offset = len(self.data)
        self.data += raw
        self.data.append(0)
        return offset


def align_bytes(size: int, alignment: int) -> int:
    """Round ``size`` up to the next multiple of ``alignment``."""
    rem = size % alignment
    return size + alignment - rem if rem else size