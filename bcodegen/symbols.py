"""Name resolution for the compiler front end.

This module tracks nested variable scopes, function labels and the auto
variables allocated in a function.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Union

from bcodegen.ir import Loc

KEYWORDS: tuple[str, ...] = (
    "auto",
    "extrn",
    "case",
    "if",
    "while",
    "switch",
    "goto",
    "return",
)


class SymbolError(Exception):
    """Raised when a name is declared or defined twice.

    ``note_loc`` points at the earlier declaration when there is one.
    """

    def __init__(self, loc: Loc, message: str, note_loc: Optional[Loc] = None) -> None:
        self.loc = loc
        self.message = message
        self.note_loc = note_loc
        text = f"{loc}: ERROR: {message}"
        if note_loc is not None:
            text += f"\n{note_loc}: NOTE: the first declaration is located here"
        super().__init__(text)


@dataclass(frozen=True)
class AutoStorage:
    """A variable that lives in auto variable slot ``index``."""

    index: int


@dataclass(frozen=True)
class ExternalStorage:
    """A variable bound to the external symbol ``name``."""

    name: str


Storage = Union[AutoStorage, ExternalStorage]


@dataclass(frozen=True)
class Var:
    """A declared variable."""

    name: str
    loc: Loc
    storage: Storage


@dataclass
class Scopes:
    """A stack of lexical scopes. The last scope is the innermost."""

    stack: list[dict[str, Var]] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.stack)

    def push(self) -> None:
        """Open a new, empty innermost scope."""
        self.stack.append({})

    def pop(self) -> None:
        """Close the innermost scope."""
        if not self.stack:
            raise IndexError("no scope to pop")
        self.stack.pop()

    def find_near(self, name: str) -> Optional[Var]:
        """Look ``name`` up in the innermost scope only."""
        if not self.stack:
            return None
        return self.stack[-1].get(name)

    def find(self, name: str) -> Optional[Var]:
        """Look ``name`` up from the innermost scope outwards."""
        for scope in reversed(self.stack):
            var = scope.get(name)
            if var is not None:
                return var
        return None

    def declare(self, name: str, loc: Loc, storage: Storage) -> Var:
        """Declare ``name`` in the innermost scope and return the new variable."""
        if not self.stack:
            raise IndexError("no scope to declare a variable in")
        scope = self.stack[-1]
        existing = scope.get(name)
        if existing is not None:
            raise SymbolError(loc, f"redefinition of variable `{name}`", existing.loc)
        var = Var(name, loc, storage)
        scope[name] = var
        return var


@dataclass(frozen=True)
class Label:
    """A label, or a use of one, at instruction address ``addr``."""

    name: str
    loc: Loc
    addr: int


@dataclass
class LabelTable:
    """The labels defined in one function body."""

    labels: dict[str, Label] = field(default_factory=dict)

    def __len__(self) -> int:
        return len(self.labels)

    def __iter__(self):
        return iter(self.labels.values())

    def find(self, name: str) -> Optional[Label]:
        """Return the label called ``name``, or None."""
        return self.labels.get(name)

    def define(self, name: str, loc: Loc, addr: int) -> Label:
        """Define a label; a second definition of the same name raises."""
        existing = self.labels.get(name)
        if existing is not None:
            raise SymbolError(loc, f"duplicate label `{name}`", existing.loc)
        label = Label(name, loc, addr)
        self.labels[name] = label
        return label


@dataclass
class AutoVarsAllocator:
    """Hands out auto variable slots, remembering the most ever in use."""

    count: int = 0
    max: int = 0

    def allocate(self) -> int:
        """Allocate the next slot and return its 1-based index."""
        self.count += 1
        if self.count > self.max:
            self.max = self.count
        return self.count


def is_keyword(name: str) -> bool:
    """Tell whether ``name`` is a reserved word."""
    return name in KEYWORDS


def strip_suffix(path: str, suffix: str) -> Optional[str]:
    """Return ``path`` without ``suffix``, or None if it does not end with it."""
    if path.endswith(suffix):
        return path[: len(path) - len(suffix)]
    return None