"""Objects, the self-organizing name list and object printing for the MEL language."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterator

MAX_PR_INDENT = 64
_PR_LIMIT = 132 - 10
_LONG_MASK = (1 << 64) - 1


class MelError(Exception):
    """An error raised by the MEL interpreter."""


class Kind(Enum):
    """Object kinds; each value is the letter used when printing flags."""

    INT = "Z"
    REAL = "R"
    STRING = "S"
    THREAD = "T"
    CODE = "C"
    NAME = "N"
    MARK = "M"


@dataclass(eq=False)
class MelObject:
    """A value on the stack or in the name list.

    ``value`` holds an int, float, str, list of objects (thread),
    callable (code) or name-list entry (name).
    """

    kind: Kind
    value: Any = None
    bound: bool = False
    immediate: bool = False
    links: int = 0

    def copy(self) -> MelObject:
        """Return a duplicate with the same flags; threads get a new list."""
        if self.kind in (Kind.INT, Kind.REAL, Kind.STRING, Kind.CODE):
            value = self.value
        elif self.kind is Kind.THREAD:
            value = None if self.value is None else list(self.value)
        else:
            raise MelError("dup_ob: unknown object type")
        return MelObject(self.kind, value, self.bound, self.immediate)


@dataclass(eq=False)
class Var:
    """A named entry of the name list."""

    name: str
    ob: MelObject


class Namelist:
    """Global symbol table; found and new entries move to the front."""

    def __init__(self) -> None:
        self._vars: list[Var] = []

    def __iter__(self) -> Iterator[Var]:
        return iter(list(self._vars))

    def __len__(self) -> int:
        return len(self._vars)

    def __contains__(self, name: object) -> bool:
        return any(var.name == name for var in self._vars)

    def _to_front(self, var: Var) -> Var:
        self._vars.remove(var)
        self._vars.insert(0, var)
        return var

    def lookup(self, name: str) -> Var | None:
        """Find the entry for ``name`` and move it to the front."""
        for var in self._vars:
            if var.name == name:
                return self._to_front(var)
        return None

    def insert(self, name: str, ob: MelObject) -> Var:
        """Bind ``ob`` to ``name`` in a new front entry and return it."""
        ob.bound = True
        var = Var(name, ob)
        self._vars.insert(0, var)
        return var

    def remove(self, name: str) -> MelObject | None:
        """Delete the entry for ``name``; code objects cannot be deleted."""
        var = self.lookup(name)
        if var is None:
            return None
        if var.ob.kind is Kind.CODE:
            raise MelError("Can't delete code")
        self._vars.remove(var)
        var.ob.bound = False
        return var.ob

    def name_of(self, ob: MelObject) -> str | None:
        """Return the name that ``ob`` is bound to, moving it to the front."""
        for var in self._vars:
            if var.ob is ob:
                return self._to_front(var).name
        return None


def _flags(ob: MelObject) -> str:
    letters = ob.kind.value
    if ob.bound:
        letters += "B"
    if ob.immediate:
        letters += "I"
    return f"[{letters}]:"


def _int_text(value: int, radix: int) -> str:
    if radix == 16:
        return format(value & _LONG_MASK, "x")
    if radix == 8:
        return format(value & _LONG_MASK, "o")
    return str(value)


def format_object(
    ob: MelObject | None,
    indent: int = 0,
    verbose: bool = False,
    radix: int = 10,
    namelist: Namelist | None = None,
) -> list[str]:
    """Render an object as printed lines, nested threads included when verbose."""
    if radix not in (8, 10, 16):
        raise ValueError(f"unsupported radix {radix}")
    prefix = " " * max(0, min(indent, MAX_PR_INDENT))
    if ob is None:
        return [prefix + "[NULL]"]

    def name_of() -> str | None:
        return namelist.name_of(ob) if namelist is not None else None

    def header() -> str:
        if not verbose:
            return prefix
        name = name_of()
        return prefix + _flags(ob) + (f"{name}:" if name else "")

    kind = ob.kind
    if kind is Kind.INT:
        return [header() + _int_text(ob.value, radix)]
    if kind is Kind.STRING:
        head = header() + "<"
        room = max(0, _PR_LIMIT - len(head))
        return [head + ob.value[:room] + ">"]
    if kind is Kind.REAL:
        return [header() + f"{ob.value:f}"]
    if kind is Kind.CODE:
        line = prefix + (_flags(ob) if verbose else "")
        return [line + f"{name_of() or '(null)'} "]
    if kind is Kind.THREAD:
        if ob.value is None:
            return [prefix + "[NULL THREAD]"]
        line = prefix + (_flags(ob) if verbose else "")
        line += name_of() or "unnamed_thread"
        if verbose:
            line += f":len={len(ob.value)}"
        lines = [line]
        if verbose:
            for sub in ob.value:
                lines.extend(format_object(sub, indent + 3, verbose, radix, namelist))
        return lines
    if kind is Kind.MARK:
        return [prefix + "[MARK]"]
    if kind is Kind.NAME:
        return [prefix + "-->"] + format_object(ob.value.ob, 6, verbose, radix, namelist)
    return [prefix + "[UNKNOWN]"]