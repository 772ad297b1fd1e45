"""Arithmetic, relational and string operators of the MEL language.

Each operator takes the deeper stack operand as ``left`` and the top of
stack as ``right``. Relational operators compare ``right`` with
``left``: ``a b lt`` is true when ``b < a``.
"""

from __future__ import annotations

import operator
from enum import Enum
from typing import Callable

from meltools.melobjects import Kind, MelError, MelObject

_LONG_BITS = 64
_LONG_MASK = (1 << _LONG_BITS) - 1
_LONG_SIGN = 1 << (_LONG_BITS - 1)


class Op(Enum):
    """Operators, valued by the names used in messages."""

    ADD = "+"
    SUB = "-"
    MUL = "*"
    DIV = "/"
    MOD = "%"
    AND = "and"
    OR = "or"
    EQ = "eq"
    NE = "ne"
    LT = "lt"
    GT = "gt"
    LE = "le"
    GE = "ge"
    CMP = "strcmp"
    CAT = "."


def _wrap(value: int) -> int:
    value &= _LONG_MASK
    return value - (1 << _LONG_BITS) if value & _LONG_SIGN else value


def _c_div(a: int, b: int) -> int:
    quotient = abs(a) // abs(b)
    return -quotient if (a < 0) != (b < 0) else quotient


def _c_mod(a: int, b: int) -> int:
    return a - b * _c_div(a, b)


_INT_OPS: dict[Op, Callable[[int, int], int]] = {
    Op.ADD: operator.add,
    Op.SUB: operator.sub,
    Op.MUL: operator.mul,
    Op.DIV: _c_div,
    Op.MOD: _c_mod,
    Op.AND: operator.and_,
    Op.OR: operator.or_,
}

_REAL_OPS: dict[Op, Callable[[float, float], float]] = {
    Op.ADD: operator.add,
    Op.SUB: operator.sub,
    Op.MUL: operator.mul,
    Op.DIV: operator.truediv,
}

_RELATIONS: dict[Op, Callable[[object, object], bool]] = {
    Op.EQ: operator.eq,
    Op.NE: operator.ne,
    Op.LT: operator.lt,
    Op.GT: operator.gt,
    Op.LE: operator.le,
    Op.GE: operator.ge,
}

_NUMERIC = (Kind.INT, Kind.REAL)


def _wrong_type(op: Op) -> MelError:
    return MelError(f"{op.value}: wrong type for operands")


def arithmetic(op: Op, left: MelObject, right: MelObject) -> MelObject:
    """Apply an arithmetic operator. Two ints give an int, otherwise a real."""
    if left.kind not in _NUMERIC or right.kind not in _NUMERIC:
        raise MelError("illegal operands for arithmetic operation")
    both_int = left.kind is Kind.INT and right.kind is Kind.INT
    if (op is Op.DIV or (op is Op.MOD and both_int)) and right.value == 0:
        raise MelError("attempt to divide by zero")
    if both_int:
        int_fn = _INT_OPS.get(op)
        if int_fn is None:
            raise _wrong_type(op)
        return MelObject(Kind.INT, _wrap(int_fn(left.value, right.value)))
    real_fn = _REAL_OPS.get(op)
    if real_fn is None:
        raise _wrong_type(op)
    return MelObject(Kind.REAL, real_fn(float(left.value), float(right.value)))


def compare(op: Op, left: MelObject, right: MelObject) -> MelObject:
    """Compare ``right`` with ``left``; the result is an int, 1 or 0."""
    relation = _RELATIONS.get(op)
    if relation is None:
        raise _wrong_type(op)
    kinds = (left.kind, right.kind)
    if kinds in ((Kind.INT, Kind.INT), (Kind.STRING, Kind.STRING)):
        a, b = right.value, left.value
    elif left.kind in _NUMERIC and right.kind in _NUMERIC:
        a, b = float(right.value), float(left.value)
    else:
        raise _wrong_type(op)
    return MelObject(Kind.INT, int(relation(a, b)))


def string_op(op: Op, left: MelObject, right: MelObject) -> MelObject:
    """Apply ``strcmp`` (right against left: -1, 0 or 1) or ``.`` (left + right)."""
    if left.kind is not Kind.STRING or right.kind is not Kind.STRING:
        raise _wrong_type(op)
    if op is Op.CMP:
        a, b = right.value, left.value
        return MelObject(Kind.INT, (a > b) - (a < b))
    if op is Op.CAT:
        return MelObject(Kind.STRING, left.value + right.value)
    raise _wrong_type(op)