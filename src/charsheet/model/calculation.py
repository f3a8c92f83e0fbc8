"""Arena-stored expression trees over constants and character values.

A Calculation is a pure function ``[int] -> int``. Nodes live in a flat
list (the arena) and reference each other by index; ``_output`` points at
the root. Value reads go through a per-calculation slot table holding the
distinct ValueIds in first-reference order, so ``get(values)`` expects
``values[i]`` to be the current value of the i-th id from ``values()``.

Combinators never mutate their operands: each returns a new Calculation
whose root is the freshly inserted node. ``append`` is the one primitive
that grows a calculation in place; it copies another tree into this arena,
shifting node indices by an offset and merging value slots.

Numeric semantics follow native 32-bit integers: results wrap to the
signed i32 range, booleans are 0/1, division and float scaling are
computed in double precision and rounded by an explicit Rounding policy
(floor by default). Remainder keeps the sign of the dividend.
"""

from __future__ import annotations

import dataclasses
import math
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Iterator, Union

from charsheet.errors import UnboundPlaceholderError
from charsheet.model.ids import ValueId


class Rounding(Enum):
    """Policy for turning a fractional result back into an integer."""
    FLOOR = "floor"
    NEAREST = "nearest"
    CEIL = "ceil"

    def apply(self, x: float) -> int:
        if self is Rounding.FLOOR:
            return math.floor(x)
        if self is Rounding.CEIL:
            return math.ceil(x)
        # Half away from zero.
        return int(math.copysign(math.floor(abs(x) + 0.5), x))


class UnaryOp(Enum):
    ABS = "abs"
    NEG = "-"
    NOT = "!"


class BinaryOp(Enum):
    ADD = "+"
    SUB = "-"
    MUL = "*"
    DIV = "/"
    REM = "%"
    MIN = "min"
    MAX = "max"
    EQ = "=="
    NE = "!="
    GT = ">"
    GE = ">="
    LT = "<"
    LE = "<="
    AND = "&&"
    OR = "||"


# ---------------------------------------------------------------------------
# Nodes
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Const:
    value: int


@dataclass(frozen=True, slots=True)
class ValueRef:
    """Reads the value stored in the given slot of the calculation."""

    slot: int


@dataclass(frozen=True, slots=True)
class MultiplyF:
    rounding: Rounding
    factor: float
    node: int


@dataclass(frozen=True, slots=True)
class Unary:
    op: UnaryOp
    node: int


@dataclass(frozen=True, slots=True)
class Binary:
    op: BinaryOp
    a: int
    b: int
    rounding: Rounding = Rounding.FLOOR  # only meaningful for DIV


@dataclass(frozen=True, slots=True)
class Placeholder:
    """Unbound input, replaced later by a constant or a value read."""


Element = Union[Const, ValueRef, MultiplyF, Unary, Binary, Placeholder]

# Anything that can stand in for a calculation operand.
Operand = Union["Calculation", ValueId, int]


# ---------------------------------------------------------------------------
# Arithmetic helpers
# ---------------------------------------------------------------------------

_I32_MIN = -(2**31)
_U32 = 2**32


def wrap_i32(x: int) -> int:
    """Wrap an arbitrary integer into the signed 32-bit range."""
    return (x - _I32_MIN) % _U32 + _I32_MIN


def _truncated_rem(a: int, b: int) -> int:
    if b == 0:
        raise ZeroDivisionError("calculation remainder by zero")
    r = abs(a) % abs(b)
    return r if a >= 0 else -r


_BINARY_FUNCS: dict[BinaryOp, Callable[[int, int], int]] = {
    BinaryOp.ADD: lambda a, b: a + b,
    BinaryOp.SUB: lambda a, b: a - b,
    BinaryOp.MUL: lambda a, b: a * b,
    BinaryOp.REM: _truncated_rem,
    BinaryOp.MIN: min,
    BinaryOp.MAX: max,
    BinaryOp.EQ: lambda a, b: int(a == b),
    BinaryOp.NE: lambda a, b: int(a != b),
    BinaryOp.GT: lambda a, b: int(a > b),
    BinaryOp.GE: lambda a, b: int(a >= b),
    BinaryOp.LT: lambda a, b: int(a < b),
    BinaryOp.LE: lambda a, b: int(a <= b),
    BinaryOp.AND: lambda a, b: int(a != 0 and b != 0),
    BinaryOp.OR: lambda a, b: int(a != 0 or b != 0),
}

_UNARY_FUNCS: dict[UnaryOp, Callable[[int], int]] = {
    UnaryOp.ABS: abs,
    UnaryOp.NEG: lambda a: -a,
    UnaryOp.NOT: lambda a: int(a == 0),
}


def _rebase(element: Element, offset: int, slot_map: list[int]) -> Element:
    """Shift node references by *offset* and remap value slots."""
    if isinstance(element, ValueRef):
        return ValueRef(slot_map[element.slot])
    if isinstance(element, (MultiplyF, Unary)):
        return dataclasses.replace(element, node=element.node + offset)
    if isinstance(element, Binary):
        return dataclasses.replace(element, a=element.a + offset, b=element.b + offset)
    return element


# ---------------------------------------------------------------------------
# Calculation
# ---------------------------------------------------------------------------


class Calculation:
    """Expression tree evaluated against current character values."""

    __slots__ = ("_storage", "_values", "_output")

    def __init__(self) -> None:
        self._storage: list[Element] = []
        self._values: list[ValueId] = []
        self._output: int | None = None

    # --- Leaves --------------------------------------------------------------

    @classmethod
    def constant(cls, c: int) -> Calculation:
        calc = cls()
        calc._output = calc._insert(Const(int(c)))
        return calc

    @classmethod
    def from_value(cls, id: ValueId) -> Calculation:
        """Read the current value of *id*."""
        calc = cls()
        calc._output = calc._insert(ValueRef(calc._value_slot(id)))
        return calc

    @classmethod
    def placeholder(cls) -> Calculation:
        """A single unbound input, see replace_with_value/replace_with_const."""
        calc = cls()
        calc._output = calc._insert(Placeholder())
        return calc

    @classmethod
    def of(cls, operand: Operand) -> Calculation:
        """Coerce an int, ValueId or Calculation into a Calculation."""
        if isinstance(operand, Calculation):
            return operand
        if isinstance(operand, ValueId):
            return cls.from_value(operand)
        if isinstance(operand, int):
            return cls.constant(operand)
        raise TypeError(
            f"Cannot use {type(operand).__name__} as a calculation operand"
        )

    # --- Arena primitives ----------------------------------------------------

    def _insert(self, element: Element) -> int:
        self._storage.append(element)
        return len(self._storage) - 1

    def _value_slot(self, id: ValueId) -> int:
        try:
            return self._values.index(id)
        except ValueError:
            self._values.append(id)
            return len(self._values) - 1

    def _root(self) -> int:
        # An empty calculation behaves like the constant 0.
        if self._output is None:
            self._output = self._insert(Const(0))
        return self._output

    def copy(self) -> Calculation:
        clone = Calculation()
        clone._storage = list(self._storage)
        clone._values = list(self._values)
        clone._output = self._output
        return clone

    def append(self, other: Calculation) -> int:
        """Copy *other* into this arena and return the index of its root.

        Node indices of *other* are shifted by the current arena length and
        its value reads are merged into this calculation's slot table, so a
        value read by both trees occupies a single slot. Mutates self.
        """
        offset = len(self._storage)
        slot_map = [self._value_slot(id) for id in other._values]
        for element in other._storage:
            self._storage.append(_rebase(element, offset, slot_map))
        if other._output is None:
            return self._insert(Const(0))
        return other._output + offset

    # --- Combinators ---------------------------------------------------------

    def _binary(
        self, op: BinaryOp, other: Operand, rounding: Rounding = Rounding.FLOOR
    ) -> Calculation:
        result = self.copy()
        a = result._root()
        b = result.append(Calculation.of(other))
        result._output = result._insert(Binary(op, a, b, rounding))
        return result

    def _unary(self, op: UnaryOp) -> Calculation:
        result = self.copy()
        result._output = result._insert(Unary(op, result._root()))
        return result

    def add(self, other: Operand) -> Calculation:
        return self._binary(BinaryOp.ADD, other)

    def sub(self, other: Operand) -> Calculation:
        return self._binary(BinaryOp.SUB, other)

    def mul(self, other: Operand) -> Calculation:
        return self._binary(BinaryOp.MUL, other)

    def div(self, other: Operand, rounding: Rounding | None = None) -> Calculation:
        """Divide, rounding the exact quotient by *rounding* (floor by default)."""
        return self._binary(BinaryOp.DIV, other, rounding or Rounding.FLOOR)

    def rem(self, other: Operand) -> Calculation:
        return self._binary(BinaryOp.REM, other)

    def min(self, other: Operand) -> Calculation:
        return self._binary(BinaryOp.MIN, other)

    def max(self, other: Operand) -> Calculation:
        return self._binary(BinaryOp.MAX, other)

    def eq(self, other: Operand) -> Calculation:
        return self._binary(BinaryOp.EQ, other)

    def ne(self, other: Operand) -> Calculation:
        return self._binary(BinaryOp.NE, other)

    def gt(self, other: Operand) -> Calculation:
        return self._binary(BinaryOp.GT, other)

    def ge(self, other: Operand) -> Calculation:
        return self._binary(BinaryOp.GE, other)

    def lt(self, other: Operand) -> Calculation:
        return self._binary(BinaryOp.LT, other)

    def le(self, other: Operand) -> Calculation:
        return self._binary(BinaryOp.LE, other)

    def and_(self, other: Operand) -> Calculation:
        return self._binary(BinaryOp.AND, other)

    def or_(self, other: Operand) -> Calculation:
        return self._binary(BinaryOp.OR, other)

    def abs(self) -> Calculation:
        return self._unary(UnaryOp.ABS)

    def neg(self) -> Calculation:
        return self._unary(UnaryOp.NEG)

    def not_(self) -> Calculation:
        return self._unary(UnaryOp.NOT)

    def multiply_float(
        self, factor: float, rounding: Rounding | None = None
    ) -> Calculation:
        """Scale by a float factor, rounding by *rounding* (floor by default)."""
        result = self.copy()
        result._output = result._insert(
            MultiplyF(rounding or Rounding.FLOOR, float(factor), result._root())
        )
        return result

    @classmethod
    def minimum(cls, a: Operand, b: Operand) -> Calculation:
        return cls.of(a).min(b)

    @classmethod
    def maximum(cls, a: Operand, b: Operand) -> Calculation:
        return cls.of(a).max(b)

    # --- Operators -----------------------------------------------------------

    def __add__(self, other: Operand) -> Calculation:
        return self.add(other)

    def __radd__(self, other: Operand) -> Calculation:
        return Calculation.of(other).add(self)

    def __sub__(self, other: Operand) -> Calculation:
        return self.sub(other)

    def __rsub__(self, other: Operand) -> Calculation:
        return Calculation.of(other).sub(self)

    def __mul__(self, other: Operand | float) -> Calculation:
        if isinstance(other, float):
            return self.multiply_float(other)
        return self.mul(other)

    def __rmul__(self, other: Operand | float) -> Calculation:
        if isinstance(other, float):
            return self.multiply_float(other)
        return Calculation.of(other).mul(self)

    def __truediv__(self, other: Operand) -> Calculation:
        return self.div(other)

    def __rtruediv__(self, other: Operand) -> Calculation:
        return Calculation.of(other).div(self)

    __floordiv__ = __truediv__
    __rfloordiv__ = __rtruediv__

    def __mod__(self, other: Operand) -> Calculation:
        return self.rem(other)

    def __rmod__(self, other: Operand) -> Calculation:
        return Calculation.of(other).rem(self)

    def __neg__(self) -> Calculation:
        return self.neg()

    def __invert__(self) -> Calculation:
        return self.not_()

    def __abs__(self) -> Calculation:
        return self.abs()

    # --- Placeholders --------------------------------------------------------

    @property
    def has_placeholder(self) -> bool:
        return any(isinstance(e, Placeholder) for e in self._storage)

    def _replace_placeholders(self, element: Element) -> Calculation:
        result = self.copy()
        result._storage = [
            element if isinstance(e, Placeholder) else e for e in result._storage
        ]
        return result

    def replace_with_const(self, c: int) -> Calculation:
        """Return a copy with every placeholder replaced by the constant *c*."""
        return self._replace_placeholders(Const(int(c)))

    def replace_with_value(self, id: ValueId) -> Calculation:
        """Return a copy with every placeholder reading value *id*."""
        if not self.has_placeholder:
            return self.copy()
        result = self.copy()
        slot = result._value_slot(id)
        return result._replace_placeholders(ValueRef(slot))

    # --- Evaluation ----------------------------------------------------------

    def values(self) -> Iterator[ValueId]:
        """Distinct values read by this calculation, in first-reference order."""
        return iter(list(self._values))

    def get(self, values: list[int], wrap: bool = True) -> int:
        """Evaluate against *values*, aligned with the order of values()."""
        if len(values) != len(self._values):
            raise ValueError(
                f"Calculation reads {len(self._values)} values, got {len(values)}"
            )
        if self._output is None:
            return 0
        return self._eval(values, self._output, wrap)

    def _eval(self, values: list[int], idx: int, wrap: bool) -> int:
        element = self._storage[idx]
        if isinstance(element, Const):
            return element.value
        if isinstance(element, ValueRef):
            return values[element.slot]
        if isinstance(element, Placeholder):
            raise UnboundPlaceholderError(
                f"Placeholder at node {idx} was never bound: {self}"
            )

        if isinstance(element, MultiplyF):
            operand = self._eval(values, element.node, wrap)
            result = element.rounding.apply(operand * element.factor)
        elif isinstance(element, Unary):
            result = _UNARY_FUNCS[element.op](self._eval(values, element.node, wrap))
        elif element.op is BinaryOp.DIV:
            a = self._eval(values, element.a, wrap)
            b = self._eval(values, element.b, wrap)
            if b == 0:
                raise ZeroDivisionError("calculation division by zero")
            result = element.rounding.apply(a / b)
        else:
            a = self._eval(values, element.a, wrap)
            b = self._eval(values, element.b, wrap)
            result = _BINARY_FUNCS[element.op](a, b)

        return wrap_i32(result) if wrap else result

    # --- Display -------------------------------------------------------------

    def _write(self, idx: int) -> str:
        element = self._storage[idx]
        if isinstance(element, Const):
            return str(element.value)
        if isinstance(element, ValueRef):
            return f"v{self._values[element.slot].index}"
        if isinstance(element, Placeholder):
            return "_"
        if isinstance(element, MultiplyF):
            return f"({element.factor} * {self._write(element.node)})"
        if isinstance(element, Unary):
            if element.op is UnaryOp.ABS:
                return f"abs({self._write(element.node)})"
            return f"{element.op.value}{self._write(element.node)}"
        if element.op in (BinaryOp.MIN, BinaryOp.MAX):
            return f"{element.op.value}({self._write(element.a)}, {self._write(element.b)})"
        return f"({self._write(element.a)} {element.op.value} {self._write(element.b)})"

    def __str__(self) -> str:
        if self._output is None:
            return ""
        return self._write(self._output)

    def __repr__(self) -> str:
        return f"Calculation({self})"
