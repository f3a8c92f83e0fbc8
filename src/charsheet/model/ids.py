"""Typed, dense ids for model entities.

Every id wraps the zero-based index of its entity in the owning Model
container. Ids of different kinds never compare equal, even when their
indices match. ValueId additionally behaves like a Calculation operand so
formulas can be written as ``(strength / 2) - 5``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from charsheet.model.calculation import Calculation, Rounding


@dataclass(frozen=True, slots=True)
class _Id:
    index: int

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.index})"


@dataclass(frozen=True, slots=True, repr=False)
class ItemId(_Id):
    """Index of an Item in Model.items."""


@dataclass(frozen=True, slots=True, repr=False)
class InventoryId(_Id):
    """Index of an Inventory type in Model.inventories."""


@dataclass(frozen=True, slots=True, repr=False)
class ChoiceId(_Id):
    """Index of a Choice in Model.choices."""


@dataclass(frozen=True, slots=True, repr=False)
class ValueId(_Id):
    """Index of a Value in Model.values; usable directly inside formulas."""

    def calc(self) -> Calculation:
        """Return a calculation that reads this value."""
        from charsheet.model.calculation import Calculation

        return Calculation.from_value(self)

    # --- Formula operators -------------------------------------------------

    def __add__(self, other):
        return self.calc() + other

    def __radd__(self, other):
        return other + self.calc()

    def __sub__(self, other):
        return self.calc() - other

    def __rsub__(self, other):
        return other - self.calc()

    def __mul__(self, other):
        return self.calc() * other

    def __rmul__(self, other):
        return other * self.calc()

    def __truediv__(self, other):
        return self.calc() / other

    def __rtruediv__(self, other):
        return other / self.calc()

    def __floordiv__(self, other):
        return self.calc() // other

    def __rfloordiv__(self, other):
        return other // self.calc()

    def __mod__(self, other):
        return self.calc() % other

    def __rmod__(self, other):
        return other % self.calc()

    def __neg__(self):
        return -self.calc()

    def __invert__(self):
        return ~self.calc()

    def __abs__(self):
        return abs(self.calc())

    def div(self, other, rounding: Rounding | None = None) -> Calculation:
        return self.calc().div(other, rounding)

    def gt(self, other) -> Calculation:
        return self.calc().gt(other)

    def ge(self, other) -> Calculation:
        return self.calc().ge(other)

    def lt(self, other) -> Calculation:
        return self.calc().lt(other)

    def le(self, other) -> Calculation:
        return self.calc().le(other)

    def eq(self, other) -> Calculation:
        return self.calc().eq(other)

    def ne(self, other) -> Calculation:
        return self.calc().ne(other)
