"""Inventory types: capacity and slot limits evaluated against live values."""

from __future__ import annotations

from dataclasses import dataclass

from charsheet.model.calculation import Calculation, Operand


@dataclass(slots=True)
class Inventory:
    """Constraints shared by every instance of an inventory type.

    ``capacity`` bounds the summed size of stored units; ``slots`` bounds
    the number of stacks. Either may be None (unlimited). Both are
    calculations, e.g. ``Inventory().capacity(strength * 10)``.
    """

    capacity_calc: Calculation | None = None
    slots_calc: Calculation | None = None

    def capacity(self, calc: Operand) -> Inventory:
        self.capacity_calc = Calculation.of(calc)
        return self

    def slots(self, calc: Operand) -> Inventory:
        self.slots_calc = Calculation.of(calc)
        return self

    def calculations(self) -> list[Calculation]:
        return [c for c in (self.capacity_calc, self.slots_calc) if c is not None]
