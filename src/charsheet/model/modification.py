"""Priority-ordered value modifications attached to items and selections."""

from __future__ import annotations

from dataclasses import dataclass

from charsheet.model.calculation import Calculation, Operand
from charsheet.model.ids import ValueId


@dataclass(slots=True)
class Modification:
    """Transforms a value's running actual into a new actual.

    The calculation refers to "the current value" through a placeholder.
    When the model attaches the modification to a target value, every
    placeholder is rewritten to read that value; at application time the
    character feeds the running actual into that slot. Lower priorities
    are applied first.

    Example: ``Modification(0, Calculation.placeholder() + 10)`` adds 10.
    """

    priority: int
    calculation: Calculation

    def __post_init__(self) -> None:
        if not 0 <= self.priority <= 0xFFFF:
            raise ValueError(f"priority must be in [0, 65535], got {self.priority}")
        self.calculation = Calculation.of(self.calculation)

    def bound_to(self, target: ValueId) -> Modification:
        """Return a copy whose placeholders read *target*."""
        return Modification(self.priority, self.calculation.replace_with_value(target))

    @classmethod
    def add(cls, amount: Operand, priority: int = 0) -> Modification:
        return cls(priority, Calculation.placeholder() + amount)

    @classmethod
    def multiply(cls, factor: float, priority: int = 0) -> Modification:
        return cls(priority, Calculation.placeholder().multiply_float(factor))

    @classmethod
    def change(cls, value: Operand, priority: int = 0) -> Modification:
        """Replace the value outright."""
        return cls(priority, Calculation.of(value))
