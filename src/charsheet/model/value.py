"""Value declarations: named numeric quantities on a character sheet."""

from __future__ import annotations

from dataclasses import dataclass, field

from charsheet.model.calculation import Calculation
from charsheet.model.front_end import FrontEnd
from charsheet.model.ids import ChoiceId, ItemId, ValueId


@dataclass(slots=True)
class Value:
    """A value with a default base and the graph edges touching it.

    Edge lists are filled in by the Model as dependencies, modifications
    and conditions are added; declare a Value with just its default.
    """

    default: int = 0
    front_end: FrontEnd | None = None

    # Formulas summed into the actual on top of the base
    dependencies: list[Calculation] = field(default_factory=list)
    # Values to recompute when this one changes
    dependents: list[ValueId] = field(default_factory=list)
    modifying_items: list[ItemId] = field(default_factory=list)
    modifying_choices: list[ChoiceId] = field(default_factory=list)
    # Items whose condition reads this value
    conditions: list[ItemId] = field(default_factory=list)

    def frontend(self, front_end: FrontEnd) -> Value:
        self.front_end = front_end
        return self
