"""Item declarations.

An item is anything that can be "equipped": gear, learned skills, traits,
or states like being overburdened. Items modify values while their count
is non-zero, may activate automatically through a condition, may be
storable in inventories (physical), and may own an inventory themselves.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from charsheet.config import U16_MAX
from charsheet.model.calculation import Calculation, Operand
from charsheet.model.front_end import FrontEnd
from charsheet.model.ids import InventoryId, ValueId
from charsheet.model.modification import Modification


@dataclass(frozen=True, slots=True)
class Physical:
    """Inventory footprint of one unit and how many units share a slot."""
    size: int
    stack_size: int

    def __post_init__(self) -> None:
        if not 0 <= self.size <= U16_MAX:
            raise ValueError(f"size must be in [0, {U16_MAX}], got {self.size}")
        if not 0 < self.stack_size <= U16_MAX:
            raise ValueError(
                f"stack_size must be in [1, {U16_MAX}], got {self.stack_size}"
            )


@dataclass(slots=True)
class Item:
    front_end: FrontEnd | None = None
    physical: Physical | None = None
    has_inventory: InventoryId | None = None
    # Evaluated to the item's count; a truthy result activates it
    condition: Calculation | None = None
    modifications: dict[ValueId, Modification] = field(default_factory=dict)

    # --- Fluent setters ------------------------------------------------------

    def frontend(self, front_end: FrontEnd) -> Item:
        self.front_end = front_end
        return self

    def set_condition(self, condition: Operand) -> Item:
        """Activate this item automatically whenever *condition* is non-zero."""
        self.condition = Calculation.of(condition)
        return self

    def set_physical(self, size: int, stack_size: int) -> Item:
        """Make the item storable: *size* units of capacity per unit."""
        self.physical = Physical(size, stack_size)
        return self

    def set_inventory(self, id: InventoryId) -> Item:
        """Give every equipped instance of this item its own inventory."""
        self.has_inventory = id
        return self

    @property
    def is_conditional(self) -> bool:
        return self.condition is not None
