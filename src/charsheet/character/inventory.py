"""Inventory instances and the stack fill algorithm.

Storing is a greedy pass in three steps:

  1. Clamp the amount to what the remaining capacity can hold
     (``(capacity - fill) // size``); the excess is remainder straight away.
  2. Top up existing stacks of the same item, oldest stack first.
  3. Open new stacks of up to ``stack_size`` units while the slot limit
     allows.

Whatever is left after step 3 joins the remainder. Stack order is
creation order and decides which stack fills first.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from charsheet.model.ids import InventoryId, ItemId
from charsheet.model.item import Physical


@dataclass(slots=True)
class Stack:
    """Units of one item sharing an inventory slot."""
    item: ItemId
    count: int


@dataclass(slots=True)
class CharacterInventory:
    """Live contents of one inventory belonging to a character."""

    id: InventoryId
    content: list[Stack] = field(default_factory=list)
    fill: int = 0          # summed size of all stored units
    attached: bool = True  # False once its container item was unequipped

    # --- Storing -------------------------------------------------------------

    def limit_fill(self, physical: Physical, amount: int, capacity: int | None) -> int:
        """Clamp *amount* to the number of units that still fit."""
        if capacity is None or physical.size == 0:
            return amount
        space = max(0, capacity - self.fill)
        return min(amount, space // physical.size)

    def fill_stacks(self, item: ItemId, amount: int, stack_size: int) -> int:
        """Top up non-full stacks of *item*. Returns the units left over."""
        for stack in self.content:
            if amount == 0:
                break
            if stack.item == item:
                usage = min(max(0, stack_size - stack.count), amount)
                stack.count += usage
                amount -= usage
        return amount

    def create_stacks(
        self, item: ItemId, amount: int, stack_size: int, slot_count: int | None
    ) -> int:
        """Open new stacks of *item*. Returns the units left over."""
        while amount > 0:
            if slot_count is not None and len(self.content) >= slot_count:
                break
            usage = min(stack_size, amount)
            self.content.append(Stack(item, usage))
            amount -= usage
        return amount

    def put(
        self,
        item: ItemId,
        physical: Physical,
        amount: int,
        capacity: int | None,
        slot_count: int | None,
    ) -> int:
        """Store up to *amount* units of *item*. Returns the units that did not fit."""
        to_put = self.limit_fill(physical, amount, capacity)
        remainder = amount - to_put

        to_put = self.fill_stacks(item, to_put, physical.stack_size)
        to_put = self.create_stacks(item, to_put, physical.stack_size, slot_count)

        remainder += to_put
        self.fill += (amount - remainder) * physical.size
        return remainder

    # --- Removing ------------------------------------------------------------

    def take(self, item: ItemId, physical: Physical, amount: int) -> int:
        """Remove up to *amount* units of *item*, newest stacks first.

        Emptied stacks are dropped. Returns the number of units removed.
        """
        removed = 0
        for stack in reversed(self.content):
            if removed == amount:
                break
            if stack.item == item:
                usage = min(stack.count, amount - removed)
                stack.count -= usage
                removed += usage
        self.content = [s for s in self.content if s.count > 0]
        self.fill -= removed * physical.size
        return removed

    # --- Queries -------------------------------------------------------------

    def contents(self) -> list[tuple[ItemId, int]]:
        return [(stack.item, stack.count) for stack in self.content]
