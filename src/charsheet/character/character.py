"""Character: per-instance state and the incremental recompute engine.

A Character borrows a sealed Model and keeps one record per model value
and item, the active selection of every choice, and its inventories.
Reads are O(1) lookups of cached actuals; every mutation recomputes the
affected part of the value graph before returning.

Recomputing a value is two steps:

  1. dependencies: ``actual = base + sum(formula(current values))``
  2. modifications: all active modifiers targeting the value (items with a
     non-zero count weighted by that count, plus the active selection of
     each modifying choice with weight 1) are sorted by ascending priority
     and folded over the running actual. A modifier with weight n is
     applied n times in a row, each application reading the previous
     result, so modifiers compose sequentially rather than all reading
     the unmodified value.

After that the change is pushed recursively to the value's dependents and
to the items whose condition reads it.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from charsheet.character.inventory import CharacterInventory
from charsheet.character.state import CharacterItem, CharacterValue
from charsheet.errors import (
    CyclicDependencyError,
    InvalidModelError,
    InvalidOperationError,
    NotStorableError,
)
from charsheet.model.calculation import Calculation, wrap_i32
from charsheet.model.ids import ChoiceId, ItemId, ValueId
from charsheet.model.model import Model
from charsheet.model.modification import Modification

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class ActiveModifier:
    """A modifier currently in effect on some value, from either source kind."""

    source: ItemId | ChoiceId
    weight: int
    modification: Modification

    @property
    def priority(self) -> int:
        return self.modification.priority


class Character:
    """Concrete values, equipped items, selections and inventories."""

    __slots__ = ("_model", "_values", "_items", "_inventories", "_selections")

    def __init__(self, model: Model) -> None:
        model.seal()
        self._model = model
        self._values = [
            CharacterValue.with_default(value.default) for _, value in model.values
        ]
        self._items = [
            CharacterItem.for_item(item.has_inventory is not None)
            for _, item in model.items
        ]
        # Handle 0 is reserved for the main inventory even when there is none
        self._inventories: list[CharacterInventory | None] = [
            CharacterInventory(model.main_inventory)
            if model.main_inventory is not None
            else None
        ]
        self._selections = [0] * len(model.choices)

        self._update_all_values()
        logger.info(
            "character created: %d values, %d items, %d choices",
            len(self._values), len(self._items), len(self._selections),
        )

    @property
    def model(self) -> Model:
        return self._model

    # --- Record access -------------------------------------------------------

    def _value(self, id: ValueId) -> CharacterValue:
        if not 0 <= id.index < len(self._values):
            raise InvalidModelError(f"{id!r} does not belong to this character's model")
        return self._values[id.index]

    def _item(self, id: ItemId) -> CharacterItem:
        if not 0 <= id.index < len(self._items):
            raise InvalidModelError(f"{id!r} does not belong to this character's model")
        return self._items[id.index]

    def _inventory(self, handle: int | None) -> CharacterInventory:
        """Resolve an inventory handle; None and 0 are the main inventory."""
        if handle is None:
            handle = 0
        if not 0 <= handle < len(self._inventories):
            raise InvalidOperationError(f"Unknown inventory handle {handle}")
        inventory = self._inventories[handle]
        if inventory is None:
            raise InvalidOperationError("The model declares no main inventory")
        if not inventory.attached:
            raise InvalidOperationError(
                f"Inventory {handle} belongs to an unequipped container"
            )
        return inventory

    def _eval(self, calc: Calculation) -> int:
        return calc.get(
            [self.get(id) for id in calc.values()],
            wrap=self._model.config.wrap_integers,
        )

    # --- Reads ---------------------------------------------------------------

    def get(self, id: ValueId) -> int:
        """Current actual of a value."""
        return self._value(id).actual

    def base(self, id: ValueId) -> int:
        return self._value(id).base

    def count(self, id: ItemId) -> int:
        """Equip count of an item (derived for condition-driven items)."""
        return self._item(id).count

    def selection(self, id: ChoiceId) -> int:
        """Index of the active selection; 0 means nothing selected."""
        self._model.choice(id)
        return self._selections[id.index]

    def item_inventories(self, id: ItemId) -> list[int]:
        """Inventory handles owned by the equipped instances of a container item."""
        return list(self._item(id).inventories or [])

    def contents(self, inventory: int | None = None) -> list[tuple[ItemId, int]]:
        """Stacks of an inventory as ``(item, count)`` pairs, oldest first."""
        return self._inventory(inventory).contents()

    def fill(self, inventory: int | None = None) -> int:
        """Capacity units occupied in an inventory."""
        return self._inventory(inventory).fill

    # --- Mutations -----------------------------------------------------------

    def set_base(self, id: ValueId, new: int) -> None:
        """Change a base value. Setting the current base again does nothing."""
        record = self._value(id)
        if record.base == new:
            return
        record.base = new
        self._update_value(id)

    def equip(self, id: ItemId) -> None:
        """Add one instance of an item; its modifiers apply once more."""
        item = self._model.item(id)
        record = self._item(id)
        if item.is_conditional:
            raise InvalidOperationError(
                f"{id!r} is activated by its condition and cannot be equipped"
            )
        if record.count >= self._model.config.max_count:
            raise InvalidOperationError(
                f"{id!r} is already equipped {record.count} times"
            )

        if item.has_inventory is not None:
            record.inventories.append(len(self._inventories))
            self._inventories.append(CharacterInventory(item.has_inventory))
        else:
            record.count += 1
        logger.debug("equip %r (count %d)", id, record.count)

        for target in item.modifications:
            self._update_value(target)

    def unequip(self, id: ItemId) -> None:
        """Remove one instance of an item.

        For container items the most recently created inventory is detached
        and must be empty. Detached inventories keep their handle for the
        lifetime of the character and are never handed out again, so every
        equip of a container grows the handle table by one entry.
        """
        item = self._model.item(id)
        record = self._item(id)
        if item.is_conditional:
            raise InvalidOperationError(
                f"{id!r} is activated by its condition and cannot be unequipped"
            )
        if record.count == 0:
            raise InvalidOperationError(f"{id!r} is not equipped")

        if item.has_inventory is not None:
            inventory = self._inventories[record.inventories[-1]]
            if inventory.content:
                raise InvalidOperationError(
                    f"Cannot unequip {id!r}: its inventory is not empty"
                )
            inventory.attached = False
            record.inventories.pop()
        else:
            record.count -= 1
        logger.debug("unequip %r (count %d)", id, record.count)

        for target in item.modifications:
            self._update_value(target)

    def select(self, id: ChoiceId, index: int) -> None:
        """Make selection *index* of a choice the active one."""
        choice = self._model.choice(id)
        if not 0 <= index < len(choice.options):
            raise InvalidOperationError(
                f"Selection {index} is out of range for {id!r} "
                f"({len(choice.options)} options)"
            )
        old = self._selections[id.index]
        if old == index:
            return
        self._selections[id.index] = index
        logger.debug("select %r: %d -> %d", id, old, index)

        targets = list(choice.options[old].modifications)
        targets += [t for t in choice.options[index].modifications if t not in targets]
        for target in targets:
            self._update_value(target)

    def store(self, inventory: int | None, id: ItemId, amount: int) -> int:
        """Put *amount* units of an item into an inventory.

        Returns the number of units that did not fit. Running out of
        capacity or slots is a normal outcome, not an error.
        """
        item = self._model.item(id)
        if item.has_inventory is not None:
            raise NotStorableError(f"{id!r} owns an inventory and cannot be stored")
        if item.physical is None:
            raise NotStorableError(f"{id!r} has no physical descriptor")
        if not 0 <= amount <= self._model.config.max_count:
            raise InvalidOperationError(f"Cannot store {amount} units")

        target = self._inventory(inventory)
        limits = self._model.inventory(target.id)
        capacity = self._eval(limits.capacity_calc) if limits.capacity_calc else None
        slots = self._eval(limits.slots_calc) if limits.slots_calc else None

        remainder = target.put(id, item.physical, amount, capacity, slots)
        logger.debug(
            "store %d x %r: placed %d, remainder %d (fill %d)",
            amount, id, amount - remainder, remainder, target.fill,
        )
        return remainder

    def take(self, inventory: int | None, id: ItemId, amount: int) -> int:
        """Remove up to *amount* units of an item. Returns the units removed."""
        item = self._model.item(id)
        if item.physical is None:
            raise NotStorableError(f"{id!r} has no physical descriptor")
        if amount < 0:
            raise InvalidOperationError(f"Cannot take {amount} units")
        target = self._inventory(inventory)
        removed = target.take(id, item.physical, amount)
        logger.debug("take %d x %r: removed %d", amount, id, removed)
        return removed

    # --- Recompute -----------------------------------------------------------

    def _update_all_values(self) -> None:
        """Full pass in topological order, used once at construction."""
        order = self._model.graph.topological_order()
        if len(order) != len(self._values):
            stuck = sorted(set(range(len(self._values))) - set(order))
            raise CyclicDependencyError(stuck)

        for index, item in self._model.items:
            if item.condition is not None and not list(item.condition.values()):
                self._refresh_condition(ItemId(index))

        for index in order:
            id = ValueId(index)
            self._apply_dependencies(id)
            self._apply_modifications(id)
            for item_id in self._model.value(id).conditions:
                self._refresh_condition(item_id)

    def _update_value(self, id: ValueId) -> None:
        self._apply_dependencies(id)
        self._apply_modifications(id)
        logger.debug("update %r -> %d", id, self._values[id.index].actual)

        declaration = self._model.value(id)
        for dependent in declaration.dependents:
            self._update_value(dependent)
        for item_id in declaration.conditions:
            self._update_condition(item_id)

    def _apply_dependencies(self, id: ValueId) -> None:
        record = self._values[id.index]
        actual = record.base
        for calc in self._model.value(id).dependencies:
            actual += self._eval(calc)
        record.actual = wrap_i32(actual) if self._model.config.wrap_integers else actual

    def _active_modifiers(self, id: ValueId) -> list[ActiveModifier]:
        """Modifiers in effect on *id*, sorted by ascending priority.

        Items come before choices, each in registration order; the sort is
        stable so that order breaks priority ties.
        """
        declaration = self._model.value(id)
        active: list[ActiveModifier] = []
        for item_id in declaration.modifying_items:
            count = self._items[item_id.index].count
            if count > 0:
                modification = self._model.item(item_id).modifications[id]
                active.append(ActiveModifier(item_id, count, modification))
        for choice_id in declaration.modifying_choices:
            option = self._model.choice(choice_id).options[self._selections[choice_id.index]]
            modification = option.modifications.get(id)
            if modification is not None:
                active.append(ActiveModifier(choice_id, 1, modification))
        return sorted(active, key=lambda m: m.priority)

    def _apply_modifications(self, id: ValueId) -> None:
        record = self._values[id.index]
        value = record.actual
        for modifier in self._active_modifiers(id):
            calc = modifier.modification.calculation
            for _ in range(modifier.weight):
                value = self._eval_modification(calc, id, value)
        record.actual = value

    def _eval_modification(self, calc: Calculation, target: ValueId, running: int) -> int:
        """Evaluate *calc* with the target's slot reading the running value."""
        inputs = [running if v == target else self.get(v) for v in calc.values()]
        return calc.get(inputs, wrap=self._model.config.wrap_integers)

    def _condition_count(self, id: ItemId) -> int:
        condition = self._model.item(id).condition
        if condition is None:
            raise InvalidModelError(f"{id!r} has no condition")
        return min(max(0, self._eval(condition)), self._model.config.max_count)

    def _refresh_condition(self, id: ItemId) -> None:
        self._items[id.index].count = self._condition_count(id)

    def _update_condition(self, id: ItemId) -> None:
        record = self._items[id.index]
        count = self._condition_count(id)
        if record.count == count:
            return
        logger.debug("condition %r: count %d -> %d", id, record.count, count)
        record.count = count
        for target in self._model.item(id).modifications:
            self._update_value(target)
