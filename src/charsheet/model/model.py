"""Model builder: static declaration of values, items, inventories, choices.

A Model is assembled once through the ``add_*`` calls and then shared
read-only by any number of characters. Every call that adds an edge to
the value graph rejects edges that would make it cyclic, before touching
any state. Constructing a Character seals the model; later ``add_*`` calls
raise InvalidModelError.
"""

from __future__ import annotations

import logging
from typing import Iterable

from charsheet.config import EngineConfig
from charsheet.errors import InvalidModelError, UnboundPlaceholderError
from charsheet.graph.value_graph import ValueGraph
from charsheet.model.calculation import Calculation, Operand
from charsheet.model.choice import Choice, Selection
from charsheet.model.container import Container
from charsheet.model.ids import ChoiceId, InventoryId, ItemId, ValueId
from charsheet.model.inventory import Inventory
from charsheet.model.item import Item
from charsheet.model.modification import Modification
from charsheet.model.value import Value

logger = logging.getLogger(__name__)


def _require_bound(calc: Calculation, what: str) -> None:
    if calc.has_placeholder:
        raise UnboundPlaceholderError(f"{what} contains an unbound placeholder: {calc}")


def _append_unique(items: list, entry) -> None:
    if entry not in items:
        items.append(entry)


class Model:
    """Set of values and items that can be used together."""

    __slots__ = (
        "config", "_values", "_items", "_inventories", "_choices",
        "_graph", "_main_inventory", "_sealed",
    )

    def __init__(self, config: EngineConfig | None = None) -> None:
        self.config = config or EngineConfig()
        self._values: Container[Value] = Container("value")
        self._items: Container[Item] = Container("item")
        self._inventories: Container[Inventory] = Container("inventory")
        self._choices: Container[Choice] = Container("choice")
        self._graph = ValueGraph(detect_cycles=self.config.detect_cycles)
        self._main_inventory: InventoryId | None = None
        self._sealed = False

    # --- Sealing -------------------------------------------------------------

    @property
    def sealed(self) -> bool:
        return self._sealed

    def seal(self) -> None:
        """Freeze the model; called when the first Character is created."""
        self._sealed = True

    def _check_open(self) -> None:
        if self._sealed:
            raise InvalidModelError(
                "Model is sealed: characters already use it, no further edits"
            )

    # --- Entities ------------------------------------------------------------

    def add_value(self, id_str: str, value: Value | int = 0) -> ValueId:
        """Add a value. Id strings are unique among values.

        Dependencies already listed on *value* are validated before the
        value is registered; a rejected one leaves the model unchanged.
        """
        self._check_open()
        if isinstance(value, int):
            value = Value(value)
        if (
            value.dependents
            or value.modifying_items
            or value.modifying_choices
            or value.conditions
        ):
            raise InvalidModelError(
                f"Value {id_str!r} already carries graph edges; "
                "declare it with only a default and wire it through the Model"
            )
        self._values.check_free(id_str)
        index = len(self._values)
        pending = [self._check_dependency(index, calc) for calc in value.dependencies]

        value.dependencies = []
        id = ValueId(self._values.insert(id_str, value))
        self._graph.add_node()
        logger.debug("value %r -> %r (default %d)", id_str, id, value.default)

        self._graph.add_edges(
            [(read.index, index) for _, reads in pending for read in reads]
        )
        for calc, reads in pending:
            self._link_dependency(id, calc, reads)
        return id

    def add_item(self, id_str: str, item: Item | None = None) -> ItemId:
        """Add an item and wire its condition and modifications.

        All edges are checked before the item is registered, so a rejected
        item leaves the model unchanged and its id string free.
        """
        self._check_open()
        item = item or Item()
        condition_reads: list[ValueId] = []
        if item.condition is not None:
            _require_bound(item.condition, f"Condition of item {id_str!r}")
            condition_reads = list(item.condition.values())
            for read in condition_reads:
                self._values.get(read.index)
        if item.has_inventory is not None:
            self._inventories.get(item.has_inventory.index)
            if item.condition is not None:
                raise InvalidModelError(
                    f"Item {id_str!r}: container items cannot be condition-driven"
                )
        self._items.check_free(id_str)

        edges: list[tuple[int, int]] = []
        bound = {
            target: self._bind_modifier(target, modification, condition_reads, edges)
            for target, modification in item.modifications.items()
        }
        self._graph.add_edges(edges)

        item.modifications = {}
        id = ItemId(self._items.insert(id_str, item))
        logger.debug("item %r -> %r", id_str, id)

        for read in condition_reads:
            _append_unique(self._values[read.index].conditions, id)
        for target, (modification, reads) in bound.items():
            self._link_modification(id, item, target, modification, reads)
        return id

    def add_inventory(self, id_str: str, inventory: Inventory | None = None) -> InventoryId:
        """Add an inventory type."""
        self._check_open()
        inventory = inventory or Inventory()
        for calc in inventory.calculations():
            _require_bound(calc, f"Limit of inventory {id_str!r}")
            for read in calc.values():
                self._values.get(read.index)
        id = InventoryId(self._inventories.insert(id_str, inventory))
        logger.debug("inventory %r -> %r", id_str, id)
        return id

    def add_choice(self, id_str: str, choice: Choice | None = None) -> ChoiceId:
        """Add a choice. Selections passed in after index 0 are wired as well."""
        self._check_open()
        choice = choice or Choice()
        if not choice.options:
            choice.options = [Selection()]
        if choice.options[0].modifications:
            raise InvalidModelError(
                f"Choice {id_str!r}: option 0 is the unselected state and "
                "cannot carry modifications"
            )
        self._choices.check_free(id_str)

        edges: list[tuple[int, int]] = []
        pending = [
            (selection, self._bind_selection(selection, edges))
            for selection in choice.options[1:]
        ]
        self._graph.add_edges(edges)

        del choice.options[1:]
        id = ChoiceId(self._choices.insert(id_str, choice))
        logger.debug("choice %r -> %r", id_str, id)
        for selection, bound in pending:
            self._link_selection(id, choice, selection, bound)
        return id

    # --- Edges ---------------------------------------------------------------

    def _check_dependency(
        self, target: int, calc: Operand
    ) -> tuple[Calculation, list[ValueId]]:
        """Validate a dependency formula of value *target*; return it and its reads."""
        calc = Calculation.of(calc)
        _require_bound(calc, "Dependency")
        reads = list(calc.values())
        for read in reads:
            if read.index == target:
                self._graph.check_edge(read.index, target)
            else:
                self._values.get(read.index)
        return calc, reads

    def _link_dependency(
        self, id: ValueId, calc: Calculation, reads: list[ValueId]
    ) -> None:
        for read in reads:
            _append_unique(self._values[read.index].dependents, id)
        self._values[id.index].dependencies.append(calc)
        logger.debug("dependency %r += %s", id, calc)

    def add_dependency(self, id: ValueId, calc: Operand) -> None:
        """Add the result of *calc* to the actual of value *id*."""
        self._check_open()
        self._values.get(id.index)
        calc, reads = self._check_dependency(id.index, calc)
        self._graph.add_edges([(read.index, id.index) for read in reads])
        self._link_dependency(id, calc, reads)

    def _bind_modifier(
        self,
        target: ValueId,
        modification: Modification,
        extra_sources: Iterable[ValueId],
        edges: list[tuple[int, int]],
    ) -> tuple[Modification, list[ValueId]]:
        """Bind *modification* to *target*; collect its edges into *edges*.

        Returns the bound modification and the values its formula reads
        besides the target.
        """
        self._values.get(target.index)
        bound = modification.bound_to(target)
        reads = [r for r in bound.calculation.values() if r != target]
        sources = reads + [s for s in extra_sources if s not in reads]
        for source in sources:
            self._values.get(source.index)
            edges.append((source.index, target.index))
        return bound, reads

    def _register_reads(self, target: ValueId, reads: list[ValueId]) -> None:
        for read in reads:
            _append_unique(self._values[read.index].dependents, target)

    def _link_modification(
        self,
        id: ItemId,
        item: Item,
        target: ValueId,
        bound: Modification,
        reads: list[ValueId],
    ) -> None:
        self._register_reads(target, reads)
        item.modifications[target] = bound
        _append_unique(self._values[target.index].modifying_items, id)
        logger.debug(
            "modification %r -> %r (priority %d): %s",
            id, target, bound.priority, bound.calculation,
        )

    def add_modification(
        self, from_item: ItemId, to: ValueId, modification: Modification
    ) -> None:
        """While *from_item* is active, *to* is transformed by *modification*."""
        self._check_open()
        item = self._items.get(from_item.index)
        condition_reads = list(item.condition.values()) if item.condition else []
        edges: list[tuple[int, int]] = []
        bound, reads = self._bind_modifier(to, modification, condition_reads, edges)
        self._graph.add_edges(edges)
        self._link_modification(from_item, item, to, bound, reads)

    def _bind_selection(
        self, selection: Selection, edges: list[tuple[int, int]]
    ) -> dict[ValueId, tuple[Modification, list[ValueId]]]:
        return {
            target: self._bind_modifier(target, modification, (), edges)
            for target, modification in selection.modifications.items()
        }

    def _link_selection(
        self,
        id: ChoiceId,
        choice: Choice,
        selection: Selection,
        bound: dict[ValueId, tuple[Modification, list[ValueId]]],
    ) -> int:
        for target, (_, reads) in bound.items():
            self._register_reads(target, reads)
            _append_unique(self._values[target.index].modifying_choices, id)
        selection.modifications = {t: m for t, (m, _) in bound.items()}

        choice.options.append(selection)
        index = len(choice.options) - 1
        logger.debug("selection %r[%d] modifies %d values", id, index, len(bound))
        return index

    def add_selection(self, id: ChoiceId, selection: Selection) -> int:
        """Append *selection* to choice *id* and return its index (from 1)."""
        self._check_open()
        choice = self._choices.get(id.index)
        edges: list[tuple[int, int]] = []
        bound = self._bind_selection(selection, edges)
        self._graph.add_edges(edges)
        return self._link_selection(id, choice, selection, bound)

    # --- Inventories ---------------------------------------------------------

    @property
    def main_inventory(self) -> InventoryId | None:
        """Inventory type of every character's main inventory, if any."""
        return self._main_inventory

    def set_main_inventory(self, id: InventoryId) -> None:
        self._check_open()
        self._inventories.get(id.index)
        self._main_inventory = id

    # --- Lookups -------------------------------------------------------------

    def value_id(self, id_str: str) -> ValueId:
        return ValueId(self._values.id(id_str))

    def item_id(self, id_str: str) -> ItemId:
        return ItemId(self._items.id(id_str))

    def inventory_id(self, id_str: str) -> InventoryId:
        return InventoryId(self._inventories.id(id_str))

    def choice_id(self, id_str: str) -> ChoiceId:
        return ChoiceId(self._choices.id(id_str))

    def value(self, id: ValueId) -> Value:
        return self._values.get(id.index)

    def item(self, id: ItemId) -> Item:
        return self._items.get(id.index)

    def inventory(self, id: InventoryId) -> Inventory:
        return self._inventories.get(id.index)

    def choice(self, id: ChoiceId) -> Choice:
        return self._choices.get(id.index)

    @property
    def values(self) -> Container[Value]:
        return self._values

    @property
    def items(self) -> Container[Item]:
        return self._items

    @property
    def inventories(self) -> Container[Inventory]:
        return self._inventories

    @property
    def choices(self) -> Container[Choice]:
        return self._choices

    @property
    def graph(self) -> ValueGraph:
        return self._graph
