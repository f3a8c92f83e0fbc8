"""Declarative model: values, items, inventories, choices and their formulas."""

from charsheet.model.calculation import Calculation, Rounding
from charsheet.model.choice import Choice, Selection
from charsheet.model.container import Container
from charsheet.model.front_end import FrontEnd
from charsheet.model.ids import ChoiceId, InventoryId, ItemId, ValueId
from charsheet.model.inventory import Inventory
from charsheet.model.item import Item, Physical
from charsheet.model.model import Model
from charsheet.model.modification import Modification
from charsheet.model.value import Value

__all__ = [
    "Calculation",
    "Choice",
    "ChoiceId",
    "Container",
    "FrontEnd",
    "Inventory",
    "InventoryId",
    "Item",
    "ItemId",
    "Model",
    "Modification",
    "Physical",
    "Rounding",
    "Selection",
    "Value",
    "ValueId",
]
