"""Configurable rules engine for RPG character sheets."""

from charsheet.character import Character
from charsheet.config import EngineConfig
from charsheet.errors import (
    CharsheetError,
    CyclicDependencyError,
    DuplicateIdError,
    ErrorKind,
    InvalidModelError,
    InvalidOperationError,
    NotStorableError,
    UnboundPlaceholderError,
)
from charsheet.model import (
    Calculation,
    Choice,
    ChoiceId,
    FrontEnd,
    Inventory,
    InventoryId,
    Item,
    ItemId,
    Model,
    Modification,
    Rounding,
    Selection,
    Value,
    ValueId,
)

__all__ = [
    "Calculation",
    "Character",
    "CharsheetError",
    "Choice",
    "ChoiceId",
    "CyclicDependencyError",
    "DuplicateIdError",
    "EngineConfig",
    "ErrorKind",
    "FrontEnd",
    "InvalidModelError",
    "InvalidOperationError",
    "Inventory",
    "InventoryId",
    "Item",
    "ItemId",
    "Model",
    "Modification",
    "NotStorableError",
    "Rounding",
    "Selection",
    "UnboundPlaceholderError",
    "Value",
    "ValueId",
]
