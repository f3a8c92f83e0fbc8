"""Runtime character state and the recompute engine."""

from charsheet.character.character import ActiveModifier, Character
from charsheet.character.inventory import CharacterInventory, Stack
from charsheet.character.state import CharacterItem, CharacterValue

__all__ = [
    "ActiveModifier",
    "Character",
    "CharacterInventory",
    "CharacterItem",
    "CharacterValue",
    "Stack",
]
