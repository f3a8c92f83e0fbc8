"""Per-character runtime records for values and items."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True)
class CharacterValue:
    base: int      # set by the user
    actual: int    # last computed result

    @classmethod
    def with_default(cls, default: int) -> CharacterValue:
        return cls(base=default, actual=default)


@dataclass(slots=True)
class CharacterItem:
    """Equip count of an item, or the inventories of a container item.

    The two forms are exclusive: an item type that owns an inventory keeps
    one inventory handle per equipped instance and its count is the number
    of handles; every other item keeps a plain counter.
    """

    _count: int = 0
    inventories: list[int] | None = None

    @classmethod
    def for_item(cls, has_inventory: bool) -> CharacterItem:
        return cls(inventories=[] if has_inventory else None)

    @property
    def count(self) -> int:
        if self.inventories is not None:
            return len(self.inventories)
        return self._count

    @count.setter
    def count(self, value: int) -> None:
        if self.inventories is not None:
            raise ValueError("Container items are counted by their inventories")
        self._count = value
