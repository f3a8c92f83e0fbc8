"""Dense, append-only storage with id-string lookup."""

from __future__ import annotations

from typing import Generic, Iterator, TypeVar

from charsheet.errors import DuplicateIdError, InvalidModelError

T = TypeVar("T")


class Container(Generic[T]):
    """Sequential container addressed by index, with a name -> index table.

    Entries are never removed, so an index stays valid for the lifetime of
    the container.
    """

    __slots__ = ("_namespace", "_entries", "_ids")

    def __init__(self, namespace: str) -> None:
        self._namespace = namespace
        self._entries: list[T] = []
        self._ids: dict[str, int] = {}

    def check_free(self, id_str: str) -> None:
        """Raise DuplicateIdError if *id_str* is already registered."""
        if str(id_str) in self._ids:
            raise DuplicateIdError(self._namespace, str(id_str))

    def insert(self, id_str: str, entry: T) -> int:
        """Append *entry* under *id_str* and return its index."""
        self.check_free(id_str)
        index = len(self._entries)
        self._ids[str(id_str)] = index
        self._entries.append(entry)
        return index

    def id(self, id_str: str) -> int:
        """Return the index registered for *id_str* (KeyError if unknown)."""
        return self._ids[id_str]

    def get(self, index: int) -> T:
        if not 0 <= index < len(self._entries):
            raise InvalidModelError(
                f"{self._namespace} index {index} is out of range "
                f"[0, {len(self._entries)})"
            )
        return self._entries[index]

    def __getitem__(self, index: int) -> T:
        return self.get(index)

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[tuple[int, T]]:
        return iter(enumerate(self._entries))
