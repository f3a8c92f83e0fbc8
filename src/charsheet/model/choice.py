"""Choices: groups of mutually exclusive selections."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable

from charsheet.model.front_end import FrontEnd
from charsheet.model.ids import ValueId
from charsheet.model.modification import Modification


@dataclass(slots=True)
class Selection:
    """One option of a Choice; its modifications apply while it is active."""

    modifications: dict[ValueId, Modification] = field(default_factory=dict)
    front_end: FrontEnd | None = None

    @classmethod
    def of(
        cls,
        modifications: Iterable[tuple[ValueId, Modification]],
        front_end: FrontEnd | None = None,
    ) -> Selection:
        return cls(dict(modifications), front_end)


@dataclass(slots=True)
class Choice:
    """Ordered selections; index 0 is the implicit "nothing selected" option.

    The empty option is created with the Choice, so selections added
    through Model.add_selection are numbered from 1.
    """

    front_end: FrontEnd | None = None
    options: list[Selection] = field(default_factory=lambda: [Selection()])
