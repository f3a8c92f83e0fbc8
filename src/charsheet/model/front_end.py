"""Display metadata for model entities. Not used by any calculation."""

from dataclasses import dataclass


@dataclass(slots=True)
class FrontEnd:
    name: str
    name_short: str | None = None
    description: str | None = None
