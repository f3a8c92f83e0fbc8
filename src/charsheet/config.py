"""Configuration knobs for models and the characters built from them.

Defaults match the reference semantics: cycle checks on, 16-bit item
counts, 32-bit wrapping integer arithmetic.
"""

from dataclasses import dataclass


U16_MAX = 0xFFFF


@dataclass(slots=True)
class EngineConfig:
    """Tuneable parameters shared by a Model and its characters."""

    detect_cycles: bool = True     # DFS check on every new graph edge
    max_count: int = U16_MAX       # Equip counts, stack sizes, store amounts
    wrap_integers: bool = True     # Wrap calculation results to signed 32-bit
