from __future__ import annotations

from dataclasses import dataclass
from typing import List, Sequence


@dataclass
class SwitchInput:
    """A single player-facing toggle."""

    id: int
    value: bool = False
    has_been_toggled: bool = False
    enabled: bool = True

    def toggle(self) -> bool:
        """Flip the switch. Return False (and change nothing) when disabled."""
        if not self.enabled:
            return False
        self.value = not self.value
        self.has_been_toggled = True
        return True

    @classmethod
    def bank(cls, initial_values: Sequence[bool]) -> List["SwitchInput"]:
        """Build a fresh, enabled switch vector from *initial_values*."""
        return [cls(id=i, value=bool(v)) for i, v in enumerate(initial_values)]
