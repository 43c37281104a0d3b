"""Data models used by the UI."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Optional

from xorpuzzle.core.levels import LevelDefinition


@dataclass
class LevelState:
    """UI state for a single level: star, unlock status, and selection."""

    definition: LevelDefinition
    unlocked: bool
    starred: bool
    is_current: bool = False


def build_level_states(
    definitions: Iterable[LevelDefinition],
    has_star,
    unlock_all: bool = False,
) -> List[LevelState]:
    """Compute unlock/star state for every level and mark the current target.

    A level unlocks once the previous one has a star. The first unlocked
    level without a star is the current one.
    """
    states: List[LevelState] = []
    previous_starred = True
    for definition in definitions:
        starred = bool(has_star(definition.level_id))
        unlocked = bool(unlock_all or previous_starred)
        states.append(LevelState(definition=definition, unlocked=unlocked, starred=starred))
        previous_starred = starred

    for st in states:
        if st.unlocked and not st.starred:
            st.is_current = True
            break
    return states


def budget_label(seconds_left: Optional[float], steps_left: Optional[int]) -> str:
    """Text for the budget bar; shows every limit the level has."""
    parts = []
    if seconds_left is not None:
        parts.append(f"{max(0.0, seconds_left):.1f}s")
    if steps_left is not None:
        parts.append(f"{steps_left} move(s) left")
    return " · ".join(parts)
