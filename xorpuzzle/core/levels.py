from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import yaml

from xorpuzzle.core.circuit import MAX_INPUTS, CircuitExpression, ExpressionError
from xorpuzzle.core.governor import ResourceLimits

logger = logging.getLogger(__name__)


class WinCondition(Enum):
    """Which bulb state solves the level."""

    LIT = "lit"
    DARK = "dark"

    def is_met(self, bulb_output: bool) -> bool:
        return bulb_output if self is WinCondition.LIT else not bulb_output


@dataclass(frozen=True)
class LevelDefinition:
    level_id: int
    title: str
    switch_count: int
    initial_values: Tuple[bool, ...]
    expression: CircuitExpression = field(compare=False)
    win_when: WinCondition = WinCondition.LIT
    limits: Optional[ResourceLimits] = None

    def __post_init__(self) -> None:
        if len(self.initial_values) != self.switch_count:
            raise ValueError(
                f"Level {self.level_id}: {len(self.initial_values)} initial value(s) for {self.switch_count} switch(es)"
            )
        if self.expression.arity != self.switch_count:
            raise ValueError(
                f"Level {self.level_id}: expression takes {self.expression.arity} input(s), level has {self.switch_count}"
            )

    @property
    def is_governed(self) -> bool:
        return self.limits is not None and not self.limits.is_empty

    def is_solved_by(self, values) -> bool:
        return self.win_when.is_met(self.expression.evaluate(values))


class LevelRepository:
    def __init__(self, base_dir: Optional[Path] = None) -> None:
        self._base_dir = base_dir or Path(__file__).resolve().parent.parent / "data" / "levels"
        self._levels = self._load_levels()

    def all(self) -> List[LevelDefinition]:
        return list(self._levels.values())

    def ids(self) -> List[int]:
        return list(self._levels)

    def get(self, level_id: int) -> LevelDefinition:
        return self._levels[level_id]

    def __len__(self) -> int:
        return len(self._levels)

    def __contains__(self, level_id: object) -> bool:
        return level_id in self._levels

    def _load_levels(self) -> Dict[int, LevelDefinition]:
        base_dir = self._base_dir
        if not base_dir.exists():
            raise FileNotFoundError(f"Levels directory not found: {base_dir}")

        levels: Dict[int, LevelDefinition] = {}
        for level_path in base_dir.glob("level*.yaml"):
            m = re.match(r"^level(\d+)$", level_path.stem)
            if not m:
                logger.warning("Skipping %s: file name is not level<N>.yaml", level_path.name)
                continue
            level_id = int(m.group(1))
            raw = yaml.safe_load(level_path.read_text(encoding="utf-8"))
            levels[level_id] = parse_level(level_id, raw, source=level_path.name)

        if not levels:
            raise ValueError(f"No level files (level*.yaml) found in {base_dir}")
        logger.debug("Loaded %d levels from %s", len(levels), base_dir)
        return dict(sorted(levels.items()))


def parse_level(level_id: int, raw: Any, source: str = "<level>") -> LevelDefinition:
    """Build a :class:`LevelDefinition` from the mapping stored in a level file."""
    if not raw or not isinstance(raw, dict):
        raise ValueError(f"{source}: expected YAML mapping with 'title', 'switches' and 'expression'")

    title = raw.get("title")
    if not title or not isinstance(title, str):
        raise ValueError(f"{source}: missing or invalid 'title'")

    switch_count = raw.get("switches")
    if isinstance(switch_count, bool) or not isinstance(switch_count, int):
        raise ValueError(f"{source}: missing or invalid 'switches'")
    if not 1 <= switch_count <= MAX_INPUTS:
        raise ValueError(f"{source}: 'switches' must be between 1 and {MAX_INPUTS}, got {switch_count}")

    initial = raw.get("initial")
    if initial is None:
        initial_values = (False,) * switch_count
    elif isinstance(initial, list) and all(isinstance(v, bool) for v in initial):
        initial_values = tuple(initial)
    else:
        raise ValueError(f"{source}: 'initial' must be a list of true/false values")
    if len(initial_values) != switch_count:
        raise ValueError(f"{source}: 'initial' has {len(initial_values)} value(s), expected {switch_count}")

    text = raw.get("expression")
    if not text or not isinstance(text, str):
        raise ValueError(f"{source}: missing 'expression'")
    try:
        expression = CircuitExpression.parse(text, switch_count)
    except ExpressionError as e:
        raise ValueError(f"{source}: invalid expression {text!r}: {e}") from e

    try:
        win_when = WinCondition(str(raw.get("win_when", "lit")).strip().lower())
    except ValueError as e:
        raise ValueError(f"{source}: 'win_when' must be 'lit' or 'dark'") from e

    limits = _parse_limits(raw.get("limits"), source)

    definition = LevelDefinition(
        level_id=level_id,
        title=title.strip(),
        switch_count=switch_count,
        initial_values=initial_values,
        expression=expression,
        win_when=win_when,
        limits=limits,
    )
    if definition.is_solved_by(initial_values):
        raise ValueError(f"{source}: level is already solved by its initial switches")
    return definition


def _parse_limits(raw: Any, source: str) -> Optional[ResourceLimits]:
    if raw is None:
        return None
    if not isinstance(raw, dict):
        raise ValueError(f"{source}: 'limits' must be a mapping")
    unknown = set(raw) - {"max_toggles", "time_limit_seconds"}
    if unknown:
        raise ValueError(f"{source}: unknown limit(s): {', '.join(sorted(unknown))}")
    max_toggles = raw.get("max_toggles")
    time_limit = raw.get("time_limit_seconds")
    if max_toggles is not None and (isinstance(max_toggles, bool) or not isinstance(max_toggles, int)):
        raise ValueError(f"{source}: 'max_toggles' must be a whole number, got {max_toggles!r}")
    if time_limit is not None and (isinstance(time_limit, bool) or not isinstance(time_limit, (int, float))):
        raise ValueError(f"{source}: 'time_limit_seconds' must be a number, got {time_limit!r}")
    try:
        return ResourceLimits(
            max_toggles=max_toggles,
            time_limit_seconds=float(time_limit) if time_limit is not None else None,
        )
    except (TypeError, ValueError) as e:
        raise ValueError(f"{source}: invalid limits: {e}") from e
