from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import List, Optional

logger = logging.getLogger(__name__)

STAR_SLOTS = 40


def _default_stars() -> List[bool]:
    return [False] * STAR_SLOTS


class LevelManager:
    """Stores which levels have earned a star. Persists to disk across app restarts.
    File: ~/.xorpuzzle/progress.json. Level ids are 1-based."""

    def __init__(self, file_path: Optional[Path] = None) -> None:
        self._file_path = file_path or Path.home() / ".xorpuzzle" / "progress.json"
        self._file_path.parent.mkdir(parents=True, exist_ok=True)
        self._stars = self._load()

    def mark_level_as_completed(self, level_id: int) -> None:
        if not 1 <= level_id <= len(self._stars):
            logger.debug("Ignoring completion of level %s: no star slot", level_id)
            return
        if self._stars[level_id - 1]:
            return
        self._stars[level_id - 1] = True
        logger.info("Level %d starred", level_id)
        self._save()

    def has_star_for_level(self, level_id: int) -> bool:
        return 1 <= level_id <= len(self._stars) and self._stars[level_id - 1]

    def starred_count(self) -> int:
        return sum(1 for s in self._stars if s)

    def reset_all_stars(self) -> None:
        """Clear every star. Only called from the reset button on the home screen."""
        self._stars = _default_stars()
        self._save()

    def save(self) -> None:
        """Persist current state to disk (e.g. on app exit)."""
        self._save()

    def _load(self) -> List[bool]:
        stars = _default_stars()
        if not self._file_path.exists():
            return stars
        try:
            payload = json.loads(self._file_path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, OSError) as e:
            logger.warning("Could not load progress from %s: %s", self._file_path, e)
            return stars

        raw = payload.get("level_stars", []) if isinstance(payload, dict) else []
        if not isinstance(raw, list):
            logger.warning("Ignoring malformed level_stars in %s", self._file_path)
            return stars
        for i, value in enumerate(raw[:STAR_SLOTS]):
            stars[i] = value is True
        return stars

    def _save(self) -> None:
        self._file_path.parent.mkdir(parents=True, exist_ok=True)
        payload = {"level_stars": list(self._stars)}
        try:
            self._file_path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
        except OSError as e:
            logger.warning("Could not save progress to %s: %s", self._file_path, e)
