from __future__ import annotations

import json
import logging
import os
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)

UNLOCK_ALL_ENV = "XORPUZZLE_UNLOCK_ALL"


@dataclass
class AppSettings:
    unlock_all_levels: bool = False
    last_level_id: int = 1


class SettingsStore:
    """Loads and saves :class:`AppSettings` at ~/.xorpuzzle/settings.json.

    Built once at start-up and handed to the UI; the puzzle engine never
    reads settings. ``XORPUZZLE_UNLOCK_ALL=1`` unlocks every level for the
    run without writing that choice to disk.
    """

    def __init__(self, file_path: Optional[Path] = None) -> None:
        self._file_path = file_path or Path.home() / ".xorpuzzle" / "settings.json"
        self._settings = self._load()
        self._unlock_override = os.environ.get(UNLOCK_ALL_ENV) == "1"

    @property
    def settings(self) -> AppSettings:
        return self._settings

    @property
    def unlock_all_levels(self) -> bool:
        return self._unlock_override or self._settings.unlock_all_levels

    def remember_level(self, level_id: int) -> None:
        if self._settings.last_level_id == level_id:
            return
        self._settings.last_level_id = level_id
        self.save()

    def set_unlock_all_levels(self, enabled: bool) -> None:
        self._settings.unlock_all_levels = bool(enabled)
        self.save()

    def save(self) -> None:
        try:
            self._file_path.parent.mkdir(parents=True, exist_ok=True)
            self._file_path.write_text(json.dumps(asdict(self._settings), indent=2), encoding="utf-8")
        except OSError as e:
            logger.warning("Could not save settings to %s: %s", self._file_path, e)

    def _load(self) -> AppSettings:
        settings = AppSettings()
        if not self._file_path.exists():
            return settings
        try:
            payload = json.loads(self._file_path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, OSError) as e:
            logger.warning("Could not load settings from %s: %s", self._file_path, e)
            return settings
        if not isinstance(payload, dict):
            return settings
        settings.unlock_all_levels = payload.get("unlock_all_levels") is True
        last = payload.get("last_level_id")
        if isinstance(last, int) and not isinstance(last, bool) and last >= 1:
            settings.last_level_id = last
        return settings
