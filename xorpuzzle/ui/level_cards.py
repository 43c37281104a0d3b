"""Level selection UI: LevelCard."""

from __future__ import annotations

from typing import Callable, Optional

from PySide6.QtCore import Qt
from PySide6.QtWidgets import QPushButton, QWidget

from xorpuzzle.ui.colors import PuzzleColors
from xorpuzzle.ui.models import LevelState


class LevelCard(QPushButton):
    """A clickable level tile: number, title, star, lock."""

    def __init__(
        self,
        state: LevelState,
        *,
        on_click: Callable[[int], None],
        parent: Optional[QWidget] = None,
    ) -> None:
        super().__init__(parent)
        self._level_id = state.definition.level_id
        self._on_click = on_click
        self.setMinimumSize(120, 84)
        self.setCursor(Qt.PointingHandCursor if state.unlocked else Qt.ForbiddenCursor)
        self.setEnabled(state.unlocked)

        badge = "★" if state.starred else ("🔒" if not state.unlocked else "☆")
        self.setText(f"{self._level_id}  {badge}\n{state.definition.title}")

        border = PuzzleColors.STAR if state.is_current else "transparent"
        self.setStyleSheet(
            f"""
            QPushButton {{
                background: {PuzzleColors.CARD_BG};
                color: {PuzzleColors.TEXT_PRIMARY if state.unlocked else PuzzleColors.TEXT_MUTED};
                border: 2px solid {border};
                border-radius: 14px;
                font-size: 14px;
                padding: 8px;
            }}
            QPushButton:hover {{
                background: {PuzzleColors.CARD_BG_HOVER};
            }}
            """
        )
        self.clicked.connect(lambda: self._on_click(self._level_id))

    @property
    def level_id(self) -> int:
        return self._level_id
