"""Puzzle screen widgets: the bulb and the switch buttons."""

from __future__ import annotations

from typing import Optional

from PySide6.QtCore import QPointF, Qt
from PySide6.QtGui import QColor, QPainter, QPen, QRadialGradient
from PySide6.QtWidgets import QPushButton, QSizePolicy, QWidget

from xorpuzzle.ui.colors import PuzzleColors, blend_hex


class BulbWidget(QWidget):
    """Round bulb painted lit or dark, with a soft halo when lit."""

    def __init__(self, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self._lit = False
        self.setMinimumSize(140, 140)
        self.setSizePolicy(QSizePolicy.Policy.Expanding, QSizePolicy.Policy.Expanding)

    def set_lit(self, lit: bool) -> None:
        if lit == self._lit:
            return
        self._lit = lit
        self.update()

    def is_lit(self) -> bool:
        return self._lit

    def paintEvent(self, event) -> None:
        super().paintEvent(event)
        painter = QPainter(self)
        painter.setRenderHint(QPainter.Antialiasing, True)

        side = min(self.width(), self.height())
        radius = side * 0.32
        center = QPointF(self.width() / 2, self.height() / 2)

        if self._lit:
            halo = QRadialGradient(center, side / 2)
            halo.setColorAt(0.0, QColor(PuzzleColors.BULB_GLOW))
            halo.setColorAt(1.0, QColor(0, 0, 0, 0))
            painter.setPen(Qt.NoPen)
            painter.setBrush(halo)
            painter.drawEllipse(center, side / 2, side / 2)

        fill = PuzzleColors.BULB_ON if self._lit else PuzzleColors.BULB_OFF
        painter.setBrush(QColor(fill))
        painter.setPen(QPen(QColor(blend_hex(fill, "#000000", 0.35)), 3))
        painter.drawEllipse(center, radius, radius)


class SwitchButton(QPushButton):
    """Checkable button mirroring one switch of the session."""

    def __init__(self, index: int, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self._index = index
        self.setCheckable(True)
        self.setCursor(Qt.PointingHandCursor)
        self.setMinimumSize(72, 96)
        self.sync(False, True)

    @property
    def index(self) -> int:
        return self._index

    def sync(self, value: bool, enabled: bool) -> None:
        """Show the switch state without emitting clicked/toggled."""
        self.blockSignals(True)
        self.setChecked(value)
        self.blockSignals(False)
        self.setEnabled(enabled)
        name = "abcdef"[self._index] if self._index < 6 else str(self._index)
        self.setText(f"{name}\n{'ON' if value else 'OFF'}")
        if not enabled:
            bg = PuzzleColors.SWITCH_LOCKED
        else:
            bg = PuzzleColors.SWITCH_ON if value else PuzzleColors.SWITCH_OFF
        self.setStyleSheet(
            f"""
            QPushButton {{
                background: {bg};
                color: {PuzzleColors.TEXT_PRIMARY};
                border-radius: 12px;
                font-size: 18px;
                font-weight: 700;
            }}
            QPushButton:hover {{
                background: {blend_hex(bg, "#ffffff", 0.12)};
            }}
            """
        )
