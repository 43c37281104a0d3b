from __future__ import annotations

import logging
from typing import Callable, List, Optional

from PySide6.QtCore import Qt
from PySide6.QtGui import QCloseEvent
from PySide6.QtWidgets import (
    QCheckBox,
    QFrame,
    QGridLayout,
    QHBoxLayout,
    QLabel,
    QMainWindow,
    QMessageBox,
    QProgressBar,
    QPushButton,
    QScrollArea,
    QStackedWidget,
    QVBoxLayout,
    QWidget,
)

from xorpuzzle.core.levels import LevelRepository, WinCondition
from xorpuzzle.core.progress import LevelManager
from xorpuzzle.core.session import LevelSession, Phase
from xorpuzzle.core.settings import SettingsStore
from xorpuzzle.ui.colors import PuzzleColors, budget_color
from xorpuzzle.ui.level_cards import LevelCard
from xorpuzzle.ui.models import LevelState, budget_label, build_level_states
from xorpuzzle.ui.puzzle_widgets import BulbWidget, SwitchButton
from xorpuzzle.ui.qt_scheduler import QtScheduler

logger = logging.getLogger(__name__)

GRID_COLUMNS = 6


class MainWindow(QMainWindow):
    """Main application window: level select and the puzzle screen.

    The window owns at most one :class:`LevelSession` at a time and redraws
    the puzzle screen from it whenever the session reports a change.
    """

    def __init__(
        self,
        levels: LevelRepository,
        level_manager: LevelManager,
        settings_store: SettingsStore,
    ) -> None:
        super().__init__()
        self._levels_repo = levels
        self._level_manager = level_manager
        self._settings_store = settings_store
        self._scheduler = QtScheduler(self)
        self._session: Optional[LevelSession] = None
        self._unsubscribe: Optional[Callable[[], None]] = None

        self._stack: Optional[QStackedWidget] = None
        self._home_screen: Optional[QWidget] = None
        self._puzzle_screen: Optional[QWidget] = None
        self._levels_grid: Optional[QGridLayout] = None
        self._stars_label: Optional[QLabel] = None
        self._unlock_all_checkbox: Optional[QCheckBox] = None
        self._continue_button: Optional[QPushButton] = None

        self._level_title_label: Optional[QLabel] = None
        self._formula_label: Optional[QLabel] = None
        self._goal_label: Optional[QLabel] = None
        self._status_label: Optional[QLabel] = None
        self._bulb: Optional[BulbWidget] = None
        self._switch_row: Optional[QHBoxLayout] = None
        self._switch_buttons: List[SwitchButton] = []
        self._budget_bar: Optional[QProgressBar] = None

        self.setWindowTitle("XOR")
        self.resize(960, 680)
        self._build_ui()
        self._show_home_screen()

    # ---- construction ----

    def _build_ui(self) -> None:
        self._stack = QStackedWidget()
        self._stack.setStyleSheet(
            f"""
            QStackedWidget > QWidget {{
                background: qlineargradient(x1:0, y1:0, x2:0, y2:1,
                    stop:0 {PuzzleColors.BG_TOP}, stop:1 {PuzzleColors.BG_BOTTOM});
            }}
            QLabel {{ color: {PuzzleColors.TEXT_PRIMARY}; }}
            QCheckBox {{ color: {PuzzleColors.TEXT_SECONDARY}; }}
            """
        )
        self._home_screen = self._build_home_screen()
        self._puzzle_screen = self._build_puzzle_screen()
        self._stack.addWidget(self._home_screen)
        self._stack.addWidget(self._puzzle_screen)
        self.setCentralWidget(self._stack)

    def _build_home_screen(self) -> QWidget:
        screen = QWidget()
        layout = QVBoxLayout(screen)
        layout.setContentsMargins(32, 24, 32, 24)
        layout.setSpacing(16)

        header = QHBoxLayout()
        title = QLabel("XOR")
        title.setStyleSheet("font-size: 36px; font-weight: 900;")
        self._stars_label = QLabel("")
        self._stars_label.setStyleSheet(f"font-size: 18px; color: {PuzzleColors.STAR};")
        header.addWidget(title)
        header.addStretch(1)
        header.addWidget(self._stars_label)
        layout.addLayout(header)

        grid_host = QWidget()
        self._levels_grid = QGridLayout(grid_host)
        self._levels_grid.setSpacing(12)
        scroll = QScrollArea()
        scroll.setWidgetResizable(True)
        scroll.setFrameShape(QFrame.Shape.NoFrame)
        scroll.setWidget(grid_host)
        layout.addWidget(scroll, 1)

        footer = QHBoxLayout()
        self._unlock_all_checkbox = QCheckBox("Unlock all levels")
        self._unlock_all_checkbox.setChecked(self._settings_store.unlock_all_levels)
        self._unlock_all_checkbox.toggled.connect(self._set_unlock_all)
        reset_button = QPushButton("Reset stars")
        reset_button.clicked.connect(self._reset_progress)
        footer.addWidget(self._unlock_all_checkbox)
        footer.addStretch(1)
        self._continue_button = QPushButton("")
        self._continue_button.clicked.connect(self._continue_last_level)
        footer.addWidget(self._continue_button)
        footer.addWidget(reset_button)
        layout.addLayout(footer)
        return screen

    def _build_puzzle_screen(self) -> QWidget:
        screen = QWidget()
        layout = QVBoxLayout(screen)
        layout.setContentsMargins(32, 24, 32, 24)
        layout.setSpacing(14)

        header = QHBoxLayout()
        back_button = QPushButton("← Levels")
        back_button.clicked.connect(self._show_home_screen)
        self._level_title_label = QLabel("")
        self._level_title_label.setStyleSheet("font-size: 24px; font-weight: 800;")
        reset_button = QPushButton("Reset")
        reset_button.clicked.connect(self._reset_session)
        header.addWidget(back_button)
        header.addSpacing(12)
        header.addWidget(self._level_title_label, 1)
        header.addWidget(reset_button)
        layout.addLayout(header)

        self._formula_label = QLabel("")
        self._formula_label.setAlignment(Qt.AlignCenter)
        self._formula_label.setStyleSheet(f"font-size: 20px; font-family: monospace; color: {PuzzleColors.PRIMARY_LIGHT};")
        self._goal_label = QLabel("")
        self._goal_label.setAlignment(Qt.AlignCenter)
        self._goal_label.setStyleSheet(f"color: {PuzzleColors.TEXT_SECONDARY};")
        layout.addWidget(self._formula_label)
        layout.addWidget(self._goal_label)

        self._bulb = BulbWidget()
        layout.addWidget(self._bulb, 1)

        self._budget_bar = QProgressBar()
        self._budget_bar.setTextVisible(True)
        self._budget_bar.setFixedHeight(18)
        layout.addWidget(self._budget_bar)

        self._switch_row = QHBoxLayout()
        self._switch_row.setSpacing(16)
        layout.addLayout(self._switch_row)

        self._status_label = QLabel("")
        self._status_label.setAlignment(Qt.AlignCenter)
        self._status_label.setStyleSheet("font-size: 18px; font-weight: 700;")
        layout.addWidget(self._status_label)
        return screen

    # ---- home screen ----

    def _build_level_states(self) -> List[LevelState]:
        return build_level_states(
            self._levels_repo.all(),
            self._level_manager.has_star_for_level,
            unlock_all=self._settings_store.unlock_all_levels,
        )

    def _refresh_levels_list(self) -> None:
        """Rebuild the level grid and the star counter."""
        states = self._build_level_states()
        if self._levels_grid is not None:
            while self._levels_grid.count():
                item = self._levels_grid.takeAt(0)
                w = item.widget()
                if w is not None:
                    w.setParent(None)
                    w.deleteLater()
            for idx, state in enumerate(states):
                card = LevelCard(state, on_click=self._start_level)
                self._levels_grid.addWidget(card, idx // GRID_COLUMNS, idx % GRID_COLUMNS)
        if self._stars_label is not None:
            starred = sum(1 for st in states if st.starred)
            self._stars_label.setText(f"★ {starred}/{len(states)}")
        if self._continue_button is not None:
            last = self._last_playable_level(states)
            self._continue_button.setVisible(last is not None)
            if last is not None:
                self._continue_button.setText(f"Continue level {last}")

    def _last_playable_level(self, states: List[LevelState]) -> Optional[int]:
        last = self._settings_store.settings.last_level_id
        for st in states:
            if st.definition.level_id == last and st.unlocked:
                return last
        return None

    def _continue_last_level(self) -> None:
        last = self._last_playable_level(self._build_level_states())
        if last is not None:
            self._start_level(last)

    def _set_unlock_all(self, enabled: bool) -> None:
        self._settings_store.set_unlock_all_levels(enabled)
        self._refresh_levels_list()

    def _reset_progress(self) -> None:
        """Ask for confirmation and, if confirmed, clear every star."""
        answer = QMessageBox.question(
            self,
            "Reset stars",
            "Clear the stars of every level?",
            QMessageBox.StandardButton.Yes | QMessageBox.StandardButton.No,
            QMessageBox.StandardButton.No,
        )
        if answer == QMessageBox.StandardButton.Yes:
            self._level_manager.reset_all_stars()
            self._refresh_levels_list()

    # ---- puzzle screen ----

    def _start_level(self, level_id: int) -> None:
        """Create a session for *level_id* and switch to the puzzle screen."""
        self._close_session()
        definition = self._levels_repo.get(level_id)
        self._settings_store.remember_level(level_id)
        self._session = LevelSession(definition, self._scheduler, self._level_manager)
        self._unsubscribe = self._session.subscribe(self._render_session)

        self._level_title_label.setText(f"Level {level_id}: {definition.title}")
        self._formula_label.setText(f"bulb = {definition.expression}")
        goal = "Light the bulb" if definition.win_when is WinCondition.LIT else "Switch the bulb off"
        self._goal_label.setText(goal)

        while self._switch_row.count():
            item = self._switch_row.takeAt(0)
            w = item.widget()
            if w is not None:
                w.setParent(None)
                w.deleteLater()
        self._switch_buttons = []
        self._switch_row.addStretch(1)
        for i in range(definition.switch_count):
            button = SwitchButton(i)
            button.clicked.connect(lambda _checked=False, index=i: self._toggle(index))
            self._switch_row.addWidget(button)
            self._switch_buttons.append(button)
        self._switch_row.addStretch(1)

        self._budget_bar.setVisible(definition.is_governed)
        logger.info("Entering level %d", level_id)
        self._render_session(self._session)
        self._stack.setCurrentWidget(self._puzzle_screen)

    def _toggle(self, index: int) -> None:
        if self._session is not None:
            self._session.toggle(index)
            # A refused toggle does not notify; redraw to undo the button's own check.
            self._render_session(self._session)

    def _reset_session(self) -> None:
        if self._session is not None:
            self._session.reset()

    def _render_session(self, session: LevelSession) -> None:
        if session is not self._session:
            return
        for button, switch in zip(self._switch_buttons, session.switches):
            button.sync(switch.value, switch.enabled)
        self._bulb.set_lit(session.bulb_output)
        self._render_budget(session)

        phase = session.phase
        if phase is Phase.ACTIVE:
            text, color = "", PuzzleColors.TEXT_PRIMARY
        elif phase is Phase.WIN_PENDING:
            text, color = "Solved!", PuzzleColors.BULB_ON
        elif phase is Phase.WON:
            text, color = "★ Level complete", PuzzleColors.STAR
        elif session.lost_reason == "time":
            text, color = "Out of time. Press Reset to try again.", PuzzleColors.DANGER
        else:
            text, color = "Out of moves. Press Reset to try again.", PuzzleColors.DANGER
        self._status_label.setText(text)
        self._status_label.setStyleSheet(f"font-size: 18px; font-weight: 700; color: {color};")

    def _render_budget(self, session: LevelSession) -> None:
        limits = session.definition.limits
        if limits is None or limits.is_empty:
            return
        seconds_left = None
        if session.progress is not None:
            used = session.progress
            seconds_left = limits.time_limit_seconds - session.elapsed_seconds
            self._budget_bar.setRange(0, 1000)
            self._budget_bar.setValue(int(round((1.0 - used) * 1000)))
        else:
            left = session.steps_remaining or 0
            used = 1.0 - left / limits.max_toggles
            self._budget_bar.setRange(0, limits.max_toggles)
            self._budget_bar.setValue(left)
        self._budget_bar.setFormat(budget_label(seconds_left, session.steps_remaining))
        self._budget_bar.setStyleSheet(
            f"QProgressBar::chunk {{ background: {budget_color(used)}; border-radius: 6px; }}"
        )

    def _close_session(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        if self._session is not None:
            self._session.close()
            self._session = None

    def _show_home_screen(self) -> None:
        """Leave the current level (if any) and show the level grid."""
        self._close_session()
        self._refresh_levels_list()
        if self._stack is not None and self._home_screen is not None:
            self._stack.setCurrentWidget(self._home_screen)

    def closeEvent(self, event: QCloseEvent) -> None:
        """Persist progress when closing the app."""
        self._close_session()
        self._level_manager.save()
        self._settings_store.save()
        super().closeEvent(event)
