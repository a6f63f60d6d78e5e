from __future__ import annotations

import logging
from typing import Optional

from PySide6.QtCore import Qt
from PySide6.QtWidgets import (
    QGridLayout,
    QHBoxLayout,
    QLabel,
    QMainWindow,
    QMessageBox,
    QPushButton,
    QScrollArea,
    QStackedWidget,
    QVBoxLayout,
    QWidget,
)

from dyadikos.core.progress import ProgressTracker
from dyadikos.core.puzzles import Puzzle, next_puzzle, puzzle_by_sides_and_number, puzzle_count_for_sides
from dyadikos.core.session import DrawOutcome, PuzzleSession
from dyadikos.core.shapes import ShapeRepository
from dyadikos.ui.colors import BoardColors
from dyadikos.ui.models import build_puzzle_states, build_shape_states
from dyadikos.ui.polygon_canvas import PolygonCanvas

logger = logging.getLogger(__name__)


def _clear_layout(layout) -> None:
    while layout.count():
        item = layout.takeAt(0)
        w = item.widget()
        if w is not None:
            w.setParent(None)
            w.deleteLater()


class MainWindow(QMainWindow):
    """Three screens: shape tiers, the puzzles of one shape, and the board."""

    def __init__(self, shapes: ShapeRepository, tracker: ProgressTracker) -> None:
        super().__init__()
        self._shapes = shapes
        self._tracker = tracker
        self._session: Optional[PuzzleSession] = None
        self._current_sides: Optional[int] = None

        self.setWindowTitle("Dyadikos")
        self.setStyleSheet(
            f"""
            QWidget {{ background: {BoardColors.BG}; color: {BoardColors.TEXT_PRIMARY}; }}
            QPushButton {{
                background: {BoardColors.SURFACE};
                border: 1px solid {BoardColors.SURFACE_BORDER};
                border-radius: 10px;
                padding: 10px;
            }}
            QPushButton:disabled {{ color: {BoardColors.TEXT_SECONDARY}; }}
            QLabel#subtitle {{ color: {BoardColors.TEXT_SECONDARY}; }}
            QLabel#locked {{ color: {BoardColors.TEXT_LOCKED}; font-weight: 600; }}
            """
        )

        self._stack = QStackedWidget()
        self._home_screen = self._build_home_screen()
        self._shape_screen = self._build_shape_screen()
        self._play_screen = self._build_play_screen()
        self._stack.addWidget(self._home_screen)
        self._stack.addWidget(self._shape_screen)
        self._stack.addWidget(self._play_screen)
        self.setCentralWidget(self._stack)

        self._unsubscribe = self._tracker.subscribe(lambda _tracker: self._refresh_lists())
        self._refresh_lists()

    # ------------------------------------------------------------------
    # Home: shape tiers
    # ------------------------------------------------------------------

    def _build_home_screen(self) -> QWidget:
        screen = QWidget()
        layout = QVBoxLayout(screen)
        layout.setContentsMargins(16, 32, 16, 16)

        title = QLabel("Dyadikos")
        title.setStyleSheet("font-size: 30px; font-weight: bold;")
        layout.addWidget(title)

        self._home_summary = QLabel("")
        self._home_summary.setObjectName("subtitle")
        layout.addWidget(self._home_summary)

        scroll = QScrollArea()
        scroll.setWidgetResizable(True)
        holder = QWidget()
        self._shape_list_layout = QVBoxLayout(holder)
        scroll.setWidget(holder)
        layout.addWidget(scroll, 1)

        reset_button = QPushButton("Reset progress")
        reset_button.clicked.connect(self._confirm_reset)
        layout.addWidget(reset_button)
        return screen

    def _refresh_shape_list(self) -> None:
        _clear_layout(self._shape_list_layout)
        states = build_shape_states(self._tracker)
        done = sum(1 for st in states if st.is_complete)
        self._home_summary.setText(f"{done}/{len(states)} shapes complete")
        for st in states:
            label = f"{st.shape.name}  ·  {st.completed}/{st.total}"
            if not st.unlocked:
                label += "  ·  Locked"
            elif st.is_complete:
                label += "  ·  ✓"
            elif st.is_current:
                label += "  ·  Next"
            button = QPushButton(label)
            button.setEnabled(st.unlocked)
            button.clicked.connect(lambda _checked=False, sides=st.shape.sides: self._open_shape(sides))
            self._shape_list_layout.addWidget(button)
        self._shape_list_layout.addStretch(1)

    # ------------------------------------------------------------------
    # Shape: puzzle grid
    # ------------------------------------------------------------------

    def _build_shape_screen(self) -> QWidget:
        screen = QWidget()
        layout = QVBoxLayout(screen)
        layout.setContentsMargins(16, 24, 16, 16)

        back = QPushButton("← Shapes")
        back.clicked.connect(lambda: self._stack.setCurrentWidget(self._home_screen))
        layout.addWidget(back, 0, Qt.AlignLeft)

        self._shape_title = QLabel("")
        self._shape_title.setStyleSheet("font-size: 30px; font-weight: bold;")
        self._shape_subtitle = QLabel("")
        self._shape_subtitle.setObjectName("subtitle")
        self._shape_locked = QLabel("Complete previous shape to unlock.")
        self._shape_locked.setObjectName("locked")
        layout.addWidget(self._shape_title)
        layout.addWidget(self._shape_subtitle)
        layout.addWidget(self._shape_locked)

        scroll = QScrollArea()
        scroll.setWidgetResizable(True)
        holder = QWidget()
        self._puzzle_grid = QGridLayout(holder)
        scroll.setWidget(holder)
        layout.addWidget(scroll, 1)
        return screen

    def _open_shape(self, sides: int) -> None:
        self._current_sides = sides
        self._refresh_puzzle_grid()
        self._stack.setCurrentWidget(self._shape_screen)

    def _refresh_puzzle_grid(self) -> None:
        sides = self._current_sides
        if sides is None:
            return
        _clear_layout(self._puzzle_grid)
        self._shape_title.setText(self._shapes.name_for(sides))
        position = self._shapes.index_of(sides) + 1
        self._shape_subtitle.setText(
            f"Shape {position} of {len(self._shapes.all())} · {puzzle_count_for_sides(sides)} Puzzles"
        )
        self._shape_locked.setVisible(not self._tracker.is_shape_unlocked(sides))

        columns = 2
        for idx, st in enumerate(build_puzzle_states(self._tracker, sides)):
            text = f"Puzzle {st.puzzle.puzzle_number}\nGoal {st.puzzle.goal_number}"
            if not st.unlocked:
                text += "\nLocked"
            elif st.completed:
                text += "\nComplete"
            button = QPushButton(text)
            button.setEnabled(st.unlocked)
            button.clicked.connect(
                lambda _checked=False, n=st.puzzle.puzzle_number: self._open_puzzle(sides, n)
            )
            self._puzzle_grid.addWidget(button, idx // columns, idx % columns)

    # ------------------------------------------------------------------
    # Play: the board
    # ------------------------------------------------------------------

    def _build_play_screen(self) -> QWidget:
        screen = QWidget()
        layout = QVBoxLayout(screen)
        layout.setContentsMargins(16, 24, 16, 16)

        header = QHBoxLayout()
        back = QPushButton("← Puzzles")
        back.clicked.connect(self._leave_puzzle)
        header.addWidget(back, 0)
        header.addStretch(1)

        self._goal_label = QLabel("")
        self._goal_label.setStyleSheet(f"font-size: 22px; font-weight: 800; color: {BoardColors.GOAL};")
        header.addWidget(self._goal_label)
        header.addStretch(1)

        value_box = QVBoxLayout()
        self._binary_label = QLabel("")
        self._binary_label.setStyleSheet("font-size: 22px; font-family: monospace;")
        self._decimal_label = QLabel("")
        self._decimal_label.setObjectName("subtitle")
        value_box.addWidget(self._binary_label, 0, Qt.AlignRight)
        value_box.addWidget(self._decimal_label, 0, Qt.AlignRight)
        header.addLayout(value_box)
        layout.addLayout(header)

        self._description_label = QLabel("")
        self._description_label.setObjectName("subtitle")
        layout.addWidget(self._description_label)

        self._canvas = PolygonCanvas()
        self._canvas.connect_requested.connect(self._on_connect_requested)
        layout.addWidget(self._canvas, 1)

        footer = QHBoxLayout()
        self._success_label = QLabel("Solved!")
        self._success_label.setStyleSheet(f"font-size: 18px; font-weight: 800; color: {BoardColors.SUCCESS};")
        self._next_button = QPushButton("Next puzzle")
        self._next_button.clicked.connect(self._go_to_next_puzzle)
        footer.addWidget(self._success_label)
        footer.addStretch(1)
        footer.addWidget(self._next_button)
        layout.addLayout(footer)
        return screen

    def _open_puzzle(self, sides: int, puzzle_number: int) -> None:
        puzzle = puzzle_by_sides_and_number(sides, puzzle_number)
        if puzzle is None:
            QMessageBox.information(self, "Dyadikos", "Puzzle not found.")
            return
        if not self._tracker.is_puzzle_unlocked(sides, puzzle_number):
            QMessageBox.information(self, "Dyadikos", "This puzzle is locked.")
            return
        self._current_sides = sides
        self._session = PuzzleSession(puzzle, on_solved=self._on_solved)
        self._goal_label.setText(f"Goal {puzzle.goal_number}")
        self._description_label.setText(puzzle.description)
        self._canvas.set_sides(sides)
        self._canvas.set_frozen(False)
        self._refresh_board()
        self._stack.setCurrentWidget(self._play_screen)

    def _on_connect_requested(self, a: int, b: int) -> None:
        if self._session is None:
            return
        outcome = self._session.connect(a, b)
        if outcome.accepted:
            self._refresh_board()
        elif outcome is not DrawOutcome.FROZEN:
            logger.debug("Chord %d-%d ignored: %s", a, b, outcome.value)

    def _on_solved(self, puzzle: Puzzle) -> None:
        self._tracker.mark_puzzle_complete(puzzle.id)

    def _refresh_board(self) -> None:
        session = self._session
        if session is None:
            return
        value = session.value
        self._binary_label.setText(value.binary)
        self._decimal_label.setText(str(value.decimal))
        self._canvas.set_chords(session.chord_states())
        self._canvas.set_frozen(session.is_success)
        self._success_label.setVisible(session.is_success)
        self._next_button.setVisible(session.is_success)

    def _go_to_next_puzzle(self) -> None:
        if self._session is None:
            return
        following = next_puzzle(self._session.puzzle)
        if following is None:
            self._leave_puzzle()
            return
        self._open_puzzle(following.sides, following.puzzle_number)

    def _leave_puzzle(self) -> None:
        self._session = None
        if self._current_sides is not None:
            self._open_shape(self._current_sides)
        else:
            self._stack.setCurrentWidget(self._home_screen)

    # ------------------------------------------------------------------

    def _refresh_lists(self) -> None:
        self._refresh_shape_list()
        self._refresh_puzzle_grid()

    def _confirm_reset(self) -> None:
        answer = QMessageBox.question(
            self,
            "Reset progress",
            "Clear all completed puzzles? Only the first shape will stay unlocked.",
        )
        if answer == QMessageBox.Yes:
            self._tracker.reset_progress()

    def closeEvent(self, event) -> None:
        self._unsubscribe()
        super().closeEvent(event)
