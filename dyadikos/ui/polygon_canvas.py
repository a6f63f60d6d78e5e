"""Board widget: polygon vertices, drawn chords and the drag line."""

from __future__ import annotations

from typing import List, Optional

from PySide6.QtCore import QPointF, Qt, Signal
from PySide6.QtGui import QColor, QMouseEvent, QPainter, QPen
from PySide6.QtWidgets import QWidget

from dyadikos.core.geometry import Point, layout_points, point_at
from dyadikos.core.session import ChordState
from dyadikos.ui.colors import BoardColors


class PolygonCanvas(QWidget):
    """Draws the board and turns a drag between two vertices into a connect request."""

    connect_requested = Signal(int, int)

    POINT_RADIUS = 10

    def __init__(self, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self._sides = 0
        self._points: List[Point] = []
        self._chords: List[ChordState] = []
        self._frozen = False
        self._drag_from: Optional[int] = None
        self._drag_to: Optional[QPointF] = None
        self.setMinimumSize(240, 240)
        self.setMouseTracking(False)

    def set_sides(self, sides: int) -> None:
        self._sides = sides
        self._drag_from = None
        self._drag_to = None
        self._relayout()

    def set_chords(self, chords: List[ChordState]) -> None:
        self._chords = list(chords)
        self.update()

    def set_frozen(self, frozen: bool) -> None:
        self._frozen = frozen
        if frozen:
            self._drag_from = None
            self._drag_to = None
        self.update()

    def resizeEvent(self, event) -> None:
        super().resizeEvent(event)
        self._relayout()

    def _relayout(self) -> None:
        if self._sides < 3:
            self._points = []
        else:
            self._points = layout_points(self._sides, self.width(), self.height())
        self.update()

    def mousePressEvent(self, event: QMouseEvent) -> None:
        if self._frozen or event.button() != Qt.LeftButton:
            return
        pos = event.position()
        hit = point_at(self._points, pos.x(), pos.y())
        if hit is not None:
            self._drag_from = hit.index
            self._drag_to = QPointF(hit.x, hit.y)
            self.update()

    def mouseMoveEvent(self, event: QMouseEvent) -> None:
        if self._drag_from is None:
            return
        self._drag_to = event.position()
        self.update()

    def mouseReleaseEvent(self, event: QMouseEvent) -> None:
        if self._drag_from is None:
            return
        origin = self._drag_from
        pos = event.position()
        self._drag_from = None
        self._drag_to = None
        target = point_at(self._points, pos.x(), pos.y(), exclude=origin)
        if target is not None:
            self.connect_requested.emit(origin, target.index)
        self.update()

    def paintEvent(self, event) -> None:
        super().paintEvent(event)
        painter = QPainter(self)
        painter.setRenderHint(QPainter.Antialiasing, True)
        painter.fillRect(self.rect(), QColor(BoardColors.BG))
        if not self._points:
            return

        pending = QColor(BoardColors.CHORD_PENDING)
        for state in self._chords:
            if not state.chord.fits(len(self._points)):
                continue
            a = self._points[state.chord.start]
            b = self._points[state.chord.end]
            color = QColor(BoardColors.CHORD_COMPLETE) if state.complete else pending
            painter.setPen(QPen(color, 4 if state.complete else 3))
            painter.drawLine(QPointF(a.x, a.y), QPointF(b.x, b.y))

        if self._drag_from is not None and self._drag_to is not None:
            origin = self._points[self._drag_from]
            pen = QPen(QColor(BoardColors.DRAG_LINE), 2, Qt.DashLine)
            painter.setPen(pen)
            painter.drawLine(QPointF(origin.x, origin.y), self._drag_to)

        r = self.POINT_RADIUS
        for point in self._points:
            active = point.index == self._drag_from
            painter.setPen(Qt.NoPen)
            painter.setBrush(QColor(BoardColors.POINT_ACTIVE if active else BoardColors.POINT))
            painter.drawEllipse(QPointF(point.x, point.y), r, r)
