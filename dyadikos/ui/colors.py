"""Theme colors for the UI."""


class BoardColors:
    """Dark board palette."""

    BG = "#262626"
    SURFACE = "#333333"
    SURFACE_BORDER = "#444444"

    TEXT_PRIMARY = "#ffffff"
    TEXT_SECONDARY = "#aaaaaa"
    TEXT_LOCKED = "#fca5a5"

    POINT = "#e5e7eb"
    POINT_ACTIVE = "#38bdf8"
    CHORD = "#9ca3af"
    CHORD_COMPLETE = "#22c55e"
    CHORD_PENDING = "#7e838c"
    DRAG_LINE = "#38bdf8"

    SUCCESS = "#22c55e"
    GOAL = "#f59e0b"
