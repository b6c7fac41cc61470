"""Shared test fixtures."""

from __future__ import annotations

import pytest

from overlay_geometry import Color, Rect


class RecordingSurface:
    """Drawing surface stand-in that records every call in order."""

    def __init__(self) -> None:
        self.calls = []

    def draw_rect(self, x0, y0, x1, y1, color) -> None:
        self.calls.append(("rect", (x0, y0, x1, y1), color))

    def draw_line(self, x0, y0, x1, y1, color) -> None:
        self.calls.append(("line", (x0, y0, x1, y1), color))

    def draw_text(self, x, y, text, color, align) -> None:
        self.calls.append(("text", (x, y, text, align), color))

    @property
    def kinds(self) -> list:
        return [call[0] for call in self.calls]


@pytest.fixture
def white() -> Color:
    return Color(1.0, 1.0, 1.0)


@pytest.fixture
def square_canvas() -> Rect:
    return Rect.from_size(1000, 1000)


@pytest.fixture
def recorder() -> RecordingSurface:
    return RecordingSurface()
