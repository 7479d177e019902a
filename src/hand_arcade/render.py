"""Declarative draw commands emitted by the games each tick.

Games never touch a drawing backend. They return a list of
:class:`DrawCommand` objects that a render sink turns into pixels (the
OpenCV window in the CLI) or JSON (the WebSocket server).
Coordinates are canvas pixels.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

# Palette
TARGET_RED = "rgba(255,0,0,0.7)"
FINGERTIP_ORANGE = "#ff9f00"
CIRCLE_BLUE = "#00c8ff"
SQUARE_ORANGE = "#ff9f00"
TRAIL_CYAN = "rgba(0,255,255,0.8)"
FLASH_YELLOW = "yellow"
CORRECT_GREEN = "green"
WRONG_RED = "red"
INPUT_BLUE = "rgba(100,150,255,0.8)"
IDLE_GREY = "rgba(100,100,100,0.5)"
BALL_OUTLINE = "#242725"
TEXT_WHITE = "white"


@dataclass
class DrawCommand:
    """A single drawing primitive."""
    type: str  # "circle", "rect", "polyline", "keypoint", "text"
    x: float = 0.0
    y: float = 0.0
    radius: float = 0.0
    size: float = 0.0
    fill: Optional[str] = None
    stroke: Optional[str] = None
    line_width: float = 2.0
    points: list[tuple[float, float]] = field(default_factory=list)
    text: str = ""
    font_size: int = 24

    def to_dict(self) -> dict:
        if self.type == "circle":
            return {
                "type": "circle",
                "x": round(self.x, 1),
                "y": round(self.y, 1),
                "radius": round(self.radius, 1),
                "fill": self.fill,
                "stroke": self.stroke,
                "width": self.line_width,
            }
        elif self.type == "rect":
            return {
                "type": "rect",
                "x": round(self.x, 1),
                "y": round(self.y, 1),
                "size": round(self.size, 1),
                "stroke": self.stroke,
                "width": self.line_width,
            }
        elif self.type == "polyline":
            return {
                "type": "polyline",
                "points": [[round(px, 1), round(py, 1)] for px, py in self.points],
                "stroke": self.stroke,
                "width": self.line_width,
            }
        elif self.type == "keypoint":
            return {
                "type": "keypoint",
                "x": round(self.x, 1),
                "y": round(self.y, 1),
                "fill": self.fill,
            }
        elif self.type == "text":
            return {
                "type": "text",
                "x": round(self.x, 1),
                "y": round(self.y, 1),
                "text": self.text,
                "size": self.font_size,
                "fill": self.fill,
            }
        return {"type": self.type}


def circle(x: float, y: float, radius: float, fill: Optional[str] = None,
           stroke: Optional[str] = None, line_width: float = 2.0) -> DrawCommand:
    return DrawCommand(type="circle", x=x, y=y, radius=radius, fill=fill,
                       stroke=stroke, line_width=line_width)


def square(center_x: float, center_y: float, size: float, stroke: str,
           line_width: float = 5.0) -> DrawCommand:
    """Square outline; ``x``/``y`` of the command are the top-left corner."""
    return DrawCommand(type="rect", x=center_x - size / 2, y=center_y - size / 2,
                       size=size, stroke=stroke, line_width=line_width)


def trail(points, stroke: str = TRAIL_CYAN, line_width: float = 3.0) -> DrawCommand:
    return DrawCommand(type="polyline", points=list(points), stroke=stroke,
                       line_width=line_width)


def keypoint(point: tuple[float, float], fill: str = FINGERTIP_ORANGE) -> DrawCommand:
    return DrawCommand(type="keypoint", x=point[0], y=point[1], radius=6, fill=fill)


def text(x: float, y: float, content: str, font_size: int = 24,
         fill: str = TEXT_WHITE) -> DrawCommand:
    return DrawCommand(type="text", x=x, y=y, text=content, font_size=font_size, fill=fill)
