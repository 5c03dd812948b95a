"""World-space value types and the world-to-pixel mapping."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional

from .errors import InvalidDimensions


@dataclass(frozen=True)
class Point:
    """A point in world space."""

    x: float
    y: float

    def is_finite(self) -> bool:
        return math.isfinite(self.x) and math.isfinite(self.y)


@dataclass(frozen=True)
class WorldRect:
    """Viewport in world space, anchored at ``(x0, y0)``."""

    x0: float
    y0: float
    width: float
    height: float

    def __post_init__(self) -> None:
        if not (self.width > 0 and self.height > 0):
            raise InvalidDimensions(
                f"world extents must be positive, got {self.width} x {self.height}"
            )

    @property
    def x1(self) -> float:
        return self.x0 + self.width

    @property
    def y1(self) -> float:
        return self.y0 + self.height

    def contains(self, point: Point) -> bool:
        return self.x0 <= point.x < self.x1 and self.y0 <= point.y < self.y1

    def point_at(self, u: float, v: float) -> Point:
        """Return the point at fractional position ``(u, v)`` inside the rect."""

        return Point(self.x0 + u * self.width, self.y0 + v * self.height)

    def to_pixel(self, point: Point, x_res: int, y_res: int) -> Optional[tuple[int, int]]:
        """Map ``point`` to ``(row, col)`` on an ``x_res`` by ``y_res`` grid.

        Both axes are half-open: the origin lands on ``(0, 0)`` and the far
        corner ``(x0 + width, y0 + height)`` falls outside the grid. Returns
        ``None`` for points outside the grid or with non-finite coordinates,
        including finite points whose scaled position overflows.
        """

        if not point.is_finite():
            return None
        fx = (point.x - self.x0) / self.width * x_res
        fy = (point.y - self.y0) / self.height * y_res
        # NaN and inf fail both comparisons.
        if 0.0 <= fx < x_res and 0.0 <= fy < y_res:
            return int(fy), int(fx)
        return None
