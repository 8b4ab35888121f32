"""Distance measures used to match tracked rectangles and points between frames."""

from __future__ import annotations

import math
from collections.abc import Sequence


def tracking_distance(a: Sequence[float], b: Sequence[float]) -> float:
    """Distance between two rectangles ``(x, y, width, height)`` or two points ``(x, y)``.

    For rectangles it is the distance between centres plus the distance
    between the (width, height) sizes.
    """
    if len(a) != len(b):
        raise ValueError("both arguments must be of the same kind")
    if len(a) == 2:
        return math.hypot(a[0] - b[0], a[1] - b[1])
    if len(a) == 4:
        ax, ay, aw, ah = a
        bx, by, bw, bh = b
        dx = (ax + aw / 2.0) - (bx + bw / 2.0)
        dy = (ay + ah / 2.0) - (by + bh / 2.0)
        return math.hypot(dx, dy) + math.hypot(aw - bw, ah - bh)
    raise ValueError("expected a point (x, y) or a rectangle (x, y, width, height)")