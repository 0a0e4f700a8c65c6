"""Pure geometric predicates on points, segments and rectangles.

Stateless and side-effect free. Used by the zone registry for
containment queries and by agents for avoidance routing.

Conventions:
  - point_in_rect is STRICT (boundary points are outside).
  - Parallel segments never intersect (zero denominator → False),
    even when collinear and overlapping.
"""

from __future__ import annotations

from typing import Tuple

from quarantine_epi.types import Point, Rect


def point_in_rect(x: float, y: float, rect: Rect) -> bool:
    """True if (x, y) lies strictly inside ``rect``."""
    return rect.x < x < rect.right and rect.y < y < rect.bottom


def point_near_rect(x: float, y: float, rect: Rect, margin: float) -> bool:
    """True if (x, y) lies strictly inside ``rect`` grown by ``margin`` on every side."""
    return (
        rect.x - margin < x < rect.right + margin
        and rect.y - margin < y < rect.bottom + margin
    )


def segments_intersect(p1: Point, p2: Point, p3: Point, p4: Point) -> bool:
    """Parametric intersection test for segments p1–p2 and p3–p4.

    Solves p1 + ua·(p2−p1) = p3 + ub·(p4−p3); the segments meet when
    both ua and ub fall in [0, 1].

    Returns:
        False for parallel segments (denominator zero).
    """
    denom = (p4[1] - p3[1]) * (p2[0] - p1[0]) - (p4[0] - p3[0]) * (p2[1] - p1[1])
    if denom == 0:
        return False

    ua = ((p4[0] - p3[0]) * (p1[1] - p3[1]) - (p4[1] - p3[1]) * (p1[0] - p3[0])) / denom
    ub = ((p2[0] - p1[0]) * (p1[1] - p3[1]) - (p2[1] - p1[1]) * (p1[0] - p3[0])) / denom

    return 0.0 <= ua <= 1.0 and 0.0 <= ub <= 1.0


def rect_edges(rect: Rect) -> Tuple[Tuple[Point, Point], ...]:
    """The four edges of ``rect``: top, right, bottom, left."""
    tl = Point(rect.x, rect.y)
    tr = Point(rect.right, rect.y)
    br = Point(rect.right, rect.bottom)
    bl = Point(rect.x, rect.bottom)
    return ((tl, tr), (tr, br), (bl, br), (tl, bl))


def segment_intersects_rect(p1: Point, p2: Point, rect: Rect) -> bool:
    """True if segment p1–p2 crosses any edge of ``rect``.

    A segment lying entirely inside the rectangle touches no edge and
    is reported as not intersecting.
    """
    return any(segments_intersect(p1, p2, a, b) for a, b in rect_edges(rect))
