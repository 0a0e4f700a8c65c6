"""Zone registry: the two fixed quarantine rectangles.

One rectangle receives healthy agents (the "healthy-bound" zone), the
other receives infected agents (the "infected-bound" zone). The registry
is built once by the simulation driver and handed to every agent by
reference; nothing mutates it afterwards.
"""

from __future__ import annotations

from typing import List, Optional, Sequence

from quarantine_epi.geometry import point_in_rect, point_near_rect
from quarantine_epi.types import Rect


# Default layout (arena coordinates, origin top-left)
DEFAULT_HEALTHY_ZONE = Rect(150.0, 150.0, 150.0, 100.0)
DEFAULT_INFECTED_ZONE = Rect(500.0, 250.0, 150.0, 100.0)


def _rects_overlap(a: Rect, b: Rect) -> bool:
    return a.x < b.right and b.x < a.right and a.y < b.bottom and b.y < a.bottom


class ZoneRegistry:
    """Holds the healthy-bound and infected-bound quarantine zones."""

    def __init__(
        self,
        healthy: Rect = DEFAULT_HEALTHY_ZONE,
        infected: Rect = DEFAULT_INFECTED_ZONE,
    ):
        if _rects_overlap(healthy, infected):
            raise ValueError(
                f"Quarantine zones must not overlap: {healthy} vs {infected}"
            )
        self._healthy = healthy
        self._infected = infected

    def __repr__(self) -> str:
        return f"ZoneRegistry(healthy={self._healthy!r}, infected={self._infected!r})"

    def healthy_zone(self) -> Rect:
        return self._healthy

    def infected_zone(self) -> Rect:
        return self._infected

    @property
    def zones(self) -> List[Rect]:
        return [self._healthy, self._infected]

    def contains_point(self, x: float, y: float) -> bool:
        """True if (x, y) is strictly inside either zone."""
        return any(point_in_rect(x, y, z) for z in self.zones)

    def near_point(self, x: float, y: float, margin: float) -> bool:
        """True if (x, y) is within ``margin`` of either zone (or inside one)."""
        return any(point_near_rect(x, y, z, margin) for z in self.zones)

    def zone_containing(self, x: float, y: float) -> Optional[Rect]:
        """The zone strictly containing (x, y), or None."""
        for z in self.zones:
            if point_in_rect(x, y, z):
                return z
        return None

    def forbidden_for(self, zone: Rect) -> List[Rect]:
        """Every registered zone other than ``zone`` (obstacles en route to it)."""
        return [z for z in self.zones if z != zone]

    def is_healthy_zone(self, zone: Optional[Rect]) -> bool:
        return zone is not None and zone == self._healthy


def default_registry() -> ZoneRegistry:
    """Registry with the default zone layout."""
    return ZoneRegistry()


def registry_from_lists(
    healthy: Sequence[float],
    infected: Sequence[float],
) -> ZoneRegistry:
    """Build a registry from ``[x, y, width, height]`` lists (YAML form)."""
    return ZoneRegistry(Rect(*map(float, healthy)), Rect(*map(float, infected)))
