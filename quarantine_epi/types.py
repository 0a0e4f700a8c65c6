"""Core data types for quarantine_epi.

This module is the SINGLE SOURCE OF TRUTH for:
  - Status: epidemic status tag (HEALTHY → INFECTED → IMMUNE | DEAD)
  - Rect, Point: arena geometry primitives
  - Quarantine sub-state variants (Free, MovingTo, InQuarantine, Exiting)
  - Read-only transfer objects handed to renderers (AgentSnapshot, StatusCounts)

All modules import these types from here. No other module defines agent
status values or zone geometry records.

Coordinates: arena origin is top-left, x grows right, y grows down.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
from typing import List, NamedTuple, Union


# ═══════════════════════════════════════════════════════════════════════
# ENUMERATIONS
# ═══════════════════════════════════════════════════════════════════════

class Status(IntEnum):
    """Epidemic status of an agent.

    HEALTHY  →  INFECTED:  infect() (contact or seeding)
    INFECTED →  IMMUNE:    check_recovery() after the recovery duration
    INFECTED →  DEAD:      check_death() draw
    IMMUNE and DEAD are terminal.
    """
    HEALTHY  = 0
    INFECTED = 1
    IMMUNE   = 2
    DEAD     = 3


STATUS_NAMES = {
    Status.HEALTHY:  'healthy',
    Status.INFECTED: 'infected',
    Status.IMMUNE:   'immune',
    Status.DEAD:     'dead',
}

# Display colours indexed by status (dots on the arena)
STATUS_COLORS = {
    Status.HEALTHY:  '#2980b9',
    Status.INFECTED: '#e74c3c',
    Status.IMMUNE:   '#2ecc71',
    Status.DEAD:     'black',
}


# ═══════════════════════════════════════════════════════════════════════
# GEOMETRY PRIMITIVES
# ═══════════════════════════════════════════════════════════════════════

class Point(NamedTuple):
    """A position in arena coordinates."""
    x: float
    y: float


@dataclass(frozen=True)
class Rect:
    """Axis-aligned rectangle, origin top-left. Immutable."""
    x: float
    y: float
    width: float
    height: float

    def __post_init__(self):
        if self.width <= 0 or self.height <= 0:
            raise ValueError(
                f"Rect width and height must be positive, "
                f"got {self.width}x{self.height}"
            )

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height

    @property
    def center(self) -> Point:
        return Point(self.x + self.width / 2.0, self.y + self.height / 2.0)

    def as_list(self) -> List[float]:
        """[x, y, width, height] — the YAML representation."""
        return [self.x, self.y, self.width, self.height]


# ═══════════════════════════════════════════════════════════════════════
# QUARANTINE SUB-STATE
# ═══════════════════════════════════════════════════════════════════════
# Exactly one variant holds at a time. Each carries only the fields that
# are valid in that state, so "zone present iff not free" needs no check.

@dataclass(frozen=True)
class Free:
    """Roaming the arena."""


@dataclass
class MovingTo:
    """In transit toward ``target`` inside ``zone``.

    ``route`` holds the queued avoidance waypoints; ``waypoint`` is the
    point currently being steered at (None → steer at ``target``).
    """
    zone: Rect
    target: Point
    forbidden: List[Rect] = field(default_factory=list)
    route: List[Point] = field(default_factory=list)
    waypoint: Union[Point, None] = None

    @property
    def heading_to(self) -> Point:
        return self.waypoint if self.waypoint is not None else self.target


@dataclass(frozen=True)
class InQuarantine:
    """Bouncing around inside ``zone``."""
    zone: Rect


@dataclass(frozen=True)
class Exiting:
    """Leaving ``zone`` after recovery."""
    zone: Rect


QuarantineState = Union[Free, MovingTo, InQuarantine, Exiting]

FREE = Free()


# ═══════════════════════════════════════════════════════════════════════
# TRANSFER OBJECTS
# ═══════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class AgentSnapshot:
    """What a renderer may read about one agent for one frame."""
    x: float
    y: float
    radius: float
    status: Status
    color: str
    quarantined: bool


@dataclass(frozen=True)
class StatusCounts:
    """One sample of the status time series."""
    healthy: int
    infected: int
    immune: int
    dead: int
    time: float

    @property
    def total(self) -> int:
        return self.healthy + self.infected + self.immune + self.dead

    @property
    def alive(self) -> int:
        return self.healthy + self.infected + self.immune
