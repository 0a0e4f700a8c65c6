"""Agent state machine: motion, quarantine routing and epidemic transitions.

Each Agent carries:
  - position (x, y) and per-tick velocity (dx, dy)
  - epidemic status (Status tag) and infection timestamp
  - quarantine sub-state (Free | MovingTo | InQuarantine | Exiting)

Per-tick update order (update()):
  1. dead → no-op
  2. infected agents en route to the healthy-bound zone are re-routed
     to the infected-bound zone
  3. skirting nudge near the zone the agent must not enter
  4. unstick jitter for agents resting on a quarantine wall
  5. ambient direction jitter (5% of ticks)
  6. speed clamp to [MIN_SPEED, MAX_SPEED]
  7. state-specific motion: transit, in-zone bounce, exit, free roam

Epidemic checks (infect, check_recovery, check_death) are called by the
driver, never from update(). They return True when the transition
fired and False when its precondition was not met; none raise.

Zones are received by reference from the ZoneRegistry; agents never
build zone rectangles themselves.
"""

from __future__ import annotations

import math
import time
from typing import List, Optional, Sequence, Union

import numpy as np

from quarantine_epi.epidemic import (
    QUARANTINE_ENTRY_PROB,
    SEEDED_QUARANTINE_PROB,
    DeathModel,
    death_probability,
)
from quarantine_epi.geometry import (
    point_in_rect,
    point_near_rect,
    segment_intersects_rect,
)
from quarantine_epi.rng import default_rng
from quarantine_epi.types import (
    FREE,
    STATUS_COLORS,
    AgentSnapshot,
    Exiting,
    Free,
    InQuarantine,
    MovingTo,
    Point,
    QuarantineState,
    Rect,
    Status,
)
from quarantine_epi.zones import ZoneRegistry


# ═══════════════════════════════════════════════════════════════════════
# CONSTANTS
# ═══════════════════════════════════════════════════════════════════════

AGENT_RADIUS = 4.5

# Speed limits (units/tick)
MIN_SPEED = 0.8
MAX_SPEED = 2.0
TRANSIT_SPEED = 2.0          # fixed speed while heading to a quarantine zone
BOUNCE_MIN_SPEED = 1.2       # floor right after bouncing off a zone wall
EXIT_SPEEDUP = 1.5           # velocity multiplier while leaving a zone

# Transit
ARRIVAL_DISTANCE = 2.0       # waypoint counts as reached inside this distance
AVOID_MARGIN = 30.0          # detour clearance below / beside an obstacle
AVOID_MARGIN_TOP = 30.0      # detour clearance above an obstacle

# Zone skirting
SKIRT_MARGIN = 5.0
SKIRT_SHIFT_INFECTED = 4.0
SKIRT_SHIFT_HEALTHY = 5.0
SKIRT_DY = 0.3               # dy drawn from U(-SKIRT_DY/2, SKIRT_DY/2)

# Quarantine walls
ZONE_WALL_MARGIN = 1.0       # clamp inset beyond the radius
STALL_DISTANCE = 1.0         # "resting on a wall" threshold
STALL_JITTER = 1.5
BOUNCE_POWER_MIN = 1.5
BOUNCE_POWER_SPAN = 0.5
BOUNCE_KICK = 1.0
QUARANTINE_JITTER_PROB = 0.1

# Ambient
AMBIENT_JITTER_PROB = 0.05
AMBIENT_JITTER = 0.5

# Arena walls: reflected speed scaled by U(0.9, 1.1)
WALL_DAMPING_MIN = 0.9
WALL_DAMPING_SPAN = 0.2


def _clamp(value: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, value))


# ═══════════════════════════════════════════════════════════════════════
# AGENT
# ═══════════════════════════════════════════════════════════════════════

class Agent:
    """A single simulated individual.

    Args:
        x, y: Initial position (arena coordinates).
        zones: Shared zone registry (read-only).
        rng: Generator for motion draws. Defaults to the process-wide
            unseeded generator.
        epidemic_rng: Generator for death and quarantine-entry draws.
            Defaults to ``rng``.
        radius: Collision / drawing radius.
        death_model: DeathModel used by check_death().
        quarantine_entry_prob: Chance that a fresh infection requests
            quarantine.
    """

    def __init__(
        self,
        x: float,
        y: float,
        zones: ZoneRegistry,
        rng: Optional[np.random.Generator] = None,
        epidemic_rng: Optional[np.random.Generator] = None,
        radius: float = AGENT_RADIUS,
        death_model: Union[DeathModel, str] = DeathModel.FLAT,
        quarantine_entry_prob: float = QUARANTINE_ENTRY_PROB,
    ):
        self.x = float(x)
        self.y = float(y)
        self.zones = zones
        self.rng = rng if rng is not None else default_rng()
        self.epidemic_rng = epidemic_rng if epidemic_rng is not None else self.rng
        self.radius = float(radius)
        self.death_model = DeathModel(death_model)
        self.quarantine_entry_prob = quarantine_entry_prob

        self.dx = (self._rand() - 0.5) * 2 + (0.3 if self._rand() > 0.5 else -0.3)
        self.dy = (self._rand() - 0.5) * 2 + (0.3 if self._rand() > 0.5 else -0.3)

        self.status = Status.HEALTHY
        self.infection_since: Optional[float] = None
        self.quarantine: QuarantineState = FREE
        # Set when an infection asks for quarantine; the driver routes it.
        self.quarantine_requested = False

    # ── alternate constructors ───────────────────────────────────────

    @classmethod
    def infected(
        cls,
        x: float,
        y: float,
        zones: ZoneRegistry,
        now: Optional[float] = None,
        **kwargs,
    ) -> 'Agent':
        """An agent seeded as already infected at time ``now``."""
        agent = cls(x, y, zones, **kwargs)
        agent.status = Status.INFECTED
        agent.infection_since = _now() if now is None else now
        if agent._epidemic_rand() < SEEDED_QUARANTINE_PROB:
            agent.quarantine_requested = True
        return agent

    @classmethod
    def immune(cls, x: float, y: float, zones: ZoneRegistry, **kwargs) -> 'Agent':
        """An agent seeded as immune."""
        agent = cls(x, y, zones, **kwargs)
        agent.status = Status.IMMUNE
        return agent

    def __repr__(self) -> str:
        return (
            f"Agent(x={self.x:.1f}, y={self.y:.1f}, "
            f"status={self.status.name}, quarantine={type(self.quarantine).__name__})"
        )

    # ── read surface ─────────────────────────────────────────────────

    @property
    def position(self) -> Point:
        return Point(self.x, self.y)

    @property
    def speed(self) -> float:
        return math.hypot(self.dx, self.dy)

    @property
    def color(self) -> str:
        return STATUS_COLORS[self.status]

    @property
    def zone(self) -> Optional[Rect]:
        """Quarantine zone of the current sub-state (None when free)."""
        q = self.quarantine
        return None if isinstance(q, Free) else q.zone

    @property
    def target(self) -> Optional[Point]:
        q = self.quarantine
        return q.target if isinstance(q, MovingTo) else None

    @property
    def current_waypoint(self) -> Optional[Point]:
        q = self.quarantine
        return q.waypoint if isinstance(q, MovingTo) else None

    @property
    def avoidance_route(self) -> List[Point]:
        """Waypoints still queued after the current one."""
        q = self.quarantine
        return list(q.route) if isinstance(q, MovingTo) else []

    @property
    def forbidden_zones(self) -> List[Rect]:
        q = self.quarantine
        return list(q.forbidden) if isinstance(q, MovingTo) else []

    @property
    def is_free(self) -> bool:
        return isinstance(self.quarantine, Free)

    @property
    def moving_to_quarantine(self) -> bool:
        return isinstance(self.quarantine, MovingTo)

    @property
    def in_quarantine(self) -> bool:
        return isinstance(self.quarantine, InQuarantine)

    @property
    def exiting_quarantine(self) -> bool:
        return isinstance(self.quarantine, Exiting)

    def snapshot(self) -> AgentSnapshot:
        return AgentSnapshot(
            x=float(self.x),
            y=float(self.y),
            radius=self.radius,
            status=self.status,
            color=self.color,
            quarantined=not self.is_free,
        )

    # ── per-tick update ──────────────────────────────────────────────

    def update(self, arena_width: float, arena_height: float) -> None:
        """Advance this agent by one tick."""
        if self.status is Status.DEAD:
            return

        q = self.quarantine
        if (self.status is Status.INFECTED
                and isinstance(q, MovingTo)
                and self.zones.is_healthy_zone(q.zone)):
            self._route_to_infected_zone()

        self._skirt_avoided_zone()
        self._unstick_from_zone_wall()

        if self._rand() < AMBIENT_JITTER_PROB:
            self.dx += (self._rand() - 0.5) * AMBIENT_JITTER
            self.dy += (self._rand() - 0.5) * AMBIENT_JITTER

        self._clamp_speed()

        q = self.quarantine
        if isinstance(q, MovingTo):
            self._step_transit(q)
        elif isinstance(q, InQuarantine):
            self._step_in_zone(q.zone)
        elif isinstance(q, Exiting):
            self._step_exit(q.zone)
        else:
            self._step_free(arena_width, arena_height)

    def _skirt_avoided_zone(self) -> None:
        """Slide sideways past the zone this agent must not enter."""
        if not isinstance(self.quarantine, MovingTo):
            return
        if self.status is Status.INFECTED:
            avoided, shift = self.zones.healthy_zone(), SKIRT_SHIFT_INFECTED
        elif self.status is Status.HEALTHY:
            avoided, shift = self.zones.infected_zone(), SKIRT_SHIFT_HEALTHY
        else:
            return
        if avoided == self.quarantine.zone:
            return
        if not point_near_rect(self.x, self.y, avoided, SKIRT_MARGIN):
            return

        # Bias toward the destination; never into the avoided zone.
        # The flip keeps transit out of forbidden zones.
        direction = 1.0 if self.quarantine.target.x >= self.x else -1.0
        if point_in_rect(self.x + direction * shift, self.y, avoided):
            direction = 1.0 if self.x >= avoided.center.x else -1.0
        self.x += direction * shift
        self.dx = direction * 1.0
        self.dy = (self._rand() - 0.5) * SKIRT_DY

    def _unstick_from_zone_wall(self) -> None:
        q = self.quarantine
        if not isinstance(q, InQuarantine):
            return
        z, r = q.zone, self.radius
        near_wall = (
            abs(self.x - (z.x + r)) < STALL_DISTANCE
            or abs(self.x - (z.right - r)) < STALL_DISTANCE
            or abs(self.y - (z.y + r)) < STALL_DISTANCE
            or abs(self.y - (z.bottom - r)) < STALL_DISTANCE
        )
        if near_wall:
            self.dx += (self._rand() - 0.5) * STALL_JITTER
            self.dy += (self._rand() - 0.5) * STALL_JITTER

    def _clamp_speed(self) -> None:
        speed = self.speed
        if speed > MAX_SPEED:
            self.dx = self.dx / speed * MAX_SPEED
            self.dy = self.dy / speed * MAX_SPEED
        elif speed < MIN_SPEED:
            angle = self._rand() * 2.0 * math.pi
            self.dx = MIN_SPEED * math.cos(angle)
            self.dy = MIN_SPEED * math.sin(angle)

    def _step_transit(self, q: MovingTo) -> None:
        goal = q.heading_to
        gx, gy = goal.x - self.x, goal.y - self.y
        distance = math.hypot(gx, gy)

        if distance < ARRIVAL_DISTANCE:
            if q.waypoint is not None:
                q.waypoint = q.route.pop(0) if q.route else None
            else:
                self.quarantine = InQuarantine(q.zone)
            return

        self.dx = gx / distance * TRANSIT_SPEED
        self.dy = gy / distance * TRANSIT_SPEED
        nx, ny = self.x + self.dx, self.y + self.dy
        if any(point_in_rect(nx, ny, z) for z in q.forbidden):
            self.calculate_avoidance_path()
            return
        self.x, self.y = nx, ny

    def _step_in_zone(self, z: Rect) -> None:
        r = self.radius
        if self._rand() < QUARANTINE_JITTER_PROB:
            self.dx += (self._rand() - 0.5) * AMBIENT_JITTER
            self.dy += (self._rand() - 0.5) * AMBIENT_JITTER

        self.x += self.dx
        self.y += self.dy

        hit_vertical = self.x <= z.x + r or self.x >= z.right - r
        hit_horizontal = self.y <= z.y + r or self.y >= z.bottom - r
        if hit_vertical or hit_horizontal:
            bounce = BOUNCE_POWER_MIN + self._rand() * BOUNCE_POWER_SPAN
            kick = (self._rand() - 0.5) * BOUNCE_KICK
            if hit_vertical:
                self.dx *= -bounce
                self.dy += kick
            else:
                self.dy *= -bounce
                self.dx += kick

            if self.speed < BOUNCE_MIN_SPEED:
                angle = math.atan2(self.dy, self.dx)
                self.dx = BOUNCE_MIN_SPEED * math.cos(angle)
                self.dy = BOUNCE_MIN_SPEED * math.sin(angle)

        inset = r + ZONE_WALL_MARGIN
        self.x = _clamp(self.x, z.x + inset, z.right - inset)
        self.y = _clamp(self.y, z.y + inset, z.bottom - inset)

    def _step_exit(self, z: Rect) -> None:
        self.x += self.dx * EXIT_SPEEDUP
        self.y += self.dy * EXIT_SPEEDUP
        r = self.radius
        if (self.x < z.x - r or self.x > z.right + r
                or self.y < z.y - r or self.y > z.bottom + r):
            self.quarantine = FREE

    def _step_free(self, width: float, height: float) -> None:
        px, py = self.x, self.y
        self.x += self.dx
        self.y += self.dy

        if self.x == px and self.y == py:
            self.dx = (self._rand() - 0.5) * 2
            self.dy = (self._rand() - 0.5) * 2

        r = self.radius
        if self.x < r:
            self.x = r
            self.dx = abs(self.dx) * self._wall_damping()
        elif self.x > width - r:
            self.x = width - r
            self.dx = -abs(self.dx) * self._wall_damping()

        if self.y < r:
            self.y = r
            self.dy = abs(self.dy) * self._wall_damping()
        elif self.y > height - r:
            self.y = height - r
            self.dy = -abs(self.dy) * self._wall_damping()

    # ── quarantine routing ───────────────────────────────────────────

    def start_moving_to_quarantine(
        self,
        zone: Rect,
        forbidden_zones: Sequence[Rect],
        target: Optional[Point] = None,
    ) -> bool:
        """Begin transit to a random point inside ``zone``.

        Args:
            zone: Destination quarantine zone.
            forbidden_zones: Zones the route must not cross.
            target: Explicit destination point; drawn uniformly inside
                ``zone`` (inset by the radius) when omitted.

        Returns:
            False for dead and immune agents, which never enter quarantine.
        """
        if self.status in (Status.DEAD, Status.IMMUNE):
            return False

        if target is None:
            r = self.radius
            target = Point(
                zone.x + r + self._rand() * (zone.width - 2 * r),
                zone.y + r + self._rand() * (zone.height - 2 * r),
            )
        self.quarantine = MovingTo(zone=zone, target=target,
                                   forbidden=list(forbidden_zones))
        self.quarantine_requested = False
        self.calculate_avoidance_path()
        return True

    def calculate_avoidance_path(self) -> List[Point]:
        """Rebuild the detour around the first forbidden zone on the way.

        Tests the straight line from the current position to the target
        against each forbidden zone in order. For the first one it
        crosses, two waypoints are laid out: mostly-horizontal trips go
        above or below the obstacle, mostly-vertical trips go left or
        right of it. The first waypoint becomes current.

        Returns:
            The full detour (current waypoint first); empty when the
            line is clear or the agent is not in transit.
        """
        q = self.quarantine
        if not isinstance(q, MovingTo):
            return []

        q.route = []
        q.waypoint = None
        here, target = self.position, q.target
        for obstacle in q.forbidden:
            if not segment_intersects_rect(here, target, obstacle):
                continue

            tx, ty = target.x - here.x, target.y - here.y
            if abs(tx) > abs(ty):
                if ty > 0:
                    ay = obstacle.bottom + AVOID_MARGIN
                else:
                    ay = obstacle.y - AVOID_MARGIN_TOP
                route = [Point(here.x, ay), Point(target.x, ay)]
            else:
                if tx > 0:
                    ax = obstacle.right + AVOID_MARGIN
                else:
                    ax = obstacle.x - AVOID_MARGIN
                route = [Point(ax, here.y), Point(ax, target.y)]

            q.waypoint = route[0]
            q.route = route[1:]
            return route
        return []

    def route_to(self, zone: Rect) -> bool:
        """Start transit to ``zone`` avoiding every other registered zone.

        A zone the agent is currently standing in is not treated as an
        obstacle, otherwise the agent could never step out of it.
        """
        here = self.zones.zone_containing(self.x, self.y)
        forbidden = [z for z in self.zones.forbidden_for(zone) if z != here]
        return self.start_moving_to_quarantine(zone, forbidden)

    def _route_to_infected_zone(self) -> None:
        self.route_to(self.zones.infected_zone())

    # ── epidemic checks ──────────────────────────────────────────────

    def infect(self, now: Optional[float] = None) -> bool:
        """Healthy → infected.

        An agent already heading for the healthy-bound zone is re-routed
        to the infected-bound zone. A free agent requests quarantine
        with probability ``quarantine_entry_prob``.

        Returns:
            False (and no change) unless the agent was healthy.
        """
        if self.status is not Status.HEALTHY:
            return False

        self.status = Status.INFECTED
        self.infection_since = _now() if now is None else now

        q = self.quarantine
        if isinstance(q, MovingTo) and self.zones.is_healthy_zone(q.zone):
            self._route_to_infected_zone()
        elif isinstance(q, Free) and self._epidemic_rand() < self.quarantine_entry_prob:
            self.quarantine_requested = True
        return True

    def check_recovery(self, recovery_duration: float, now: float) -> bool:
        """Infected → immune once more than ``recovery_duration`` has elapsed.

        A quarantined (or in-transit) agent starts leaving its zone
        through a randomly chosen side.
        """
        if self.status is not Status.INFECTED or self.infection_since is None:
            return False
        if now - self.infection_since <= recovery_duration:
            return False

        self.status = Status.IMMUNE
        self.infection_since = None
        self.quarantine_requested = False

        q = self.quarantine
        if not isinstance(q, Free):
            self.quarantine = Exiting(q.zone)
            side = int(self.rng.integers(4))
            if side == 0:
                self.dx = -abs(self.dx)
            elif side == 1:
                self.dx = abs(self.dx)
            elif side == 2:
                self.dy = -abs(self.dy)
            else:
                self.dy = abs(self.dy)
        return True

    def check_death(self, now: Optional[float] = None) -> bool:
        """Infected → dead with the configured death-model probability.

        Args:
            now: Current time, used by the escalating model to age the
                infection. Omitted → treated as a fresh infection.
        """
        if self.status is not Status.INFECTED:
            return False

        elapsed = 0.0
        if now is not None and self.infection_since is not None:
            elapsed = now - self.infection_since
        if self._epidemic_rand() >= death_probability(self.death_model, elapsed):
            return False

        self.status = Status.DEAD
        self.dx = 0.0
        self.dy = 0.0
        self.infection_since = None
        self.quarantine_requested = False
        return True

    # ── randomness ───────────────────────────────────────────────────

    def _rand(self) -> float:
        return float(self.rng.random())

    def _epidemic_rand(self) -> float:
        return float(self.epidemic_rng.random())

    def _wall_damping(self) -> float:
        return WALL_DAMPING_MIN + self._rand() * WALL_DAMPING_SPAN


def _now() -> float:
    return time.monotonic()
