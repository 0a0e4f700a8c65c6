"""Simulation driver: owns the agents and the zone registry, runs ticks.

Each tick, strictly sequentially:
  1. advance the simulated clock
  2. start the quarantine policy when its tick arrives
  3. route infected agents that requested quarantine
  4. agent.update() for every agent
  5. contact transmission (free healthy agents near active infected)
  6. check_recovery() then check_death() for every agent
  7. record a StatusCounts sample every record_interval ticks

Agents never read each other's live state; only this driver compares
positions (for transmission).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional

import numpy as np

from quarantine_epi.agent import Agent
from quarantine_epi.config import SimulationConfig, default_config, validate_config
from quarantine_epi.history import StatusHistory, count_statuses
from quarantine_epi.rng import create_rng_hierarchy
from quarantine_epi.types import AgentSnapshot, Free, MovingTo, Status, StatusCounts
from quarantine_epi.zones import ZoneRegistry, registry_from_lists

logger = logging.getLogger(__name__)


# ═══════════════════════════════════════════════════════════════════════
# CONSTANTS
# ═══════════════════════════════════════════════════════════════════════

CONTACT_RADIUS_FACTOR = 2.0    # contact distance, in agent radii
TRANSMISSION_PROB = 0.5        # per contact-tick
MAX_PLACEMENT_ATTEMPTS = 10000


# ═══════════════════════════════════════════════════════════════════════
# RESULT
# ═══════════════════════════════════════════════════════════════════════

@dataclass
class SimulationResult:
    """Summary of one run."""
    n_ticks: int = 0
    n_agents: int = 0
    initial_infected: int = 0
    total_infections: int = 0        # includes seeded infections
    total_recoveries: int = 0
    total_deaths: int = 0
    peak_infected: int = 0
    peak_tick: int = 0
    epidemic_end_tick: Optional[int] = None
    quarantine_started_tick: Optional[int] = None
    final_counts: Optional[StatusCounts] = None
    history: Optional[Dict[str, np.ndarray]] = None

    @property
    def mortality_fraction(self) -> float:
        return self.total_deaths / self.n_agents if self.n_agents > 0 else 0.0


# ═══════════════════════════════════════════════════════════════════════
# SIMULATION
# ═══════════════════════════════════════════════════════════════════════

class Simulation:
    """Frame-driven population run.

    Args:
        config: Run configuration (defaults to default_config()). Validated
            on construction; invalid settings raise ValueError.
        rngs: Optional RNG hierarchy from create_rng_hierarchy(); built
            from ``config.simulation.seed`` when omitted.
    """

    def __init__(
        self,
        config: Optional[SimulationConfig] = None,
        rngs: Optional[Dict[str, np.random.Generator]] = None,
    ):
        self.config = config if config is not None else default_config()
        validate_config(self.config)
        self.rngs = rngs if rngs is not None else create_rng_hierarchy(
            self.config.simulation.seed
        )
        self.registry: ZoneRegistry = registry_from_lists(
            self.config.zones.healthy, self.config.zones.infected,
        )
        self.width = self.config.arena.width
        self.height = self.config.arena.height

        self.tick = 0
        self.now = 0.0
        self.quarantine_started_tick: Optional[int] = None

        self.history = StatusHistory(self.config.simulation.history_length)
        self.agents: List[Agent] = self._populate()

        self.total_infections = self.config.population.initial_infected
        self.total_recoveries = 0
        self.total_deaths = 0
        self.peak_infected = self.config.population.initial_infected
        self.peak_tick = 0
        self.epidemic_end_tick: Optional[int] = None

        self.history.append(self.counts())

    # ── setup ────────────────────────────────────────────────────────

    def _random_position(self) -> tuple:
        rng = self.rngs['global']
        r = self.config.arena.agent_radius
        margin = self.config.population.spawn_margin
        for _ in range(MAX_PLACEMENT_ATTEMPTS):
            x = float(rng.uniform(r, self.width - r))
            y = float(rng.uniform(r, self.height - r))
            if not self.registry.near_point(x, y, margin):
                return x, y
        raise RuntimeError(
            f"Could not place an agent outside the quarantine zones after "
            f"{MAX_PLACEMENT_ATTEMPTS} attempts; check arena size and spawn_margin"
        )

    def _populate(self) -> List[Agent]:
        pop = self.config.population
        epi = self.config.epidemic
        kwargs = dict(
            rng=self.rngs['motion'],
            epidemic_rng=self.rngs['epidemic'],
            radius=self.config.arena.agent_radius,
            death_model=epi.death_model,
            quarantine_entry_prob=epi.quarantine_entry_prob,
        )
        agents = []
        for i in range(pop.n_agents):
            x, y = self._random_position()
            if i < pop.initial_infected:
                agent = Agent.infected(x, y, self.registry, now=self.now, **kwargs)
            elif i < pop.initial_infected + pop.initial_immune:
                agent = Agent.immune(x, y, self.registry, **kwargs)
            else:
                agent = Agent(x, y, self.registry, **kwargs)
            agents.append(agent)
        return agents

    # ── read surface ─────────────────────────────────────────────────

    def counts(self) -> StatusCounts:
        return count_statuses(self.agents, self.now)

    def snapshots(self) -> List[AgentSnapshot]:
        return [a.snapshot() for a in self.agents]

    @property
    def quarantine_active(self) -> bool:
        return self.quarantine_started_tick is not None

    # ── tick ─────────────────────────────────────────────────────────

    def step(self) -> None:
        """Advance the whole population by one tick."""
        self.tick += 1
        self.now += self.config.simulation.tick_seconds

        q = self.config.quarantine
        if q.enabled and not self.quarantine_active and self.tick >= q.start_tick:
            self._start_quarantine()
        if self.quarantine_active and q.route_infected:
            self._dispatch_requested()

        for agent in self.agents:
            agent.update(self.width, self.height)

        self._transmit()

        recovery = self.config.epidemic.recovery_seconds
        for agent in self.agents:
            if agent.check_recovery(recovery, self.now):
                self.total_recoveries += 1
                logger.debug("tick %d: agent recovered at (%.1f, %.1f)",
                             self.tick, agent.x, agent.y)
            if agent.check_death(self.now):
                self.total_deaths += 1
                logger.debug("tick %d: agent died at (%.1f, %.1f)",
                             self.tick, agent.x, agent.y)

        n_infected = sum(1 for a in self.agents if a.status is Status.INFECTED)
        if n_infected > self.peak_infected:
            self.peak_infected = n_infected
            self.peak_tick = self.tick
        if n_infected == 0 and self.epidemic_end_tick is None and self.total_infections > 0:
            self.epidemic_end_tick = self.tick
            logger.info("Epidemic ended at tick %d", self.tick)

        if self.tick % self.config.simulation.record_interval == 0:
            self.history.append(self.counts())

    def _start_quarantine(self) -> None:
        """Send a share of free healthy agents and all free infected to their zones."""
        self.quarantine_started_tick = self.tick
        q = self.config.quarantine
        healthy_zone = self.registry.healthy_zone()
        infected_zone = self.registry.infected_zone()

        healthy = [a for a in self.agents if a.status is Status.HEALTHY and a.is_free]
        n_send = int(round(q.healthy_fraction * len(healthy)))
        if n_send > 0:
            chosen = self.rngs['epidemic'].choice(len(healthy), size=n_send, replace=False)
            for idx in chosen:
                healthy[int(idx)].route_to(healthy_zone)

        n_infected_sent = 0
        if q.route_infected:
            for agent in self.agents:
                if agent.status is Status.INFECTED and agent.is_free:
                    agent.route_to(infected_zone)
                    n_infected_sent += 1

        logger.info(
            "Quarantine started at tick %d: %d healthy and %d infected agents routed",
            self.tick, n_send, n_infected_sent,
        )

    def _dispatch_requested(self) -> None:
        infected_zone = self.registry.infected_zone()
        for agent in self.agents:
            if (agent.quarantine_requested
                    and agent.status is Status.INFECTED
                    and agent.is_free):
                agent.route_to(infected_zone)

    def _transmit(self) -> None:
        """Infect free healthy agents within contact range of an active spreader."""
        spreaders = [a for a in self.agents
                     if a.status is Status.INFECTED
                     and isinstance(a.quarantine, (Free, MovingTo))]
        if not spreaders:
            return
        susceptible = [a for a in self.agents
                       if a.status is Status.HEALTHY and a.is_free]
        if not susceptible:
            return

        sp = np.array([(a.x, a.y) for a in spreaders], dtype=np.float64)
        su = np.array([(a.x, a.y) for a in susceptible], dtype=np.float64)
        # (n_susceptible, n_spreaders) squared distances
        d2 = ((su[:, None, :] - sp[None, :, :]) ** 2).sum(axis=2)
        contact = CONTACT_RADIUS_FACTOR * self.config.arena.agent_radius
        exposed = np.where((d2 <= contact * contact).any(axis=1))[0]
        if exposed.size == 0:
            return

        draws = self.rngs['epidemic'].random(exposed.size)
        for idx, u in zip(exposed, draws):
            if u < TRANSMISSION_PROB and susceptible[int(idx)].infect(self.now):
                self.total_infections += 1

    # ── run ──────────────────────────────────────────────────────────

    def run(self, n_ticks: Optional[int] = None) -> SimulationResult:
        """Run ``n_ticks`` ticks (default: config.simulation.n_ticks)."""
        if n_ticks is None:
            n_ticks = self.config.simulation.n_ticks
        for _ in range(n_ticks):
            self.step()

        result = self.result()
        logger.info(
            "Run finished after %d ticks: %d infections, %d recoveries, %d deaths",
            self.tick, result.total_infections, result.total_recoveries,
            result.total_deaths,
        )
        return result

    def result(self) -> SimulationResult:
        return SimulationResult(
            n_ticks=self.tick,
            n_agents=len(self.agents),
            initial_infected=self.config.population.initial_infected,
            total_infections=self.total_infections,
            total_recoveries=self.total_recoveries,
            total_deaths=self.total_deaths,
            peak_infected=self.peak_infected,
            peak_tick=self.peak_tick,
            epidemic_end_tick=self.epidemic_end_tick,
            quarantine_started_tick=self.quarantine_started_tick,
            final_counts=self.counts(),
            history=self.history.as_arrays(),
        )


def run_simulation(
    config: Optional[SimulationConfig] = None,
    n_ticks: Optional[int] = None,
) -> SimulationResult:
    """Build a Simulation from ``config`` and run it."""
    return Simulation(config).run(n_ticks)
