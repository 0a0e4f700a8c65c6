"""Configuration system for quarantine_epi.

Hierarchical YAML configuration with deep-merge support:
  base.yaml → scenario override → overrides dict

Each YAML top-level key maps 1:1 onto a dataclass section. Unknown keys
are ignored. The merged result is checked by validate_config(), which
raises ValueError naming the offending key.

Only run-level settings live here (arena, zones, population, quarantine
policy). Motion and epidemic constants stay in agent.py / epidemic.py;
the death model and the quarantine-entry probability are the two
epidemic knobs exposed for reproducing either documented behaviour.
"""

from __future__ import annotations

import copy
import warnings
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml

from quarantine_epi.agent import AVOID_MARGIN, AVOID_MARGIN_TOP
from quarantine_epi.epidemic import (
    DEFAULT_RECOVERY_SECONDS,
    QUARANTINE_ENTRY_PROB,
    DeathModel,
)


# ═══════════════════════════════════════════════════════════════════════
# CONFIGURATION DATACLASSES
# ═══════════════════════════════════════════════════════════════════════

@dataclass
class SimulationSection:
    """Run timing and control."""
    seed: Optional[int] = 42          # None → entropy-seeded
    n_ticks: int = 3000
    tick_seconds: float = 1.0 / 60.0  # simulated clock advance per tick
    record_interval: int = 10         # ticks between history samples
    history_length: int = 100         # samples retained for the chart


@dataclass
class ArenaSection:
    """Arena bounds and agent size."""
    width: float = 800.0
    height: float = 500.0
    agent_radius: float = 4.5


@dataclass
class ZonesSection:
    """Quarantine zones as [x, y, width, height]."""
    healthy: List[float] = field(default_factory=lambda: [150.0, 150.0, 150.0, 100.0])
    infected: List[float] = field(default_factory=lambda: [500.0, 250.0, 150.0, 100.0])


@dataclass
class PopulationSection:
    """Initial population."""
    n_agents: int = 200
    initial_infected: int = 5
    initial_immune: int = 0
    spawn_margin: float = 10.0        # no agent starts this close to a zone


@dataclass
class EpidemicSection:
    """Epidemic knobs.

    death_model: "flat"       — constant per-check probability
                 "escalating" — grows with infection age, capped
    """
    recovery_seconds: float = DEFAULT_RECOVERY_SECONDS
    death_model: str = DeathModel.FLAT.value
    quarantine_entry_prob: float = QUARANTINE_ENTRY_PROB


@dataclass
class QuarantineSection:
    """Quarantine policy applied by the driver."""
    enabled: bool = True
    start_tick: int = 300
    healthy_fraction: float = 0.3     # share of free healthy agents sent to their zone
    route_infected: bool = True       # send infected agents to the infected-bound zone


@dataclass
class SimulationConfig:
    """Complete run configuration.

    Load from YAML via `load_config()`. Sections map 1:1 to YAML top-level keys.
    """
    simulation: SimulationSection = field(default_factory=SimulationSection)
    arena: ArenaSection = field(default_factory=ArenaSection)
    zones: ZonesSection = field(default_factory=ZonesSection)
    population: PopulationSection = field(default_factory=PopulationSection)
    epidemic: EpidemicSection = field(default_factory=EpidemicSection)
    quarantine: QuarantineSection = field(default_factory=QuarantineSection)


_SECTION_MAP = {
    'simulation': SimulationSection,
    'arena': ArenaSection,
    'zones': ZonesSection,
    'population': PopulationSection,
    'epidemic': EpidemicSection,
    'quarantine': QuarantineSection,
}


# ═══════════════════════════════════════════════════════════════════════
# YAML LOADING & MERGING
# ═══════════════════════════════════════════════════════════════════════

def deep_merge(base: Dict, override: Dict) -> Dict:
    """Recursively merge override into base. Modifies base in place.

    - Dict values are merged recursively
    - Non-dict values are replaced
    - Keys in override but not base are added

    Returns:
        The merged base dictionary.
    """
    for key, value in override.items():
        if (
            key in base
            and isinstance(base[key], dict)
            and isinstance(value, dict)
        ):
            deep_merge(base[key], value)
        else:
            base[key] = value
    return base


def _dict_to_section(section_cls, data: Dict) -> Any:
    """Convert a dict to a dataclass, ignoring unknown keys."""
    import dataclasses
    valid_fields = {f.name for f in dataclasses.fields(section_cls)}
    filtered = {k: v for k, v in data.items() if k in valid_fields}
    return section_cls(**filtered)


def _yaml_to_config(data: Dict) -> SimulationConfig:
    """Convert a merged YAML dict to a SimulationConfig."""
    sections = {}
    for key, cls in _SECTION_MAP.items():
        if key in data and isinstance(data[key], dict):
            sections[key] = _dict_to_section(cls, data[key])
        else:
            sections[key] = cls()
    return SimulationConfig(**sections)


def config_to_dict(config: SimulationConfig) -> Dict[str, Dict[str, Any]]:
    """Plain-dict form of a config (YAML-serializable)."""
    import dataclasses
    return {
        key: copy.deepcopy(dataclasses.asdict(getattr(config, key)))
        for key in _SECTION_MAP
    }


def _check_rect(
    name: str,
    rect: List[float],
    width: float,
    height: float,
    radius: float,
) -> None:
    if len(rect) != 4:
        raise ValueError(f"zones.{name} must be [x, y, width, height], got {rect}")
    x, y, w, h = rect
    if w <= 0 or h <= 0:
        raise ValueError(f"zones.{name} width and height must be positive, got {rect}")
    if x < 0 or y < 0 or x + w > width or y + h > height:
        raise ValueError(
            f"zones.{name} {rect} must lie inside the {width}x{height} arena"
        )
    # Detour waypoints sit AVOID_MARGIN outside a zone and must stay on the arena.
    clearance = max(AVOID_MARGIN, AVOID_MARGIN_TOP) + radius
    gap = min(x, y, width - (x + w), height - (y + h))
    if gap < clearance:
        raise ValueError(
            f"zones.{name} {rect} is {gap:.1f} units from the arena edge; "
            f"at least {clearance:.1f} is needed for avoidance detours"
        )


def _check_prob(name: str, value: float) -> None:
    if not (0.0 <= value <= 1.0):
        raise ValueError(f"{name} must be in [0, 1], got {value}")


def validate_config(config: SimulationConfig) -> None:
    """Validate configuration constraints. Raises ValueError on failure.

    Checks:
      - Arena and agent radius are positive
      - Zones are well-formed, non-overlapping, and far enough inside the
        arena for avoidance detours to stay on it
      - Population seeding fits the population
      - Probabilities lie in [0, 1]; death model is known
      - Tick counts and intervals are sane
    """
    s = config.simulation
    if s.seed is not None and s.seed < 0:
        raise ValueError("simulation.seed must be non-negative")
    if s.n_ticks < 0:
        raise ValueError(f"simulation.n_ticks must be >= 0, got {s.n_ticks}")
    if s.tick_seconds <= 0:
        raise ValueError(f"simulation.tick_seconds must be positive, got {s.tick_seconds}")
    if s.record_interval < 1:
        raise ValueError(
            f"simulation.record_interval must be >= 1, got {s.record_interval}"
        )
    if s.history_length < 2:
        raise ValueError(
            f"simulation.history_length must be >= 2, got {s.history_length}"
        )

    a = config.arena
    if a.width <= 0 or a.height <= 0:
        raise ValueError(f"arena size must be positive, got {a.width}x{a.height}")
    if a.agent_radius <= 0:
        raise ValueError(f"arena.agent_radius must be positive, got {a.agent_radius}")

    z = config.zones
    _check_rect('healthy', z.healthy, a.width, a.height, a.agent_radius)
    _check_rect('infected', z.infected, a.width, a.height, a.agent_radius)
    hx, hy, hw, hh = z.healthy
    ix, iy, iw, ih = z.infected
    if hx < ix + iw and ix < hx + hw and hy < iy + ih and iy < hy + hh:
        raise ValueError(
            f"zones.healthy {z.healthy} and zones.infected {z.infected} overlap"
        )
    # Detours pass 30 units outside an obstacle; closer zones can trap agents.
    gap_x = max(ix - (hx + hw), hx - (ix + iw))
    gap_y = max(iy - (hy + hh), hy - (iy + ih))
    if max(gap_x, gap_y) < 30.0:
        warnings.warn(
            f"Quarantine zones are only {max(gap_x, gap_y):.1f} units apart; "
            f"avoidance detours may cut through the neighbouring zone.",
            UserWarning,
            stacklevel=2,
        )

    p = config.population
    if p.n_agents < 0:
        raise ValueError(f"population.n_agents must be >= 0, got {p.n_agents}")
    if p.initial_infected < 0 or p.initial_immune < 0:
        raise ValueError("population.initial_infected/initial_immune must be >= 0")
    if p.initial_infected + p.initial_immune > p.n_agents:
        raise ValueError(
            f"population.initial_infected ({p.initial_infected}) + "
            f"initial_immune ({p.initial_immune}) exceeds n_agents ({p.n_agents})"
        )
    if p.spawn_margin < 0:
        raise ValueError(f"population.spawn_margin must be >= 0, got {p.spawn_margin}")

    e = config.epidemic
    if e.recovery_seconds < 0:
        raise ValueError(
            f"epidemic.recovery_seconds must be >= 0, got {e.recovery_seconds}"
        )
    valid_models = {m.value for m in DeathModel}
    if e.death_model not in valid_models:
        raise ValueError(
            f"epidemic.death_model must be one of {valid_models}, "
            f"got '{e.death_model}'"
        )
    _check_prob('epidemic.quarantine_entry_prob', e.quarantine_entry_prob)

    q = config.quarantine
    if q.start_tick < 0:
        raise ValueError(f"quarantine.start_tick must be >= 0, got {q.start_tick}")
    _check_prob('quarantine.healthy_fraction', q.healthy_fraction)


def _read_yaml(path: Path) -> Dict:
    with open(path) as f:
        return yaml.safe_load(f) or {}


def load_config(
    base_path: Union[str, Path],
    scenario_path: Optional[Union[str, Path]] = None,
    overrides: Optional[Dict] = None,
) -> SimulationConfig:
    """Load and merge hierarchical YAML configuration.

    Merge order: base → scenario → overrides.
    Each layer overrides only the fields it specifies.

    Args:
        base_path: Path to base configuration YAML.
        scenario_path: Optional scenario override YAML (skipped if missing).
        overrides: Optional dict of overrides (e.g. from the command line).

    Returns:
        Validated SimulationConfig.

    Raises:
        FileNotFoundError: If base_path doesn't exist.
        ValueError: If validation fails.
    """
    base_path = Path(base_path)
    if not base_path.exists():
        raise FileNotFoundError(f"Config file not found: {base_path}")

    config_dict = _read_yaml(base_path)

    if scenario_path is not None:
        scenario_path = Path(scenario_path)
        if scenario_path.exists():
            deep_merge(config_dict, _read_yaml(scenario_path))
        else:
            warnings.warn(
                f"Scenario file '{scenario_path}' not found; using base config only.",
                UserWarning,
                stacklevel=2,
            )

    if overrides is not None:
        deep_merge(config_dict, overrides)

    config = _yaml_to_config(config_dict)
    validate_config(config)
    return config


def default_config() -> SimulationConfig:
    """Return a SimulationConfig with all default values."""
    config = SimulationConfig()
    validate_config(config)
    return config
