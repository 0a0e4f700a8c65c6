#!/usr/bin/env python3
"""Run a quarantine simulation from a YAML configuration file.

Loads the base config (plus an optional scenario override), runs the
simulation, prints a summary, and optionally saves the final arena
frame, the status chart and the summary (with the resolved config) as
JSON.

Usage:
    python scripts/run_quarantine.py
    python scripts/run_quarantine.py --scenario configs/no_quarantine.yaml
    python scripts/run_quarantine.py --ticks 6000 --seed 7 --output-dir results/run1
"""

import argparse
import json
import logging
import sys
import time
from pathlib import Path

# ── Project imports ──────────────────────────────────────────────────
PROJECT_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(PROJECT_ROOT))

from quarantine_epi.config import config_to_dict, load_config
from quarantine_epi.model import Simulation, SimulationResult


DEFAULT_CONFIG = PROJECT_ROOT / "configs" / "default.yaml"


def summarize(result: SimulationResult) -> dict:
    """JSON-serializable run summary."""
    fc = result.final_counts
    return {
        "n_ticks": result.n_ticks,
        "n_agents": result.n_agents,
        "total_infections": result.total_infections,
        "total_recoveries": result.total_recoveries,
        "total_deaths": result.total_deaths,
        "mortality_fraction": round(result.mortality_fraction, 4),
        "peak_infected": result.peak_infected,
        "peak_tick": result.peak_tick,
        "epidemic_end_tick": result.epidemic_end_tick,
        "quarantine_started_tick": result.quarantine_started_tick,
        "final": {
            "healthy": fc.healthy,
            "infected": fc.infected,
            "immune": fc.immune,
            "dead": fc.dead,
        },
    }


# ═══════════════════════════════════════════════════════════════════════
# CLI
# ═══════════════════════════════════════════════════════════════════════

def main():
    parser = argparse.ArgumentParser(
        description="Run a quarantine-zone epidemic simulation.",
        epilog="Example: python scripts/run_quarantine.py --scenario configs/no_quarantine.yaml",
    )
    parser.add_argument(
        "--config", type=str, default=str(DEFAULT_CONFIG),
        help="Base config YAML (default: configs/default.yaml)",
    )
    parser.add_argument(
        "--scenario", type=str, default=None,
        help="Scenario override YAML",
    )
    parser.add_argument(
        "--ticks", type=int, default=None,
        help="Number of ticks (default: from config)",
    )
    parser.add_argument(
        "--seed", type=int, default=None,
        help="Override the master RNG seed",
    )
    parser.add_argument(
        "--output-dir", type=str, default=None,
        help="Save arena.png, chart.png and summary.json here",
    )
    parser.add_argument(
        "--verbose", action="store_true",
        help="Log per-agent epidemic events",
    )
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logging.captureWarnings(True)  # config warnings go through the log too

    overrides = {}
    if args.seed is not None:
        overrides["simulation"] = {"seed": args.seed}
    config = load_config(args.config, args.scenario, overrides or None)

    print("=" * 60)
    print("Quarantine Epidemic Simulation")
    print("=" * 60)
    print(f"  Agents: {config.population.n_agents} "
          f"({config.population.initial_infected} infected at start)")
    print(f"  Arena:  {config.arena.width:.0f} x {config.arena.height:.0f}")
    print(f"  Death model: {config.epidemic.death_model}")

    sim = Simulation(config)
    t0 = time.perf_counter()
    result = sim.run(args.ticks)
    elapsed = time.perf_counter() - t0

    summary = summarize(result)
    print(f"\n  Ran {result.n_ticks} ticks in {elapsed:.2f}s")
    print(f"  Infections: {result.total_infections}  "
          f"Recoveries: {result.total_recoveries}  Deaths: {result.total_deaths}")
    print(f"  Peak infected: {result.peak_infected} (tick {result.peak_tick})")
    print(f"  Final: {summary['final']}")

    if args.output_dir:
        from quarantine_epi.viz import plot_arena, plot_status_history

        out = Path(args.output_dir)
        out.mkdir(parents=True, exist_ok=True)
        plot_arena(sim.snapshots(), sim.registry, sim.width, sim.height,
                   title=f"Tick {result.n_ticks}", save_path=str(out / "arena.png"))
        plot_status_history(result.history, result.n_agents,
                            save_path=str(out / "chart.png"))
        summary["config"] = config_to_dict(config)
        with open(out / "summary.json", "w") as f:
            json.dump(summary, f, indent=2)
        print(f"  Saved: {out}")

    print("\n✅ Done.")


if __name__ == "__main__":
    main()
