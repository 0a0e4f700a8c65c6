"""Tests for quarantine_epi.viz — arena frame and status chart.

Rendering only: checks that figures build, carry the expected artists,
and save to disk. Uses the Agg backend.
"""

import matplotlib
matplotlib.use('Agg')

import matplotlib.pyplot as plt
import pytest

from quarantine_epi.config import default_config
from quarantine_epi.history import StatusHistory
from quarantine_epi.model import Simulation
from quarantine_epi.types import STATUS_COLORS, Status, StatusCounts
from quarantine_epi.viz import plot_arena, plot_status_history
from quarantine_epi.viz.style import (
    CHART_ORDER,
    DOT_COLORS,
    LEGEND_LABELS,
    LEGEND_ORDER,
    ZONE_COLORS,
)


@pytest.fixture(autouse=True)
def close_figures():
    yield
    plt.close('all')


@pytest.fixture(scope='module')
def sim():
    config = default_config()
    config.population.n_agents = 50
    config.quarantine.start_tick = 5
    s = Simulation(config)
    for _ in range(40):
        s.step()
    return s


class TestStyle:
    def test_chart_layers_cover_all_statuses(self):
        assert set(CHART_ORDER) == set(LEGEND_ORDER)
        assert CHART_ORDER[0] == 'dead'

    def test_labels_and_dots_follow_statuses(self):
        assert [LEGEND_LABELS[k] for k in LEGEND_ORDER] == [
            'Healthy', 'Infected', 'Immune', 'Dead',
        ]
        assert DOT_COLORS['infected'] == STATUS_COLORS[Status.INFECTED]
        assert set(DOT_COLORS) == set(LEGEND_ORDER)

    def test_zone_colors(self):
        assert ZONE_COLORS['healthy'][1] == 'blue'
        assert ZONE_COLORS['infected'][1] == 'red'


class TestPlotArena:
    def test_returns_figure(self, sim):
        fig = plot_arena(sim.snapshots(), sim.registry, sim.width, sim.height)
        assert isinstance(fig, plt.Figure)

    def test_zones_and_dots(self, sim):
        fig = plot_arena(sim.snapshots(), sim.registry, sim.width, sim.height,
                         title="Tick 40")
        ax = fig.axes[0]
        assert len(ax.patches) == 2
        assert len(ax.collections) == 1
        assert len(ax.collections[0].get_paths()) == 50
        assert ax.get_title() == "Tick 40"

    def test_y_axis_inverted(self, sim):
        fig = plot_arena(sim.snapshots(), sim.registry, sim.width, sim.height)
        assert fig.axes[0].get_ylim() == (sim.height, 0)

    def test_empty_population(self, sim):
        fig = plot_arena([], sim.registry, sim.width, sim.height)
        assert len(fig.axes[0].collections) == 0

    def test_save(self, sim, tmp_path):
        path = tmp_path / "arena.png"
        plot_arena(sim.snapshots(), sim.registry, sim.width, sim.height,
                   save_path=str(path))
        assert path.exists()
        assert path.stat().st_size > 0


class TestPlotStatusHistory:
    def test_from_history(self, sim):
        fig = plot_status_history(sim.history, len(sim.agents))
        ax = fig.axes[0]
        labels = [t.get_text() for t in ax.get_legend().get_texts()]
        assert [lbl.split(':')[0] for lbl in labels] == [
            'Healthy', 'Infected', 'Immune', 'Dead',
        ]
        latest = sim.history.latest
        assert labels[0] == f"Healthy: {latest.healthy}"

    def test_from_result_arrays(self, sim):
        fig = plot_status_history(sim.history.as_arrays(), len(sim.agents))
        ax = fig.axes[0]
        assert len(ax.lines) == 4
        assert ax.get_ylim() == (0, 50)
        assert list(ax.get_yticks()) == [0, 10, 20, 30, 40, 50]

    def test_single_sample_draws_axes_only(self):
        h = StatusHistory()
        h.append(StatusCounts(healthy=10, infected=0, immune=0, dead=0, time=0.0))
        fig = plot_status_history(h, 10)
        ax = fig.axes[0]
        assert len(ax.lines) == 0
        assert ax.get_legend() is None

    def test_save(self, sim, tmp_path):
        path = tmp_path / "chart.png"
        plot_status_history(sim.history, len(sim.agents), save_path=str(path))
        assert path.exists()
