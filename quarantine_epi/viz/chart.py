"""Status time-series chart: one filled area + line per status.

Layers are drawn bottom-up (dead → immune → infected → healthy), each
filled down to the axis, so overlaps stay readable. The y axis spans
0..total population with 5 labelled grid steps; the legend shows the
latest counts.

matplotlib backend is forced to Agg (no display) on import.
"""

from __future__ import annotations

import matplotlib
matplotlib.use('Agg')

from typing import Optional, Union

import matplotlib.pyplot as plt
import numpy as np

from quarantine_epi.history import StatusHistory
from quarantine_epi.viz.style import (
    CHART_ORDER,
    FILL_COLORS,
    GRID_COLOR,
    LEGEND_LABELS,
    LEGEND_ORDER,
    LINE_COLORS,
    save_figure,
    styled_figure,
)

Y_STEPS = 5


def plot_status_history(
    history: Union[StatusHistory, dict],
    total: int,
    save_path: Optional[str] = None,
) -> plt.Figure:
    """Area chart of status counts over time.

    Args:
        history: StatusHistory, or its ``as_arrays()`` dict (as stored
            on SimulationResult.history).
        total: Population size (top of the y axis).
        save_path: Optional path to save the figure.

    Returns:
        matplotlib Figure. With fewer than two samples only the axes
        are drawn.
    """
    data = history.as_arrays() if isinstance(history, StatusHistory) else history
    fig, ax = styled_figure(figsize=(10, 4))

    top = max(int(total), 1)
    ticks = [round(i / Y_STEPS * top) for i in range(Y_STEPS + 1)]
    ax.set_yticks(ticks)
    ax.set_ylim(0, top)
    ax.grid(True, axis='y', color=GRID_COLOR, linewidth=1)
    ax.set_ylabel('Number of people', fontsize=11)
    ax.set_xlabel('Time (s)', fontsize=11)

    times = np.asarray(data.get('time', []), dtype=float)
    if times.size < 2:
        ax.set_xlim(0, 1)
    else:
        for name in CHART_ORDER:
            values = np.asarray(data[name], dtype=float)
            ax.fill_between(times, 0, values, color=FILL_COLORS[name], linewidth=0)
            ax.plot(times, values, color=LINE_COLORS[name], linewidth=2,
                    label=f"{LEGEND_LABELS[name]}: {int(values[-1])}")
        ax.set_xlim(times[0], times[-1])

        handles, labels = ax.get_legend_handles_labels()
        by_name = dict(zip(CHART_ORDER, zip(handles, labels)))
        ordered = [by_name[n] for n in LEGEND_ORDER]
        ax.legend([h for h, _ in ordered], [lbl for _, lbl in ordered],
                  loc='upper right', fontsize=10)

    if save_path:
        save_figure(fig, save_path)
    return fig
