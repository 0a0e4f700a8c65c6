"""Arena frame: quarantine zones plus one dot per agent.

Reads only AgentSnapshot records and zone geometry. The y axis is
inverted so the picture matches arena coordinates (origin top-left).

matplotlib backend is forced to Agg (no display) on import.
"""

from __future__ import annotations

import matplotlib
matplotlib.use('Agg')

from typing import Optional, Sequence

import matplotlib.pyplot as plt
from matplotlib.collections import PatchCollection
from matplotlib.patches import Circle, Rectangle

from quarantine_epi.types import AgentSnapshot, Rect
from quarantine_epi.viz.style import ZONE_COLORS, save_figure, styled_figure
from quarantine_epi.zones import ZoneRegistry


def _zone_patch(rect: Rect, kind: str) -> Rectangle:
    fill, edge = ZONE_COLORS[kind]
    return Rectangle((rect.x, rect.y), rect.width, rect.height,
                     facecolor=fill, edgecolor=edge, linewidth=2)


def plot_arena(
    snapshots: Sequence[AgentSnapshot],
    registry: ZoneRegistry,
    width: float,
    height: float,
    title: Optional[str] = None,
    save_path: Optional[str] = None,
) -> plt.Figure:
    """Draw one frame of the simulation.

    Args:
        snapshots: Agent read records (Simulation.snapshots()).
        registry: Zone registry supplying both quarantine rectangles.
        width, height: Arena size.
        title: Optional axes title.
        save_path: Optional path to save the figure.

    Returns:
        matplotlib Figure.
    """
    fig, ax = styled_figure(figsize=(8, 8 * height / width))

    ax.add_patch(_zone_patch(registry.healthy_zone(), 'healthy'))
    ax.add_patch(_zone_patch(registry.infected_zone(), 'infected'))

    if snapshots:
        dots = [Circle((s.x, s.y), s.radius) for s in snapshots]
        ax.add_collection(PatchCollection(
            dots, facecolors=[s.color for s in snapshots], edgecolors='none',
        ))

    ax.set_xlim(0, width)
    ax.set_ylim(height, 0)
    ax.set_aspect('equal')
    ax.set_xticks([])
    ax.set_yticks([])
    if title:
        ax.set_title(title, fontsize=12)

    if save_path:
        save_figure(fig, save_path)
    return fig
