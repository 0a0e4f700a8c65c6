"""Light theme styling for quarantine_epi visualizations.

Provides consistent colors and a figure helper so the arena view and
the status chart share one look.
"""

import matplotlib as mpl
import matplotlib.pyplot as plt
import numpy as np

from quarantine_epi.types import STATUS_COLORS, STATUS_NAMES

# ═══════════════════════════════════════════════════════════════════════
# COLOR PALETTE
# ═══════════════════════════════════════════════════════════════════════

BG_COLOR = 'white'
BORDER_COLOR = '#334433'
TEXT_COLOR = '#000000'
GRID_COLOR = (0.0, 0.0, 0.0, 0.1)

# Agent dots (same mapping the agents report through .color)
DOT_COLORS = {STATUS_NAMES[s]: c for s, c in STATUS_COLORS.items()}

# Quarantine zones: (fill, edge)
ZONE_COLORS = {
    'healthy':  ((0.0, 0.0, 1.0, 0.3), 'blue'),
    'infected': ((1.0, 0.0, 0.0, 0.3), 'red'),
}

# Chart lines and fills per status
LINE_COLORS = {
    'healthy':  (52 / 255, 152 / 255, 219 / 255, 0.7),
    'infected': (231 / 255, 76 / 255, 60 / 255, 0.7),
    'immune':   (46 / 255, 204 / 255, 113 / 255, 0.7),
    'dead':     (34 / 255, 34 / 255, 34 / 255, 0.7),
}
FILL_COLORS = {k: c[:3] + (0.2,) for k, c in LINE_COLORS.items()}

# Bottom layer first
CHART_ORDER = ('dead', 'immune', 'infected', 'healthy')
LEGEND_ORDER = ('healthy', 'infected', 'immune', 'dead')
LEGEND_LABELS = {name: name.capitalize() for name in STATUS_NAMES.values()}


# ═══════════════════════════════════════════════════════════════════════
# THEME HELPERS
# ═══════════════════════════════════════════════════════════════════════

def apply_theme(fig=None, ax=None):
    """Apply the light theme to a matplotlib Figure and/or Axes."""
    if fig is not None:
        fig.patch.set_facecolor(BG_COLOR)
    if ax is not None:
        ax.set_facecolor(BG_COLOR)
        ax.tick_params(colors=TEXT_COLOR)
        for spine in ax.spines.values():
            spine.set_color(BORDER_COLOR)
            spine.set_linewidth(mpl.rcParams['axes.linewidth'] * 1.5)


def styled_figure(nrows=1, ncols=1, figsize=None, **kwargs):
    """Create a Figure + Axes with the theme already applied.

    Returns (fig, ax) where ax may be a single Axes or an ndarray.
    """
    if figsize is None:
        figsize = (8, 5) if (nrows == 1 and ncols == 1) else (12, 5 * nrows)
    fig, axes = plt.subplots(nrows, ncols, figsize=figsize, **kwargs)
    apply_theme(fig=fig)
    if isinstance(axes, np.ndarray):
        for a in axes.flat:
            apply_theme(ax=a)
    else:
        apply_theme(ax=axes)
    return fig, axes


def save_figure(fig, save_path, dpi=150):
    """Save a figure with tight layout, then close it."""
    fig.tight_layout()
    fig.savefig(save_path, dpi=dpi, facecolor=fig.get_facecolor(),
                edgecolor='none', bbox_inches='tight')
    plt.close(fig)
