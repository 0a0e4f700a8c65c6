"""quarantine_epi visualization library.

Modules:
  - style: Colours and figure helpers
  - arena: One frame of agents and quarantine zones
  - chart: Stacked status counts over time
"""

from quarantine_epi.viz.style import (  # noqa: F401
    CHART_ORDER,
    DOT_COLORS,
    FILL_COLORS,
    LINE_COLORS,
    ZONE_COLORS,
    apply_theme,
    save_figure,
    styled_figure,
)

from quarantine_epi.viz.arena import plot_arena  # noqa: F401
from quarantine_epi.viz.chart import plot_status_history  # noqa: F401
