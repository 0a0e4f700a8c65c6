"""Epidemic constants and the death-probability model.

Two death models are supported and selectable by name:

  FLAT:        p = DEATH_PROB_BASE per check, independent of time.
  ESCALATING:  p = min(DEATH_PROB_CAP,
                       DEATH_PROB_BASE + DEATH_PROB_GROWTH × elapsed)
               where elapsed is seconds since infection.

Both give DEATH_PROB_BASE for a freshly infected agent, so the two
models only diverge as an infection ages.

Quarantine-entry probability on infection is 0.55; the earlier
documented figure of 0.40 is kept as QUARANTINE_ENTRY_PROB_DOCUMENTED so
either behaviour can be reproduced.
"""

from __future__ import annotations

from enum import Enum
from typing import Union


# ═══════════════════════════════════════════════════════════════════════
# CONSTANTS
# ═══════════════════════════════════════════════════════════════════════

# Death
DEATH_PROB_BASE = 0.02        # per check
DEATH_PROB_GROWTH = 0.002     # per second of infection (ESCALATING only)
DEATH_PROB_CAP = 0.10         # ceiling (ESCALATING only)

# Quarantine on infection
QUARANTINE_ENTRY_PROB = 0.55
QUARANTINE_ENTRY_PROB_DOCUMENTED = 0.40
SEEDED_QUARANTINE_PROB = 0.5  # agents created already infected

# Recovery
DEFAULT_RECOVERY_SECONDS = 10.0


class DeathModel(str, Enum):
    """How the per-check death probability is computed."""
    FLAT = 'flat'
    ESCALATING = 'escalating'


def death_probability(
    model: Union[DeathModel, str],
    elapsed: float,
) -> float:
    """Per-check probability that an infected agent dies.

    Args:
        model: DeathModel or its string value.
        elapsed: Seconds since infection (negative values count as 0).

    Returns:
        Probability in [0, DEATH_PROB_CAP].

    Raises:
        ValueError: If ``model`` is not a known death model.
    """
    model = DeathModel(model)
    if model is DeathModel.FLAT:
        return DEATH_PROB_BASE
    elapsed = max(0.0, elapsed)
    return min(DEATH_PROB_CAP, DEATH_PROB_BASE + DEATH_PROB_GROWTH * elapsed)
