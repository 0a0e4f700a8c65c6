"""quarantine_epi: agent-based epidemic simulation with quarantine zones.

A 2D arena of moving point-agents subject to an epidemic process
(healthy → infected → immune, with a chance of death), plus two fixed
quarantine zones:
  - Per-agent state machine with speed clamping and wall/zone bounces
  - Routing into and out of quarantine with two-waypoint detours around
    the other zone
  - Time- and probability-driven infection, recovery and death
  - A frame-driven driver and a thin matplotlib rendering layer
"""

__version__ = "0.1.0"
