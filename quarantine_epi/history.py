"""Status counts over time — the feed for the stacked-area chart.

Records {healthy, infected, immune, dead, time} samples in a bounded
buffer: once ``max_length`` samples are held, each new sample drops the
oldest one.

Usage:
    history = StatusHistory(max_length=100)

    # In simulation loop:
    history.append(count_statuses(agents, now))

    # For plotting:
    arrays = history.as_arrays()
"""

from __future__ import annotations

from collections import deque
from typing import Dict, Iterable, Iterator, Optional

import numpy as np

from quarantine_epi.types import Status, StatusCounts


def count_statuses(agents: Iterable, time: float) -> StatusCounts:
    """Tally agent statuses into one sample.

    Args:
        agents: Anything with a ``status`` attribute (Agent, AgentSnapshot).
        time: Timestamp stamped on the sample.
    """
    counts = {s: 0 for s in Status}
    for agent in agents:
        counts[agent.status] += 1
    return StatusCounts(
        healthy=counts[Status.HEALTHY],
        infected=counts[Status.INFECTED],
        immune=counts[Status.IMMUNE],
        dead=counts[Status.DEAD],
        time=time,
    )


class StatusHistory:
    """Bounded time series of StatusCounts."""

    FIELDS = ('healthy', 'infected', 'immune', 'dead', 'time')

    def __init__(self, max_length: int = 100):
        if max_length < 1:
            raise ValueError(f"max_length must be >= 1, got {max_length}")
        self.max_length = max_length
        self._samples: deque = deque(maxlen=max_length)

    def __len__(self) -> int:
        return len(self._samples)

    def __iter__(self) -> Iterator[StatusCounts]:
        return iter(self._samples)

    def append(self, sample: StatusCounts) -> None:
        self._samples.append(sample)

    @property
    def latest(self) -> Optional[StatusCounts]:
        return self._samples[-1] if self._samples else None

    def as_arrays(self) -> Dict[str, np.ndarray]:
        """Column arrays keyed by field name (counts int32, time float64)."""
        out = {}
        for name in self.FIELDS:
            dtype = np.float64 if name == 'time' else np.int32
            out[name] = np.array([getattr(s, name) for s in self._samples], dtype=dtype)
        return out

    def clear(self) -> None:
        self._samples.clear()
