"""
Bounded sensor history with debounce and one-pole low-pass filtering.

Newest samples live at the tail, oldest at the head. A new sample is accepted
only if it arrives at least one sampling period after the latest stored one;
accepted samples are blended with the latest value before being stored:

    smoothed = latest * (1 - alpha) + new * alpha

Orientation values are blended component-wise like vectors, without
renormalization, so long runs drift away from unit length.
"""

from __future__ import annotations

import logging
from collections import deque
from typing import Deque, Iterable, Iterator, Optional

from .config import DEFAULT_CORE_CONFIG
from .errors import SeriesIndexError
from .models import SensorEvent


logger = logging.getLogger(__name__)


class FilteredSeries:

    def __init__(
        self,
        capacity: int = DEFAULT_CORE_CONFIG.series.capacity,
        min_interval_ns: int = DEFAULT_CORE_CONFIG.sampling.min_interval_ns,
        lowpass_alpha: float = DEFAULT_CORE_CONFIG.series.lowpass_alpha,
        seed: Optional[Iterable[SensorEvent]] = None,
    ):
        """
        Args:
            capacity: Maximum number of stored samples.
            min_interval_ns: Debounce interval (sampling period in ns).
            lowpass_alpha: Weight of the incoming sample in the blend.
            seed: Initial entries stored as-is (oldest first). Defaults to a
                single synthetic zero sample.
        """
        if capacity < 1:
            raise ValueError(f"capacity must be >= 1, got {capacity}")
        self.capacity = capacity
        self.min_interval_ns = min_interval_ns
        self.lowpass_alpha = lowpass_alpha

        seed = [SensorEvent.default()] if seed is None else list(seed)
        if not seed:
            raise ValueError("seed must contain at least one entry")
        self._series: Deque[SensorEvent] = deque(seed[-capacity:])
        self.rejected = 0

    def __len__(self) -> int:
        return len(self._series)

    def __iter__(self) -> Iterator[SensorEvent]:
        return iter(self._series)

    def insert(self, event: SensorEvent) -> Optional[SensorEvent]:
        """
        Insert a sample; returns the evicted head entry, if any.

        Debounced samples leave the series untouched and evict nothing.
        """
        latest = self.latest()
        if event.timestamp - latest.timestamp < self.min_interval_ns:
            self.rejected += 1
            return None

        evicted = None
        if len(self._series) >= self.capacity:
            evicted = self._series.popleft()

        smoothed = latest.values.blend(event.values, self.lowpass_alpha)
        self._series.append(event.with_values(smoothed))
        return evicted

    def t_minus(self, index: int) -> Optional[SensorEvent]:
        if index < 0 or index >= self.capacity:
            logger.warning(f"Invalid access to FilteredSeries with index {index}")
            raise SeriesIndexError(f"index {index} outside history of capacity {self.capacity}")
        if index >= len(self._series):
            return None
        return self._series[len(self._series) - index - 1]

    def latest(self) -> SensorEvent:
        return self._series[-1]

    def oldest(self) -> SensorEvent:
        return self._series[0]

    def is_full(self) -> bool:
        return len(self._series) >= self.capacity
