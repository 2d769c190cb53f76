from __future__ import annotations

import logging
from typing import Iterable, Optional

from .config import DEFAULT_CORE_CONFIG, CoreConfig
from .models import SensorEvent, SensorType
from .series import FilteredSeries


logger = logging.getLogger(__name__)


class AggregateStore:
    """One filtered series per tracked sensor type."""

    def __init__(self, config: CoreConfig = DEFAULT_CORE_CONFIG):
        def new_series() -> FilteredSeries:
            return FilteredSeries(
                capacity=config.series.capacity,
                min_interval_ns=config.sampling.min_interval_ns,
                lowpass_alpha=config.series.lowpass_alpha,
            )

        self.accelerometer = new_series()
        self.gyroscope = new_series()
        self.rotation = new_series()
        self.compass = new_series()
        self.gravity = new_series()

    def series_for(self, sensor_type: SensorType) -> Optional[FilteredSeries]:
        if sensor_type is SensorType.ACCELEROMETER:
            return self.accelerometer
        if sensor_type is SensorType.GYROSCOPE:
            return self.gyroscope
        if sensor_type is SensorType.ROTATION:
            return self.rotation
        if sensor_type is SensorType.COMPASS:
            return self.compass
        if sensor_type is SensorType.GRAVITY:
            return self.gravity
        return None

    def dispatch(self, event: SensorEvent) -> Optional[SensorEvent]:
        series = self.series_for(event.sensor_type)
        if series is None:
            return None
        return series.insert(event)

    def dispatch_all(self, events: Iterable[SensorEvent]) -> int:
        count = 0
        for event in events:
            self.dispatch(event)
            count += 1
        return count
