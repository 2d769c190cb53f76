from __future__ import annotations

import logging
from enum import Enum
from typing import List

from .binding import SensorBinding
from .config import DEFAULT_CORE_CONFIG, CoreConfig
from .decoder import EventDecoder
from .estimator import StateEstimator
from .models import KinematicState, SensorEvent
from .platform import SensorPlatform
from .store import AggregateStore


logger = logging.getLogger(__name__)


class LifecycleTransition(Enum):
    IDLE = "idle"
    RUNNING = "running"
    WILL_SUSPEND = "will_suspend"
    SUSPENDED = "suspended"
    WILL_RESUME = "will_resume"


ENABLING_TRANSITIONS = {LifecycleTransition.RUNNING, LifecycleTransition.WILL_RESUME}


class SensorRuntime:
    """
    Entry points for the host driver.

    The host calls, once per tick and in this order, ``on_lifecycle`` for every
    pending transition, then ``on_tick``. Everything runs on the caller's thread.
    """

    def __init__(self, platform: SensorPlatform, config: CoreConfig = DEFAULT_CORE_CONFIG):
        self.config = config
        self.binding = SensorBinding(platform, config.sampling.sampling_period_us)
        self.decoder = EventDecoder(platform)
        self.store = AggregateStore(config)
        self.estimator = StateEstimator.from_store(self.store)
        self.ticks = 0

    @property
    def state(self) -> KinematicState:
        return self.estimator.state

    def setup(self) -> None:
        self.binding.setup()

    def on_lifecycle(self, transition: LifecycleTransition) -> None:
        logger.debug(f"Lifecycle transition: {transition.name}")
        if transition in ENABLING_TRANSITIONS:
            self.binding.enable_all()
        else:
            self.binding.disable_all()

    def poll_and_dispatch(self) -> List[SensorEvent]:
        events = self.decoder.poll(self.binding.channel)
        self.store.dispatch_all(events)
        return events

    def on_tick(self) -> KinematicState:
        self.poll_and_dispatch()
        self.estimator.update()
        self.ticks += 1
        return self.state

    def shutdown(self) -> None:
        if not self.binding.is_ready:
            return
        try:
            self.binding.disable_all()
        finally:
            self.binding.destroy()
        logger.info(f"Sensor runtime shut down after {self.ticks} ticks")
