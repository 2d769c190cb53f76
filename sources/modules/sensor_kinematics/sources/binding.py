from __future__ import annotations

import logging
from typing import Dict, List, Optional, Sequence, Set

from .errors import ChannelError, PlatformStatusError, SensorUnavailableError
from .models import TRACKED_SENSOR_TYPES, SensorType
from .platform import Channel, SensorHandle, SensorPlatform


logger = logging.getLogger(__name__)


class SensorBinding:
    """
    Owns the platform handles and the single event channel.

    enable/disable are idempotent per handle: the platform is only called on a
    real state change. The channel is destroyed exactly once by ``destroy``.
    """

    def __init__(self, platform: SensorPlatform, period_us: int):
        self.platform = platform
        self.period_us = period_us
        self.handles: Dict[SensorType, SensorHandle] = {}
        self.channel: Optional[Channel] = None
        self._enabled: Set[SensorType] = set()
        self._destroyed = False

    def resolve(self, sensor_type: SensorType) -> SensorHandle:
        handle = self.platform.resolve(sensor_type)
        if handle is None:
            logger.error(f"Required sensor {sensor_type.name} is missing")
            raise SensorUnavailableError(sensor_type)
        self.handles[sensor_type] = handle
        return handle

    def create_channel(self) -> Channel:
        channel = self.platform.create_channel()
        if channel is None:
            logger.error("Platform rejected sensor event channel creation")
            raise ChannelError("Sensor event channel could not be created")
        self.channel = channel
        return channel

    def setup(self, sensor_types: Sequence[SensorType] = TRACKED_SENSOR_TYPES) -> Channel:
        # No channel exists until every sensor has resolved
        for sensor_type in sensor_types:
            self.resolve(sensor_type)
        logger.info(f"Sensors resolved: {', '.join(t.name for t in self.handles)}")
        return self.create_channel()

    @property
    def is_ready(self) -> bool:
        return self.channel is not None and not self._destroyed

    def is_enabled(self, sensor_type: SensorType) -> bool:
        return sensor_type in self._enabled

    def _require_channel(self, channel: Channel) -> None:
        if self._destroyed or channel.destroyed:
            raise ChannelError("Sensor event channel already destroyed")

    def enable(self, handle: SensorHandle, channel: Channel, period_us: Optional[int] = None) -> None:
        self._require_channel(channel)
        if handle.sensor_type in self._enabled:
            return
        period_us = self.period_us if period_us is None else period_us
        status = self.platform.enable(handle, channel, period_us)
        if status < 0:
            logger.error(f"Enabling {handle.sensor_type.name} failed with status {status}")
            raise PlatformStatusError("enable", status)
        self._enabled.add(handle.sensor_type)

    def disable(self, handle: SensorHandle, channel: Channel) -> None:
        self._require_channel(channel)
        if handle.sensor_type not in self._enabled:
            return
        status = self.platform.disable(handle, channel)
        if status < 0:
            logger.error(f"Disabling {handle.sensor_type.name} failed with status {status}")
            raise PlatformStatusError("disable", status)
        self._enabled.discard(handle.sensor_type)

    def enable_all(self) -> None:
        if not self.is_ready:
            logger.warning("Cannot enable sensors: binding not set up")
            return
        logger.debug("Enabling sensors...")
        for handle in self.handles.values():
            self.enable(handle, self.channel)

    def disable_all(self) -> None:
        if not self.is_ready:
            logger.warning("Cannot disable sensors: binding not set up")
            return
        logger.debug("Disabling sensors...")
        for handle in self.handles.values():
            self.disable(handle, self.channel)

    def destroy(self, channel: Optional[Channel] = None) -> None:
        channel = channel or self.channel
        if channel is None:
            raise ChannelError("No sensor event channel to destroy")
        self._require_channel(channel)
        status = self.platform.destroy(channel)
        self._destroyed = True
        self._enabled.clear()
        self.channel = None
        if status < 0:
            logger.error(f"Destroying sensor event channel failed with status {status}")
            raise PlatformStatusError("destroy", status)

    @property
    def enabled_types(self) -> List[SensorType]:
        return [t for t in self.handles if t in self._enabled]
