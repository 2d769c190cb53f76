"""
Platform sensor service contract.

The host device exposes sensors through a small synchronous API modelled on the
Android NDK sensor manager: default sensors are resolved by type, an event
channel is created once, sensors are enabled on that channel at a sampling
period, and raw fixed-layout records are drained from it without blocking.
Failures surface as ``None`` handles or negative status codes; turning them into
exceptions is the binding's job.
"""

from __future__ import annotations

import itertools
import logging
import struct
from abc import ABC, abstractmethod
from collections import deque
from dataclasses import dataclass, field
from typing import Deque, Dict, Iterable, List, Optional, Set

from .models import SensorType


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SensorHandle:
    sensor_type: SensorType
    sensor_id: int


@dataclass(eq=False)
class Channel:
    channel_id: int
    destroyed: bool = field(default=False, compare=False)


class SensorPlatform(ABC):

    @abstractmethod
    def resolve(self, sensor_type: SensorType) -> Optional[SensorHandle]:
        """Return the default sensor of this type, or None if the device has none."""

    @abstractmethod
    def create_channel(self) -> Optional[Channel]:
        """Create the event channel, or return None if the platform rejects it."""

    @abstractmethod
    def enable(self, handle: SensorHandle, channel: Channel, period_us: int) -> int:
        pass

    @abstractmethod
    def disable(self, handle: SensorHandle, channel: Channel) -> int:
        pass

    @abstractmethod
    def poll(self, channel: Channel, timeout_ms: int = 0) -> List[bytes]:
        """Return every raw record currently buffered on the channel."""

    @abstractmethod
    def destroy(self, channel: Channel) -> int:
        pass


def record_sensor_id(record: bytes) -> Optional[int]:
    if len(record) < 8:
        return None
    return struct.unpack_from("<i", record, 4)[0]


class MemoryPlatform(SensorPlatform):
    """
    In-process platform whose records are queued by the caller.

    Records coming from a resolved sensor are only delivered while that sensor is
    enabled; anything else (metadata, unknown types) is always delivered.
    """

    def __init__(
        self,
        missing: Iterable[SensorType] = (),
        reject_channel: bool = False,
        statuses: Optional[Dict[str, int]] = None,
    ):
        self.missing = set(missing)
        self.reject_channel = reject_channel
        self.statuses = dict(statuses or {})
        self.handles: Dict[SensorType, SensorHandle] = {}
        self.enabled: Set[int] = set()
        self.periods_us: Dict[int, int] = {}
        self.calls: List[str] = []
        self._pending: Deque[bytes] = deque()
        self._channel_ids = itertools.count(1)

    def sensor_id_for(self, sensor_type: SensorType) -> int:
        # Android sensor handles are small ints; reuse the type code
        return sensor_type.value

    def push(self, *records: bytes) -> None:
        self._pending.extend(records)

    def resolve(self, sensor_type: SensorType) -> Optional[SensorHandle]:
        self.calls.append(f"resolve:{sensor_type.name}")
        if sensor_type in self.missing:
            return None
        handle = SensorHandle(sensor_type, self.sensor_id_for(sensor_type))
        self.handles[sensor_type] = handle
        return handle

    def create_channel(self) -> Optional[Channel]:
        self.calls.append("create_channel")
        if self.reject_channel:
            return None
        return Channel(next(self._channel_ids))

    def enable(self, handle: SensorHandle, channel: Channel, period_us: int) -> int:
        self.calls.append(f"enable:{handle.sensor_type.name}")
        status = self.statuses.get("enable", 0)
        if status >= 0:
            self.enabled.add(handle.sensor_id)
            self.periods_us[handle.sensor_id] = period_us
        return status

    def disable(self, handle: SensorHandle, channel: Channel) -> int:
        self.calls.append(f"disable:{handle.sensor_type.name}")
        status = self.statuses.get("disable", 0)
        if status >= 0:
            self.enabled.discard(handle.sensor_id)
        return status

    def poll(self, channel: Channel, timeout_ms: int = 0) -> List[bytes]:
        resolved_ids = {h.sensor_id for h in self.handles.values()}
        records = []
        while self._pending:
            record = self._pending.popleft()
            sensor_id = record_sensor_id(record)
            if sensor_id in resolved_ids and sensor_id not in self.enabled:
                logger.debug(f"Dropping record from disabled sensor {sensor_id}")
                continue
            records.append(record)
        return records

    def destroy(self, channel: Channel) -> int:
        self.calls.append("destroy")
        channel.destroyed = True
        return self.statuses.get("destroy", 0)
