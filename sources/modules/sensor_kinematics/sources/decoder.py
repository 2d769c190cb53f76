"""
Decoder for raw hardware sensor records.

Each record has the fixed little-endian layout of the NDK ``ASensorEvent``:

    offset  size  field
    0       4     int32  version (record size)
    4       4     int32  sensor id
    8       4     int32  type (discriminator)
    12      4     int32  reserved
    16      8     int64  timestamp [ns]
    24      64    payload (16 float32 slots)
    88      4     uint32 flags
    92      12    int32[3] reserved

Payload for vector sensors: float32 x, y, z followed by an int8 status.
Payload for orientation sensors: float32 x, y, z, w followed by an int8 status.
"""

from __future__ import annotations

import logging
import struct
from typing import List, Optional, Sequence

from .models import (
    VALUE_KIND_BY_SENSOR,
    SensorAccuracy,
    SensorEvent,
    SensorType,
    SensorValues,
    ValueKind,
)
from .platform import Channel, SensorPlatform


logger = logging.getLogger(__name__)

HEADER_FORMAT = "<iiiiq"
RECORD_FORMAT = "<iiiiq64sI12s"
RECORD_SIZE = struct.calcsize(RECORD_FORMAT)  # 104
PAYLOAD_OFFSET = struct.calcsize(HEADER_FORMAT)  # 24

PAYLOAD_FORMATS = {
    ValueKind.VECTOR3: "<3fb",
    ValueKind.QUATERNION: "<4fb",
}


def encode_record(
    type_code: int,
    timestamp_ns: int,
    components: Sequence[float] = (),
    accuracy_code: int = SensorAccuracy.HIGH.value,
    sensor_id: Optional[int] = None,
) -> bytes:
    """Pack one raw record; unknown type codes get an all-zero payload."""
    record = bytearray(RECORD_SIZE)
    if sensor_id is None:
        sensor_id = type_code
    struct.pack_into(HEADER_FORMAT, record, 0, RECORD_SIZE, sensor_id, type_code, 0, timestamp_ns)

    sensor_type = SensorType.from_code(type_code)
    kind = VALUE_KIND_BY_SENSOR.get(sensor_type)
    if kind is not None:
        if len(components) != kind.value:
            raise ValueError(f"{sensor_type.name} needs {kind.value} components, got {len(components)}")
        struct.pack_into(PAYLOAD_FORMATS[kind], record, PAYLOAD_OFFSET, *components, accuracy_code)
    return bytes(record)


def decode_record(raw: bytes) -> Optional[SensorEvent]:
    """
    Decode one raw record into a SensorEvent.

    Returns None for records that are not consumed: truncated records, unknown
    discriminators and recognized-but-untracked types (additional info, ...).
    """
    if len(raw) < RECORD_SIZE:
        logger.warning(f"Truncated sensor record ({len(raw)} < {RECORD_SIZE} bytes), skipping")
        return None

    _, _, type_code, _, timestamp = struct.unpack_from(HEADER_FORMAT, raw, 0)

    sensor_type = SensorType.from_code(type_code)
    if sensor_type is None:
        logger.warning(f"Sensor (type: {type_code}) not recognized!")
        return None

    kind = VALUE_KIND_BY_SENSOR.get(sensor_type)
    if kind is None:
        logger.debug(f"Ignoring {sensor_type.name} record")
        return None

    *components, status = struct.unpack_from(PAYLOAD_FORMATS[kind], raw, PAYLOAD_OFFSET)
    return SensorEvent(
        accuracy=SensorAccuracy.from_code(status),
        sensor_type=sensor_type,
        timestamp=timestamp,
        values=SensorValues(kind, tuple(components)),
    )


class EventDecoder:
    """Drains the platform channel without blocking and decodes what it finds."""

    def __init__(self, platform: SensorPlatform):
        self.platform = platform
        self.skipped = 0

    def poll(self, channel: Optional[Channel]) -> List[SensorEvent]:
        if channel is None:
            logger.warning("Sensor event channel not initialized!")
            return []

        events = []
        for raw in self.platform.poll(channel, timeout_ms=0):
            event = decode_record(raw)
            if event is None:
                self.skipped += 1
                continue
            events.append(event)
        return events
