"""
Replay of recorded Android sensor sessions as raw hardware records.

A session is a set of header-less CSV txt files sharing a session suffix, e.g.
``FILE_SENSOR_ACC2025-10-28-10-19-35.txt``, with millisecond timestamps in the
first column. The replay platform serves them through the same zero-timeout
poll contract as the device: every record whose timestamp is at or before the
replay clock is released, and records of sensors that are not enabled at that
moment are lost, as they would be on hardware.
"""

from __future__ import annotations

import itertools
import logging
from collections import deque
from dataclasses import dataclass
from pathlib import Path
from typing import Deque, Dict, List, Optional, Set, Tuple

import numpy as np
import pandas as pd

from .config import DEFAULT_CORE_CONFIG, INPUT_TXT_DIR
from .decoder import encode_record
from .models import TRACKED_SENSOR_TYPES, SensorType
from .platform import Channel, SensorHandle, SensorPlatform


logger = logging.getLogger(__name__)

MS_TO_NS = 1_000_000


SENSOR_METADATA = {
    "acc": {
        "prefix": "FILE_SENSOR_ACC",
        "columns": ["timestamp", "ax", "ay", "az"],
        "sensor_type": SensorType.ACCELEROMETER,
        "values": ["ax", "ay", "az"],
    },
    "gyro": {
        "prefix": "FILE_GYRO_UNCALIBRATED",
        "columns": ["timestamp", "gx_raw", "gy_raw", "gz_raw", "gx_bias", "gy_bias", "gz_bias"],
        "sensor_type": SensorType.GYROSCOPE,
        "values": ["gx", "gy", "gz"],
    },
    "rel_rot": {
        "prefix": "FILE_REL_ROT",
        "columns": ["timestamp", "qx", "qy", "qz", "qw"],
        "sensor_type": SensorType.ROTATION,
        "values": ["qx", "qy", "qz", "qw"],
    },
    "geomag_rot": {
        "prefix": "FILE_GEOMAG_ROT",
        "columns": ["timestamp", "qx", "qy", "qz", "qw"],
        "sensor_type": SensorType.COMPASS,
        "values": ["qx", "qy", "qz", "qw"],
    },
    "gravity": {
        "prefix": "FILE_GRAVITY",
        "columns": ["timestamp", "gx", "gy", "gz"],
        "sensor_type": SensorType.GRAVITY,
        "values": ["gx", "gy", "gz"],
    },
}


@dataclass
class SessionRecording:
    session_id: str
    sensors: Dict[str, pd.DataFrame]

    def get(self, key: str) -> pd.DataFrame:
        return self.sensors.get(key, pd.DataFrame())


def list_sessions(input_dir: Path | None = None) -> List[str]:
    input_dir = Path(input_dir or INPUT_TXT_DIR)
    prefix = SENSOR_METADATA["acc"]["prefix"]
    sessions = []
    for file_path in sorted(input_dir.glob(f"{prefix}*.txt")):
        session = file_path.stem.replace(prefix, "")
        if session:
            sessions.append(session)
    return sorted(set(sessions))


def _load_sensor_file(sensor_key: str, session_id: str, input_dir: Path) -> pd.DataFrame:
    metadata = SENSOR_METADATA[sensor_key]
    path = input_dir / f"{metadata['prefix']}{session_id}.txt"
    if not path.exists():
        return pd.DataFrame(columns=metadata["columns"])
    df = pd.read_csv(path, header=None, names=metadata["columns"])
    df = df.drop_duplicates(subset="timestamp").sort_values("timestamp").reset_index(drop=True)
    if sensor_key == "gyro":
        # Calibrated rate = raw - bias
        for axis in ("x", "y", "z"):
            df[f"g{axis}"] = df[f"g{axis}_raw"] - df[f"g{axis}_bias"].fillna(0.0)
    return df


def load_recording(session_id: str, input_dir: Path | None = None) -> SessionRecording:
    input_dir = Path(input_dir or INPUT_TXT_DIR)
    sensors = {key: _load_sensor_file(key, session_id, input_dir) for key in SENSOR_METADATA}
    if sensors["acc"].empty:
        raise ValueError(f"Accelerometer data is required to replay session {session_id}.")
    return SessionRecording(session_id=session_id, sensors=sensors)


def recording_to_records(
    recording: SessionRecording,
    start_offset_ns: int = DEFAULT_CORE_CONFIG.sampling.min_interval_ns,
) -> List[Tuple[int, SensorType, bytes]]:
    """
    Convert every recorded row into (timestamp_ns, sensor_type, raw record), time ordered.

    Recorded timestamps are wall-clock milliseconds. They are moved onto a
    monotonic nanosecond clock that starts at ``start_offset_ns`` for the
    earliest row of the session, so the first real sample sits one sampling
    period after the synthetic zero entry every series starts with.
    """
    frames = [recording.get(key) for key in SENSOR_METADATA]
    origin_ms = min(df["timestamp"].min() for df in frames if not df.empty)
    records = []
    for key, metadata in SENSOR_METADATA.items():
        df = recording.get(key)
        if df.empty:
            continue
        sensor_type = metadata["sensor_type"]
        values = df[metadata["values"]].to_numpy(dtype=float)
        elapsed_ms = df["timestamp"].to_numpy(dtype=float) - origin_ms
        timestamps = np.rint(elapsed_ms * MS_TO_NS).astype(np.int64) + start_offset_ns
        valid = ~np.isnan(values).any(axis=1)
        if not valid.all():
            logger.warning(f"Dropping {int((~valid).sum())} incomplete {key} rows")
        for ts, row in zip(timestamps[valid], values[valid]):
            records.append((int(ts), sensor_type, encode_record(sensor_type.value, int(ts), row)))
    records.sort(key=lambda r: r[0])
    return records


class ReplayPlatform(SensorPlatform):
    """Platform backed by a recorded session; time advances only via ``advance``."""

    def __init__(self, records: List[Tuple[int, SensorType, bytes]], session_id: str = ""):
        self.session_id = session_id
        self._records: Deque[Tuple[int, SensorType, bytes]] = deque(records)
        self.start_ns = records[0][0] if records else 0
        self.end_ns = records[-1][0] if records else 0
        self.clock_ns = self.start_ns
        self.enabled: Set[SensorType] = set()
        self.dropped = 0
        self._channel_ids = itertools.count(1)

    @classmethod
    def from_session(
        cls,
        session_id: str,
        input_dir: Path | None = None,
        start_offset_ns: int = DEFAULT_CORE_CONFIG.sampling.min_interval_ns,
    ) -> "ReplayPlatform":
        recording = load_recording(session_id, input_dir)
        records = recording_to_records(recording, start_offset_ns)
        logger.info(f"Loaded session {session_id}: {len(records)} records")
        return cls(records, session_id=session_id)

    @property
    def exhausted(self) -> bool:
        return not self._records

    @property
    def elapsed_s(self) -> float:
        return (self.clock_ns - self.start_ns) * 1e-9

    def advance(self, dt_ns: int) -> None:
        self.clock_ns += dt_ns

    def resolve(self, sensor_type: SensorType) -> Optional[SensorHandle]:
        if sensor_type not in TRACKED_SENSOR_TYPES:
            return None
        return SensorHandle(sensor_type, sensor_type.value)

    def create_channel(self) -> Optional[Channel]:
        return Channel(next(self._channel_ids))

    def enable(self, handle: SensorHandle, channel: Channel, period_us: int) -> int:
        self.enabled.add(handle.sensor_type)
        return 0

    def disable(self, handle: SensorHandle, channel: Channel) -> int:
        self.enabled.discard(handle.sensor_type)
        return 0

    def poll(self, channel: Channel, timeout_ms: int = 0) -> List[bytes]:
        released = []
        while self._records and self._records[0][0] <= self.clock_ns:
            _, sensor_type, record = self._records.popleft()
            if sensor_type not in self.enabled:
                self.dropped += 1
                continue
            released.append(record)
        return released

    def destroy(self, channel: Channel) -> int:
        channel.destroyed = True
        return 0
