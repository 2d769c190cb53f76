#!/usr/bin/env python3
"""
Tests for replaying recorded sessions through the sensor runtime.
"""
from dataclasses import replace
from pathlib import Path

import matplotlib
matplotlib.use("Agg")

import numpy as np
import pandas as pd
import pytest

from sources.modules.sensor_kinematics.sources.config import DEFAULT_CORE_CONFIG, CoreConfig
from sources.modules.sensor_kinematics.sources.decoder import decode_record
from sources.modules.sensor_kinematics.sources.models import SensorType
from sources.modules.sensor_kinematics.sources.platform import Channel
from sources.modules.sensor_kinematics.sources.replay import (
    ReplayPlatform, list_sessions, load_recording, recording_to_records
)
from sources.modules.sensor_kinematics.sources.run_replay import main, replay_session

SESSION = "2025-10-28-10-19-35"


def write_session(
    input_dir: Path, session_id: str = SESSION, n: int = 11, start_ms: int = 1000
) -> None:
    """Accelerometer at 50 Hz starting at start_ms, plus a few gyro and rotation rows."""
    input_dir.mkdir(parents=True, exist_ok=True)
    t_ms = start_ms + 20 * np.arange(n)
    acc = pd.DataFrame({"timestamp": t_ms, "ax": 0.0, "ay": 1.0, "az": 0.0})
    acc.to_csv(input_dir / f"FILE_SENSOR_ACC{session_id}.txt", header=False, index=False)

    gyro = pd.DataFrame({
        "timestamp": t_ms[:3],
        "gx_raw": 0.5, "gy_raw": 0.0, "gz_raw": 0.0,
        "gx_bias": 0.25, "gy_bias": 0.0, "gz_bias": 0.0,
    })
    gyro.to_csv(input_dir / f"FILE_GYRO_UNCALIBRATED{session_id}.txt", header=False, index=False)

    rot = pd.DataFrame({"timestamp": t_ms[:2], "qx": 0.0, "qy": 0.0, "qz": 0.0, "qw": 1.0})
    rot.to_csv(input_dir / f"FILE_REL_ROT{session_id}.txt", header=False, index=False)


def config_for(tmp_path: Path, tick_hz: float = 50.0) -> CoreConfig:
    return replace(
        DEFAULT_CORE_CONFIG,
        replay=replace(
            DEFAULT_CORE_CONFIG.replay,
            tick_hz=tick_hz,
            input_dir=tmp_path / "txts",
            output_dir=tmp_path / "outputs",
        ),
    )


class TestRecording:
    def test_list_sessions(self, tmp_path):
        write_session(tmp_path / "txts", "A")
        write_session(tmp_path / "txts", "B")
        assert list_sessions(tmp_path / "txts") == ["A", "B"]

    def test_missing_accelerometer_is_rejected(self, tmp_path):
        (tmp_path / "txts").mkdir()
        with pytest.raises(ValueError):
            load_recording(SESSION, tmp_path / "txts")

    def test_records_are_time_ordered_and_decodable(self, tmp_path):
        write_session(tmp_path / "txts")
        records = recording_to_records(load_recording(SESSION, tmp_path / "txts"))

        assert len(records) == 11 + 3 + 2
        timestamps = [ts for ts, _, _ in records]
        assert timestamps == sorted(timestamps)
        # session starts one sampling period after the synthetic zero entry
        assert timestamps[0] == 20_000_000

        gyro = [decode_record(raw) for _, t, raw in records if t is SensorType.GYROSCOPE]
        assert gyro[0].values.components == (0.25, 0.0, 0.0)


class TestReplayPlatform:
    def test_poll_releases_records_up_to_the_clock(self, tmp_path):
        write_session(tmp_path / "txts")
        platform = ReplayPlatform.from_session(SESSION, tmp_path / "txts")
        channel = platform.create_channel()
        platform.enable(platform.resolve(SensorType.ACCELEROMETER), channel, 20_000)

        first = platform.poll(channel)
        assert [decode_record(r).timestamp for r in first] == [20_000_000]

        platform.advance(40_000_000)
        assert len(platform.poll(channel)) == 2
        assert platform.poll(channel) == []

    def test_disabled_sensors_lose_their_records(self, tmp_path):
        write_session(tmp_path / "txts")
        platform = ReplayPlatform.from_session(SESSION, tmp_path / "txts")
        platform.advance(1_000_000_000)
        assert platform.poll(Channel(1)) == []
        assert platform.exhausted
        assert platform.dropped == 16


class TestReplaySession:
    def test_writes_per_tick_kinematics(self, tmp_path):
        write_session(tmp_path / "txts")
        artifacts = replay_session(SESSION, config=config_for(tmp_path))

        assert artifacts.csv.exists()
        df = pd.read_csv(artifacts.csv)
        assert len(df) == artifacts.ticks == 10
        assert df["vel_y_cm_s"].iloc[-1] > 0.0
        assert df["pos_y_cm"].iloc[-1] > 0.0
        assert (df["vel_x_cm_s"] == 0.0).all()
        assert df["time_s"].is_monotonic_increasing

    def test_wall_clock_timestamps_do_not_leak_into_integration(self, tmp_path):
        write_session(tmp_path / "txts", n=20, start_ms=1_761_646_775_000)
        artifacts = replay_session(SESSION, config=config_for(tmp_path))

        df = pd.read_csv(artifacts.csv)
        assert df["accel_timestamp_ns"].iloc[0] < 1_000_000_000
        # 0.4 s at 1 m/s² stays within a few centimetres
        assert df["pos_y_cm"].abs().max() < 100.0
        assert df["vel_y_cm_s"].abs().max() < 100.0

    def test_plots(self, tmp_path):
        write_session(tmp_path / "txts")
        artifacts = replay_session(SESSION, config=config_for(tmp_path), make_plots=True)
        assert len(artifacts.plots) == 4
        assert all(p.exists() for p in artifacts.plots)


class TestCli:
    def test_list_sessions(self, tmp_path, capsys):
        write_session(tmp_path / "txts")
        config_path = tmp_path / "config.yaml"
        config_path.write_text(f"replay:\n  input_dir: {tmp_path / 'txts'}\n  output_dir: {tmp_path / 'outputs'}\n")

        main(["--config", str(config_path), "--list-sessions"])

        assert SESSION in capsys.readouterr().out

    def test_invalid_config_exits(self, tmp_path):
        config_path = tmp_path / "config.yaml"
        config_path.write_text("series:\n  capacity: 0\n")
        with pytest.raises(SystemExit):
            main(["--config", str(config_path)])
