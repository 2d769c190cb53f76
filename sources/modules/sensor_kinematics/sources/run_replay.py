from __future__ import annotations

import argparse
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List

import pandas as pd

from .config import DEFAULT_CORE_CONFIG, CoreConfig, ensure_output_dir, load_config
from .errors import ConfigError, SensorPlatformError
from .log_setup import setup_logging
from .plotting import generate_session_plots
from .replay import ReplayPlatform, list_sessions
from .runtime import LifecycleTransition, SensorRuntime


logger = logging.getLogger(__name__)


@dataclass
class SessionArtifacts:
    csv: Path
    plots: List[Path]
    ticks: int


def _state_row(runtime: SensorRuntime, platform: ReplayPlatform) -> Dict[str, float]:
    state = runtime.state
    accel = runtime.store.accelerometer.latest()
    accel_values = accel.values.vec3()
    return {
        "tick": runtime.ticks,
        "time_s": platform.elapsed_s,
        "accel_timestamp_ns": accel.timestamp,
        "accel_x": accel_values[0],
        "accel_y": accel_values[1],
        "accel_z": accel_values[2],
        "pos_x_cm": state.position[0] * 100.0,
        "pos_y_cm": state.position[1] * 100.0,
        "pos_z_cm": state.position[2] * 100.0,
        "vel_x_cm_s": state.velocity[0] * 100.0,
        "vel_y_cm_s": state.velocity[1] * 100.0,
        "vel_z_cm_s": state.velocity[2] * 100.0,
    }


def replay_session(
    session_id: str,
    config: CoreConfig = DEFAULT_CORE_CONFIG,
    make_plots: bool = False,
) -> SessionArtifacts:
    """
    Replay one recorded session through the sensor runtime at the configured tick rate.

    The per-tick kinematic state is written to ``<session>_kinematics.csv``.
    """
    platform = ReplayPlatform.from_session(
        session_id, config.replay.input_dir, start_offset_ns=config.sampling.min_interval_ns
    )
    runtime = SensorRuntime(platform, config)
    tick_ns = int(round(1e9 / config.replay.tick_hz))

    results: List[Dict[str, float]] = []
    runtime.setup()
    try:
        runtime.on_lifecycle(LifecycleTransition.RUNNING)
        logger.info(f"Replaying {session_id} at {config.replay.tick_hz:.0f} Hz ticks")
        while not platform.exhausted:
            platform.advance(tick_ns)
            runtime.on_tick()
            results.append(_state_row(runtime, platform))
    finally:
        runtime.shutdown()

    skipped = runtime.decoder.skipped
    rejected = runtime.store.accelerometer.rejected
    logger.info(f"{runtime.ticks} ticks, {skipped} records skipped, {rejected} accelerometer samples debounced")

    output_dir = ensure_output_dir(config)
    results_df = pd.DataFrame(results)
    output_path = output_dir / f"{session_id}_kinematics.csv"
    results_df.to_csv(output_path, index=False)

    plots: List[Path] = []
    if make_plots:
        plots = generate_session_plots(results_df, session_id, output_dir)

    return SessionArtifacts(csv=output_path, plots=plots, ticks=runtime.ticks)


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Dead-reckoning replay of Android sensor recordings.")
    parser.add_argument(
        "--session",
        type=str,
        help="Session identifier, e.g. 2025-10-28-10-19-35. Default: most recent.",
    )
    parser.add_argument("--list-sessions", action="store_true", help="List available sessions and exit.")
    parser.add_argument("--all", action="store_true", help="Process every available session.")
    parser.add_argument("--plot", action="store_true", help="Generate acceleration/velocity/position plots.")
    parser.add_argument("--config", type=Path, help="YAML configuration file.")
    parser.add_argument("--log-dir", type=Path, help="Write a detailed log file into this directory.")
    return parser.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)
    setup_logging(log_dir=args.log_dir)

    try:
        config = load_config(args.config) if args.config else DEFAULT_CORE_CONFIG
    except (OSError, ConfigError) as e:
        raise SystemExit(f"Invalid configuration: {e}")

    sessions = list_sessions(config.replay.input_dir)
    if not sessions:
        raise SystemExit("No sessions found inside the txt input directory.")

    if args.list_sessions:
        print("Available sessions:")
        for sess in sessions:
            print(f"  - {sess}")
        return

    target_sessions: List[str]
    if args.all:
        target_sessions = sessions
    else:
        target_sessions = [args.session or sessions[-1]]

    for sess in target_sessions:
        try:
            outputs = replay_session(sess, config=config, make_plots=args.plot)
        except SensorPlatformError as e:
            raise SystemExit(f"Sensor setup failed: {e}")
        print(f"[REPLAY] Session {sess} processed -> {outputs.csv}")
        for plot_path in outputs.plots:
            print(f"   Plot saved: {plot_path}")


if __name__ == "__main__":
    main()
