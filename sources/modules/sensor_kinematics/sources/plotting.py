from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import List, Tuple

import matplotlib.pyplot as plt
import pandas as pd


AXES = ("x", "y", "z")


@dataclass(frozen=True)
class KinematicPanel:
    name: str
    columns: Tuple[str, str, str]
    title: str
    ylabel: str


PANELS = (
    KinematicPanel("acceleration", ("accel_x", "accel_y", "accel_z"), "Filtered acceleration", "Acceleration [m/s²]"),
    KinematicPanel("velocities", tuple(f"vel_{a}_cm_s" for a in AXES), "Integrated velocity", "Velocity [cm/s]"),
    KinematicPanel("positions", tuple(f"pos_{a}_cm" for a in AXES), "Integrated position", "Position [cm]"),
)


def _plot_panel(results_df: pd.DataFrame, panel: KinematicPanel, session_id: str, output_path: Path) -> Path:
    fig, ax = plt.subplots(figsize=(10, 4))
    present = [(col, axis.upper()) for col, axis in zip(panel.columns, AXES) if col in results_df]
    for col, label in present:
        ax.plot(results_df["time_s"], results_df[col], label=label, linewidth=1.2)
    ax.set_title(f"{panel.title} - {session_id}")
    ax.set_xlabel("Replay time [s]")
    ax.set_ylabel(panel.ylabel)
    ax.grid(True, alpha=0.3)
    if present:
        ax.legend(loc="upper left")
    fig.tight_layout()
    fig.savefig(output_path, dpi=200)
    plt.close(fig)
    return output_path


def _plot_trajectory(results_df: pd.DataFrame, session_id: str, output_path: Path) -> Path:
    fig = plt.figure(figsize=(6, 6))
    ax = fig.add_subplot(111, projection="3d")
    pos = results_df[[f"pos_{a}_cm" for a in AXES]].dropna().to_numpy()
    if len(pos):
        ax.plot(pos[:, 0], pos[:, 1], pos[:, 2], linewidth=1.0)
        # Start and end of the dead-reckoned path
        ax.scatter(*pos[0], color="green", s=20)
        ax.scatter(*pos[-1], color="red", s=20)
    ax.set_title(f"Dead-reckoned trajectory - {session_id}")
    for axis, set_label in zip(AXES, (ax.set_xlabel, ax.set_ylabel, ax.set_zlabel)):
        set_label(f"{axis.upper()} [cm]")
    fig.tight_layout()
    fig.savefig(output_path, dpi=200)
    plt.close(fig)
    return output_path


def generate_session_plots(results_df: pd.DataFrame, session_id: str, output_dir: Path) -> List[Path]:
    """Write one time-series plot per kinematic panel plus the 3D trajectory."""
    output_dir = Path(output_dir)
    output_paths = [
        _plot_panel(results_df, panel, session_id, output_dir / f"{session_id}_{panel.name}.png")
        for panel in PANELS
    ]
    output_paths.append(_plot_trajectory(results_df, session_id, output_dir / f"{session_id}_trajectory3d.png"))
    return output_paths
