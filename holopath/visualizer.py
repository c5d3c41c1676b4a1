"""
2D visualization of a planned path and its playback.

Uses matplotlib to show:
- The path colored by planned velocity, with waypoints and heading targets
- Velocity and acceleration over time, planned and (optionally) replayed
"""

from __future__ import annotations

from typing import Any, Mapping, Sequence

import matplotlib.pyplot as plt
import numpy as np
from matplotlib.patches import Circle

from .core.types import HistorySample, PlanResult, Waypoint


def plot_plan(
    plan: PlanResult,
    waypoints: Sequence[Waypoint],
    history: Sequence[HistorySample] | None = None,
    visual_cfg: Mapping[str, Any] | None = None,
    title: str | None = None,
    show: bool = True,
    robot_radius: float | None = None,
) -> plt.Figure:
    """
    Plot the planned path and its velocity profile.

    Args:
        plan: successful planner result.
        waypoints: the waypoints the plan was computed from.
        history: optional playback history to overlay on the time plots.
        show: whether to call plt.show() at the end.
        robot_radius: when set with a history, the robot body is drawn as a
            circle of this radius at evenly spaced replayed poses.
    """
    if visual_cfg is None:
        visual_cfg = {}

    path_linewidth = float(visual_cfg.get("path_linewidth", 3.0))
    cmap = str(visual_cfg.get("velocity_cmap", "viridis"))
    marker_size = float(visual_cfg.get("marker_size", 60.0))

    fig, (ax_path, ax_time) = plt.subplots(1, 2, figsize=(12, 5))

    if plan.path:
        xs = np.array([p.x for p in plan.path], dtype=float)
        ys = np.array([p.y for p in plan.path], dtype=float)
        vs = np.array([p.velocity for p in plan.path], dtype=float)
        ts = np.array([p.time for p in plan.path], dtype=float)
        accs = np.array([p.acceleration for p in plan.path], dtype=float)

        ax_path.plot(xs, ys, color="lightgray", linewidth=path_linewidth, zorder=1)
        sc = ax_path.scatter(xs, ys, c=vs, cmap=cmap, s=path_linewidth * 2.0, zorder=2)
        fig.colorbar(sc, ax=ax_path, label="Velocity [m/s]")

        ax_time.plot(ts, vs, color="tab:blue", label="Planned velocity")
        ax_time.plot(ts, accs, color="tab:orange", alpha=0.7, label="Planned acceleration")

        # Heading targets as short arrows at their pinned samples.
        s_values = np.array([p.s for p in plan.path], dtype=float)
        for target in plan.heading_targets:
            i = int(np.argmin(np.abs(s_values - target.s)))
            rad = np.radians(target.heading)
            ax_path.quiver(xs[i], ys[i], np.cos(rad), np.sin(rad), color="red", scale=20.0, width=0.004, zorder=4)

    hard = [wp for wp in waypoints if not wp.is_guide_point]
    guides = [wp for wp in waypoints if wp.is_guide_point]
    if hard:
        ax_path.scatter(
            [wp.x for wp in hard],
            [wp.y for wp in hard],
            color=["crimson" if wp.stop_at_waypoint else "seagreen" for wp in hard],
            s=marker_size,
            edgecolors="black",
            label="Waypoints",
            zorder=3,
        )
    if guides:
        ax_path.scatter(
            [wp.x for wp in guides],
            [wp.y for wp in guides],
            color="orange",
            marker="D",
            s=marker_size * 0.6,
            alpha=0.7,
            label="Guide points",
            zorder=3,
        )

    if history:
        ht = [h.time for h in history]
        ax_time.plot(ht, [h.velocity for h in history], color="black", linestyle="--", label="Replayed velocity")
        if robot_radius is not None and robot_radius > 0.0:
            body_count = int(visual_cfg.get("robot_body_count", 12))
            step = max(1, len(history) // max(1, body_count))
            for h in history[::step]:
                ax_path.add_patch(
                    Circle((h.x, h.y), robot_radius, fill=False, edgecolor="dimgray", linewidth=1.0, alpha=0.6, zorder=2)
                )

    ax_path.set_xlabel("X [m]")
    ax_path.set_ylabel("Y [m]")
    ax_path.set_aspect("equal", adjustable="datalim")
    ax_path.set_title(title or "Planned path")
    ax_path.legend(loc="best")
    ax_path.grid(True)

    ax_time.set_xlabel("Time [s]")
    ax_time.set_ylabel("Velocity [m/s] / Acceleration [m/s^2]")
    ax_time.set_title("Velocity profile")
    ax_time.legend(loc="best")
    ax_time.grid(True)

    if show:
        plt.tight_layout()
        plt.show()

    return fig
