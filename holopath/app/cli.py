"""CLI argument parsing for the path planner."""

from __future__ import annotations

import argparse
from typing import Sequence

from ..core.config import DEFAULT_CONFIG_PATH, SPLINE_TYPES


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Holonomic robot path planner and playback simulator.")
    parser.add_argument(
        "waypoints",
        type=str,
        help="Waypoint file: YAML list/mapping or an exported JSON path document.",
    )
    parser.add_argument(
        "--config",
        type=str,
        default=str(DEFAULT_CONFIG_PATH),
        help="Path to planner_config.yaml.",
    )
    parser.add_argument(
        "--spline",
        type=str,
        choices=list(SPLINE_TYPES),
        default=None,
        help="Spline type (overrides path.spline_type).",
    )
    parser.add_argument(
        "--resolution",
        type=float,
        default=None,
        help="Distance between path samples [m] (overrides path.path_resolution).",
    )
    parser.add_argument(
        "--speed",
        type=float,
        default=None,
        help="Playback speed factor (overrides playback.speed_factor).",
    )
    parser.add_argument(
        "--name",
        type=str,
        default="Untitled Path",
        help="Path name stored in the exported document.",
    )
    parser.add_argument(
        "--export",
        type=str,
        default=None,
        help="Write the path document to this file or directory.",
    )
    parser.add_argument(
        "--replay",
        action="store_true",
        help="Replay the planned path in real time.",
    )
    parser.add_argument(
        "--plot",
        action="store_true",
        help="Plot the path and its velocity profile.",
    )
    return parser.parse_args(argv)
