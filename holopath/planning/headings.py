"""Waypoint heading targets and heading lookup along the path."""

from __future__ import annotations

from typing import Sequence

import numpy as np

from ..core.types import HeadingTarget, PathPoint, Waypoint
from .geometry import interpolate_angle_deg, normalize_angle_deg

SPAN_EPS = 1e-9


def extract_heading_targets(waypoints: Sequence[Waypoint], path: Sequence[PathPoint]) -> list[HeadingTarget]:
    """Pin every waypoint heading (hard or guide) to its nearest path sample.

    Nearness is planar distance, not path order, so the returned targets are
    sorted by arc length and need not follow waypoint declaration order.
    """
    if not path:
        return []
    xy = np.array([[p.x, p.y] for p in path], dtype=float)
    targets = []
    for wp in waypoints:
        if wp.heading is None:
            continue
        d2 = (xy[:, 0] - wp.x) ** 2 + (xy[:, 1] - wp.y) ** 2
        nearest = path[int(np.argmin(d2))]
        targets.append(HeadingTarget(s=nearest.s, heading=float(wp.heading)))
    targets.sort(key=lambda target: target.s)
    return targets


def heading_at(targets: Sequence[HeadingTarget], s: float, held: float | None) -> float | None:
    """Robot heading at arc length ``s``.

    Interpolates between the last target at or before ``s`` and the first
    target after it along the shorter arc. With a target on one side only,
    that target's heading is used; with none, ``held`` is returned.
    """
    prev_target = None
    for target in reversed(targets):
        if target.s <= s:
            prev_target = target
            break
    next_target = next((target for target in targets if target.s > s), None)

    if prev_target is not None and next_target is not None:
        span = next_target.s - prev_target.s
        t = 1.0 if span < SPAN_EPS else (s - prev_target.s) / span
        return interpolate_angle_deg(prev_target.heading, next_target.heading, max(0.0, min(1.0, t)))
    if prev_target is not None:
        return normalize_angle_deg(prev_target.heading)
    if next_target is not None:
        return normalize_angle_deg(next_target.heading)
    return held
