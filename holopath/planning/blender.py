"""Guide-point blending of the hard-waypoint control polyline."""

from __future__ import annotations

import logging
from typing import Sequence

from ..core.types import Waypoint

logger = logging.getLogger(__name__)

Point = tuple[float, float]


def _project_onto_segment(p1: Point, p2: Point, q: Point) -> tuple[float, Point, float] | None:
    """Project ``q`` onto segment p1-p2; returns (t, closest point, squared distance)."""
    ex, ey = p2[0] - p1[0], p2[1] - p1[1]
    l2 = ex * ex + ey * ey
    if l2 == 0.0:
        return None
    t = ((q[0] - p1[0]) * ex + (q[1] - p1[1]) * ey) / l2
    t = max(0.0, min(1.0, t))
    closest = (p1[0] + t * ex, p1[1] + t * ey)
    dist_sq = (q[0] - closest[0]) ** 2 + (q[1] - closest[1]) ** 2
    return t, closest, dist_sq


def blend_guide_points(
    hard: Sequence[Waypoint],
    guides: Sequence[Waypoint],
    default_influence: float = 0.5,
) -> list[Point]:
    """Build the spline control polyline from hard waypoints and guide points.

    Each guide close enough to a hard segment contributes one point pulled
    from its projection on that segment toward the guide by its influence.
    Guides are ordered by projection parameter within a segment, and
    consecutive exact duplicates are dropped from the result.
    """
    control: list[Point] = [(wp.x, wp.y) for wp in hard]
    if len(control) < 2:
        return control

    if guides:
        attracted: list[Point] = [control[0]]
        for p1, p2 in zip(control[:-1], control[1:]):
            half_len = 0.5 * ((p2[0] - p1[0]) ** 2 + (p2[1] - p1[1]) ** 2) ** 0.5

            influential = []
            for gw in guides:
                proj = _project_onto_segment(p1, p2, (gw.x, gw.y))
                if proj is None:
                    continue
                t, closest, dist_sq = proj
                if dist_sq < 2.0 * (half_len + gw.radius) ** 2:
                    influential.append((t, closest, gw))
            influential.sort(key=lambda item: item[0])

            for _, closest, gw in influential:
                influence = default_influence if gw.guide_influence is None else gw.guide_influence
                attracted.append(
                    (
                        closest[0] + (gw.x - closest[0]) * influence,
                        closest[1] + (gw.y - closest[1]) * influence,
                    )
                )
            attracted.append(p2)
        control = attracted
        logger.debug(f"Guide blending produced {len(control)} control points from {len(hard)} hard waypoints")

    return [p for i, p in enumerate(control) if i == 0 or p != control[i - 1]]
