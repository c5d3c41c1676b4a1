"""Planning pipeline orchestration: blend, fit, profile, pin headings."""

from __future__ import annotations

import logging
import math
from typing import Sequence

from ..planning.blender import blend_guide_points
from ..planning.headings import extract_heading_targets
from ..planning.profiler import VelocityProfiler
from .config import PlannerConfig
from .registry import create_spline
from .types import PlanErrorKind, PlanResult, Waypoint

logger = logging.getLogger(__name__)


MIN_KNOT_SPACING = 1e-9


def _chord_length_knots(
    points: Sequence[tuple[float, float]],
) -> tuple[list[tuple[float, float]], list[float]]:
    """Chord-length knots over ``points``, skipping points that would repeat a knot.

    Returns the kept points and their knots; knots are strictly increasing.
    """
    if not points:
        return [], []
    kept = [points[0]]
    knots = [0.0]
    for x1, y1 in points[1:]:
        x0, y0 = kept[-1]
        knot = knots[-1] + math.hypot(x1 - x0, y1 - y0)
        if knot - knots[-1] <= MIN_KNOT_SPACING:
            continue
        kept.append((x1, y1))
        knots.append(knot)
    return kept, knots


def plan_path(waypoints: Sequence[Waypoint], cfg: PlannerConfig) -> PlanResult:
    """Plan a time-parameterized path through ``waypoints``.

    Pure and synchronous: identical inputs always give an identical stream.
    Failures are advisory and come back as an empty result carrying an
    error kind and a message.
    """
    hard = [wp for wp in waypoints if not wp.is_guide_point]
    guides = [wp for wp in waypoints if wp.is_guide_point]

    if len(hard) < 2:
        if guides:
            message = "Path requires at least two non-guide waypoints. Current guides will not form a path."
        else:
            message = "Path requires at least two waypoints."
        logger.warning(message)
        return PlanResult(error=PlanErrorKind.INSUFFICIENT_HARD_WAYPOINTS, message=message)

    blended = blend_guide_points(hard, guides, default_influence=cfg.waypoint.default_guide_influence)
    control, knots = _chord_length_knots(blended)
    if len(control) < len(blended):
        logger.debug(f"Dropped {len(blended) - len(control)} near-coincident control points")
    if len(control) < 2:
        message = "Not enough points for spline path after guide influence. Try different waypoints or guides."
        logger.warning(message)
        return PlanResult(error=PlanErrorKind.INSUFFICIENT_SPLINE_INPUT, message=message)

    spline_type = cfg.path.spline_type
    x_spline = create_spline(spline_type, knots, [p[0] for p in control])
    y_spline = create_spline(spline_type, knots, [p[1] for p in control])
    total_distance = knots[-1]
    logger.info(
        f"Fitting {spline_type} spline through {len(control)} control points "
        f"({len(hard)} hard, {len(guides)} guide), length {total_distance:.3f} m"
    )

    profiler = VelocityProfiler(cfg)
    path, metrics = profiler.profile(x_spline, y_spline, total_distance, hard)
    heading_targets = extract_heading_targets(waypoints, path)

    logger.info(
        f"Planned {len(path)} points: distance={metrics.total_distance:.3f} m, "
        f"time={metrics.total_time:.3f} s, max_curvature={metrics.max_curvature:.3f} 1/m, "
        f"max_accel={metrics.max_acceleration:.3f} m/s^2, energy={metrics.energy_consumption:.1f} J"
    )
    return PlanResult(path=path, metrics=metrics, heading_targets=heading_targets)
