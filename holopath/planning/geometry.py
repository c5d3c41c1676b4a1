"""Curvature, tangent heading, and angle helpers."""

from __future__ import annotations

import math

from ..core.interfaces import Spline1D

CURVATURE_DEN_FLOOR = 1e-6


def normalize_angle_deg(angle: float) -> float:
    """Wrap ``angle`` into (-180, 180]."""
    result = (float(angle) + 180.0) % 360.0 - 180.0
    if result == -180.0:
        return 180.0
    return result


def shortest_angle_diff_deg(start: float, end: float) -> float:
    """Signed difference ``end - start`` along the shorter arc."""
    diff = normalize_angle_deg(end) - normalize_angle_deg(start)
    if diff > 180.0:
        diff -= 360.0
    elif diff < -180.0:
        diff += 360.0
    return diff


def interpolate_angle_deg(start: float, end: float, t: float) -> float:
    """Interpolate between two headings without crossing the long way round.

    >>> interpolate_angle_deg(170.0, -170.0, 0.5)
    180.0
    """
    return normalize_angle_deg(normalize_angle_deg(start) + shortest_angle_diff_deg(start, end) * t)


def curvature_from_derivatives(dx: float, dy: float, ddx: float, ddy: float) -> float:
    """Unsigned curvature; 0 where the tangent (nearly) vanishes."""
    den = (dx * dx + dy * dy) ** 1.5
    if den < CURVATURE_DEN_FLOOR:
        return 0.0
    return abs(dx * ddy - dy * ddx) / den


def heading_from_derivatives(dx: float, dy: float) -> float:
    return math.degrees(math.atan2(dy, dx))


def evaluate(x_spline: Spline1D, y_spline: Spline1D, s: float) -> tuple[float, float, float, float]:
    """Return ``(x, y, curvature, heading)`` of the planar curve at ``s``."""
    dx = x_spline.derivative(s)
    dy = y_spline.derivative(s)
    curvature = curvature_from_derivatives(dx, dy, x_spline.second_derivative(s), y_spline.second_derivative(s))
    return x_spline.interpolate(s), y_spline.interpolate(s), curvature, heading_from_derivatives(dx, dy)
