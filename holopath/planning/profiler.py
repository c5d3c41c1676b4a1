"""Single forward-pass velocity profiler over arc-length samples."""

from __future__ import annotations

import logging
import math
from typing import Sequence

import numpy as np

from ..core.config import PlannerConfig
from ..core.interfaces import Spline1D
from ..core.types import PathPoint, PlanMetrics, Waypoint
from .geometry import evaluate

logger = logging.getLogger(__name__)

CURVATURE_LIMIT_MIN = 1e-3
SEGMENT_EPS = 1e-6
ACCEL_EPS = 1e-4
SPEED_EPS = 1e-4
MIN_SEGMENT_TIME = 1e-5
ZERO_LENGTH_SEGMENT_TIME = 0.001
FALLBACK_SEGMENT_TIME = 0.02
FIRST_SAMPLE_STOP_MARGIN = 0.01
STOP_ZONE_RADIUS_FRACTION = 0.70
STOP_ZONE_RESOLUTION_FACTOR = 2.0
STOP_LOOKAHEAD_FACTOR = 1.5
MIN_STOPPING_SPEED = 0.1


def sample_count(total_distance: float, resolution: float) -> int:
    """Number of sample intervals; the stream has ``sample_count + 1`` points."""
    if total_distance <= 0.0:
        return 0
    return int(math.ceil(total_distance / resolution))


def _nearest_waypoint(
    x: float, y: float, xy: np.ndarray, waypoints: Sequence[Waypoint]
) -> tuple[Waypoint | None, float]:
    """Nearest waypoint by planar distance (first one on ties)."""
    if not waypoints:
        return None, math.inf
    d2 = (xy[:, 0] - x) ** 2 + (xy[:, 1] - y) ** 2
    j = int(np.argmin(d2))
    return waypoints[j], math.sqrt(float(d2[j]))


def _cap_by_waypoint_limits(v: float, wp: Waypoint) -> float:
    if wp.max_velocity_constraint is not None:
        v = min(v, wp.max_velocity_constraint)
    if wp.target_velocity is not None:
        v = min(v, wp.target_velocity)
    return v


class VelocityProfiler:
    """Assigns velocity, acceleration and elapsed time along a fitted path.

    The pass runs forward once: every sample is capped by the robot limit,
    the curvature-limited speed and the nearest hard waypoint's constraints,
    then integrated from the previous sample's speed under the acceleration
    limit. Stop waypoints force velocity to exactly 0 close to their center.
    """

    def __init__(self, cfg: PlannerConfig) -> None:
        self.cfg = cfg
        self.v_max = float(cfg.robot.max_velocity)
        self.a_max = float(cfg.robot.max_acceleration)
        self.resolution = float(cfg.path.path_resolution)

    def _effective_stop_distance(self, wp: Waypoint) -> float:
        return min(wp.radius * STOP_ZONE_RADIUS_FRACTION, self.resolution * STOP_ZONE_RESOLUTION_FACTOR)

    def _curvature_limited(self, curvature: float) -> float:
        v = self.v_max
        if curvature > CURVATURE_LIMIT_MIN:
            v = min(v, math.sqrt(self.a_max / curvature))
        return v

    def _initial_velocity(self, x: float, y: float, curvature: float, first: Waypoint | None) -> float:
        v0 = self._curvature_limited(curvature)
        if first is not None:
            dist = math.hypot(x - first.x, y - first.y)
            if dist < first.radius:
                if first.stop_at_waypoint:
                    if dist < self.resolution * STOP_ZONE_RESOLUTION_FACTOR:
                        v0 = 0.0
                    else:
                        v0 = min(v0, math.sqrt(2.0 * self.a_max * max(0.0, dist - FIRST_SAMPLE_STOP_MARGIN)))
                else:
                    v0 = _cap_by_waypoint_limits(v0, first)
        return max(0.0, v0)

    def _target_velocity(self, curvature: float, v_prev: float, wp: Waypoint | None, dist: float) -> float:
        target = self._curvature_limited(curvature)
        if wp is None:
            return max(0.0, target)

        if wp.stop_at_waypoint:
            stopping_distance = v_prev * v_prev / (2.0 * self.a_max) if v_prev > MIN_STOPPING_SPEED else 0.0
            lookahead = min(stopping_distance * STOP_LOOKAHEAD_FACTOR, self.v_max * 1.0)
            influence_zone = max(wp.radius, lookahead)
            if dist < influence_zone:
                to_edge = max(0.0, dist - self._effective_stop_distance(wp))
                target = min(target, math.sqrt(2.0 * self.a_max * to_edge))
        elif dist < wp.radius:
            target = _cap_by_waypoint_limits(target, wp)
        return max(0.0, target)

    def _integrate(self, v_prev: float, target: float, d_s: float) -> float:
        if target >= v_prev:
            return min(target, math.sqrt(v_prev * v_prev + 2.0 * self.a_max * d_s))
        return max(target, math.sqrt(max(0.0, v_prev * v_prev - 2.0 * self.a_max * d_s)))

    def _clamp_accel(self, a: float) -> float:
        return max(-self.a_max, min(self.a_max, a))

    def _segment_time(self, v_prev: float, v: float, accel: float, d_s: float) -> tuple[float, float]:
        """Return ``(segment time, possibly re-derived acceleration)``."""
        if d_s < SEGMENT_EPS:
            dt = ZERO_LENGTH_SEGMENT_TIME
        elif abs(accel) > ACCEL_EPS:
            dt = (v - v_prev) / accel
        elif abs(v - v_prev) < SPEED_EPS and v + v_prev > SPEED_EPS:
            dt = 2.0 * d_s / (v + v_prev)
        else:
            dt = FALLBACK_SEGMENT_TIME

        if dt <= MIN_SEGMENT_TIME and d_s > SEGMENT_EPS:
            dt = MIN_SEGMENT_TIME
            if abs(v - v_prev) > SPEED_EPS:
                accel = self._clamp_accel((v - v_prev) / dt)
            else:
                accel = 0.0
        return abs(dt), accel

    def profile(
        self,
        x_spline: Spline1D,
        y_spline: Spline1D,
        total_distance: float,
        hard_waypoints: Sequence[Waypoint],
    ) -> tuple[list[PathPoint], PlanMetrics]:
        metrics = PlanMetrics(total_distance=float(total_distance))
        hard_xy = np.array([[wp.x, wp.y] for wp in hard_waypoints], dtype=float).reshape(-1, 2)
        n = sample_count(total_distance, self.resolution)
        mass = float(self.cfg.robot.mass)
        friction = float(self.cfg.physics.friction_coefficient)
        gravity = float(self.cfg.physics.gravity)

        x0, y0, k0, h0 = evaluate(x_spline, y_spline, 0.0)
        first = hard_waypoints[0] if hard_waypoints else None
        v0 = self._initial_velocity(x0, y0, k0, first)
        path = [PathPoint(x=x0, y=y0, s=0.0, velocity=v0, acceleration=0.0, curvature=k0, heading=h0, time=0.0)]
        metrics.max_curvature = k0

        elapsed = 0.0
        for i in range(1, n + 1):
            s = (i / n) * total_distance
            x, y, curvature, heading = evaluate(x_spline, y_spline, s)
            metrics.max_curvature = max(metrics.max_curvature, curvature)

            wp, dist = _nearest_waypoint(x, y, hard_xy, hard_waypoints)
            prev = path[-1]
            v_prev = prev.velocity
            d_s = math.hypot(x - prev.x, y - prev.y)

            if wp is not None and wp.stop_at_waypoint and dist < self._effective_stop_distance(wp):
                v = 0.0
                accel = 0.0 if d_s < SEGMENT_EPS else (v * v - v_prev * v_prev) / (2.0 * d_s)
            else:
                target = self._target_velocity(curvature, v_prev, wp, dist)
                if d_s < SEGMENT_EPS:
                    v = v_prev
                    accel = 0.0
                else:
                    v = self._integrate(v_prev, target, d_s)
                    accel = (v * v - v_prev * v_prev) / (2.0 * d_s)

            accel = self._clamp_accel(accel)
            dt, accel = self._segment_time(v_prev, v, accel, d_s)
            metrics.max_acceleration = max(metrics.max_acceleration, abs(accel))

            elapsed += dt
            v_avg = 0.5 * (v + v_prev)
            power = mass * abs(accel) * abs(v_avg) + 0.5 * friction * mass * gravity * abs(v_avg)
            if dt > MIN_SEGMENT_TIME:
                metrics.energy_consumption += abs(power) * dt

            path.append(
                PathPoint(x=x, y=y, s=s, velocity=v, acceleration=accel, curvature=curvature, heading=heading, time=elapsed)
            )

        metrics.total_time = elapsed
        logger.debug(f"Profiled {len(path)} samples over {total_distance:.3f} m in {elapsed:.3f} s")
        return path, metrics
