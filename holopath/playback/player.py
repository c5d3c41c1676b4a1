"""Tick-driven playback of a planned path.

States: ``IDLE -> RUNNING`` on :meth:`SimulationPlayer.play`,
``RUNNING -> PAUSED_AT_STOP`` when a stop waypoint is reached at rest,
``PAUSED_AT_STOP -> RUNNING`` once the stop timer elapses,
``RUNNING -> FINISHED`` past the last sample, and any state ``-> IDLE`` on
:meth:`SimulationPlayer.stop`.

The stop timer runs on its own monotonic clock, not on tick cadence; ticks
that arrive while paused only poll it. Every play/stop starts a new run id
so a timer left over from an earlier run can never resume the current one.
"""

from __future__ import annotations

import bisect
import logging
import math
import time
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import Sequence

from ..core.config import PlannerConfig
from ..core.types import HeadingTarget, HistorySample, PathPoint, PlanResult, RobotPose, Waypoint
from ..planning.geometry import normalize_angle_deg, shortest_angle_diff_deg
from ..planning.headings import heading_at

logger = logging.getLogger(__name__)

STOP_PROXIMITY_FRACTION = 0.75
STOP_VELOCITY_THRESHOLD = 0.05


class PlayerState(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
    PAUSED_AT_STOP = "paused_at_stop"
    FINISHED = "finished"


class PlaybackError(RuntimeError):
    """Playback cannot start or continue."""


@dataclass(frozen=True)
class _StopTimer:
    run_id: int
    deadline: float


def add_to_history(history: list[HistorySample], sample: HistorySample) -> bool:
    """Append ``sample`` if it is strictly later than the last entry.

    A sample whose time equals (or precedes) the last recorded time is
    dropped, not merged. Returns whether the sample was kept.
    """
    if not history or history[-1].time < sample.time:
        history.append(sample)
        return True
    return False


def _sample(t: float, p: PathPoint, heading: float, velocity: float, acceleration: float) -> HistorySample:
    return HistorySample(
        time=t,
        x=p.x,
        y=p.y,
        s=p.s,
        velocity=velocity,
        acceleration=acceleration,
        heading=heading,
        curvature=p.curvature,
    )


class SimulationPlayer:
    """Replays a planned path as a deterministic state machine."""

    def __init__(
        self,
        default_stop_duration: float = 1.0,
        speed_factor: float = 1.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.default_stop_duration = float(default_stop_duration)
        self.speed_factor = speed_factor
        self._clock = clock

        self._path: list[PathPoint] = []
        self._times: list[float] = []
        self._waypoints: list[Waypoint] = []
        self._heading_targets: list[HeadingTarget] = []

        self._state = PlayerState.IDLE
        self._run_id = 0
        self._index = 0
        self._sim_time = 0.0
        self._last_stop_index: int | None = None
        self._stop_timer: _StopTimer | None = None
        self._pose: RobotPose | None = None
        self._history: list[HistorySample] = []

    @classmethod
    def from_config(cls, cfg: PlannerConfig, clock: Callable[[], float] = time.monotonic) -> "SimulationPlayer":
        return cls(
            default_stop_duration=cfg.waypoint.default_stop_duration,
            speed_factor=cfg.playback.speed_factor,
            clock=clock,
        )

    @property
    def speed_factor(self) -> float:
        return self._speed_factor

    @speed_factor.setter
    def speed_factor(self, value: float) -> None:
        if not float(value) > 0.0:
            raise ValueError(f"speed_factor must be > 0, got {value}")
        self._speed_factor = float(value)

    @property
    def state(self) -> PlayerState:
        return self._state

    @property
    def pose(self) -> RobotPose | None:
        return self._pose

    @property
    def history(self) -> list[HistorySample]:
        return list(self._history)

    @property
    def simulated_time(self) -> float:
        return self._sim_time

    @property
    def current_index(self) -> int:
        return self._index

    @property
    def path(self) -> list[PathPoint]:
        return list(self._path)

    @property
    def is_paused(self) -> bool:
        return self._state is PlayerState.PAUSED_AT_STOP

    def load(self, plan: PlanResult, waypoints: Sequence[Waypoint]) -> None:
        """Replace the path stream; any active run is stopped first."""
        self.stop()
        self._path = list(plan.path)
        self._times = [p.time for p in self._path]
        self._heading_targets = list(plan.heading_targets)
        self._waypoints = list(waypoints)
        self._index = 0
        self._sim_time = 0.0
        self._last_stop_index = None

    def _initial_rotation(self) -> float:
        if self._waypoints and self._waypoints[0].heading is not None:
            return normalize_angle_deg(self._waypoints[0].heading)
        first_s = self._path[0].s
        applicable = next((t for t in self._heading_targets if t.s >= first_s), None)
        if applicable is not None:
            return normalize_angle_deg(applicable.heading)
        if self._heading_targets:
            return normalize_angle_deg(self._heading_targets[-1].heading)
        return 0.0

    def play(self) -> None:
        """Start (or restart) playback from the first path point."""
        if len(self._path) < 2:
            raise PlaybackError("Path must have at least 2 points to simulate.")

        self._run_id += 1
        self._index = 0
        self._sim_time = 0.0
        self._last_stop_index = None
        self._stop_timer = None
        self._history = []

        first = self._path[0]
        rotation = self._initial_rotation()
        self._pose = RobotPose(x=first.x, y=first.y, rotation=rotation, velocity=first.velocity)
        add_to_history(self._history, _sample(0.0, first, rotation, first.velocity, first.acceleration))
        self._state = PlayerState.RUNNING
        logger.info(f"Playback started: {len(self._path)} points, {self._times[-1]:.2f} s, speed x{self.speed_factor:g}")

    def stop(self) -> None:
        """Cancel the run. Pose and history are kept for inspection."""
        self._run_id += 1
        self._stop_timer = None
        if self._state is not PlayerState.IDLE:
            logger.info(f"Playback stopped at t={self._sim_time:.2f} s")
        self._state = PlayerState.IDLE

    def _locate(self, t: float) -> int | None:
        if not math.isfinite(t):
            return None
        i = bisect.bisect_left(self._times, t)
        return i if i < len(self._times) else None

    def _stop_waypoint_near(self, p: PathPoint) -> int | None:
        for i, wp in enumerate(self._waypoints):
            if wp.stop_at_waypoint and math.hypot(p.x - wp.x, p.y - wp.y) < wp.radius * STOP_PROXIMITY_FRACTION:
                return i
        return None

    def _finish(self) -> None:
        last = self._path[-1]
        self._index = len(self._path) - 1
        held = self._pose.rotation if self._pose is not None else last.heading
        rotation = heading_at(self._heading_targets, last.s, held)
        add_to_history(self._history, _sample(last.time, last, rotation, 0.0, 0.0))
        self._pose = RobotPose(x=last.x, y=last.y, rotation=rotation)
        self._state = PlayerState.FINISHED
        logger.info(f"Simulation finished at t={last.time:.2f} s")

    def _enter_stop(self, p: PathPoint, waypoint_index: int) -> None:
        wp = self._waypoints[waypoint_index]
        rotation = normalize_angle_deg(wp.heading) if wp.heading is not None else p.heading
        duration = wp.stop_duration if wp.stop_duration is not None else self.default_stop_duration

        self._last_stop_index = waypoint_index
        self._pose = RobotPose(x=p.x, y=p.y, rotation=rotation)
        add_to_history(self._history, _sample(self._sim_time, p, rotation, 0.0, 0.0))
        self._stop_timer = _StopTimer(
            run_id=self._run_id,
            deadline=self._clock() + float(duration),
        )
        self._state = PlayerState.PAUSED_AT_STOP
        logger.info(f"Stopping at waypoint {waypoint_index + 1} for {duration:.1f}s (t={self._sim_time:.2f} s)")

    def _poll_stop_timer(self) -> None:
        timer = self._stop_timer
        if timer is not None and timer.run_id == self._run_id and self._clock() < timer.deadline:
            return
        self._stop_timer = None
        self._state = PlayerState.RUNNING
        logger.info(f"Resuming after stop at t={self._sim_time:.2f} s")

    def tick(self, dt: float) -> PlayerState:
        """Advance playback by ``dt`` seconds of wall time.

        While paused at a stop the tick only polls the stop timer. The tick
        that clears the pause does not advance simulated time, so paused
        wall time never leaks into the next step.
        """
        if self._state is PlayerState.PAUSED_AT_STOP:
            self._poll_stop_timer()
            return self._state
        if self._state is not PlayerState.RUNNING:
            return self._state

        step = max(0.0, float(dt)) * self.speed_factor
        self._sim_time += step

        index = self._locate(self._sim_time)
        if index is None:
            if self._sim_time > self._times[-1]:
                self._finish()
                return self._state
            self.stop()
            raise PlaybackError(f"Path point not found for simulated time {self._sim_time!r}.")

        self._index = index
        p = self._path[index]

        stop_index = self._stop_waypoint_near(p)
        if stop_index is not None and p.velocity < STOP_VELOCITY_THRESHOLD and stop_index != self._last_stop_index:
            self._enter_stop(p, stop_index)
            return self._state
        if stop_index is None or stop_index != self._last_stop_index:
            self._last_stop_index = None

        held = self._pose.rotation if self._pose is not None else p.heading
        rotation = heading_at(self._heading_targets, p.s, held)
        angular_velocity = shortest_angle_diff_deg(held, rotation) / step if step > 0.0 else 0.0
        add_to_history(self._history, _sample(self._sim_time, p, rotation, p.velocity, p.acceleration))
        self._pose = RobotPose(
            x=p.x,
            y=p.y,
            rotation=rotation,
            velocity=p.velocity,
            angular_velocity=angular_velocity,
        )
        return self._state

    def scrub(self, t: float) -> RobotPose:
        """Jump the playhead to simulated time ``t``.

        Uses the same index lookup and heading interpolation as a tick but
        leaves the state, the stop timer and the history untouched. A
        running playback continues from the new time.
        """
        if not self._path:
            raise PlaybackError("No path loaded.")

        self._sim_time = float(t)
        index = self._locate(self._sim_time)
        if index is None:
            index = len(self._path) - 1
        self._index = index
        p = self._path[index]

        held = self._pose.rotation if self._pose is not None else self._path[0].heading
        rotation = heading_at(self._heading_targets, p.s, held)
        self._pose = RobotPose(x=p.x, y=p.y, rotation=rotation, velocity=p.velocity)
        return self._pose
