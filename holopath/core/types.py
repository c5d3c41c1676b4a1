"""Core datatypes for the path planner and playback simulator."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any


@dataclass(frozen=True)
class Waypoint:
    """User-placed waypoint in field coordinates (meters).

    ``heading`` is in degrees; any real value is accepted and treated as
    wrapped to (-180, 180]. ``stop_duration`` only matters when
    ``stop_at_waypoint`` is set, ``guide_influence`` only when
    ``is_guide_point`` is set.
    """

    x: float
    y: float
    radius: float = 0.3
    target_velocity: float | None = None
    max_velocity_constraint: float | None = None
    heading: float | None = None
    stop_at_waypoint: bool = False
    stop_duration: float | None = None
    is_guide_point: bool = False
    guide_influence: float | None = None

    def __post_init__(self) -> None:
        if not self.radius > 0.0:
            raise ValueError(f"Waypoint radius must be > 0, got {self.radius}")
        if self.guide_influence is not None and not 0.0 <= self.guide_influence <= 1.0:
            raise ValueError(f"guide_influence must be in [0, 1], got {self.guide_influence}")

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any], default_radius: float = 0.3) -> "Waypoint":
        def _opt(key: str) -> float | None:
            value = data.get(key)
            return None if value is None else float(value)

        return cls(
            x=float(data["x"]),
            y=float(data["y"]),
            radius=float(data.get("radius", default_radius)),
            target_velocity=_opt("target_velocity"),
            max_velocity_constraint=_opt("max_velocity_constraint"),
            heading=_opt("heading"),
            stop_at_waypoint=bool(data.get("stop_at_waypoint", False)),
            stop_duration=_opt("stop_duration"),
            is_guide_point=bool(data.get("is_guide_point", False)),
            guide_influence=_opt("guide_influence"),
        )


@dataclass(frozen=True)
class PathPoint:
    """One arc-length sample of the planned, time-parameterized path."""

    x: float
    y: float
    s: float
    velocity: float
    acceleration: float
    curvature: float
    heading: float
    time: float

    def to_dict(self) -> dict[str, float]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "PathPoint":
        return cls(**{k: float(data[k]) for k in cls.__dataclass_fields__})


@dataclass
class PlanMetrics:
    total_distance: float = 0.0
    total_time: float = 0.0
    max_curvature: float = 0.0
    max_acceleration: float = 0.0
    energy_consumption: float = 0.0

    def to_dict(self) -> dict[str, float]:
        return asdict(self)


@dataclass(frozen=True)
class HeadingTarget:
    """Waypoint heading pinned to the arc length of its nearest path sample."""

    s: float
    heading: float


@dataclass(frozen=True)
class RobotPose:
    x: float
    y: float
    rotation: float
    velocity: float = 0.0
    angular_velocity: float = 0.0


@dataclass(frozen=True)
class HistorySample:
    """Playback history entry, keyed by simulated time."""

    time: float
    x: float
    y: float
    s: float
    velocity: float
    acceleration: float
    heading: float
    curvature: float


class PlanErrorKind(str, Enum):
    INSUFFICIENT_HARD_WAYPOINTS = "insufficient_hard_waypoints"
    INSUFFICIENT_SPLINE_INPUT = "insufficient_spline_input"


@dataclass
class PlanResult:
    """Planner output. Failures are advisory: empty path, ``metrics=None``."""

    path: list[PathPoint] = field(default_factory=list)
    metrics: PlanMetrics | None = None
    heading_targets: list[HeadingTarget] = field(default_factory=list)
    error: PlanErrorKind | None = None
    message: str = ""

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def total_time(self) -> float:
        return self.path[-1].time if self.path else 0.0
