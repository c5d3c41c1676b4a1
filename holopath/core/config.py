"""Config loading and normalization for the planner and player."""

from __future__ import annotations

import argparse
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Any, Mapping

import yaml

DEFAULT_CONFIG_PATH = Path(__file__).resolve().parents[1] / "planner_config.yaml"

SPLINE_TYPES = ("cubic", "quintic")


@dataclass
class RobotConfig:
    max_velocity: float = 4.0
    max_acceleration: float = 3.0
    mass: float = 60.0
    radius: float = 0.4


@dataclass
class PhysicsConfig:
    friction_coefficient: float = 0.8
    gravity: float = 9.81


@dataclass
class PathConfig:
    spline_type: str = "cubic"
    path_resolution: float = 0.05


@dataclass
class WaypointDefaults:
    default_radius: float = 0.3
    default_stop_duration: float = 1.0
    default_guide_influence: float = 0.5


@dataclass
class PlaybackConfig:
    speed_factor: float = 1.0
    frame_rate: float = 60.0


@dataclass
class PlannerConfig:
    """Full planner/player configuration, one dataclass per YAML section."""

    robot: RobotConfig = field(default_factory=RobotConfig)
    physics: PhysicsConfig = field(default_factory=PhysicsConfig)
    path: PathConfig = field(default_factory=PathConfig)
    waypoint: WaypointDefaults = field(default_factory=WaypointDefaults)
    playback: PlaybackConfig = field(default_factory=PlaybackConfig)

    def validate(self) -> "PlannerConfig":
        if self.path.spline_type not in SPLINE_TYPES:
            raise ValueError(
                f"Unknown spline type '{self.path.spline_type}'. Available: {', '.join(SPLINE_TYPES)}"
            )
        positive = {
            "path.path_resolution": self.path.path_resolution,
            "robot.max_velocity": self.robot.max_velocity,
            "robot.max_acceleration": self.robot.max_acceleration,
            "robot.mass": self.robot.mass,
            "playback.speed_factor": self.playback.speed_factor,
            "playback.frame_rate": self.playback.frame_rate,
            "waypoint.default_radius": self.waypoint.default_radius,
        }
        for name, value in positive.items():
            if not value > 0.0:
                raise ValueError(f"{name} must be > 0, got {value}")
        if self.waypoint.default_stop_duration < 0.0:
            raise ValueError("waypoint.default_stop_duration must be >= 0")
        if not 0.0 <= self.waypoint.default_guide_influence <= 1.0:
            raise ValueError("waypoint.default_guide_influence must be in [0, 1]")
        return self

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def _merge_section(section_cls: type, raw: Mapping[str, Any] | None) -> Any:
    """Build one section dataclass, overriding defaults with known keys."""
    section = section_cls()
    for f in fields(section_cls):
        if raw is not None and raw.get(f.name) is not None:
            default = getattr(section, f.name)
            value = raw[f.name]
            setattr(section, f.name, str(value).lower() if isinstance(default, str) else float(value))
    return section


def config_from_dict(raw: Mapping[str, Any] | None) -> PlannerConfig:
    """Merge a (possibly partial) nested mapping over the defaults."""
    raw = dict(raw or {})
    cfg = PlannerConfig(
        robot=_merge_section(RobotConfig, raw.get("robot")),
        physics=_merge_section(PhysicsConfig, raw.get("physics")),
        path=_merge_section(PathConfig, raw.get("path")),
        waypoint=_merge_section(WaypointDefaults, raw.get("waypoint")),
        playback=_merge_section(PlaybackConfig, raw.get("playback")),
    )
    return cfg.validate()


def load_planner_config(path: Path | str | None = None) -> PlannerConfig:
    """Load planner YAML config from disk.

    Missing files are handled gracefully and return the defaults.
    """
    path = DEFAULT_CONFIG_PATH if path is None else Path(path)
    if not path.exists():
        return config_from_dict({})

    with path.open("r", encoding="utf-8") as f:
        return config_from_dict(yaml.safe_load(f) or {})


@dataclass
class NormalizedAppConfig:
    """Normalized config used by the command line app."""

    config_path: Path
    waypoints_path: Path
    planner: PlannerConfig
    export_path: Path | None
    name: str
    replay: bool
    plot: bool


def normalize_app_config(args: argparse.Namespace) -> NormalizedAppConfig:
    """Layer CLI overrides on top of the YAML config."""
    config_path = Path(args.config)
    planner = load_planner_config(config_path)

    if args.spline is not None:
        planner.path.spline_type = str(args.spline).lower()
    if args.resolution is not None:
        planner.path.path_resolution = float(args.resolution)
    if args.speed is not None:
        planner.playback.speed_factor = float(args.speed)
    planner.validate()

    return NormalizedAppConfig(
        config_path=config_path,
        waypoints_path=Path(args.waypoints),
        planner=planner,
        export_path=None if args.export is None else Path(args.export),
        name=str(args.name),
        replay=bool(args.replay),
        plot=bool(args.plot),
    )
