"""Main entrypoint for the path planner app."""

from __future__ import annotations

import logging
from typing import Sequence

from ..core.config import normalize_app_config
from ..core.runner import plan_path
from ..playback.loop import run_playback
from ..playback.player import PlaybackError, SimulationPlayer
from ..storage import MalformedImportError, export_document, load_waypoint_file
from .cli import parse_args

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(message)s",
    datefmt="%H:%M:%S",
)
logger = logging.getLogger(__name__)


def main(argv: Sequence[str] | None = None) -> int:
    args = parse_args(argv)
    app_cfg = normalize_app_config(args)
    cfg = app_cfg.planner

    logger.info("=" * 60)
    logger.info("Holonomic path planner")
    logger.info("=" * 60)
    logger.info(f"Loading config from: {app_cfg.config_path}")
    logger.info(f"Loading waypoints from: {app_cfg.waypoints_path}")

    try:
        doc = load_waypoint_file(app_cfg.waypoints_path)
    except MalformedImportError as exc:
        logger.error(str(exc))
        return 1

    waypoints = doc.waypoints
    plan = plan_path(waypoints, cfg)
    if not plan.ok:
        logger.error(f"Planning failed ({plan.error.value}): {plan.message}")
        return 1

    if app_cfg.export_path is not None:
        export_document(app_cfg.export_path, app_cfg.name, waypoints, cfg, plan)

    history = None
    if app_cfg.replay:
        player = SimulationPlayer.from_config(cfg)
        player.load(plan, waypoints)
        try:
            player.play()
            run_playback(player, frame_rate=cfg.playback.frame_rate)
        except PlaybackError as exc:
            logger.error(f"Error during simulation: {exc}")
            return 1
        history = player.history
        logger.info(f"Recorded {len(history)} history samples")

    if app_cfg.plot:
        from ..visualizer import plot_plan

        plot_plan(plan, waypoints, history=history, title=app_cfg.name, show=True, robot_radius=cfg.robot.radius)

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
