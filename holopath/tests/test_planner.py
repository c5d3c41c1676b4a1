from __future__ import annotations

import math
import unittest

from holopath.core.config import PlannerConfig
from holopath.core.runner import _chord_length_knots, plan_path
from holopath.core.types import PlanErrorKind, Waypoint
from holopath.planning.headings import heading_at
from holopath.planning.profiler import sample_count


def _config(resolution: float = 0.05, spline: str = "cubic", max_velocity: float | None = None) -> PlannerConfig:
    cfg = PlannerConfig()
    cfg.path.path_resolution = resolution
    cfg.path.spline_type = spline
    if max_velocity is not None:
        cfg.robot.max_velocity = max_velocity
    return cfg.validate()


WAYPOINT_SETS = {
    "straight": [Waypoint(x=0.0, y=0.0), Waypoint(x=5.0, y=0.0)],
    "zigzag": [
        Waypoint(x=0.0, y=0.0),
        Waypoint(x=2.0, y=1.5),
        Waypoint(x=4.0, y=-0.5),
        Waypoint(x=6.0, y=2.0),
    ],
    "stops": [
        Waypoint(x=0.0, y=0.0, stop_at_waypoint=True),
        Waypoint(x=3.0, y=1.0, stop_at_waypoint=True, stop_duration=0.5),
        Waypoint(x=5.0, y=-1.0, target_velocity=1.0, radius=0.6),
        Waypoint(x=7.0, y=0.0, stop_at_waypoint=True),
    ],
    "guided": [
        Waypoint(x=0.0, y=0.0),
        Waypoint(x=2.0, y=1.0, is_guide_point=True, guide_influence=0.8),
        Waypoint(x=4.0, y=0.0, max_velocity_constraint=2.0),
        Waypoint(x=4.0, y=4.0),
    ],
}


class TestPathInvariants(unittest.TestCase):
    def test_stream_properties_for_both_splines(self) -> None:
        for spline in ("cubic", "quintic"):
            cfg = _config(spline=spline)
            a_max = cfg.robot.max_acceleration
            for name, waypoints in WAYPOINT_SETS.items():
                with self.subTest(spline=spline, waypoints=name):
                    plan = plan_path(waypoints, cfg)
                    self.assertTrue(plan.ok, plan.message)
                    path = plan.path
                    self.assertEqual(path[0].s, 0.0)
                    self.assertEqual(path[0].time, 0.0)
                    for prev, cur in zip(path[:-1], path[1:]):
                        self.assertGreaterEqual(cur.s, prev.s)
                        self.assertGreaterEqual(cur.time, prev.time)
                    for p in path:
                        self.assertGreaterEqual(p.velocity, 0.0)
                        self.assertLessEqual(abs(p.acceleration), a_max + 1e-9)
                        self.assertGreaterEqual(p.curvature, 0.0)
                        self.assertTrue(-180.0 <= p.heading <= 180.0)
                    self.assertAlmostEqual(plan.metrics.total_time, path[-1].time)
                    self.assertAlmostEqual(path[-1].s, plan.metrics.total_distance)
                    self.assertGreater(plan.metrics.energy_consumption, 0.0)

    def test_planning_is_pure(self) -> None:
        cfg = _config()
        for waypoints in WAYPOINT_SETS.values():
            first = plan_path(waypoints, cfg)
            second = plan_path(list(waypoints), cfg)
            self.assertEqual(first.path, second.path)
            self.assertEqual(first.metrics, second.metrics)
            self.assertEqual(first.heading_targets, second.heading_targets)

    def test_sample_count_is_ceil_of_length_over_resolution(self) -> None:
        self.assertEqual(sample_count(5.0, 0.5), 10)
        self.assertEqual(sample_count(5.1, 0.5), 11)
        self.assertEqual(sample_count(0.0, 0.5), 0)
        cfg = _config(resolution=0.3)
        plan = plan_path(WAYPOINT_SETS["zigzag"], cfg)
        expected = math.ceil(plan.metrics.total_distance / 0.3) + 1
        self.assertEqual(len(plan.path), expected)


class TestStraightLineScenario(unittest.TestCase):
    def test_two_waypoints_with_headings(self) -> None:
        waypoints = [Waypoint(x=0.0, y=0.0, heading=0.0), Waypoint(x=5.0, y=0.0, heading=90.0)]
        plan = plan_path(waypoints, _config(resolution=0.5))
        self.assertTrue(plan.ok)
        self.assertEqual(len(plan.path), 11)
        self.assertAlmostEqual(plan.metrics.total_distance, 5.0)
        self.assertAlmostEqual(plan.path[-1].x, 5.0)
        for p in plan.path:
            self.assertAlmostEqual(p.y, 0.0)
            self.assertAlmostEqual(p.curvature, 0.0)
            self.assertAlmostEqual(p.heading, 0.0)

        self.assertEqual([(t.s, t.heading) for t in plan.heading_targets], [(0.0, 0.0), (5.0, 90.0)])
        self.assertAlmostEqual(heading_at(plan.heading_targets, 2.5, None), 45.0)

    def test_quintic_plans_same_sampling(self) -> None:
        waypoints = [Waypoint(x=0.0, y=0.0), Waypoint(x=5.0, y=0.0)]
        cubic = plan_path(waypoints, _config(resolution=0.5))
        quintic = plan_path(waypoints, _config(resolution=0.5, spline="quintic"))
        self.assertEqual(len(cubic.path), len(quintic.path))
        for a, b in zip(cubic.path, quintic.path):
            self.assertAlmostEqual(a.x, b.x)
            self.assertAlmostEqual(a.y, b.y)


class TestWaypointConstraints(unittest.TestCase):
    def test_stop_waypoint_reaches_zero_velocity(self) -> None:
        stop = Waypoint(x=3.0, y=0.0, stop_at_waypoint=True)
        plan = plan_path([Waypoint(x=0.0, y=0.0), stop, Waypoint(x=6.0, y=0.0)], _config())
        near = [p for p in plan.path if math.hypot(p.x - stop.x, p.y - stop.y) < stop.radius]
        self.assertTrue(near)
        self.assertTrue(any(p.velocity == 0.0 for p in near))

    def test_stop_at_first_and_last_waypoint(self) -> None:
        waypoints = [
            Waypoint(x=0.0, y=0.0, stop_at_waypoint=True),
            Waypoint(x=4.0, y=0.0, stop_at_waypoint=True),
        ]
        plan = plan_path(waypoints, _config())
        self.assertEqual(plan.path[0].velocity, 0.0)
        self.assertEqual(plan.path[-1].velocity, 0.0)

    def test_start_without_stop_begins_at_speed_limit(self) -> None:
        plan = plan_path(WAYPOINT_SETS["straight"], _config())
        self.assertAlmostEqual(plan.path[0].velocity, 4.0)

    def test_target_velocity_caps_speed_near_waypoint(self) -> None:
        wp = Waypoint(x=3.0, y=0.0, radius=0.5, target_velocity=1.0)
        plan = plan_path([Waypoint(x=0.0, y=0.0), wp, Waypoint(x=6.0, y=0.0)], _config(max_velocity=1.5))
        near = [p for p in plan.path if abs(p.x - wp.x) < 0.2]
        self.assertTrue(near)
        for p in near:
            self.assertLessEqual(p.velocity, 1.0 + 1e-9)
        self.assertAlmostEqual(max(p.velocity for p in plan.path), 1.5)


class TestNearCoincidentControlPoints(unittest.TestCase):
    def setUp(self) -> None:
        # The zero-influence guide projects onto the end of the fourth segment
        # and lands within rounding error of (-1.0, 0.1).
        self.waypoints = [
            Waypoint(x=0.974, y=-1.397, radius=1.0),
            Waypoint(x=-3.0, y=2.474),
            Waypoint(x=2.372, y=2.4, radius=0.05),
            Waypoint(x=-1.0, y=0.1, radius=1.0),
            Waypoint(x=-1.8, y=0.0),
            Waypoint(x=-1.434, y=-2.2, radius=0.05, is_guide_point=True, guide_influence=0.0),
        ]

    def test_zero_influence_guide_at_segment_end_plans(self) -> None:
        for spline in ("cubic", "quintic"):
            with self.subTest(spline=spline):
                cfg = _config(spline=spline)
                plan = plan_path(self.waypoints, cfg)
                self.assertTrue(plan.ok, plan.message)
                for prev, cur in zip(plan.path[:-1], plan.path[1:]):
                    self.assertGreaterEqual(cur.s, prev.s)
                    self.assertGreaterEqual(cur.time, prev.time)
                for p in plan.path:
                    self.assertTrue(math.isfinite(p.x) and math.isfinite(p.y) and math.isfinite(p.curvature))
                    self.assertGreaterEqual(p.velocity, 0.0)
                    self.assertLessEqual(abs(p.acceleration), cfg.robot.max_acceleration + 1e-9)

    def test_knots_skip_repeated_points(self) -> None:
        points = [(0.0, 0.0), (-1.0, 0.10000000000000009), (-1.0, 0.1), (-1.8, 0.0)]
        kept, knots = _chord_length_knots(points)
        self.assertEqual(kept, [(0.0, 0.0), (-1.0, 0.10000000000000009), (-1.8, 0.0)])
        self.assertEqual(len(knots), len(kept))
        for a, b in zip(knots[:-1], knots[1:]):
            self.assertGreater(b, a)

    def test_nearly_coincident_hard_waypoints_are_advisory(self) -> None:
        plan = plan_path([Waypoint(x=1.0, y=1.0), Waypoint(x=1.0 + 1e-12, y=1.0)], _config())
        self.assertIs(plan.error, PlanErrorKind.INSUFFICIENT_SPLINE_INPUT)
        self.assertEqual(plan.path, [])

    def test_zero_influence_guide_beyond_segment_end(self) -> None:
        waypoints = [
            Waypoint(x=0.0, y=0.0),
            Waypoint(x=3.0, y=0.0),
            Waypoint(x=3.0, y=3.0),
            Waypoint(x=3.5, y=-0.5, is_guide_point=True, guide_influence=0.0),
        ]
        for spline in ("cubic", "quintic"):
            with self.subTest(spline=spline):
                plan = plan_path(waypoints, _config(spline=spline))
                self.assertTrue(plan.ok, plan.message)
                self.assertAlmostEqual(plan.path[-1].x, 3.0)
                self.assertAlmostEqual(plan.path[-1].y, 3.0)


class TestAdvisoryErrors(unittest.TestCase):
    def test_single_hard_waypoint_with_guides(self) -> None:
        plan = plan_path(
            [Waypoint(x=0.0, y=0.0), Waypoint(x=1.0, y=1.0, is_guide_point=True)],
            _config(),
        )
        self.assertFalse(plan.ok)
        self.assertIs(plan.error, PlanErrorKind.INSUFFICIENT_HARD_WAYPOINTS)
        self.assertIn("guides", plan.message)
        self.assertEqual(plan.path, [])
        self.assertIsNone(plan.metrics)

    def test_no_waypoints(self) -> None:
        plan = plan_path([], _config())
        self.assertIs(plan.error, PlanErrorKind.INSUFFICIENT_HARD_WAYPOINTS)
        self.assertEqual(plan.total_time, 0.0)

    def test_coincident_waypoints(self) -> None:
        plan = plan_path([Waypoint(x=1.0, y=1.0), Waypoint(x=1.0, y=1.0)], _config())
        self.assertIs(plan.error, PlanErrorKind.INSUFFICIENT_SPLINE_INPUT)
        self.assertEqual(plan.path, [])


if __name__ == "__main__":
    unittest.main()
