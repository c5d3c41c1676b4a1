from __future__ import annotations

import math
import unittest

from holopath.core.registry import available_splines, create_spline
from holopath.splines.cubic import CubicSpline
from holopath.splines.quintic import QuinticSpline


class TestCubicSpline(unittest.TestCase):
    def setUp(self) -> None:
        # Natural spline through (0, 0), (1, 1), (2, 0):
        #   [0, 1]: 1.5 t - 0.5 t^3
        #   [1, 2]: 1 - 1.5 t^2 + 0.5 t^3
        self.spline = CubicSpline([0.0, 1.0, 2.0], [0.0, 1.0, 0.0])

    def test_passes_through_knots(self) -> None:
        for s, y in [(0.0, 0.0), (1.0, 1.0), (2.0, 0.0)]:
            self.assertAlmostEqual(self.spline.interpolate(s), y)

    def test_known_coefficients(self) -> None:
        self.assertAlmostEqual(self.spline.interpolate(0.5), 1.5 * 0.5 - 0.5 * 0.125)
        self.assertAlmostEqual(self.spline.derivative(0.0), 1.5)
        self.assertAlmostEqual(self.spline.derivative(1.0), 0.0)
        self.assertAlmostEqual(self.spline.second_derivative(1.0), -3.0)

    def test_natural_boundary(self) -> None:
        self.assertAlmostEqual(self.spline.second_derivative(0.0), 0.0)
        self.assertAlmostEqual(self.spline.second_derivative(2.0), 0.0)

    def test_first_derivative_continuous_at_interior_knot(self) -> None:
        eps = 1e-7
        self.assertAlmostEqual(self.spline.derivative(1.0 - eps), self.spline.derivative(1.0 + eps), places=5)

    def test_out_of_range_uses_end_segments(self) -> None:
        self.assertAlmostEqual(self.spline.interpolate(3.0), 1.0 - 1.5 * 4.0 + 0.5 * 8.0)
        self.assertAlmostEqual(self.spline.interpolate(-1.0), -1.5 + 0.5)

    def test_two_knots_is_linear(self) -> None:
        spline = CubicSpline([0.0, 4.0], [1.0, 3.0])
        self.assertAlmostEqual(spline.interpolate(2.0), 2.0)
        self.assertAlmostEqual(spline.derivative(1.0), 0.5)
        self.assertAlmostEqual(spline.second_derivative(1.0), 0.0)

    def test_fewer_than_two_knots(self) -> None:
        single = CubicSpline([0.0], [7.0])
        self.assertEqual(single.interpolate(3.0), 7.0)
        self.assertEqual(single.derivative(3.0), 0.0)
        empty = CubicSpline([], [])
        self.assertEqual(empty.interpolate(1.0), 0.0)
        self.assertEqual(empty.second_derivative(1.0), 0.0)

    def test_mismatched_lengths_raise(self) -> None:
        with self.assertRaises(ValueError):
            CubicSpline([0.0, 1.0], [0.0])

    def test_repeated_knots_raise(self) -> None:
        with self.assertRaises(ValueError):
            CubicSpline([0.0, 1.0, 1.0], [0.0, 1.0, 2.0])
        with self.assertRaises(ValueError):
            QuinticSpline([0.0, 2.0, 1.0], [0.0, 1.0, 2.0])


class TestQuinticSpline(unittest.TestCase):
    def test_passes_through_knots_with_cubic_slopes(self) -> None:
        knots = [0.0, 1.0, 2.5, 4.0]
        values = [0.0, 2.0, 1.0, 3.0]
        quintic = QuinticSpline(knots, values)
        cubic = CubicSpline(knots, values)
        for s, y in zip(knots, values):
            self.assertAlmostEqual(quintic.interpolate(s), y)
            self.assertAlmostEqual(quintic.derivative(s), cubic.derivative(s))

    def test_knot_second_derivatives_are_zero(self) -> None:
        quintic = QuinticSpline([0.0, 1.0, 2.5, 4.0], [0.0, 2.0, 1.0, 3.0])
        for s in [0.0, 1.0, 2.5, 4.0]:
            self.assertAlmostEqual(quintic.second_derivative(s), 0.0, places=9)

    def test_linear_data_stays_linear(self) -> None:
        quintic = QuinticSpline([0.0, 1.0, 3.0], [0.0, 2.0, 6.0])
        self.assertAlmostEqual(quintic.interpolate(2.0), 4.0)
        self.assertAlmostEqual(quintic.derivative(0.7), 2.0)

    def test_degenerate_segment_falls_back_to_quadratic(self) -> None:
        quintic = QuinticSpline([0.0, 1.0, 1.0 + 5e-7, 2.0], [0.0, 1.0, 1.0, 2.0])
        value = quintic.interpolate(1.0 + 2e-7)
        self.assertTrue(math.isfinite(value))
        self.assertAlmostEqual(value, 1.0, places=4)
        self.assertAlmostEqual(quintic.interpolate(2.0), 2.0)

    def test_fewer_than_two_knots(self) -> None:
        self.assertEqual(QuinticSpline([1.0], [4.0]).interpolate(0.0), 4.0)
        self.assertEqual(QuinticSpline([], []).derivative(0.0), 0.0)


class TestSplineRegistry(unittest.TestCase):
    def test_builtin_splines_resolve(self) -> None:
        self.assertEqual(available_splines(), ["cubic", "quintic"])
        self.assertIsInstance(create_spline("cubic", [0.0, 1.0], [0.0, 1.0]), CubicSpline)
        self.assertIsInstance(create_spline(" Quintic ", [0.0, 1.0], [0.0, 1.0]), QuinticSpline)

    def test_unknown_spline_raises_helpful_error(self) -> None:
        with self.assertRaises(ValueError) as e:
            create_spline("bezier", [0.0, 1.0], [0.0, 1.0])
        self.assertIn("Unknown spline type", str(e.exception))
        self.assertIn("cubic", str(e.exception))


if __name__ == "__main__":
    unittest.main()
