"""Quintic Hermite spline over arc-length knots.

Knot first derivatives come from an auxiliary natural cubic spline over the
same knots. Knot second derivatives are fixed at 0, so the result is not
acceleration-continuous across knots.
"""

from __future__ import annotations

import numpy as np

from ..core.interfaces import Spline1D
from .cubic import CubicSpline

SEGMENT_EPS = 1e-6


class QuinticSpline(Spline1D):
    """Per-segment ``p(t) = a + b t + c t^2 + d t^3 + e t^4 + f t^5``."""

    def _fit(self) -> None:
        aux = CubicSpline(self.knots, self.values)
        vel = np.array([aux.derivative(float(s)) for s in self.knots], dtype=float)
        acc = np.zeros(self.n, dtype=float)

        coeffs = np.zeros((self.n - 1, 6), dtype=float)
        for i in range(self.n - 1):
            y0, y1 = self.values[i], self.values[i + 1]
            v0, v1 = vel[i], vel[i + 1]
            a0, a1 = acc[i], acc[i + 1]
            h = self.knots[i + 1] - self.knots[i]

            coeffs[i, 0] = y0
            coeffs[i, 1] = v0
            coeffs[i, 2] = a0 / 2.0
            if abs(h) < SEGMENT_EPS:
                # Too short to fit end conditions; keep the quadratic start.
                continue

            h2 = h * h
            h3 = h2 * h
            h4 = h3 * h
            h5 = h4 * h
            coeffs[i, 3] = (20.0 * (y1 - y0) - (12.0 * v0 + 8.0 * v1) * h - (3.0 * a0 - a1) * h2) / (2.0 * h3)
            coeffs[i, 4] = (30.0 * (y0 - y1) + (16.0 * v0 + 14.0 * v1) * h + (3.0 * a0 - 2.0 * a1) * h2) / (2.0 * h4)
            coeffs[i, 5] = (12.0 * (y1 - y0) - (6.0 * v0 + 6.0 * v1) * h - (a0 - a1) * h2) / (2.0 * h5)

        self._coeffs = coeffs

    def interpolate(self, s: float) -> float:
        if self.n < 2:
            return self._degenerate_value()
        i, t = self.segment(s)
        a, b, c, d, e, f = self._coeffs[i]
        return float(a + t * (b + t * (c + t * (d + t * (e + t * f)))))

    def derivative(self, s: float) -> float:
        if self.n < 2:
            return 0.0
        i, t = self.segment(s)
        _, b, c, d, e, f = self._coeffs[i]
        return float(b + t * (2.0 * c + t * (3.0 * d + t * (4.0 * e + t * 5.0 * f))))

    def second_derivative(self, s: float) -> float:
        if self.n < 2:
            return 0.0
        i, t = self.segment(s)
        _, _, c, d, e, f = self._coeffs[i]
        return float(2.0 * c + t * (6.0 * d + t * (12.0 * e + t * 20.0 * f)))
