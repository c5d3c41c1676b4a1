"""Natural cubic spline over arc-length knots."""

from __future__ import annotations

import numpy as np
from scipy.linalg import solve_banded

from ..core.interfaces import Spline1D


class CubicSpline(Spline1D):
    """Natural cubic spline (zero second derivative at both ends).

    Each segment is ``p(t) = a + b t + c t^2 + d t^3`` with ``t`` measured
    from the segment's left knot.
    """

    def _fit(self) -> None:
        h = np.diff(self.knots)
        dy = np.diff(self.values)
        slopes = dy / h

        # Interior curvature terms solve a tridiagonal system; the natural
        # boundary pins c[0] = c[n-1] = 0.
        c = np.zeros(self.n, dtype=float)
        m = self.n - 2
        if m > 0:
            ab = np.zeros((3, m), dtype=float)
            ab[0, 1:] = h[1:m]
            ab[1, :] = 2.0 * (h[:-1] + h[1:])
            ab[2, :-1] = h[1:m]
            rhs = 3.0 * (slopes[1:] - slopes[:-1])
            c[1:-1] = solve_banded((1, 1), ab, rhs)

        self._a = self.values[:-1].copy()
        self._b = slopes - h * (c[1:] + 2.0 * c[:-1]) / 3.0
        self._c = c[:-1].copy()
        self._d = (c[1:] - c[:-1]) / (3.0 * h)

    def interpolate(self, s: float) -> float:
        if self.n < 2:
            return self._degenerate_value()
        i, t = self.segment(s)
        return float(self._a[i] + self._b[i] * t + self._c[i] * t * t + self._d[i] * t * t * t)

    def derivative(self, s: float) -> float:
        if self.n < 2:
            return 0.0
        i, t = self.segment(s)
        return float(self._b[i] + 2.0 * self._c[i] * t + 3.0 * self._d[i] * t * t)

    def second_derivative(self, s: float) -> float:
        if self.n < 2:
            return 0.0
        i, t = self.segment(s)
        return float(2.0 * self._c[i] + 6.0 * self._d[i] * t)
