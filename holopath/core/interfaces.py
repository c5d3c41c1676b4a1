"""Abstract interfaces for one-dimensional spline interpolants."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Sequence

import numpy as np


class Spline1D(ABC):
    """Interpolant y(s) over a strictly increasing knot vector ``s``.

    Subclasses fit their coefficients in ``_fit``; evaluation is scalar.
    With fewer than two knots the evaluators return the single known value
    (or 0) instead of failing.
    """

    def __init__(self, knots: Sequence[float], values: Sequence[float]) -> None:
        self.knots = np.asarray(knots, dtype=float).copy()
        self.values = np.asarray(values, dtype=float).copy()
        if self.knots.shape != self.values.shape:
            raise ValueError(
                f"knots and values must have the same length ({self.knots.size} != {self.values.size})"
            )
        if self.knots.size > 1 and not np.all(np.diff(self.knots) > 0.0):
            raise ValueError("knots must be strictly increasing")
        self.n = int(self.knots.size)
        if self.n >= 2:
            self._fit()

    @abstractmethod
    def _fit(self) -> None:
        """Compute per-segment coefficients."""

    @abstractmethod
    def interpolate(self, s: float) -> float:
        """Evaluate y(s)."""

    @abstractmethod
    def derivative(self, s: float) -> float:
        """Evaluate dy/ds."""

    @abstractmethod
    def second_derivative(self, s: float) -> float:
        """Evaluate d2y/ds2."""

    def segment(self, s: float) -> tuple[int, float]:
        """Return ``(segment index, offset from its left knot)``.

        ``s`` below the first knot maps to the first segment and ``s`` at or
        above the last knot maps to the last one; a knot shared by two
        segments belongs to the left one.
        """
        i = int(np.searchsorted(self.knots[1:], s, side="left"))
        i = min(max(i, 0), self.n - 2)
        return i, float(s - self.knots[i])

    def _degenerate_value(self) -> float:
        return float(self.values[0]) if self.n == 1 else 0.0
