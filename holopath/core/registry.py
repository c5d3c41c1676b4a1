"""Component registry for spline variants."""

from __future__ import annotations

from collections.abc import Callable, Sequence

from .interfaces import Spline1D

SplineFactory = Callable[[Sequence[float], Sequence[float]], Spline1D]

SPLINES: dict[str, SplineFactory] = {}

_BUILTINS_REGISTERED = False


def _normalize_name(name: str) -> str:
    return str(name).lower().strip()


def register_spline(name: str, factory: SplineFactory) -> None:
    SPLINES[_normalize_name(name)] = factory


def available_splines() -> list[str]:
    register_builtin_components()
    return sorted(SPLINES)


def create_spline(name: str, knots: Sequence[float], values: Sequence[float]) -> Spline1D:
    register_builtin_components()
    key = _normalize_name(name)
    if key not in SPLINES:
        available = ", ".join(sorted(SPLINES)) or "none"
        raise ValueError(f"Unknown spline type '{name}'. Available: {available}")
    return SPLINES[key](knots, values)


def register_builtin_components() -> None:
    """Register built-in spline variants once."""
    global _BUILTINS_REGISTERED
    if _BUILTINS_REGISTERED:
        return

    from ..splines.cubic import CubicSpline
    from ..splines.quintic import QuinticSpline

    register_spline("cubic", CubicSpline)
    register_spline("quintic", QuinticSpline)

    _BUILTINS_REGISTERED = True
