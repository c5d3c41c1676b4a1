"""Holonomic robot path planner and playback simulator.

Architecture highlights:
- Pure, synchronous planning pipeline (guide blending, spline fitting,
  curvature evaluation, velocity profiling)
- Plugin-style registry for spline variants
- Tick-driven simulation player with stop-waypoint pausing
- CLI entrypoint via ``python -m holopath.app.main``
"""
