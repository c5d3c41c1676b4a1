"""Cooperative frame loop driving a :class:`SimulationPlayer` from a wall clock."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable

from .player import PlayerState, SimulationPlayer

logger = logging.getLogger(__name__)

ACTIVE_STATES = (PlayerState.RUNNING, PlayerState.PAUSED_AT_STOP)


def run_playback(
    player: SimulationPlayer,
    frame_rate: float = 60.0,
    clock: Callable[[], float] = time.monotonic,
    sleep: Callable[[float], None] = time.sleep,
    timeout: float | None = None,
) -> PlayerState:
    """Tick ``player`` once per frame until its run ends.

    The player must already be playing. Ticks keep firing while it is
    paused at a stop; they are no-ops until the stop timer clears. With a
    ``timeout`` (wall seconds) the run is stopped when it is exceeded.
    """
    frame = 1.0 / float(frame_rate)
    start = last = clock()
    frames = 0
    while player.state in ACTIVE_STATES:
        sleep(frame)
        now = clock()
        player.tick(now - last)
        last = now
        frames += 1
        if timeout is not None and now - start > timeout:
            logger.warning(f"Playback timed out after {now - start:.1f} s, stopping")
            player.stop()
            break

    logger.info(f"Playback loop ended in state {player.state.value} after {frames} frames")
    return player.state
