"""Polling scheduler with failure-streak handling."""

import logging
import time
from enum import Enum
from typing import Callable, Optional

from .board_tracker import BoardTracker, PollContext
from .display import BoardDisplay
from .models import CycleResult

logger = logging.getLogger(__name__)

WEST_CONTAINER = "westbound-container"
EAST_CONTAINER = "eastbound-container"


class PollState(Enum):
    IDLE = "idle"
    POLLING = "polling"
    BACKOFF = "backoff"


class PollScheduler:
    """
    Runs board cycles back to back, one at a time.

    After each cycle the outcome picks the next state and delay:
    a board means IDLE for ``poll_interval``; no data means BACKOFF for
    ``fast_retry_interval``, except an empty feed once the board has loaded
    at least once, which waits the normal interval. Once
    ``failure_threshold`` cycles in a row produce no data the display is
    switched to its reconnecting state.
    """

    def __init__(
        self,
        tracker: BoardTracker,
        display: BoardDisplay,
        context: Optional[PollContext] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.tracker = tracker
        self.display = display
        self.context = context or PollContext()
        self.sleep = sleep
        self.state = PollState.IDLE
        self.cycles = 0

    @property
    def config(self):
        return self.tracker.config

    def _next_state(self, result: CycleResult) -> PollState:
        if result.has_data:
            return PollState.IDLE
        if result.is_empty_feed and self.context.has_succeeded:
            return PollState.IDLE
        return PollState.BACKOFF

    def delay_for(self, state: PollState) -> float:
        if state is PollState.BACKOFF:
            return self.config.fast_retry_interval
        return self.config.poll_interval

    def run_cycle(self) -> float:
        """
        Run one complete cycle.

        Returns:
            Seconds to wait before the next cycle.
        """
        self.state = PollState.POLLING
        self.cycles += 1

        result = self.tracker.fetch_board(self.context)

        if result.has_data:
            self.context.failure_streak = 0
            self.context.has_succeeded = True
            self.display.render(WEST_CONTAINER, result.board.west)
            self.display.render(EAST_CONTAINER, result.board.east)
            logger.info(f"Updated: {len(result.board.west)} West, {len(result.board.east)} East")
        else:
            self.context.failure_streak += 1
            logger.warning(
                f"No data this cycle ({self.context.failure_streak} in a row): {result.error}"
            )
            if self.context.failure_streak >= self.config.failure_threshold:
                self.display.show_reconnecting()

        self.display.update_alert(self.tracker.fetch_alert(self.context))

        self.state = self._next_state(result)
        delay = self.delay_for(self.state)
        logger.debug(f"Cycle {self.cycles} done, {self.state.value} for {delay}s")
        return delay

    def run_forever(self, max_cycles: Optional[int] = None) -> None:
        """
        Poll until the process stops.

        Args:
            max_cycles: Stop after this many cycles. None runs indefinitely.
        """
        logger.info("Board scheduler started")
        while max_cycles is None or self.cycles < max_cycles:
            delay = self.run_cycle()
            if max_cycles is not None and self.cycles >= max_cycles:
                break
            self.sleep(delay)
        self.state = PollState.IDLE
