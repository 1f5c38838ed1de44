"""Main CTrain board tracker: fetch, decode and extract one cycle of data."""

import logging
import time
from dataclasses import dataclass, field
from typing import Callable, Optional

from .alerts import extract_active_alert
from .arrivals import extract_arrivals
from .config import BoardConfig
from .decoder import FeedDecoder
from .errors import DecodeError, EmptyFeedError, TransportError
from .models import AlertState, CycleResult, Feed
from .timing import resolve_reference_time
from .transport import FeedTransport

logger = logging.getLogger(__name__)


@dataclass
class PollContext:
    """
    Process-wide state owned by the scheduler.

    The decoder caches the loaded schema. ``failure_streak`` and
    ``has_succeeded`` are only ever touched by the scheduler.
    """
    decoder: FeedDecoder = field(default_factory=FeedDecoder)
    failure_streak: int = 0
    has_succeeded: bool = False


class BoardTracker:
    """
    Tracks upcoming trains at the two City Hall platforms and line alerts.

    This class provides methods to:
    - Fetch and rank the next trains per direction
    - Look up the active service alert for the tracked lines
    """

    def __init__(
        self,
        config: Optional[BoardConfig] = None,
        transport: Optional[FeedTransport] = None,
        clock: Callable[[], float] = time.time,
    ):
        """
        Initialize the tracker.

        Args:
            config: Board configuration. Defaults to BoardConfig().
            transport: Feed transport. Built from the config when None.
            clock: Local wall clock, used when a feed has no header timestamp.
        """
        self.config = config or BoardConfig()
        self.transport = transport or FeedTransport.from_config(self.config)
        self.clock = clock

    def _load_feed(self, url: str, context: PollContext) -> Feed:
        payload = self.transport.fetch_feed_bytes(url)
        return context.decoder.decode_feed(payload)

    def fetch_board(self, context: PollContext) -> CycleResult:
        """
        Get the ranked west/east arrivals for this cycle.

        Args:
            context: Scheduler-owned poll context.

        Returns:
            CycleResult holding either the board or the error that left this
            cycle without data.
        """
        try:
            feed = self._load_feed(self.config.trip_updates_url, context)
            reference_time = resolve_reference_time(feed, self.clock)
            board = extract_arrivals(feed, reference_time, self.config)
        except EmptyFeedError as e:
            logger.warning(f"No trip updates in feed: {e}")
            return CycleResult(error=e)
        except (TransportError, DecodeError) as e:
            logger.error(f"Failed to load trip updates: {e}")
            return CycleResult(error=e)

        if board.is_empty():
            logger.info("No trains found (service closed or nothing scheduled)")
        return CycleResult(board=board)

    def fetch_alert(self, context: PollContext) -> AlertState:
        """
        Get the active service alert for the tracked routes.

        Never raises: any failure is logged and reported as the all-clear state.
        """
        try:
            feed = self._load_feed(self.config.alerts_url, context)
            return extract_active_alert(feed, self.config.route_ids)
        except Exception as e:
            logger.warning(f"Failed to fetch alerts: {e}")
            return AlertState(active=False, message=self.config.all_clear_message)

    def cleanup(self) -> None:
        """Release the transport's HTTP session."""
        self.transport.close()
        logger.info("Cleaned up tracker resources")
