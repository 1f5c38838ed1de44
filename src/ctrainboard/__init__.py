"""ctrainboard - Real-time CTrain arrival board for Calgary City Hall."""

__version__ = "0.1.0"

from .models import Arrival, ArrivalBoard, AlertState, CycleResult, Feed
from .config import BoardConfig
from .errors import CTrainBoardError, TransportError, DecodeError, EmptyFeedError
from .transport import FeedTransport
from .decoder import FeedDecoder, normalize_feed
from .arrivals import extract_arrivals
from .alerts import extract_active_alert
from .board_tracker import BoardTracker, PollContext
from .scheduler import PollScheduler, PollState

__all__ = [
    "BoardTracker",
    "PollScheduler",
    "PollState",
    "PollContext",
    "BoardConfig",
    "FeedTransport",
    "FeedDecoder",
    "normalize_feed",
    "extract_arrivals",
    "extract_active_alert",
    "Arrival",
    "ArrivalBoard",
    "AlertState",
    "CycleResult",
    "Feed",
    "CTrainBoardError",
    "TransportError",
    "DecodeError",
    "EmptyFeedError",
]
