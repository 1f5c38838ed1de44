"""Data models for the CTrain arrival board."""

from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from .errors import CTrainBoardError, EmptyFeedError

WEST = "west"
EAST = "east"

BOARDING = "Boarding"
ON_TIME = "On Time"


@dataclass(frozen=True)
class FeedHeader:
    """Feed publisher's clock at generation time (0 when absent)."""
    timestamp: int = 0


@dataclass(frozen=True)
class StopTimeUpdate:
    """Predicted arrival/departure of one trip at one stop."""
    stop_id: str
    arrival_time: Optional[int] = None  # Unix timestamp
    departure_time: Optional[int] = None  # Unix timestamp

    @property
    def event_time(self) -> Optional[int]:
        """Arrival time if present, else departure time."""
        if self.arrival_time:
            return self.arrival_time
        return self.departure_time or None


@dataclass(frozen=True)
class TripUpdate:
    """Trip descriptor plus its ordered stop-time updates."""
    trip_id: str
    route_id: str
    stop_time_updates: Tuple[StopTimeUpdate, ...] = ()


@dataclass(frozen=True)
class ServiceAlert:
    """Service alert reduced to the routes it informs and its header text."""
    route_ids: Tuple[str, ...] = ()
    header_translations: Tuple[str, ...] = ()


@dataclass(frozen=True)
class FeedEntity:
    """One record of a feed: a trip update, an alert, or neither."""
    entity_id: str
    trip_update: Optional[TripUpdate] = None
    alert: Optional[ServiceAlert] = None


@dataclass(frozen=True)
class Feed:
    """A decoded feed snapshot."""
    header: FeedHeader = field(default_factory=FeedHeader)
    entities: Tuple[FeedEntity, ...] = ()


@dataclass(frozen=True)
class Arrival:
    """An upcoming train at one of the tracked stops."""
    trip_id: str
    route_color: str  # "red" or "blue"
    direction: str  # "west" or "east"
    destination: str
    minutes_until_arrival: int

    @property
    def boarding_status(self) -> str:
        """Boarding within a minute of arrival, otherwise On Time."""
        return BOARDING if self.minutes_until_arrival <= 1 else ON_TIME

    def to_dict(self) -> dict:
        """Row shape handed to the renderer."""
        return {
            "trip_id": self.trip_id,
            "line": self.route_color,
            "direction": self.direction,
            "destination": self.destination,
            "minutes": self.minutes_until_arrival,
            "status": self.boarding_status,
        }


@dataclass
class ArrivalBoard:
    """Ranked arrivals for both directions."""
    west: List[Arrival] = field(default_factory=list)
    east: List[Arrival] = field(default_factory=list)

    def is_empty(self) -> bool:
        """True when neither direction has an arrival."""
        return not self.west and not self.east


@dataclass(frozen=True)
class AlertState:
    """Whether a tracked route currently has a service disruption."""
    active: bool = False
    message: str = ""


@dataclass
class CycleResult:
    """
    Outcome of one trip-update cycle.

    Either ``board`` is set (possibly with two empty lists, meaning nothing is
    scheduled) or ``error`` holds the reason there is no data this cycle.
    """
    board: Optional[ArrivalBoard] = None
    error: Optional[CTrainBoardError] = None

    @property
    def has_data(self) -> bool:
        """True when this cycle produced a board."""
        return self.board is not None

    @property
    def is_empty_feed(self) -> bool:
        """True when the feed decoded but had no entities."""
        return isinstance(self.error, EmptyFeedError)
