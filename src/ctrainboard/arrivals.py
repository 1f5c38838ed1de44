"""Extract ranked per-direction arrivals for the tracked stops."""

import logging
from typing import Optional, Set

from .config import BoardConfig
from .errors import EmptyFeedError
from .models import EAST, WEST, Arrival, ArrivalBoard, Feed, TripUpdate
from .timing import minutes_until

logger = logging.getLogger(__name__)


def is_tracked_route(route_id: str, config: BoardConfig) -> bool:
    """Route ids may carry prefixes/suffixes around the canonical code."""
    return any(tracked in route_id for tracked in config.route_ids)


def route_color(route_id: str, config: BoardConfig) -> str:
    """First configured route whose id appears in ``route_id`` decides the color."""
    for tracked, color in config.routes:
        if tracked in route_id:
            return color
    return config.fallback_color


def _direction_for_stop(stop_id: str, config: BoardConfig) -> Optional[str]:
    if stop_id == config.west_stop_id:
        return WEST
    if stop_id == config.east_stop_id:
        return EAST
    return None


def _first_arrival(trip: TripUpdate, reference_time: int, config: BoardConfig) -> Optional[Arrival]:
    """
    Arrival for the first stop-time update that is in the time window and at a tracked stop.

    Only the first match counts, so a loop trip passing a tracked stop twice
    yields a single arrival.
    """
    color = route_color(trip.route_id, config)

    for update in trip.stop_time_updates:
        eta = update.event_time
        if eta is None:
            continue

        minutes = minutes_until(eta, reference_time, config.departure_grace_seconds)
        if minutes is None or minutes > config.max_lookahead_minutes:
            continue

        direction = _direction_for_stop(update.stop_id, config)
        if direction is None:
            continue

        return Arrival(
            trip_id=trip.trip_id,
            route_color=color,
            direction=direction,
            destination=config.destination_for(color, direction),
            minutes_until_arrival=minutes,
        )
    return None


def extract_arrivals(feed: Optional[Feed], reference_time: int, config: BoardConfig) -> ArrivalBoard:
    """
    Build the west/east arrival lists for one cycle.

    Args:
        feed: Decoded trip-updates feed.
        reference_time: Epoch seconds arrivals are measured against.
        config: Board configuration.

    Returns:
        ArrivalBoard with each direction sorted by minutes and capped to
        ``config.display_cap``.

    Raises:
        EmptyFeedError: If the feed is missing or has no entities.
    """
    if feed is None or not feed.entities:
        raise EmptyFeedError("Trip updates feed contains no entities")

    board = ArrivalBoard()
    processed_trips: Set[str] = set()

    for entity in feed.entities:
        trip = entity.trip_update
        if trip is None or not trip.stop_time_updates:
            continue

        # Ghost trains: duplicate entities for a trip already on the board
        if trip.trip_id in processed_trips:
            continue

        if not is_tracked_route(trip.route_id, config):
            continue

        arrival = _first_arrival(trip, reference_time, config)
        if arrival is None:
            continue

        if arrival.direction == WEST:
            board.west.append(arrival)
        else:
            board.east.append(arrival)
        processed_trips.add(trip.trip_id)

    # list.sort is stable, so ties keep feed order
    board.west.sort(key=lambda a: a.minutes_until_arrival)
    board.east.sort(key=lambda a: a.minutes_until_arrival)
    board.west = board.west[: config.display_cap]
    board.east = board.east[: config.display_cap]

    logger.debug(f"Extracted {len(board.west)} west, {len(board.east)} east arrivals")
    return board
