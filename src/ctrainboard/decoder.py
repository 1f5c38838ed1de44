"""GTFS-Realtime decoding and normalization into the board's feed model."""

import logging
from typing import Any, Mapping, Optional, Sequence

from google.protobuf.json_format import MessageToDict
from google.protobuf.message import DecodeError as ProtobufDecodeError

from .errors import DecodeError
from .models import Feed, FeedEntity, FeedHeader, ServiceAlert, StopTimeUpdate, TripUpdate
from .timing import LowHigh, to_epoch_seconds

logger = logging.getLogger(__name__)


class FeedDecoder:
    """Decodes GTFS-Realtime protobuf payloads. The bindings are loaded once."""

    def __init__(self):
        self._schema = None

    @property
    def schema_loaded(self) -> bool:
        return self._schema is not None

    def _load_schema(self):
        """Import the GTFS-Realtime bindings on first use and cache them."""
        if self._schema is None:
            try:
                from google.transit import gtfs_realtime_pb2
            except ImportError as e:
                logger.error("google.transit.gtfs_realtime_pb2 not installed")
                raise DecodeError("GTFS-Realtime bindings unavailable") from e

            self._schema = gtfs_realtime_pb2
            logger.info("GTFS-Realtime schema loaded")
        return self._schema

    def decode_feed(self, buffer: bytes) -> Feed:
        """
        Decode a protobuf FeedMessage.

        Args:
            buffer: Raw protobuf bytes.

        Returns:
            Normalized Feed.

        Raises:
            DecodeError: If the payload is not a valid FeedMessage.
        """
        schema = self._load_schema()
        message = schema.FeedMessage()
        try:
            message.ParseFromString(buffer)
        except ProtobufDecodeError as e:
            logger.error(f"Failed to parse feed ({len(buffer)} bytes): {e}")
            raise DecodeError(f"Malformed feed payload: {e}") from e

        return normalize_feed(MessageToDict(message))


def _get(mapping: Optional[Mapping[str, Any]], snake: str, camel: str, default=None):
    """Read a field that the decoder may spell in snake_case or camelCase."""
    if not mapping:
        return default
    if snake in mapping:
        return mapping[snake]
    return mapping.get(camel, default)


def _time_value(value: Any) -> Optional[int]:
    if value is None:
        return None
    if isinstance(value, Mapping):
        value = LowHigh(low=int(value.get("low", 0)), high=int(value.get("high", 0)))
    seconds = to_epoch_seconds(value)
    return seconds or None


def _event_time(event: Optional[Mapping[str, Any]]) -> Optional[int]:
    if not event:
        return None
    return _time_value(event.get("time"))


def _stop_time_update(raw: Mapping[str, Any]) -> StopTimeUpdate:
    return StopTimeUpdate(
        stop_id=str(_get(raw, "stop_id", "stopId", "")),
        arrival_time=_event_time(raw.get("arrival")),
        departure_time=_event_time(raw.get("departure")),
    )


def _trip_update(raw: Optional[Mapping[str, Any]]) -> Optional[TripUpdate]:
    if not raw:
        return None
    trip = raw.get("trip") or {}
    updates: Sequence[Mapping[str, Any]] = _get(raw, "stop_time_update", "stopTimeUpdate") or []
    return TripUpdate(
        trip_id=str(_get(trip, "trip_id", "tripId", "")),
        route_id=str(_get(trip, "route_id", "routeId", "")),
        stop_time_updates=tuple(_stop_time_update(update) for update in updates),
    )


def _alert(raw: Optional[Mapping[str, Any]]) -> Optional[ServiceAlert]:
    if not raw:
        return None

    route_ids = []
    for informed in _get(raw, "informed_entity", "informedEntity") or []:
        # Route can be given directly or through the trip descriptor
        route_id = _get(informed, "route_id", "routeId")
        if not route_id:
            route_id = _get(informed.get("trip"), "route_id", "routeId")
        if route_id:
            route_ids.append(str(route_id))

    header = _get(raw, "header_text", "headerText") or {}
    translations = tuple(
        str(translation.get("text", ""))
        for translation in header.get("translation") or []
    )
    return ServiceAlert(route_ids=tuple(route_ids), header_translations=translations)


def normalize_feed(raw: Mapping[str, Any]) -> Feed:
    """
    Convert a decoded feed mapping into a Feed.

    Accepts both snake_case (proto field names) and camelCase (JSON names) keys,
    and any EpochValue shape for times.

    Raises:
        DecodeError: If a time field cannot be interpreted.
    """
    try:
        header_raw = raw.get("header") or {}
        header = FeedHeader(timestamp=_time_value(header_raw.get("timestamp")) or 0)

        entities = []
        for index, entity in enumerate(raw.get("entity") or []):
            entities.append(
                FeedEntity(
                    entity_id=str(entity.get("id", index)),
                    trip_update=_trip_update(_get(entity, "trip_update", "tripUpdate")),
                    alert=_alert(entity.get("alert")),
                )
            )
    except (ValueError, TypeError, AttributeError) as e:
        raise DecodeError(f"Unexpected feed structure: {e}") from e

    logger.debug(f"Normalized feed with {len(entities)} entities")
    return Feed(header=header, entities=tuple(entities))
