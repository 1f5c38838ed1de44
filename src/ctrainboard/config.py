"""Configuration for the CTrain arrival board."""

import logging
import os
from dataclasses import dataclass, replace
from typing import Dict, Optional, Tuple

from dotenv import load_dotenv

from .models import EAST, WEST

logger = logging.getLogger(__name__)

# Calgary Open Data GTFS-Realtime feeds
TRIP_UPDATES_URL = "https://data.calgary.ca/download/gs4m-mdc2/application%2Foctet-stream"
ALERTS_URL = "https://data.calgary.ca/download/jhgn-ynqj/application%2Foctet-stream"

# Relays tried after the direct URL, in priority order
DEFAULT_RELAY_PREFIXES = (
    "https://corsproxy.io/?",
    "https://api.allorigins.win/raw?url=",
    "https://thingproxy.freeboard.io/fetch/",
)

# City Hall / Bow Valley College platforms
CITY_HALL_WEST = "6822"
CITY_HALL_EAST = "6831"

# (route id, line color); earlier entries win when several ids match
DEFAULT_ROUTES = (("201", "red"), ("202", "blue"))

# ((line color, direction), destination)
DEFAULT_DESTINATIONS = (
    (("red", WEST), "Tuscany"),
    (("blue", WEST), "69 Street"),
    (("red", EAST), "Somerset"),
    (("blue", EAST), "Saddletowne"),
)

ENV_PREFIX = "CTRAINBOARD_"


@dataclass(frozen=True)
class BoardConfig:
    """All policy values used by the transport, pipeline and scheduler."""

    trip_updates_url: str = TRIP_UPDATES_URL
    alerts_url: str = ALERTS_URL
    use_direct: bool = True
    relay_prefixes: Tuple[str, ...] = DEFAULT_RELAY_PREFIXES
    request_timeout: float = 10.0
    min_payload_bytes: int = 100

    west_stop_id: str = CITY_HALL_WEST
    east_stop_id: str = CITY_HALL_EAST
    routes: Tuple[Tuple[str, str], ...] = DEFAULT_ROUTES
    destinations: Tuple[Tuple[Tuple[str, str], str], ...] = DEFAULT_DESTINATIONS

    departure_grace_seconds: int = 90
    max_lookahead_minutes: int = 60
    display_cap: int = 3

    poll_interval: float = 30.0
    fast_retry_interval: float = 5.0
    failure_threshold: int = 3

    all_clear_message: str = "All lines operating normally"

    def __post_init__(self):
        """
        Reject values the pipeline and scheduler cannot run with.

        Raises:
            ValueError: If a setting is out of range.
        """
        positive = ("request_timeout", "display_cap", "poll_interval", "fast_retry_interval", "failure_threshold")
        for name in positive:
            if getattr(self, name) <= 0:
                raise ValueError(f"{name} must be greater than 0, got {getattr(self, name)!r}")

        non_negative = ("min_payload_bytes", "departure_grace_seconds", "max_lookahead_minutes")
        for name in non_negative:
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must not be negative, got {getattr(self, name)!r}")

        if not self.routes:
            raise ValueError("At least one route is required")

    @property
    def route_ids(self) -> Tuple[str, ...]:
        return tuple(route_id for route_id, _ in self.routes)

    @property
    def fallback_color(self) -> str:
        """Color used for a route that passed the route filter but maps to no entry."""
        return self.routes[-1][1]

    def destination_for(self, route_color: str, direction: str) -> str:
        return dict(self.destinations).get((route_color, direction), "")

    @classmethod
    def from_env(cls, env_file: Optional[str] = None) -> "BoardConfig":
        """
        Build a config from defaults overridden by ``CTRAINBOARD_*`` variables.

        Args:
            env_file: Optional path to a .env file. When None, python-dotenv
                searches the working directory.

        Returns:
            BoardConfig instance.

        Raises:
            ValueError: If a variable cannot be parsed.
        """
        load_dotenv(env_file)
        config = cls()
        overrides = {}

        for name, value in _read_env().items():
            if name == "relay_prefixes":
                overrides[name] = tuple(part.strip() for part in value.split(",") if part.strip())
            elif name == "routes":
                overrides[name] = _parse_routes(value)
            elif name == "use_direct":
                overrides[name] = value.strip().lower() in ("1", "true", "yes", "on")
            else:
                default = getattr(config, name)
                try:
                    overrides[name] = type(default)(value)
                except ValueError as e:
                    raise ValueError(f"Invalid value for {ENV_PREFIX}{name.upper()}: {value!r}") from e

        if overrides:
            logger.debug(f"Config overrides from environment: {sorted(overrides)}")
        return replace(config, **overrides)


_ENV_FIELDS = (
    "trip_updates_url",
    "alerts_url",
    "use_direct",
    "relay_prefixes",
    "request_timeout",
    "min_payload_bytes",
    "west_stop_id",
    "east_stop_id",
    "routes",
    "departure_grace_seconds",
    "max_lookahead_minutes",
    "display_cap",
    "poll_interval",
    "fast_retry_interval",
    "failure_threshold",
    "all_clear_message",
)


def _read_env() -> Dict[str, str]:
    values = {}
    for name in _ENV_FIELDS:
        value = os.getenv(ENV_PREFIX + name.upper())
        if value is not None and value != "":
            values[name] = value
    return values


def _parse_routes(value: str) -> Tuple[Tuple[str, str], ...]:
    """Parse ``"201:red,202:blue"`` into route/color pairs."""
    routes = []
    for part in value.split(","):
        part = part.strip()
        if not part:
            continue
        route_id, sep, color = part.partition(":")
        if not sep or not route_id.strip() or not color.strip():
            raise ValueError(f"Invalid route entry {part!r}, expected ROUTE:COLOR")
        routes.append((route_id.strip(), color.strip()))
    if not routes:
        raise ValueError("At least one route is required")
    return tuple(routes)
