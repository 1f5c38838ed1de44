"""Find an active service alert for the tracked routes."""

import logging
from typing import Optional, Sequence

from .models import AlertState, Feed

logger = logging.getLogger(__name__)


def extract_active_alert(alerts_feed: Optional[Feed], tracked_routes: Sequence[str]) -> AlertState:
    """
    Get the header text of the first alert that informs a tracked route.

    Route ids are matched by substring, as in the trip-updates filter.

    Args:
        alerts_feed: Decoded alerts feed.
        tracked_routes: Route ids to look for (e.g., ["201", "202"]).

    Returns:
        Active AlertState with the first header translation, or an inactive
        state with no message.
    """
    if alerts_feed is None:
        return AlertState()

    for entity in alerts_feed.entities:
        alert = entity.alert
        if alert is None:
            continue

        if not any(tracked in route_id for route_id in alert.route_ids for tracked in tracked_routes):
            continue

        if alert.header_translations:
            message = alert.header_translations[0]
            logger.debug(f"Active alert {entity.entity_id}: {message[:50]}")
            return AlertState(active=bool(message), message=message)

        # First matching alert has no header text
        return AlertState()

    return AlertState()
