"""Reconcile feed-relative times against a trusted reference clock."""

import logging
import math
import time
from typing import Callable, NamedTuple, Optional, Union

from .models import Feed

logger = logging.getLogger(__name__)


class LowHigh(NamedTuple):
    """64-bit integer split into unsigned 32-bit halves."""
    low: int
    high: int


# Plain number, decimal string (JSON rendering of int64) or split 64-bit value
EpochValue = Union[int, float, str, LowHigh]


def to_epoch_seconds(value: EpochValue) -> int:
    """
    Normalize a feed time value to integer epoch seconds.

    Args:
        value: One of the EpochValue variants.

    Returns:
        Epoch seconds as int.

    Raises:
        ValueError: If the value is not a recognized variant.
    """
    if isinstance(value, LowHigh):
        return (value.high << 32) | (value.low & 0xFFFFFFFF)
    if isinstance(value, bool):
        raise ValueError(f"Not a timestamp: {value!r}")
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value)
    if isinstance(value, str):
        return int(value.strip())
    raise ValueError(f"Not a timestamp: {value!r}")


def resolve_reference_time(feed: Feed, clock: Callable[[], float] = time.time) -> int:
    """
    Pick the clock arrival times are compared against.

    The feed header timestamp is the publisher's clock and is preferred so that
    local clock skew does not shift predictions. The local clock is used when
    the header carries no positive timestamp.
    """
    if feed.header.timestamp > 0:
        return feed.header.timestamp

    logger.debug("Feed header has no timestamp, using local clock")
    return int(clock())


def minutes_until(eta: int, reference: int, grace_seconds: int) -> Optional[int]:
    """
    Whole minutes from ``reference`` to ``eta``.

    Returns 0 for a departure up to ``grace_seconds`` in the past and None
    (exclude) for one further in the past. Rounds half away from zero.
    """
    diff = eta - reference
    if diff < -grace_seconds:
        return None
    if diff <= 0:
        return 0
    return int(math.floor(diff / 60 + 0.5))
