"""Exceptions raised by the CTrain board pipeline."""


class CTrainBoardError(Exception):
    """Base class for all board errors."""


class TransportError(CTrainBoardError):
    """Every feed endpoint failed, timed out or returned an unusable response."""


class DecodeError(CTrainBoardError):
    """A feed payload could not be decoded into a GTFS-Realtime message."""


class EmptyFeedError(CTrainBoardError):
    """The feed decoded cleanly but carried no entities."""
