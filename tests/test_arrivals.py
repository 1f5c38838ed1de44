"""Tests for arrival extraction and ranking."""

import unittest
from dataclasses import replace
import sys
from pathlib import Path

# Add src to path so we can import ctrainboard
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from ctrainboard.arrivals import extract_arrivals, is_tracked_route, route_color
from ctrainboard.config import BoardConfig
from ctrainboard.errors import EmptyFeedError
from ctrainboard.models import Feed, FeedEntity, FeedHeader, ServiceAlert, StopTimeUpdate, TripUpdate

REF = 1_700_000_000
WEST_STOP = "6822"
EAST_STOP = "6831"


def trip_entity(trip_id, route_id, *stops, entity_id=None):
    """Build a trip-update entity from (stop_id, arrival_time) pairs."""
    updates = tuple(StopTimeUpdate(stop_id=stop_id, arrival_time=eta) for stop_id, eta in stops)
    return FeedEntity(
        entity_id=entity_id or trip_id,
        trip_update=TripUpdate(trip_id=trip_id, route_id=route_id, stop_time_updates=updates),
    )


def make_feed(*entities):
    return Feed(header=FeedHeader(timestamp=REF), entities=tuple(entities))


class TestExtractArrivals(unittest.TestCase):
    """Test the trip-update filter pipeline."""

    def setUp(self):
        self.config = BoardConfig()

    def test_westbound_and_eastbound_arrivals(self):
        """Trains at each tracked stop land in the matching direction."""
        feed = make_feed(
            trip_entity("T1", "201", (WEST_STOP, REF + 300)),
            trip_entity("T2", "202", (EAST_STOP, REF + 600)),
        )
        board = extract_arrivals(feed, REF, self.config)

        self.assertEqual(len(board.west), 1)
        self.assertEqual(len(board.east), 1)

        west = board.west[0]
        self.assertEqual(west.trip_id, "T1")
        self.assertEqual(west.route_color, "red")
        self.assertEqual(west.direction, "west")
        self.assertEqual(west.destination, "Tuscany")
        self.assertEqual(west.minutes_until_arrival, 5)
        self.assertEqual(west.boarding_status, "On Time")

        east = board.east[0]
        self.assertEqual(east.route_color, "blue")
        self.assertEqual(east.destination, "Saddletowne")
        self.assertEqual(east.minutes_until_arrival, 10)

    def test_duplicate_trip_emits_one_arrival(self):
        """Ghost train entities for the same trip are dropped."""
        feed = make_feed(
            trip_entity("T1", "201", (WEST_STOP, REF + 300), entity_id="a"),
            trip_entity("T1", "201", (WEST_STOP, REF + 360), entity_id="b"),
        )
        board = extract_arrivals(feed, REF, self.config)

        self.assertEqual(len(board.west), 1)
        self.assertEqual(board.west[0].minutes_until_arrival, 5)

    def test_loop_trip_counts_first_stop_only(self):
        """A trip visiting the westbound stop twice gives one arrival for the first visit."""
        feed = make_feed(
            trip_entity(
                "T1",
                "201",
                (WEST_STOP, REF + 120),
                ("9999", REF + 300),
                (WEST_STOP, REF + 900),
            )
        )
        board = extract_arrivals(feed, REF, self.config)

        self.assertEqual(len(board.west), 1)
        self.assertEqual(board.west[0].minutes_until_arrival, 2)

    def test_trip_without_tracked_stop_is_not_deduplicated(self):
        """A trip that produced nothing gets another chance in a later entity."""
        feed = make_feed(
            trip_entity("T1", "201", ("9999", REF + 300), entity_id="a"),
            trip_entity("T1", "201", (EAST_STOP, REF + 420), entity_id="b"),
        )
        board = extract_arrivals(feed, REF, self.config)

        self.assertEqual(len(board.east), 1)
        self.assertEqual(board.east[0].minutes_until_arrival, 7)

    def test_grace_window(self):
        """Departures just inside the grace window show as now; older ones are dropped."""
        config = replace(self.config, departure_grace_seconds=90)

        board = extract_arrivals(make_feed(trip_entity("T1", "201", (WEST_STOP, REF - 91))), REF, config)
        self.assertEqual(board.west, [])

        board = extract_arrivals(make_feed(trip_entity("T1", "201", (WEST_STOP, REF - 89))), REF, config)
        self.assertEqual(len(board.west), 1)
        self.assertEqual(board.west[0].minutes_until_arrival, 0)
        self.assertEqual(board.west[0].boarding_status, "Boarding")

    def test_departed_stop_skipped_for_later_stop(self):
        """A stop outside the window is skipped and scanning continues for the same trip."""
        feed = make_feed(trip_entity("T1", "201", (WEST_STOP, REF - 600), (EAST_STOP, REF + 240)))
        board = extract_arrivals(feed, REF, self.config)

        self.assertEqual(board.west, [])
        self.assertEqual(len(board.east), 1)
        self.assertEqual(board.east[0].minutes_until_arrival, 4)

    def test_lookahead_window(self):
        """Arrivals past the look-ahead window are excluded."""
        feed = make_feed(
            trip_entity("T1", "201", (WEST_STOP, REF + 60 * 60)),
            trip_entity("T2", "201", (WEST_STOP, REF + 61 * 60)),
        )
        board = extract_arrivals(feed, REF, self.config)

        self.assertEqual([a.trip_id for a in board.west], ["T1"])
        self.assertEqual(board.west[0].minutes_until_arrival, 60)

    def test_ranking_and_cap(self):
        """Arrivals are sorted ascending and truncated to the display cap."""
        feed = make_feed(
            trip_entity("T12", "201", (WEST_STOP, REF + 12 * 60)),
            trip_entity("T3", "202", (WEST_STOP, REF + 3 * 60)),
            trip_entity("T7", "201", (WEST_STOP, REF + 7 * 60)),
        )

        board = extract_arrivals(feed, REF, self.config)
        self.assertEqual([a.minutes_until_arrival for a in board.west], [3, 7, 12])

        board = extract_arrivals(feed, REF, replace(self.config, display_cap=2))
        self.assertEqual([a.minutes_until_arrival for a in board.west], [3, 7])

    def test_ties_keep_feed_order(self):
        """Sorting is stable for equal minutes."""
        feed = make_feed(
            trip_entity("A", "201", (WEST_STOP, REF + 300)),
            trip_entity("B", "202", (WEST_STOP, REF + 300)),
        )
        board = extract_arrivals(feed, REF, self.config)
        self.assertEqual([a.trip_id for a in board.west], ["A", "B"])

    def test_untracked_route_excluded(self):
        """A route matching neither tracked id is dropped, not defaulted."""
        feed = make_feed(
            trip_entity("T1", "999", (WEST_STOP, REF + 300)),
            trip_entity("T2", "202-B", (WEST_STOP, REF + 360)),
        )
        board = extract_arrivals(feed, REF, self.config)

        self.assertEqual(len(board.west), 1)
        self.assertEqual(board.west[0].trip_id, "T2")
        self.assertEqual(board.west[0].route_color, "blue")
        self.assertEqual(board.west[0].destination, "69 Street")

    def test_stop_without_times_is_skipped(self):
        """Stop-time updates with neither arrival nor departure are ignored."""
        feed = make_feed(
            FeedEntity(
                entity_id="1",
                trip_update=TripUpdate(
                    trip_id="T1",
                    route_id="201",
                    stop_time_updates=(
                        StopTimeUpdate(stop_id=WEST_STOP),
                        StopTimeUpdate(stop_id=EAST_STOP, departure_time=REF + 180),
                    ),
                ),
            )
        )
        board = extract_arrivals(feed, REF, self.config)

        self.assertEqual(board.west, [])
        self.assertEqual(board.east[0].minutes_until_arrival, 3)

    def test_non_trip_entities_skipped(self):
        """Alert entities and trips without stop updates produce nothing."""
        feed = make_feed(
            FeedEntity(entity_id="alert", alert=ServiceAlert(route_ids=("201",))),
            FeedEntity(entity_id="bare", trip_update=TripUpdate(trip_id="T1", route_id="201")),
        )
        board = extract_arrivals(feed, REF, self.config)
        self.assertTrue(board.is_empty())

    def test_empty_feed_raises(self):
        """A feed with no entities is reported separately from an empty board."""
        with self.assertRaises(EmptyFeedError):
            extract_arrivals(Feed(header=FeedHeader(timestamp=REF)), REF, self.config)

        with self.assertRaises(EmptyFeedError):
            extract_arrivals(None, REF, self.config)

    def test_arrival_to_dict(self):
        """Rows handed to the renderer carry the derived status."""
        feed = make_feed(trip_entity("T1", "201", (EAST_STOP, REF + 60)))
        row = extract_arrivals(feed, REF, self.config).east[0].to_dict()

        self.assertEqual(
            row,
            {
                "trip_id": "T1",
                "line": "red",
                "direction": "east",
                "destination": "Somerset",
                "minutes": 1,
                "status": "Boarding",
            },
        )


class TestRouteMatching(unittest.TestCase):
    """Test route filtering and color mapping."""

    def setUp(self):
        self.config = BoardConfig()

    def test_substring_match(self):
        self.assertTrue(is_tracked_route("201", self.config))
        self.assertTrue(is_tracked_route("X202-B", self.config))
        self.assertFalse(is_tracked_route("301", self.config))

    def test_first_match_wins(self):
        """The red line wins when both ids appear in the route id."""
        self.assertEqual(route_color("201-202", self.config), "red")
        self.assertEqual(route_color("202", self.config), "blue")

    def test_fallback_color(self):
        self.assertEqual(route_color("unknown", self.config), "blue")


if __name__ == "__main__":
    unittest.main()
