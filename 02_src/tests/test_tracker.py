"""Tests for Tracker."""

from datetime import datetime, timezone


class TestTrackerTrack:
    """Tests for Tracker.track() method."""

    async def test_track_creates_event(self, tracker, storage):
        """Test that track() creates a TraceEvent."""
        await tracker.track(
            event_type="events_ingested",
            actor="ingress",
            data={"published": 2},
        )

        events = await storage.get_trace_events()
        assert len(events) == 1
        assert events[0].event_type == "events_ingested"
        assert events[0].actor == "ingress"
        assert events[0].data == {"published": 2}

    async def test_track_generates_id_and_timestamp(self, tracker, storage):
        before = datetime.now(timezone.utc)
        await tracker.track(event_type="test_event", actor="test_actor", data={})
        after = datetime.now(timezone.utc)

        events = await storage.get_trace_events()
        assert events[0].id
        assert before <= events[0].timestamp <= after

    async def test_track_multiple_events(self, tracker, storage):
        await tracker.track(event_type="event1", actor="actor1", data={})
        await tracker.track(event_type="event2", actor="actor2", data={})
        await tracker.track(event_type="event3", actor="actor3", data={})

        events = await storage.get_trace_events()
        assert len(events) == 3

    async def test_track_uses_injected_clock(self, storage):
        from lobby_events.tracker import Tracker

        fixed = datetime(2026, 3, 1, 9, 30, tzinfo=timezone.utc)
        await Tracker(storage, clock=lambda: fixed).track("events_ingested", "ingress", {})

        events = await storage.get_trace_events()
        assert events[0].timestamp == fixed
