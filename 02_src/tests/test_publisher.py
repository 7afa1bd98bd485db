"""Tests for ClientPublisher."""

import asyncio
import logging

import pytest

from lobby_events.client import AsyncioScheduler, ClientPublisher, CircuitState
from lobby_events.client.transport import DeliveryReceipt
from lobby_events.config import PublisherConfig
from lobby_events.errors import DeliveryError


def _make_publisher(transport, scheduler, clock, **config):
    pub = ClientPublisher(
        transport=transport,
        scheduler=scheduler,
        config=PublisherConfig(**config),
        clock=clock,
        upstream_enabled=True,
    )
    pub.start()
    return pub


async def _tick(scheduler):
    scheduler.tick()
    await scheduler.run_pending()


class TestPublishFiltering:
    """Tests for the publish() filter chain."""

    def test_mixed_key_payload_queued_without_raising(self, publisher, make_envelope):
        assert publisher.publish(make_envelope(payload={1: "a", "b": 2}))
        assert not publisher.publish(make_envelope(payload={"b": 2, 1: "a"}))
        assert publisher.queue_size == 1

    async def test_non_allowed_type_never_sent(self, publisher, transport, scheduler, make_envelope):
        """Test that non-allow-listed types never reach the transport."""
        for i in range(60):
            assert not publisher.publish(make_envelope(type="ui.mouse.moved", source="ui", payload={"i": i}))

        await _tick(scheduler)

        assert transport.calls == 0
        assert publisher.queue_size == 0

    def test_duplicate_within_one_second_enqueued_once(self, publisher, clock, make_envelope):
        payload = {"agentId": "a1", "state": "idle"}
        assert publisher.publish(make_envelope(payload=payload))
        clock.advance(500)
        assert not publisher.publish(make_envelope(payload=payload))

        assert publisher.queue_size == 1

    def test_duplicate_after_1100ms_enqueued_twice(self, publisher, clock, make_envelope):
        payload = {"agentId": "a1", "state": "idle"}
        publisher.publish(make_envelope(payload=payload))
        clock.advance(1100)
        publisher.publish(make_envelope(payload=payload))

        assert publisher.queue_size == 2


class TestStandbyFilter:
    """Tests for the boot/standby filter (upstream disabled)."""

    @pytest.fixture
    def standby(self, transport, scheduler, clock):
        return ClientPublisher(transport=transport, scheduler=scheduler, clock=clock)

    def test_defaults_to_standby(self, standby):
        assert not standby.upstream_enabled

    @pytest.mark.parametrize(
        "event_type",
        ["sim.agent.state.changed", "sim.room.occupancy.changed", "ui.button.clicked"],
    )
    def test_sim_source_always_dropped(self, standby, make_envelope, event_type):
        assert not standby.publish(make_envelope(type=event_type, source="sim"))
        assert standby.queue_size == 0

    def test_boot_ui_types_pass(self, standby, make_envelope):
        assert standby.publish(make_envelope(type="ui.button.clicked", source="ui"))
        assert standby.publish(make_envelope(type="ui.keyboard.pressed", source="ui"))
        assert standby.queue_size == 2

    def test_other_ui_types_dropped(self, standby, make_envelope):
        assert not standby.publish(make_envelope(type="ui.hotspot.entered", source="ui"))
        assert not standby.publish(make_envelope(type="ui.voice.transcript.final", source="ui"))

    def test_enabling_upstream_lifts_filter(self, standby, make_envelope):
        standby.set_upstream_enabled(True)
        assert standby.publish(make_envelope(type="ui.hotspot.entered", source="ui"))
        assert standby.publish(make_envelope(type="sim.agent.state.changed", source="sim"))


class TestFlushScheduling:
    """Tests for timer and high-water-mark flushes."""

    def test_start_registers_timer(self, publisher, scheduler):
        assert len(scheduler.active_timers) == 1
        assert scheduler.active_timers[0].interval == 2.0

    async def test_tick_flushes_queue(self, publisher, transport, scheduler, make_envelope):
        publisher.publish(make_envelope())
        assert scheduler.pending == []

        await _tick(scheduler)

        assert len(transport.batches) == 1
        assert publisher.queue_size == 0

    async def test_tick_with_empty_queue_does_nothing(self, publisher, transport, scheduler):
        scheduler.tick()
        assert scheduler.pending == []
        assert transport.calls == 0

    async def test_high_water_mark_flushes_immediately(self, publisher, transport, scheduler, make_envelope):
        for _ in range(49):
            publisher.publish(make_envelope())
        assert scheduler.pending == []

        publisher.publish(make_envelope())
        assert len(scheduler.pending) == 1

        await scheduler.run_pending()
        assert [len(b) for b in transport.batches] == [50]

    async def test_burst_past_high_water_mark_caps_batches(self, publisher, transport, scheduler, make_envelope):
        """Test that a synchronous burst never produces a batch above the mark."""
        for _ in range(120):
            publisher.publish(make_envelope())

        assert len(scheduler.pending) == 2
        assert publisher.queue_size == 20

        await scheduler.run_pending()
        await _tick(scheduler)

        assert [len(b) for b in transport.batches] == [50, 50, 20]
        seqs = [e.payload["seq"] for e in transport.delivered]
        assert seqs == list(range(120))

    async def test_burst_on_event_loop_caps_batches(self, transport, clock, make_envelope):
        scheduler = AsyncioScheduler()
        pub = ClientPublisher(transport=transport, scheduler=scheduler, clock=clock, upstream_enabled=True)

        for _ in range(120):
            pub.publish(make_envelope())
        await scheduler.drain()
        await pub.flush()

        assert [len(b) for b in transport.batches] == [50, 50, 20]

    async def test_one_immediate_flush_per_mark(self, publisher, transport, scheduler, make_envelope):
        for _ in range(65):
            publisher.publish(make_envelope())

        assert len(scheduler.pending) == 1
        await scheduler.run_pending()
        assert [len(b) for b in transport.batches] == [50]
        assert publisher.queue_size == 15

    async def test_batches_preserve_order(self, publisher, transport, scheduler, make_envelope):
        for _ in range(5):
            publisher.publish(make_envelope())
        await _tick(scheduler)
        for _ in range(5):
            publisher.publish(make_envelope())
        await _tick(scheduler)

        seqs = [e.payload["seq"] for e in transport.delivered]
        assert seqs == sorted(seqs)
        assert len(transport.batches) == 2

    async def test_flush_snapshots_queue(self, scheduler, clock, make_envelope):
        """Test that events published during a request start a fresh batch."""
        late = make_envelope()

        class PublishingTransport:
            def __init__(self):
                self.batches = []

            async def send(self, events):
                self.batches.append(list(events))
                if len(self.batches) == 1:
                    pub.publish(late)
                return DeliveryReceipt(len(events))

        transport = PublishingTransport()
        pub = _make_publisher(transport, scheduler, clock)
        first = make_envelope()
        pub.publish(first)

        await pub.flush()
        assert transport.batches == [[first]]
        assert pub.queued() == [late]

        await pub.flush()
        assert transport.batches[1] == [late]


class TestFailureHandling:
    """Tests for re-queueing and the circuit breaker."""

    async def test_failed_batch_requeued_at_head(self, scheduler, clock, make_envelope):
        arrived = make_envelope()

        class FlakyTransport:
            def __init__(self):
                self.calls = 0
                self.batches = []

            async def send(self, events):
                self.calls += 1
                if self.calls == 1:
                    pub.publish(arrived)
                    raise DeliveryError("boom", status_code=502)
                self.batches.append(list(events))
                return DeliveryReceipt(len(events))

        transport = FlakyTransport()
        pub = _make_publisher(transport, scheduler, clock)
        a, b = make_envelope(), make_envelope()
        pub.publish(a)
        pub.publish(b)

        await pub.flush()
        assert pub.queued() == [a, b, arrived]
        assert pub.consecutive_failures == 1

        await pub.flush()
        assert transport.batches == [[a, b, arrived]]
        assert pub.consecutive_failures == 0

    async def test_batch_lost_when_requeue_limit_reached(self, scheduler, clock, make_envelope):
        newcomers = [make_envelope(), make_envelope()]

        class CrowdedTransport:
            async def send(self, events):
                for envelope in newcomers:
                    pub.publish(envelope)
                raise DeliveryError("boom")

        pub = _make_publisher(CrowdedTransport(), scheduler, clock, requeue_limit=2)
        pub.publish(make_envelope())

        await pub.flush()

        assert pub.queued() == newcomers

    async def test_timeout_counts_as_failure(self, scheduler, clock, make_envelope):
        class SlowTransport:
            async def send(self, events):
                await asyncio.sleep(1)
                return DeliveryReceipt(len(events))

        pub = _make_publisher(SlowTransport(), scheduler, clock, request_timeout_s=0.01)
        envelope = make_envelope()
        pub.publish(envelope)

        await pub.flush()

        assert pub.consecutive_failures == 1
        assert pub.queued() == [envelope]

    async def test_circuit_opens_after_three_failures(self, publisher, transport, scheduler, make_envelope):
        """Test that a 4th publish after 3 failures makes no network call."""
        transport.fail = True
        publisher.publish(make_envelope())

        for _ in range(3):
            await _tick(scheduler)

        assert transport.calls == 3
        assert publisher.state is CircuitState.OPEN
        assert publisher.queue_size == 0
        assert scheduler.active_timers == []

        assert not publisher.publish(make_envelope())
        await _tick(scheduler)
        await publisher.flush()

        assert transport.calls == 3
        assert publisher.queue_size == 0

    async def test_reset_resumes_publishing(self, publisher, transport, scheduler, make_envelope):
        transport.fail = True
        publisher.publish(make_envelope())
        for _ in range(3):
            await _tick(scheduler)
        assert publisher.state is CircuitState.OPEN

        transport.fail = False
        publisher.reset_circuit()

        assert publisher.state is CircuitState.CLOSED
        assert publisher.consecutive_failures == 0
        assert len(scheduler.active_timers) == 1

        envelope = make_envelope()
        assert publisher.publish(envelope)
        await _tick(scheduler)
        assert transport.delivered == [envelope]

    def test_reset_when_closed_is_noop(self, publisher, scheduler):
        publisher.reset_circuit()
        assert len(scheduler.timers) == 1

    async def test_in_flight_success_closes_open_circuit(self, scheduler, clock, make_envelope):
        gate = asyncio.Event()

        class GatedTransport:
            def __init__(self):
                self.calls = 0

            async def send(self, events):
                self.calls += 1
                if self.calls == 1:
                    await gate.wait()
                    return DeliveryReceipt(len(events))
                raise DeliveryError("boom")

        transport = GatedTransport()
        pub = _make_publisher(transport, scheduler, clock, failure_threshold=1)
        pub.publish(make_envelope())
        in_flight = asyncio.create_task(pub.flush())
        while transport.calls == 0:
            await asyncio.sleep(0)

        pub.publish(make_envelope())
        await pub.flush()
        assert pub.state is CircuitState.OPEN
        assert scheduler.active_timers == []

        gate.set()
        await in_flight

        assert pub.state is CircuitState.CLOSED
        assert len(scheduler.active_timers) == 1

    async def test_only_first_failure_logged(self, scheduler, clock, transport, make_envelope, caplog):
        pub = _make_publisher(transport, scheduler, clock, failure_threshold=5)
        transport.fail = True
        pub.publish(make_envelope())

        with caplog.at_level(logging.WARNING, logger="lobby_events.client.publisher"):
            for _ in range(4):
                await pub.flush()

        failures = [r for r in caplog.records if "Failed to publish" in r.getMessage()]
        assert len(failures) == 1
        assert pub.consecutive_failures == 4

    async def test_circuit_open_logged_once(self, publisher, transport, scheduler, make_envelope, caplog):
        transport.fail = True
        publisher.publish(make_envelope())
        with caplog.at_level(logging.WARNING, logger="lobby_events.client.publisher"):
            for _ in range(3):
                await _tick(scheduler)

        opened = [r for r in caplog.records if "Circuit opened" in r.getMessage()]
        assert len(opened) == 1


class TestStop:
    """Tests for teardown."""

    async def test_stop_flushes_remaining(self, publisher, transport, scheduler, make_envelope):
        envelope = make_envelope()
        publisher.publish(envelope)

        await publisher.stop()

        assert transport.delivered == [envelope]
        assert scheduler.active_timers == []

    async def test_stop_with_open_circuit_makes_no_call(self, publisher, transport, scheduler, make_envelope):
        transport.fail = True
        publisher.publish(make_envelope())
        for _ in range(3):
            await _tick(scheduler)

        await publisher.stop()

        assert transport.calls == 3

    async def test_stop_with_empty_queue(self, publisher, transport):
        await publisher.stop()
        assert transport.calls == 0
