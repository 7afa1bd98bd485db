"""Pytest configuration and fixtures."""

import sys
from pathlib import Path
from unittest.mock import AsyncMock, Mock

import pytest
import pytest_asyncio

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from lobby_events.client.transport import DeliveryReceipt  # noqa: E402
from lobby_events.errors import BrokerPublishError, DeliveryError  # noqa: E402


class FakeClock:
    """Millisecond clock advanced by hand."""

    def __init__(self, start: int = 1_700_000_000_000):
        self.now = start

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms


class ManualTimer:
    def __init__(self, interval: float, callback):
        self.interval = interval
        self.callback = callback
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualScheduler:
    """Collects timers and spawned coroutines; tests drive them explicitly."""

    def __init__(self):
        self.timers: list[ManualTimer] = []
        self.pending: list = []

    def call_every(self, interval, callback):
        timer = ManualTimer(interval, callback)
        self.timers.append(timer)
        return timer

    def spawn(self, coro) -> None:
        self.pending.append(coro)

    @property
    def active_timers(self) -> list[ManualTimer]:
        return [t for t in self.timers if not t.cancelled]

    def tick(self) -> None:
        """Fire every active periodic timer once."""
        for timer in self.active_timers:
            timer.callback()

    async def run_pending(self) -> None:
        """Await spawned coroutines in spawn order."""
        while self.pending:
            await self.pending.pop(0)

    def close(self) -> None:
        for coro in self.pending:
            coro.close()
        self.pending.clear()


class FakeTransport:
    """Records delivered batches; fails while .fail is set."""

    def __init__(self):
        self.batches: list[list] = []
        self.calls = 0
        self.fail = False

    async def send(self, events):
        self.calls += 1
        if self.fail:
            raise DeliveryError("ingress unavailable", status_code=503)
        self.batches.append(list(events))
        return DeliveryReceipt(published=len(events))

    @property
    def delivered(self) -> list:
        return [e for batch in self.batches for e in batch]


class FakeBroker:
    """In-memory broker adapter double."""

    def __init__(self, ready: bool = True):
        self.is_ready = ready
        self.published: list[dict] = []
        self.fail = False
        self.started = False
        self.stopped = False

    async def start(self) -> None:
        self.started = True

    async def stop(self) -> None:
        self.stopped = True

    async def publish(self, events):
        if self.fail:
            raise BrokerPublishError("broker down")
        self.published.extend(events)
        return len(events)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def scheduler():
    sched = ManualScheduler()
    yield sched
    sched.close()


@pytest.fixture
def transport():
    return FakeTransport()


@pytest.fixture
def broker():
    return FakeBroker()


@pytest.fixture
def session_context():
    from lobby_events.session import SessionContext

    return SessionContext(session_id="session_test")


@pytest.fixture
def emitter(session_context, clock):
    from lobby_events.client import EventEmitter

    return EventEmitter(session_context, clock=clock)


@pytest.fixture
def publisher(transport, scheduler, clock):
    """Publisher with upstream enabled and the timer started."""
    from lobby_events.client import ClientPublisher

    pub = ClientPublisher(
        transport=transport,
        scheduler=scheduler,
        clock=clock,
        upstream_enabled=True,
    )
    pub.start()
    return pub


@pytest.fixture
def make_envelope(clock):
    """Factory for envelopes with sensible defaults."""
    import itertools

    from lobby_events.models import Envelope

    counter = itertools.count()

    def _make(
        type="sim.agent.state.changed",
        payload=None,
        source=None,
        session_id="session_test",
    ):
        n = next(counter)
        if source is None:
            source = type.split(".", 1)[0] if type.split(".", 1)[0] in ("ui", "sim") else "ui"
        return Envelope(
            event_id=f"evt-{n}",
            timestamp=clock(),
            session_id=session_id,
            source=source,
            type=type,
            payload={"seq": n} if payload is None else payload,
        )

    return _make


@pytest_asyncio.fixture
async def storage():
    """Create in-memory storage for testing."""
    from lobby_events.storage import Storage

    st = Storage(":memory:")
    await st.init()
    yield st
    await st.close()


@pytest.fixture
def tracker(storage):
    """Create Tracker with storage."""
    from lobby_events.tracker import Tracker

    return Tracker(storage)


@pytest.fixture
def mock_llm():
    """Create mock LLM provider."""
    llm = Mock()
    llm.generate = AsyncMock(return_value="Welcome to the Grand Atrium.")
    return llm


@pytest_asyncio.fixture
async def application(broker, mock_llm):
    """Started Application with in-memory storage and a fake broker."""
    from lobby_events.app import Application

    app = Application(db_path=":memory:", broker=broker, llm=mock_llm)
    await app.start()
    yield app
    await app.stop()


@pytest.fixture
def api(application):
    """FastAPI app bound to the started application."""
    from lobby_events.api import create_fastapi_app

    return create_fastapi_app(application)


@pytest_asyncio.fixture
async def http_client(api):
    """httpx client talking to the FastAPI app in-process."""
    import httpx

    async with httpx.AsyncClient(
        transport=httpx.ASGITransport(app=api), base_url="http://testserver"
    ) as client:
        yield client
