"""
Unit tests for the in-memory event bus.
"""
import uuid

import pytest

from core.domain.events import EventHandler
from core.infrastructure.events import InMemoryEventBus
from quotations.domain.events import RequestFormed


class RecordingHandler(EventHandler):
    def __init__(self):
        self.events = []

    async def handle(self, event):
        self.events.append(event)


class FailingHandler(EventHandler):
    async def handle(self, event):
        raise RuntimeError("handler broke")


@pytest.mark.asyncio
class TestInMemoryEventBus:
    """Tests for InMemoryEventBus."""

    async def test_publish_reaches_subscriber(self):
        bus = InMemoryEventBus()
        handler = RecordingHandler()
        bus.subscribe(RequestFormed, handler)

        event = RequestFormed(request_id=uuid.uuid4(), creator_id=1, line_count=2)
        await bus.publish(event)

        assert handler.events == [event]
        assert event.to_dict()["payload"] == {"creator_id": 1, "line_count": 2}

    async def test_failing_handler_does_not_reach_publisher(self):
        """Test a broken handler neither raises nor blocks the others."""
        bus = InMemoryEventBus()
        recorder = RecordingHandler()
        bus.subscribe(RequestFormed, FailingHandler())
        bus.subscribe(RequestFormed, recorder)

        await bus.publish(RequestFormed(request_id=uuid.uuid4(), creator_id=1, line_count=1))

        assert len(recorder.events) == 1

    async def test_duplicate_subscription_ignored(self):
        bus = InMemoryEventBus()
        handler = RecordingHandler()
        bus.subscribe(RequestFormed, handler)
        bus.subscribe(RequestFormed, RecordingHandler())

        await bus.publish(RequestFormed(request_id=uuid.uuid4(), creator_id=1, line_count=1))

        assert len(handler.events) == 1
