"""Event channels for publish progress.

Every publish call is given its own channel, so concurrent calls never
share listeners. A channel only needs an async ``emit`` method; three are
provided:

- QueueEventChannel: hands events to a streaming consumer via asyncio.Queue
- EventRecorder: keeps every event in a list (tests, batch callers)
- LoggingEventChannel: writes events to the log (CLI)
"""

import asyncio
import logging
from typing import AsyncIterator, Protocol

from schemas.events import CompleteEvent, ErrorEvent, ProgressEvent

logger = logging.getLogger(__name__)

Event = ProgressEvent | ErrorEvent | CompleteEvent


class EventChannel(Protocol):
    """Destination for the events of one publish call."""

    async def emit(self, event: Event) -> None: ...


class NullEventChannel:
    """Discard every event."""

    async def emit(self, event: Event) -> None:
        pass


class EventRecorder:
    """Record events in emission order."""

    def __init__(self):
        self.events: list[Event] = []

    async def emit(self, event: Event) -> None:
        self.events.append(event)

    @property
    def progress(self) -> list[int]:
        """Progress values of the recorded progress events."""
        return [e.progress for e in self.events if isinstance(e, ProgressEvent)]

    def of_type(self, event_type: str) -> list[Event]:
        return [e for e in self.events if e.type == event_type]


class QueueEventChannel:
    """Deliver events to a consumer through an asyncio.Queue.

    The publisher calls ``close()`` when the call ends; iterating over the
    channel yields events until then.

    Example:
        channel = QueueEventChannel()

        async def run():
            try:
                return await orchestrator.publish(request, channel)
            finally:
                await channel.close()

        task = asyncio.create_task(run())
        async for event in channel:
            print(event.type)
    """

    def __init__(self, maxsize: int = 0):
        self.queue: asyncio.Queue[Event | None] = asyncio.Queue(maxsize=maxsize)

    async def emit(self, event: Event) -> None:
        await self.queue.put(event)

    async def close(self) -> None:
        await self.queue.put(None)

    async def __aiter__(self) -> AsyncIterator[Event]:
        while True:
            event = await self.queue.get()
            if event is None:
                return
            yield event


class LoggingEventChannel:
    """Log each event at a level matching its type."""

    def __init__(self, log: logging.Logger | None = None):
        self.log = log or logger

    async def emit(self, event: Event) -> None:
        if isinstance(event, ProgressEvent):
            self.log.info(f"[{event.progress:3d}%] {event.phase}: {event.message}")
        elif isinstance(event, ErrorEvent):
            self.log.error(f"{event.phase} failed: {event.error}")
        else:
            self.log.info(f"Project {event.project_id} {event.result.status}")
