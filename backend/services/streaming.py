"""Ordered, backpressured, closeable event stream for one request."""
import asyncio
import logging
import time
from typing import AsyncIterator, Awaitable, Optional

from services.models import (
    Citation,
    Indicator,
    IndicatorIcon,
    Message,
    Role,
    StreamedDone,
    StreamedError,
    StreamedLoading,
    StreamedMessage,
    StreamEvent,
)

logger = logging.getLogger(__name__)

TIMEOUT_MESSAGE = "This is taking longer than expected. Please try again."

_CLOSE = object()


def encode_event(event: StreamEvent) -> str:
    """Serialize one event as a newline-delimited JSON record."""
    return event.model_dump_json() + "\n"


class EventStream:
    """
    Single-producer, single-consumer channel of StreamEvents.

    Writes are delivered in order and block while the buffer is full.
    Writing after close() is a programming error and raises AssertionError.
    """

    def __init__(self, maxsize: int = 64):
        self._queue: asyncio.Queue = asyncio.Queue(maxsize=maxsize)
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    async def send(self, event: StreamEvent) -> None:
        if self._closed:
            raise AssertionError(f"{event.type} event written after stream close")
        await self._queue.put(event)

    async def indicator(self, status: str, icon: IndicatorIcon) -> None:
        await self.send(StreamedLoading(indicator=Indicator(status=status, icon=icon)))

    async def message(self, content: str, citations: list[Citation]) -> None:
        await self.send(
            StreamedMessage(
                message=Message(role=Role.assistant, content=content, citations=citations)
            )
        )

    async def done(self, final_message: str) -> None:
        await self.send(StreamedDone(final_message=final_message))

    async def error(self, message: str) -> None:
        await self.send(StreamedError(indicator=Indicator(status=message, icon="error")))

    async def close(self) -> None:
        """Terminate the stream. Closing twice is a no-op."""
        if self._closed:
            return
        self._closed = True
        await self._queue.put(_CLOSE)

    async def events(self, timeout: Optional[float] = None) -> AsyncIterator[StreamEvent]:
        """
        Yield events until the stream is closed.

        With a timeout, a final error event is yielded when the deadline
        passes before close.
        """
        deadline = time.monotonic() + timeout if timeout else None
        while True:
            if deadline is None:
                item = await self._queue.get()
            else:
                remaining = deadline - time.monotonic()
                try:
                    item = await asyncio.wait_for(self._queue.get(), max(remaining, 0))
                except asyncio.TimeoutError:
                    logger.warning(f"Stream timed out after {timeout}s")
                    yield StreamedError(indicator=Indicator(status=TIMEOUT_MESSAGE, icon="error"))
                    return
            if item is _CLOSE:
                return
            yield item


def _log_producer_failure(task: asyncio.Future) -> None:
    if not task.cancelled() and task.exception() is not None:
        logger.error(f"Stream producer failed: {task.exception()!r}")


async def stream_ndjson(
    stream: EventStream,
    producer: Awaitable[None],
    timeout: Optional[float] = None,
) -> AsyncIterator[str]:
    """
    Run the producer and relay its events as NDJSON lines.

    When the consumer stops early (client disconnect, timeout) the producer
    task is cancelled, abandoning any in-flight upstream call.
    """
    task = asyncio.ensure_future(producer)
    task.add_done_callback(_log_producer_failure)
    try:
        async for event in stream.events(timeout=timeout):
            yield encode_event(event)
    finally:
        if not task.done():
            task.cancel()
