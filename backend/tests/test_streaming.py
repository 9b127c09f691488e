"""Unit tests for the per-request event stream."""
import asyncio
import json

import pytest

from services.models import Citation, Message, Role, StreamedMessage
from services.streaming import TIMEOUT_MESSAGE, EventStream, encode_event, stream_ndjson


@pytest.mark.asyncio
async def test_events_are_delivered_in_order():
    stream = EventStream()

    async def produce():
        await stream.indicator("Coming up with an answer", "thinking")
        await stream.message("Hi", [])
        await stream.done("Hi")
        await stream.close()

    task = asyncio.ensure_future(produce())
    events = [event async for event in stream.events()]
    await task

    assert [e.type for e in events] == ["loading", "message", "done"]
    assert events[0].indicator.icon == "thinking"
    assert events[2].final_message == "Hi"


@pytest.mark.asyncio
async def test_write_after_close_is_an_assertion():
    stream = EventStream()
    await stream.close()

    with pytest.raises(AssertionError):
        await stream.message("late", [])


@pytest.mark.asyncio
async def test_close_twice_is_noop():
    stream = EventStream()
    await stream.close()
    await stream.close()

    assert stream.closed
    assert [event async for event in stream.events()] == []


@pytest.mark.asyncio
async def test_bounded_buffer_blocks_writer_until_read():
    stream = EventStream(maxsize=1)
    await stream.message("a", [])

    writer = asyncio.ensure_future(stream.message("ab", []))
    await asyncio.sleep(0)
    assert not writer.done()

    reader = stream.events()
    first = await reader.__anext__()
    await asyncio.wait_for(writer, timeout=1)

    assert first.message.content == "a"


def test_encode_event_is_one_json_line():
    event = StreamedMessage(
        message=Message(
            role=Role.assistant,
            content="Hi",
            citations=[Citation(number=1, source_url="https://x", source_description="X")],
        )
    )
    line = encode_event(event)

    assert line.endswith("\n")
    assert line.count("\n") == 1
    record = json.loads(line)
    assert record["type"] == "message"
    assert record["message"]["role"] == "assistant"
    assert record["message"]["content"] == "Hi"
    assert record["message"]["citations"][0]["number"] == 1


@pytest.mark.asyncio
async def test_error_event_uses_error_icon():
    stream = EventStream()
    await stream.error("Something went wrong")
    await stream.close()

    events = [event async for event in stream.events()]
    assert events[0].type == "error"
    assert events[0].indicator.icon == "error"
    assert events[0].indicator.status == "Something went wrong"


@pytest.mark.asyncio
async def test_timeout_yields_final_error_and_cancels_producer():
    stream = EventStream()
    started = asyncio.Event()

    async def slow_producer():
        await stream.indicator("Coming up with an answer", "thinking")
        started.set()
        await asyncio.sleep(30)

    producer = slow_producer()
    lines = [line async for line in stream_ndjson(stream, producer, timeout=0.1)]

    records = [json.loads(line) for line in lines]
    assert [r["type"] for r in records] == ["loading", "error"]
    assert records[-1]["indicator"]["status"] == TIMEOUT_MESSAGE
    assert started.is_set()


@pytest.mark.asyncio
async def test_consumer_stopping_early_cancels_producer():
    stream = EventStream()
    cancelled = asyncio.Event()

    async def producer():
        await stream.indicator("Coming up with an answer", "thinking")
        try:
            await asyncio.sleep(30)
        except asyncio.CancelledError:
            cancelled.set()
            raise

    lines = stream_ndjson(stream, producer())
    first = await lines.__anext__()
    await lines.aclose()
    await asyncio.sleep(0.01)

    assert json.loads(first)["type"] == "loading"
    assert cancelled.is_set()
