"""
Test doubles for the OpenAI, Anthropic and Pinecone clients.

Each fake records its calls so tests can assert on what reached the
"network".
"""
import asyncio
from types import SimpleNamespace

from services.streaming import EventStream


def delta_chunk(content):
    return SimpleNamespace(choices=[SimpleNamespace(delta=SimpleNamespace(content=content))])


class FakeDeltaStream:
    """Async iterator over OpenAI-style streaming chunks."""

    def __init__(self, fragments, fail_after=None):
        self._fragments = list(fragments)
        self._fail_after = fail_after

    def __aiter__(self):
        return self._iterate()

    async def _iterate(self):
        for i, fragment in enumerate(self._fragments):
            if self._fail_after is not None and i == self._fail_after:
                raise RuntimeError("upstream connection reset")
            yield delta_chunk(fragment)
        if self._fail_after is not None and self._fail_after >= len(self._fragments):
            raise RuntimeError("upstream connection reset")


class FakeCompletions:
    def __init__(self, owner):
        self._owner = owner

    async def create(self, **kwargs):
        self._owner.calls.append(("chat", kwargs))
        if kwargs.get("stream"):
            if self._owner.stream_error is not None:
                raise self._owner.stream_error
            return FakeDeltaStream(self._owner.fragments, self._owner.fail_after)
        if self._owner.completion_error is not None:
            raise self._owner.completion_error
        message = SimpleNamespace(content=self._owner.completion)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])

    async def parse(self, **kwargs):
        self._owner.calls.append(("parse", kwargs))
        if self._owner.parse_error is not None:
            raise self._owner.parse_error
        message = SimpleNamespace(parsed=self._owner.parsed)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


class FakeEmbeddings:
    def __init__(self, owner):
        self._owner = owner

    async def create(self, **kwargs):
        self._owner.calls.append(("embed", kwargs))
        if self._owner.embedding_error is not None:
            raise self._owner.embedding_error
        return SimpleNamespace(data=[SimpleNamespace(embedding=self._owner.embedding)])


class FakeOpenAI:
    """Mock AsyncOpenAI client."""

    def __init__(
        self,
        fragments=("Hi", " there"),
        completion="A balk is an illegal motion by the pitcher.",
        parsed=None,
        embedding=None,
    ):
        self.calls = []
        self.fragments = list(fragments)
        self.fail_after = None
        self.stream_error = None
        self.completion = completion
        self.completion_error = None
        self.parsed = parsed
        self.parse_error = None
        self.embedding = embedding or [0.1] * 8
        self.embedding_error = None
        self.chat = SimpleNamespace(completions=FakeCompletions(self))
        self.embeddings = FakeEmbeddings(self)

    def calls_of(self, kind):
        return [kwargs for name, kwargs in self.calls if name == kind]


class FakeAnthropicStream:
    """Async context manager yielding Anthropic-style stream events."""

    def __init__(self, events, error=None):
        self._events = events
        self._error = error

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        return False

    def __aiter__(self):
        return self._iterate()

    async def _iterate(self):
        for event in self._events:
            yield event
        if self._error is not None:
            raise self._error


class FakeAnthropic:
    """Mock AsyncAnthropic client."""

    def __init__(self, texts=("Hi", " there"), error=None):
        self.calls = []
        self.texts = list(texts)
        self.error = error
        self.messages = SimpleNamespace(stream=self._stream)

    def _stream(self, **kwargs):
        self.calls.append(kwargs)
        events = [SimpleNamespace(type="message_start")]
        for text in self.texts:
            events.append(SimpleNamespace(type="content_block_delta"))
            events.append(SimpleNamespace(type="text", text=text))
        events.append(SimpleNamespace(type="message_stop"))
        if self.error is not None:
            events = events[:-1]
        return FakeAnthropicStream(events, self.error)


class FakeIndex:
    """Mock Pinecone index."""

    def __init__(self, matches=None, error=None):
        self.matches = matches or []
        self.error = error
        self.queries = []

    def query(self, **kwargs):
        self.queries.append(kwargs)
        if self.error is not None:
            raise self.error
        return SimpleNamespace(
            matches=[
                SimpleNamespace(id=m["id"], score=m["score"], metadata=m["metadata"])
                for m in self.matches
            ]
        )


def match(chunk_id, document, score, text="", title=""):
    return {
        "id": chunk_id,
        "score": score,
        "metadata": {
            "text": text or f"text of {chunk_id}",
            "document_id": document,
            "source_url": f"https://rules.example.com/{document}",
            "title": title or document,
        },
    }


async def collect(stream: EventStream, producer, timeout=5):
    """Run a producer against the stream and return every event it emitted."""
    task = asyncio.ensure_future(producer)
    events = [event async for event in stream.events(timeout=timeout)]
    await task
    return events


def types_of(events):
    return [event.type for event in events]
