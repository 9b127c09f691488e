"""Provider adapters: normalize upstream streams into StreamEvents."""
from dataclasses import dataclass, field
from enum import Enum
import logging
import time
from typing import Any, Awaitable, Callable

from anthropic import AsyncAnthropic
from openai import AsyncOpenAI

from prompts.identity import DEFAULT_RESPONSE_MESSAGE
from services.errors import (
    AssistantError,
    ProviderNotConfiguredError,
    UnsupportedProviderError,
    public_error_message,
)
from services.llm import AIProviders
from services.models import Citation
from services.streaming import EventStream

logger = logging.getLogger(__name__)


class ProviderName(str, Enum):
    """Supported streaming providers."""
    openai = "openai"
    fireworks = "fireworks"
    anthropic = "anthropic"


@dataclass
class AssistantRequest:
    """Everything a provider needs for one streamed answer."""
    provider_name: str
    model: str
    system_prompt: str
    messages: list[dict]
    temperature: float
    citations: list[Citation] = field(default_factory=list)


StreamHandler = Callable[[EventStream, AssistantRequest], Awaitable[None]]


class ProviderAdapter:
    """
    Streams an assistant answer from any supported provider into an EventStream.

    Delta-token providers (openai, fireworks) and the event-based provider
    (anthropic) produce the same sequence: one cumulative `message` per
    upstream unit, then `done` and close. Upstream failures produce `error`
    and close. The stream is always closed when this returns.
    """

    def __init__(
        self,
        providers: AIProviders,
        max_tokens: int = 4096,
        logging_enabled: bool = True,
        error_message: str = DEFAULT_RESPONSE_MESSAGE,
    ):
        self.providers = providers
        self.max_tokens = max_tokens
        self.logging_enabled = logging_enabled
        self.error_message = error_message

    def _log(self, message: str) -> None:
        if self.logging_enabled:
            logger.info(message)

    def resolve(self, provider_name: str) -> StreamHandler:
        """
        Pick the stream handler for a provider name.

        Raises before any network call for unknown or unconfigured providers.
        """
        try:
            name = ProviderName(provider_name)
        except ValueError:
            raise UnsupportedProviderError(provider_name) from None

        if name is ProviderName.anthropic:
            client = self.providers.anthropic
        elif name is ProviderName.fireworks:
            client = self.providers.fireworks
        else:
            client = self.providers.openai

        if client is None:
            raise ProviderNotConfiguredError(name.value)

        if name is ProviderName.anthropic:
            return lambda stream, request: self._stream_anthropic(client, stream, request)
        return lambda stream, request: self._stream_openai(client, stream, request)

    async def queue_assistant_response(
        self,
        stream: EventStream,
        request: AssistantRequest,
    ) -> None:
        """Stream one answer; rejected providers surface as an error event."""
        try:
            handler = self.resolve(request.provider_name)
        except AssistantError as e:
            logger.error(f"Rejected provider {request.provider_name!r}: {e}")
            await stream.error(public_error_message(e, self.error_message))
            await stream.close()
            return

        await handler(stream, request)

    async def _stream_openai(
        self,
        client: AsyncOpenAI,
        stream: EventStream,
        request: AssistantRequest,
    ) -> None:
        """Delta-token stream: accumulate fragments, emit the full buffer each time."""
        self._log(
            f"Streaming {request.provider_name} response (model={request.model}, "
            f"temperature={request.temperature}, messages={len(request.messages)})"
        )
        started = time.monotonic()
        buffer = ""

        try:
            response = await client.chat.completions.create(
                model=request.model,
                messages=[
                    {"role": "system", "content": request.system_prompt},
                    *request.messages,
                ],
                stream=True,
                temperature=request.temperature,
                max_tokens=self.max_tokens,
            )

            async for chunk in response:
                delta = chunk.choices[0].delta.content if chunk.choices else None
                buffer += delta or ""
                await stream.message(buffer, request.citations)

            self._log(
                f"Done streaming {request.provider_name} response in "
                f"{time.monotonic() - started:.2f}s"
            )
            await stream.done(buffer)
        except Exception as e:
            logger.error(f"Error in {request.provider_name} stream: {e!r}")
            await stream.error(public_error_message(e, self.error_message))

        await stream.close()

    async def _stream_anthropic(
        self,
        client: AsyncAnthropic,
        stream: EventStream,
        request: AssistantRequest,
    ) -> None:
        """Event-based stream: named upstream events drive the bridge."""
        self._log(
            f"Streaming anthropic response (model={request.model}, "
            f"temperature={request.temperature}, messages={len(request.messages)})"
        )
        bridge = _EventBridge(stream, request.citations, self.error_message)

        try:
            async with client.messages.stream(
                messages=to_anthropic_messages(request.messages),
                model=request.model,
                system=request.system_prompt,
                max_tokens=self.max_tokens,
                temperature=request.temperature,
            ) as upstream:
                async for event in upstream:
                    await bridge.dispatch(event)
        except Exception as e:
            logger.error(f"Error in anthropic stream: {e!r}")
            await bridge.on_error(e)
            return

        await bridge.on_end()
        self._log(f"Done streaming anthropic response in {bridge.elapsed():.2f}s")


class _EventBridge:
    """
    Translates event-style callbacks (text, error, end) into stream writes.

    The first of error/end finishes the bridge and closes the stream;
    anything after that is ignored.
    """

    def __init__(self, stream: EventStream, citations: list[Citation], error_message: str):
        self.stream = stream
        self.citations = citations
        self.error_message = error_message
        self.buffer = ""
        self.finished = False
        self.started = time.monotonic()
        self.handlers = {"text": self.on_text}

    def elapsed(self) -> float:
        return time.monotonic() - self.started

    async def dispatch(self, event: Any) -> None:
        handler = self.handlers.get(getattr(event, "type", None))
        if handler is not None:
            await handler(event)

    async def on_text(self, event: Any) -> None:
        if self.finished:
            return
        self.buffer += event.text or ""
        await self.stream.message(self.buffer, self.citations)

    async def on_error(self, error: BaseException) -> None:
        if self.finished:
            return
        self.finished = True
        await self.stream.error(public_error_message(error, self.error_message))
        await self.stream.close()

    async def on_end(self) -> None:
        if self.finished:
            return
        self.finished = True
        await self.stream.done(self.buffer)
        await self.stream.close()


def to_anthropic_messages(messages: list[dict]) -> list[dict]:
    """Anthropic only accepts user/assistant turns; system entries are dropped."""
    return [
        {
            "role": "user" if msg["role"] == "user" else "assistant",
            "content": msg["content"],
        }
        for msg in messages
        if msg["role"] != "system"
    ]
