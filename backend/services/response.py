"""Response orchestration: strategy selection and the per-request event sequence."""
from dataclasses import dataclass
import logging
from types import MappingProxyType
from typing import Mapping, Optional

from config import Settings
from prompts.identity import DEFAULT_RESPONSE_MESSAGE
from prompts.system import (
    HOSTILE_MESSAGE_PROMPT,
    QUESTION_BACKUP_PROMPT,
    RANDOM_MESSAGE_PROMPT,
    get_question_prompt,
)
from services.errors import public_error_message
from services.models import Chat, IntentionType, Role, core_messages
from services.providers import AssistantRequest, ProviderAdapter
from services.rag import (
    RetrievalPipeline,
    build_context,
    get_citations_from_sources,
    get_sources_from_chunks,
)
from services.streaming import EventStream

logger = logging.getLogger(__name__)

ANSWER_STATUS = "Coming up with an answer"
PREPARING_STATUS = "Figuring out what your answer looks like"
SEARCHING_STATUS = "Reading through documents"


@dataclass(frozen=True)
class ResponseConfig:
    """Static parameters of one response strategy."""
    provider_name: str
    model: str
    temperature: float
    requires_history: bool
    system_prompt: str = ""  # Question prompt is built per request


def build_response_configs(settings: Settings) -> Mapping[IntentionType, ResponseConfig]:
    """Immutable intention -> strategy table; every IntentionType has an entry."""
    return MappingProxyType({
        IntentionType.random_message: ResponseConfig(
            provider_name=settings.random_response_provider,
            model=settings.random_response_model,
            temperature=settings.random_response_temperature,
            requires_history=True,
            system_prompt=RANDOM_MESSAGE_PROMPT,
        ),
        IntentionType.hostile_message: ResponseConfig(
            provider_name=settings.hostile_response_provider,
            model=settings.hostile_response_model,
            temperature=settings.hostile_response_temperature,
            requires_history=False,
            system_prompt=HOSTILE_MESSAGE_PROMPT,
        ),
        IntentionType.question: ResponseConfig(
            provider_name=settings.question_response_provider,
            model=settings.question_response_model,
            temperature=settings.question_response_temperature,
            requires_history=True,
        ),
    })


def get_response_config(
    configs: Mapping[IntentionType, ResponseConfig],
    intention: Optional[str],
) -> ResponseConfig:
    """Look up a strategy; anything unrecognized gets the random-message strategy."""
    try:
        key = IntentionType(intention)
    except ValueError:
        key = IntentionType.random_message
    return configs.get(key, configs[IntentionType.random_message])


def latest_user_turn(chat: Chat) -> list[dict]:
    """Only the most recent user message; providers reject an empty turn list."""
    for msg in reversed(chat.messages):
        if msg.role is Role.user:
            return core_messages([msg])
    return []


class ResponseOrchestrator:
    """
    Runs one response strategy into an EventStream.

    Sequence: thinking -> [searching -> documents:N -> thinking] -> streaming
    -> done|error. The bracketed part only runs for questions. A retrieval
    failure emits an advisory `error` and then answers with the backup prompt,
    so the stream still ends with `done` unless the provider itself fails.
    """

    def __init__(
        self,
        adapter: ProviderAdapter,
        retrieval: RetrievalPipeline,
        configs: Mapping[IntentionType, ResponseConfig],
        history_length: int = 7,
        logging_enabled: bool = True,
    ):
        self.adapter = adapter
        self.retrieval = retrieval
        self.configs = configs
        self.history_length = history_length
        self.logging_enabled = logging_enabled

    def _history(self, chat: Chat, requires_history: bool) -> list[dict]:
        if not requires_history:
            return latest_user_turn(chat)
        return core_messages(chat.messages[-self.history_length:])

    async def respond(self, intention: Optional[str], chat: Chat, stream: EventStream) -> None:
        """Dispatch on intention; always leaves the stream closed."""
        try:
            if intention == IntentionType.question.value:
                await self.respond_to_question(chat, stream)
            else:
                await self.respond_with_strategy(intention, chat, stream)
        except AssertionError:
            raise
        except Exception as e:
            logger.exception("Response orchestration failed")
            if not stream.closed:
                await stream.error(public_error_message(e, DEFAULT_RESPONSE_MESSAGE))

        # Cancellation skips this: the reader is already gone
        if not stream.closed:
            await stream.close()

    async def respond_with_strategy(
        self,
        intention: Optional[str],
        chat: Chat,
        stream: EventStream,
    ) -> None:
        """Random and hostile messages: no retrieval, fixed system prompt."""
        config = get_response_config(self.configs, intention)
        await stream.indicator(ANSWER_STATUS, "thinking")
        await self.adapter.queue_assistant_response(
            stream,
            AssistantRequest(
                provider_name=config.provider_name,
                model=config.model,
                system_prompt=config.system_prompt,
                messages=self._history(chat, config.requires_history),
                temperature=config.temperature,
            ),
        )

    async def respond_to_question(self, chat: Chat, stream: EventStream) -> None:
        config = self.configs[IntentionType.question]
        await stream.indicator(PREPARING_STATUS, "thinking")

        try:
            hypothetical = await self.retrieval.generate_hypothetical_data(chat)
            embedding = await self.retrieval.embed_hypothetical_data(hypothetical)

            await stream.indicator(SEARCHING_STATUS, "searching")
            chunks = await self.retrieval.search(embedding)

            sources = get_sources_from_chunks(chunks)
            await stream.indicator(f"Read over {len(sources)} documents", "documents")

            citations = get_citations_from_sources(sources)
            system_prompt = get_question_prompt(build_context(sources))
        except AssertionError:
            raise
        except Exception as e:
            logger.error(f"Retrieval failed, answering without context: {e!r}")
            await stream.error(public_error_message(e, DEFAULT_RESPONSE_MESSAGE))
            await self.adapter.queue_assistant_response(
                stream,
                AssistantRequest(
                    provider_name=config.provider_name,
                    model=config.model,
                    system_prompt=QUESTION_BACKUP_PROMPT,
                    messages=latest_user_turn(chat),
                    temperature=config.temperature,
                ),
            )
            return

        if self.logging_enabled:
            logger.info(f"Answering with {len(sources)} sources from {len(chunks)} chunks")

        await stream.indicator(ANSWER_STATUS, "thinking")
        await self.adapter.queue_assistant_response(
            stream,
            AssistantRequest(
                provider_name=config.provider_name,
                model=config.model,
                system_prompt=system_prompt,
                messages=self._history(chat, config.requires_history),
                temperature=config.temperature,
                citations=citations,
            ),
        )
