"""Intention detection for the latest user turn."""
import logging

from openai import AsyncOpenAI

from prompts.system import INTENTION_PROMPT
from services.models import Chat, Intention, IntentionType

logger = logging.getLogger(__name__)

DEFAULT_INTENTION = Intention(type=IntentionType.random_message)


class IntentionClassifier:
    """Labels a chat with a single Intention using structured output."""

    def __init__(
        self,
        client: AsyncOpenAI,
        model: str,
        history_length: int = 7,
        logging_enabled: bool = True,
    ):
        self.client = client
        self.model = model
        self.history_length = history_length
        self.logging_enabled = logging_enabled

    async def detect(self, chat: Chat) -> Intention:
        """
        Classify the chat's most recent turn.

        One attempt, no retries. Any failure (network, missing or malformed
        structured output) falls back to random_message.
        """
        recent = [
            {"role": msg.role.value, "content": msg.content}
            for msg in chat.messages[-self.history_length:]
        ]

        try:
            response = await self.client.chat.completions.parse(
                model=self.model,
                messages=[{"role": "system", "content": INTENTION_PROMPT}, *recent],
                response_format=Intention,
            )
            parsed = response.choices[0].message.parsed
        except Exception as e:
            logger.warning(f"Intention detection failed, using default: {e}")
            return DEFAULT_INTENTION

        if parsed is None:
            logger.warning("Intention detection returned no parsed output")
            return DEFAULT_INTENTION

        if self.logging_enabled:
            logger.info(f"Detected intention: {parsed.type.value}")
        return parsed
