"""LLM provider clients and plain completions."""
from dataclasses import dataclass
from typing import Optional
import logging

from anthropic import AsyncAnthropic
from openai import AsyncOpenAI

from config import Settings, get_settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AIProviders:
    """Long-lived provider clients shared by all requests."""
    openai: AsyncOpenAI
    anthropic: Optional[AsyncAnthropic] = None
    fireworks: Optional[AsyncOpenAI] = None


_providers: Optional[AIProviders] = None


def validate_credentials(settings: Settings) -> None:
    """Fail fast when a required API key is missing."""
    required = [
        ("openai_api_key", "OpenAI"),
        ("pinecone_api_key", "Pinecone"),
    ]
    for attr, name in required:
        if not getattr(settings, attr):
            raise RuntimeError(f"{name} API key ({attr.upper()}) is not set")

    if not settings.anthropic_api_key:
        logger.info("ANTHROPIC_API_KEY not set - anthropic provider disabled")
    if not settings.fireworks_api_key:
        logger.info("FIREWORKS_API_KEY not set - fireworks provider disabled")


def build_providers(settings: Settings) -> AIProviders:
    """Create provider clients from settings."""
    return AIProviders(
        openai=AsyncOpenAI(api_key=settings.openai_api_key),
        anthropic=(
            AsyncAnthropic(api_key=settings.anthropic_api_key)
            if settings.anthropic_api_key
            else None
        ),
        fireworks=(
            AsyncOpenAI(
                api_key=settings.fireworks_api_key,
                base_url=settings.fireworks_base_url,
            )
            if settings.fireworks_api_key
            else None
        ),
    )


def get_providers() -> AIProviders:
    """Get or create the shared provider clients."""
    global _providers
    if _providers is None:
        _providers = build_providers(get_settings())
    return _providers


async def generate(
    client: AsyncOpenAI,
    model: str,
    system_prompt: str,
    messages: list[dict],
    temperature: float = 0.7,
) -> str:
    """
    Plain (non-streaming) chat completion.

    Args:
        client: OpenAI-compatible client
        model: Model identifier
        system_prompt: System instructions
        messages: Prior conversation as role/content dicts
        temperature: Sampling temperature

    Returns:
        Generated text, empty string if the model returned nothing
    """
    try:
        response = await client.chat.completions.create(
            model=model,
            messages=[{"role": "system", "content": system_prompt}, *messages],
            temperature=temperature,
        )
        return response.choices[0].message.content or ""
    except Exception as e:
        logger.error(f"Completion with {model} failed: {e}")
        raise
