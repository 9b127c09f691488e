"""Embedding service using OpenAI."""
from openai import AsyncOpenAI
import logging

logger = logging.getLogger(__name__)


async def get_embedding(client: AsyncOpenAI, text: str, model: str) -> list[float]:
    """
    Get embedding for a single text.

    Uses the configured OpenAI embedding model.
    """
    try:
        response = await client.embeddings.create(
            model=model,
            input=text,
        )
        return response.data[0].embedding
    except Exception as e:
        logger.error(f"Embedding failed: {e}")
        raise
