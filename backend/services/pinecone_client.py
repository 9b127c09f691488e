"""Pinecone vector database client."""
import asyncio
from pinecone import Pinecone
import logging

from config import get_settings

logger = logging.getLogger(__name__)

# Global index instance
_index = None


async def init_pinecone():
    """Connect to the existing Pinecone index."""
    global _index

    settings = get_settings()

    if not settings.pinecone_api_key:
        logger.warning("Pinecone API key not set - vector search disabled")
        return

    try:
        pc = Pinecone(api_key=settings.pinecone_api_key)
        _index = pc.Index(settings.pinecone_index_name)
        logger.info(f"Connected to Pinecone index: {settings.pinecone_index_name}")

    except Exception as e:
        logger.error(f"Failed to initialize Pinecone: {e}")
        raise


def get_index():
    """Get the Pinecone index instance."""
    if _index is None:
        raise RuntimeError("Pinecone not initialized. Call init_pinecone() first.")
    return _index


async def query_vectors(
    index,
    query_vector: list[float],
    top_k: int = 5,
) -> list[dict]:
    """
    Query Pinecone for similar vectors.

    Returns list of matches with id, score, metadata, best match first.
    """
    # The Pinecone index client is synchronous
    results = await asyncio.to_thread(
        index.query,
        vector=query_vector,
        top_k=top_k,
        include_metadata=True,
    )

    return [
        {
            "id": match.id,
            "score": match.score,
            "metadata": match.metadata or {},
        }
        for match in results.matches
    ]
