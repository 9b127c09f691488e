"""Retrieval pipeline: hypothetical answer -> embedding -> search -> sources."""
from dataclasses import dataclass
import logging

from openai import AsyncOpenAI

from prompts.system import HYPOTHETICAL_DATA_PROMPT
from services.embeddings import get_embedding
from services.errors import RetrievalError
from services.llm import generate
from services.models import Chat, Chunk, Citation, Source, core_messages
from services.pinecone_client import query_vectors

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RetrievalSettings:
    """Static retrieval parameters."""
    hypothetical_model: str
    hypothetical_temperature: float
    embedding_model: str
    top_k: int = 5
    history_length: int = 7


class RetrievalPipeline:
    """
    Turns a question-type chat into grounded context.

    Each step is a separate coroutine so the caller can report progress
    between them. Every step raises RetrievalError on failure.
    """

    def __init__(
        self,
        client: AsyncOpenAI,
        index,
        settings: RetrievalSettings,
        logging_enabled: bool = True,
    ):
        self.client = client
        self.index = index
        self.settings = settings
        self.logging_enabled = logging_enabled

    async def generate_hypothetical_data(self, chat: Chat) -> str:
        """Ask the model for a plausible answer to embed instead of the question."""
        history = core_messages(chat.messages[-self.settings.history_length:])
        try:
            text = await generate(
                self.client,
                model=self.settings.hypothetical_model,
                system_prompt=HYPOTHETICAL_DATA_PROMPT,
                messages=history,
                temperature=self.settings.hypothetical_temperature,
            )
        except Exception as e:
            raise RetrievalError("Could not prepare a document search") from e

        if not text.strip():
            raise RetrievalError("Could not prepare a document search")
        return text

    async def embed_hypothetical_data(self, text: str) -> list[float]:
        try:
            return await get_embedding(self.client, text, self.settings.embedding_model)
        except Exception as e:
            raise RetrievalError("Could not prepare a document search") from e

    async def search(self, embedding: list[float]) -> list[Chunk]:
        """Similarity search, best match first."""
        try:
            matches = await query_vectors(
                self.index,
                query_vector=embedding,
                top_k=self.settings.top_k,
            )
        except Exception as e:
            raise RetrievalError("Could not search the document index") from e

        chunks = [chunk_from_match(match) for match in matches]
        chunks.sort(key=lambda chunk: chunk.score, reverse=True)
        if self.logging_enabled:
            logger.info(f"Vector search returned {len(chunks)} chunks")
        return chunks


def chunk_from_match(match: dict) -> Chunk:
    """Build a Chunk from a Pinecone match."""
    metadata = match.get("metadata") or {}
    document_id = (
        metadata.get("document_id")
        or metadata.get("source_url")
        or match["id"]
    )
    return Chunk(
        id=match["id"],
        text=metadata.get("text", ""),
        document_id=str(document_id),
        score=float(match.get("score") or 0.0),
        metadata=metadata,
    )


def get_sources_from_chunks(chunks: list[Chunk]) -> list[Source]:
    """
    Group chunks by originating document.

    Input must be ranked best first; each source keeps the rank of its
    best chunk and its chunks stay in rank order.
    """
    sources: dict[str, Source] = {}
    for chunk in chunks:
        source = sources.get(chunk.document_id)
        if source is None:
            metadata = chunk.metadata
            sources[chunk.document_id] = Source(
                document_id=chunk.document_id,
                chunks=[chunk],
                title=metadata.get("title") or metadata.get("source_name", ""),
                url=metadata.get("source_url", ""),
                description=metadata.get("source_description", ""),
                score=chunk.score,
            )
        else:
            source.chunks.append(chunk)
    return list(sources.values())


def get_citations_from_sources(sources: list[Source]) -> list[Citation]:
    """Dense 1-based citations in source rank order."""
    return [
        Citation(
            number=i,
            source_url=source.url,
            source_description=source.description or source.title,
        )
        for i, source in enumerate(sources, 1)
    ]


def build_context(sources: list[Source]) -> str:
    """Build context string with [n] markers matching the citation numbers."""
    if not sources:
        return ""

    context_parts = []
    for i, source in enumerate(sources, 1):
        source_info = source.title or source.document_id
        if source.url:
            source_info += f" ({source.url})"

        context_parts.append(f"[{i}] {source_info}:\n{source.text}\n")

    return "\n".join(context_parts)
