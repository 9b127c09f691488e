"""Shared models for services."""
from enum import Enum
from typing import Literal, Optional, Union

from pydantic import BaseModel, Field


class Role(str, Enum):
    """Chat message roles."""
    user = "user"
    assistant = "assistant"
    system = "system"


class IntentionType(str, Enum):
    """Closed set of intentions the classifier may return."""
    question = "question"
    hostile_message = "hostile_message"
    random_message = "random_message"


class Intention(BaseModel):
    """Structured output of the intention classifier."""
    type: IntentionType


class Citation(BaseModel):
    """Numbered reference from an answer to a source."""
    number: int  # 1-based, positional
    source_url: str = ""
    source_description: str = ""


class Message(BaseModel):
    """Single chat message."""
    role: Role
    content: str
    citations: list[Citation] = Field(default_factory=list)


class Chat(BaseModel):
    """Chat session as sent by the client."""
    id: str
    messages: list[Message]
    metadata: Optional[dict] = None


class ChatRequest(BaseModel):
    """Inbound chat request."""
    chat: Chat


class Chunk(BaseModel):
    """Chunk returned by the vector index."""
    id: str
    text: str
    document_id: str  # Originating document
    score: float
    metadata: dict = Field(default_factory=dict)


class Source(BaseModel):
    """Chunks aggregated per originating document."""
    document_id: str
    chunks: list[Chunk]
    title: str = ""
    url: str = ""
    description: str = ""
    score: float  # Best chunk score

    @property
    def text(self) -> str:
        return "\n\n".join(chunk.text for chunk in self.chunks)


# Stream events (one NDJSON record each)

IndicatorIcon = Literal["thinking", "searching", "documents", "error"]


class Indicator(BaseModel):
    """Status shown to the caller while work is in progress."""
    status: str
    icon: IndicatorIcon


class StreamedLoading(BaseModel):
    type: Literal["loading"] = "loading"
    indicator: Indicator


class StreamedMessage(BaseModel):
    type: Literal["message"] = "message"
    message: Message  # Cumulative content, never a delta


class StreamedDone(BaseModel):
    type: Literal["done"] = "done"
    final_message: str


class StreamedError(BaseModel):
    type: Literal["error"] = "error"
    indicator: Indicator


StreamEvent = Union[StreamedLoading, StreamedMessage, StreamedDone, StreamedError]


def core_messages(messages: list[Message]) -> list[dict]:
    """Role/content dicts for a provider call, citations stripped."""
    return [{"role": msg.role.value, "content": msg.content} for msg in messages]
