"""Chat endpoint: classify the turn, then stream the chosen response."""
from datetime import datetime, timezone
import logging
import time
import uuid

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse, StreamingResponse

from config import Settings, get_settings
from services.errors import http_status_for
from services.intention import IntentionClassifier
from services.models import ChatRequest
from services.response import ResponseOrchestrator
from services.streaming import EventStream, stream_ndjson

logger = logging.getLogger(__name__)

router = APIRouter()

STREAM_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
}


def get_intention_classifier(request: Request) -> IntentionClassifier:
    """Shared classifier created in the app lifespan."""
    return request.app.state.intention_classifier


def get_response_orchestrator(request: Request) -> ResponseOrchestrator:
    """Shared orchestrator created in the app lifespan."""
    return request.app.state.response_orchestrator


@router.post("/chat")
async def chat(
    request: ChatRequest,
    classifier: IntentionClassifier = Depends(get_intention_classifier),
    orchestrator: ResponseOrchestrator = Depends(get_response_orchestrator),
    settings: Settings = Depends(get_settings),
):
    """
    Answer the latest turn of a chat as a stream of NDJSON events.

    Event types:
    - loading: progress indicator
    - message: cumulative assistant answer with citations
    - done: final answer
    - error: failure status (advisory when followed by more events)
    """
    request_id = str(uuid.uuid4())
    started = time.monotonic()
    chat_session = request.chat
    logger.info(f"[{request_id}] Determining intention for chat {chat_session.id}")

    try:
        intention = await classifier.detect(chat_session)
        logger.info(f"[{request_id}] Detected intention: {intention.type.value}")

        stream = EventStream(maxsize=settings.stream_queue_size)
        producer = orchestrator.respond(intention.type.value, chat_session, stream)
        response = StreamingResponse(
            stream_ndjson(stream, producer, timeout=settings.request_timeout_seconds),
            media_type="text/event-stream",
            headers=STREAM_HEADERS,
        )
    except Exception as e:
        status_code, detail = http_status_for(e)
        logger.error(
            f"[{request_id}] Error handling request ({time.monotonic() - started:.2f}s): {e!r}"
        )
        return JSONResponse({"error": detail}, status_code=status_code)

    logger.info(f"[{request_id}] Request routed in {time.monotonic() - started:.2f}s")
    return response


@router.get("/chat")
async def chat_health(settings: Settings = Depends(get_settings)):
    """Health information for the chat service."""
    return {
        "status": "ok",
        "version": settings.app_version,
        "environment": settings.environment,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
