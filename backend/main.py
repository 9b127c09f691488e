"""Sports Rules Assistant - FastAPI Application"""
from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from config import get_settings
from routers import chat
from services.intention import IntentionClassifier
from services.llm import get_providers, validate_credentials
from services.pinecone_client import get_index, init_pinecone
from services.providers import ProviderAdapter
from services.rag import RetrievalPipeline, RetrievalSettings
from services.response import ResponseOrchestrator, build_response_configs

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Validate credentials and create the shared service clients."""
    settings = get_settings()
    logging.basicConfig(level=settings.log_level)

    validate_credentials(settings)
    await init_pinecone()
    providers = get_providers()

    app.state.intention_classifier = IntentionClassifier(
        providers.openai,
        model=settings.intention_model,
        history_length=settings.history_context_length,
        logging_enabled=settings.logging_enabled,
    )
    app.state.response_orchestrator = ResponseOrchestrator(
        adapter=ProviderAdapter(
            providers,
            max_tokens=settings.max_tokens,
            logging_enabled=settings.logging_enabled,
        ),
        retrieval=RetrievalPipeline(
            providers.openai,
            get_index(),
            RetrievalSettings(
                hypothetical_model=settings.hypothetical_model,
                hypothetical_temperature=settings.hypothetical_temperature,
                embedding_model=settings.embedding_model,
                top_k=settings.retrieval_top_k,
                history_length=settings.history_context_length,
            ),
            logging_enabled=settings.logging_enabled,
        ),
        configs=build_response_configs(settings),
        history_length=settings.history_context_length,
        logging_enabled=settings.logging_enabled,
    )

    logger.info("Sports Rules Assistant started")
    yield
    logger.info("Sports Rules Assistant shutting down")


app = FastAPI(
    title="Sports Rules Assistant",
    description="Streaming RAG assistant for American sports rules",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=get_settings().cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(chat.router, prefix="/api", tags=["Chat"])


@app.exception_handler(RequestValidationError)
async def invalid_request_handler(request: Request, exc: RequestValidationError):
    """Malformed chat payloads are a 400, not FastAPI's default 422."""
    logger.warning(f"Invalid request format: {exc.errors()}")
    return JSONResponse(
        {"error": "Invalid request format", "details": jsonable_encoder(exc.errors())},
        status_code=400,
    )


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "service": "sports-rules-assistant"}


@app.get("/")
async def root():
    """Root endpoint with API info."""
    return {
        "name": "Sports Rules Assistant",
        "version": "0.1.0",
        "docs": "/docs",
        "health": "/health",
    }
