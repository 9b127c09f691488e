"""Application configuration."""
from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings from environment variables."""

    # API Keys
    openai_api_key: str = ""
    anthropic_api_key: str = ""  # Optional - enables the anthropic provider
    fireworks_api_key: str = ""  # Optional - enables the fireworks provider
    fireworks_base_url: str = "https://api.fireworks.ai/inference/v1"

    # Pinecone
    pinecone_api_key: str = ""
    pinecone_index_name: str = "sports-rules"

    # App Settings
    app_version: str = "development"
    environment: str = "development"
    log_level: str = "INFO"
    logging_enabled: bool = True  # Verbose stream tracing
    cors_origins: list[str] = ["http://localhost:3000"]

    # Intention / retrieval models
    intention_model: str = "gpt-4o-mini"
    hypothetical_model: str = "gpt-4o-mini"
    hypothetical_temperature: float = 0.7
    embedding_model: str = "text-embedding-3-small"

    # Response strategies
    random_response_provider: str = "openai"
    random_response_model: str = "gpt-4o-mini"
    random_response_temperature: float = 0.7
    hostile_response_provider: str = "openai"
    hostile_response_model: str = "gpt-4o-mini"
    hostile_response_temperature: float = 0.7
    question_response_provider: str = "openai"
    question_response_model: str = "gpt-4o"
    question_response_temperature: float = 0.7

    # Chat Settings
    history_context_length: int = 7  # Messages used for context
    max_tokens: int = 4096
    retrieval_top_k: int = 5
    request_timeout_seconds: float = 60.0
    stream_queue_size: int = 64

    class Config:
        env_file = "../.env"  # Project root .env
        env_file_encoding = "utf-8"
        extra = "ignore"


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
