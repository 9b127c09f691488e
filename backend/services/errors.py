"""Error types and client-safe error messages."""
import logging

import anthropic
import openai

logger = logging.getLogger(__name__)

RATE_LIMIT_MESSAGE = "Service is currently busy. Please try again shortly."
CONNECTION_MESSAGE = "Could not reach the language model provider."


class AssistantError(Exception):
    """Base error whose message is safe to show to the client."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class UnsupportedProviderError(AssistantError):
    """Provider name outside the supported set."""

    def __init__(self, provider_name: str):
        self.provider_name = provider_name
        super().__init__(f"Unsupported provider: {provider_name}")


class ProviderNotConfiguredError(AssistantError):
    """Supported provider whose client was never created (missing API key)."""

    def __init__(self, provider_name: str):
        self.provider_name = provider_name
        super().__init__(f"Provider {provider_name} is not configured")


class RetrievalError(AssistantError):
    """Any failure while building grounded context for a question."""


_RATE_LIMIT_ERRORS = (openai.RateLimitError, anthropic.RateLimitError)
_AUTH_ERRORS = (
    openai.AuthenticationError,
    openai.PermissionDeniedError,
    anthropic.AuthenticationError,
    anthropic.PermissionDeniedError,
)
_CONNECTION_ERRORS = (openai.APIConnectionError, anthropic.APIConnectionError)


def public_error_message(exc: BaseException, default: str) -> str:
    """
    Turn an exception into a message fit for the client.

    Provider internals (auth failures, raw API bodies) never pass through;
    only our own AssistantError messages are forwarded verbatim.
    """
    if isinstance(exc, AssistantError):
        return exc.message or default
    if isinstance(exc, _RATE_LIMIT_ERRORS):
        return RATE_LIMIT_MESSAGE
    if isinstance(exc, _AUTH_ERRORS):
        logger.error(f"Provider rejected credentials: {type(exc).__name__}")
        return default
    if isinstance(exc, _CONNECTION_ERRORS):
        return CONNECTION_MESSAGE
    return default


def http_status_for(exc: BaseException) -> tuple[int, str]:
    """Map a pre-stream failure to an HTTP status and public detail."""
    if isinstance(exc, _RATE_LIMIT_ERRORS) or _mentions(exc, "rate limit", "429"):
        return 429, RATE_LIMIT_MESSAGE
    if isinstance(exc, _AUTH_ERRORS) or _mentions(exc, "authorization", "authentication", "401"):
        return 500, "Internal service configuration error"
    return 500, "An unexpected error occurred"


def _mentions(exc: BaseException, *needles: str) -> bool:
    text = str(exc).lower()
    return any(needle in text for needle in needles)
