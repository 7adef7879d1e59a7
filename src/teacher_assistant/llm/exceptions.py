"""
Errors raised by the relay and its provider adapters.

Four families are distinguished:

- ConfigurationError: a setting is missing, unparsable or out of range
- UnsupportedProviderError: unknown, or known but not yet implemented, provider
- AdapterInvocationError: the provider call failed (network, HTTP, timeout)
- AuditError: recording an exchange failed (never surfaced to callers)
"""

from typing import Any, Optional


class LLMError(Exception):
    """Base exception for all relay and provider errors."""

    def __init__(
        self,
        message: str,
        *,
        provider: Optional[str] = None,
        model: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.provider = provider
        self.model = model
        self.details = details or {}

    def __str__(self) -> str:
        parts = [self.message]
        if self.provider:
            parts.append(f"provider={self.provider}")
        if self.model:
            parts.append(f"model={self.model}")
        return " ".join(parts)


class ConfigurationError(LLMError):
    """Raised when a setting cannot be read or is invalid."""

    pass


class UnsupportedProviderError(LLMError):
    """
    Raised when no adapter exists for the requested provider.

    ``reserved`` is True for identifiers that are recognized but not
    implemented yet (e.g. mistral), False for identifiers nobody knows.
    """

    def __init__(self, message: str, *, reserved: bool = False, **kwargs: Any):
        super().__init__(message, **kwargs)
        self.reserved = reserved


class AdapterInvocationError(LLMError):
    """Raised when a call to the provider fails."""

    kind = "provider_error"


class LLMConnectionError(AdapterInvocationError):
    """Raised when connection to the LLM provider fails."""

    kind = "connection"


class LLMAuthenticationError(AdapterInvocationError):
    """Raised when authentication with the LLM provider fails."""

    kind = "authentication"


class LLMRateLimitError(AdapterInvocationError):
    """Raised when rate limit is exceeded."""

    kind = "rate_limit"

    def __init__(
        self,
        message: str,
        *,
        retry_after: Optional[float] = None,
        **kwargs: Any,
    ):
        super().__init__(message, **kwargs)
        self.retry_after = retry_after


class LLMTimeoutError(AdapterInvocationError):
    """Raised when a request to the LLM provider times out."""

    kind = "timeout"


class LLMResponseError(AdapterInvocationError):
    """Raised when the LLM provider returns an invalid or unexpected response."""

    kind = "invalid_response"

    def __init__(
        self,
        message: str,
        *,
        status_code: Optional[int] = None,
        response_body: Optional[str] = None,
        **kwargs: Any,
    ):
        super().__init__(message, **kwargs)
        self.status_code = status_code
        self.response_body = response_body


class LLMModelNotFoundError(AdapterInvocationError):
    """Raised when the requested model is not available."""

    kind = "model_not_found"


class LLMContextLengthError(AdapterInvocationError):
    """Raised when the input exceeds the model's context length."""

    kind = "context_length"


class LLMContentFilterError(AdapterInvocationError):
    """Raised when content is blocked by safety filters."""

    kind = "content_filter"


class AuditError(LLMError):
    """Raised by audit sinks. The relay always swallows it."""

    pass
