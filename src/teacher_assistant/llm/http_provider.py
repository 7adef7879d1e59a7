"""
Shared plumbing for adapters that talk to a provider over HTTP.

Subclasses describe their wire format (endpoint, headers, request body,
response parsing); this base owns the httpx client and translates transport
and HTTP failures into the adapter error taxonomy.
"""

import logging
from typing import Any, Optional

import httpx

from teacher_assistant.llm.base import LLMProvider, LLMResponse
from teacher_assistant.llm.config import LLMConfig, Message
from teacher_assistant.llm.exceptions import (
    AdapterInvocationError,
    LLMAuthenticationError,
    LLMConnectionError,
    LLMContextLengthError,
    LLMModelNotFoundError,
    LLMRateLimitError,
    LLMResponseError,
    LLMTimeoutError,
)

logger = logging.getLogger(__name__)


class HTTPProvider(LLMProvider):
    """
    Base class for JSON-over-HTTP provider adapters.

    The HTTP client is created lazily on the first request, so building an
    adapter is free of I/O.

    Args:
        config: LLM configuration
        transport: Optional httpx transport (e.g. ``httpx.MockTransport``)
    """

    DEFAULT_BASE_URL: str = ""

    def __init__(
        self,
        config: LLMConfig,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        super().__init__(config)
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    @property
    def base_url(self) -> str:
        """Endpoint root the adapter sends requests to."""
        return self.DEFAULT_BASE_URL

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=httpx.Timeout(self.config.timeout),
                headers=self._build_headers(),
                transport=self._transport,
            )
        return self._client

    def _build_headers(self) -> dict[str, str]:
        """Build request headers. Subclasses add their credentials."""
        return {
            "Content-Type": "application/json",
            "Accept": "application/json",
        }

    def _completion_path(self, params: dict[str, Any]) -> str:
        raise NotImplementedError

    def _build_request_body(
        self,
        prompt: str | list[Message],
        system_prompt: Optional[str],
        params: dict[str, Any],
    ) -> dict[str, Any]:
        raise NotImplementedError

    def _parse_response(self, data: dict[str, Any], params: dict[str, Any]) -> LLMResponse:
        raise NotImplementedError

    async def complete(
        self,
        prompt: str | list[Message],
        *,
        system_prompt: Optional[str] = None,
        **kwargs: Any,
    ) -> LLMResponse:
        """
        Generate a complete response from the provider.

        Args:
            prompt: The input prompt (string or list of messages)
            system_prompt: Optional system prompt to override config default
            **kwargs: Generation parameter overrides

        Returns:
            LLMResponse with the generated text

        Raises:
            LLMConnectionError: If connection fails
            LLMAuthenticationError: If authentication fails
            LLMRateLimitError: If rate limited
            LLMTimeoutError: If request times out
            LLMResponseError: If response is invalid
            LLMModelNotFoundError: If model doesn't exist
            LLMContextLengthError: If input too long
        """
        params = self._merge_generation_params(**kwargs)
        path = self._completion_path(params)
        body = self._build_request_body(prompt, system_prompt, params)
        data = await self._post_json(path, body)

        try:
            return self._parse_response(data, params)
        except AdapterInvocationError:
            raise
        except (KeyError, IndexError, TypeError) as e:
            raise LLMResponseError(
                f"Unexpected response format from AI service: {e}",
                response_body=str(data)[:500],
                **self._error_kwargs(),
            )

    async def _post_json(self, path: str, body: dict[str, Any]) -> dict[str, Any]:
        """POST a JSON body and return the decoded JSON reply."""
        client = await self._get_client()

        logger.debug(f"Sending completion request to {self.base_url}{path}")

        try:
            response = await client.post(path, json=body)

            if not response.is_success:
                self._handle_error_response(response)

            return response.json()

        except httpx.TimeoutException as e:
            raise LLMTimeoutError(
                f"Request timed out after {self.config.timeout}s: {e}",
                **self._error_kwargs(),
            )
        except httpx.ConnectError as e:
            raise LLMConnectionError(
                f"Failed to connect to {self.base_url}: {e}",
                **self._error_kwargs(),
            )
        except AdapterInvocationError:
            raise
        except ValueError as e:
            raise LLMResponseError(
                f"Invalid JSON response from AI service: {e}",
                **self._error_kwargs(),
            )
        except Exception as e:
            raise LLMConnectionError(
                f"Request failed: {e}",
                **self._error_kwargs(),
            )

    def _error_kwargs(self) -> dict[str, Any]:
        return {
            "provider": self.provider_name,
            "model": self.model_name,
        }

    def _handle_error_response(self, response: httpx.Response) -> None:
        """Convert HTTP error responses to appropriate exceptions."""
        status_code = response.status_code

        try:
            error_data = response.json()
            error = error_data.get("error", {})
            if isinstance(error, str):
                detail = error
                error_type = None
            else:
                detail = error.get("message", str(error_data))
                error_type = error.get("type") or error.get("status")
        except Exception:
            detail = response.text or f"HTTP {status_code}"
            error_type = None

        common_kwargs = self._error_kwargs()

        if status_code in (401, 403):
            raise LLMAuthenticationError(detail, **common_kwargs)
        elif status_code == 404:
            raise LLMModelNotFoundError(
                f"Model '{self.config.model}' not found: {detail}",
                **common_kwargs,
            )
        elif status_code == 429:
            retry_after = response.headers.get("Retry-After")
            try:
                retry_seconds = float(retry_after) if retry_after else None
            except ValueError:
                retry_seconds = None
            raise LLMRateLimitError(
                detail,
                retry_after=retry_seconds,
                **common_kwargs,
            )
        elif status_code == 400:
            if error_type == "context_length_exceeded" or "context" in detail.lower():
                raise LLMContextLengthError(detail, **common_kwargs)
            raise LLMResponseError(
                detail,
                status_code=status_code,
                response_body=response.text,
                **common_kwargs,
            )
        elif status_code >= 500:
            raise LLMResponseError(
                f"Server error: {detail}",
                status_code=status_code,
                response_body=response.text,
                **common_kwargs,
            )
        else:
            raise LLMResponseError(
                detail,
                status_code=status_code,
                response_body=response.text,
                **common_kwargs,
            )

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None
