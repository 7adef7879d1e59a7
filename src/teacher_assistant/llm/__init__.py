"""
LLM provider abstraction layer.

This module provides a unified interface over the providers the assistant
can relay to (OpenAI, Anthropic Claude, Google Gemini, Ollama).

Example:
    ```python
    from teacher_assistant.llm import LLMConfig, ProviderType, select_adapter

    config = LLMConfig(
        provider=ProviderType.CLAUDE,
        model="claude-3-5-haiku-latest",
        api_key="sk-ant-...",
    )

    async with select_adapter(config) as adapter:
        response = await adapter.complete("What is formative assessment?")
        print(response.content)
    ```
"""

from teacher_assistant.llm.anthropic_provider import AnthropicProvider
from teacher_assistant.llm.base import LLMProvider, LLMResponse
from teacher_assistant.llm.config import (
    DummyProviderConfig,
    LLMConfig,
    Message,
    MessageRole,
    ProviderType,
)
from teacher_assistant.llm.dummy_provider import DummyProvider
from teacher_assistant.llm.exceptions import (
    AdapterInvocationError,
    AuditError,
    ConfigurationError,
    LLMAuthenticationError,
    LLMConnectionError,
    LLMContentFilterError,
    LLMContextLengthError,
    LLMError,
    LLMModelNotFoundError,
    LLMRateLimitError,
    LLMResponseError,
    LLMTimeoutError,
    UnsupportedProviderError,
)
from teacher_assistant.llm.factory import (
    is_provider_registered,
    list_providers,
    register_provider,
    select_adapter,
    unregister_provider,
)
from teacher_assistant.llm.gemini_provider import GeminiProvider
from teacher_assistant.llm.http_provider import HTTPProvider
from teacher_assistant.llm.ollama_provider import OllamaProvider
from teacher_assistant.llm.openai_provider import OpenAIProvider

__all__ = [
    # Config
    "LLMConfig",
    "DummyProviderConfig",
    "ProviderType",
    "Message",
    "MessageRole",
    # Base classes
    "LLMProvider",
    "LLMResponse",
    "HTTPProvider",
    # Providers
    "OpenAIProvider",
    "AnthropicProvider",
    "GeminiProvider",
    "OllamaProvider",
    "DummyProvider",
    # Factory
    "select_adapter",
    "list_providers",
    "register_provider",
    "unregister_provider",
    "is_provider_registered",
    # Exceptions
    "LLMError",
    "ConfigurationError",
    "UnsupportedProviderError",
    "AdapterInvocationError",
    "AuditError",
    "LLMConnectionError",
    "LLMAuthenticationError",
    "LLMRateLimitError",
    "LLMTimeoutError",
    "LLMResponseError",
    "LLMModelNotFoundError",
    "LLMContextLengthError",
    "LLMContentFilterError",
]
