"""
Provider adapter selection.

A registry maps each ``ProviderType`` to a factory that builds its adapter.
Adding a provider means registering a factory; selection itself is a pure
lookup and performs no network I/O.
"""

from typing import Callable, Optional

from teacher_assistant.llm.anthropic_provider import AnthropicProvider
from teacher_assistant.llm.base import LLMProvider
from teacher_assistant.llm.config import LLMConfig, ProviderType
from teacher_assistant.llm.exceptions import UnsupportedProviderError
from teacher_assistant.llm.gemini_provider import GeminiProvider
from teacher_assistant.llm.ollama_provider import OllamaProvider
from teacher_assistant.llm.openai_provider import OpenAIProvider


# Type alias for provider factory functions
ProviderFactory = Callable[[LLMConfig], LLMProvider]

# Registry of provider factories
_PROVIDER_REGISTRY: dict[ProviderType, ProviderFactory] = {}

# Known identifiers without an adapter yet
RESERVED_PROVIDERS = frozenset({ProviderType.MISTRAL})


def register_provider(
    provider_type: ProviderType,
    factory: Optional[ProviderFactory] = None,
) -> Callable[[ProviderFactory], ProviderFactory]:
    """
    Register a provider factory for a given provider type.

    Can be used as a decorator or called directly.

    Example:
        ```python
        @register_provider(ProviderType.MISTRAL)
        def create_mistral_provider(config: LLMConfig) -> LLMProvider:
            return MistralProvider(config)
        ```

    Args:
        provider_type: The provider type to register
        factory: Optional factory function (if not using as decorator)

    Returns:
        The factory function (for decorator use)
    """

    def decorator(func: ProviderFactory) -> ProviderFactory:
        _PROVIDER_REGISTRY[provider_type] = func
        return func

    if factory is not None:
        return decorator(factory)
    return decorator


def unregister_provider(provider_type: ProviderType) -> None:
    """Remove a provider factory (no-op if not registered)."""
    _PROVIDER_REGISTRY.pop(provider_type, None)


def select_adapter(config: LLMConfig) -> LLMProvider:
    """
    Build the adapter for the configured provider.

    Args:
        config: LLM configuration specifying the provider type

    Returns:
        An LLMProvider instance (no connection is opened yet)

    Raises:
        UnsupportedProviderError: If the provider has no registered factory.
            ``reserved`` is set for recognized-but-unimplemented providers.
    """
    factory = _PROVIDER_REGISTRY.get(config.provider)
    if factory is None:
        reserved = config.provider in RESERVED_PROVIDERS
        if reserved:
            message = f"Unsupported LLM provider: {config.provider.value} (not yet supported)"
        else:
            available = ", ".join(list_providers())
            message = (
                f"Unsupported LLM provider: {config.provider.value}. "
                f"Available providers: {available}"
            )
        raise UnsupportedProviderError(
            message,
            reserved=reserved,
            provider=config.provider.value,
        )

    return factory(config)


# Register built-in providers
@register_provider(ProviderType.OPENAI)
def _create_openai_provider(config: LLMConfig) -> LLMProvider:
    """Create OpenAI provider."""
    return OpenAIProvider(config)


@register_provider(ProviderType.CLAUDE)
def _create_anthropic_provider(config: LLMConfig) -> LLMProvider:
    """Create Anthropic provider."""
    return AnthropicProvider(config)


@register_provider(ProviderType.GEMINI)
def _create_gemini_provider(config: LLMConfig) -> LLMProvider:
    """Create Gemini provider."""
    return GeminiProvider(config)


@register_provider(ProviderType.OLLAMA)
def _create_ollama_provider(config: LLMConfig) -> LLMProvider:
    """Create Ollama provider."""
    return OllamaProvider(config)


def list_providers() -> list[str]:
    """
    List all registered provider types.

    Returns:
        List of provider type names
    """
    return [p.value for p in _PROVIDER_REGISTRY.keys()]


def is_provider_registered(provider_type: ProviderType) -> bool:
    """
    Check if a provider type is registered.

    Args:
        provider_type: The provider type to check

    Returns:
        True if the provider is registered
    """
    return provider_type in _PROVIDER_REGISTRY
