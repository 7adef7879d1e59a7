"""
Teacher Assistant - course chat relay to LLM providers.

This package relays chat messages asked within a course to a configurable
LLM backend (OpenAI, Anthropic Claude, Google Gemini, Ollama) and returns
the normalized reply.
"""

__version__ = "0.1.0"

from teacher_assistant.llm import (
    AdapterInvocationError,
    AuditError,
    ConfigurationError,
    DummyProvider,
    DummyProviderConfig,
    LLMConfig,
    LLMError,
    LLMProvider,
    LLMResponse,
    Message,
    MessageRole,
    ProviderType,
    UnsupportedProviderError,
    list_providers,
    register_provider,
    select_adapter,
)

from teacher_assistant.settings import (
    ConfigResolver,
    DictSettingsStore,
    EnvSettingsStore,
    FileSettingsStore,
    SettingsStore,
    ValidationIssue,
    validate_config,
)

from teacher_assistant.relay import (
    AuditRecord,
    Conversation,
    MessageRelay,
    RelayRequest,
    RelayResponse,
    ScopeContext,
    StaticScopeProvider,
)

__all__ = [
    # Version
    "__version__",
    # LLM
    "LLMConfig",
    "DummyProviderConfig",
    "ProviderType",
    "Message",
    "MessageRole",
    "LLMProvider",
    "LLMResponse",
    "DummyProvider",
    "select_adapter",
    "register_provider",
    "list_providers",
    # Errors
    "LLMError",
    "ConfigurationError",
    "UnsupportedProviderError",
    "AdapterInvocationError",
    "AuditError",
    # Settings
    "SettingsStore",
    "DictSettingsStore",
    "FileSettingsStore",
    "EnvSettingsStore",
    "ConfigResolver",
    "ValidationIssue",
    "validate_config",
    # Relay
    "MessageRelay",
    "RelayRequest",
    "RelayResponse",
    "Conversation",
    "ScopeContext",
    "StaticScopeProvider",
    "AuditRecord",
]
