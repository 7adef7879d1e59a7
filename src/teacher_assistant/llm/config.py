"""
LLM configuration models.

This module provides Pydantic models for configuring the relay's LLM
provider. One ``LLMConfig`` is resolved per relay and passed explicitly to
every component that needs it.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field, SecretStr, field_validator

from teacher_assistant.llm.exceptions import UnsupportedProviderError

DEFAULT_PROVIDER = "openai"
DEFAULT_MODEL = "gpt-4"
DEFAULT_BASE_URL = "http://localhost:11434"
DEFAULT_MAX_TOKENS = 2000
DEFAULT_TEMPERATURE = 0.7
DEFAULT_TIMEOUT = 60.0
DEFAULT_SYSTEM_PROMPT = (
    "You are a helpful teaching assistant for Moodle courses. "
    "You help teachers and students with course-related questions."
)

MIN_TEMPERATURE = 0.0
MAX_TEMPERATURE = 2.0
MIN_MAX_TOKENS = 1
MAX_MAX_TOKENS = 32000


class ProviderType(str, Enum):
    """Known LLM provider identifiers."""

    OPENAI = "openai"
    CLAUDE = "claude"
    GEMINI = "gemini"
    OLLAMA = "ollama"
    MISTRAL = "mistral"

    @property
    def uses_base_url(self) -> bool:
        """Whether the provider authenticates by endpoint instead of API key."""
        return self is ProviderType.OLLAMA

    @classmethod
    def parse(cls, value: "str | ProviderType") -> "ProviderType":
        """
        Parse a provider identifier, case-insensitively.

        Raises:
            UnsupportedProviderError: If the identifier is unknown
        """
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise UnsupportedProviderError(
                f"Unsupported LLM provider: {value}",
                provider=str(value),
            )


class MessageRole(str, Enum):
    """Message roles for chat completions."""

    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"


class Message(BaseModel):
    """A single immutable turn in a conversation."""

    model_config = {"frozen": True}

    role: MessageRole
    content: str
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="When the turn was created (UTC)",
    )

    @classmethod
    def system(cls, content: str) -> "Message":
        """Create a system message."""
        return cls(role=MessageRole.SYSTEM, content=content)

    @classmethod
    def user(cls, content: str) -> "Message":
        """Create a user message."""
        return cls(role=MessageRole.USER, content=content)

    @classmethod
    def assistant(cls, content: str) -> "Message":
        """Create an assistant message."""
        return cls(role=MessageRole.ASSISTANT, content=content)


class LLMConfig(BaseModel):
    """
    Configuration for the relay's LLM provider.

    Numeric ranges are deliberately not enforced here: ``validate_config``
    reports every problem at once so that a settings screen can show them
    all. Construction only checks types.

    Example:
        ```python
        # OpenAI
        config = LLMConfig(
            provider=ProviderType.OPENAI,
            model="gpt-4o-mini",
            api_key="sk-...",
        )

        # Ollama on another host
        config = LLMConfig(
            provider=ProviderType.OLLAMA,
            model="llama3.1",
            base_url="http://gpu-box:11434",
        )
        ```
    """

    provider: ProviderType = Field(
        default=ProviderType.OPENAI,
        description="The LLM provider to use",
    )
    model: str = Field(
        default=DEFAULT_MODEL,
        description="Model identifier/name",
    )
    api_key: Optional[SecretStr] = Field(
        default=None,
        description="API key (not used by ollama)",
    )
    organization_id: Optional[str] = Field(
        default=None,
        description="OpenAI organization ID (optional)",
    )
    base_url: str = Field(
        default=DEFAULT_BASE_URL,
        description="Endpoint of a local provider such as Ollama",
    )
    max_tokens: int = Field(
        default=DEFAULT_MAX_TOKENS,
        description="Maximum tokens to generate (valid range 1-32000)",
    )
    temperature: float = Field(
        default=DEFAULT_TEMPERATURE,
        description="Sampling temperature (valid range 0.0-2.0)",
    )
    system_prompt: str = Field(
        default=DEFAULT_SYSTEM_PROMPT,
        description="Instructions sent with every request",
    )
    timeout: float = Field(
        default=DEFAULT_TIMEOUT,
        gt=0,
        description="Request timeout in seconds",
    )

    @field_validator("provider", mode="before")
    @classmethod
    def parse_provider(cls, v: Any) -> ProviderType:
        """Accept provider identifiers in any case."""
        return ProviderType.parse(v)

    @field_validator("base_url")
    @classmethod
    def validate_base_url(cls, v: str) -> str:
        """Ensure base_url doesn't have trailing slash."""
        return v.strip().rstrip("/")

    def get_api_key(self) -> Optional[str]:
        """Get the API key as a plain string."""
        if self.api_key:
            return self.api_key.get_secret_value()
        return None

    def is_configured(self) -> bool:
        """Check that the credential the provider authenticates with is set."""
        if self.provider.uses_base_url:
            return bool(self.base_url)
        return bool(self.get_api_key())

    def to_generation_params(self) -> dict[str, Any]:
        """Generation parameters shared by all providers."""
        return {
            "model": self.model,
            "temperature": self.temperature,
            "max_tokens": self.max_tokens,
        }

    def with_overrides(self, **kwargs: Any) -> "LLMConfig":
        """
        Create a new config with the specified overrides.

        Args:
            **kwargs: Fields to override

        Returns:
            New LLMConfig with overrides applied
        """
        data = self.model_dump()
        data.update(kwargs)
        return LLMConfig.model_validate(data)

    def to_dict(self, include_secrets: bool = False) -> dict[str, Any]:
        """
        Export the configuration as a flat dictionary.

        Args:
            include_secrets: If True, include the API key in clear text

        Returns:
            Dictionary keyed like the settings store
        """
        api_key = self.get_api_key() or ""
        if api_key and not include_secrets:
            api_key = "***"

        return {
            "llm_provider": self.provider.value,
            "ai_model": self.model,
            "api_key": api_key,
            "organization_id": self.organization_id or "",
            "base_url": self.base_url,
            "max_tokens": self.max_tokens,
            "temperature": self.temperature,
            "system_prompt": self.system_prompt,
            "request_timeout": self.timeout,
        }

    def __repr__(self) -> str:
        """Safe representation that hides the API key."""
        api_key_str = "'***'" if self.api_key else "None"
        return (
            f"LLMConfig(provider={self.provider.value!r}, model={self.model!r}, "
            f"api_key={api_key_str})"
        )

    def __str__(self) -> str:
        return f"LLMConfig(provider={self.provider.value}, model={self.model})"


class DummyProviderConfig(BaseModel):
    """Configuration specific to the dummy provider for testing."""

    response_text: str = Field(
        default="This is a dummy response for testing purposes.",
        description="Static text to return for complete() calls",
    )
    delay_seconds: float = Field(
        default=0.0,
        ge=0.0,
        description="Artificial delay before answering (for simulating latency)",
    )
    should_fail: bool = Field(
        default=False,
        description="If True, all calls will raise an error (for testing error handling)",
    )
    error_message: str = Field(
        default="Simulated dummy provider error",
        description="Error message to raise when should_fail is True",
    )
