"""
Abstract base class for LLM providers.

This module defines the interface that all provider adapters must implement.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Optional

from teacher_assistant.llm.config import LLMConfig, Message


@dataclass
class LLMResponse:
    """
    Response from an LLM completion request.

    Attributes:
        content: The generated text content
        model: The model that generated the response
        finish_reason: Why generation stopped (e.g., "stop", "length", "content_filter")
        usage: Token usage statistics (if available)
        raw_response: The raw response from the provider (for debugging)
    """

    content: str
    model: str
    finish_reason: Optional[str] = None
    usage: Optional[dict[str, int]] = None
    raw_response: Optional[dict[str, Any]] = field(default=None, repr=False)

    @property
    def prompt_tokens(self) -> Optional[int]:
        """Get the number of prompt tokens used."""
        if self.usage:
            return self.usage.get("prompt_tokens")
        return None

    @property
    def completion_tokens(self) -> Optional[int]:
        """Get the number of completion tokens generated."""
        if self.usage:
            return self.usage.get("completion_tokens")
        return None

    @property
    def total_tokens(self) -> Optional[int]:
        """Get the total number of tokens used."""
        if self.usage:
            return self.usage.get("total_tokens")
        return None


class LLMProvider(ABC):
    """
    Abstract base class for LLM provider adapters.

    An adapter translates normalized chat turns into one provider's wire
    call. Constructing an adapter never touches the network; the first
    ``complete()`` call does.

    Example:
        ```python
        class MyProvider(LLMProvider):
            async def complete(self, prompt, **kwargs) -> LLMResponse:
                ...
        ```
    """

    def __init__(self, config: LLMConfig):
        """
        Initialize the provider with configuration.

        Args:
            config: LLM configuration settings
        """
        self.config = config

    @property
    def provider_name(self) -> str:
        """Get the provider name."""
        return self.config.provider.value

    @property
    def model_name(self) -> str:
        """Get the model name."""
        return self.config.model

    @abstractmethod
    async def complete(
        self,
        prompt: str | list[Message],
        *,
        system_prompt: Optional[str] = None,
        **kwargs: Any,
    ) -> Any:
        """
        Generate a complete response from the LLM.

        Built-in adapters return an ``LLMResponse``. Third-party adapters may
        return a plain string or a mapping with a ``content`` key; the relay
        normalizes all of these.

        Args:
            prompt: The input prompt (string or list of messages)
            system_prompt: Optional system prompt to override config default
            **kwargs: Generation parameters to override config
                (temperature, max_tokens, model)

        Raises:
            AdapterInvocationError: If the provider call fails
        """
        ...

    def _prepare_messages(
        self,
        prompt: str | list[Message],
        system_prompt: Optional[str] = None,
        *,
        include_system: bool = True,
    ) -> list[dict[str, str]]:
        """
        Convert the prompt to a list of role/content dicts.

        Args:
            prompt: User prompt (string or list of Message objects)
            system_prompt: Optional system prompt (overrides config default)
            include_system: Prepend the system prompt as a system message.
                Providers with a dedicated system field pass False.

        Returns:
            List of message dicts ready for an API call
        """
        messages: list[dict[str, str]] = []

        if include_system:
            effective_system_prompt = self._effective_system_prompt(system_prompt)
            if effective_system_prompt:
                messages.append({"role": "system", "content": effective_system_prompt})

        if isinstance(prompt, str):
            messages.append({"role": "user", "content": prompt})
        else:
            for msg in prompt:
                messages.append({"role": msg.role.value, "content": msg.content})

        return messages

    def _effective_system_prompt(self, system_prompt: Optional[str] = None) -> Optional[str]:
        return system_prompt or self.config.system_prompt or None

    def _merge_generation_params(self, **kwargs: Any) -> dict[str, Any]:
        """
        Merge config generation params with call-time overrides.

        Args:
            **kwargs: Override parameters

        Returns:
            Merged generation parameters
        """
        params = self.config.to_generation_params()

        for key, value in kwargs.items():
            if value is not None:
                params[key] = value

        return params

    async def close(self) -> None:
        """
        Close any resources held by the provider.

        Subclasses should override this to clean up HTTP clients, etc.
        """
        pass

    async def __aenter__(self) -> "LLMProvider":
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(provider={self.provider_name}, model={self.model_name})"
