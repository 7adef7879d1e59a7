"""
Dummy LLM provider for testing.

This provider returns static/configurable responses without making any
actual API calls. It is not registered in the provider registry; build it
directly and hand it to the relay.
"""

import asyncio
from typing import Any, Optional

from teacher_assistant.llm.base import LLMProvider, LLMResponse
from teacher_assistant.llm.config import DummyProviderConfig, LLMConfig, Message
from teacher_assistant.llm.exceptions import AdapterInvocationError


class DummyProvider(LLMProvider):
    """
    A dummy LLM provider for testing purposes.

    Example:
        ```python
        provider = DummyProvider(
            LLMConfig(),
            DummyProviderConfig(response_text="Hello from dummy!"),
        )
        relay = MessageRelay(config, adapter=provider)
        ```
    """

    def __init__(
        self,
        config: Optional[LLMConfig] = None,
        dummy_config: Optional[DummyProviderConfig] = None,
    ):
        super().__init__(config or LLMConfig())
        self.dummy_config = dummy_config or DummyProviderConfig()
        self._call_count = 0
        self._last_prompt: Optional[str | list[Message]] = None
        self._last_kwargs: dict[str, Any] = {}

    @property
    def call_count(self) -> int:
        """Get the number of times complete() was called."""
        return self._call_count

    @property
    def last_prompt(self) -> Optional[str | list[Message]]:
        """Get the last prompt that was passed to complete()."""
        return self._last_prompt

    @property
    def last_kwargs(self) -> dict[str, Any]:
        """Get the last kwargs that were passed to complete()."""
        return self._last_kwargs

    def reset_tracking(self) -> None:
        """Reset call tracking (useful between test cases)."""
        self._call_count = 0
        self._last_prompt = None
        self._last_kwargs = {}

    async def complete(
        self,
        prompt: str | list[Message],
        *,
        system_prompt: Optional[str] = None,
        **kwargs: Any,
    ) -> LLMResponse:
        """
        Return a static response.

        Raises:
            AdapterInvocationError: If dummy_config.should_fail is True
        """
        self._call_count += 1
        self._last_prompt = prompt
        self._last_kwargs = {"system_prompt": system_prompt, **kwargs}

        if self.dummy_config.delay_seconds > 0:
            await asyncio.sleep(self.dummy_config.delay_seconds)

        if self.dummy_config.should_fail:
            raise AdapterInvocationError(
                self.dummy_config.error_message,
                provider=self.provider_name,
                model=self.model_name,
            )

        prompt_tokens = self._estimate_tokens(prompt)
        completion_tokens = len(self.dummy_config.response_text.split())
        return LLMResponse(
            content=self.dummy_config.response_text,
            model=self.config.model,
            finish_reason="stop",
            usage={
                "prompt_tokens": prompt_tokens,
                "completion_tokens": completion_tokens,
                "total_tokens": prompt_tokens + completion_tokens,
            },
        )

    def _estimate_tokens(self, prompt: str | list[Message]) -> int:
        """Rough token estimation (words / 0.75)."""
        if isinstance(prompt, str):
            text = prompt
        else:
            text = " ".join(msg.content for msg in prompt)
        return int(len(text.split()) / 0.75)

    def set_response(self, text: str) -> None:
        """Change the response text."""
        self.dummy_config.response_text = text

    def set_should_fail(self, should_fail: bool, error_message: Optional[str] = None) -> None:
        """
        Configure whether the provider should fail.

        Args:
            should_fail: If True, all calls will raise an error
            error_message: Optional custom error message
        """
        self.dummy_config.should_fail = should_fail
        if error_message:
            self.dummy_config.error_message = error_message
