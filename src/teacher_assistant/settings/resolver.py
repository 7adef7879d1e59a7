"""
Configuration resolution and validation.

``ConfigResolver.resolve()`` turns raw settings into an ``LLMConfig``,
substituting defaults for unset keys. ``validate_config()`` then reports
every problem with the result instead of stopping at the first one.
"""

import logging
from dataclasses import dataclass
from typing import Any, Optional

from pydantic import ValidationError

from teacher_assistant.llm.config import (
    DEFAULT_BASE_URL,
    DEFAULT_MAX_TOKENS,
    DEFAULT_MODEL,
    DEFAULT_PROVIDER,
    DEFAULT_SYSTEM_PROMPT,
    DEFAULT_TEMPERATURE,
    DEFAULT_TIMEOUT,
    MAX_MAX_TOKENS,
    MAX_TEMPERATURE,
    MIN_MAX_TOKENS,
    MIN_TEMPERATURE,
    LLMConfig,
    ProviderType,
)
from teacher_assistant.llm.exceptions import ConfigurationError
from teacher_assistant.settings.store import SettingsStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ValidationIssue:
    """One problem found in a configuration."""

    field: str
    message: str

    def __str__(self) -> str:
        return self.message


def validate_config(config: LLMConfig) -> list[ValidationIssue]:
    """
    Check a configuration and return every issue found.

    Ollama authenticates by endpoint, so it needs a base URL; every other
    provider needs an API key. Temperature must lie in [0, 2] and max tokens
    in [1, 32000], both inclusive.

    Args:
        config: The configuration to check

    Returns:
        List of issues (empty if the configuration is valid)
    """
    issues: list[ValidationIssue] = []

    if config.provider.uses_base_url:
        if not config.base_url:
            issues.append(ValidationIssue("base_url", "Base URL is required for Ollama"))
    elif not config.get_api_key():
        issues.append(ValidationIssue("api_key", "API key is not configured"))

    if not MIN_TEMPERATURE <= config.temperature <= MAX_TEMPERATURE:
        issues.append(
            ValidationIssue("temperature", "Temperature must be between 0 and 2")
        )

    if not MIN_MAX_TOKENS <= config.max_tokens <= MAX_MAX_TOKENS:
        issues.append(
            ValidationIssue("max_tokens", "Max tokens must be between 1 and 32000")
        )

    return issues


class ConfigResolver:
    """
    Builds an ``LLMConfig`` from a settings store.

    Missing keys (absent or None) fall back to defaults. Empty strings are
    kept for credential fields, so a cleared API key or base URL shows up in
    validation, but count as unset for provider, model and numeric fields.

    Example:
        ```python
        resolver = ConfigResolver(FileSettingsStore("settings.yaml"))
        config = resolver.resolve()
        for issue in resolver.validate(config):
            print(issue)
        ```
    """

    def __init__(self, store: SettingsStore):
        self.store = store

    def resolve(self) -> LLMConfig:
        """
        Read the configuration.

        Returns:
            A fresh LLMConfig

        Raises:
            ConfigurationError: If a setting cannot be parsed
            UnsupportedProviderError: If the provider identifier is unknown
        """
        provider = ProviderType.parse(self._get_text("llm_provider") or DEFAULT_PROVIDER)

        values: dict[str, Any] = {
            "provider": provider,
            "model": self._get_text("ai_model") or DEFAULT_MODEL,
            "api_key": self._get_text("api_key", "") or None,
            "organization_id": self._get_text("organization_id", "") or None,
            "base_url": self._get_text("base_url", DEFAULT_BASE_URL),
            "max_tokens": self._get_number("max_tokens", DEFAULT_MAX_TOKENS, int),
            "temperature": self._get_number("temperature", DEFAULT_TEMPERATURE, float),
            "system_prompt": self._get_text("system_prompt", DEFAULT_SYSTEM_PROMPT),
            "timeout": self._get_number("request_timeout", DEFAULT_TIMEOUT, float),
        }

        try:
            config = LLMConfig(**values)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid configuration: {e}", provider=provider.value)

        logger.debug(f"Resolved configuration: {config}")
        return config

    def validate(self, config: Optional[LLMConfig] = None) -> list[ValidationIssue]:
        """Validate ``config``, resolving it first when not given."""
        return validate_config(config if config is not None else self.resolve())

    def _get_text(self, key: str, default: Optional[str] = None) -> Optional[str]:
        value = self.store.get(key)
        if value is None:
            return default
        return str(value).strip()

    def _get_number(self, key: str, default: Any, cast: type) -> Any:
        value = self.store.get(key)
        if value is None or (isinstance(value, str) and not value.strip()):
            return default
        try:
            number = float(str(value).strip())
            if cast is int and not number.is_integer():
                raise ValueError(f"{number} is not a whole number")
            return cast(number)
        except (ValueError, OverflowError):
            raise ConfigurationError(f"Invalid value for {key}: {value!r}")
