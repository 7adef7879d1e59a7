"""
Key-value settings stores.

The relay reads its configuration through the small ``SettingsStore``
protocol so that the host platform can plug in whatever holds the plugin
settings. Three stores ship with the package:

- ``DictSettingsStore``: an in-memory mapping
- ``FileSettingsStore``: a YAML or JSON file
- ``EnvSettingsStore``: ``TEACHERASSISTANT_*`` environment variables

Example file (YAML):
    ```yaml
    llm_provider: claude
    api_key: sk-ant-...
    ai_model: claude-3-5-haiku-latest
    max_tokens: 1500
    temperature: 0.4
    ```
"""

import json
from pathlib import Path
from typing import Any, Mapping, Optional, Protocol, Union, runtime_checkable

import yaml
from pydantic_settings import BaseSettings, SettingsConfigDict

from teacher_assistant.llm.exceptions import ConfigurationError

ENV_PREFIX = "TEACHERASSISTANT_"

SETTING_KEYS = (
    "llm_provider",
    "api_key",
    "organization_id",
    "base_url",
    "ai_model",
    "max_tokens",
    "temperature",
    "system_prompt",
    "request_timeout",
)


@runtime_checkable
class SettingsStore(Protocol):
    """Read-only access to plugin settings."""

    def get(self, key: str) -> Optional[Any]:
        """Return the raw value for ``key``, or None when unset."""
        ...


class DictSettingsStore:
    """Settings held in a plain mapping."""

    def __init__(self, values: Optional[Mapping[str, Any]] = None):
        self._values = dict(values or {})

    def get(self, key: str) -> Optional[Any]:
        return self._values.get(key)

    def set(self, key: str, value: Any) -> None:
        self._values[key] = value

    def __repr__(self) -> str:
        return f"DictSettingsStore(keys={sorted(self._values)})"


class FileSettingsStore(DictSettingsStore):
    """Settings loaded once from a YAML or JSON file."""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path).expanduser().resolve()
        super().__init__(self._load(self.path))

    @staticmethod
    def _load(path: Path) -> dict[str, Any]:
        """
        Read a flat mapping of settings.

        Raises:
            FileNotFoundError: If the file doesn't exist
            ConfigurationError: If the file is not a mapping
        """
        if not path.exists():
            raise FileNotFoundError(f"Settings file not found: {path}")

        content = path.read_text()

        if path.suffix == ".json":
            data = json.loads(content)
        else:
            data = yaml.safe_load(content)

        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ConfigurationError(f"Settings file must contain a mapping: {path}")
        return data

    def __repr__(self) -> str:
        return f"FileSettingsStore(path={str(self.path)!r})"


class _EnvSettings(BaseSettings):
    """Raw settings from the environment. Parsing happens in the resolver."""

    model_config = SettingsConfigDict(env_prefix=ENV_PREFIX, extra="ignore")

    llm_provider: Optional[str] = None
    api_key: Optional[str] = None
    organization_id: Optional[str] = None
    base_url: Optional[str] = None
    ai_model: Optional[str] = None
    max_tokens: Optional[str] = None
    temperature: Optional[str] = None
    system_prompt: Optional[str] = None
    request_timeout: Optional[str] = None


class EnvSettingsStore:
    """
    Settings read from environment variables.

    Environment variables:
        TEACHERASSISTANT_LLM_PROVIDER - openai, claude, gemini, ollama
        TEACHERASSISTANT_API_KEY - Provider API key
        TEACHERASSISTANT_ORGANIZATION_ID - OpenAI organization
        TEACHERASSISTANT_BASE_URL - Ollama endpoint
        TEACHERASSISTANT_AI_MODEL - Model name
        TEACHERASSISTANT_MAX_TOKENS - Token limit (1-32000)
        TEACHERASSISTANT_TEMPERATURE - Sampling temperature (0-2)
        TEACHERASSISTANT_SYSTEM_PROMPT - System prompt
        TEACHERASSISTANT_REQUEST_TIMEOUT - Timeout in seconds

    Args:
        env_file: Optional dotenv file to read in addition to the process
            environment
    """

    def __init__(self, env_file: Optional[Union[str, Path]] = None):
        if env_file is not None:
            self._settings = _EnvSettings(_env_file=env_file)
        else:
            self._settings = _EnvSettings()

    def get(self, key: str) -> Optional[Any]:
        if key not in SETTING_KEYS:
            return None
        return getattr(self._settings, key)

    def __repr__(self) -> str:
        return f"EnvSettingsStore(prefix={ENV_PREFIX!r})"
