"""
Settings and configuration resolution for the teacher assistant.

Example:
    ```python
    from teacher_assistant.settings import ConfigResolver, EnvSettingsStore

    resolver = ConfigResolver(EnvSettingsStore())
    config = resolver.resolve()
    issues = resolver.validate(config)
    ```
"""

from teacher_assistant.settings.resolver import (
    ConfigResolver,
    ValidationIssue,
    validate_config,
)
from teacher_assistant.settings.store import (
    ENV_PREFIX,
    SETTING_KEYS,
    DictSettingsStore,
    EnvSettingsStore,
    FileSettingsStore,
    SettingsStore,
)

__all__ = [
    # Stores
    "SettingsStore",
    "DictSettingsStore",
    "FileSettingsStore",
    "EnvSettingsStore",
    "ENV_PREFIX",
    "SETTING_KEYS",
    # Resolution
    "ConfigResolver",
    "ValidationIssue",
    "validate_config",
]
