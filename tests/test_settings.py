"""Tests for settings stores and configuration resolution."""

import json

import pytest
import yaml

from teacher_assistant.llm import LLMConfig, ProviderType
from teacher_assistant.llm.exceptions import ConfigurationError, UnsupportedProviderError
from teacher_assistant.settings import (
    ConfigResolver,
    DictSettingsStore,
    EnvSettingsStore,
    FileSettingsStore,
    SettingsStore,
    ValidationIssue,
    validate_config,
)


class TestStores:
    """Tests for the settings stores."""

    def test_dict_store(self):
        """Test reading and writing an in-memory store."""
        store = DictSettingsStore({"ai_model": "gpt-4o"})
        assert store.get("ai_model") == "gpt-4o"
        assert store.get("api_key") is None

        store.set("api_key", "sk")
        assert store.get("api_key") == "sk"
        assert isinstance(store, SettingsStore)

    def test_yaml_file_store(self, tmp_path):
        """Test loading a YAML settings file."""
        path = tmp_path / "settings.yaml"
        path.write_text(yaml.dump({"llm_provider": "claude", "max_tokens": 1500}))

        store = FileSettingsStore(path)
        assert store.get("llm_provider") == "claude"
        assert store.get("max_tokens") == 1500

    def test_json_file_store(self, tmp_path):
        """Test loading a JSON settings file."""
        path = tmp_path / "settings.json"
        path.write_text(json.dumps({"temperature": 0.2}))

        assert FileSettingsStore(path).get("temperature") == 0.2

    def test_empty_file_store(self, tmp_path):
        """Test that an empty file means no settings."""
        path = tmp_path / "settings.yaml"
        path.write_text("")
        assert FileSettingsStore(path).get("llm_provider") is None

    def test_missing_file(self, tmp_path):
        """Test that a missing file is reported."""
        with pytest.raises(FileNotFoundError):
            FileSettingsStore(tmp_path / "nope.yaml")

    def test_non_mapping_file(self, tmp_path):
        """Test that a list is not a settings file."""
        path = tmp_path / "settings.yaml"
        path.write_text("- a\n- b\n")
        with pytest.raises(ConfigurationError):
            FileSettingsStore(path)

    def test_env_store(self, monkeypatch):
        """Test reading TEACHERASSISTANT_* variables."""
        monkeypatch.setenv("TEACHERASSISTANT_LLM_PROVIDER", "gemini")
        monkeypatch.setenv("TEACHERASSISTANT_API_KEY", "g-key")
        monkeypatch.setenv("TEACHERASSISTANT_MAX_TOKENS", "512")

        store = EnvSettingsStore()
        assert store.get("llm_provider") == "gemini"
        assert store.get("api_key") == "g-key"
        assert store.get("max_tokens") == "512"
        assert store.get("not_a_setting") is None

    def test_env_store_dotenv_file(self, tmp_path, monkeypatch):
        """Test reading settings from a dotenv file."""
        monkeypatch.delenv("TEACHERASSISTANT_AI_MODEL", raising=False)
        env_file = tmp_path / ".env"
        env_file.write_text("TEACHERASSISTANT_AI_MODEL=llama3.1\n")

        assert EnvSettingsStore(env_file=env_file).get("ai_model") == "llama3.1"


class TestConfigResolver:
    """Tests for ConfigResolver.resolve()."""

    def test_defaults_for_empty_store(self):
        """Test that every unset key falls back to its default."""
        config = ConfigResolver(DictSettingsStore()).resolve()
        assert config == LLMConfig()

    def test_reads_every_setting(self):
        """Test that each key lands in the right field."""
        store = DictSettingsStore(
            {
                "llm_provider": "openai",
                "api_key": "sk-test",
                "organization_id": "org-1",
                "base_url": "http://ollama:11434",
                "ai_model": "gpt-4o-mini",
                "max_tokens": "1024",
                "temperature": "0.25",
                "system_prompt": "Answer briefly.",
                "request_timeout": "15",
            }
        )
        config = ConfigResolver(store).resolve()

        assert config.provider == ProviderType.OPENAI
        assert config.get_api_key() == "sk-test"
        assert config.organization_id == "org-1"
        assert config.base_url == "http://ollama:11434"
        assert config.model == "gpt-4o-mini"
        assert config.max_tokens == 1024
        assert config.temperature == 0.25
        assert config.system_prompt == "Answer briefly."
        assert config.timeout == 15.0

    def test_blank_numbers_use_defaults(self):
        """Test that blank numeric settings count as unset."""
        store = DictSettingsStore({"max_tokens": "", "temperature": "  "})
        config = ConfigResolver(store).resolve()
        assert config.max_tokens == 2000
        assert config.temperature == 0.7

    def test_cleared_base_url_is_kept(self):
        """Test that an emptied base URL surfaces in validation."""
        store = DictSettingsStore({"llm_provider": "ollama", "base_url": ""})
        config = ConfigResolver(store).resolve()
        assert config.base_url == ""

    def test_invalid_number(self):
        """Test that unparsable numbers are configuration errors."""
        store = DictSettingsStore({"temperature": "warm"})
        with pytest.raises(ConfigurationError) as exc_info:
            ConfigResolver(store).resolve()
        assert "temperature" in exc_info.value.message

    @pytest.mark.parametrize("value", ["1.7", 2.5, "inf"])
    def test_fractional_max_tokens(self, value):
        """Test that max tokens must be a whole number."""
        store = DictSettingsStore({"max_tokens": value})
        with pytest.raises(ConfigurationError):
            ConfigResolver(store).resolve()

    def test_whole_float_max_tokens(self):
        store = DictSettingsStore({"max_tokens": "1500.0"})
        assert ConfigResolver(store).resolve().max_tokens == 1500

    def test_invalid_timeout(self):
        """Test that a non-positive timeout is rejected."""
        store = DictSettingsStore({"request_timeout": "0"})
        with pytest.raises(ConfigurationError):
            ConfigResolver(store).resolve()

    def test_unknown_provider(self):
        """Test that unknown providers are unsupported."""
        store = DictSettingsStore({"llm_provider": "watson"})
        with pytest.raises(UnsupportedProviderError):
            ConfigResolver(store).resolve()

    def test_resolve_has_no_side_effects(self):
        """Test that resolving twice gives equal, independent configs."""
        resolver = ConfigResolver(DictSettingsStore({"api_key": "sk"}))
        first = resolver.resolve()
        second = resolver.resolve()
        assert first == second
        assert first is not second

    def test_resolver_validate(self):
        """Test the resolver's validate shortcut."""
        resolver = ConfigResolver(DictSettingsStore())
        issues = resolver.validate()
        assert [issue.field for issue in issues] == ["api_key"]


class TestValidateConfig:
    """Tests for validate_config()."""

    @pytest.mark.parametrize("provider", ["openai", "claude", "gemini", "mistral"])
    def test_api_key_required(self, provider):
        """Test that key-based providers need an API key."""
        issues = validate_config(LLMConfig(provider=provider))
        assert ValidationIssue("api_key", "API key is not configured") in issues

        assert validate_config(LLMConfig(provider=provider, api_key="key")) == []

    def test_ollama_needs_base_url_not_key(self):
        """Test that ollama is checked by endpoint."""
        assert validate_config(LLMConfig(provider="ollama")) == []

        issues = validate_config(LLMConfig(provider="ollama", base_url=""))
        assert [issue.message for issue in issues] == ["Base URL is required for Ollama"]

    @pytest.mark.parametrize(
        "temperature, valid",
        [(-0.01, False), (0.0, True), (2.0, True), (2.01, False)],
    )
    def test_temperature_bounds(self, temperature, valid):
        """Test inclusive temperature range."""
        issues = validate_config(LLMConfig(api_key="key", temperature=temperature))
        assert (not issues) is valid

    @pytest.mark.parametrize(
        "max_tokens, valid",
        [(0, False), (1, True), (32000, True), (32001, False)],
    )
    def test_max_tokens_bounds(self, max_tokens, valid):
        """Test inclusive max tokens range."""
        issues = validate_config(LLMConfig(api_key="key", max_tokens=max_tokens))
        assert (not issues) is valid

    def test_reports_all_issues(self):
        """Test that validation is not fail-fast."""
        config = LLMConfig(temperature=3.0, max_tokens=0)
        issues = validate_config(config)
        assert [issue.field for issue in issues] == ["api_key", "temperature", "max_tokens"]
        assert str(issues[1]) == "Temperature must be between 0 and 2"
