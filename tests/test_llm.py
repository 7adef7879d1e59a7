"""Tests for LLM configuration, adapters and provider selection."""

import json

import httpx
import pytest

from teacher_assistant.llm import (
    AnthropicProvider,
    DummyProvider,
    DummyProviderConfig,
    GeminiProvider,
    LLMConfig,
    LLMResponse,
    Message,
    OllamaProvider,
    OpenAIProvider,
    ProviderType,
    is_provider_registered,
    list_providers,
    register_provider,
    select_adapter,
    unregister_provider,
)
from teacher_assistant.llm.exceptions import (
    AdapterInvocationError,
    LLMAuthenticationError,
    LLMConnectionError,
    LLMContentFilterError,
    LLMContextLengthError,
    LLMModelNotFoundError,
    LLMRateLimitError,
    LLMResponseError,
    LLMTimeoutError,
    UnsupportedProviderError,
)


class TestLLMConfig:
    """Tests for LLMConfig."""

    def test_default_config(self):
        """Test default configuration values."""
        config = LLMConfig()
        assert config.provider == ProviderType.OPENAI
        assert config.model == "gpt-4"
        assert config.max_tokens == 2000
        assert config.temperature == 0.7
        assert config.base_url == "http://localhost:11434"
        assert config.system_prompt.startswith("You are a helpful teaching assistant")
        assert config.api_key is None

    def test_provider_parsed_case_insensitively(self):
        """Test provider identifiers in any case."""
        config = LLMConfig(provider="Claude")
        assert config.provider == ProviderType.CLAUDE

    def test_unknown_provider_rejected(self):
        """Test unknown provider identifiers."""
        with pytest.raises(UnsupportedProviderError) as exc_info:
            LLMConfig(provider="watson")
        assert exc_info.value.reserved is False

    def test_out_of_range_values_allowed_at_construction(self):
        """Test that ranges are left to validation."""
        config = LLMConfig(temperature=5.0, max_tokens=0)
        assert config.temperature == 5.0
        assert config.max_tokens == 0

    def test_base_url_trailing_slash_removed(self):
        """Test that trailing slash is removed from base_url."""
        config = LLMConfig(base_url="http://localhost:11434/")
        assert config.base_url == "http://localhost:11434"

    def test_is_configured_uses_api_key(self):
        """Test credential presence for key-based providers."""
        assert not LLMConfig(provider="gemini").is_configured()
        assert LLMConfig(provider="gemini", api_key="g-key").is_configured()

    def test_is_configured_uses_base_url_for_ollama(self):
        """Test credential presence for ollama."""
        assert LLMConfig(provider="ollama").is_configured()
        assert not LLMConfig(provider="ollama", base_url="").is_configured()

    def test_to_dict_masks_api_key(self):
        """Test that exporting hides the key unless asked."""
        config = LLMConfig(api_key="sk-secret", organization_id="org-1")
        masked = config.to_dict()
        assert masked["api_key"] == "***"
        assert masked["organization_id"] == "org-1"
        assert masked["llm_provider"] == "openai"
        assert config.to_dict(include_secrets=True)["api_key"] == "sk-secret"

    def test_repr_hides_api_key(self):
        """Test that the key never shows up in repr."""
        config = LLMConfig(api_key="sk-secret")
        assert "sk-secret" not in repr(config)
        assert "sk-secret" not in str(config)

    def test_with_overrides(self):
        """Test creating new config with overrides."""
        config = LLMConfig(temperature=0.5, api_key="sk-secret")
        new_config = config.with_overrides(temperature=0.9, provider="claude")
        assert config.temperature == 0.5  # Original unchanged
        assert new_config.temperature == 0.9
        assert new_config.provider == ProviderType.CLAUDE
        assert new_config.get_api_key() == "sk-secret"


class TestMessage:
    """Tests for Message class."""

    def test_factories(self):
        """Test role helpers."""
        assert Message.system("Be brief").role.value == "system"
        assert Message.user("Hello").role.value == "user"
        assert Message.assistant("Hi there").role.value == "assistant"

    def test_timestamp_set(self):
        """Test that creation time is recorded."""
        msg = Message.user("Hello")
        assert msg.timestamp.tzinfo is not None

    def test_immutable(self):
        """Test that turns cannot be changed after creation."""
        msg = Message.user("Hello")
        with pytest.raises(Exception):
            msg.content = "changed"


class TestDummyProvider:
    """Tests for DummyProvider."""

    @pytest.fixture
    def provider(self):
        """Create a dummy provider for tests."""
        return DummyProvider(
            LLMConfig(),
            DummyProviderConfig(response_text="Test response"),
        )

    @pytest.mark.asyncio
    async def test_complete(self, provider):
        """Test complete() returns configured response."""
        response = await provider.complete("Any prompt")
        assert isinstance(response, LLMResponse)
        assert response.content == "Test response"
        assert response.finish_reason == "stop"

    @pytest.mark.asyncio
    async def test_set_response(self, provider):
        """Test changing the response between calls."""
        provider.set_response("Changed")
        response = await provider.complete("Any prompt")
        assert response.content == "Changed"

    @pytest.mark.asyncio
    async def test_call_tracking(self, provider):
        """Test that calls are tracked."""
        assert provider.call_count == 0

        await provider.complete("First", temperature=0.2)
        assert provider.call_count == 1
        assert provider.last_prompt == "First"
        assert provider.last_kwargs["temperature"] == 0.2

        provider.reset_tracking()
        assert provider.call_count == 0

    @pytest.mark.asyncio
    async def test_should_fail(self, provider):
        """Test error simulation."""
        provider.set_should_fail(True, "Test error")

        with pytest.raises(AdapterInvocationError) as exc_info:
            await provider.complete("Any prompt")
        assert "Test error" in str(exc_info.value)


class TestFactory:
    """Tests for provider selection."""

    def test_list_providers(self):
        """Test listing registered providers."""
        providers = list_providers()
        assert set(providers) == {"openai", "claude", "gemini", "ollama"}

    @pytest.mark.parametrize(
        "provider, expected",
        [
            ("openai", OpenAIProvider),
            ("claude", AnthropicProvider),
            ("gemini", GeminiProvider),
            ("ollama", OllamaProvider),
        ],
    )
    def test_select_adapter(self, provider, expected):
        """Test that each provider maps to its adapter."""
        adapter = select_adapter(LLMConfig(provider=provider, api_key="key"))
        assert isinstance(adapter, expected)
        assert adapter.provider_name == provider

    def test_selection_opens_no_connection(self):
        """Test that the HTTP client is created lazily."""
        adapter = select_adapter(LLMConfig(api_key="key"))
        assert adapter._client is None

    @pytest.mark.parametrize("api_key", [None, "", "sk-valid"])
    def test_mistral_is_reserved(self, api_key):
        """Test that mistral always fails, whatever the credentials."""
        config = LLMConfig(provider="mistral", api_key=api_key)
        with pytest.raises(UnsupportedProviderError) as exc_info:
            select_adapter(config)
        assert exc_info.value.reserved is True
        assert "not yet supported" in exc_info.value.message

    def test_register_custom_provider(self):
        """Test that a new provider is a registry entry."""
        assert not is_provider_registered(ProviderType.MISTRAL)

        @register_provider(ProviderType.MISTRAL)
        def _create(config):
            return DummyProvider(config)

        try:
            adapter = select_adapter(LLMConfig(provider="mistral"))
            assert isinstance(adapter, DummyProvider)
        finally:
            unregister_provider(ProviderType.MISTRAL)

        assert not is_provider_registered(ProviderType.MISTRAL)


class TestLLMResponse:
    """Tests for LLMResponse dataclass."""

    def test_response_properties(self):
        """Test response properties."""
        response = LLMResponse(
            content="Hello",
            model="test-model",
            usage={"prompt_tokens": 10, "completion_tokens": 5, "total_tokens": 15},
        )
        assert response.prompt_tokens == 10
        assert response.completion_tokens == 5
        assert response.total_tokens == 15

    def test_response_without_usage(self):
        """Test response without usage info."""
        response = LLMResponse(content="Hello", model="test-model")
        assert response.prompt_tokens is None
        assert response.total_tokens is None


def _recording_transport(payload, status_code=200, headers=None):
    """MockTransport that answers with ``payload`` and records requests."""
    requests = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(status_code, json=payload, headers=headers)

    return httpx.MockTransport(handler), requests


class TestOpenAIProvider:
    """Tests for the OpenAI adapter."""

    @pytest.mark.asyncio
    async def test_complete(self):
        """Test request shape and response parsing."""
        transport, requests = _recording_transport(
            {
                "model": "gpt-4",
                "choices": [
                    {"message": {"role": "assistant", "content": "Hi!"}, "finish_reason": "stop"}
                ],
                "usage": {"prompt_tokens": 3, "completion_tokens": 1, "total_tokens": 4},
            }
        )
        config = LLMConfig(api_key="sk-test", organization_id="org-9", system_prompt="Be kind")

        async with OpenAIProvider(config, transport=transport) as provider:
            response = await provider.complete([Message.user("Hello")], max_tokens=50)

        assert response.content == "Hi!"
        assert response.total_tokens == 4

        request = requests[0]
        assert request.url == "https://api.openai.com/v1/chat/completions"
        assert request.headers["Authorization"] == "Bearer sk-test"
        assert request.headers["OpenAI-Organization"] == "org-9"

        body = json.loads(request.content)
        assert body["messages"] == [
            {"role": "system", "content": "Be kind"},
            {"role": "user", "content": "Hello"},
        ]
        assert body["max_tokens"] == 50
        assert body["temperature"] == 0.7
        assert body["stream"] is False

    @pytest.mark.asyncio
    async def test_no_organization_header_when_unset(self):
        """Test that the organization is optional."""
        transport, requests = _recording_transport(
            {"choices": [{"message": {"content": "ok"}}]}
        )
        async with OpenAIProvider(LLMConfig(api_key="sk"), transport=transport) as provider:
            await provider.complete("Hello")
        assert "OpenAI-Organization" not in requests[0].headers

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "status_code, payload, expected",
        [
            (401, {"error": {"message": "bad key"}}, LLMAuthenticationError),
            (404, {"error": {"message": "no such model"}}, LLMModelNotFoundError),
            (
                400,
                {"error": {"message": "too long", "type": "context_length_exceeded"}},
                LLMContextLengthError,
            ),
            (400, {"error": {"message": "bad request"}}, LLMResponseError),
            (503, {"error": "overloaded"}, LLMResponseError),
        ],
    )
    async def test_error_mapping(self, status_code, payload, expected):
        """Test HTTP errors map to the taxonomy."""
        transport, _ = _recording_transport(payload, status_code=status_code)
        async with OpenAIProvider(LLMConfig(api_key="sk"), transport=transport) as provider:
            with pytest.raises(expected):
                await provider.complete("Hello")

    @pytest.mark.asyncio
    async def test_rate_limit_retry_after(self):
        """Test that Retry-After is kept."""
        transport, _ = _recording_transport(
            {"error": {"message": "slow down"}},
            status_code=429,
            headers={"Retry-After": "12"},
        )
        async with OpenAIProvider(LLMConfig(api_key="sk"), transport=transport) as provider:
            with pytest.raises(LLMRateLimitError) as exc_info:
                await provider.complete("Hello")
        assert exc_info.value.retry_after == 12.0
        assert exc_info.value.kind == "rate_limit"

    @pytest.mark.asyncio
    async def test_timeout(self):
        """Test that transport timeouts are a distinct failure kind."""

        def handler(request):
            raise httpx.ReadTimeout("timed out", request=request)

        provider = OpenAIProvider(LLMConfig(api_key="sk"), transport=httpx.MockTransport(handler))
        with pytest.raises(LLMTimeoutError) as exc_info:
            await provider.complete("Hello")
        assert exc_info.value.kind == "timeout"
        await provider.close()

    @pytest.mark.asyncio
    async def test_connect_error(self):
        """Test connection failures."""

        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        provider = OpenAIProvider(LLMConfig(api_key="sk"), transport=httpx.MockTransport(handler))
        with pytest.raises(LLMConnectionError):
            await provider.complete("Hello")
        await provider.close()

    @pytest.mark.asyncio
    async def test_unexpected_shape(self):
        """Test that a malformed body is a response error."""
        transport, _ = _recording_transport({"unexpected": True})
        async with OpenAIProvider(LLMConfig(api_key="sk"), transport=transport) as provider:
            with pytest.raises(LLMResponseError):
                await provider.complete("Hello")


class TestAnthropicProvider:
    """Tests for the Anthropic adapter."""

    @pytest.mark.asyncio
    async def test_complete(self):
        """Test request shape and response parsing."""
        transport, requests = _recording_transport(
            {
                "model": "claude-3-5-haiku-latest",
                "content": [
                    {"type": "text", "text": "Hello "},
                    {"type": "text", "text": "teacher"},
                ],
                "stop_reason": "end_turn",
                "usage": {"input_tokens": 7, "output_tokens": 2},
            }
        )
        config = LLMConfig(
            provider="claude",
            model="claude-3-5-haiku-latest",
            api_key="sk-ant",
            system_prompt="Be kind",
        )

        async with AnthropicProvider(config, transport=transport) as provider:
            response = await provider.complete([Message.user("Hi")])

        assert response.content == "Hello teacher"
        assert response.finish_reason == "end_turn"
        assert response.total_tokens == 9

        request = requests[0]
        assert request.url == "https://api.anthropic.com/v1/messages"
        assert request.headers["x-api-key"] == "sk-ant"
        assert "anthropic-version" in request.headers

        body = json.loads(request.content)
        assert body["system"] == "Be kind"
        assert body["messages"] == [{"role": "user", "content": "Hi"}]
        assert body["max_tokens"] == 2000


class TestGeminiProvider:
    """Tests for the Gemini adapter."""

    @pytest.mark.asyncio
    async def test_complete(self):
        """Test request shape and response parsing."""
        transport, requests = _recording_transport(
            {
                "candidates": [
                    {
                        "content": {"role": "model", "parts": [{"text": "Bonjour"}]},
                        "finishReason": "STOP",
                    }
                ],
                "usageMetadata": {
                    "promptTokenCount": 4,
                    "candidatesTokenCount": 1,
                    "totalTokenCount": 5,
                },
            }
        )
        config = LLMConfig(provider="gemini", model="gemini-1.5-flash", api_key="g-key")

        async with GeminiProvider(config, transport=transport) as provider:
            response = await provider.complete(
                [Message.user("Hi"), Message.assistant("Hello"), Message.user("French?")]
            )

        assert response.content == "Bonjour"
        assert response.total_tokens == 5

        request = requests[0]
        assert request.url.path == "/v1beta/models/gemini-1.5-flash:generateContent"
        assert request.headers["x-goog-api-key"] == "g-key"

        body = json.loads(request.content)
        assert [c["role"] for c in body["contents"]] == ["user", "model", "user"]
        assert body["generationConfig"]["maxOutputTokens"] == 2000
        assert "systemInstruction" in body

    @pytest.mark.asyncio
    async def test_blocked_prompt(self):
        """Test that a blocked prompt is a content filter error."""
        transport, _ = _recording_transport(
            {"candidates": [], "promptFeedback": {"blockReason": "SAFETY"}}
        )
        config = LLMConfig(provider="gemini", api_key="g-key")
        async with GeminiProvider(config, transport=transport) as provider:
            with pytest.raises(LLMContentFilterError):
                await provider.complete("Hi")


class TestOllamaProvider:
    """Tests for the Ollama adapter."""

    @pytest.mark.asyncio
    async def test_complete_uses_base_url(self):
        """Test that the configured endpoint is used without credentials."""
        transport, requests = _recording_transport(
            {
                "model": "llama3.1",
                "message": {"role": "assistant", "content": "Sure."},
                "done_reason": "stop",
                "prompt_eval_count": 10,
                "eval_count": 2,
            }
        )
        config = LLMConfig(
            provider="ollama",
            model="llama3.1",
            base_url="http://gpu-box:11434/",
            temperature=0.3,
        )

        async with OllamaProvider(config, transport=transport) as provider:
            response = await provider.complete("Help")

        assert response.content == "Sure."
        assert response.total_tokens == 12

        request = requests[0]
        assert request.url == "http://gpu-box:11434/api/chat"
        assert "Authorization" not in request.headers

        body = json.loads(request.content)
        assert body["stream"] is False
        assert body["options"] == {"temperature": 0.3, "num_predict": 2000}
