"""Tests for the send_message entry point."""

import pytest

from teacher_assistant.api import send_message
from teacher_assistant.llm import DummyProvider, LLMConfig
from teacher_assistant.llm.config import DummyProviderConfig
from teacher_assistant.relay import MemoryAuditSink, MessageRelay
from teacher_assistant.settings import DictSettingsStore


@pytest.fixture
def dummy():
    return DummyProvider(LLMConfig(api_key="sk"), DummyProviderConfig(response_text="Sure."))


class TestSendMessage:
    """Tests for send_message()."""

    @pytest.mark.asyncio
    async def test_success(self, dummy):
        relay = MessageRelay(LLMConfig(api_key="sk"), adapter=dummy)
        result = await send_message(7, "How do I grade?", relay=relay)
        assert result == {"success": True, "message": "Sure."}

    @pytest.mark.asyncio
    async def test_accepts_numeric_string_course_id(self, dummy):
        sink = MemoryAuditSink()
        relay = MessageRelay(LLMConfig(api_key="sk"), adapter=dummy, audit_sink=sink)
        await send_message("7", "hi", relay=relay)
        assert sink.records[0].course_id == 7

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "courseid, message",
        [(7, ""), (7, "   "), ("seven", "hi"), (7, None)],
    )
    async def test_invalid_request(self, dummy, courseid, message):
        """Test that invalid payloads never reach the provider."""
        relay = MessageRelay(LLMConfig(api_key="sk"), adapter=dummy)
        result = await send_message(courseid, message, relay=relay)

        assert result == {"success": False, "message": "Error: Invalid request parameters."}
        assert dummy.call_count == 0

    @pytest.mark.asyncio
    async def test_not_configured(self, dummy):
        relay = MessageRelay(LLMConfig(provider="openai"), adapter=dummy)
        result = await send_message(7, "hi", relay=relay)

        assert result["success"] is False
        assert result["message"] == (
            "Error: The AI agent is not properly configured. Please check the plugin settings."
        )
        assert dummy.call_count == 0

    @pytest.mark.asyncio
    async def test_builds_relay_from_store(self):
        store = DictSettingsStore({"llm_provider": "mistral", "api_key": "key"})
        result = await send_message(7, "hi", store=store)

        assert result["success"] is False
        assert "not yet supported" in result["message"]

    @pytest.mark.asyncio
    async def test_store_failure_returns_failure(self):
        """Test that a failing settings backend still gets a response."""

        class FailingStore:
            def get(self, key):
                raise RuntimeError("settings backend down")

        result = await send_message(7, "hi", store=FailingStore())

        assert result == {
            "success": False,
            "message": "Error: Failed to load settings: settings backend down",
        }
