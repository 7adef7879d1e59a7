"""
Anthropic (Claude) messages API adapter.

Credentials: API key sent in the ``x-api-key`` header.
"""

from typing import Any, Optional

from teacher_assistant.llm.base import LLMResponse
from teacher_assistant.llm.config import Message
from teacher_assistant.llm.http_provider import HTTPProvider

ANTHROPIC_VERSION = "2023-06-01"


class AnthropicProvider(HTTPProvider):
    """
    Adapter for the Anthropic messages API.

    The system prompt travels in the top-level ``system`` field rather than
    as a message, and the reply is a list of content blocks whose text
    parts are joined.
    """

    DEFAULT_BASE_URL = "https://api.anthropic.com/v1"

    def _build_headers(self) -> dict[str, str]:
        headers = super()._build_headers()
        headers["anthropic-version"] = ANTHROPIC_VERSION

        api_key = self.config.get_api_key()
        if api_key:
            headers["x-api-key"] = api_key

        return headers

    def _completion_path(self, params: dict[str, Any]) -> str:
        return "/messages"

    def _build_request_body(
        self,
        prompt: str | list[Message],
        system_prompt: Optional[str],
        params: dict[str, Any],
    ) -> dict[str, Any]:
        messages = [
            m
            for m in self._prepare_messages(prompt, include_system=False)
            if m["role"] != "system"
        ]
        body: dict[str, Any] = {
            "model": params["model"],
            "max_tokens": params["max_tokens"],
            "temperature": params["temperature"],
            "messages": messages,
        }

        system = self._effective_system_prompt(system_prompt)
        if system:
            body["system"] = system

        return body

    def _parse_response(self, data: dict[str, Any], params: dict[str, Any]) -> LLMResponse:
        text = "".join(
            block.get("text", "")
            for block in data["content"]
            if block.get("type") == "text"
        )

        usage = None
        raw_usage = data.get("usage")
        if raw_usage:
            prompt_tokens = raw_usage.get("input_tokens", 0)
            completion_tokens = raw_usage.get("output_tokens", 0)
            usage = {
                "prompt_tokens": prompt_tokens,
                "completion_tokens": completion_tokens,
                "total_tokens": prompt_tokens + completion_tokens,
            }

        return LLMResponse(
            content=text,
            model=data.get("model", params["model"]),
            finish_reason=data.get("stop_reason"),
            usage=usage,
            raw_response=data,
        )
