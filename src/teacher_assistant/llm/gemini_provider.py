"""
Google Gemini ``generateContent`` adapter.

Credentials: API key sent in the ``x-goog-api-key`` header.
"""

from typing import Any, Optional

from teacher_assistant.llm.base import LLMResponse
from teacher_assistant.llm.config import Message
from teacher_assistant.llm.exceptions import LLMContentFilterError
from teacher_assistant.llm.http_provider import HTTPProvider

# Gemini calls the assistant "model"
_ROLE_MAP = {"user": "user", "assistant": "model"}


class GeminiProvider(HTTPProvider):
    """Adapter for the Gemini generative language API."""

    DEFAULT_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"

    def _build_headers(self) -> dict[str, str]:
        headers = super()._build_headers()

        api_key = self.config.get_api_key()
        if api_key:
            headers["x-goog-api-key"] = api_key

        return headers

    def _completion_path(self, params: dict[str, Any]) -> str:
        return f"/models/{params['model']}:generateContent"

    def _build_request_body(
        self,
        prompt: str | list[Message],
        system_prompt: Optional[str],
        params: dict[str, Any],
    ) -> dict[str, Any]:
        contents = [
            {"role": _ROLE_MAP[m["role"]], "parts": [{"text": m["content"]}]}
            for m in self._prepare_messages(prompt, include_system=False)
            if m["role"] in _ROLE_MAP
        ]
        body: dict[str, Any] = {
            "contents": contents,
            "generationConfig": {
                "temperature": params["temperature"],
                "maxOutputTokens": params["max_tokens"],
            },
        }

        system = self._effective_system_prompt(system_prompt)
        if system:
            body["systemInstruction"] = {"parts": [{"text": system}]}

        return body

    def _parse_response(self, data: dict[str, Any], params: dict[str, Any]) -> LLMResponse:
        candidates = data.get("candidates") or []
        if not candidates:
            block_reason = data.get("promptFeedback", {}).get("blockReason")
            if block_reason:
                raise LLMContentFilterError(
                    f"Prompt blocked: {block_reason}",
                    **self._error_kwargs(),
                )
            raise KeyError("candidates")

        candidate = candidates[0]
        finish_reason = candidate.get("finishReason")
        parts = candidate.get("content", {}).get("parts", [])
        if not parts and finish_reason == "SAFETY":
            raise LLMContentFilterError(
                "Response blocked by safety filters",
                **self._error_kwargs(),
            )

        usage = None
        metadata = data.get("usageMetadata")
        if metadata:
            usage = {
                "prompt_tokens": metadata.get("promptTokenCount", 0),
                "completion_tokens": metadata.get("candidatesTokenCount", 0),
                "total_tokens": metadata.get("totalTokenCount", 0),
            }

        return LLMResponse(
            content="".join(part.get("text", "") for part in parts),
            model=data.get("modelVersion", params["model"]),
            finish_reason=finish_reason,
            usage=usage,
            raw_response=data,
        )
