"""
OpenAI chat completions adapter.

Credentials: API key (bearer token) plus an optional organization ID.
"""

from typing import Any, Optional

from teacher_assistant.llm.base import LLMResponse
from teacher_assistant.llm.config import Message
from teacher_assistant.llm.http_provider import HTTPProvider


class OpenAIProvider(HTTPProvider):
    """
    Adapter for the OpenAI chat completions API.

    Example:
        ```python
        config = LLMConfig(
            provider=ProviderType.OPENAI,
            model="gpt-4o-mini",
            api_key="sk-...",
            organization_id="org-...",
        )
        async with OpenAIProvider(config) as provider:
            response = await provider.complete("What is a rubric?")
            print(response.content)
        ```
    """

    DEFAULT_BASE_URL = "https://api.openai.com/v1"

    def _build_headers(self) -> dict[str, str]:
        headers = super()._build_headers()

        api_key = self.config.get_api_key()
        if api_key:
            headers["Authorization"] = f"Bearer {api_key}"
        if self.config.organization_id:
            headers["OpenAI-Organization"] = self.config.organization_id

        return headers

    def _completion_path(self, params: dict[str, Any]) -> str:
        return "/chat/completions"

    def _build_request_body(
        self,
        prompt: str | list[Message],
        system_prompt: Optional[str],
        params: dict[str, Any],
    ) -> dict[str, Any]:
        return {
            "messages": self._prepare_messages(prompt, system_prompt),
            "stream": False,
            **params,
        }

    def _parse_response(self, data: dict[str, Any], params: dict[str, Any]) -> LLMResponse:
        choice = data["choices"][0]

        return LLMResponse(
            content=choice["message"]["content"] or "",
            model=data.get("model", params["model"]),
            finish_reason=choice.get("finish_reason"),
            usage=data.get("usage"),
            raw_response=data,
        )
