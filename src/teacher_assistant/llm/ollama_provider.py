"""
Ollama native chat adapter.

Credentials: none; the configured base URL is the authoritative setting.
"""

from typing import Any, Optional

from teacher_assistant.llm.base import LLMResponse
from teacher_assistant.llm.config import Message
from teacher_assistant.llm.http_provider import HTTPProvider


class OllamaProvider(HTTPProvider):
    """
    Adapter for a local or remote Ollama server (``POST /api/chat``).

    Example:
        ```python
        config = LLMConfig(
            provider=ProviderType.OLLAMA,
            model="llama3.1",
            base_url="http://localhost:11434",
        )
        provider = OllamaProvider(config)
        ```
    """

    @property
    def base_url(self) -> str:
        return self.config.base_url

    def _completion_path(self, params: dict[str, Any]) -> str:
        return "/api/chat"

    def _build_request_body(
        self,
        prompt: str | list[Message],
        system_prompt: Optional[str],
        params: dict[str, Any],
    ) -> dict[str, Any]:
        return {
            "model": params["model"],
            "messages": self._prepare_messages(prompt, system_prompt),
            "stream": False,
            "options": {
                "temperature": params["temperature"],
                "num_predict": params["max_tokens"],
            },
        }

    def _parse_response(self, data: dict[str, Any], params: dict[str, Any]) -> LLMResponse:
        prompt_tokens = data.get("prompt_eval_count")
        completion_tokens = data.get("eval_count")
        usage = None
        if prompt_tokens is not None or completion_tokens is not None:
            usage = {
                "prompt_tokens": prompt_tokens or 0,
                "completion_tokens": completion_tokens or 0,
                "total_tokens": (prompt_tokens or 0) + (completion_tokens or 0),
            }

        return LLMResponse(
            content=data["message"]["content"],
            model=data.get("model", params["model"]),
            finish_reason=data.get("done_reason"),
            usage=usage,
            raw_response=data,
        )
