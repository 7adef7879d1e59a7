"""
Message relay between the course page and the configured LLM provider.

This is the main entry point for chat functionality. It:
1. Resolves configuration (once, at construction)
2. Selects the provider adapter
3. Prefixes the message with course context
4. Calls the adapter under a timeout
5. Normalizes the reply, records history and the audit trail
6. Returns a RelayResponse

The relay never raises past ``send`` or ``send_conversation``; every
failure becomes a ``RelayResponse`` with ``success=False``.
"""

import asyncio
import logging
from typing import Any, Mapping, Optional, Sequence, Union

from pydantic import ValidationError

from teacher_assistant.llm.base import LLMProvider
from teacher_assistant.llm.config import LLMConfig, Message, MessageRole
from teacher_assistant.llm.exceptions import (
    AdapterInvocationError,
    ConfigurationError,
    LLMError,
    LLMTimeoutError,
    UnsupportedProviderError,
)
from teacher_assistant.llm.factory import select_adapter
from teacher_assistant.relay.audit import AuditLogger, AuditRecord, AuditSink
from teacher_assistant.relay.context import (
    EMPTY_SCOPE,
    NullScopeProvider,
    ScopeContext,
    ScopeProvider,
    compose_prompt,
)
from teacher_assistant.relay.conversation import Conversation, last_user_turn
from teacher_assistant.relay.models import RelayResponse
from teacher_assistant.relay.replies import normalize_reply
from teacher_assistant.relay.strings import get_string
from teacher_assistant.settings.resolver import ConfigResolver, validate_config
from teacher_assistant.settings.store import EnvSettingsStore, SettingsStore

logger = logging.getLogger(__name__)

Turn = Union[Message, Mapping[str, Any]]


class MessageRelay:
    """
    Provider-agnostic chat relay.

    Each inbound request is expected to build its own relay, so history is
    scoped to one request unless the caller keeps the instance around.

    Usage:
        relay = MessageRelay(
            store=FileSettingsStore("settings.yaml"),
            scope_provider=StaticScopeProvider({7: {"course_name": "Algebra I"}}),
            user_id=42,
        )
        async with relay:
            response = await relay.send(7, "How do I grade quiz 3?")
            print(response.success, response.message)
    """

    def __init__(
        self,
        config: Optional[LLMConfig] = None,
        *,
        store: Optional[SettingsStore] = None,
        scope_provider: Optional[ScopeProvider] = None,
        audit_sink: Optional[AuditSink] = None,
        adapter: Optional[LLMProvider] = None,
        user_id: int = 0,
        max_history: Optional[int] = None,
    ) -> None:
        """
        Initialize the relay.

        Args:
            config: Explicit configuration. Resolved from ``store`` when None.
            store: Settings store (defaults to environment variables)
            scope_provider: Host collaborator describing courses
            audit_sink: Where exchanges are recorded (defaults to a no-op sink)
            adapter: Pre-built adapter, bypassing provider selection
            user_id: The calling user, for scope lookup and auditing
            max_history: Optional bound on the in-memory conversation
        """
        self.user_id = user_id
        self.scope_provider = scope_provider or NullScopeProvider()
        self.audit = AuditLogger(audit_sink)
        self.conversation = Conversation(max_turns=max_history)

        self.config: Optional[LLMConfig] = None
        self.adapter: Optional[LLMProvider] = None
        self._setup_error: Optional[LLMError] = None

        try:
            if config is None:
                config = ConfigResolver(store or EnvSettingsStore()).resolve()
            self.config = config
            self.adapter = adapter if adapter is not None else select_adapter(config)
        except (ConfigurationError, UnsupportedProviderError) as e:
            logger.warning(f"Relay setup failed: {e}")
            self._setup_error = e
        except Exception as e:
            logger.error(f"Relay setup failed: {e}", exc_info=e)
            error = ConfigurationError(f"Failed to load settings: {e}")
            error.__cause__ = e
            self._setup_error = error

    @property
    def setup_error(self) -> Optional[LLMError]:
        """The error that prevented setup, if any."""
        return self._setup_error

    def is_ready(self) -> bool:
        """Check that the relay has a configured provider and an adapter."""
        return (
            self._setup_error is None
            and self.config is not None
            and self.config.is_configured()
            and self.adapter is not None
        )

    async def send(
        self,
        course_id: int,
        message: str,
        *,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
        model: Optional[str] = None,
        system_prompt: Optional[str] = None,
    ) -> RelayResponse:
        """
        Relay a single message.

        Args:
            course_id: Course the question is asked in
            message: The user's message (non-empty)
            temperature: Override the configured temperature
            max_tokens: Override the configured token limit
            model: Override the configured model
            system_prompt: Override the configured system prompt

        Returns:
            RelayResponse with the reply, or a human-readable error
        """
        try:
            adapter, config = self._require_adapter()
            scope = await self._build_scope(course_id)
            content = compose_prompt(scope, message)

            raw = await self._invoke(
                adapter,
                config,
                [Message.user(content)],
                system_prompt=system_prompt,
                temperature=temperature,
                max_tokens=max_tokens,
                model=model,
            )
            reply = normalize_reply(raw)

        except Exception as e:
            return self._failure(e)

        self.conversation.append(MessageRole.USER, message)
        self.conversation.append(MessageRole.ASSISTANT, reply)
        self._record(course_id, message, reply)

        return RelayResponse.ok(reply)

    async def send_conversation(
        self,
        course_id: int,
        turns: Sequence[Turn],
        *,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
        model: Optional[str] = None,
        system_prompt: Optional[str] = None,
    ) -> RelayResponse:
        """
        Relay a pre-built conversation.

        Only the final turn is sent; the provider side is assumed to manage
        multi-turn memory. The most recent user turn is what gets audited.

        Args:
            course_id: Course the conversation belongs to
            turns: Ordered turns, as Message objects or ``{role, content}`` dicts
            temperature: Override the configured temperature
            max_tokens: Override the configured token limit
            model: Override the configured model
            system_prompt: Override the configured system prompt

        Returns:
            RelayResponse with the reply, or a human-readable error
        """
        try:
            messages = [_to_message(turn) for turn in turns]
        except (ValidationError, KeyError, TypeError) as e:
            logger.warning(f"Rejected conversation with invalid turn: {e}")
            return RelayResponse.failure(f"{get_string('error')}: {get_string('invalidturn')}")

        if not messages:
            return RelayResponse.failure(
                f"{get_string('error')}: {get_string('emptyconversation')}"
            )

        try:
            adapter, config = self._require_adapter()
            raw = await self._invoke(
                adapter,
                config,
                [messages[-1]],
                system_prompt=system_prompt,
                temperature=temperature,
                max_tokens=max_tokens,
                model=model,
            )
            reply = normalize_reply(raw)

        except Exception as e:
            return self._failure(e)

        last_user = last_user_turn(messages)
        self._record(course_id, last_user.content if last_user else "", reply)

        return RelayResponse.ok(reply)

    def history(self) -> tuple[Message, ...]:
        """Turns exchanged through ``send`` on this relay, oldest first."""
        return self.conversation.history()

    def clear_history(self) -> None:
        self.conversation.clear()

    async def close(self) -> None:
        """Release the adapter's resources."""
        if self.adapter is not None:
            await self.adapter.close()

    async def __aenter__(self) -> "MessageRelay":
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()

    def _require_adapter(self) -> tuple[LLMProvider, LLMConfig]:
        if self._setup_error is not None:
            raise self._setup_error
        if self.adapter is None or self.config is None:
            raise ConfigurationError(get_string("agentnotconfigured"))
        issues = validate_config(self.config)
        if issues:
            raise ConfigurationError(
                "; ".join(issue.message for issue in issues),
                provider=self.config.provider.value,
                model=self.config.model,
            )
        return self.adapter, self.config

    async def _build_scope(self, course_id: int) -> ScopeContext:
        """Ask the host for course context. Lookup failures mean no context."""
        try:
            return await self.scope_provider.get_scope(course_id, self.user_id)
        except Exception as e:
            logger.warning(f"Failed to get course information for {course_id}: {e}")
            return EMPTY_SCOPE

    async def _invoke(
        self,
        adapter: LLMProvider,
        config: LLMConfig,
        turns: list[Message],
        *,
        system_prompt: Optional[str],
        **params: Any,
    ) -> Any:
        """Call the adapter, bounded by the configured timeout."""
        overrides = {key: value for key, value in params.items() if value is not None}
        try:
            return await asyncio.wait_for(
                adapter.complete(turns, system_prompt=system_prompt, **overrides),
                timeout=config.timeout,
            )
        except asyncio.TimeoutError:
            raise LLMTimeoutError(
                f"No reply within {config.timeout}s",
                provider=adapter.provider_name,
                model=adapter.model_name,
            )

    def _failure(self, error: Exception) -> RelayResponse:
        """
        Turn an exception into a failed response.

        Configuration problems are shown as is. Provider failures are
        reduced to their kind for the user; the full detail is logged.
        """
        if isinstance(error, (ConfigurationError, UnsupportedProviderError)):
            logger.warning(f"Relay configuration error: {error}")
            detail = error.message
        elif isinstance(error, AdapterInvocationError):
            logger.error(f"Provider call failed: {error}", exc_info=error)
            detail = f"{get_string('apirequestfailed')} ({error.kind})"
        else:
            logger.error(f"Unexpected relay error: {error}", exc_info=error)
            detail = f"{get_string('apirequestfailed')} (internal_error)"

        return RelayResponse.failure(f"{get_string('error')}: {detail}")

    def _record(self, course_id: int, message: str, reply: str) -> None:
        config = self.config
        record = AuditRecord(
            course_id=course_id,
            user_id=self.user_id,
            message=message,
            response=reply,
            provider=config.provider.value if config else "",
            model=config.model if config else "",
        )
        self.audit.record(record)

    def __repr__(self) -> str:
        return f"MessageRelay(config={self.config!r}, ready={self.is_ready()})"


def _to_message(turn: Turn) -> Message:
    if isinstance(turn, Message):
        return turn
    return Message(role=turn["role"], content=turn["content"])
