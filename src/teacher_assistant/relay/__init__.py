"""
Chat relay for the teacher assistant.

Components:
- MessageRelay: Main orchestrator (send, send_conversation)
- Conversation: In-memory turn history
- ScopeContext / ScopeProvider: Course context injected into prompts
- AuditLogger and sinks: Best-effort record of each exchange
- normalize_reply: Reply shape normalization
"""

from teacher_assistant.relay.audit import (
    AuditLogger,
    AuditRecord,
    AuditSink,
    JsonlAuditSink,
    MemoryAuditSink,
    NullAuditSink,
)
from teacher_assistant.relay.context import (
    EMPTY_SCOPE,
    NullScopeProvider,
    ScopeContext,
    ScopeProvider,
    StaticScopeProvider,
    compose_prompt,
)
from teacher_assistant.relay.conversation import Conversation, last_user_turn
from teacher_assistant.relay.message_relay import MessageRelay
from teacher_assistant.relay.models import RelayRequest, RelayResponse
from teacher_assistant.relay.replies import (
    ObjectWithContent,
    PlainString,
    Reply,
    StructuredWithContent,
    Unknown,
    classify_reply,
    normalize_reply,
)

__all__ = [
    # Relay
    "MessageRelay",
    "RelayRequest",
    "RelayResponse",
    # Conversation
    "Conversation",
    "last_user_turn",
    # Context
    "ScopeContext",
    "ScopeProvider",
    "NullScopeProvider",
    "StaticScopeProvider",
    "EMPTY_SCOPE",
    "compose_prompt",
    # Audit
    "AuditRecord",
    "AuditSink",
    "AuditLogger",
    "NullAuditSink",
    "MemoryAuditSink",
    "JsonlAuditSink",
    # Replies
    "Reply",
    "ObjectWithContent",
    "PlainString",
    "StructuredWithContent",
    "Unknown",
    "classify_reply",
    "normalize_reply",
]
