"""
Course scope context injected into the outbound prompt.

The relay does not look courses or roles up itself. The host supplies a
``ScopeProvider`` that knows the course name and the caller's role in it;
the relay only formats what it gets.
"""

import logging
from dataclasses import dataclass
from typing import Any, Mapping, Optional, Protocol, Union

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ScopeContext:
    """What the host knows about the course a question is asked in."""

    course_name: Optional[str] = None
    course_shortname: Optional[str] = None
    user_role: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ScopeContext":
        """Create from a dictionary, ignoring unknown keys."""
        return cls(
            course_name=data.get("course_name"),
            course_shortname=data.get("course_shortname"),
            user_role=data.get("user_role"),
        )

    def lines(self) -> list[str]:
        """Context lines in prompt order."""
        parts = []
        if self.course_name:
            parts.append(f"Course: {self.course_name}")
        if self.user_role:
            parts.append(f"User role: {self.user_role}")
        return parts

    def format(self) -> str:
        """Format as a ``Context:`` block, or an empty string if nothing is known."""
        parts = self.lines()
        if not parts:
            return ""
        return "Context:\n" + "\n".join(parts)


EMPTY_SCOPE = ScopeContext()


def compose_prompt(scope: ScopeContext, message: str) -> str:
    """
    Prefix the user's message with the scope context, if any.

    Example:
        >>> compose_prompt(ScopeContext(course_name="Algebra I", user_role="teacher"), "help")
        'Context:\\nCourse: Algebra I\\nUser role: teacher\\n\\nUser question: help'
    """
    context = scope.format()
    if not context:
        return message
    return f"{context}\n\nUser question: {message}"


class ScopeProvider(Protocol):
    """Host collaborator that describes a course for a given user."""

    async def get_scope(self, course_id: int, user_id: int) -> ScopeContext:
        ...


class NullScopeProvider:
    """Knows nothing; every prompt goes out without context."""

    async def get_scope(self, course_id: int, user_id: int) -> ScopeContext:
        return EMPTY_SCOPE


class StaticScopeProvider:
    """
    Scope data from a fixed mapping of course ID to context.

    Values may be ``ScopeContext`` instances or plain dicts with
    ``course_name``, ``course_shortname`` and ``user_role`` keys.
    """

    def __init__(
        self,
        scopes: Optional[Mapping[int, Union[ScopeContext, Mapping[str, Any]]]] = None,
    ):
        self._scopes: dict[int, ScopeContext] = {}
        for course_id, scope in (scopes or {}).items():
            self.set_scope(course_id, scope)

    def set_scope(self, course_id: int, scope: Union[ScopeContext, Mapping[str, Any]]) -> None:
        if not isinstance(scope, ScopeContext):
            scope = ScopeContext.from_dict(scope)
        self._scopes[course_id] = scope

    async def get_scope(self, course_id: int, user_id: int) -> ScopeContext:
        scope = self._scopes.get(course_id)
        if scope is None:
            logger.debug(f"No scope data for course {course_id}")
            return EMPTY_SCOPE
        return scope
