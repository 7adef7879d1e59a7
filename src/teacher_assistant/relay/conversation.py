"""
In-memory conversation state owned by a single relay instance.
"""

from typing import Iterator, Optional, Sequence

from teacher_assistant.llm.config import Message, MessageRole


class Conversation:
    """
    Ordered list of role-tagged turns.

    Lives as long as the relay that created it and is never shared. The
    history is unbounded unless ``max_turns`` is set, in which case the
    oldest turns are dropped first.
    """

    def __init__(self, max_turns: Optional[int] = None):
        if max_turns is not None and max_turns < 1:
            raise ValueError("max_turns must be at least 1")
        self.max_turns = max_turns
        self._turns: list[Message] = []

    def append(self, role: MessageRole | str, content: str) -> Message:
        """Add a turn at the end and return it."""
        turn = Message(role=MessageRole(role), content=content)
        self._turns.append(turn)
        if self.max_turns is not None and len(self._turns) > self.max_turns:
            del self._turns[: len(self._turns) - self.max_turns]
        return turn

    def history(self) -> tuple[Message, ...]:
        """Read-only snapshot of the turns, oldest first."""
        return tuple(self._turns)

    def clear(self) -> None:
        self._turns.clear()

    def __len__(self) -> int:
        return len(self._turns)

    def __iter__(self) -> Iterator[Message]:
        return iter(self.history())

    def __repr__(self) -> str:
        return f"Conversation(turns={len(self._turns)}, max_turns={self.max_turns})"


def last_user_turn(turns: Sequence[Message]) -> Optional[Message]:
    """Find the most recent user turn, scanning backward from the end."""
    for turn in reversed(turns):
        if turn.role == MessageRole.USER:
            return turn
    return None
