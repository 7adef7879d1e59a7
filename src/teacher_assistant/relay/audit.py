"""
Best-effort audit trail of relayed exchanges.

There is no durable schema yet, so the default sink only logs what it would
have written. ``JsonlAuditSink`` is the extension point for durable storage:
implement ``AuditSink.write`` against a database to replace it.

Storage structure (JsonlAuditSink):
    {path}            # one JSON object per line, appended
"""

import json
import logging
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional, Protocol, Union

from teacher_assistant.llm.exceptions import AuditError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AuditRecord:
    """One relayed exchange."""

    course_id: int
    user_id: int
    message: str
    response: str
    provider: str
    model: str
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        data = asdict(self)
        data["timestamp"] = self.timestamp.isoformat()
        return data


class AuditSink(Protocol):
    """Destination for audit records. May raise; the AuditLogger contains it."""

    def write(self, record: AuditRecord) -> None:
        ...


class NullAuditSink:
    """Write-disabled sink: records are logged at DEBUG and never stored."""

    def write(self, record: AuditRecord) -> None:
        logger.debug(f"AI interaction (not stored): {json.dumps(record.to_dict())}")


class MemoryAuditSink:
    """Keeps records in memory."""

    def __init__(self) -> None:
        self.records: list[AuditRecord] = []

    def write(self, record: AuditRecord) -> None:
        self.records.append(record)


class JsonlAuditSink:
    """Appends records to a JSON-lines file."""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path).expanduser()

    def write(self, record: AuditRecord) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with self.path.open("a", encoding="utf-8") as f:
                f.write(json.dumps(record.to_dict(), ensure_ascii=False) + "\n")
        except OSError as e:
            raise AuditError(f"Failed to write audit record to {self.path}: {e}")

    def __repr__(self) -> str:
        return f"JsonlAuditSink(path={str(self.path)!r})"


class AuditLogger:
    """
    Records exchanges through a sink without ever raising.

    Sink failures are reported through logging only.
    """

    def __init__(self, sink: Optional[AuditSink] = None):
        self.sink = sink if sink is not None else NullAuditSink()

    def record(self, record: AuditRecord) -> None:
        try:
            self.sink.write(record)
        except AuditError as e:
            logger.warning(f"Failed to log AI interaction: {e}")
        except Exception as e:
            logger.warning(
                f"Failed to log AI interaction: {AuditError(str(e))}",
                exc_info=True,
            )
