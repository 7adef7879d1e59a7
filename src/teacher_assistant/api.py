"""
RPC entry point used by the course page widget.

The host web framework is responsible for authentication and for checking
that the caller may use the assistant in the course; ``send_message`` only
validates the payload and relays it.

Input:  ``{"courseid": int, "message": str}``
Output: ``{"success": bool, "message": str}``
"""

import logging
from typing import Any, Optional

from pydantic import ValidationError

from teacher_assistant.relay.message_relay import MessageRelay
from teacher_assistant.relay.models import RelayRequest, RelayResponse
from teacher_assistant.relay.strings import get_string

logger = logging.getLogger(__name__)


async def send_message(
    courseid: Any,
    message: Any,
    *,
    relay: Optional[MessageRelay] = None,
    **relay_kwargs: Any,
) -> dict[str, Any]:
    """
    Relay a message from the chat widget.

    A blank message never reaches the provider. When no relay is passed one
    is built from ``relay_kwargs`` for this call only and closed afterwards.

    Args:
        courseid: Course ID from the request
        message: The user's message
        relay: Optional existing relay to use
        **relay_kwargs: Arguments for building a MessageRelay

    Returns:
        ``{"success": bool, "message": str}``
    """
    try:
        request = RelayRequest(courseid=courseid, message=message)
    except ValidationError as e:
        logger.info(f"Rejected send_message request: {e.errors()}")
        return RelayResponse.failure(
            f"{get_string('error')}: {get_string('invalidrequest')}"
        ).model_dump()

    owned = relay is None
    if relay is None:
        relay = MessageRelay(**relay_kwargs)

    try:
        # A setup error is reported by send() with its own message
        if relay.setup_error is None and not relay.is_ready():
            return RelayResponse.failure(
                f"{get_string('error')}: {get_string('agentnotconfigured')}"
            ).model_dump()

        response = await relay.send(request.course_id, request.message)
        return response.model_dump()
    finally:
        if owned:
            await relay.close()
