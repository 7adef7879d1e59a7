"""
Request and response shapes at the relay boundary.
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator


class RelayRequest(BaseModel):
    """
    Inbound chat request.

    Accepts the host's ``courseid`` key as well as ``course_id``.
    """

    model_config = ConfigDict(populate_by_name=True)

    course_id: int = Field(alias="courseid", description="Course the question is asked in")
    message: str = Field(description="The user's message")

    @field_validator("message")
    @classmethod
    def message_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Message must not be empty")
        return v


class RelayResponse(BaseModel):
    """
    Outcome of a relay call.

    On failure ``message`` holds a human-readable error, never a traceback.
    """

    success: bool
    message: str

    @classmethod
    def ok(cls, message: str) -> "RelayResponse":
        return cls(success=True, message=message)

    @classmethod
    def failure(cls, message: str) -> "RelayResponse":
        return cls(success=False, message=message)
