"""
Structured task requests handed over by the conversation layer.

The assistant embeds a ``SCHEDULE_TASK:{...}`` command in its reply once it
has gathered enough details about a task. This module turns that command
into a validated ``TaskRequest``.
"""

import json
from datetime import datetime
from typing import Literal, Optional

import pendulum
from pendulum import DateTime
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from ..domain.exceptions import InvalidRequestError

SCHEDULE_COMMAND_PREFIX = "SCHEDULE_TASK:"


class TaskRequest(BaseModel):
    """A task to be placed on the calendar."""
    model_config = ConfigDict(populate_by_name=True)

    title: str
    description: str = ""
    priority: Literal["low", "medium", "high"] = "medium"
    estimated_duration: Optional[int] = Field(default=None, gt=0, alias="estimatedDuration")
    deadline: Optional[datetime] = None
    preferred_start_date: Optional[datetime] = Field(default=None, alias="preferredStartDate")

    @field_validator("title")
    @classmethod
    def validate_title(cls, value: str) -> str:
        """Titles become event summaries and must not be blank."""
        value = value.strip()
        if not value:
            raise ValueError("title must not be empty")
        return value

    @field_validator("description", mode="before")
    @classmethod
    def default_description(cls, value):
        return value or ""

    def deadline_in(self, timezone: str) -> Optional[DateTime]:
        """Deadline as an aware instant; naive values are read in ``timezone``."""
        return _to_instant(self.deadline, timezone)

    def preferred_start_in(self, timezone: str) -> Optional[DateTime]:
        """Preferred start as an aware instant; naive values are read in ``timezone``."""
        return _to_instant(self.preferred_start_date, timezone)


def _to_instant(value: Optional[datetime], timezone: str) -> Optional[DateTime]:
    if value is None:
        return None
    return pendulum.instance(value, tz=timezone)


def _locate_command(message: str):
    index = message.find(SCHEDULE_COMMAND_PREFIX)
    if index < 0:
        return None

    payload_start = index + len(SCHEDULE_COMMAND_PREFIX)
    try:
        payload, payload_end = json.JSONDecoder().raw_decode(message, payload_start)
    except json.JSONDecodeError as exc:
        raise InvalidRequestError(f"Malformed {SCHEDULE_COMMAND_PREFIX} payload: {exc}") from exc

    return index, payload_end, payload


def extract_schedule_command(message: str) -> Optional[TaskRequest]:
    """
    Parse the schedule command embedded in an assistant message.

    Args:
        message: Assistant reply text

    Returns:
        TaskRequest, or None if the message carries no command

    Raises:
        InvalidRequestError: If the command payload is not valid JSON or
            does not describe a task
    """
    located = _locate_command(message)
    if located is None:
        return None

    _, _, payload = located
    if not isinstance(payload, dict):
        raise InvalidRequestError(f"{SCHEDULE_COMMAND_PREFIX} payload must be a JSON object")

    try:
        return TaskRequest.model_validate(payload)
    except ValidationError as exc:
        raise InvalidRequestError(f"Invalid task request: {exc}") from exc


def strip_schedule_command(message: str) -> str:
    """Remove the schedule command from an assistant message."""
    located = _locate_command(message)
    if located is None:
        return message.strip()

    start, end, _ = located
    return (message[:start] + message[end:]).strip()
