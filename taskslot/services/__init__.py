"""
Service layer helpers that orchestrate adapters and domain logic.
"""

from .task_request import TaskRequest, extract_schedule_command, strip_schedule_command
from .task_scheduler import CalendarClientProtocol, TaskSchedulerService

__all__ = [
    "CalendarClientProtocol",
    "TaskRequest",
    "TaskSchedulerService",
    "extract_schedule_command",
    "strip_schedule_command",
]
