"""Closed enumerations shared by the API and the client."""

import enum


class PriorityLevel(str, enum.Enum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"


class TaskStatus(str, enum.Enum):
    PENDING = "Pending"
    IN_PROGRESS = "In Progress"
    DONE = "Done"


DEFAULT_PRIORITY = PriorityLevel.MEDIUM
DEFAULT_STATUS = TaskStatus.PENDING
