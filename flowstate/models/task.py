# flowstate/models/task.py

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, ValidationInfo, field_validator


class Priority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class TaskStatus(str, Enum):
    TODO = "todo"
    IN_PROGRESS = "in-progress"
    REVIEW = "review"
    BLOCKED = "blocked"
    COMPLETED = "completed"


PRIORITY_VALUES = [p.value for p in Priority]
STATUS_VALUES = [s.value for s in TaskStatus]

DEFAULT_ASSIGNEE = "Self"
UNCATEGORIZED = "Uncategorized"


# ==========================
#  TIME HELPERS
# ==========================
def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def to_iso(moment: datetime) -> str:
    """UTC, millisecond precision, trailing Z (same shape browsers emit)."""
    return moment.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_datetime(value: object) -> Optional[datetime]:
    """Parse an ISO date-time; naive values are read as local time. None if unparseable."""
    if not isinstance(value, str) or not value.strip():
        return None
    try:
        parsed = datetime.fromisoformat(value.strip())
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.astimezone()
    return parsed


# ==========================
#  STORED RECORD
# ==========================
class Task(BaseModel):
    """
    One persisted task, exactly as it sits in the JSON document.

    Reads are lenient (older files may carry unknown keys, odd enum values
    or nulls); the repository enforces the rules on every write.
    """

    model_config = ConfigDict(extra="allow")

    id: int
    title: str = ""
    description: str = ""
    category: str = ""
    priority: str = Priority.MEDIUM.value
    dueDate: Optional[str] = None
    estimatedTime: Union[str, int, float, None] = ""
    assignedTo: str = DEFAULT_ASSIGNEE
    tags: str = ""
    status: str = TaskStatus.TODO.value
    completed: bool = False
    createdAt: Optional[str] = None
    updatedAt: Optional[str] = None

    @field_validator(
        "title", "description", "category", "priority", "assignedTo", "tags", "status", "completed",
        mode="before",
    )
    @classmethod
    def null_means_default(cls, value, info: ValidationInfo):
        if value is None:
            return cls.model_fields[info.field_name].default
        return value

    def to_record(self) -> dict:
        return self.model_dump(mode="json")


def sample_tasks(now: Optional[datetime] = None) -> list[Task]:
    """Demo collection written when the store is seeded in `sample` mode."""
    stamp = to_iso(now or utc_now())
    return [
        Task(
            id=1,
            title="Complete project proposal",
            description="Write comprehensive project proposal for Q2",
            category="Work",
            priority=Priority.HIGH.value,
            dueDate="2025-07-20T15:30",
            estimatedTime="4",
            assignedTo="John Doe",
            tags="project,urgent,proposal",
            status=TaskStatus.IN_PROGRESS.value,
            completed=False,
            createdAt=stamp,
            updatedAt=stamp,
        ),
        Task(
            id=2,
            title="Review team feedback",
            description="Go through team feedback on last sprint",
            category="Work",
            priority=Priority.MEDIUM.value,
            dueDate="2025-07-18T10:00",
            estimatedTime="2",
            assignedTo=DEFAULT_ASSIGNEE,
            tags="review,team",
            status=TaskStatus.TODO.value,
            completed=False,
            createdAt=stamp,
            updatedAt=stamp,
        ),
    ]
