# flowstate/schemas/task_schema.py

from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, Union


# --------- For CREATE (POST) ----------
# Everything is optional at the type level: the repository decides what is
# missing so it can name every offending field in one 400 response.
class TaskCreate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    category: Optional[str] = None
    priority: Optional[str] = None
    dueDate: Optional[str] = None
    estimatedTime: Union[str, int, float, None] = None
    assignedTo: Optional[str] = None
    tags: Optional[str] = None
    status: Optional[str] = None
    completed: Optional[bool] = None


# --------- For UPDATE (PUT, merge semantics) ----------
class TaskUpdate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    category: Optional[str] = None
    priority: Optional[str] = None
    dueDate: Optional[str] = None
    estimatedTime: Union[str, int, float, None] = None
    assignedTo: Optional[str] = None
    tags: Optional[str] = None
    status: Optional[str] = None
    completed: Optional[bool] = None

    def supplied(self) -> dict:
        """Fields the caller actually sent with a non-null value."""
        return {k: v for k, v in self.model_dump(exclude_unset=True).items() if v is not None}


# --------- Query filters for GET /tasks ----------
class TaskFilters(BaseModel):
    search: Optional[str] = None
    category: Optional[str] = None
    priority: Optional[str] = None
    status: Optional[str] = None
    completed: Optional[bool] = None

    @classmethod
    def from_query(
        cls,
        search: Optional[str] = None,
        category: Optional[str] = None,
        priority: Optional[str] = None,
        status: Optional[str] = None,
        completed: Optional[str] = None,
    ) -> "TaskFilters":
        # only the literal "true" means completed; absent means no filter
        return cls(
            search=search or None,
            category=category or None,
            priority=priority or None,
            status=status or None,
            completed=None if completed is None else completed == "true",
        )


# --------- Responses ----------
class PriorityBreakdown(BaseModel):
    high: int = 0
    medium: int = 0
    low: int = 0


class StatusBreakdown(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    todo: int = 0
    in_progress: int = Field(default=0, alias="in-progress")
    review: int = 0
    blocked: int = 0
    completed: int = 0


class TaskStats(BaseModel):
    total: int
    completed: int
    pending: int
    overdue: int
    byPriority: PriorityBreakdown
    byStatus: StatusBreakdown
    byCategory: dict[str, int]


class TaskDeleted(BaseModel):
    message: str = "Task deleted successfully"
    id: int
