# flowstate/task/stats_service.py

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable
from datetime import datetime
from typing import Optional

from flowstate.models.task import (
    PRIORITY_VALUES,
    STATUS_VALUES,
    UNCATEGORIZED,
    Task,
    parse_datetime,
    utc_now,
)
from flowstate.schemas.task_schema import PriorityBreakdown, StatusBreakdown, TaskStats


def is_overdue(task: Task, now: datetime) -> bool:
    if task.completed:
        return False
    due = parse_datetime(task.dueDate)
    return due is not None and due < now


def compute_stats(tasks: Iterable[Task], now: Optional[datetime] = None) -> TaskStats:
    """Summary over one snapshot of the collection. Nothing is cached."""
    tasks = list(tasks)
    now = now or utc_now()

    completed = sum(1 for t in tasks if t.completed)
    priorities = Counter(t.priority for t in tasks)
    statuses = Counter(t.status for t in tasks)
    categories = Counter(t.category or UNCATEGORIZED for t in tasks)

    return TaskStats(
        total=len(tasks),
        completed=completed,
        pending=len(tasks) - completed,
        overdue=sum(1 for t in tasks if is_overdue(t, now)),
        byPriority=PriorityBreakdown(**{p: priorities[p] for p in PRIORITY_VALUES}),
        byStatus=StatusBreakdown(**{s: statuses[s] for s in STATUS_VALUES}),
        byCategory=dict(categories),
    )
