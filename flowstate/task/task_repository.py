# flowstate/task/task_repository.py

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Iterable
from datetime import datetime

from flowstate.errors import NotFoundError, ValidationError
from flowstate.models.task import (
    DEFAULT_ASSIGNEE,
    PRIORITY_VALUES,
    STATUS_VALUES,
    Priority,
    Task,
    TaskStatus,
    parse_datetime,
    to_iso,
    utc_now,
)
from flowstate.schemas.task_schema import TaskCreate, TaskFilters, TaskUpdate
from flowstate.storage import TaskStorage

logger = logging.getLogger("flowstate.task")

TRIMMED_FIELDS = ("title", "description", "category", "assignedTo", "tags")
SEARCH_FIELDS = ("title", "description", "tags", "category")


# ==========================
#  PURE HELPERS
# ==========================
def next_id(tasks: Iterable[Task]) -> int:
    return max((t.id for t in tasks), default=0) + 1


def matches_search(task: Task, term: str) -> bool:
    term = term.lower()
    return any(term in (getattr(task, name) or "").lower() for name in SEARCH_FIELDS)


def filter_tasks(tasks: Iterable[Task], filters: TaskFilters) -> list[Task]:
    result = list(tasks)
    if filters.search:
        result = [t for t in result if matches_search(t, filters.search)]
    if filters.category:
        result = [t for t in result if t.category == filters.category]
    if filters.priority:
        result = [t for t in result if t.priority == filters.priority]
    if filters.status:
        result = [t for t in result if t.status == filters.status]
    if filters.completed is not None:
        result = [t for t in result if t.completed == filters.completed]
    return result


def sort_newest_first(tasks: Iterable[Task]) -> list[Task]:
    """createdAt descending, ties by id descending; unparseable timestamps last."""

    def key(task: Task) -> tuple:
        created = parse_datetime(task.createdAt)
        return (created is not None, created.timestamp() if created else 0.0, task.id)

    return sorted(tasks, key=key, reverse=True)


def _check_enums(values: dict) -> None:
    priority = values.get("priority")
    if priority is not None and priority not in PRIORITY_VALUES:
        raise ValidationError("Invalid priority. Must be low, medium, or high", ["priority"])

    status = values.get("status")
    if status is not None and status not in STATUS_VALUES:
        raise ValidationError(
            "Invalid status. Must be one of " + ", ".join(STATUS_VALUES),
            ["status"],
        )


def _trim(values: dict) -> dict:
    out = dict(values)
    for name in TRIMMED_FIELDS:
        if isinstance(out.get(name), str):
            out[name] = out[name].strip()
    return out


# ==========================
#  REPOSITORY
# ==========================
class TaskRepository:
    """
    CRUD and filtering over the task collection held by a TaskStorage.

    Every storage access runs under one lock: writes as load -> validate ->
    mutate -> save, reads as a plain load. Two requests in this process
    never overwrite each other's changes, and a reseed triggered by a read
    never races a writer for the temp file.
    """

    def __init__(self, storage: TaskStorage, clock: Callable[[], datetime] = utc_now) -> None:
        self._storage = storage
        self._clock = clock
        self._lock = asyncio.Lock()

    async def all_tasks(self) -> list[Task]:
        async with self._lock:
            return await self._storage.load()

    async def list_tasks(self, filters: TaskFilters | None = None) -> list[Task]:
        async with self._lock:
            tasks = await self._storage.load()
        return sort_newest_first(filter_tasks(tasks, filters or TaskFilters()))

    async def get_task(self, task_id: int) -> Task:
        async with self._lock:
            tasks = await self._storage.load()
        return tasks[self._index(tasks, task_id)]

    async def create_task(self, data: TaskCreate) -> Task:
        values = _trim(data.model_dump())

        missing = []
        if not values.get("title"):
            missing.append("title")
        if not (values.get("dueDate") or "").strip():
            missing.append("dueDate")
        if missing:
            labels = {"title": "task title", "dueDate": "due date"}
            message = " and ".join(labels[m] for m in missing)
            verb = "is" if len(missing) == 1 else "are"
            raise ValidationError(f"{message.capitalize()} {verb} required", missing)
        _check_enums(values)
        status = values.get("status") or TaskStatus.TODO.value

        async with self._lock:
            tasks = await self._storage.load()
            stamp = to_iso(self._clock())
            task = Task(
                id=next_id(tasks),
                title=values["title"],
                description=values.get("description") or "",
                category=values.get("category") or "",
                priority=values.get("priority") or Priority.MEDIUM.value,
                dueDate=values["dueDate"],
                estimatedTime=values["estimatedTime"] if values.get("estimatedTime") is not None else "",
                assignedTo=values.get("assignedTo") or DEFAULT_ASSIGNEE,
                tags=values.get("tags") or "",
                status=status,
                completed=bool(values.get("completed")) or status == TaskStatus.COMPLETED.value,
                createdAt=stamp,
                updatedAt=stamp,
            )
            tasks.append(task)
            await self._storage.save(tasks)

        logger.info("task_created", extra={"task_id": task.id})
        return task

    async def update_task(self, task_id: int, data: TaskUpdate) -> Task:
        changes = _trim(data.supplied())
        _check_enums(changes)

        if "title" in changes and not changes["title"]:
            raise ValidationError("Task title cannot be empty", ["title"])
        if "dueDate" in changes and not changes["dueDate"].strip():
            raise ValidationError("Due date cannot be empty", ["dueDate"])
        if "assignedTo" in changes and not changes["assignedTo"]:
            changes["assignedTo"] = DEFAULT_ASSIGNEE
        if changes.get("status") == TaskStatus.COMPLETED.value:
            changes["completed"] = True

        async with self._lock:
            tasks = await self._storage.load()
            index = self._index(tasks, task_id)
            changes["updatedAt"] = to_iso(self._clock())
            updated = tasks[index].model_copy(update=changes)
            tasks[index] = updated
            await self._storage.save(tasks)

        logger.info("task_updated", extra={"task_id": task_id, "fields": sorted(changes)})
        return updated

    async def delete_task(self, task_id: int) -> int:
        async with self._lock:
            tasks = await self._storage.load()
            remaining = [t for t in tasks if t.id != task_id]
            if len(remaining) == len(tasks):
                raise NotFoundError(task_id)
            await self._storage.save(remaining)

        logger.info("task_deleted", extra={"task_id": task_id})
        return task_id

    @staticmethod
    def _index(tasks: list[Task], task_id: int) -> int:
        for i, task in enumerate(tasks):
            if task.id == task_id:
                return i
        raise NotFoundError(task_id)
