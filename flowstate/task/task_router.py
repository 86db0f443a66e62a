# flowstate/task/task_router.py

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Request

from flowstate.models.task import Task
from flowstate.schemas.task_schema import TaskCreate, TaskDeleted, TaskFilters, TaskStats, TaskUpdate
from flowstate.task.stats_service import compute_stats
from flowstate.task.task_repository import TaskRepository

logger = logging.getLogger("flowstate.task")


def get_repository(request: Request) -> TaskRepository:
    return request.app.state.repository


# ==========================
#  ROUTER
# ==========================
router = APIRouter(
    prefix="/tasks",
    tags=["tasks"],
)


# Fixed-segment routes MUST be registered before /{task_id},
# otherwise "stats" is parsed as an id.
@router.get("/stats/overview", response_model=TaskStats)
async def get_task_stats(repo: TaskRepository = Depends(get_repository)):
    tasks = await repo.all_tasks()
    return compute_stats(tasks)


@router.get("", response_model=list[Task])
async def list_tasks(
    search: Optional[str] = None,
    category: Optional[str] = None,
    priority: Optional[str] = None,
    status: Optional[str] = None,
    completed: Optional[str] = None,
    repo: TaskRepository = Depends(get_repository),
):
    filters = TaskFilters.from_query(
        search=search,
        category=category,
        priority=priority,
        status=status,
        completed=completed,
    )
    tasks = await repo.list_tasks(filters)
    logger.debug("tasks_listed", extra={"count": len(tasks)})
    return tasks


@router.get("/{task_id}", response_model=Task)
async def get_task(task_id: int, repo: TaskRepository = Depends(get_repository)):
    return await repo.get_task(task_id)


@router.post("", response_model=Task, status_code=201)
async def create_task(data: TaskCreate, repo: TaskRepository = Depends(get_repository)):
    return await repo.create_task(data)


@router.put("/{task_id}", response_model=Task)
async def update_task(task_id: int, data: TaskUpdate, repo: TaskRepository = Depends(get_repository)):
    return await repo.update_task(task_id, data)


@router.delete("/{task_id}", response_model=TaskDeleted)
async def delete_task(task_id: int, repo: TaskRepository = Depends(get_repository)):
    deleted_id = await repo.delete_task(task_id)
    return TaskDeleted(id=deleted_id)
