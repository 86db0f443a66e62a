# tests/conftest.py

from __future__ import annotations

from collections.abc import AsyncGenerator, Callable
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from flowstate.config import Settings
from flowstate.main import create_app
from flowstate.storage import TaskStorage
from flowstate.task.task_repository import TaskRepository


@pytest.fixture()
def tasks_file(tmp_path: Path) -> Path:
    return tmp_path / "data" / "tasks.json"


@pytest.fixture()
def settings(tasks_file: Path) -> Settings:
    """Isolated settings: temp file, empty seed, no debug detail in errors."""
    return Settings(tasks_file=tasks_file, seed_mode="empty", environment="test")


@pytest.fixture()
def storage(tasks_file: Path) -> TaskStorage:
    return TaskStorage(tasks_file, seed="empty")


@pytest.fixture()
def clock() -> Callable[[], datetime]:
    """Deterministic clock that advances one second per call."""
    current = [datetime(2025, 1, 1, 12, 0, tzinfo=timezone.utc)]

    def tick() -> datetime:
        current[0] += timedelta(seconds=1)
        return current[0]

    return tick


@pytest.fixture()
def repository(storage: TaskStorage, clock: Callable[[], datetime]) -> TaskRepository:
    return TaskRepository(storage, clock=clock)


@pytest.fixture()
def app(settings: Settings) -> FastAPI:
    return create_app(settings)


@pytest.fixture()
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
