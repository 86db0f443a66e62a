"""Tests for TaskRepository."""

import asyncio

import pytest

from flowstate.errors import NotFoundError, ValidationError
from flowstate.models.task import Task
from flowstate.schemas.task_schema import TaskCreate, TaskFilters, TaskUpdate
from flowstate.task.task_repository import filter_tasks, next_id, sort_newest_first


def new(title: str = "Task", **fields) -> TaskCreate:
    fields.setdefault("dueDate", "2025-01-01T00:00")
    return TaskCreate(title=title, **fields)


class TestCreate:
    async def test_assigns_sequential_ids(self, repository):
        first = await repository.create_task(new("A"))
        second = await repository.create_task(new("B"))

        assert (first.id, second.id) == (1, 2)

    async def test_next_id_is_max_plus_one(self, repository):
        for title in "ABC":
            await repository.create_task(new(title))
        await repository.delete_task(2)

        created = await repository.create_task(new("D"))

        assert created.id == 4

    def test_next_id_helper(self):
        assert next_id([]) == 1
        assert next_id([Task(id=3), Task(id=9), Task(id=4)]) == 10

    async def test_applies_defaults(self, repository):
        task = await repository.create_task(new("Defaults"))

        assert task.description == ""
        assert task.category == ""
        assert task.priority == "medium"
        assert task.status == "todo"
        assert task.completed is False
        assert task.assignedTo == "Self"
        assert task.tags == ""
        assert task.estimatedTime == ""
        assert task.createdAt == task.updatedAt
        assert task.createdAt.endswith("Z")

    async def test_trims_strings(self, repository):
        task = await repository.create_task(
            new(
                "  Padded  ",
                description=" desc ",
                category=" Work ",
                tags=" a,b ",
                assignedTo="   ",
            )
        )

        assert task.title == "Padded"
        assert task.description == "desc"
        assert task.category == "Work"
        assert task.tags == "a,b"
        assert task.assignedTo == "Self"

    async def test_persists(self, repository, storage):
        await repository.create_task(new("Stored", estimatedTime=3))

        tasks = await storage.load()

        assert [t.title for t in tasks] == ["Stored"]
        assert tasks[0].estimatedTime == 3

    @pytest.mark.parametrize("title", [None, "", "   "])
    async def test_missing_title_rejected(self, repository, storage, title):
        with pytest.raises(ValidationError) as exc_info:
            await repository.create_task(TaskCreate(title=title, dueDate="2025-01-01"))

        assert exc_info.value.fields == ["title"]
        assert await storage.load() == []

    async def test_missing_due_date_rejected(self, repository):
        with pytest.raises(ValidationError, match="Due date is required") as exc_info:
            await repository.create_task(TaskCreate(title="No date"))

        assert exc_info.value.fields == ["dueDate"]

    async def test_names_all_missing_fields(self, repository):
        with pytest.raises(ValidationError) as exc_info:
            await repository.create_task(TaskCreate())

        assert exc_info.value.fields == ["title", "dueDate"]

    async def test_invalid_priority_rejected(self, repository, storage):
        with pytest.raises(ValidationError) as exc_info:
            await repository.create_task(new(priority="urgent"))

        assert exc_info.value.fields == ["priority"]
        assert await storage.load() == []

    async def test_invalid_status_rejected(self, repository):
        with pytest.raises(ValidationError) as exc_info:
            await repository.create_task(new(status="done"))

        assert exc_info.value.fields == ["status"]

    async def test_completed_status_sets_completed_flag(self, repository, storage):
        task = await repository.create_task(new("Already done", status="completed"))

        assert task.completed is True
        assert (await storage.load())[0].completed is True

    async def test_concurrent_creates_get_unique_ids(self, repository, storage):
        await asyncio.gather(*(repository.create_task(new(f"T{i}")) for i in range(10)))

        ids = [t.id for t in await storage.load()]

        assert sorted(ids) == list(range(1, 11))


class TestUpdate:
    async def test_merges_only_supplied_fields(self, repository):
        task = await repository.create_task(new("Original", category="Work", tags="x"))

        updated = await repository.update_task(task.id, TaskUpdate(title="  Renamed "))

        assert updated.title == "Renamed"
        assert updated.category == "Work"
        assert updated.tags == "x"
        assert updated.createdAt == task.createdAt
        assert updated.updatedAt > task.updatedAt

    async def test_null_fields_are_ignored(self, repository):
        task = await repository.create_task(new("Keep", description="stay"))

        updated = await repository.update_task(task.id, TaskUpdate(description=None, priority="high"))

        assert updated.description == "stay"
        assert updated.priority == "high"

    async def test_status_completed_forces_completed(self, repository, storage):
        task = await repository.create_task(new("Finish me"))

        updated = await repository.update_task(task.id, TaskUpdate(status="completed"))

        assert updated.completed is True
        stored = (await storage.load())[0]
        assert stored.completed is True
        assert stored.status == "completed"

    async def test_completed_flag_independent_of_other_statuses(self, repository):
        task = await repository.create_task(new("Flag"))

        updated = await repository.update_task(task.id, TaskUpdate(completed=True))

        assert updated.completed is True
        assert updated.status == "todo"

    async def test_invalid_priority_rejected(self, repository):
        task = await repository.create_task(new("Enum"))

        with pytest.raises(ValidationError):
            await repository.update_task(task.id, TaskUpdate(priority="urgent"))

        assert (await repository.get_task(task.id)).priority == "medium"

    async def test_blank_title_rejected(self, repository):
        task = await repository.create_task(new("Named"))

        with pytest.raises(ValidationError) as exc_info:
            await repository.update_task(task.id, TaskUpdate(title="   "))

        assert exc_info.value.fields == ["title"]

    async def test_blank_assignee_becomes_self(self, repository):
        task = await repository.create_task(new("Owner", assignedTo="Jane"))

        updated = await repository.update_task(task.id, TaskUpdate(assignedTo=" "))

        assert updated.assignedTo == "Self"

    async def test_unknown_id(self, repository):
        with pytest.raises(NotFoundError):
            await repository.update_task(42, TaskUpdate(title="Ghost"))


class TestReadAndDelete:
    async def test_get_unknown_id(self, repository):
        with pytest.raises(NotFoundError):
            await repository.get_task(1)

    async def test_delete(self, repository):
        task = await repository.create_task(new("Doomed"))

        assert await repository.delete_task(task.id) == task.id

        with pytest.raises(NotFoundError):
            await repository.get_task(task.id)

    async def test_delete_unknown_id(self, repository):
        await repository.create_task(new("Survivor"))

        with pytest.raises(NotFoundError):
            await repository.delete_task(99)

        assert len(await repository.list_tasks()) == 1

    async def test_list_is_newest_first(self, repository):
        for title in ("old", "mid", "new"):
            await repository.create_task(new(title))

        tasks = await repository.list_tasks()

        assert [t.title for t in tasks] == ["new", "mid", "old"]

    async def test_reseed_on_read_does_not_clobber_concurrent_write(self, repository, storage):
        listed, created, _ = await asyncio.gather(
            repository.list_tasks(),
            repository.create_task(new("Written")),
            repository.get_task(1),
        )

        assert listed == []
        assert storage.reseed_count == 1
        assert [t.id for t in await storage.load()] == [created.id]


class TestFilters:
    @pytest.fixture()
    def tasks(self):
        return [
            Task(id=1, title="Write report", category="Work", priority="high", tags="docs"),
            Task(id=2, title="Gym", category="Health", status="completed", completed=True),
            Task(id=3, title="Groceries", description="Buy MILK", category="Home", priority="low"),
            Task(id=4, title="Plan sprint", category="Work", tags="Planning,team"),
        ]

    def test_no_filters(self, tasks):
        assert len(filter_tasks(tasks, TaskFilters())) == 4

    def test_search_is_case_insensitive_across_fields(self, tasks):
        assert [t.id for t in filter_tasks(tasks, TaskFilters(search="milk"))] == [3]
        assert [t.id for t in filter_tasks(tasks, TaskFilters(search="PLANNING"))] == [4]
        assert [t.id for t in filter_tasks(tasks, TaskFilters(search="health"))] == [2]

    def test_exact_matches_compose(self, tasks):
        result = filter_tasks(tasks, TaskFilters(category="Work", priority="high"))

        assert [t.id for t in result] == [1]

    def test_category_is_exact(self, tasks):
        assert filter_tasks(tasks, TaskFilters(category="work")) == []

    def test_completed_false(self, tasks):
        result = filter_tasks(tasks, TaskFilters(completed=False))

        assert [t.id for t in result] == [1, 3, 4]

    def test_status(self, tasks):
        assert [t.id for t in filter_tasks(tasks, TaskFilters(status="completed"))] == [2]

    def test_from_query_completed_parsing(self):
        assert TaskFilters.from_query().completed is None
        assert TaskFilters.from_query(completed="true").completed is True
        assert TaskFilters.from_query(completed="false").completed is False
        assert TaskFilters.from_query(completed="yes").completed is False

    def test_sort_puts_unparseable_timestamps_last(self):
        tasks = [
            Task(id=1, createdAt="2025-01-01T00:00:00.000Z"),
            Task(id=2, createdAt="garbage"),
            Task(id=3, createdAt="2025-03-01T00:00:00.000Z"),
            Task(id=4, createdAt="2025-03-01T00:00:00.000Z"),
        ]

        assert [t.id for t in sort_newest_first(tasks)] == [4, 3, 1, 2]
