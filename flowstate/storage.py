# flowstate/storage.py

from __future__ import annotations

import asyncio
import contextlib
import json
import logging
import os
from collections.abc import Callable
from pathlib import Path

from pydantic import ValidationError as PydanticValidationError

from flowstate.errors import InvalidInputError, StorageCorruptionError, StorageIOError
from flowstate.models.task import Task, sample_tasks

logger = logging.getLogger("flowstate.storage")


class _Corrupt(Exception):
    """Internal signal: the document exists but is not a task array."""


class TaskStorage:
    """
    Whole-collection JSON store with atomic replace.

    The document is always rewritten in full: `<file>.tmp` first, then
    `os.replace` over the real path, so readers see either the old or the
    new document and never a partial one.

    Blocking file calls run in a worker thread (`asyncio.to_thread`).
    """

    def __init__(
        self,
        path: str | Path,
        *,
        seed: str = "empty",
        strict: bool = False,
        on_reseed: Callable[[str], None] | None = None,
    ) -> None:
        if seed not in ("empty", "sample"):
            raise ValueError(f"unknown seed mode: {seed!r}")
        self.path = Path(path)
        self.tmp_path = self.path.with_name(self.path.name + ".tmp")
        self.seed = seed
        self.strict = strict
        self.on_reseed = on_reseed
        self.reseed_count = 0

    # ---- public API ----

    async def ensure_storage_location(self) -> None:
        await asyncio.to_thread(self._ensure_dir)

    async def load(self) -> list[Task]:
        await self.ensure_storage_location()

        try:
            return await asyncio.to_thread(self._read)
        except FileNotFoundError:
            return await self._reseed("missing")
        except _Corrupt as exc:
            reason = str(exc)
        except OSError as exc:
            reason = f"unreadable: {exc}"

        if self.strict:
            logger.error("storage_corrupted", extra={"path": str(self.path), "reason": reason})
            raise StorageCorruptionError(f"{self.path}: {reason}")
        return await self._reseed(reason)

    async def save(self, tasks: list[Task]) -> None:
        if not isinstance(tasks, list):
            raise InvalidInputError(f"tasks must be a list, got {type(tasks).__name__}")

        payload = json.dumps(
            [t.to_record() if isinstance(t, Task) else t for t in tasks],
            indent=2,
            ensure_ascii=False,
        )
        await self.ensure_storage_location()
        await asyncio.to_thread(self._write_atomic, payload)
        logger.debug("storage_written", extra={"path": str(self.path), "count": len(tasks)})

    # ---- low-level helpers ----

    def _ensure_dir(self) -> None:
        if not self.path.parent.exists():
            self.path.parent.mkdir(parents=True, exist_ok=True)
            logger.info("storage_dir_created", extra={"path": str(self.path.parent)})

    def _read(self) -> list[Task]:
        try:
            raw = self.path.read_text(encoding="utf-8")
        except UnicodeDecodeError as exc:
            raise _Corrupt(f"not UTF-8 text: {exc.reason}") from exc
        if not raw.strip():
            raise _Corrupt("empty document")

        try:
            data = json.loads(raw)
        except ValueError as exc:
            raise _Corrupt(f"invalid JSON: {exc}") from exc

        if not isinstance(data, list):
            raise _Corrupt(f"expected an array, got {type(data).__name__}")

        try:
            return [Task.model_validate(item) for item in data]
        except PydanticValidationError as exc:
            raise _Corrupt(f"malformed task record: {exc.error_count()} error(s)") from exc

    def _write_atomic(self, payload: str) -> None:
        try:
            with open(self.tmp_path, "w", encoding="utf-8") as fh:
                fh.write(payload)
                fh.flush()
                os.fsync(fh.fileno())
            os.replace(self.tmp_path, self.path)
        except OSError as exc:
            with contextlib.suppress(OSError):
                self.tmp_path.unlink()
            logger.error("storage_write_failed", extra={"path": str(self.path), "error": str(exc)})
            raise StorageIOError(f"could not write {self.path}: {exc}") from exc

    def _seed_tasks(self) -> list[Task]:
        return sample_tasks() if self.seed == "sample" else []

    async def _reseed(self, reason: str) -> list[Task]:
        tasks = self._seed_tasks()
        self.reseed_count += 1
        level = logging.INFO if reason == "missing" else logging.WARNING
        logger.log(
            level,
            "storage_reseeded",
            extra={"path": str(self.path), "reason": reason, "seed": self.seed, "count": len(tasks)},
        )
        if self.on_reseed is not None:
            self.on_reseed(reason)
        await self.save(tasks)
        return tasks
