"""
Care Task Repository
====================

SQLite-backed storage collaborator for the care-task engine.
Satisfies :class:`app.domain.care_repository.CareStorage` structurally.

Writes are conditional (see ``CareTaskOperations``), so this repository
advertises ``supports_conditional_writes = True``.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING, Any, ClassVar

from app.domain.care_task import CareTask, Plant
from app.enums.care import TaskStatus

if TYPE_CHECKING:
    from infrastructure.database.sqlite_handler import SQLiteDatabaseHandler


@dataclass(frozen=True)
class CareTaskRepository:
    _backend: "SQLiteDatabaseHandler"

    supports_conditional_writes: ClassVar[bool] = True

    # Plants ------------------------------------------------------------------
    def get_plant(self, plant_id: int) -> Plant | None:
        return self._backend.get_plant_row(plant_id)

    def list_plants_by_user(self, user_id: int) -> list[Plant]:
        return self._backend.get_plants_for_user(user_id)

    def list_plant_ids(self) -> list[int]:
        return self._backend.get_all_plant_ids()

    # Tasks -------------------------------------------------------------------
    def list_pending_tasks(self, plant_id: int) -> list[CareTask]:
        return self._backend.get_pending_tasks_for_plant(plant_id)

    def create_task(self, task: CareTask) -> CareTask | None:
        task_id = self._backend.insert_pending_task(task)
        if task_id is None:
            return None
        return self._backend.get_task_row(task_id)

    def get_task(self, task_id: int) -> CareTask | None:
        return self._backend.get_task_row(task_id)

    def update_task(
        self,
        task_id: int,
        fields: dict[str, Any],
        *,
        expected_status: TaskStatus = TaskStatus.PENDING,
    ) -> CareTask | None:
        if not self._backend.update_task_if_status(task_id, fields, expected_status):
            return None
        return self._backend.get_task_row(task_id)

    def complete_task(self, task_id: int, completed_at: datetime) -> CareTask | None:
        if not self._backend.complete_task_and_record_care(task_id, completed_at):
            return None
        return self._backend.get_task_row(task_id)

    def list_resolved_tasks_by_user(self, user_id: int, limit: int = 100) -> list[CareTask]:
        return self._backend.get_resolved_tasks_for_user(user_id, limit)
