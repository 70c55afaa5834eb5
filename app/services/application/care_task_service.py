"""
Care Task Service
=================

Caller-facing facade over the task generator and reconciler, used by the
API blueprints and the background sweep.

Every mutation re-fetches the plant's pending tasks after it is applied and
returns them alongside the mutated task, so callers never rely on a cached
copy of the task list.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime, timezone, tzinfo
from typing import Any, Callable

from app.domain.care_repository import CareStorage
from app.domain.care_schedule import add_days, classify_due_status
from app.domain.care_task import CareTask
from app.domain.exceptions import StorageError, ValidationError
from app.enums.care import DueStatus
from app.services.application.task_generator import CareTaskGenerator
from app.services.application.task_reconciler import CareTaskReconciler
from app.utils.time import utc_now

logger = logging.getLogger(__name__)

_NEEDS_CARE = (DueStatus.OVERDUE, DueStatus.DUE)


@dataclass
class CareTaskUpdate:
    """Result of a reconciliation action.

    Attributes:
        task: The mutated task
        pending_tasks: Refreshed pending tasks of the task's plant, or None
            when the refresh itself failed (the action was still applied)
    """

    task: CareTask
    pending_tasks: list[CareTask] | None


class CareTaskService:
    """Ensure, complete, skip and reschedule care tasks; history and dashboard views."""

    def __init__(
        self,
        storage: CareStorage,
        generator: CareTaskGenerator,
        reconciler: CareTaskReconciler,
        *,
        tz: tzinfo = timezone.utc,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._storage = storage
        self._generator = generator
        self._reconciler = reconciler
        self._tz = tz
        self._clock = clock

    # ------------------------------------------------------------------
    # Generation
    # ------------------------------------------------------------------

    def ensure_tasks_up_to_date(self, plant_id: int) -> list[CareTask]:
        """Run the generator for one plant and return its pending tasks."""
        return self._generator.ensure_tasks_up_to_date(plant_id)

    # ------------------------------------------------------------------
    # Reconciliation
    # ------------------------------------------------------------------

    def complete_task(self, task_id: int, *, actor: str = "user") -> CareTaskUpdate:
        return self._refreshed(self._reconciler.complete(task_id, actor=actor))

    def skip_task(self, task_id: int, *, actor: str = "user") -> CareTaskUpdate:
        return self._refreshed(self._reconciler.skip(task_id, actor=actor))

    def reschedule_task(
        self,
        task_id: int,
        new_due_date: datetime | date | str | None = None,
        *,
        postpone_days: int | None = None,
        actor: str = "user",
    ) -> CareTaskUpdate:
        """
        Move a pending task to *new_due_date*, or *postpone_days* days from
        now when no date is given (default: tomorrow).
        """
        if new_due_date is None:
            days = 1 if postpone_days is None else postpone_days
            if days < 1:
                raise ValidationError("postpone_days must be at least 1", detail={"task_id": task_id})
            new_due_date = add_days(self._clock(), days)
        return self._refreshed(self._reconciler.reschedule(task_id, new_due_date, actor=actor))

    def _refreshed(self, task: CareTask) -> CareTaskUpdate:
        try:
            pending = self._generator.ensure_tasks_up_to_date(task.plant_id)
        except StorageError as exc:
            logger.warning("Task %s updated but refreshing plant %s failed: %s", task.task_id, task.plant_id, exc)
            pending = None
        return CareTaskUpdate(task=task, pending_tasks=pending)

    # ------------------------------------------------------------------
    # Views
    # ------------------------------------------------------------------

    def due_status(self, task: CareTask) -> DueStatus | None:
        if task.due_date is None:
            return None
        return classify_due_status(task.due_date, self._clock(), self._tz)

    def task_view(self, task: CareTask) -> dict[str, Any]:
        """Serialize a task with its presentation due status."""
        data = task.to_dict()
        status = self.due_status(task) if task.is_pending else None
        data["due_status"] = status.value if status else None
        return data

    def get_care_history(self, user_id: int, limit: int = 100) -> list[CareTask]:
        """Resolved (completed and skipped) tasks of a user's plants, newest first."""
        return self._storage.list_resolved_tasks_by_user(user_id, limit)

    def get_dashboard_summary(self, user_id: int, *, upcoming_limit: int = 10) -> dict[str, Any]:
        """
        Summarize a user's plants for the dashboard.

        Returns:
            {
                "total_plants": int,
                "plants_needing_care": int,
                "upcoming_tasks": [task_view + plant_name, ...]
            }
        """
        plants = self._storage.list_plants_by_user(user_id)
        needing_care = 0
        upcoming: list[CareTask] = []

        for plant in plants:
            try:
                pending = self._generator.ensure_tasks_up_to_date(plant.plant_id)
            except StorageError as exc:
                logger.warning("Dashboard: skipping plant %s: %s", plant.plant_id, exc)
                continue
            for task in pending:
                task.plant_name = plant.name
            if any(self.due_status(task) in _NEEDS_CARE for task in pending):
                needing_care += 1
            upcoming.extend(pending)

        upcoming.sort(key=lambda t: (t.due_date or datetime.max.replace(tzinfo=timezone.utc), t.task_id or 0))
        return {
            "total_plants": len(plants),
            "plants_needing_care": needing_care,
            "upcoming_tasks": [self.task_view(task) for task in upcoming[:upcoming_limit]],
        }
