"""
Care Task Generator
===================

Decides, for one plant, which care types need a new pending task and creates
exactly one task per qualifying type.

Generation is an idempotent reconciliation step: it can run on every page
load, API call or background sweep. A (plant, type) that already has a
pending task is left alone, so repeated calls return the same tasks.

Concurrency:
    With a storage collaborator that supports conditional writes, the
    "no pending task exists" check and the insert are one atomic statement;
    a lost race returns None and the winner is re-read.
    Without conditional writes creation is at-least-once and pending tasks
    are de-duplicated on read (latest task per type wins).
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone, tzinfo
from typing import Callable, Iterable

from app.domain.care_repository import CareStorage
from app.domain.care_schedule import CareSchedulePolicy, compute_due_date, is_on_or_before_today
from app.domain.care_task import CareTask, Plant
from app.domain.exceptions import NotFoundError, StorageError
from app.enums.care import CareType, TaskStatus
from app.utils.time import utc_now

logger = logging.getLogger(__name__)


def _recency_key(task: CareTask) -> tuple[datetime, int]:
    created = task.created_at or datetime.min.replace(tzinfo=timezone.utc)
    return created, task.task_id or 0


def dedupe_pending(tasks: Iterable[CareTask]) -> dict[CareType, CareTask]:
    """Keep the latest pending task per care type.

    Resolved tasks in *tasks* are ignored.
    """
    latest: dict[CareType, CareTask] = {}
    duplicates: dict[CareType, int] = {}
    for task in tasks:
        if not task.is_pending:
            continue
        current = latest.get(task.task_type)
        if current is None:
            latest[task.task_type] = task
            continue
        duplicates[task.task_type] = duplicates.get(task.task_type, 1) + 1
        if _recency_key(task) > _recency_key(current):
            latest[task.task_type] = task

    for care_type, count in duplicates.items():
        winner = latest[care_type]
        logger.warning(
            "Found %d pending %s tasks for plant %s; using latest task %s",
            count,
            care_type,
            winner.plant_id,
            winner.task_id,
        )
    return latest


class CareTaskGenerator:
    """Creates due care tasks for a plant, at most one pending task per type."""

    def __init__(
        self,
        storage: CareStorage,
        policy: CareSchedulePolicy | None = None,
        *,
        tz: tzinfo = timezone.utc,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._storage = storage
        self._policy = policy or CareSchedulePolicy.default()
        self._tz = tz
        self._clock = clock
        self._conditional_writes = bool(getattr(storage, "supports_conditional_writes", False))
        if not self._conditional_writes:
            logger.warning(
                "%s runs without conditional writes: care tasks are created at least once "
                "and duplicate pending tasks are collapsed on read",
                type(storage).__name__,
            )

    @property
    def policy(self) -> CareSchedulePolicy:
        return self._policy

    @property
    def conditional_writes(self) -> bool:
        return self._conditional_writes

    def ensure_tasks_up_to_date(self, plant_id: int) -> list[CareTask]:
        """
        Create any due tasks for the plant and return its pending tasks.

        Args:
            plant_id: Plant to reconcile

        Returns:
            Pending tasks (existing and newly created), earliest due first

        Raises:
            NotFoundError: unknown plant
            StorageError: the plant or its pending tasks could not be read
        """
        plant = self._storage.get_plant(plant_id)
        if plant is None:
            raise NotFoundError(f"Plant {plant_id} not found", detail={"plant_id": plant_id})

        now = self._clock()
        pending = dedupe_pending(self._storage.list_pending_tasks(plant_id))

        for care_type in CareType:
            if care_type in pending:
                continue
            try:
                task = self._generate_for_type(plant, care_type, now)
            except StorageError as exc:
                # Other care types still get their chance; the next call retries this one.
                logger.warning(
                    "Skipping %s task generation for plant %s this round: %s",
                    care_type,
                    plant_id,
                    exc,
                )
                continue
            if task is not None:
                pending[care_type] = task

        return sorted(pending.values(), key=lambda t: (t.due_date or now, t.task_id or 0))

    def _generate_for_type(self, plant: Plant, care_type: CareType, now: datetime) -> CareTask | None:
        due_date, last_care = compute_due_date(plant, care_type, self._policy, now)
        if not is_on_or_before_today(due_date, now, self._tz):
            return None

        created = self._storage.create_task(
            CareTask(
                plant_id=plant.plant_id,
                task_type=care_type,
                due_date=due_date,
                status=TaskStatus.PENDING,
                last_care_date=last_care,
            )
        )
        if created is None:
            # A concurrent caller inserted first; return its task.
            logger.debug("Pending %s task for plant %s created concurrently", care_type, plant.plant_id)
            return dedupe_pending(self._storage.list_pending_tasks(plant.plant_id)).get(care_type)

        logger.info(
            "Created %s task %s for plant %s due %s",
            care_type,
            created.task_id,
            plant.plant_id,
            created.due_date.isoformat() if created.due_date else None,
        )
        return created
