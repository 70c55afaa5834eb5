"""
Care Task Reconciler
====================

Applies owner actions (complete, skip, reschedule) to exactly one pending
care task and keeps the owning plant's last-care timestamp consistent.

The reconciler never computes the next due date. Completing a task moves the
plant's ``last_<type>`` timestamp; the generator picks that up on its next
call.

Every action is a conditional update on ``status = 'pending'``: a double
click or a second browser tab gets InvalidStateError instead of applying the
side effects twice. Completion writes the task and the plant as one unit, so
a failed completion leaves the task pending and can be retried. StorageError
is always surfaced to the caller.
"""

from __future__ import annotations

import logging
from datetime import date, datetime, timezone, tzinfo
from typing import TYPE_CHECKING, Any, Callable, NoReturn

from app.domain.care_repository import CareStorage
from app.domain.care_task import CareTask
from app.domain.exceptions import InvalidStateError, NotFoundError, PlantCareError, ValidationError
from app.enums.care import TaskStatus
from app.utils.time import coerce_datetime, utc_now

if TYPE_CHECKING:
    from infrastructure.logging.audit import AuditLogger

logger = logging.getLogger(__name__)


class CareTaskReconciler:
    """Owner-initiated mutations of a single care task."""

    def __init__(
        self,
        storage: CareStorage,
        *,
        tz: tzinfo = timezone.utc,
        clock: Callable[[], datetime] = utc_now,
        audit_logger: "AuditLogger | None" = None,
    ) -> None:
        self._storage = storage
        self._tz = tz
        self._clock = clock
        self._audit = audit_logger

    def complete(self, task_id: int, *, actor: str = "user") -> CareTask:
        """
        Mark a pending task completed and record the care on its plant.

        Raises:
            NotFoundError: unknown task (or its plant vanished)
            InvalidStateError: task is not pending
            StorageError: persistence failed
        """
        task = self._storage.complete_task(task_id, self._clock())
        if task is None:
            self._reject(task_id, action="complete", actor=actor)

        logger.info("Completed %s task %s for plant %s", task.task_type, task_id, task.plant_id)
        self._record(actor, "complete", task, "success")
        return task

    def skip(self, task_id: int, *, actor: str = "user") -> CareTask:
        """
        Mark a pending task skipped. The plant's last-care timestamp is not
        touched: skipping is not caring.
        """
        task = self._transition(task_id, {"status": TaskStatus.SKIPPED}, action="skip", actor=actor)
        logger.info("Skipped %s task %s for plant %s", task.task_type, task_id, task.plant_id)
        self._record(actor, "skip", task, "success")
        return task

    def reschedule(self, task_id: int, new_due_date: datetime | date | str, *, actor: str = "user") -> CareTask:
        """
        Move a pending task's due date. Status stays pending and the plant is
        not touched. A plain date means midnight in the care timezone.

        Raises:
            ValidationError: *new_due_date* is not a date
        """
        due = coerce_datetime(new_due_date, tz=self._tz)
        if due is None:
            raise ValidationError(
                f"Invalid due date: {new_due_date!r}. Expected ISO 8601.",
                detail={"task_id": task_id},
            )

        task = self._transition(task_id, {"due_date": due}, action="reschedule", actor=actor)
        logger.info("Rescheduled %s task %s for plant %s to %s", task.task_type, task_id, task.plant_id, due.isoformat())
        self._record(actor, "reschedule", task, "success", due_date=due.isoformat())
        return task

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _transition(self, task_id: int, fields: dict[str, Any], *, action: str, actor: str) -> CareTask:
        updated = self._storage.update_task(task_id, fields, expected_status=TaskStatus.PENDING)
        if updated is None:
            self._reject(task_id, action=action, actor=actor)
        return updated

    def _reject(self, task_id: int, *, action: str, actor: str) -> NoReturn:
        current = self._storage.get_task(task_id)
        error: PlantCareError
        if current is None:
            error = NotFoundError(f"Care task {task_id} not found", detail={"task_id": task_id})
        else:
            error = InvalidStateError(
                f"Cannot {action} care task {task_id}: status is {current.status}",
                detail={"task_id": task_id, "status": current.status.value},
            )
        if self._audit is not None:
            self._audit.log_care_action(action, task_id, "rejected", actor=actor, reason=str(error))
        raise error

    def _record(self, actor: str, action: str, task: CareTask, outcome: str, **metadata: Any) -> None:
        if self._audit is None:
            return
        self._audit.log_care_action(
            action,
            task.task_id,
            outcome,
            actor=actor,
            plant_id=task.plant_id,
            task_type=task.task_type.value,
            **metadata,
        )
