"""
Care Task Database Operations
=============================

Database operations for the CareTasks table.

Both writes used by the care engine are atomic check-then-act statements:

- insert_pending_task only inserts when no pending task exists for the same
  (plant, type); the partial unique index ``idx_caretasks_one_pending``
  backs this up across connections.
- update_task_if_status only touches the row while it still has the
  expected status, so a double "complete" affects zero rows.
- complete_task_and_record_care does the same for the task and also moves
  the plant's last-care timestamp in the same transaction.
"""

from __future__ import annotations

import logging
import sqlite3
from datetime import datetime
from typing import TYPE_CHECKING, Any

from app.domain.care_task import CareTask
from app.domain.exceptions import NotFoundError, StorageError
from app.enums.care import CareType, TaskStatus
from app.utils.time import iso_now, to_iso
from infrastructure.database.ops.plants import PLANT_UPDATE_COLUMNS
from infrastructure.database.sql_safety import build_set_clause, safe_columns, to_db_value

if TYPE_CHECKING:
    from sqlite3 import Connection

logger = logging.getLogger(__name__)

TASK_UPDATE_COLUMNS = frozenset({"status", "due_date", "completed_at"})


class CareTaskOperations:
    """CareTask CRUD helpers for database handlers."""

    def get_db(self) -> "Connection":
        """Get database connection. Must be implemented by mixing class."""
        raise NotImplementedError("Subclass must implement get_db()")

    # =========================================================================
    # Writes
    # =========================================================================

    def insert_pending_task(self, task: CareTask) -> int | None:
        """
        Insert a pending task unless one already exists for (plant, type).

        Returns:
            New task_id, or None when a pending task already exists
        """
        now = iso_now()
        task_type = to_db_value(task.task_type)
        try:
            db = self.get_db()
            cursor = db.execute(
                """
                INSERT INTO CareTasks (
                    plant_id, task_type, due_date, status,
                    last_care_date, created_at, updated_at
                )
                SELECT ?, ?, ?, 'pending', ?, ?, ?
                WHERE NOT EXISTS (
                    SELECT 1 FROM CareTasks
                    WHERE plant_id = ? AND task_type = ? AND status = 'pending'
                )
                """,
                (
                    task.plant_id,
                    task_type,
                    to_iso(task.due_date),
                    to_iso(task.last_care_date),
                    now,
                    now,
                    task.plant_id,
                    task_type,
                ),
            )
            db.commit()
        except sqlite3.IntegrityError:
            # Another connection won the race between NOT EXISTS and INSERT.
            self.get_db().rollback()
            logger.debug("Pending %s task for plant %s already exists", task_type, task.plant_id)
            return None
        except sqlite3.Error as exc:
            logger.error("insert_pending_task failed for plant %s (%s): %s", task.plant_id, task_type, exc)
            raise StorageError(
                "Failed to create care task",
                detail={"plant_id": task.plant_id, "task_type": task_type},
            ) from exc

        if cursor.rowcount == 0:
            return None
        return int(cursor.lastrowid)

    def update_task_if_status(
        self,
        task_id: int,
        fields: dict[str, Any],
        expected_status: TaskStatus,
    ) -> bool:
        """
        Update a task only while it has *expected_status*.

        Returns:
            True if a row was updated
        """
        cols = safe_columns(fields, TASK_UPDATE_COLUMNS, context="update_task")
        cols["updated_at"] = iso_now()
        set_clause, values = build_set_clause(cols)
        try:
            db = self.get_db()
            cursor = db.execute(
                f"UPDATE CareTasks SET {set_clause} WHERE task_id = ? AND status = ?",
                [*values, task_id, expected_status.value],
            )
            db.commit()
        except sqlite3.Error as exc:
            logger.error("update_task_if_status(%s) failed: %s", task_id, exc)
            raise StorageError("Failed to update care task", detail={"task_id": task_id}) from exc
        return cursor.rowcount > 0

    def complete_task_and_record_care(self, task_id: int, completed_at: datetime) -> bool:
        """
        Complete a pending task and stamp ``last_<type>`` on its plant.

        Both rows are written in one transaction: either the task is completed
        and the plant records the care, or nothing changes.

        Returns:
            True if both rows were written, False if no pending task has that id

        Raises:
            NotFoundError: the task's plant no longer exists
            StorageError: a write failed
        """
        now = iso_now()
        try:
            db = self.get_db()
            cursor = db.execute(
                """
                UPDATE CareTasks SET status = 'completed', completed_at = ?, updated_at = ?
                WHERE task_id = ? AND status = 'pending'
                """,
                (to_iso(completed_at), now, task_id),
            )
            if cursor.rowcount == 0:
                db.rollback()
                return False

            row = db.execute("SELECT plant_id, task_type FROM CareTasks WHERE task_id = ?", (task_id,)).fetchone()
            plant_id = row["plant_id"]
            field = CareType(row["task_type"]).last_care_field
            cols = safe_columns({field: completed_at}, PLANT_UPDATE_COLUMNS, context="complete_task")
            cols["updated_at"] = now
            set_clause, values = build_set_clause(cols)
            cursor = db.execute(f"UPDATE Plants SET {set_clause} WHERE plant_id = ?", [*values, plant_id])
            if cursor.rowcount == 0:
                db.rollback()
                logger.error("Care task %s belongs to missing plant %s; completion rolled back", task_id, plant_id)
                raise NotFoundError(f"Plant {plant_id} not found", detail={"plant_id": plant_id, "task_id": task_id})
            db.commit()
        except sqlite3.Error as exc:
            self.get_db().rollback()
            logger.error("complete_task_and_record_care(%s) failed: %s", task_id, exc)
            raise StorageError("Failed to complete care task", detail={"task_id": task_id}) from exc
        return True

    # =========================================================================
    # Reads
    # =========================================================================

    def get_task_row(self, task_id: int) -> CareTask | None:
        try:
            row = self.get_db().execute("SELECT * FROM CareTasks WHERE task_id = ?", (task_id,)).fetchone()
        except sqlite3.Error as exc:
            logger.error("get_task_row(%s) failed: %s", task_id, exc)
            raise StorageError("Failed to load care task", detail={"task_id": task_id}) from exc
        return CareTask.from_row(dict(row)) if row else None

    def get_pending_tasks_for_plant(self, plant_id: int) -> list[CareTask]:
        try:
            rows = self.get_db().execute(
                """
                SELECT * FROM CareTasks
                WHERE plant_id = ? AND status = 'pending'
                ORDER BY due_date ASC, task_id ASC
                """,
                (plant_id,),
            ).fetchall()
        except sqlite3.Error as exc:
            logger.error("get_pending_tasks_for_plant(%s) failed: %s", plant_id, exc)
            raise StorageError("Failed to list pending care tasks", detail={"plant_id": plant_id}) from exc
        return [CareTask.from_row(dict(row)) for row in rows]

    def get_resolved_tasks_for_user(self, user_id: int, limit: int = 100) -> list[CareTask]:
        try:
            rows = self.get_db().execute(
                """
                SELECT t.*, p.name AS plant_name
                FROM CareTasks t
                JOIN Plants p ON p.plant_id = t.plant_id
                WHERE p.user_id = ? AND t.status IN ('completed', 'skipped')
                ORDER BY COALESCE(t.completed_at, t.updated_at) DESC, t.task_id DESC
                LIMIT ?
                """,
                (user_id, limit),
            ).fetchall()
        except sqlite3.Error as exc:
            logger.error("get_resolved_tasks_for_user(%s) failed: %s", user_id, exc)
            raise StorageError("Failed to load care history", detail={"user_id": user_id}) from exc
        return [CareTask.from_row(dict(row)) for row in rows]
