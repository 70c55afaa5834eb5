"""
Care Storage Protocol
=====================

Defines the storage collaborator consumed by the care-task engine.
Implementations can use SQLite, a hosted data store, or memory.

Every method may raise :class:`app.domain.exceptions.StorageError` on I/O
failure; the engine decides whether to isolate or surface it.
"""

from __future__ import annotations

from abc import abstractmethod
from datetime import datetime
from typing import Any, Protocol

from app.domain.care_task import CareTask, Plant
from app.enums.care import TaskStatus


class CareStorage(Protocol):
    """Protocol for plant and care-task persistence operations."""

    #: True when create_task/update_task are atomic check-then-act writes.
    #: When False task creation is at-least-once: the generator logs a
    #: warning once and de-duplicates pending tasks on read.
    supports_conditional_writes: bool

    @abstractmethod
    def get_plant(self, plant_id: int) -> Plant | None:
        """
        Get plant by ID.

        Returns:
            Plant if found, None otherwise
        """
        ...

    @abstractmethod
    def list_pending_tasks(self, plant_id: int) -> list[CareTask]:
        """
        Get all pending tasks of a plant, oldest due date first.
        """
        ...

    @abstractmethod
    def create_task(self, task: CareTask) -> CareTask | None:
        """
        Persist a new pending task.

        With conditional writes the insert only happens when no pending task
        of the same (plant, type) exists.

        Returns:
            Created task with assigned task_id, or None when a pending task
            for the same (plant, type) already exists
        """
        ...

    @abstractmethod
    def get_task(self, task_id: int) -> CareTask | None:
        """
        Get task by ID.

        Returns:
            CareTask if found, None otherwise
        """
        ...

    @abstractmethod
    def update_task(
        self,
        task_id: int,
        fields: dict[str, Any],
        *,
        expected_status: TaskStatus = TaskStatus.PENDING,
    ) -> CareTask | None:
        """
        Update a task only while it is in *expected_status*.

        Returns:
            Updated task, or None when no task with that id is in
            *expected_status* (unknown id or already resolved)
        """
        ...

    @abstractmethod
    def complete_task(self, task_id: int, completed_at: datetime) -> CareTask | None:
        """
        Complete a pending task and set its plant's ``last_<type>`` to
        *completed_at* as one unit: both writes happen or neither does.

        Returns:
            Completed task, or None when no pending task has that id

        Raises:
            NotFoundError: the task's plant no longer exists (nothing written)
        """
        ...

    @abstractmethod
    def list_resolved_tasks_by_user(self, user_id: int, limit: int = 100) -> list[CareTask]:
        """
        Get completed and skipped tasks across a user's plants, newest first,
        with ``plant_name`` populated.
        """
        ...

    @abstractmethod
    def list_plants_by_user(self, user_id: int) -> list[Plant]:
        """
        Get all plants owned by a user.
        """
        ...

    @abstractmethod
    def list_plant_ids(self) -> list[int]:
        """
        Get the IDs of every stored plant (background sweep).
        """
        ...
