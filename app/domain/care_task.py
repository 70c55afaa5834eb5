"""
Care Domain Entities
====================

Plant and CareTask entities used by the care-task engine.

- Plant: the owner's plant with its last-care timestamps and optional
  per-plant interval overrides
- CareTask: one pending or resolved unit of care for a plant

A CareTask is created by the task generator, mutated only by the task
reconciler and never deleted; resolved tasks are the care history.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from app.enums.care import CareType, TaskStatus
from app.utils.time import coerce_datetime, to_iso


@dataclass
class Plant:
    """
    A tracked household plant.

    Attributes:
        plant_id: Unique identifier (None for plants not yet stored)
        user_id: Owning user account
        name: Display name
        species: Free-text species
        acquired_date: When the owner got the plant
        last_watered: Last completed watering (None = never recorded)
        last_fertilized: Last completed fertilizing (None = never recorded)
        last_pruned: Last completed pruning (None = never recorded)
        watering_interval_days: Per-plant override (None = configured default)
        fertilizing_interval_days: Per-plant override (None = configured default)
        pruning_interval_days: Per-plant override (None = configured default)
    """

    plant_id: int | None = None
    user_id: int = 0
    name: str = ""
    species: str | None = None
    acquired_date: datetime | None = None

    last_watered: datetime | None = None
    last_fertilized: datetime | None = None
    last_pruned: datetime | None = None

    watering_interval_days: int | None = None
    fertilizing_interval_days: int | None = None
    pruning_interval_days: int | None = None

    created_at: datetime | None = None
    updated_at: datetime | None = None

    def last_care_date(self, care_type: CareType) -> datetime | None:
        return getattr(self, care_type.last_care_field)

    def interval_override(self, care_type: CareType) -> int | None:
        return getattr(self, care_type.interval_field)

    def to_dict(self) -> dict[str, Any]:
        return {
            "plant_id": self.plant_id,
            "user_id": self.user_id,
            "name": self.name,
            "species": self.species,
            "acquired_date": to_iso(self.acquired_date),
            "last_watered": to_iso(self.last_watered),
            "last_fertilized": to_iso(self.last_fertilized),
            "last_pruned": to_iso(self.last_pruned),
            "watering_interval_days": self.watering_interval_days,
            "fertilizing_interval_days": self.fertilizing_interval_days,
            "pruning_interval_days": self.pruning_interval_days,
            "created_at": to_iso(self.created_at),
            "updated_at": to_iso(self.updated_at),
        }

    @staticmethod
    def from_row(row: dict[str, Any]) -> "Plant":
        """Build a Plant from a database row dict (ISO strings for timestamps)."""
        return Plant(
            plant_id=row.get("plant_id"),
            user_id=row.get("user_id") or 0,
            name=row.get("name") or "",
            species=row.get("species"),
            acquired_date=coerce_datetime(row.get("acquired_date")),
            last_watered=coerce_datetime(row.get("last_watered")),
            last_fertilized=coerce_datetime(row.get("last_fertilized")),
            last_pruned=coerce_datetime(row.get("last_pruned")),
            watering_interval_days=row.get("watering_interval_days"),
            fertilizing_interval_days=row.get("fertilizing_interval_days"),
            pruning_interval_days=row.get("pruning_interval_days"),
            created_at=coerce_datetime(row.get("created_at")),
            updated_at=coerce_datetime(row.get("updated_at")),
        )


@dataclass
class CareTask:
    """
    One pending or resolved unit of care.

    At most one PENDING task exists per (plant_id, task_type) at any instant.

    Attributes:
        task_id: Unique identifier (None until persisted)
        plant_id: Owning plant
        task_type: Care type
        due_date: When the task becomes actionable
        status: pending, completed or skipped
        last_care_date: Care date the due date was computed from
            (None for a plant's first-ever task of a type)
        completed_at: Set only when status becomes completed
        plant_name: Read-only enrichment for history/dashboard views
    """

    task_id: int | None = None
    plant_id: int = 0
    task_type: CareType = CareType.WATERING
    due_date: datetime | None = None
    status: TaskStatus = TaskStatus.PENDING
    last_care_date: datetime | None = None
    completed_at: datetime | None = None

    created_at: datetime | None = None
    updated_at: datetime | None = None

    plant_name: str | None = field(default=None, compare=False)

    @property
    def is_pending(self) -> bool:
        return self.status is TaskStatus.PENDING

    def to_dict(self) -> dict[str, Any]:
        data = {
            "task_id": self.task_id,
            "plant_id": self.plant_id,
            "task_type": self.task_type.value,
            "due_date": to_iso(self.due_date),
            "status": self.status.value,
            "last_care_date": to_iso(self.last_care_date),
            "completed_at": to_iso(self.completed_at),
            "created_at": to_iso(self.created_at),
            "updated_at": to_iso(self.updated_at),
        }
        if self.plant_name is not None:
            data["plant_name"] = self.plant_name
        return data

    @staticmethod
    def from_row(row: dict[str, Any]) -> "CareTask":
        """Build a CareTask from a database row dict."""
        return CareTask(
            task_id=row.get("task_id"),
            plant_id=row.get("plant_id") or 0,
            task_type=CareType(row.get("task_type")),
            due_date=coerce_datetime(row.get("due_date")),
            status=TaskStatus(row.get("status") or TaskStatus.PENDING.value),
            last_care_date=coerce_datetime(row.get("last_care_date")),
            completed_at=coerce_datetime(row.get("completed_at")),
            created_at=coerce_datetime(row.get("created_at")),
            updated_at=coerce_datetime(row.get("updated_at")),
            plant_name=row.get("plant_name"),
        )
