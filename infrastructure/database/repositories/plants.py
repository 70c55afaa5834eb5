"""
Plant Repository
================

Pass-through plant persistence for the API layer (create, read, interval
overrides). Care timestamps are written by the task reconciler through
CareTaskRepository, not here.
"""
from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from app.domain.care_task import Plant
from infrastructure.database.ops.plants import PlantOperations


class PlantRepository:
    """Repository for plant records."""

    def __init__(self, backend: PlantOperations) -> None:
        self._backend = backend

    def create_plant(
        self,
        *,
        user_id: int,
        name: str,
        species: Optional[str] = None,
        acquired_date: Optional[datetime] = None,
        last_watered: Optional[datetime] = None,
        last_fertilized: Optional[datetime] = None,
        last_pruned: Optional[datetime] = None,
        watering_interval_days: Optional[int] = None,
        fertilizing_interval_days: Optional[int] = None,
        pruning_interval_days: Optional[int] = None,
    ) -> int:
        """Create a plant and return its ID."""
        return self._backend.insert_plant(
            {
                "user_id": user_id,
                "name": name,
                "species": species,
                "acquired_date": acquired_date,
                "last_watered": last_watered,
                "last_fertilized": last_fertilized,
                "last_pruned": last_pruned,
                "watering_interval_days": watering_interval_days,
                "fertilizing_interval_days": fertilizing_interval_days,
                "pruning_interval_days": pruning_interval_days,
            }
        )

    def get_plant(self, plant_id: int) -> Optional[Plant]:
        return self._backend.get_plant_row(plant_id)

    def list_plants(self, user_id: int) -> list[Plant]:
        return self._backend.get_plants_for_user(user_id)

    def set_intervals(self, plant_id: int, intervals: dict[str, Any]) -> Optional[Plant]:
        """Override per-plant care intervals; None values restore the default."""
        if not self._backend.update_plant_row(plant_id, intervals):
            return None
        return self._backend.get_plant_row(plant_id)
