"""
Care Sweep: background generation of due care tasks.

Runs the task generator for every plant so reminders exist even for plants
nobody opened today. Generation is idempotent, so the sweep may overlap with
API traffic or run more often than once a day.

Usage:
    from app.workers.care_sweep import care_sweep_task

    result = care_sweep_task(container)
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from app.domain.exceptions import PlantCareError

if TYPE_CHECKING:
    from app.services.container import ServiceContainer

logger = logging.getLogger(__name__)


def care_sweep_task(container: "ServiceContainer") -> dict[str, Any]:
    """
    Ensure pending care tasks are up to date for all plants.

    A failing plant is recorded in ``errors`` and the sweep moves on.

    Returns:
        {"plants_processed": int, "tasks_pending": int, "errors": [{"plant_id", "error"}]}
    """
    service = container.care_task_service
    results: dict[str, Any] = {
        "plants_processed": 0,
        "tasks_pending": 0,
        "errors": [],
    }

    plant_ids = container.care_task_repo.list_plant_ids()
    for plant_id in plant_ids:
        try:
            pending = service.ensure_tasks_up_to_date(plant_id)
        except PlantCareError as exc:
            logger.warning("Care sweep failed for plant %s: %s", plant_id, exc)
            results["errors"].append({"plant_id": plant_id, "error": str(exc)})
            continue
        results["plants_processed"] += 1
        results["tasks_pending"] += len(pending)

    logger.info(
        "Care sweep complete: %d/%d plants processed, %d pending tasks, %d errors",
        results["plants_processed"],
        len(plant_ids),
        results["tasks_pending"],
        len(results["errors"]),
    )
    return results
