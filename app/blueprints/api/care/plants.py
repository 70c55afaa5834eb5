"""
Plant Endpoints
===============

Registration and lookup of plants, plus per-plant care interval overrides.
Plants are stored as given; care tasks are generated on first read.
"""

import logging

from app.blueprints.api._common import get_json, get_plant_repo, get_user_id, schema_context, success
from app.domain.exceptions import NotFoundError
from app.schemas import CreatePlantRequest, UpdateIntervalsRequest
from app.utils.http import safe_route

from . import care_api

logger = logging.getLogger(__name__)


def _require_plant(plant_id: int):
    plant = get_plant_repo().get_plant(plant_id)
    if plant is None:
        raise NotFoundError(f"Plant {plant_id} not found", detail={"plant_id": plant_id})
    return plant


@care_api.post("/plants")
@safe_route("Failed to create plant")
def create_plant():
    """
    Register a plant.

    Request body:
    {
        "name": "Monstera",
        "species": "Monstera deliciosa",
        "acquired_date": "2024-03-01",
        "last_watered": "2024-03-10T08:00:00Z",
        "watering_interval_days": 5
    }
    """
    body = CreatePlantRequest.model_validate(get_json(), context=schema_context())
    repo = get_plant_repo()
    plant_id = repo.create_plant(user_id=get_user_id(), **body.model_dump())
    logger.info("Created plant %s (%s)", plant_id, body.name)
    return success(repo.get_plant(plant_id).to_dict(), 201, message="Plant created")


@care_api.get("/plants")
@safe_route("Failed to list plants")
def list_plants():
    """All plants of the session user, by name."""
    plants = get_plant_repo().list_plants(get_user_id())
    return success({"plants": [p.to_dict() for p in plants], "count": len(plants)})


@care_api.get("/plants/<int:plant_id>")
@safe_route("Failed to load plant")
def get_plant(plant_id: int):
    return success(_require_plant(plant_id).to_dict())


@care_api.patch("/plants/<int:plant_id>/intervals")
@safe_route("Failed to update care intervals")
def update_intervals(plant_id: int):
    """
    Override care intervals for one plant.

    Only the intervals present in the body change; ``null`` restores the
    configured default. Existing pending tasks keep their due dates.
    """
    body = UpdateIntervalsRequest(**get_json())
    _require_plant(plant_id)
    plant = get_plant_repo().set_intervals(plant_id, body.overrides())
    if plant is None:
        raise NotFoundError(f"Plant {plant_id} not found", detail={"plant_id": plant_id})
    logger.info("Updated care intervals for plant %s: %s", plant_id, body.overrides())
    return success(plant.to_dict(), message="Care intervals updated")
