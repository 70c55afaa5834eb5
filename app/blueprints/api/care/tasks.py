"""
Care Task Endpoints
===================

Pending tasks of a plant and the owner actions on a single task.

Every action response carries the mutated task and the plant's refreshed
pending tasks::

    {"task": {...}, "pending_tasks": [...]}

``pending_tasks`` is null when the action succeeded but the refresh did not.
"""

import logging

from app.blueprints.api._common import get_care_task_service, get_json, schema_context, success
from app.schemas import RescheduleTaskRequest
from app.utils.http import safe_route

from . import care_api

logger = logging.getLogger(__name__)


def _update_payload(update) -> dict:
    service = get_care_task_service()
    pending = update.pending_tasks
    return {
        "task": service.task_view(update.task),
        "pending_tasks": None if pending is None else [service.task_view(t) for t in pending],
    }


@care_api.get("/plants/<int:plant_id>/care-tasks")
@safe_route("Failed to load care tasks")
def list_care_tasks(plant_id: int):
    """Generate any due tasks for the plant and return its pending tasks."""
    service = get_care_task_service()
    tasks = service.ensure_tasks_up_to_date(plant_id)
    return success({"plant_id": plant_id, "tasks": [service.task_view(t) for t in tasks]})


@care_api.put("/care-tasks/<int:task_id>/complete")
@safe_route("Failed to complete care task")
def complete_task(task_id: int):
    update = get_care_task_service().complete_task(task_id)
    return success(_update_payload(update), message="Care task completed")


@care_api.put("/care-tasks/<int:task_id>/skip")
@safe_route("Failed to skip care task")
def skip_task(task_id: int):
    update = get_care_task_service().skip_task(task_id)
    return success(_update_payload(update), message="Care task skipped")


@care_api.put("/care-tasks/<int:task_id>/reschedule")
@safe_route("Failed to reschedule care task")
def reschedule_task(task_id: int):
    """
    Reschedule a pending task.

    Request body (all optional):
    {
        "due_date": "2024-05-01",
        "postpone_days": 3
    }
    """
    body = RescheduleTaskRequest.model_validate(get_json(), context=schema_context())
    update = get_care_task_service().reschedule_task(
        task_id,
        body.due_date,
        postpone_days=body.postpone_days,
    )
    return success(_update_payload(update), message="Care task rescheduled")
