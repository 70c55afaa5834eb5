"""Care history and dashboard summary for the current user."""

from flask import request

from app.blueprints.api._common import get_care_task_service, get_container, get_user_id, success
from app.schemas import CareHistoryQuery
from app.utils.http import safe_route

from . import care_api


@care_api.get("/care-tasks/history")
@safe_route("Failed to load care history")
def care_history():
    query = CareHistoryQuery(**request.args.to_dict())
    limit = query.limit or get_container().config.history_limit
    service = get_care_task_service()
    tasks = service.get_care_history(get_user_id(), limit)
    return success({"history": [service.task_view(t) for t in tasks], "count": len(tasks)})


@care_api.get("/dashboard/care-summary")
@safe_route("Failed to load care summary")
def care_summary():
    return success(get_care_task_service().get_dashboard_summary(get_user_id()))
