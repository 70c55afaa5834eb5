"""
Care API Module
===============

Plant care endpoints organized by concern:
- plants.py: Plant registration, lookup and interval overrides
- tasks.py: Pending care tasks and owner actions (complete, skip, reschedule)
- dashboard.py: Care history and dashboard summary
"""

from flask import Blueprint

from app.utils.http import error_response

# Create blueprint here to avoid circular imports
care_api = Blueprint("care_api", __name__, url_prefix="/api")


@care_api.errorhandler(404)
def not_found(error):
    """Handle 404 errors"""
    return error_response("Resource not found", 404)


@care_api.errorhandler(405)
def method_not_allowed(error):
    """Handle 405 errors"""
    return error_response("Method not allowed", 405)


# Import submodules to register routes (must be after blueprint creation)
from . import dashboard, plants, tasks  # noqa: E402,F401

__all__ = ["care_api"]
