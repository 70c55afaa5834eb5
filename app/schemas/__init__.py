"""
Schemas Module
==============

Pydantic models for request validation.
"""

from app.schemas.care import (
    CareHistoryQuery,
    CreatePlantRequest,
    RescheduleTaskRequest,
    UpdateIntervalsRequest,
)

__all__ = [
    "CareHistoryQuery",
    "CreatePlantRequest",
    "RescheduleTaskRequest",
    "UpdateIntervalsRequest",
]
