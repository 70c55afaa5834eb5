"""
Care Schemas
============

Request schemas for plant and care-task endpoints.

Plain dates are read in the care timezone passed as validation context::

    CreatePlantRequest.model_validate(body, context={"tz": tz})

Without a context they are read as UTC.
"""

from datetime import datetime, timezone

from pydantic import BaseModel, Field, ValidationInfo, field_validator, model_validator

from app.utils.time import coerce_datetime


def _parse_timestamp(v, info: ValidationInfo):
    """Accept ISO 8601 strings; naive timestamps are UTC, plain dates local to the care timezone."""
    if v is None or v == "":
        return None
    tz = (info.context or {}).get("tz", timezone.utc)
    parsed = coerce_datetime(v, tz=tz)
    if parsed is None:
        raise ValueError(f"Invalid date: {v!r}. Expected ISO 8601.")
    return parsed


class CreatePlantRequest(BaseModel):
    """Request schema for registering a plant."""

    name: str = Field(..., min_length=1, max_length=120, description="Plant name")
    species: str | None = Field(default=None, description="Species (free text)")
    acquired_date: datetime | None = Field(default=None, description="When the plant was acquired")
    last_watered: datetime | None = Field(default=None, description="Last known watering")
    last_fertilized: datetime | None = Field(default=None, description="Last known fertilizing")
    last_pruned: datetime | None = Field(default=None, description="Last known pruning")
    watering_interval_days: int | None = Field(default=None, ge=1, description="Watering interval override")
    fertilizing_interval_days: int | None = Field(default=None, ge=1, description="Fertilizing interval override")
    pruning_interval_days: int | None = Field(default=None, ge=1, description="Pruning interval override")

    @field_validator("acquired_date", "last_watered", "last_fertilized", "last_pruned", mode="before")
    @classmethod
    def parse_timestamps(cls, v, info: ValidationInfo):
        return _parse_timestamp(v, info)

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Plant name must not be blank")
        return v


class UpdateIntervalsRequest(BaseModel):
    """Per-plant interval overrides. An explicit null restores the default."""

    watering_interval_days: int | None = Field(default=None, ge=1)
    fertilizing_interval_days: int | None = Field(default=None, ge=1)
    pruning_interval_days: int | None = Field(default=None, ge=1)

    @model_validator(mode="after")
    def require_one_field(self):
        if not self.model_fields_set:
            raise ValueError("At least one interval must be provided")
        return self

    def overrides(self) -> dict:
        """Only the intervals the caller actually sent."""
        return self.model_dump(include=self.model_fields_set)


class RescheduleTaskRequest(BaseModel):
    """
    Move a pending task.

    Either an explicit ``due_date`` or ``postpone_days`` (counted from now);
    with neither the task is postponed to tomorrow.
    """

    due_date: datetime | None = Field(default=None, description="New due date (ISO 8601)")
    postpone_days: int | None = Field(default=None, ge=1, le=365, description="Days to postpone from now")

    @field_validator("due_date", mode="before")
    @classmethod
    def parse_due_date(cls, v, info: ValidationInfo):
        return _parse_timestamp(v, info)

    @model_validator(mode="after")
    def exclusive_fields(self):
        if self.due_date is not None and self.postpone_days is not None:
            raise ValueError("Provide either due_date or postpone_days, not both")
        return self


class CareHistoryQuery(BaseModel):
    """Query parameters for the care history view."""

    limit: int | None = Field(default=None, ge=1, le=500, description="Max entries (default: configured limit)")
