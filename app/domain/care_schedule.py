"""
Care Schedule Arithmetic
========================

Pure due-date helpers shared by the task generator, the task reconciler and
the presentation layer. No I/O happens here.

Due tests compare *calendar dates* in the care timezone, never instants, so a
task due "today at 18:00" is due all day long regardless of the time of the
request.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone, tzinfo

from app.domain.care_task import Plant
from app.enums.care import CareType, DueStatus, FirstDueAnchor
from app.utils.time import local_date

DEFAULT_WATERING_INTERVAL_DAYS = 2
DEFAULT_FERTILIZING_INTERVAL_DAYS = 30
DEFAULT_PRUNING_INTERVAL_DAYS = 90


def add_days(dt: datetime, days: int) -> datetime:
    """Return *dt* shifted by *days* whole days."""
    return dt + timedelta(days=days)


def is_on_or_before_today(due: datetime, now: datetime, tz: tzinfo = timezone.utc) -> bool:
    """True when the calendar date of *due* is today or earlier (in *tz*)."""
    return local_date(due, tz) <= local_date(now, tz)


def classify_due_status(due: datetime, now: datetime, tz: tzinfo = timezone.utc) -> DueStatus:
    """Classify *due* as overdue, due (today) or upcoming for display."""
    due_day = local_date(due, tz)
    today = local_date(now, tz)
    if due_day < today:
        return DueStatus.OVERDUE
    if due_day == today:
        return DueStatus.DUE
    return DueStatus.UPCOMING


def next_due(last_care_date: datetime | None, interval_days: int, now: datetime) -> datetime:
    """last_care_date + interval when known, otherwise *now* (never cared for)."""
    if last_care_date is None:
        return now
    return add_days(last_care_date, interval_days)


@dataclass(frozen=True)
class CarePolicy:
    """Interval and first-cycle policy for one care type.

    Attributes:
        care_type: Care type this policy applies to
        interval_days: Default days between two cares of this type
        first_due_anchor: Where the first cycle starts when the care type
            has never been recorded for a plant
    """

    care_type: CareType
    interval_days: int
    first_due_anchor: FirstDueAnchor = FirstDueAnchor.TODAY

    def __post_init__(self) -> None:
        if self.interval_days < 1:
            raise ValueError(f"{self.care_type} interval must be at least 1 day, got {self.interval_days}")


@dataclass(frozen=True)
class CareSchedulePolicy:
    """Default care policies for all three care types.

    Plants may override the interval per type; the anchor is global.
    """

    watering: CarePolicy
    fertilizing: CarePolicy
    pruning: CarePolicy

    @classmethod
    def default(cls) -> "CareSchedulePolicy":
        return cls.from_intervals()

    @classmethod
    def from_intervals(
        cls,
        *,
        watering_days: int = DEFAULT_WATERING_INTERVAL_DAYS,
        fertilizing_days: int = DEFAULT_FERTILIZING_INTERVAL_DAYS,
        pruning_days: int = DEFAULT_PRUNING_INTERVAL_DAYS,
    ) -> "CareSchedulePolicy":
        # A never-watered plant needs water now; feeding and pruning start
        # their first cycle from the day the plant was acquired.
        return cls(
            watering=CarePolicy(CareType.WATERING, watering_days, FirstDueAnchor.TODAY),
            fertilizing=CarePolicy(CareType.FERTILIZING, fertilizing_days, FirstDueAnchor.ACQUIRED_DATE),
            pruning=CarePolicy(CareType.PRUNING, pruning_days, FirstDueAnchor.ACQUIRED_DATE),
        )

    def for_type(self, care_type: CareType) -> CarePolicy:
        return getattr(self, care_type.value)

    def interval_for(self, plant: Plant, care_type: CareType) -> int:
        override = plant.interval_override(care_type)
        if override:
            return int(override)
        return self.for_type(care_type).interval_days


def compute_due_date(
    plant: Plant,
    care_type: CareType,
    policy: CareSchedulePolicy,
    now: datetime,
) -> tuple[datetime, datetime | None]:
    """
    Compute the next due date for one care type of a plant.

    Returns:
        (due_date, last_care_date) where last_care_date is the recorded care
        the due date was derived from, or None for a first-ever task.
    """
    interval = policy.interval_for(plant, care_type)
    last_care = plant.last_care_date(care_type)
    if last_care is not None:
        return next_due(last_care, interval, now), last_care

    anchor = policy.for_type(care_type).first_due_anchor
    if anchor is FirstDueAnchor.ACQUIRED_DATE and plant.acquired_date is not None:
        return add_days(plant.acquired_date, interval), None
    return next_due(None, interval, now), None
