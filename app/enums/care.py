"""
Care Enumerations
=================

Enums for the care-task engine: care types, task lifecycle status and the
presentation-only due status.
"""

from enum import Enum


class CareType(str, Enum):
    """
    Kinds of care a plant can need.
    Used by: task generator, task reconciler, plant last-care fields
    """
    WATERING = "watering"
    FERTILIZING = "fertilizing"
    PRUNING = "pruning"

    def __str__(self) -> str:
        return self.value

    @property
    def last_care_field(self) -> str:
        """Plant column that records when this care was last performed."""
        return _LAST_CARE_FIELDS[self]

    @property
    def interval_field(self) -> str:
        """Plant column holding the per-plant interval override."""
        return f"{self.value}_interval_days"


_LAST_CARE_FIELDS = {
    CareType.WATERING: "last_watered",
    CareType.FERTILIZING: "last_fertilized",
    CareType.PRUNING: "last_pruned",
}


class TaskStatus(str, Enum):
    """
    CareTask lifecycle status.
    Only PENDING tasks may be completed, skipped or rescheduled.
    """
    PENDING = "pending"
    COMPLETED = "completed"
    SKIPPED = "skipped"

    def __str__(self) -> str:
        return self.value

    @property
    def is_resolved(self) -> bool:
        return self is not TaskStatus.PENDING


class DueStatus(str, Enum):
    """
    Presentation classification of a task's due date relative to today.
    Never used to gate task generation.
    """
    OVERDUE = "overdue"
    DUE = "due"
    UPCOMING = "upcoming"

    def __str__(self) -> str:
        return self.value


class FirstDueAnchor(str, Enum):
    """
    Where the first cycle of a never-recorded care type starts.
    """
    TODAY = "today"
    ACQUIRED_DATE = "acquired_date"

    def __str__(self) -> str:
        return self.value
