"""
Care Domain Package
===================
Entities, the storage protocol, due-date arithmetic and the exception
hierarchy of the care-task engine. Nothing in this package performs I/O.
"""

from .care_repository import CareStorage
from .care_schedule import (
    CarePolicy,
    CareSchedulePolicy,
    add_days,
    classify_due_status,
    compute_due_date,
    is_on_or_before_today,
    next_due,
)
from .care_task import CareTask, Plant

__all__ = [
    # Entities
    "CareTask",
    "Plant",
    # Storage collaborator
    "CareStorage",
    # Schedule policy and arithmetic
    "CarePolicy",
    "CareSchedulePolicy",
    "add_days",
    "classify_due_status",
    "compute_due_date",
    "is_on_or_before_today",
    "next_due",
]
