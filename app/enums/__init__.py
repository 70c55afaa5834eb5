"""
Enums Module
============

This module provides enumeration types for the plant care application.
Enums ensure type safety and consistency across the codebase.
"""

from app.enums.care import CareType, DueStatus, FirstDueAnchor, TaskStatus

__all__ = [
    "CareType",
    "DueStatus",
    "FirstDueAnchor",
    "TaskStatus",
]
