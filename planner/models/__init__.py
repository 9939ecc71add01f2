"""Data models for the planner"""
from planner.models.constants import (
    PlannerItemStatus,
    PlannerItemPriority,
    PlannerCategory,
    RecurrencePattern,
)
from planner.models.task import (
    PlannerItem,
    PlannerItemCreate,
    PlannerItemUpdate,
    RecurrenceRule,
    EditableField,
    InlineEditMetadata,
)
from planner.models.time_log import TimeLog, DayAggregate, TimeStats
from planner.models.state import PersistedState

__all__ = [
    "PlannerItemStatus",
    "PlannerItemPriority",
    "PlannerCategory",
    "RecurrencePattern",
    "PlannerItem",
    "PlannerItemCreate",
    "PlannerItemUpdate",
    "RecurrenceRule",
    "EditableField",
    "InlineEditMetadata",
    "TimeLog",
    "DayAggregate",
    "TimeStats",
    "PersistedState",
]
