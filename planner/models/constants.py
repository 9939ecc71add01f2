"""Planner constants and display labels"""
from enum import Enum


class PlannerItemStatus(str, Enum):
    PENDING = "pending"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"
    ARCHIVED = "archived"


class PlannerItemPriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


class PlannerCategory(str, Enum):
    TODAY = "today"
    UPCOMING = "upcoming"
    HABITS = "habits"


class RecurrencePattern(str, Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    CUSTOM = "custom"


STORAGE_KEY = "planner-storage"
SCHEMA_VERSION = 1
MAX_TITLE_LENGTH = 200
MAX_DESCRIPTION_LENGTH = 2000
DEFAULT_PRIORITY = PlannerItemPriority.MEDIUM
DEFAULT_STATUS = PlannerItemStatus.PENDING
ANALYTICS_WINDOW_7_DAYS = 7
ANALYTICS_WINDOW_30_DAYS = 30
# Day-aggregate window used when stats are scoped to a single task
SINGLE_TASK_HISTORY_DAYS = 365

STATUS_LABELS = {
    PlannerItemStatus.PENDING: "Pending",
    PlannerItemStatus.IN_PROGRESS: "In Progress",
    PlannerItemStatus.COMPLETED: "Completed",
    PlannerItemStatus.ARCHIVED: "Archived",
}

PRIORITY_LABELS = {
    PlannerItemPriority.LOW: "Low",
    PlannerItemPriority.MEDIUM: "Medium",
    PlannerItemPriority.HIGH: "High",
    PlannerItemPriority.URGENT: "Urgent",
}

CATEGORY_LABELS = {
    PlannerCategory.TODAY: "Today",
    PlannerCategory.UPCOMING: "Upcoming",
    PlannerCategory.HABITS: "Habits",
}
