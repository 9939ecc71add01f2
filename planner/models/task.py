"""Planner item (task) models"""
from pydantic import BaseModel, Field, field_validator, model_validator
from typing import Optional, List, Any
from datetime import datetime, date
from enum import Enum
from planner.models.constants import (
    PlannerItemStatus,
    PlannerItemPriority,
    PlannerCategory,
    RecurrencePattern,
    MAX_TITLE_LENGTH,
    MAX_DESCRIPTION_LENGTH,
    DEFAULT_PRIORITY,
    DEFAULT_STATUS,
)


class RecurrenceRule(BaseModel):
    """How a habit repeats"""
    pattern: RecurrencePattern
    interval: Optional[int] = Field(None, ge=1)
    days_of_week: Optional[List[int]] = None  # 0 = Sunday
    end_date: Optional[date] = None

    @field_validator("days_of_week")
    @classmethod
    def check_days_of_week(cls, value):
        if value is not None and any(day < 0 or day > 6 for day in value):
            raise ValueError("days_of_week entries must be between 0 and 6")
        return value


def _check_title(value: Optional[str]) -> Optional[str]:
    if value is not None and not value.strip():
        raise ValueError("title must not be blank")
    return value


class PlannerItem(BaseModel):
    """A user-managed unit of work or habit"""
    id: str
    title: str
    description: Optional[str] = None
    status: PlannerItemStatus = DEFAULT_STATUS
    priority: PlannerItemPriority = DEFAULT_PRIORITY
    category: PlannerCategory
    due_date: Optional[date] = None
    scheduled_date: Optional[date] = None
    estimated_duration: Optional[int] = None  # seconds
    tags: Optional[List[str]] = None
    recurrence: Optional[RecurrenceRule] = None
    is_editing: bool = False
    created_at: datetime
    updated_at: datetime
    completed_at: Optional[datetime] = None
    order: int


class PlannerItemCreate(BaseModel):
    """Planner item creation model"""
    title: str = Field(..., min_length=1, max_length=MAX_TITLE_LENGTH)
    description: Optional[str] = Field(None, max_length=MAX_DESCRIPTION_LENGTH)
    status: PlannerItemStatus = DEFAULT_STATUS
    priority: PlannerItemPriority = DEFAULT_PRIORITY
    category: PlannerCategory
    due_date: Optional[date] = None
    scheduled_date: Optional[date] = None
    estimated_duration: Optional[int] = Field(None, ge=0)
    tags: Optional[List[str]] = None
    recurrence: Optional[RecurrenceRule] = None

    @field_validator("title")
    @classmethod
    def check_title(cls, value):
        return _check_title(value)


# Fields that may not be cleared once set
_REQUIRED_FIELDS = ("title", "status", "priority", "category")


class PlannerItemUpdate(BaseModel):
    """Partial update; only fields that were explicitly set are applied"""
    title: Optional[str] = Field(None, min_length=1, max_length=MAX_TITLE_LENGTH)
    description: Optional[str] = Field(None, max_length=MAX_DESCRIPTION_LENGTH)
    status: Optional[PlannerItemStatus] = None
    priority: Optional[PlannerItemPriority] = None
    category: Optional[PlannerCategory] = None
    due_date: Optional[date] = None
    scheduled_date: Optional[date] = None
    estimated_duration: Optional[int] = Field(None, ge=0)
    tags: Optional[List[str]] = None
    recurrence: Optional[RecurrenceRule] = None

    @field_validator("title")
    @classmethod
    def check_title(cls, value):
        return _check_title(value)

    @model_validator(mode="after")
    def check_required_not_cleared(self):
        for name in _REQUIRED_FIELDS:
            if name in self.model_fields_set and getattr(self, name) is None:
                raise ValueError(f"{name} cannot be cleared")
        return self

    def changes(self) -> dict:
        """Explicitly set fields as a dict of validated values"""
        return {name: getattr(self, name) for name in self.model_fields_set}


class EditableField(str, Enum):
    """Fields that support inline editing"""
    TITLE = "title"
    DESCRIPTION = "description"
    STATUS = "status"
    PRIORITY = "priority"
    CATEGORY = "category"
    DUE_DATE = "due_date"
    SCHEDULED_DATE = "scheduled_date"
    ESTIMATED_DURATION = "estimated_duration"
    TAGS = "tags"
    RECURRENCE = "recurrence"


class InlineEditMetadata(BaseModel):
    """The single pending inline edit"""
    item_id: str
    field: EditableField
    original_value: Any = None
