"""Time log models and derived analytics views"""
from pydantic import BaseModel, Field
from typing import Optional, List, Dict
from datetime import datetime


class TimeLog(BaseModel):
    """One continuous interval of tracked time against a planner item"""
    id: str
    task_id: str
    start_time: datetime
    end_time: Optional[datetime] = None  # None while the log is active
    duration: Optional[int] = None  # whole seconds, set together with end_time
    notes: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    @property
    def is_active(self) -> bool:
        return self.end_time is None


class TimeLogStart(BaseModel):
    """Request to start tracking time on a planner item"""
    task_id: str
    notes: Optional[str] = None


class TimeLogNotesUpdate(BaseModel):
    """Notes update for a time log"""
    notes: Optional[str] = None


class DayAggregate(BaseModel):
    """All tracked time whose start falls within one local calendar day"""
    date: str  # YYYY-MM-DD
    total_duration: int = 0
    item_count: int = 0
    logs: List[TimeLog] = Field(default_factory=list)


class TimeStats(BaseModel):
    """Snapshot of tracked-time totals over the standard windows"""
    today: int
    last_7_days: int
    last_30_days: int
    average_per_day_7: int
    average_per_day_30: int
    by_date: List[DayAggregate]
    by_item: Dict[str, int]
