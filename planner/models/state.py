"""Persisted planner state"""
from pydantic import BaseModel, Field
from typing import List
from planner.models.constants import SCHEMA_VERSION
from planner.models.task import PlannerItem
from planner.models.time_log import TimeLog


class PersistedState(BaseModel):
    """Full snapshot of both store collections plus its schema version"""
    version: int = SCHEMA_VERSION
    items: List[PlannerItem] = Field(default_factory=list)
    time_logs: List[TimeLog] = Field(default_factory=list)
