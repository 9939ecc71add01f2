"""Analytics API endpoints for tracked time"""
from fastapi import APIRouter, Depends, Query
from typing import Optional, List
from planner.models.constants import ANALYTICS_WINDOW_30_DAYS
from planner.models.time_log import DayAggregate, TimeStats
from planner.services.planner_store import PlannerStore
from planner.api.dependencies import get_store
from planner.utils.monitoring import StructuredLogger

router = APIRouter()


@router.get("/day-aggregates", response_model=List[DayAggregate])
async def get_day_aggregates(
    days: int = Query(ANALYTICS_WINDOW_30_DAYS, ge=0, le=366, description="Trailing window size, today included"),
    store: PlannerStore = Depends(get_store),
):
    """One bucket per local day for the trailing window"""
    return store.get_day_aggregates(days)


@router.get("/stats", response_model=TimeStats)
async def get_time_stats(
    task_id: Optional[str] = Query(None, description="Restrict statistics to one task"),
    store: PlannerStore = Depends(get_store),
):
    """
    Tracked-time totals for today and the trailing 7 and 30 days.
    Scoping to a task widens the day series to a year of that task's history.
    """
    stats = store.get_time_stats(task_id)

    StructuredLogger.log_event(
        "analytics_time_stats_fetched",
        "Computed time stats",
        task_id=task_id,
        metadata={"today": stats.today, "last_7_days": stats.last_7_days, "last_30_days": stats.last_30_days},
        level="DEBUG",
    )
    return stats
