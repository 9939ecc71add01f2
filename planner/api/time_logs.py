"""Time tracking API endpoints"""
from fastapi import APIRouter, Depends, Query, status
from typing import Optional, List
from planner.errors import PlannerValidationError
from planner.models.time_log import TimeLog, TimeLogStart, TimeLogNotesUpdate
from planner.services.planner_store import PlannerStore
from planner.api.dependencies import get_store, validation_failed, not_found

router = APIRouter()


@router.post("/start", response_model=TimeLog, status_code=status.HTTP_201_CREATED)
async def start_time_log(
    request: TimeLogStart,
    store: PlannerStore = Depends(get_store),
):
    """Start tracking time on a task, closing its active log first"""
    try:
        log = store.start_time_log(request.task_id, request.notes)
    except PlannerValidationError as e:
        raise validation_failed(e)
    if log is None:
        raise not_found("Task")
    return log


@router.post("/{log_id}/end", response_model=TimeLog)
async def end_time_log(
    log_id: str,
    store: PlannerStore = Depends(get_store),
):
    """Stop an active time log; ending an ended log changes nothing"""
    try:
        log = store.end_time_log(log_id)
    except PlannerValidationError as e:
        raise validation_failed(e)
    if log is None:
        raise not_found("Time log")
    return log


@router.patch("/{log_id}/notes", response_model=TimeLog)
async def update_notes(
    log_id: str,
    update: TimeLogNotesUpdate,
    store: PlannerStore = Depends(get_store),
):
    """Replace a time log's notes"""
    log = store.update_time_log_notes(log_id, update.notes)
    if log is None:
        raise not_found("Time log")
    return log


@router.get("", response_model=List[TimeLog])
async def list_time_logs(
    task_id: Optional[str] = Query(None, description="Only logs of this task, most recent first"),
    store: PlannerStore = Depends(get_store),
):
    """List time logs"""
    if task_id is not None:
        return store.get_time_logs_by_task(task_id)
    return store.get_all_time_logs()


@router.get("/active/{task_id}", response_model=Optional[TimeLog])
async def get_active_time_log(
    task_id: str,
    store: PlannerStore = Depends(get_store),
):
    """The task's running time log, or null"""
    return store.get_active_time_log(task_id)
