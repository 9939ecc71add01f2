"""Planner item API endpoints"""
from fastapi import APIRouter, HTTPException, Depends, Query, Response, status
from typing import Optional, List, Any
from datetime import date
from pydantic import BaseModel
from planner.errors import PlannerValidationError
from planner.models.constants import PlannerCategory, PlannerItemStatus
from planner.models.task import (
    EditableField,
    InlineEditMetadata,
    PlannerItem,
    PlannerItemCreate,
    PlannerItemUpdate,
)
from planner.services.planner_store import PlannerStore
from planner.api.dependencies import get_store, validation_failed, not_found, internal_error

router = APIRouter()


class StatusUpdate(BaseModel):
    """Status change request"""
    status: PlannerItemStatus


class ScheduleUpdate(BaseModel):
    """Schedule dates; omitted dates are cleared"""
    scheduled_date: Optional[date] = None
    due_date: Optional[date] = None


class ReorderRequest(BaseModel):
    """Desired order of items within a category"""
    category: PlannerCategory
    ordered_ids: List[str]


class EditStartRequest(BaseModel):
    """Begin an inline edit"""
    item_id: str
    field: EditableField
    original_value: Any = None


class EditCommitRequest(BaseModel):
    """Finish an inline edit with a new value"""
    item_id: str
    field: EditableField
    value: Any = None


@router.post("", response_model=PlannerItem, status_code=status.HTTP_201_CREATED)
async def create_task(
    data: PlannerItemCreate,
    store: PlannerStore = Depends(get_store),
):
    """Create a planner item at the end of its category"""
    try:
        return store.create_task(data)
    except PlannerValidationError as e:
        raise validation_failed(e)
    except Exception as e:
        raise internal_error(e, "create task")


@router.get("", response_model=List[PlannerItem])
async def list_tasks(
    category: Optional[PlannerCategory] = Query(None, description="Only items of this category, in display order"),
    store: PlannerStore = Depends(get_store),
):
    """List non-archived planner items"""
    if category is not None:
        return store.get_tasks_by_category(category)
    return store.get_all_tasks()


@router.get("/edit", response_model=Optional[InlineEditMetadata])
async def get_pending_edit(store: PlannerStore = Depends(get_store)):
    """The pending inline edit, or null"""
    return store.inline_edit


@router.post("/edit/start", response_model=InlineEditMetadata)
async def start_edit(
    request: EditStartRequest,
    store: PlannerStore = Depends(get_store),
):
    """Start an inline edit, replacing any edit already pending"""
    try:
        metadata = store.start_edit(request.item_id, request.field, request.original_value)
    except PlannerValidationError as e:
        raise validation_failed(e)
    if metadata is None:
        raise not_found("Task")
    return metadata


@router.post("/edit/commit", response_model=PlannerItem)
async def commit_edit(
    request: EditCommitRequest,
    store: PlannerStore = Depends(get_store),
):
    """Apply an inline edit"""
    try:
        item = store.commit_edit(request.item_id, request.field, request.value)
    except PlannerValidationError as e:
        raise validation_failed(e)
    if item is None:
        raise not_found("Task")
    return item


@router.post("/edit/cancel", response_model=Optional[PlannerItem])
async def cancel_edit(store: PlannerStore = Depends(get_store)):
    """Roll back the pending inline edit"""
    try:
        return store.cancel_edit()
    except PlannerValidationError as e:
        raise validation_failed(e)


@router.post("/reorder")
async def reorder_tasks(
    request: ReorderRequest,
    store: PlannerStore = Depends(get_store),
):
    """Set display order within a category"""
    reordered = store.reorder_tasks(request.category, request.ordered_ids)
    return {"reordered": reordered}


@router.post("/clear-completed")
async def clear_completed(store: PlannerStore = Depends(get_store)):
    """Remove all completed items; their time logs are kept"""
    removed = store.clear_completed()
    return {"removed": removed}


@router.get("/{item_id}", response_model=PlannerItem)
async def get_task(
    item_id: str,
    store: PlannerStore = Depends(get_store),
):
    """Get a planner item by ID, archived items included"""
    item = store.get_task(item_id)
    if item is None:
        raise not_found("Task")
    return item


@router.patch("/{item_id}", response_model=PlannerItem)
async def update_task(
    item_id: str,
    updates: PlannerItemUpdate,
    store: PlannerStore = Depends(get_store),
):
    """Update the fields present in the request body"""
    try:
        if not updates.model_fields_set:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="No fields provided to update",
            )
        item = store.update_task(item_id, updates)
        if item is None:
            raise not_found("Task")
        return item
    except HTTPException:
        raise
    except PlannerValidationError as e:
        raise validation_failed(e)
    except Exception as e:
        raise internal_error(e, "update task")


@router.delete("/{item_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_task(
    item_id: str,
    store: PlannerStore = Depends(get_store),
):
    """Delete a planner item together with its time logs"""
    if not store.delete_task(item_id):
        raise not_found("Task")
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{item_id}/status", response_model=PlannerItem)
async def toggle_status(
    item_id: str,
    update: StatusUpdate,
    store: PlannerStore = Depends(get_store),
):
    """Change an item's status"""
    item = store.toggle_status(item_id, update.status)
    if item is None:
        raise not_found("Task")
    return item


@router.put("/{item_id}/schedule", response_model=PlannerItem)
async def update_schedule(
    item_id: str,
    schedule: ScheduleUpdate,
    store: PlannerStore = Depends(get_store),
):
    """Replace an item's scheduled and due dates"""
    item = store.update_schedule(item_id, schedule.scheduled_date, schedule.due_date)
    if item is None:
        raise not_found("Task")
    return item


@router.post("/{item_id}/archive", response_model=PlannerItem)
async def archive_task(
    item_id: str,
    store: PlannerStore = Depends(get_store),
):
    """Archive an item; it stays retrievable by ID"""
    item = store.archive_task(item_id)
    if item is None:
        raise not_found("Task")
    return item
