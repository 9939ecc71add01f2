"""Planner store: the single owner of planner items and time logs

Every operation runs synchronously to completion against the in-memory
collections. Mutations hand the full state to the persistence adapter
afterwards; a failed save is logged and never touches in-memory state.
Aggregates are derived from the raw logs on every call.
"""
import time
from datetime import date, datetime, timedelta
from typing import Any, Dict, List, Optional, Union
from uuid import uuid4
from pydantic import ValidationError
from planner.errors import PlannerValidationError
from planner.models.constants import (
    PlannerCategory,
    PlannerItemStatus,
    ANALYTICS_WINDOW_7_DAYS,
    ANALYTICS_WINDOW_30_DAYS,
    SINGLE_TASK_HISTORY_DAYS,
    SCHEMA_VERSION,
)
from planner.models.state import PersistedState
from planner.models.task import (
    EditableField,
    InlineEditMetadata,
    PlannerItem,
    PlannerItemCreate,
    PlannerItemUpdate,
)
from planner.models.time_log import DayAggregate, TimeLog, TimeStats
from planner.services.persistence import BasePersistence, InMemoryPersistence
from planner.utils.monitoring import PersistenceMetrics, StructuredLogger, persistence_metrics
from planner.utils.time_utils import (
    SystemClock,
    compute_duration,
    day_bucket_key,
    enumerate_days,
    round_half_up,
    start_of_day,
    to_local,
)


def _validate(model_cls, data, field: Optional[str] = None):
    """Coerce data into model_cls, reporting failures as PlannerValidationError"""
    if isinstance(data, model_cls):
        return data
    try:
        return model_cls.model_validate(data)
    except ValidationError as e:
        first = e.errors()[0]
        loc = ".".join(str(part) for part in first.get("loc", ())) or field
        raise PlannerValidationError(f"{loc}: {first.get('msg')}", field=loc) from e


def _as_enum(enum_cls, value, field: str):
    try:
        return enum_cls(value)
    except ValueError as e:
        allowed = ", ".join(member.value for member in enum_cls)
        raise PlannerValidationError(f"Invalid {field}. Must be one of: {allowed}", field=field) from e


class PlannerStore:
    """Planner items and time logs with invariant-enforcing operations.

    Args:
        persistence: adapter read once at construction and written after
            every mutation. Defaults to an in-memory adapter.
        clock: any object with a ``now()`` returning a datetime.
        tz: timezone for local-day boundaries; None uses the system local
            timezone.
        metrics: collector for save outcomes.
    """

    def __init__(
        self,
        persistence: Optional[BasePersistence] = None,
        clock=None,
        tz=None,
        metrics: Optional[PersistenceMetrics] = None,
    ):
        self._persistence = persistence if persistence is not None else InMemoryPersistence()
        self._clock = clock or SystemClock()
        self._tz = tz
        self._metrics = metrics or persistence_metrics
        self._items: Dict[str, PlannerItem] = {}
        self._time_logs: Dict[str, TimeLog] = {}
        self._inline_edit: Optional[InlineEditMetadata] = None
        self._load()

    # -------------------- persistence --------------------

    def _load(self) -> None:
        state = self._persistence.load()
        if state is None:
            return
        if state.version != SCHEMA_VERSION:
            StructuredLogger.log_event(
                "state_reset",
                f"Schema version {state.version} does not match {SCHEMA_VERSION}; stored data discarded",
                metadata={"stored_version": state.version},
                level="WARNING",
            )
            return
        self._items = {item.id: item for item in state.items}
        self._time_logs = {log.id: log for log in state.time_logs}
        StructuredLogger.log_event(
            "store_loaded",
            f"Loaded {len(self._items)} items and {len(self._time_logs)} time logs",
            metadata={"version": state.version},
        )

    def snapshot(self) -> PersistedState:
        """Deep copy of the full state as it would be persisted"""
        return PersistedState(
            items=[item.model_copy(deep=True) for item in self._items.values()],
            time_logs=[log.model_copy(deep=True) for log in self._time_logs.values()],
        )

    def _persist(self) -> None:
        start_time = time.time()
        try:
            self._persistence.save(self.snapshot())
        except Exception as e:
            self._metrics.record_save(False, time.time() - start_time)
            StructuredLogger.log_error(e, context={"function": "persist"})
            return
        self._metrics.record_save(True, time.time() - start_time)

    # -------------------- helpers --------------------

    def _now(self) -> datetime:
        return self._clock.now()

    @staticmethod
    def _not_found(kind: str, ident: str, operation: str) -> None:
        StructuredLogger.log_event(
            f"{kind}_not_found",
            f"{operation}: no {kind.replace('_', ' ')} with id {ident}",
            metadata={"operation": operation, "id": ident},
            level="WARNING",
        )

    def _apply_changes(
        self,
        item: PlannerItem,
        changes: Dict[str, Any],
        now: datetime,
        stamp_completion: bool = True,
    ) -> PlannerItem:
        update = dict(changes)
        update["updated_at"] = now
        if stamp_completion and update.get("status") == PlannerItemStatus.COMPLETED:
            update["completed_at"] = now
        updated = item.model_copy(update=update)
        self._items[item.id] = updated
        return updated

    def _find_active_log(self, task_id: str) -> Optional[TimeLog]:
        for log in self._time_logs.values():
            if log.task_id == task_id and log.end_time is None:
                return log
        return None

    def _close_log(self, log: TimeLog, now: datetime) -> TimeLog:
        duration = compute_duration(log.start_time, now)
        closed = log.model_copy(update={"end_time": now, "duration": duration, "updated_at": now})
        self._time_logs[log.id] = closed
        return closed

    # -------------------- task operations --------------------

    def create_task(self, data: Union[PlannerItemCreate, dict]) -> PlannerItem:
        """Create a planner item at the end of its category"""
        data = _validate(PlannerItemCreate, data)
        now = self._now()
        orders = [item.order for item in self._items.values() if item.category == data.category]

        item = PlannerItem(
            **data.model_dump(),
            id=str(uuid4()),
            created_at=now,
            updated_at=now,
            completed_at=now if data.status == PlannerItemStatus.COMPLETED else None,
            order=max(orders) + 1 if orders else 0,
        )
        self._items[item.id] = item

        StructuredLogger.log_event(
            "task_created",
            f"Created task in {item.category.value}",
            task_id=item.id,
            metadata={"order": item.order},
        )
        self._persist()
        return item.model_copy(deep=True)

    def update_task(self, item_id: str, updates: Union[PlannerItemUpdate, dict]) -> Optional[PlannerItem]:
        """Merge explicitly set fields into an item; None when the id is unknown"""
        updates = _validate(PlannerItemUpdate, updates)
        item = self._items.get(item_id)
        if item is None:
            self._not_found("task", item_id, "update_task")
            return None

        updated = self._apply_changes(item, updates.changes(), self._now())
        self._persist()
        return updated.model_copy(deep=True)

    def update_schedule(
        self,
        item_id: str,
        scheduled_date: Optional[date] = None,
        due_date: Optional[date] = None,
    ) -> Optional[PlannerItem]:
        """Set both schedule dates; None clears a date"""
        return self.update_task(
            item_id,
            PlannerItemUpdate(scheduled_date=scheduled_date, due_date=due_date),
        )

    def delete_task(self, item_id: str) -> bool:
        """Remove an item and every time log that references it"""
        if item_id not in self._items:
            self._not_found("task", item_id, "delete_task")
            return False

        del self._items[item_id]
        # Active logs are discarded, not closed
        removed = [log_id for log_id, log in self._time_logs.items() if log.task_id == item_id]
        for log_id in removed:
            del self._time_logs[log_id]

        StructuredLogger.log_event(
            "task_deleted",
            f"Deleted task and {len(removed)} time logs",
            task_id=item_id,
            metadata={"removed_logs": len(removed)},
        )
        self._persist()
        return True

    def get_task(self, item_id: str) -> Optional[PlannerItem]:
        item = self._items.get(item_id)
        return item.model_copy(deep=True) if item else None

    def get_tasks_by_category(self, category: Union[PlannerCategory, str]) -> List[PlannerItem]:
        """Non-archived items of a category in display order"""
        category = _as_enum(PlannerCategory, category, "category")
        items = [
            item for item in self._items.values()
            if item.category == category and item.status != PlannerItemStatus.ARCHIVED
        ]
        items.sort(key=lambda item: item.order)
        return [item.model_copy(deep=True) for item in items]

    def get_all_tasks(self) -> List[PlannerItem]:
        """Non-archived items in creation order"""
        return [
            item.model_copy(deep=True) for item in self._items.values()
            if item.status != PlannerItemStatus.ARCHIVED
        ]

    def toggle_status(self, item_id: str, status: Union[PlannerItemStatus, str]) -> Optional[PlannerItem]:
        """Set an item's status; completing stamps completed_at, other statuses keep it"""
        status = _as_enum(PlannerItemStatus, status, "status")
        item = self._items.get(item_id)
        if item is None:
            self._not_found("task", item_id, "toggle_status")
            return None

        updated = self._apply_changes(item, {"status": status}, self._now())
        StructuredLogger.log_event(
            "task_status_changed",
            f"Status {item.status.value} -> {status.value}",
            task_id=item_id,
        )
        self._persist()
        return updated.model_copy(deep=True)

    def reorder_tasks(self, category: Union[PlannerCategory, str], ordered_ids: List[str]) -> int:
        """Set order to each id's index in ordered_ids.

        Items of the category missing from the list keep their order, so a
        partial list can leave duplicates or gaps. Returns the number of
        items reordered.
        """
        category = _as_enum(PlannerCategory, category, "category")
        positions: Dict[str, int] = {}
        for index, item_id in enumerate(ordered_ids):
            positions.setdefault(item_id, index)

        now = self._now()
        reordered = 0
        for item in list(self._items.values()):
            if item.category == category and item.id in positions:
                self._apply_changes(item, {"order": positions[item.id]}, now)
                reordered += 1

        if reordered:
            self._persist()
        return reordered

    def clear_completed(self) -> int:
        """Remove completed items; their time logs are kept"""
        completed = [item_id for item_id, item in self._items.items() if item.status == PlannerItemStatus.COMPLETED]
        for item_id in completed:
            del self._items[item_id]

        if completed:
            StructuredLogger.log_event(
                "completed_cleared",
                f"Removed {len(completed)} completed tasks",
                metadata={"task_ids": completed},
            )
            self._persist()
        return len(completed)

    def archive_task(self, item_id: str) -> Optional[PlannerItem]:
        return self.toggle_status(item_id, PlannerItemStatus.ARCHIVED)

    # -------------------- inline edits --------------------

    @property
    def inline_edit(self) -> Optional[InlineEditMetadata]:
        """The pending inline edit, if any"""
        return self._inline_edit.model_copy(deep=True) if self._inline_edit else None

    def start_edit(
        self,
        item_id: str,
        field: Union[EditableField, str],
        original_value: Any,
    ) -> Optional[InlineEditMetadata]:
        """Record the pending edit and flag the item as being edited.

        Only one edit is pending store-wide. Starting another replaces the
        pending descriptor; the abandoned edit's original value is not
        restored.
        """
        field = _as_enum(EditableField, field, "field")
        # The original value must be restorable by cancel_edit
        _validate(PlannerItemUpdate, {field.value: original_value}, field=field.value)
        item = self._items.get(item_id)
        if item is None:
            self._not_found("task", item_id, "start_edit")
            return None

        now = self._now()
        previous = self._inline_edit
        if previous is not None:
            StructuredLogger.log_event(
                "inline_edit_abandoned",
                f"Pending edit of {previous.field.value} replaced without restoring",
                task_id=previous.item_id,
                metadata={"new_item_id": item_id, "new_field": field.value},
                level="WARNING",
            )
            abandoned = self._items.get(previous.item_id)
            if abandoned is not None and abandoned.id != item_id:
                self._apply_changes(abandoned, {"is_editing": False}, now)

        self._inline_edit = InlineEditMetadata(item_id=item_id, field=field, original_value=original_value)
        self._apply_changes(self._items[item_id], {"is_editing": True}, now)
        self._persist()
        return self.inline_edit

    def commit_edit(self, item_id: str, field: Union[EditableField, str], value: Any) -> Optional[PlannerItem]:
        """Apply an edited value and clear the pending edit"""
        field = _as_enum(EditableField, field, "field")
        update = _validate(PlannerItemUpdate, {field.value: value}, field=field.value)

        item = self._items.get(item_id)
        self._inline_edit = None
        if item is None:
            self._not_found("task", item_id, "commit_edit")
            return None

        updated = self._apply_changes(item, {**update.changes(), "is_editing": False}, self._now())
        self._persist()
        return updated.model_copy(deep=True)

    def cancel_edit(self) -> Optional[PlannerItem]:
        """Restore the pending edit's original value; no-op when nothing is pending"""
        pending = self._inline_edit
        if pending is None:
            return None

        restore = _validate(PlannerItemUpdate, {pending.field.value: pending.original_value}, field=pending.field.value)
        self._inline_edit = None
        item = self._items.get(pending.item_id)
        if item is None:
            self._not_found("task", pending.item_id, "cancel_edit")
            return None

        updated = self._apply_changes(
            item,
            {**restore.changes(), "is_editing": False},
            self._now(),
            stamp_completion=False,
        )
        self._persist()
        return updated.model_copy(deep=True)

    # -------------------- time logs --------------------

    def start_time_log(self, task_id: str, notes: Optional[str] = None) -> Optional[TimeLog]:
        """Open a time log for a task, closing its active log first.

        Also moves the task to in-progress. Returns None for an unknown task.
        """
        item = self._items.get(task_id)
        if item is None:
            self._not_found("task", task_id, "start_time_log")
            return None

        now = self._now()
        active = self._find_active_log(task_id)
        if active is not None:
            closed = self._close_log(active, now)
            StructuredLogger.log_event(
                "time_log_auto_closed",
                f"Closed active log {closed.id} before starting a new one",
                task_id=task_id,
                metadata={"log_id": closed.id, "duration": closed.duration},
            )

        log = TimeLog(
            id=str(uuid4()),
            task_id=task_id,
            start_time=now,
            notes=notes,
            created_at=now,
            updated_at=now,
        )
        self._time_logs[log.id] = log
        self._apply_changes(item, {"status": PlannerItemStatus.IN_PROGRESS}, now)

        StructuredLogger.log_event(
            "time_log_started",
            "Started time log",
            task_id=task_id,
            metadata={"log_id": log.id},
        )
        self._persist()
        return log.model_copy(deep=True)

    def end_time_log(self, log_id: str) -> Optional[TimeLog]:
        """Close an active log; closed or unknown logs are left untouched"""
        log = self._time_logs.get(log_id)
        if log is None:
            self._not_found("time_log", log_id, "end_time_log")
            return None
        if log.end_time is not None:
            return log.model_copy(deep=True)

        closed = self._close_log(log, self._now())
        StructuredLogger.log_event(
            "time_log_ended",
            f"Ended time log after {closed.duration}s",
            task_id=closed.task_id,
            metadata={"log_id": log_id, "duration": closed.duration},
        )
        self._persist()
        return closed.model_copy(deep=True)

    def update_time_log_notes(self, log_id: str, notes: Optional[str]) -> Optional[TimeLog]:
        log = self._time_logs.get(log_id)
        if log is None:
            self._not_found("time_log", log_id, "update_time_log_notes")
            return None

        updated = log.model_copy(update={"notes": notes, "updated_at": self._now()})
        self._time_logs[log_id] = updated
        self._persist()
        return updated.model_copy(deep=True)

    def get_active_time_log(self, task_id: str) -> Optional[TimeLog]:
        log = self._find_active_log(task_id)
        return log.model_copy(deep=True) if log else None

    def get_time_logs_by_task(self, task_id: str) -> List[TimeLog]:
        """All logs of a task, most recent start first"""
        logs = [log for log in self._time_logs.values() if log.task_id == task_id]
        logs.sort(key=lambda log: log.start_time, reverse=True)
        return [log.model_copy(deep=True) for log in logs]

    def get_all_time_logs(self) -> List[TimeLog]:
        return [log.model_copy(deep=True) for log in self._time_logs.values()]

    # -------------------- aggregation --------------------

    def _logs_for(self, task_id: Optional[str]) -> List[TimeLog]:
        if task_id is None:
            return list(self._time_logs.values())
        return [log for log in self._time_logs.values() if log.task_id == task_id]

    def get_day_aggregates(self, window_days: int, task_id: Optional[str] = None) -> List[DayAggregate]:
        """One bucket per local day for the trailing window ending today.

        Always returns exactly window_days buckets in ascending date order.
        Logs with a non-zero duration are bucketed by the local day of their
        start time; logs outside the window are ignored.
        """
        if window_days < 0:
            raise PlannerValidationError("window_days must not be negative", field="window_days")

        today = start_of_day(self._now(), self._tz)
        first_day = today - timedelta(days=window_days - 1)
        buckets = {key: DayAggregate(date=key) for key in enumerate_days(first_day, today)}

        for log in self._logs_for(task_id):
            if not log.duration:
                continue
            bucket = buckets.get(day_bucket_key(log.start_time, self._tz))
            if bucket is None:
                continue
            bucket.total_duration += log.duration
            bucket.logs.append(log.model_copy(deep=True))
            bucket.item_count = len({entry.task_id for entry in bucket.logs})

        return list(buckets.values())

    def get_time_stats(self, task_id: Optional[str] = None) -> TimeStats:
        """Tracked-time totals for today and the trailing 7 and 30 days"""
        today = start_of_day(self._now(), self._tz)
        since_7 = today - timedelta(days=ANALYTICS_WINDOW_7_DAYS)
        since_30 = today - timedelta(days=ANALYTICS_WINDOW_30_DAYS)

        today_total = 0
        total_7 = 0
        total_30 = 0
        by_item: Dict[str, int] = {}

        for log in self._logs_for(task_id):
            if not log.duration:
                continue
            started = to_local(log.start_time, self._tz)
            if started >= today:
                today_total += log.duration
            if started >= since_7:
                total_7 += log.duration
            if started >= since_30:
                total_30 += log.duration
            by_item[log.task_id] = by_item.get(log.task_id, 0) + log.duration

        window = SINGLE_TASK_HISTORY_DAYS if task_id is not None else ANALYTICS_WINDOW_30_DAYS
        return TimeStats(
            today=today_total,
            last_7_days=total_7,
            last_30_days=total_30,
            average_per_day_7=round_half_up(total_7 / ANALYTICS_WINDOW_7_DAYS),
            average_per_day_30=round_half_up(total_30 / ANALYTICS_WINDOW_30_DAYS),
            by_date=self.get_day_aggregates(window, task_id=task_id),
            by_item=by_item,
        )
