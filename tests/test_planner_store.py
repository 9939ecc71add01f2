"""Tests for planner item operations and inline edits"""
import pytest
from datetime import date
from planner.errors import PlannerValidationError
from planner.models.constants import MAX_TITLE_LENGTH, MAX_DESCRIPTION_LENGTH
from planner.models.task import PlannerItemUpdate


def test_create_task_assigns_identity(store, clock, make_item):
    """Test id, timestamps, defaults and order on creation"""
    item = store.create_task(make_item(title="New Task"))

    assert item.id
    assert item.title == "New Task"
    assert item.status == "pending"
    assert item.priority == "medium"
    assert item.created_at == clock.now()
    assert item.updated_at == clock.now()
    assert item.completed_at is None
    assert item.order == 0


def test_create_task_orders_within_category(store, make_item):
    """Test order is per category"""
    first = store.create_task(make_item(category="today"))
    second = store.create_task(make_item(category="today"))
    upcoming = store.create_task(make_item(category="upcoming"))

    assert first.order == 0
    assert second.order == 1
    assert upcoming.order == 0


def test_create_task_order_counts_archived(store, make_item):
    """Test archived items still reserve their order"""
    first = store.create_task(make_item())
    store.archive_task(first.id)

    second = store.create_task(make_item())
    assert second.order == 1


def test_create_task_from_dict(store):
    """Test plain mappings are validated too"""
    item = store.create_task({"title": "From dict", "category": "habits", "priority": "urgent"})
    assert item.category == "habits"
    assert item.priority == "urgent"


@pytest.mark.parametrize("overrides", [
    {"title": ""},
    {"title": "   "},
    {"title": "x" * (MAX_TITLE_LENGTH + 1)},
    {"description": "x" * (MAX_DESCRIPTION_LENGTH + 1)},
    {"category": "someday"},
])
def test_create_task_rejects_invalid_input(store, persistence, overrides):
    """Test validation happens before anything is stored"""
    data = {"title": "Valid", "category": "today", **overrides}

    with pytest.raises(PlannerValidationError):
        store.create_task(data)

    assert store.get_all_tasks() == []
    assert persistence.save_count == 0


def test_create_task_accepts_max_lengths(store):
    """Test the bounds themselves are allowed"""
    item = store.create_task({
        "title": "x" * MAX_TITLE_LENGTH,
        "description": "y" * MAX_DESCRIPTION_LENGTH,
        "category": "today",
    })
    assert len(item.title) == MAX_TITLE_LENGTH


def test_update_task_merges_fields(store, clock, make_item):
    """Test only provided fields change and updated_at refreshes"""
    item = store.create_task(make_item(priority="low"))
    clock.advance(minutes=5)

    updated = store.update_task(item.id, PlannerItemUpdate(title="Updated Title"))

    assert updated.title == "Updated Title"
    assert updated.priority == "low"
    assert updated.description == "Test Description"
    assert updated.updated_at == clock.now()
    assert updated.updated_at != item.updated_at
    assert store.get_task(item.id).title == "Updated Title"


def test_update_task_clears_optional_field(store, make_item):
    """Test an explicit None clears an optional field"""
    item = store.create_task(make_item())
    updated = store.update_task(item.id, {"description": None})
    assert updated.description is None


def test_update_task_cannot_clear_title(store, make_item):
    """Test required fields cannot be set to None"""
    item = store.create_task(make_item())
    with pytest.raises(PlannerValidationError):
        store.update_task(item.id, {"title": None})
    assert store.get_task(item.id).title == "Test Task"


def test_update_task_unknown_id(store, persistence):
    """Test unknown ids are a no-op"""
    assert store.update_task("missing", {"title": "Nope"}) is None
    assert persistence.save_count == 0


def test_update_task_status_completed_stamps(store, clock, make_item):
    """Test completing through an update stamps completed_at"""
    item = store.create_task(make_item())
    clock.advance(hours=1)
    updated = store.update_task(item.id, {"status": "completed"})
    assert updated.completed_at == clock.now()


def test_update_schedule(store, make_item):
    """Test scheduled and due dates are set and cleared together"""
    item = store.create_task(make_item())

    scheduled = store.update_schedule(item.id, date(2024, 1, 20), date(2024, 1, 25))
    assert scheduled.scheduled_date == date(2024, 1, 20)
    assert scheduled.due_date == date(2024, 1, 25)

    cleared = store.update_schedule(item.id, date(2024, 1, 21))
    assert cleared.scheduled_date == date(2024, 1, 21)
    assert cleared.due_date is None


def test_delete_task_cascades_time_logs(store, clock, make_item):
    """Test deleting removes the item and all of its logs, active ones included"""
    item = store.create_task(make_item())
    other = store.create_task(make_item())
    first = store.start_time_log(item.id)
    clock.advance(seconds=30)
    store.end_time_log(first.id)
    store.start_time_log(item.id)
    store.start_time_log(other.id)

    assert store.delete_task(item.id) is True

    assert store.get_task(item.id) is None
    assert store.get_time_logs_by_task(item.id) == []
    assert store.get_active_time_log(item.id) is None
    assert len(store.get_time_logs_by_task(other.id)) == 1


def test_delete_task_unknown_id(store):
    """Test deleting an unknown id reports False"""
    assert store.delete_task("missing") is False


def test_get_tasks_by_category_sorted_and_filtered(store, make_item):
    """Test category listing excludes archived items and sorts by order"""
    task1 = store.create_task(make_item(category="today", title="Task 1"))
    store.create_task(make_item(category="upcoming", title="Task 2"))
    task3 = store.create_task(make_item(category="today", title="Task 3"))
    store.reorder_tasks("today", [task3.id, task1.id])

    today = store.get_tasks_by_category("today")
    assert [item.title for item in today] == ["Task 3", "Task 1"]

    store.archive_task(task3.id)
    today = store.get_tasks_by_category("today")
    assert [item.id for item in today] == [task1.id]


def test_get_tasks_by_category_rejects_unknown(store):
    """Test unknown category names are validation errors"""
    with pytest.raises(PlannerValidationError):
        store.get_tasks_by_category("someday")


def test_archive_keeps_item_retrievable(store, make_item):
    """Test archive is a soft delete"""
    item = store.create_task(make_item())
    archived = store.archive_task(item.id)

    assert archived.status == "archived"
    assert item.id not in [i.id for i in store.get_tasks_by_category("today")]
    assert item.id not in [i.id for i in store.get_all_tasks()]
    assert store.get_task(item.id).status == "archived"


def test_toggle_status_completed_at_lifecycle(store, clock, make_item):
    """Test completed_at is stamped on completion and kept afterwards"""
    item = store.create_task(make_item())

    completed = store.toggle_status(item.id, "completed")
    first_completion = clock.now()
    assert completed.status == "completed"
    assert completed.completed_at == first_completion

    clock.advance(hours=2)
    reopened = store.toggle_status(item.id, "pending")
    assert reopened.status == "pending"
    assert reopened.completed_at == first_completion

    clock.advance(hours=2)
    recompleted = store.toggle_status(item.id, "completed")
    assert recompleted.completed_at == clock.now()


def test_toggle_status_unknown_id(store):
    """Test unknown ids are a no-op"""
    assert store.toggle_status("missing", "completed") is None


def test_reorder_tasks_full_list(store, make_item):
    """Test order becomes each id's index"""
    a = store.create_task(make_item(title="A"))
    b = store.create_task(make_item(title="B"))
    c = store.create_task(make_item(title="C"))

    assert store.reorder_tasks("today", [c.id, a.id, b.id]) == 3

    assert store.get_task(c.id).order == 0
    assert store.get_task(a.id).order == 1
    assert store.get_task(b.id).order == 2


def test_reorder_tasks_partial_list_leaves_others(store, make_item):
    """Test unlisted items keep their order even if that duplicates"""
    a = store.create_task(make_item(title="A"))
    b = store.create_task(make_item(title="B"))
    upcoming = store.create_task(make_item(title="U", category="upcoming"))

    reordered = store.reorder_tasks("today", [b.id, upcoming.id])

    assert reordered == 1
    assert store.get_task(b.id).order == 0
    assert store.get_task(a.id).order == 0
    assert store.get_task(upcoming.id).order == 0


def test_returned_items_are_copies(store, make_item):
    """Test callers cannot mutate store state through returned objects"""
    item = store.create_task(make_item())
    item.title = "Mutated"
    item.tags.append("mutated")

    fetched = store.get_task(item.id)
    assert fetched.title == "Test Task"
    assert fetched.tags == ["test"]


def test_clear_completed_keeps_time_logs(store, clock, make_item):
    """Test completed items are removed but their logs stay"""
    done = store.create_task(make_item(title="Done"))
    open_item = store.create_task(make_item(title="Open"))
    log = store.start_time_log(done.id)
    clock.advance(seconds=60)
    store.end_time_log(log.id)
    store.toggle_status(done.id, "completed")

    assert store.clear_completed() == 1

    assert store.get_task(done.id) is None
    assert store.get_task(open_item.id) is not None
    assert len(store.get_time_logs_by_task(done.id)) == 1


def test_start_edit_sets_metadata(store, make_item):
    """Test starting an edit records it and flags the item"""
    item = store.create_task(make_item())

    metadata = store.start_edit(item.id, "title", "Test Task")

    assert metadata.item_id == item.id
    assert metadata.field == "title"
    assert metadata.original_value == "Test Task"
    assert store.inline_edit == metadata
    assert store.get_task(item.id).is_editing is True


def test_commit_edit_applies_value(store, make_item):
    """Test committing updates the field and clears the edit"""
    item = store.create_task(make_item())
    store.start_edit(item.id, "title", "Test Task")

    committed = store.commit_edit(item.id, "title", "New Title")

    assert committed.title == "New Title"
    assert committed.is_editing is False
    assert store.inline_edit is None


def test_commit_edit_rejects_invalid_value(store, make_item):
    """Test an invalid value leaves the edit pending"""
    item = store.create_task(make_item())
    store.start_edit(item.id, "title", "Test Task")

    with pytest.raises(PlannerValidationError):
        store.commit_edit(item.id, "title", "")

    assert store.inline_edit is not None
    assert store.get_task(item.id).title == "Test Task"


def test_cancel_edit_restores_original(store, make_item):
    """Test cancelling puts the original value back"""
    item = store.create_task(make_item(priority="high"))
    store.start_edit(item.id, "priority", "high")
    store.update_task(item.id, {"priority": "low"})

    restored = store.cancel_edit()

    assert restored.priority == "high"
    assert restored.is_editing is False
    assert store.inline_edit is None


def test_cancel_edit_without_pending(store):
    """Test cancelling with nothing pending is a no-op"""
    assert store.cancel_edit() is None


def test_second_edit_abandons_first(store, make_item):
    """Test a new edit replaces the pending one without restoring it"""
    first = store.create_task(make_item(title="First"))
    second = store.create_task(make_item(title="Second"))

    store.start_edit(first.id, "title", "First")
    store.update_task(first.id, {"title": "First (typing)"})
    store.start_edit(second.id, "title", "Second")
    store.update_task(second.id, {"title": "Second (typing)"})

    assert store.inline_edit.item_id == second.id

    store.cancel_edit()

    assert store.get_task(second.id).title == "Second"
    assert store.get_task(first.id).title == "First (typing)"
    assert store.get_task(first.id).is_editing is False
    assert store.inline_edit is None


def test_start_edit_unknown_item(store):
    """Test editing an unknown item does not record an edit"""
    assert store.start_edit("missing", "title", "x") is None
    assert store.inline_edit is None


def test_start_edit_rejects_unknown_field(store, make_item):
    """Test only enumerated fields are editable"""
    item = store.create_task(make_item())
    with pytest.raises(PlannerValidationError):
        store.start_edit(item.id, "order", 3)


def test_start_edit_rejects_invalid_original(store, persistence, make_item):
    """Test an original value that could not be restored is refused up front"""
    item = store.create_task(make_item())
    saves = persistence.save_count

    with pytest.raises(PlannerValidationError):
        store.start_edit(item.id, "title", "")

    assert store.inline_edit is None
    assert store.get_task(item.id).is_editing is False
    assert store.cancel_edit() is None
    assert persistence.save_count == saves
