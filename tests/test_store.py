import dataclasses
from datetime import timedelta

import pytest

from remindme.datamodel import Reminder, ReminderDraft, ReminderFilter, ReminderPriority
from remindme.storage.reminder_store import ReminderStore, ReminderValidationError

from tests.conftest import START, make_draft


def test_create_assigns_unique_ids_and_created_at(store, clock) -> None:
    reminders = [store.create(make_draft(f"r{i}", START + timedelta(hours=i))) for i in range(50)]

    assert len({r.id for r in reminders}) == 50
    assert all(r.created_at == clock.now for r in reminders)
    assert all(r.owner_id == "tester" for r in reminders)


def test_create_applies_defaults(store) -> None:
    reminder = store.create(ReminderDraft(title="Call mom", due_at=START + timedelta(days=1)))

    assert reminder.completed is False
    assert reminder.recurring is False
    assert reminder.priority is ReminderPriority.MEDIUM
    assert reminder.description is None
    assert reminder.image_ref is None


def test_create_keeps_supplied_id_and_created_at(store) -> None:
    created_at = START - timedelta(days=2)
    reminder = store.create(make_draft(id="abc", created_at=created_at, owner_id="someone-else"))

    assert reminder.id == "abc"
    assert reminder.created_at == created_at
    assert reminder.owner_id == "someone-else"


def test_create_rejects_duplicate_id(store) -> None:
    store.create(make_draft(id="abc"))

    with pytest.raises(ReminderValidationError):
        store.create(make_draft(id="abc"))
    assert len(store) == 1


@pytest.mark.parametrize("title", ["", "   ", None])
def test_create_rejects_empty_title_without_mutation(store, title) -> None:
    changes = []
    store.add_listener(changes.append)

    with pytest.raises(ReminderValidationError):
        store.create(make_draft(title=title))

    assert len(store) == 0
    assert changes == []


def test_create_notifies_observers(store) -> None:
    changes = []
    store.add_listener(changes.append)

    store.create(make_draft())

    assert changes == [store]


def test_update_replaces_fields_but_keeps_id_and_created_at(store, clock) -> None:
    original = store.create(make_draft("Old", START + timedelta(days=1)))
    clock.advance(hours=1)

    changed = dataclasses.replace(
        original,
        title="New",
        description="details",
        priority=ReminderPriority.CRITICAL,
        recurring=True,
        image_ref="https://example.com/a.jpg",
        created_at=START + timedelta(days=9),
    )
    assert store.update(changed) is True

    stored = store.get(original.id)
    assert stored.title == "New"
    assert stored.description == "details"
    assert stored.priority is ReminderPriority.CRITICAL
    assert stored.recurring is True
    assert stored.image_ref == "https://example.com/a.jpg"
    assert stored.id == original.id
    assert stored.created_at == original.created_at


def test_update_accepts_a_draft_with_an_id(store) -> None:
    original = store.create(make_draft("Old"))
    draft = ReminderDraft.from_reminder(original)
    draft.title = "Edited"

    assert store.update(draft) is True
    assert store.get(original.id).title == "Edited"


def test_update_unknown_id_is_a_silent_no_op(store) -> None:
    existing = store.create(make_draft())
    before = store.raw()
    changes = []
    store.add_listener(changes.append)

    ghost = dataclasses.replace(existing, id="missing", title="Ghost")
    assert store.update(ghost) is False

    assert store.raw() == before
    assert changes == []


def test_update_with_empty_title_is_rejected(store) -> None:
    original = store.create(make_draft("Keep me"))

    with pytest.raises(ReminderValidationError):
        store.update(dataclasses.replace(original, title=" "))
    assert store.get(original.id).title == "Keep me"


def test_update_keeps_position_in_raw_order(store) -> None:
    a = store.create(make_draft("a"))
    b = store.create(make_draft("b"))
    store.update(dataclasses.replace(a, due_at=START + timedelta(days=3)))

    assert [r.id for r in store.raw()] == [a.id, b.id]


def test_delete_removes_and_notifies(store) -> None:
    reminder = store.create(make_draft())
    changes = []
    store.add_listener(changes.append)

    assert store.delete(reminder.id) is True
    assert store.get(reminder.id) is None
    assert changes == [store]


def test_delete_unknown_id_is_a_no_op(store) -> None:
    store.create(make_draft())
    changes = []
    store.add_listener(changes.append)

    assert store.delete("missing") is False
    assert len(store) == 1
    assert changes == []


def test_set_filter_notifies_only_on_change(store) -> None:
    changes = []
    store.add_listener(changes.append)

    store.set_filter(ReminderFilter.ALL)
    assert changes == []

    store.set_filter(ReminderFilter.NEXT_7_DAYS)
    assert store.current_filter is ReminderFilter.NEXT_7_DAYS
    assert changes == [store]

    store.set_filter(ReminderFilter.NEXT_7_DAYS)
    assert len(changes) == 1


def test_set_filter_accepts_wire_value(store) -> None:
    store.set_filter("next30Days")

    assert store.current_filter is ReminderFilter.NEXT_30_DAYS


def test_remove_listener_stops_notifications(store) -> None:
    changes = []
    store.add_listener(changes.append)
    store.remove_listener(changes.append)

    store.create(make_draft())
    store.set_filter(ReminderFilter.TODAY)

    assert changes == []


def test_list_returns_an_immutable_snapshot(store) -> None:
    store.create(make_draft("a"))
    snapshot = store.list()

    store.create(make_draft("b"))

    assert isinstance(snapshot, tuple)
    assert len(snapshot) == 1
    with pytest.raises(dataclasses.FrozenInstanceError):
        snapshot[0].title = "mutated"


def test_owner_id_is_threaded_through_construction(clock) -> None:
    store = ReminderStore(owner_id="alice", clock=clock)

    assert store.create(make_draft()).owner_id == "alice"


def test_reminder_records_are_frozen() -> None:
    assert dataclasses.is_dataclass(Reminder)
    assert Reminder.__dataclass_params__.frozen
