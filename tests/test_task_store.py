# tests/test_task_store.py

from __future__ import annotations

import pytest

from dday_todo.errors import PersistenceCapacityError, ValidationError
from dday_todo.tasks.task_models import LogAction, LogEntry, Task, TaskStatus
from dday_todo.tasks.task_store import MergeResult, TaskStore

from .conftest import NOW, make_task
from .fakes import FixedClock, RecordingPersistence


def test_create_without_date(store: TaskStore, persistence: RecordingPersistence) -> None:
    task = store.create("  우유 사기  ")

    assert task.title == "우유 사기"
    assert task.due_date is None
    assert task.status is TaskStatus.IN_PROGRESS
    assert len(task.logs) == 1
    assert task.logs[0].action == LogAction.CREATE
    assert task.logs[0].note == "new task"
    assert task.logs[0].date == "2024-06-01 09:30:00"
    assert len(persistence.saves) == 1


def test_create_with_date_notes_the_due_date(store: TaskStore) -> None:
    task = store.create("내일 보고서 제출")

    assert task.title == "보고서 제출"
    assert task.due_date == "2024-06-02"
    assert task.logs[0].note == "due date set: 2024-06-02"


def test_create_falls_back_to_raw_text_when_residual_is_empty(store: TaskStore) -> None:
    task = store.create("내일")
    assert task.title == "내일"
    assert task.due_date == "2024-06-02"


def test_create_rejects_blank_text(store: TaskStore, persistence: RecordingPersistence) -> None:
    with pytest.raises(ValidationError):
        store.create("   ")
    assert len(store) == 0
    assert persistence.saves == []


def test_create_inserts_at_front_with_unique_increasing_ids(store: TaskStore) -> None:
    a = store.create("first")
    b = store.create("second")

    assert [t.id for t in store.tasks] == [b.id, a.id]
    assert b.id > a.id
    assert a.id == int(NOW.timestamp() * 1000)


def test_toggle_twice_restores_status_and_appends_two_entries(store: TaskStore) -> None:
    task = store.create("청소")

    store.toggle_status(task.id)
    assert task.status is TaskStatus.DONE
    assert task.logs[-1].action == LogAction.COMPLETE

    store.toggle_status(task.id)
    assert task.status is TaskStatus.IN_PROGRESS
    assert task.logs[-1].action == LogAction.REOPEN
    assert len(task.logs) == 3


def test_toggle_unknown_id_is_noop(store: TaskStore, persistence: RecordingPersistence) -> None:
    assert store.toggle_status(42) is None
    assert persistence.saves == []


def test_note_with_date_reschedules(store: TaskStore, clock: FixedClock) -> None:
    task = store.create("정리")
    clock.advance(hours=1)

    store.append_note(task.id, "3일후 마무리하자")

    assert task.due_date == "2024-06-04"
    last = task.logs[-1]
    assert last.action == LogAction.RESCHEDULE
    assert last.note == "마무리하자"
    assert last.date == "2024-06-01 10:30:00"


def test_note_with_same_date_is_a_plain_update(store: TaskStore) -> None:
    task = store.create("내일 발표")

    store.append_note(task.id, "내일 리허설")

    assert task.due_date == "2024-06-02"
    assert task.logs[-1].action == LogAction.UPDATE
    assert task.logs[-1].note == "리허설"


def test_note_that_is_only_a_date_gets_a_description(store: TaskStore) -> None:
    task = store.create("발표")
    store.append_note(task.id, "모레")
    assert task.logs[-1].note == "due date changed: 2024-06-03"


def test_plain_note_and_attachment(store: TaskStore) -> None:
    task = store.create("사진 정리")

    store.append_note(task.id, "진행 중")
    store.append_note(task.id, None, "data:image/png;base64,AAAA")

    assert task.logs[1] == LogEntry("2024-06-01 09:30:00", "update", "진행 중", None)
    assert task.logs[2].note is None
    assert task.logs[2].image == "data:image/png;base64,AAAA"
    assert task.due_date is None


def test_blank_note_without_attachment_is_rejected(store: TaskStore) -> None:
    task = store.create("x")
    with pytest.raises(ValidationError):
        store.append_note(task.id, "  ", None)
    assert len(task.logs) == 1


def test_note_for_unknown_id_is_noop(store: TaskStore) -> None:
    assert store.append_note(99, "hello") is None


def test_delete(store: TaskStore) -> None:
    task = store.create("x")
    assert store.delete(task.id) is True
    assert store.delete(task.id) is False
    assert len(store) == 0


def test_clear_completed(store: TaskStore, persistence: RecordingPersistence) -> None:
    a = store.create("a")
    b = store.create("b")
    store.create("c")
    store.toggle_status(a.id)
    store.toggle_status(b.id)
    saves_before = len(persistence.saves)

    assert store.clear_completed() == 2
    assert [t.title for t in store] == ["c"]
    assert len(persistence.saves) == saves_before + 1


def test_clear_completed_with_nothing_done(store: TaskStore, persistence: RecordingPersistence) -> None:
    store.create("a")
    saves_before = len(persistence.saves)

    assert store.clear_completed() == 0
    assert len(store) == 1
    assert len(persistence.saves) == saves_before


def test_merge_replaces_existing_task_wholesale(store: TaskStore) -> None:
    store.create("other")
    existing = store.create("원래 제목")
    store.toggle_status(existing.id)

    incoming = {
        "id": existing.id,
        "title": "새 제목",
        "status": "in_progress",
        "dueDate": "2024-07-01",
        "logs": [{"date": "2024-01-01 00:00:00", "action": "create", "note": "imported"}],
    }
    result = store.merge_import([incoming])

    assert result == MergeResult(added=0, updated=1, skipped=0)
    replaced = store.get(existing.id)
    assert replaced is not None
    assert replaced.title == "새 제목"
    assert replaced.status is TaskStatus.IN_PROGRESS
    assert replaced.due_date == "2024-07-01"
    assert [e.note for e in replaced.logs] == ["imported"]
    # position in storage order is kept
    assert store.tasks[0].id == existing.id


def test_merge_adds_new_tasks_in_front_and_skips_malformed(store: TaskStore) -> None:
    store.create("existing")
    incoming = [
        {"id": 1, "title": "one"},
        {"title": "no id"},
        {"id": 2},
        "not a record",
        {"id": 3, "title": "three", "logs": []},
    ]

    result = store.merge_import(incoming)

    assert result == MergeResult(added=2, updated=0, skipped=3)
    assert [t.title for t in store][:2] == ["three", "one"]
    # imported records without logs get a recovery entry
    assert store.get(1).logs[0].action == LogAction.RECOVER
    assert store.get(3).logs[0].action == LogAction.RECOVER


def test_merge_with_nothing_valid_does_not_signal(store: TaskStore, persistence: RecordingPersistence) -> None:
    assert store.merge_import([{"foo": "bar"}]) == MergeResult(skipped=1)
    assert persistence.saves == []


def test_new_ids_stay_above_imported_ids(store: TaskStore) -> None:
    big = int(NOW.timestamp() * 1000) + 5000
    store.merge_import([{"id": big, "title": "future"}])
    task = store.create("after import")
    assert task.id == big + 1


def test_persistence_failure_surfaces_after_mutation(clock: FixedClock) -> None:
    failing = RecordingPersistence(fail=True)
    store = TaskStore(clock=clock, on_change=lambda s: failing.save(s.to_records()))

    with pytest.raises(PersistenceCapacityError):
        store.create("still here")

    assert [t.title for t in store] == ["still here"]


def test_from_records_upgrades_legacy_records(clock: FixedClock) -> None:
    records = [
        {"id": 10, "text": "옛날 할일", "completed": True},
        {"id": 11, "title": "진행중인 일", "status": "진행중", "dueDate": "2024-6-1", "logs": "bad"},
        {"id": 12, "title": "완료된 일", "status": "완료", "logs": [{"date": "d", "action": "생성"}, 5]},
        {"id": 12, "title": "dup"},
    ]

    store = TaskStore.from_records(records, clock=clock)

    old, current, finished, dup = store.tasks
    assert (old.title, old.status) == ("옛날 할일", TaskStatus.DONE)
    assert old.logs[0].action == LogAction.RECOVER
    assert old.logs[0].note == "data recovered"

    assert current.status is TaskStatus.IN_PROGRESS
    assert current.due_date is None
    assert len(current.logs) == 1

    assert finished.status is TaskStatus.DONE
    assert [e.action for e in finished.logs] == ["생성"]

    assert dup.id != 12
    assert len({t.id for t in store}) == 4


def test_records_round_trip(store: TaskStore, clock: FixedClock) -> None:
    task = store.create("내일 보고서")
    store.append_note(task.id, "사진", "data:image/jpeg;base64,/9j/")
    store.toggle_status(task.id)
    store.create("두번째")

    reloaded = TaskStore.from_records(store.to_records(), clock=clock)

    assert reloaded.to_records() == store.to_records()


def test_backup_records_is_a_one_element_list(store: TaskStore) -> None:
    task = store.create("백업")
    records = store.backup_records(task.id)
    assert records == [task.to_dict()]
    assert store.backup_records(123) is None


def test_store_accepts_prebuilt_tasks() -> None:
    tasks: list[Task] = [make_task(1), make_task(2)]
    store = TaskStore(tasks)
    assert 1 in store
    assert 3 not in store
    assert len(store) == 2


@pytest.mark.parametrize("text", ["99999999999월 1일 회의", "9" * 5000 + "일 후 회의"])
def test_create_keeps_oversized_numbers_as_plain_text(store: TaskStore, text: str) -> None:
    task = store.create(text)

    assert task.title == text
    assert task.due_date is None
    assert task.logs[0].note == "new task"


def test_merged_task_values_are_not_shared_between_stores(store: TaskStore, clock: FixedClock) -> None:
    task = store.create("공유 금지")
    other = TaskStore(clock=clock)

    other.merge_import([task])
    store.toggle_status(task.id)

    copied = other.get(task.id)
    assert copied is not None
    assert copied.status is TaskStatus.IN_PROGRESS
    assert len(copied.logs) == 1
