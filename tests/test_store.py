# tests/test_store.py

from __future__ import annotations

import json
from pathlib import Path

import pytest

from teemo.errors import UnknownUserError
from teemo.store import RecordStore


def test_missing_file_starts_empty(store: RecordStore) -> None:
    db = store.snapshot()
    assert db.users == []
    assert db.tasks == []
    assert db.next_user_id == 1
    assert db.next_task_id == 1


def test_unparseable_file_starts_empty(data_dir: Path) -> None:
    data_dir.mkdir(parents=True)
    (data_dir / "teemo_db.json").write_text("{not json", encoding="utf-8")

    store = RecordStore(data_dir=str(data_dir))
    assert store.snapshot().users == []


def test_create_user_persists_with_camelcase_keys(store: RecordStore) -> None:
    user = store.create_user("a@x.com", "password1")
    assert user.id == 1

    raw = json.loads(store.path.read_text(encoding="utf-8"))
    assert raw["nextUserId"] == 2
    assert raw["nextTaskId"] == 1
    assert raw["users"][0]["email"] == "a@x.com"
    assert "createdAt" in raw["users"][0]


def test_state_survives_reopen(store: RecordStore, data_dir: Path) -> None:
    user = store.create_user("a@x.com", "password1")
    store.create_task(user.id, "Buy milk", "", None)

    reopened = RecordStore(data_dir=str(data_dir))
    assert reopened.find_user_by_credentials("a@x.com", "password1") == user
    assert [t.title for t in reopened.list_tasks_for_user(user.id)] == ["Buy milk"]


def test_every_mutation_bumps_version(store: RecordStore) -> None:
    user = store.create_user("a@x.com", "password1")
    task = store.create_task(user.id, "t", None, None)
    store.toggle_task_completion(task.id, user.id)
    assert store.snapshot().version == 3


def test_ids_are_never_reused(store: RecordStore) -> None:
    user = store.create_user("a@x.com", "password1")
    first = store.create_task(user.id, "one", None, None)
    second = store.create_task(user.id, "two", None, None)

    assert store.delete_task(second.id, user.id)
    third = store.create_task(user.id, "three", None, None)

    assert (first.id, second.id, third.id) == (1, 2, 3)
    assert store.snapshot().next_task_id == 4


def test_counters_repaired_on_load(data_dir: Path) -> None:
    data_dir.mkdir(parents=True)
    (data_dir / "teemo_db.json").write_text(json.dumps({
        "users": [{"id": 5, "email": "a@x.com", "password": "password1", "createdAt": "2024-01-01T00:00:00.000Z"}],
        "tasks": [],
        "nextUserId": 1,
        "nextTaskId": 1,
    }), encoding="utf-8")

    store = RecordStore(data_dir=str(data_dir))
    assert store.create_user("b@x.com", "password1").id == 6


def test_find_user_by_email_is_case_sensitive_and_can_exclude(store: RecordStore) -> None:
    user = store.create_user("a@x.com", "password1")

    assert store.find_user_by_email("a@x.com") == user
    assert store.find_user_by_email("A@x.com") is None
    assert store.find_user_by_email("a@x.com", exclude_id=user.id) is None


def test_find_user_by_credentials(store: RecordStore) -> None:
    store.create_user("a@x.com", "password1")
    assert store.find_user_by_credentials("a@x.com", "password1") is not None
    assert store.find_user_by_credentials("a@x.com", "password2") is None


def test_update_user_keeps_password_when_empty(store: RecordStore) -> None:
    user = store.create_user("a@x.com", "password1")

    updated = store.update_user(user.id, email="b@x.com", password="")
    assert updated.email == "b@x.com"
    assert updated.password == "password1"

    updated = store.update_user(user.id, email="b@x.com", password="password2")
    assert updated.password == "password2"


def test_update_unknown_user_is_noop(store: RecordStore) -> None:
    assert store.update_user(99, email="x@x.com") is None
    assert store.snapshot().version == 0


def test_update_password_by_email(store: RecordStore) -> None:
    store.create_user("a@x.com", "password1")
    assert store.update_password_by_email("a@x.com", "newpass1").password == "newpass1"
    assert store.update_password_by_email("nobody@x.com", "newpass1") is None


def test_returned_records_are_copies(store: RecordStore) -> None:
    user = store.create_user("a@x.com", "password1")
    user.email = "hacked@x.com"
    assert store.find_user_by_email("a@x.com") is not None


def test_create_task_defaults(store: RecordStore) -> None:
    user = store.create_user("a@x.com", "password1")
    task = store.create_task(user.id, "Buy milk", "2 litres", "2030-01-01T09:00")

    assert task.user_id == user.id
    assert task.completed is False
    assert task.completion_time == "2030-01-01T09:00"
    assert task.created_at


def test_create_task_requires_existing_user(store: RecordStore) -> None:
    with pytest.raises(UnknownUserError):
        store.create_task(42, "orphan", None, None)


def test_toggle_flips_for_owner(store: RecordStore) -> None:
    user = store.create_user("a@x.com", "password1")
    task = store.create_task(user.id, "t", None, None)

    assert store.toggle_task_completion(task.id, user.id).completed is True
    assert store.toggle_task_completion(task.id, user.id).completed is False


def test_toggle_and_delete_ignore_non_owner(store: RecordStore) -> None:
    owner = store.create_user("a@x.com", "password1")
    other = store.create_user("b@x.com", "password1")
    task = store.create_task(owner.id, "mine", None, None)
    before = store.snapshot()

    assert store.toggle_task_completion(task.id, other.id) is None
    assert store.delete_task(task.id, other.id) is False
    assert store.toggle_task_completion(999, owner.id) is None
    assert store.delete_task(999, owner.id) is False

    assert store.snapshot() == before


def test_list_tasks_for_user_only_returns_owned(store: RecordStore) -> None:
    a = store.create_user("a@x.com", "password1")
    b = store.create_user("b@x.com", "password1")
    store.create_task(a.id, "a1", None, None)
    store.create_task(b.id, "b1", None, None)
    store.create_task(a.id, "a2", None, None)

    assert [t.title for t in store.list_tasks_for_user(a.id)] == ["a1", "a2"]
    assert [t.title for t in store.list_tasks_for_user(b.id)] == ["b1"]


def test_close_leaves_untouched_store_alone(store: RecordStore) -> None:
    store.close()
    assert not store.path.exists()


def test_close_keeps_saved_document(store: RecordStore) -> None:
    store.create_user("a@x.com", "password1")
    before = store.path.read_bytes()
    store.close()
    assert store.path.read_bytes() == before


def test_unparseable_file_survives_load_and_close(data_dir: Path) -> None:
    data_dir.mkdir(parents=True)
    path = data_dir / "teemo_db.json"
    path.write_bytes(b"{not json")

    RecordStore(data_dir=str(data_dir)).close()
    assert path.read_bytes() == b"{not json"


def test_get_user(store: RecordStore) -> None:
    user = store.create_user("a@x.com", "password1")
    assert store.get_user(user.id) == user
    assert store.get_user(99) is None
