"""Tests for the SQLite task store."""

import sqlite3
from datetime import date

import pytest

from task_importer.core.models import CandidateTask, TaskUpdate
from task_importer.exceptions import ValidationError
from task_importer.store.base import TaskStore
from task_importer.store.sqlite import SqliteTaskStore


class TestValidate:
    """Tests for TaskStore.validate."""

    def test_valid(self):
        assert TaskStore.validate(CandidateTask(title="Buy milk")) is True

    def test_title_required(self):
        with pytest.raises(ValidationError, match="Title is required"):
            TaskStore.validate(CandidateTask(title="   "))

    def test_title_length(self):
        TaskStore.validate(CandidateTask(title="x" * 100))
        with pytest.raises(ValidationError, match="100 characters"):
            TaskStore.validate(CandidateTask(title="x" * 101))

    def test_description_length(self):
        TaskStore.validate(CandidateTask(title="A", description="d" * 500))
        with pytest.raises(ValidationError, match="500 characters"):
            TaskStore.validate(CandidateTask(title="A", description="d" * 501))


class TestSqliteTaskStore:
    """Tests for SqliteTaskStore."""

    def test_insert_one(self, store):
        """Test that insert assigns id and timestamps."""
        stored = store.insert_one(
            CandidateTask(title="Buy milk", description="2%", due_date=date(2024, 4, 15), completed=True)
        )

        assert stored.id > 0
        assert stored.title == "Buy milk"
        assert stored.description == "2%"
        assert stored.due_date == date(2024, 4, 15)
        assert stored.completed is True
        assert stored.created_at == stored.updated_at
        assert store.count() == 1

    def test_insert_one_rejects_invalid(self, store):
        with pytest.raises(ValidationError):
            store.insert_one(CandidateTask(title="x" * 101))
        assert store.count() == 0

    def test_insert_many(self, store):
        count = store.insert_many([CandidateTask(title="A"), CandidateTask(title="B")])

        assert count == 2
        assert store.count() == 2

    def test_insert_many_all_or_nothing(self, store):
        """Test that one invalid record blocks the whole bulk write."""
        with pytest.raises(ValidationError):
            store.insert_many([CandidateTask(title="A"), CandidateTask(title="x" * 101)])

        assert store.count() == 0

    def test_insert_many_empty(self, store):
        assert store.insert_many([]) == 0

    def test_list_all_unpaginated(self, store):
        """Test that limit=None returns the full corpus."""
        for i in range(15):
            store.insert_one(CandidateTask(title=f"Task {i}"))

        page = store.list_all()

        assert page.total_count == 15
        assert len(page.records) == 15

    def test_list_all_newest_first(self, store):
        store.insert_one(CandidateTask(title="First"))
        store.insert_one(CandidateTask(title="Second"))

        titles = [t.title for t in store.list_all().records]
        assert titles == ["Second", "First"]

    def test_list_all_paginated(self, store):
        for i in range(5):
            store.insert_one(CandidateTask(title=f"Task {i}"))

        page = store.list_all(page=2, limit=2)

        assert page.total_count == 5
        assert page.pages == 3
        assert [t.title for t in page.records] == ["Task 2", "Task 1"]

    def test_find_by_id_missing(self, store):
        assert store.find_by_id(999) is None

    def test_update_fields(self, store):
        stored = store.insert_one(CandidateTask(title="Old", description="desc"))

        updated = store.update(
            stored.id,
            TaskUpdate(title="New", completed=True, due_date=date(2024, 5, 1)),
        )

        assert updated.title == "New"
        assert updated.completed is True
        assert updated.due_date == date(2024, 5, 1)
        assert updated.description == "desc"

    def test_update_clear_fields(self, store):
        stored = store.insert_one(
            CandidateTask(title="Task", description="desc", due_date=date(2024, 5, 1))
        )

        updated = store.update(stored.id, TaskUpdate(clear_description=True, clear_due_date=True))

        assert updated.description is None
        assert updated.due_date is None

    def test_update_validates(self, store):
        stored = store.insert_one(CandidateTask(title="Task"))

        with pytest.raises(ValidationError):
            store.update(stored.id, TaskUpdate(title="x" * 101))

        assert store.find_by_id(stored.id).title == "Task"

    def test_update_missing(self, store):
        assert store.update(999, TaskUpdate(title="New")) is None

    def test_update_empty_is_noop(self, store):
        stored = store.insert_one(CandidateTask(title="Task"))
        assert store.update(stored.id, TaskUpdate()) == stored

    def test_delete(self, store):
        stored = store.insert_one(CandidateTask(title="Task"))

        assert store.delete(stored.id) is True
        assert store.delete(stored.id) is False
        assert store.count() == 0

    def test_migrates_old_schema(self, tmp_path):
        """Test that missing columns are added to an existing table."""
        db_path = tmp_path / "old.sqlite3"
        conn = sqlite3.connect(str(db_path))
        conn.execute(
            "CREATE TABLE tasks (id INTEGER PRIMARY KEY AUTOINCREMENT, title TEXT NOT NULL, "
            "created_at TEXT NOT NULL, updated_at TEXT NOT NULL)"
        )
        conn.commit()
        conn.close()

        store = SqliteTaskStore(db_path)
        stored = store.insert_one(CandidateTask(title="Task", completed=True))

        assert stored.completed is True
