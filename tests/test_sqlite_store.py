"""Tests for the SQLite progress store."""

import sqlite3
from datetime import timedelta

import pytest

from stitchwise.errors import StorageError, UpdateFailed
from stitchwise.schemas import (
    ContentMastery,
    ItemProgress,
    LearningPath,
    PathProgressDetails,
    UserProgress,
)
from stitchwise.tracker import MasteryTracker, SQLiteProgressStore, StaticPathConfig, fixed_jitter

from conftest import ADDITION, DOUBLING, START, perfect


class TestSchema:

    def test_creates_database_file(self, tmp_path):
        db_path = tmp_path / "nested" / "progress.db"
        SQLiteProgressStore(db_path)
        assert db_path.exists()

    def test_reopen_existing_database(self, tmp_path):
        db_path = tmp_path / "progress.db"
        SQLiteProgressStore(db_path).register_user("alice")
        assert SQLiteProgressStore(db_path).user_exists("alice")


class TestCurriculum:

    def test_register_curriculum(self, sqlite_store):
        sqlite_store.register_curriculum([ADDITION, DOUBLING])

        assert sqlite_store.learning_path_exists("addition")
        assert not sqlite_store.learning_path_exists("unknown-path")
        assert sqlite_store.content_exists("shared")
        assert not sqlite_store.content_exists("nope")
        assert sqlite_store.content_ids_for_path("addition") == ["add-01", "add-02", "add-03", "shared"]
        assert sqlite_store.total_content_count() == 5

    def test_reregistering_replaces_path_items(self, sqlite_store):
        sqlite_store.register_curriculum([ADDITION])
        sqlite_store.register_curriculum([LearningPath(path_id="addition", content_ids=["add-09"])])
        assert sqlite_store.content_ids_for_path("addition") == ["add-09"]
        assert sqlite_store.total_content_count() == 1

    def test_users(self, sqlite_store):
        assert not sqlite_store.user_exists("alice")
        sqlite_store.register_user("alice")
        sqlite_store.register_user("alice")
        assert sqlite_store.user_exists("alice")


class TestRecords:

    def test_content_mastery_round_trip(self, sqlite_store):
        mastery = ContentMastery(
            content_id="add-01",
            mastery_level=0.51,
            attempt_count=2,
            last_attempt_time=START,
            next_review_time=START + timedelta(days=7),
        )
        sqlite_store.save_content_mastery("alice", mastery)

        loaded = sqlite_store.get_content_mastery("alice", "add-01")
        assert loaded == mastery
        assert sqlite_store.get_content_mastery("bob", "add-01") is None

    def test_content_mastery_upsert(self, sqlite_store):
        sqlite_store.save_content_mastery("alice", ContentMastery(content_id="a", last_attempt_time=START))
        sqlite_store.save_content_mastery(
            "alice", ContentMastery(content_id="a", mastery_level=0.3, attempt_count=1, last_attempt_time=START)
        )
        rows = sqlite_store.list_content_mastery("alice")
        assert len(rows) == 1
        assert rows[0].attempt_count == 1

    def test_list_ordered_by_content_id(self, sqlite_store):
        for cid in ("c", "a", "b"):
            sqlite_store.save_content_mastery("alice", ContentMastery(content_id=cid, last_attempt_time=START))
        assert [row.content_id for row in sqlite_store.list_content_mastery("alice")] == ["a", "b", "c"]

    def test_path_progress_round_trip(self, sqlite_store):
        details = PathProgressDetails(
            path_id="addition",
            completion=0.25,
            items={
                "add-01": ItemProgress(mastery_level=0.83, attempt_count=5, position=0),
                "add-02": ItemProgress(position=1),
            },
            last_update=START,
        )
        sqlite_store.save_path_progress("alice", details)
        assert sqlite_store.get_path_progress("alice", "addition") == details
        assert sqlite_store.get_path_progress("alice", "doubling") is None

    def test_user_progress_round_trip(self, sqlite_store):
        progress = UserProgress(
            user_id="alice",
            overall_completion=0.5,
            path_completion={"addition": 0.25, "doubling": 1.0},
            mastered_item_count=3,
            total_item_count=5,
            last_update=START,
        )
        assert not sqlite_store.user_progress_exists("alice")
        sqlite_store.save_user_progress(progress)
        assert sqlite_store.user_progress_exists("alice")
        assert sqlite_store.get_user_progress("alice") == progress

    def test_delete_user_progress(self, sqlite_store):
        sqlite_store.register_user("alice")
        sqlite_store.save_content_mastery("alice", ContentMastery(content_id="a", last_attempt_time=START))
        sqlite_store.save_user_progress(UserProgress(user_id="alice", last_update=START))

        sqlite_store.delete_user_progress("alice")

        assert sqlite_store.user_exists("alice")
        assert sqlite_store.list_content_mastery("alice") == []
        assert sqlite_store.get_user_progress("alice") is None

    def test_backend_failure_raises_storage_error(self, sqlite_store):
        conn = sqlite3.connect(str(sqlite_store.db_path))
        conn.execute("DROP TABLE content_mastery")
        conn.commit()
        conn.close()

        with pytest.raises(StorageError):
            sqlite_store.get_content_mastery("alice", "add-01")


class TestTrackerOnSQLite:

    def test_sessions_persist(self, sqlite_tracker, sqlite_store):
        sqlite_tracker.initialize("alice")
        sqlite_tracker.record_session("alice", perfect())
        sqlite_tracker.record_session("alice", perfect())

        mastery = sqlite_store.get_content_mastery("alice", "add-01")
        assert mastery.mastery_level == pytest.approx(0.51)
        assert mastery.next_review_time == START + timedelta(days=7)

        progress = sqlite_store.get_user_progress("alice")
        assert progress.path_completion == {"addition": 0.0, "doubling": 0.0}
        assert progress.total_item_count == 5

    def test_dropped_table_becomes_update_failed(self, sqlite_tracker, sqlite_store):
        sqlite_tracker.initialize("alice")

        conn = sqlite3.connect(str(sqlite_store.db_path))
        conn.execute("DROP TABLE content_mastery")
        conn.commit()
        conn.close()

        with pytest.raises(UpdateFailed):
            sqlite_tracker.record_session("alice", perfect())

    def test_reopened_database_follows_the_current_curriculum(self, tmp_path, clock):
        db_path = tmp_path / "progress.db"
        old = SQLiteProgressStore(db_path)
        old.register_user("alice")
        old.register_curriculum([ADDITION, DOUBLING])

        store = SQLiteProgressStore(db_path)
        tracker = MasteryTracker(
            store, StaticPathConfig([ADDITION]), jitter=fixed_jitter(), clock=clock
        )
        progress = tracker.initialize("alice")

        assert progress.total_item_count == 4
        assert not store.content_exists("dbl-01")
        assert not store.learning_path_exists("doubling")
        assert tracker.get_completion_stats("alice")["unseen"] == 4


LATER = LearningPath(path_id="later", content_ids=[])


class TestStoreParity:
    """Both storage implementations answer the curriculum checks the same way."""

    def test_path_without_items(self, any_store, clock):
        tracker = MasteryTracker(
            any_store, StaticPathConfig([ADDITION, LATER]), jitter=fixed_jitter(), clock=clock
        )
        progress = tracker.initialize("alice")

        assert any_store.learning_path_exists("later")
        assert progress.path_completion["later"] == 0.0
        assert progress.overall_completion == 0.0

        details = tracker.get_path_progress("alice", "later")
        assert details.completion == 0.0
        assert details.items == {}

    def test_registration_replaces_the_curriculum(self, any_store):
        any_store.register_curriculum([ADDITION, DOUBLING])
        any_store.register_curriculum([ADDITION])

        assert any_store.learning_path_exists("addition")
        assert not any_store.learning_path_exists("doubling")
        assert not any_store.content_exists("dbl-01")
        assert any_store.content_exists("shared")
        assert any_store.content_ids_for_path("doubling") == []
        assert any_store.total_content_count() == 4

    def test_dropped_path_leaves_stats(self, any_store, clock):
        MasteryTracker(
            any_store, StaticPathConfig([ADDITION, DOUBLING]), jitter=fixed_jitter(), clock=clock
        )
        tracker = MasteryTracker(
            any_store, StaticPathConfig([ADDITION]), jitter=fixed_jitter(), clock=clock
        )
        tracker.initialize("alice")

        stats = tracker.get_completion_stats("alice")
        assert stats["total_items"] == 4
        assert stats["unseen"] == 4
        assert stats["paths"] == {"addition": 0.0}
