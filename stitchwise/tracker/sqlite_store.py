"""
SQLiteProgressStore - Persist learner progress in ~/.stitchwise/progress.db.

Stores, per user:
- Content mastery rows (one per attempted or initialized item)
- Path progress snapshots
- Account-level progress

plus the registered curriculum (learning paths and the items of each path,
replaced as a whole on registration) and the set of known users used for
the identity check.
"""

import json
import sqlite3
from datetime import datetime
from pathlib import Path
from typing import Iterable, Optional

from stitchwise.errors import StorageError
from stitchwise.schemas import (
    ContentMastery,
    ItemProgress,
    LearningPath,
    PathProgressDetails,
    UserProgress,
)

from .storage import ProgressStore


DEFAULT_PROGRESS_DIR = Path.home() / ".stitchwise"
DEFAULT_PROGRESS_DB = DEFAULT_PROGRESS_DIR / "progress.db"

SCHEMA = """
CREATE TABLE IF NOT EXISTS users (
    user_id TEXT PRIMARY KEY,
    created_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP
);

CREATE TABLE IF NOT EXISTS learning_paths (
    path_id TEXT PRIMARY KEY,
    weight REAL NOT NULL DEFAULT 1,
    position INTEGER NOT NULL
);

CREATE TABLE IF NOT EXISTS curriculum_items (
    path_id TEXT NOT NULL,
    content_id TEXT NOT NULL,
    position INTEGER NOT NULL,
    PRIMARY KEY (path_id, content_id)
);

CREATE TABLE IF NOT EXISTS user_progress (
    user_id TEXT PRIMARY KEY,
    overall_completion REAL NOT NULL DEFAULT 0,
    path_completion TEXT NOT NULL DEFAULT '{}',
    mastered_item_count INTEGER NOT NULL DEFAULT 0,
    total_item_count INTEGER NOT NULL DEFAULT 0,
    last_update TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS content_mastery (
    user_id TEXT NOT NULL,
    content_id TEXT NOT NULL,
    mastery_level REAL NOT NULL DEFAULT 0,
    attempt_count INTEGER NOT NULL DEFAULT 0,
    last_attempt_time TEXT NOT NULL,
    next_review_time TEXT,
    PRIMARY KEY (user_id, content_id)
);

CREATE TABLE IF NOT EXISTS path_progress (
    user_id TEXT NOT NULL,
    path_id TEXT NOT NULL,
    completion REAL NOT NULL DEFAULT 0,
    items TEXT NOT NULL DEFAULT '{}',
    last_update TEXT NOT NULL,
    PRIMARY KEY (user_id, path_id)
);

CREATE INDEX IF NOT EXISTS idx_content_mastery_user
ON content_mastery(user_id);

CREATE INDEX IF NOT EXISTS idx_curriculum_items_content
ON curriculum_items(content_id);
"""


def _parse_time(value: Optional[str]) -> Optional[datetime]:
    return datetime.fromisoformat(value) if value else None


class SQLiteProgressStore(ProgressStore):
    """
    ProgressStore backed by a SQLite database file.

    Each method opens its own connection, so one store can be shared by
    threads. sqlite3 errors surface as StorageError.
    """

    def __init__(self, db_path: Optional[Path] = None):
        """
        Initialize the store.

        Args:
            db_path: Path to progress.db (default: ~/.stitchwise/progress.db)
        """
        self.db_path = Path(db_path) if db_path else DEFAULT_PROGRESS_DB
        self._ensure_database()

    def _ensure_database(self):
        """Create database and tables if they don't exist."""
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

        conn = sqlite3.connect(str(self.db_path))
        try:
            conn.executescript(SCHEMA)
            conn.commit()
        except sqlite3.Error as exc:
            raise StorageError(f"Could not create schema in {self.db_path}: {exc}") from exc
        finally:
            conn.close()

    def _get_connection(self) -> sqlite3.Connection:
        """Get a new database connection."""
        conn = sqlite3.connect(str(self.db_path))
        conn.row_factory = sqlite3.Row
        return conn

    def _fetchone(self, sql: str, params: tuple) -> Optional[sqlite3.Row]:
        conn = self._get_connection()
        try:
            return conn.execute(sql, params).fetchone()
        except sqlite3.Error as exc:
            raise StorageError(str(exc)) from exc
        finally:
            conn.close()

    def _fetchall(self, sql: str, params: tuple) -> list[sqlite3.Row]:
        conn = self._get_connection()
        try:
            return conn.execute(sql, params).fetchall()
        except sqlite3.Error as exc:
            raise StorageError(str(exc)) from exc
        finally:
            conn.close()

    def _execute(self, sql: str, params: tuple):
        conn = self._get_connection()
        try:
            conn.execute(sql, params)
            conn.commit()
        except sqlite3.Error as exc:
            conn.rollback()
            raise StorageError(str(exc)) from exc
        finally:
            conn.close()

    # -------------------------------------------------------------------------
    # Identity and curriculum
    # -------------------------------------------------------------------------

    def register_user(self, user_id: str) -> None:
        self._execute("INSERT OR IGNORE INTO users (user_id) VALUES (?)", (user_id,))

    def register_curriculum(self, paths: Iterable[LearningPath]) -> None:
        conn = self._get_connection()
        try:
            conn.execute("DELETE FROM curriculum_items")
            conn.execute("DELETE FROM learning_paths")
            for position, path in enumerate(paths):
                conn.execute(
                    "INSERT INTO learning_paths (path_id, weight, position) VALUES (?, ?, ?)",
                    (path.path_id, path.weight, position)
                )
                conn.executemany(
                    """INSERT INTO curriculum_items (path_id, content_id, position)
                       VALUES (?, ?, ?)""",
                    [(path.path_id, cid, pos) for pos, cid in enumerate(path.content_ids)]
                )
            conn.commit()
        except sqlite3.Error as exc:
            conn.rollback()
            raise StorageError(f"Could not register curriculum: {exc}") from exc
        finally:
            conn.close()

    def user_exists(self, user_id: str) -> bool:
        return self._fetchone("SELECT 1 FROM users WHERE user_id = ?", (user_id,)) is not None

    def content_exists(self, content_id: str) -> bool:
        row = self._fetchone(
            "SELECT 1 FROM curriculum_items WHERE content_id = ? LIMIT 1", (content_id,)
        )
        return row is not None

    def learning_path_exists(self, path_id: str) -> bool:
        row = self._fetchone(
            "SELECT 1 FROM learning_paths WHERE path_id = ?", (path_id,)
        )
        return row is not None

    def content_ids_for_path(self, path_id: str) -> list[str]:
        rows = self._fetchall(
            """SELECT content_id FROM curriculum_items
               WHERE path_id = ? ORDER BY position""",
            (path_id,)
        )
        return [row["content_id"] for row in rows]

    def total_content_count(self) -> int:
        row = self._fetchone("SELECT COUNT(DISTINCT content_id) AS n FROM curriculum_items", ())
        return row["n"] if row else 0

    # -------------------------------------------------------------------------
    # User progress
    # -------------------------------------------------------------------------

    def user_progress_exists(self, user_id: str) -> bool:
        row = self._fetchone("SELECT 1 FROM user_progress WHERE user_id = ?", (user_id,))
        return row is not None

    def get_user_progress(self, user_id: str) -> Optional[UserProgress]:
        row = self._fetchone(
            """SELECT user_id, overall_completion, path_completion,
                      mastered_item_count, total_item_count, last_update
               FROM user_progress WHERE user_id = ?""",
            (user_id,)
        )
        if not row:
            return None
        return UserProgress(
            user_id=row["user_id"],
            overall_completion=row["overall_completion"],
            path_completion=json.loads(row["path_completion"]),
            mastered_item_count=row["mastered_item_count"],
            total_item_count=row["total_item_count"],
            last_update=_parse_time(row["last_update"]),
        )

    def save_user_progress(self, progress: UserProgress) -> None:
        self._execute(
            """INSERT INTO user_progress (user_id, overall_completion, path_completion,
                                          mastered_item_count, total_item_count, last_update)
               VALUES (?, ?, ?, ?, ?, ?)
               ON CONFLICT(user_id) DO UPDATE SET
                 overall_completion = excluded.overall_completion,
                 path_completion = excluded.path_completion,
                 mastered_item_count = excluded.mastered_item_count,
                 total_item_count = excluded.total_item_count,
                 last_update = excluded.last_update""",
            (
                progress.user_id,
                progress.overall_completion,
                json.dumps(progress.path_completion),
                progress.mastered_item_count,
                progress.total_item_count,
                progress.last_update.isoformat(),
            )
        )

    # -------------------------------------------------------------------------
    # Content mastery
    # -------------------------------------------------------------------------

    @staticmethod
    def _row_to_mastery(row: sqlite3.Row) -> ContentMastery:
        return ContentMastery(
            content_id=row["content_id"],
            mastery_level=row["mastery_level"],
            attempt_count=row["attempt_count"],
            last_attempt_time=_parse_time(row["last_attempt_time"]),
            next_review_time=_parse_time(row["next_review_time"]),
        )

    def get_content_mastery(self, user_id: str, content_id: str) -> Optional[ContentMastery]:
        row = self._fetchone(
            """SELECT content_id, mastery_level, attempt_count, last_attempt_time, next_review_time
               FROM content_mastery
               WHERE user_id = ? AND content_id = ?""",
            (user_id, content_id)
        )
        return self._row_to_mastery(row) if row else None

    def save_content_mastery(self, user_id: str, mastery: ContentMastery) -> None:
        self._execute(
            """INSERT INTO content_mastery (user_id, content_id, mastery_level, attempt_count,
                                            last_attempt_time, next_review_time)
               VALUES (?, ?, ?, ?, ?, ?)
               ON CONFLICT(user_id, content_id) DO UPDATE SET
                 mastery_level = excluded.mastery_level,
                 attempt_count = excluded.attempt_count,
                 last_attempt_time = excluded.last_attempt_time,
                 next_review_time = excluded.next_review_time""",
            (
                user_id,
                mastery.content_id,
                mastery.mastery_level,
                mastery.attempt_count,
                mastery.last_attempt_time.isoformat(),
                mastery.next_review_time.isoformat() if mastery.next_review_time else None,
            )
        )

    def list_content_mastery(self, user_id: str) -> list[ContentMastery]:
        rows = self._fetchall(
            """SELECT content_id, mastery_level, attempt_count, last_attempt_time, next_review_time
               FROM content_mastery
               WHERE user_id = ? ORDER BY content_id""",
            (user_id,)
        )
        return [self._row_to_mastery(row) for row in rows]

    # -------------------------------------------------------------------------
    # Path progress
    # -------------------------------------------------------------------------

    def get_path_progress(self, user_id: str, path_id: str) -> Optional[PathProgressDetails]:
        row = self._fetchone(
            """SELECT path_id, completion, items, last_update
               FROM path_progress
               WHERE user_id = ? AND path_id = ?""",
            (user_id, path_id)
        )
        if not row:
            return None
        items = {
            cid: ItemProgress(**item)
            for cid, item in json.loads(row["items"]).items()
        }
        return PathProgressDetails(
            path_id=row["path_id"],
            completion=row["completion"],
            items=items,
            last_update=_parse_time(row["last_update"]),
        )

    def save_path_progress(self, user_id: str, progress: PathProgressDetails) -> None:
        items = {cid: item.model_dump() for cid, item in progress.items.items()}
        self._execute(
            """INSERT INTO path_progress (user_id, path_id, completion, items, last_update)
               VALUES (?, ?, ?, ?, ?)
               ON CONFLICT(user_id, path_id) DO UPDATE SET
                 completion = excluded.completion,
                 items = excluded.items,
                 last_update = excluded.last_update""",
            (
                user_id,
                progress.path_id,
                progress.completion,
                json.dumps(items),
                progress.last_update.isoformat(),
            )
        )

    def delete_user_progress(self, user_id: str) -> None:
        conn = self._get_connection()
        try:
            conn.execute("DELETE FROM content_mastery WHERE user_id = ?", (user_id,))
            conn.execute("DELETE FROM path_progress WHERE user_id = ?", (user_id,))
            conn.execute("DELETE FROM user_progress WHERE user_id = ?", (user_id,))
            conn.commit()
        except sqlite3.Error as exc:
            conn.rollback()
            raise StorageError(f"Could not reset progress for {user_id}: {exc}") from exc
        finally:
            conn.close()
