"""
Storage port - persistence interface used by the MasteryTracker.

Provides:
- ProgressStore: abstract get/save/exists contract keyed by (user_id[, content_id|path_id])
- InMemoryProgressStore: dictionary-backed implementation for tests and demos

Implementations return copies so callers can never mutate stored state in
place, and raise StorageError when the backend fails.
"""

import threading
from abc import ABC, abstractmethod
from typing import Iterable, Optional

from stitchwise.schemas import (
    ContentMastery,
    LearningPath,
    PathProgressDetails,
    UserProgress,
)


class ProgressStore(ABC):
    """Interface for progress persistence."""

    # -------------------------------------------------------------------------
    # Identity and curriculum
    # -------------------------------------------------------------------------

    @abstractmethod
    def register_user(self, user_id: str) -> None:
        """Make a user known to the identity check. Idempotent."""

    @abstractmethod
    def register_curriculum(self, paths: Iterable[LearningPath]) -> None:
        """Replace the registered curriculum with these paths and their items."""

    @abstractmethod
    def user_exists(self, user_id: str) -> bool: ...

    @abstractmethod
    def content_exists(self, content_id: str) -> bool: ...

    @abstractmethod
    def learning_path_exists(self, path_id: str) -> bool: ...

    @abstractmethod
    def content_ids_for_path(self, path_id: str) -> list[str]:
        """Content ids of a path in path order (empty if unknown)."""

    @abstractmethod
    def total_content_count(self) -> int:
        """Distinct content items across all registered paths."""

    # -------------------------------------------------------------------------
    # Progress records
    # -------------------------------------------------------------------------

    @abstractmethod
    def user_progress_exists(self, user_id: str) -> bool: ...

    @abstractmethod
    def get_user_progress(self, user_id: str) -> Optional[UserProgress]: ...

    @abstractmethod
    def save_user_progress(self, progress: UserProgress) -> None: ...

    @abstractmethod
    def get_content_mastery(self, user_id: str, content_id: str) -> Optional[ContentMastery]: ...

    @abstractmethod
    def save_content_mastery(self, user_id: str, mastery: ContentMastery) -> None: ...

    @abstractmethod
    def list_content_mastery(self, user_id: str) -> list[ContentMastery]:
        """All mastery rows of a user, ordered by content id."""

    @abstractmethod
    def get_path_progress(self, user_id: str, path_id: str) -> Optional[PathProgressDetails]: ...

    @abstractmethod
    def save_path_progress(self, user_id: str, progress: PathProgressDetails) -> None: ...

    @abstractmethod
    def delete_user_progress(self, user_id: str) -> None:
        """Remove progress, mastery and path rows of a user (the user stays known)."""


class InMemoryProgressStore(ProgressStore):
    """
    Dictionary-backed ProgressStore.

    Nested dicts keyed user -> content/path. Safe to share between threads.
    """

    def __init__(self, users: Iterable[str] = (), paths: Iterable[LearningPath] = ()):
        self._lock = threading.RLock()
        self._users: set[str] = set(users)
        self._path_items: dict[str, list[str]] = {}
        self._user_progress: dict[str, UserProgress] = {}
        self._mastery: dict[str, dict[str, ContentMastery]] = {}
        self._path_progress: dict[str, dict[str, PathProgressDetails]] = {}
        self.register_curriculum(paths)

    def register_user(self, user_id: str) -> None:
        with self._lock:
            self._users.add(user_id)

    def register_curriculum(self, paths: Iterable[LearningPath]) -> None:
        with self._lock:
            self._path_items = {path.path_id: list(path.content_ids) for path in paths}

    def user_exists(self, user_id: str) -> bool:
        return user_id in self._users

    def content_exists(self, content_id: str) -> bool:
        with self._lock:
            return any(content_id in items for items in self._path_items.values())

    def learning_path_exists(self, path_id: str) -> bool:
        return path_id in self._path_items

    def content_ids_for_path(self, path_id: str) -> list[str]:
        with self._lock:
            return list(self._path_items.get(path_id, []))

    def total_content_count(self) -> int:
        with self._lock:
            return len({cid for items in self._path_items.values() for cid in items})

    def user_progress_exists(self, user_id: str) -> bool:
        return user_id in self._user_progress

    def get_user_progress(self, user_id: str) -> Optional[UserProgress]:
        with self._lock:
            progress = self._user_progress.get(user_id)
            return progress.model_copy(deep=True) if progress else None

    def save_user_progress(self, progress: UserProgress) -> None:
        with self._lock:
            self._user_progress[progress.user_id] = progress.model_copy(deep=True)

    def get_content_mastery(self, user_id: str, content_id: str) -> Optional[ContentMastery]:
        with self._lock:
            mastery = self._mastery.get(user_id, {}).get(content_id)
            return mastery.model_copy(deep=True) if mastery else None

    def save_content_mastery(self, user_id: str, mastery: ContentMastery) -> None:
        with self._lock:
            self._mastery.setdefault(user_id, {})[mastery.content_id] = mastery.model_copy(deep=True)

    def list_content_mastery(self, user_id: str) -> list[ContentMastery]:
        with self._lock:
            rows = self._mastery.get(user_id, {})
            return [rows[cid].model_copy(deep=True) for cid in sorted(rows)]

    def get_path_progress(self, user_id: str, path_id: str) -> Optional[PathProgressDetails]:
        with self._lock:
            progress = self._path_progress.get(user_id, {}).get(path_id)
            return progress.model_copy(deep=True) if progress else None

    def save_path_progress(self, user_id: str, progress: PathProgressDetails) -> None:
        with self._lock:
            self._path_progress.setdefault(user_id, {})[progress.path_id] = progress.model_copy(deep=True)

    def delete_user_progress(self, user_id: str) -> None:
        with self._lock:
            self._user_progress.pop(user_id, None)
            self._mastery.pop(user_id, None)
            self._path_progress.pop(user_id, None)
