"""
MasteryTracker - Track per-item mastery and path/account completion.

For every (user, content item) pair the tracker keeps a mastery level that
decays with time and is blended with each new practice session, and schedules
the next review. Path completion and overall completion are derived from the
mastery rows after every write.

Concurrency:
- recordSession for the same (user, item) is serialized end to end
- path and account aggregates of a user are recomputed under a per-user lock
- read-through caches are invalidated inside the same critical section as the write

Storage failures:
- failures while writing surface as UpdateFailed or InitializationFailed
- reads and identity/curriculum checks let the store's StorageError through
"""

import logging
from datetime import datetime, timezone
from typing import Callable, Mapping, Optional, Union

from pydantic import ValidationError

from stitchwise.errors import (
    AlreadyInitialized,
    ContentNotFound,
    InitializationFailed,
    InvalidSessionResult,
    LearningPathNotFound,
    NoMasteryData,
    NoProgressData,
    StorageError,
    UpdateFailed,
    UserNotFound,
)
from stitchwise.schemas import (
    ContentMastery,
    ItemProgress,
    LearningPath,
    PathProgressDetails,
    SessionResult,
    UserProgress,
    is_mastered,
)

from .cache import KeyedLocks, TwoLevelCache
from .mastery import (
    JitterSource,
    blend_mastery,
    elapsed_days,
    next_review_time,
    overall_completion,
    path_completion,
    random_jitter,
    time_factor,
)
from .paths import PathConfig
from .storage import ProgressStore


logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _as_utc(value: datetime) -> datetime:
    """Naive timestamps are taken to be UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class MasteryTracker:
    """
    Owns per-user, per-item mastery state and the aggregates derived from it.

    Depends only on a ProgressStore (persistence) and a PathConfig
    (curriculum), both injected.
    """

    def __init__(
        self,
        store: ProgressStore,
        paths: PathConfig,
        jitter: Optional[JitterSource] = None,
        clock: Optional[Clock] = None,
    ):
        """
        Initialize tracker.

        Args:
            store: Storage port implementation
            paths: Path configuration port implementation
            jitter: Zero-argument callable returning the review jitter
                (default: uniform in [0.9, 1.1])
            clock: Zero-argument callable returning "now" (default: UTC wall clock)
        """
        self.store = store
        self.paths = paths
        self._jitter = jitter or random_jitter()
        self._clock = clock or utc_now

        self._mastery_cache: TwoLevelCache[ContentMastery] = TwoLevelCache()
        self._path_cache: TwoLevelCache[PathProgressDetails] = TwoLevelCache()
        self._progress_cache: TwoLevelCache[UserProgress] = TwoLevelCache()

        # Lock order: init lock -> item lock -> user lock
        self._init_locks = KeyedLocks()
        self._item_locks = KeyedLocks()
        self._user_locks = KeyedLocks()

        self.store.register_curriculum(self.paths.all_paths())

    def _now(self) -> datetime:
        return _as_utc(self._clock())

    # -------------------------------------------------------------------------
    # Existence checks
    # -------------------------------------------------------------------------

    def _require_user(self, user_id: str):
        if not self.store.user_exists(user_id):
            raise UserNotFound(f"Unknown user: {user_id}")

    def _require_content(self, content_id: str):
        if not self.store.content_exists(content_id):
            raise ContentNotFound(f"Unknown content item: {content_id}")

    def _require_path(self, path_id: str) -> LearningPath:
        path = self.paths.get_path(path_id)
        if path is None or not self.store.learning_path_exists(path_id):
            raise LearningPathNotFound(f"Unknown learning path: {path_id}")
        return path

    # -------------------------------------------------------------------------
    # Initialization
    # -------------------------------------------------------------------------

    def register_user(self, user_id: str):
        """Make a user known to the store's identity check."""
        self.store.register_user(user_id)

    def initialize(self, user_id: str) -> UserProgress:
        """
        Create zeroed progress, path and mastery records for a user.

        Returns:
            The new UserProgress

        Raises:
            UserNotFound: user unknown to the identity check
            AlreadyInitialized: progress already exists for this user
            InitializationFailed: the store failed while writing
            StorageError: the store failed during the identity check
        """
        self._require_user(user_id)

        with self._init_locks.for_key(user_id):
            if self.store.user_progress_exists(user_id):
                raise AlreadyInitialized(f"Progress already initialized for {user_id}")

            try:
                now = self._now()
                for path in self.paths.all_paths():
                    for content_id in path.content_ids:
                        with self._item_locks.for_key((user_id, content_id)):
                            if self.store.get_content_mastery(user_id, content_id) is None:
                                self.store.save_content_mastery(
                                    user_id,
                                    ContentMastery(content_id=content_id, last_attempt_time=now),
                                )
                            self._mastery_cache.invalidate(user_id, content_id)

                with self._user_locks.for_key(user_id):
                    for path in self.paths.all_paths():
                        self._recompute_path(user_id, path, now)
                    progress = self._recompute_overall(user_id, now)
            except StorageError as exc:
                logger.error(f"Failed to initialize progress for {user_id}: {exc}")
                raise InitializationFailed(f"Could not initialize {user_id}: {exc}") from exc

        logger.info(
            f"Initialized {user_id}: {len(self.paths.all_paths())} paths, "
            f"{progress.total_item_count} items"
        )
        return progress.model_copy(deep=True)

    # -------------------------------------------------------------------------
    # Read accessors
    # -------------------------------------------------------------------------

    def get_user_progress(self, user_id: str) -> UserProgress:
        """
        Account-level progress.

        Raises:
            UserNotFound, NoProgressData, StorageError
        """
        self._require_user(user_id)

        with self._user_locks.for_key(user_id):
            progress = self._progress_cache.get(user_id, user_id)
            if progress is None:
                progress = self.store.get_user_progress(user_id)
                if progress is None:
                    raise NoProgressData(f"No progress recorded for {user_id}")
                self._progress_cache.put(user_id, user_id, progress)
            return progress.model_copy(deep=True)

    def get_content_mastery(self, user_id: str, content_id: str) -> ContentMastery:
        """
        Mastery of one content item.

        Raises:
            UserNotFound, ContentNotFound, NoMasteryData, StorageError
        """
        self._require_user(user_id)
        self._require_content(content_id)

        with self._item_locks.for_key((user_id, content_id)):
            mastery = self._mastery_cache.get(user_id, content_id)
            if mastery is None:
                mastery = self.store.get_content_mastery(user_id, content_id)
                if mastery is None:
                    raise NoMasteryData(f"No mastery data for {user_id}/{content_id}")
                self._mastery_cache.put(user_id, content_id, mastery)
            return mastery.model_copy(deep=True)

    def get_path_progress(self, user_id: str, path_id: str) -> PathProgressDetails:
        """
        Progress along one learning path.

        Raises:
            UserNotFound, LearningPathNotFound, NoProgressData, StorageError
        """
        self._require_user(user_id)
        self._require_path(path_id)

        with self._user_locks.for_key(user_id):
            details = self._path_cache.get(user_id, path_id)
            if details is None:
                details = self.store.get_path_progress(user_id, path_id)
                if details is None:
                    raise NoProgressData(f"No progress on path {path_id} for {user_id}")
                self._path_cache.put(user_id, path_id, details)
            return details.model_copy(deep=True)

    # -------------------------------------------------------------------------
    # Recording sessions
    # -------------------------------------------------------------------------

    def _validate_session(self, result: Union[SessionResult, Mapping]) -> SessionResult:
        if not isinstance(result, SessionResult):
            try:
                result = SessionResult.model_validate(result)
            except ValidationError as exc:
                raise InvalidSessionResult(f"Malformed session result: {exc}") from exc

        if not result.path_id or not result.content_id:
            raise InvalidSessionResult("Session result needs a path id and a content id")
        if result.total_count <= 0:
            raise InvalidSessionResult(f"total_count must be positive, got {result.total_count}")
        if result.correct_count < 0 or result.correct_count > result.total_count:
            raise InvalidSessionResult(
                f"correct_count must be within [0, {result.total_count}], got {result.correct_count}"
            )
        if not result.completion_time_ms > 0:
            raise InvalidSessionResult(
                f"completion_time_ms must be positive, got {result.completion_time_ms}"
            )
        return result

    def record_session(self, user_id: str, result: Union[SessionResult, Mapping]) -> UserProgress:
        """
        Apply one completed session to the user's mastery and progress.

        Steps:
        - Load (or lazily create) the mastery row for the item
        - Decay the prior by the days since the last attempt
        - Blend in the attempt (correct ratio x time factor)
        - Schedule the next review
        - Recompute the owning path(s) and the account-level progress

        Args:
            user_id: Learner identifier
            result: SessionResult (or a mapping with the same fields)

        Returns:
            Updated UserProgress

        Raises:
            UserNotFound, LearningPathNotFound, ContentNotFound,
            InvalidSessionResult, UpdateFailed,
            StorageError (only from the checks before the update starts)
        """
        self._require_user(user_id)
        result = self._validate_session(result)
        path = self._require_path(result.path_id)
        self._require_content(result.content_id)
        if path.position_of(result.content_id) is None:
            raise ContentNotFound(f"{result.content_id} is not part of path {path.path_id}")

        attempt_time = _as_utc(result.timestamp) if result.timestamp else self._now()
        content_id = result.content_id

        try:
            with self._item_locks.for_key((user_id, content_id)):
                prior = self.store.get_content_mastery(user_id, content_id)
                if prior is None:
                    prior = ContentMastery(content_id=content_id, last_attempt_time=attempt_time)

                updated = self._apply_attempt(prior, result, attempt_time)
                self.store.save_content_mastery(user_id, updated)
                self._mastery_cache.invalidate(user_id, content_id)

                logger.debug(
                    f"{user_id}/{content_id}: mastery {prior.mastery_level:.3f} -> "
                    f"{updated.mastery_level:.3f}, next review {updated.next_review_time.isoformat()}"
                )

                with self._user_locks.for_key(user_id):
                    now = self._now()
                    for owning in self.paths.paths_containing(content_id):
                        self._recompute_path(user_id, owning, now)
                    progress = self._recompute_overall(user_id, now)
        except StorageError as exc:
            logger.error(f"Failed to record session for {user_id}/{content_id}: {exc}")
            raise UpdateFailed(f"Could not update progress for {user_id}: {exc}") from exc

        return progress.model_copy(deep=True)

    def _apply_attempt(
        self,
        prior: ContentMastery,
        result: SessionResult,
        attempt_time: datetime,
    ) -> ContentMastery:
        days = elapsed_days(_as_utc(prior.last_attempt_time), attempt_time)

        expected = self.paths.expected_time_ms(result.content_id)
        if expected is None:
            logger.debug(f"No expected time for {result.content_id}; time factor defaults to 1")
            expected = result.completion_time_ms

        factor = time_factor(expected, result.completion_time_ms)
        correct_ratio = result.correct_count / result.total_count
        new_level = blend_mastery(correct_ratio, factor, prior.mastery_level, days)

        return ContentMastery(
            content_id=result.content_id,
            mastery_level=new_level,
            attempt_count=prior.attempt_count + 1,
            last_attempt_time=attempt_time,
            next_review_time=next_review_time(new_level, attempt_time, self._jitter()),
        )

    # -------------------------------------------------------------------------
    # Aggregates (caller holds the user lock)
    # -------------------------------------------------------------------------

    def _recompute_path(self, user_id: str, path: LearningPath, now: datetime) -> PathProgressDetails:
        content_ids = self.store.content_ids_for_path(path.path_id) or path.content_ids

        items = {}
        for position, content_id in enumerate(content_ids):
            row = self.store.get_content_mastery(user_id, content_id)
            items[content_id] = ItemProgress(
                mastery_level=row.mastery_level if row else 0.0,
                attempt_count=row.attempt_count if row else 0,
                position=position,
            )

        mastered = sum(1 for item in items.values() if is_mastered(item.mastery_level))
        details = PathProgressDetails(
            path_id=path.path_id,
            completion=path_completion(mastered, len(content_ids)),
            items=items,
            last_update=now,
        )
        self.store.save_path_progress(user_id, details)
        self._path_cache.invalidate(user_id, path.path_id)
        return details

    def _recompute_overall(self, user_id: str, now: datetime) -> UserProgress:
        completions: dict[str, float] = {}
        mastered_ids: set[str] = set()

        for path in self.paths.all_paths():
            details = self.store.get_path_progress(user_id, path.path_id)
            if details is None:
                completions[path.path_id] = 0.0
                continue
            completions[path.path_id] = details.completion
            mastered_ids.update(
                cid for cid, item in details.items.items() if is_mastered(item.mastery_level)
            )

        progress = UserProgress(
            user_id=user_id,
            overall_completion=overall_completion(completions, self.paths.path_weights()),
            path_completion=completions,
            mastered_item_count=len(mastered_ids),
            total_item_count=self.store.total_content_count(),
            last_update=now,
        )
        self.store.save_user_progress(progress)
        self._progress_cache.invalidate(user_id, user_id)
        return progress

    # -------------------------------------------------------------------------
    # Reviews, statistics and reset
    # -------------------------------------------------------------------------

    def _current_content_ids(self) -> set[str]:
        return {cid for path in self.paths.all_paths() for cid in path.content_ids}

    def get_due_items(self, user_id: str, now: Optional[datetime] = None) -> list[ContentMastery]:
        """
        Attempted items whose next review time has passed, oldest first.

        Items no longer in any configured path are skipped.

        Raises:
            UserNotFound, StorageError
        """
        self._require_user(user_id)
        cutoff = _as_utc(now) if now else self._now()
        current = self._current_content_ids()

        due = [
            row for row in self.store.list_content_mastery(user_id)
            if row.content_id in current
            and row.attempt_count > 0
            and row.next_review_time is not None
            and _as_utc(row.next_review_time) <= cutoff
        ]
        due.sort(key=lambda row: _as_utc(row.next_review_time))
        return due

    def get_completion_stats(self, user_id: str) -> dict:
        """
        Completion statistics for dashboards.

        Only items of the configured paths are counted.

        Returns:
            Dictionary with item counts and completion percentages

        Raises:
            UserNotFound, NoProgressData, StorageError
        """
        progress = self.get_user_progress(user_id)
        current = self._current_content_ids()
        rows = self.store.list_content_mastery(user_id)
        attempted = sum(1 for row in rows if row.content_id in current and row.attempt_count > 0)

        return {
            "total_items": progress.total_item_count,
            "mastered": progress.mastered_item_count,
            "attempted": attempted,
            "unseen": max(progress.total_item_count - attempted, 0),
            "completion_percent": round(progress.overall_completion * 100, 1),
            "paths": {
                path_id: round(completion * 100, 1)
                for path_id, completion in progress.path_completion.items()
            },
        }

    def reset_progress(self, user_id: str):
        """
        Delete all progress of a user. The user stays known; initialize() works again.

        Raises:
            UserNotFound, UpdateFailed,
            StorageError (only from the identity check)
        """
        self._require_user(user_id)

        with self._init_locks.for_key(user_id), self._user_locks.for_key(user_id):
            try:
                self.store.delete_user_progress(user_id)
            except StorageError as exc:
                logger.error(f"Failed to reset progress for {user_id}: {exc}")
                raise UpdateFailed(f"Could not reset progress for {user_id}: {exc}") from exc
            finally:
                self._mastery_cache.invalidate_user(user_id)
                self._path_cache.invalidate_user(user_id)
                self._progress_cache.invalidate_user(user_id)

        logger.info(f"Reset progress for {user_id}")
