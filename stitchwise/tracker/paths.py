"""
Path configuration port - learning paths, weights and expected item times.

The tracker only reads curriculum configuration through this interface, so
the source (YAML file, admin database, remote config) can be swapped.
"""

from abc import ABC, abstractmethod
from typing import Iterable, Mapping, Optional

from stitchwise.schemas import Curriculum, LearningPath


class PathConfig(ABC):
    """Interface for curriculum configuration."""

    @abstractmethod
    def get_path(self, path_id: str) -> Optional[LearningPath]:
        """Return the path with this id, or None."""

    @abstractmethod
    def all_paths(self) -> list[LearningPath]:
        """All configured paths, in configuration order."""

    @abstractmethod
    def expected_time_ms(self, content_id: str) -> Optional[float]:
        """Expected completion time for an item, or None if not configured."""

    def path_weights(self) -> dict[str, float]:
        return {path.path_id: path.weight for path in self.all_paths()}

    def paths_containing(self, content_id: str) -> list[LearningPath]:
        return [path for path in self.all_paths() if content_id in path.content_ids]


class StaticPathConfig(PathConfig):
    """Path configuration held in memory."""

    def __init__(
        self,
        paths: Iterable[LearningPath],
        expected_times_ms: Optional[Mapping[str, float]] = None,
    ):
        self._paths: dict[str, LearningPath] = {}
        for path in paths:
            if path.path_id in self._paths:
                raise ValueError(f"Duplicate learning path: {path.path_id}")
            self._paths[path.path_id] = path
        self._expected = dict(expected_times_ms or {})

    @classmethod
    def from_curriculum(cls, curriculum: Curriculum) -> "StaticPathConfig":
        return cls(curriculum.paths, curriculum.expected_times_ms)

    def get_path(self, path_id: str) -> Optional[LearningPath]:
        return self._paths.get(path_id)

    def all_paths(self) -> list[LearningPath]:
        return list(self._paths.values())

    def expected_time_ms(self, content_id: str) -> Optional[float]:
        return self._expected.get(content_id)
