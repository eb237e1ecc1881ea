"""
Curriculum loader utility for Stitchwise.

Loads YAML curriculum files:

    paths:
      - id: addition
        weight: 2
        items: [add-01, add-02, add-03]
      - id: doubling
        items: [dbl-01, dbl-02]
    expected_times_ms:
      add-01: 45000
"""

from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from stitchwise.schemas import Curriculum, LearningPath
from stitchwise.tracker.paths import StaticPathConfig


def curriculum_from_dict(data: dict[str, Any]) -> Curriculum:
    """
    Build a Curriculum from parsed YAML.

    Raises:
        ValueError: If the structure or any value is invalid
    """
    if not isinstance(data, dict) or not isinstance(data.get("paths"), list):
        raise ValueError("Curriculum must be a mapping with a 'paths' list")

    try:
        paths = [
            LearningPath(
                path_id=str(entry["id"]),
                content_ids=[str(cid) for cid in entry.get("items", [])],
                weight=entry.get("weight", 1.0),
            )
            for entry in data["paths"]
        ]
        return Curriculum(
            paths=paths,
            expected_times_ms={
                str(cid): ms for cid, ms in (data.get("expected_times_ms") or {}).items()
            },
        )
    except (KeyError, TypeError) as exc:
        raise ValueError(f"Malformed curriculum entry: {exc}") from exc
    except ValidationError as exc:
        raise ValueError(f"Invalid curriculum: {exc}") from exc


def load_curriculum(file_path: Path | str) -> Curriculum:
    """
    Load a curriculum YAML file.

    Raises:
        FileNotFoundError: If the file doesn't exist
        yaml.YAMLError: If YAML parsing fails
        ValueError: If the curriculum is invalid
    """
    file_path = Path(file_path)
    if not file_path.exists():
        raise FileNotFoundError(f"Curriculum file not found: {file_path}")

    with open(file_path, "r", encoding="utf-8") as f:
        return curriculum_from_dict(yaml.safe_load(f))


def load_path_config(file_path: Path | str) -> StaticPathConfig:
    """Load a curriculum file straight into a path configuration."""
    return StaticPathConfig.from_curriculum(load_curriculum(file_path))
