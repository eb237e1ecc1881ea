"""Stitchwise utilities."""

from .config import EngineSettings, load_settings
from .curriculum_loader import curriculum_from_dict, load_curriculum, load_path_config

__all__ = [
    "EngineSettings",
    "load_settings",
    "curriculum_from_dict",
    "load_curriculum",
    "load_path_config",
]
