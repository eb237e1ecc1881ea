"""
Engine settings, read from the environment (and a .env file if present).

Variables:
    STITCHWISE_DB_PATH        SQLite progress database
    STITCHWISE_CURRICULUM     YAML curriculum file
    STITCHWISE_LOG_LEVEL      logging level name
    STITCHWISE_FIXED_JITTER   deterministic review jitter in [0.9, 1.1]
"""

import logging
import os
from pathlib import Path
from typing import Mapping, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator

from stitchwise.tracker.mastery import JITTER_MAX, JITTER_MIN, JitterSource, fixed_jitter, random_jitter
from stitchwise.tracker.sqlite_store import DEFAULT_PROGRESS_DB

ENV_PREFIX = "STITCHWISE_"


class EngineSettings(BaseModel):
    db_path: Path = DEFAULT_PROGRESS_DB
    curriculum: Path = Path("curriculum.yaml")
    log_level: str = "INFO"
    fixed_jitter: Optional[float] = Field(default=None, ge=JITTER_MIN, le=JITTER_MAX)

    @field_validator('log_level')
    @classmethod
    def log_level_known(cls, v):
        name = v.upper()
        if not isinstance(logging.getLevelName(name), int):
            raise ValueError(f'Unknown log level: {v}')
        return name

    def jitter_source(self) -> JitterSource:
        if self.fixed_jitter is not None:
            return fixed_jitter(self.fixed_jitter)
        return random_jitter()


def load_settings(
    env_file: Optional[Path] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> EngineSettings:
    """
    Read settings from STITCHWISE_* variables.

    Args:
        env_file: Optional .env file to load first (default: search from cwd)
        environ: Mapping to read instead of os.environ (skips .env loading)
    """
    if environ is None:
        load_dotenv(env_file)
        environ = os.environ

    values = {}
    for field in EngineSettings.model_fields:
        raw = environ.get(ENV_PREFIX + field.upper())
        if raw not in (None, ""):
            values[field] = Path(raw).expanduser() if field in ("db_path", "curriculum") else raw
    return EngineSettings(**values)
