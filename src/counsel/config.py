"""Runtime configuration defaults for the Counsel project."""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path

MODEL_NAME = "qwen3:latest"
SQLITE_PATH = Path("./data/counsel.sqlite3")
TITLE_LIMIT = 42
SUMMARY_LIMIT = 90
BULLET_LIMIT = 60
MEMORY_LIMIT = 80
REFLECTION_SAMPLE_SIZE = 8
MAX_THEMES = 4
WEEKLY_BUCKET_THRESHOLD_DAYS = 7
FREE_REFLECTION_LIMIT = 3


class ReflectionMode(str, Enum):
    """Whether reflections are recomputed whole or appended behind a cadence gate."""

    recompute = "recompute"
    cadence = "cadence"


@dataclass(frozen=True)
class CounselConfig:
    """Configuration used by the capture/reflect/plan loop."""

    model_name: str = MODEL_NAME
    sqlite_path: Path = SQLITE_PATH
    title_limit: int = TITLE_LIMIT
    reflection_sample_size: int = REFLECTION_SAMPLE_SIZE
    max_themes: int = MAX_THEMES
    weekly_bucket_threshold_days: int = WEEKLY_BUCKET_THRESHOLD_DAYS
    free_reflection_limit: int = FREE_REFLECTION_LIMIT
    reflection_mode: ReflectionMode = ReflectionMode.recompute
