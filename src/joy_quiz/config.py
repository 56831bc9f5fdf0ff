"""Environment-driven settings."""
import logging
import os
from pathlib import Path

DEFAULT_DB_PATH = str(Path.home() / ".joy_quiz" / "quiz.db")
DEFAULT_QUIZ_DIR = str(Path("generated") / "media" / "quizlet")
DEFAULT_LOG_LEVEL = "WARNING"


def get_db_path() -> str:
    return os.getenv("JOY_QUIZ_DB_PATH", DEFAULT_DB_PATH)


def get_quiz_dir() -> Path:
    """Directory quiz exports are resolved against (relative to the working directory)."""
    return Path(os.getenv("JOY_QUIZ_DIR", DEFAULT_QUIZ_DIR))


def get_log_level() -> int:
    name = os.getenv("JOY_QUIZ_LOG_LEVEL", DEFAULT_LOG_LEVEL).upper()
    level = logging.getLevelName(name)
    return level if isinstance(level, int) else logging.WARNING
