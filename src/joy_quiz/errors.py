"""Exception taxonomy and best-effort storage error handling."""
import logging
from typing import TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class JoyQuizError(Exception):
    """Base exception for the quiz package."""
    pass


class QuizNotFoundError(JoyQuizError, FileNotFoundError):
    """Raised when a quiz export cannot be located."""
    pass


class QuizReadError(JoyQuizError):
    """Raised when a quiz export exists but cannot be read or decoded."""
    pass


class SessionNotFoundError(JoyQuizError):
    """Raised when completing a session that has no stored record."""

    def __init__(self, session_id: str):
        self.session_id = session_id
        super().__init__(f"Quiz session not found: {session_id}")


class StorageError(JoyQuizError):
    """Raised by a store when the underlying database call fails."""
    pass


def handle_storage_error(error: Exception, fallback: T, message: str, context: str = "") -> T:
    """Log a storage failure and return ``fallback`` so play can continue."""
    prefix = f"[{context}]" if context else ""
    logger.error("%s: %s", f"Storage error {prefix}".strip(), message, exc_info=error)
    return fallback
