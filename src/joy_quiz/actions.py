"""Quiz session orchestration.

Ties parsed questions to session state. Storage is best-effort: a failing
store is logged and play continues with an offline session, except at
completion where there is nothing meaningful to summarize without the record.
"""
import logging
import time
from pathlib import Path

from joy_quiz.errors import SessionNotFoundError, StorageError, handle_storage_error
from joy_quiz.models import (
    FlaggedItem, InitializedSession, OfflineSession, ParsedQuestion, PersistedSession,
    QuizSession, SessionRef, SessionSummary, UserAnswer,
)
from joy_quiz.parser import parse_quiz
from joy_quiz.store import QuizStore, SqliteQuizStore

logger = logging.getLogger(__name__)


def calc_accuracy(correct_count: int, total_questions: int) -> int:
    """Whole-number percentage, halves rounded up. Zero when there are no questions."""
    if total_questions <= 0:
        return 0
    return int(correct_count * 100 / total_questions + 0.5)


def _store_key(session: str | SessionRef) -> str | None:
    """The stored id for a session reference, or None for offline sessions."""
    if isinstance(session, OfflineSession):
        return None
    if isinstance(session, PersistedSession):
        return session.session_id
    return session


class QuizActions:
    def __init__(self, store: QuizStore, quiz_dir: str | Path | None = None):
        self.store = store
        self.quiz_dir = quiz_dir

    def get_quiz_questions(self, quiz_name: str) -> list[ParsedQuestion]:
        return parse_quiz(quiz_name, self.quiz_dir)

    def initialize_quiz_session(
        self, quiz_name: str, questions: list[ParsedQuestion] | None = None,
    ) -> InitializedSession:
        """Start a new attempt. Parse errors propagate; storage errors give an offline session.

        Pass ``questions`` when the caller has already parsed the quiz so the
        stored total matches what it will show.
        """
        if questions is None:
            questions = self.get_quiz_questions(quiz_name)
        total = len(questions)
        try:
            session = self.store.create_session(quiz_name, total)
        except StorageError as e:
            offline = OfflineSession(local_id=f"offline-{int(time.time() * 1000)}")
            return handle_storage_error(
                e, InitializedSession(session=offline, total_questions=total),
                "Failed to initialize quiz session", context="INIT_SESSION",
            )
        logger.info("Started session %s for %s (%d questions)", session.id, quiz_name, total)
        return InitializedSession(session=PersistedSession(session.id), total_questions=total)

    def get_quiz_session(self, session: str | SessionRef) -> QuizSession | None:
        key = _store_key(session)
        if key is None:
            return None
        try:
            return self.store.get_session(key)
        except StorageError as e:
            return handle_storage_error(e, None, "Failed to fetch quiz session", context="GET_SESSION")

    def save_answer(
        self, session: str | SessionRef, question_index: int, selected_option: str, is_correct: bool,
    ) -> UserAnswer | None:
        key = _store_key(session)
        if key is None:
            return None
        try:
            return self.store.record_answer(key, question_index, selected_option, is_correct)
        except StorageError as e:
            return handle_storage_error(e, None, "Failed to save quiz answer", context="SAVE_ANSWER")

    def toggle_flag(
        self, session: str | SessionRef, question_index: int, is_flagged: bool,
    ) -> FlaggedItem | None:
        key = _store_key(session)
        if key is None:
            return None
        try:
            return self.store.set_flag(key, question_index, is_flagged)
        except StorageError as e:
            return handle_storage_error(e, None, "Failed to toggle question flag", context="TOGGLE_FLAG")

    def complete_quiz_session(self, session: str | SessionRef) -> SessionSummary:
        """Summarize a finished attempt. Raises SessionNotFoundError or StorageError."""
        key = _store_key(session)
        if key is None:
            raise SessionNotFoundError(session.id)
        try:
            record = self.store.get_session(key)
        except StorageError:
            logger.exception("[COMPLETE_SESSION]: Failed to complete quiz session %s", key)
            raise
        if record is None:
            raise SessionNotFoundError(key)
        return SessionSummary(
            session_id=record.id,
            total_questions=record.total_questions,
            correct_count=record.correct_count,
            accuracy=calc_accuracy(record.correct_count, record.total_questions),
            flagged_count=len(record.flagged_indexes),
            answers=sorted(record.answers, key=lambda a: a.question_index),
        )


def default_actions() -> QuizActions:
    """Actions wired to the configured database and quiz directory."""
    return QuizActions(SqliteQuizStore())
