"""Persistence for quiz sessions, answers and flags.

``QuizStore`` is the contract the orchestration layer talks to.
``SqliteQuizStore`` is the production implementation; every method opens
its own connection and wraps ``sqlite3`` failures in ``StorageError``.
"""
import sqlite3
import uuid
from abc import ABC, abstractmethod
from contextlib import contextmanager
from datetime import datetime

from joy_quiz.config import get_db_path
from joy_quiz.db import get_connection
from joy_quiz.errors import StorageError
from joy_quiz.models import FlaggedItem, QuizSession, UserAnswer


class QuizStore(ABC):
    """Abstract persistence port for quiz sessions."""

    @abstractmethod
    def create_session(self, quiz_name: str, total_questions: int) -> QuizSession:
        """Insert a new session at index 0 with no correct answers."""

    @abstractmethod
    def get_session(self, session_id: str) -> QuizSession | None:
        """Return the session with its answers and flags, or None if absent."""

    @abstractmethod
    def record_answer(
        self, session_id: str, question_index: int, selected_option: str, is_correct: bool,
    ) -> UserAnswer:
        """Upsert an answer and advance the session past ``question_index``."""

    @abstractmethod
    def set_flag(self, session_id: str, question_index: int, is_flagged: bool) -> FlaggedItem:
        """Upsert the flag for one question."""

    @abstractmethod
    def delete_session(self, session_id: str) -> bool:
        """Delete a session and its children. Returns False if nothing was deleted."""


def _new_id() -> str:
    return uuid.uuid4().hex


def _now() -> str:
    return datetime.now().isoformat()


def _answer_from_row(row) -> UserAnswer:
    return UserAnswer(
        id=row["id"],
        session_id=row["session_id"],
        question_index=row["question_index"],
        selected_option=row["selected_option"],
        is_correct=bool(row["is_correct"]),
        created_at=row["created_at"],
    )


def _flag_from_row(row) -> FlaggedItem:
    return FlaggedItem(
        id=row["id"],
        session_id=row["session_id"],
        question_index=row["question_index"],
        is_flagged=bool(row["is_flagged"]),
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


def _session_from_row(row) -> QuizSession:
    return QuizSession(
        id=row["id"],
        quiz_name=row["quiz_name"],
        total_questions=row["total_questions"],
        current_index=row["current_index"],
        correct_count=row["correct_count"],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


class SqliteQuizStore(QuizStore):
    def __init__(self, db_path: str | None = None):
        self.db_path = db_path or get_db_path()

    @contextmanager
    def _connect(self):
        try:
            conn = get_connection(self.db_path)
        except sqlite3.Error as e:
            raise StorageError(f"Could not open {self.db_path}: {e}") from e
        try:
            yield conn
            conn.commit()
        except sqlite3.Error as e:
            conn.rollback()
            raise StorageError(str(e)) from e
        finally:
            conn.close()

    def create_session(self, quiz_name: str, total_questions: int) -> QuizSession:
        now = _now()
        session = QuizSession(
            id=_new_id(), quiz_name=quiz_name, total_questions=total_questions,
            created_at=now, updated_at=now,
        )
        with self._connect() as conn:
            conn.execute(
                """INSERT INTO quiz_sessions
                (id, quiz_name, current_index, total_questions, correct_count, created_at, updated_at)
                VALUES (?, ?, 0, ?, 0, ?, ?)""",
                (session.id, quiz_name, total_questions, now, now),
            )
        return session

    def get_session(self, session_id: str) -> QuizSession | None:
        with self._connect() as conn:
            row = conn.execute("SELECT * FROM quiz_sessions WHERE id = ?", (session_id,)).fetchone()
            if row is None:
                return None
            session = _session_from_row(row)
            session.answers = [
                _answer_from_row(r) for r in conn.execute(
                    "SELECT * FROM user_answers WHERE session_id = ? ORDER BY question_index",
                    (session_id,),
                ).fetchall()
            ]
            session.flags = [
                _flag_from_row(r) for r in conn.execute(
                    "SELECT * FROM flagged_quizzes WHERE session_id = ? ORDER BY question_index",
                    (session_id,),
                ).fetchall()
            ]
        return session

    def record_answer(
        self, session_id: str, question_index: int, selected_option: str, is_correct: bool,
    ) -> UserAnswer:
        now = _now()
        with self._connect() as conn:
            conn.execute(
                """INSERT INTO user_answers
                (id, session_id, question_index, selected_option, is_correct, created_at)
                VALUES (?, ?, ?, ?, ?, ?)
                ON CONFLICT(session_id, question_index)
                DO UPDATE SET selected_option = excluded.selected_option, is_correct = excluded.is_correct""",
                (_new_id(), session_id, question_index, selected_option, int(is_correct), now),
            )
            # TODO: only count a correct answer the first time its question is answered
            # correctly; re-submitting the same correct answer currently counts twice.
            cursor = conn.execute(
                """UPDATE quiz_sessions
                SET current_index = ?, correct_count = correct_count + ?, updated_at = ?
                WHERE id = ?""",
                (question_index + 1, int(is_correct), now, session_id),
            )
            if cursor.rowcount == 0:
                raise sqlite3.IntegrityError(f"No quiz session with id {session_id}")
            row = conn.execute(
                "SELECT * FROM user_answers WHERE session_id = ? AND question_index = ?",
                (session_id, question_index),
            ).fetchone()
        return _answer_from_row(row)

    def set_flag(self, session_id: str, question_index: int, is_flagged: bool) -> FlaggedItem:
        now = _now()
        with self._connect() as conn:
            conn.execute(
                """INSERT INTO flagged_quizzes
                (id, session_id, question_index, is_flagged, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, ?)
                ON CONFLICT(session_id, question_index)
                DO UPDATE SET is_flagged = excluded.is_flagged, updated_at = excluded.updated_at""",
                (_new_id(), session_id, question_index, int(is_flagged), now, now),
            )
            row = conn.execute(
                "SELECT * FROM flagged_quizzes WHERE session_id = ? AND question_index = ?",
                (session_id, question_index),
            ).fetchone()
        return _flag_from_row(row)

    def delete_session(self, session_id: str) -> bool:
        with self._connect() as conn:
            cursor = conn.execute("DELETE FROM quiz_sessions WHERE id = ?", (session_id,))
        return cursor.rowcount > 0
