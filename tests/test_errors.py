# tests/test_errors.py
import logging

from joy_quiz.errors import (
    JoyQuizError, QuizNotFoundError, SessionNotFoundError, StorageError, handle_storage_error,
)
from joy_quiz.models import InitializedSession, OfflineSession


def test_handle_storage_error_returns_the_fallback_object(caplog):
    fallback = InitializedSession(session=OfflineSession("offline-1"), total_questions=3)
    with caplog.at_level(logging.ERROR):
        result = handle_storage_error(StorageError("disk full"), fallback, "Could not save", context="CTX")
    assert result is fallback
    assert "[CTX]" in caplog.text
    assert "Could not save" in caplog.text


def test_handle_storage_error_without_context(caplog):
    with caplog.at_level(logging.ERROR):
        assert handle_storage_error(StorageError("x"), None, "Lost") is None
    assert "Storage error: Lost" in caplog.text


def test_quiz_not_found_is_both_package_and_file_error():
    error = QuizNotFoundError("nope")
    assert isinstance(error, JoyQuizError)
    assert isinstance(error, FileNotFoundError)


def test_session_not_found_keeps_id():
    error = SessionNotFoundError("abc")
    assert error.session_id == "abc"
    assert "abc" in str(error)
