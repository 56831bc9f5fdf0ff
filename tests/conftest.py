import pytest

from joy_quiz.db import init_db
from joy_quiz.errors import StorageError
from joy_quiz.store import QuizStore

CRLF = "\r\n"
CARD_BREAK = CRLF * 3
HEADER = "Quizlet export\r\nTerm,Definition"


def make_card(term, question, options, correct="A", heading="Question"):
    """Build one export card in the layout Quizlet produces."""
    option_lines = CRLF.join(f"{label}) {text}" for label, text in options)
    return f'"{term}","{heading}{CRLF}{question}{CRLF * 2}{option_lines}{CRLF * 2}✓ Correct: {correct}"'


def make_export(cards, header=HEADER):
    return CARD_BREAK.join([header, *cards])


def numbered_cards(count):
    return [
        make_card(
            f"Term {i}", f"What is item {i}?",
            [("A", "alpha"), ("B", "bravo"), ("C", "charlie"), ("D", "delta")],
            correct="B",
        )
        for i in range(count)
    ]


class FailingStore(QuizStore):
    """Store double whose every call fails like an unreachable database."""

    def __init__(self):
        self.calls = []

    def _fail(self, name):
        self.calls.append(name)
        raise StorageError(f"{name} unavailable")

    def create_session(self, quiz_name, total_questions):
        self._fail("create_session")

    def get_session(self, session_id):
        self._fail("get_session")

    def record_answer(self, session_id, question_index, selected_option, is_correct):
        self._fail("record_answer")

    def set_flag(self, session_id, question_index, is_flagged):
        self._fail("set_flag")

    def delete_session(self, session_id):
        self._fail("delete_session")


@pytest.fixture
def tmp_db(tmp_path):
    """Provide a temporary SQLite database path for tests."""
    db_path = str(tmp_path / "test_quiz.db")
    return db_path


@pytest.fixture
def ready_db(tmp_db):
    init_db(tmp_db)
    return tmp_db


@pytest.fixture
def quiz_dir(tmp_path):
    """Quiz directory holding a ten-question export and a five-question export."""
    directory = tmp_path / "quizzes"
    directory.mkdir()
    (directory / "ten.csv").write_text(make_export(numbered_cards(10)), encoding="utf-8")
    (directory / "five.csv").write_text(make_export(numbered_cards(5)), encoding="utf-8")
    return directory
