# tests/test_review.py
from joy_quiz.models import FlaggedItem, ParsedQuestion, QuizOption, QuizSession, UserAnswer
from joy_quiz.review import build_review, get_accuracy_color, get_accuracy_label, validate_questions


def _q(index, labels=("A", "B", "C", "D"), correct="A", text="Question?"):
    return ParsedQuestion(
        question_index=index, term=f"T{index}", question=text,
        options=[QuizOption(label, label.lower()) for label in labels],
        correct_answer=correct,
    )


def test_accuracy_labels_and_colors():
    assert get_accuracy_label(95) == "Excellent"
    assert get_accuracy_color(80) == "green"
    assert get_accuracy_label(60) == "Good"
    assert get_accuracy_color(79) == "yellow"
    assert get_accuracy_label(59) == "Keep practicing"
    assert get_accuracy_color(0) == "red"


def test_build_review_joins_answers_and_flags():
    questions = [_q(0), _q(1, correct="B"), _q(2)]
    session = QuizSession(
        id="s1", quiz_name="x.csv", total_questions=3,
        answers=[UserAnswer("s1", 0, "A", True), UserAnswer("s1", 1, "C", False)],
        flags=[FlaggedItem("s1", 1, True), FlaggedItem("s1", 2, False)],
    )
    rows = build_review(questions, session)
    assert [r["selected_option"] for r in rows] == ["A", "C", None]
    assert [r["is_correct"] for r in rows] == [True, False, None]
    assert [r["is_flagged"] for r in rows] == [False, True, False]
    assert rows[1]["correct_answer"] == "B"
    assert rows[2]["term"] == "T2"


def test_build_review_without_session():
    rows = build_review([_q(0)], None)
    assert rows[0]["selected_option"] is None
    assert rows[0]["is_flagged"] is False


def test_validate_clean_questions():
    assert validate_questions([_q(0), _q(1)]) == []


def test_validate_reports_problems():
    problems = validate_questions([
        _q(0, labels=("B", "C"), correct="A"),
        _q(5),
        _q(2, labels=()),
        _q(3, text="  "),
    ])
    assert any("correct answer A is not an option" in p for p in problems)
    assert any("expected index 1" in p for p in problems)
    assert any("no options" in p for p in problems)
    assert any("empty question text" in p for p in problems)


def test_validate_reports_duplicate_and_invalid_labels():
    problems = validate_questions([_q(0, labels=("A", "A", "E"))])
    assert any("duplicate" in p for p in problems)
    assert any("invalid option labels ['E']" in p for p in problems)
