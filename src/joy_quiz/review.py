"""Post-quiz review data and question structure checks."""
from joy_quiz.models import ParsedQuestion, QuizSession

VALID_LABELS = ("A", "B", "C", "D")


def get_accuracy_label(accuracy: float) -> str:
    if accuracy >= 80:
        return "Excellent"
    elif accuracy >= 60:
        return "Good"
    return "Keep practicing"


def get_accuracy_color(accuracy: float) -> str:
    if accuracy >= 80:
        return "green"
    elif accuracy >= 60:
        return "yellow"
    return "red"


def build_review(questions: list[ParsedQuestion], session: QuizSession | None) -> list[dict]:
    """One row per question, joined with the session's answer and flag (if any)."""
    answers = {a.question_index: a for a in session.answers} if session else {}
    flagged = session.flagged_indexes if session else set()
    rows = []
    for q in questions:
        answer = answers.get(q.question_index)
        rows.append({
            "question_index": q.question_index,
            "term": q.term,
            "question": q.question,
            "correct_answer": q.correct_answer,
            "selected_option": answer.selected_option if answer else None,
            "is_correct": answer.is_correct if answer else None,
            "is_flagged": q.question_index in flagged,
        })
    return rows


def validate_questions(questions: list[ParsedQuestion]) -> list[str]:
    """Describe structural problems in a parsed quiz. Empty list means valid."""
    problems = []
    for expected, q in enumerate(questions):
        where = f"Question {q.question_index}"
        if q.question_index != expected:
            problems.append(f"{where}: expected index {expected}")
        if not q.question.strip():
            problems.append(f"{where}: empty question text")
        if not q.options:
            problems.append(f"{where}: no options")
            continue
        labels = q.labels
        if len(set(labels)) != len(labels):
            problems.append(f"{where}: duplicate option labels {labels}")
        bad = [label for label in labels if label not in VALID_LABELS]
        if bad:
            problems.append(f"{where}: invalid option labels {bad}")
        if q.correct_answer not in labels:
            problems.append(f"{where}: correct answer {q.correct_answer} is not an option")
    return problems
