"""Parser for flashcard exports that embed multiple-choice questions.

An export is a list of cards separated by two blank lines. After a header
card containing ``Term,Definition``, each card looks like::

    "Term","Question 3
    What converts light to energy?

    A) Mitochondria
    B) Chloroplast

    ✓ Correct: B"

Cards whose definition has no ``✓ Correct:`` marker are ordinary flashcards
and are skipped, as is any card that yields no options, no question text, or a
correct answer that names none of its options.
"""
import logging
import re
from pathlib import Path

from joy_quiz.config import get_quiz_dir
from joy_quiz.errors import QuizNotFoundError, QuizReadError
from joy_quiz.models import ParsedQuestion, ParseResult, QuizOption

logger = logging.getLogger(__name__)

HEADER_MARKER = "Term,Definition"
CORRECT_MARKER = "✓ Correct:"
QUIZ_SUFFIXES = (".csv", ".txt")

CARD_SEPARATOR = re.compile(r"\r?\n\r?\n\r?\n")
SECTION_SEPARATOR = re.compile(r"\r?\n\r?\n")
LINE_SEPARATOR = re.compile(r"\r?\n")
OPTION_LINE = re.compile(r"([A-D])\)\s*(.+)")
CORRECT_LINE = re.compile(r"✓\s*Correct:\s*([A-D])")
DEFAULT_ANSWER = "A"


def split_card(card: str) -> tuple[str, str] | None:
    """Split a card into (term, definition). Returns None if the card has no quoted term."""
    if not card.startswith('"'):
        return None
    end = card.find('",', 1)
    if end == -1:
        return None
    term = card[1:end]
    definition = card[end + 2:].strip()
    if definition.startswith('"'):
        definition = definition[1:]
    if definition.endswith('"'):
        definition = definition[:-1]
    return term, definition.strip()


def parse_options(block: str) -> list[QuizOption]:
    options = []
    seen = set()
    for line in LINE_SEPARATOR.split(block):
        match = OPTION_LINE.fullmatch(line)
        if not match or match.group(1) in seen:
            continue
        seen.add(match.group(1))
        options.append(QuizOption(label=match.group(1), text=match.group(2)))
    return options


def parse_definition(definition: str) -> tuple[str, list[QuizOption], str]:
    """Extract (problem statement, options, correct label) from a definition block."""
    sections = SECTION_SEPARATOR.split(definition)
    lines = LINE_SEPARATOR.split(sections[0])
    # Exports put a heading on the first line; a lone line is the question itself.
    statement = (lines[1] if len(lines) > 1 else lines[0]).strip()
    options = parse_options(sections[1]) if len(sections) > 1 else []
    answer_block = sections[2] if len(sections) > 2 else ""
    match = CORRECT_LINE.search(answer_block)
    correct = match.group(1) if match else DEFAULT_ANSWER
    return statement, options, correct


def parse_quiz_text(text: str) -> ParseResult:
    """Parse export text into questions, counting the cards that were dropped."""
    result = ParseResult()
    header_found = False
    for card in CARD_SEPARATOR.split(text):
        if not header_found:
            header_found = HEADER_MARKER in card
            continue
        if not card.strip():
            continue
        parts = split_card(card)
        if parts is None or CORRECT_MARKER not in parts[1]:
            result.skipped += 1
            continue
        term, definition = parts
        statement, options, correct = parse_definition(definition)
        if not options or not statement or correct not in {o.label for o in options}:
            result.skipped += 1
            continue
        result.questions.append(ParsedQuestion(
            question_index=len(result.questions),
            term=term,
            question=statement,
            options=options,
            correct_answer=correct,
            full_definition=definition,
        ))
    if not header_found:
        logger.warning("No '%s' header found; no questions parsed", HEADER_MARKER)
    return result


def resolve_quiz_path(quiz_name: str, quiz_dir: str | Path | None = None) -> Path:
    """Map a quiz name to a file inside the quiz directory."""
    if (not quiz_name or quiz_name in (".", "..")
            or any(c in quiz_name for c in ("/", "\\", "\x00"))):
        raise QuizNotFoundError(f"Invalid quiz name: {quiz_name!r}")
    base = Path(quiz_dir) if quiz_dir is not None else get_quiz_dir()
    return base / quiz_name


def read_quiz_file(quiz_name: str, quiz_dir: str | Path | None = None) -> str:
    """Raw export text. Line endings are kept as they are on disk."""
    path = resolve_quiz_path(quiz_name, quiz_dir)
    try:
        data = path.read_bytes()
    except FileNotFoundError as e:
        raise QuizNotFoundError(f"Quiz not found: {path}") from e
    except OSError as e:
        raise QuizReadError(f"Could not read quiz {path}: {e}") from e
    try:
        return data.decode("utf-8-sig")
    except UnicodeDecodeError as e:
        raise QuizReadError(f"Quiz {path} is not valid UTF-8: {e}") from e


def parse_quiz_with_diagnostics(quiz_name: str, quiz_dir: str | Path | None = None) -> ParseResult:
    result = parse_quiz_text(read_quiz_file(quiz_name, quiz_dir))
    logger.debug(
        "Parsed %s: %d questions, %d cards skipped",
        quiz_name, len(result.questions), result.skipped,
    )
    return result


def parse_quiz(quiz_name: str, quiz_dir: str | Path | None = None) -> list[ParsedQuestion]:
    """Read and parse a quiz export. Re-reads the file on every call."""
    return parse_quiz_with_diagnostics(quiz_name, quiz_dir).questions


def list_quizzes(quiz_dir: str | Path | None = None) -> list[str]:
    base = Path(quiz_dir) if quiz_dir is not None else get_quiz_dir()
    if not base.is_dir():
        return []
    return sorted(
        p.name for p in base.iterdir()
        if p.is_file() and p.suffix.lower() in QUIZ_SUFFIXES
    )
