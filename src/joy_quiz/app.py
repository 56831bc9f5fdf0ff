"""Interactive CLI application."""
import logging
import sqlite3
import sys

from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.prompt import Prompt
from rich.table import Table

from joy_quiz.actions import QuizActions, calc_accuracy, default_actions
from joy_quiz.config import get_db_path, get_log_level
from joy_quiz.db import init_db
from joy_quiz.errors import JoyQuizError, SessionNotFoundError, StorageError
from joy_quiz.models import FlaggedItem, ParsedQuestion, QuizSession, SessionSummary, UserAnswer
from joy_quiz.parser import list_quizzes, parse_quiz_with_diagnostics
from joy_quiz.review import build_review, get_accuracy_color, get_accuracy_label, validate_questions

console = Console()
logger = logging.getLogger(__name__)

EXIT_WORDS = ("q", "menu")


class SessionExitRequested(Exception):
    """Raised when the user leaves a quiz before the last question."""
    pass


def session_prompt(prompt: str, choices: list[str] | None = None) -> str:
    """Prompt during a quiz; 'q' or 'menu' ends the quiz early."""
    if choices is not None:
        choices = choices + [w for w in EXIT_WORDS if w not in choices]
    answer = Prompt.ask(prompt, choices=choices).strip().lower()
    if answer in EXIT_WORDS:
        raise SessionExitRequested()
    return answer


def configure_logging() -> None:
    logging.basicConfig(
        level=get_log_level(),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True)],
    )


def show_welcome():
    console.print(Panel(
        "[bold]Joy Quiz[/bold]\n[dim]Multiple-choice practice from flashcard exports[/dim]",
        title="Welcome", border_style="blue",
    ))


def show_menu():
    console.print("\n[bold]Commands:[/bold]")
    commands = [
        ("quiz", "Take a quiz"),
        ("list", "List available quizzes"),
        ("validate", "Check a quiz file for problems"),
        ("quit", "Exit"),
    ]
    for cmd, desc in commands:
        console.print(f"  [cyan]{cmd:<14}[/cyan] {desc}")


def show_question(question: ParsedQuestion, total: int, is_flagged: bool) -> None:
    console.print(Panel(
        question.question,
        title=f"Q{question.question_index + 1}/{total} · {question.term}",
        border_style="yellow" if is_flagged else "cyan",
        subtitle="⚑ flagged" if is_flagged else None,
    ))
    for option in question.options:
        console.print(f"  [cyan]{option.label.lower()})[/cyan] {option.text}")


def _local_session(session_id: str, quiz_name: str, total: int, answers: dict, flagged: set,
                   questions: list[ParsedQuestion]) -> QuizSession:
    """Session state reconstructed from what the user did in this process."""
    by_index = {q.question_index: q for q in questions}
    return QuizSession(
        id=session_id,
        quiz_name=quiz_name,
        total_questions=total,
        current_index=max(answers, default=-1) + 1,
        correct_count=sum(1 for i, opt in answers.items() if by_index[i].is_correct(opt)),
        answers=[
            UserAnswer(session_id, i, opt, by_index[i].is_correct(opt))
            for i, opt in sorted(answers.items())
        ],
        flags=[FlaggedItem(session_id, i, True) for i in sorted(flagged)],
    )


def run_quiz_session(actions: QuizActions, quiz_name: str) -> SessionSummary | None:
    """Play a quiz from start to finish. Returns None if the user quits early."""
    questions = actions.get_quiz_questions(quiz_name)
    if not questions:
        console.print("[yellow]No questions found in this quiz.[/yellow]")
        return None
    started = actions.initialize_quiz_session(quiz_name, questions)
    if not started.session.is_persisted:
        console.print("[yellow]Storage unavailable, progress will not be saved.[/yellow]")

    stored = actions.get_quiz_session(started.session)
    index = stored.current_index if stored else 0
    flagged = stored.flagged_indexes if stored else set()
    answers = {a.question_index: a.selected_option for a in stored.answers} if stored else {}

    console.print(f"\n[bold]Quiz[/bold] — {len(questions)} questions  [dim](f = flag, q = quit)[/dim]\n")
    try:
        while index < len(questions):
            q = questions[index]
            show_question(q, len(questions), index in flagged)
            choice = session_prompt("\nYour answer", choices=[l.lower() for l in q.labels] + ["f"])
            if choice == "f":
                now_flagged = index not in flagged
                actions.toggle_flag(started.session, index, now_flagged)
                if now_flagged:
                    flagged.add(index)
                else:
                    flagged.discard(index)
                continue
            selected = choice.upper()
            is_correct = q.is_correct(selected)
            actions.save_answer(started.session, index, selected, is_correct)
            answers[index] = selected
            if is_correct:
                console.print("[green]Correct![/green]\n")
            else:
                console.print(f"[red]Incorrect.[/red] Answer: [green]{q.correct_answer}[/green]\n")
            index += 1
    except SessionExitRequested:
        console.print("[dim]Quiz stopped. Progress so far has been kept.[/dim]")
        return None

    local = _local_session(started.session_id, quiz_name, len(questions), answers, flagged, questions)
    try:
        summary = actions.complete_quiz_session(started.session)
    except (SessionNotFoundError, StorageError):
        summary = SessionSummary(
            session_id="offline",
            total_questions=len(questions),
            correct_count=local.correct_count,
            accuracy=calc_accuracy(local.correct_count, len(questions)),
            flagged_count=len(flagged),
            answers=local.answers,
        )
    record = actions.get_quiz_session(started.session) or local
    show_summary(summary, build_review(questions, record))
    return summary


def show_summary(summary: SessionSummary, review: list[dict]) -> None:
    color = get_accuracy_color(summary.accuracy)
    console.print(Panel(
        f"Accuracy: [bold {color}]{summary.accuracy}%[/bold {color}] [{color}]{get_accuracy_label(summary.accuracy)}[/{color}]\n"
        f"Score: [bold]{summary.correct_count}/{summary.total_questions}[/bold]  |  "
        f"Flagged: [bold]{summary.flagged_count}[/bold]",
        title="Quiz Complete", border_style=color,
    ))
    table = Table(title="Review")
    table.add_column("#", justify="right")
    table.add_column("Term", style="cyan")
    table.add_column("Yours")
    table.add_column("Correct")
    table.add_column("Flag")
    for row in review:
        if row["is_correct"] is None:
            yours = "[dim]—[/dim]"
        elif row["is_correct"]:
            yours = f"[green]{row['selected_option']}[/green]"
        else:
            yours = f"[red]{row['selected_option']}[/red]"
        table.add_row(
            str(row["question_index"] + 1), row["term"], yours,
            row["correct_answer"], "⚑" if row["is_flagged"] else "",
        )
    console.print(table)


def cmd_list(actions: QuizActions) -> list[str]:
    quizzes = list_quizzes(actions.quiz_dir)
    if not quizzes:
        console.print("[yellow]No quiz files found.[/yellow]")
    for name in quizzes:
        console.print(f"  [cyan]{name}[/cyan]")
    return quizzes


def choose_quiz(actions: QuizActions) -> str | None:
    quizzes = list_quizzes(actions.quiz_dir)
    if not quizzes:
        console.print("[yellow]No quiz files found.[/yellow]")
        return None
    if len(quizzes) == 1:
        return quizzes[0]
    for i, name in enumerate(quizzes, 1):
        console.print(f"  [cyan]{i}[/cyan]) {name}")
    pick = Prompt.ask("Select quiz", choices=[str(i) for i in range(1, len(quizzes) + 1)])
    return quizzes[int(pick) - 1]


def cmd_quiz(actions: QuizActions, quiz_name: str | None = None) -> SessionSummary | None:
    quiz_name = quiz_name or choose_quiz(actions)
    if quiz_name is None:
        return None
    return run_quiz_session(actions, quiz_name)


def cmd_validate(actions: QuizActions, quiz_name: str | None = None) -> bool:
    """Print parse diagnostics and structure problems. Returns True if the quiz is clean.

    A quiz with no usable questions is not clean.
    """
    quiz_name = quiz_name or choose_quiz(actions)
    if quiz_name is None:
        return False
    result = parse_quiz_with_diagnostics(quiz_name, actions.quiz_dir)
    problems = validate_questions(result.questions)
    if not result.questions:
        problems.append("no questions parsed")
    console.print(
        f"[bold]{quiz_name}[/bold]: {len(result.questions)} questions, "
        f"{result.skipped} cards skipped"
    )
    if not problems:
        console.print("[green]No problems found.[/green]")
        return True
    for problem in problems:
        console.print(f"  [red]{problem}[/red]")
    return False


def prepare_storage(db_path: str) -> None:
    try:
        init_db(db_path)
    except (OSError, sqlite3.Error) as e:
        logger.error("Could not initialize database at %s: %s", db_path, e)


def main(argv: list[str] | None = None) -> int:
    args = sys.argv[1:] if argv is None else argv
    configure_logging()
    prepare_storage(get_db_path())
    actions = default_actions()

    if args:
        try:
            if args[0] == "--validate":
                return 0 if cmd_validate(actions, args[1] if len(args) > 1 else None) else 1
            cmd_quiz(actions, args[0])
            return 0
        except JoyQuizError as e:
            console.print(f"[red]Error: {e}[/red]")
            return 1

    show_welcome()
    while True:
        show_menu()
        choice = Prompt.ask("\n[bold]>[/bold]", default="quiz").strip().lower()
        try:
            if choice == "quiz":
                cmd_quiz(actions)
            elif choice == "list":
                cmd_list(actions)
            elif choice == "validate":
                cmd_validate(actions)
            elif choice in ("quit", "exit", "q"):
                console.print("[dim]Bye![/dim]")
                return 0
            else:
                console.print("[red]Unknown command. Try again.[/red]")
        except KeyboardInterrupt:
            console.print("\n[dim]Use 'quit' to exit.[/dim]")
        except JoyQuizError as e:
            console.print(f"[red]Error: {e}[/red]")


if __name__ == "__main__":
    sys.exit(main())
