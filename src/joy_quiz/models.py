"""Data classes for the quiz domain model."""
from dataclasses import dataclass, field
from typing import Optional, Union


@dataclass
class QuizOption:
    label: str
    text: str


@dataclass
class ParsedQuestion:
    question_index: int
    term: str
    question: str
    options: list[QuizOption]
    correct_answer: str
    full_definition: str = ""

    @property
    def labels(self) -> list[str]:
        return [o.label for o in self.options]

    def is_correct(self, selected_option: str) -> bool:
        return selected_option.strip().upper() == self.correct_answer


@dataclass
class ParseResult:
    """Questions emitted by one parse plus the number of cards dropped."""
    questions: list[ParsedQuestion] = field(default_factory=list)
    skipped: int = 0


@dataclass
class UserAnswer:
    session_id: str
    question_index: int
    selected_option: str
    is_correct: bool
    id: str = ""
    created_at: Optional[str] = None


@dataclass
class FlaggedItem:
    session_id: str
    question_index: int
    is_flagged: bool = True
    id: str = ""
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


@dataclass
class QuizSession:
    id: str
    quiz_name: str
    total_questions: int
    current_index: int = 0
    correct_count: int = 0
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    answers: list[UserAnswer] = field(default_factory=list)
    flags: list[FlaggedItem] = field(default_factory=list)

    @property
    def flagged_indexes(self) -> set[int]:
        return {f.question_index for f in self.flags if f.is_flagged}

    @property
    def answered_indexes(self) -> set[int]:
        return {a.question_index for a in self.answers}


@dataclass(frozen=True)
class PersistedSession:
    """A session backed by a stored row."""
    session_id: str

    @property
    def id(self) -> str:
        return self.session_id

    @property
    def is_persisted(self) -> bool:
        return True


@dataclass(frozen=True)
class OfflineSession:
    """A locally generated session used when storage is unavailable."""
    local_id: str

    @property
    def id(self) -> str:
        return self.local_id

    @property
    def is_persisted(self) -> bool:
        return False


SessionRef = Union[PersistedSession, OfflineSession]


@dataclass
class InitializedSession:
    session: SessionRef
    total_questions: int

    @property
    def session_id(self) -> str:
        return self.session.id


@dataclass
class SessionSummary:
    session_id: str
    total_questions: int
    correct_count: int
    accuracy: int
    flagged_count: int
    answers: list[UserAnswer] = field(default_factory=list)
