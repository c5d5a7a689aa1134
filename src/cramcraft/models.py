"""Data classes for extracted text, study artifacts and quiz attempts."""
from dataclasses import dataclass, field, fields, is_dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class ExtractedText:
    file_id: str
    file_name: str
    content: str
    word_count: int
    extraction_method: str = "direct"  # pdf-parser | ocr | direct
    confidence: Optional[float] = None


@dataclass(frozen=True)
class Definition:
    term: str
    definition: str


@dataclass(frozen=True)
class DocumentSummary:
    id: str
    title: str
    key_concepts: list[str]
    definitions: list[Definition]
    summary: str
    memory_aids: list[str] = field(default_factory=list)
    subject: Optional[str] = None


@dataclass(frozen=True)
class RevisionPack:
    documents: list[DocumentSummary]
    total_reading_time: int  # minutes
    generated_at: datetime


@dataclass(frozen=True)
class Question:
    id: int
    question: str
    options: list[str]
    correct_answer: str
    explanation: str
    difficulty: str
    topic: Optional[str] = None


@dataclass(frozen=True)
class Quiz:
    id: str
    questions: list[Question]
    generated_at: datetime


@dataclass
class UserAnswers:
    quiz_id: str
    answers: dict[int, str]
    start_time: datetime
    end_time: datetime
    elapsed_seconds: float


@dataclass(frozen=True)
class QuestionBreakdown:
    question: Question
    user_answer: str
    is_correct: bool


@dataclass(frozen=True)
class Readiness:
    level: str
    message: str
    color: str


@dataclass(frozen=True)
class QuizResults:
    quiz: Quiz
    user_answers: UserAnswers
    score: int
    total_questions: int
    percentage: float
    readiness_level: str
    readiness_message: str
    readiness_color: str
    breakdown: list[QuestionBreakdown]
    weak_areas: list[str]


def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.title() for part in rest)


def to_plain(obj):
    """Convert model objects into JSON-ready data with camelCase keys."""
    if is_dataclass(obj) and not isinstance(obj, type):
        return {_camel(f.name): to_plain(getattr(obj, f.name)) for f in fields(obj)}
    if isinstance(obj, datetime):
        return obj.isoformat()
    if isinstance(obj, dict):
        return {str(k): to_plain(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [to_plain(item) for item in obj]
    return obj
