"""JSON extraction from model replies and structural validation of summaries and quizzes."""
import json
import logging
import re
import uuid
from datetime import datetime
from typing import Annotated, Literal, Optional

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, ValidationError, field_validator

from cramcraft.config import (
    DEFAULT_SUBJECT, QUIZ_CONSTRAINTS, SUBJECT_KEYWORDS, SUMMARY_CONSTRAINTS,
    WORD_START_KEYWORDS,
)
from cramcraft.errors import ParseError, StructureError
from cramcraft.models import Definition, DocumentSummary, Question, Quiz

logger = logging.getLogger(__name__)

_decoder = json.JSONDecoder()


def parse(response_text: str) -> dict:
    """Return the first well-formed JSON object embedded in ``response_text``."""
    start = response_text.find("{")
    if start == -1:
        logger.debug("No JSON object in: %.400s", response_text)
        raise ParseError("No JSON object found in response")
    last_error = None
    while start != -1:
        try:
            obj, _ = _decoder.raw_decode(response_text, start)
        except json.JSONDecodeError as exc:
            last_error = exc
        else:
            if isinstance(obj, dict):
                return obj
        start = response_text.find("{", start + 1)
    logger.debug("Failed to extract JSON from: %.400s", response_text)
    raise ParseError(f"Response did not contain valid JSON: {last_error}")


def split_paragraphs(text: str) -> list[str]:
    return [p for p in re.split(r"\n\s*\n", text.strip()) if p.strip()]


def _not_blank(value: str) -> str:
    if not value.strip():
        raise ValueError("must not be empty")
    return value


NonBlank = Annotated[str, AfterValidator(_not_blank)]


# --- Wire contracts -------------------------------------------------------

class DefinitionPayload(BaseModel):
    term: NonBlank
    definition: NonBlank


class SummaryPayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    title: NonBlank
    key_concepts: list[str] = Field(alias="keyConcepts")
    definitions: list[DefinitionPayload]
    summary: str
    memory_aids: list[str] = Field(alias="memoryAids")

    @field_validator("key_concepts")
    @classmethod
    def _concept_count(cls, value: list[str]) -> list[str]:
        low = SUMMARY_CONSTRAINTS["min_key_concepts"]
        high = SUMMARY_CONSTRAINTS["max_key_concepts"]
        if not low <= len(value) <= high:
            raise ValueError(f"must have {low}-{high} items, got {len(value)}")
        return value

    @field_validator("definitions")
    @classmethod
    def _definition_count(cls, value: list) -> list:
        minimum = SUMMARY_CONSTRAINTS["min_definitions"]
        if len(value) < minimum:
            raise ValueError(f"must have at least {minimum} item")
        return value

    @field_validator("summary")
    @classmethod
    def _paragraph_count(cls, value: str) -> str:
        low = SUMMARY_CONSTRAINTS["min_paragraphs"]
        high = SUMMARY_CONSTRAINTS["max_paragraphs"]
        count = len(split_paragraphs(value))
        if not low <= count <= high:
            raise ValueError(f"must have {low}-{high} paragraphs, got {count}")
        return value


class QuestionPayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: int
    question: NonBlank
    options: list[str] = Field(
        min_length=QUIZ_CONSTRAINTS["options_per_question"],
        max_length=QUIZ_CONSTRAINTS["options_per_question"],
    )
    correct_answer: Literal["A", "B", "C", "D"] = Field(alias="correctAnswer")
    explanation: NonBlank
    difficulty: Literal["easy", "medium", "hard"]
    topic: Optional[str] = None

    @field_validator("correct_answer", mode="before")
    @classmethod
    def _normalise_letter(cls, value):
        return value.strip().upper() if isinstance(value, str) else value

    @field_validator("difficulty", mode="before")
    @classmethod
    def _normalise_difficulty(cls, value):
        return value.strip().lower() if isinstance(value, str) else value


class QuizPayload(BaseModel):
    questions: list[QuestionPayload]


def _describe(exc: ValidationError) -> list[str]:
    violations = []
    for err in exc.errors():
        where = ".".join(str(part) for part in err["loc"]) or "response"
        message = err["msg"].removeprefix("Value error, ")
        violations.append(f"{where}: {message}")
    return violations


# --- Validation -----------------------------------------------------------

def validate_summary(raw: dict, summary_id: str = "") -> DocumentSummary:
    try:
        payload = SummaryPayload.model_validate(raw)
    except ValidationError as exc:
        raise StructureError(_describe(exc), "summary") from exc
    return DocumentSummary(
        id=summary_id,
        title=payload.title.strip(),
        key_concepts=list(payload.key_concepts),
        definitions=[Definition(term=d.term, definition=d.definition) for d in payload.definitions],
        summary=payload.summary.strip(),
        memory_aids=list(payload.memory_aids),
    )


def question_count_violations(count: int) -> list[str]:
    low = QUIZ_CONSTRAINTS["min_questions"]
    high = QUIZ_CONSTRAINTS["max_questions"]
    if count < low:
        return [f"questions: quiz must have at least {low} questions, got {count}"]
    if count > high:
        return [f"questions: quiz must have at most {high} questions, got {count}"]
    return []


def difficulty_percentages(difficulties: list[str]) -> dict[str, float]:
    total = len(difficulties)
    levels = QUIZ_CONSTRAINTS["difficulty_distribution"]
    if total == 0:
        return {level: 0.0 for level in levels}
    return {level: difficulties.count(level) / total * 100 for level in levels}


def difficulty_violations(difficulties: list[str]) -> list[str]:
    """Check the easy/medium/hard mix against the target distribution.

    Only applies once the quiz reaches the minimum question count; smaller
    sets are too coarse for percentage bands to mean anything.
    """
    if len(difficulties) < QUIZ_CONSTRAINTS["min_questions"]:
        return []
    tolerance = QUIZ_CONSTRAINTS["distribution_tolerance"]
    actual = difficulty_percentages(difficulties)
    violations = []
    for level, ratio in QUIZ_CONSTRAINTS["difficulty_distribution"].items():
        target = ratio * 100
        if abs(actual[level] - target) > tolerance + 1e-9:
            violations.append(
                f"questions: {level} share is {actual[level]:.0f}%, expected {target:.0f}% (+/-{tolerance:.0f})"
            )
    return violations


def validate_quiz(raw: dict, quiz_id: str | None = None,
                  generated_at: datetime | None = None) -> Quiz:
    violations = []
    payload = None
    try:
        payload = QuizPayload.model_validate(raw)
    except ValidationError as exc:
        violations.extend(_describe(exc))

    questions = raw.get("questions") if isinstance(raw, dict) else None
    if isinstance(questions, list):
        violations.extend(question_count_violations(len(questions)))
    if payload is not None and not violations:
        violations.extend(difficulty_violations([q.difficulty for q in payload.questions]))
    if violations:
        raise StructureError(violations, "quiz")

    return Quiz(
        id=quiz_id or uuid.uuid4().hex,
        questions=[
            Question(
                id=q.id,
                question=q.question,
                options=list(q.options),
                correct_answer=q.correct_answer,
                explanation=q.explanation,
                difficulty=q.difficulty,
                topic=q.topic.strip() if q.topic and q.topic.strip() else None,
            )
            for q in payload.questions
        ],
        generated_at=generated_at or datetime.now(),
    )


def _keyword_in(keyword: str, title_lower: str) -> bool:
    if keyword in WORD_START_KEYWORDS:
        return re.search(rf"\b{re.escape(keyword)}", title_lower) is not None
    return keyword in title_lower


def detect_subject(title: str) -> str:
    """Tag a summary with a subject by keyword matching on its title."""
    title_lower = title.lower()
    for subject, keywords in SUBJECT_KEYWORDS.items():
        if any(_keyword_in(kw, title_lower) for kw in keywords):
            return subject
    return DEFAULT_SUBJECT
