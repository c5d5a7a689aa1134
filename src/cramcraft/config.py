"""Runtime settings and the structural constants shared across the pipeline."""
from datetime import timedelta
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_DB_PATH = str(Path.home() / ".cramcraft" / "cramcraft.db")

FILE_LIMITS = {
    "max_file_size": 50 * 1024 * 1024,  # bytes
    "max_files": 10,
}

SUMMARY_CONSTRAINTS = {
    "min_key_concepts": 5,
    "max_key_concepts": 10,
    "min_definitions": 1,
    "min_paragraphs": 2,
    "max_paragraphs": 3,
}

QUIZ_CONSTRAINTS = {
    "min_questions": 10,
    "max_questions": 15,
    "target_questions": 12,
    "options_per_question": 4,
    "difficulty_distribution": {"easy": 0.4, "medium": 0.4, "hard": 0.2},
    "distribution_tolerance": 10.0,  # percentage points
}

ANSWER_OPTIONS = ("A", "B", "C", "D")
DIFFICULTY_LEVELS = ("easy", "medium", "hard")

# Ordered best first; each band covers [min, next band's min).
READINESS_BANDS = [
    {"level": "excellent", "min": 90.0, "color": "green",
     "message": "Excellent! You're exam-ready!"},
    {"level": "good", "min": 70.0, "color": "yellow",
     "message": "Good progress! Review weak areas below."},
    {"level": "moderate", "min": 50.0, "color": "orange",
     "message": "Getting there. More revision needed."},
    {"level": "needs-work", "min": float("-inf"), "color": "red",
     "message": "Study more and retake the quiz."},
]

# Keyword mapping for subject tagging, checked in order
SUBJECT_KEYWORDS = {
    "Mathematics": ["math", "calculus", "algebra", "geometry", "statistics"],
    "Science": ["biology", "chemistry", "physics", "science"],
    "History": ["history", "historical", "war", "revolution"],
    "Literature": ["literature", "novel", "poetry", "shakespeare"],
    "Computer": ["programming", "computer", "software", "algorithm", "code"],
    "Language": ["language", "grammar", "vocabulary", "linguistics"],
}
DEFAULT_SUBJECT = "General"
# Short keywords that only count at the start of a word ("software", "aftermath")
WORD_START_KEYWORDS = frozenset({"war", "math", "code"})

WORDS_PER_MINUTE = 200
SNAPSHOT_MAX_AGE = timedelta(hours=24)


class Settings(BaseSettings):
    api_key: str = ""
    api_url: str = "https://api.anthropic.com/v1/messages"
    model: str = "claude-sonnet-4-20250514"
    api_version: str = "2023-06-01"
    max_retries: int = 3
    base_delay: float = 1.0
    max_jitter: float = 1.0
    request_timeout: float = 120.0
    document_delay: float = 3.0
    summary_max_tokens: int = 4096
    quiz_max_tokens: int = 8192
    temperature: float = 1.0
    db_path: str = DEFAULT_DB_PATH

    model_config = SettingsConfigDict(env_prefix="CRAMCRAFT_", env_file=".env", extra="ignore")


def get_settings(**overrides) -> Settings:
    """Build a fresh settings object; keyword overrides win over the environment."""
    return Settings(**overrides)
