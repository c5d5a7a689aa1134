import pytest

from cramcraft.config import Settings


@pytest.fixture
def tmp_db(tmp_path):
    """Provide a temporary SQLite database path for tests."""
    db_path = str(tmp_path / "test_cramcraft.db")
    return db_path


@pytest.fixture
def settings(tmp_db):
    return Settings(api_key="test-key", db_path=tmp_db, _env_file=None)


@pytest.fixture
def summary_payload():
    return {
        "title": "Introduction to Cell Biology",
        "keyConcepts": [
            "Cells are the basic unit of life",
            "Organelles perform specialised functions",
            "The nucleus stores genetic material",
            "Mitochondria produce ATP",
            "Membranes control transport",
        ],
        "definitions": [
            {"term": "Mitochondria", "definition": "Organelles that generate most of the cell's ATP."},
        ],
        "summary": "Cells are the smallest living units.\n\nThey contain organelles with distinct jobs.",
        "memoryAids": ["Mighty mitochondria make energy"],
    }


def make_question(qid: int, difficulty: str = "easy", topic: str | None = "Cells",
                  correct: str = "A") -> dict:
    return {
        "id": qid,
        "question": f"Question {qid}?",
        "options": ["A) one", "B) two", "C) three", "D) four"],
        "correctAnswer": correct,
        "explanation": "Because the notes say so.",
        "difficulty": difficulty,
        "topic": topic,
    }


@pytest.fixture
def quiz_payload():
    # 12 questions: 5 easy, 5 medium, 2 hard
    difficulties = ["easy"] * 5 + ["medium"] * 5 + ["hard"] * 2
    return {"questions": [make_question(i, d) for i, d in enumerate(difficulties, 1)]}


@pytest.fixture
def question_factory():
    return make_question
