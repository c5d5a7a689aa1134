# tests/test_parser.py
import json

import pytest

from cramcraft.errors import ParseError, StructureError
from cramcraft.parser import (
    detect_subject, difficulty_percentages, difficulty_violations, parse,
    split_paragraphs, validate_quiz, validate_summary,
)


# --- parse ---

def test_parse_plain_json():
    assert parse('{"a": 1}') == {"a": 1}


def test_parse_json_surrounded_by_prose():
    text = 'Sure! Here is your summary:\n```json\n{"title": "X", "nested": {"b": [1, 2]}}\n```\nEnjoy.'
    assert parse(text) == {"title": "X", "nested": {"b": [1, 2]}}


def test_parse_returns_first_object_only():
    assert parse('{"first": true} and then {"second": true}') == {"first": True}


def test_parse_skips_malformed_leading_braces():
    assert parse('Use {placeholders} like this: {"ok": 1}') == {"ok": 1}


def test_parse_without_braces():
    with pytest.raises(ParseError):
        parse("I could not produce a summary.")


def test_parse_invalid_json():
    with pytest.raises(ParseError):
        parse('{"title": "unterminated}')


# --- summaries ---

def test_validate_summary_valid(summary_payload):
    summary = validate_summary(summary_payload, summary_id="file-1")
    assert summary.id == "file-1"
    assert summary.title == "Introduction to Cell Biology"
    assert len(summary.key_concepts) == 5
    assert summary.definitions[0].term == "Mitochondria"
    assert summary.memory_aids == ["Mighty mitochondria make energy"]
    assert summary.subject is None


def test_validate_summary_allows_empty_memory_aids(summary_payload):
    summary_payload["memoryAids"] = []
    assert validate_summary(summary_payload).memory_aids == []


def test_validate_summary_collects_all_violations(summary_payload):
    summary_payload["keyConcepts"] = ["only one"]
    summary_payload["definitions"] = []
    summary_payload["summary"] = "Just a single paragraph."
    summary_payload["memoryAids"] = "not a list"
    with pytest.raises(StructureError) as exc_info:
        validate_summary(summary_payload)
    violations = exc_info.value.violations
    assert len(violations) == 4
    assert any(v.startswith("keyConcepts") and "5-10" in v for v in violations)
    assert any(v.startswith("definitions") for v in violations)
    assert any(v.startswith("summary") and "paragraphs" in v for v in violations)
    assert any(v.startswith("memoryAids") for v in violations)


def test_validate_summary_rejects_too_many_concepts(summary_payload):
    summary_payload["keyConcepts"] = [f"c{i}" for i in range(11)]
    with pytest.raises(StructureError):
        validate_summary(summary_payload)


def test_validate_summary_rejects_blank_definition(summary_payload):
    summary_payload["definitions"] = [{"term": "ATP", "definition": "  "}]
    with pytest.raises(StructureError) as exc_info:
        validate_summary(summary_payload)
    assert exc_info.value.violations[0].startswith("definitions.0.definition")


def test_validate_summary_missing_fields():
    with pytest.raises(StructureError) as exc_info:
        validate_summary({"title": "Only a title"})
    assert len(exc_info.value.violations) == 4


def test_validate_summary_wrong_types(summary_payload):
    summary_payload["title"] = 42
    with pytest.raises(StructureError):
        validate_summary(summary_payload)


def test_split_paragraphs():
    assert split_paragraphs("One.\n\nTwo.\n   \nThree.") == ["One.", "Two.", "Three."]
    assert split_paragraphs("One line\nstill one") == ["One line\nstill one"]


# --- quizzes ---

def test_validate_quiz_valid(quiz_payload):
    quiz = validate_quiz(quiz_payload, quiz_id="quiz_1")
    assert quiz.id == "quiz_1"
    assert len(quiz.questions) == 12
    q = quiz.questions[0]
    assert q.options == ["A) one", "B) two", "C) three", "D) four"]
    assert q.correct_answer == "A"
    assert q.topic == "Cells"


def test_validate_quiz_assigns_id_when_missing(quiz_payload):
    assert validate_quiz(quiz_payload).id


def test_validate_quiz_normalises_letters_and_difficulty(quiz_payload):
    quiz_payload["questions"][0]["correctAnswer"] = " b "
    quiz_payload["questions"][0]["difficulty"] = "Easy"
    quiz = validate_quiz(quiz_payload)
    assert quiz.questions[0].correct_answer == "B"
    assert quiz.questions[0].difficulty == "easy"


def test_validate_quiz_blank_topic_becomes_none(quiz_payload):
    quiz_payload["questions"][0]["topic"] = "  "
    assert validate_quiz(quiz_payload).questions[0].topic is None


def test_validate_quiz_collects_question_violations(quiz_payload):
    bad = quiz_payload["questions"]
    bad[0]["options"] = ["A) one", "B) two", "C) three"]
    bad[1]["correctAnswer"] = "E"
    bad[2]["explanation"] = ""
    bad[3]["difficulty"] = "impossible"
    with pytest.raises(StructureError) as exc_info:
        validate_quiz(quiz_payload)
    violations = exc_info.value.violations
    assert any(v.startswith("questions.0.options") for v in violations)
    assert any(v.startswith("questions.1.correctAnswer") for v in violations)
    assert any(v.startswith("questions.2.explanation") for v in violations)
    assert any(v.startswith("questions.3.difficulty") for v in violations)


def test_validate_quiz_reports_count_alongside_question_errors(question_factory):
    raw = {"questions": [question_factory(1, correct="Z"), question_factory(2)]}
    with pytest.raises(StructureError) as exc_info:
        validate_quiz(raw)
    violations = exc_info.value.violations
    assert any("at least 10" in v for v in violations)
    assert any(v.startswith("questions.0.correctAnswer") for v in violations)


def test_validate_quiz_rejects_too_many_questions(question_factory):
    difficulties = ["easy"] * 7 + ["medium"] * 6 + ["hard"] * 3
    raw = {"questions": [question_factory(i, d) for i, d in enumerate(difficulties, 1)]}
    with pytest.raises(StructureError) as exc_info:
        validate_quiz(raw)
    assert "at most 15" in exc_info.value.violations[0]


def test_validate_quiz_rejects_skewed_difficulty(question_factory):
    raw = {"questions": [question_factory(i, "easy") for i in range(1, 11)]}
    with pytest.raises(StructureError) as exc_info:
        validate_quiz(raw)
    assert len(exc_info.value.violations) == 3


def test_validate_quiz_requires_questions_list():
    with pytest.raises(StructureError):
        validate_quiz({"items": []})


def test_validate_quiz_from_parsed_reply(quiz_payload):
    reply = "Here is the quiz:\n" + json.dumps(quiz_payload)
    assert len(validate_quiz(parse(reply)).questions) == 12


def test_difficulty_percentages():
    assert difficulty_percentages(["easy", "easy", "medium", "hard"]) == {
        "easy": 50.0, "medium": 25.0, "hard": 25.0,
    }


def test_difficulty_violations_within_tolerance():
    # 12 questions: 41.7 / 41.7 / 16.7
    assert difficulty_violations(["easy"] * 5 + ["medium"] * 5 + ["hard"] * 2) == []
    # 10 questions: 50 / 30 / 20 sits exactly on the band edge
    assert difficulty_violations(["easy"] * 5 + ["medium"] * 3 + ["hard"] * 2) == []


def test_difficulty_violations_skipped_for_small_sets():
    assert difficulty_violations(["hard"] * 5) == []


# --- subjects ---

def test_detect_subject_matches_keywords():
    assert detect_subject("Intro to Calculus") == "Mathematics"
    assert detect_subject("ORGANIC CHEMISTRY basics") == "Science"
    assert detect_subject("The French Revolution") == "History"
    assert detect_subject("Shakespeare's Sonnets") == "Literature"
    assert detect_subject("Sorting Algorithms") == "Computer"
    assert detect_subject("Spanish Grammar Review") == "Language"


def test_detect_subject_default():
    assert detect_subject("Cooking with herbs") == "General"


def test_detect_subject_first_category_wins():
    assert detect_subject("Statistics for Computer Science") == "Mathematics"


def test_detect_subject_matches_inside_compound_words():
    assert detect_subject("Introduction to Microbiology") == "Science"
    assert detect_subject("Biochemistry Basics") == "Science"
    assert detect_subject("Neuroscience 101") == "Science"
    assert detect_subject("Astrophysics") == "Science"
    assert detect_subject("Object-Oriented Programming") == "Computer"


def test_detect_subject_short_keywords_need_word_start():
    assert detect_subject("Software Engineering") == "Computer"
    assert detect_subject("The Aftermath of Empire") == "General"
    assert detect_subject("World War II") == "History"
    assert detect_subject("Mathematical Proofs") == "Mathematics"
