# tests/test_scoring.py
from dataclasses import replace
from datetime import datetime

import pytest

from cramcraft.models import Question, QuestionBreakdown, Quiz, UserAnswers
from cramcraft.scoring import (
    NO_ANSWER, calculate_quiz_results, determine_readiness_level, identify_weak_areas,
)


def make_quiz(count=10, topics=None):
    topics = topics or [f"Topic {i}" for i in range(1, count + 1)]
    questions = [
        Question(
            id=i,
            question=f"Question {i}?",
            options=["A) alpha", "B) beta", "C) gamma", "D) delta"],
            correct_answer="A",
            explanation="Alpha is right.",
            difficulty="easy",
            topic=topics[i - 1],
        )
        for i in range(1, count + 1)
    ]
    return Quiz(id="quiz_test", questions=questions, generated_at=datetime(2026, 1, 1))


def answers_with(quiz, correct: int):
    answers = {}
    for i, q in enumerate(quiz.questions):
        answers[q.id] = "A" if i < correct else "B"
    now = datetime(2026, 1, 1, 12, 0)
    return UserAnswers(quiz_id=quiz.id, answers=answers, start_time=now, end_time=now, elapsed_seconds=0)


def test_four_of_ten_needs_work():
    quiz = make_quiz()
    results = calculate_quiz_results(quiz, answers_with(quiz, 4))
    assert results.score == 4
    assert results.total_questions == 10
    assert results.percentage == 40
    assert results.readiness_level == "needs-work"
    assert results.readiness_color == "red"


def test_nine_of_ten_excellent():
    quiz = make_quiz()
    results = calculate_quiz_results(quiz, answers_with(quiz, 9))
    assert results.percentage == 90
    assert results.readiness_level == "excellent"
    assert results.readiness_color == "green"


def test_seven_of_ten_good():
    quiz = make_quiz()
    results = calculate_quiz_results(quiz, answers_with(quiz, 7))
    assert results.percentage == 70
    assert results.readiness_level == "good"
    assert results.readiness_color == "yellow"
    assert results.readiness_message == "Good progress! Review weak areas below."


@pytest.mark.parametrize("count", [10, 11, 12, 13, 14, 15])
def test_percentage_is_exact_ratio(count):
    quiz = make_quiz(count)
    for correct in range(count + 1):
        results = calculate_quiz_results(quiz, answers_with(quiz, correct))
        assert results.score == correct
        assert results.percentage == (correct / count) * 100


def test_missing_answers_count_as_wrong():
    quiz = make_quiz()
    now = datetime(2026, 1, 1)
    user_answers = UserAnswers(quiz_id=quiz.id, answers={1: "A"}, start_time=now, end_time=now, elapsed_seconds=5)
    results = calculate_quiz_results(quiz, user_answers)
    assert results.score == 1
    assert results.breakdown[1].user_answer == NO_ANSWER
    assert results.breakdown[1].is_correct is False


def test_breakdown_shows_option_text():
    quiz = make_quiz()
    results = calculate_quiz_results(quiz, answers_with(quiz, 1))
    assert results.breakdown[0].user_answer == "A) alpha"
    assert results.breakdown[0].is_correct is True
    assert results.breakdown[1].user_answer == "B) beta"
    assert len(results.breakdown) == 10
    assert [b.question.id for b in results.breakdown] == list(range(1, 11))


def test_breakdown_falls_back_to_letter():
    quiz = make_quiz()
    q = quiz.questions[0]
    bare = Quiz(id="q", questions=[Question(
        id=q.id, question=q.question, options=["alpha", "beta", "gamma", "delta"],
        correct_answer="A", explanation="x", difficulty="easy",
    )], generated_at=quiz.generated_at)
    results = calculate_quiz_results(bare, answers_with(bare, 0))
    assert results.breakdown[0].user_answer == "B"


@pytest.mark.parametrize("percentage,level,color", [
    (100, "excellent", "green"),
    (90, "excellent", "green"),
    (89.99, "good", "yellow"),
    (70, "good", "yellow"),
    (69.99, "moderate", "orange"),
    (50, "moderate", "orange"),
    (49.99, "needs-work", "red"),
    (0, "needs-work", "red"),
])
def test_readiness_bands(percentage, level, color):
    readiness = determine_readiness_level(percentage)
    assert readiness.level == level
    assert readiness.color == color
    assert readiness.message


def test_readiness_is_total_over_range():
    levels = {determine_readiness_level(p / 10).level for p in range(0, 1001)}
    assert levels == {"excellent", "good", "moderate", "needs-work"}


def test_weak_areas_from_incorrect_answers():
    quiz = make_quiz(topics=["Cells", "Cells", "Energy", "DNA", "Energy", "Cells", "DNA", "Proteins", "Cells", "Cells"])
    results = calculate_quiz_results(quiz, answers_with(quiz, 2))
    # Questions 3..10 wrong: Energy, DNA, Energy, Cells, DNA, Proteins, Cells, Cells
    assert results.weak_areas == ["Energy", "DNA", "Cells", "Proteins"]


def test_weak_areas_ignore_correct_only_topics():
    quiz = make_quiz(topics=["Cells", "Energy"] + [None] * 8)
    results = calculate_quiz_results(quiz, answers_with(quiz, 1))
    assert "Cells" not in results.weak_areas
    assert results.weak_areas == ["Energy"]


def test_weak_areas_drop_blank_topics():
    q = make_quiz().questions[0]
    breakdown = [
        QuestionBreakdown(question=replace(q, topic="  "), user_answer="B", is_correct=False),
        QuestionBreakdown(question=replace(q, topic=None), user_answer="B", is_correct=False),
        QuestionBreakdown(question=replace(q, topic="Cells"), user_answer="A", is_correct=True),
    ]
    assert identify_weak_areas(breakdown) == []


def test_all_correct_has_no_weak_areas():
    quiz = make_quiz()
    results = calculate_quiz_results(quiz, answers_with(quiz, 10))
    assert results.weak_areas == []
    assert results.readiness_level == "excellent"
