"""Quiz scoring, readiness assessment and weak area identification."""
from cramcraft.config import READINESS_BANDS
from cramcraft.models import Question, QuestionBreakdown, Quiz, QuizResults, Readiness, UserAnswers

NO_ANSWER = "No answer"


def _answer_text(question: Question, answer: str | None) -> str:
    if not answer:
        return NO_ANSWER
    prefix = f"{answer})"
    return next((opt for opt in question.options if opt.startswith(prefix)), answer)


def build_breakdown(quiz: Quiz, user_answers: UserAnswers) -> list[QuestionBreakdown]:
    breakdown = []
    for q in quiz.questions:
        answer = user_answers.answers.get(q.id)
        breakdown.append(QuestionBreakdown(
            question=q,
            user_answer=_answer_text(q, answer),
            is_correct=answer == q.correct_answer,
        ))
    return breakdown


def determine_readiness_level(percentage: float) -> Readiness:
    for band in READINESS_BANDS:
        if percentage >= band["min"]:
            return Readiness(level=band["level"], message=band["message"], color=band["color"])
    # NaN compares false against every band
    band = READINESS_BANDS[-1]
    return Readiness(level=band["level"], message=band["message"], color=band["color"])


def identify_weak_areas(breakdown: list[QuestionBreakdown]) -> list[str]:
    """Topics of incorrectly answered questions, first occurrence order."""
    topics = []
    for item in breakdown:
        if item.is_correct:
            continue
        topic = item.question.topic
        if topic and topic.strip() and topic not in topics:
            topics.append(topic)
    return topics


def calculate_quiz_results(quiz: Quiz, user_answers: UserAnswers) -> QuizResults:
    breakdown = build_breakdown(quiz, user_answers)
    score = sum(1 for item in breakdown if item.is_correct)
    total = len(quiz.questions)
    percentage = (score / total) * 100 if total else 0.0
    readiness = determine_readiness_level(percentage)
    return QuizResults(
        quiz=quiz,
        user_answers=user_answers,
        score=score,
        total_questions=total,
        percentage=percentage,
        readiness_level=readiness.level,
        readiness_message=readiness.message,
        readiness_color=readiness.color,
        breakdown=breakdown,
        weak_areas=identify_weak_areas(breakdown),
    )
