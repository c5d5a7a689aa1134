"""Prompt construction for document summaries and multi-document quizzes."""
from cramcraft.config import QUIZ_CONSTRAINTS, SUMMARY_CONSTRAINTS
from cramcraft.models import ExtractedText

SUMMARY_PROMPT = """You are creating a revision summary for a student. Based on the following extracted text from study materials, generate:

1. KEY CONCEPTS ({min_concepts}-{max_concepts} bullet points of main ideas)
2. IMPORTANT DEFINITIONS (at least {min_definitions} key terms and explanations)
3. QUICK SUMMARY ({min_paragraphs}-{max_paragraphs} paragraphs in simple, clear language, separated by blank lines)
4. MEMORY AIDS (mnemonics or recall tips if applicable, can be an empty array if none are appropriate)

Keep it concise, student-friendly, and focused on exam preparation.

DOCUMENT NAME: {file_name}

EXTRACTED TEXT:
{text}

Format your response as JSON:
{{
  "title": "auto-detected topic from the content",
  "keyConcepts": ["concept 1", "concept 2", "concept 3", "concept 4", "concept 5"],
  "definitions": [{{"term": "term1", "definition": "definition1"}}],
  "summary": "First paragraph...\\n\\nSecond paragraph...",
  "memoryAids": ["tip 1", "tip 2"]
}}

IMPORTANT: Return ONLY the JSON object, no additional text before or after."""

QUIZ_PROMPT = """You are creating a quiz to test student readiness. Based on the following study materials, generate {count} multiple-choice questions.

Requirements:
- Mix difficulty: {easy} easy, {medium} medium, {hard} hard questions
- Each question has exactly {options} options (A, B, C, D) with only one correct answer
- Format options as: "A) option text", "B) option text", etc.
- Include an explanation for why the correct answer is correct
- Tag each question with the topic it tests
- Test understanding, not just memorization
- Cover different aspects of the material
- Number questions starting from 1

STUDY MATERIALS:
{materials}

Format your response as JSON:
{{
  "questions": [
    {{
      "id": 1,
      "question": "What is...",
      "options": ["A) option 1", "B) option 2", "C) option 3", "D) option 4"],
      "correctAnswer": "A",
      "explanation": "This is correct because...",
      "difficulty": "easy",
      "topic": "Topic name"
    }}
  ]
}}

IMPORTANT: Return ONLY the JSON object, no additional text before or after."""


def build_summary_prompt(text: str, file_name: str) -> str:
    return SUMMARY_PROMPT.format(
        min_concepts=SUMMARY_CONSTRAINTS["min_key_concepts"],
        max_concepts=SUMMARY_CONSTRAINTS["max_key_concepts"],
        min_definitions=SUMMARY_CONSTRAINTS["min_definitions"],
        min_paragraphs=SUMMARY_CONSTRAINTS["min_paragraphs"],
        max_paragraphs=SUMMARY_CONSTRAINTS["max_paragraphs"],
        file_name=file_name,
        text=text,
    )


def difficulty_targets(count: int = QUIZ_CONSTRAINTS["target_questions"]) -> dict[str, int]:
    """Per-difficulty question counts, each ratio applied to ``count`` and rounded half up."""
    ratios = QUIZ_CONSTRAINTS["difficulty_distribution"]
    return {level: int(count * ratio + 0.5) for level, ratio in ratios.items()}


def combine_materials(texts: list[ExtractedText]) -> str:
    return "\n\n".join(f"=== {t.file_name} ===\n{t.content}" for t in texts)


def build_quiz_prompt(texts: list[ExtractedText]) -> str:
    count = QUIZ_CONSTRAINTS["target_questions"]
    targets = difficulty_targets(count)
    return QUIZ_PROMPT.format(
        count=count,
        easy=targets["easy"],
        medium=targets["medium"],
        hard=targets["hard"],
        options=QUIZ_CONSTRAINTS["options_per_question"],
        materials=combine_materials(texts),
    )
