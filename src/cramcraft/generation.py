"""Sequences summary and quiz generation over a set of extracted documents."""
import asyncio
import logging
import math
import time
import uuid
from dataclasses import replace
from datetime import datetime

from cramcraft.client import RequestClient
from cramcraft.config import Settings, WORDS_PER_MINUTE
from cramcraft.errors import (
    CramCraftError, EmptyContentError, EmptyInputError, ParseError,
    StructureError, SummaryGenerationError,
)
from cramcraft.extraction import all_texts_empty, is_empty_content
from cramcraft.models import DocumentSummary, ExtractedText, Quiz, RevisionPack
from cramcraft.parser import detect_subject, parse, validate_quiz, validate_summary
from cramcraft.prompts import build_quiz_prompt, build_summary_prompt

logger = logging.getLogger(__name__)

PLACEHOLDER_CONCEPTS = ["Content extraction failed"]
PLACEHOLDER_SUMMARY = "Unable to generate summary for this document."
PLACEHOLDER_SUBJECT = "Unknown"


def placeholder_summary(text: ExtractedText) -> DocumentSummary:
    return DocumentSummary(
        id=text.file_id,
        title=text.file_name,
        key_concepts=list(PLACEHOLDER_CONCEPTS),
        definitions=[],
        summary=PLACEHOLDER_SUMMARY,
        memory_aids=[],
        subject=PLACEHOLDER_SUBJECT,
    )


def reading_time(texts: list[ExtractedText]) -> int:
    """Minutes needed to read every document at the average reading speed."""
    return math.ceil(sum(t.word_count for t in texts) / WORDS_PER_MINUTE)


def new_quiz_id() -> str:
    return f"quiz_{int(time.time() * 1000)}_{uuid.uuid4().hex[:7]}"


class GenerationOrchestrator:
    """Builds revision packs and quizzes from extracted text.

    Documents are summarised one at a time with ``settings.document_delay``
    seconds between remote calls, so at most one request is in flight.
    """

    def __init__(self, client: RequestClient, settings: Settings | None = None,
                 sleep=asyncio.sleep):
        self.client = client
        self.settings = settings or client.settings
        self._sleep = sleep

    async def generate_summary(self, text: ExtractedText) -> DocumentSummary:
        prompt = build_summary_prompt(text.content, text.file_name)
        response = await self.client.send(
            prompt,
            max_tokens=self.settings.summary_max_tokens,
            temperature=self.settings.temperature,
        )
        try:
            summary = validate_summary(parse(response), summary_id=text.file_id)
        except (ParseError, StructureError) as exc:
            raise SummaryGenerationError(text.file_name, exc) from exc
        return replace(summary, subject=detect_subject(summary.title))

    async def aggregate_revision_pack(self, texts: list[ExtractedText]) -> RevisionPack:
        if not texts:
            raise EmptyInputError("No extracted texts provided for revision pack generation")

        documents = []
        calls = 0
        for index, text in enumerate(texts, 1):
            if is_empty_content(text.content):
                logger.warning("Document %s has no text; using placeholder summary", text.file_name)
                documents.append(placeholder_summary(text))
                continue
            if calls:
                logger.info("Waiting %.1fs before next document", self.settings.document_delay)
                await self._sleep(self.settings.document_delay)
            calls += 1
            logger.info("Processing document %d/%d: %s", index, len(texts), text.file_name)
            try:
                documents.append(await self.generate_summary(text))
            except CramCraftError as exc:
                logger.warning("Failed to generate summary for %s: %s", text.file_name, exc.message)
                documents.append(placeholder_summary(text))

        return RevisionPack(
            documents=documents,
            total_reading_time=reading_time(texts),
            generated_at=datetime.now(),
        )

    async def generate_quiz(self, texts: list[ExtractedText]) -> Quiz:
        if not texts:
            raise EmptyInputError("No extracted texts provided for quiz generation")
        if all_texts_empty(texts):
            raise EmptyContentError("All extracted texts are empty. Cannot generate quiz.")

        logger.info("Generating quiz from %d documents", len(texts))
        response = await self.client.send(
            build_quiz_prompt(texts),
            max_tokens=self.settings.quiz_max_tokens,
            temperature=self.settings.temperature,
        )
        quiz = validate_quiz(parse(response), quiz_id=new_quiz_id(), generated_at=datetime.now())
        logger.info("Quiz %s generated with %d questions", quiz.id, len(quiz.questions))
        return quiz
