"""Plain-text extraction from study files and content checks on the result."""
import logging
import uuid
from pathlib import Path
from zipfile import BadZipFile

from cramcraft.config import FILE_LIMITS
from cramcraft.errors import ExtractionError, FileCountError, FileSizeError
from cramcraft.models import ExtractedText

logger = logging.getLogger(__name__)

TEXT_SUFFIXES = (".txt", ".md")
SUPPORTED_SUFFIXES = TEXT_SUFFIXES + (".pdf", ".docx", ".html", ".htm")


def count_words(text: str) -> int:
    return len(text.split())


def read_file_content(file_path: str) -> tuple[str, str]:
    """Return ``(content, extraction_method)`` for a supported file."""
    path = Path(file_path)
    suffix = path.suffix.lower()

    if suffix in TEXT_SUFFIXES:
        try:
            return path.read_text(encoding="utf-8", errors="replace"), "direct"
        except OSError as exc:
            raise ExtractionError(
                f"Could not read text from '{path.name}'. The file may be corrupted.",
                file_name=path.name,
            ) from exc
    elif suffix == ".pdf":
        from PyPDF2 import PdfReader
        from PyPDF2.errors import PdfReadError
        try:
            reader = PdfReader(file_path)
            pages = [page.extract_text() or "" for page in reader.pages]
        except (PdfReadError, OSError, ValueError) as exc:
            raise ExtractionError(
                f"Could not extract text from '{path.name}'. The file may be corrupted or password-protected.",
                file_name=path.name,
            ) from exc
        return "\n\n".join(pages), "pdf-parser"
    elif suffix == ".docx":
        from docx import Document
        from docx.opc.exceptions import PackageNotFoundError
        try:
            doc = Document(file_path)
        except (PackageNotFoundError, BadZipFile, KeyError, OSError) as exc:
            raise ExtractionError(
                f"Could not extract text from '{path.name}'. The file may be corrupted.",
                file_name=path.name,
            ) from exc
        return "\n".join(p.text for p in doc.paragraphs), "direct"
    elif suffix in (".html", ".htm"):
        from bs4 import BeautifulSoup
        try:
            html = path.read_text(encoding="utf-8", errors="replace")
        except OSError as exc:
            raise ExtractionError(
                f"Could not read text from '{path.name}'. The file may be corrupted.",
                file_name=path.name,
            ) from exc
        return BeautifulSoup(html, "html.parser").get_text(), "direct"
    raise ExtractionError(
        f"File '{path.name}' is not supported. Please upload PDF, Word, HTML or text files.",
        file_name=path.name,
    )


def check_file_count(current_count: int, new_count: int) -> None:
    max_files = FILE_LIMITS["max_files"]
    if current_count + new_count > max_files:
        raise FileCountError(
            f"Maximum {max_files} files allowed. Please remove some files or start a new session."
        )


def check_file_size(file_path: str) -> None:
    path = Path(file_path)
    try:
        size = path.stat().st_size
    except OSError as exc:
        raise ExtractionError(f"Could not read '{path.name}'.", file_name=path.name) from exc
    if size > FILE_LIMITS["max_file_size"]:
        raise FileSizeError(
            f"File '{path.name}' is too large ({size / (1024 * 1024):.2f}MB). "
            "Please upload files smaller than 50MB.",
            file_name=path.name,
        )


def extract_file(file_path: str, file_id: str | None = None) -> ExtractedText:
    check_file_size(file_path)
    content, method = read_file_content(file_path)
    text = ExtractedText(
        file_id=file_id or uuid.uuid4().hex,
        file_name=Path(file_path).name,
        content=content,
        word_count=count_words(content),
        extraction_method=method,
    )
    logger.info("Extracted %d words from %s (%s)", text.word_count, text.file_name, method)
    return text


def is_empty_content(content: str) -> bool:
    return not content.strip()


def all_texts_empty(texts: list[ExtractedText]) -> bool:
    return all(is_empty_content(t.content) for t in texts)


def non_empty_texts(texts: list[ExtractedText]) -> list[ExtractedText]:
    return [t for t in texts if not is_empty_content(t.content)]


def content_stats(texts: list[ExtractedText]) -> dict:
    non_empty = len(non_empty_texts(texts))
    return {
        "total": len(texts),
        "empty": len(texts) - non_empty,
        "non_empty": non_empty,
        "total_words": sum(t.word_count for t in texts),
    }
