"""Error taxonomy for the generation pipeline and user-facing message mapping."""
from dataclasses import dataclass, field
from datetime import datetime


class CramCraftError(Exception):
    """Base class for every classified pipeline failure."""

    kind = "unknown"
    retryable = False

    def __init__(self, message: str, file_name: str | None = None):
        super().__init__(message)
        self.message = message
        self.file_name = file_name


class ConfigurationError(CramCraftError):
    kind = "configuration"


class NetworkError(CramCraftError):
    kind = "network-error"
    retryable = True


class RequestTimeoutError(CramCraftError):
    kind = "api-timeout"
    retryable = True


class HTTPError(CramCraftError):
    kind = "http-error"

    def __init__(self, status: int, message: str | None = None, file_name: str | None = None):
        super().__init__(message or f"HTTP {status}", file_name=file_name)
        self.status = status
        self.retryable = is_retryable_status(status)
        if status == 429:
            self.kind = "api-rate-limit"
        elif status in (401, 403):
            self.kind = "api-auth"
        elif status == 408:
            self.kind = "api-timeout"


class EmptyResponseError(CramCraftError):
    kind = "api-invalid-response"


class ParseError(CramCraftError):
    kind = "api-invalid-response"


class StructureError(CramCraftError):
    kind = "api-invalid-response"

    def __init__(self, violations: list[str], label: str = "response"):
        self.violations = list(violations)
        super().__init__(f"Invalid {label} structure: " + "; ".join(self.violations))


class SummaryGenerationError(CramCraftError):
    """Parse or validation failure for one document, tagged with its file name."""

    kind = "api-invalid-response"

    def __init__(self, file_name: str, cause: CramCraftError):
        super().__init__(f"Failed to generate summary for '{file_name}': {cause.message}", file_name=file_name)
        self.cause = cause


class EmptyInputError(CramCraftError):
    kind = "empty-input"


class EmptyContentError(CramCraftError):
    kind = "empty-content"


class ExtractionError(CramCraftError):
    kind = "pdf-parsing"


class FileSizeError(CramCraftError):
    kind = "file-size"


class FileCountError(CramCraftError):
    kind = "file-count"


def is_retryable_status(status: int) -> bool:
    return status in (408, 429) or 500 <= status < 600


MESSAGES = {
    "configuration": "Configuration error. Please contact support.",
    "api-auth": "Configuration error. Please contact support.",
    "api-rate-limit": "Service is busy. Please wait a moment and try again.",
    "api-timeout": "Generation is taking longer than expected. Please try again.",
    "api-invalid-response": "Received invalid response. Please try again.",
    "http-error": "The generation service returned an error. Please try again later.",
    "network-error": "Connection lost. Your progress has been saved.",
    "empty-content": "No text could be extracted from your files. Please upload files with readable content.",
    "empty-input": "No documents were provided. Please add at least one file.",
}


def friendly_message(error: object) -> str:
    """Map an error to the text shown to the user."""
    if isinstance(error, CramCraftError):
        if error.kind in ("pdf-parsing", "file-size", "file-count"):
            return error.message
        if error.kind in MESSAGES:
            return MESSAGES[error.kind]
        return error.message
    if isinstance(error, str):
        return error
    if isinstance(error, Exception) and str(error):
        return str(error)
    return "An unknown error occurred"


@dataclass
class AppError:
    type: str
    message: str
    retryable: bool = False
    file_name: str | None = None
    timestamp: datetime = field(default_factory=datetime.now)


def to_app_error(error: Exception, file_name: str | None = None) -> AppError:
    if isinstance(error, CramCraftError):
        return AppError(
            type=error.kind,
            message=friendly_message(error),
            retryable=error.retryable,
            file_name=file_name or error.file_name,
        )
    return AppError(type="unknown", message=friendly_message(error), file_name=file_name)
