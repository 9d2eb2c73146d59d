"""Normalize any pipeline failure into a stable caller-facing error."""

from __future__ import annotations

import re
from dataclasses import dataclass

from loguru import logger

from portfoliocms.domain.errors import (
    AppError,
    DocumentValidationError,
    DuplicateKeyError,
    ErrorCategory,
)

INTERNAL_ERROR_MESSAGE = "Internal Server Error"

# Store-level cast failures inside reference arrays, rewritten per field
REFERENCE_CAST_MESSAGES: dict[str, str] = {
    "technologies": "Invalid technology ID provided.",
}

_ARRAY_ELEMENT_PATH = re.compile(r"^(?P<field>[A-Za-z_]+)\.\d+$")


@dataclass(frozen=True)
class ErrorResponse:
    message: str
    status: int
    category: ErrorCategory

    @property
    def code(self) -> str:
        return "BAD_REQUEST" if 400 <= self.status < 500 else "INTERNAL_SERVER_ERROR"


class ClassifiedError(Exception):
    """The single error a failed mutation hands back to its caller."""

    def __init__(self, response: ErrorResponse):
        super().__init__(response.message)
        self.response = response

    @property
    def status(self) -> int:
        return self.response.status

    @property
    def category(self) -> ErrorCategory:
        return self.response.category


def _bad_reference_message(error: DocumentValidationError) -> str | None:
    for path, field_error in error.errors.items():
        match = _ARRAY_ELEMENT_PATH.match(path)
        if match is None or field_error.kind != "cast":
            continue
        message = REFERENCE_CAST_MESSAGES.get(match.group("field"))
        if message is not None:
            return message
    return None


def classify(error: BaseException) -> ErrorResponse:
    """Map a raised failure to (message, status, category)."""
    if isinstance(error, ClassifiedError):
        return error.response

    if isinstance(error, AppError):
        return ErrorResponse(error.message, error.status, error.category)

    if isinstance(error, DocumentValidationError):
        message = _bad_reference_message(error)
        if message is not None:
            return ErrorResponse(message, 400, ErrorCategory.VALIDATION)

    if isinstance(error, DuplicateKeyError):
        return ErrorResponse(
            f"A record with the same {error.field_name} already exists",
            409,
            ErrorCategory.CONFLICT,
        )

    logger.opt(exception=error).error(f"Unclassified failure: {type(error).__name__}")
    return ErrorResponse(INTERNAL_ERROR_MESSAGE, 500, ErrorCategory.INTERNAL)
