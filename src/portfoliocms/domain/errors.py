"""Error taxonomy shared by the mutation pipeline and its collaborators."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class ErrorCategory(str, Enum):
    """Stable error classes surfaced to callers."""

    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    UPSTREAM_TRANSIENT = "upstream_transient"
    INTERNAL = "internal"


class AppError(Exception):
    """Business failure whose message is safe to show to the caller."""

    category: ErrorCategory = ErrorCategory.INTERNAL
    status: int = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(AppError):
    """Malformed or missing input, rejected attachment, bad reference id."""

    category = ErrorCategory.VALIDATION
    status = 400


class NotFoundError(AppError):
    """Target record id does not exist."""

    category = ErrorCategory.NOT_FOUND
    status = 404


class ConflictError(AppError):
    """Uniqueness violation on create."""

    category = ErrorCategory.CONFLICT
    status = 409


class UpstreamTransientError(AppError):
    """Blob store unreachable or timed out; the caller may retry."""

    category = ErrorCategory.UPSTREAM_TRANSIENT
    status = 503


# ============================================================================
# Blob store failures
# ============================================================================


class BlobStoreError(Exception):
    """Base exception for blob store failures."""


class BlobUploadError(BlobStoreError):
    """Upload failed for a reason that is neither transient nor a bad format."""


class BlobStreamError(BlobStoreError):
    """The attachment stream could not be read."""


class BlobDeleteError(BlobStoreError):
    """An uploaded object could not be deleted."""


# ============================================================================
# Document store failures
# ============================================================================


class DocumentStoreError(Exception):
    """Base exception for document store failures."""


@dataclass(frozen=True)
class FieldError:
    """A single field violation reported by the document store."""

    path: str
    kind: str  # "required" | "cast"
    reason: str = ""


class DocumentValidationError(DocumentStoreError):
    """Store-level field validation failed.

    ``errors`` is keyed by field path; array elements use ``<field>.<index>``.
    """

    def __init__(self, collection: str, errors: dict[str, FieldError]):
        super().__init__(f"{collection} validation failed: {', '.join(sorted(errors))}")
        self.collection = collection
        self.errors = errors


class DuplicateKeyError(DocumentStoreError):
    """A unique field already holds the same value."""

    def __init__(self, collection: str, field_name: str):
        super().__init__(f"Duplicate value for {collection}.{field_name}")
        self.collection = collection
        self.field_name = field_name
