"""Application layer - mutation pipeline, validation and error classification."""

from portfoliocms.application.attachments import AttachmentPolicy
from portfoliocms.application.errors import ClassifiedError, ErrorResponse, classify
from portfoliocms.application.mutations import MutationOrchestrator, MutationRequest

__all__ = [
    "AttachmentPolicy",
    "ClassifiedError",
    "ErrorResponse",
    "classify",
    "MutationOrchestrator",
    "MutationRequest",
]
