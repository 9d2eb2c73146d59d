"""Domain models and entities."""

from portfoliocms.domain.entities.attachment import (
    AttachmentInput,
    CompensationIntent,
    UploadResult,
    folder_from_url,
    public_id_from_url,
)
from portfoliocms.domain.models import (
    Certificate,
    CertificateCategory,
    EntityKind,
    Experience,
    MutationKind,
    Priority,
    Project,
    Skill,
    Technology,
)

__all__ = [
    "AttachmentInput",
    "CompensationIntent",
    "UploadResult",
    "folder_from_url",
    "public_id_from_url",
    "EntityKind",
    "MutationKind",
    "CertificateCategory",
    "Priority",
    "Project",
    "Technology",
    "Skill",
    "Experience",
    "Certificate",
]
