"""Attachment format policy for image uploads."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from portfoliocms.domain.entities.attachment import AttachmentInput
from portfoliocms.domain.errors import ValidationError

IMAGE_MEDIA_TYPES = frozenset(
    {
        "image/jpeg",
        "image/jpg",
        "image/png",
        "image/gif",
        "image/webp",
        "image/svg+xml",
        "image/bmp",
    }
)

IMAGE_EXTENSIONS = (".jpg", ".jpeg", ".png", ".gif", ".webp", ".svg", ".bmp")

MatchPolicy = Literal["any", "all"]


@dataclass(frozen=True)
class AttachmentPolicy:
    """Accepted image formats.

    With ``match="any"`` a declared media type OR a filename extension in the
    accepted set is enough; ``match="all"`` requires both.
    """

    media_types: frozenset[str] = IMAGE_MEDIA_TYPES
    extensions: tuple[str, ...] = IMAGE_EXTENSIONS
    match: MatchPolicy = "any"

    @property
    def accepted_formats(self) -> str:
        return ", ".join(ext.lstrip(".").upper() for ext in self.extensions)

    def media_type_matches(self, content_type: str | None) -> bool:
        if not content_type:
            return False
        # Drop parameters such as "; charset=binary"
        return content_type.split(";", 1)[0].strip().lower() in self.media_types

    def extension_matches(self, filename: str | None) -> bool:
        if not filename:
            return False
        return filename.strip().lower().endswith(self.extensions)

    def validate(self, attachment: AttachmentInput, label: str = "Attachment") -> None:
        """Raise ValidationError unless the attachment looks like an accepted image."""
        by_type = self.media_type_matches(attachment.content_type)
        by_name = self.extension_matches(attachment.filename)
        accepted = (by_type and by_name) if self.match == "all" else (by_type or by_name)
        if accepted:
            return

        raise ValidationError(
            f"{label} must be an image file. Accepted formats: {self.accepted_formats}. "
            f"Received: {attachment.content_type or 'unknown mimetype'}, "
            f"file: {attachment.filename or 'unknown filename'}"
        )
