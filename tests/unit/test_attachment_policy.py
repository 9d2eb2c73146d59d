import io

import pytest

from portfoliocms.application.attachments import AttachmentPolicy
from portfoliocms.domain import AttachmentInput
from portfoliocms.domain.errors import ValidationError


def _attachment(filename: str | None, content_type: str | None) -> AttachmentInput:
    return AttachmentInput(stream=io.BytesIO(b""), filename=filename, content_type=content_type)


class TestAnyMatch:
    def test_accepts_image_media_type_and_extension(self) -> None:
        AttachmentPolicy().validate(_attachment("logo.png", "image/png"))

    def test_media_type_alone_is_enough(self) -> None:
        AttachmentPolicy().validate(_attachment("logo", "image/webp"))

    def test_extension_alone_is_enough(self) -> None:
        AttachmentPolicy().validate(_attachment("logo.SVG", "application/octet-stream"))

    def test_media_type_parameters_are_ignored(self) -> None:
        AttachmentPolicy().validate(_attachment(None, "Image/JPEG; charset=binary"))

    def test_rejects_non_image(self) -> None:
        with pytest.raises(ValidationError) as exc:
            AttachmentPolicy().validate(_attachment("notes.txt", "text/plain"), "Thumbnail")

        assert exc.value.message == (
            "Thumbnail must be an image file. Accepted formats: JPG, JPEG, PNG, GIF, WEBP, SVG, BMP. "
            "Received: text/plain, file: notes.txt"
        )

    def test_missing_metadata_fails_closed(self) -> None:
        with pytest.raises(ValidationError) as exc:
            AttachmentPolicy().validate(_attachment(None, None))

        assert "Received: unknown mimetype, file: unknown filename" in exc.value.message


class TestAllMatch:
    def test_requires_both_signals(self) -> None:
        policy = AttachmentPolicy(match="all")

        policy.validate(_attachment("logo.gif", "image/gif"))
        with pytest.raises(ValidationError):
            policy.validate(_attachment("logo", "image/gif"))
        with pytest.raises(ValidationError):
            policy.validate(_attachment("logo.gif", "text/plain"))
